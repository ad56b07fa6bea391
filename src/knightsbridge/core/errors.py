"""Exception types raised by the rules engine."""

from __future__ import annotations

from knightsbridge.core.types import Square, square_name


class KnightsbridgeError(Exception):
    """Base class for all engine errors."""


class IllegalMove(KnightsbridgeError, ValueError):
    """A move request was rejected; nothing was applied.

    Always recoverable: the caller keeps its previous position/state pair
    and may re-prompt.
    """

    def __init__(
        self,
        reason: str,
        from_sq: Square | None = None,
        to_sq: Square | None = None,
        ply: int | None = None,
    ) -> None:
        self.reason = reason
        self.from_sq = from_sq
        self.to_sq = to_sq
        self.ply = ply
        super().__init__(self._format())

    def _format(self) -> str:
        text = self.reason
        if self.from_sq is not None and self.to_sq is not None:
            text = f"{square_name(self.from_sq)}{square_name(self.to_sq)}: {text}"
        if self.ply is not None:
            text = f"ply {self.ply}: {text}"
        return text
