"""
errors.py — Exception taxonomy for document normalization.

Every failure is terminal for the enclosing `normalize_presentation` call.
Errors carry the JSON-path-like location of the offending node (e.g.
``$.children[0].children[2]``) and its kind tag when known.
"""
from __future__ import annotations


class NormalizeError(ValueError):
    """Base class for all input-validation failures raised by the normalizer."""

    def __init__(self, message: str, *, path: str | None = None, kind: str | None = None) -> None:
        self.message = message
        self.path = path
        self.kind = kind
        super().__init__(self._format())

    def _format(self) -> str:
        where: list[str] = []
        if self.path:
            where.append(self.path)
        if self.kind:
            where.append(f"kind={self.kind!r}")
        if not where:
            return self.message
        return f"{self.message} (at {', '.join(where)})"


class InvalidColorError(NormalizeError):
    pass


class InvalidPositionError(NormalizeError):
    pass


class MissingStyleError(NormalizeError):
    """A positioned node has no `style` mapping."""


class InvalidTextChildError(NormalizeError):
    pass


class UnsupportedNodeError(NormalizeError):
    """A known node kind appears where it cannot be laid out (e.g. a line inside a flex box)."""


class UnsupportedMasterSlideObjectError(NormalizeError):
    pass


class UnknownNodeKindError(NormalizeError):
    pass


class InvalidLayoutError(NormalizeError):
    pass


class InvalidImageSourceError(NormalizeError):
    pass


class DuplicateMasterSlideError(NormalizeError):
    pass


__all__ = [
    "NormalizeError",
    "InvalidColorError",
    "InvalidPositionError",
    "MissingStyleError",
    "InvalidTextChildError",
    "UnsupportedNodeError",
    "UnsupportedMasterSlideObjectError",
    "UnknownNodeKindError",
    "InvalidLayoutError",
    "InvalidImageSourceError",
    "DuplicateMasterSlideError",
]
