"""Error types raised by the identifier and link codec."""

from __future__ import annotations


class CodecError(ValueError):
    """Base class for codec input errors."""


class InvalidCharacter(CodecError):
    """Raised when input contains a character outside the expected alphabet."""

    def __init__(self, character: str, alphabet: str = "base58") -> None:
        super().__init__(f"Invalid {alphabet} character: {character!r}")
        self.character = character
        self.alphabet = alphabet


class InvalidLength(CodecError):
    """Raised when fixed-size input has the wrong length."""

    def __init__(self, what: str, expected: int, actual: int) -> None:
        super().__init__(f"Invalid {what}: expected {expected}, got {actual}")
        self.expected = expected
        self.actual = actual


class InvalidInfoHash(CodecError):
    """Raised when an infohash is neither 20 raw bytes nor 40 hex characters."""
