"""sigslot error types."""

from __future__ import annotations

__all__ = [
    "AlreadySignedError",
    "ConfigError",
    "PDFError",
    "PatchIOError",
    "SignerError",
    "SigslotError",
    "SlotSizeError",
]


class SigslotError(Exception):
    """Base error for sigslot operations."""


class AlreadySignedError(SigslotError):
    """The document already carries a form container (/AcroForm).

    Raised during preparation, before the object graph is touched.
    """


class PDFError(SigslotError):
    """PDF structure, layout, or byte-range error."""


class SlotSizeError(PDFError):
    """A patch does not have exactly the length of the slot it overwrites.

    Args:
        message: Human-readable error description.
        expected: Length of the reserved slot in bytes.
        actual: Length of the data that was about to be written.
    """

    def __init__(self, message: str, *, expected: int = 0, actual: int = 0) -> None:
        super().__init__(message)
        self.expected = expected
        self.actual = actual

    def __reduce__(self) -> tuple[type[SlotSizeError], tuple[str], dict[str, int]]:
        """Preserve slot lengths across pickle/unpickle."""
        return (type(self), (str(self),), {"expected": self.expected, "actual": self.actual})

    def __setstate__(self, state: dict[str, int] | None) -> None:
        if state is None:
            return
        self.expected = state.get("expected", 0)
        self.actual = state.get("actual", 0)


class PatchIOError(SigslotError, OSError):
    """Open/seek/read/write failure against the output file.

    The file may be left partially patched; there is no rollback.
    """


class SignerError(SigslotError):
    """The signer failed or returned a token incompatible with the slot."""


class ConfigError(SigslotError):
    """Configuration or argument validation error."""
