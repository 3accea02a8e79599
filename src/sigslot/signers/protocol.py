"""
Signer protocol.

Defines the capability the signing orchestrator needs from whatever
produces the signature or timestamp token. The core depends on this
protocol, not on concrete implementations.
"""

from __future__ import annotations

from typing import BinaryIO, Protocol


class Signer(Protocol):
    """Protocol for detached signature and RFC 3161 timestamp producers.

    Implementations may sign locally, call a remote service, or shell out
    to a command. Their output must never exceed the length they estimate:
    the token is written into a fixed-size slot of an already-written file.
    """

    def estimate_signature_length(self) -> int:
        """
        Upper bound on the raw token length, in bytes (before hex encoding).

        Returns:
            Positive number of bytes the content slot must accommodate.
        """
        ...

    def sign(self, stream: BinaryIO) -> bytes:
        """
        Produce the raw signature or timestamp token over *stream*.

        Args:
            stream: Readable stream over the hashable byte ranges of the
                output file, in order. It excludes the content slot.

        Returns:
            DER-encoded CMS signature or RFC 3161 timestamp token.

        Raises:
            SignerError: If the signing operation fails. Other exception
                types are propagated to the caller unchanged.
        """
        ...
