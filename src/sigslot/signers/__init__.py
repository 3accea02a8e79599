"""Signer capability and bundled implementations."""

from .command import CommandSigner
from .protocol import Signer

__all__ = ["CommandSigner", "Signer"]
