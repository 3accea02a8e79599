"""
Signer backed by an external command.

The hashed byte ranges are piped to the command's stdin; the DER token is
read from its stdout. Suitable for ``openssl cms -sign ...``,
``openssl ts ...`` wrappers, or an HSM client.
"""

from __future__ import annotations

import logging
import subprocess
from typing import TYPE_CHECKING

from ..constants import DEFAULT_SIGNER_TIMEOUT
from ..errors import ConfigError, SignerError

if TYPE_CHECKING:
    from collections.abc import Sequence
    from typing import BinaryIO

__all__ = ["CommandSigner"]

_logger = logging.getLogger(__name__)

# Characters of stderr carried into error messages
_STDERR_PREVIEW_LENGTH = 300


class CommandSigner:
    """Run *argv* once per signing pass and return its stdout.

    Args:
        argv: Command and arguments (no shell).
        estimate: Upper bound on the token size in bytes.
        timeout: Seconds before the command is killed.
    """

    def __init__(
        self,
        argv: Sequence[str],
        estimate: int,
        timeout: int = DEFAULT_SIGNER_TIMEOUT,
    ) -> None:
        if not argv:
            raise ConfigError("Signer command is empty.")
        if estimate <= 0:
            raise ConfigError(f"Signer estimate must be positive, got {estimate}")
        self.argv = list(argv)
        self.estimate = estimate
        self.timeout = timeout

    def estimate_signature_length(self) -> int:
        return self.estimate

    def sign(self, stream: BinaryIO) -> bytes:
        data = stream.read()
        _logger.debug("Running signer %s on %d bytes", self.argv[0], len(data))
        try:
            result = subprocess.run(
                self.argv,
                input=data,
                capture_output=True,
                timeout=self.timeout,
                check=False,
            )
        except FileNotFoundError as e:
            raise SignerError(f"Signer command not found: {self.argv[0]}") from e
        except subprocess.TimeoutExpired as e:
            raise SignerError(f"Signer command timed out after {self.timeout} seconds.") from e
        except OSError as e:
            raise SignerError(f"Cannot run signer command {self.argv[0]}: {e}") from e

        if result.returncode != 0:
            stderr = result.stderr.decode("utf-8", errors="replace").strip()
            raise SignerError(
                f"Signer command exited with status {result.returncode}: "
                f"{stderr[:_STDERR_PREVIEW_LENGTH]}"
            )
        if not result.stdout:
            raise SignerError("Signer command produced no output.")
        return result.stdout

    def __repr__(self) -> str:
        return f"CommandSigner({self.argv[0]!r}, estimate={self.estimate})"
