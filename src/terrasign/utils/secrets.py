"""Zeroing wrapper for sensitive byte buffers (seeds, private keys).

Example:
    with SecretBytes(seed) as secret:
        master = derive_master(secret.reveal())
    # buffer is overwritten with zeros here
"""

import hmac
from typing import Union


class SecretBytes:
    """Owns a mutable copy of sensitive bytes and overwrites it on release.

    The buffer is wiped when leaving a ``with`` block, on ``wipe()`` and when
    the object is garbage collected. ``repr`` and ``str`` never show content.
    """

    __slots__ = ("_buffer", "_wiped")

    def __init__(self, data: Union[bytes, bytearray]):
        self._buffer = bytearray(data)
        self._wiped = False

    def reveal(self) -> bytes:
        """Return the secret content.

        Raises:
            ValueError: If the buffer was already wiped
        """
        if self._wiped:
            raise ValueError("Secret has been wiped")
        return bytes(self._buffer)

    def wipe(self) -> None:
        """Overwrite the buffer with zeros."""
        for i in range(len(self._buffer)):
            self._buffer[i] = 0
        self._wiped = True

    @property
    def wiped(self) -> bool:
        return self._wiped

    def __len__(self) -> int:
        return len(self._buffer)

    def __enter__(self) -> "SecretBytes":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.wipe()

    def __del__(self) -> None:
        if hasattr(self, "_buffer"):
            self.wipe()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SecretBytes):
            return NotImplemented
        return hmac.compare_digest(bytes(self._buffer), bytes(other._buffer))

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"SecretBytes(<redacted {len(self._buffer)} bytes>)"

    __str__ = __repr__
