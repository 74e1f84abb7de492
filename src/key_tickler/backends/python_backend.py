from concurrent.futures import ThreadPoolExecutor
from typing import Optional

from key_tickler.backends.base import DecryptBackend
from key_tickler.cipher import rc4
from key_tickler.errors import BackendError


class PythonBackend(DecryptBackend):
    """Single sequential pass per trial. Fastest option without a device."""

    name = "python"

    def decrypt(self, ciphertext: bytes, key: bytes) -> bytes:
        return rc4.crypt(ciphertext, key)


class ThreadedBackend(DecryptBackend):
    """
    Per-position decryption from scratch, spread over a thread pool in
    contiguous chunks of positions. Each position rebuilds its own schedule.
    """

    name = "threads"

    def __init__(self, max_workers: Optional[int] = None, chunk_size: int = 64) -> None:
        if chunk_size < 1:
            raise ValueError("chunk_size must be >= 1")
        self.chunk_size = chunk_size
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="rc4-position")

    def _decrypt_range(self, ciphertext: bytes, key: bytes, start: int, stop: int) -> bytes:
        return bytes(rc4.decrypt_position(ciphertext, key, p) for p in range(start, stop))

    def decrypt(self, ciphertext: bytes, key: bytes) -> bytes:
        n = len(ciphertext)
        starts = range(0, n, self.chunk_size)
        try:
            # map() submits eagerly; worker errors surface in the join below.
            chunks = self._executor.map(
                lambda start: self._decrypt_range(ciphertext, key, start, min(start + self.chunk_size, n)),
                starts,
            )
        except RuntimeError as e:
            # Raised by the executor after shutdown.
            raise BackendError(f"thread pool unavailable: {e}") from e
        return b"".join(chunks)

    def close(self) -> None:
        self._executor.shutdown(wait=True)
