import numpy as np

from key_tickler.backends.base import DecryptBackend
from key_tickler.cipher import rc4


class NumpyBackend(DecryptBackend):
    """
    Vectorized per-position decryption.

    Every position gets its own row in an (n, 256) table, so the schedules
    never share state. Advance step s is applied to every row whose position
    is greater than s, which leaves row p after exactly p steps.
    Positions are processed in chunks; the tables hold intp entries, so one
    chunk takes chunk_size * 256 * 8 bytes on a 64-bit build.
    """

    name = "numpy"

    def __init__(self, chunk_size: int = 4096) -> None:
        if chunk_size < 1:
            raise ValueError("chunk_size must be >= 1")
        self.chunk_size = chunk_size

    def decrypt(self, ciphertext: bytes, key: bytes) -> bytes:
        data = np.frombuffer(ciphertext, dtype=np.uint8)
        schedule = np.array(rc4.schedule_key(key), dtype=np.uint8)
        out = np.empty_like(data)
        for start in range(0, len(data), self.chunk_size):
            stop = min(start + self.chunk_size, len(data))
            out[start:stop] = data[start:stop] ^ self._keystream_chunk(schedule, start, stop)
        return out.tobytes()

    @staticmethod
    def _keystream_chunk(schedule: np.ndarray, start: int, stop: int) -> np.ndarray:
        positions = np.arange(start, stop)
        count = stop - start
        state = np.tile(schedule, (count, 1)).astype(np.intp)
        j = np.zeros(count, dtype=np.intp)

        for step in range(stop - 1):
            # Rows for positions <= step have finished advancing.
            first = max(step + 1 - start, 0)
            rows = np.arange(first, count)
            i = (step + 1) % rc4.STATE_SIZE
            s_i = state[rows, i]
            j[rows] = (j[rows] + s_i) % rc4.STATE_SIZE
            s_j = state[rows, j[rows]]
            state[rows, i] = s_j
            state[rows, j[rows]] = s_i

        rows = np.arange(count)
        i = positions % rc4.STATE_SIZE
        idx = (state[rows, i] + state[rows, j]) % rc4.STATE_SIZE
        return state[rows, idx].astype(np.uint8)
