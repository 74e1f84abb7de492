from abc import ABC, abstractmethod


class DecryptBackend(ABC):
    """
    Runs the cipher engine for one trial: decrypt every ciphertext position
    under a candidate key and hand back the whole buffer.
    Implementations raise BackendError when they cannot execute.
    """

    name: str = "abstract"

    @abstractmethod
    def decrypt(self, ciphertext: bytes, key: bytes) -> bytes:
        ...

    def close(self) -> None:
        """Release any device resources."""

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name}>"
