from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Found:
    """A candidate key whose decryption passed the plaintext oracle."""

    key: bytes
    plaintext: bytes
    elapsed: float
    trials: int


@dataclass(frozen=True, slots=True)
class Exhausted:
    """Every candidate up to the configured length was rejected."""

    elapsed: float
    trials: int


type SearchResult = Found | Exhausted
