from typing import Iterator, List, Literal, MutableSequence, Optional

from key_tickler.errors import InvalidInput

type EnumerationStrategy = Literal["odometer", "legacy"]

STRATEGIES = ("odometer", "legacy")


def validate_alphabet(alphabet: bytes) -> bytes:
    """Normalize the alphabet to bytes and check it is non-empty with distinct symbols."""
    if isinstance(alphabet, str):
        try:
            alphabet = alphabet.encode("latin-1")
        except UnicodeEncodeError as e:
            raise InvalidInput(f"alphabet symbols must fit in a single byte: {e}") from e
    alphabet = bytes(alphabet)
    if not alphabet:
        raise InvalidInput("alphabet must not be empty")
    if len(set(alphabet)) != len(alphabet):
        raise InvalidInput("alphabet symbols must be distinct")
    return alphabet


def next_permutation(seq: MutableSequence[int]) -> bool:
    """
    Rearrange `seq` in place into the next lexicographic permutation.
    Returns False (and leaves `seq` sorted ascending) once the last
    permutation has been passed.
    """
    i = len(seq) - 2
    while i >= 0 and seq[i] >= seq[i + 1]:
        i -= 1
    if i < 0:
        seq.reverse()
        return False

    j = len(seq) - 1
    while seq[j] <= seq[i]:
        j -= 1
    seq[i], seq[j] = seq[j], seq[i]
    seq[i + 1:] = reversed(seq[i + 1:])
    return True


class KeySpace:
    """
    Cursor over every key of one length, in counting order over alphabet
    indices (most significant position first).
    """

    def __init__(self, alphabet: bytes, key_length: int) -> None:
        if key_length < 1:
            raise InvalidInput(f"key length must be >= 1, got {key_length}")
        self.alphabet = validate_alphabet(alphabet)
        self.key_length = key_length
        self.reset()

    @property
    def size(self) -> int:
        return len(self.alphabet) ** self.key_length

    def reset(self) -> None:
        self._digits: Optional[List[int]] = [0] * self.key_length

    def has_next(self) -> bool:
        return self._digits is not None

    def next(self) -> bytes:
        if self._digits is None:
            raise StopIteration
        key = bytes(self.alphabet[d] for d in self._digits)

        # Increment the odometer from the last position.
        base = len(self.alphabet)
        for pos in reversed(range(self.key_length)):
            self._digits[pos] += 1
            if self._digits[pos] < base:
                break
            self._digits[pos] = 0
        else:
            self._digits = None
        return key

    def __iter__(self) -> Iterator[bytes]:
        return self

    def __next__(self) -> bytes:
        return self.next()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(alphabet={self.alphabet!r}, key_length={self.key_length})"


class LegacyPermutationKeySpace(KeySpace):
    """
    Permutations of a key seeded with the first symbol repeated.

    The seed holds a single distinct symbol, so only one key is ever produced
    per length. Selected with the "legacy" enumeration strategy.
    """

    @property
    def size(self) -> int:
        return 1

    def reset(self) -> None:
        self._working = bytearray(self.alphabet[:1] * self.key_length)
        self._exhausted = False

    def has_next(self) -> bool:
        return not self._exhausted

    def next(self) -> bytes:
        if self._exhausted:
            raise StopIteration
        key = bytes(self._working)
        self._exhausted = not next_permutation(self._working)
        return key


def key_space(alphabet: bytes, key_length: int, strategy: EnumerationStrategy = "odometer") -> KeySpace:
    if strategy == "odometer":
        return KeySpace(alphabet, key_length)
    elif strategy == "legacy":
        return LegacyPermutationKeySpace(alphabet, key_length)
    else:
        raise InvalidInput(f"Invalid enumeration strategy: {strategy}")


def check_bounds(alphabet: bytes, max_key_length: int) -> bytes:
    if max_key_length < 1:
        raise InvalidInput(f"max_key_length must be >= 1, got {max_key_length}")
    return validate_alphabet(alphabet)


def key_space_size(alphabet: bytes, max_key_length: int, strategy: EnumerationStrategy = "odometer") -> int:
    """Total number of candidates over all lengths 1..max_key_length."""
    alphabet = check_bounds(alphabet, max_key_length)
    return sum(key_space(alphabet, n, strategy).size for n in range(1, max_key_length + 1))


def enumerate_keys(alphabet: bytes, max_key_length: int, strategy: EnumerationStrategy = "odometer") -> Iterator[bytes]:
    """Lazily yield every candidate key, shortest lengths first."""
    # Validate eagerly so bad input fails at call time, not on first next().
    alphabet = check_bounds(alphabet, max_key_length)
    spaces = [key_space(alphabet, n, strategy) for n in range(1, max_key_length + 1)]

    def _generate() -> Iterator[bytes]:
        for space in spaces:
            yield from space

    return _generate()
