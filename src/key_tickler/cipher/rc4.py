from typing import List, Tuple

from key_tickler.errors import InvalidInput

STATE_SIZE = 256

KeyScheduleState = List[int]


def schedule_key(key: bytes) -> KeyScheduleState:
    """Build the 256-entry permutation for a key (KSA)."""
    if not key:
        raise InvalidInput("key must be at least 1 byte long")

    key_length = len(key)
    state = list(range(STATE_SIZE))
    j = 0
    for k in range(STATE_SIZE):
        j = (j + state[k] + key[k % key_length]) % STATE_SIZE
        state[k], state[j] = state[j], state[k]
    return state


def advance(state: KeyScheduleState, i: int, j: int) -> Tuple[int, int]:
    """One generator step. Mutates the state in place and returns the new (i, j)."""
    i = (i + 1) % STATE_SIZE
    j = (j + state[i]) % STATE_SIZE
    state[i], state[j] = state[j], state[i]
    return i, j


def output_byte(state: KeyScheduleState, i: int, j: int) -> int:
    return state[(state[i] + state[j]) % STATE_SIZE]


def keystream_byte_at(key: bytes, position: int) -> int:
    """
    Derive the keystream byte for one position from scratch.
    The schedule is rebuilt and advanced `position` times, so no state is
    shared with any other position.
    """
    state = schedule_key(key)
    i = j = 0
    for _ in range(position):
        i, j = advance(state, i, j)
    return output_byte(state, i, j)


def decrypt_position(ciphertext: bytes, key: bytes, position: int) -> int:
    return ciphertext[position] ^ keystream_byte_at(key, position)


def keystream(key: bytes, length: int) -> bytes:
    """Generate `length` keystream bytes in a single sequential pass."""
    state = schedule_key(key)
    out = bytearray(length)
    i = j = 0
    for p in range(length):
        # Emit before advancing: position p sees the state after p steps.
        out[p] = output_byte(state, i, j)
        i, j = advance(state, i, j)
    return bytes(out)


def crypt(data: bytes, key: bytes) -> bytes:
    """Encrypt or decrypt. The construction is its own inverse."""
    stream = keystream(key, len(data))
    return bytes(d ^ s for d, s in zip(data, stream))
