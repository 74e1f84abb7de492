from typing import Callable

PlaintextOracle = Callable[[bytes], bool]

# Same classes as C's isprint() / isspace() in the "C" locale.
PRINTABLE_BYTES = bytes(range(0x20, 0x7F))
WHITESPACE_BYTES = b" \t\n\r\x0b\x0c"
ACCEPTED_BYTES = PRINTABLE_BYTES + WHITESPACE_BYTES


def is_valid_plaintext(data: bytes) -> bool:
    """
    Accept the buffer only if every byte is printable or whitespace.
    An empty buffer is accepted (nothing in it is invalid).
    """
    return not bytes(data).translate(None, ACCEPTED_BYTES)
