import base64
import binascii
from typing import Literal, Union

from key_tickler.errors import InvalidInput

type CiphertextFormat = Union[Literal[
    "b64",
    "b64_urlsafe",
    "hex",
    "raw"
], str]

CIPHERTEXT_FORMATS = ("b64", "b64_urlsafe", "hex", "raw")


def decode_ciphertext(data: bytes, format: CiphertextFormat) -> bytes:
    """Decode file contents in the given format."""
    try:
        if format == "b64":
            return b64_decode(data)
        elif format == "b64_urlsafe":
            return b64_decode(data, urlsafe=True)
        elif format == "hex":
            return bytes.fromhex(data.decode("ascii"))
        elif format == "raw":
            return bytes(data)
    except (binascii.Error, ValueError) as e:
        raise InvalidInput(f"Could not decode {format} ciphertext: {e}") from e
    raise InvalidInput(f"Invalid ciphertext format: {format}")


def encode_ciphertext(data: bytes, format: CiphertextFormat) -> bytes:
    if format == "b64":
        return b64_encode(data).encode("ascii")
    elif format == "b64_urlsafe":
        return b64_encode(data, urlsafe=True).encode("ascii")
    elif format == "hex":
        return data.hex().encode("ascii")
    elif format == "raw":
        return bytes(data)
    raise InvalidInput(f"Invalid ciphertext format: {format}")


def load_ciphertext(file_path: str, format: CiphertextFormat) -> bytes:
    """Load the ciphertext from a file."""
    with open(file_path, "rb") as f:
        data = f.read()
    return decode_ciphertext(data, format)


def write_plaintext(file_path: str, plaintext: bytes) -> None:
    with open(file_path, "wb") as f:
        f.write(plaintext)


def _as_bytes(
    data: Union[str, bytes, bytearray, memoryview],
    *,
    encoding: str = "utf-8",
) -> bytes:
    """Normalize values to type bytes."""
    if isinstance(data, bytes):
        return data
    if isinstance(data, (bytearray, memoryview)):
        return bytes(data)
    if isinstance(data, str):
        return data.encode(encoding)
    raise TypeError(f"Cannot convert {type(data).__name__} to bytes")


def b64_encode(
    data: Union[str, bytes, bytearray, memoryview],
    *,
    urlsafe: bool = False,
    text_encoding: str = "utf-8",
) -> str:
    """Accepts str/bytes/etc and return a base64 string (standard or URL-safe)."""
    raw = _as_bytes(data, encoding=text_encoding)
    fn = base64.urlsafe_b64encode if urlsafe else base64.b64encode
    return fn(raw).decode("ascii")


def b64_decode(
    b64_text: Union[str, bytes],
    *,
    urlsafe: bool = False,
) -> bytes:
    """Decodes standard or URL-safe b64. Tolerates surrounding whitespace and missing '=' padding."""
    text = _as_bytes(b64_text, encoding="ascii").strip()
    missing = len(text) % 4
    if missing:
        text += b"=" * (4 - missing)

    altchars = b"-_" if urlsafe else None
    return base64.b64decode(text, altchars=altchars, validate=True)


def printable_key(key: bytes) -> str:
    """Render a key for humans, escaping bytes outside printable ASCII."""
    return key.decode("latin-1") if key.isascii() and key.decode("ascii").isprintable() else key.hex()
