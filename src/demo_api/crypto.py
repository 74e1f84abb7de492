import os
import pathlib
import secrets
from enum import Enum

import structlog

from key_tickler.cipher import rc4

log = structlog.get_logger()

KEY_DIR = pathlib.Path(os.environ.get("KEY_TICKLER_DEMO_KEY_DIR", pathlib.Path(__file__).parent / "keys"))

# Small alphabet so the demo keys can be found in seconds.
DEMO_ALPHABET = "abcdef"


class CipherSuite(str, Enum):
    RC4 = "RC4"

    def __str__(self):
        return self.value


def random_key(length: int, alphabet: str = DEMO_ALPHABET) -> bytes:
    return "".join(secrets.choice(alphabet) for _ in range(length)).encode("latin-1")


def get_key(name: str, length: int) -> bytes:
    """Returns the persisted key for a demo.
    If the key file does not exist, it creates a new key and saves it to the key file."""
    keyfile = KEY_DIR / f"{name}.key"
    if keyfile.exists():
        key = keyfile.read_bytes()
        if len(key) == length:
            return key
        log.warning("stale demo key replaced", keyfile=str(keyfile), key_len=len(key), expected=length)

    key = random_key(length)
    KEY_DIR.mkdir(parents=True, exist_ok=True)
    keyfile.write_bytes(key)
    return key


def encrypt(key: bytes, plaintext: bytes) -> bytes:
    """ Encrypts the plaintext with RC4 as attacked by key_tickler. """
    if not key:
        raise ValueError("Key must not be empty")
    return rc4.crypt(plaintext, key)