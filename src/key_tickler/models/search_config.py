import string
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from key_tickler.errors import InvalidInput
from key_tickler.keyspace import validate_alphabet

ALPHABETS = {
    "lower": string.ascii_lowercase,
    "upper": string.ascii_uppercase,
    "digits": string.digits,
    "alnum": string.ascii_letters + string.digits,
    "hex": "0123456789abcdef",
}

DEFAULT_ALPHABET = ALPHABETS["alnum"]
DEFAULT_MAX_KEY_LENGTH = 5

BackendName = Literal["python", "threads", "numpy", "opencl"]


class SearchConfig(BaseModel):
    """Parameters for one brute-force search."""

    model_config = ConfigDict(frozen=True)

    alphabet: str = DEFAULT_ALPHABET
    max_key_length: int = Field(default=DEFAULT_MAX_KEY_LENGTH, ge=1)
    enumeration: Literal["odometer", "legacy"] = "odometer"
    backend: BackendName = "numpy"

    @field_validator("alphabet")
    @classmethod
    def check_alphabet(cls, value: str) -> str:
        # InvalidInput is a ValueError, so pydantic reports it as a validation error.
        validate_alphabet(value)
        return value

    @property
    def alphabet_bytes(self) -> bytes:
        return self.alphabet.encode("latin-1")


def load_config(**values) -> SearchConfig:
    """Build a SearchConfig, turning validation failures into InvalidInput."""
    try:
        return SearchConfig(**values)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        raise InvalidInput(f"Invalid search configuration: {problems}") from e
