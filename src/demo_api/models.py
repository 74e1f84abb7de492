from pydantic import BaseModel, Field

from . import crypto


class EncryptRequest(BaseModel):
    plaintext_b64: str
    key: str = Field(min_length=1)


class EncryptResponse(BaseModel):
    alg: crypto.CipherSuite
    ciphertext_b64: str
    ciphertext_hex: str
    alphabet: str
    max_key_length: int
