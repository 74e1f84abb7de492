import binascii

from fastapi import FastAPI, APIRouter, HTTPException
import structlog

from key_tickler.utils import b64_encode, b64_decode

from . import crypto, models

log = structlog.get_logger(
    processors=[
        structlog.processors.JSONRenderer(indent=2),
    ],
)

# Create the FastAPI app
app = FastAPI(title="RC4 Key Search Demo API")

# Create the router for API endpoints
router = APIRouter()

DEMO_TEXTS = {
    "demo1": "Hello, world!",
    "demo2": "The quick brown fox jumps over the lazy dog.",
    "demo3": """It was the best of times, it was the worst of times,
it was the age of wisdom, it was the age of foolishness,
it was the epoch of belief, it was the epoch of incredulity,
it was the season of Light, it was the season of Darkness.""",
}

# Key length per demo; also the max_key_length handed to the client.
DEMO_KEY_LENGTHS = {
    "demo1": 1,
    "demo2": 2,
    "demo3": 3,
}


def encrypt(plaintext: bytes, key: bytes) -> bytes:
    ciphertext = crypto.encrypt(key, plaintext)
    log.info(
        "encrypted",
        cipher=str(crypto.CipherSuite.RC4),
        plaintext=plaintext,
        key=key,
        ciphertext_hex=ciphertext.hex(" "),
        key_len=len(key),
        ciphertext_len=len(ciphertext),
    )
    return ciphertext


def build_encrypted_response(ciphertext: bytes, max_key_length: int, alphabet: str = crypto.DEMO_ALPHABET) -> models.EncryptResponse:
    """ Build a response with the ciphertext and the search parameters that recover it. """
    return models.EncryptResponse(
        alg=crypto.CipherSuite.RC4,
        ciphertext_b64=b64_encode(ciphertext),
        ciphertext_hex=ciphertext.hex(),
        alphabet=alphabet,
        max_key_length=max_key_length,
    )


def demo_response(name: str) -> models.EncryptResponse:
    key_length = DEMO_KEY_LENGTHS[name]
    key = crypto.get_key(name, key_length)
    ciphertext = encrypt(DEMO_TEXTS[name].encode("utf-8"), key)
    return build_encrypted_response(ciphertext, max_key_length=key_length)


@router.get("/demo1", response_model=models.EncryptResponse)
def demo1():
    """ Short text under a single byte key. """
    return demo_response("demo1")


@router.get("/demo2", response_model=models.EncryptResponse)
def demo2():
    """ One sentence under a two byte key. """
    return demo_response("demo2")


@router.get("/demo3", response_model=models.EncryptResponse)
def demo3():
    """ Multi-line text under a three byte key. """
    return demo_response("demo3")


@router.post("/encrypt", response_model=models.EncryptResponse)
def encrypt_api(req: models.EncryptRequest):
    """ Encrypt the given plaintext with the given key and return the ciphertext. """
    try:
        plaintext = b64_decode(req.plaintext_b64)
        key = req.key.encode("latin-1")
    except (binascii.Error, ValueError) as e:
        log.warning("bad encrypt request", error=str(e))
        raise HTTPException(status_code=400, detail=f"Encryption error: {e}")

    alphabet = "".join(dict.fromkeys(req.key))
    ciphertext = encrypt(plaintext, key)
    return build_encrypted_response(ciphertext, max_key_length=len(key), alphabet=alphabet)


# Include the router in the app (after all routes are defined)
app.include_router(router, prefix="/api")
