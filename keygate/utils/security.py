import base64
import hashlib
from functools import lru_cache

from cryptography.fernet import Fernet, InvalidToken

from keygate.config import settings


class DecryptionError(Exception):
    """Raised when a ciphertext cannot be decrypted with the configured key."""


@lru_cache(maxsize=1)
def _get_fernet() -> Fernet:
    if settings.ENCRYPTION_KEY:
        return Fernet(settings.ENCRYPTION_KEY.encode())
    # Local fallback: derive a stable Fernet key from SECRET_KEY
    digest = hashlib.sha256(settings.SECRET_KEY.encode()).digest()
    return Fernet(base64.urlsafe_b64encode(digest))


def encrypt_string(raw: str) -> str:
    """
    Encrypts a string with Fernet (AES-128-CBC + HMAC-SHA256).

    Every call yields a different ciphertext for the same input.
    """
    return _get_fernet().encrypt(raw.encode()).decode()


def decrypt_string(enc: str) -> str:
    """
    Decrypts a string encrypted with encrypt_string.

    Raises DecryptionError when the token is malformed, was produced with a
    different key, or has been tampered with.
    """
    try:
        return _get_fernet().decrypt(enc.encode()).decode()
    except (InvalidToken, UnicodeError, ValueError) as e:
        raise DecryptionError("Failed to decrypt value") from e
