"""
AES-256-GCM sealing for stored decryption credentials.

Sealed format is base64(nonce || ciphertext || tag), 12-byte nonce and
16-byte tag.
"""

import base64
from typing import Optional

from Crypto.Cipher import AES
from Crypto.Random import get_random_bytes

from app.config import settings

NONCE_SIZE = 12
TAG_SIZE = 16
KEY_SIZE = 32


class CipherError(Exception):
    """Sealed value is malformed or was sealed with another key."""


def _normalize_key(key: str) -> bytes:
    # Zero-pad short keys, truncate long ones
    raw = key.encode("utf-8")
    return raw[:KEY_SIZE].ljust(KEY_SIZE, b"\0")


class SecretCipher:

    def __init__(self, key: Optional[str] = None):
        self._key = _normalize_key(key if key is not None else settings.CREDENTIAL_ENCRYPTION_KEY)

    def seal(self, plaintext: str) -> str:
        nonce = get_random_bytes(NONCE_SIZE)
        cipher = AES.new(self._key, AES.MODE_GCM, nonce=nonce)
        ciphertext, tag = cipher.encrypt_and_digest(plaintext.encode("utf-8"))
        return base64.b64encode(nonce + ciphertext + tag).decode("ascii")

    def unseal(self, sealed: str) -> str:
        try:
            data = base64.b64decode(sealed, validate=True)
        except ValueError as e:
            raise CipherError("sealed value is not valid base64") from e

        if len(data) < NONCE_SIZE + TAG_SIZE:
            raise CipherError("sealed value too short")

        nonce = data[:NONCE_SIZE]
        ciphertext = data[NONCE_SIZE:-TAG_SIZE]
        tag = data[-TAG_SIZE:]
        cipher = AES.new(self._key, AES.MODE_GCM, nonce=nonce)
        try:
            plaintext = cipher.decrypt_and_verify(ciphertext, tag)
        except ValueError as e:
            raise CipherError("authentication failed") from e
        return plaintext.decode("utf-8")
