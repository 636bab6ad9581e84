"""Process-wide GitHub credential slot and encrypted token handling.

Tokens supplied by a client at connection time replace whatever the previous
client supplied: the store is a single slot shared by every session, so the
most recently connected client's token is the one every in-flight call sees.

Encrypted tokens use the CryptoJS passphrase format (OpenSSL ``Salted__``
header, ``EVP_BytesToKey`` with MD5, AES-256-CBC, PKCS#7), so browser and
Node clients can produce them with ``CryptoJS.AES.encrypt(token, key)``.
"""

from __future__ import annotations

import base64
import binascii
import enum
import hashlib
import logging
import os
from dataclasses import dataclass

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

logger = logging.getLogger("gitbridge.credentials")

TOKEN_ENV = "GITHUB_PERSONAL_ACCESS_TOKEN"
ENCRYPTION_KEY_ENV = "GITHUB_TOKEN_ENCRYPTION_KEY"

_SALT_HEADER = b"Salted__"
_SALT_LEN = 8
_KEY_LEN = 32
_IV_LEN = 16
_BLOCK_BITS = 128


class CredentialError(Exception):
    """Base class for failures while installing a connection credential."""


class MissingEncryptionKeyError(CredentialError):
    """An encrypted token arrived but no key is available to decrypt it."""

    def __init__(self) -> None:
        super().__init__(
            "Encryption key required for encrypted token. Provide 'encryption_key' "
            f"query parameter or set {ENCRYPTION_KEY_ENV} environment variable."
        )


class DecryptionError(CredentialError):
    """The encrypted token could not be turned back into a plaintext token."""


class CredentialOrigin(str, enum.Enum):
    DYNAMIC = "dynamic"
    ENVIRONMENT = "environment"


@dataclass(frozen=True)
class CredentialState:
    """Snapshot of the active credential and where it came from."""

    value: str | None
    origin: CredentialOrigin | None


def _evp_bytes_to_key(passphrase: bytes, salt: bytes) -> tuple[bytes, bytes]:
    derived = b""
    block = b""
    while len(derived) < _KEY_LEN + _IV_LEN:
        block = hashlib.md5(block + passphrase + salt).digest()
        derived += block
    return derived[:_KEY_LEN], derived[_KEY_LEN : _KEY_LEN + _IV_LEN]


def encrypt_token(token: str, passphrase: str, *, salt: bytes | None = None) -> str:
    """Encrypt ``token`` the way ``CryptoJS.AES.encrypt(token, passphrase)`` does."""
    salt = salt if salt is not None else os.urandom(_SALT_LEN)
    if len(salt) != _SALT_LEN:
        raise ValueError(f"salt must be {_SALT_LEN} bytes")
    key, iv = _evp_bytes_to_key(passphrase.encode("utf-8"), salt)
    padder = padding.PKCS7(_BLOCK_BITS).padder()
    padded = padder.update(token.encode("utf-8")) + padder.finalize()
    encryptor = Cipher(algorithms.AES(key), modes.CBC(iv)).encryptor()
    body = encryptor.update(padded) + encryptor.finalize()
    return base64.b64encode(_SALT_HEADER + salt + body).decode("ascii")


def decrypt_token(encrypted_token: str, passphrase: str) -> str:
    """Decrypt a CryptoJS/OpenSSL formatted token.

    Raises:
        DecryptionError: On malformed input, a wrong passphrase, or an empty
            plaintext. The underlying failure is chained as ``__cause__``.
    """
    try:
        return _decrypt(encrypted_token, passphrase)
    except DecryptionError:
        raise
    except (ValueError, UnicodeDecodeError) as exc:
        raise DecryptionError(f"Token decryption failed: {exc}") from exc


def _decrypt(encrypted_token: str, passphrase: str) -> str:
    try:
        raw = base64.b64decode(encrypted_token, validate=True)
    except binascii.Error as exc:
        raise DecryptionError("Token decryption failed: token is not valid base64") from exc
    header_len = len(_SALT_HEADER) + _SALT_LEN
    if not raw.startswith(_SALT_HEADER) or len(raw) <= header_len:
        raise DecryptionError("Token decryption failed: missing salt header")
    body = raw[header_len:]
    if len(body) % (_BLOCK_BITS // 8):
        raise DecryptionError("Token decryption failed: truncated ciphertext")

    key, iv = _evp_bytes_to_key(passphrase.encode("utf-8"), raw[len(_SALT_HEADER) : header_len])
    decryptor = Cipher(algorithms.AES(key), modes.CBC(iv)).decryptor()
    padded = decryptor.update(body) + decryptor.finalize()
    unpadder = padding.PKCS7(_BLOCK_BITS).unpadder()
    plaintext = (unpadder.update(padded) + unpadder.finalize()).decode("utf-8")
    if not plaintext:
        raise DecryptionError(
            "Token decryption failed: invalid encryption key or corrupted data"
        )
    return plaintext


class CredentialStore:
    """Single shared slot resolving the GitHub token for every tool call.

    Resolution order: dynamic credential (set by the most recent connection),
    then the environment credential, then nothing.
    """

    def __init__(
        self,
        environment_token: str | None = None,
        default_encryption_key: str | None = None,
    ) -> None:
        self._environment_token = environment_token or None
        self._default_encryption_key = default_encryption_key or None
        self._dynamic_token: str | None = None

    @classmethod
    def from_env(cls) -> CredentialStore:
        return cls(
            environment_token=os.environ.get(TOKEN_ENV),
            default_encryption_key=os.environ.get(ENCRYPTION_KEY_ENV),
        )

    def reload_env(self) -> None:
        """Re-read environment defaults, e.g. after ``.env`` was loaded."""
        self._environment_token = os.environ.get(TOKEN_ENV) or None
        self._default_encryption_key = os.environ.get(ENCRYPTION_KEY_ENV) or None

    def set_dynamic_credential(self, raw: str) -> None:
        self._dynamic_token = raw or None

    def set_encrypted_credential(self, cipher_text: str, key: str | None = None) -> None:
        """Decrypt ``cipher_text`` and install it as the dynamic credential.

        An explicit ``key`` wins over the configured default key. The store is
        left untouched when no key is available or decryption fails.
        """
        passphrase = key or self._default_encryption_key
        if not passphrase:
            raise MissingEncryptionKeyError()
        token = decrypt_token(cipher_text, passphrase)
        self._dynamic_token = token
        logger.info("Access token successfully decrypted")

    def clear_dynamic_credential(self) -> None:
        self._dynamic_token = None

    def get_active_credential(self) -> str | None:
        return self._dynamic_token or self._environment_token

    @property
    def state(self) -> CredentialState:
        if self._dynamic_token:
            return CredentialState(self._dynamic_token, CredentialOrigin.DYNAMIC)
        if self._environment_token:
            return CredentialState(self._environment_token, CredentialOrigin.ENVIRONMENT)
        return CredentialState(None, None)


credential_store = CredentialStore.from_env()


__all__ = [
    "CredentialError",
    "CredentialOrigin",
    "CredentialState",
    "CredentialStore",
    "DecryptionError",
    "MissingEncryptionKeyError",
    "credential_store",
    "decrypt_token",
    "encrypt_token",
]
