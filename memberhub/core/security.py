"""Credential helpers: reversible password encryption and remember-token digests."""

from __future__ import annotations

import base64
import binascii
import hashlib
import logging
import secrets
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Optional, Protocol

from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import padding, rsa

from .config import Settings

logger = logging.getLogger(__name__)

DEFAULT_KEY_SIZE = 4096

_OAEP = padding.OAEP(
    mgf=padding.MGF1(algorithm=hashes.SHA256()),
    algorithm=hashes.SHA256(),
    label=None,
)


class CredentialError(Exception):
    """Base class for credential encryption failures."""


class KeyUnavailable(CredentialError):
    """The key needed for the operation could not be loaded."""


class DecryptionFailure(CredentialError):
    """Ciphertext is malformed or was not produced by the matching public key."""


@dataclass(frozen=True)
class KeyMaterial:
    """Process-wide key pair, loaded once and shared read-only."""

    public_key: Optional[rsa.RSAPublicKey]
    private_key: Optional[rsa.RSAPrivateKey]
    public_key_path: str = ""
    private_key_path: str = ""


def _read_key(path: str, loader):
    try:
        data = Path(path).read_bytes()
    except OSError as exc:
        logger.warning("key file %s unreadable: %s", path, exc)
        return None
    try:
        return loader(data)
    except (ValueError, TypeError) as exc:
        logger.warning("key file %s is not a valid PEM key: %s", path, exc)
        return None


def load_key_material(settings: Settings) -> KeyMaterial:
    """Load both keys from the configured paths.

    Missing keys are recorded as None; the operation that needs one raises
    KeyUnavailable at call time.
    """
    public_key = _read_key(settings.public_key_path, serialization.load_pem_public_key)
    private_key = _read_key(
        settings.private_key_path,
        lambda data: serialization.load_pem_private_key(data, password=None),
    )
    return KeyMaterial(
        public_key=public_key,
        private_key=private_key,
        public_key_path=settings.public_key_path,
        private_key_path=settings.private_key_path,
    )


def generate_key_material(key_size: int = DEFAULT_KEY_SIZE) -> KeyMaterial:
    private_key = rsa.generate_private_key(public_exponent=65537, key_size=key_size)
    return KeyMaterial(public_key=private_key.public_key(), private_key=private_key)


def write_key_pair(material: KeyMaterial, public_path: str, private_path: str) -> None:
    if material.private_key is None or material.public_key is None:
        raise KeyUnavailable("both keys are required to write a key pair")
    private_pem = material.private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )
    public_pem = material.public_key.public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )
    Path(private_path).write_bytes(private_pem)
    Path(public_path).write_bytes(public_pem)


class CredentialCipher(Protocol):
    """Reversible protection for stored passwords."""

    def encrypt(self, plaintext: str) -> str:
        ...

    def decrypt(self, ciphertext: str) -> str:
        ...


class RSACredentialCipher:
    """RSA-OAEP cipher over an injected KeyMaterial.

    Stored credentials can be decrypted back to the password; this is what the
    "verify current password" flow relies on.
    """

    def __init__(self, material: KeyMaterial) -> None:
        self._material = material

    def encrypt(self, plaintext: str) -> str:
        key = self._material.public_key
        if key is None:
            raise KeyUnavailable(f"public key unavailable ({self._material.public_key_path or 'not loaded'})")
        ciphertext = key.encrypt((plaintext or "").encode("utf-8"), _OAEP)
        return base64.b64encode(ciphertext).decode("ascii")

    def decrypt(self, ciphertext: str) -> str:
        key = self._material.private_key
        if key is None:
            raise KeyUnavailable(f"private key unavailable ({self._material.private_key_path or 'not loaded'})")
        try:
            raw = base64.b64decode((ciphertext or "").encode("ascii"), validate=True)
            return key.decrypt(raw, _OAEP).decode("utf-8")
        except (binascii.Error, ValueError, UnicodeError) as exc:
            raise DecryptionFailure("stored credential could not be decrypted") from exc


def remember_token_digest(email: str, expires_at: datetime) -> str:
    """Token for a remember-me session. Anyone knowing email and expiry can recompute it."""
    key = f"{email}--{expires_at.isoformat()}"
    return hashlib.sha1(key.encode("utf-8")).hexdigest()


def passwords_match(supplied: str | None, stored: str | None) -> bool:
    return secrets.compare_digest((supplied or "").encode("utf-8"), (stored or "").encode("utf-8"))
