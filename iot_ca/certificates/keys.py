# SPDX-License-Identifier: Apache-2.0
# Copyright (C) 2024-2026 The Birthmark Standard Foundation

"""
RSA key pair generation.

Every issued certificate gets a fresh key pair. When a passphrase is given
the stored form of the private key is an encrypted PEM blob, while the
plaintext key object stays available for signing.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from ..exceptions import KeyGenerationError

logger = logging.getLogger(__name__)

DEFAULT_KEY_BITS = 4096
SUPPORTED_KEY_BITS = (4096, 2048, 1024)
PUBLIC_EXPONENT = 65537


@dataclass(frozen=True)
class KeyPair:
    """RSA key pair plus the encrypted storage form of the private key."""

    private_key: rsa.RSAPrivateKey
    encrypted_pem: Optional[bytes] = None

    @property
    def public_key(self) -> rsa.RSAPublicKey:
        return self.private_key.public_key()

    @property
    def is_encrypted(self) -> bool:
        return self.encrypted_pem is not None

    def private_key_pem(self) -> bytes:
        """Stored form: encrypted blob if a passphrase was used, clear PKCS#8 otherwise."""
        if self.encrypted_pem is not None:
            return self.encrypted_pem
        return self.private_key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.PKCS8,
            encryption_algorithm=serialization.NoEncryption(),
        )


def encrypt_private_key(key: rsa.RSAPrivateKey, passphrase: str) -> bytes:
    """Serialize a private key as passphrase-encrypted PKCS#8 PEM (AES-256-CBC)."""
    return key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.BestAvailableEncryption(passphrase.encode("utf-8")),
    )


def generate_key_pair(
    bits: int = DEFAULT_KEY_BITS,
    passphrase: Optional[str] = None,
) -> KeyPair:
    """
    Generate an RSA key pair.

    Args:
        bits: Modulus size (callers restrict this to SUPPORTED_KEY_BITS)
        passphrase: Optional passphrase for the stored private key

    Returns:
        KeyPair with the plaintext key and, if requested, its encrypted PEM

    Raises:
        KeyGenerationError: If the underlying library rejects or fails generation
    """
    logger.debug(f"Generating {bits}-bit RSA key pair")
    try:
        private_key = rsa.generate_private_key(public_exponent=PUBLIC_EXPONENT, key_size=bits)
        encrypted_pem = encrypt_private_key(private_key, passphrase) if passphrase else None
    except (ValueError, TypeError, UnsupportedAlgorithm) as e:
        raise KeyGenerationError(str(e)) from e

    return KeyPair(private_key=private_key, encrypted_pem=encrypted_pem)
