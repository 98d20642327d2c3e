# SPDX-License-Identifier: Apache-2.0
# Copyright (C) 2024-2026 The Birthmark Standard Foundation

"""PEM encoding, decoding and file I/O for certificates and private keys."""

import logging
from pathlib import Path
from typing import Optional, Union

from cryptography import x509
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from .keys import KeyPair

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def certificate_to_pem(cert: x509.Certificate) -> str:
    """Convert certificate to PEM-encoded string."""
    return cert.public_bytes(serialization.Encoding.PEM).decode("utf-8")


def certificate_from_pem(text: Union[str, bytes]) -> x509.Certificate:
    """Parse the first certificate of a PEM string."""
    if isinstance(text, str):
        text = text.encode("utf-8")
    return x509.load_pem_x509_certificate(text)


def certificates_from_pem(text: Union[str, bytes]) -> list[x509.Certificate]:
    """Parse every certificate of a PEM bundle, in file order."""
    if isinstance(text, str):
        text = text.encode("utf-8")
    return x509.load_pem_x509_certificates(text)


def chain_to_pem(*certs: x509.Certificate) -> str:
    """Concatenate certificates as plain PEM blocks (leaf first)."""
    return "".join(certificate_to_pem(cert) for cert in certs)


def private_key_to_pem(key_pair: KeyPair) -> str:
    """Stored form of a generated private key (encrypted if a passphrase was used)."""
    return key_pair.private_key_pem().decode("utf-8")


def read_certificate_pem(path: PathLike) -> x509.Certificate:
    """Load a certificate from a PEM file (the first one if it is a bundle)."""
    with open(path, "rb") as f:
        return x509.load_pem_x509_certificate(f.read())


def read_certificate_chain_pem(path: PathLike) -> list[x509.Certificate]:
    """Load every certificate of a PEM bundle file."""
    with open(path, "rb") as f:
        return x509.load_pem_x509_certificates(f.read())


def read_private_key_pem(
    path: PathLike,
    passphrase: Optional[str] = None,
) -> rsa.RSAPrivateKey:
    """
    Load a private key from a PEM file.

    Args:
        path: Key file path
        passphrase: Passphrase for an encrypted key

    Raises:
        TypeError: If the key is encrypted and no passphrase was given
        ValueError: If the key cannot be decoded or is not an RSA key
    """
    password = passphrase.encode("utf-8") if passphrase else None
    with open(path, "rb") as f:
        key = serialization.load_pem_private_key(f.read(), password=password)

    if not isinstance(key, rsa.RSAPrivateKey):
        raise ValueError(f"Expected an RSA private key in {path}")
    return key


def write_pem(path: PathLike, content: Union[str, bytes]) -> Path:
    """
    Write PEM content, creating parent directories as needed.

    Returns:
        The written path
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    if isinstance(content, str):
        content = content.encode("utf-8")
    with open(path, "wb") as f:
        f.write(content)

    logger.debug(f"Wrote {path}")
    return path
