# SPDX-License-Identifier: Apache-2.0
# Copyright (C) 2024-2026 The Birthmark Standard Foundation

"""
Root, leaf and verification certificate issuance.

All three roles go through ChainIssuer.issue_certificate(). They differ only
in how the subject is chosen, whether the CA extension is added, and which
key signs:

- ROOT: self-signed with its own fresh key, carries basicConstraints cA=true
- LEAF: signed by the issuer's key, then re-verified against the issuer
- VERIFICATION: a leaf whose commonName is a one-time code from the
  device-cloud platform, proving possession of the CA key
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Callable, Optional, Union

from cryptography import x509
from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import padding, rsa

from ..exceptions import IssuerKeyMismatchError, SigningIntegrityError
from .attributes import AttributesLike, SubjectAttributes, as_subject_attributes
from .builder import (
    SerialStrategy,
    build_certificate,
    generate_serial_number,
    sign_certificate,
    validity_window,
)
from .extensions import extensions_for
from .keys import DEFAULT_KEY_BITS, KeyPair, generate_key_pair
from .pem import read_certificate_pem, read_private_key_pem

logger = logging.getLogger(__name__)


class CertificateRole(str, Enum):
    """Issuance role of a certificate."""

    ROOT = "root"
    LEAF = "leaf"
    VERIFICATION = "verification"


@dataclass(frozen=True)
class IssuerContext:
    """
    Signing capability of a CA: its certificate plus its private key.

    Kept apart from the certificate itself so that a certificate stays a
    public, persistable artifact.
    """

    certificate: x509.Certificate
    private_key: rsa.RSAPrivateKey

    @property
    def subject(self) -> SubjectAttributes:
        return SubjectAttributes.from_x509_name(self.certificate.subject)

    @classmethod
    def load(
        cls,
        cert_path: Union[str, Path],
        key_path: Union[str, Path],
        passphrase: Optional[str] = None,
    ) -> "IssuerContext":
        """
        Load an existing CA from PEM files.

        Args:
            cert_path: Path to the CA certificate (PEM)
            key_path: Path to the CA private key (PEM, optionally encrypted)
            passphrase: Passphrase for an encrypted private key

        Raises:
            IssuerKeyMismatchError: If the key does not belong to the certificate
        """
        certificate = read_certificate_pem(cert_path)
        private_key = read_private_key_pem(key_path, passphrase)

        # Compare public keys by encoding them
        encoding = serialization.Encoding.DER
        public_format = serialization.PublicFormat.SubjectPublicKeyInfo
        if (certificate.public_key().public_bytes(encoding, public_format)
                != private_key.public_key().public_bytes(encoding, public_format)):
            raise IssuerKeyMismatchError(
                f"Private key {key_path} does not match CA certificate {cert_path}"
            )

        return cls(certificate=certificate, private_key=private_key)


@dataclass(frozen=True)
class IssuedCertificate:
    """A freshly issued certificate and the key pair generated for it."""

    role: CertificateRole
    certificate: x509.Certificate
    key_pair: KeyPair

    @property
    def subject(self) -> SubjectAttributes:
        return SubjectAttributes.from_x509_name(self.certificate.subject)

    @property
    def issuer_context(self) -> IssuerContext:
        """Signing capability for leaves issued by this root."""
        if self.role is not CertificateRole.ROOT:
            raise ValueError(f"A {self.role.value} certificate cannot issue certificates")
        return IssuerContext(certificate=self.certificate, private_key=self.key_pair.private_key)


def verify_issued_by(certificate: x509.Certificate, issuer: x509.Certificate) -> None:
    """
    Check that `certificate` was signed by `issuer`.

    Raises:
        SigningIntegrityError: If the issuer name or the signature does not match
    """
    if certificate.issuer != issuer.subject:
        raise SigningIntegrityError(
            f"Certificate issuer {certificate.issuer.rfc4514_string()} does not match "
            f"CA subject {issuer.subject.rfc4514_string()}"
        )

    try:
        issuer.public_key().verify(
            certificate.signature,
            certificate.tbs_certificate_bytes,
            padding.PKCS1v15(),
            certificate.signature_hash_algorithm,
        )
    except InvalidSignature as e:
        raise SigningIntegrityError(
            "Certificate signature does not verify against the issuing CA"
        ) from e


class ChainIssuer:
    """
    Issues a root CA and certificates signed by it.

    Each issuance generates a fresh key pair. Leaves are re-verified
    against their issuer before they are returned.
    """

    def __init__(
        self,
        key_bits: int = DEFAULT_KEY_BITS,
        passphrase: Optional[str] = None,
        serial_strategy: SerialStrategy = "random",
        validity_years: int = 1,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """
        Args:
            key_bits: RSA modulus size for generated keys
            passphrase: Optional passphrase for stored private keys
            serial_strategy: "random" (159-bit) or "legacy" (below 1000)
            validity_years: Certificate lifetime in calendar years
            clock: Returns the not-before instant (default: now, UTC)
        """
        self.key_bits = key_bits
        self.passphrase = passphrase
        self.serial_strategy = serial_strategy
        self.validity_years = validity_years
        self.clock = clock

    @classmethod
    def from_settings(cls, settings) -> "ChainIssuer":
        """Create an issuer from iot_ca.config.Settings."""
        return cls(
            key_bits=settings.key_bits,
            passphrase=settings.passphrase,
            serial_strategy=settings.serial_strategy,
            validity_years=settings.validity_years,
        )

    def issue_certificate(
        self,
        role: CertificateRole,
        subject: AttributesLike,
        issuer: Optional[IssuerContext] = None,
    ) -> IssuedCertificate:
        """
        Issue a certificate for the given role.

        Args:
            role: ROOT, LEAF or VERIFICATION
            subject: Subject attributes of the new certificate
            issuer: Signing CA (required for LEAF and VERIFICATION)

        Returns:
            IssuedCertificate with the signed certificate and its key pair

        Raises:
            ValueError: If the issuer is missing or supplied for a root
            KeyGenerationError: If key generation fails
            SigningIntegrityError: If a leaf does not verify against its issuer
        """
        is_root = role is CertificateRole.ROOT
        if is_root and issuer is not None:
            raise ValueError("A root certificate is self-signed and takes no issuer")
        if not is_root and issuer is None:
            raise ValueError(f"A {role.value} certificate requires an issuer")

        key_pair = generate_key_pair(self.key_bits, self.passphrase)

        not_before, not_after = validity_window(
            self.clock() if self.clock else None,
            years=self.validity_years,
        )

        builder = build_certificate(
            subject,
            key_pair.public_key,
            None if is_root else issuer.certificate.subject,
            not_before=not_before,
            not_after=not_after,
            serial_number=generate_serial_number(self.serial_strategy),
            extensions=extensions_for(is_ca=is_root),
        )

        if is_root:
            certificate = sign_certificate(builder, key_pair.private_key)
        else:
            certificate = sign_certificate(builder, issuer.private_key)
            verify_issued_by(certificate, issuer.certificate)

        logger.info(
            f"Issued {role.value} certificate {certificate.subject.rfc4514_string()} "
            f"(serial {certificate.serial_number})"
        )
        return IssuedCertificate(role=role, certificate=certificate, key_pair=key_pair)

    def issue_root(self, subject: AttributesLike) -> IssuedCertificate:
        """Issue a self-signed root CA certificate."""
        return self.issue_certificate(CertificateRole.ROOT, subject)

    def issue_leaf(self, subject: AttributesLike, issuer: IssuerContext) -> IssuedCertificate:
        """Issue a leaf certificate signed by `issuer`."""
        return self.issue_certificate(CertificateRole.LEAF, subject, issuer)

    def issue_verification(
        self,
        verification_code: str,
        issuer: IssuerContext,
        attributes: Optional[AttributesLike] = None,
    ) -> IssuedCertificate:
        """
        Issue a verification certificate for a proof-of-possession code.

        The subject is cloned from `attributes` (default: the issuer's
        subject) with commonName set to the verification code.
        """
        base = attributes if attributes is not None else issuer.certificate.subject
        subject = leaf_subject(base, verification_code)
        return self.issue_certificate(CertificateRole.VERIFICATION, subject, issuer)


def leaf_subject(base: AttributesLike, common_name: str) -> SubjectAttributes:
    """Clone `base` with only the commonName substituted."""
    return as_subject_attributes(base).with_common_name(common_name)
