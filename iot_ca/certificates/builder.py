# SPDX-License-Identifier: Apache-2.0
# Copyright (C) 2024-2026 The Birthmark Standard Foundation

"""
Certificate assembly and signing.

build_certificate() only assembles the unsigned structure (subject, issuer,
validity, serial number, extensions). sign_certificate() signs it with
SHA-256 using whichever private key the issuance role calls for.
"""

import secrets
from datetime import datetime, timezone
from typing import Iterable, Literal, Optional

from cryptography import x509
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import rsa

from .attributes import AttributesLike
from .extensions import ExtensionRecord, to_x509_extension

SerialStrategy = Literal["random", "legacy"]

# Upper bound (exclusive) of the legacy serial number range
LEGACY_SERIAL_BOUND = 1000


def add_years(moment: datetime, years: int) -> datetime:
    """
    Increment the year component, keeping month, day and time of day.

    Feb 29 rolls over to Mar 1 when the target year is not a leap year.
    """
    try:
        return moment.replace(year=moment.year + years)
    except ValueError:
        return moment.replace(year=moment.year + years, month=3, day=1)


def validity_window(
    not_before: Optional[datetime] = None,
    years: int = 1,
) -> tuple[datetime, datetime]:
    """
    Compute (not_before, not_after) for a new certificate.

    Args:
        not_before: Start of validity (default: now, UTC)
        years: Validity length in calendar years (default: 1)

    Returns:
        Tuple of (not_before, not_after), truncated to whole seconds
    """
    if not_before is None:
        not_before = datetime.now(timezone.utc)
    not_before = not_before.replace(microsecond=0)
    return not_before, add_years(not_before, years)


def generate_serial_number(strategy: SerialStrategy = "random") -> int:
    """
    Generate a certificate serial number.

    "random" is a 159-bit random positive integer. "legacy" reproduces the
    narrow [1, 1000) range of earlier releases; X.509 forbids a zero serial.
    """
    if strategy == "legacy":
        return secrets.randbelow(LEGACY_SERIAL_BOUND - 1) + 1
    if strategy == "random":
        return x509.random_serial_number()
    raise ValueError(f"Unknown serial number strategy: {strategy}")


def _to_name(value: AttributesLike) -> x509.Name:
    # Names taken from a parsed certificate are kept byte for byte
    if isinstance(value, x509.Name):
        return value
    return value.to_x509_name()


def build_certificate(
    subject: AttributesLike,
    public_key: rsa.RSAPublicKey,
    issuer: Optional[AttributesLike] = None,
    *,
    not_before: datetime,
    not_after: datetime,
    serial_number: int,
    extensions: Iterable[ExtensionRecord],
) -> x509.CertificateBuilder:
    """
    Assemble an unsigned certificate.

    Args:
        subject: Subject attributes
        public_key: Subject public key
        issuer: Issuer attributes (default: subject, i.e. self-signed)
        not_before: Start of validity
        not_after: End of validity
        serial_number: Positive certificate serial number
        extensions: Extension records, added in order

    Returns:
        CertificateBuilder ready to be signed
    """
    subject_name = _to_name(subject)
    issuer_name = subject_name if issuer is None else _to_name(issuer)

    builder = (
        x509.CertificateBuilder()
        .subject_name(subject_name)
        .issuer_name(issuer_name)
        .public_key(public_key)
        .serial_number(serial_number)
        .not_valid_before(not_before)
        .not_valid_after(not_after)
    )

    for record in extensions:
        builder = builder.add_extension(
            to_x509_extension(record, public_key),
            critical=record.critical,
        )

    return builder


def sign_certificate(
    builder: x509.CertificateBuilder,
    signing_key: rsa.RSAPrivateKey,
) -> x509.Certificate:
    """Sign an assembled certificate with SHA-256."""
    return builder.sign(private_key=signing_key, algorithm=hashes.SHA256())
