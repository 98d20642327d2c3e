# SPDX-License-Identifier: Apache-2.0
# Copyright (C) 2024-2026 The Birthmark Standard Foundation

"""
X.509 extension records applied to every issued certificate.

Records are plain immutable values. The builder turns them into
cryptography extension objects once the subject public key is known.
"""

from dataclasses import dataclass

from cryptography import x509
from cryptography.x509.oid import ExtendedKeyUsageOID
from cryptography.hazmat.primitives.asymmetric import rsa


# Netscape certificate type (not modelled by cryptography, encoded by hand)
NETSCAPE_CERT_TYPE = x509.ObjectIdentifier("2.16.840.1.113730.1.1")

_KEY_USAGE_FLAGS = {
    "digitalSignature": "digital_signature",
    "nonRepudiation": "content_commitment",
    "keyEncipherment": "key_encipherment",
    "dataEncipherment": "data_encipherment",
    "keyAgreement": "key_agreement",
    "keyCertSign": "key_cert_sign",
    "cRLSign": "crl_sign",
    "encipherOnly": "encipher_only",
    "decipherOnly": "decipher_only",
}

_EXT_KEY_USAGE_FLAGS = {
    "serverAuth": ExtendedKeyUsageOID.SERVER_AUTH,
    "clientAuth": ExtendedKeyUsageOID.CLIENT_AUTH,
    "codeSigning": ExtendedKeyUsageOID.CODE_SIGNING,
    "emailProtection": ExtendedKeyUsageOID.EMAIL_PROTECTION,
    "timeStamping": ExtendedKeyUsageOID.TIME_STAMPING,
}

# Bit positions, most significant bit first (bit 4 is reserved)
_NS_CERT_TYPE_BITS = {
    "client": 0,
    "server": 1,
    "email": 2,
    "objsign": 3,
    "sslCA": 5,
    "emailCA": 6,
    "objCA": 7,
}


@dataclass(frozen=True)
class ExtensionRecord:
    """A named extension with the flags it sets to true."""

    name: str
    critical: bool = False
    flags: tuple[str, ...] = ()


CERTIFICATE_EXTENSIONS: tuple[ExtensionRecord, ...] = (
    ExtensionRecord("subjectKeyIdentifier"),
    ExtensionRecord(
        "keyUsage",
        critical=True,
        flags=(
            "keyCertSign",
            "digitalSignature",
            "nonRepudiation",
            "keyEncipherment",
            "dataEncipherment",
        ),
    ),
    ExtensionRecord(
        "extKeyUsage",
        flags=("serverAuth", "clientAuth", "codeSigning", "emailProtection", "timeStamping"),
    ),
    ExtensionRecord(
        "nsCertType",
        flags=("client", "server", "email", "objsign", "sslCA", "emailCA", "objCA"),
    ),
)

CA_EXTENSIONS: tuple[ExtensionRecord, ...] = (
    ExtensionRecord("basicConstraints", critical=True, flags=("cA",)),
)


def extensions_for(is_ca: bool) -> tuple[ExtensionRecord, ...]:
    """Return the extension set for a root (is_ca=True) or a leaf."""
    if is_ca:
        return CERTIFICATE_EXTENSIONS + CA_EXTENSIONS
    return CERTIFICATE_EXTENSIONS


def _encode_ns_cert_type(flags: tuple[str, ...]) -> bytes:
    """DER-encode the nsCertType named BIT STRING."""
    value = 0
    for flag in flags:
        value |= 0x80 >> _NS_CERT_TYPE_BITS[flag]

    if value == 0:
        return bytes([0x03, 0x01, 0x00])

    # DER drops trailing zero bits of a named bit list
    unused_bits = (value & -value).bit_length() - 1
    return bytes([0x03, 0x02, unused_bits, value])


def to_x509_extension(
    record: ExtensionRecord,
    public_key: rsa.RSAPublicKey,
) -> x509.ExtensionType:
    """
    Convert an extension record into a cryptography extension value.

    Args:
        record: Extension record
        public_key: Subject public key (needed for subjectKeyIdentifier)

    Raises:
        ValueError: If the record names an unknown extension or flag
    """
    try:
        if record.name == "subjectKeyIdentifier":
            return x509.SubjectKeyIdentifier.from_public_key(public_key)

        if record.name == "keyUsage":
            usage = {attr: False for attr in _KEY_USAGE_FLAGS.values()}
            for flag in record.flags:
                usage[_KEY_USAGE_FLAGS[flag]] = True
            return x509.KeyUsage(**usage)

        if record.name == "extKeyUsage":
            return x509.ExtendedKeyUsage([_EXT_KEY_USAGE_FLAGS[flag] for flag in record.flags])

        if record.name == "nsCertType":
            return x509.UnrecognizedExtension(
                NETSCAPE_CERT_TYPE, _encode_ns_cert_type(record.flags)
            )

        if record.name == "basicConstraints":
            return x509.BasicConstraints(ca="cA" in record.flags, path_length=None)
    except KeyError as e:
        raise ValueError(f"Unknown flag {e.args[0]!r} for extension {record.name}") from e

    raise ValueError(f"Unknown extension: {record.name}")
