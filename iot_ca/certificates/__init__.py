# SPDX-License-Identifier: Apache-2.0
# Copyright (C) 2024-2026 The Birthmark Standard Foundation

"""
Certificate issuance core.

RSA key generation, X.509 assembly with a fixed extension set, root/leaf
issuance with issuer re-verification, and PEM encoding.
"""

from .attributes import (
    SubjectAttribute,
    SubjectAttributes,
)

from .extensions import (
    CA_EXTENSIONS,
    CERTIFICATE_EXTENSIONS,
    NETSCAPE_CERT_TYPE,
    ExtensionRecord,
    extensions_for,
)

from .keys import (
    DEFAULT_KEY_BITS,
    SUPPORTED_KEY_BITS,
    KeyPair,
    generate_key_pair,
)

from .builder import (
    add_years,
    build_certificate,
    generate_serial_number,
    sign_certificate,
    validity_window,
)

from .pem import (
    certificate_from_pem,
    certificate_to_pem,
    certificates_from_pem,
    chain_to_pem,
    private_key_to_pem,
    read_certificate_chain_pem,
    read_certificate_pem,
    read_private_key_pem,
    write_pem,
)

from .issuer import (
    CertificateRole,
    ChainIssuer,
    IssuedCertificate,
    IssuerContext,
    leaf_subject,
    verify_issued_by,
)

__all__ = [
    # Attributes
    "SubjectAttribute",
    "SubjectAttributes",
    # Extensions
    "CA_EXTENSIONS",
    "CERTIFICATE_EXTENSIONS",
    "NETSCAPE_CERT_TYPE",
    "ExtensionRecord",
    "extensions_for",
    # Keys
    "DEFAULT_KEY_BITS",
    "SUPPORTED_KEY_BITS",
    "KeyPair",
    "generate_key_pair",
    # Builder
    "add_years",
    "build_certificate",
    "generate_serial_number",
    "sign_certificate",
    "validity_window",
    # PEM
    "certificate_from_pem",
    "certificate_to_pem",
    "certificates_from_pem",
    "chain_to_pem",
    "private_key_to_pem",
    "read_certificate_chain_pem",
    "read_certificate_pem",
    "read_private_key_pem",
    "write_pem",
    # Issuance
    "CertificateRole",
    "ChainIssuer",
    "IssuedCertificate",
    "IssuerContext",
    "leaf_subject",
    "verify_issued_by",
]
