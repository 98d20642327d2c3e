# SPDX-License-Identifier: Apache-2.0
# Copyright (C) 2024-2026 The Birthmark Standard Foundation

"""Errors raised while issuing or persisting certificates."""


class CertificateError(Exception):
    """Base class for certificate issuance failures."""


class KeyGenerationError(CertificateError):
    """Raised when the RSA key pair could not be generated."""


class SigningIntegrityError(CertificateError):
    """Raised when a freshly signed certificate does not verify against its issuer."""


class CertificateNamingError(CertificateError, ValueError):
    """Raised when no commonName is available to derive an output filename."""


class IssuerKeyMismatchError(CertificateError, ValueError):
    """Raised when a loaded private key does not belong to the issuer certificate."""
