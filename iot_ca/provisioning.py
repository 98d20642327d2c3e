# SPDX-License-Identifier: Apache-2.0
# Copyright (C) 2024-2026 The Birthmark Standard Foundation

"""
Certificate provisioning workflow.

Handles a complete generation run inside one output directory:
1. Issue the root CA and write <commonName>.key.pem / <commonName>.cert.pem
2. Issue device leaves and write <name>.key.pem / <name>.pem (leaf + root)
3. Issue the verification certificate and write verified.pem (leaf + root)

Leaves are issued strictly one after another. A leaf that fails
re-verification stops the run before any of its files are written; files
of earlier leaves stay on disk.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Union

from .certificates.attributes import AttributesLike, SubjectAttributes
from .certificates.issuer import ChainIssuer, IssuedCertificate, IssuerContext, leaf_subject
from .certificates.pem import certificate_to_pem, chain_to_pem, private_key_to_pem, write_pem
from .exceptions import CertificateNamingError

logger = logging.getLogger(__name__)

VERIFICATION_NAME = "verification"
VERIFICATION_FILENAME = "verified.pem"


@dataclass
class ProvisionedCertificate:
    """An issued certificate and the files it was written to."""

    name: str
    issued: IssuedCertificate
    certificate_path: Path
    key_path: Path

    @property
    def certificate(self):
        return self.issued.certificate


def leaf_name(prefix: str, index: int, count: int) -> str:
    """Name of the index-th (1-based) leaf: bare prefix for a single leaf."""
    return f"{prefix}{index}" if count > 1 else prefix


def check_leaf_name(name: str, issuer: IssuerContext) -> None:
    """
    Check that a leaf name can be used as commonName and filename.

    Raises:
        CertificateNamingError: If the name is empty or equals the CA's
            commonName (its <name>.key.pem would replace the CA key)
    """
    if not name:
        raise CertificateNamingError("Leaf name must not be empty")

    ca_name = SubjectAttributes.from_x509_name(issuer.certificate.subject).common_name
    if name == ca_name:
        raise CertificateNamingError(
            f"Leaf name {name!r} equals the CA commonName and would overwrite {name}.key.pem"
        )


class Provisioner:
    """
    Writes issued certificates and keys to an output directory.

    Orchestrates root, leaf batch and verification issuance.
    """

    def __init__(self, output_dir: Union[str, Path], issuer: Optional[ChainIssuer] = None):
        """
        Args:
            output_dir: Directory receiving all generated files
            issuer: Certificate issuer (default: ChainIssuer with default settings)
        """
        self.output_dir = Path(output_dir)
        self.issuer = issuer or ChainIssuer()

    def generate_root(self, attributes: SubjectAttributes) -> ProvisionedCertificate:
        """
        Issue a root CA and write its key and certificate.

        Raises:
            CertificateNamingError: If attributes have no commonName
        """
        name = attributes.require_common_name()
        self.output_dir.mkdir(parents=True, exist_ok=True)

        root = self.issuer.issue_root(attributes)

        key_path = write_pem(self.output_dir / f"{name}.key.pem", private_key_to_pem(root.key_pair))
        cert_path = write_pem(
            self.output_dir / f"{name}.cert.pem", certificate_to_pem(root.certificate)
        )

        logger.info(f"Root CA written to {cert_path}")
        return ProvisionedCertificate(name, root, cert_path, key_path)

    def generate_leaves(
        self,
        count: int,
        prefix: str,
        issuer: IssuerContext,
        attributes: Optional[AttributesLike] = None,
    ) -> List[ProvisionedCertificate]:
        """
        Issue `count` leaves named after `prefix`.

        Args:
            count: Number of leaves (prefix alone when 1, prefix1..prefixN otherwise)
            prefix: Leaf name prefix, used as commonName and filename
            issuer: Signing CA
            attributes: Base subject (default: the CA's subject)

        Returns:
            One ProvisionedCertificate per leaf, in issuance order

        Raises:
            ValueError: If count is not positive
            CertificateNamingError: If a leaf name is empty or clashes with the CA
            SigningIntegrityError: If a leaf does not verify against the CA
        """
        if count < 1:
            raise ValueError(f"Leaf count must be at least 1, got {count}")

        names = [leaf_name(prefix, index, count) for index in range(1, count + 1)]
        for name in names:
            check_leaf_name(name, issuer)

        base = attributes if attributes is not None else issuer.certificate.subject
        provisioned = []

        for name in names:
            leaf = self.issuer.issue_leaf(leaf_subject(base, name), issuer)
            provisioned.append(self._write_bundle(name, f"{name}.pem", leaf, issuer))

        logger.info(f"{count} leaf certificate(s) written to {self.output_dir}")
        return provisioned

    def generate_verification(
        self,
        verification_code: str,
        issuer: IssuerContext,
        attributes: Optional[AttributesLike] = None,
    ) -> ProvisionedCertificate:
        """
        Issue the proof-of-possession certificate and write verified.pem.

        Args:
            verification_code: One-time code supplied by the device-cloud platform
            issuer: CA whose possession is being proven
            attributes: Base subject (default: the CA's subject)

        Raises:
            CertificateNamingError: If the code is empty, or the CA's
                commonName is "verification"
        """
        if not verification_code:
            raise CertificateNamingError("Verification code must not be empty")
        check_leaf_name(VERIFICATION_NAME, issuer)

        verification = self.issuer.issue_verification(verification_code, issuer, attributes)
        provisioned = self._write_bundle(
            VERIFICATION_NAME, VERIFICATION_FILENAME, verification, issuer
        )

        logger.info(f"Verification certificate written to {provisioned.certificate_path}")
        return provisioned

    def _write_bundle(
        self,
        name: str,
        filename: str,
        issued: IssuedCertificate,
        issuer: IssuerContext,
    ) -> ProvisionedCertificate:
        """Write a leaf's key and its leaf + CA certificate bundle."""
        key_path = write_pem(self.output_dir / f"{name}.key.pem", private_key_to_pem(issued.key_pair))
        cert_path = write_pem(
            self.output_dir / filename, chain_to_pem(issued.certificate, issuer.certificate)
        )
        return ProvisionedCertificate(name, issued, cert_path, key_path)
