# SPDX-License-Identifier: Apache-2.0
# Copyright (C) 2024-2026 The Birthmark Standard Foundation

"""
Subject attributes for issued certificates.

Attributes are kept as an ordered sequence so the distinguished name of a
leaf lists its components in the same order as the root it was cloned from.
"""

from dataclasses import dataclass
from typing import Iterable, Iterator, Optional, Union

from cryptography import x509
from cryptography.x509.oid import NameOID

from ..exceptions import CertificateNamingError


# (long name, short name, OID)
ATTRIBUTE_NAMES = (
    ("commonName", "CN", NameOID.COMMON_NAME),
    ("countryName", "C", NameOID.COUNTRY_NAME),
    ("stateOrProvinceName", "ST", NameOID.STATE_OR_PROVINCE_NAME),
    ("localityName", "L", NameOID.LOCALITY_NAME),
    ("organizationName", "O", NameOID.ORGANIZATION_NAME),
    ("organizationalUnitName", "OU", NameOID.ORGANIZATIONAL_UNIT_NAME),
)

_BY_NAME = {long: oid for long, _, oid in ATTRIBUTE_NAMES}
_BY_NAME.update({short: oid for _, short, oid in ATTRIBUTE_NAMES})

_BY_OID = {oid: (long, short) for long, short, oid in ATTRIBUTE_NAMES}


@dataclass(frozen=True)
class SubjectAttribute:
    """A single {name, value} entry of a certificate subject."""

    oid: x509.ObjectIdentifier
    value: str

    @classmethod
    def named(cls, name: str, value: str) -> "SubjectAttribute":
        """
        Create an attribute from its long or short name.

        Args:
            name: e.g. "commonName", "CN", "ST", "OU"
            value: Attribute value

        Raises:
            ValueError: If the name is not a supported subject attribute
        """
        oid = _BY_NAME.get(name)
        if oid is None:
            raise ValueError(f"Unsupported subject attribute: {name}")
        return cls(oid=oid, value=value)

    @property
    def name(self) -> str:
        return _BY_OID.get(self.oid, (self.oid.dotted_string, None))[0]

    @property
    def short_name(self) -> Optional[str]:
        return _BY_OID.get(self.oid, (None, None))[1]

    @property
    def is_common_name(self) -> bool:
        return self.oid == NameOID.COMMON_NAME


@dataclass(frozen=True)
class SubjectAttributes:
    """Ordered subject attribute list (commonName, countryName, ST, ...)."""

    attributes: tuple[SubjectAttribute, ...] = ()

    @classmethod
    def from_pairs(
        cls, pairs: Iterable[tuple[str, str]]
    ) -> "SubjectAttributes":
        """Build from (name, value) pairs, keeping their order."""
        return cls(tuple(SubjectAttribute.named(name, value) for name, value in pairs))

    @classmethod
    def from_x509_name(cls, name: x509.Name) -> "SubjectAttributes":
        """Build from a parsed certificate subject or issuer."""
        return cls(tuple(SubjectAttribute(attr.oid, attr.value) for attr in name))

    def __iter__(self) -> Iterator[SubjectAttribute]:
        return iter(self.attributes)

    def __len__(self) -> int:
        return len(self.attributes)

    @property
    def common_name(self) -> Optional[str]:
        """First commonName value, or None if the subject has none."""
        for attr in self.attributes:
            if attr.is_common_name:
                return attr.value
        return None

    def require_common_name(self) -> str:
        """
        Return the commonName used for output filenames.

        Raises:
            CertificateNamingError: If no commonName is present
        """
        common_name = self.common_name
        if not common_name:
            raise CertificateNamingError("Subject attributes have no commonName")
        return common_name

    def with_common_name(self, common_name: str) -> "SubjectAttributes":
        """
        Clone the attributes with the commonName entry replaced.

        Every other entry is copied unchanged and in place. A commonName is
        appended when the source has none.
        """
        replaced = False
        attributes = []
        for attr in self.attributes:
            if attr.is_common_name:
                attributes.append(SubjectAttribute(NameOID.COMMON_NAME, common_name))
                replaced = True
            else:
                attributes.append(attr)

        if not replaced:
            attributes.append(SubjectAttribute(NameOID.COMMON_NAME, common_name))

        return SubjectAttributes(tuple(attributes))

    def to_x509_name(self) -> x509.Name:
        """Convert to an x509.Name with one attribute per RDN, order preserved."""
        return x509.Name([
            x509.NameAttribute(attr.oid, attr.value) for attr in self.attributes
        ])


AttributesLike = Union[SubjectAttributes, x509.Name]


def as_subject_attributes(value: AttributesLike) -> SubjectAttributes:
    """Accept either SubjectAttributes or an x509.Name."""
    if isinstance(value, x509.Name):
        return SubjectAttributes.from_x509_name(value)
    return value
