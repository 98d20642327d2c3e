# SPDX-License-Identifier: Apache-2.0
# Copyright (C) 2024-2026 The Birthmark Standard Foundation

"""Pytest configuration and fixtures."""

import pytest

from iot_ca.certificates import ChainIssuer, SubjectAttributes

# Smaller keys keep the suite fast; 4096 is exercised by the CLI defaults only
TEST_KEY_BITS = 2048


@pytest.fixture(scope="session")
def subject() -> SubjectAttributes:
    """Root CA subject with the default attribute values."""
    return SubjectAttributes.from_pairs([
        ("commonName", "AzureIoTCentral"),
        ("countryName", "US"),
        ("ST", "Washington"),
        ("localityName", "Redmond"),
        ("organizationName", "Azure"),
        ("OU", "Azure IoT Central"),
    ])


@pytest.fixture(scope="session")
def issuer() -> ChainIssuer:
    """Issuer generating 2048-bit keys."""
    return ChainIssuer(key_bits=TEST_KEY_BITS)


@pytest.fixture(scope="session")
def root(issuer, subject):
    """A root CA shared by the whole session."""
    return issuer.issue_root(subject)


@pytest.fixture(scope="session")
def ca(root):
    """Signing capability of the shared root CA."""
    return root.issuer_context


@pytest.fixture(scope="session")
def other_root(issuer, subject):
    """A second root with the same subject but a different key."""
    return issuer.issue_root(subject)
