# SPDX-License-Identifier: Apache-2.0
# Copyright (C) 2024-2026 The Birthmark Standard Foundation

"""Unit tests for PEM encoding and file I/O."""

import pytest

from iot_ca.certificates import (
    ChainIssuer,
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


class TestCertificatePem:
    """Test certificate encoding."""

    def test_round_trip(self, root):
        """Test that subject, issuer, serial and validity survive PEM."""
        cert = root.certificate
        pem = certificate_to_pem(cert)
        parsed = certificate_from_pem(pem)

        assert pem.startswith("-----BEGIN CERTIFICATE-----")
        assert parsed.subject == cert.subject
        assert parsed.issuer == cert.issuer
        assert parsed.serial_number == cert.serial_number
        assert parsed.not_valid_before_utc == cert.not_valid_before_utc
        assert parsed.not_valid_after_utc == cert.not_valid_after_utc

    def test_chain_is_plain_concatenation(self, root, other_root):
        """Test that a chain is the PEM blocks back to back."""
        pem = chain_to_pem(other_root.certificate, root.certificate)

        assert pem == certificate_to_pem(other_root.certificate) + certificate_to_pem(root.certificate)
        assert pem.count("-----BEGIN CERTIFICATE-----") == 2
        assert certificates_from_pem(pem) == [other_root.certificate, root.certificate]

    def test_first_certificate_of_bundle(self, root, other_root):
        """Test that reading a bundle as one certificate returns the first block."""
        pem = chain_to_pem(other_root.certificate, root.certificate)
        assert certificate_from_pem(pem) == other_root.certificate


class TestPemFiles:
    """Test reading and writing PEM files."""

    def test_write_creates_directories(self, tmp_path, root):
        """Test that missing parent directories are created."""
        target = tmp_path / "a" / "b" / "c" / "root.cert.pem"
        written = write_pem(target, certificate_to_pem(root.certificate))

        assert written == target
        assert target.exists()
        assert read_certificate_pem(target) == root.certificate

    def test_read_chain(self, tmp_path, root, other_root):
        """Test reading every certificate of a bundle file."""
        path = write_pem(tmp_path / "bundle.pem", chain_to_pem(other_root.certificate, root.certificate))
        assert read_certificate_chain_pem(path) == [other_root.certificate, root.certificate]

    def test_read_clear_key(self, tmp_path, root):
        """Test reading an unencrypted key."""
        path = write_pem(tmp_path / "root.key.pem", private_key_to_pem(root.key_pair))
        key = read_private_key_pem(path)
        assert key.private_numbers() == root.key_pair.private_key.private_numbers()

    def test_read_encrypted_key(self, tmp_path, subject):
        """Test that an encrypted key needs its passphrase."""
        root = ChainIssuer(key_bits=2048, passphrase="pass").issue_root(subject)
        path = write_pem(tmp_path / "root.key.pem", private_key_to_pem(root.key_pair))

        assert "ENCRYPTED" in path.read_text()
        with pytest.raises(TypeError):
            read_private_key_pem(path)

        key = read_private_key_pem(path, passphrase="pass")
        assert key.private_numbers() == root.key_pair.private_key.private_numbers()

    def test_read_missing_file(self, tmp_path):
        """Test that filesystem errors surface unchanged."""
        with pytest.raises(FileNotFoundError):
            read_certificate_pem(tmp_path / "missing.pem")
