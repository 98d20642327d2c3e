# SPDX-License-Identifier: Apache-2.0
# Copyright (C) 2024-2026 The Birthmark Standard Foundation

"""Tests for the command line front end."""

import pytest
from cryptography.x509.oid import NameOID

from iot_ca.certificates import read_certificate_chain_pem, read_certificate_pem, verify_issued_by
from iot_ca.cli import build_parser, main


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    """Run each CLI test from an empty directory with fast key settings."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("IOT_CA_KEY_BITS", "2048")
    monkeypatch.delenv("IOT_CA_PASSPHRASE", raising=False)


class TestParser:
    """Test argument parsing."""

    def test_key_bits_choices(self):
        """Test that only supported key sizes are accepted."""
        parser = build_parser()
        assert parser.parse_args(["root", "--key-bits", "1024"]).key_bits == 1024
        with pytest.raises(SystemExit):
            parser.parse_args(["root", "--key-bits", "512"])

    def test_verify_requires_ca(self):
        """Test that verify needs the CA certificate and key."""
        with pytest.raises(SystemExit):
            build_parser().parse_args(["verify", "CODE"])


class TestCommands:
    """Test end-to-end command runs."""

    def test_root_with_defaults(self, tmp_path):
        """Test root generation with the default subject."""
        out = tmp_path / "certs"
        assert main(["root", "--out", str(out)]) == 0

        cert = read_certificate_pem(out / "AzureIoTCentral.cert.pem")
        assert cert.issuer == cert.subject
        assert cert.subject.get_attributes_for_oid(NameOID.COUNTRY_NAME)[0].value == "US"
        assert cert.public_key().key_size == 2048
        assert (out / "AzureIoTCentral.key.pem").exists()

    def test_root_leaves_and_verification(self, tmp_path):
        """Test a full run: root, two leaves and verified.pem."""
        out = tmp_path / "certs"
        code = main([
            "root", "--out", str(out), "--cn", "MyCA", "--org", "Contoso",
            "--leaves", "2", "--prefix", "dev", "--verification-code", "1234ABCD",
        ])
        assert code == 0

        root = read_certificate_pem(out / "MyCA.cert.pem")
        for name in ("dev1.pem", "dev2.pem", "verified.pem"):
            leaf, ca = read_certificate_chain_pem(out / name)
            assert ca == root
            verify_issued_by(leaf, root)

        verified = read_certificate_pem(out / "verified.pem")
        assert verified.subject.get_attributes_for_oid(NameOID.COMMON_NAME)[0].value == "1234ABCD"
        assert verified.subject.get_attributes_for_oid(NameOID.ORGANIZATION_NAME)[0].value == "Contoso"

    def test_verify_existing_ca(self, tmp_path, capsys):
        """Test verification against a CA loaded from disk, with an encrypted key."""
        out = tmp_path / "certs"
        assert main(["root", "--out", str(out), "--passphrase", "pw"]) == 0

        code = main([
            "verify", "CAFEBABE", "--out", str(out),
            "--ca-cert", str(out / "AzureIoTCentral.cert.pem"),
            "--ca-key", str(out / "AzureIoTCentral.key.pem"),
            "--ca-passphrase", "pw",
        ])
        assert code == 0
        assert "Verification certificate created" in capsys.readouterr().out

        leaf, ca = read_certificate_chain_pem(out / "verified.pem")
        assert leaf.subject.get_attributes_for_oid(NameOID.COMMON_NAME)[0].value == "CAFEBABE"
        verify_issued_by(leaf, ca)

    def test_leaves_from_existing_ca(self, tmp_path):
        """Test leaf issuance from a CA loaded from disk."""
        out = tmp_path / "certs"
        assert main(["root", "--out", str(out)]) == 0

        code = main([
            "leaves", "--out", str(out / "devices"),
            "--ca-cert", str(out / "AzureIoTCentral.cert.pem"),
            "--ca-key", str(out / "AzureIoTCentral.key.pem"),
            "--count", "1", "--prefix", "thermostat",
        ])
        assert code == 0
        assert (out / "devices" / "thermostat.pem").exists()
        assert (out / "devices" / "thermostat.key.pem").exists()

    def test_missing_ca_file(self, tmp_path, capsys):
        """Test that a missing CA file fails with the underlying message."""
        code = main([
            "verify", "CODE", "--out", str(tmp_path),
            "--ca-cert", str(tmp_path / "nope.cert.pem"),
            "--ca-key", str(tmp_path / "nope.key.pem"),
        ])
        assert code == 1
        assert "nope.cert.pem" in capsys.readouterr().err

    def test_encrypted_key_without_passphrase(self, tmp_path, capsys):
        """Test that an encrypted CA key without passphrase is an error, not a crash."""
        out = tmp_path / "certs"
        assert main(["root", "--out", str(out), "--passphrase", "pw"]) == 0

        code = main([
            "verify", "CODE", "--out", str(out),
            "--ca-cert", str(out / "AzureIoTCentral.cert.pem"),
            "--ca-key", str(out / "AzureIoTCentral.key.pem"),
        ])
        assert code == 1
        assert capsys.readouterr().err.startswith("Error:")

    def test_invalid_configuration(self, monkeypatch, capsys):
        """Test that an unsupported key size in the environment is rejected."""
        monkeypatch.setenv("IOT_CA_KEY_BITS", "3000")
        assert main(["root"]) == 1
        assert "key_bits" in capsys.readouterr().err

    def test_prefix_without_leaves(self, tmp_path):
        """Test that --prefix alone issues one leaf under that name."""
        out = tmp_path / "certs"
        assert main(["root", "--out", str(out), "--prefix", "gateway"]) == 0

        leaf, ca = read_certificate_chain_pem(out / "gateway.pem")
        assert leaf.subject.get_attributes_for_oid(NameOID.COMMON_NAME)[0].value == "gateway"
        verify_issued_by(leaf, ca)

    def test_leaves_zero_with_prefix(self, tmp_path):
        """Test that an explicit --leaves 0 issues no leaf."""
        out = tmp_path / "certs"
        assert main(["root", "--out", str(out), "--leaves", "0", "--prefix", "gateway"]) == 0
        assert not (out / "gateway.pem").exists()

    def test_leaf_named_like_ca(self, tmp_path, capsys):
        """Test that a leaf prefix equal to the root commonName is rejected."""
        out = tmp_path / "certs"
        code = main(["root", "--out", str(out), "--leaves", "1", "--prefix", "AzureIoTCentral"])

        assert code == 1
        assert "AzureIoTCentral" in capsys.readouterr().err
        assert not (out / "AzureIoTCentral.pem").exists()

    def test_settings_reach_issuer(self, tmp_path, monkeypatch):
        """Test that serial strategy and validity come from the environment."""
        monkeypatch.setenv("IOT_CA_SERIAL_STRATEGY", "legacy")
        monkeypatch.setenv("IOT_CA_VALIDITY_YEARS", "2")
        out = tmp_path / "certs"
        assert main(["root", "--out", str(out)]) == 0

        cert = read_certificate_pem(out / "AzureIoTCentral.cert.pem")
        assert 1 <= cert.serial_number < 1000
        assert cert.not_valid_after_utc.year == cert.not_valid_before_utc.year + 2
