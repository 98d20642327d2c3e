# SPDX-License-Identifier: Apache-2.0
# Copyright (C) 2024-2026 The Birthmark Standard Foundation

"""
Command line front end.

Sub-commands:
    root    Create a root CA (optionally leaves and a verification cert)
    leaves  Issue device certificates from an existing CA
    verify  Issue verified.pem for a platform verification code
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from pydantic import ValidationError

from .certificates.attributes import SubjectAttributes
from .certificates.issuer import ChainIssuer, IssuerContext
from .certificates.keys import SUPPORTED_KEY_BITS
from .config import Settings, get_settings
from .exceptions import CertificateError
from .provisioning import Provisioner

logger = logging.getLogger(__name__)

# Subject flags: (option, dest and settings field, attribute name, help)
SUBJECT_OPTIONS = (
    ("--cn", "common_name", "commonName", "Common Name (CN)"),
    ("--country", "country_name", "countryName", "2-letter country name"),
    ("--state", "state_name", "ST", "State name"),
    ("--locality", "locality_name", "localityName", "Locality name"),
    ("--org", "organization_name", "organizationName", "Organization name"),
    ("--ou", "organization_unit", "OU", "Organization unit name"),
)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="iot-ca",
        description="Self-signed CA and verification certificate generator",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Root CA with default subject, encrypted key
  iot-ca root --out certs --passphrase secret

  # Root CA plus verification certificate in one go
  iot-ca root --out certs --verification-code 0A1B2C3D

  # Three device certificates (device1.pem .. device3.pem)
  iot-ca leaves --out certs --ca-cert certs/AzureIoTCentral.cert.pem \\
      --ca-key certs/AzureIoTCentral.key.pem --count 3 --prefix device

  # Verification certificate for an existing CA
  iot-ca verify 0A1B2C3D --out certs --ca-cert certs/AzureIoTCentral.cert.pem \\
      --ca-key certs/AzureIoTCentral.key.pem
        """
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    def add_common(sub: argparse.ArgumentParser) -> None:
        sub.add_argument(
            "--out",
            type=Path,
            help="Output directory, created if missing (default: IOT_CA_OUTPUT_DIR or .)"
        )
        sub.add_argument(
            "--key-bits",
            type=int,
            choices=SUPPORTED_KEY_BITS,
            help="RSA key length for generated keys (default: 4096)"
        )
        sub.add_argument(
            "--passphrase",
            help="Encrypt generated private keys with this passphrase"
        )

    def add_ca(sub: argparse.ArgumentParser) -> None:
        sub.add_argument("--ca-cert", type=Path, required=True, help="Signing CA certificate (PEM)")
        sub.add_argument("--ca-key", type=Path, required=True, help="Signing CA private key (PEM)")
        sub.add_argument("--ca-passphrase", help="Passphrase of the CA private key")

    root = subparsers.add_parser("root", help="Create a root CA")
    add_common(root)
    for option, dest, _, help_text in SUBJECT_OPTIONS:
        root.add_argument(option, dest=dest, help=help_text)
    root.add_argument(
        "--leaves",
        type=int,
        help="Number of leaf certificates to issue (default: 1 with --prefix, else 0)"
    )
    root.add_argument("--prefix", help="Leaf name prefix (device => device1, device2, ...)")
    root.add_argument("--verification-code", help="Also issue verified.pem for this code")

    leaves = subparsers.add_parser("leaves", help="Issue leaf certificates from an existing CA")
    add_common(leaves)
    add_ca(leaves)
    leaves.add_argument("--count", type=int, default=1, help="Number of leaf certificates")
    leaves.add_argument("--prefix", help="Leaf name prefix (default: device)")

    verify = subparsers.add_parser("verify", help="Issue a verification certificate")
    add_common(verify)
    add_ca(verify)
    verify.add_argument("verification_code", help="Verification code from the platform")

    return parser


def subject_from_args(args: argparse.Namespace, settings: Settings) -> SubjectAttributes:
    """Subject attributes from CLI flags, falling back to settings defaults."""
    pairs = []
    for _, dest, name, _ in SUBJECT_OPTIONS:
        value = getattr(args, dest) or getattr(settings, dest)
        if value:
            pairs.append((name, value))
    return SubjectAttributes.from_pairs(pairs)


def run(args: argparse.Namespace, settings: Settings) -> Path:
    """Execute a parsed command and return the output directory."""
    issuer = ChainIssuer.from_settings(settings)
    if args.key_bits:
        issuer.key_bits = args.key_bits
    if args.passphrase:
        issuer.passphrase = args.passphrase

    output_dir = args.out or Path(settings.output_dir)
    provisioner = Provisioner(output_dir, issuer)

    if args.command == "root":
        root = provisioner.generate_root(subject_from_args(args, settings))
        ca = root.issued.issuer_context
        print(f"Successfully generated certificate and private key at '{output_dir.resolve()}'")
        # --prefix alone issues a single leaf
        leaves = args.leaves if args.leaves is not None else (1 if args.prefix else 0)
        if leaves > 0:
            provisioner.generate_leaves(leaves, args.prefix or settings.leaf_prefix, ca)
        if args.verification_code:
            provisioner.generate_verification(args.verification_code, ca)
            print(f"Verification certificate created at '{output_dir.resolve()}'")
        return output_dir

    ca = IssuerContext.load(args.ca_cert, args.ca_key, args.ca_passphrase)

    if args.command == "leaves":
        provisioner.generate_leaves(args.count, args.prefix or settings.leaf_prefix, ca)
        print(f"Leaf certificates created at '{output_dir.resolve()}'")
    elif args.command == "verify":
        provisioner.generate_verification(args.verification_code, ca)
        print(f"Verification certificate created at '{output_dir.resolve()}'")

    return output_dir


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    try:
        settings = get_settings()
    except ValidationError as e:
        print(f"Error: invalid configuration: {e}", file=sys.stderr)
        return 1

    logging.basicConfig(
        level=settings.log_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    )

    try:
        run(args, settings)
    except (CertificateError, OSError, ValueError, TypeError) as e:
        logger.debug("Certificate generation failed", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0
