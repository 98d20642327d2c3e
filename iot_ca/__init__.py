# SPDX-License-Identifier: Apache-2.0
# Copyright (C) 2024-2026 The Birthmark Standard Foundation

"""
iot-ca: self-signed CA and verification certificate generator.

Issues an RSA root CA, device leaf certificates signed by it, and the
single-use verification certificate a device-cloud platform asks for to
prove possession of the CA private key.
"""

__version__ = "0.1.0"
