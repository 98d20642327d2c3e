# SPDX-License-Identifier: Apache-2.0
# Copyright (C) 2024-2026 The Birthmark Standard Foundation

"""
Main entry point for running iot_ca as a module.

Allows running:
    python -m iot_ca root --out certs
"""

import sys

from .cli import main

if __name__ == "__main__":
    sys.exit(main())
