# SPDX-License-Identifier: Apache-2.0
# Copyright (C) 2024-2026 The Birthmark Standard Foundation

"""Configuration management for the certificate generator."""

from typing import Literal, Optional
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .certificates.keys import SUPPORTED_KEY_BITS


class Settings(BaseSettings):
    """Settings loaded from IOT_CA_* environment variables or a .env file."""

    model_config = SettingsConfigDict(
        env_prefix="IOT_CA_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Output
    output_dir: str = "."

    # Key generation
    key_bits: int = 4096
    passphrase: Optional[str] = None

    # Certificates
    validity_years: int = 1
    serial_strategy: Literal["random", "legacy"] = "random"
    leaf_prefix: str = "device"

    # Default subject (root CA)
    common_name: str = "AzureIoTCentral"
    country_name: str = "US"
    state_name: str = "Washington"
    locality_name: str = "Redmond"
    organization_name: str = "Azure"
    organization_unit: str = "Azure IoT Central"

    # Logging
    log_level: str = "INFO"

    @field_validator("key_bits")
    @classmethod
    def _check_key_bits(cls, value: int) -> int:
        if value not in SUPPORTED_KEY_BITS:
            raise ValueError(f"key_bits must be one of {SUPPORTED_KEY_BITS}, got {value}")
        return value

    @field_validator("validity_years")
    @classmethod
    def _check_validity_years(cls, value: int) -> int:
        if value < 1:
            raise ValueError(f"validity_years must be at least 1, got {value}")
        return value

    @property
    def subject_pairs(self) -> list[tuple[str, str]]:
        """Default subject attributes, in distinguished-name order."""
        return [
            ("commonName", self.common_name),
            ("countryName", self.country_name),
            ("ST", self.state_name),
            ("localityName", self.locality_name),
            ("organizationName", self.organization_name),
            ("OU", self.organization_unit),
        ]


def get_settings() -> Settings:
    """Load settings from the current environment."""
    return Settings()
