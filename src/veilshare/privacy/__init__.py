"""Confidential value handling: the encryption oracle interface."""

from .oracle import (
    REGISTRY_PRINCIPAL,
    EncryptionOracleClient,
    Handle,
    LocalEncryptionOracle,
)

__all__ = [
    "EncryptionOracleClient",
    "Handle",
    "LocalEncryptionOracle",
    "REGISTRY_PRINCIPAL",
]
