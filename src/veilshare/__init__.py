# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Veilshare Contributors

"""Veilshare - confidential research data sharing registry.

Contributors register references to sensitive datasets, requesters ask for
access, and a platform authority arbitrates grants, quality ratings and
rewards. Dataset values, quality scores, budgets and rewards are only ever
held as opaque handles issued by an encryption oracle.

Architecture:
  SequenceAllocator -> ids for datasets and requests
  EncryptionOracleClient -> wrap plaintexts, grant decryption rights
  DatasetRegistry / AccessGrantEngine / RequestLedger / RewardLedger
  DataSharingPlatform -> one transaction per operation, events on commit
"""

__version__ = "1.0.0"

from .registry import DataSharingPlatform as DataSharingPlatform

__all__ = ["DataSharingPlatform", "__version__"]
