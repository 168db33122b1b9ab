#!/usr/bin/env python3
"""Example: simulate a full research data sharing lifecycle.

This example walks the registry through:
1. Researchers contributing public and private datasets
2. Researchers requesting data access with wrapped budgets
3. Contributors and the platform granting access
4. Reading datasets as grantees
5. Rescoring datasets and distributing rewards
6. Deactivating a dataset and printing platform statistics

Requirements:
    - `pip install -e .` or run from source

Usage:
    python examples/simulate.py
"""

from __future__ import annotations

import sys
from pathlib import Path

# Add src to path when running from source
src_path = Path(__file__).parent.parent / "src"
if src_path.exists():
    sys.path.insert(0, str(src_path))

from veilshare import DataSharingPlatform
from veilshare.core import VeilshareException, configure_logging
from veilshare.privacy import LocalEncryptionOracle

OWNER = "did:example:platform"
RESEARCHERS = {
    "alice": "did:example:alice",
    "bob": "did:example:bob",
    "carol": "did:example:carol",
}

DATASETS = [
    ("alice", 12345, 85, "QmCancerResearchData2024", True),
    ("bob", 67890, 92, "QmGenomicsStudyData2024", False),
    ("carol", 11111, 78, "QmClinicalTrialData2024", True),
]

REQUESTS = [
    ("bob", "Cancer Treatment Efficacy", 50000, 30),
    ("carol", "Genetic Markers Analysis", 75000, 60),
]


def main() -> int:
    configure_logging(level="WARNING", json_format=False)

    oracle = LocalEncryptionOracle()
    platform = DataSharingPlatform(authority=OWNER, oracle=oracle)
    platform.subscribe(lambda event: print(f"  event: {event.to_dict()}"))

    print("Contributing datasets...")
    dataset_ids = {}
    for name, value, quality, metadata_hash, is_public in DATASETS:
        dataset_ids[name] = platform.contribute_data(RESEARCHERS[name], value, quality, metadata_hash, is_public)

    print("\nRequesting data access...")
    now = platform.get_platform_stats().current_time
    for name, topic, budget, days in REQUESTS:
        platform.request_data_access(RESEARCHERS[name], topic, budget, now + days * 86400)

    print("\nGranting access...")
    platform.grant_data_access(RESEARCHERS["bob"], dataset_ids["bob"], RESEARCHERS["carol"])
    platform.grant_data_access(OWNER, dataset_ids["alice"], RESEARCHERS["bob"])

    print("\nAccessing datasets...")
    carol_view = platform.access_dataset(RESEARCHERS["carol"], dataset_ids["bob"])
    print(f"  carol read {carol_view.metadata_hash} (granted {carol_view.access_count} time(s))")
    value_handle = platform.datasets.get(dataset_ids["bob"]).value_handle
    print(f"  carol decrypts bob's value: {oracle.decrypt(value_handle, RESEARCHERS['carol'])}")

    try:
        platform.access_dataset(RESEARCHERS["alice"], dataset_ids["bob"])
    except VeilshareException as e:
        print(f"  alice denied: {e.message}")

    print("\nUpdating quality scores...")
    platform.update_quality_score(OWNER, dataset_ids["alice"], 95)

    print("\nDistributing rewards...")
    for name, amount in (("alice", 1000), ("bob", 1500), ("carol", 800)):
        platform.distribute_reward(OWNER, RESEARCHERS[name], dataset_ids[name], amount)

    print("\nDeactivating carol's dataset...")
    platform.deactivate_dataset(RESEARCHERS["carol"], dataset_ids["carol"])

    stats = platform.get_platform_stats()
    print("\nPlatform statistics:")
    print(f"  total datasets: {stats.total_datasets}")
    print(f"  total requests: {stats.total_requests}")
    for name, principal in RESEARCHERS.items():
        print(
            f"  {name}: {platform.get_contributor_dataset_count(principal)} dataset(s), "
            f"{platform.get_contributor_reward_count(principal)} reward(s)"
        )
    return 0


if __name__ == "__main__":
    sys.exit(main())
