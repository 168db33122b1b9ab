# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Veilshare Contributors

"""Dataset registry: contributed dataset records and their lifecycle.

A dataset starts Active and can be deactivated once by its contributor or
the platform authority. Inactive is terminal.

The dataset's value and quality score are only ever held as oracle handles.
The contributor is allowed on both handles at contribution time.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from ..core.config import CoreSettings
from ..core.events import DatasetContributed, QualityScoreUpdated, RegistryEvent
from ..core.exceptions import NotFoundError, StateError, ValidationError
from ..core.guards import GuardResult, check, require
from ..core.models import Dataset, DatasetPublicView
from ..core.sequence import DATASET, SequenceAllocator
from ..core.store import RegistryState
from ..privacy.oracle import EncryptionOracleClient, Handle
from .authority import PlatformAuthority

logger = logging.getLogger(__name__)

MAX_QUALITY_SCORE = 100


# ============================================================================
# Guards
# ============================================================================


def dataset_in_range(state: RegistryState, dataset_id: int) -> GuardResult:
    """Pass when the id was allocated by a committed contribution."""
    return check(
        1 <= dataset_id < state.counters[DATASET] and dataset_id in state.datasets,
        "Invalid dataset ID",
        lambda: NotFoundError("dataset", dataset_id),
    )


def dataset_active(dataset: Dataset) -> GuardResult:
    return check(
        dataset.is_active,
        "Dataset not active",
        lambda: StateError("Dataset not active", resource_id=dataset.id),
    )


def quality_score_in_range(score: int) -> GuardResult:
    return check(
        0 <= score <= MAX_QUALITY_SCORE,
        f"Quality score must be 0-{MAX_QUALITY_SCORE}",
        lambda: ValidationError(f"Quality score must be 0-{MAX_QUALITY_SCORE}", field="quality_score", value=score),
    )


def valid_dataset(state: RegistryState, dataset_id: int) -> Dataset:
    """Return a dataset that exists and is active, or raise."""
    require(dataset_in_range(state, dataset_id))
    dataset = state.datasets[dataset_id]
    require(dataset_active(dataset))
    return dataset


# ============================================================================
# Registry
# ============================================================================


class DatasetRegistry:
    """Owns dataset records and their active/inactive state machine."""

    def __init__(
        self,
        state: RegistryState,
        sequence: SequenceAllocator,
        oracle: EncryptionOracleClient,
        authority: PlatformAuthority,
        emit: Callable[[RegistryEvent], None],
        clock: Callable[[], int],
        settings: CoreSettings,
    ):
        self.state = state
        self.sequence = sequence
        self.oracle = oracle
        self.authority = authority
        self.emit = emit
        self.clock = clock
        self.settings = settings

    def get(self, dataset_id: int) -> Dataset:
        """Return a dataset record regardless of its activity."""
        require(dataset_in_range(self.state, dataset_id))
        return self.state.datasets[dataset_id]

    def contribute(
        self,
        contributor: str,
        plain_value: int,
        plain_quality_score: int,
        metadata_hash: str,
        is_public: bool,
    ) -> int:
        """Register a dataset and return its id.

        Args:
            contributor: Principal registering the dataset.
            plain_value: Value to wrap. Never stored in the clear.
            plain_quality_score: Initial quality score, 0-100.
            metadata_hash: Content-addressed reference to off-registry content.
            is_public: Whether anyone may read the public fields without a grant.

        Returns:
            The new dataset id.

        Raises:
            ValidationError: If the score is out of range or the hash is empty.
        """
        require(
            quality_score_in_range(plain_quality_score),
            check(
                bool(metadata_hash),
                "Metadata hash required",
                lambda: ValidationError("Metadata hash required", field="metadata_hash"),
            ),
        )

        value_handle = self._wrap_for(plain_value, self.settings.value_bit_width, contributor)
        quality_handle = self._wrap_for(plain_quality_score, self.settings.quality_bit_width, contributor)

        dataset_id = self.sequence.next(DATASET)
        dataset = Dataset(
            id=dataset_id,
            contributor=contributor,
            value_handle=value_handle,
            quality_handle=quality_handle,
            metadata_hash=metadata_hash,
            is_public=bool(is_public),
            created_at=self.clock(),
        )
        self.state.add_dataset(dataset)

        self.emit(DatasetContributed(dataset_id=dataset_id, contributor=contributor, metadata_hash=metadata_hash))
        logger.info(f"Dataset {dataset_id} contributed by {contributor} (public={bool(is_public)})")
        return dataset_id

    def update_quality_score(self, dataset_id: int, new_score: int, caller: str) -> None:
        """Replace a dataset's quality handle with a freshly wrapped score.

        Only the platform authority may rescore. When
        ``propagate_grants_on_rescore`` is set, the contributor and every
        current grantee are allowed on the replacement handle.
        """
        require(self.authority.guard(caller))
        dataset = valid_dataset(self.state, dataset_id)
        require(quality_score_in_range(new_score))

        handle = self.oracle.wrap(new_score, self.settings.quality_bit_width)
        self.oracle.allow_self(handle)
        if self.settings.propagate_grants_on_rescore:
            for principal in self._readers(dataset):
                self.oracle.allow_principal(handle, principal)
        self.state.set_field(dataset, "quality_handle", handle)

        self.emit(QualityScoreUpdated(dataset_id=dataset_id, new_score=new_score))
        logger.info(f"Quality score of dataset {dataset_id} updated by {caller}")

    def deactivate(self, dataset_id: int, caller: str) -> None:
        """Move a dataset to the terminal Inactive state."""
        dataset = valid_dataset(self.state, dataset_id)
        require(self.authority.guard_owner_or_authority(caller, dataset.contributor))
        self.state.set_field(dataset, "is_active", False)
        logger.info(f"Dataset {dataset_id} deactivated by {caller}")

    def get_info(self, dataset_id: int, include_inactive: bool = False) -> DatasetPublicView:
        """Non-confidential projection of a dataset.

        Inactive datasets raise StateError unless ``include_inactive`` is set.
        """
        if include_inactive:
            return self.get(dataset_id).public_view()
        return valid_dataset(self.state, dataset_id).public_view()

    def contributor_datasets(self, principal: str) -> list[int]:
        return list(self.state.contributor_datasets.get(principal, []))

    def _wrap_for(self, plaintext: int, bit_width: int, principal: str) -> Handle:
        handle = self.oracle.wrap(plaintext, bit_width)
        self.oracle.allow_self(handle)
        self.oracle.allow_principal(handle, principal)
        return handle

    def _readers(self, dataset: Dataset) -> list[str]:
        readers = [dataset.contributor]
        for (granted_id, principal), granted in self.state.grants.items():
            if granted_id == dataset.id and granted and principal not in readers:
                readers.append(principal)
        return readers
