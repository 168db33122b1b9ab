# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Veilshare Contributors

"""DataSharingPlatform - the registry's public operation surface.

Wires the registries to one shared state, one sequence allocator, one oracle
and one authority, and runs each mutating operation as a single transaction
under a correlation ID:

    platform = DataSharingPlatform(authority="did:example:owner")
    dataset_id = platform.contribute_data("did:example:alice", 12345, 85, "QmHash", True)
    platform.grant_data_access("did:example:alice", dataset_id, "did:example:bob")
    platform.access_dataset("did:example:bob", dataset_id)

Callers are passed explicitly; the platform does no authentication of its own.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Generator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

from ..core.config import CoreSettings, get_config
from ..core.events import EventBus, EventHandler, RegistryEvent
from ..core.logging import correlation_context, operation_logger
from ..core.models import (
    Contribution,
    DatasetAccess,
    DatasetPublicView,
    PlatformStats,
    RequestPublicView,
)
from ..core.sequence import SequenceAllocator
from ..core.store import RegistryState, TransactionExecutor, load_snapshot, save_snapshot
from ..privacy.oracle import EncryptionOracleClient, Handle, LocalEncryptionOracle
from .access import AccessGrantEngine
from .authority import PlatformAuthority
from .datasets import DatasetRegistry
from .requests import RequestLedger
from .rewards import RewardLedger
from .stats import StatsAggregator

logger = logging.getLogger(__name__)


def system_clock() -> int:
    """Current Unix time in whole seconds."""
    return int(time.time())


class DataSharingPlatform:
    """Coordinates the registries behind one transactional executor."""

    def __init__(
        self,
        authority: str,
        oracle: EncryptionOracleClient | None = None,
        clock: Callable[[], int] | None = None,
        settings: CoreSettings | None = None,
        state: RegistryState | None = None,
    ):
        self.settings = settings or get_config()
        self.oracle = oracle if oracle is not None else LocalEncryptionOracle.from_config()
        self.clock = clock or system_clock
        self.authority = PlatformAuthority(authority)

        self.state = state if state is not None else RegistryState()
        self.bus = EventBus()
        self.executor = TransactionExecutor(self.state, self.bus)
        self.sequence = SequenceAllocator(self.state.counters)

        emit = self.executor.emit
        self.datasets = DatasetRegistry(
            self.state, self.sequence, self.oracle, self.authority, emit, self.clock, self.settings
        )
        self.access = AccessGrantEngine(self.state, self.oracle, self.authority, emit)
        self.requests = RequestLedger(self.state, self.sequence, self.oracle, emit, self.clock, self.settings)
        self.rewards = RewardLedger(self.state, self.oracle, self.authority, emit, self.settings)
        self.stats = StatsAggregator(self.state, self.clock)

        logger.info(f"Data sharing platform initialized (authority={authority})")

    @classmethod
    def from_snapshot(cls, path: str | Path, authority: str, **kwargs: Any) -> DataSharingPlatform:
        """Rebuild a platform from a JSON snapshot written by ``save``.

        Oracle access lists are not part of the snapshot. They are re-issued
        from the restored records so every principal who could decrypt a
        handle before saving can decrypt it after loading.
        """
        platform = cls(authority=authority, state=load_snapshot(path), **kwargs)
        platform._reissue_oracle_grants()
        return platform

    def save(self, path: str | Path) -> None:
        self.executor.read(lambda state: save_snapshot(state, path))

    def _reissue_oracle_grants(self) -> None:
        def allow(handle: Handle, principals: list[str]) -> None:
            self.oracle.allow_self(handle)
            for principal in principals:
                self.oracle.allow_principal(handle, principal)

        with self.executor.transaction("reissue_oracle_grants") as state:
            for dataset in state.datasets.values():
                readers = [dataset.contributor, *self.access.grantees(dataset.id)]
                allow(dataset.value_handle, readers)
                allow(dataset.quality_handle, readers)
            for request in state.requests.values():
                allow(request.budget_handle, [request.requester])
            for contributor, contributions in state.rewards.items():
                for contribution in contributions:
                    allow(contribution.reward_handle, [contributor])

        logger.info(
            f"Re-issued oracle grants for {len(self.state.datasets)} dataset(s), "
            f"{len(self.state.requests)} request(s) and {sum(map(len, self.state.rewards.values()))} reward(s)"
        )

    @contextmanager
    def _operation(self, name: str, **arguments: Any) -> Generator[None, None, None]:
        with correlation_context():
            operation_logger.log_call(name, arguments)
            try:
                with self.executor.transaction(name):
                    yield
            except Exception as e:
                operation_logger.log_result(name, success=False, error=type(e).__name__)
                raise
            operation_logger.log_result(name, success=True)

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def subscribe(self, handler: EventHandler) -> None:
        self.bus.subscribe(handler)

    @property
    def events(self) -> list[RegistryEvent]:
        """Events from committed transactions, oldest first."""
        return self.bus.history

    # ------------------------------------------------------------------
    # Mutating operations
    # ------------------------------------------------------------------

    def contribute_data(
        self, caller: str, value: int, quality_score: int, metadata_hash: str, is_public: bool
    ) -> int:
        with self._operation(
            "contribute_data",
            caller=caller,
            value=value,
            quality_score=quality_score,
            metadata_hash=metadata_hash,
            is_public=is_public,
        ):
            return self.datasets.contribute(caller, value, quality_score, metadata_hash, is_public)

    def request_data_access(self, caller: str, topic: str, budget: int, deadline: int) -> int:
        with self._operation("request_data_access", caller=caller, topic=topic, budget=budget, deadline=deadline):
            return self.requests.submit(caller, topic, budget, deadline)

    def grant_data_access(self, caller: str, dataset_id: int, accessor: str) -> None:
        with self._operation("grant_data_access", caller=caller, dataset_id=dataset_id, accessor=accessor):
            self.access.grant(dataset_id, accessor, caller)

    def update_quality_score(self, caller: str, dataset_id: int, new_score: int) -> None:
        with self._operation("update_quality_score", caller=caller, dataset_id=dataset_id, new_score=new_score):
            self.datasets.update_quality_score(dataset_id, new_score, caller)

    def distribute_reward(self, caller: str, contributor: str, dataset_id: int, amount: int) -> None:
        with self._operation(
            "distribute_reward", caller=caller, contributor=contributor, dataset_id=dataset_id, amount=amount
        ):
            self.rewards.distribute(contributor, dataset_id, amount, caller)

    def deactivate_dataset(self, caller: str, dataset_id: int) -> None:
        with self._operation("deactivate_dataset", caller=caller, dataset_id=dataset_id):
            self.datasets.deactivate(dataset_id, caller)

    # ------------------------------------------------------------------
    # Read-only queries
    # ------------------------------------------------------------------

    def access_dataset(self, caller: str, dataset_id: int) -> DatasetAccess:
        """Read a dataset's public fields as ``caller``.

        Raises:
            NotFoundError, StateError, AuthorizationError
        """
        with correlation_context():
            operation_logger.log_call("access_dataset", {"caller": caller, "dataset_id": dataset_id})
            try:
                view = self.executor.read(lambda _: self.access.check_read(dataset_id, caller))
            except Exception as e:
                operation_logger.log_result("access_dataset", success=False, error=type(e).__name__, read_only=True)
                raise
            operation_logger.log_result("access_dataset", success=True, read_only=True)
        return DatasetAccess(
            metadata_hash=view.metadata_hash,
            created_at=view.created_at,
            access_count=view.access_count,
        )

    def get_dataset_info(self, dataset_id: int, include_inactive: bool = False) -> DatasetPublicView:
        return self.executor.read(lambda _: self.datasets.get_info(dataset_id, include_inactive=include_inactive))

    def get_data_request_info(self, request_id: int) -> RequestPublicView:
        return self.executor.read(lambda _: self.requests.get_info(request_id))

    def get_contributor_datasets(self, principal: str) -> list[int]:
        return self.executor.read(lambda _: self.datasets.contributor_datasets(principal))

    def get_contributor_dataset_count(self, principal: str) -> int:
        return len(self.get_contributor_datasets(principal))

    def get_contributor_reward_count(self, principal: str) -> int:
        return self.executor.read(lambda _: self.rewards.count(principal))

    def get_contributor_rewards(self, principal: str) -> list[Contribution]:
        return self.executor.read(lambda _: self.rewards.rewards(principal))

    def get_dataset_grantees(self, dataset_id: int) -> list[str]:
        return self.executor.read(lambda _: self.access.grantees(dataset_id))

    def get_platform_stats(self) -> PlatformStats:
        return self.executor.read(lambda _: self.stats.stats())

    def is_authority(self, principal: str) -> bool:
        return self.authority.is_authority(principal)
