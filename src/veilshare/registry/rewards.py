"""Per-contributor reward ledger.

Rewards are wrapped amounts appended to the contributor's list in the order
they were distributed. There is no claim or withdraw operation;
``reward_claimed`` stays False.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from ..core.config import CoreSettings
from ..core.events import RegistryEvent, RewardDistributed
from ..core.exceptions import ValidationError
from ..core.guards import check, require
from ..core.models import Contribution
from ..core.store import RegistryState
from ..privacy.oracle import EncryptionOracleClient
from .authority import PlatformAuthority
from .datasets import dataset_in_range

logger = logging.getLogger(__name__)


class RewardLedger:
    def __init__(
        self,
        state: RegistryState,
        oracle: EncryptionOracleClient,
        authority: PlatformAuthority,
        emit: Callable[[RegistryEvent], None],
        settings: CoreSettings,
    ):
        self.state = state
        self.oracle = oracle
        self.authority = authority
        self.emit = emit
        self.settings = settings

    def distribute(self, contributor: str, dataset_id: int, plain_amount: int, caller: str) -> None:
        """Record a reward for the contributor of a dataset.

        The dataset does not have to be active, but its stored contributor
        must match exactly.

        Raises:
            AuthorizationError: If the caller is not the platform authority.
            NotFoundError: If the dataset id was never allocated.
            ValidationError: If the dataset belongs to someone else.
        """
        require(
            self.authority.guard(caller),
            dataset_in_range(self.state, dataset_id),
        )
        require(
            check(
                self.state.datasets[dataset_id].contributor == contributor,
                "Invalid contributor",
                lambda: ValidationError("Invalid contributor", field="contributor", value=contributor),
            )
        )

        reward_handle = self.oracle.wrap(plain_amount, self.settings.reward_bit_width)
        self.oracle.allow_self(reward_handle)
        self.oracle.allow_principal(reward_handle, contributor)

        self.state.add_reward(contributor, Contribution(dataset_id=dataset_id, reward_handle=reward_handle))

        self.emit(RewardDistributed(contributor=contributor, dataset_id=dataset_id))
        logger.info(f"Reward for dataset {dataset_id} distributed to {contributor}")

    def count(self, contributor: str) -> int:
        return len(self.state.rewards.get(contributor, []))

    def rewards(self, contributor: str) -> list[Contribution]:
        return list(self.state.rewards.get(contributor, []))
