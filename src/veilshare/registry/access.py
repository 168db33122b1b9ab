"""Access grants over datasets.

The grant relation maps ``(dataset_id, principal)`` to True. There is no
revoke. ``access_count`` counts grants issued, so granting the same
principal twice counts twice; ``grantees`` gives the distinct view.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from ..core.events import DatasetAccessed, RegistryEvent
from ..core.exceptions import AuthorizationError
from ..core.guards import check, require
from ..core.models import DatasetPublicView
from ..core.store import RegistryState
from ..privacy.oracle import EncryptionOracleClient
from .authority import PlatformAuthority
from .datasets import valid_dataset

logger = logging.getLogger(__name__)


class AccessGrantEngine:
    """Authorization checks and grant bookkeeping over the dataset registry."""

    def __init__(
        self,
        state: RegistryState,
        oracle: EncryptionOracleClient,
        authority: PlatformAuthority,
        emit: Callable[[RegistryEvent], None],
    ):
        self.state = state
        self.oracle = oracle
        self.authority = authority
        self.emit = emit

    def grant(self, dataset_id: int, grantee: str, caller: str) -> None:
        """Grant a principal access to a dataset's handles.

        Raises:
            NotFoundError: If the dataset id was never allocated.
            StateError: If the dataset is inactive.
            AuthorizationError: If the caller is neither contributor nor authority.
        """
        dataset = valid_dataset(self.state, dataset_id)
        require(
            self.authority.guard_owner_or_authority(
                caller, dataset.contributor, message="Not authorized to grant access"
            )
        )

        self.state.add_grant(dataset_id, grantee)
        self.state.set_field(dataset, "access_count", dataset.access_count + 1)
        self.oracle.allow_principal(dataset.value_handle, grantee)
        self.oracle.allow_principal(dataset.quality_handle, grantee)

        self.emit(DatasetAccessed(dataset_id=dataset_id, accessor=grantee))
        logger.info(f"Access to dataset {dataset_id} granted to {grantee} by {caller}")

    def has_grant(self, dataset_id: int, principal: str) -> bool:
        return self.state.grants.get((dataset_id, principal), False)

    def grantees(self, dataset_id: int) -> list[str]:
        """Distinct principals holding a grant on a dataset, in grant order."""
        return [
            principal
            for (granted_id, principal), granted in self.state.grants.items()
            if granted_id == dataset_id and granted
        ]

    def check_read(self, dataset_id: int, caller: str) -> DatasetPublicView:
        """Return the public view if the caller may read the dataset.

        Reading is allowed for public datasets, grantees and the contributor.
        """
        dataset = valid_dataset(self.state, dataset_id)
        require(
            check(
                dataset.is_public or self.has_grant(dataset_id, caller) or caller == dataset.contributor,
                "Access denied",
                lambda: AuthorizationError("Access denied", principal=caller),
            )
        )
        return dataset.public_view()
