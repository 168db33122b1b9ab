"""Record types held by the registry.

Records are plain dataclasses. Only two fields ever change after creation:
``Dataset.access_count`` (incremented per grant) and ``Dataset.is_active``
(one-way to False). ``DataRequest.is_fulfilled``, ``approved_datasets`` and
``Contribution.reward_claimed`` are reserved for fulfillment and claim
workflows and stay at their initial values.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from ..privacy.oracle import Handle


@dataclass
class Dataset:
    """A contributed reference to a confidential dataset."""

    id: int
    contributor: str
    value_handle: Handle
    quality_handle: Handle
    metadata_hash: str
    is_public: bool
    created_at: int
    access_count: int = 0
    is_active: bool = True

    def public_view(self) -> DatasetPublicView:
        return DatasetPublicView(
            contributor=self.contributor,
            metadata_hash=self.metadata_hash,
            is_public=self.is_public,
            created_at=self.created_at,
            access_count=self.access_count,
            is_active=self.is_active,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "contributor": self.contributor,
            "value_handle": self.value_handle.to_dict(),
            "quality_handle": self.quality_handle.to_dict(),
            "metadata_hash": self.metadata_hash,
            "is_public": self.is_public,
            "created_at": self.created_at,
            "access_count": self.access_count,
            "is_active": self.is_active,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Dataset:
        return cls(
            id=int(data["id"]),
            contributor=data["contributor"],
            value_handle=Handle.from_dict(data["value_handle"]),
            quality_handle=Handle.from_dict(data["quality_handle"]),
            metadata_hash=data["metadata_hash"],
            is_public=bool(data["is_public"]),
            created_at=int(data["created_at"]),
            access_count=int(data.get("access_count", 0)),
            is_active=bool(data.get("is_active", True)),
        )


@dataclass(frozen=True)
class DatasetPublicView:
    """Non-confidential projection of a Dataset."""

    contributor: str
    metadata_hash: str
    is_public: bool
    created_at: int
    access_count: int
    is_active: bool


@dataclass(frozen=True)
class DatasetAccess:
    """What a permitted reader gets back from accessing a dataset."""

    metadata_hash: str
    created_at: int
    access_count: int


@dataclass
class DataRequest:
    """A solicitation for data access."""

    id: int
    requester: str
    topic: str
    budget_handle: Handle
    deadline: int
    is_fulfilled: bool = False
    approved_datasets: list[int] = field(default_factory=list)

    def public_view(self) -> RequestPublicView:
        return RequestPublicView(
            requester=self.requester,
            topic=self.topic,
            deadline=self.deadline,
            is_fulfilled=self.is_fulfilled,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "requester": self.requester,
            "topic": self.topic,
            "budget_handle": self.budget_handle.to_dict(),
            "deadline": self.deadline,
            "is_fulfilled": self.is_fulfilled,
            "approved_datasets": list(self.approved_datasets),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DataRequest:
        return cls(
            id=int(data["id"]),
            requester=data["requester"],
            topic=data["topic"],
            budget_handle=Handle.from_dict(data["budget_handle"]),
            deadline=int(data["deadline"]),
            is_fulfilled=bool(data.get("is_fulfilled", False)),
            approved_datasets=[int(d) for d in data.get("approved_datasets", [])],
        )


@dataclass(frozen=True)
class RequestPublicView:
    requester: str
    topic: str
    deadline: int
    is_fulfilled: bool


@dataclass
class Contribution:
    """A reward recorded for a contributor against one dataset."""

    dataset_id: int
    reward_handle: Handle
    reward_claimed: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "dataset_id": self.dataset_id,
            "reward_handle": self.reward_handle.to_dict(),
            "reward_claimed": self.reward_claimed,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Contribution:
        return cls(
            dataset_id=int(data["dataset_id"]),
            reward_handle=Handle.from_dict(data["reward_handle"]),
            reward_claimed=bool(data.get("reward_claimed", False)),
        )


@dataclass(frozen=True)
class PlatformStats:
    total_datasets: int
    total_requests: int
    current_time: int
