"""Dataset, access, request and reward registries behind one platform facade."""

from .access import AccessGrantEngine
from .authority import PlatformAuthority
from .datasets import DatasetRegistry
from .platform import DataSharingPlatform
from .requests import RequestLedger
from .rewards import RewardLedger
from .stats import StatsAggregator

__all__ = [
    "AccessGrantEngine",
    "DataSharingPlatform",
    "DatasetRegistry",
    "PlatformAuthority",
    "RequestLedger",
    "RewardLedger",
    "StatsAggregator",
]
