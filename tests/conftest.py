"""Global test fixtures for Veilshare test suite."""

from __future__ import annotations

import os

import pytest

from veilshare.core.config import CoreSettings, clear_config_cache
from veilshare.privacy.oracle import LocalEncryptionOracle
from veilshare.registry.platform import DataSharingPlatform

START_TIME = 1_700_000_000

OWNER = "did:example:owner"
ALICE = "did:example:alice"


class FakeClock:
    """Deterministic clock returning integer seconds."""

    def __init__(self, now: int = START_TIME):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, seconds: int) -> None:
        self.now += seconds


# ============================================================================
# Environment Fixtures
# ============================================================================


@pytest.fixture
def clean_env(monkeypatch):
    """Remove all VEILSHARE_ environment variables."""
    for key in list(os.environ.keys()):
        if key.startswith("VEILSHARE_"):
            monkeypatch.delenv(key, raising=False)
    clear_config_cache()
    yield
    clear_config_cache()


@pytest.fixture
def settings(clean_env) -> CoreSettings:
    return CoreSettings()


# ============================================================================
# Registry Fixtures
# ============================================================================


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def oracle() -> LocalEncryptionOracle:
    return LocalEncryptionOracle()


@pytest.fixture
def platform(settings, oracle, clock) -> DataSharingPlatform:
    """A fresh platform whose authority is OWNER."""
    return DataSharingPlatform(authority=OWNER, oracle=oracle, clock=clock, settings=settings)


@pytest.fixture
def public_dataset(platform) -> int:
    """A public dataset contributed by ALICE."""
    return platform.contribute_data(ALICE, 12345, 85, "QmHash", True)


@pytest.fixture
def private_dataset(platform) -> int:
    """A private dataset contributed by ALICE."""
    return platform.contribute_data(ALICE, 12345, 85, "QmPrivateHash", False)
