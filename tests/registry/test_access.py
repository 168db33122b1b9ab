"""Tests for access grants and read authorization."""

from __future__ import annotations

import pytest

from veilshare.core.events import DatasetAccessed
from veilshare.core.exceptions import AuthorizationError, NotFoundError, StateError

ALICE = "did:example:alice"
BOB = "did:example:bob"
CAROL = "did:example:carol"
DAVE = "did:example:dave"
OWNER = "did:example:owner"

START_TIME = 1_700_000_000


class TestGrantDataAccess:
    def test_contributor_grants(self, platform, private_dataset):
        platform.grant_data_access(ALICE, private_dataset, BOB)

        assert platform.get_dataset_info(private_dataset).access_count == 1
        assert platform.events[-1] == DatasetAccessed(dataset_id=private_dataset, accessor=BOB)
        assert platform.access.has_grant(private_dataset, BOB)

    def test_authority_grants(self, platform, private_dataset):
        platform.grant_data_access(OWNER, private_dataset, BOB)
        assert platform.events[-1] == DatasetAccessed(dataset_id=private_dataset, accessor=BOB)

    def test_unauthorized_grant_rejected(self, platform, private_dataset):
        with pytest.raises(AuthorizationError, match="Not authorized to grant access"):
            platform.grant_data_access(BOB, private_dataset, CAROL)

        assert platform.get_dataset_info(private_dataset).access_count == 0
        assert not platform.access.has_grant(private_dataset, CAROL)

    def test_invalid_dataset(self, platform):
        with pytest.raises(NotFoundError, match="Invalid dataset ID"):
            platform.grant_data_access(ALICE, 999, BOB)

    def test_inactive_dataset(self, platform, private_dataset):
        platform.deactivate_dataset(ALICE, private_dataset)
        with pytest.raises(StateError):
            platform.grant_data_access(ALICE, private_dataset, BOB)

    def test_grantee_can_decrypt_handles(self, platform, oracle, private_dataset):
        platform.grant_data_access(ALICE, private_dataset, BOB)
        dataset = platform.datasets.get(private_dataset)

        assert oracle.decrypt(dataset.value_handle, BOB) == 12345
        assert oracle.decrypt(dataset.quality_handle, BOB) == 85

    def test_distinct_grantees(self, platform, private_dataset):
        for grantee in (BOB, CAROL, DAVE):
            platform.grant_data_access(ALICE, private_dataset, grantee)
        assert platform.get_dataset_info(private_dataset).access_count == 3
        assert platform.get_dataset_grantees(private_dataset) == [BOB, CAROL, DAVE]

    @pytest.mark.parametrize("k", [1, 2, 5])
    def test_repeat_grants_count_every_time(self, platform, private_dataset, k):
        for _ in range(k):
            platform.grant_data_access(ALICE, private_dataset, BOB)

        assert platform.get_dataset_info(private_dataset).access_count == k
        assert platform.get_dataset_grantees(private_dataset) == [BOB]


class TestAccessDataset:
    def test_public_dataset_readable_by_anyone(self, platform, public_dataset):
        access = platform.access_dataset(CAROL, public_dataset)
        assert access.metadata_hash == "QmHash"
        assert access.created_at == START_TIME
        assert access.access_count == 0

    def test_contributor_reads_own_private_dataset(self, platform, private_dataset):
        assert platform.access_dataset(ALICE, private_dataset).metadata_hash == "QmPrivateHash"

    def test_grantee_reads_private_dataset(self, platform, private_dataset):
        platform.grant_data_access(ALICE, private_dataset, BOB)
        access = platform.access_dataset(BOB, private_dataset)
        assert access.metadata_hash == "QmPrivateHash"
        assert access.access_count == 1

    def test_private_dataset_denied_without_grant(self, platform, private_dataset):
        with pytest.raises(AuthorizationError, match="Access denied"):
            platform.access_dataset(BOB, private_dataset)

    def test_authority_has_no_implicit_read(self, platform, private_dataset):
        with pytest.raises(AuthorizationError, match="Access denied"):
            platform.access_dataset(OWNER, private_dataset)

    def test_inactive_dataset(self, platform, public_dataset):
        platform.deactivate_dataset(ALICE, public_dataset)
        with pytest.raises(StateError, match="Dataset not active"):
            platform.access_dataset(BOB, public_dataset)

    def test_inactive_checked_before_authorization(self, platform, private_dataset):
        platform.deactivate_dataset(ALICE, private_dataset)
        with pytest.raises(StateError):
            platform.access_dataset(BOB, private_dataset)

    def test_unknown_dataset(self, platform):
        with pytest.raises(NotFoundError):
            platform.access_dataset(BOB, 1)

    def test_read_has_no_side_effects(self, platform, public_dataset):
        events_before = platform.events
        platform.access_dataset(BOB, public_dataset)
        assert platform.events == events_before
        assert platform.get_dataset_info(public_dataset).access_count == 0

    @pytest.mark.parametrize(
        "is_public,granted,caller,allowed",
        [
            (True, False, CAROL, True),
            (False, True, BOB, True),
            (False, False, ALICE, True),
            (False, False, CAROL, False),
            (False, True, CAROL, False),
        ],
    )
    def test_read_rule(self, platform, is_public, granted, caller, allowed):
        dataset_id = platform.contribute_data(ALICE, 1, 50, "QmRule", is_public)
        if granted:
            platform.grant_data_access(ALICE, dataset_id, BOB)

        if allowed:
            platform.access_dataset(caller, dataset_id)
        else:
            with pytest.raises(AuthorizationError):
                platform.access_dataset(caller, dataset_id)
