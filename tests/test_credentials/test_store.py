"""
Tests for CredentialStore slot semantics.
"""

import pytest

from app.credentials.store import CredentialStore
from app.errors import ValidationError
from app.schemas.credentials import CredentialInput
from app.storage.base import StoredCredential


class TestSetAndList:

    @pytest.mark.asyncio
    async def test_list_never_exposes_secret(self, credential_store):
        await credential_store.set_one(1, 1, "abc", label="primary")
        [view] = await credential_store.list_all(1)

        assert view.priority == 1
        assert view.label == "primary"
        assert view.has_value
        assert "abc" not in view.model_dump_json()

    @pytest.mark.asyncio
    async def test_secret_stored_sealed(self, credential_store, credential_repo, cipher):
        await credential_store.set_one(1, 1, "abc")
        stored = credential_repo.rows[(1, 1)]
        assert stored.sealed_secret != "abc"
        assert cipher.unseal(stored.sealed_secret) == "abc"

    @pytest.mark.asyncio
    async def test_upsert_replaces_slot(self, credential_store):
        await credential_store.set_one(1, 2, "old", label="old")
        await credential_store.set_one(1, 2, "new", label="new")
        assert await credential_store.ordered_secrets(1) == [(2, "new")]
        [view] = await credential_store.list_all(1)
        assert view.label == "new"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("priority", [0, 5, -1])
    async def test_out_of_range_priority(self, credential_store, credential_repo, priority):
        with pytest.raises(ValidationError) as exc_info:
            await credential_store.set_one(1, priority, "abc")
        assert exc_info.value.message == "invalid priority (must be 1-4)"
        assert credential_repo.upsert_calls == 0

    @pytest.mark.asyncio
    async def test_blank_secret_rejected(self, credential_store):
        with pytest.raises(ValidationError):
            await credential_store.set_one(1, 1, "   ")


class TestSetMany:

    @pytest.mark.asyncio
    async def test_single_batch_with_blank_skipped(self, credential_store, credential_repo):
        await credential_store.set_many(1, [
            CredentialInput(password="three", priority=3),
            CredentialInput(password="", priority=2),
            CredentialInput(password="one", priority=1, label="main"),
        ])
        assert credential_repo.upsert_calls == 1
        assert await credential_store.ordered_secrets(1) == [(1, "one"), (3, "three")]

    @pytest.mark.asyncio
    async def test_invalid_element_writes_nothing(self, credential_store, credential_repo):
        with pytest.raises(ValidationError):
            await credential_store.set_many(1, [
                CredentialInput(password="ok", priority=1),
                CredentialInput(password="bad", priority=9),
            ])
        assert credential_repo.rows == {}
        assert credential_repo.upsert_calls == 0

    @pytest.mark.asyncio
    async def test_duplicate_priority_rejected(self, credential_store):
        with pytest.raises(ValidationError):
            await credential_store.set_many(1, [
                CredentialInput(password="a", priority=1),
                CredentialInput(password="b", priority=1),
            ])


class TestDeleteAndOrdering:

    @pytest.mark.asyncio
    async def test_delete_leaves_gap(self, credential_store):
        for priority, secret in [(1, "a"), (2, "b"), (3, "c")]:
            await credential_store.set_one(1, priority, secret)
        await credential_store.delete_one(1, 2)

        assert await credential_store.ordered_secrets(1) == [(1, "a"), (3, "c")]
        assert [v.priority for v in await credential_store.list_all(1)] == [1, 3]

    @pytest.mark.asyncio
    async def test_delete_missing_slot_is_noop(self, credential_store):
        await credential_store.delete_one(1, 4)
        assert await credential_store.list_all(1) == []

    @pytest.mark.asyncio
    async def test_delete_out_of_range(self, credential_store):
        with pytest.raises(ValidationError):
            await credential_store.delete_one(1, 7)

    @pytest.mark.asyncio
    async def test_users_are_isolated(self, credential_store):
        await credential_store.set_one(1, 1, "mine")
        await credential_store.set_one(2, 1, "theirs")
        assert await credential_store.ordered_secrets(1) == [(1, "mine")]

    @pytest.mark.asyncio
    async def test_unsealable_and_empty_slots_skipped(self, credential_repo, cipher):
        credential_repo.rows[(1, 1)] = StoredCredential(priority=1, sealed_secret="garbage")
        credential_repo.rows[(1, 2)] = StoredCredential(priority=2, sealed_secret="")
        credential_repo.rows[(1, 3)] = StoredCredential(priority=3, sealed_secret=cipher.seal("good"))

        store = CredentialStore(credential_repo, cipher=cipher, slots=4)
        assert await store.ordered_secrets(1) == [(3, "good")]
        views = await store.list_all(1)
        assert [v.has_value for v in views] == [True, False, True]
