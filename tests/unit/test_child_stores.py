# =============================================================================
# tests/unit/test_child_stores.py
# Unit Tests for method, journal and resource stores
# =============================================================================

import pytest
from unittest.mock import AsyncMock

from learning_core.stores import JournalStore, MethodStore, ResourceStore, StoreMode


@pytest.fixture
def method_store(backend, identity, notifier):
    store = MethodStore(backend.table("learning_methods"), identity, notifier)
    store.set_mode(StoreMode.REMOTE)
    return store


@pytest.fixture
def journal_store(backend, identity, notifier):
    store = JournalStore(backend.table("journal_entries"), identity, notifier)
    store.set_mode(StoreMode.REMOTE)
    return store


@pytest.fixture
def resource_store(backend, identity, notifier):
    store = ResourceStore(backend.table("resources"), identity, notifier)
    store.set_mode(StoreMode.REMOTE)
    return store


class TestMethodStore:
    """Learning methods"""

    @pytest.mark.asyncio
    async def test_add_method(self, method_store, notifier):
        result = await method_store.add({
            "topic_id": "t-1", "type": "Online Course", "title": "Course", "time_spent": "1.5", "link": "",
        })

        assert result.success
        assert result.data.time_spent == 1.5
        assert result.data.link is None
        assert notifier.successes == ["Learning method added successfully"]

    @pytest.mark.asyncio
    async def test_negative_time_rejected(self, method_store):
        result = await method_store.add({"topic_id": "t-1", "type": "Book", "title": "B", "time_spent": -1})
        assert result.error_code == "VAL_001"
        assert len(method_store) == 0

    @pytest.mark.asyncio
    async def test_topic_required(self, method_store):
        result = await method_store.add({"type": "Book", "title": "B"})
        assert result.error_code == "VAL_001"

    @pytest.mark.asyncio
    async def test_insert_failure_message(self, method_store, backend, notifier):
        backend.table("learning_methods").fail_next("insert")

        await method_store.add({"topic_id": "t-1", "type": "Book", "title": "B"})

        assert notifier.errors == ["Failed to save method to database"]
        assert len(method_store) == 0

    @pytest.mark.asyncio
    async def test_delete_failure_resyncs(self, method_store, backend, notifier):
        created = (await method_store.add({"topic_id": "t-1", "type": "Book", "title": "B"})).data
        resync = AsyncMock()
        method_store.set_resync_handler(resync)
        backend.table("learning_methods").fail_next("delete")

        result = await method_store.delete(created.id)

        assert not result.success
        resync.assert_awaited_once()
        assert notifier.errors == ["Failed to delete method from database"]

    @pytest.mark.asyncio
    async def test_delete_without_identity_leaves_item(self, method_store, identity, notifier):
        created = (await method_store.add({"topic_id": "t-1", "type": "Book", "title": "B"})).data
        identity.user_id = None

        result = await method_store.delete(created.id)

        assert result.error_code == "AUTH_001"
        assert method_store.get(created.id) == created
        assert notifier.errors == ["You need to be logged in to delete data"]


class TestJournalStore:
    """Journal entries"""

    @pytest.mark.asyncio
    async def test_tags_deduplicated(self, journal_store, backend):
        result = await journal_store.add({
            "topic_id": "t-1", "content": "Today", "tags": ["a", "b", "a", "A"],
        })

        assert result.data.tags == ("a", "b", "A")
        row = backend.table("journal_entries").rows[result.data.id]
        assert row["tags"] == ["a", "b", "A"]
        assert row["category"] == ""

    @pytest.mark.asyncio
    async def test_category_optional(self, journal_store):
        result = await journal_store.add({"topic_id": "t-1", "content": "Today", "category": "  "})
        assert result.data.category is None

    @pytest.mark.asyncio
    async def test_content_required(self, journal_store):
        result = await journal_store.add({"topic_id": "t-1", "content": ""})
        assert result.error_code == "VAL_001"

    @pytest.mark.asyncio
    async def test_single_string_tags_rejected(self, journal_store, notifier):
        result = await journal_store.add({"topic_id": "t-1", "content": "Today", "tags": "python"})

        assert result.error_code == "VAL_001"
        assert len(journal_store) == 0
        assert notifier.errors == ["Tags must be a list, not a single string"]

    @pytest.mark.asyncio
    async def test_update_tags(self, journal_store, notifier):
        created = (await journal_store.add({"topic_id": "t-1", "content": "Today"})).data

        result = await journal_store.update(created.id, {"tags": ["x", "x"]})

        assert result.data.tags == ("x",)
        assert notifier.successes[-1] == "Journal entry updated successfully"


class TestResourceStore:
    """Resources"""

    @pytest.mark.asyncio
    async def test_add_resource_optional_fields(self, resource_store):
        result = await resource_store.add({"topic_id": "t-1", "title": "Docs", "url": "", "type": None})

        assert result.success
        assert result.data.url is None
        assert result.data.type is None
        assert result.data.tags == ()

    @pytest.mark.asyncio
    async def test_single_string_tags_rejected_on_update(self, resource_store):
        created = (await resource_store.add({"topic_id": "t-1", "title": "Docs", "tags": ["ref"]})).data

        result = await resource_store.update(created.id, {"tags": "python"})

        assert result.error_code == "VAL_001"
        assert resource_store.get(created.id).tags == ("ref",)

    @pytest.mark.asyncio
    async def test_update_failure_message(self, resource_store, backend, notifier):
        created = (await resource_store.add({"topic_id": "t-1", "title": "Docs"})).data
        resource_store.set_resync_handler(AsyncMock())
        backend.table("resources").fail_next("update")

        result = await resource_store.update(created.id, {"notes": "read later"})

        assert not result.success
        assert notifier.errors == ["Failed to update resource in database"]
