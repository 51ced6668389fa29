# =============================================================================
# tests/unit/test_topic_store.py
# Unit Tests for TopicStore and the shared EntityStore behaviour
# =============================================================================

import pytest
from datetime import date
from unittest.mock import AsyncMock

from learning_core.models.entities import JournalEntry, LearningMethod, Resource, Topic, TopicStatus
from learning_core.stores import JournalStore, MethodStore, ResourceStore, StoreMode, TopicStore


@pytest.fixture
def topic_table(backend):
    return backend.table("topics")


@pytest.fixture
def topic_store(topic_table, identity, notifier):
    store = TopicStore(topic_table, identity, notifier)
    store.set_mode(StoreMode.REMOTE)
    return store


@pytest.fixture
def family(backend, identity, notifier):
    """A topic store with its three child stores attached, in REMOTE mode"""
    topics = TopicStore(backend.table("topics"), identity, notifier)
    methods = MethodStore(backend.table("learning_methods"), identity, notifier)
    journals = JournalStore(backend.table("journal_entries"), identity, notifier)
    resources = ResourceStore(backend.table("resources"), identity, notifier)
    topics.attach_children(methods, journals, resources)
    for store in (topics, methods, journals, resources):
        store.set_mode(StoreMode.REMOTE)

    topics.replace_all([
        Topic(id="t-1", title="Keep me", category_id="c-1"),
        Topic(id="t-2", title="Delete me", category_id="c-1"),
    ])
    methods.replace_all([
        LearningMethod(id="m-1", topic_id="t-1", type="Book", title="A"),
        LearningMethod(id="m-2", topic_id="t-2", type="Book", title="B"),
        LearningMethod(id="m-3", topic_id="t-2", type="Video", title="C"),
    ])
    journals.replace_all([
        JournalEntry(id="j-1", topic_id="t-2", content="note"),
        JournalEntry(id="j-2", topic_id="t-1", content="other"),
    ])
    resources.replace_all([
        Resource(id="r-1", topic_id="t-2", title="Docs"),
    ])
    return topics, methods, journals, resources


class TestTopicAdd:
    """Test optimistic create"""

    @pytest.mark.asyncio
    async def test_add_persists_with_owner(self, topic_store, topic_table, notifier):
        result = await topic_store.add({"title": "React", "category_id": "c-1"})

        assert result.success
        topic = result.data
        assert topic_store.items == (topic,)
        assert topic.created_at == topic.updated_at
        assert topic.status is TopicStatus.NOT_STARTED
        assert topic_table.rows[topic.id]["user_id"] == "user-1"
        assert notifier.successes == ["Topic added successfully"]

    @pytest.mark.asyncio
    async def test_add_rolls_back_when_insert_fails(self, topic_store, topic_table, notifier):
        topic_table.fail_next("insert")

        result = await topic_store.add({"title": "React", "category_id": "c-1"})

        assert not result.success
        assert result.error_code == "DB_001"
        assert len(topic_store) == 0
        assert notifier.errors == ["Failed to save topic to database"]

    @pytest.mark.asyncio
    async def test_add_clamps_progress(self, topic_store):
        result = await topic_store.add({"title": "Go", "category_id": "c-1", "progress": 150})
        assert result.data.progress == 100

    @pytest.mark.asyncio
    async def test_add_requires_title(self, topic_store, topic_table, notifier):
        result = await topic_store.add({"title": "  ", "category_id": "c-1"})

        assert not result.success
        assert result.error_code == "VAL_001"
        assert len(topic_store) == 0
        assert topic_table.calls_for("insert") == []
        assert len(notifier.errors) == 1

    @pytest.mark.asyncio
    async def test_add_rejects_unknown_status(self, topic_store):
        result = await topic_store.add({"title": "Go", "category_id": "c-1", "status": "Paused"})
        assert result.error_code == "VAL_001"

    @pytest.mark.asyncio
    async def test_add_rejects_end_before_start(self, topic_store):
        result = await topic_store.add({
            "title": "Go",
            "category_id": "c-1",
            "start_date": "2024-05-01",
            "target_end_date": "2024-04-01",
        })
        assert result.error_code == "VAL_001"

    @pytest.mark.asyncio
    async def test_add_parses_date_strings(self, topic_store):
        result = await topic_store.add({"title": "Go", "category_id": "c-1", "start_date": "2024-05-01"})
        assert result.data.start_date == date(2024, 5, 1)

    @pytest.mark.asyncio
    async def test_remote_mode_without_identity_refuses(self, topic_store, topic_table, identity, notifier):
        identity.user_id = None

        result = await topic_store.add({"title": "React", "category_id": "c-1"})

        assert not result.success
        assert result.error_code == "AUTH_001"
        assert len(topic_store) == 0
        assert topic_table.calls == []
        assert notifier.errors == ["You need to be logged in to save data"]

    @pytest.mark.asyncio
    async def test_local_mode_issues_no_remote_calls(self, topic_store, topic_table, identity):
        topic_store.set_mode(StoreMode.LOCAL)
        identity.user_id = None

        result = await topic_store.add({"title": "React", "category_id": "c-1"})

        assert result.success
        assert len(topic_store) == 1
        assert topic_table.calls == []
        assert identity.calls == 0

    @pytest.mark.asyncio
    async def test_gateway_exception_counts_as_failure(self, topic_store, topic_table):
        topic_table.insert = AsyncMock(side_effect=RuntimeError("connection reset"))

        result = await topic_store.add({"title": "React", "category_id": "c-1"})

        assert not result.success
        assert len(topic_store) == 0


class TestTopicUpdate:
    """Test optimistic update"""

    @pytest.mark.asyncio
    async def test_update_merges_and_bumps_timestamp(self, topic_store, topic_table):
        created = (await topic_store.add({"title": "React", "category_id": "c-1"})).data

        result = await topic_store.update(created.id, {"progress": 150, "status": "In Progress"})

        assert result.success
        updated = topic_store.get(created.id)
        assert updated.progress == 100
        assert updated.status is TopicStatus.IN_PROGRESS
        assert updated.title == "React"
        assert updated.updated_at >= created.updated_at
        assert updated.created_at == created.created_at

        entity_id, fields, owner = topic_table.calls_for("update")[0]
        assert entity_id == created.id
        assert owner == "user-1"
        assert fields["progress"] == 100
        assert fields["status"] == "In Progress"

    @pytest.mark.asyncio
    async def test_negative_progress_clamped_to_zero(self, topic_store):
        created = (await topic_store.add({"title": "React", "category_id": "c-1", "progress": 50})).data
        await topic_store.update(created.id, {"progress": -10})
        assert topic_store.get(created.id).progress == 0

    @pytest.mark.asyncio
    async def test_update_failure_requests_resync(self, topic_store, topic_table, notifier):
        created = (await topic_store.add({"title": "React", "category_id": "c-1"})).data
        resync = AsyncMock()
        topic_store.set_resync_handler(resync)
        topic_table.fail_next("update")

        result = await topic_store.update(created.id, {"title": "Vue"})

        assert not result.success
        resync.assert_awaited_once()
        assert notifier.errors == ["Failed to update topic in database"]

    @pytest.mark.asyncio
    async def test_update_unknown_id(self, topic_store, topic_table):
        result = await topic_store.update("missing", {"title": "x"})

        assert result.error_code == "DATA_404"
        assert topic_table.calls_for("update") == []

    @pytest.mark.asyncio
    async def test_update_rejects_system_fields(self, topic_store):
        created = (await topic_store.add({"title": "React", "category_id": "c-1"})).data
        result = await topic_store.update(created.id, {"id": "other"})
        assert result.error_code == "VAL_001"
        assert topic_store.get(created.id) == created

    @pytest.mark.asyncio
    async def test_move_topic_between_categories(self, topic_store, topic_table):
        created = (await topic_store.add({"title": "React", "category_id": "c-1"})).data

        await topic_store.update(created.id, {"category_id": "c-2"})

        assert topic_store.get(created.id).category_id == "c-2"
        assert topic_table.rows[created.id]["category_id"] == "c-2"
        assert topic_table.rows[created.id]["category"] == "c-2"


class TestTopicCascadeDelete:
    """Deleting a topic removes everything that belongs to it"""

    @pytest.mark.asyncio
    async def test_cascade_removes_children_only_of_that_topic(self, family, notifier):
        topics, methods, journals, resources = family

        result = await topics.delete("t-2")

        assert result.success
        assert result.metadata == {"children_removed": 4}
        assert [t.id for t in topics] == ["t-1"]
        assert [m.id for m in methods] == ["m-1"]
        assert [j.id for j in journals] == ["j-2"]
        assert list(resources) == []
        assert notifier.successes == ["Topic deleted successfully"]

    @pytest.mark.asyncio
    async def test_cascade_issues_remote_deletes_after_parent(self, family, backend):
        topics, *_ = family

        await topics.delete("t-2")

        assert [args[0] for args in backend.table("topics").calls_for("delete")] == ["t-2"]
        assert sorted(a[0] for a in backend.table("learning_methods").calls_for("delete")) == ["m-2", "m-3"]
        assert [a[0] for a in backend.table("journal_entries").calls_for("delete")] == ["j-1"]
        assert [a[0] for a in backend.table("resources").calls_for("delete")] == ["r-1"]

    @pytest.mark.asyncio
    async def test_parent_delete_failure_resyncs_and_skips_children(self, family, backend, notifier):
        topics, methods, *_ = family
        resync = AsyncMock()
        topics.set_resync_handler(resync)
        backend.table("topics").fail_next("delete")

        result = await topics.delete("t-2")

        assert not result.success
        resync.assert_awaited_once()
        assert backend.table("learning_methods").calls_for("delete") == []
        assert notifier.errors == ["Failed to delete topic from database"]

    @pytest.mark.asyncio
    async def test_child_delete_failure_resyncs(self, family, backend):
        topics, *_ = family
        resync = AsyncMock()
        topics.set_resync_handler(resync)
        backend.table("journal_entries").fail_next("delete")

        result = await topics.delete("t-2")

        assert not result.success
        assert result.error_code == "DB_001"
        resync.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_local_cascade_has_no_remote_calls(self, family, backend):
        topics, methods, journals, resources = family
        for store in family:
            store.set_mode(StoreMode.LOCAL)

        result = await topics.delete("t-2")

        assert result.success
        assert [m.id for m in methods] == ["m-1"]
        assert backend.table("topics").calls == []
