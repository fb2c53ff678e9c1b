import pytest

from nodex.common.errors import DuplicateRecordError, ForbiddenError, StorageTimeoutError, StoreError
from nodex.db.store import EntityStore

from tests.fakesupabase import FakeSupabase

pytestmark = pytest.mark.anyio("asyncio")


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def fake():
    return FakeSupabase(
        {
            "widgets": [
                {"id": "w1", "kind": "a", "owner": None, "created_at": "2026-01-01T00:00:01+00:00"},
                {"id": "w2", "kind": "b", "owner": "u1", "created_at": "2026-01-01T00:00:02+00:00"},
                {"id": "w3", "kind": "a", "owner": "u1", "created_at": "2026-01-01T00:00:03+00:00"},
            ]
        }
    )


@pytest.fixture
def store(fake):
    return EntityStore(client_factory=fake.factory, timeout=0.5)


async def test_read_translates_filters(store):
    assert [r["id"] for r in await store.read("widgets", {"kind": "a"})] == ["w1", "w3"]
    assert [r["id"] for r in await store.read("widgets", {"id": ["w1", "w2"]})] == ["w1", "w2"]
    assert [r["id"] for r in await store.read("widgets", {"owner": None})] == ["w1"]


async def test_read_orders_limits_and_projects(store):
    rows = await store.read("widgets", columns="id", order_by="created_at", desc=True, limit=2)
    assert rows == [{"id": "w3"}, {"id": "w2"}]


async def test_empty_in_filter_skips_round_trip(store, fake):
    assert await store.read("widgets", {"id": []}) == []
    assert await store.delete("widgets", {"id": []}) == 0
    assert fake.calls == []


async def test_update_returns_affected_rows(store):
    rows = await store.update("widgets", {"owner": "u1"}, {"kind": "c"})
    assert {r["id"] for r in rows} == {"w2", "w3"}
    assert all(r["kind"] == "c" for r in rows)


async def test_delete_returns_count(store, fake):
    assert await store.delete("widgets", {"kind": "a"}) == 2
    assert [r["id"] for r in fake.rows("widgets")] == ["w2"]


async def test_unfiltered_writes_are_refused(store):
    with pytest.raises(StoreError):
        await store.update("widgets", {}, {"kind": "z"})
    with pytest.raises(StoreError):
        await store.delete("widgets", {})


async def test_slow_call_times_out(store, fake):
    fake.delays[("widgets", "select")] = 1.0
    with pytest.raises(StorageTimeoutError):
        await store.read("widgets", timeout=0.05)


@pytest.mark.parametrize("code, message", [("42501", "permission denied for table widgets"), ("PGRST301", "JWT expired")])
async def test_permission_errors_become_forbidden(store, fake, code, message):
    fake.fail("widgets", "update", code=code, message=message)
    with pytest.raises(ForbiddenError):
        await store.update("widgets", {"id": "w1"}, {"kind": "z"})


async def test_unique_violation_is_duplicate(store, fake):
    fake.fail("widgets", "insert", code="23505", message="duplicate key value")
    with pytest.raises(DuplicateRecordError):
        await store.insert("widgets", {"id": "w1"})


async def test_other_api_errors_are_store_errors(store, fake):
    fake.fail("widgets", "select", code="PGRST116", message="bad request")
    with pytest.raises(StoreError) as exc_info:
        await store.read("widgets")
    assert not isinstance(exc_info.value, DuplicateRecordError)


async def test_insert_accepts_single_row(store, fake):
    created = await store.insert("widgets", {"kind": "d"})
    assert len(created) == 1
    assert created[0]["id"]
    assert len(fake.rows("widgets")) == 4
