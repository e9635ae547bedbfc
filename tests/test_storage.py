import json

import pytest

from gradetools.errors import StoreError
from gradetools.storage import JsonFileStore, MemoryStore


@pytest.mark.asyncio
async def test_memory_store_get_semantics():
    store = MemoryStore({"a": 1, "b": {"c": 2}})

    assert await store.get(None) == {"a": 1, "b": {"c": 2}}
    assert await store.get("a") == {"a": 1}
    assert await store.get(["a", "missing"]) == {"a": 1}
    assert await store.get("missing") == {}


@pytest.mark.asyncio
async def test_memory_store_set_replaces_top_level_keys_only():
    store = MemoryStore({"a": 1, "b": {"c": 2}})

    await store.set({"b": {"d": 3}})

    assert await store.get(None) == {"a": 1, "b": {"d": 3}}
    assert store.set_calls == 1


@pytest.mark.asyncio
async def test_memory_store_returns_copies():
    store = MemoryStore({"b": {"c": 2}})

    data = await store.get("b")
    data["b"]["c"] = 99

    assert await store.get("b") == {"b": {"c": 2}}


@pytest.mark.asyncio
async def test_json_file_store_round_trip(tmp_path):
    path = tmp_path / "nested" / "store.json"
    store = JsonFileStore(path)

    await store.set({"most_recent_user": "alice"})
    await store.set({"Chemistry-catmap": {"Tests": 0.6}})

    assert json.loads(path.read_text(encoding="utf-8")) == {
        "most_recent_user": "alice",
        "Chemistry-catmap": {"Tests": 0.6},
    }
    assert await JsonFileStore(path).get("most_recent_user") == {
        "most_recent_user": "alice"
    }


@pytest.mark.asyncio
async def test_json_file_store_missing_file_is_empty(tmp_path):
    store = JsonFileStore(tmp_path / "absent.json")

    assert await store.get(None) == {}


@pytest.mark.asyncio
async def test_json_file_store_ignores_invalid_json(tmp_path):
    path = tmp_path / "store.json"
    path.write_text("not valid json", encoding="utf-8")

    assert await JsonFileStore(path).get(None) == {}

    path.write_text("[1, 2]", encoding="utf-8")
    assert await JsonFileStore(path).get(None) == {}


@pytest.mark.asyncio
async def test_json_file_store_write_failure_raises_store_error(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("", encoding="utf-8")
    store = JsonFileStore(blocker / "store.json")

    with pytest.raises(StoreError):
        await store.set({"a": 1})
