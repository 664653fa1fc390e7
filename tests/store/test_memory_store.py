import pytest

from envgroup.store import MemorySettingsStore, SettingsStore


@pytest.mark.anyio
async def test_memory_store_isolates_documents() -> None:
    initial = {"env": {"A": "1"}}
    store = MemorySettingsStore(initial)

    loaded = await store.load()
    loaded["env"]["A"] = "changed"
    initial["env"]["A"] = "changed"

    assert (await store.load())["env"] == {"A": "1"}


@pytest.mark.anyio
async def test_memory_store_records_saves() -> None:
    store = MemorySettingsStore()
    document = {"activeEnvGroup": "g1"}

    await store.save(document)
    document["activeEnvGroup"] = "g2"

    assert store.saves == [{"activeEnvGroup": "g1"}]
    assert store.data == {"activeEnvGroup": "g1"}
    assert isinstance(store, SettingsStore)
