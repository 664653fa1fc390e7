import asyncio
from pathlib import Path

import pytest

from envgroup.core.global_paths import GlobalPath
from envgroup.store.lock import Lock, lock_path


def test_lock_path_lives_under_state_dir() -> None:
    path = lock_path("/home/me/.claude/settings.json")

    assert path.parent == Path(GlobalPath.state()) / "locks"
    assert path == lock_path("/home/me/.claude/settings.json")
    assert path != lock_path("/home/me/other.json")


@pytest.mark.anyio
async def test_exclusive_serializes_holders_of_one_document() -> None:
    order = []

    async def hold(name: str) -> None:
        async with Lock.exclusive("/docs/settings.json"):
            order.append(f"{name}:in")
            await asyncio.sleep(0.01)
            order.append(f"{name}:out")

    await asyncio.gather(hold("a"), hold("b"))

    assert order in (["a:in", "a:out", "b:in", "b:out"], ["b:in", "b:out", "a:in", "a:out"])
    assert lock_path("/docs/settings.json").exists()
    assert "/docs/settings.json" not in Lock._documents


@pytest.mark.anyio
async def test_exclusive_releases_after_error() -> None:
    with pytest.raises(RuntimeError):
        async with Lock.exclusive("/docs/settings.json"):
            raise RuntimeError("boom")

    async with Lock.exclusive("/docs/settings.json"):
        pass
