"""Serialized access to one settings document.

Coroutines in this process queue on an asyncio lock per document; other
processes are kept out by an advisory lock on a small file under the user
state directory, named after a hash of the document path.
"""

import asyncio
import hashlib
import os
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import AsyncIterator, BinaryIO, Dict

from ..core.global_paths import GlobalPath

if os.name == "nt":
    import msvcrt
else:
    import fcntl


def lock_path(document: str) -> Path:
    """Lock file guarding ``document``."""
    digest = hashlib.sha1(document.encode("utf-8")).hexdigest()[:16]
    return Path(GlobalPath.state()) / "locks" / f"{digest}.lock"


def _open_lock_file(path: Path) -> BinaryIO:
    path.parent.mkdir(parents=True, exist_ok=True)
    handle = open(path, "a+b")
    if os.name == "nt" and handle.tell() == 0:
        # msvcrt locks byte ranges; the file needs one byte to lock.
        handle.write(b"\0")
        handle.flush()
    return handle


def _hold(handle: BinaryIO, exclusive: bool) -> None:
    if os.name == "nt":
        handle.seek(0)
        msvcrt.locking(handle.fileno(), msvcrt.LK_LOCK if exclusive else msvcrt.LK_UNLCK, 1)
    else:
        fcntl.flock(handle.fileno(), fcntl.LOCK_EX if exclusive else fcntl.LOCK_UN)


@dataclass
class _Waiters:
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    count: int = 0


class Lock:
    """Per-document lock shared by every store in the process."""

    _documents: Dict[str, _Waiters] = {}

    @classmethod
    @asynccontextmanager
    async def exclusive(cls, document: str) -> AsyncIterator[None]:
        """Hold ``document`` against other coroutines and other processes."""
        waiters = cls._documents.setdefault(document, _Waiters())
        waiters.count += 1
        try:
            async with waiters.lock:
                handle = _open_lock_file(lock_path(document))
                try:
                    await asyncio.to_thread(_hold, handle, True)
                    try:
                        yield
                    finally:
                        await asyncio.to_thread(_hold, handle, False)
                finally:
                    handle.close()
        finally:
            waiters.count -= 1
            if waiters.count == 0:
                cls._documents.pop(document, None)
