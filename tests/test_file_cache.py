import random
import re
from datetime import datetime, timedelta, timezone

import pytest

from printbay.client.file_cache import FileCache

from conftest import MEMORY_DB


class FakeClock:
    def __init__(self):
        self.now = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
async def cache(make_settings, clock):
    c = FileCache(
        url=MEMORY_DB,
        max_age=timedelta(days=7),
        recency=timedelta(days=1),
        clock=clock,
        rng=random.Random(7),
        settings=make_settings(),
    )
    await c.init()
    yield c
    await c.close()


@pytest.mark.asyncio
async def test_store_and_read_back(cache):
    file_id = await cache.store_file("gear.stl", b"solid gear\n", "model/stl")
    assert re.fullmatch(r"file_\d+_[0-9a-z]{9}", file_id)

    cached = await cache.get_file(file_id)
    assert cached.data == b"solid gear\n"
    assert cached.name == "gear.stl"
    assert cached.size == 11
    assert cached.type == "model/stl"

    meta = await cache.get_file_metadata(file_id)
    assert meta.size == 11
    assert await cache.has_file(file_id)
    assert await cache.get_file("file_missing") is None


@pytest.mark.asyncio
async def test_size_list_and_remove(cache):
    a = await cache.store_file("a.stl", b"x" * 100)
    b = await cache.store_file("b.obj", b"y" * 50)
    assert await cache.get_cache_size() == 150
    assert {m.id for m in await cache.list_files()} == {a, b}

    assert await cache.remove_file(a) is True
    assert await cache.remove_file(a) is False
    assert not await cache.has_file(a)
    assert await cache.get_cache_size() == 50


@pytest.mark.asyncio
async def test_read_bumps_last_accessed(cache, clock):
    file_id = await cache.store_file("a.stl", b"x")
    clock.advance(hours=5)
    await cache.get_file(file_id)
    meta = await cache.get_file_metadata(file_id)
    assert meta.last_accessed - meta.uploaded_at == timedelta(hours=5)


@pytest.mark.asyncio
async def test_cleanup_needs_old_and_unread(cache, clock):
    old_unread = await cache.store_file("old.stl", b"1")
    old_read = await cache.store_file("old-but-used.stl", b"2")
    clock.advance(days=6)
    fresh = await cache.store_file("fresh.stl", b"3")

    clock.advance(days=2)  # first two are now 8 days old
    await cache.get_file(old_read)

    assert await cache.cleanup_old_files() == 1
    assert not await cache.has_file(old_unread)
    assert await cache.has_file(old_read)
    assert await cache.has_file(fresh)

    assert await cache.cleanup_old_files() == 0


@pytest.mark.asyncio
async def test_empty_cache(cache):
    assert await cache.get_cache_size() == 0
    assert await cache.list_files() == []
    assert await cache.cleanup_old_files() == 0
