from __future__ import annotations

import asyncio
import io

import pytest

from tutorstream.errors import InvalidResource
from tutorstream.storage import LocalStorage, create_storage


async def _collect(stream) -> bytes:
    return b"".join([chunk async for chunk in stream])


def test_save_exists_and_stream(storage):
    payload = b"x" * 20000  # spans several chunks

    asyncio.run(storage.save("video/123.mp4", io.BytesIO(payload)))

    assert asyncio.run(storage.exists("video/123.mp4")) is True
    assert asyncio.run(_collect(storage.get_stream("video/123.mp4"))) == payload
    assert storage.get_local_path("video/123.mp4").read_bytes() == payload


def test_missing_and_directories_do_not_exist(storage):
    asyncio.run(storage.save("video/a.mp4", io.BytesIO(b"a")))

    assert asyncio.run(storage.exists("video/b.mp4")) is False
    assert asyncio.run(storage.exists("video")) is False


@pytest.mark.parametrize("path", ["../outside.mp4", "/etc/passwd", "video/../../x", "."])
def test_paths_escaping_base_are_refused(storage, path):
    with pytest.raises(InvalidResource):
        storage.get_local_path(path)


def test_create_storage_uses_configured_path(settings):
    storage = create_storage(settings)

    assert isinstance(storage, LocalStorage)
    assert storage.base_path == settings.storage_path.resolve()
    assert storage.base_path.is_dir()
