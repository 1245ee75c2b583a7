import contextlib
import hashlib
import io
import os
import zipfile

import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer

from launchfetch.models import FetchOutcome


def sha1(data: bytes) -> str:
    return hashlib.sha1(data).hexdigest()


class FakeFetcher:
    """Writes canned bodies keyed by URL; failures[url] = n fails n times (-1: always)."""

    def __init__(self, responses=None, failures=None):
        self.responses = dict(responses or {})
        self.failures = dict(failures or {})
        self.calls = []

    async def fetch(self, url, directory, name):
        self.calls.append(url)
        remaining = self.failures.get(url, 0)
        if remaining != 0 or url not in self.responses:
            if remaining > 0:
                self.failures[url] = remaining - 1
            return FetchOutcome(
                failed=True, url=url, directory=directory, name=name, error="boom"
            )

        os.makedirs(directory, exist_ok=True)
        with open(os.path.join(directory, name), "wb") as f:
            f.write(self.responses[url])
        return FetchOutcome(failed=False, url=url, directory=directory, name=name)


def zip_bytes(entries: dict) -> bytes:
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as archive:
        for name, data in entries.items():
            archive.writestr(name, data)
    return buffer.getvalue()


@contextlib.asynccontextmanager
async def serve(routes: dict):
    app = web.Application()
    for path, handler in routes.items():
        app.router.add_get(path, handler)
    server = TestServer(app)
    await server.start_server()
    try:
        yield server
    finally:
        await server.close()


@pytest.fixture
def fake_fetcher():
    return FakeFetcher


@pytest.fixture
def http_server():
    return serve


@pytest.fixture
def make_zip():
    return zip_bytes


@pytest.fixture
def digest():
    return sha1


@pytest.fixture
def make_version():
    def _make(**overrides) -> dict:
        data = {
            "id": "1.12.2",
            "type": "release",
            "assets": "1.12",
            "mainClass": "net.minecraft.client.main.Main",
            "minecraftArguments": (
                "--username ${auth_player_name} --version ${version_name} "
                "--gameDir ${game_directory} --assetsDir ${assets_root} "
                "--assetIndex ${assets_index_name} --uuid ${auth_uuid} "
                "--accessToken ${auth_access_token} --userType ${user_type} "
                "--versionType ${version_type}"
            ),
            "downloads": {"client": {"url": "https://example.invalid/client.jar"}},
            "assetIndex": {
                "id": "1.12",
                "url": "https://example.invalid/indexes/1.12.json",
            },
            "libraries": [],
        }
        data.update(overrides)
        return data

    return _make
