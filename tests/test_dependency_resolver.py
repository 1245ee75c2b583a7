import asyncio
import json
import os

import pytest

from launchfetch.download import WorkerPool
from launchfetch.exceptions import ArchiveError, ManifestError
from launchfetch.models import ForgeDescriptor, ForgeLibrary, VersionDescriptor
from launchfetch.services import DependencyResolver

LIBRARIES_URL = "https://libraries.invalid/"


def library(name: str, path: str) -> dict:
    return {
        "name": name,
        "downloads": {
            "artifact": {"path": path, "url": f"https://libs.invalid/{path}"}
        },
    }


def make_resolver(fetcher) -> DependencyResolver:
    return DependencyResolver(fetcher, WorkerPool(3), libraries_url=LIBRARIES_URL)


@pytest.mark.asyncio
async def test_resolve_classes_keeps_order_and_duplicates(
    tmp_path, fake_fetcher, make_version
):
    libs = [
        library("a:one:1", "a/one/1/one-1.jar"),
        {"name": "natives:only:1", "downloads": {"classifiers": {}}},
        library("b:two:2", "b/two/2/two-2.jar"),
        library("a:one:1", "a/one/1/one-1.jar"),
    ]
    version = VersionDescriptor.from_dict(make_version(libraries=libs))
    existing = tmp_path / "libraries" / "b" / "two" / "2"
    existing.mkdir(parents=True)
    (existing / "two-2.jar").write_bytes(b"present")

    fetcher = fake_fetcher({"https://libs.invalid/a/one/1/one-1.jar": b"jar"})
    paths = await make_resolver(fetcher).resolve_classes(str(tmp_path), version)

    root = str(tmp_path)
    expected_one = os.path.join(root, "libraries", "a", "one", "1", "one-1.jar")
    assert paths == [
        expected_one,
        os.path.join(root, "libraries", "b", "two", "2", "two-2.jar"),
        expected_one,
    ]
    assert fetcher.calls == ["https://libs.invalid/a/one/1/one-1.jar"]
    assert os.path.isfile(expected_one)


@pytest.mark.asyncio
async def test_failed_library_is_still_listed(tmp_path, fake_fetcher, make_version):
    version = VersionDescriptor.from_dict(
        make_version(libraries=[library("a:one:1", "a/one/1/one-1.jar")])
    )
    paths = await make_resolver(fake_fetcher()).resolve_classes(str(tmp_path), version)
    assert paths == [os.path.join(str(tmp_path), "libraries", "a", "one", "1", "one-1.jar")]


def forge_jar(tmp_path, make_zip, libraries) -> str:
    path = tmp_path / "forge-installer.jar"
    metadata = {
        "id": "1.12.2-forge",
        "mainClass": "net.minecraft.launchwrapper.Launch",
        "minecraftArguments": "--username ${auth_player_name} --tweakClass x",
        "libraries": libraries,
    }
    path.write_bytes(make_zip({"version.json": json.dumps(metadata)}))
    return str(path)


@pytest.mark.asyncio
async def test_resolve_forge_overlay(tmp_path, fake_fetcher, make_zip, make_version):
    libraries = [
        {"name": "net.minecraftforge:forge:1.12.2-14.23.5.2859"},
        {"name": "org.ow2.asm:asm-all:5.2", "url": "https://maven.invalid/repo"},
        {"name": "net.sf.jopt-simple:jopt-simple:5.0.3", "clientreq": True},
        {"name": "lzma:lzma:0.0.1", "serverreq": True},
        {"name": "com.example:optional:1.0"},
        {"name": "com.example:present:2.0", "clientreq": True},
    ]
    jar = forge_jar(tmp_path, make_zip, libraries)
    root = tmp_path / "game"
    present = root / "libraries" / "com" / "example" / "present" / "2.0"
    present.mkdir(parents=True)
    (present / "present-2.0.jar").write_bytes(b"jar")

    fetcher = fake_fetcher(
        {
            "https://maven.invalid/repo/org/ow2/asm/asm-all/5.2/asm-all-5.2.jar": b"asm",
            f"{LIBRARIES_URL}net/sf/jopt-simple/jopt-simple/5.0.3/jopt-simple-5.0.3.jar": b"jopt",
        }
    )
    version = VersionDescriptor.from_dict(make_version())
    paths, forge = await make_resolver(fetcher).resolve_forge(str(root), version, jar)

    assert isinstance(forge, ForgeDescriptor)
    assert forge.main_class == "net.minecraft.launchwrapper.Launch"
    assert (root / "forge" / "1.12.2" / "version.json").is_file()

    libs = os.path.join(str(root), "libraries")
    assert paths == [
        os.path.join(libs, "org", "ow2", "asm", "asm-all", "5.2", "asm-all-5.2.jar"),
        os.path.join(libs, "net", "sf", "jopt-simple", "jopt-simple", "5.0.3", "jopt-simple-5.0.3.jar"),
        os.path.join(libs, "lzma", "lzma", "0.0.1", "lzma-0.0.1.jar"),
        os.path.join(libs, "com", "example", "present", "2.0", "present-2.0.jar"),
    ]
    assert sorted(fetcher.calls) == sorted(
        [
            "https://maven.invalid/repo/org/ow2/asm/asm-all/5.2/asm-all-5.2.jar",
            f"{LIBRARIES_URL}net/sf/jopt-simple/jopt-simple/5.0.3/jopt-simple-5.0.3.jar",
            f"{LIBRARIES_URL}lzma/lzma/0.0.1/lzma-0.0.1.jar",
        ]
    )


@pytest.mark.asyncio
async def test_resolve_bundle_with_overlay(tmp_path, fake_fetcher, make_zip, make_version):
    jar = forge_jar(tmp_path, make_zip, [{"name": "x:y:1", "clientreq": True}])
    version = VersionDescriptor.from_dict(
        make_version(libraries=[library("a:one:1", "a/one/1/one-1.jar")])
    )
    fetcher = fake_fetcher(
        {
            "https://libs.invalid/a/one/1/one-1.jar": b"1",
            f"{LIBRARIES_URL}x/y/1/y-1.jar": b"2",
        }
    )
    resolver = make_resolver(fetcher)

    plain = await resolver.resolve(str(tmp_path), version)
    bundle = await resolver.resolve(str(tmp_path), version, jar)

    assert plain.descriptor is version
    assert isinstance(bundle.descriptor, ForgeDescriptor)
    assert bundle.classpath == plain.classpath + [
        os.path.join(str(tmp_path), "libraries", "x", "y", "1", "y-1.jar")
    ]


@pytest.mark.asyncio
async def test_forge_jar_errors(tmp_path, fake_fetcher, make_zip, make_version):
    version = VersionDescriptor.from_dict(make_version())
    resolver = make_resolver(fake_fetcher())

    no_metadata = tmp_path / "empty.jar"
    no_metadata.write_bytes(make_zip({"other.txt": "x"}))
    with pytest.raises(ArchiveError):
        await resolver.resolve_forge(str(tmp_path), version, str(no_metadata))

    bad_metadata = tmp_path / "bad.jar"
    bad_metadata.write_bytes(make_zip({"version.json": '{"libraries": "nope"}'}))
    with pytest.raises(ManifestError):
        await resolver.resolve_forge(str(tmp_path), version, str(bad_metadata))


def test_repository_selection(fake_fetcher):
    resolver = make_resolver(fake_fetcher())
    assert resolver.repository_for(ForgeLibrary("a:b:1", url="https://m.invalid")) == "https://m.invalid/"
    assert resolver.repository_for(ForgeLibrary("a:b:1", url="https://m.invalid/")) == "https://m.invalid/"
    assert resolver.repository_for(ForgeLibrary("a:b:1", serverreq=True)) == LIBRARIES_URL
    assert resolver.repository_for(ForgeLibrary("a:b:1")) is None


def test_build_classpath():
    assert DependencyResolver.build_classpath(["a.jar", "b.jar"], "c.jar", "windows") == "a.jar;b.jar;c.jar"
    assert DependencyResolver.build_classpath(["a.jar"], "c.jar", "linux") == "a.jar:c.jar"


class InflightFetcher:
    """Wraps a fetcher and counts concurrent fetches per destination."""

    def __init__(self, fetcher):
        self.fetcher = fetcher
        self.calls = fetcher.calls
        self.inflight = {}
        self.peak = {}

    async def fetch(self, url, directory, name):
        path = os.path.join(directory, name)
        self.inflight[path] = self.inflight.get(path, 0) + 1
        self.peak[path] = max(self.peak.get(path, 0), self.inflight[path])
        await asyncio.sleep(0.01)
        try:
            return await self.fetcher.fetch(url, directory, name)
        finally:
            self.inflight[path] -= 1


@pytest.mark.asyncio
async def test_repeated_library_is_fetched_once(tmp_path, fake_fetcher, make_version):
    lwjgl = library("org.lwjgl:lwjgl:3.2.2", "org/lwjgl/lwjgl/3.2.2/lwjgl-3.2.2.jar")
    version = VersionDescriptor.from_dict(make_version(libraries=[lwjgl, lwjgl]))
    url = "https://libs.invalid/org/lwjgl/lwjgl/3.2.2/lwjgl-3.2.2.jar"
    fetcher = InflightFetcher(fake_fetcher({url: b"jar"}))

    paths = await make_resolver(fetcher).resolve_classes(str(tmp_path), version)

    expected = os.path.join(str(tmp_path), "libraries", "org", "lwjgl", "lwjgl", "3.2.2", "lwjgl-3.2.2.jar")
    assert paths == [expected, expected]
    assert fetcher.calls == [url]
    assert fetcher.peak == {expected: 1}


@pytest.mark.asyncio
async def test_repeated_forge_library_is_fetched_once(
    tmp_path, fake_fetcher, make_zip, make_version
):
    entry = {"name": "org.ow2.asm:asm-all:5.2", "clientreq": True}
    jar = forge_jar(tmp_path, make_zip, [entry, dict(entry)])
    url = f"{LIBRARIES_URL}org/ow2/asm/asm-all/5.2/asm-all-5.2.jar"
    fetcher = InflightFetcher(fake_fetcher({url: b"asm"}))

    version = VersionDescriptor.from_dict(make_version())
    paths, _ = await make_resolver(fetcher).resolve_forge(str(tmp_path), version, jar)

    assert len(paths) == 2 and paths[0] == paths[1]
    assert fetcher.calls == [url]
    assert fetcher.peak == {paths[0]: 1}
