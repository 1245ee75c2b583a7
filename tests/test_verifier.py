import pytest

from launchfetch.download import FileVerifier
from launchfetch.exceptions import IntegrityError, VerifyNotFoundError


@pytest.mark.asyncio
async def test_calc_sha1_streams_large_file(tmp_path, digest):
    data = b"x" * (3 * 64 * 1024 + 17)
    path = tmp_path / "big.jar"
    path.write_bytes(data)

    assert await FileVerifier.calc_sha1(str(path)) == digest(data)


@pytest.mark.asyncio
async def test_verify_sha1_ignores_case(tmp_path, digest):
    path = tmp_path / "file"
    path.write_bytes(b"hello")

    assert await FileVerifier.verify_sha1(str(path), digest(b"hello").upper())
    assert not await FileVerifier.verify_sha1(str(path), digest(b"other"))


@pytest.mark.asyncio
async def test_missing_file_raises_not_found(tmp_path):
    with pytest.raises(VerifyNotFoundError) as excinfo:
        await FileVerifier.calc_sha1(str(tmp_path / "absent"))
    assert isinstance(excinfo.value, IntegrityError)


def test_is_present(tmp_path):
    empty = tmp_path / "empty"
    empty.write_bytes(b"")
    full = tmp_path / "full"
    full.write_bytes(b"1")

    assert not FileVerifier.is_present(str(empty))
    assert not FileVerifier.is_present(str(tmp_path / "absent"))
    assert FileVerifier.is_present(str(full))
