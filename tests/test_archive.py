import io
import tarfile
import zipfile

import pytest

from autounlocker import log
from autounlocker.archive import extract_tar, extract_zip, extraction_progress
from autounlocker.logstrategy import LogStrategy

CONTENT = b"archive helper content\n"


class RecordingStrategy(LogStrategy):
    def __init__(self):
        self.errors = []
        self.messages = []

    def verbose(self, message):
        self.messages.append(message)

    def debug(self, message):
        self.messages.append(message)

    def info(self, message):
        self.messages.append(message)

    def error(self, message):
        self.errors.append(message)


@pytest.fixture
def recorder():
    strategy = RecordingStrategy()
    log.init(strategy)
    yield strategy
    log.free()


@pytest.fixture
def tar_path(tmp_path):
    path = tmp_path / "a.tar"
    with tarfile.open(path, "w", format=tarfile.USTAR_FORMAT) as tar:
        info = tarfile.TarInfo("test.file")
        info.size = len(CONTENT)
        tar.addfile(info, io.BytesIO(CONTENT))
    return path


@pytest.fixture
def zip_path(tmp_path):
    path = tmp_path / "a.zip"
    with zipfile.ZipFile(path, "w") as archive:
        archive.writestr("test.file", CONTENT)
    return path


def test_extraction_progress_output(capsys):
    extraction_progress(0.5)
    assert capsys.readouterr().out == "Extraction progress: 50 %  \r"


def test_extract_tar_success(recorder, tar_path, tmp_path, capsys):
    out = tmp_path / "out.file"
    assert extract_tar(tar_path, "test.file", out) is True
    assert out.read_bytes() == CONTENT
    printed = capsys.readouterr().out
    assert "Extraction progress" in printed
    assert printed.endswith("\n")
    assert recorder.errors == []


def test_extract_tar_missing_member(recorder, tar_path, tmp_path):
    assert extract_tar(tar_path, "nope", tmp_path / "out") is False
    assert recorder.errors == ["TAR: Error while extracting nope. Not in the archive"]


def test_extract_tar_bad_archive(recorder, tmp_path):
    missing = tmp_path / "missing.tar"
    assert extract_tar(missing, "test.file", tmp_path / "out") is False
    assert len(recorder.errors) == 1
    assert recorder.errors[0].startswith(
        f"TAR: An error occurred while extracting {missing}. "
    )


def test_extract_zip_success(recorder, zip_path, tmp_path):
    out = tmp_path / "out.file"
    assert extract_zip(zip_path, "test.file", out) is True
    assert out.read_bytes() == CONTENT
    assert recorder.errors == []


def test_extract_zip_missing_member(recorder, zip_path, tmp_path):
    assert extract_zip(zip_path, "nope", tmp_path / "out") is False
    assert recorder.errors == ["ZIP: Error while extracting nope. Not in the archive"]


def test_extract_zip_bad_archive(recorder, tmp_path):
    bad = tmp_path / "bad.zip"
    bad.write_bytes(b"not a zip")
    assert extract_zip(bad, "test.file", tmp_path / "out") is False
    assert recorder.errors[0].startswith(f"ZIP: An error occurred while extracting {bad}. ")