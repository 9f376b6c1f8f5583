import io

import pytest

from autounlocker import log
from autounlocker.logstrategy import StreamLogStrategy


@pytest.fixture
def stream():
    buffer = io.StringIO()
    log.init(StreamLogStrategy(buffer))
    yield buffer
    log.free()


def test_info_plain(stream):
    log.info("hello")
    assert stream.getvalue() == "::INFO hello\n"


def test_printf_style_arguments(stream):
    log.error("TAR: Error while extracting %s. Not in the archive", "a.txt")
    assert stream.getvalue() == "::ERROR TAR: Error while extracting a.txt. Not in the archive\n"


def test_percent_without_args_left_alone(stream):
    log.info("100 %")
    assert stream.getvalue() == "::INFO 100 %\n"


def test_all_levels_emitted(stream):
    log.verbose("v")
    log.debug("d")
    log.info("i")
    log.error("e")
    assert stream.getvalue().splitlines() == ["::VERBOSE v", "::DEBUG d", "::INFO i", "::ERROR e"]


def test_level_filtering(stream, monkeypatch):
    monkeypatch.setattr(log.config, "LOG_LEVEL", log.LogLevel.INFO)
    log.verbose("v")
    log.debug("d")
    log.info("i")
    log.error("e")
    assert stream.getvalue().splitlines() == ["::INFO i", "::ERROR e"]


def test_uninitialized_raises():
    log.free()
    with pytest.raises(RuntimeError):
        log.error("x")


def test_reinit_switches_destination(stream):
    other = io.StringIO()
    log.init(StreamLogStrategy(other))
    log.info("moved")
    assert stream.getvalue() == ""
    assert other.getvalue() == "::INFO moved\n"