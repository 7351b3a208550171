import io

import pytest

from mieru.log.entry import BufferPool, PanicError
from mieru.log.formatter import DaemonFormatter
from mieru.log.levels import Level
from mieru.log.logger import Logger


class CountingPool(BufferPool):
    def __init__(self):
        super().__init__()
        self.gets = 0
        self.buffers = []

    def get(self):
        self.gets += 1
        return bytearray()

    def put(self, buf):
        self.buffers.append(buf)


def test_set_buffer_pool_is_used():
    out = io.BytesIO()
    pool = CountingPool()
    logger = Logger(out=out)
    logger.buffer_pool = pool
    logger.info("test")
    assert pool.gets == 1
    assert len(pool.buffers) == 1
    assert out.getvalue() == b"test\n"


def test_level_filtering():
    out = io.BytesIO()
    logger = Logger(out=out, level=Level.INFO)
    logger.debug("%s", "debug")
    assert b"debug" not in out.getvalue()
    logger.warn("%s", "warn")
    assert b"warn" in out.getvalue()


def test_is_level_enabled():
    logger = Logger(out=io.BytesIO(), level=Level.WARN)
    assert logger.is_level_enabled(Level.ERROR)
    assert logger.is_level_enabled(Level.WARN)
    assert not logger.is_level_enabled(Level.INFO)


def test_text_output():
    out = io.StringIO()
    logger = Logger(out=out)
    logger.print("hello %d", 3)
    assert out.getvalue() == "hello 3\n"


def test_fatal_calls_exit_once():
    codes = []
    logger = Logger(out=io.BytesIO(), exit_func=codes.append)
    logger.fatal("bye")
    assert codes == [1]


def test_panic_raises_with_entry():
    logger = Logger(out=io.BytesIO())
    err = RuntimeError("boom")
    with pytest.raises(PanicError) as info:
        logger.with_field("err", err).panic("kaboom %s", True)
    assert info.value.entry.message == "kaboom True"
    assert info.value.entry.data["err"] is err


def test_with_error_and_fields():
    logger = Logger(out=io.BytesIO())
    err = ValueError("x")
    assert logger.with_error(err).data["error"] is err
    entry = logger.with_fields({"a": 1, "b": 2})
    assert entry.data == {"a": 1, "b": 2}
    assert logger.with_context("ctx").context == "ctx"


def test_daemon_formatter_fields():
    out = io.BytesIO()
    logger = Logger(out=out, formatter=DaemonFormatter(no_timestamp=True))
    logger.with_fields({"b": 2, "a": 1}).info("msg")
    assert out.getvalue() == b"INFO msg a=1 b=2\n"


def test_set_no_lock_still_writes():
    out = io.BytesIO()
    logger = Logger(out=out)
    logger.set_no_lock()
    logger.error("oops")
    assert out.getvalue() == b"oops\n"