import pytest

from wlog.engine import EV_CALL_NEW, Engine
from wlog.errors import EmptyLogError, GeneratorStateError, LogOpenError, NoValidRecordsError
from wlog.generator import State, WlogGenerator


def _drain(gen, n):
    return [gen.produce_next() for _ in range(n)]


def test_records_in_file_order_then_shutdown(make_log):
    gen = WlogGenerator(make_log(b"/a\0/b\0/c\0"))
    gen.initialize()
    assert [t for t, _ in _drain(gen, 3)] == [b"/a", b"/b", b"/c"]
    assert not gen.shutdown_requested
    target, _ = gen.produce_next()
    assert target == b"/a"
    assert gen.shutdown_requested
    gen.finalize()


def test_loop_mode_never_requests_shutdown(make_log):
    gen = WlogGenerator(make_log(b"/a\0/b\0"), loop=True)
    gen.initialize()
    targets = [t for t, _ in _drain(gen, 7)]
    assert targets == [b"/a", b"/b", b"/a", b"/b", b"/a", b"/b", b"/a"]
    assert not gen.shutdown_requested
    gen.finalize()


def test_empty_records_are_skipped(make_log):
    gen = WlogGenerator(make_log(b"\0\0/a\0\0\0/b\0\0"), loop=True)
    gen.initialize()
    assert [t for t, _ in _drain(gen, 4)] == [b"/a", b"/b", b"/a", b"/b"]
    gen.finalize()


def test_single_nul_log_is_fatal(make_log):
    gen = WlogGenerator(make_log(b"\0"))
    gen.initialize()
    with pytest.raises(NoValidRecordsError) as exc:
        gen.produce_next()
    assert "does not contain any valid URIs" in str(exc.value)
    gen.finalize()


def test_only_header_records_are_fatal(make_log):
    gen = WlogGenerator(make_log(b"X: 1\x01\0\x01\0"), loop=True, embedded_headers=True)
    gen.initialize()
    with pytest.raises(NoValidRecordsError):
        gen.produce_next()
    gen.finalize()


def test_initialize_errors(tmp_path, make_log):
    with pytest.raises(LogOpenError):
        WlogGenerator(str(tmp_path / "missing")).initialize()
    with pytest.raises(EmptyLogError):
        WlogGenerator(make_log(b"")).initialize()


def test_embedded_headers_decoded(make_log):
    gen = WlogGenerator(make_log(b"Cookie: a=1\\n\x01/x\0\x01/y\0/z\0"), embedded_headers=True)
    gen.initialize()
    assert gen.produce_next() == (b"/x", b"Cookie: a=1\r\n")
    assert gen.produce_next() == (b"/y", None)
    assert gen.produce_next() == (b"/z", None)
    gen.finalize()


def test_state_machine_guards(make_log):
    gen = WlogGenerator(make_log(b"/a\0"))
    with pytest.raises(GeneratorStateError):
        gen.produce_next()
    gen.initialize()
    assert gen.state is State.READY
    gen.finalize()
    gen.finalize()
    assert gen.state is State.STOPPED
    with pytest.raises(GeneratorStateError):
        gen.produce_next()


def test_verbose_reports_each_uri(make_log, capsys):
    gen = WlogGenerator(make_log(b"/a\0"), verbose=True)
    gen.initialize()
    gen.produce_next()
    gen.finalize()
    assert "accessing URI `/a'" in capsys.readouterr().err


def test_engine_run_stops_after_log_replayed(make_log):
    engine = Engine(extra_headers=[b"X-Global: 1\r\n"])
    gen = WlogGenerator(make_log(b"H: 1\\n\x01/a\0/b\0"), embedded_headers=True)
    calls = engine.run(gen)
    # the wrapping call still goes out
    assert [c.target for c in calls] == [b"/a", b"/b", b"/a"]
    assert calls[0].headers == [b"X-Global: 1\r\n", b"H: 1\r\n"]
    assert calls[1].headers == [b"X-Global: 1\r\n"]
    assert engine.stopping
    assert gen.state is State.STOPPED


def test_attach_registers_call_new(make_log):
    engine = Engine()
    gen = WlogGenerator(make_log(b"/a\0"), loop=True)
    gen.initialize()
    gen.attach(engine)
    call = engine.new_call()
    assert call.target == b"/a"
    assert engine._handlers[EV_CALL_NEW] == [gen.on_call_new]
    gen.finalize()


def test_on_shutdown_callback(make_log):
    seen = []
    gen = WlogGenerator(make_log(b"/a\0"), on_shutdown=lambda: seen.append(True))
    gen.initialize()
    gen.produce_next()
    assert seen == []
    gen.produce_next()
    assert seen == [True]
    gen.finalize()


def test_initialize_twice_is_rejected(make_log):
    gen = WlogGenerator(make_log(b"/a\0"))
    gen.initialize()
    first = gen._buffer
    with pytest.raises(GeneratorStateError):
        gen.initialize()
    assert gen._buffer is first
    gen.finalize()
    assert first.closed
    with pytest.raises(GeneratorStateError):
        gen.initialize()
