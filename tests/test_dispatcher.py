"""Tests for the background render dispatcher."""

import threading

import pytest

import glyphgen.dispatcher as dispatcher_mod
from glyphgen.capabilities import TerminalCapabilities
from glyphgen.dispatcher import (
    Mailbox,
    RenderDispatcher,
    RenderFailure,
    RenderRequest,
    RenderSuccess,
    ResultTracker,
)
from glyphgen.errors import ErrorKind, InvalidConfig
from glyphgen.rendering.ascii_mode import AsciiConfig
from glyphgen.rendering.renderer import EngineKind, Rendered
from glyphgen.rendering.text_mode import PerCharacter, TextConfig
from glyphgen.rendering.unicode_mode import UnicodeConfig

TIMEOUT = 10.0


def _collect(d, n):
    out = []
    for _ in range(n):
        r = d.get_result(timeout=TIMEOUT)
        assert r is not None, "timed out waiting for a render result"
        out.append(r)
    return out


@pytest.fixture
def dispatcher():
    d = RenderDispatcher()
    yield d
    d.shutdown()


class TestLatestWins:
    def test_only_newest_queued_request_runs(self, gradient_image):
        d = RenderDispatcher(autostart=False)
        try:
            for width in (40, 60, 80):
                d.submit(gradient_image, AsciiConfig(target_width=width))
            d.start()
            result = d.get_result(timeout=TIMEOUT)
            assert isinstance(result, RenderSuccess)
            assert result.sequence == 3
            assert all(len(line) == 80 for line in result.output.split("\n"))
            assert d.get_result(timeout=0.3) is None
        finally:
            d.shutdown()

    def test_sequences_are_per_engine(self, gradient_image):
        d = RenderDispatcher(autostart=False)
        try:
            a1 = d.submit(gradient_image, AsciiConfig(target_width=10))
            a2 = d.submit(gradient_image, AsciiConfig(target_width=10))
            t1 = d.submit("hi", TextConfig())
            assert (a1.sequence, a2.sequence, t1.sequence) == (1, 2, 1)
            assert d.latest_sequence(EngineKind.ASCII) == 2
            assert d.latest_sequence(EngineKind.UNICODE) == 0
        finally:
            d.shutdown()

    def test_is_current(self, dispatcher, white_4x4):
        dispatcher.submit(white_4x4, AsciiConfig(target_width=4))
        first = dispatcher.get_result(timeout=TIMEOUT)
        assert dispatcher.is_current(first)
        dispatcher.submit(white_4x4, AsciiConfig(target_width=4))
        assert not dispatcher.is_current(first)
        assert dispatcher.is_current(dispatcher.get_result(timeout=TIMEOUT))


class TestFailureIsolation:
    def test_invalid_then_valid_both_arrive(self, dispatcher, white_4x4):
        bad = dispatcher.submit(white_4x4, AsciiConfig(target_width=0))
        good = dispatcher.submit(white_4x4, AsciiConfig(target_width=4))
        results = {r.sequence: r for r in _collect(dispatcher, 2)}
        assert isinstance(results[bad.sequence], RenderFailure)
        assert results[bad.sequence].kind == ErrorKind.INVALID_CONFIG
        assert isinstance(results[good.sequence], RenderSuccess)

        dispatcher.submit(white_4x4, AsciiConfig(target_width=4))
        assert dispatcher.get_result(timeout=TIMEOUT).ok

    def test_empty_input_is_reported(self, dispatcher, empty_image):
        dispatcher.submit(empty_image, AsciiConfig(target_width=4))
        result = dispatcher.get_result(timeout=TIMEOUT)
        assert result.kind == ErrorKind.EMPTY_INPUT

    def test_worker_side_error(self, dispatcher):
        dispatcher.submit("abc", TextConfig(gradient=PerCharacter(())))
        result = dispatcher.get_result(timeout=TIMEOUT)
        assert isinstance(result, RenderFailure)
        assert result.kind == ErrorKind.INVALID_CONFIG
        assert result.engine == EngineKind.TEXT

    def test_unexpected_exception_becomes_internal_failure(self, monkeypatch, white_4x4):
        real_render = dispatcher_mod.render
        calls = []

        def flaky(payload, config, capabilities=None):
            calls.append(config)
            if len(calls) == 1:
                raise ZeroDivisionError("boom")
            return real_render(payload, config, capabilities)

        monkeypatch.setattr(dispatcher_mod, "render", flaky)
        with RenderDispatcher() as d:
            d.submit(white_4x4, AsciiConfig(target_width=4))
            first = d.get_result(timeout=TIMEOUT)
            assert first.kind == ErrorKind.INTERNAL_FAILURE
            assert "boom" in first.message
            d.submit(white_4x4, AsciiConfig(target_width=4))
            assert d.get_result(timeout=TIMEOUT).ok

    def test_validation_failure_supersedes_pending(self, white_4x4):
        d = RenderDispatcher(autostart=False)
        try:
            d.submit(white_4x4, AsciiConfig(target_width=4))
            d.submit(white_4x4, AsciiConfig(target_width=0))
            d.start()
            result = d.get_result(timeout=TIMEOUT)
            assert result.sequence == 2 and not result.ok
            assert d.get_result(timeout=0.3) is None
        finally:
            d.shutdown()

    def test_unicode_refused_on_ascii_only_terminal(self, white_4x4):
        with RenderDispatcher(TerminalCapabilities(unicode=False)) as d:
            d.submit(white_4x4, UnicodeConfig(target_width=4))
            assert d.get_result(timeout=TIMEOUT).kind == ErrorKind.INVALID_CONFIG
            d.submit(white_4x4, AsciiConfig(target_width=4))
            assert d.get_result(timeout=TIMEOUT).ok

    def test_non_config_is_rejected_immediately(self, dispatcher, white_4x4):
        with pytest.raises(InvalidConfig):
            dispatcher.submit(white_4x4, object())


class TestEngines:
    def test_all_engines_concurrently(self, dispatcher, gradient_image):
        dispatcher.submit(gradient_image, AsciiConfig(target_width=20))
        dispatcher.submit(gradient_image, UnicodeConfig(target_width=20))
        dispatcher.submit("Hello", TextConfig())
        results = _collect(dispatcher, 3)
        assert {r.engine for r in results} == set(EngineKind)
        assert all(r.ok for r in results)
        assert all(r.elapsed_ms >= 0.0 for r in results)

    def test_on_result_callback(self, white_4x4):
        seen = []
        got = threading.Event()

        def on_result(result):
            seen.append(result)
            got.set()

        with RenderDispatcher(on_result=on_result) as d:
            d.submit(white_4x4, AsciiConfig(target_width=4))
            assert got.wait(TIMEOUT)
        assert seen[0].ok and seen[0].output == "@@@@\n@@@@"


class TestShutdown:
    def test_submit_after_shutdown_raises(self, white_4x4):
        d = RenderDispatcher()
        d.shutdown()
        with pytest.raises(RuntimeError):
            d.submit(white_4x4, AsciiConfig(target_width=4))

    def test_shutdown_is_idempotent_and_joins_workers(self):
        d = RenderDispatcher()
        d.shutdown()
        d.shutdown()
        assert d.closed
        assert not any(t.is_alive() for t in d._threads.values())

    def test_shutdown_before_start(self, white_4x4):
        d = RenderDispatcher(autostart=False)
        d.submit(white_4x4, AsciiConfig(target_width=4))
        d.shutdown()
        assert d.poll_results() == []

    @pytest.mark.parametrize("abandon", [True, False])
    def test_pending_request_policy(self, monkeypatch, white_4x4, abandon):
        started = threading.Event()
        release = threading.Event()

        def slow(payload, config, capabilities=None):
            started.set()
            release.wait(TIMEOUT)
            return Rendered("x", [[("", "x")]])

        monkeypatch.setattr(dispatcher_mod, "render", slow)
        d = RenderDispatcher()
        d.submit(white_4x4, AsciiConfig(target_width=4))
        assert started.wait(TIMEOUT)
        d.submit(white_4x4, AsciiConfig(target_width=4))
        d.shutdown(wait=False, abandon_pending=abandon)
        release.set()
        d.shutdown(wait=True)

        sequences = sorted(r.sequence for r in d.poll_results())
        assert sequences == ([1] if abandon else [1, 2])


class TestMailbox:
    def _req(self, seq):
        return RenderRequest(EngineKind.ASCII, None, AsciiConfig(), seq)

    def test_late_older_request_does_not_replace_newer(self):
        box = Mailbox()
        box.put(self._req(2))
        assert box.put(self._req(1)).sequence == 1
        assert box.take().sequence == 2

    def test_discard_older_keeps_newer(self):
        box = Mailbox()
        box.put(self._req(3))
        assert box.discard_older(2) is None
        assert box.discard_older(4).sequence == 3
        assert not box.pending

    def test_put_after_close_raises(self):
        box = Mailbox()
        box.close()
        with pytest.raises(RuntimeError):
            box.put(self._req(1))

    def test_put_displaces_unstarted(self):
        box = Mailbox()
        assert box.put(self._req(1)) is None
        assert box.put(self._req(2)).sequence == 1
        assert box.take().sequence == 2
        assert not box.pending

    def test_take_returns_none_once_closed(self):
        box = Mailbox()
        box.close()
        assert box.take() is None

    def test_close_keeps_pending_on_request(self):
        box = Mailbox()
        box.put(self._req(1))
        assert box.close(abandon_pending=False) is None
        assert box.take().sequence == 1
        assert box.take() is None


class TestResultTracker:
    def _ok(self, engine, seq):
        return RenderSuccess(engine, seq, "", 0.0, [])

    def test_out_of_order_results_are_ignored(self):
        tracker = ResultTracker()
        assert tracker.accept(self._ok(EngineKind.ASCII, 2))
        assert not tracker.accept(self._ok(EngineKind.ASCII, 1))
        assert not tracker.accept(self._ok(EngineKind.ASCII, 2))
        assert tracker.accept(self._ok(EngineKind.ASCII, 3))
        assert tracker.last_accepted(EngineKind.ASCII) == 3

    def test_engines_are_independent(self):
        tracker = ResultTracker()
        assert tracker.accept(self._ok(EngineKind.ASCII, 5))
        assert tracker.accept(self._ok(EngineKind.TEXT, 1))
        assert tracker.accept(RenderFailure(EngineKind.UNICODE, 1, ErrorKind.EMPTY_INPUT, "empty"))


def test_shutdown_timeout_leaves_busy_worker(monkeypatch, white_4x4):
    started = threading.Event()
    release = threading.Event()

    def stuck(payload, config, capabilities=None):
        started.set()
        release.wait(TIMEOUT)
        return Rendered("x", [[("", "x")]])

    monkeypatch.setattr(dispatcher_mod, "render", stuck)
    d = RenderDispatcher()
    d.submit(white_4x4, AsciiConfig(target_width=4))
    assert started.wait(TIMEOUT)
    d.shutdown(timeout=0.1)
    assert d._threads[EngineKind.ASCII].is_alive()
    release.set()
    d.shutdown()
    assert not d._threads[EngineKind.ASCII].is_alive()


def test_concurrent_submits_settle_on_newest(monkeypatch, white_4x4):
    real_validate = dispatcher_mod.validate
    entered = threading.Event()
    release = threading.Event()

    def held_validate(payload, config, capabilities=None):
        if config.target_width == 1:
            entered.set()
            release.wait(TIMEOUT)
        return real_validate(payload, config, capabilities)

    monkeypatch.setattr(dispatcher_mod, "validate", held_validate)
    d = RenderDispatcher(autostart=False)
    try:
        older = threading.Thread(target=d.submit, args=(white_4x4, AsciiConfig(target_width=1)))
        older.start()
        assert entered.wait(TIMEOUT)
        newer = d.submit(white_4x4, AsciiConfig(target_width=2))
        release.set()
        older.join(TIMEOUT)
        d.start()
        result = d.get_result(timeout=TIMEOUT)
        assert result.ok and result.sequence == newer.sequence == 2
        assert d.get_result(timeout=0.3) is None
    finally:
        d.shutdown()


def test_submit_racing_shutdown_raises(monkeypatch, white_4x4):
    real_validate = dispatcher_mod.validate
    d = RenderDispatcher()

    def closing_validate(payload, config, capabilities=None):
        d.shutdown()
        return real_validate(payload, config, capabilities)

    monkeypatch.setattr(dispatcher_mod, "validate", closing_validate)
    with pytest.raises(RuntimeError):
        d.submit(white_4x4, AsciiConfig(target_width=4))
