import pytest

from player.load_sequencer import LoadSequencer, LoadState
from player.transport import Transport


@pytest.fixture
def transport(backend):
    return Transport(backend)


@pytest.fixture
def sequencer(transport, app_state):
    return LoadSequencer(transport, app_state)


def record(signal):
    seen = []
    signal.connect(lambda *args: seen.append(args))
    return seen


def test_load_enters_loading_and_sets_source(sequencer, backend, track_factory):
    a = track_factory("A")
    session = sequencer.load(a, autoplay=True)
    assert sequencer.state is LoadState.LOADING
    assert sequencer.pending_track is a
    assert sequencer.pending_autoplay
    assert session.session_id == sequencer.session_id
    assert backend.source == a.source.uri


def test_ready_commits_and_autoplays(sequencer, transport, backend, track_factory):
    a = track_factory("A")
    committed = record(sequencer.trackCommitted)
    sequencer.load(a, autoplay=True)
    backend.ready()

    assert committed == [(a,)]
    assert sequencer.state is LoadState.IDLE
    assert sequencer.committed_track is a
    assert transport.is_playing


def test_ready_without_autoplay_stays_paused(sequencer, transport, backend, track_factory):
    sequencer.load(track_factory("A"), autoplay=False)
    backend.ready()
    assert not transport.is_playing
    assert backend.count("play") == 0


def test_switch_before_first_ready_only_plays_latest(sequencer, transport, backend, track_factory):
    a, b = track_factory("A"), track_factory("B")
    committed = record(sequencer.trackCommitted)

    sequencer.load(a, autoplay=True)
    sequencer.load(b, autoplay=True)
    backend.ready(uri=a.source.uri)   # late ready from the replaced source
    assert committed == []
    assert not transport.is_playing

    backend.ready(uri=b.source.uri)
    assert committed == [(b,)]
    assert transport.is_playing
    assert backend.calls.count(("play", b.source.uri)) == 1
    assert ("play", a.source.uri) not in backend.calls


def test_latest_ready_first_then_stale_ready(sequencer, transport, backend, track_factory):
    a, b = track_factory("A"), track_factory("B")
    committed = record(sequencer.trackCommitted)

    sequencer.load(a, autoplay=True)
    sequencer.load(b, autoplay=True)
    backend.ready(uri=b.source.uri)
    backend.ready(uri=a.source.uri)

    assert committed == [(b,)]
    assert backend.count("play") == 1
    assert transport.loaded_resource is b.source


def test_cancel_suppresses_autoplay(sequencer, transport, backend, app_state, track_factory):
    a = track_factory("A")
    cancelled = record(sequencer.loadCancelled)
    sequencer.load(a, autoplay=True)

    assert sequencer.cancel() is True
    backend.ready(uri=a.source.uri)

    assert cancelled == [(None,)]
    assert sequencer.state is LoadState.IDLE
    assert not transport.is_playing
    assert backend.count("play") == 0
    assert transport.loaded_resource is None
    assert ("Loading cancelled", "info") in app_state.notifications


def test_cancel_reports_committed_track(sequencer, backend, track_factory):
    a, b = track_factory("A"), track_factory("B")
    sequencer.load(a)
    backend.ready()
    cancelled = record(sequencer.loadCancelled)

    sequencer.load(b, autoplay=True)
    sequencer.cancel()

    assert cancelled == [(a,)]


def test_cancel_when_idle_is_noop(sequencer, app_state):
    states = record(sequencer.stateChanged)
    assert sequencer.cancel() is False
    assert states == []
    assert app_state.notifications == []


def test_error_during_cancel_is_suppressed(sequencer, transport, app_state, track_factory):
    a = track_factory("A")
    failures = record(sequencer.loadFailed)
    sequencer.load(a, autoplay=True)

    # Some backends report an abort error synchronously while the source is dropped.
    transport.unload = lambda: transport.error.emit("aborted")
    sequencer.cancel()

    assert failures == []
    assert app_state.messages("error") == []
    assert sequencer.state is LoadState.IDLE


def test_error_while_loading_is_surfaced(sequencer, transport, backend, app_state, track_factory):
    a = track_factory("A")
    failures = record(sequencer.loadFailed)
    sequencer.load(a, autoplay=True)

    backend.fail("unsupported format")

    assert failures == [("unsupported format",)]
    assert sequencer.state is LoadState.IDLE
    assert sequencer.pending_track is None
    assert not transport.is_playing
    assert app_state.messages("error") == ["Error playing audio file"]


def test_stale_error_after_cancel_is_ignored(sequencer, backend, app_state, track_factory):
    sequencer.load(track_factory("A"), autoplay=True)
    sequencer.cancel()
    backend.fail("late failure")
    assert app_state.messages("error") == []


def test_autoplay_rejection_is_reported(sequencer, transport, backend, app_state, track_factory):
    backend.reject_play = True
    sequencer.load(track_factory("A"), autoplay=True)
    backend.ready()

    assert not transport.is_playing
    assert sequencer.state is LoadState.IDLE
    assert app_state.messages("error") == ["Error playing audio. Please try another file."]


def test_set_autoplay_changes_pending_intent(sequencer, transport, backend, track_factory):
    sequencer.load(track_factory("A"), autoplay=True)
    assert sequencer.set_autoplay(False)
    backend.ready()
    assert not transport.is_playing
    assert sequencer.set_autoplay(True) is False


def test_session_ids_increase(sequencer, track_factory):
    first = sequencer.load(track_factory("A"))
    second = sequencer.load(track_factory("B"))
    assert second.session_id > first.session_id
    assert not first.active
    assert second.active
