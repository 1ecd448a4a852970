import pytest

from core.models import PersistedSettings, RepeatMode
from player.load_sequencer import LoadState
from player.playback import EMPTY_PLAYLIST_MESSAGE


def songs(factory, *titles, transient=False):
    return [factory(t, artist="Various", album="Mix", transient=transient) for t in titles]


@pytest.fixture
def loaded_player(player, track_factory):
    """Four tracks, the first one committed and paused."""
    player.controller.add_tracks(songs(track_factory, "Alpha", "Beta", "Gamma", "Delta"), announce=False)
    player.backend.ready()
    return player


def assert_index_invariant(p):
    n = p.store.visible_count()
    idx = p.controller.current_index
    if n == 0:
        assert idx == -1
    else:
        assert 0 <= idx < n


def playing_title(p):
    return p.controller.selected_track.title if p.controller.selected_track else None


# ----------------------------
# Selection basics
# ----------------------------

def test_empty_playlist_has_no_selection(player):
    assert player.controller.current_index == -1
    assert player.controller.selected_track is None


def test_first_add_selects_without_playing(player, track_factory):
    player.controller.add_tracks(songs(track_factory, "Alpha", "Beta"))
    assert player.controller.current_index == 0
    assert player.sequencer.state is LoadState.LOADING
    assert not player.sequencer.pending_autoplay
    assert player.app_state.messages("success") == ["Added 2 songs to playlist"]

    player.backend.ready()
    assert not player.transport.is_playing


def test_add_single_track_message(player, track_factory):
    player.controller.add_tracks(songs(track_factory, "Alpha"))
    assert player.app_state.messages("success") == ['Added "Alpha" to playlist']


def test_empty_playlist_actions_warn(player):
    player.controller.toggle_play_pause()
    player.controller.next()
    player.controller.previous()
    assert player.app_state.messages("warning") == [EMPTY_PLAYLIST_MESSAGE] * 3
    assert player.backend.sources == []


# ----------------------------
# Next / previous
# ----------------------------

def test_next_wraps_to_first(loaded_player):
    c = loaded_player.controller
    c.load_track(3)
    c.next()
    assert c.current_index == 0
    assert loaded_player.sequencer.pending_autoplay


def test_previous_wraps_to_last(loaded_player):
    c = loaded_player.controller
    c.previous()
    assert c.current_index == 3
    assert playing_title(loaded_player) == "Delta"


def test_next_plays_when_ready(loaded_player):
    p = loaded_player
    p.controller.next()
    p.backend.ready()
    assert p.controller.current_index == 1
    assert p.transport.is_playing
    assert p.transport.loaded_resource is p.controller.selected_track.source


def test_shuffle_never_repeats_current(loaded_player):
    c = loaded_player.controller
    c.set_shuffle(True)
    seen = set()
    for _ in range(200):
        before = c.current_index
        c.next()
        after = c.current_index
        assert after != before
        assert 0 <= after < 4
        seen.add(after)
    assert seen == {0, 1, 2, 3}


def test_shuffle_with_one_track_stays(player, track_factory):
    player.controller.add_tracks(songs(track_factory, "Solo"), announce=False)
    player.controller.set_shuffle(True)
    player.controller.next()
    assert player.controller.current_index == 0


def test_shuffle_from_hidden_selection_can_pick_any_visible(loaded_player):
    c = loaded_player.controller
    c.set_shuffle(True)
    picked = set()
    for _ in range(60):
        c.search("")
        c.load_track(1)                 # Beta
        c.search("l")                   # Alpha and Delta visible, Beta hidden
        c.next()
        picked.add(playing_title(loaded_player))
    assert picked == {"Alpha", "Delta"}


# ----------------------------
# End of track
# ----------------------------

def test_repeat_all_wraps_at_end(player, track_factory):
    p = player
    p.controller.add_tracks(songs(track_factory, "A", "B"), announce=False)
    p.backend.ready()
    p.controller.set_repeat(RepeatMode.ALL)

    p.controller.load_track(1, autoplay=True)
    p.backend.ready()
    assert p.transport.is_playing

    p.backend.end()
    p.backend.ready()

    assert p.controller.current_index == 0
    assert p.transport.is_playing


def test_repeat_off_single_track_stops_at_start(player, track_factory):
    p = player
    p.controller.add_tracks(songs(track_factory, "Only"), announce=False)
    p.backend.ready()
    p.controller.play()
    p.transport.seek(170)

    p.backend.end()

    assert not p.transport.is_playing
    assert p.controller.current_index == 0
    assert p.transport.position == 0.0
    assert p.sequencer.state is LoadState.IDLE


def test_repeat_off_advances_when_not_last(loaded_player):
    p = loaded_player
    p.controller.play()
    p.backend.end()
    assert p.controller.current_index == 1
    assert p.sequencer.pending_autoplay


def test_repeat_one_restarts_same_track(loaded_player):
    p = loaded_player
    p.controller.set_repeat(RepeatMode.ONE)
    p.controller.play()
    p.transport.seek(100)

    p.backend.end()

    assert p.controller.current_index == 0
    assert p.transport.is_playing
    assert p.transport.position == 0.0
    assert p.backend.count("play") == 2


# ----------------------------
# Modes and volume
# ----------------------------

def test_cycle_repeat_notifies_and_persists(player):
    c = player.controller
    assert c.cycle_repeat() is RepeatMode.ALL
    assert c.cycle_repeat() is RepeatMode.ONE
    assert c.cycle_repeat() is RepeatMode.OFF
    assert player.app_state.messages("success") == ["Repeat all", "Repeat one", "Repeat off"]
    assert player.persistence.saved["repeat"] == 0


def test_toggle_shuffle_notifies(player):
    assert player.controller.toggle_shuffle() is True
    assert player.controller.toggle_shuffle() is False
    assert player.app_state.messages("success") == ["Shuffle enabled", "Shuffle disabled"]
    assert player.persistence.saved["shuffle"] is False


def test_change_volume_clamps_and_persists(player):
    player.controller.change_volume(0.5)
    assert player.transport.state.volume == 1.0
    assert player.persistence.saved["volume"] == 1.0
    player.controller.change_volume(-2)
    assert player.transport.state.volume == 0.0


# ----------------------------
# Play / pause / cancel
# ----------------------------

def test_toggle_play_pause(loaded_player):
    p = loaded_player
    p.controller.toggle_play_pause()
    assert p.transport.is_playing
    p.controller.toggle_play_pause()
    assert not p.transport.is_playing


def test_play_while_loading_sets_autoplay(player, track_factory):
    p = player
    p.controller.add_tracks(songs(track_factory, "A"), announce=False)
    p.controller.play()
    assert p.sequencer.pending_autoplay
    p.backend.ready()
    assert p.transport.is_playing


def test_pause_while_loading_drops_autoplay(loaded_player):
    p = loaded_player
    p.controller.load_track(2, autoplay=True)
    p.controller.pause()
    p.backend.ready()
    assert not p.transport.is_playing


def test_cancel_returns_to_committed_track(loaded_player):
    p = loaded_player
    p.controller.load_track(2, autoplay=True)
    assert p.controller.cancel_loading()
    p.backend.ready()

    assert p.controller.current_index == 0
    assert not p.transport.is_playing
    assert p.backend.count("play") == 0


def test_play_after_cancelled_first_load_reloads(player, track_factory):
    p = player
    p.controller.add_tracks(songs(track_factory, "A", "B"), announce=False)
    p.controller.cancel_loading()
    assert p.transport.loaded_resource is None
    assert p.controller.current_index == 0

    p.controller.play()
    p.backend.ready()
    assert p.transport.is_playing
    assert playing_title(p) == "A"


def test_load_out_of_range_is_ignored(loaded_player):
    assert loaded_player.controller.load_track(9) is False
    assert loaded_player.controller.current_index == 0


# ----------------------------
# Removal
# ----------------------------

def test_remove_only_track_clears_selection(player, track_factory):
    p = player
    p.controller.add_tracks(songs(track_factory, "Only"), announce=False)
    p.backend.ready()
    p.controller.play()

    removed = p.controller.remove_track(0)

    assert removed.title == "Only"
    assert p.controller.current_index == -1
    assert p.controller.selected_track is None
    assert not p.transport.is_playing
    assert p.transport.loaded_resource is None
    assert 'Removed "Only"' in p.app_state.messages("success")
    assert p.persistence.saved["currentTrackIndex"] == -1


def test_remove_before_selection_keeps_track(loaded_player):
    p = loaded_player
    p.controller.load_track(2)
    p.backend.ready()

    p.controller.remove_track(0)

    assert p.controller.current_index == 1
    assert playing_title(p) == "Gamma"
    assert_index_invariant(p)


def test_remove_playing_track_moves_to_next(loaded_player):
    p = loaded_player
    p.controller.load_track(1, autoplay=True)
    p.backend.ready()
    assert p.transport.is_playing

    p.controller.remove_track(1)
    assert playing_title(p) == "Gamma"
    assert p.controller.current_index == 1
    assert p.sequencer.pending_autoplay

    p.backend.ready()
    assert p.transport.is_playing


def test_remove_last_selected_clamps(loaded_player):
    p = loaded_player
    p.controller.load_track(3)
    p.controller.remove_track(3)
    assert p.controller.current_index == 2
    assert playing_title(p) == "Gamma"


def test_remove_out_of_range_is_noop(loaded_player):
    assert loaded_player.controller.remove_track(10) is None
    assert len(loaded_player.store) == 4


def test_clear_playlist(loaded_player):
    p = loaded_player
    p.controller.clear_playlist()
    assert p.store.is_empty
    assert p.controller.current_index == -1
    assert p.transport.loaded_resource is None
    assert "Playlist cleared" in p.app_state.messages("success")


# ----------------------------
# Search
# ----------------------------

def test_search_no_match_then_clear_restores_selection(loaded_player):
    p = loaded_player
    p.controller.load_track(1)

    p.controller.search("zzz")
    assert p.controller.current_index == -1
    assert_index_invariant(p)

    p.controller.search("")
    assert p.controller.current_index == 1
    assert playing_title(p) == "Beta"


def test_search_keeps_selected_track(loaded_player):
    p = loaded_player
    p.controller.load_track(2)
    p.controller.search("gamma")
    assert p.controller.current_index == 0
    assert playing_title(p) == "Gamma"


def test_next_from_hidden_selection(loaded_player):
    p = loaded_player
    p.controller.load_track(1)          # Beta
    p.controller.search("delta")        # Beta hidden, only Delta visible
    assert_index_invariant(p)

    p.controller.next()
    assert playing_title(p) == "Delta"


def test_invariant_across_operations(loaded_player, track_factory):
    p = loaded_player
    c = p.controller
    steps = [
        lambda: c.next(),
        lambda: c.search("a"),
        lambda: c.remove_track(0),
        lambda: c.search("nothing here"),
        lambda: c.add_tracks(songs(track_factory, "Epsilon"), announce=False),
        lambda: c.search(""),
        lambda: c.previous(),
        lambda: c.remove_track(c.current_index),
        lambda: c.clear_playlist(),
    ]
    for step in steps:
        step()
        assert_index_invariant(p)


# ----------------------------
# Persistence hooks
# ----------------------------

def test_saved_index_skips_transient_tracks(player, track_factory):
    p = player
    temp = songs(track_factory, "Temp", transient=True)
    kept = songs(track_factory, "Kept")
    p.controller.add_tracks(temp + kept, announce=False)

    p.controller.load_track(1)
    assert p.persistence.saved["currentTrackIndex"] == 0
    assert p.persistence.saved["playlist"] == ["Kept"]

    p.controller.load_track(0)
    assert p.persistence.saved["currentTrackIndex"] == -1


def test_restore_selects_without_playing(player, track_factory):
    p = player
    settings = PersistedSettings(
        volume=0.3,
        shuffle=True,
        repeat=RepeatMode.ALL,
        current_index=1,
        playlist=songs(track_factory, "A", "B", "C"),
    )
    p.controller.restore(settings)
    p.backend.ready()

    assert p.controller.current_index == 1
    assert p.controller.shuffle is True
    assert p.controller.repeat is RepeatMode.ALL
    assert p.transport.state.volume == 0.3
    assert not p.transport.is_playing
    assert p.app_state.notifications == []


def test_restore_empty_playlist(player):
    player.controller.restore(PersistedSettings())
    assert player.controller.current_index == -1
    assert player.backend.sources == []
