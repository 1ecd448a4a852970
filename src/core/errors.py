from __future__ import annotations


class PlayerError(Exception):
    """Base class for player failures."""


class PlaybackError(PlayerError):
    pass


class PlaybackRejected(PlaybackError):
    """The medium refused to start (bad format, no source, output policy)."""


class MediaLoadError(PlayerError):
    """The resource failed to load or decode."""

    def __init__(self, reason: str, uri: str | None = None):
        super().__init__(reason)
        self.reason = reason
        self.uri = uri


class EmptyPlaylistOperation(PlayerError):
    pass


class OutOfRangeIndex(PlayerError, IndexError):
    def __init__(self, index: int, size: int):
        super().__init__(f"index {index} out of range for {size} visible tracks")
        self.index = index
        self.size = size
