import math
import random
import time

_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"


def to_base36(n: int) -> str:
    n = int(n)
    if n == 0:
        return "0"
    out = []
    while n > 0:
        n, r = divmod(n, 36)
        out.append(_BASE36[r])
    return "".join(reversed(out))


def generate_track_id() -> str:
    """
    Time-based id with a random suffix.
    Collisions are unlikely but tolerated; nothing relies on global uniqueness.
    """
    now_ms = int(time.time() * 1000)
    suffix = "".join(random.choice(_BASE36) for _ in range(9))
    return to_base36(now_ms) + suffix


def format_time(seconds) -> str:
    """
    Formats seconds as m:ss. Missing or invalid values render as 0:00.
    """
    try:
        value = float(seconds)
    except (TypeError, ValueError):
        return "0:00"
    if not value or math.isnan(value) or math.isinf(value) or value < 0:
        return "0:00"
    mins = int(value // 60)
    secs = int(value % 60)
    return f"{mins}:{secs:02d}"


def normalize_search_term(term: str) -> str:
    return (term or "").strip().lower()


def matches_search(track, needle: str) -> bool:
    """needle must already be normalized."""
    if not needle:
        return True
    return (
        needle in (track.title or "").lower()
        or needle in (track.artist or "").lower()
        or needle in (track.album or "").lower()
    )


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))
