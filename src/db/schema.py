from __future__ import annotations

SCHEMA_V1_SQL = """
CREATE TABLE settings (
    key TEXT PRIMARY KEY,
    value TEXT
);
"""

# v2: bookkeeping row so we can tell a fresh install from a wiped playlist.
SCHEMA_V2_SQL = """
CREATE TABLE library_data (
    id INTEGER PRIMARY KEY,
    init BOOLEAN
);
INSERT INTO library_data (init) VALUES (0);
"""
