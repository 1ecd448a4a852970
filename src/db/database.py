import logging
import os
import sqlite3
from typing import Dict

from db.schema import SCHEMA_V1_SQL, SCHEMA_V2_SQL

logger = logging.getLogger(__name__)

CURRENT_DB_VERSION = 2


def initialize_database(app_data_dir: str) -> sqlite3.Connection:
    os.makedirs(app_data_dir, exist_ok=True)
    sqlite_path = os.path.join(app_data_dir, "db.sqlite3")
    logger.info("Database file path: %s", sqlite_path)
    return open_database(sqlite_path)


def open_database(sqlite_path: str) -> sqlite3.Connection:
    db = sqlite3.connect(sqlite_path)
    db.row_factory = sqlite3.Row

    existing_version = int(db.execute("PRAGMA user_version").fetchone()[0])
    upgrade_database_if_needed(db, existing_version)

    return db


def upgrade_database_if_needed(db: sqlite3.Connection, existing_version: int) -> None:
    logger.debug("Existing database version: %s", existing_version)

    if existing_version >= CURRENT_DB_VERSION:
        return

    if existing_version <= 0:
        logger.info("Migrate database version 1...")
        db.execute("PRAGMA journal_mode=WAL")
        db.execute("PRAGMA user_version=1")
        db.executescript(SCHEMA_V1_SQL)
        db.commit()

    if existing_version <= 1:
        logger.info("Migrate database version 2...")
        db.execute("PRAGMA user_version=2")
        db.executescript(SCHEMA_V2_SQL)
        db.commit()


def debug_schema(db: sqlite3.Connection) -> None:
    for table in ("settings", "library_data"):
        cur = db.execute(f"PRAGMA table_info({table})")
        logger.debug("[%s table schema]", table)
        for _cid, name, col_type, _notnull, _default, _pk in cur.fetchall():
            logger.debug("- %s (%s)", name, col_type)

# -------------------------------
# SETTINGS
# -------------------------------
def get_all_settings(db: sqlite3.Connection) -> Dict[str, str]:
    cursor = db.execute("SELECT key, value FROM settings")
    return {row["key"]: row["value"] for row in cursor.fetchall()}


def set_setting(db: sqlite3.Connection, key: str, value: str):
    db.execute(
        """
        INSERT INTO settings (key, value) VALUES (?, ?)
        ON CONFLICT(key) DO UPDATE SET value = excluded.value
        """,
        (key, value),
    )
    db.commit()

# -------------------------------
# LIBRARY INIT
# -------------------------------
def get_init(db: sqlite3.Connection) -> bool:
    row = db.execute("SELECT init FROM library_data LIMIT 1").fetchone()
    return bool(row["init"]) if row else False


def set_init(db: sqlite3.Connection, init: bool):
    db.execute("UPDATE library_data SET init = ? WHERE 1", (init,))
    db.commit()
