import os
import uuid
from collections.abc import Generator
from typing import Any

import psycopg
import pytest

from avatar_pipeline.config.settings import Settings
from avatar_pipeline.database.connection import (
    build_conninfo,
    close_pool,
    get_connection,
    init_pool,
)

PROFILES_DDL = """
CREATE TABLE IF NOT EXISTS profiles (
    id TEXT PRIMARY KEY,
    avatar_url TEXT,
    updated_at TIMESTAMPTZ
)
"""


def _test_settings() -> Settings:
    os.environ.setdefault("DB_DATABASE", "avatars_test")
    return Settings()


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    return _test_settings()


@pytest.fixture(scope="session")
def integration_pool(test_settings: Settings) -> Generator[None, None, None]:
    # The pool connects in the background, so check the server once up front.
    try:
        with psycopg.connect(build_conninfo(test_settings), connect_timeout=3) as conn:
            conn.execute(PROFILES_DDL)
    except Exception as e:
        pytest.skip(
            f"PostgreSQL test DB not available: {e}. "
            "Set DB_* env to point at a disposable database"
        )
    init_pool(test_settings)
    try:
        yield
    finally:
        close_pool()


@pytest.fixture
def db_conn(integration_pool: None) -> Generator[psycopg.Connection[Any], None, None]:
    with get_connection() as conn:
        yield conn


@pytest.fixture
def seed_profile(db_conn: psycopg.Connection[Any]) -> Generator[str, None, None]:
    user_id = f"test-{uuid.uuid4()}"
    with db_conn.cursor() as cur:
        cur.execute(
            "INSERT INTO profiles (id, avatar_url, updated_at) VALUES (%s, NULL, NULL)",
            (user_id,),
        )
    db_conn.commit()
    try:
        yield user_id
    finally:
        with db_conn.cursor() as cur:
            cur.execute("DELETE FROM profiles WHERE id = %s", (user_id,))
        db_conn.commit()
