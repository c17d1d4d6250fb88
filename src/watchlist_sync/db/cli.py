"""Database maintenance commands.

Alembic wrappers (`db-generate`, `db-migrate`, `db-downgrade`) plus `db-create`,
which builds the tables straight from the models for throwaway SQLite databases.
"""
import logging
import subprocess
import sys
from pathlib import Path

from sqlalchemy.engine import make_url

from watchlist_sync.config import get_settings
from watchlist_sync.db.sessions import create_db_engine, init_db

logger = logging.getLogger(__name__)

# .../src/watchlist_sync/db/cli.py -> directory holding alembic.ini
_PROJECT_ROOT = Path(__file__).resolve().parents[3]


def _target() -> str:
    return make_url(get_settings().database_url).render_as_string(hide_password=True)


def _alembic(*args: str) -> int:
    logger.info("alembic %s against %s", " ".join(args), _target())
    return subprocess.run(
        [sys.executable, "-m", "alembic", *args],
        cwd=_PROJECT_ROOT,
        check=False,
    ).returncode


def _split_revision(argv: list[str], default: str) -> tuple[str, list[str]]:
    """First positional arg is the revision; anything else passes through to alembic."""
    if argv and not argv[0].startswith("-"):
        return argv[0], argv[1:]
    return default, argv


def generate() -> None:
    """Autogenerate a revision from the SQLModel metadata. Pass -m "message"."""
    sys.exit(_alembic("revision", "--autogenerate", *sys.argv[1:]))


def migrate() -> None:
    revision, rest = _split_revision(sys.argv[1:], "head")
    sys.exit(_alembic("upgrade", revision, *rest))


def downgrade() -> None:
    revision, rest = _split_revision(sys.argv[1:], "-1")
    sys.exit(_alembic("downgrade", revision, *rest))


def create_tables() -> None:
    """Create missing tables without touching the migration history."""
    logging.basicConfig(level=get_settings().log_level)
    engine = create_db_engine()
    try:
        init_db(engine)
    finally:
        engine.dispose()
    logger.info("Tables ready on %s", _target())
