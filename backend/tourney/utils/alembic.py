import fcntl
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from alembic.config import Config

from alembic import command
from tourney.utils.logging import logger

BACKEND_DIR = Path(__file__).resolve().parents[2]
MIGRATION_LOCK_PATH = Path(tempfile.gettempdir()) / "tourney-schema-upgrade.lock"


@contextmanager
def schema_upgrade_lock(lock_path: Path = MIGRATION_LOCK_PATH) -> Iterator[None]:
    """Serialize schema upgrades across the API workers started on this host."""
    with lock_path.open("a", encoding="utf-8") as lock_file:
        try:
            fcntl.flock(lock_file, fcntl.LOCK_EX | fcntl.LOCK_NB)
        except BlockingIOError:
            logger.info(f"Waiting for another worker to finish upgrading the schema ({lock_path})")
            fcntl.flock(lock_file, fcntl.LOCK_EX)

        try:
            yield
        finally:
            fcntl.flock(lock_file, fcntl.LOCK_UN)


def get_alembic_config(backend_dir: Path = BACKEND_DIR) -> Config:
    # Resolved from the package location so the API can start from any working directory
    alembic_config = Config(str(backend_dir / "alembic.ini"))
    alembic_config.set_main_option("script_location", str(backend_dir / "alembic"))
    return alembic_config


def alembic_run_migrations(revision: str = "head") -> None:
    with schema_upgrade_lock():
        logger.info(f"Upgrading database schema to revision {revision}")
        command.upgrade(get_alembic_config(), revision)
