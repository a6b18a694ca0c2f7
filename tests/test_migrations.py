from pathlib import Path

from alembic import command
from alembic.config import Config
from sqlalchemy import create_engine, inspect

from focusxp.models import Base

ROOT = Path(__file__).resolve().parent.parent


def _config(db_path: Path) -> Config:
    config = Config(str(ROOT / "alembic.ini"))
    config.set_main_option("script_location", str(ROOT / "alembic"))
    config.set_main_option("sqlalchemy.url", f"sqlite+aiosqlite:///{db_path}")
    return config


def test_migrations_create_every_model_table(tmp_path):
    db_path = tmp_path / "migrated.db"
    command.upgrade(_config(db_path), "head")

    engine = create_engine(f"sqlite:///{db_path}")
    inspector = inspect(engine)
    assert set(Base.metadata.tables) <= set(inspector.get_table_names())

    for table in Base.metadata.tables.values():
        migrated = {c["name"] for c in inspector.get_columns(table.name)}
        assert set(table.columns.keys()) == migrated, table.name

    indexes = {i["name"] for i in inspector.get_indexes("focus_sessions")}
    assert "uq_focus_sessions_open_per_user" in indexes
    engine.dispose()


def test_downgrade_drops_everything(tmp_path):
    db_path = tmp_path / "downgraded.db"
    config = _config(db_path)
    command.upgrade(config, "head")
    command.downgrade(config, "base")

    engine = create_engine(f"sqlite:///{db_path}")
    assert set(inspect(engine).get_table_names()) <= {"alembic_version"}
    engine.dispose()
