from __future__ import annotations

from alembic import command
from sqlalchemy import create_engine, inspect, text

from agenda.infra.db import alembic_config, init_db


def test_init_db_stamps_schema_so_upgrades_still_work(tmp_path) -> None:
    url = f"sqlite:///{tmp_path / 'agenda.db'}"
    engine = create_engine(url)

    init_db(engine)
    init_db(engine)

    assert {"tasks", "subtasks", "completed_occurrences"} <= set(inspect(engine).get_table_names())
    with engine.connect() as connection:
        version = connection.execute(text("SELECT version_num FROM alembic_version")).scalar_one()
    assert version == "0004_add_completed_occurrences"

    command.upgrade(alembic_config(url), "head")
    engine.dispose()


def test_init_db_leaves_migrated_database_alone(tmp_path) -> None:
    url = f"sqlite:///{tmp_path / 'agenda.db'}"
    command.upgrade(alembic_config(url), "head")
    engine = create_engine(url)

    init_db(engine)

    with engine.connect() as connection:
        count = connection.execute(text("SELECT count(*) FROM alembic_version")).scalar_one()
    assert count == 1
    engine.dispose()
