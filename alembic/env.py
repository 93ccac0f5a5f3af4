# alembic/env.py
from __future__ import annotations
import os
from logging.config import fileConfig
from alembic import context
from sqlalchemy import engine_from_config, pool
from dotenv import load_dotenv

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
load_dotenv(dotenv_path=os.path.join(PROJECT_ROOT, ".env"))

from investme_api.infrastructure.database import Base, DATABASE_URL  # noqa: E402
# todo módulo com tabelas precisa estar importado para entrar no metadata
from investme_api.domain.entities import (  # noqa: E402,F401
    user_entity,
    company_entity,
    credit_request_entity,
    pending_change_entity,
    valuation_entity,
    notification_entity,
    message_entity,
    audit_entity,
    email_token_entity,
)

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

MIGRATION_URL = os.getenv("DATABASE_URL", DATABASE_URL)


def _configure(**kwargs) -> None:
    # SQLite não tem ALTER COLUMN; o modo batch recria a tabela
    context.configure(
        target_metadata=Base.metadata,
        compare_type=True,
        render_as_batch=MIGRATION_URL.startswith("sqlite"),
        **kwargs,
    )
    with context.begin_transaction():
        context.run_migrations()


if context.is_offline_mode():
    _configure(url=MIGRATION_URL, literal_binds=True)
else:
    connectable = engine_from_config(
        {"sqlalchemy.url": MIGRATION_URL},
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )
    with connectable.connect() as connection:
        _configure(connection=connection)
