"""Alembic environment for the account store: DATABASE_URL from settings, metadata from the models."""

import logging
from logging.config import fileConfig

from alembic import context
from sqlalchemy import create_engine
from sqlalchemy.pool import NullPool

from planner_auth.core.config import get_settings

# Importing the package registers User, Role, Activity and user_role on Base.metadata.
from planner_auth.models import Base

logger = logging.getLogger("alembic.env")

config = context.config
# There is no alembic.ini by default; when one is given, use its logging sections if it has them.
if config.config_file_name is not None:
    try:
        fileConfig(config.config_file_name)
    except KeyError:
        logger.debug("No logging sections in %s", config.config_file_name)

target_metadata = Base.metadata


def get_url() -> str:
    """Database URL: -x url=... on the command line wins over application settings."""
    return context.get_x_argument(as_dictionary=True).get("url") or get_settings().DATABASE_URL


def _configure_options(url: str) -> dict:
    # SQLite cannot ALTER constraints in place; batch mode rebuilds the table.
    return {
        "target_metadata": target_metadata,
        "compare_type": True,
        "render_as_batch": url.startswith("sqlite"),
    }


def run_migrations_offline() -> None:
    """Emit SQL without connecting."""
    url = get_url()
    context.configure(
        url=url,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        **_configure_options(url),
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Connect and apply migrations in one transaction."""
    url = get_url()
    connectable = create_engine(url, poolclass=NullPool)
    with connectable.connect() as connection:
        context.configure(connection=connection, **_configure_options(url))
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
