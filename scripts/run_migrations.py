#!/usr/bin/env python3
"""Apply identity schema migrations, reporting failures to Logfire.

Usage:
    python scripts/run_migrations.py            # upgrade to head
    python scripts/run_migrations.py 3c1f6d2a9b7e
"""

import sys

import logfire
from alembic import command
from alembic.config import Config
from sqlalchemy.engine import make_url

from loginlab.config import Settings
from loginlab.util.observability import configure_logfire


def main(argv: list[str]) -> int:
    """Upgrade the identities schema to the requested revision."""
    settings = Settings()
    configure_logfire(settings)

    target = argv[1] if len(argv) > 1 else "head"
    # Never log the password part of the URL
    database = make_url(settings.database.url).render_as_string(hide_password=True)

    with logfire.span("run_migrations", target=target, database=database):
        try:
            command.upgrade(Config("alembic.ini"), target)
        except Exception as e:
            logfire.error(
                "Identity schema migration failed",
                target=target,
                error=str(e),
                error_type=type(e).__name__,
                _exc_info=sys.exc_info(),
            )
            # The app must not start against a half-migrated schema
            raise

    logfire.info("Identity schema at revision", target=target)
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv))
