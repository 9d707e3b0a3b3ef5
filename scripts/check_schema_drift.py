"""Compare the escrow models with the configured database.

Exit codes: 0 when the schema matches, 1 when differences exist, 2 on error.
"""

from __future__ import annotations

import sys

from alembic.autogenerate import api as ag_api
from alembic.runtime.migration import MigrationContext
from sqlalchemy.engine import Engine

from escrowdraw.db.engine import make_engine
from escrowdraw.models import Base


def pending_operations(engine: Engine) -> list:
    """Return the Alembic operations needed to bring the database to the models."""
    with engine.connect() as connection:
        context = MigrationContext.configure(
            connection=connection,
            opts={
                "compare_type": True,
                "render_as_batch": connection.dialect.name == "sqlite",
            },
        )
        migration = ag_api.produce_migrations(context, Base.metadata)
    if migration.upgrade_ops is None:
        return []
    return list(migration.upgrade_ops.ops or [])


def _describe(ops, depth: int = 0) -> None:
    for op in ops:
        print(f"{'  ' * depth}- {op}")
        _describe(getattr(op, "ops", None) or [], depth + 1)


def main() -> int:
    engine = make_engine()
    target = engine.url.render_as_string(hide_password=True)
    try:
        ops = pending_operations(engine)
    except Exception as exc:
        print(f"Schema drift check errored for {target}: {exc}", file=sys.stderr)
        return 2
    if not ops:
        print(f"Schema drift check passed for {target}.")
        return 0
    print(f"Schema drift detected for {target}:")
    _describe(ops)
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
