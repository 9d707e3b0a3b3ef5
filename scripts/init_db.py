"""Create or upgrade the escrow database schema."""

from __future__ import annotations

import argparse
from pathlib import Path

from alembic import command
from alembic.config import Config
from sqlalchemy import inspect

from escrowdraw.db.engine import make_engine
from escrowdraw.models import Base

PROJECT_ROOT = Path(__file__).resolve().parents[1]


def alembic_config() -> Config:
    cfg = Config(str(PROJECT_ROOT / "alembic.ini"))
    cfg.set_main_option("script_location", str(PROJECT_ROOT / "alembic"))
    return cfg


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--revision",
        default="head",
        help="Alembic revision to upgrade to (default: head)",
    )
    parser.add_argument(
        "--create-all",
        action="store_true",
        help="Create tables straight from the models and skip migrations",
    )
    args = parser.parse_args(argv)

    engine = make_engine()
    if args.create_all:
        Base.metadata.create_all(engine)
    else:
        command.upgrade(alembic_config(), args.revision)

    tables = sorted(inspect(engine).get_table_names())
    print(f"{engine.url.render_as_string(hide_password=True)}: {', '.join(tables)}")


if __name__ == "__main__":
    main()
