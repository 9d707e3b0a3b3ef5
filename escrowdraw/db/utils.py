from pathlib import Path

from sqlalchemy.engine import make_url


def resolve_sqlite_url(url: str, project_root: Path) -> str:
    """Anchor a relative SQLite database path at ``project_root``.

    ``sqlite:///./dev.db`` and ``sqlite+pysqlite:///data/dev.db`` become
    absolute so that scripts and alembic agree on the file no matter where
    they are started from. Absolute paths, in-memory databases and other
    backends are returned unchanged.
    """
    parsed = make_url(url)
    if parsed.get_backend_name() != "sqlite":
        return url

    database = parsed.database
    if not database or database == ":memory:" or database.startswith("file:"):
        return url
    if Path(database).is_absolute():
        return url

    resolved = (project_root / database).resolve()
    return parsed.set(database=str(resolved)).render_as_string(hide_password=False)
