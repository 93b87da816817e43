from __future__ import annotations
from pathlib import Path
from sqlalchemy import create_engine, text
from sqlalchemy.orm import sessionmaker

# Columns added after the first release; older database files lack them.
_LATE_COLUMNS = {
    "is_active": "BOOLEAN NOT NULL DEFAULT 1",
    "archived_by_cascade": "BOOLEAN NOT NULL DEFAULT 0",
    "created_at": "TEXT",
    "updated_at": "TEXT",
}

def make_engine(db_path: Path):
    # SQLite DB file; check_same_thread=False so worker threads won't choke.
    return create_engine(
        f"sqlite:///{db_path}",
        future=True,
        connect_args={"check_same_thread": False}
    )

def make_session_factory(engine):
    # expire_on_commit=False keeps objects usable after commit
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False, future=True)

def init_db(engine, Base):
    Base.metadata.create_all(engine)

    # SQLite doesn't support automatic schema migrations, so the status and
    # timestamp columns are added by hand where an older file is missing them.
    with engine.begin() as conn:
        for table in Base.metadata.sorted_tables:
            columns = {
                row[1] for row in conn.execute(text(f"PRAGMA table_info({table.name})"))
            }
            for name, ddl in _LATE_COLUMNS.items():
                if name in table.columns and name not in columns:
                    conn.execute(text(f"ALTER TABLE {table.name} ADD COLUMN {name} {ddl}"))
                    if ddl == "TEXT":
                        # ADD COLUMN only accepts constant defaults
                        conn.execute(text(f"UPDATE {table.name} SET {name} = datetime('now') WHERE {name} IS NULL"))
