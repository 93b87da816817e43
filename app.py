from __future__ import annotations
from config import Settings, configure_logging
from database import make_engine, make_session_factory, init_db
from models import Base
from repo import ArchiveRepo
from archival import ArchivalService

def open_service(settings: Settings | None = None) -> ArchivalService:
    """Wire the SQLite database, the repository and the archival service."""
    settings = settings or Settings.from_env()
    configure_logging(settings)
    engine = make_engine(settings.db_path)
    init_db(engine, Base)
    return ArchivalService(ArchiveRepo(make_session_factory(engine)), settings)
