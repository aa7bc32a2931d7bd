from pathlib import Path
from urllib.parse import unquote

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker

from app.config import get_settings

Base = declarative_base()

engine: Engine | None = None
SessionLocal = sessionmaker(autoflush=False, autocommit=False, future=True)


def configure_database(database_url: str) -> Engine:
    """Point the module-level engine and session factory at ``database_url``."""
    global engine, SessionLocal

    if database_url.startswith("sqlite:///"):
        raw = unquote(database_url[len("sqlite:///") :])
        if raw and raw != ":memory:":
            Path(raw).parent.mkdir(parents=True, exist_ok=True)

    connect_args = {"check_same_thread": False} if database_url.startswith("sqlite") else {}
    if engine is not None:
        engine.dispose()
    engine = create_engine(database_url, connect_args=connect_args, future=True)
    SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)
    return engine


configure_database(get_settings().database_url)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
