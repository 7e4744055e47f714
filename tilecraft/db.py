"""
Database plumbing for the snapshot store.

Tilecraft keeps one row per installation (see models.SnapshotRecord), so all
this module has to do is turn DATABASE_URL into an engine and hand each
request its own session through get_db().

DATABASE_URL examples:
  sqlite:///./tilecraft.db           local play
  mysql+pymysql://user:pw@host/db    deployed (pip install tilecraft[mysql])
"""

import os
from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, DeclarativeBase
from dotenv import load_dotenv

load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL")
if not DATABASE_URL:
    raise RuntimeError(
        "DATABASE_URL is not set. Add it to your environment or a local .env (not committed)."
    )

# FastAPI runs sync routes in a threadpool; SQLite must allow that
connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(
    DATABASE_URL,
    connect_args=connect_args,
    pool_pre_ping=True,
    echo=False,
    future=True,
)

SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)


class Base(DeclarativeBase):
    pass


def get_db() -> Generator:
    """One session per request; DBSessionStore commits, we only close."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
