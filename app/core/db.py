"""
Database engine and session factory.

Services receive a Session through ``app.api.deps.get_db``; nothing outside
this module creates engines for request handling.
"""

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base

from app.core.config import settings


def build_engine(url: str, **kwargs):
    connect_args = {}
    if url.startswith("sqlite"):
        # FastAPI runs sync dependencies in a threadpool
        connect_args["check_same_thread"] = False
    return create_engine(url, connect_args=connect_args, pool_pre_ping=True, **kwargs)


engine = build_engine(settings.sync_database_url)

# autoflush=False: flushes happen explicitly inside transactional writes
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()
