import logging
from typing import Generator

from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from huddy_gate.core.config import Settings

logger = logging.getLogger(__name__)


def build_engine(settings: Settings) -> Engine:
    """
    Create the engine for the registry store.

    Connect and statement timeouts bound every round-trip so a claim never
    hangs on an unreachable database.
    """
    url = make_url(settings.DATABASE_URL)
    kwargs = {"pool_pre_ping": settings.DB_POOL_PRE_PING}

    if url.get_backend_name() == "sqlite":
        kwargs["connect_args"] = {
            "check_same_thread": False,
            "timeout": settings.DB_CONNECT_TIMEOUT_SECONDS,
        }
        if url.database in (None, "", ":memory:"):
            # One shared connection, otherwise every session sees an empty DB
            kwargs["poolclass"] = StaticPool
    elif url.get_backend_name() == "postgresql":
        connect_args = {"connect_timeout": settings.DB_CONNECT_TIMEOUT_SECONDS}
        if settings.DB_STATEMENT_TIMEOUT_MS:
            connect_args["options"] = f"-c statement_timeout={settings.DB_STATEMENT_TIMEOUT_MS}"
        kwargs["connect_args"] = connect_args

    engine = create_engine(settings.DATABASE_URL, **kwargs)
    logger.info(f"📦 Engine created for {url.get_backend_name()} ({url.render_as_string(hide_password=True)})")
    return engine


def make_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


def get_db(request: Request) -> Generator[Session, None, None]:
    """Dependency for getting a database session from the app's store handle"""
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()
