from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from core.models import Base


def make_engine(db_url, **kwargs):
    """Create an engine for `db_url`. Callers own its lifecycle (engine.dispose())."""
    return create_engine(db_url, pool_pre_ping=True, **kwargs)


def make_session_factory(engine):
    return sessionmaker(bind=engine, expire_on_commit=False)


def init_db(engine):
    """Create tables directly from the models. Deployed databases use alembic instead."""
    Base.metadata.create_all(engine)
