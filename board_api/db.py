from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base

from .config import settings

DATABASE_URL = settings.DATABASE_URL

# sqlite connections are shared across the threadpool FastAPI runs sync routes in
_connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(DATABASE_URL, pool_pre_ping=True, connect_args=_connect_args)
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)
Base = declarative_base()


def init_db():
    """Create database tables defined on Base subclasses.

    This is a convenience wrapper used by development scripts and tests. In
    production you should run migrations (Alembic) instead of create_all.
    """
    Base.metadata.create_all(bind=engine)
