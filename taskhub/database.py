from sqlalchemy import String, cast, create_engine
from sqlalchemy.orm import declarative_base, sessionmaker, Session
from sqlalchemy.pool import StaticPool

from taskhub.config import settings

DATABASE_URL = settings.DATABASE_URL

engine_kwargs = {}
if settings.is_sqlite():
    engine_kwargs["connect_args"] = {"check_same_thread": False}
    # In-memory databases must share one connection across sessions
    if DATABASE_URL in ("sqlite://", "sqlite:///:memory:"):
        engine_kwargs["poolclass"] = StaticPool
elif settings.DATABASE_SSL:
    # Hosted PostgreSQL (Render, Supabase, ...) requires TLS
    engine_kwargs["connect_args"] = {"sslmode": "require"}

engine = create_engine(DATABASE_URL, **engine_kwargs)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    db: Session = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db():
    """Create every table known to the models"""
    import taskhub.models  # noqa: F401

    Base.metadata.create_all(bind=engine)


def json_list_may_contain(column, value):
    """
    SQL prefilter for JSON list columns of emp_ids: matches the serialized
    list text. Rows it lets through are still checked in Python.
    """
    return cast(column, String).like(f'%"{value}"%')
