# salon/db.py

from sqlmodel import SQLModel, create_engine, Session

from salon.config import get_settings

settings = get_settings()


def engine_options(database_url: str, timeout: float) -> dict:
    if database_url.startswith("sqlite"):
        # required for SQLite + FastAPI; timeout bounds waits on a locked database
        return {"connect_args": {"check_same_thread": False, "timeout": timeout}}
    # server databases: bound both the wait for a pooled connection and the connect itself
    return {"pool_timeout": timeout, "connect_args": {"connect_timeout": max(1, int(timeout))}}


# Engine = connection to the database
engine = create_engine(
    settings.DATABASE_URL,
    echo=False,
    **engine_options(settings.DATABASE_URL, settings.STORE_TIMEOUT_SECONDS),
)


def create_tables(bind=engine):
    import salon.models  # noqa: F401  registers the tables

    SQLModel.metadata.create_all(bind)


# Dependency: one session per request
def get_session():
    with Session(engine) as session:
        yield session
