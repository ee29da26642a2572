from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

Base = declarative_base()


def make_engine(database_url: str) -> Engine:
    kwargs = {}

    # SQLite needs check_same_thread, Postgres must NOT have it
    if database_url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}

        # in-memory db only lives as long as its one connection
        if database_url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool

    return create_engine(database_url, **kwargs)


def make_session_factory(engine: Engine) -> sessionmaker:
    # rows are handed back to the routes after the session closes
    return sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)


def create_tables(engine: Engine) -> None:
    # make sure the models are registered on Base before create_all
    import usergate.models  # noqa: F401

    Base.metadata.create_all(bind=engine)
