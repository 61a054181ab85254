from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from formdesk.core.config import Settings


def build_engine(settings: Settings) -> Engine:
    url = make_url(settings.DATABASE_URL)
    connect_args = {}
    kwargs = {}
    backend = url.get_backend_name()
    if backend.startswith("postgresql"):
        connect_args["options"] = "-c timezone=utc"
    elif backend == "sqlite":
        connect_args["check_same_thread"] = False
        if url.database in (None, "", ":memory:"):
            # One shared connection, otherwise each checkout sees an empty database.
            kwargs["poolclass"] = StaticPool

    return create_engine(url, pool_pre_ping=True, connect_args=connect_args, **kwargs)


def build_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)
