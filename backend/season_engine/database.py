import logging
import os
from pathlib import Path
from typing import Any, Generator, Optional

from dotenv import load_dotenv
from sqlalchemy.engine import Engine, make_url
from sqlmodel import Session, SQLModel, create_engine

load_dotenv()

logger = logging.getLogger(__name__)

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./season_engine.db")
SQL_ECHO = os.getenv("SQL_ECHO", "false").lower() in ("true", "1", "yes")


def build_engine(url: str, echo: bool = False, **engine_kwargs: Any) -> Engine:
    """
    Create an engine for url.

    SQLite connections are shared with FastAPI's worker threads, so
    check_same_thread is disabled; a file database gets its parent directory.
    """
    parsed = make_url(url)
    connect_args = {}
    if parsed.get_backend_name() == "sqlite":
        connect_args["check_same_thread"] = False
        if parsed.database and parsed.database != ":memory:":
            Path(parsed.database).parent.mkdir(parents=True, exist_ok=True)

    return create_engine(url, echo=echo, connect_args=connect_args, **engine_kwargs)


engine: Engine = build_engine(DATABASE_URL, echo=SQL_ECHO)


def get_session() -> Generator[Session, None, None]:
    """FastAPI dependency: one session per request."""
    with Session(engine) as session:
        yield session


def register_models() -> None:
    """Import every table model so SQLModel.metadata knows about it."""
    from season_engine.models.league import League  # noqa: F401
    from season_engine.models.match import Match  # noqa: F401
    from season_engine.models.season import Season  # noqa: F401
    from season_engine.models.team import Team  # noqa: F401


def init_db(target: Optional[Engine] = None) -> None:
    """Create all tables on target (the application engine by default)."""
    register_models()
    target = target if target is not None else engine
    SQLModel.metadata.create_all(target)
    logger.info("Database ready: %s", target.url.render_as_string(hide_password=True))
