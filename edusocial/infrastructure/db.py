from threading import Lock

import structlog
from fastapi import Request
from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker
from sqlalchemy.pool import StaticPool

logger = structlog.get_logger()


class Base(DeclarativeBase): pass


class Database:
    """Engine and session factory owned by the application.

    ``connect`` is idempotent: the engine is built once and reused.
    """

    def __init__(self, url: str):
        self.url = url
        self._engine: Engine | None = None
        self._sessionmaker: sessionmaker | None = None
        self._verified = False
        self._lock = Lock()

    def _build_engine(self) -> Engine:
        # client_encoding keeps non-ASCII names intact on PostgreSQL
        if self.url.startswith("postgresql"):
            return create_engine(
                self.url,
                pool_pre_ping=True,
                pool_size=10,
                max_overflow=20,
                pool_recycle=3600,
                connect_args={"client_encoding": "utf8"},
            )
        if self.url.startswith("sqlite"):
            kwargs = {"connect_args": {"check_same_thread": False}}
            if make_url(self.url).database in (None, "", ":memory:"):
                kwargs["poolclass"] = StaticPool
            return create_engine(self.url, **kwargs)
        return create_engine(self.url, pool_pre_ping=True)

    @property
    def engine(self) -> Engine:
        return self._initialize()[0]

    def _initialize(self) -> tuple[Engine, sessionmaker]:
        if self._engine is None:
            with self._lock:
                if self._engine is None:
                    self._engine = self._build_engine()
                    self._sessionmaker = sessionmaker(bind=self._engine, autocommit=False, autoflush=False)
        return self._engine, self._sessionmaker

    def connect(self) -> Engine:
        engine = self.engine
        if self._verified:
            logger.debug("Database already connected")
            return engine
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        self._verified = True
        logger.info("Database connection established", database=self.database_name)
        return engine

    def create_schema(self) -> None:
        from . import models  # noqa: F401  registers tables on Base.metadata

        Base.metadata.create_all(bind=self.engine)

    def session(self) -> Session:
        _, factory = self._initialize()
        return factory()

    @property
    def database_name(self) -> str | None:
        return make_url(self.url).database or None

    def status(self) -> dict:
        if self._verified:
            state, label = 1, "connected"
        else:
            state, label = 0, "disconnected"
        return {
            "state": state,
            "label": label,
            "isConnected": self._verified,
            "databaseName": self.database_name,
        }

    def dispose(self) -> None:
        if self._engine is not None:
            self._engine.dispose()
        self._verified = False


def get_db(request: Request):
    db = request.app.state.database.session()
    try:
        yield db
    finally:
        db.close()
