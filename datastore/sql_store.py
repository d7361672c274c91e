"""Durable reading storage on top of a SQLAlchemy engine."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from functools import lru_cache
from pathlib import Path
from threading import Event, Lock, Thread
from typing import Any, List, Optional, Type

from sqlalchemy import DateTime, Float, Integer, String, create_engine, event, make_url, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import ArgumentError, DBAPIError, DisconnectionError, SQLAlchemyError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlalchemy.orm import DeclarativeBase, Mapped, Session, mapped_column, sessionmaker

from models.errors import ReadError, StoreConnectionError, StoreError, WriteError
from models.records import Reading
from settings import get_settings
from storage.backend import DEFAULT_LIMIT, normalize_limit

logger = logging.getLogger(__name__)

# bind-time failures some DBAPI drivers raise outside the DBAPI hierarchy
_DRIVER_ERRORS = (SQLAlchemyError, OverflowError)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    pass


class ReadingRow(Base):
    __tablename__ = "sensor_data"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    water_level: Mapped[float] = mapped_column("waterLevel", Float, nullable=False)
    temperature_celsius: Mapped[float] = mapped_column(
        "temperatureCelsius", Float, nullable=False
    )
    temperature_fahrenheit: Mapped[float] = mapped_column(
        "temperatureFahrenheit", Float, nullable=False
    )
    ist_timestamp: Mapped[str] = mapped_column("istTimestamp", String(19), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        "createdAt", DateTime(timezone=True), nullable=False, default=_utcnow, index=True
    )
    updated_at: Mapped[datetime] = mapped_column(
        "updatedAt", DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow
    )

    def to_reading(self) -> Reading:
        return Reading(
            water_level=self.water_level,
            temperature_celsius=self.temperature_celsius,
            temperature_fahrenheit=self.temperature_fahrenheit,
            timestamp=self.ist_timestamp,
            id=str(self.id),
        )


def _is_disconnect(exc: BaseException) -> bool:
    if isinstance(exc, (DisconnectionError, PoolTimeoutError)):
        return True
    return isinstance(exc, DBAPIError) and bool(exc.connection_invalidated)


def _masked(url: str) -> str:
    try:
        return make_url(url).render_as_string(hide_password=True)
    except ArgumentError:
        return "<invalid url>"


class SqlReadingStore:
    """Reading persistence backed by a relational database.

    Liveness is a cached flag: it is set by a successful :meth:`connect` and
    cleared when the driver reports a disconnect or the store is stopped.
    Operations never retry and never fall back on their own; failures are
    raised as :class:`~models.errors.StoreError` subclasses.
    """

    def __init__(
        self,
        url: Optional[str] = None,
        engine: Optional[Engine] = None,
        reconnect_interval: float = 5.0,
    ) -> None:
        if engine is not None:
            url = engine.url.render_as_string(hide_password=False)
        if not url:
            raise ValueError("Either a database URL or an engine is required.")
        self.url = url
        self.display_url = _masked(url)
        self.reconnect_interval = reconnect_interval
        self._engine: Optional[Engine] = None
        self._sessions: Optional[sessionmaker[Session]] = None
        self._live = Event()
        self._stopped = Event()
        self._connect_lock = Lock()
        self._monitor: Optional[Thread] = None
        if engine is not None:
            self._bind(engine)

    def is_live(self) -> bool:
        return self._live.is_set()

    def connect(self) -> bool:
        """Open the engine if needed and make sure the schema exists."""
        with self._connect_lock:
            if self._live.is_set():
                return True
            try:
                if self._engine is None:
                    self._bind(self._build_engine(self.url))
                Base.metadata.create_all(self._engine)
            except (SQLAlchemyError, ImportError, OSError) as exc:
                logger.error(
                    "Database connection failed",
                    extra={"database_url": self.display_url, "error": exc.__class__.__name__},
                )
                return False
            self._live.set()
        logger.info("Connected to database", extra={"database_url": self.display_url})
        return True

    def start(self) -> None:
        """Connect in the background and keep reconnecting while the database is down."""
        if self._monitor is not None and self._monitor.is_alive():
            return
        self._stopped.clear()
        self._monitor = Thread(target=self._watch, name="sql-store-monitor", daemon=True)
        self._monitor.start()

    def stop(self) -> None:
        self._stopped.set()
        monitor, self._monitor = self._monitor, None
        if monitor is not None:
            monitor.join(timeout=self.reconnect_interval + 1.0)
        self._live.clear()
        if self._engine is not None:
            self._engine.dispose()

    def create(self, reading: Reading) -> Reading:
        row = ReadingRow(
            water_level=reading.water_level,
            temperature_celsius=reading.temperature_celsius,
            temperature_fahrenheit=reading.temperature_fahrenheit,
            ist_timestamp=reading.timestamp,
        )
        with self._open_session() as session:
            try:
                with session.begin():
                    session.add(row)
                    session.flush()
                    stored = row.to_reading()
            except _DRIVER_ERRORS as exc:
                raise self._translate(exc, WriteError) from exc
        return stored

    def list(self, limit: Any = DEFAULT_LIMIT) -> List[Reading]:
        count = normalize_limit(limit)
        statement = (
            select(ReadingRow)
            .order_by(ReadingRow.created_at.desc(), ReadingRow.id.desc())
            .limit(count)
        )
        with self._open_session() as session:
            try:
                return [row.to_reading() for row in session.scalars(statement)]
            except _DRIVER_ERRORS as exc:
                raise self._translate(exc, ReadError) from exc

    def latest(self) -> Optional[Reading]:
        readings = self.list(1)
        return readings[0] if readings else None

    def _open_session(self) -> Session:
        if not self._live.is_set() or self._sessions is None:
            raise StoreConnectionError("Database is not connected.")
        return self._sessions()

    def _translate(self, exc: Exception, error_cls: Type[StoreError]) -> StoreError:
        if _is_disconnect(exc):
            self._mark_down(exc)
            return StoreConnectionError(str(exc))
        return error_cls(str(exc))

    def _mark_down(self, exc: BaseException) -> None:
        if self._live.is_set():
            self._live.clear()
            logger.warning(
                "Lost database connection",
                extra={"database_url": self.display_url, "error": exc.__class__.__name__},
            )

    def _bind(self, engine: Engine) -> None:
        self._engine = engine
        self._sessions = sessionmaker(bind=engine, expire_on_commit=False)
        event.listen(engine, "handle_error", self._on_engine_error)

    def _on_engine_error(self, context: Any) -> None:
        # pre-ping invalidations are recovered by the pool itself
        if context.is_disconnect and not getattr(context, "is_pre_ping", False):
            self._mark_down(context.original_exception)

    def _watch(self) -> None:
        while not self._stopped.is_set():
            if not self._live.is_set():
                self.connect()
            self._stopped.wait(self.reconnect_interval)

    @staticmethod
    def _build_engine(url: str) -> Engine:
        parsed = make_url(url)
        connect_args = {}
        if parsed.get_backend_name() == "sqlite":
            connect_args["check_same_thread"] = False
            if parsed.database and parsed.database != ":memory:":
                Path(parsed.database).parent.mkdir(parents=True, exist_ok=True)
        return create_engine(parsed, pool_pre_ping=True, connect_args=connect_args)


@lru_cache
def build_default_sql_store(url: Optional[str] = None) -> Optional[SqlReadingStore]:
    """Return the configured durable store, or ``None`` when no URL is set."""
    settings = get_settings()
    database_url = settings.database_url if url is None else url
    if not database_url:
        return None
    return SqlReadingStore(url=database_url, reconnect_interval=settings.reconnect_interval)
