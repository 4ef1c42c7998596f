"""SQLite-backed reservation store."""

import logging
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path

from sqlalchemy import (
    Column,
    Index,
    Integer,
    MetaData,
    Table,
    Text,
    create_engine,
    delete,
    event,
    inspect,
    insert,
    select,
    text,
    update,
)
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from apartment_booker.domain.reservations import (
    Reservation,
    format_timestamp,
    parse_timestamp,
)
from apartment_booker.errors import StorageError, ValidationError
from apartment_booker.services.reservations import ReservationRepository

logger = logging.getLogger(__name__)

metadata = MetaData()

reservations_table = Table(
    "reservations",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("person", Text, nullable=False),
    Column("start", Text, nullable=False),
    Column("end", Text, nullable=False),
    Column("comment", Text),
    sqlite_autoincrement=True,
)

range_index = Index(
    "idx_reservations_range", reservations_table.c.start, reservations_table.c.end
)


def create_sqlite_engine(path: Path | str, busy_timeout_ms: int = 5000) -> Engine:
    """Create an engine holding at most one connection to the database file."""
    engine = create_engine(
        f"sqlite:///{path}",
        future=True,
        pool_size=1,
        max_overflow=0,
        pool_timeout=busy_timeout_ms / 1000,
        connect_args={"check_same_thread": False, "timeout": busy_timeout_ms / 1000},
    )

    @event.listens_for(engine, "connect")
    def _set_sqlite_pragmas(dbapi_conn, _):
        cur = dbapi_conn.cursor()
        try:
            cur.execute("PRAGMA foreign_keys=ON;")
            cur.execute(f"PRAGMA busy_timeout={int(busy_timeout_ms)};")
        finally:
            cur.close()

    return engine


class SqliteReservationStore(ReservationRepository):
    """Durable reservation storage with a single-writer discipline.

    Every mutation runs under ``_writer_lock`` inside its own transaction, so
    writes are totally ordered and either commit fully or leave no trace.
    Reads share the single pooled connection and see committed state only.
    """

    def __init__(self, engine: Engine) -> None:
        self._engine = engine
        self._writer_lock = threading.Lock()
        self._count_lock = threading.Lock()
        self._writers_in_flight = 0
        self._peak_writers = 0

    @classmethod
    def open(cls, path: Path | str) -> "SqliteReservationStore":
        """Open the database file and bring its schema up to date.

        Raises StorageError when the file cannot be opened or migrated.
        """
        store = cls(create_sqlite_engine(path))
        try:
            store.migrate()
        except StorageError:
            store.close()
            raise
        return store

    @property
    def engine(self) -> Engine:
        """Return the underlying engine."""
        return self._engine

    @property
    def writers_in_flight(self) -> int:
        """Return how many mutations are currently running."""
        return self._writers_in_flight

    @property
    def peak_writers(self) -> int:
        """Return the highest number of concurrent mutations ever observed."""
        return self._peak_writers

    def close(self) -> None:
        """Release the pooled connection."""
        self._engine.dispose()

    def migrate(self) -> None:
        """Create the table and index, and add the comment column if missing.

        Safe to run repeatedly against an already migrated database.
        """
        try:
            with self._writer():
                with self._engine.begin() as conn:
                    metadata.create_all(conn, checkfirst=True)
                    range_index.create(conn, checkfirst=True)
                    columns = {
                        column["name"]
                        for column in inspect(conn).get_columns("reservations")
                    }
                    if "comment" not in columns:
                        logger.info("Adding comment column to reservations table")
                        conn.execute(
                            text("ALTER TABLE reservations ADD COLUMN comment TEXT")
                        )
        except SQLAlchemyError as exc:
            raise StorageError(f"failed to migrate reservations schema: {exc}") from exc

    def list_reservations(self) -> list[Reservation]:
        """Return every reservation ordered by start."""
        query = select(
            reservations_table.c.id,
            reservations_table.c.person,
            reservations_table.c.start,
            reservations_table.c.end,
            reservations_table.c.comment,
        ).order_by(reservations_table.c.start)
        try:
            with self._engine.connect() as conn:
                rows = conn.execute(query).all()
        except SQLAlchemyError as exc:
            raise StorageError(f"failed to list reservations: {exc}") from exc

        reservations: list[Reservation] = []
        for row in rows:
            try:
                start = parse_timestamp(row.start)
                end = parse_timestamp(row.end)
            except ValueError as exc:
                raise StorageError(
                    f"reservation {row.id} has a malformed timestamp"
                ) from exc
            reservations.append(
                Reservation(
                    id=row.id,
                    person=row.person,
                    start=start,
                    end=end,
                    comment=row.comment or "",
                )
            )
        return reservations

    def create_reservation(
        self, person: str, start: datetime, end: datetime, comment: str = ""
    ) -> int:
        """Insert a reservation and return its identifier."""
        if not person or not person.strip():
            raise ValidationError("person is required")
        try:
            start_text = format_timestamp(start)
            end_text = format_timestamp(end)
        except ValueError as exc:
            raise ValidationError(str(exc)) from exc
        # Fixed-width UTC text compares in chronological order.
        if end_text <= start_text:
            raise ValidationError("end must be after start")

        statement = insert(reservations_table).values(
            person=person, start=start_text, end=end_text, comment=comment
        )
        try:
            with self._writer(), self._engine.begin() as conn:
                result = conn.execute(statement)
                reservation_id = int(result.inserted_primary_key[0])
        except SQLAlchemyError as exc:
            raise StorageError(f"failed to create reservation: {exc}") from exc
        logger.info("Created reservation %s for %s", reservation_id, person)
        return reservation_id

    def delete_reservation(self, reservation_id: int) -> None:
        """Delete a reservation; unknown ids are ignored."""
        statement = delete(reservations_table).where(
            reservations_table.c.id == reservation_id
        )
        try:
            with self._writer(), self._engine.begin() as conn:
                conn.execute(statement)
        except SQLAlchemyError as exc:
            raise StorageError(f"failed to delete reservation: {exc}") from exc

    def update_comment(self, reservation_id: int, comment: str) -> None:
        """Overwrite the comment of a reservation; unknown ids are ignored."""
        statement = (
            update(reservations_table)
            .where(reservations_table.c.id == reservation_id)
            .values(comment=comment)
        )
        try:
            with self._writer(), self._engine.begin() as conn:
                conn.execute(statement)
        except SQLAlchemyError as exc:
            raise StorageError(f"failed to update reservation: {exc}") from exc

    @contextmanager
    def _writer(self) -> Iterator[None]:
        with self._writer_lock:
            with self._count_lock:
                self._writers_in_flight += 1
                self._peak_writers = max(self._peak_writers, self._writers_in_flight)
            try:
                yield
            finally:
                with self._count_lock:
                    self._writers_in_flight -= 1
