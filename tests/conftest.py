"""Shared test fixtures."""

from collections.abc import Iterator
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from apartment_booker.adapters.sqlite_reservation_store import SqliteReservationStore
from apartment_booker.api.app import create_app
from apartment_booker.config import Settings
from apartment_booker.containers import AppContainer, build_container
from apartment_booker.domain.reservations import Reservation
from apartment_booker.services.reservations import ReservationRepository

TEST_PASSWORD = "secret-door"


@dataclass
class FakeClock:
    """Manually advanced clock for expiry tests."""

    now: datetime = field(
        default_factory=lambda: datetime(2024, 1, 1, 12, 0, tzinfo=UTC)
    )

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now += delta


@dataclass
class InMemoryReservationRepository(ReservationRepository):
    """In-memory reservation repository for tests."""

    reservations: dict[int, Reservation] = field(default_factory=dict)
    next_id: int = 1

    def list_reservations(self) -> list[Reservation]:
        return sorted(self.reservations.values(), key=lambda item: item.start)

    def create_reservation(
        self, person: str, start: datetime, end: datetime, comment: str = ""
    ) -> int:
        reservation_id = self.next_id
        self.next_id += 1
        self.reservations[reservation_id] = Reservation(
            id=reservation_id, person=person, start=start, end=end, comment=comment
        )
        return reservation_id

    def delete_reservation(self, reservation_id: int) -> None:
        self.reservations.pop(reservation_id, None)

    def update_comment(self, reservation_id: int, comment: str) -> None:
        current = self.reservations.get(reservation_id)
        if current is None:
            return
        self.reservations[reservation_id] = Reservation(
            id=current.id,
            person=current.person,
            start=current.start,
            end=current.end,
            comment=comment,
        )


def utc(*args: int) -> datetime:
    return datetime(*args, tzinfo=UTC)


@pytest.fixture
def database_path(tmp_path: Path) -> Path:
    return tmp_path / "data" / "reservations.db"


@pytest.fixture
def store(tmp_path: Path) -> Iterator[SqliteReservationStore]:
    opened = SqliteReservationStore.open(tmp_path / "reservations.db")
    yield opened
    opened.close()


@pytest.fixture
def settings(database_path: Path) -> Settings:
    return Settings(
        people="Alice, Bob, ,Carol",
        page_title="Reservations test",
        banner_title="Planning test",
        base_path="",
        password=TEST_PASSWORD,
        password_hint="the usual",
        database_path=database_path,
    )


@pytest.fixture
def container(settings: Settings) -> Iterator[AppContainer]:
    built = build_container(settings)
    yield built
    built.close_resources()


@pytest.fixture
def client(container: AppContainer) -> TestClient:
    return TestClient(create_app(container), follow_redirects=False)


@pytest.fixture
def logged_in_client(client: TestClient) -> TestClient:
    response = client.post("/login", data={"password": TEST_PASSWORD})
    assert response.status_code == 303
    return client
