"""Dependency container wiring for the application."""

from collections.abc import Callable
from dataclasses import dataclass
from datetime import timedelta

from apartment_booker.adapters.sqlite_reservation_store import SqliteReservationStore
from apartment_booker.config import Settings, parse_people, sanitise_base_path
from apartment_booker.services.authorization import RequestAuthorizer
from apartment_booker.services.people import PeopleDirectory
from apartment_booker.services.reservations import ReservationService
from apartment_booker.services.sessions import SessionManager


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    base_path: str
    people: PeopleDirectory
    sessions: SessionManager
    authorizer: RequestAuthorizer
    reservation_service: ReservationService
    close_resources: Callable[[], None]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container.

    Raises StorageError when the reservation database cannot be initialised.
    """
    resolved_settings = settings or Settings()
    resolved_settings.database_path.parent.mkdir(parents=True, exist_ok=True)
    store = SqliteReservationStore.open(resolved_settings.database_path)
    people = PeopleDirectory.from_names(parse_people(resolved_settings.people))
    sessions = SessionManager(
        lifetime=timedelta(hours=resolved_settings.session_lifetime_hours)
    )
    authorizer = RequestAuthorizer(
        password=resolved_settings.password.strip(), sessions=sessions
    )
    reservation_service = ReservationService(repository=store, people=people)

    return AppContainer(
        settings=resolved_settings,
        base_path=sanitise_base_path(resolved_settings.base_path),
        people=people,
        sessions=sessions,
        authorizer=authorizer,
        reservation_service=reservation_service,
        close_resources=store.close,
    )
