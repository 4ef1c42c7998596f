"""Tests for the HTTP surface."""

import asyncio
import json
import threading
from urllib.parse import quote

import pytest
from fastapi import Request
from fastapi.testclient import TestClient

from apartment_booker.api.app import create_app
from apartment_booker.api.auth import SESSION_COOKIE_NAME
from apartment_booker.api.reservations import (
    create_reservation as create_reservation_endpoint,
)
from apartment_booker.config import Settings
from apartment_booker.containers import AppContainer, build_container
from apartment_booker.errors import StorageError
from tests.conftest import TEST_PASSWORD


def _book(client: TestClient, **overrides: str) -> dict[str, object]:
    payload = {
        "person": "Alice",
        "start": "2024-01-01T10:00:00Z",
        "end": "2024-01-01T12:00:00Z",
        "comment": "",
    }
    payload.update(overrides)
    response = client.post("/api/reservations", json=payload)
    assert response.status_code == 201, response.text
    return response.json()


def test_health(client: TestClient) -> None:
    assert client.get("/health").json() == {"status": "ok"}


def test_index_shows_login_when_signed_out(client: TestClient) -> None:
    response = client.get("/")

    assert response.status_code == 200
    assert 'name="password"' in response.text
    assert "the usual" in response.text


def test_api_requires_session(client: TestClient) -> None:
    for method, path in [
        ("GET", "/api/reservations"),
        ("POST", "/api/reservations"),
        ("DELETE", "/api/reservations/1"),
        ("PATCH", "/api/reservations/1"),
        ("GET", "/api/people"),
    ]:
        response = client.request(method, path)
        assert response.status_code == 401
        assert response.json() == {"error": "unauthorized"}
        assert response.headers["content-type"].startswith("application/json")


def test_forged_cookie_is_rejected(client: TestClient) -> None:
    client.cookies.set(SESSION_COOKIE_NAME, "forged")

    response = client.get("/api/reservations")

    assert response.status_code == 401


def test_static_assets_redirect_when_signed_out(client: TestClient) -> None:
    response = client.get("/static/js/app.js")

    assert response.status_code == 303
    assert response.headers["location"] == "/"


def test_static_assets_served_when_signed_in(logged_in_client: TestClient) -> None:
    response = logged_in_client.get("/static/js/app.js")

    assert response.status_code == 200
    assert "APP_CONFIG" in response.text
    assert logged_in_client.get("/static/css/style.css").status_code == 200
    assert logged_in_client.get("/static/../secret.txt").status_code == 404


def test_wrong_password_renders_error(client: TestClient) -> None:
    response = client.post("/login", data={"password": "nope"})

    assert response.status_code == 401
    assert "Mot de passe incorrect." in response.text
    assert SESSION_COOKIE_NAME not in response.cookies


def test_login_sets_session_cookie(client: TestClient) -> None:
    response = client.post("/login", data={"password": f" {TEST_PASSWORD} "})

    assert response.status_code == 303
    assert response.headers["location"] == "/"
    cookie = response.headers["set-cookie"]
    assert cookie.startswith(f"{SESSION_COOKIE_NAME}=")
    assert "HttpOnly" in cookie
    assert "Path=/" in cookie
    assert "SameSite=lax" in cookie
    assert "Max-Age=86400" in cookie


def test_login_page_redirects_when_signed_in(logged_in_client: TestClient) -> None:
    response = logged_in_client.get("/login")

    assert response.status_code == 303


def test_index_embeds_people_when_signed_in(logged_in_client: TestClient) -> None:
    response = logged_in_client.get("/")

    assert response.status_code == 200
    assert "Planning test" in response.text
    config_line = next(
        line for line in response.text.splitlines() if "window.APP_CONFIG =" in line
    )
    config = json.loads(config_line.split("=", 1)[1].strip().rstrip(";"))
    assert config["basePath"] == ""
    assert [person["name"] for person in config["people"]] == ["Alice", "Bob", "Carol"]
    for element_id in [
        "calendar",
        "legend-entries",
        "create-modal",
        "create-range",
        "person-select",
        "create-comment",
        "create-confirm",
        "create-cancel",
        "delete-modal",
        "delete-description",
        "delete-comment",
        "delete-save",
        "delete-confirm",
        "delete-cancel",
        "confirm-modal",
        "confirm-message",
        "confirm-back",
        "confirm-delete",
        "toast",
    ]:
        assert f'id="{element_id}"' in response.text
    assert 'src="/static/js/app.js"' in response.text


def test_people_endpoint_lists_known_residents(logged_in_client: TestClient) -> None:
    response = logged_in_client.get("/api/people")

    assert [person["name"] for person in response.json()] == ["Alice", "Bob", "Carol"]


def test_create_list_and_calendar_end_to_end(logged_in_client: TestClient) -> None:
    second = _book(
        logged_in_client,
        person="Bob",
        start="2024-01-02T09:00:00Z",
        end="2024-01-02T10:00:00Z",
        comment="bring keys",
    )
    first = _book(logged_in_client)

    listed = logged_in_client.get("/api/reservations").json()

    assert listed == [first, second]
    assert first == {
        "id": first["id"],
        "person": "Alice",
        "start": "2024-01-01T10:00:00Z",
        "end": "2024-01-01T12:00:00Z",
        "comment": "",
    }

    logged_in_client.cookies.clear()
    calendar = logged_in_client.get("/cal.ics")

    assert calendar.status_code == 200
    assert calendar.headers["content-type"] == "text/calendar; charset=utf-8"
    assert "filename=cal.ics" in calendar.headers["content-disposition"]
    body = calendar.text
    assert body.count("BEGIN:VEVENT") == 2
    assert body.index(f"UID:{first['id']}@") < body.index(f"UID:{second['id']}@")
    assert "DESCRIPTION:Bob\\nbring keys\r\n" in body


def test_create_rejects_bad_input(logged_in_client: TestClient) -> None:
    cases = [
        ({"person": "Mallory"}, "unknown person"),
        ({"start": "tomorrow"}, "invalid start"),
        ({"end": "2024-01-01"}, "invalid end"),
        ({"end": "2024-01-01T09:00:00Z"}, "end must be after start"),
        ({"start": "0001-01-01T00:00:00+01:00"}, "invalid start"),
        ({"end": "9999-12-31T23:59:59-01:00"}, "invalid end"),
    ]
    for overrides, message in cases:
        payload = {
            "person": "Alice",
            "start": "2024-01-01T10:00:00Z",
            "end": "2024-01-01T12:00:00Z",
        }
        payload.update(overrides)
        response = logged_in_client.post("/api/reservations", json=payload)
        assert response.status_code == 400
        assert response.json() == {"error": message}

    invalid_json = logged_in_client.post(
        "/api/reservations",
        content=b"{not json",
        headers={"content-type": "application/json"},
    )
    assert invalid_json.status_code == 400
    assert logged_in_client.get("/api/reservations").json() == []


def test_create_accepts_offsets_and_fractional_seconds(
    logged_in_client: TestClient,
) -> None:
    created = _book(
        logged_in_client,
        start="2024-06-01T12:00:00.250+02:00",
        end="2024-06-02T12:00:00.000+02:00",
    )

    assert created["start"] == "2024-06-01T10:00:00Z"
    assert created["end"] == "2024-06-02T10:00:00Z"


def test_delete_is_idempotent(logged_in_client: TestClient) -> None:
    created = _book(logged_in_client)

    first = logged_in_client.delete(f"/api/reservations/{created['id']}")
    second = logged_in_client.delete(f"/api/reservations/{created['id']}")

    assert first.status_code == 204
    assert second.status_code == 204
    assert logged_in_client.get("/api/reservations").json() == []


@pytest.mark.parametrize(
    "raw_id",
    ["abc", "99999999999999999999", "9223372036854775808", "1_0", " 5 ", "١"],
)
def test_invalid_id_is_rejected(logged_in_client: TestClient, raw_id: str) -> None:
    for method in ("DELETE", "PATCH"):
        response = logged_in_client.request(
            method, f"/api/reservations/{quote(raw_id)}", json={"comment": "x"}
        )

        assert response.status_code == 400
        assert response.json() == {"error": "invalid id"}


def test_largest_signed_id_is_accepted(logged_in_client: TestClient) -> None:
    response = logged_in_client.delete("/api/reservations/9223372036854775807")

    assert response.status_code == 204


def test_patch_updates_comment_only(logged_in_client: TestClient) -> None:
    created = _book(logged_in_client, comment="first")

    response = logged_in_client.patch(
        f"/api/reservations/{created['id']}", json={"comment": "  bring keys  "}
    )

    assert response.status_code == 200
    assert response.json() == {"id": created["id"], "comment": "bring keys"}
    [stored] = logged_in_client.get("/api/reservations").json()
    assert stored == {**created, "comment": "bring keys"}


def test_auth_disabled_without_password(settings: Settings) -> None:
    open_settings = settings.model_copy(update={"password": "  "})
    container = build_container(open_settings)
    try:
        client = TestClient(create_app(container), follow_redirects=False)

        assert client.get("/api/reservations").status_code == 200
        assert client.get("/static/js/app.js").status_code == 200
        assert "APP_CONFIG" in client.get("/").text
    finally:
        container.close_resources()


def test_storage_failure_is_generic_500(
    container: AppContainer, logged_in_client: TestClient, monkeypatch
) -> None:
    def broken() -> list:
        raise StorageError("disk on fire at /secret/path")

    monkeypatch.setattr(
        container.reservation_service.repository, "list_reservations", broken
    )

    response = logged_in_client.get("/api/reservations")

    assert response.status_code == 500
    assert response.json() == {"error": "internal error"}
    assert "secret" not in response.text


def test_base_path_prefix_is_stripped(settings: Settings) -> None:
    prefixed = settings.model_copy(update={"base_path": "booking/"})
    container = build_container(prefixed)
    try:
        client = TestClient(create_app(container), follow_redirects=False)

        assert 'action="/booking/login"' in client.get("/booking/login").text
        login = client.post("/booking/login", data={"password": TEST_PASSWORD})
        assert login.status_code == 303
        assert login.headers["location"] == "/booking"
        assert client.get("/booking/api/reservations").status_code == 200
        assert client.get("/booking").status_code == 200
        assert client.get("/api/reservations").status_code == 200
    finally:
        container.close_resources()


def test_cancelled_create_leaves_no_partial_row(
    container: AppContainer, monkeypatch
) -> None:
    app = create_app(container)
    repository = container.reservation_service.repository
    original_create = repository.create_reservation
    insert_started = threading.Event()
    release_insert = threading.Event()
    insert_finished = threading.Event()

    def slow_create(*args, **kwargs) -> int:
        insert_started.set()
        release_insert.wait(timeout=5)
        try:
            return original_create(*args, **kwargs)
        finally:
            insert_finished.set()

    monkeypatch.setattr(repository, "create_reservation", slow_create)
    body = json.dumps(
        {
            "person": "Alice",
            "start": "2024-01-01T10:00:00Z",
            "end": "2024-01-01T12:00:00Z",
            "comment": "late night",
        }
    ).encode()

    async def receive() -> dict[str, object]:
        return {"type": "http.request", "body": body, "more_body": False}

    request = Request(
        {
            "type": "http",
            "method": "POST",
            "path": "/api/reservations",
            "headers": [(b"content-type", b"application/json")],
            "query_string": b"",
            "app": app,
        },
        receive,
    )

    async def cancel_mid_insert() -> object:
        task = asyncio.create_task(create_reservation_endpoint(request))
        await asyncio.to_thread(insert_started.wait, 5)
        task.cancel()
        release_insert.set()
        try:
            return await task
        except asyncio.CancelledError:
            return None

    outcome = asyncio.run(cancel_mid_insert())
    assert insert_finished.wait(timeout=5)

    stored = repository.list_reservations()
    if outcome is None:
        assert len(stored) <= 1
    else:
        assert outcome.status_code == 201
        assert len(stored) == 1
    for reservation in stored:
        assert reservation.person == "Alice"
        assert reservation.comment == "late night"
        assert reservation.end > reservation.start
