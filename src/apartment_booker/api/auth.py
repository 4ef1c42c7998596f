"""Session cookie handling and authorization dependencies."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import Request
from fastapi.responses import Response

from apartment_booker.errors import AuthError

if TYPE_CHECKING:
    from apartment_booker.containers import AppContainer

SESSION_COOKIE_NAME = "apartment_session"


class LoginRequired(AuthError):
    """A page or asset was requested without a valid session."""


def session_token(request: Request) -> str | None:
    """Return the session token carried by the request cookie, if any."""
    return request.cookies.get(SESSION_COOKIE_NAME)


def is_authenticated(request: Request) -> bool:
    """Return True when the request may access protected resources."""
    container: AppContainer = request.app.state.container
    return container.authorizer.is_authorized(session_token(request))


async def require_api_session(request: Request) -> None:
    """Reject unauthenticated API calls with a JSON 401."""
    if not is_authenticated(request):
        raise AuthError("unauthorized")


async def require_page_session(request: Request) -> None:
    """Redirect unauthenticated page and asset requests to the login page."""
    if not is_authenticated(request):
        raise LoginRequired("unauthorized")


def set_session_cookie(response: Response, token: str, max_age: int) -> None:
    """Attach the session cookie to a response."""
    response.set_cookie(
        SESSION_COOKIE_NAME,
        token,
        max_age=max_age,
        path="/",
        httponly=True,
        samesite="lax",
    )


def root_path(base_path: str) -> str:
    """Return the URL of the site root under the mount prefix."""
    return base_path or "/"
