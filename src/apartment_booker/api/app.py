"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, HTTPException, Request, status
from fastapi.responses import (
    FileResponse,
    JSONResponse,
    PlainTextResponse,
    RedirectResponse,
    Response,
)
from starlette.concurrency import run_in_threadpool

from apartment_booker.api.auth import (
    LoginRequired,
    is_authenticated,
    require_page_session,
    root_path,
    set_session_cookie,
)
from apartment_booker.api.base_path import StripBasePathMiddleware
from apartment_booker.api.pages import LOGIN_ERROR, render_index, render_login
from apartment_booker.api.reservations import router as reservations_router
from apartment_booker.app_logging import configure_logging
from apartment_booker.containers import AppContainer
from apartment_booker.errors import (
    AuthError,
    EntropyError,
    StorageError,
    ValidationError,
)
from apartment_booker.services.calendar import render_calendar


def create_app(container: AppContainer) -> FastAPI:  # noqa: PLR0915
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)
    settings = container.settings
    base_path = container.base_path
    static_root = settings.static_dir.resolve()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if not container.authorizer.enabled:
            logger.warning("No password configured, authentication is disabled")
        yield
        app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container
    if base_path:
        app.add_middleware(StripBasePathMiddleware, base_path=base_path)

    app.include_router(reservations_router)

    @app.exception_handler(ValidationError)
    async def validation_error_handler(
        request: Request, exc: ValidationError
    ) -> JSONResponse:
        return JSONResponse(
            {"error": str(exc)}, status_code=status.HTTP_400_BAD_REQUEST
        )

    @app.exception_handler(LoginRequired)
    async def login_required_handler(
        request: Request, exc: LoginRequired
    ) -> RedirectResponse:
        return RedirectResponse(
            root_path(base_path), status_code=status.HTTP_303_SEE_OTHER
        )

    @app.exception_handler(AuthError)
    async def auth_error_handler(request: Request, exc: AuthError) -> JSONResponse:
        return JSONResponse(
            {"error": "unauthorized"}, status_code=status.HTTP_401_UNAUTHORIZED
        )

    @app.exception_handler(StorageError)
    async def storage_error_handler(
        request: Request, exc: StorageError
    ) -> JSONResponse:
        logger.error(
            "Storage failure on %s %s: %s", request.method, request.url.path, exc
        )
        return JSONResponse(
            {"error": "internal error"},
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    @app.exception_handler(EntropyError)
    async def entropy_error_handler(
        request: Request, exc: EntropyError
    ) -> JSONResponse:
        logger.error("Unable to create session: %s", exc)
        return JSONResponse(
            {"error": "failed to create session"},
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/")
    async def index(request: Request) -> Response:
        """Serve the planning page, or the login form when signed out."""
        if not is_authenticated(request):
            return _login_page(container)
        return render_index(
            people=container.people,
            page_title=settings.page_title,
            banner_title=settings.banner_title,
            base_path=base_path,
        )

    @app.get("/login")
    async def login_form(request: Request) -> Response:
        """Show the login form unless already signed in."""
        if is_authenticated(request):
            return RedirectResponse(
                root_path(base_path), status_code=status.HTTP_303_SEE_OTHER
            )
        return _login_page(container)

    @app.post("/login")
    async def login(request: Request) -> Response:
        """Exchange the shared password for a session cookie."""
        try:
            form = await request.form()
        except Exception as exc:
            raise ValidationError("invalid form data") from exc
        candidate = form.get("password")
        try:
            token = container.authorizer.login(
                candidate if isinstance(candidate, str) else ""
            )
        except AuthError:
            return _login_page(
                container,
                error=LOGIN_ERROR,
                status_code=status.HTTP_401_UNAUTHORIZED,
            )
        response = RedirectResponse(
            root_path(base_path), status_code=status.HTTP_303_SEE_OTHER
        )
        set_session_cookie(
            response,
            token,
            max_age=int(container.sessions.lifetime.total_seconds()),
        )
        return response

    # Public on purpose: calendar clients subscribe without a session cookie.
    @app.get("/cal.ics")
    async def calendar() -> PlainTextResponse:
        """Export every reservation as an iCalendar document."""
        reservations = await run_in_threadpool(
            container.reservation_service.list_reservations
        )
        return PlainTextResponse(
            render_calendar(reservations),
            media_type="text/calendar; charset=utf-8",
            headers={"Content-Disposition": "attachment; filename=cal.ics"},
        )

    @app.get(
        "/static/{asset_path:path}", dependencies=[Depends(require_page_session)]
    )
    async def static_asset(asset_path: str) -> FileResponse:
        """Serve a front-end asset to signed-in users."""
        candidate = (static_root / asset_path).resolve()
        if not candidate.is_relative_to(static_root) or not candidate.is_file():
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
        return FileResponse(candidate)

    return app


def _login_page(
    container: AppContainer, error: str = "", status_code: int = status.HTTP_200_OK
) -> Response:
    return render_login(
        page_title=container.settings.page_title,
        base_path=container.base_path,
        hint=container.settings.password_hint.strip(),
        error=error,
        status_code=status_code,
    )
