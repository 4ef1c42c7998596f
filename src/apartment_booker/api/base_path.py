"""ASGI middleware serving the app under an optional path prefix."""

from starlette.types import ASGIApp, Receive, Scope, Send


class StripBasePathMiddleware:
    """Remove ``base_path`` from matching request paths before routing.

    Requests outside the prefix are routed unchanged, so the app answers
    both at ``/`` and at ``/prefix/``.
    """

    def __init__(self, app: ASGIApp, base_path: str) -> None:
        self.app = app
        self.base_path = base_path

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http" or not self._matches(scope["path"]):
            await self.app(scope, receive, send)
            return
        scope = dict(scope)
        scope["path"] = self._strip(scope["path"])
        raw_path = scope.get("raw_path")
        if raw_path:
            scope["raw_path"] = self._strip(raw_path.decode("latin-1")).encode(
                "latin-1"
            )
        await self.app(scope, receive, send)

    def _matches(self, path: str) -> bool:
        if not self.base_path:
            return False
        return path == self.base_path or path.startswith(self.base_path + "/")

    def _strip(self, path: str) -> str:
        trimmed = path.removeprefix(self.base_path)
        if not trimmed:
            return "/"
        if not trimmed.startswith("/"):
            return "/" + trimmed
        return trimmed
