import logging
import time
from contextvars import ContextVar
from dataclasses import dataclass

from sqlalchemy import event
from starlette.types import ASGIApp, Receive, Scope, Send

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Per-request database statistics
# ---------------------------------------------------------------------------

@dataclass
class QueryStats:
    count: int = 0
    db_time_ms: float = 0.0


# None outside an HTTP request (seeder, migrations, service-level tests).
query_stats_var: ContextVar[QueryStats | None] = ContextVar("query_stats", default=None)


def install_query_counter(engine) -> None:
    """
    Time every SQL statement on *engine* and add it to the current
    request's ``QueryStats``.  Statements issued outside a request are
    executed normally and not recorded.

    Called once per ``Database`` instance.
    """
    sync_engine = engine.sync_engine

    @event.listens_for(sync_engine, "before_cursor_execute")
    def _start_timer(conn, cursor, statement, parameters, context, executemany):
        conn.info["query_started_at"] = time.perf_counter()

    @event.listens_for(sync_engine, "after_cursor_execute")
    def _record_query(conn, cursor, statement, parameters, context, executemany):
        started_at = conn.info.pop("query_started_at", None)
        stats = query_stats_var.get()
        if stats is None or started_at is None:
            return
        stats.count += 1
        stats.db_time_ms += (time.perf_counter() - started_at) * 1000


# ---------------------------------------------------------------------------
# Middleware (pure ASGI so the stats object set here is the one handlers see)
# ---------------------------------------------------------------------------

class TimingMiddleware:
    """
    Adds ``X-Response-Time-Ms`` and ``X-Query-Count`` to every HTTP
    response and writes one access-log line per request, including the
    authenticated user when the access gate resolved one.
    """

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        stats = QueryStats()
        token = query_stats_var.set(stats)
        start = time.perf_counter()
        status_code = 500

        async def send_wrapper(message):
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message["status"]
                duration_ms = round((time.perf_counter() - start) * 1000, 2)
                headers = list(message.get("headers", []))
                headers.append((b"x-response-time-ms", str(duration_ms).encode()))
                headers.append((b"x-query-count", str(stats.count).encode()))
                message["headers"] = headers
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        finally:
            query_stats_var.reset(token)
            user = getattr(scope.get("state", {}).get("user"), "id", "-")
            logger.info(
                "%s %s -> %d user=%s (%.2f ms, %d queries, %.2f ms in db)",
                scope["method"],
                scope["path"],
                status_code,
                user,
                (time.perf_counter() - start) * 1000,
                stats.count,
                stats.db_time_ms,
            )
