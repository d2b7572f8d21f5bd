from __future__ import annotations

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from core import db, settings
from core.log import configure_logging
from core.middleware import RequestLoggingMiddleware
from users import repository as users_repository
from users import router as users_router

logger = logging.getLogger(__name__)


def create_app(database: db.Database | None = None) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging()
        # One connection per process, shared by every request.
        handle = database or db.Database(
            db.database_url(),
            command_timeout=settings.command_timeout_s(),
        )
        logger.info("database_setup")
        await handle.connect()
        try:
            async with handle.session() as conn:
                await users_repository.create_table(conn)
            app.state.database = handle
            yield
        finally:
            app.state.database = None
            await handle.close()

    app = FastAPI(lifespan=lifespan)
    app.add_middleware(RequestLoggingMiddleware)
    app.include_router(users_router.router, tags=["users"])

    @app.get("/health")
    def health() -> dict:
        return {"status": "ok"}

    return app


app = create_app()


def run() -> None:
    uvicorn.run(
        "main:app",
        host=settings.bind_host(),
        port=settings.bind_port(),
        log_level=settings.log_level().lower(),
    )


if __name__ == "__main__":
    run()
