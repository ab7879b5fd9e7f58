from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse

from auth import router as auth_router
from catalog import resources
from catalog import router as catalog_router
from core import db
from core.errors import register_exception_handlers
from core.log import configure_logging
from core.settings import Settings, load_settings


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Initialize the DB pool once per process.
    await db.init_pool(app.state.settings)
    try:
        yield
    finally:
        await db.close_pool()


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or load_settings()
    configure_logging(settings.log_level)

    app = FastAPI(title="ekoru-admin-api", lifespan=lifespan)
    app.state.settings = settings

    # The admin UI sends the session cookies cross-origin.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)

    app.include_router(auth_router.router, prefix="/api", tags=["auth"])
    for resource in resources.RESOURCES.values():
        app.include_router(catalog_router.build_router(resource), prefix="/api", tags=[resource.path])

    @app.get("/health")
    def health() -> dict:
        return {"status": "ok"}

    @app.get("/", response_class=PlainTextResponse)
    def root() -> str:
        return "Ekoru Admin Server is running"

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run(app, host=app.state.settings.host, port=app.state.settings.port)
