# backend/usergate/main.py

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware

from usergate.api.auth_routes import router as auth_router
from usergate.api.responses import error_response, install_error_handlers
from usergate.api.user_routes import router as users_router
from usergate.core.config import Settings, settings as default_settings
from usergate.core.database import create_tables, make_engine, make_session_factory
from usergate.core.errors import StoreError
from usergate.core.security import PasswordHasher, TokenService
from usergate.services.user_store import UserStore

log = logging.getLogger("usergate")


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )


def create_app(settings: Optional[Settings] = None, store: Optional[UserStore] = None) -> FastAPI:
    cfg = settings or default_settings

    engine = None
    if store is None:
        engine = make_engine(cfg.database_url)
        store = UserStore(make_session_factory(engine))

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        log.info("Starting usergate (env=%s, db=%s)", cfg.app_env, cfg.database_url.split(":", 1)[0])
        if engine is not None and cfg.create_tables:
            create_tables(engine)
        yield
        log.info("Shutting down usergate")
        if engine is not None:
            engine.dispose()

    app = FastAPI(title="Usergate API", version="0.1.0", lifespan=lifespan)

    app.state.settings = cfg
    app.state.store = store
    app.state.hasher = PasswordHasher.from_settings(cfg)
    app.state.tokens = TokenService.from_settings(cfg)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cfg.allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["Authorization", "Content-Type"],
    )

    install_error_handlers(app)

    app.include_router(auth_router, prefix="/api/auth", tags=["auth"])
    app.include_router(users_router, prefix="/api", tags=["users"])

    @app.get("/health")
    def health(request: Request):
        try:
            request.app.state.store.ping()
        except StoreError as e:
            log.warning("Health check: database %s", e.kind.value)
            return error_response(
                "Database unavailable",
                status.HTTP_503_SERVICE_UNAVAILABLE,
                {"status": "degraded", "database": e.kind.value},
            )
        return {"status": "ok", "database": "ok"}

    return app


configure_logging(default_settings.log_level)

app = create_app()


# optional direct start: python -m usergate.main
if __name__ == "__main__":
    import uvicorn

    uvicorn.run("usergate.main:app", host="0.0.0.0", port=8000, reload=not default_settings.is_production)
