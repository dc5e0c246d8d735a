# ptime/main.py
import logging
import os

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import __version__
from .config import get_settings
from .errors import PTimeError
from .messages import describe
from .routers.auth import router as auth_router
from .routers.businesses import router as businesses_router
from .routers.health import router as health_router
from .routers.jobs import router as jobs_router

log = logging.getLogger("uvicorn.error")


def create_app() -> FastAPI:
    settings = get_settings()
    app = FastAPI(
        title="PTime API",
        version=__version__,
        docs_url="/docs",
        redoc_url=None,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(PTimeError)
    async def ptime_error_handler(request: Request, exc: PTimeError):
        if exc.status_code >= 500:
            log.error("%s %s -> %s: %s", request.method, request.url.path, exc.code, exc.detail)
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail, "error": exc.code, "message": describe(exc.code)},
        )

    @app.get("/", tags=["default"])
    def read_root():
        return {"ok": True, "service": "ptime-api", "version": __version__}

    # routers
    app.include_router(health_router)
    app.include_router(auth_router)
    app.include_router(businesses_router)
    app.include_router(jobs_router)
    return app


app = create_app()


# ──────────────────────────────────────────────────────────────────────────────
# Local dev entrypoint
# ──────────────────────────────────────────────────────────────────────────────
if __name__ == "__main__":
    import uvicorn
    logging.basicConfig(level=logging.INFO)
    uvicorn.run(
        "ptime.main:app",
        host="0.0.0.0",
        port=int(os.environ.get("PORT", "8000")),
        reload=True,
    )
