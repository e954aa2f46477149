import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, RedirectResponse
from starlette.status import HTTP_409_CONFLICT, HTTP_502_BAD_GATEWAY

from pdfmind.core.config import get_settings
from pdfmind.core.errors import ExhaustedFallbackError, FlowError
from pdfmind.core.logging import setup_logging
from pdfmind.routers import functions, quiz, sessions, system

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    settings = get_settings()
    setup_logging(settings.LOG_LEVEL)

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="API backend PDF Mind (extraction PDF, questions/réponses, quiz)",
    )

    # Middleware CORS
    origins = [o.strip() for o in settings.CORS_ORIGINS.split(",") if o.strip()]

    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins or ["*"],  # fallback si mal configuré
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(FlowError)
    async def flow_error_handler(request: Request, exc: FlowError):
        return JSONResponse(status_code=HTTP_409_CONFLICT, content={"detail": str(exc)})

    @app.exception_handler(ExhaustedFallbackError)
    async def exhausted_handler(request: Request, exc: ExhaustedFallbackError):
        logger.error("%s: all stages failed: %s", exc.operation, "; ".join(exc.describe()))
        return JSONResponse(
            status_code=HTTP_502_BAD_GATEWAY,
            content={"detail": exc.user_message, "operation": exc.operation, "stages": exc.describe()},
        )

    # Routers
    app.include_router(system.router)
    app.include_router(sessions.router)
    app.include_router(quiz.router)
    app.include_router(functions.router)

    # Redirect root → docs
    @app.get("/", include_in_schema=False)
    async def root():
        return RedirectResponse(url="/docs")

    return app


app = create_app()
