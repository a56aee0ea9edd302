import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .catalog import Catalog
from .config import Settings, load_settings
from .context import build_context, latest_user_text
from .llm_client import GenerativeBackend, build_backend, load_system_prompt
from .middleware import RequestLoggingMiddleware
from .models import ChatRequest, ChatResponse, ResolutionResult
from .pipeline import ChatPipeline
from .product_loader import load_catalog
from .service_faq import FAQ, GENERIC_REPLY, load_faq
from .utils import get_logger, log_event


SERVICE_NAME = "digitgenius-assistant"

logger = get_logger("api")


def create_app(
    settings: Optional[Settings] = None,
    catalog: Optional[Catalog] = None,
    backend: Optional[GenerativeBackend] = None,
    faq: Optional[FAQ] = None,
) -> FastAPI:
    """Wire catalog, backend and FAQ into one FastAPI app.

    Everything is built here once and kept on app.state; handlers only read it.
    """
    settings = settings or load_settings()
    get_logger(level=settings.log_level)
    if catalog is None:
        catalog = load_catalog(settings.catalog_path)
    if backend is None:
        backend = build_backend(settings)
    pipeline = ChatPipeline(
        catalog,
        backend=backend,
        faq=faq or FAQ(load_faq(settings.faq_path)),
        system_prompt=load_system_prompt(settings.prompt_path),
        display_limit=settings.list_display_limit,
        max_message_chars=settings.max_message_chars,
    )

    app = FastAPI(title=SERVICE_NAME)
    app.state.settings = settings
    app.state.catalog = catalog
    app.state.pipeline = pipeline

    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 405:
            return JSONResponse({"error": "Method not allowed"}, status_code=405)
        return JSONResponse({"error": str(exc.detail)}, status_code=exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def invalid_body(request: Request, exc: RequestValidationError):
        return JSONResponse({"error": "Invalid request body"}, status_code=400)

    @app.exception_handler(Exception)
    async def internal_error(request: Request, exc: Exception):
        log_event(logger, "unhandled_error", logging.ERROR, path=request.url.path, error=repr(exc))
        return JSONResponse({"error": "Internal server error"}, status_code=500)

    @app.get("/api/health")
    def health(request: Request):
        return {
            "status": "ok",
            "service": SERVICE_NAME,
            "catalog_size": len(request.app.state.catalog),
            "generative": request.app.state.pipeline.backend is not None,
        }

    @app.post("/api/chat", response_model=ChatResponse, response_model_exclude_none=True)
    def chat(req: ChatRequest, request: Request):
        message = (req.message or "").strip()
        if not message and not req.history:
            return JSONResponse({"error": "Missing message"}, status_code=400)
        if not message:
            message = latest_user_text(req.history)

        try:
            result = request.app.state.pipeline.respond(message, req.history)
        except Exception as e:
            log_event(logger, "pipeline_failed", logging.ERROR, error=repr(e))
            result = ResolutionResult(reply=GENERIC_REPLY, source="fallback_error")

        log_event(
            logger,
            "chat_resolved",
            source=result.source,
            matched=len(result.matched_product_ids),
            history_turns=len(req.history),
        )
        return ChatResponse(
            reply=result.reply,
            source=result.source,
            context=build_context(result.matched_product_ids),
        )

    return app


app = create_app()
