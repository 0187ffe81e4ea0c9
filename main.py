from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api.routes import motivation as motivation_routes
from app.core.config import Settings, get_settings
from app.core.logging import configure_logging
from app.schemas.motivation import INVALID_TEXT_MESSAGE, QUOTE_HEADER, ROLE_MODEL_HEADER
from app.services.motivation import QuoteGenerator, build_quote_generator
from app.services.speech import SpeechSynthesizer, build_speech_synthesizer
from app.utils.middleware import RequestLoggingMiddleware


def create_app(
    settings: Settings | None = None,
    *,
    quote_generator: QuoteGenerator | None = None,
    speech_synthesizer: SpeechSynthesizer | None = None,
) -> FastAPI:
    # Raises when credentials are missing, so the process never starts half-configured.
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(title=settings.api_title, version=settings.api_version)
    app.state.settings = settings
    app.state.quote_generator = quote_generator or build_quote_generator(settings)
    app.state.speech_synthesizer = speech_synthesizer or build_speech_synthesizer(settings)

    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=[QUOTE_HEADER, ROLE_MODEL_HEADER],
    )

    app.include_router(motivation_routes.router)

    @app.exception_handler(RequestValidationError)
    async def invalid_input(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": INVALID_TEXT_MESSAGE},
        )

    @app.get("/", tags=["misc"])
    async def root():
        return {"message": settings.api_title}

    @app.get("/health", tags=["misc"])
    async def health():
        return {"status": "ok"}

    return app


app = create_app()
