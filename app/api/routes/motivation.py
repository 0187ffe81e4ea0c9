import json
import logging
from urllib.parse import quote

from elevenlabs.core.api_error import ApiError
from fastapi import APIRouter, Depends, Response, status
from fastapi.responses import JSONResponse

from app.core.providers import get_quote_generator, get_speech_synthesizer
from app.schemas.motivation import QUOTE_HEADER, ROLE_MODEL_HEADER, ErrorOut, MotivationIn
from app.services.motivation import Fallback, QuoteGenerator
from app.services.speech import SpeechSynthesizer

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["motivation"])


# Characters encodeURIComponent leaves untouched.
_URI_COMPONENT_SAFE = "-_.!~*'()"


def encode_header_value(value: str) -> str:
    return quote(value, safe=_URI_COMPONENT_SAFE)


def _error_message(exc: Exception) -> str:
    message = "Failed to generate motivation."
    if str(exc):
        message += f" Details: {exc}"
    if isinstance(exc, ApiError) and exc.body is not None:
        message += f" API Response: {json.dumps(exc.body, default=str)}"
    return message


@router.post(
    "/generate-motivation",
    response_class=Response,
    responses={
        200: {"content": {"audio/mpeg": {}}},
        400: {"model": ErrorOut},
        500: {"model": ErrorOut},
    },
)
async def generate_motivation(
    req: MotivationIn,
    quotes: QuoteGenerator = Depends(get_quote_generator),
    speech: SpeechSynthesizer = Depends(get_speech_synthesizer),
) -> Response:
    try:
        outcome = await quotes.generate(req.text)
        if isinstance(outcome, Fallback):
            logger.info("Using %s fallback quote", outcome.reason.value)
        motivation = outcome.result
        audio = await speech.synthesize(motivation.quote)
    except Exception as exc:
        logger.exception("Error in /api/generate-motivation")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": _error_message(exc)},
        )

    return Response(
        content=audio,
        media_type="audio/mpeg",
        headers={
            QUOTE_HEADER: encode_header_value(motivation.quote),
            ROLE_MODEL_HEADER: encode_header_value(motivation.roleModel),
        },
    )
