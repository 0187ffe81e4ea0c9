import enum
import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Union

from langchain_core.output_parsers import StrOutputParser
from langchain_core.prompts import ChatPromptTemplate
from langchain_core.runnables import Runnable
from langchain_google_genai import ChatGoogleGenerativeAI, HarmBlockThreshold, HarmCategory

from app.core.config import Settings
from app.schemas.motivation import MotivationOut

logger = logging.getLogger(__name__)

SAFETY_SETTINGS = {
    HarmCategory.HARM_CATEGORY_HARASSMENT: HarmBlockThreshold.BLOCK_MEDIUM_AND_ABOVE,
    HarmCategory.HARM_CATEGORY_HATE_SPEECH: HarmBlockThreshold.BLOCK_MEDIUM_AND_ABOVE,
    HarmCategory.HARM_CATEGORY_SEXUALLY_EXPLICIT: HarmBlockThreshold.BLOCK_MEDIUM_AND_ABOVE,
    HarmCategory.HARM_CATEGORY_DANGEROUS_CONTENT: HarmBlockThreshold.BLOCK_MEDIUM_AND_ABOVE,
}

INVALID_JSON_FALLBACK = MotivationOut(
    quote="Believe you can and you're halfway there.",
    roleModel="Theodore Roosevelt",
)
MISSING_FIELDS_FALLBACK = MotivationOut(
    quote="The journey of a thousand miles begins with a single step.",
    roleModel="Lao Tzu",
)

_FENCE_RE = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)

prompt = ChatPromptTemplate.from_template(
    "Based on the following user's feeling or situation, provide an inspiring, motivational quote "
    "and a strong, well-known role model (warriors, innovators, etc.) who exemplifies overcoming "
    "similar challenges or embodies the spirit of the quote.\n"
    "Constraints:\n"
    "- Give extremely practical, mindset-building advice that can be applied in real life\n"
    "- Avoid generic quotes and role models; pick ones truly relevant to the user's input\n"
    "- Use simple language that is easy to understand\n"
    "- Give a new quote every time; the quote must be one line\n"
    "\n"
    'User\'s input: "{text}"\n'
    "\n"
    'Return your response ONLY as a JSON object with two keys: "quote" (string) and "roleModel" (string).\n'
    'Example: {{"quote": "The only way to do great work is to love what you do.", '
    '"roleModel": "Steve Jobs - Developer and Entrepreneur"}}\n'
    "Be concise and ensure the quote is genuinely motivational.\n"
)


class FallbackReason(str, enum.Enum):
    INVALID_JSON = "invalid_json"
    MISSING_FIELDS = "missing_fields"


@dataclass(frozen=True)
class Parsed:
    result: MotivationOut


@dataclass(frozen=True)
class Fallback:
    result: MotivationOut
    reason: FallbackReason


QuoteOutcome = Union[Parsed, Fallback]


def strip_code_fence(raw: str) -> str:
    return _FENCE_RE.sub("", raw.strip()).strip()


def _text_field(data: dict[str, Any], key: str) -> str | None:
    value = data.get(key)
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def parse_quote_response(raw: str) -> QuoteOutcome:
    """Turn the model's free-form reply into a quote/role-model pair.

    Never raises: unusable replies map to one of two fixed fallback pairs and
    the returned ``Fallback`` records which one was chosen.
    """
    try:
        data = json.loads(strip_code_fence(raw))
    except json.JSONDecodeError:
        logger.warning("Quote response is not valid JSON, using fallback. Raw: %r", raw)
        return Fallback(INVALID_JSON_FALLBACK, FallbackReason.INVALID_JSON)

    if not isinstance(data, dict):
        logger.warning("Quote response has unexpected structure: %r", data)
        return Fallback(MISSING_FIELDS_FALLBACK, FallbackReason.MISSING_FIELDS)

    quote = _text_field(data, "quote")
    role_model = _text_field(data, "roleModel")
    if quote is None or role_model is None:
        logger.warning("Quote response is missing quote or roleModel: %r", data)
        return Fallback(MISSING_FIELDS_FALLBACK, FallbackReason.MISSING_FIELDS)

    return Parsed(MotivationOut(quote=quote, roleModel=role_model))


class QuoteGenerator:
    def __init__(self, model: Runnable) -> None:
        self.chain = prompt | model | StrOutputParser()

    async def generate(self, text: str) -> QuoteOutcome:
        logger.debug("Requesting quote for input: %r", text)
        raw = await self.chain.ainvoke({"text": text})
        logger.debug("Raw quote response: %r", raw)
        return parse_quote_response(raw)


def build_quote_generator(settings: Settings) -> QuoteGenerator:
    model = ChatGoogleGenerativeAI(
        model=settings.gemini_model,
        google_api_key=settings.gemini_api_key,
        temperature=settings.generation.temperature,
        top_k=settings.generation.top_k,
        top_p=settings.generation.top_p,
        max_output_tokens=settings.generation.max_output_tokens,
        safety_settings=SAFETY_SETTINGS,
    )
    return QuoteGenerator(model)
