from fastapi import Request

from app.services.motivation import QuoteGenerator
from app.services.speech import SpeechSynthesizer


def get_quote_generator(request: Request) -> QuoteGenerator:
    return request.app.state.quote_generator


def get_speech_synthesizer(request: Request) -> SpeechSynthesizer:
    return request.app.state.speech_synthesizer
