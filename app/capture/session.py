import enum
import logging
from dataclasses import replace
from typing import Protocol
from urllib.parse import unquote

import httpx

from app.capture.state import CaptureEvent, CaptureState, End, RecognitionError, Start, reduce
from app.schemas.motivation import QUOTE_HEADER, ROLE_MODEL_HEADER, MotivationOut

logger = logging.getLogger(__name__)

MOTIVATION_ENDPOINT = "/api/generate-motivation"
PLAYBACK_RATE = 0.8

UNSUPPORTED_MESSAGE = "Your browser doesn't support speech recognition. Try Chrome or Edge."
START_FAILED_MESSAGE = "Could not start voice recognition. Is another app using the microphone?"
FETCH_FAILED_MESSAGE = "Failed to fetch motivation or audio. Please try again."
NON_JSON_ERROR_MESSAGE = "Server error with non-JSON response."
MISSING_QUOTE = "Could not retrieve quote."
MISSING_ROLE_MODEL = "Could not retrieve role model."


class Recognizer(Protocol):
    def start(self) -> None: ...
    def stop(self) -> None: ...
    def abort(self) -> None: ...


class AudioPlayer(Protocol):
    def load(self, audio: bytes, media_type: str) -> None: ...
    def play(self, rate: float) -> None: ...
    def release(self) -> None: ...


class PlaybackError(RuntimeError):
    """Raised by players when playback is refused (autoplay policy, no device)."""


class SessionPhase(str, enum.Enum):
    IDLE = "idle"
    LISTENING = "listening"
    TRANSCRIBED = "transcribed"
    LOADING = "loading"
    RESULT = "result"
    ERROR = "error"


class MotivationSession:
    """Drives one capture -> motivation -> playback cycle at a time.

    Recognition events go through :func:`reduce`; once capture ends with a
    non-empty transcript the session posts it to the motivation endpoint and
    hands the returned audio to the player.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        player: AudioPlayer,
        recognizer: Recognizer | None = None,
        *,
        endpoint: str = MOTIVATION_ENDPOINT,
        playback_rate: float = PLAYBACK_RATE,
    ) -> None:
        self.client = client
        self.player = player
        self.recognizer = recognizer
        self.endpoint = endpoint
        self.playback_rate = playback_rate

        self.capture = CaptureState()
        self.motivation: MotivationOut | None = None
        self.audio: bytes | None = None
        self.loading = False
        self.requested = False
        self._error: str | None = None if recognizer is not None else UNSUPPORTED_MESSAGE

    @property
    def supported(self) -> bool:
        return self.recognizer is not None

    @property
    def error(self) -> str | None:
        return self._error or self.capture.error

    @property
    def can_toggle(self) -> bool:
        return self.supported and not self.loading

    @property
    def phase(self) -> SessionPhase:
        if self.loading:
            return SessionPhase.LOADING
        if self.capture.listening:
            return SessionPhase.LISTENING
        if self.error:
            return SessionPhase.ERROR
        if self.motivation is not None:
            return SessionPhase.RESULT
        if self.capture.transcript:
            return SessionPhase.TRANSCRIBED
        return SessionPhase.IDLE

    @property
    def status_text(self) -> str:
        if self.loading:
            return "Finding inspiration..."
        if self.capture.listening:
            return "Listening..."
        if self.capture.transcript:
            return "Click to speak again"
        return "Click the mic to speak" if self.supported else "Voice input not supported"

    def toggle(self) -> None:
        if not self.can_toggle:
            return
        if self.capture.listening:
            self.recognizer.stop()
            return

        self._reset()
        try:
            self.recognizer.start()
        except Exception:
            logger.exception("Error starting recognition")
            self._error = START_FAILED_MESSAGE
            self.capture = replace(self.capture, listening=False)

    async def handle(self, event: CaptureEvent) -> None:
        """Apply a recognition event, fetching motivation when capture finishes."""
        if isinstance(event, Start):
            self._reset()
        self.capture = reduce(self.capture, event)
        if isinstance(event, (End, RecognitionError)) and self._should_request():
            await self.request_motivation()

    def _should_request(self) -> bool:
        # Browsers send end after error; one capture posts once.
        return bool(self.capture.transcript.strip()) and not self.loading and not self.requested

    async def request_motivation(self) -> None:
        self.requested = True
        self.loading = True
        self._error = None
        self.capture = replace(self.capture, error=None)
        self.motivation = None
        self._release_audio()
        try:
            response = await self.client.post(self.endpoint, json={"text": self.capture.transcript})
            if response.is_success:
                self._accept(response)
            else:
                self._error = _server_error(response)
        except httpx.HTTPError:
            logger.exception("Failed to fetch motivation")
            self._error = FETCH_FAILED_MESSAGE
        finally:
            self.loading = False

    def replay(self) -> None:
        if self.audio is None:
            return
        self._play()

    def close(self) -> None:
        if self.recognizer is not None:
            self.recognizer.abort()
        self._release_audio()

    def _accept(self, response: httpx.Response) -> None:
        self.motivation = MotivationOut(
            quote=unquote(response.headers.get(QUOTE_HEADER) or MISSING_QUOTE),
            roleModel=unquote(response.headers.get(ROLE_MODEL_HEADER) or MISSING_ROLE_MODEL),
        )
        self.audio = response.content
        self.player.load(self.audio, response.headers.get("content-type", "audio/mpeg"))
        self._play()

    def _play(self) -> None:
        try:
            self.player.play(self.playback_rate)
        except PlaybackError as exc:
            logger.warning("Playback prevented: %s", exc)

    def _reset(self) -> None:
        self.capture = CaptureState()
        self.motivation = None
        self._error = None
        self.requested = False
        self._release_audio()

    def _release_audio(self) -> None:
        if self.audio is not None:
            self.player.release()
            self.audio = None


def _server_error(response: httpx.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        return NON_JSON_ERROR_MESSAGE
    if isinstance(data, dict) and data.get("error"):
        return str(data["error"])
    return f"Server error: {response.status_code}"
