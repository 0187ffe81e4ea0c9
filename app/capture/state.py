"""Speech capture state machine.

Recognition callbacks are modelled as discrete events folded into an
immutable ``CaptureState`` by a single reducer. Nothing here touches the
network; the session controller decides what to do with a finished
transcript.
"""
from dataclasses import dataclass, replace
from typing import Union

RECOGNITION_ERROR_MESSAGES = {
    "no-speech": "No speech was detected. Please try again.",
    "audio-capture": "Microphone problem. Ensure it's working and permission is granted.",
    "not-allowed": "Permission to use microphone was denied. Please enable it in browser settings.",
}


@dataclass(frozen=True)
class CaptureState:
    listening: bool = False
    transcript: str = ""
    interim: str = ""
    error: str | None = None


@dataclass(frozen=True)
class Start:
    pass


@dataclass(frozen=True)
class PartialResult:
    text: str


@dataclass(frozen=True)
class FinalResult:
    text: str


@dataclass(frozen=True)
class RecognitionError:
    code: str


@dataclass(frozen=True)
class End:
    pass


CaptureEvent = Union[Start, PartialResult, FinalResult, RecognitionError, End]


def recognition_error_message(code: str) -> str:
    return RECOGNITION_ERROR_MESSAGES.get(code, f"Error: {code}")


def reduce(state: CaptureState, event: CaptureEvent) -> CaptureState:
    if isinstance(event, Start):
        return CaptureState(listening=True)
    if isinstance(event, PartialResult):
        return replace(state, interim=event.text)
    if isinstance(event, FinalResult):
        return replace(state, transcript=state.transcript + event.text, interim="")
    if isinstance(event, RecognitionError):
        return replace(state, listening=False, error=recognition_error_message(event.code))
    if isinstance(event, End):
        return replace(state, listening=False)
    raise TypeError(f"Unknown capture event: {event!r}")
