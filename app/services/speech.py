import logging

from elevenlabs.client import AsyncElevenLabs

from app.core.config import Settings

logger = logging.getLogger(__name__)


class EmptyAudioError(RuntimeError):
    pass


class SpeechSynthesizer:
    def __init__(
        self,
        client: AsyncElevenLabs,
        *,
        voice_id: str,
        model_id: str = "eleven_multilingual_v2",
        output_format: str = "mp3_44100_128",
    ) -> None:
        self.client = client
        self.voice_id = voice_id
        self.model_id = model_id
        self.output_format = output_format

    async def synthesize(self, text: str) -> bytes:
        """Render ``text`` to audio, buffering every streamed chunk."""
        chunks: list[bytes] = []
        async for chunk in self.client.text_to_speech.convert(
            self.voice_id,
            text=text,
            model_id=self.model_id,
            output_format=self.output_format,
        ):
            chunks.append(chunk)

        audio = b"".join(chunks)
        if not audio:
            raise EmptyAudioError("Speech synthesis returned no audio")
        logger.debug("Synthesized %d bytes of audio in %d chunks", len(audio), len(chunks))
        return audio


def build_speech_synthesizer(settings: Settings) -> SpeechSynthesizer:
    client = AsyncElevenLabs(api_key=settings.elevenlabs_api_key)
    return SpeechSynthesizer(
        client,
        voice_id=settings.elevenlabs_voice_id,
        model_id=settings.elevenlabs_model_id,
        output_format=settings.elevenlabs_output_format,
    )
