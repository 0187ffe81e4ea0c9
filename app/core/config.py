from functools import lru_cache
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings

class GenerationSettings(BaseModel):
    temperature: float = Field(0.7, description="Sampling temperature for quote generation")
    top_k: int = Field(1, description="Top-k sampling cutoff")
    top_p: float = Field(1.0, description="Nucleus sampling cutoff")
    max_output_tokens: int = Field(2048, description="Upper bound on generated tokens")


class Settings(BaseSettings):
    api_title: str = "Mood Motivator API"
    api_version: str = "1.0.0"

    gemini_api_key: str = Field(..., min_length=1)
    gemini_model: str = "gemini-2.5-flash"

    elevenlabs_api_key: str = Field(..., min_length=1)
    elevenlabs_voice_id: str = Field(..., min_length=1)
    elevenlabs_model_id: str = "eleven_multilingual_v2"
    elevenlabs_output_format: str = "mp3_44100_128"

    cors_origins: list[str] = ["http://localhost:3000", "http://127.0.0.1:3000"]
    log_level: str = "INFO"

    generation: GenerationSettings = GenerationSettings()

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


@lru_cache
def get_settings() -> Settings:
    return Settings()
