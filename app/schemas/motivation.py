from pydantic import BaseModel, Field, field_validator

INVALID_TEXT_MESSAGE = "Input text is required and must be a non-empty string."

QUOTE_HEADER = "X-Quote"
ROLE_MODEL_HEADER = "X-RoleModel"


class MotivationIn(BaseModel):
    text: str = Field(strict=True)

    @field_validator("text")
    @classmethod
    def _non_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError(INVALID_TEXT_MESSAGE)
        return value


class MotivationOut(BaseModel):
    quote: str
    roleModel: str


class ErrorOut(BaseModel):
    error: str
