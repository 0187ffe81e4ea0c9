import pytest

from app.services.motivation import (
    INVALID_JSON_FALLBACK,
    MISSING_FIELDS_FALLBACK,
    Fallback,
    FallbackReason,
    Parsed,
    QuoteGenerator,
    parse_quote_response,
    strip_code_fence,
)
from tests.conftest import ScriptedModel


@pytest.mark.parametrize(
    "raw",
    [
        '{"quote": "Q", "roleModel": "R"}',
        '```json\n{"quote": "Q", "roleModel": "R"}\n```',
        '```JSON {"quote": "Q", "roleModel": "R"}```',
        '```\n{"quote": "Q", "roleModel": "R"}\n```\n',
        '   \n{"quote": "Q", "roleModel": "R"}  ',
    ],
)
def test_strip_code_fence(raw):
    assert strip_code_fence(raw) == '{"quote": "Q", "roleModel": "R"}'


def test_parsed_reply():
    outcome = parse_quote_response('```json\n{"quote": " Stay hungry. ", "roleModel": "Steve Jobs"}\n```')

    assert isinstance(outcome, Parsed)
    assert outcome.result.quote == "Stay hungry."
    assert outcome.result.roleModel == "Steve Jobs"


@pytest.mark.parametrize("raw", ["", "not json at all", '{"quote": "unterminated', "```json\n```"])
def test_invalid_json_fallback(raw):
    outcome = parse_quote_response(raw)

    assert outcome == Fallback(INVALID_JSON_FALLBACK, FallbackReason.INVALID_JSON)


@pytest.mark.parametrize(
    "raw",
    [
        '{"quote": "Only quote"}',
        '{"roleModel": "Only role model"}',
        '{"quote": "", "roleModel": "Someone"}',
        '{"quote": "Q", "roleModel": "   "}',
        '{"quote": 7, "roleModel": "Someone"}',
        '["quote", "roleModel"]',
        '"just a string"',
        "null",
    ],
)
def test_missing_fields_fallback(raw):
    outcome = parse_quote_response(raw)

    assert isinstance(outcome, Fallback)
    assert outcome.reason is FallbackReason.MISSING_FIELDS
    assert outcome.result == MISSING_FIELDS_FALLBACK


def test_fallback_pairs_are_distinct_and_complete():
    assert INVALID_JSON_FALLBACK != MISSING_FIELDS_FALLBACK
    for pair in (INVALID_JSON_FALLBACK, MISSING_FIELDS_FALLBACK):
        assert pair.quote and pair.roleModel


async def test_generator_reports_which_fallback_triggered():
    generator = QuoteGenerator(ScriptedModel("I'm sorry, I can't help with that.").as_runnable())

    outcome = await generator.generate("everything is bad")

    assert isinstance(outcome, Fallback)
    assert outcome.reason is FallbackReason.INVALID_JSON


async def test_generator_propagates_model_errors():
    generator = QuoteGenerator(ScriptedModel(error=TimeoutError("deadline exceeded")).as_runnable())

    with pytest.raises(TimeoutError):
        await generator.generate("anything")
