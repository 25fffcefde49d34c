"""Tests for Stage 2 intent classification and its fallbacks."""

import asyncio
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from intent_engine.exceptions import ClassificationFormatError
from intent_engine.models.schemas import Intent, IntentSource, Lead
from intent_engine.stages.stage2_intent import (
    FORMAT_CORRECTION_REASONING,
    IntentClassificationStage,
    SYSTEM_PROMPT,
)


@pytest.mark.asyncio
async def test_structured_reply_is_accepted(stage_with_replies, jane, offer):
    stage = stage_with_replies('Sure! {"intent": "High", "reasoning": "  VP in SaaS.  "} Hope that helps.')
    result = await stage.classify(jane, offer)
    assert result.intent == Intent.HIGH
    assert result.reasoning == "VP in SaaS."
    assert result.source == IntentSource.LLM


@pytest.mark.asyncio
async def test_prompt_embeds_offer_lead_and_json_instruction(stage_with_replies, jane, offer):
    stage = stage_with_replies()
    await stage.classify(jane, offer)
    prompt = stage.generator.prompts[0]
    for text in ["Acme CRM", "saves time", "B2B SaaS mid-market", "Jane Doe", "VP Sales", "loves CRM tools"]:
        assert text in prompt
    assert '"intent"' in prompt and '"reasoning"' in prompt


@pytest.mark.asyncio
async def test_reply_without_braces_mentioning_medium(stage_with_replies, jane, offer):
    stage = stage_with_replies("I would rate this lead as medium overall.")
    result = await stage.classify(jane, offer)
    assert result.intent == Intent.MEDIUM
    assert result.reasoning == FORMAT_CORRECTION_REASONING
    assert result.source == IntentSource.TEXT_FALLBACK


@pytest.mark.asyncio
@pytest.mark.parametrize("reply,expected", [
    ('{"intent": "Very High", "reasoning": "x"}', Intent.HIGH),
    ('{"intent": "medium", "reasoning": "lowercase intent"}', Intent.MEDIUM),
    ('{"intent": "Low"}', Intent.LOW),
    ("{not json at all}", Intent.LOW),
    ("This is a high intent prospect", Intent.HIGH),
    ("", Intent.LOW),
])
async def test_invalid_replies_use_text_fallback(stage_with_replies, jane, offer, reply, expected):
    stage = stage_with_replies(reply)
    result = await stage.classify(jane, offer)
    assert result.intent == expected
    assert result.source == IntentSource.TEXT_FALLBACK


@pytest.mark.asyncio
async def test_call_failure_uses_heuristic_fallback(stage_with_replies, jane, offer):
    stage = stage_with_replies(ConnectionError("service down"))
    result = await stage.classify(jane, offer)
    # VP is a decision maker, "b2b" is not in "saas" or the bio
    assert result.intent == Intent.MEDIUM
    assert result.source == IntentSource.HEURISTIC_FALLBACK
    assert "AI service unavailable" in result.reasoning
    assert "decision maker" in result.reasoning


@pytest.mark.asyncio
async def test_heuristic_fallback_high_when_both_signals(stage_with_replies, offer):
    lead = Lead(name="Lee", role="Founder", industry="B2B software", linkedin_bio="")
    stage = stage_with_replies(RuntimeError("boom"))
    result = await stage.classify(lead, offer)
    assert result.intent == Intent.HIGH


@pytest.mark.asyncio
async def test_heuristic_fallback_matches_bio(stage_with_replies, offer):
    lead = Lead(name="Lee", role="Engineer", industry="Retail", linkedin_bio="Selling into B2B accounts")
    stage = stage_with_replies(RuntimeError("boom"))
    result = await stage.classify(lead, offer)
    assert result.intent == Intent.MEDIUM


@pytest.mark.asyncio
async def test_heuristic_fallback_low_without_signals(stage_with_replies, offer):
    lead = Lead(name="Lee", role="Engineer", industry="Retail", linkedin_bio="Shoes")
    stage = stage_with_replies(RuntimeError("boom"))
    result = await stage.classify(lead, offer)
    assert result.intent == Intent.LOW
    assert result.reasoning


@pytest.mark.asyncio
async def test_unconfigured_client_uses_heuristic_fallback(jane, offer):
    stage = IntentClassificationStage(api_key="", provider="not-a-provider")
    assert not stage.is_configured
    result = await stage.classify(jane, offer)
    assert result.source == IntentSource.HEURISTIC_FALLBACK


@pytest.mark.asyncio
async def test_timeout_counts_as_call_failure(jane, offer):
    async def slow(prompt):
        await asyncio.sleep(5)
        return '{"intent": "High", "reasoning": "late"}'

    stage = IntentClassificationStage(generator=slow, timeout_seconds=0.01)
    result = await stage.classify(jane, offer)
    assert result.source == IntentSource.HEURISTIC_FALLBACK


@pytest.mark.asyncio
async def test_non_text_reply_uses_text_fallback(jane, offer):
    async def weird(prompt):
        return None

    stage = IntentClassificationStage(generator=weird)
    result = await stage.classify(jane, offer)
    assert result.intent == Intent.LOW
    assert result.source == IntentSource.TEXT_FALLBACK


def test_parse_response_takes_first_object():
    stage = IntentClassificationStage(generator=lambda p: None)
    result = stage.parse_response('{"intent": "Low", "reasoning": "first"} {"intent": "High", "reasoning": "second"}')
    assert result.intent == Intent.LOW
    assert result.reasoning == "first"


def test_parse_response_rejects_blank_reasoning():
    stage = IntentClassificationStage(generator=lambda p: None)
    with pytest.raises(ClassificationFormatError):
        stage.parse_response('{"intent": "High", "reasoning": "   "}')


def test_explicit_zero_timeout_is_kept():
    stage = IntentClassificationStage(generator=lambda p: None, timeout_seconds=0)
    assert stage.timeout_seconds == 0


def test_openrouter_client_sends_attribution_headers():
    stage = IntentClassificationStage(api_key="sk-test", provider="openrouter")
    assert stage.is_configured
    assert "openrouter.ai" in str(stage.client.base_url)
    assert stage.client.default_headers["X-Title"] == stage.app_name
    assert stage.client.default_headers["HTTP-Referer"] == stage.site_url


def chat_completion(content):
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


@pytest.mark.asyncio
@pytest.mark.parametrize("provider", ["openrouter", "openai"])
async def test_chat_completions_call(provider, jane, offer):
    stage = IntentClassificationStage(api_key="sk-test", provider=provider, model="test-model")
    stage.client = MagicMock()
    stage.client.chat.completions.create = AsyncMock(
        return_value=chat_completion('{"intent": "Medium", "reasoning": "Relevant role."}')
    )

    result = await stage.classify(jane, offer)

    assert result.intent == Intent.MEDIUM
    assert result.source == IntentSource.LLM
    kwargs = stage.client.chat.completions.create.call_args.kwargs
    assert kwargs["model"] == "test-model"
    assert kwargs["max_tokens"] == stage.max_tokens
    assert kwargs["messages"][0] == {"role": "system", "content": SYSTEM_PROMPT}
    assert kwargs["messages"][1]["role"] == "user"
    assert "Jane Doe" in kwargs["messages"][1]["content"]


@pytest.mark.asyncio
async def test_chat_completion_without_content_uses_text_fallback(jane, offer):
    stage = IntentClassificationStage(api_key="sk-test", provider="openai")
    stage.client = MagicMock()
    stage.client.chat.completions.create = AsyncMock(return_value=chat_completion(None))

    result = await stage.classify(jane, offer)

    assert result.intent == Intent.LOW
    assert result.source == IntentSource.TEXT_FALLBACK


@pytest.mark.asyncio
async def test_anthropic_messages_call(jane, offer):
    stage = IntentClassificationStage(api_key="sk-test", provider="anthropic", model="test-model")
    stage.client = MagicMock()
    stage.client.messages.create = AsyncMock(
        return_value=SimpleNamespace(
            content=[SimpleNamespace(text='{"intent": "High", "reasoning": "Buyer in SaaS."}')]
        )
    )

    result = await stage.classify(jane, offer)

    assert result.intent == Intent.HIGH
    assert result.reasoning == "Buyer in SaaS."
    kwargs = stage.client.messages.create.call_args.kwargs
    assert kwargs["system"] == SYSTEM_PROMPT
    assert kwargs["model"] == "test-model"
    assert kwargs["messages"][0]["role"] == "user"
    assert "VP Sales" in kwargs["messages"][0]["content"]


@pytest.mark.asyncio
async def test_anthropic_reply_without_text_uses_text_fallback(jane, offer):
    stage = IntentClassificationStage(api_key="sk-test", provider="anthropic")
    stage.client = MagicMock()
    stage.client.messages.create = AsyncMock(return_value=SimpleNamespace(content=[]))

    result = await stage.classify(jane, offer)

    assert result.source == IntentSource.TEXT_FALLBACK
    assert result.intent == Intent.LOW
