"""Shared fixtures for the scoring engine tests."""

from typing import List

import pytest

from intent_engine.models.schemas import Lead, Offer
from intent_engine.stages.stage2_intent import IntentClassificationStage


class FakeIntentService:
    """Async stand-in for the LLM: replays replies and records prompts."""

    def __init__(self, *replies):
        self.replies = list(replies) or ['{"intent": "High", "reasoning": "Strong fit."}']
        self.prompts: List[str] = []

    async def __call__(self, prompt: str) -> str:
        self.prompts.append(prompt)
        reply = self.replies[min(len(self.prompts), len(self.replies)) - 1]
        if isinstance(reply, BaseException):
            raise reply
        return reply


def make_stage(*replies) -> IntentClassificationStage:
    return IntentClassificationStage(generator=FakeIntentService(*replies), timeout_seconds=1)


@pytest.fixture
def offer() -> Offer:
    return Offer(
        name="Acme CRM",
        value_props=["saves time"],
        ideal_use_cases=["B2B SaaS mid-market"],
    )


@pytest.fixture
def jane() -> Lead:
    return Lead(
        name="Jane Doe",
        role="VP Sales",
        company="Acme",
        industry="SaaS",
        location="NY",
        linkedin_bio="loves CRM tools",
    )


@pytest.fixture
def leads(jane) -> List[Lead]:
    return [
        jane,
        Lead(
            name="Raj Analyst",
            role="Senior Data Analyst",
            company="Numbers Ltd",
            industry="Finance",
            location="London",
            linkedin_bio="Spreadsheets and dashboards",
        ),
        Lead(name="Sam Intern", role="Intern", company="", industry="", location="", linkedin_bio=""),
    ]


@pytest.fixture
def stage_with_replies():
    """Factory: intent stage whose LLM replies with the given texts/exceptions in turn."""
    return make_stage
