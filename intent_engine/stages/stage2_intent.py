"""
Stage 2: Intent Classification
==============================
Asks an LLM to classify a lead's buying intent (High/Medium/Low) for the
active offer, and always produces a usable answer.

Resolution:
- PARSE_SUCCESS: the reply holds a valid {"intent", "reasoning"} object
- PARSE_FAILURE: the model replied in the wrong shape; intent is read from the text
- CALL_FAILURE: the call errored, timed out or no client is configured;
  intent is derived from the lead's role, industry and bio
"""

import asyncio
import json
import logging
import os
import re
from enum import Enum
from typing import Awaitable, Callable, Dict, List, Optional

from ..models.schemas import Intent, IntentResult, IntentSource, Lead, Offer
from ..config.settings import LLM_CONFIG, PROVIDER_API_KEY_ENV, DECISION_MAKER_TERMS
from ..exceptions import ClassificationCallError, ClassificationFormatError
from .stage1_rules import contains_any, first_token

logger = logging.getLogger(__name__)

Generator = Callable[[str], Awaitable[str]]

# First {...} block, non-greedy
JSON_OBJECT_PATTERN = re.compile(r"\{.*?\}", re.S)

FORMAT_CORRECTION_REASONING = "AI response processed successfully but required format correction."

SYSTEM_PROMPT = (
    "You are an expert B2B lead qualification analyst. "
    "Always respond with a single valid JSON object only."
)


class ClassificationState(str, Enum):
    """States of a single classification"""
    CALL_PENDING = "CALL_PENDING"
    PARSE_SUCCESS = "PARSE_SUCCESS"
    PARSE_FAILURE = "PARSE_FAILURE"
    CALL_FAILURE = "CALL_FAILURE"


class IntentClassificationStage:
    """
    Stage 2: Classify buying intent with an LLM and a three-tier fallback.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        provider: Optional[str] = None,
        model: Optional[str] = None,
        generator: Optional[Generator] = None,
        timeout_seconds: Optional[float] = None,
    ):
        """
        Initialize LLM client.

        Args:
            api_key: API key for LLM provider
            provider: LLM provider ("openrouter", "openai", or "anthropic")
            model: Model name, provider specific
            generator: Async prompt -> text callable used instead of the SDK client
            timeout_seconds: Upper bound for one LLM call
        """
        self.provider = provider or LLM_CONFIG.get("provider", "openrouter")
        self.api_key = (
            api_key
            or LLM_CONFIG.get("api_key")
            or os.getenv(PROVIDER_API_KEY_ENV.get(self.provider, ""), "")
        )
        self.model = model or LLM_CONFIG.get("model", "openai/gpt-4o-mini")
        self.base_url = LLM_CONFIG.get("base_url", "https://openrouter.ai/api/v1")
        self.site_url = LLM_CONFIG.get("site_url", "http://localhost:8000")
        self.app_name = LLM_CONFIG.get("app_name", "Lead Intent Scoring Engine")
        self.max_tokens = LLM_CONFIG.get("max_tokens", 300)
        self.temperature = LLM_CONFIG.get("temperature", 0.2)
        self.timeout_seconds = (
            timeout_seconds if timeout_seconds is not None
            else LLM_CONFIG.get("timeout_seconds", 20)
        )
        self.generator = generator
        self.client = None

        if generator is None:
            self._initialize_client()

    @property
    def is_configured(self) -> bool:
        return self.generator is not None or self.client is not None

    def _initialize_client(self):
        """Initialize the async LLM client based on provider"""
        if not self.api_key:
            return

        if self.provider == "openrouter":
            from openai import AsyncOpenAI
            self.client = AsyncOpenAI(
                api_key=self.api_key,
                base_url=self.base_url,
                default_headers={
                    "HTTP-Referer": self.site_url,
                    "X-Title": self.app_name,
                },
            )
        elif self.provider == "openai":
            from openai import AsyncOpenAI
            self.client = AsyncOpenAI(api_key=self.api_key)
        elif self.provider == "anthropic":
            from anthropic import AsyncAnthropic
            self.client = AsyncAnthropic(api_key=self.api_key)
        else:
            logger.warning("Unknown LLM provider %r, intent classification will use fallback", self.provider)

    async def classify(self, lead: Lead, offer: Offer) -> IntentResult:
        """
        Classify a lead's buying intent. Never raises.

        Args:
            lead: Lead to classify
            offer: Active offer

        Returns:
            IntentResult from the LLM or from one of the fallbacks
        """
        state = ClassificationState.CALL_PENDING
        raw = ""
        parsed: Optional[IntentResult] = None

        try:
            raw = await self.generate(self.build_prompt(lead, offer))
        except Exception as e:
            logger.warning("Intent service call failed for lead %r: %s", lead.name, e)
            state = ClassificationState.CALL_FAILURE
        else:
            try:
                parsed = self.parse_response(raw)
                state = ClassificationState.PARSE_SUCCESS
            except ClassificationFormatError as e:
                logger.warning("Intent reply for lead %r needed format correction: %s", lead.name, e)
                state = ClassificationState.PARSE_FAILURE

        if state == ClassificationState.PARSE_SUCCESS:
            return parsed
        if state == ClassificationState.PARSE_FAILURE:
            return self.text_fallback(raw)
        return self.heuristic_fallback(lead, offer)

    async def generate(self, prompt: str) -> str:
        """Send the prompt to the intent service, bounded by the timeout."""
        if not self.is_configured:
            raise ClassificationCallError("LLM client not configured")

        call = self.generator(prompt) if self.generator else self._call_llm(prompt)
        try:
            return await asyncio.wait_for(call, timeout=self.timeout_seconds)
        except asyncio.TimeoutError:
            raise ClassificationCallError(
                f"Intent service timed out after {self.timeout_seconds}s"
            )

    async def _call_llm(self, prompt: str) -> str:
        """Call the LLM API"""
        if self.provider in ["openrouter", "openai"]:
            # Both OpenRouter and OpenAI use the same SDK interface
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": prompt},
                ],
                temperature=self.temperature,
                max_tokens=self.max_tokens,
            )
            return response.choices[0].message.content or ""

        elif self.provider == "anthropic":
            response = await self.client.messages.create(
                model=self.model,
                max_tokens=self.max_tokens,
                system=SYSTEM_PROMPT,
                messages=[
                    {"role": "user", "content": prompt}
                ],
            )
            # An empty reply is a format problem, not a failed call
            return next(
                (block.text for block in response.content if getattr(block, "text", None)),
                "",
            )

        raise ClassificationCallError(f"Unknown provider: {self.provider}")

    def build_prompt(self, lead: Lead, offer: Offer) -> str:
        """Generate the classification prompt with offer, lead and rubric"""
        value_props = "\n".join(f"  - {vp}" for vp in offer.value_props)
        use_cases = "\n".join(f"  - {uc}" for uc in offer.ideal_use_cases)

        return f"""Analyze the lead below against the product/offer and classify their buying intent.

PRODUCT / OFFER:
- Name: {offer.name}
- Value Propositions:
{value_props}
- Ideal Use Cases:
{use_cases}

LEAD PROFILE:
- Name: {lead.name}
- Role: {lead.role}
- Company: {lead.company}
- Industry: {lead.industry}
- Location: {lead.location}
- LinkedIn Bio: {lead.linkedin_bio}

CLASSIFICATION CRITERIA:
High intent:
- Decision maker role (CEO, CTO, Director, Head, Manager, VP)
- Industry closely matches the product's ideal use cases
- LinkedIn bio shows relevant pain points or interests
Medium intent:
- Influencer role (Senior, Lead, Specialist)
- Adjacent industry or some relevance to the use cases
- Some indicators of potential interest but not strong
Low intent:
- Individual contributor or unrelated role
- Industry does not match the product's use cases
- No clear indicators of interest or need

INSTRUCTIONS:
1. Weigh role authority, industry fit and bio relevance
2. Classify as exactly one of High, Medium or Low
3. Explain the decision in 1-2 sentences naming the deciding factors

Respond with ONLY this JSON object, no other text:
{{"intent": "High" | "Medium" | "Low", "reasoning": "1-2 sentence explanation"}}"""

    def parse_response(self, response: str) -> IntentResult:
        """
        Parse the first JSON object in the reply.

        Raises:
            ClassificationFormatError: no object, invalid JSON, unknown intent
                or missing reasoning
        """
        if not isinstance(response, str):
            raise ClassificationFormatError(f"Reply is not text: {type(response).__name__}")

        match = JSON_OBJECT_PATTERN.search(response)
        if not match:
            raise ClassificationFormatError("No JSON object in reply")

        try:
            data = json.loads(match.group(0))
        except json.JSONDecodeError as e:
            raise ClassificationFormatError(f"Invalid JSON: {e}")

        if not isinstance(data, dict):
            raise ClassificationFormatError("Reply JSON is not an object")

        intent = data.get("intent")
        if intent not in [i.value for i in Intent]:
            raise ClassificationFormatError(f"Invalid intent: {intent!r}")

        reasoning = data.get("reasoning")
        if not isinstance(reasoning, str) or not reasoning.strip():
            raise ClassificationFormatError("Missing reasoning")

        return IntentResult(
            intent=Intent(intent),
            reasoning=reasoning.strip(),
            source=IntentSource.LLM,
        )

    def text_fallback(self, response: str) -> IntentResult:
        """Read the intent from free text when the reply is not valid JSON"""
        text = str(response or "").lower()

        if "high intent" in text or "high" in text:
            intent = Intent.HIGH
        elif "medium intent" in text or "medium" in text:
            intent = Intent.MEDIUM
        else:
            intent = Intent.LOW

        return IntentResult(
            intent=intent,
            reasoning=FORMAT_CORRECTION_REASONING,
            source=IntentSource.TEXT_FALLBACK,
        )

    def heuristic_fallback(self, lead: Lead, offer: Offer) -> IntentResult:
        """Derive intent from the lead alone when the intent service is unavailable"""
        signals = self.fallback_signals(lead, offer)
        decision_maker = signals["decision_maker"]
        use_case_match = signals["use_case_match"]

        if decision_maker and use_case_match:
            intent = Intent.HIGH
            detail = "decision maker role and industry/bio matches the offer's use cases"
        elif decision_maker:
            intent = Intent.MEDIUM
            detail = "decision maker role, no industry/bio match with the offer's use cases"
        elif use_case_match:
            intent = Intent.MEDIUM
            detail = "industry/bio matches the offer's use cases, not a decision maker role"
        else:
            intent = Intent.LOW
            detail = "no decision maker role and no industry/bio match"

        return IntentResult(
            intent=intent,
            reasoning=f"AI service unavailable, using rule-based fallback: {detail}.",
            source=IntentSource.HEURISTIC_FALLBACK,
        )

    @staticmethod
    def fallback_signals(lead: Lead, offer: Offer) -> Dict[str, bool]:
        """Role and use-case signals used by the heuristic fallback"""
        role = (lead.role or "").lower()
        industry = (lead.industry or "").lower()
        bio = (lead.linkedin_bio or "").lower()
        tokens: List[str] = [first_token(uc.lower()) for uc in offer.ideal_use_cases]

        return {
            "decision_maker": contains_any(role, DECISION_MAKER_TERMS),
            "use_case_match": any(token in industry or token in bio for token in tokens),
        }
