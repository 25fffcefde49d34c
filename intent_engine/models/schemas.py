"""
Pydantic schemas for the Lead Intent Scoring Engine
"""

from enum import Enum
from typing import List, Union
from pydantic import BaseModel, Field, field_validator
from datetime import datetime
import uuid

from ..config.settings import INTENT_POINTS, DEFAULT_INTENT_POINTS, MAX_RULE_SCORE


def _new_id() -> str:
    return str(uuid.uuid4())


# =============================================================================
# ENUMS
# =============================================================================

class Intent(str, Enum):
    """Buying intent category"""
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


class IntentSource(str, Enum):
    """Which resolution path produced an intent"""
    LLM = "llm"
    TEXT_FALLBACK = "text_fallback"
    HEURISTIC_FALLBACK = "heuristic_fallback"
    SCORING_FALLBACK = "scoring_fallback"


# =============================================================================
# INPUT SCHEMAS
# =============================================================================

class Offer(BaseModel):
    """The single active product/offer leads are scored against"""
    id: str = Field(default_factory=_new_id)
    name: str
    value_props: List[str] = Field(..., min_length=1)
    ideal_use_cases: List[str] = Field(..., min_length=1)
    created_at: datetime = Field(default_factory=datetime.utcnow)


class Lead(BaseModel):
    """A single prospect from an uploaded lead batch"""
    id: str = Field(default_factory=_new_id)
    name: str
    role: str = ""
    company: str = ""
    industry: str = ""
    location: str = ""
    linkedin_bio: str = ""
    uploaded_at: datetime = Field(default_factory=datetime.utcnow)


# =============================================================================
# STAGE RESULT SCHEMAS
# =============================================================================

class RuleBreakdown(BaseModel):
    """Per-component rule score with the reason for each"""
    role_score: int = Field(..., ge=0, le=20)
    role_reason: str
    industry_score: int = Field(..., ge=0, le=20)
    industry_reason: str
    completeness_score: int = Field(..., ge=0, le=10)
    completeness_reason: str

    @property
    def total(self) -> int:
        return self.role_score + self.industry_score + self.completeness_score


class RuleScoreResult(BaseModel):
    """Result from Stage 1: Rule Scoring"""
    total_rule_score: int
    max_rule_score: int = MAX_RULE_SCORE
    breakdown: RuleBreakdown


class IntentResult(BaseModel):
    """Result from Stage 2: Intent Classification"""
    intent: Intent
    reasoning: str = Field(..., min_length=1)
    source: IntentSource = IntentSource.LLM


# =============================================================================
# UNIFIED OUTPUT SCHEMA
# =============================================================================

class ScoredLead(BaseModel):
    """Final per-lead record combining the rule score and the intent"""
    name: str
    role: str = ""
    company: str = ""
    intent: Intent
    score: int = Field(..., ge=0, le=100)
    reasoning: str
    rule_breakdown: RuleBreakdown

    @property
    def rule_score(self) -> int:
        return self.rule_breakdown.total

    @property
    def ai_score(self) -> int:
        return intent_points(self.intent)


def intent_points(intent: Union[Intent, str, None]) -> int:
    """Map an intent to its fixed point value (High 50, Medium 30, Low 10)."""
    value = intent.value if isinstance(intent, Intent) else intent
    return INTENT_POINTS.get(value, DEFAULT_INTENT_POINTS)


# =============================================================================
# API REQUEST SCHEMAS
# =============================================================================

class OfferRequest(BaseModel):
    """Request to create the active offer"""
    name: str
    value_props: List[str]
    ideal_use_cases: List[str]

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Name must be a non-empty string")
        return value

    @field_validator("value_props", "ideal_use_cases", mode="before")
    @classmethod
    def wrap_single_value(cls, value):
        # A single string is accepted as a one-element list
        if isinstance(value, str):
            return [value]
        return value

    @field_validator("value_props", "ideal_use_cases")
    @classmethod
    def not_empty(cls, value: List[str]) -> List[str]:
        if not value:
            raise ValueError("At least one entry is required")
        return value

    def to_offer(self) -> Offer:
        return Offer(
            name=self.name,
            value_props=self.value_props,
            ideal_use_cases=self.ideal_use_cases,
        )

    class Config:
        json_schema_extra = {
            "example": {
                "name": "AI Outreach Automation",
                "value_props": ["24/7 outreach", "6x more meetings"],
                "ideal_use_cases": ["B2B SaaS mid-market"],
            }
        }


class LeadUploadRequest(BaseModel):
    """CSV lead upload, sent as text in a JSON body"""
    csvData: str

    class Config:
        json_schema_extra = {
            "example": {
                "csvData": (
                    "name,role,company,industry,location,linkedin_bio\n"
                    "Ava Patel,Head of Growth,FlowMetrics,SaaS,Bangalore,"
                    "Scaling B2B outbound at a Series B startup"
                )
            }
        }


class BatchScoreResponse(BaseModel):
    """Response from a scoring run"""
    message: str = "Scoring completed successfully"
    total_leads_scored: int
    results: List[ScoredLead]
