"""
Configuration settings for the Lead Intent Scoring Engine
"""

from typing import Dict, List
import os

# =============================================================================
# LLM CONFIGURATION (OpenRouter / OpenAI / Anthropic)
# =============================================================================

LLM_CONFIG = {
    "provider": os.getenv("LLM_PROVIDER", "openrouter"),  # openrouter, openai, anthropic
    "model": os.getenv("LLM_MODEL", "openai/gpt-4o-mini"),  # OpenRouter model format
    "api_key": os.getenv("OPENROUTER_API_KEY", ""),
    "base_url": os.getenv("LLM_BASE_URL", "https://openrouter.ai/api/v1"),
    "max_tokens": 300,
    "temperature": 0.2,
    "timeout_seconds": float(os.getenv("LLM_TIMEOUT_SECONDS", "20")),
    # OpenRouter specific headers
    "site_url": os.getenv("OPENROUTER_SITE_URL", "http://localhost:8000"),
    "app_name": os.getenv("OPENROUTER_APP_NAME", "Lead Intent Scoring Engine"),
}

# Environment variable consulted per provider when no explicit key is given
PROVIDER_API_KEY_ENV = {
    "openrouter": "OPENROUTER_API_KEY",
    "openai": "OPENAI_API_KEY",
    "anthropic": "ANTHROPIC_API_KEY",
}

# =============================================================================
# SCORING RUN CONFIGURATION
# =============================================================================

SCORING_CONFIG = {
    # 1 = strictly sequential classification
    "max_concurrency": int(os.getenv("SCORING_MAX_CONCURRENCY", "5")),
}

# =============================================================================
# LOGGING
# =============================================================================

LOGGING_CONFIG = {
    "level": os.getenv("LOG_LEVEL", "INFO").upper(),
    "format": os.getenv("LOG_FORMAT", "text").lower(),  # text, json
}

# =============================================================================
# RULE SCORING TERM TABLES
# =============================================================================

DECISION_MAKER_TERMS: List[str] = [
    "ceo",
    "cto",
    "cfo",
    "founder",
    "director",
    "head",
    "manager",
    "vp",
    "vice president",
]

INFLUENCER_TERMS: List[str] = [
    "lead",
    "senior",
    "specialist",
    "analyst",
    "coordinator",
]

ADJACENT_INDUSTRY_TERMS: List[str] = [
    "tech",
    "software",
    "saas",
    "technology",
    "digital",
    "startup",
]

REQUIRED_LEAD_FIELDS: List[str] = [
    "name",
    "role",
    "company",
    "industry",
    "location",
    "linkedin_bio",
]

# =============================================================================
# POINT TABLES
# =============================================================================

ROLE_POINTS = {
    "decision_maker": 20,
    "influencer": 10,
    "other": 0,
}

INDUSTRY_POINTS = {
    "exact": 20,
    "adjacent": 10,
    "none": 0,
}

COMPLETENESS_MAX_POINTS = 10

MAX_RULE_SCORE = 50

INTENT_POINTS: Dict[str, int] = {
    "High": 50,
    "Medium": 30,
    "Low": 10,
}

# Anything that is not a recognized intent scores like Low
DEFAULT_INTENT_POINTS = 10

# =============================================================================
# EXPORT
# =============================================================================

CSV_EXPORT_COLUMNS: List[str] = [
    "name",
    "role",
    "company",
    "intent",
    "score",
    "reasoning",
    "rule_score",
    "ai_score",
    "role_points",
    "industry_points",
    "completeness_points",
]
