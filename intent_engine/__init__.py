"""
Lead Intent Scoring Engine
==========================
Scores sales leads 0-100 for buying intent against a single offer:
  Stage 1: Rule Scoring (role, industry fit, data completeness; 0-50)
  Stage 2: Intent Classification (LLM with fallbacks; High 50 / Medium 30 / Low 10)
"""

__version__ = "1.0.0"
__author__ = "Lead Scoring Team"
