# Scoring stages module
from .stage1_rules import RuleScoringStage
from .stage2_intent import IntentClassificationStage
