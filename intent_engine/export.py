"""
Result export
=============
JSON records and CSV text for scored leads.
"""

import csv
import io
from datetime import date
from typing import Any, Dict, List, Optional, Sequence

import pandas as pd

from .models.schemas import ScoredLead
from .config.settings import CSV_EXPORT_COLUMNS


def results_to_records(results: Sequence[ScoredLead]) -> List[Dict[str, Any]]:
    """JSON-ready dicts, one per scored lead"""
    return [r.model_dump(mode="json") for r in results]


def result_to_row(result: ScoredLead) -> Dict[str, Any]:
    """Flatten a scored lead into the CSV export columns"""
    breakdown = result.rule_breakdown
    return {
        "name": result.name or "",
        "role": result.role or "",
        "company": result.company or "",
        "intent": result.intent.value,
        "score": result.score,
        "reasoning": result.reasoning or "",
        "rule_score": result.rule_score,
        "ai_score": result.ai_score,
        "role_points": breakdown.role_score,
        "industry_points": breakdown.industry_score,
        "completeness_points": breakdown.completeness_score,
    }


def results_to_csv(results: Sequence[ScoredLead]) -> str:
    """
    Render results as CSV.

    Text columns are double-quoted with embedded quotes doubled; numeric
    columns are written bare. The header row is unquoted.
    """
    df = pd.DataFrame([result_to_row(r) for r in results], columns=CSV_EXPORT_COLUMNS)
    buffer = io.StringIO()
    buffer.write(",".join(CSV_EXPORT_COLUMNS) + "\n")
    df.to_csv(
        buffer,
        index=False,
        header=False,
        quoting=csv.QUOTE_NONNUMERIC,
        doublequote=True,
        lineterminator="\n",
    )
    return buffer.getvalue()


def export_filename(on: Optional[date] = None) -> str:
    return f"lead-scores-{(on or date.today()).isoformat()}.csv"
