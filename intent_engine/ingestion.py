"""
CSV lead ingestion
==================
Turns uploaded CSV text into Lead records.

- Header names are trimmed and lower-cased
- All six lead columns must be present
- Lead columns may appear only once
- Rows with more fields than the header are skipped, values are trimmed
- Rows without a name are dropped
"""

import io
import logging
from datetime import datetime
from typing import List

import pandas as pd

from .models.schemas import Lead
from .config.settings import REQUIRED_LEAD_FIELDS
from .exceptions import LeadUploadError

logger = logging.getLogger(__name__)


def parse_leads_csv(csv_data: str) -> List[Lead]:
    """
    Parse CSV text into leads.

    Args:
        csv_data: CSV content with a header row

    Returns:
        Leads in file order, one per row with a non-empty name

    Raises:
        LeadUploadError: no data rows, unreadable CSV or missing columns
    """
    if not isinstance(csv_data, str) or not csv_data.strip():
        raise LeadUploadError(
            "Missing csvData field. Send CSV content as a string in the request body."
        )

    lines = csv_data.strip().splitlines()
    if len(lines) < 2:
        raise LeadUploadError("CSV must contain at least a header and one data row")

    # header=None: the first line fixes the field count, longer rows are skipped
    try:
        df = pd.read_csv(
            io.StringIO(csv_data.strip()),
            header=None,
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=True,
            on_bad_lines="skip",
        )
    except (pd.errors.ParserError, pd.errors.EmptyDataError) as e:
        raise LeadUploadError(f"Could not parse CSV: {e}")

    columns = [str(c).strip().lower() for c in df.iloc[0]]
    df = df.iloc[1:]
    df.columns = columns

    duplicates = [col for col in REQUIRED_LEAD_FIELDS if columns.count(col) > 1]
    if duplicates:
        raise LeadUploadError(
            f"Duplicate columns: {', '.join(duplicates)}",
            details={"found_columns": columns},
        )

    missing = [col for col in REQUIRED_LEAD_FIELDS if col not in df.columns]
    if missing:
        raise LeadUploadError(
            f"Missing required columns: {', '.join(missing)}",
            details={
                "required_columns": REQUIRED_LEAD_FIELDS,
                "found_columns": list(df.columns),
            },
        )

    df = df[REQUIRED_LEAD_FIELDS].fillna("")
    uploaded_at = datetime.utcnow()

    leads = []
    for _, row in df.iterrows():
        values = {field: str(row[field]).strip() for field in REQUIRED_LEAD_FIELDS}
        if not values["name"]:
            continue
        leads.append(Lead(uploaded_at=uploaded_at, **values))

    logger.info("Parsed %d leads from %d CSV rows", len(leads), len(df))
    return leads
