"""Bulk farmer upload parsing"""

import csv
import io
from typing import Dict, List, Optional

from agrocredit.domain.exceptions import ValidationError
from agrocredit.domain.models import FarmerRow

# Header aliases, compared case-insensitively with separators stripped
COLUMN_ALIASES = {
    "name": ("name",),
    "phone": ("phone",),
    "national_id": ("national_id", "nationalid", "id"),
}


def _norm(s: str | None) -> str:
    return (s or "").strip().lower().replace(" ", "").replace("_", "")


def _pick(row: Dict[str, str], aliases: tuple) -> Optional[str]:
    wanted = {_norm(a) for a in aliases}
    for key, value in row.items():
        if _norm(key) in wanted and isinstance(value, str) and value.strip():
            return value.strip()
    return None


def map_farmer_row(row: Dict[str, str], row_number: int) -> FarmerRow:
    """Map one CSV record to a FarmerRow, raising if a required column is empty"""
    values = {field: _pick(row, aliases) for field, aliases in COLUMN_ALIASES.items()}
    missing = [field for field, value in values.items() if not value]
    if missing:
        raise ValidationError(f"Row {row_number}: missing {', '.join(missing)}")
    return FarmerRow(**values)


def parse_farmer_csv(text: str) -> List[FarmerRow]:
    """
    Parse an uploaded farmer CSV (header row required).

    Accepted headers: name, phone, and national_id / nationalId / ID in any
    case. Blank lines are skipped. Row numbers in errors are file line
    numbers (the header is line 1).
    """
    reader = csv.DictReader(io.StringIO(text.lstrip("\ufeff")))
    if not reader.fieldnames:
        raise ValidationError("CSV file is empty")

    rows = []
    for record in reader:
        if not any(v.strip() for v in record.values() if isinstance(v, str)):
            continue
        rows.append(map_farmer_row(record, reader.line_num))

    if not rows:
        raise ValidationError("CSV file has no farmer rows")
    return rows
