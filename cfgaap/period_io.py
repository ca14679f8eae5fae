"""
Reading period input files.

Supported layouts:

JSON (numbers parsed as Decimal, never float)::

    {"period": "FY2024", "items": [{"label": "Cash", "amount": 140}, ...]}
    {"period": "FY2024", "items": {"Cash": 140, "Receivables": 40}}
    [{"label": "Cash", "amount": 140}, ...]      (period = file stem)
    {"Cash": 140, "Receivables": 40}             (period = file stem)

CSV with a header row containing ``label`` and ``amount`` columns and an
optional ``period`` column.

Duplicate labels are preserved so the normalizer can report them.
"""

import csv
import json
import logging
from dataclasses import dataclass, field
from decimal import Decimal
from pathlib import Path
from typing import Any, Optional

logger = logging.getLogger(__name__)


class _Pairs(list):
    """A JSON object kept as its ordered (key, value) pairs."""

    def keys(self) -> list:
        return [key for key, _ in self]

    def get(self, key: str, default: Any = None) -> Any:
        for k, value in self:
            if k == key:
                return value
        return default


@dataclass
class PeriodInput:
    """
    Raw line items of one period as read from a file.

    Attributes:
        period_label: Period name from the file, or the file stem.
        items: (label, amount) pairs in file order.
        source: File the period was read from.
    """

    period_label: str
    items: list[tuple[Any, Any]] = field(default_factory=list)
    source: Optional[Path] = None


def _items_from_json(data: Any, path: Path) -> tuple[Any, list[tuple[Any, Any]]]:
    period = None
    items = data
    if isinstance(data, _Pairs) and "items" in data.keys():
        period = data.get("period")
        items = data.get("items")

    pairs: list[tuple[Any, Any]] = []
    if isinstance(items, _Pairs):
        pairs = list(items)
    elif isinstance(items, list):
        for index, entry in enumerate(items, 1):
            if isinstance(entry, _Pairs):
                if "label" not in entry.keys() or "amount" not in entry.keys():
                    raise ValueError(
                        f"{path}: item {index} must have 'label' and 'amount' keys"
                    )
                pairs.append((entry.get("label"), entry.get("amount")))
            elif isinstance(entry, list) and len(entry) == 2:
                pairs.append((entry[0], entry[1]))
            else:
                raise ValueError(
                    f"{path}: item {index} is not a label/amount pair: {entry!r}"
                )
    else:
        raise ValueError(f"{path}: expected a list or object of line items")

    return period, pairs


def _load_json(path: Path) -> PeriodInput:
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f, parse_float=Decimal, object_pairs_hook=_Pairs)

    period, pairs = _items_from_json(data, path)
    return PeriodInput(
        period_label=str(period) if period is not None else path.stem,
        items=pairs,
        source=path,
    )


def _load_csv(path: Path) -> PeriodInput:
    with open(path, "r", encoding="utf-8-sig", newline="") as f:
        reader = csv.DictReader(f)
        if reader.fieldnames is None:
            raise ValueError(f"{path}: empty CSV file")

        columns = {name.strip().lower(): name for name in reader.fieldnames if name}
        if "label" not in columns or "amount" not in columns:
            raise ValueError(f"{path}: CSV header must contain 'label' and 'amount' columns")

        pairs = []
        periods = set()
        for row in reader:
            label = row.get(columns["label"])
            amount = row.get(columns["amount"])
            if not (label or "").strip() and not (amount or "").strip():
                continue  # blank row
            pairs.append((label.strip() if label else label, amount))
            if "period" in columns and row.get(columns["period"]):
                periods.add(row[columns["period"]].strip())

    if len(periods) > 1:
        raise ValueError(f"{path}: CSV mixes several periods: {', '.join(sorted(periods))}")

    return PeriodInput(
        period_label=periods.pop() if periods else path.stem,
        items=pairs,
        source=path,
    )


def load_period(path: Path) -> PeriodInput:
    """
    Load one period's raw line items from a JSON or CSV file.

    Args:
        path: Path to a .json or .csv file.

    Returns:
        PeriodInput with the period label and raw (label, amount) pairs.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the file layout is not recognized.
        json.JSONDecodeError: If a .json file is not valid JSON.
    """
    path = Path(path)
    logger.info(f"Loading period input from {path}")

    if not path.exists():
        raise FileNotFoundError(f"Period file not found: {path}")

    suffix = path.suffix.lower()
    if suffix == ".json":
        period = _load_json(path)
    elif suffix == ".csv":
        period = _load_csv(path)
    else:
        raise ValueError(f"{path}: unsupported file type '{suffix}' (use .json or .csv)")

    logger.info(f"Loaded {len(period.items)} line items for period '{period.period_label}'")

    return period
