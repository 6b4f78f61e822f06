"""Activity sources: where the service gets a horse's recent activities."""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Protocol, Union, runtime_checkable

from pydantic import AwareDatetime, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from .exceptions import DataSourceError


logger = logging.getLogger(__name__)

_datetime_adapter = TypeAdapter(AwareDatetime)


@runtime_checkable
class ActivitySource(Protocol):
    """
    Protocol for anything that can supply activity rows.

    Rows carry ``workload``, ``duration_seconds``, ``distance`` and
    ``start_time`` and must come back most recent first.
    """

    def fetch_activities(self, horse_id: str, since: datetime) -> List[Mapping[str, Any]]:
        """Get a horse's activities that started at or after ``since``."""
        ...


def _start_time_of(row: Mapping[str, Any]) -> datetime:
    try:
        return _datetime_adapter.validate_python(row["start_time"])
    except (KeyError, PydanticValidationError) as e:
        raise DataSourceError(
            "Activity row has no valid start_time",
            details={"row": dict(row)},
        ) from e


class InMemoryActivitySource:
    """
    Activity source backed by a list of rows.

    Rows may carry a ``horse_id`` key; rows without one are treated as
    belonging to every horse, which suits single-horse exports.
    """

    def __init__(self, rows: Iterable[Mapping[str, Any]]) -> None:
        self._rows: List[Mapping[str, Any]] = list(rows)

    def __len__(self) -> int:
        return len(self._rows)

    def fetch_activities(self, horse_id: str, since: datetime) -> List[Mapping[str, Any]]:
        """Filter by horse and window start, newest first."""
        matched = []
        for row in self._rows:
            row_horse = row.get("horse_id")
            if row_horse is not None and str(row_horse) != horse_id:
                continue
            start_time = _start_time_of(row)
            if start_time >= since:
                matched.append((start_time, row))

        matched.sort(key=lambda item: item[0], reverse=True)
        logger.debug(f"Matched {len(matched)} of {len(self._rows)} rows for horse {horse_id}")
        return [row for _, row in matched]


def load_activity_rows(path: Union[str, Path]) -> List[Dict[str, Any]]:
    """
    Read activity rows from a JSON file.

    Accepts either a top-level array of rows or an object with an
    ``activities`` array.

    Raises:
        DataSourceError: If the file is missing, not JSON, or has no rows array
    """
    path = Path(path)
    try:
        with open(path, encoding="utf-8") as f:
            payload = json.load(f)
    except FileNotFoundError as e:
        raise DataSourceError(f"Activity file not found: {path}") from e
    except json.JSONDecodeError as e:
        raise DataSourceError(f"Activity file is not valid JSON: {path}", details={"error": str(e)}) from e

    if isinstance(payload, dict):
        payload = payload.get("activities")

    if not isinstance(payload, list) or not all(isinstance(row, dict) for row in payload):
        raise DataSourceError(f"Expected a list of activity objects in {path}")

    logger.info(f"Loaded {len(payload)} activity rows from {path}")
    return payload
