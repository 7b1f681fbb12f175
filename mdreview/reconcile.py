from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping

from .models import CanonicalLine, LineObservation

logger = logging.getLogger(__name__)

NBSP = "\u00a0"


def normalize_line_number(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, float) and not value.is_integer():
        return None
    try:
        number = int(value)
    except (TypeError, ValueError, OverflowError):
        return None
    if number < 0:
        return None
    return number


def _prefer(candidate: LineObservation, current: LineObservation) -> bool:
    if len(candidate.text) != len(current.text):
        return len(candidate.text) > len(current.text)
    return candidate.is_addition and not current.is_addition


def _strip_marker(text: str) -> str:
    return text[1:] if text.startswith("+") else text


def reconcile(observations: Iterable[LineObservation]) -> list[CanonicalLine]:
    """Merge redundant sightings into one ascending line per line number.

    Longer text wins a group; on equal length an addition beats a non-addition.
    When the batch holds any addition, non-addition winners are dropped.
    """
    winners: dict[int, LineObservation] = {}
    skipped = 0
    for observation in observations:
        line_number = normalize_line_number(observation.line_number)
        if line_number is None:
            skipped += 1
            continue
        if line_number != observation.line_number or NBSP in observation.text:
            observation = LineObservation(
                line_number=line_number,
                is_addition=bool(observation.is_addition),
                text=observation.text.replace(NBSP, ""),
            )
        current = winners.get(line_number)
        if current is None or _prefer(observation, current):
            winners[line_number] = observation
    if skipped:
        logger.debug("skipped %d observation(s) without a usable line number", skipped)

    ordered = [winners[number] for number in sorted(winners)]
    if any(item.is_addition for item in ordered):
        ordered = [item for item in ordered if item.is_addition]
    return [CanonicalLine(line_number=item.line_number, text=_strip_marker(item.text)) for item in ordered]


def observations_from_records(records: Iterable[Mapping[str, Any]]) -> list[LineObservation]:
    observations: list[LineObservation] = []
    for record in records:
        if not isinstance(record, Mapping):
            continue
        raw_number = record.get("lineNumber", record.get("line_number", record.get("newLine")))
        if "isAddition" in record or "isAdd" in record or "is_addition" in record:
            is_addition = bool(record.get("isAddition", record.get("isAdd", record.get("is_addition"))))
        else:
            is_addition = str(record.get("kind", "")) == "add"
        observations.append(
            LineObservation(
                line_number=normalize_line_number(raw_number),
                is_addition=is_addition,
                text=str(record.get("text", "") or ""),
            )
        )
    return observations
