"""Quoted CSV export of analysis records (the "Copy as CSV" output)."""

from collections.abc import Iterable, Mapping, Sequence
from pathlib import Path

from .models import CSV_HEADERS, RECORD_FIELDS, AnalysisRecord


def _quote(value: object) -> str:
    return '"' + str(value).replace('"', '""') + '"'


def _row_values(
    record: AnalysisRecord | Mapping[str, object],
    headers: Sequence[str],
) -> list[object]:
    data = record.to_dict() if isinstance(record, AnalysisRecord) else record
    # Custom headers that are wire names select those keys; otherwise the
    # headers are display labels for the fixed column order.
    keys = headers if all(h in RECORD_FIELDS for h in headers) else RECORD_FIELDS[: len(headers)]
    values = [data.get(key) or "" for key in keys]
    # Extra display labels have no field behind them
    return values + [""] * (len(headers) - len(values))


def records_to_csv(
    records: Iterable[AnalysisRecord | Mapping[str, object]],
    headers: Sequence[str] = CSV_HEADERS,
) -> str:
    """
    Render records as CSV text, every field double-quoted.

    >>> records_to_csv([{"term": 'a"b', "category": "c"}], ["term", "category"])
    '"term","category"\\n"a""b","c"'
    """
    lines = [",".join(_quote(h) for h in headers)]
    for record in records:
        lines.append(",".join(_quote(v) for v in _row_values(record, headers)))
    return "\n".join(lines)


def write_csv(
    records: Iterable[AnalysisRecord | Mapping[str, object]],
    output_path: Path,
) -> Path:
    output_path.write_text(records_to_csv(records), encoding="utf-8")
    return output_path
