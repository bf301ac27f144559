"""Serialise extracted data into a downloadable JSON or two-line CSV file."""

import json
from typing import Any, Dict, Literal, NamedTuple

from aione.errors import EmptyData, UnsupportedFormat

ExportFormat = Literal["json", "csv"]


class ExportFile(NamedTuple):
    filename: str
    media_type: str
    content: str


def _csv_cell(value: Any) -> str:
    """Render one CSV cell; only values containing a comma or quote get quoted."""
    if isinstance(value, (dict, list)):
        text = json.dumps(value, ensure_ascii=False)
    elif value is None:
        text = ""
    else:
        text = str(value)
    if "," in text or '"' in text:
        return '"' + text.replace('"', '""') + '"'
    return text


def to_json(data: Dict[str, Any]) -> str:
    return json.dumps(data, ensure_ascii=False, indent=2)


def to_csv(data: Dict[str, Any]) -> str:
    """Return a header line and a single value line, without a trailing newline.

    Multi-row data is not supported and values containing newlines are written
    as-is.
    """
    header = ",".join(_csv_cell(key) for key in data)
    values = ",".join(_csv_cell(value) for value in data.values())
    return f"{header}\n{values}"


def export_result(data: Dict[str, Any], format: str) -> ExportFile:
    """Build the download for *data* in *format* (``"json"`` or ``"csv"``).

    Raises:
        EmptyData: if *data* has no entries.
        UnsupportedFormat: for any other format.
    """
    if not data:
        raise EmptyData("There is no data to export.")

    if format == "json":
        return ExportFile("scraped-data.json", "application/json", to_json(data))
    if format == "csv":
        return ExportFile("scraped-data.csv", "text/csv", to_csv(data))
    raise UnsupportedFormat(f"Unsupported export format '{format}'. Use json or csv.")
