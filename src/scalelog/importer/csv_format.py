"""
Scale CSV export format: header check and per-line parsing.

The export is a German-locale file written by the scale's companion app:

  Datum;Uhrzeit;Gewicht;Körperfett;Wasser;Muskelmasse;BMI;Notizen
  "01.01.20";"08:00";"80,5";"20,1";"55,0";"40,2";"25,3";""

Format rules:
  - encoded in ISO-8859-15 (Latin-9), never UTF-8
  - semicolon-delimited, exactly 8 fields; a semicolon inside the notes
    field (the last one) does not split it
  - each field may be wrapped in one pair of double quotes
  - date "dd.mm.yy" + time "HH:MM", local time in Europe/Berlin
  - numbers use a comma as decimal separator; empty means "not measured"
  - notes are escaped twice: once as a JSON string body, and the app
    additionally escapes backslash and double quote with a backslash

No DB access here; import_service handles persistence.
"""
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional
from zoneinfo import ZoneInfo

CSV_ENCODING = "iso8859_15"
DELIMITER = ";"
FIELD_COUNT = 8
EXPECTED_HEADER = (
    "Datum",
    "Uhrzeit",
    "Gewicht",
    "Körperfett",
    "Wasser",
    "Muskelmasse",
    "BMI",
    "Notizen",
)
TIMESTAMP_ZONE = ZoneInfo("Europe/Berlin")

_TIMESTAMP_RE = re.compile(r"(\d{2})\.(\d{2})\.(\d{2}) (\d{2}):(\d{2})")
# Optional sign, digits with optional "." thousands grouping, optional ",fraction"
_DECIMAL_RE = re.compile(r"[+-]?(?:\d{1,3}(?:\.\d{3})+|\d*)(?:,\d+)?")
# A backslash escape inside a JSON string body; \Z catches a dangling backslash
_JSON_ESCAPE_RE = re.compile(r"\\(u[0-9a-fA-F]{4}|.|\Z)", re.DOTALL)
_JSON_ESCAPES = {
    '"': '"',
    "\\": "\\",
    "/": "/",
    "b": "\b",
    "f": "\f",
    "n": "\n",
    "r": "\r",
    "t": "\t",
}
# Second escaping layer: \\ -> \ and \" -> "
_APP_ESCAPE_RE = re.compile(r'\\([\\"])')


class CsvImportError(Exception):
    """Base class for errors raised while importing a scale CSV export."""


class MalformedHeaderError(CsvImportError):
    """Raised when the first line is not the expected column header."""


class MalformedRowError(CsvImportError):
    """Raised when a data line cannot be parsed. Aborts the whole import."""

    def __init__(self, message: str, line_number: Optional[int] = None, line: str = ""):
        self.line_number = line_number
        self.line = line
        where = f"line {line_number}" if line_number is not None else "line"
        super().__init__(f"{where}: {message}: {line!r}")


@dataclass
class CsvRow:
    """One parsed data line. Only timestamp and weight are guaranteed."""

    timestamp: datetime  # aware, UTC
    weight: float  # kg
    body_fat_percent: Optional[float] = None
    body_water_percent: Optional[float] = None
    muscle_mass_percent: Optional[float] = None
    body_mass_index: Optional[float] = None
    notes: Optional[str] = None


def split_line(line: str) -> List[str]:
    """Split a line into at most 8 fields and drop one surrounding quote pair from each."""
    fields = line.split(DELIMITER, FIELD_COUNT - 1)
    return [_strip_quotes(f) for f in fields]


def _strip_quotes(field: str) -> str:
    if len(field) >= 2 and field.startswith('"') and field.endswith('"'):
        return field[1:-1]
    return field


def check_header(line: Optional[str]) -> None:
    """
    Raises:
        MalformedHeaderError: if the line is missing or its labels differ
            from EXPECTED_HEADER in any position
    """
    if line is None:
        raise MalformedHeaderError("Empty file: expected a header line")
    header = tuple(split_line(line))
    if header != EXPECTED_HEADER:
        raise MalformedHeaderError(f"Unexpected header line: {list(header)}")


def parse_timestamp(day: str, time: str) -> datetime:
    """
    Parse "dd.mm.yy" + "HH:MM" as Europe/Berlin wall time and return it in UTC.

    Two-digit years map to 2000-2099. Wall times in the spring-forward gap
    are shifted forward; ambiguous autumn times resolve to the earlier offset.

    Raises:
        ValueError: if the text does not match the pattern or is not a valid date
    """
    text = f"{day} {time}"
    match = _TIMESTAMP_RE.fullmatch(text)
    if match is None:
        raise ValueError(f"Invalid timestamp {text!r}, expected dd.mm.yy HH:MM")
    dd, mm, yy, hh, mi = (int(g) for g in match.groups())
    local = datetime(2000 + yy, mm, dd, hh, mi, tzinfo=TIMESTAMP_ZONE)
    return local.astimezone(timezone.utc)


def parse_decimal(text: str) -> Optional[float]:
    """
    Parse a German-formatted number ("1.234,5" -> 1234.5). Empty -> None.

    Raises:
        ValueError: if the text is not empty and not a number
    """
    if text == "":
        return None
    if not _DECIMAL_RE.fullmatch(text) or not any(c.isdigit() for c in text):
        raise ValueError(f"Invalid number {text!r}")
    return float(text.replace(".", "").replace(",", "."))


def unescape_notes(text: str) -> Optional[str]:
    """
    Undo both escaping layers of the notes field. Empty -> None.

    Text without backslashes comes back unchanged.

    Raises:
        ValueError: on an unknown or dangling escape sequence
    """
    if text == "":
        return None
    decoded = _JSON_ESCAPE_RE.sub(_decode_json_escape, text)
    if "\\u" in text:
        # \uXXXX pairs may have produced surrogate halves; join them
        decoded = decoded.encode("utf-16", "surrogatepass").decode("utf-16")
    return _APP_ESCAPE_RE.sub(r"\1", decoded)


def _decode_json_escape(match: "re.Match[str]") -> str:
    seq = match.group(1)
    if len(seq) == 5:
        return chr(int(seq[1:], 16))
    try:
        return _JSON_ESCAPES[seq]
    except KeyError:
        raise ValueError(f"Invalid escape sequence '\\{seq}' in notes") from None


def parse_row(line: str, line_number: Optional[int] = None) -> CsvRow:
    """
    Parse one data line into a CsvRow.

    Raises:
        MalformedRowError: on a short line, a bad timestamp, a missing or
            invalid weight, an invalid optional number or a bad notes escape
    """
    fields = split_line(line)
    if len(fields) != FIELD_COUNT:
        raise MalformedRowError(
            f"expected {FIELD_COUNT} fields, got {len(fields)}", line_number, line
        )
    day, time, weight, fat, water, muscle, bmi, escaped_notes = fields

    try:
        timestamp = parse_timestamp(day, time)
        parsed_weight = parse_decimal(weight)
        if parsed_weight is None:
            raise ValueError("Weight is required")
        return CsvRow(
            timestamp=timestamp,
            weight=parsed_weight,
            body_fat_percent=parse_decimal(fat),
            body_water_percent=parse_decimal(water),
            muscle_mass_percent=parse_decimal(muscle),
            body_mass_index=parse_decimal(bmi),
            notes=unescape_notes(escaped_notes),
        )
    except ValueError as exc:
        raise MalformedRowError(str(exc), line_number, line) from exc
