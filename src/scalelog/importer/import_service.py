"""
CSV import: parses a scale export and persists it as Measurement rows.

Flow for one import call:
  1. Decode the byte stream as ISO-8859-15
  2. Check the header line (nothing is written if it doesn't match)
  3. Parse each data line → derive metabolic rate → stage a Measurement row
  4. Commit once after the last line

The whole file is one unit of work: if any line fails to parse, the session
is closed without commit and none of the rows from this call are persisted.
Timestamps are not checked against rows already in the DB; duplicate or
overlapping uploads are left to the caller.
"""
import io
import logging
from pathlib import Path
from typing import BinaryIO, Optional, TextIO, Union

from sqlmodel import Session

from scalelog.analysis.metabolic import MetabolicRateFn, calculate_metabolic_rate
from scalelog.analysis.stats import round_half_up
from scalelog.db.store import insert_measurement
from scalelog.importer.csv_format import CSV_ENCODING, CsvRow, check_header, parse_row
from scalelog.models.measurement import Measurement
from scalelog.models.profile import ActivityLevel, Profile

logger = logging.getLogger(__name__)


def import_csv(
    engine,
    data: Union[bytes, BinaryIO],
    profile: Profile,
    activity_level: Optional[ActivityLevel] = None,
    metabolic_rate: MetabolicRateFn = calculate_metabolic_rate,
) -> int:
    """
    Import a scale CSV export into the given profile.

    Args:
        engine: SQLAlchemy engine (SQLModel create_engine result).
        data: raw file contents, or a binary file object.
        profile: persisted Profile the measurements belong to.
        activity_level: applies to every row; falls back to the profile's level.
        metabolic_rate: calculator used for the derived metabolic rate.

    Returns:
        Number of measurements imported.

    Raises:
        MalformedHeaderError: if the header line is missing or wrong.
        MalformedRowError: if any data line cannot be parsed.
    """
    if activity_level is None:
        activity_level = profile.activity_level

    stream = io.BytesIO(data) if isinstance(data, (bytes, bytearray)) else data
    # newline=None: accept \n, \r\n and \r like the scale app's exports
    text = io.TextIOWrapper(stream, encoding=CSV_ENCODING, newline=None)
    try:
        return _import_lines(engine, text, profile, activity_level, metabolic_rate)
    finally:
        # The stream belongs to the caller; don't let the wrapper close it
        text.detach()


def _import_lines(
    engine,
    text: TextIO,
    profile: Profile,
    activity_level: Optional[ActivityLevel],
    metabolic_rate: MetabolicRateFn,
) -> int:
    lines = (line.rstrip("\n") for line in text)

    check_header(next(lines, None))

    logger.info("Importing CSV into profile %s (%s)", profile.id, profile.name)
    count = 0
    with Session(engine) as session:
        try:
            for line_number, line in enumerate(lines, start=2):
                if not line.strip():
                    continue
                row = parse_row(line, line_number)
                measurement = _to_measurement(row, activity_level, metabolic_rate)
                insert_measurement(session, measurement, profile.id)
                count += 1
            session.commit()
        except Exception:
            session.rollback()
            logger.warning(
                "CSV import into profile %s failed, rolled back", profile.id
            )
            raise

    logger.info("Imported %d measurements into profile %s", count, profile.id)
    return count


def _to_measurement(
    row: CsvRow,
    activity_level: Optional[ActivityLevel],
    metabolic_rate: MetabolicRateFn,
) -> Measurement:
    rate: Optional[float] = None
    if activity_level is not None and row.muscle_mass_percent is not None:
        rate = round_half_up(
            metabolic_rate(activity_level, row.weight, row.muscle_mass_percent), 1
        )

    return Measurement(
        timestamp=row.timestamp,
        weight=row.weight,
        body_fat_percent=row.body_fat_percent,
        body_water_percent=row.body_water_percent,
        muscle_mass_percent=row.muscle_mass_percent,
        body_mass_index=row.body_mass_index,
        metabolic_rate=rate,
        activity_level=activity_level,
        notes=row.notes,
    )


class MeasurementImportService:
    """Imports scale CSV exports into the DB."""

    def __init__(self, engine, metabolic_rate: MetabolicRateFn = calculate_metabolic_rate):
        """
        Args:
            engine: SQLAlchemy engine (SQLModel create_engine result).
            metabolic_rate: calculator injected into every import.
        """
        self.engine = engine
        self.metabolic_rate = metabolic_rate

    def import_bytes(
        self,
        data: Union[bytes, BinaryIO],
        profile: Profile,
        activity_level: Optional[ActivityLevel] = None,
    ) -> int:
        return import_csv(
            self.engine,
            data,
            profile,
            activity_level=activity_level,
            metabolic_rate=self.metabolic_rate,
        )

    def import_file(
        self,
        path: Path,
        profile: Profile,
        activity_level: Optional[ActivityLevel] = None,
    ) -> int:
        """Import a CSV export from disk. See import_csv() for errors."""
        with open(path, "rb") as f:
            return self.import_bytes(f, profile, activity_level)
