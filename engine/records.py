"""
engine/records.py
Immutable match and fixture records consumed by the prediction engine.

Records are read from the normalized JSON produced by the ingestion step.
Unknown numeric values stay ``None``; they are never coerced to zero.
"""

import math
import re
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Dict, Optional

# Full-time result tags as stored in the normalized data
RESULT_HOME = "H"
RESULT_DRAW = "D"
RESULT_AWAY = "A"

RESULT_LABELS = {
    RESULT_HOME: "Home",
    RESULT_DRAW: "Draw",
    RESULT_AWAY: "Away",
}

_ISO_DATE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})")


def parse_date(value: Any) -> Optional[date]:
    """
    Parse a calendar date from the formats found in football-data files.

    Accepts ISO ``YYYY-MM-DD`` (anything after the date is ignored),
    ``DD/MM/YY``, ``DD/MM/YYYY`` and ``YYYY/MM/DD`` with ``/``, ``-`` or ``.``
    separators. Returns None when the value cannot be read as a date.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None

    iso = _ISO_DATE.match(text)
    if iso:
        year, month, day = (int(p) for p in iso.groups())
    else:
        parts = [p for p in re.split(r"[/.-]", text.split(" ")[0]) if p]
        if len(parts) < 3:
            return None
        first, second, third = parts[:3]
        if len(first) == 4:
            first, third = third, first
        try:
            day, month, year = int(first), int(second), int(third)
        except ValueError:
            return None
        if year < 100:
            year += 2000

    try:
        return date(year, month, day)
    except ValueError:
        return None


def _to_int(value: Any) -> Optional[int]:
    number = _to_float(value)
    if number is None or number != int(number):
        return None
    return int(number)


def _to_float(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = str(value).strip()
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def _to_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


@dataclass(frozen=True)
class MatchRecord:
    """One historical fixture result."""

    match_date: Optional[date]
    home_team: str
    away_team: str
    home_goals: Optional[int] = None
    away_goals: Optional[int] = None
    home_shots: Optional[int] = None
    away_shots: Optional[int] = None
    home_sot: Optional[int] = None
    away_sot: Optional[int] = None
    result: Optional[str] = None
    odds_home: Optional[float] = None
    odds_draw: Optional[float] = None
    odds_away: Optional[float] = None
    odds_over25: Optional[float] = None
    odds_under25: Optional[float] = None

    @property
    def result_label(self) -> Optional[str]:
        return RESULT_LABELS.get(self.result)

    @classmethod
    def from_dict(cls, row: Dict) -> "MatchRecord":
        """Build a record from a normalized ``league_matches`` JSON row."""
        result = _to_text(row.get("FTR"))
        if result is not None:
            result = result.upper()[:1]
            if result not in RESULT_LABELS:
                result = None
        return cls(
            match_date=parse_date(row.get("dateISO")),
            home_team=_to_text(row.get("HomeTeam")) or "",
            away_team=_to_text(row.get("AwayTeam")) or "",
            home_goals=_to_int(row.get("FTHG")),
            away_goals=_to_int(row.get("FTAG")),
            home_shots=_to_int(row.get("HS")),
            away_shots=_to_int(row.get("AS")),
            home_sot=_to_int(row.get("HST")),
            away_sot=_to_int(row.get("AST")),
            result=result,
            odds_home=_to_float(row.get("AvgH")),
            odds_draw=_to_float(row.get("AvgD")),
            odds_away=_to_float(row.get("AvgA")),
            odds_over25=_to_float(row.get("AvgOver25")),
            odds_under25=_to_float(row.get("AvgUnder25")),
        )


@dataclass(frozen=True)
class FixtureDescriptor:
    """The match to predict."""

    league: str
    home_team: str
    away_team: str
    fixture_date: Optional[date]

    @property
    def fixture_id(self) -> str:
        """Stable identifier, e.g. ``e0-2025-03-01-man-city-arsenal``."""
        date_iso = self.fixture_date.isoformat() if self.fixture_date else ""
        raw = f"{self.league}-{date_iso}-{self.home_team}-{self.away_team}"
        return re.sub(r"\s+", "-", raw).lower()

    @classmethod
    def from_dict(cls, row: Dict) -> "FixtureDescriptor":
        """Build a descriptor from a ``fixtures_index.json`` entry."""
        return cls(
            league=_to_text(row.get("league")) or "",
            home_team=_to_text(row.get("homeTeam")) or "",
            away_team=_to_text(row.get("awayTeam")) or "",
            fixture_date=parse_date(row.get("dateISO")),
        )
