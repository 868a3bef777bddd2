"""
data/league_store.py
Reads the normalized league data for ScoreLens and caches it per league.

Expected layout under the data directory:
    league_matches/<CODE>.json   list of normalized match rows
    fixtures_index.json          {"<CODE>": [fixture rows, ...], ...}

The store hands out immutable tuples, so a refresh (``replace`` or
``invalidate``) never changes a snapshot a caller is already using.
"""

import json
import logging
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

from config.settings import settings
from engine.match_filter import filter_matches
from engine.records import FixtureDescriptor, MatchRecord
from leagues.english import LEAGUE_BY_CODE, normalize_league_code

logger = logging.getLogger(__name__)

FIXTURES_INDEX_FILE = "fixtures_index.json"

WindowKey = Tuple[str, str, int]


class LeagueMatchStore:
    """League match snapshots and lookback windows, cached per league."""

    def __init__(self, data_dir: Optional[str] = None):
        self.data_dir = Path(data_dir or settings.LEAGUE_DATA_DIR)
        self._matches: Dict[str, Tuple[MatchRecord, ...]] = {}
        self._fixtures: Optional[Dict[str, Tuple[FixtureDescriptor, ...]]] = None
        self._windows: Dict[WindowKey, Tuple[MatchRecord, ...]] = {}

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _league_code(self, league: str) -> str:
        code = normalize_league_code(league)
        if code not in LEAGUE_BY_CODE:
            raise ValueError(f"Unsupported league code: {league}")
        return code

    def _read_json(self, path: Path):
        if not path.exists():
            logger.error("League data file not found: %s", path)
            raise FileNotFoundError(f"League data file not found: {path}")
        with path.open(encoding="utf-8") as handle:
            return json.load(handle)

    @staticmethod
    def _parse_matches(rows: Iterable[Dict], code: str) -> Tuple[MatchRecord, ...]:
        records: List[MatchRecord] = []
        skipped = 0
        for row in rows:
            if not isinstance(row, dict):
                skipped += 1
                continue
            record = MatchRecord.from_dict(row)
            if record.match_date is None or not record.home_team or not record.away_team:
                skipped += 1
                continue
            records.append(record)
        if skipped:
            logger.warning("Skipped %d malformed match rows for %s", skipped, code)
        return tuple(records)

    # ------------------------------------------------------------------
    # Public methods
    # ------------------------------------------------------------------

    def get_matches(self, league: str) -> Tuple[MatchRecord, ...]:
        """Return the league's match snapshot, reading it from disk on first use."""
        code = self._league_code(league)
        if code not in self._matches:
            rows = self._read_json(self.data_dir / "league_matches" / f"{code}.json")
            self._matches[code] = self._parse_matches(rows, code)
            logger.info("Loaded %d matches for %s", len(self._matches[code]), code)
        return self._matches[code]

    def get_fixtures(self, league: str) -> Tuple[FixtureDescriptor, ...]:
        """Return the league's fixtures sorted by date (undated fixtures last)."""
        code = self._league_code(league)
        if self._fixtures is None:
            index = self._read_json(self.data_dir / FIXTURES_INDEX_FILE)
            self._fixtures = {}
            for raw_code, rows in (index or {}).items():
                key = normalize_league_code(raw_code)
                if key not in LEAGUE_BY_CODE:
                    logger.warning("Ignoring fixtures for unknown league %s", raw_code)
                    continue
                fixtures = [
                    FixtureDescriptor.from_dict({**row, "league": key})
                    for row in rows
                    if isinstance(row, dict)
                ]
                fixtures.sort(key=lambda f: (f.fixture_date is None, f.fixture_date or ""))
                self._fixtures[key] = tuple(fixtures)
        return self._fixtures.get(code, ())

    def find_fixture(self, league: str, fixture_id: str) -> FixtureDescriptor:
        """Look up a fixture by its id; raises ValueError when it is unknown."""
        for fixture in self.get_fixtures(league):
            if fixture.fixture_id == fixture_id:
                return fixture
        raise ValueError(f"Unknown fixture '{fixture_id}' for league {league}")

    def get_window(self, fixture: FixtureDescriptor, window_days: int) -> Tuple[MatchRecord, ...]:
        """Filtered matches for (league, fixture, window), cached."""
        code = self._league_code(fixture.league)
        key: WindowKey = (code, fixture.fixture_id, window_days)
        if key not in self._windows:
            matches = self.get_matches(code)
            self._windows[key] = filter_matches(matches, fixture.fixture_date, window_days)
        return self._windows[key]

    def replace(self, league: str, matches: Iterable[MatchRecord]) -> None:
        """Swap in a fresh match snapshot for *league* and drop its cached windows."""
        code = self._league_code(league)
        self._matches[code] = tuple(matches)
        self._drop_windows(code)
        logger.info("Replaced match snapshot for %s (%d matches)", code, len(self._matches[code]))

    def invalidate(self, league: Optional[str] = None) -> None:
        """Forget cached data for one league, or everything when *league* is None."""
        if league is None:
            self._matches.clear()
            self._windows.clear()
            self._fixtures = None
            return
        code = self._league_code(league)
        self._matches.pop(code, None)
        self._drop_windows(code)

    def _drop_windows(self, code: str) -> None:
        for key in [k for k in self._windows if k[0] == code]:
            del self._windows[key]
