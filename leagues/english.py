"""
leagues/english.py
Definitions for the four English divisions supported by ScoreLens.
"""

from typing import Dict, List, Optional

# League definitions: football-data.co.uk division code and display name
ENGLISH_LEAGUES: List[Dict] = [
    {"code": "E0", "name": "Premier League"},
    {"code": "E1", "name": "Championship"},
    {"code": "E2", "name": "League 1"},
    {"code": "E3", "name": "League 2"},
]

# Convenience lookup by division code
LEAGUE_BY_CODE: Dict[str, Dict] = {league["code"]: league for league in ENGLISH_LEAGUES}

# Alternative spellings seen in fixture feeds
LEAGUE_CODE_ALIASES: Dict[str, str] = {
    "ENG1": "E0",
    "ENG2": "E1",
    "ENG3": "E2",
    "ENG4": "E3",
    "EPL": "E0",
    "CHAMP": "E1",
    "LEAGUE 1": "E2",
    "LEAGUE1": "E2",
    "LEAGUE 2": "E3",
    "LEAGUE2": "E3",
    "PREMIER LEAGUE": "E0",
    "CHAMPIONSHIP": "E1",
}


def normalize_league_code(value: Optional[str]) -> Optional[str]:
    """Upper-case and de-alias a league code; returns None for blank input."""
    if value is None:
        return None
    normalized = str(value).strip().upper()
    if not normalized:
        return None
    return LEAGUE_CODE_ALIASES.get(normalized, normalized)


def resolve_league(query: str) -> Dict:
    """
    Resolve a league from its code, an alias or its display name.

    Raises:
        ValueError: if nothing matches.
    """
    code = normalize_league_code(query)
    if code in LEAGUE_BY_CODE:
        return LEAGUE_BY_CODE[code]

    q_lower = (query or "").strip().lower()
    for league in ENGLISH_LEAGUES:
        if q_lower and q_lower == league["name"].lower():
            return league

    available = ", ".join(f"{lg['code']} ({lg['name']})" for lg in ENGLISH_LEAGUES)
    raise ValueError(f"Unknown league '{query}'. Available: {available}")
