"""
backend/nerdfootball/services/team_alias_normalizer.py

Purpose:
    Map every team spelling seen in feed and pick documents (full names,
    nicknames, historic and alternate abbreviations) to one canonical NFL
    abbreviation, e.g. "Arizona Cardinals" / "cardinals" / "ARZ" -> "ARI".

Dependencies:
    - re
    - unicodedata
"""

from __future__ import annotations

import re
import unicodedata

_PUNCT_RE = re.compile(r"[^a-z0-9\s]")
_SPACE_RE = re.compile(r"\s+")

# Canonical abbreviation -> full franchise name
NFL_TEAMS: dict[str, str] = {
    "ARI": "Arizona Cardinals",
    "ATL": "Atlanta Falcons",
    "BAL": "Baltimore Ravens",
    "BUF": "Buffalo Bills",
    "CAR": "Carolina Panthers",
    "CHI": "Chicago Bears",
    "CIN": "Cincinnati Bengals",
    "CLE": "Cleveland Browns",
    "DAL": "Dallas Cowboys",
    "DEN": "Denver Broncos",
    "DET": "Detroit Lions",
    "GB": "Green Bay Packers",
    "HOU": "Houston Texans",
    "IND": "Indianapolis Colts",
    "JAX": "Jacksonville Jaguars",
    "KC": "Kansas City Chiefs",
    "LAC": "Los Angeles Chargers",
    "LAR": "Los Angeles Rams",
    "LV": "Las Vegas Raiders",
    "MIA": "Miami Dolphins",
    "MIN": "Minnesota Vikings",
    "NE": "New England Patriots",
    "NO": "New Orleans Saints",
    "NYG": "New York Giants",
    "NYJ": "New York Jets",
    "PHI": "Philadelphia Eagles",
    "PIT": "Pittsburgh Steelers",
    "SEA": "Seattle Seahawks",
    "SF": "San Francisco 49ers",
    "TB": "Tampa Bay Buccaneers",
    "TEN": "Tennessee Titans",
    "WAS": "Washington Commanders",
}

# Alternate codes and spellings that show up in older documents.
# New York and Los Angeles city names are ambiguous and deliberately absent.
_EXTRA_ALIASES: dict[str, str] = {
    "ARZ": "ARI",
    "BLT": "BAL",
    "CLV": "CLE",
    "GNB": "GB",
    "HST": "HOU",
    "JAC": "JAX",
    "KAN": "KC",
    "KCC": "KC",
    "LA": "LAR",
    "STL": "LAR",
    "SD": "LAC",
    "OAK": "LV",
    "LVR": "LV",
    "NWE": "NE",
    "NOR": "NO",
    "SFO": "SF",
    "TAM": "TB",
    "WSH": "WAS",
    "Washington": "WAS",
    "Washington Football Team": "WAS",
    "Football Team": "WAS",
    "Niners": "SF",
    "Bucs": "TB",
    "Pats": "NE",
    "Jags": "JAX",
    "St. Louis Rams": "LAR",
    "San Diego Chargers": "LAC",
    "Oakland Raiders": "LV",
}


def normalize_team_alias(raw: str) -> str:
    """
    Normalize alias text into an ASCII-safe lookup key.

    Steps:
        1. lowercase + trim
        2. NFKD accent removal
        3. punctuation cleanup
        4. whitespace collapse
    """
    text = str(raw or "").strip().lower()
    if not text:
        return ""

    text = unicodedata.normalize("NFKD", text)
    text = text.encode("ascii", "ignore").decode("ascii")
    text = _PUNCT_RE.sub(" ", text)
    return _SPACE_RE.sub(" ", text).strip()


def _build_index() -> dict[str, str]:
    index: dict[str, str] = {}
    for code, full_name in NFL_TEAMS.items():
        index[normalize_team_alias(code)] = code
        index[normalize_team_alias(full_name)] = code
        # Nickname is the last word: "Cardinals", "49ers", "Commanders"
        index[normalize_team_alias(full_name.split(" ")[-1])] = code
    for alias, code in _EXTRA_ALIASES.items():
        index[normalize_team_alias(alias)] = code
    # "Tampa Bay", "Green Bay", "Kansas City", ... are unambiguous city forms
    for code, full_name in NFL_TEAMS.items():
        city = " ".join(full_name.split(" ")[:-1])
        key = normalize_team_alias(city)
        if key in ("new york", "los angeles"):
            continue
        index.setdefault(key, code)
    return index


_ALIAS_INDEX = _build_index()


def canonical_team(raw: object) -> str | None:
    """Return the canonical abbreviation for ``raw`` or None when unknown."""
    if not isinstance(raw, str):
        return None
    return _ALIAS_INDEX.get(normalize_team_alias(raw))
