"""
Featured game catalog and text search over it
The catalog is a static JSON file shipped with the app
"""
import json
import re
from pathlib import Path
from typing import Any, Dict, List, Optional

CATALOG_FILE = Path(__file__).parent / "data" / "games.json"

_catalog_cache: Optional[List[Dict[str, Any]]] = None


def load_catalog() -> List[Dict[str, Any]]:
    """Load the catalog from JSON (cached)."""
    global _catalog_cache
    if _catalog_cache is None:
        with open(CATALOG_FILE, "r", encoding="utf-8") as f:
            _catalog_cache = json.load(f)
    return _catalog_cache


def normalize_text(text: str) -> str:
    """
    Normalize text for search matching.
    - Lowercase
    - Strip punctuation (hyphens kept, e.g. "Counter-Strike")
    - Collapse whitespace
    """
    if not text:
        return ""

    normalized = text.lower().strip()
    normalized = re.sub(r"[^\w\s\-]", "", normalized)
    normalized = re.sub(r"\s+", " ", normalized)
    return normalized.strip()


def _matches(query: str, values: List[str]) -> bool:
    return any(query in normalize_text(v) for v in values if v)


def list_games(query: Optional[str] = None) -> List[Dict[str, Any]]:
    """All games, or those whose name or a genre contains the query."""
    games = load_catalog()
    q = normalize_text(query or "")
    if not q:
        return list(games)
    return [g for g in games if _matches(q, [g["name"], *g.get("genres", [])])]


def search_games(query: str) -> List[Dict[str, Any]]:
    """Games matching the query on name, developer, publisher, genres or tags."""
    q = normalize_text(query)
    if not q:
        return []
    return [
        g for g in load_catalog()
        if _matches(q, [
            g["name"],
            g.get("developer", ""),
            g.get("publisher", ""),
            *g.get("genres", []),
            *g.get("tags", []),
        ])
    ]


def get_game(app_id: str) -> Optional[Dict[str, Any]]:
    for game in load_catalog():
        if game["appId"] == str(app_id):
            return game
    return None
