"""
Dota live match module: feed models, hydration and the provider used by
the API layer.
"""
from .models import (
    HydratedMatch,
    LeagueInfo,
    LiveMatch,
    LivePlayer,
    SeriesType,
    TeamInfo,
    TeamSide,
    series_label,
)
from .hydrator import LiveMatchHydrator, build_objective_summary
from .provider import LiveMatchProvider, get_live_match_provider

__all__ = [
    # Models
    "HydratedMatch",
    "LeagueInfo",
    "LiveMatch",
    "LivePlayer",
    "SeriesType",
    "TeamInfo",
    "TeamSide",
    "series_label",
    # Hydration
    "LiveMatchHydrator",
    "build_objective_summary",
    # Provider
    "LiveMatchProvider",
    "get_live_match_provider",
]
