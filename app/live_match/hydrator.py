"""
Live match hydration: resolves league and team names for the live feed.

Leagues and teams live in two ``MetadataCache`` instances owned by the
caller. Only ids that are missing or older than the freshness window are
refreshed. The league endpoint returns the whole catalog in one call; the
team endpoint takes one id per call, so team refreshes fan out over a
bounded thread pool alongside the league refresh.

Auxiliary lookups never fail a hydrate call: a league or team that could
not be resolved degrades to a fallback label.
"""
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Iterable, List, Optional, Sequence
import logging

from app.cache import DataCategory, MetadataCache
from app.errors import MalformedMatchError
from .models import (
    HydratedMatch,
    LeagueInfo,
    LiveMatch,
    TeamInfo,
    TeamSide,
    series_label,
)

logger = logging.getLogger("live_match.hydrator")


def format_clock(seconds: int) -> str:
    """Format seconds as M:SS."""
    minutes, secs = divmod(max(seconds, 0), 60)
    return f"{minutes}:{secs:02d}"


def build_objective_summary(match: LiveMatch) -> str:
    """
    Describe tower, barracks and Roshan state in one line,
    e.g. "Towers 7-9 · Barracks 6-4 · Roshan in 3:20".
    """
    parts = []
    if match.radiant_towers is not None and match.dire_towers is not None:
        parts.append(f"Towers {match.radiant_towers}-{match.dire_towers}")
    if match.radiant_barracks is not None and match.dire_barracks is not None:
        parts.append(f"Barracks {match.radiant_barracks}-{match.dire_barracks}")
    if match.roshan_respawn_timer is not None:
        if match.roshan_respawn_timer > 0:
            parts.append(f"Roshan in {format_clock(match.roshan_respawn_timer)}")
        else:
            parts.append("Roshan up")
    return " · ".join(parts) if parts else "No objective data"


class LiveMatchHydrator:
    """Turns raw live feed records into display-ready matches."""

    def __init__(
        self,
        client: Any,
        leagues: Optional[MetadataCache] = None,
        teams: Optional[MetadataCache] = None,
        max_workers: int = 8,
    ):
        """
        Args:
            client: Object with ``get_league_listing()`` and ``get_team_info(team_id)``
            leagues: League cache (a fresh unbounded one if omitted)
            teams: Team cache (a fresh unbounded one if omitted)
            max_workers: Ceiling on concurrent upstream lookups
        """
        self._client = client
        self.leagues = leagues if leagues is not None else MetadataCache(DataCategory.LEAGUE_METADATA)
        self.teams = teams if teams is not None else MetadataCache(DataCategory.TEAM_METADATA)
        self._max_workers = max(1, max_workers)

    def hydrate(self, raw_matches: Sequence[Any]) -> List[HydratedMatch]:
        """
        Hydrate raw feed records, preserving their order.

        Malformed records are skipped with a warning; every other record
        yields exactly one HydratedMatch.
        """
        matches: List[LiveMatch] = []
        for index, raw in enumerate(raw_matches or []):
            try:
                matches.append(LiveMatch.from_raw(raw))
            except (MalformedMatchError, TypeError, AttributeError, ValueError) as e:
                logger.warning(f"Skipping live match #{index}: {e}")

        if not matches:
            return []

        league_ids = [m.league_id for m in matches if m.league_id]
        team_ids = []
        for m in matches:
            team_ids.extend(t for t in (m.radiant_team_id, m.dire_team_id) if t)

        self._refresh(league_ids, team_ids)
        return [self._merge(m) for m in matches]

    def _refresh(self, league_ids: Iterable[int], team_ids: Iterable[int]) -> None:
        _, missing_leagues = self.leagues.partition(league_ids)
        _, missing_teams = self.teams.partition(team_ids)

        jobs = len(missing_teams) + (1 if missing_leagues else 0)
        if jobs == 0:
            logger.debug("All league and team metadata fresh")
            return

        logger.info(
            f"Refreshing metadata: {len(missing_leagues)} leagues, {len(missing_teams)} teams"
        )
        with ThreadPoolExecutor(
            max_workers=min(self._max_workers, jobs),
            thread_name_prefix="hydrate",
        ) as executor:
            futures = []
            if missing_leagues:
                futures.append(executor.submit(self._refresh_leagues, missing_leagues))
            for team_id in missing_teams:
                futures.append(executor.submit(self._refresh_team, team_id))

        for future in futures:
            try:
                future.result()
            except Exception as e:
                logger.warning(f"Metadata refresh job failed: {e}")

    def _refresh_leagues(self, wanted: List[int]) -> None:
        """Reload the league catalog and store every entry it returns."""
        try:
            catalog = self._client.get_league_listing()
        except Exception as e:
            logger.warning(f"League catalog refresh failed, keeping cached names: {e}")
            return
        if not isinstance(catalog, list):
            logger.warning(f"League catalog is not a list ({type(catalog).__name__}), keeping cached names")
            return

        stored = 0
        for raw in catalog:
            try:
                league = LeagueInfo.from_raw(raw) if isinstance(raw, dict) else None
            except (TypeError, ValueError) as e:
                logger.warning(f"Skipping league catalog entry {raw!r}: {e}")
                continue
            if league is None:
                continue
            self.leagues.put(league.league_id, league)
            stored += 1

        unresolved = [i for i in wanted if self.leagues.lookup(i) is None]
        if unresolved:
            logger.info(f"Leagues not in catalog: {unresolved}")
        logger.debug(f"League catalog refreshed ({stored} entries)")

    def _refresh_team(self, team_id: int) -> None:
        try:
            raw = self._client.get_team_info(team_id)
        except Exception as e:
            logger.warning(f"Team {team_id} lookup failed: {e}")
            return
        if not raw:
            logger.info(f"Team {team_id} not found upstream")
            return
        if not isinstance(raw, dict):
            logger.warning(f"Team {team_id} lookup returned {type(raw).__name__}, ignoring")
            return
        self.teams.put(team_id, TeamInfo.from_raw(team_id, raw))

    def _resolve_side(
        self,
        team_id: Optional[int],
        raw_name: Optional[str],
        raw_logo: Optional[str],
        default_name: str,
        score: int,
        towers: Optional[int],
        barracks: Optional[int],
    ) -> TeamSide:
        team: Optional[TeamInfo] = self.teams.lookup(team_id) if team_id else None
        return TeamSide(
            team_id=team_id,
            name=(team.name if team and team.name else None) or raw_name or default_name,
            logo_url=(team.logo_url if team else None) or raw_logo,
            score=score,
            towers=towers,
            barracks=barracks,
        )

    def _merge(self, match: LiveMatch) -> HydratedMatch:
        league: Optional[LeagueInfo] = (
            self.leagues.lookup(match.league_id) if match.league_id else None
        )
        if league is not None:
            league_name = league.name
        elif match.league_id:
            league_name = f"League {match.league_id}"
        else:
            league_name = "Unknown League"

        return HydratedMatch(
            match=match,
            radiant=self._resolve_side(
                match.radiant_team_id,
                match.radiant_name,
                match.radiant_logo,
                "Radiant",
                match.radiant_score,
                match.radiant_towers,
                match.radiant_barracks,
            ),
            dire=self._resolve_side(
                match.dire_team_id,
                match.dire_name,
                match.dire_logo,
                "Dire",
                match.dire_score,
                match.dire_towers,
                match.dire_barracks,
            ),
            league_name=league_name,
            league_tier=league.tier if league else None,
            series_label=series_label(match.series_type),
            objective_summary=build_objective_summary(match),
        )
