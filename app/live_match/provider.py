"""
Live match provider: fetches the featured Dota feed and hydrates it.
"""
from typing import List, Optional
import logging

from app.cache import DataCategory, MetadataCache
from app.errors import NotFoundError, UpstreamError
from app.steam_client import SteamClient, get_steam_client
from app.utils.helpers import optional_int
from config.settings import settings

from .hydrator import LiveMatchHydrator
from .models import HydratedMatch

logger = logging.getLogger("live_match.provider")


class LiveMatchProvider:
    """
    Featured live matches, backed by the Steam client and a hydrator
    whose league and team caches persist for the life of the provider.
    """

    def __init__(
        self,
        client: Optional[SteamClient] = None,
        hydrator: Optional[LiveMatchHydrator] = None,
    ):
        self._client = client or get_steam_client()
        self.hydrator = hydrator or LiveMatchHydrator(
            self._client,
            leagues=MetadataCache(
                DataCategory.LEAGUE_METADATA,
                freshness_seconds=settings.metadata_freshness_seconds,
                max_entries=settings.metadata_cache_max_entries,
            ),
            teams=MetadataCache(
                DataCategory.TEAM_METADATA,
                freshness_seconds=settings.metadata_freshness_seconds,
                max_entries=settings.metadata_cache_max_entries,
            ),
            max_workers=settings.team_fetch_workers,
        )

    def get_featured_matches(self) -> List[HydratedMatch]:
        """
        Fetch and hydrate the featured live matches.

        An upstream 404 means nothing is live and yields an empty list.

        Raises:
            UpstreamError: The feed failed for any other reason
        """
        try:
            raw_matches = self._client.get_top_live_games()
        except UpstreamError as e:
            if e.upstream_status == 404:
                logger.info("Live feed returned 404, no live matches")
                return []
            raise

        logger.debug(f"Live feed returned {len(raw_matches)} matches")
        return self.hydrator.hydrate(raw_matches)

    def get_match(self, match_id: int) -> HydratedMatch:
        """
        Find one match in the featured feed and hydrate only that record.

        Raises:
            NotFoundError: The match is not currently in the feed
            UpstreamError: The feed failed for a reason other than a 404
        """
        try:
            raw_matches = self._client.get_top_live_games()
        except UpstreamError as e:
            if e.upstream_status != 404:
                raise
            raw_matches = []

        for raw in raw_matches:
            if isinstance(raw, dict) and optional_int(raw.get("match_id")) == match_id:
                hydrated = self.hydrator.hydrate([raw])
                if hydrated:
                    return hydrated[0]
                break

        raise NotFoundError(f"Live match {match_id} not found")

    def get_cache_stats(self) -> dict:
        return {
            "leagues": self.hydrator.leagues.get_stats(),
            "teams": self.hydrator.teams.get_stats(),
        }


# Singleton factory
_provider: Optional[LiveMatchProvider] = None


def get_live_match_provider() -> LiveMatchProvider:
    """Get the shared live match provider, creating it on first use."""
    global _provider
    if _provider is None:
        _provider = LiveMatchProvider()
    return _provider
