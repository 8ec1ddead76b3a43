"""
Data models for the Dota live match view.

Raw feed records from ``GetTopLiveGame`` are loosely typed and fields
move between the top level and the per-side ``scoreboard`` blocks, so
``LiveMatch.from_raw`` reads both and normalizes into dataclasses.
"""
from dataclasses import dataclass, field
from typing import Optional, List, Dict, Any
from enum import Enum

from app.errors import MalformedMatchError
from app.utils.helpers import count_bits, optional_int, safe_int, safe_str

TOWERS_PER_SIDE = 11
BARRACKS_PER_SIDE = 6


class SeriesType(Enum):
    """Upstream series codes and their display labels."""
    BEST_OF_ONE = 0
    BEST_OF_THREE = 1
    BEST_OF_FIVE = 2

    @property
    def label(self) -> str:
        return {
            SeriesType.BEST_OF_ONE: "Bo1",
            SeriesType.BEST_OF_THREE: "Bo3",
            SeriesType.BEST_OF_FIVE: "Bo5",
        }[self]


def series_label(code: Any) -> str:
    """Map an upstream series code to "Bo1"/"Bo3"/"Bo5", anything else to "Live"."""
    if isinstance(code, bool) or not isinstance(code, int):
        return "Live"
    try:
        return SeriesType(code).label
    except ValueError:
        return "Live"


@dataclass
class LivePlayer:
    """A player in a live match."""
    account_id: int
    hero_id: int
    team: int  # 0 = radiant, 1 = dire
    name: Optional[str] = None
    kills: int = 0
    deaths: int = 0
    assists: int = 0
    gpm: int = 0
    xpm: int = 0
    net_worth: int = 0
    level: int = 0

    @classmethod
    def from_raw(cls, raw: Dict[str, Any]) -> "LivePlayer":
        team = raw.get("team")
        if team is None and raw.get("player_slot") is not None:
            # Slots 128+ belong to dire
            team = 1 if safe_int(raw.get("player_slot")) >= 128 else 0
        return cls(
            account_id=safe_int(raw.get("account_id")),
            hero_id=safe_int(raw.get("hero_id")),
            team=safe_int(team),
            name=raw.get("name") or None,
            kills=safe_int(raw.get("kills")),
            deaths=safe_int(raw.get("deaths") or raw.get("death")),
            assists=safe_int(raw.get("assists")),
            gpm=safe_int(raw.get("gold_per_min")),
            xpm=safe_int(raw.get("xp_per_min")),
            net_worth=safe_int(raw.get("net_worth")),
            level=safe_int(raw.get("level")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "accountId": self.account_id,
            "heroId": self.hero_id,
            "team": self.team,
            "name": self.name,
            "kills": self.kills,
            "deaths": self.deaths,
            "assists": self.assists,
            "gpm": self.gpm,
            "xpm": self.xpm,
            "netWorth": self.net_worth,
            "level": self.level,
        }


@dataclass
class LiveMatch:
    """An in-progress match as reported by the live feed."""
    match_id: int
    radiant_team_id: Optional[int]
    dire_team_id: Optional[int]
    radiant_name: Optional[str]
    dire_name: Optional[str]
    radiant_logo: Optional[str]
    dire_logo: Optional[str]
    radiant_score: int
    dire_score: int
    spectators: int
    average_mmr: Optional[int]
    duration_seconds: int
    roshan_respawn_timer: Optional[int]
    league_id: Optional[int]
    series_type: Optional[int]
    game_number: Optional[int]
    start_time: Optional[int]
    radiant_towers: Optional[int] = None
    dire_towers: Optional[int] = None
    radiant_barracks: Optional[int] = None
    dire_barracks: Optional[int] = None
    players: List[LivePlayer] = field(default_factory=list)

    @classmethod
    def from_raw(cls, raw: Any) -> "LiveMatch":
        """
        Build a match from a raw ``game_list`` entry.

        Raises:
            MalformedMatchError: The record is not a mapping or has no usable match id
        """
        if not isinstance(raw, dict):
            raise MalformedMatchError(f"Expected a match object, got {type(raw).__name__}")
        match_id = optional_int(raw.get("match_id"))
        if not match_id:
            raise MalformedMatchError(f"Match record without match_id: {sorted(raw)[:8]}")

        scoreboard = raw.get("scoreboard") or {}
        if not isinstance(scoreboard, dict):
            scoreboard = {}
        radiant_board = scoreboard.get("radiant")
        if not isinstance(radiant_board, dict):
            radiant_board = {}
        dire_board = scoreboard.get("dire")
        if not isinstance(dire_board, dict):
            dire_board = {}

        def pick(key: str, board_key: Optional[str] = None) -> Any:
            value = raw.get(key)
            if value is None:
                value = scoreboard.get(board_key or key)
            return value

        def side_state(board: Dict[str, Any], side: str, state: str) -> Optional[int]:
            value = board.get(state)
            if value is None:
                value = raw.get(f"{side}_{state}")
            return optional_int(value)

        raw_players = raw.get("players")
        if not isinstance(raw_players, list):
            raw_players = []
        players = []
        for p in raw_players:
            if isinstance(p, dict):
                players.append(LivePlayer.from_raw(p))

        return cls(
            match_id=match_id,
            radiant_team_id=optional_int(raw.get("team_id_radiant")) or None,
            dire_team_id=optional_int(raw.get("team_id_dire")) or None,
            radiant_name=raw.get("team_name_radiant") or None,
            dire_name=raw.get("team_name_dire") or None,
            radiant_logo=_logo_url(raw.get("team_logo_radiant")),
            dire_logo=_logo_url(raw.get("team_logo_dire")),
            radiant_score=safe_int(raw.get("radiant_score", radiant_board.get("score"))),
            dire_score=safe_int(raw.get("dire_score", dire_board.get("score"))),
            spectators=safe_int(raw.get("spectators")),
            average_mmr=optional_int(raw.get("average_mmr")) or None,
            duration_seconds=max(safe_int(pick("game_time", "duration")), 0),
            roshan_respawn_timer=optional_int(pick("roshan_respawn_timer")),
            league_id=optional_int(raw.get("league_id")) or None,
            series_type=optional_int(raw.get("series_type")),
            game_number=optional_int(raw.get("game_number")),
            start_time=optional_int(raw.get("activate_time") or raw.get("start_time")),
            radiant_towers=count_bits(side_state(radiant_board, "radiant", "tower_state"), TOWERS_PER_SIDE),
            dire_towers=count_bits(side_state(dire_board, "dire", "tower_state"), TOWERS_PER_SIDE),
            radiant_barracks=count_bits(side_state(radiant_board, "radiant", "barracks_state"), BARRACKS_PER_SIDE),
            dire_barracks=count_bits(side_state(dire_board, "dire", "barracks_state"), BARRACKS_PER_SIDE),
            players=players,
        )


def _logo_url(value: Any) -> Optional[str]:
    """Feed logos are sometimes UGC ids rather than URLs; keep only URLs."""
    text = safe_str(value)
    return text if text.startswith("http") else None


@dataclass
class LeagueInfo:
    league_id: int
    name: str
    tier: Optional[str] = None

    @classmethod
    def from_raw(cls, raw: Dict[str, Any]) -> Optional["LeagueInfo"]:
        league_id = optional_int(raw.get("leagueid", raw.get("league_id")))
        if not league_id:
            return None
        tier = raw.get("tier")
        return cls(
            league_id=league_id,
            name=safe_str(raw.get("name")) or f"League {league_id}",
            tier=safe_str(tier) if tier is not None else None,
        )


@dataclass
class TeamInfo:
    team_id: int
    name: str
    tag: Optional[str] = None
    logo_url: Optional[str] = None

    @classmethod
    def from_raw(cls, team_id: int, raw: Dict[str, Any]) -> "TeamInfo":
        return cls(
            team_id=team_id,
            name=safe_str(raw.get("name")),
            tag=raw.get("tag") or None,
            logo_url=raw.get("logo_url") or raw.get("logo") or None,
        )


@dataclass
class TeamSide:
    """One side of a hydrated match, ready for display."""
    team_id: Optional[int]
    name: str
    logo_url: Optional[str]
    score: int
    towers: Optional[int] = None
    barracks: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "teamId": self.team_id,
            "name": self.name,
            "logoUrl": self.logo_url,
            "score": self.score,
            "towers": self.towers,
            "barracks": self.barracks,
        }


@dataclass
class HydratedMatch:
    """A live match with league and team names resolved for display."""
    match: LiveMatch
    radiant: TeamSide
    dire: TeamSide
    league_name: str
    league_tier: Optional[str]
    series_label: str
    objective_summary: str

    def to_dict(self) -> Dict[str, Any]:
        m = self.match
        return {
            "matchId": m.match_id,
            "radiantTeamId": m.radiant_team_id,
            "direTeamId": m.dire_team_id,
            "radiantScore": m.radiant_score,
            "direScore": m.dire_score,
            "spectators": m.spectators,
            "averageMmr": m.average_mmr,
            "durationSeconds": m.duration_seconds,
            "roshanRespawnTimer": m.roshan_respawn_timer,
            "leagueId": m.league_id,
            "seriesType": m.series_type,
            "gameNumber": m.game_number,
            "startTime": m.start_time,
            "radiant": self.radiant.to_dict(),
            "dire": self.dire.to_dict(),
            "leagueName": self.league_name,
            "leagueTier": self.league_tier,
            "seriesLabel": self.series_label,
            "objectiveSummary": self.objective_summary,
            "players": [p.to_dict() for p in m.players],
        }
