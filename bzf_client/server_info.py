"""
Decoded server snapshot for the BZFlag query client.

The dataclasses here are what query() hands back to callers: game
configuration, teams and players. They hold plain values only and own no
connection resources.
"""

from dataclasses import dataclass, field
from typing import Optional, List, Tuple


# Must match GameType order in bzflag include/global.h
GAME_STYLES: Tuple[str, ...] = ("FFA", "CTF", "OFFA", "Rabbit")

# Must match TeamColor order in bzflag include/global.h
TEAM_NAMES: Tuple[str, ...] = (
    "Rogue", "Red", "Green", "Blue", "Purple", "Observer", "Rabbit", "Hunter",
)

# Must match GameOptions in bzflag include/global.h
GAME_OPTION_MASKS: Tuple[Tuple[str, int], ...] = (
    ("flags", 0x0002),
    ("jumping", 0x0008),
    ("inertia", 0x0010),
    ("ricochet", 0x0020),
    ("shaking", 0x0040),
    ("antidote", 0x0080),
    ("handicap", 0x0100),
    ("no_team_kills", 0x0400),
)


@dataclass
class GameOptions:
    """Game option flags decoded from the 16-bit options bitmask."""
    flags: bool = False
    jumping: bool = False
    inertia: bool = False
    ricochet: bool = False
    shaking: bool = False
    antidote: bool = False
    handicap: bool = False
    no_team_kills: bool = False


@dataclass
class ShakeRule:
    """Bad flags are dropped after `wins` points or `timeout` deciseconds."""
    wins: int
    timeout: int


@dataclass
class GameConfig:
    """
    Server configuration from the MsgQueryGame reply.

    Times are in deciseconds. team_max_sizes holds the configured capacity
    for Rogue, Red, Green, Blue and Purple in that order; the observer slots
    are carried separately because they are reported outside the team
    records.
    """
    style: str
    options: GameOptions
    max_players: int
    max_shots: int
    max_player_score: int
    max_team_score: int
    time_limit: int
    elapsed_time: int
    shake: Optional[ShakeRule] = None
    team_max_sizes: Tuple[int, ...] = (0, 0, 0, 0, 0)
    observer_size: int = 0
    observer_max: int = 0


@dataclass
class Team:
    """
    One team on the server.

    wins and losses are None for the synthesized Observer entry, which is
    built from the game configuration rather than from a team record.
    """
    name: str
    players: int
    max_players: int
    wins: Optional[int] = None
    losses: Optional[int] = None

    @property
    def score(self) -> int:
        return (self.wins or 0) - (self.losses or 0)


@dataclass
class Player:
    team: str
    wins: int
    losses: int
    team_kills: int
    callsign: str
    motto: str

    @property
    def score(self) -> int:
        return self.wins - self.losses


@dataclass
class QueryResult:
    """Everything a single query learned about the server."""
    config: GameConfig
    teams: List[Team] = field(default_factory=list)
    players: List[Player] = field(default_factory=list)

    @property
    def style(self) -> str:
        return self.config.style

    @property
    def options(self) -> GameOptions:
        return self.config.options

    @property
    def shake(self) -> Optional[ShakeRule]:
        return self.config.shake


def decode_options(value: int) -> GameOptions:
    """
    Decode the game options bitmask.

    Every 16-bit value decodes; bits not listed in GAME_OPTION_MASKS are
    ignored.

    Args:
        value: Options bitmask from the game configuration record

    Returns:
        GameOptions with one boolean per known option
    """
    return GameOptions(**{name: (value & mask) != 0 for name, mask in GAME_OPTION_MASKS})


def lookup_game_style(index: int) -> str:
    """Map a wire game style index to its name."""
    if not 0 <= index < len(GAME_STYLES):
        raise ValueError(f"Unknown game style index {index}")
    return GAME_STYLES[index]


def lookup_team_name(index: int) -> str:
    """Map a wire team index to its name."""
    if not 0 <= index < len(TEAM_NAMES):
        raise ValueError(f"Unknown team index {index}")
    return TEAM_NAMES[index]
