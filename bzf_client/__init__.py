"""
Read-only query client for BZFlag game servers (protocol 0221).
"""

from .client import BZFQueryClient, query, query_sync
from .protocol import ProtocolMismatchError, DEFAULT_PORT
from .server_info import GameConfig, GameOptions, ShakeRule, Team, Player, QueryResult

__all__ = [
    "BZFQueryClient",
    "query",
    "query_sync",
    "ProtocolMismatchError",
    "DEFAULT_PORT",
    "GameConfig",
    "GameOptions",
    "ShakeRule",
    "Team",
    "Player",
    "QueryResult",
]
