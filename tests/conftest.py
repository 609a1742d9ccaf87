"""
Shared pytest fixtures for BZFlag query client tests.

This module provides reusable fixtures for:
- Mock network streams (StreamReader/StreamWriter)
- Wire payload builders for every record the client decodes
- Utility helpers (frame_builder)
"""

import asyncio
import struct
from typing import Callable
from unittest.mock import AsyncMock, MagicMock

import pytest


# ============================================================================
# Mock Network Stream Fixtures
# ============================================================================


@pytest.fixture
def mock_stream_reader():
    """
    Mock asyncio.StreamReader for testing frame reading.

    Usage:
        async def test_read(mock_stream_reader):
            mock_stream_reader.readexactly = AsyncMock(side_effect=[b'\\x00\\x00qg'])
            code, payload, raw = await read_frame(mock_stream_reader)
    """
    reader = AsyncMock(spec=asyncio.StreamReader)
    reader.readexactly = AsyncMock()
    reader.read = AsyncMock()
    reader.at_eof = MagicMock(return_value=False)
    return reader


@pytest.fixture
def mock_stream_writer():
    """
    Mock asyncio.StreamWriter for testing frame writing.

    Usage:
        async def test_write(mock_stream_writer):
            await client.send_command(MSG_QUERY_GAME)
            mock_stream_writer.write.assert_called_once()
            mock_stream_writer.drain.assert_called_once()
    """
    writer = AsyncMock(spec=asyncio.StreamWriter)
    writer.write = MagicMock()
    writer.drain = AsyncMock()
    writer.close = MagicMock()
    writer.wait_closed = AsyncMock()
    writer.is_closing = MagicMock(return_value=False)
    return writer


@pytest.fixture
def mock_stream_pair(mock_stream_reader, mock_stream_writer):
    """
    Convenience fixture providing both reader and writer.
    """
    return (mock_stream_reader, mock_stream_writer)


# ============================================================================
# Sample Record Builders
# ============================================================================

# Wire order of the MsgQueryGame reply
GAME_CONFIG_FIELDS = [
    'style', 'options', 'max_players', 'max_shots',
    'legacy_rogue_size', 'legacy_red_size', 'legacy_green_size',
    'legacy_blue_size', 'legacy_purple_size',
    'observer_size',
    'rogue_max', 'red_max', 'green_max', 'blue_max', 'purple_max',
    'observer_max',
    'shake_wins', 'shake_timeout',
    'max_player_score', 'max_team_score',
    'max_time', 'elapsed_time',
]

DEFAULT_GAME_CONFIG = {
    'style': 1,               # CTF
    'options': 0x04C2,        # flags | jumping | shaking | noTeamKills
    'max_players': 32,
    'max_shots': 3,
    'legacy_rogue_size': 7,
    'legacy_red_size': 7,
    'legacy_green_size': 7,
    'legacy_blue_size': 7,
    'legacy_purple_size': 7,
    'observer_size': 2,
    'rogue_max': 0,
    'red_max': 5,
    'green_max': 0,
    'blue_max': 5,
    'purple_max': 0,
    'observer_max': 10,
    'shake_wins': 1,
    'shake_timeout': 150,
    'max_player_score': 100,
    'max_team_score': 250,
    'max_time': 18000,
    'elapsed_time': 600,
}


@pytest.fixture
def game_config_builder() -> Callable[..., bytes]:
    """
    Build a 44-byte MsgQueryGame reply payload.

    Usage:
        payload = game_config_builder(style=0, options=0)
    """
    def build(**overrides) -> bytes:
        values = dict(DEFAULT_GAME_CONFIG, **overrides)
        return struct.pack('>22H', *[values[name] for name in GAME_CONFIG_FIELDS])

    return build


@pytest.fixture
def player_count_builder() -> Callable[[int], bytes]:
    """Build a 4-byte MsgQueryPlayers reply payload."""
    def build(num_players: int, num_teams: int = 5) -> bytes:
        return struct.pack('>2H', num_teams, num_players)

    return build


@pytest.fixture
def team_update_builder() -> Callable[..., bytes]:
    """
    Build a MsgTeamUpdate payload from (team, size, wins, losses) tuples.
    """
    def build(*entries) -> bytes:
        body = b''.join(struct.pack('>4H', *entry) for entry in entries)
        return struct.pack('B', len(entries)) + body

    return build


@pytest.fixture
def player_builder() -> Callable[..., bytes]:
    """
    Build a 171-byte MsgAddPlayer payload.

    Usage:
        payload = player_builder(callsign="Alice", team=1, wins=4)
    """
    def build(callsign: str = "Alice", motto: str = "", team: int = 1, wins: int = 0,
              losses: int = 0, team_kills: int = 0, player_id: int = 0, player_type: int = 0) -> bytes:
        return struct.pack(
            '>b5H32s128s',
            player_id, player_type, team, wins, losses, team_kills,
            callsign.encode('utf-8'), motto.encode('utf-8'),
        )

    return build


# ============================================================================
# Utility Helper Fixtures
# ============================================================================


@pytest.fixture
def frame_builder() -> Callable[[bytes, bytes], bytes]:
    """
    Helper function to build raw frame bytes for testing.

    Returns a function: build_frame(code: bytes, payload: bytes) -> bytes

    Usage:
        def test_decode(frame_builder):
            frame = frame_builder(b'qg', payload)
    """
    def build_frame(code: bytes, payload: bytes = b'') -> bytes:
        return struct.pack('>H', len(payload)) + code + payload

    return build_frame


# ============================================================================
# Async Event Loop Configuration
# ============================================================================

# Note: pytest-asyncio with asyncio_mode="auto" handles event loop creation
# automatically. No need for manual event_loop fixture.
