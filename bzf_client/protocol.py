import asyncio
import logging
import struct
from typing import Tuple, Any, Dict, List, Optional

from .packet_specs import (
    RecordSpec,
    GAME_CONFIG_SPEC,
    PLAYER_COUNT_SPEC,
    TEAM_ENTRY_SPEC,
    PLAYER_SPEC,
)
from .server_info import (
    GameConfig,
    ShakeRule,
    Team,
    Player,
    decode_options,
    lookup_game_style,
    lookup_team_name,
)

logger = logging.getLogger(__name__)

# Message codes (from bzflag include/Protocol.h)
MSG_QUERY_GAME = 0x7167     # 'qg'
MSG_QUERY_PLAYERS = 0x7170  # 'qp'
MSG_TEAM_UPDATE = 0x7475    # 'tu'
MSG_ADD_PLAYER = 0x6170     # 'ap'

# Version constants
BZFS_MAGIC = b"BZFS"
PROTOCOL_VERSION = b"0221"
CLIENT_GREETING = b"BZFLAG\r\n\r\n"

# Connection defaults
DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 5154
RESPONSE_TIMEOUT = 5.0  # seconds, per exchange
SLOT_BYTE_TIMEOUT = 0.5  # seconds to wait for the optional slot byte

# Frame header: u16 payload length + 2-byte code
FRAME_HEADER_SIZE = 4

# The five teams that carry a configured maximum in the game config record
PLAYABLE_TEAM_COUNT = 5


class ProtocolMismatchError(ValueError):
    """The peer is not a BZFlag server speaking the supported protocol."""


async def _recv_exact(reader: asyncio.StreamReader, num_bytes: int) -> bytes:
    """Read exactly num_bytes from stream, handling partial reads."""
    try:
        data = await reader.readexactly(num_bytes)
        return data
    except asyncio.IncompleteReadError:
        raise ConnectionError("Socket closed while reading data")


def command_code_bytes(code: int) -> bytes:
    """Render a 16-bit message code as the 2 bytes that appear on the wire."""
    return struct.pack('>H', code)


def encode_command(code: int) -> bytes:
    """
    Encode a command frame with no payload.

    Frame structure:
    - UINT16 payload length (always 0)
    - UINT16 message code
    """
    return struct.pack('>HH', 0, code)


async def read_frame(reader: asyncio.StreamReader) -> Tuple[bytes, bytes, bytes]:
    """
    Read one frame from the stream.

    Args:
        reader: The stream reader

    Returns:
        Tuple of (code_bytes, payload_data, raw_frame_bytes)
        where raw_frame_bytes includes the 4-byte header
    """
    header = await _recv_exact(reader, FRAME_HEADER_SIZE)
    payload_length, code = struct.unpack('>H2s', header)

    payload = await _recv_exact(reader, payload_length) if payload_length > 0 else b''

    logger.debug("Read frame %r with %d byte payload", code, payload_length)
    return code, payload, header + payload


async def perform_handshake(reader: asyncio.StreamReader,
                            writer: asyncio.StreamWriter,
                            timeout: float = RESPONSE_TIMEOUT) -> Optional[int]:
    """
    Greet the server and verify it speaks the supported protocol.

    The server replies with 4 magic bytes and 4 protocol version bytes.
    bzfs follows them with one byte holding the player slot it assigned to
    this connection; servers that leave it out are accepted too.

    Args:
        reader: The stream reader
        writer: The stream writer
        timeout: Seconds to wait for the reply

    Returns:
        The player slot assigned by the server, or None if it sent none

    Raises:
        ProtocolMismatchError: If the reply has the wrong magic or version
        ConnectionError: If no reply arrives in time or the socket closes
    """
    writer.write(CLIENT_GREETING)
    await writer.drain()

    reply_size = len(BZFS_MAGIC) + len(PROTOCOL_VERSION)
    try:
        reply = await asyncio.wait_for(_recv_exact(reader, reply_size), timeout)
    except asyncio.TimeoutError:
        raise ConnectionError("no handshake reply from server") from None

    magic, version = reply[:4], reply[4:8]
    if magic != BZFS_MAGIC:
        raise ProtocolMismatchError("not a bzflag server")
    if version != PROTOCOL_VERSION:
        raise ProtocolMismatchError(
            f"incompatible version: server speaks {version!r}, "
            f"expected {PROTOCOL_VERSION!r}"
        )

    # Nothing else is sent until the first command, so a missing slot byte
    # shows up as silence rather than as the start of a frame
    try:
        slot_bytes = await asyncio.wait_for(_recv_exact(reader, 1),
                                            min(timeout, SLOT_BYTE_TIMEOUT))
    except asyncio.TimeoutError:
        logger.debug("No player slot after handshake reply, continuing without one")
        logger.info("Handshake accepted, protocol %s", version.decode('ascii'))
        return None

    slot, _ = decode_uint8(slot_bytes, 0)
    logger.info("Handshake accepted, protocol %s, slot %d", version.decode('ascii'), slot)
    return slot


# Data type decoding functions

def _check_available(data: bytes, offset: int, size: int) -> None:
    if offset + size > len(data):
        raise ValueError(
            f"Need {size} bytes at offset {offset}, "
            f"only {max(len(data) - offset, 0)} available"
        )


def decode_uint8(data: bytes, offset: int) -> Tuple[int, int]:
    """
    Decode UINT8 (unsigned 8-bit integer).

    Returns:
        Tuple of (int_value, new_offset)
    """
    _check_available(data, offset, 1)
    value = data[offset]
    return value, offset + 1


def decode_sint8(data: bytes, offset: int) -> Tuple[int, int]:
    """
    Decode SINT8 (signed 8-bit integer).

    Returns:
        Tuple of (int_value, new_offset)
    """
    _check_available(data, offset, 1)
    value = struct.unpack('b', data[offset:offset+1])[0]
    return value, offset + 1


def decode_uint16(data: bytes, offset: int) -> Tuple[int, int]:
    """
    Decode UINT16 (big-endian unsigned 16-bit).

    Returns:
        Tuple of (int_value, new_offset)
    """
    _check_available(data, offset, 2)
    value = struct.unpack('>H', data[offset:offset+2])[0]
    return value, offset + 2


def decode_fixed_string(data: bytes, offset: int, size: int) -> Tuple[str, int]:
    """
    Decode a fixed-size STRING from bytes.

    BZFlag pads callsigns and mottos with NUL bytes up to the field width.
    Every NUL byte in the field is removed, not just the trailing run.

    Args:
        data: Byte array to read from
        offset: Starting position
        size: Fixed size of the string field in bytes

    Returns:
        Tuple of (string_value, new_offset)
    """
    _check_available(data, offset, size)
    chunk = data[offset:offset + size].replace(b'\x00', b'')
    return chunk.decode('utf-8', errors='replace'), offset + size


def _decode_field(data: bytes, offset: int, type_name: str, size: int = 0) -> Tuple[Any, int]:
    """Decode a single field by wire type name."""
    if type_name == 'UINT8':
        return decode_uint8(data, offset)
    elif type_name == 'SINT8':
        return decode_sint8(data, offset)
    elif type_name == 'UINT16':
        return decode_uint16(data, offset)
    elif type_name == 'STRING':
        return decode_fixed_string(data, offset, size)
    else:
        raise ValueError(f"Unsupported field type: {type_name}")


def decode_record(payload: bytes, spec: RecordSpec) -> Dict[str, Any]:
    """
    Decode a fixed-layout record described by a RecordSpec.

    The payload must be exactly spec.size bytes long; anything else is a
    malformed record. Reserved fields are consumed but left out of the result.

    Args:
        payload: Raw record bytes
        spec: Layout of the record

    Returns:
        Dictionary of field name -> value for every non-reserved field

    Raises:
        ValueError: If the payload length does not match the record width
    """
    if len(payload) != spec.size:
        raise ValueError(
            f"{spec.name} record must be {spec.size} bytes, got {len(payload)}"
        )

    offset = 0
    result = {}
    for field_spec in spec.fields:
        value, offset = _decode_field(payload, offset, field_spec.type_name, field_spec.size)
        if not field_spec.reserved:
            result[field_spec.name] = value

    return result


def decode_game_config(payload: bytes) -> GameConfig:
    """
    Decode the MsgQueryGame reply.

    Record structure: 22 UINT16 fields, see GAME_CONFIG_SPEC. The shake rule
    is only attached when the shaking option is set.
    """
    fields = decode_record(payload, GAME_CONFIG_SPEC)
    options = decode_options(fields['options'])

    shake = None
    if options.shaking:
        shake = ShakeRule(wins=fields['shake_wins'], timeout=fields['shake_timeout'])

    return GameConfig(
        style=lookup_game_style(fields['style']),
        options=options,
        max_players=fields['max_players'],
        max_shots=fields['max_shots'],
        max_player_score=fields['max_player_score'],
        max_team_score=fields['max_team_score'],
        time_limit=fields['max_time'],
        elapsed_time=fields['elapsed_time'],
        shake=shake,
        team_max_sizes=(
            fields['rogue_max'],
            fields['red_max'],
            fields['green_max'],
            fields['blue_max'],
            fields['purple_max'],
        ),
        observer_size=fields['observer_size'],
        observer_max=fields['observer_max'],
    )


def decode_player_count(payload: bytes) -> int:
    """Decode the MsgQueryPlayers reply and return the number of players."""
    fields = decode_record(payload, PLAYER_COUNT_SPEC)
    return fields['num_players']


def decode_team_update(payload: bytes, config: GameConfig) -> List[Team]:
    """
    Decode a MsgTeamUpdate broadcast.

    Packet structure:
    - UINT8 number of entries
    - entries of 8 bytes each, see TEAM_ENTRY_SPEC

    Entries for teams whose configured maximum is zero are dropped; they are
    not enabled on this server. Only the five playable teams have a
    configured maximum, so any other team index is dropped too.

    Returns:
        Teams in wire order, without the Observer entry
    """
    num_teams, offset = decode_uint8(payload, 0)

    expected = 1 + num_teams * TEAM_ENTRY_SPEC.size
    if len(payload) != expected:
        raise ValueError(
            f"Team update with {num_teams} entries must be {expected} bytes, "
            f"got {len(payload)}"
        )

    teams = []
    for _ in range(num_teams):
        entry = decode_record(payload[offset:offset + TEAM_ENTRY_SPEC.size], TEAM_ENTRY_SPEC)
        offset += TEAM_ENTRY_SPEC.size

        index = entry['team']
        name = lookup_team_name(index)
        max_size = config.team_max_sizes[index] if index < PLAYABLE_TEAM_COUNT else 0
        if max_size < 1:
            logger.debug("Dropping team %s, not enabled on this server", name)
            continue

        teams.append(Team(
            name=name,
            players=entry['size'],
            max_players=max_size,
            wins=entry['wins'],
            losses=entry['losses'],
        ))

    return teams


def observer_team(config: GameConfig) -> Team:
    """Build the Observer entry from the observer counts in the game config."""
    return Team(name="Observer", players=config.observer_size, max_players=config.observer_max)


def decode_player(payload: bytes) -> Player:
    """
    Decode a MsgAddPlayer broadcast.

    Packet structure (171 bytes):
    - SINT8 player id (not kept)
    - UINT16 player type (not kept)
    - UINT16 team
    - UINT16 wins
    - UINT16 losses
    - UINT16 team kills
    - STRING callsign[32]
    - STRING motto[128]
    """
    fields = decode_record(payload, PLAYER_SPEC)

    return Player(
        team=lookup_team_name(fields['team']),
        wins=fields['wins'],
        losses=fields['losses'],
        team_kills=fields['team_kills'],
        callsign=fields['callsign'],
        motto=fields['motto'],
    )
