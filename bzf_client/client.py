import asyncio
import logging
from typing import Optional, Tuple

from . import protocol
from .packet_debugger import PacketDebugger
from .server_info import QueryResult

logger = logging.getLogger(__name__)


class BZFQueryClient:
    """
    One read-only query connection to a BZFlag server.

    The client owns a single StreamReader/StreamWriter pair for the length
    of one query. Use query() unless you need to drive the exchanges
    yourself.
    """
    reader: Optional[asyncio.StreamReader]
    writer: Optional[asyncio.StreamWriter]
    timeout: float
    _packet_debugger: Optional[PacketDebugger]

    def __init__(self, timeout: float = protocol.RESPONSE_TIMEOUT, debug_packets_dir: Optional[str] = None):
        self.reader = None
        self.writer = None
        self.timeout = timeout

        # Initialize packet debugger if requested
        if debug_packets_dir:
            self._packet_debugger = PacketDebugger(debug_packets_dir)
            logger.info("Packet debugging enabled: %s/", debug_packets_dir)
        else:
            self._packet_debugger = None

    async def connect(self, host: str, port: int) -> bool:
        """
        Connect to the BZFlag server.

        Args:
            host: Server hostname or IP address
            port: Server port number

        Returns:
            True if connection successful

        Raises:
            OSError: If the connection cannot be opened
            asyncio.TimeoutError: If the connection is not established in time
        """
        self.reader, self.writer = await asyncio.wait_for(
            asyncio.open_connection(host, port), self.timeout
        )
        logger.info("Connected to %s:%s", host, port)
        return True

    async def handshake(self) -> Optional[int]:
        """
        Run the greeting/version check.

        Returns:
            The player slot assigned by the server, or None if it sent none

        Raises:
            ProtocolMismatchError: If the server is not compatible
            ConnectionError: If the server does not answer in time
        """
        return await protocol.perform_handshake(self.reader, self.writer, self.timeout)

    async def send_command(self, code: int) -> None:
        """Send a zero-payload command frame."""
        frame = protocol.encode_command(code)

        # Debug: Write outbound frame
        if self._packet_debugger:
            self._packet_debugger.write_outbound_packet(frame, protocol.command_code_bytes(code))

        self.writer.write(frame)
        await self.writer.drain()
        logger.debug("Sent command %r", protocol.command_code_bytes(code))

    async def _read_frame(self) -> Tuple[bytes, bytes]:
        code, payload, raw_frame = await protocol.read_frame(self.reader)

        # Debug: Write inbound frame
        if self._packet_debugger:
            self._packet_debugger.write_inbound_packet(raw_frame, code)

        return code, payload

    async def send_and_await(self, code: int) -> bytes:
        """
        Send a command and wait for the reply carrying the same code.

        Returns:
            The reply payload, or b'' if no matching frame arrived in time
        """
        await self.send_command(code)
        return await self.await_broadcast(code)

    async def await_broadcast(self, code: int) -> bytes:
        """
        Wait for a frame with the given code without sending anything first.

        Frames with other codes are discarded. The wait is bounded by
        self.timeout measured from the start of the call.

        Returns:
            The matching payload, or b'' if the deadline passed first
        """
        expected = protocol.command_code_bytes(code)
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.timeout

        while True:
            remaining = deadline - loop.time()
            if remaining <= 0:
                break

            try:
                frame_code, payload = await asyncio.wait_for(self._read_frame(), remaining)
            except asyncio.TimeoutError:
                break

            if frame_code == expected:
                return payload

            logger.debug("Discarding frame %r while waiting for %r", frame_code, expected)

        logger.warning("No %r frame within %.1f seconds", expected, self.timeout)
        return b''

    async def fetch(self) -> Optional[QueryResult]:
        """
        Run the query exchanges on a connection that passed the handshake.

        Returns:
            The decoded snapshot, or None if the game query got no reply.
            Later exchanges that time out end the query early with what was
            decoded up to that point.

        Raises:
            ValueError: If a reply is malformed
            ConnectionError: If the server closes the connection
        """
        payload = await self.send_and_await(protocol.MSG_QUERY_GAME)
        if not payload:
            logger.warning("Server did not answer the game query")
            return None
        config = protocol.decode_game_config(payload)
        observer = protocol.observer_team(config)

        payload = await self.send_and_await(protocol.MSG_QUERY_PLAYERS)
        if not payload:
            logger.warning("Server did not answer the player query")
            return QueryResult(config=config, teams=[observer])
        num_players = protocol.decode_player_count(payload)

        payload = await self.await_broadcast(protocol.MSG_TEAM_UPDATE)
        if not payload:
            logger.warning("Server sent no team update")
            return QueryResult(config=config, teams=[observer])
        teams = protocol.decode_team_update(payload, config)
        teams.append(observer)

        players = []
        for _ in range(num_players):
            payload = await self.await_broadcast(protocol.MSG_ADD_PLAYER)
            if not payload:
                logger.warning("Only received %d of %d players", len(players), num_players)
                break
            players.append(protocol.decode_player(payload))

        return QueryResult(config=config, teams=teams, players=players)

    async def disconnect(self) -> bool:
        """
        Disconnect from the server and close the connection.

        Returns:
            True if disconnection successful
        """
        if self.writer:
            self.writer.close()
            try:
                await self.writer.wait_closed()
            except OSError as e:
                logger.debug("Error while closing connection: %s", e)
            self.reader = None
            self.writer = None
            logger.info("Disconnected from server")
        return True


async def query(host: str = protocol.DEFAULT_HOST,
                port: int = protocol.DEFAULT_PORT,
                timeout: float = protocol.RESPONSE_TIMEOUT,
                debug_packets_dir: Optional[str] = None) -> Optional[QueryResult]:
    """
    Query the given BZFlag server.

    Args:
        host: Server hostname or IP address
        port: Server port number
        timeout: Seconds to wait for each reply
        debug_packets_dir: Capture every frame into this directory if set

    Returns:
        Data from the server, or None if it could not be reached, is not a
        compatible server, did not answer, or sent a malformed reply

    Example:
        result = await query("bzflag.example.org", 5154)
        print(result.style, [p.callsign for p in result.players])
    """
    client = BZFQueryClient(timeout=timeout, debug_packets_dir=debug_packets_dir)

    try:
        await client.connect(host, port)
    except (OSError, asyncio.TimeoutError) as e:
        logger.error("Unable to connect to %s:%s: %s", host, port, e)
        return None

    try:
        await client.handshake()
        return await client.fetch()
    except protocol.ProtocolMismatchError as e:
        logger.error("%s:%s is not a compatible server: %s", host, port, e)
        return None
    except ConnectionError as e:
        logger.error("Connection to %s:%s lost: %s", host, port, e)
        return None
    except ValueError as e:
        logger.error("Malformed reply from %s:%s: %s", host, port, e)
        return None
    finally:
        await client.disconnect()


def query_sync(host: str = protocol.DEFAULT_HOST,
               port: int = protocol.DEFAULT_PORT,
               timeout: float = protocol.RESPONSE_TIMEOUT,
               debug_packets_dir: Optional[str] = None) -> Optional[QueryResult]:
    """Blocking wrapper around query() for callers without an event loop."""
    return asyncio.run(query(host, port, timeout=timeout, debug_packets_dir=debug_packets_dir))
