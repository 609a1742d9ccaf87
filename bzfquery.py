#!/usr/bin/env python3

import argparse
import asyncio
import logging
import os
import sys
from typing import List, Tuple

from bzf_client.client import query
from bzf_client.protocol import DEFAULT_PORT, RESPONSE_TIMEOUT
from bzf_client.server_info import QueryResult, Team, Player


def parse_address(address: str) -> Tuple[str, int]:
    """Split host[:port], falling back to the default port."""
    host, _, port = address.partition(':')
    if not port:
        return host, DEFAULT_PORT
    try:
        return host, int(port)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid port: {port!r}")


def parse_args(argv=None):
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(description="Query a BZFlag server")
    parser.add_argument(
        'address',
        type=parse_address,
        metavar='host[:port]',
        help=f'Server to query (default port {DEFAULT_PORT})'
    )
    parser.add_argument(
        '--timeout',
        type=float,
        default=RESPONSE_TIMEOUT,
        help='Seconds to wait for each reply (default: %(default)s)'
    )
    parser.add_argument(
        '--debug-packets',
        metavar='DIR',
        nargs='?',
        const='packets',  # Default when --debug-packets provided without arg
        default=None,     # Default when --debug-packets not provided
        help='Capture frames to DIR (default: packets)'
    )
    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Log protocol traffic'
    )
    return parser.parse_args(argv)


def yes_no(value: bool) -> str:
    return "yes" if value else "no"


def sorted_teams(teams: List[Team]) -> List[Team]:
    """Highest score first; empty teams and teams without a record go last."""
    def key(team: Team):
        unranked = team.wins is None or team.losses is None or team.players == 0
        return (unranked, -team.score)
    return sorted(teams, key=key)


def sorted_players(players: List[Player]) -> List[Player]:
    """Highest score first; observers go last."""
    return sorted(players, key=lambda p: (p.team == "Observer", -p.score))


def format_report(result: QueryResult) -> str:
    lines = [
        "Configuration:",
        f"Game style:  {result.style}",
        f"Flags:       {yes_no(result.options.flags)}",
        f"Jumping:     {yes_no(result.options.jumping)}",
        f"Ricochet:    {yes_no(result.options.ricochet)}",
        f"Team kills:  {yes_no(not result.options.no_team_kills)}",
        "",
        "Teams:",
    ]

    for team in sorted_teams(result.teams):
        # an empty team shows no score
        score = team.score if team.players > 0 else 0
        lines.append(f" * {team.name:<10}[{score}]")

    lines.append("")
    lines.append("Players:")
    if not result.players:
        lines.append(" No players online")
        return "\n".join(lines)

    callsign_width = max(len(p.callsign) for p in result.players) + 2
    score_width = max(len(str(p.score)) for p in result.players) + 2
    for player in sorted_players(result.players):
        score = f"[{player.score}]"
        lines.append(f" * {player.callsign:<{callsign_width}}{score:<{score_width + 2}}({player.team})")

    return "\n".join(lines)


async def main(argv=None) -> int:
    """
    Main entry point for the BZFlag query tool.

    Queries one server and prints its configuration, teams and players.
    """
    args = parse_args(argv)
    host, port = args.address

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        result = await query(host, port, timeout=args.timeout, debug_packets_dir=args.debug_packets)
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return os.EX_UNAVAILABLE

    if result is None:
        print("Server did not respond")
        return 1

    print(format_report(result))
    return os.EX_OK


def run() -> None:
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    run()
