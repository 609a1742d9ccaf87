#!/usr/bin/env python3
"""
Frame File Validation Tool

Validates captured BZFlag frame files by verifying that:
1. The payload length in the header plus the 4-byte header matches the file size
2. Frames carrying a fixed-layout record have the record's exact payload width

Usage:
    python3 tools/validate_packet_files.py <directory>
    python3 tools/validate_packet_files.py packets/  # Example
"""

import struct
import sys
from collections import defaultdict
from pathlib import Path
from typing import List, Dict, Optional

from bzf_client import protocol
from bzf_client.packet_specs import (
    GAME_CONFIG_SPEC,
    PLAYER_COUNT_SPEC,
    TEAM_ENTRY_SPEC,
    PLAYER_SPEC,
)
from bzf_client.packet_debugger import code_label

FRAME_HEADER_SIZE = protocol.FRAME_HEADER_SIZE

# Inbound payload widths for the replies the query client decodes
RECORD_WIDTHS: Dict[bytes, int] = {
    protocol.command_code_bytes(protocol.MSG_QUERY_GAME): GAME_CONFIG_SPEC.size,
    protocol.command_code_bytes(protocol.MSG_QUERY_PLAYERS): PLAYER_COUNT_SPEC.size,
    protocol.command_code_bytes(protocol.MSG_ADD_PLAYER): PLAYER_SPEC.size,
}
TEAM_UPDATE_CODE = protocol.command_code_bytes(protocol.MSG_TEAM_UPDATE)


def expected_payload_size(code: bytes, payload: bytes) -> Optional[int]:
    """Payload width a frame with this code must have, or None if unconstrained."""
    if code == TEAM_UPDATE_CODE and payload:
        return 1 + payload[0] * TEAM_ENTRY_SPEC.size
    return RECORD_WIDTHS.get(code)


class FrameValidationResult:
    """Result of validating a single frame file"""

    def __init__(self, filename: str, code: bytes, claimed_size: int, actual_size: int,
                 record_error: Optional[str] = None):
        self.filename = filename
        self.code = code
        self.claimed_size = claimed_size
        self.actual_size = actual_size
        self.record_error = record_error
        self.is_valid = claimed_size == actual_size and record_error is None

    def __repr__(self):
        status = "VALID  " if self.is_valid else "INVALID"
        return (
            f"{status} | {self.filename:30} | Code {code_label(self.code):4} | "
            f"Claimed: {self.claimed_size:5} bytes | Actual: {self.actual_size:5} bytes"
        )


class FrameValidator:
    """Validates captured frame files for integrity"""

    def __init__(self, packet_dir: str):
        self.packet_dir = Path(packet_dir)
        self.results: List[FrameValidationResult] = []
        self.code_counts: Dict[bytes, int] = defaultdict(int)

    def validate_frame_file(self, filepath: Path) -> FrameValidationResult:
        """
        Validate a single frame file.

        Reads the header (UINT16 payload length + 2-byte code) and compares
        the claimed frame size to the actual file size. Inbound frames that
        carry a known record are also checked against the record width.

        Args:
            filepath: Path to the frame file

        Returns:
            FrameValidationResult with validation details
        """
        data = filepath.read_bytes()
        actual_size = len(data)

        if actual_size < FRAME_HEADER_SIZE:
            # File too small to contain a frame header
            return FrameValidationResult(filepath.name, b'', claimed_size=FRAME_HEADER_SIZE,
                                         actual_size=actual_size)

        payload_length, code = struct.unpack(">H2s", data[:FRAME_HEADER_SIZE])
        claimed_size = payload_length + FRAME_HEADER_SIZE
        payload = data[FRAME_HEADER_SIZE:]

        record_error = None
        if filepath.name.startswith("inbound"):
            expected = expected_payload_size(code, payload)
            if expected is not None and len(payload) != expected:
                record_error = f"record payload is {len(payload)} bytes, expected {expected}"

        return FrameValidationResult(filepath.name, code, claimed_size, actual_size, record_error)

    def scan_directory(self) -> None:
        """Scan directory and validate all .packet files"""
        if not self.packet_dir.exists():
            print(f"Error: Directory '{self.packet_dir}' does not exist")
            sys.exit(1)

        if not self.packet_dir.is_dir():
            print(f"Error: '{self.packet_dir}' is not a directory")
            sys.exit(1)

        packet_files = sorted(self.packet_dir.glob("*.packet"))

        if not packet_files:
            print(f"No .packet files found in '{self.packet_dir}'")
            sys.exit(0)

        print(f"Validating {len(packet_files)} frame files in '{self.packet_dir}'...\n")

        for filepath in packet_files:
            result = self.validate_frame_file(filepath)
            self.results.append(result)
            self.code_counts[result.code] += 1

    def print_results(self) -> None:
        """Print validation results and summary"""
        print("=" * 100)
        print("VALIDATION RESULTS")
        print("=" * 100)

        for result in self.results:
            print(result)

        print("\n" + "=" * 100)
        print("SUMMARY")
        print("=" * 100)

        total = len(self.results)
        valid = sum(1 for r in self.results if r.is_valid)
        invalid = total - valid

        print(f"Total frames validated: {total}")
        print(f"Valid frames:           {valid} ({100 * valid / total:.1f}%)")
        print(f"Invalid frames:         {invalid} ({100 * invalid / total:.1f}%)")

        print(f"\nMessage code distribution:")
        for code, count in sorted(self.code_counts.items()):
            if not code:
                print(f"  Unknown/Corrupt: {count}")
            else:
                print(f"  Code {code_label(code):4}: {count:3} frames")

        if invalid > 0:
            print(f"\n{'=' * 100}")
            print("VALIDATION ERRORS")
            print("=" * 100)
            for result in self.results:
                if result.is_valid:
                    continue
                print(f"x {result.filename}")
                if result.claimed_size != result.actual_size:
                    size_diff = result.actual_size - result.claimed_size
                    print(f"  Claimed size: {result.claimed_size} bytes")
                    print(f"  Actual size:  {result.actual_size} bytes")
                    print(f"  Difference:   {size_diff:+} bytes")
                    if size_diff < 0:
                        print(f"  TRUNCATED: File is SMALLER than claimed")
                    else:
                        print(f"  OVERSIZED: File is LARGER than claimed")
                if result.record_error:
                    print(f"  Malformed record: {result.record_error}")

    def get_exit_code(self) -> int:
        """Return exit code based on validation results"""
        return 1 if any(not r.is_valid for r in self.results) else 0


def main():
    if len(sys.argv) != 2:
        print("Usage: python3 tools/validate_packet_files.py <directory>")
        print()
        print("Example:")
        print("  python3 tools/validate_packet_files.py packets/")
        sys.exit(1)

    validator = FrameValidator(sys.argv[1])
    validator.scan_directory()
    validator.print_results()

    sys.exit(validator.get_exit_code())


if __name__ == "__main__":
    main()
