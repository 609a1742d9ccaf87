"""
Unit tests for PacketDebugger - BZFlag frame capture utility.

Tests the debug utility that captures raw frames to disk for protocol analysis.
"""

import pytest

from bzf_client.packet_debugger import PacketDebugger, code_label


# ============================================================================
# Initialization Tests
# ============================================================================


@pytest.mark.unit
def test_packet_debugger_creates_directory(tmp_path):
    """PacketDebugger should create debug directory if it doesn't exist."""
    debug_dir = tmp_path / "debug"

    debugger = PacketDebugger(str(debug_dir))

    assert debug_dir.exists()
    assert debug_dir.is_dir()
    assert debugger.debug_dir == str(debug_dir)


@pytest.mark.unit
def test_packet_debugger_initializes_counters(tmp_path):
    """PacketDebugger should initialize counters to 0."""
    debugger = PacketDebugger(str(tmp_path / "debug"))

    assert debugger._inbound_counter == 0
    assert debugger._outbound_counter == 0


@pytest.mark.unit
def test_packet_debugger_replaces_existing_directory(tmp_path):
    """An existing capture directory is wiped so captures never mix."""
    debug_dir = tmp_path / "debug"
    debug_dir.mkdir()
    (debug_dir / "stale.packet").write_bytes(b"old")

    PacketDebugger(str(debug_dir))

    assert debug_dir.exists()
    assert list(debug_dir.iterdir()) == []


# ============================================================================
# write_inbound_packet / write_outbound_packet Tests
# ============================================================================


@pytest.mark.unit
def test_write_inbound_packet_creates_file(tmp_path):
    debug_dir = tmp_path / "debug"
    debugger = PacketDebugger(str(debug_dir))

    path = debugger.write_inbound_packet(b"\x00\x01qg\x07", code=b"qg")

    packet_file = debug_dir / "inbound_0001_qg.packet"
    assert packet_file.exists()
    assert path == str(packet_file)


@pytest.mark.unit
def test_write_inbound_packet_correct_content(tmp_path):
    debug_dir = tmp_path / "debug"
    debugger = PacketDebugger(str(debug_dir))

    frame = b"\x00\x03tu\x00\x01\x02"
    debugger.write_inbound_packet(frame, code=b"tu")

    assert (debug_dir / "inbound_0001_tu.packet").read_bytes() == frame


@pytest.mark.unit
def test_write_packets_counters_are_per_direction(tmp_path):
    debug_dir = tmp_path / "debug"
    debugger = PacketDebugger(str(debug_dir))

    debugger.write_outbound_packet(b"\x00\x00qg", code=b"qg")
    debugger.write_inbound_packet(b"\x00\x00qg", code=b"qg")
    debugger.write_outbound_packet(b"\x00\x00qp", code=b"qp")
    debugger.write_inbound_packet(b"\x00\x00ap", code=b"ap")

    assert sorted(p.name for p in debug_dir.iterdir()) == [
        "inbound_0001_qg.packet",
        "inbound_0002_ap.packet",
        "outbound_0001_qg.packet",
        "outbound_0002_qp.packet",
    ]


@pytest.mark.unit
def test_write_empty_frame(tmp_path):
    debug_dir = tmp_path / "debug"
    debugger = PacketDebugger(str(debug_dir))

    debugger.write_inbound_packet(b"", code=b"")

    assert (debug_dir / "inbound_0001_.packet").read_bytes() == b""


# ============================================================================
# code_label Tests
# ============================================================================


@pytest.mark.unit
def test_code_label_ascii():
    assert code_label(b"qg") == "qg"


@pytest.mark.unit
def test_code_label_non_printable_uses_hex():
    assert code_label(b"\x00\xff") == "00ff"
    assert code_label(b"q/") == "712f"
