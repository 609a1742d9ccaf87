"""
Packet debugging utility for capturing BZFlag query frames.
"""
import logging
import os
import shutil

logger = logging.getLogger(__name__)


def code_label(code: bytes) -> str:
    """File name label for a 2-byte message code: 'qg' or hex when not printable."""
    if len(code) == 2 and code.isalnum() and code.isascii():
        return code.decode('ascii')
    return code.hex()


class PacketDebugger:
    """
    Captures BZFlag frames to disk for protocol debugging and analysis.

    Writes frames as separate files with naming: DIRECTION_INDEX_CODE.packet
    - DIRECTION: "inbound" (from server) or "outbound" (to server)
    - INDEX: 4-digit zero-padded auto-incrementing counter (separate for each direction)
    - CODE: the 2-character message code (e.g., qg, tu, ap)

    Example: inbound_0001_qg.packet (first inbound frame, MsgQueryGame reply)
    """

    def __init__(self, debug_dir: str):
        """
        Initialize packet debugger and create output directory.

        An existing directory is removed first so captures from different
        queries never mix.

        Args:
            debug_dir: Directory path to store frame files
        """
        if os.path.exists(debug_dir):
            logger.warning("Packet debug directory '%s' already exists. Removing it.", debug_dir)
            shutil.rmtree(debug_dir)

        os.makedirs(debug_dir)
        self._debug_dir = debug_dir
        self._inbound_counter = 0
        self._outbound_counter = 0

    @property
    def debug_dir(self) -> str:
        return self._debug_dir

    def write_inbound_packet(self, raw_frame: bytes, code: bytes) -> str:
        """
        Write an inbound frame (from server) to disk.

        Args:
            raw_frame: Complete raw frame bytes including header
            code: The 2-byte message code (e.g., b'qg')

        Returns:
            Path of the written file

        Raises:
            RuntimeError: If file write verification fails
        """
        self._inbound_counter += 1
        return self._write("inbound", self._inbound_counter, raw_frame, code)

    def write_outbound_packet(self, raw_frame: bytes, code: bytes) -> str:
        """
        Write an outbound frame (to server) to disk.

        Args:
            raw_frame: Complete raw frame bytes including header
            code: The 2-byte message code (e.g., b'qg')

        Returns:
            Path of the written file

        Raises:
            RuntimeError: If file write verification fails
        """
        self._outbound_counter += 1
        return self._write("outbound", self._outbound_counter, raw_frame, code)

    def _write(self, direction: str, index: int, raw_frame: bytes, code: bytes) -> str:
        filename = f"{direction}_{index:04d}_{code_label(code)}.packet"
        filepath = os.path.join(self._debug_dir, filename)

        expected_size = len(raw_frame)

        with open(filepath, 'wb') as f:
            f.write(raw_frame)

        # Verify write completed successfully
        actual_size = os.path.getsize(filepath)

        if actual_size != expected_size:
            raise RuntimeError(
                f"Packet write verification failed for {filename}: "
                f"expected {expected_size} bytes, wrote {actual_size} bytes"
            )

        return filepath
