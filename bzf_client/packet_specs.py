"""Record specifications for the BZFlag query protocol.

This module defines the fixed-layout records the query client decodes in a
declarative way, similar to the message layouts in BZFlag's Protocol.h and
the pack/unpack calls in bzfs. The record decoders in protocol.py walk these
specs field by field, so a layout change only has to be made here.
"""

from dataclasses import dataclass
from typing import List, Dict


# Wire width in bytes of each integer type; STRING fields carry their own size
INTEGER_WIDTHS: Dict[str, int] = {
    'UINT8': 1,
    'SINT8': 1,
    'UINT16': 2,
}


@dataclass
class FieldSpec:
    """Specification for a single record field.

    Attributes:
        name: Field name (e.g., 'max_players', 'callsign')
        type_name: Wire type name ('UINT8', 'SINT8', 'UINT16', 'STRING')
        size: Byte width for fixed-size STRING fields (ignored for integers)
        reserved: True if the field is on the wire but not surfaced
                  (legacy padding, ids the result does not keep)
    """
    name: str
    type_name: str
    size: int = 0
    reserved: bool = False

    def __post_init__(self):
        if self.type_name == 'STRING':
            if self.size <= 0:
                raise ValueError(f"STRING field {self.name!r} needs a positive size")
        elif self.type_name not in INTEGER_WIDTHS:
            raise ValueError(f"Unknown field type {self.type_name!r} for field {self.name!r}")

    @property
    def width(self) -> int:
        """Bytes this field occupies on the wire."""
        if self.type_name == 'STRING':
            return self.size
        return INTEGER_WIDTHS[self.type_name]


@dataclass
class RecordSpec:
    """Complete specification for a fixed-layout record.

    Attributes:
        name: Human-readable record name
        fields: Field specifications in wire order
    """
    name: str
    fields: List[FieldSpec]

    @property
    def size(self) -> int:
        """Exact wire width of the record in bytes."""
        return sum(f.width for f in self.fields)


# ============================================================================
# RECORD DEFINITIONS
# ============================================================================
# Layouts follow bzfs 2.4 (protocol 0221):
#   MsgQueryGame   - sendQueryGame()
#   MsgQueryPlayers - sendQueryPlayers()
#   MsgTeamUpdate  - Team::pack() per entry
#   MsgAddPlayer   - sendPlayerUpdate()

# MsgQueryGame reply: 22 UINT16 fields, 44 bytes
GAME_CONFIG_SPEC = RecordSpec(
    name="GAME_CONFIG",
    fields=[
        FieldSpec(name='style', type_name='UINT16'),
        FieldSpec(name='options', type_name='UINT16'),
        FieldSpec(name='max_players', type_name='UINT16'),
        FieldSpec(name='max_shots', type_name='UINT16'),
        # Legacy per-team current sizes, superseded by MsgTeamUpdate
        FieldSpec(name='legacy_rogue_size', type_name='UINT16', reserved=True),
        FieldSpec(name='legacy_red_size', type_name='UINT16', reserved=True),
        FieldSpec(name='legacy_green_size', type_name='UINT16', reserved=True),
        FieldSpec(name='legacy_blue_size', type_name='UINT16', reserved=True),
        FieldSpec(name='legacy_purple_size', type_name='UINT16', reserved=True),
        FieldSpec(name='observer_size', type_name='UINT16'),
        FieldSpec(name='rogue_max', type_name='UINT16'),
        FieldSpec(name='red_max', type_name='UINT16'),
        FieldSpec(name='green_max', type_name='UINT16'),
        FieldSpec(name='blue_max', type_name='UINT16'),
        FieldSpec(name='purple_max', type_name='UINT16'),
        FieldSpec(name='observer_max', type_name='UINT16'),
        FieldSpec(name='shake_wins', type_name='UINT16'),
        FieldSpec(name='shake_timeout', type_name='UINT16'),
        FieldSpec(name='max_player_score', type_name='UINT16'),
        FieldSpec(name='max_team_score', type_name='UINT16'),
        FieldSpec(name='max_time', type_name='UINT16'),
        FieldSpec(name='elapsed_time', type_name='UINT16'),
    ]
)

# MsgQueryPlayers reply: 4 bytes
PLAYER_COUNT_SPEC = RecordSpec(
    name="PLAYER_COUNT",
    fields=[
        FieldSpec(name='num_teams', type_name='UINT16', reserved=True),
        FieldSpec(name='num_players', type_name='UINT16'),
    ]
)

# One MsgTeamUpdate entry: 8 bytes, preceded by a UINT8 entry count
TEAM_ENTRY_SPEC = RecordSpec(
    name="TEAM_ENTRY",
    fields=[
        FieldSpec(name='team', type_name='UINT16'),
        FieldSpec(name='size', type_name='UINT16'),
        FieldSpec(name='wins', type_name='UINT16'),
        FieldSpec(name='losses', type_name='UINT16'),
    ]
)

# MsgAddPlayer: 1 + 5*2 + 32 + 128 = 171 bytes
PLAYER_SPEC = RecordSpec(
    name="PLAYER",
    fields=[
        FieldSpec(name='id', type_name='SINT8', reserved=True),
        FieldSpec(name='type', type_name='UINT16', reserved=True),
        FieldSpec(name='team', type_name='UINT16'),
        FieldSpec(name='wins', type_name='UINT16'),
        FieldSpec(name='losses', type_name='UINT16'),
        FieldSpec(name='team_kills', type_name='UINT16'),
        FieldSpec(name='callsign', type_name='STRING', size=32),
        FieldSpec(name='motto', type_name='STRING', size=128),
    ]
)
