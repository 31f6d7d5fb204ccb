"""
Volleyball Club Terminology

=== Category hierarchy ===
MainCategory (cohort) > SubCategory (skill tier)

=== Storage vs display ===
- Storage: ASCII enum keys persisted in the entity store ("Basico", "Setter")
- Display: Spanish labels shown to club staff ("Básico", "Colocador")

Every storage value has exactly one display value and vice versa. The tables
are checked when this module is imported; an unmapped value is rejected with
a ValidationError, never passed through.
"""

from enum import Enum
from dataclasses import dataclass
from typing import Dict, Type, Union

from .errors import ValidationError


# =============================================================================
# 1. Enums (storage values)
# =============================================================================

class MainCategory(str, Enum):
    """Broad cohort; a player may hold several, a team exactly one"""
    Masculino = "Masculino"
    Femenino = "Femenino"
    Mixto = "Mixto"


class SubCategory(str, Enum):
    """Skill tier"""
    Basico = "Basico"
    Intermedio = "Intermedio"
    Avanzado = "Avanzado"


class Position(str, Enum):
    """Court role"""
    Setter = "Setter"
    Libero = "Libero"
    MiddleBlocker = "MiddleBlocker"
    OutsideHitter = "OutsideHitter"
    OppositeHitter = "OppositeHitter"


class AttendanceStatus(str, Enum):
    """Recorded attendance status"""
    Presente = "Presente"
    Ausente = "Ausente"


# Resolved status for a day with no record yet (never stored)
PENDING = "Pending"


# =============================================================================
# 2. Display mapping
# =============================================================================

@dataclass
class DisplayMapping:
    """Bidirectional storage <-> display table for one enum"""
    enum_type: Type[Enum]
    field: str                      # request field name used in error reports
    to_display_map: Dict[str, str]  # storage value -> display label

    def __post_init__(self):
        self.from_display_map = {v: k for k, v in self.to_display_map.items()}

    def validate(self) -> None:
        """Totality and bijectivity check"""
        storage_values = {member.value for member in self.enum_type}
        mapped = set(self.to_display_map)
        missing = storage_values - mapped
        if missing:
            raise ValueError(
                f"{self.enum_type.__name__}: no display label for {sorted(missing)}"
            )
        unknown = mapped - storage_values
        if unknown:
            raise ValueError(
                f"{self.enum_type.__name__}: display table has unknown keys {sorted(unknown)}"
            )
        if len(self.from_display_map) != len(self.to_display_map):
            raise ValueError(
                f"{self.enum_type.__name__}: display labels are not unique"
            )

    def to_display(self, value: Union[Enum, str]) -> str:
        key = value.value if isinstance(value, Enum) else value
        try:
            return self.to_display_map[key]
        except KeyError:
            raise ValidationError(self.field, f"unmapped {self.enum_type.__name__} value: {value!r}")

    def from_display(self, label: str) -> Enum:
        try:
            return self.enum_type(self.from_display_map[label])
        except KeyError:
            raise ValidationError(self.field, f"unmapped {self.enum_type.__name__} label: {label!r}")

    def parse(self, value: Union[Enum, str]) -> Enum:
        """Accept an enum member, a display label or a storage value"""
        if isinstance(value, self.enum_type):
            return value
        if isinstance(value, str):
            if value in self.from_display_map:
                return self.enum_type(self.from_display_map[value])
            if value in self.to_display_map:
                return self.enum_type(value)
        raise ValidationError(self.field, f"unmapped {self.enum_type.__name__} value: {value!r}")


MAIN_CATEGORY_MAPPING = DisplayMapping(
    enum_type=MainCategory,
    field="mainCategory",
    to_display_map={
        "Masculino": "Masculino",
        "Femenino": "Femenino",
        "Mixto": "Mixto",
    },
)

SUB_CATEGORY_MAPPING = DisplayMapping(
    enum_type=SubCategory,
    field="subCategory",
    to_display_map={
        "Basico": "Básico",
        "Intermedio": "Intermedio",
        "Avanzado": "Avanzado",
    },
)

POSITION_MAPPING = DisplayMapping(
    enum_type=Position,
    field="position",
    to_display_map={
        "Setter": "Colocador",
        "Libero": "Líbero",
        "MiddleBlocker": "Central",
        "OutsideHitter": "Punta Receptor",
        "OppositeHitter": "Opuesto",
    },
)

ATTENDANCE_STATUS_MAPPING = DisplayMapping(
    enum_type=AttendanceStatus,
    field="status",
    to_display_map={
        "Presente": "Presente",
        "Ausente": "Ausente",
    },
)

ALL_MAPPINGS = (
    MAIN_CATEGORY_MAPPING,
    SUB_CATEGORY_MAPPING,
    POSITION_MAPPING,
    ATTENDANCE_STATUS_MAPPING,
)


def validate_mappings() -> None:
    """Raise ValueError when any table is not a total bijection"""
    for mapping in ALL_MAPPINGS:
        mapping.validate()


validate_mappings()


# =============================================================================
# 3. Convenience helpers
# =============================================================================

def display_sub_category(value: Union[SubCategory, str]) -> str:
    return SUB_CATEGORY_MAPPING.to_display(value)


def display_position(value: Union[Position, str]) -> str:
    return POSITION_MAPPING.to_display(value)


def parse_main_category(value: Union[MainCategory, str]) -> MainCategory:
    return MAIN_CATEGORY_MAPPING.parse(value)


def parse_sub_category(value: Union[SubCategory, str]) -> SubCategory:
    return SUB_CATEGORY_MAPPING.parse(value)


def parse_position(value: Union[Position, str]) -> Position:
    return POSITION_MAPPING.parse(value)


def parse_attendance_status(value: Union[AttendanceStatus, str]) -> AttendanceStatus:
    return ATTENDANCE_STATUS_MAPPING.parse(value)
