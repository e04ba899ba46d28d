from __future__ import annotations

from enum import Enum
from types import MappingProxyType


class RoomType(str, Enum):
    SINGLE = "single"
    DOUBLE = "double"
    TRIPLE = "triple"
    QUAD = "quad"
    QUINT = "quint"

    @classmethod
    def parse(cls, value: object) -> RoomType | None:
        if isinstance(value, RoomType):
            return value
        if not isinstance(value, str):
            return None
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None


ROOM_CAPACITY = MappingProxyType(
    {
        RoomType.SINGLE: 1,
        RoomType.DOUBLE: 2,
        RoomType.TRIPLE: 3,
        RoomType.QUAD: 4,
        RoomType.QUINT: 5,
    }
)

DEFAULT_ROOM_TYPE = RoomType.QUAD


def capacity_of(room_type: RoomType | str | None) -> int:
    parsed = RoomType.parse(room_type)
    if parsed is None:
        return 0
    return ROOM_CAPACITY[parsed]
