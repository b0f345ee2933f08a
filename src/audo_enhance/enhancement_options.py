"""Shared enhancement option enums and parsing helpers."""

from __future__ import annotations

from enum import Enum
from typing import TypeVar


class EnhancementType(str, Enum):
    """Available enhancement modes."""

    MIX = "mix"
    MASTER = "master"
    FOUR_D = "4d"


class Focus(str, Enum):
    """Whole-mix focus nudges a listener can request."""

    NONE = "none"
    BASS = "bass"
    PRESENCE = "presence"
    AIR = "air"
    WIDE = "wide"
    PUNCH = "punch"


class MasterProfile(str, Enum):
    """Platform loudness profiles for master renders."""

    SPOTIFY = "spotify"
    STREAMING = "streaming"
    APPLE_MUSIC = "apple_music"
    SOUNDCLOUD = "soundcloud"
    LOUD = "loud"


class FeedbackRating(str, Enum):
    """Listener verdict on a finished render."""

    SATISFIED = "satisfied"
    NOT_SATISFIED = "not_satisfied"


class FeedbackReason(str, Enum):
    """Optional reason attached to feedback."""

    TOO_LOUD = "too_loud"
    TOO_QUIET = "too_quiet"
    TOO_HARSH = "too_harsh"
    TOO_DULL = "too_dull"
    MUDDY_BASS = "muddy_bass"
    WEAK_BASS = "weak_bass"
    DISTORTED = "distorted"
    WRONG_SPEED_OR_PITCH = "wrong_speed_or_pitch"
    OTHER = "other"


EnumT = TypeVar("EnumT", bound=Enum)


def enum_values(enum_cls: type[EnumT]) -> tuple[str, ...]:
    """Return enum values for UI/API hinting in declaration order."""

    return tuple(str(member.value) for member in enum_cls)


def parse_case_insensitive_enum(raw_value: str, enum_cls: type[EnumT]) -> EnumT:
    """Parse enum values case-insensitively and raise ValueError with allowed values."""

    normalized = raw_value.strip().lower()
    for member in enum_cls:
        if str(member.value).lower() == normalized:
            return member

    allowed = ", ".join(enum_values(enum_cls))
    enum_name = enum_cls.__name__
    raise ValueError(f"Invalid {enum_name}: '{raw_value}'. Allowed values: {allowed}.")
