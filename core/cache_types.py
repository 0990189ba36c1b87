# core/cache_types.py
"""Enums and dataclasses shared by the cache resolver, orchestrators and CLI."""
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Optional


class CacheTier(Enum):
    """Thumbnail size classes. Declaration order is lookup precedence."""
    LARGE = ("large", 256)
    NORMAL = ("normal", 128)

    def __init__(self, directory: str, max_dimension: int):
        self.directory = directory
        self.max_dimension = max_dimension

    @classmethod
    def for_dimensions(cls, width: int, height: int) -> Optional['CacheTier']:
        """Tier a rendered surface belongs to, or None when it fits no tier exactly."""
        for tier in cls:
            if width == tier.max_dimension or height == tier.max_dimension:
                return tier
        return None

    @classmethod
    def from_name(cls, name: str) -> 'CacheTier':
        for tier in cls:
            if tier.directory == name.lower():
                return tier
        raise ValueError(f"Unknown cache tier: {name!r}")


@dataclass
class SourceFile:
    """The slice of an application's file entry the cache consumes.

    ``file_name`` is the reference the application opened (a path or URI),
    ``display_name`` is what it shows to the user. ``thumbnail`` is the
    surface slot: filled by a cache hit, read by a store.
    """
    file_name: str
    display_name: Optional[str] = None
    is_memory: bool = False
    thumbnail: Optional[Any] = field(default=None, compare=False, repr=False)

    def __post_init__(self):
        if self.display_name is None:
            self.display_name = self.file_name


@dataclass(frozen=True)
class CandidatePath:
    path: str
    expected_uri: str
    tier: CacheTier
    shared: bool = False


class Outcome(Enum):
    HIT = auto()
    MISS = auto()
    FAULT = auto()


@dataclass
class LookupResult:
    outcome: Outcome
    image: Optional[Any] = field(default=None, repr=False)
    reason: str = ""
    candidate: Optional[CandidatePath] = None

    @classmethod
    def hit(cls, image, candidate: CandidatePath) -> 'LookupResult':
        return cls(Outcome.HIT, image=image, candidate=candidate)

    @classmethod
    def miss(cls, reason: str = "") -> 'LookupResult':
        return cls(Outcome.MISS, reason=reason)

    @classmethod
    def fault(cls, reason: str, candidate: Optional[CandidatePath] = None) -> 'LookupResult':
        return cls(Outcome.FAULT, reason=reason, candidate=candidate)

    def __bool__(self) -> bool:
        return self.outcome is Outcome.HIT
