"""
Per-item outcome of a mapping step.
"""

from dataclasses import dataclass
from typing import Generic, Iterable, List, Optional, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class MappingResult(Generic[T]):
    """Either a mapped value or the reason the item was skipped."""
    value: Optional[T] = None
    skip_reason: Optional[str] = None
    source_uid: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.skip_reason is None

    @classmethod
    def success(cls, value: T, source_uid: Optional[str] = None) -> "MappingResult[T]":
        return cls(value=value, source_uid=source_uid)

    @classmethod
    def skip(cls, reason: str, source_uid: Optional[str] = None) -> "MappingResult[T]":
        return cls(skip_reason=reason, source_uid=source_uid)


def successes(results: Iterable[MappingResult[T]]) -> List[T]:
    """Mapped values of the successful results, in input order."""
    return [result.value for result in results if result.ok]
