from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping

from ..models import PingSample


@dataclass(frozen=True)
class Sample:
    """Player counts observed in one round.

    A server absent from ``counts`` was not reachable (or not registered)
    during that round, which is not the same as a count of zero.
    """

    timestamp: int
    counts: Mapping[int, int] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "counts", MappingProxyType(dict(self.counts)))

    @classmethod
    def from_model(cls, row: PingSample) -> "Sample":
        return cls(
            timestamp=row.timestamp,
            counts={int(server_id): count for server_id, count in row.counts.items()},
        )

    def to_model(self) -> PingSample:
        return PingSample(
            timestamp=self.timestamp,
            counts={str(server_id): count for server_id, count in self.counts.items()},
        )
