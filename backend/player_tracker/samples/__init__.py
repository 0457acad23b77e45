"""Sample history: one immutable sample per scheduler round."""

from .store import SampleStore, StoreWriteFailure
from .types import Sample

__all__ = ["Sample", "SampleStore", "StoreWriteFailure"]
