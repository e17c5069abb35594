"""
Per-feed outcomes.

Fetching and decoding never raise through the merge barrier: every feed
task ends with a value, either its payload/records or one of the classes
below, and the merger looks at them one by one.
"""

from dataclasses import dataclass
from typing import List, Optional, Union

from software_portal.models import ApplicationRecord, FeedSource


@dataclass(frozen=True)
class Absent:
    """The component does not publish appdata (404 or no index entry)."""
    source: FeedSource
    reason: str = "not found"

    label = "absent"


@dataclass(frozen=True)
class FetchError:
    """Transport failure: timeout, connection error, unexpected status."""
    source: FeedSource
    reason: str
    cause: Optional[BaseException] = None

    label = "error"


@dataclass(frozen=True)
class DecodeError:
    """The payload is not valid gzip, or not a parseable appdata document."""
    reason: str
    cause: Optional[BaseException] = None

    label = "error"


FetchOutcome = Union[bytes, Absent, FetchError]
DecodeOutcome = Union[List[ApplicationRecord], DecodeError]
FeedOutcome = Union[List[ApplicationRecord], Absent, FetchError, DecodeError]

FAILURES = (Absent, FetchError, DecodeError)


def outcome_label(outcome: FeedOutcome) -> str:
    if isinstance(outcome, FAILURES):
        return outcome.label
    return "ok"
