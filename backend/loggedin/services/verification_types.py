"""Result types shared by the verification services."""
from dataclasses import dataclass, asdict
from enum import Enum
from typing import Any, Dict, Optional, Union

@dataclass(frozen=True)
class Position:
    """A single device position reading."""
    latitude: float
    longitude: float
    accuracy: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

@dataclass(frozen=True)
class Verified:
    """Presence was established for ``event_id``."""
    event_id: Optional[str]
    reason: str
    distance_meters: Optional[float] = None

    verified = True

@dataclass(frozen=True)
class Rejected:
    """Presence could not be established."""
    reason: str
    distance_meters: Optional[float] = None

    verified = False

VerificationOutcome = Union[Verified, Rejected]

class CheckInState(Enum):
    """Lifecycle of a single check-in attempt."""
    IDLE = "idle"
    VERIFYING = "verifying"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
