"""
Type definitions for the gesture-to-parameter system.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Literal, NamedTuple, Optional, Protocol, Tuple, Union, runtime_checkable


class Landmark(NamedTuple):
    """Normalized 3D point; x and y in [0..1] against the frame, z relative depth."""
    x: float
    y: float
    z: float = 0.0


Side = Literal["Left", "Right"]


@dataclass(frozen=True)
class HandObservation:
    """One tracked hand: its landmarks plus the side tag from the tracker."""
    landmarks: Tuple[Landmark, ...]
    side: Side = "Right"

    def __post_init__(self):
        # Plain (x, y[, z]) tuples become Landmarks; anything else is left for validation to reject
        points = tuple(
            Landmark(*p) if not isinstance(p, Landmark) and hasattr(p, "__len__") and len(p) in (2, 3) else p
            for p in self.landmarks
        )
        object.__setattr__(self, "landmarks", points)

    @classmethod
    def from_points(cls, points, side: Side = "Right") -> "HandObservation":
        """Build an observation from any iterable of (x, y[, z]) sequences."""
        return cls(landmarks=tuple(points), side=side)


@dataclass(frozen=True)
class ObservationRejection:
    """Typed result for an observation that does not have the 21-point shape."""
    reason: str


@dataclass(frozen=True)
class GestureUpdate:
    """Parameter update proposed by a classifier for a single frame."""
    path: str
    value: Union[str, int, float]
    confidence: float


class HandPosture(str, Enum):
    """Discrete hand posture tracked across frames."""
    CLOSED = "closed"
    OPEN = "open"
    AMBIGUOUS = "ambiguous"


class FailureKind(str, Enum):
    """Categories of recoverable failure returned by the store and coordinator."""
    PARSE = "parse"
    VALIDATION = "validation"
    IN_PROGRESS = "in_progress"
    COOLDOWN = "cooldown"
    NO_HOOK = "no_hook"


@dataclass(frozen=True)
class ValidationIssue:
    """Single schema violation, addressed by dot path."""
    path: str
    message: str

    def __str__(self) -> str:
        return f"{self.path}: {self.message}"


@dataclass
class ValidationResult:
    """Outcome of validating a parameter document."""
    success: bool
    errors: list = field(default_factory=list)

    def describe(self) -> str:
        return "; ".join(str(issue) for issue in self.errors)


@dataclass
class UpdateResult:
    """Outcome of a path-addressed store update."""
    success: bool
    previous_value: Any = None
    error: Optional[str] = None
    kind: Optional[FailureKind] = None


@dataclass
class ImportResult:
    """Outcome of importing a serialized document."""
    success: bool
    error: Optional[str] = None
    kind: Optional[FailureKind] = None


@runtime_checkable
class GenerationHook(Protocol):
    """Abstract protocol for the downstream generation (commit) action."""

    async def generate(self, document: Dict[str, Any]) -> Any:
        """Start a generation for the given parameter document snapshot."""
        ...
