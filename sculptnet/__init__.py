"""
SculptNet gesture core

Turns per-frame hand landmarks into confident, schema-valid updates of a
structured image prompt, and decides when a generation may be started.
"""

__version__ = "0.1.0"
__author__ = "SculptNet Team"

from .types import (
    FailureKind,
    GenerationHook,
    GestureUpdate,
    HandObservation,
    HandPosture,
    ImportResult,
    Landmark,
    ObservationRejection,
    UpdateResult,
    ValidationResult,
)
from .config import load_config, default_config, Cfg
from .controller_mock import MockGenerator
from .coordinator import CoalescingCoordinator, CommitRecord, CommitTicket, SingleFlightGuard
from .debounce import Debouncer
from .gestures import (
    FrameCompositionGesture,
    PinchGesture,
    VerticalLightingGesture,
    WristRotationGesture,
    fov_to_lens,
    lens_to_fov,
)
from .hand_state import HandStateMachine, classify_posture
from .pipeline import FrameResult, GesturePipeline, clamp_detection_rate
from .presets import PresetConfig, PresetDetector, PresetMatch
from .store import ParameterStore

__all__ = [
    "FailureKind",
    "GenerationHook",
    "GestureUpdate",
    "HandObservation",
    "HandPosture",
    "ImportResult",
    "Landmark",
    "ObservationRejection",
    "UpdateResult",
    "ValidationResult",
    "load_config",
    "default_config",
    "Cfg",
    "MockGenerator",
    "CoalescingCoordinator",
    "CommitRecord",
    "CommitTicket",
    "SingleFlightGuard",
    "Debouncer",
    "FrameCompositionGesture",
    "PinchGesture",
    "VerticalLightingGesture",
    "WristRotationGesture",
    "fov_to_lens",
    "lens_to_fov",
    "HandStateMachine",
    "classify_posture",
    "FrameResult",
    "GesturePipeline",
    "clamp_detection_rate",
    "PresetConfig",
    "PresetDetector",
    "PresetMatch",
    "ParameterStore",
]
