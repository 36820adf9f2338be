"""
Configuration management for the gesture parameter pipeline.
"""
import yaml
from pathlib import Path
from typing import Optional, Dict, Any
from dataclasses import dataclass, field

MIN_DETECTION_FPS = 10
MAX_DETECTION_FPS = 30


@dataclass
class DetectionConfig:
    """Observation rate settings."""
    fps: float = 20
    num_hands: int = 2


@dataclass
class CoordinatorConfig:
    """Coalescing and commit settings."""
    debounce_ms: int = 100
    min_confidence: float = 0.5
    generation_cooldown_ms: int = 0
    history_size: int = 10


@dataclass
class PresetsConfig:
    """Preset sign-pattern settings."""
    enabled: bool = True
    path: Optional[str] = None  # YAML file with custom preset bundles


@dataclass
class CameraConfig:
    """Camera configuration settings."""
    index: int = 0
    width: int = 1280
    height: int = 720
    fps: int = 30


@dataclass
class MediaPipeConfig:
    """MediaPipe Hands configuration settings."""
    max_num_hands: int = 2
    min_detection_confidence: float = 0.5
    min_tracking_confidence: float = 0.5


@dataclass
class DisplayConfig:
    """Display configuration settings."""
    show_landmarks: bool = True
    window_name: str = "SculptNet"


@dataclass
class Cfg:
    """Main configuration class."""
    detection: DetectionConfig = field(default_factory=DetectionConfig)
    coordinator: CoordinatorConfig = field(default_factory=CoordinatorConfig)
    presets: PresetsConfig = field(default_factory=PresetsConfig)
    camera: CameraConfig = field(default_factory=CameraConfig)
    mediapipe: MediaPipeConfig = field(default_factory=MediaPipeConfig)
    display: DisplayConfig = field(default_factory=DisplayConfig)


def default_config() -> Cfg:
    """Configuration with the built-in defaults."""
    return Cfg()


def load_config(path: Optional[str] = None) -> Cfg:
    """
    Load configuration from YAML file.

    Args:
        path: Path to config file. If None, uses config.default.yaml

    Returns:
        Configuration object with all settings
    """
    if path is None:
        # Use default config file in project root
        project_root = Path(__file__).parent.parent
        path = project_root / "config.default.yaml"

    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, 'r') as f:
        data = yaml.safe_load(f) or {}

    return _dict_to_config(data)


def _dict_to_config(data: Dict[str, Any]) -> Cfg:
    """Convert dictionary to configuration object; missing keys keep their defaults."""
    defaults = Cfg()

    detection_data = data.get('detection', {})
    detection = DetectionConfig(
        fps=detection_data.get('fps', defaults.detection.fps),
        num_hands=detection_data.get('num_hands', defaults.detection.num_hands)
    )

    coordinator_data = data.get('coordinator', {})
    coordinator = CoordinatorConfig(
        debounce_ms=coordinator_data.get('debounce_ms', defaults.coordinator.debounce_ms),
        min_confidence=coordinator_data.get('min_confidence', defaults.coordinator.min_confidence),
        generation_cooldown_ms=coordinator_data.get(
            'generation_cooldown_ms', defaults.coordinator.generation_cooldown_ms
        ),
        history_size=coordinator_data.get('history_size', defaults.coordinator.history_size)
    )

    presets_data = data.get('presets', {})
    presets = PresetsConfig(
        enabled=presets_data.get('enabled', defaults.presets.enabled),
        path=presets_data.get('path', defaults.presets.path)
    )

    camera_data = data.get('camera', {})
    camera = CameraConfig(
        index=camera_data.get('index', defaults.camera.index),
        width=camera_data.get('width', defaults.camera.width),
        height=camera_data.get('height', defaults.camera.height),
        fps=camera_data.get('fps', defaults.camera.fps)
    )

    mp_data = data.get('mediapipe', {})
    mediapipe = MediaPipeConfig(
        max_num_hands=mp_data.get('max_num_hands', defaults.mediapipe.max_num_hands),
        min_detection_confidence=mp_data.get(
            'min_detection_confidence', defaults.mediapipe.min_detection_confidence
        ),
        min_tracking_confidence=mp_data.get(
            'min_tracking_confidence', defaults.mediapipe.min_tracking_confidence
        )
    )

    display_data = data.get('display', {})
    display = DisplayConfig(
        show_landmarks=display_data.get('show_landmarks', defaults.display.show_landmarks),
        window_name=display_data.get('window_name', defaults.display.window_name)
    )

    return Cfg(
        detection=detection,
        coordinator=coordinator,
        presets=presets,
        camera=camera,
        mediapipe=mediapipe,
        display=display
    )
