"""
Demo application: webcam hand tracking driving the parameter document.
"""
import asyncio
import logging
import os
import time
from typing import List, Optional

import cv2
from dotenv import load_dotenv

from .config import load_config
from .controller_mock import MockGenerator
from .pipeline import GesturePipeline
from .store import ParameterStore
from .tracker import HandsTracker
from .types import GestureUpdate, HandObservation

load_dotenv()

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


class GestureParameterApp:
    """Main application class for gesture-driven prompt editing."""

    def __init__(self, config_path: Optional[str] = None):
        """Initialize the application with configuration."""
        self.config = load_config(config_path)
        self.tracker = HandsTracker(
            max_num_hands=self.config.mediapipe.max_num_hands,
            min_detection_conf=self.config.mediapipe.min_detection_confidence,
            min_tracking_conf=self.config.mediapipe.min_tracking_confidence
        )
        self.store = ParameterStore()
        self.store.initialize()
        self.generator = MockGenerator(delay_s=1.0)
        self.pipeline = GesturePipeline(self.store, hook=self.generator, cfg=self.config)
        self.pipeline.coordinator.on_update = self._on_update
        self.last_update: Optional[GestureUpdate] = None

        self.cap = cv2.VideoCapture(self.config.camera.index)
        self.cap.set(cv2.CAP_PROP_FRAME_WIDTH, self.config.camera.width)
        self.cap.set(cv2.CAP_PROP_FRAME_HEIGHT, self.config.camera.height)
        self.cap.set(cv2.CAP_PROP_FPS, self.config.camera.fps)

        if not self.cap.isOpened():
            raise RuntimeError(f"Failed to open camera {self.config.camera.index}")

    def _on_update(self, update: GestureUpdate) -> None:
        self.last_update = update
        logger.info("Applied %s = %r (confidence %.2f)", update.path, update.value, update.confidence)

    async def run(self):
        """Run the main application loop."""
        logger.info("Starting %s at %.0f Hz detection", self.config.display.window_name,
                    self.pipeline.detection_fps)
        logger.info("Keys: g = generate, r = reset, e = export, q = quit")

        next_detection = 0.0
        hands: List[HandObservation] = []
        while True:
            ret, frame = self.cap.read()
            if not ret:
                logger.error("Failed to read frame from camera")
                break

            t_now = time.monotonic()
            if t_now >= next_detection:
                next_detection = t_now + self.pipeline.detection_interval
                hands = self.tracker.process(frame)
                result = self.pipeline.process_frame(hands, t_now)
                if result.commit is not None and not result.commit.accepted:
                    logger.info("Trigger ignored: %s", result.commit.error)
            else:
                self.pipeline.coordinator.poll(t_now)

            if hands and self.config.display.show_landmarks:
                frame = self.tracker.draw_landmarks(frame, hands)

            status = f"Hand: {self.pipeline.hand_state.posture.value}"
            if self.pipeline.coordinator.is_committing:
                status += " | GENERATING"
            cv2.putText(frame, status, (10, 30), cv2.FONT_HERSHEY_SIMPLEX, 0.7, (255, 255, 255), 2)
            if self.last_update:
                text = f"{self.last_update.path}: {self.last_update.value}"
                cv2.putText(frame, text, (10, 60), cv2.FONT_HERSHEY_SIMPLEX, 0.5, (0, 255, 0), 1)

            cv2.imshow(self.config.display.window_name, frame)

            key = cv2.waitKey(1) & 0xFF
            if key == ord('q'):
                break
            if key == ord('g'):
                ticket = self.pipeline.manual_commit()
                if not ticket.accepted:
                    logger.info("Manual generation rejected: %s", ticket.error)
            elif key == ord('r'):
                self.pipeline.reset()
            elif key == ord('e'):
                print(self.store.export())

            # Let commit tasks make progress
            await asyncio.sleep(0)

        self.close()

    def close(self):
        """Cleanup resources."""
        self.tracker.close()
        if self.cap.isOpened():
            self.cap.release()
        cv2.destroyAllWindows()


async def main():
    """Entry point for the application."""
    try:
        app = GestureParameterApp(config_path=os.getenv("SCULPTNET_CONFIG") or None)
    except (RuntimeError, FileNotFoundError) as e:
        logger.error("Startup failed: %s", e)
        return
    try:
        await app.run()
    except KeyboardInterrupt:
        logger.info("Application interrupted by user")
        app.close()


if __name__ == "__main__":
    asyncio.run(main())
