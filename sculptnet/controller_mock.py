"""
Mock generation hook for tests and the demo loop.
"""
import asyncio
import logging
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)


class MockGenerator:
    """Mock generation hook that logs requests instead of calling a remote service."""

    def __init__(self, delay_s: float = 0.0, fail_with: Optional[Exception] = None):
        """
        Initialize the mock generator.

        Args:
            delay_s: Simulated generation time
            fail_with: Exception to raise from every generate call
        """
        self.delay_s = delay_s
        self.fail_with = fail_with
        self.generate_count = 0
        self.documents: List[Dict[str, Any]] = []

    async def generate(self, document: Dict[str, Any]) -> Dict[str, Any]:
        """Record the document and return a fake generation result."""
        self.generate_count += 1
        self.documents.append(document)
        logger.info("[MockGenerator] Generate (call #%d): %s", self.generate_count,
                    document.get("short_description"))
        if self.delay_s:
            await asyncio.sleep(self.delay_s)
        if self.fail_with is not None:
            raise self.fail_with
        return {"image_url": f"mock://generation/{self.generate_count}", "prompt": document}

    def reset_counters(self) -> None:
        """Reset call counters for testing."""
        self.generate_count = 0
        self.documents.clear()
