# nav_logger.py
# Render sink that reports navigation frames through the logging module.
# Useful headless (simulation, field logs) or chained in front of a real UI sink.

import logging
from typing import Optional, Protocol

from .models import RenderFrame

# Standard Python logger — configure at app entry point if needed
logger = logging.getLogger(__name__)


class RenderSink(Protocol):
    def publish(self, frame: RenderFrame) -> None:
        ...


class NavLogger:
    """
    Logs every published frame; changes of instruction or direction at INFO,
    repeats at DEBUG so a steady walk does not flood the log.

    Args:
        downstream: Optional sink that receives every frame after logging.
    """

    def __init__(self, downstream: Optional[RenderSink] = None) -> None:
        self.downstream = downstream
        self.last_frame: Optional[RenderFrame] = None
        self.frame_count: int = 0

    def publish(self, frame: RenderFrame) -> None:
        previous = self.last_frame
        changed = (
            previous is None
            or previous.instruction != frame.instruction
            or previous.direction_text != frame.direction_text
            or previous.arrived != frame.arrived
        )
        line = (
            f"[{frame.step_label}] {frame.instruction} | {frame.direction_text} "
            f"(rotate {frame.rotation_degrees:.0f}°) | {frame.distance_text}"
        )
        if frame.status_message:
            line += f" | {frame.status_message}"

        logger.log(logging.INFO if changed else logging.DEBUG, line)

        self.last_frame = frame
        self.frame_count += 1
        if self.downstream is not None:
            self.downstream.publish(frame)
