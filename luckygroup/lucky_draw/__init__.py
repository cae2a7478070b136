"""Lucky draw subsystem: randomness helpers, timers, and the draw engine."""

from .engine import DrawState, DrawTiming, LuckyDrawEngine
from .randomness import display_samples, pick_uniform, rolling_duration, shuffled
from .scheduling import AsyncioScheduler, ManualScheduler, Scheduler, TaskHandle

__all__ = [
    "AsyncioScheduler",
    "DrawState",
    "DrawTiming",
    "LuckyDrawEngine",
    "ManualScheduler",
    "Scheduler",
    "TaskHandle",
    "display_samples",
    "pick_uniform",
    "rolling_duration",
    "shuffled",
]
