from __future__ import annotations

from enum import Enum


class EngineStatus(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
