#!/usr/bin/env python3
"""Progress events handed from the sync core to the presentation layer."""

from __future__ import annotations

import queue
import re
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from logging_utils import Logger
from security import SecurityValidator

_COLOR_HINT = re.compile(r"^\[(blue|green|yellow|red)\]\s?")


class ProgressLevel(Enum):
    INFO = "blue"
    SUCCESS = "green"
    WARNING = "yellow"
    ERROR = "red"


@dataclass(frozen=True)
class ProgressEvent:
    level: ProgressLevel
    text: str

    @property
    def line(self) -> str:
        """Text with its leading color hint, e.g. '[green] cloned: a/b'."""
        return f"[{self.level.value}] {self.text}"

    @classmethod
    def info(cls, text: str) -> "ProgressEvent":
        return cls(ProgressLevel.INFO, text)

    @classmethod
    def success(cls, text: str) -> "ProgressEvent":
        return cls(ProgressLevel.SUCCESS, text)

    @classmethod
    def warning(cls, text: str) -> "ProgressEvent":
        return cls(ProgressLevel.WARNING, text)

    @classmethod
    def error(cls, text: str) -> "ProgressEvent":
        return cls(ProgressLevel.ERROR, text)


def strip_color_hint(line: str) -> str:
    return _COLOR_HINT.sub("", line, count=1)


class ProgressSink:
    """Receives progress events. Subclasses decide where they go."""

    def emit(self, event: ProgressEvent) -> None:
        raise NotImplementedError

    def info(self, text: str) -> None:
        self.emit(ProgressEvent.info(text))

    def success(self, text: str) -> None:
        self.emit(ProgressEvent.success(text))

    def warning(self, text: str) -> None:
        self.emit(ProgressEvent.warning(text))

    def error(self, text: str) -> None:
        self.emit(ProgressEvent.error(text))


class LoggerSink(ProgressSink):
    """Renders events on the console through Logger."""

    def emit(self, event: ProgressEvent) -> None:
        writer = {
            ProgressLevel.INFO: Logger.info,
            ProgressLevel.SUCCESS: Logger.success,
            ProgressLevel.WARNING: Logger.warn,
            ProgressLevel.ERROR: Logger.error,
        }[event.level]
        writer(event.text)


class QueueSink(ProgressSink):
    """Puts sanitized events on a queue for a consumer thread."""

    def __init__(self, events: Optional["queue.Queue[ProgressEvent]"] = None) -> None:
        if events is None:
            events = queue.Queue()
        self.events: "queue.Queue[ProgressEvent]" = events

    def emit(self, event: ProgressEvent) -> None:
        text = SecurityValidator.sanitize_for_logging(event.text)
        self.events.put(ProgressEvent(event.level, text))


class ListSink(ProgressSink):
    """Collects events in memory."""

    def __init__(self) -> None:
        self.events: List[ProgressEvent] = []

    def emit(self, event: ProgressEvent) -> None:
        self.events.append(event)

    @property
    def lines(self) -> List[str]:
        return [event.line for event in self.events]
