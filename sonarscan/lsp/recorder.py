"""Debug event recorders for raw protocol traffic and lifecycle events."""

from __future__ import annotations

import uuid
from pathlib import Path
from typing import Protocol, runtime_checkable

from loguru import logger

DEBUG_LOG_FORMAT = "{time:HH:mm:ss} {extra[event]}: {message}"


@runtime_checkable
class EventRecorder(Protocol):
    def record(self, kind: str, message: str) -> None: ...


class NullRecorder:
    """Recorder used when debug mode is off."""

    def record(self, kind: str, message: str) -> None:
        return None


class MemoryRecorder:
    """Keeps events in a list; handy for inspecting a session programmatically."""

    def __init__(self) -> None:
        self.events: list[tuple[str, str]] = []

    def record(self, kind: str, message: str) -> None:
        self.events.append((kind, message))

    def kinds(self) -> list[str]:
        return [kind for kind, _ in self.events]


class DebugLogRecorder:
    """Append-only debug log backed by a dedicated loguru file sink.

    Each line is ``HH:MM:SS <kind>: <message>``. The sink only accepts records
    bound to this recorder's channel, so other log output never reaches the
    file. Opening the recorder enables this module in loguru, so the trace is
    written even when an application has called ``logger.disable("sonarscan")``
    beforehand. Use as a context manager; the sink is removed on exit.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self._channel = uuid.uuid4().hex
        self._logger = logger.bind(debug_channel=self._channel)
        self._sink_id: int | None = None

    @property
    def is_open(self) -> bool:
        return self._sink_id is not None

    def open(self) -> "DebugLogRecorder":
        if self._sink_id is None:
            # Trace records stay on when the rest of the library logger is disabled.
            logger.enable(__name__)
            channel = self._channel
            self._sink_id = logger.add(
                str(self.path),
                level="DEBUG",
                format=DEBUG_LOG_FORMAT,
                filter=lambda record: record["extra"].get("debug_channel") == channel,
                encoding="utf-8",
                backtrace=False,
                diagnose=False,
            )
        return self

    def close(self) -> None:
        if self._sink_id is not None:
            logger.remove(self._sink_id)
            self._sink_id = None

    def record(self, kind: str, message: str) -> None:
        if self._sink_id is None:
            return
        self._logger.bind(event=kind).debug(message)

    def __enter__(self) -> "DebugLogRecorder":
        return self.open()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
