"""Framed stdio transport to the language server subprocess."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import Any, Protocol

from loguru import logger

from .errors import ProcessError, TransportParseError
from .framing import FrameDecoder, encode_frame
from .recorder import EventRecorder, NullRecorder

READ_CHUNK_SIZE = 65536
TERMINATE_TIMEOUT_SECONDS = 2.0

MessageHandler = Callable[[dict[str, Any]], None]
ParseErrorSink = Callable[[TransportParseError], None]


class ByteWriter(Protocol):
    def write(self, data: bytes) -> Any: ...


class FramedTransport:
    """Owns the child process and its duplex byte stream.

    Outbound messages are written as single ``Content-Length`` frames;
    inbound bytes go through ``on_data`` which buffers partial frames and
    hands every complete message to the registered handler.
    """

    def __init__(
        self,
        recorder: EventRecorder | None = None,
        on_parse_error: ParseErrorSink | None = None,
    ):
        self._recorder = recorder or NullRecorder()
        self._on_parse_error = on_parse_error
        self._decoder = FrameDecoder(on_error=self._report_parse_error)
        self._on_message: MessageHandler | None = None
        self._writer: ByteWriter | None = None
        self._proc: asyncio.subprocess.Process | None = None
        self._tasks: list[asyncio.Task] = []

    @property
    def process(self) -> asyncio.subprocess.Process | None:
        return self._proc

    @property
    def is_running(self) -> bool:
        return self._proc is not None and self._proc.returncode is None

    def set_message_handler(self, handler: MessageHandler) -> None:
        self._on_message = handler

    def attach(self, writer: ByteWriter) -> None:
        """Use an already-open writer instead of spawning a process."""
        self._writer = writer

    async def start(self, command: str, args: list[str]) -> None:
        if self.is_running:
            logger.warning("Language server already running (pid={})", self._proc.pid)
            return
        argv = [command, *args]
        logger.info("Starting language server: {}", " ".join(argv))
        try:
            self._proc = await asyncio.create_subprocess_exec(
                *argv,
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as exc:
            raise ProcessError(f"cannot start language server: {exc}", argv) from exc
        if not self._proc.stdin or not self._proc.stdout or not self._proc.stderr:
            raise ProcessError("language server stdio is unavailable", argv)
        self._writer = self._proc.stdin
        self._tasks = [
            asyncio.create_task(self._pump_stdout(self._proc.stdout), name="lsp-stdout"),
            asyncio.create_task(self._pump_stderr(self._proc.stderr), name="lsp-stderr"),
        ]
        self._recorder.record("start", " ".join(argv))

    def send(self, message: dict[str, Any]) -> None:
        if self._writer is None:
            raise ProcessError("transport is not started")
        frame = encode_frame(message)
        self._recorder.record("send", frame.split(b"\r\n\r\n", 1)[1].decode("utf-8"))
        self._writer.write(frame)

    def on_data(self, chunk: bytes) -> None:
        self._recorder.record("recv", chunk.decode("utf-8", errors="replace").strip())
        for message in self._decoder.feed(chunk):
            if self._on_message is None:
                logger.debug("Dropping message, no handler attached: {}", message.get("method") or message.get("id"))
                continue
            try:
                self._on_message(message)
            except Exception:
                logger.exception("Failed to handle message from language server")

    def _report_parse_error(self, exc: TransportParseError) -> None:
        self._recorder.record("error", f"parse error: {exc.message}")
        if self._on_parse_error is not None:
            self._on_parse_error(exc)
        else:
            logger.warning("Parse error: {}", exc.message)

    async def _pump_stdout(self, stream: asyncio.StreamReader) -> None:
        while True:
            chunk = await stream.read(READ_CHUNK_SIZE)
            if not chunk:
                break
            self.on_data(chunk)
        logger.debug("Language server stdout closed")

    async def _pump_stderr(self, stream: asyncio.StreamReader) -> None:
        # Chunked reads: a line longer than the StreamReader limit must not stop the drain.
        partial = b""
        while True:
            chunk = await stream.read(READ_CHUNK_SIZE)
            if not chunk:
                break
            *lines, partial = (partial + chunk).split(b"\n")
            if len(partial) >= READ_CHUNK_SIZE:
                lines.append(partial)
                partial = b""
            for line in lines:
                self._report_stderr(line)
        self._report_stderr(partial)

    def _report_stderr(self, line: bytes) -> None:
        text = line.decode("utf-8", errors="replace").strip()
        if text:
            logger.warning("[sonarlint] {}", text)
            self._recorder.record("error", text)

    async def close(self) -> None:
        """Terminate the process if it is still alive and stop the pump tasks."""
        proc = self._proc
        if proc is not None:
            if proc.stdin is not None and not proc.stdin.is_closing():
                proc.stdin.close()
            if proc.returncode is None:
                try:
                    proc.terminate()
                    await asyncio.wait_for(proc.wait(), timeout=TERMINATE_TIMEOUT_SECONDS)
                except ProcessLookupError:
                    pass
                except asyncio.TimeoutError:
                    logger.warning("Language server ignored terminate, killing pid {}", proc.pid)
                    proc.kill()
                    await proc.wait()
            self._recorder.record("stop", f"exit code {proc.returncode}")
        for task in self._tasks:
            task.cancel()
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks = []
        self._proc = None
        self._writer = None
        self._decoder.reset()
