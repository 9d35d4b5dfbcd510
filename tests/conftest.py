"""Pytest hooks and fixtures."""

import os

import pytest
from loguru import logger

from sonarscan.lsp.framing import FrameDecoder
from sonarscan.lsp.recorder import MemoryRecorder
from sonarscan.lsp.registry import DispatchRegistry
from sonarscan.lsp.session import RpcSession
from sonarscan.lsp.transport import FramedTransport


def pytest_configure(config):
    """Register custom markers (also in pyproject.toml)."""
    config.addinivalue_line(
        "markers",
        "subprocess: spawns a fake language server process (skipped when SONARSCAN_NO_SUBPROCESS=1)",
    )


def pytest_collection_modifyitems(config, items):
    """Skip subprocess tests when the environment cannot spawn processes."""
    if os.environ.get("SONARSCAN_NO_SUBPROCESS") != "1":
        return
    skip = pytest.mark.skip(reason="Subprocess tests disabled")
    for item in items:
        if "subprocess" in item.keywords:
            item.add_marker(skip)


class FakeWriter:
    """Collects written frames and decodes them back into messages."""

    def __init__(self):
        self.frames: list[bytes] = []

    def write(self, data: bytes) -> None:
        self.frames.append(bytes(data))

    def messages(self) -> list[dict]:
        decoder = FrameDecoder()
        out: list[dict] = []
        for frame in self.frames:
            out.extend(decoder.feed(frame))
        return out

    def clear(self) -> None:
        self.frames.clear()


@pytest.fixture(autouse=True)
def _library_logging_enabled():
    """CLI tests disable library logging globally; turn it back on afterwards."""
    yield
    logger.enable("sonarscan")


@pytest.fixture
def writer() -> FakeWriter:
    return FakeWriter()


@pytest.fixture
def recorder() -> MemoryRecorder:
    return MemoryRecorder()


@pytest.fixture
def transport(writer, recorder) -> FramedTransport:
    t = FramedTransport(recorder=recorder)
    t.attach(writer)
    return t


@pytest.fixture
def registry() -> DispatchRegistry:
    return DispatchRegistry()


@pytest.fixture
def session(transport, registry) -> RpcSession:
    return RpcSession(transport, registry)
