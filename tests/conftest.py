"""Pytest configuration and shared fixtures."""

import asyncio
import io
import os
from collections.abc import AsyncGenerator, Callable
from typing import Dict, List, Union

# Must be set before the app and its limiter are imported
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from PIL import Image

from app.api.dependencies import get_ocr_engine
from app.infrastructure.ocr_engines.base_engine import BaseOCREngine, RecognitionOutcome
from app.main import app

Scripted = Union[RecognitionOutcome, Exception]


class FakeEngine(BaseOCREngine):
    """Recognition provider scripted per image payload."""

    def __init__(self) -> None:
        self.outcomes: Dict[bytes, Scripted] = {}
        self.delays: Dict[bytes, float] = {}
        self.default: Scripted = RecognitionOutcome(full_text="", annotation_tree=None)
        self.calls: List[bytes] = []
        self.in_flight = 0
        self.max_in_flight = 0

    def script(self, image_bytes: bytes, outcome: Scripted, delay: float = 0.0) -> None:
        self.outcomes[image_bytes] = outcome
        self.delays[image_bytes] = delay

    def initialize(self) -> None:
        pass

    async def recognize(self, image_bytes: bytes) -> RecognitionOutcome:
        self.calls.append(image_bytes)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delays.get(image_bytes, 0.0))
        finally:
            self.in_flight -= 1

        result = self.outcomes.get(image_bytes, self.default)
        if isinstance(result, Exception):
            raise result
        return result

    def is_available(self) -> bool:
        return True


@pytest.fixture
def fake_engine() -> FakeEngine:
    """Fresh scripted provider."""
    return FakeEngine()


@pytest.fixture
def image_factory() -> Callable[..., bytes]:
    """Build small encoded images; different colors give different bytes."""

    def _make(color: tuple = (255, 255, 255), fmt: str = "PNG", size: tuple = (8, 8)) -> bytes:
        buffer = io.BytesIO()
        mode = "P" if fmt == "GIF" else "RGB"
        Image.new("RGB", size, color).convert(mode).save(buffer, format=fmt)
        return buffer.getvalue()

    return _make


@pytest_asyncio.fixture
async def client(fake_engine: FakeEngine) -> AsyncGenerator[AsyncClient, None]:
    """Async test client with the provider replaced by the fake engine.

    Yields:
        Configured AsyncClient for testing.
    """
    app.dependency_overrides[get_ocr_engine] = lambda: fake_engine
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
