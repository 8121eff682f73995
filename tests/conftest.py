"""
Shared test fixtures and configuration for entire test suite.

Provides: in-memory record store, completion settings, fake chat models,
recording envelope sink, generated PDF bytes, and a TestClient wired to stub
services.
Dependencies: pytest, fastapi, langchain_core
System role: Test infrastructure and fixture management
"""

from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient
from langchain_core.language_models.fake_chat_models import FakeListChatModel

from docchat.api.deps import ServiceCache
from docchat.api.main import create_app
from docchat.boundary.store import InMemoryRecordStore
from docchat.configs import Settings
from docchat.configs.completion import CompletionSettings
from docchat.core.completion import CompletionClient
from docchat.models.document import NewDocument
from docchat.models.streaming import Envelope


def build_pdf(pages: list[str]) -> bytes:
    """
    Build a minimal valid PDF with one line of Helvetica text per page.

    Args:
        pages: Text for each page

    Returns:
        bytes: PDF file content with a correct xref table
    """
    font_obj = 3 + 2 * len(pages)
    objects: list[bytes] = []
    kids = " ".join(f"{3 + 2 * i} 0 R" for i in range(len(pages)))
    objects.append(b"<< /Type /Catalog /Pages 2 0 R >>")
    objects.append(f"<< /Type /Pages /Kids [{kids}] /Count {len(pages)} >>".encode())
    for i, text in enumerate(pages):
        content_obj = 4 + 2 * i
        objects.append(
            (
                f"<< /Type /Page /Parent 2 0 R /MediaBox [0 0 612 792] "
                f"/Resources << /Font << /F1 {font_obj} 0 R >> >> /Contents {content_obj} 0 R >>"
            ).encode()
        )
        stream = f"BT /F1 24 Tf 72 700 Td ({text}) Tj ET".encode()
        objects.append(b"<< /Length %d >>\nstream\n" % len(stream) + stream + b"\nendstream")
    objects.append(b"<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica >>")

    out = bytearray(b"%PDF-1.4\n")
    offsets = []
    for number, body in enumerate(objects, start=1):
        offsets.append(len(out))
        out += f"{number} 0 obj\n".encode() + body + b"\nendobj\n"
    xref_offset = len(out)
    out += f"xref\n0 {len(objects) + 1}\n".encode()
    out += b"0000000000 65535 f \n"
    for offset in offsets:
        out += f"{offset:010d} 00000 n \n".encode()
    out += f"trailer\n<< /Size {len(objects) + 1} /Root 1 0 R >>\nstartxref\n{xref_offset}\n%%EOF\n".encode()
    return bytes(out)


class RecordingSink:
    """EnvelopeSink that records everything sent to it."""

    def __init__(self, alive: bool = True) -> None:
        self.alive = alive
        self.envelopes: list[Envelope] = []

    async def send(self, envelope: Envelope) -> bool:
        if not self.alive:
            return False
        self.envelopes.append(envelope)
        return True

    @property
    def types(self) -> list[str]:
        return [e.type.value for e in self.envelopes]


@pytest.fixture
def sample_pdf_bytes() -> bytes:
    """Two-page PDF containing 'Hello world'."""
    return build_pdf(["Hello world", "Second page"])


@pytest.fixture
def completion_settings() -> CompletionSettings:
    """Completion settings with a dummy API key."""
    return CompletionSettings(api_key="test-key", history_window=10)


@pytest.fixture
def fake_chat_model() -> FakeListChatModel:
    """Chat model that always answers with canned text."""
    return FakeListChatModel(responses=["This document says hello to the world."])


@pytest.fixture
def failing_chat_model() -> MagicMock:
    """Chat model whose every call fails like a backend outage."""
    model = MagicMock()
    model.ainvoke = AsyncMock(side_effect=RuntimeError("503 Service Unavailable"))
    return model


@pytest.fixture
def completion_client(
    completion_settings: CompletionSettings, fake_chat_model: FakeListChatModel
) -> CompletionClient:
    """Completion client backed by the fake chat model."""
    return CompletionClient(completion_settings, model=fake_chat_model)


@pytest.fixture
def store() -> InMemoryRecordStore:
    """Fresh in-memory record store."""
    return InMemoryRecordStore()


@pytest.fixture
def new_document() -> NewDocument:
    """Fields for a small test document."""
    return NewDocument(
        title="sample",
        filename="sample.pdf",
        content="Hello world",
        size=1024,
        page_count=2,
    )


@pytest.fixture
def recording_sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def services(store: InMemoryRecordStore, completion_client: CompletionClient) -> ServiceCache:
    """Service container using the fake completion backend."""
    settings = Settings(completion=CompletionSettings(api_key="test-key"))
    return ServiceCache(settings=settings, store=store, completion_client=completion_client)


@pytest.fixture
def client(services: ServiceCache):
    """TestClient with lifespan running against stub services."""
    app = create_app(services=services)
    with TestClient(app) as test_client:
        yield test_client
