"""
Dependency injection container.

Builds the shared service instances once per application and exposes them
as FastAPI dependencies.

Dependencies: docchat.configs, docchat.application, docchat.boundary, docchat.core
System role: DI container for service injection
"""

from fastapi import Depends
from starlette.requests import HTTPConnection

from docchat.application.services import DocumentService, SessionManager
from docchat.boundary.pdf import PDFExtractor
from docchat.boundary.store import InMemoryRecordStore, RecordStore
from docchat.configs import Settings, get_settings
from docchat.core.completion import CompletionClient


class ServiceCache:
    """
    Container for the shared service instances.

    One instance is attached to ``app.state.services`` at startup; every
    request handler and WebSocket connection resolves services through it.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        store: RecordStore | None = None,
        completion_client: CompletionClient | None = None,
        pdf_extractor: PDFExtractor | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._store = store
        self._completion_client = completion_client
        self._pdf_extractor = pdf_extractor
        self._session_manager: SessionManager | None = None
        self._document_service: DocumentService | None = None

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def store(self) -> RecordStore:
        """Get the shared record store."""
        if self._store is None:
            self._store = InMemoryRecordStore()
        return self._store

    @property
    def completion_client(self) -> CompletionClient:
        """Get cached completion client."""
        if self._completion_client is None:
            self._completion_client = CompletionClient(self._settings.completion)
        return self._completion_client

    @property
    def pdf_extractor(self) -> PDFExtractor:
        if self._pdf_extractor is None:
            self._pdf_extractor = PDFExtractor()
        return self._pdf_extractor

    @property
    def session_manager(self) -> SessionManager:
        """Get cached session manager."""
        if self._session_manager is None:
            self._session_manager = SessionManager(
                store=self.store,
                completion_client=self.completion_client,
            )
        return self._session_manager

    @property
    def document_service(self) -> DocumentService:
        """Get cached document service."""
        if self._document_service is None:
            self._document_service = DocumentService(
                store=self.store,
                extractor=self.pdf_extractor,
                upload_settings=self._settings.uploads,
            )
        return self._document_service

    def clear(self) -> None:
        """Drop derived services. The store is kept so data survives."""
        self._session_manager = None
        self._document_service = None


def get_service_cache(connection: HTTPConnection) -> ServiceCache:
    """Get the service container attached to the running app."""
    return connection.app.state.services


def get_document_service(
    services: ServiceCache = Depends(get_service_cache),
) -> DocumentService:
    """Get document service instance."""
    return services.document_service


def get_session_manager(
    services: ServiceCache = Depends(get_service_cache),
) -> SessionManager:
    """Get session manager instance."""
    return services.session_manager
