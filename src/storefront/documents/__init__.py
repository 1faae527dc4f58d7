"""Document store factory.

Provides get_document_store() / set_document_store():
- InMemoryDocumentStore for development and testing
- SqlDocumentStore for a durable order history
"""

from storefront.documents.memory_adapter import InMemoryDocumentStore
from storefront.documents.port import DocumentStore

_current_store: DocumentStore | None = None


def get_document_store() -> DocumentStore:
    """Return the current document store. Defaults to InMemoryDocumentStore."""
    global _current_store
    if _current_store is None:
        _current_store = InMemoryDocumentStore()
    return _current_store


def set_document_store(store: DocumentStore) -> None:
    """Override the active document store (useful for tests)."""
    global _current_store
    _current_store = store


def reset_document_store() -> None:
    """Reset to default document store."""
    global _current_store
    _current_store = None
