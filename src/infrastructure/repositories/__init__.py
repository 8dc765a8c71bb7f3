from src.infrastructure.repositories.documents import SqlDocumentStore

__all__ = ["SqlDocumentStore"]
