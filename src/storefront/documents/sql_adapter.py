"""SQLAlchemy document store — records as JSON rows with a version column.

Conditional updates are a single ``UPDATE ... WHERE version = :current``;
a zero row count means another writer got there first.
"""

from pathlib import Path

import structlog
from sqlalchemy import JSON, Column, Integer, MetaData, String, Table, create_engine, select, update
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from storefront.documents.port import DocumentStore
from storefront.exceptions import DocumentExists, DocumentNotFound, DocumentStoreError, VersionConflict

logger = structlog.get_logger(__name__)

metadata = MetaData()

documents = Table(
    "documents",
    metadata,
    Column("collection", String(100), primary_key=True),
    Column("key", String(255), primary_key=True),
    Column("body", JSON, nullable=False),
    Column("version", Integer, nullable=False),
)


def _ensure_sqlite_directory(url: str) -> None:
    parsed = make_url(url)
    if parsed.get_backend_name() == "sqlite" and parsed.database and parsed.database != ":memory:":
        Path(parsed.database).parent.mkdir(parents=True, exist_ok=True)


class SqlDocumentStore(DocumentStore):
    """Document store backed by one SQL table."""

    def __init__(self, engine: Engine | str) -> None:
        if isinstance(engine, str):
            _ensure_sqlite_directory(engine)
            engine = create_engine(engine)
        self.engine = engine
        metadata.create_all(self.engine)

    def _where(self, collection: str, key: str):
        return (documents.c.collection == collection) & (documents.c.key == key)

    def get(self, collection: str, key: str) -> dict | None:
        try:
            with self.engine.connect() as conn:
                row = conn.execute(
                    select(documents.c.body, documents.c.version).where(self._where(collection, key))
                ).first()
        except SQLAlchemyError as exc:
            raise DocumentStoreError(str(exc)) from exc

        if row is None:
            return None
        return {**row.body, "version": row.version}

    def create(self, collection: str, key: str, record: dict) -> dict:
        body = {name: value for name, value in record.items() if name != "version"}
        try:
            with self.engine.begin() as conn:
                conn.execute(documents.insert().values(collection=collection, key=key, body=body, version=1))
        except IntegrityError as exc:
            raise DocumentExists(collection, key) from exc
        except SQLAlchemyError as exc:
            raise DocumentStoreError(str(exc)) from exc

        return {**body, "version": 1}

    def update(self, collection: str, key: str, patch: dict, expected_version: int | None = None) -> dict:
        patch = {name: value for name, value in patch.items() if name != "version"}
        try:
            with self.engine.begin() as conn:
                row = conn.execute(
                    select(documents.c.body, documents.c.version).where(self._where(collection, key))
                ).first()
                if row is None:
                    raise DocumentNotFound(collection, key)
                if expected_version is not None and row.version != expected_version:
                    raise VersionConflict(collection, key, expected_version, row.version)

                body = {**row.body, **patch}
                result = conn.execute(
                    update(documents)
                    .where(self._where(collection, key) & (documents.c.version == row.version))
                    .values(body=body, version=row.version + 1)
                )
                if result.rowcount == 0:
                    raise VersionConflict(collection, key, row.version, None)
        except SQLAlchemyError as exc:
            raise DocumentStoreError(str(exc)) from exc

        logger.debug("Document updated", collection=collection, key=key, version=row.version + 1)
        return {**body, "version": row.version + 1}
