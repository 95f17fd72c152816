"""SQL-backed implementation of :class:`~vidmerge.core.protocols.CredentialStore`.

Keys live in a single ``api_keys`` table managed through SQLModel.  All
SQLAlchemy errors are mapped to
:class:`~vidmerge.exceptions.CredentialStoreError` before leaving this
module.
"""

from __future__ import annotations

import logging
import secrets
import string
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import StaticPool
from sqlmodel import Field, Session, SQLModel, col, create_engine, select

from vidmerge.core.models import CredentialRecord
from vidmerge.exceptions import CredentialStoreError

logger = logging.getLogger(__name__)

KEY_PREFIX: str = "vpa_"
KEY_LENGTH: int = 32
_KEY_ALPHABET: str = string.ascii_letters + string.digits


def generate_api_key() -> str:
    """Return a fresh ``vpa_``-prefixed key from a CSPRNG."""
    return KEY_PREFIX + "".join(
        secrets.choice(_KEY_ALPHABET) for _ in range(KEY_LENGTH)
    )


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ApiKey(SQLModel, table=True):
    __tablename__ = "api_keys"

    id: Optional[int] = Field(default=None, primary_key=True)
    key: str = Field(unique=True, index=True, max_length=64)
    created_at: datetime = Field(default_factory=_utcnow)


class SqlCredentialStore:
    """Credential store over any SQLAlchemy-supported database.

    Parameters
    ----------
    database_url:
        SQLAlchemy connection URL.  ``sqlite://`` (no path) yields a
        private in-memory database shared across threads, handy in tests.
    """

    def __init__(self, database_url: str) -> None:
        self._database_url: str = database_url
        self._engine = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def open(self) -> None:
        """Create the engine and make sure the schema exists."""
        if self._engine is not None:
            return
        kwargs: dict = {}
        if self._database_url.startswith("sqlite"):
            # Requests are served from a thread pool.
            kwargs["connect_args"] = {"check_same_thread": False}
            if self._database_url in ("sqlite://", "sqlite:///:memory:"):
                kwargs["poolclass"] = StaticPool
        try:
            self._engine = create_engine(self._database_url, **kwargs)
            SQLModel.metadata.create_all(self._engine)
        except SQLAlchemyError as exc:
            self._engine = None
            raise CredentialStoreError(
                f"Could not open credential store: {exc}",
                hint="Check DATABASE_URL.",
            ) from exc
        logger.info("Credential store ready", extra={"database": self._safe_url()})

    def close(self) -> None:
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None

    # ------------------------------------------------------------------
    # CredentialStore protocol
    # ------------------------------------------------------------------

    def lookup(self, token: str) -> CredentialRecord | None:
        statement = select(ApiKey).where(ApiKey.key == token)
        try:
            with Session(self._require_engine()) as db_session:
                row = db_session.exec(statement).first()
        except SQLAlchemyError as exc:
            raise CredentialStoreError(f"Key lookup failed: {exc}") from exc
        return _to_record(row) if row is not None else None

    def insert(self) -> CredentialRecord:
        row = ApiKey(key=generate_api_key())
        try:
            with Session(self._require_engine()) as db_session:
                db_session.add(row)
                db_session.commit()
                db_session.refresh(row)
                record = _to_record(row)
        except SQLAlchemyError as exc:
            raise CredentialStoreError(f"Key insert failed: {exc}") from exc
        logger.info("API key issued", extra={"key_id": record.id})
        return record

    def list_all(self) -> list[CredentialRecord]:
        statement = select(ApiKey).order_by(
            col(ApiKey.created_at).desc(), col(ApiKey.id).desc(),
        )
        try:
            with Session(self._require_engine()) as db_session:
                rows = db_session.exec(statement).all()
        except SQLAlchemyError as exc:
            raise CredentialStoreError(f"Key listing failed: {exc}") from exc
        return [_to_record(row) for row in rows]

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _require_engine(self):
        if self._engine is None:
            raise CredentialStoreError("Credential store is not open")
        return self._engine

    def _safe_url(self) -> str:
        """Connection URL with any password masked."""
        return self._engine.url.render_as_string(hide_password=True)


def _to_record(row: ApiKey) -> CredentialRecord:
    created_at = row.created_at
    if created_at.tzinfo is None:
        # SQLite hands back naive datetimes; they were stored as UTC.
        created_at = created_at.replace(tzinfo=timezone.utc)
    return CredentialRecord(id=row.id, key=row.key, created_at=created_at)
