"""Tests for SqlCredentialStore (infra/credential_store.py).

Runs against in-memory and on-disk SQLite; no server required.
"""

from __future__ import annotations

import re
from pathlib import Path
from unittest.mock import patch

import pytest
from sqlalchemy.exc import OperationalError

from vidmerge.exceptions import CredentialStoreError
from vidmerge.infra.credential_store import (
    KEY_PREFIX,
    SqlCredentialStore,
    generate_api_key,
)

KEY_PATTERN = re.compile(r"^vpa_[A-Za-z0-9]{32}$")


class TestGenerateApiKey:
    def test_shape(self) -> None:
        key = generate_api_key()
        assert key.startswith(KEY_PREFIX)
        assert KEY_PATTERN.match(key)

    def test_unique(self) -> None:
        assert len({generate_api_key() for _ in range(200)}) == 200


class TestStore:
    def test_insert_and_lookup(self, store: SqlCredentialStore) -> None:
        record = store.insert()
        assert KEY_PATTERN.match(record.key)
        assert record.id is not None
        assert record.created_at.tzinfo is not None

        found = store.lookup(record.key)
        assert found is not None
        assert found.id == record.id
        assert found.key == record.key

    def test_lookup_is_exact(self, store: SqlCredentialStore) -> None:
        record = store.insert()
        assert store.lookup(record.key[:-1]) is None
        assert store.lookup(record.key + "x") is None
        assert store.lookup(f" {record.key}") is None
        assert store.lookup("vpa_missing") is None

    def test_list_newest_first(self, store: SqlCredentialStore) -> None:
        first = store.insert()
        second = store.insert()
        third = store.insert()
        ids = [r.id for r in store.list_all()]
        assert ids == [third.id, second.id, first.id]

    def test_list_empty(self, store: SqlCredentialStore) -> None:
        assert store.list_all() == []

    def test_persists_on_disk(self, tmp_path: Path) -> None:
        url = f"sqlite:///{tmp_path / 'keys.db'}"
        writer = SqlCredentialStore(url)
        writer.open()
        record = writer.insert()
        writer.close()

        reader = SqlCredentialStore(url)
        reader.open()
        try:
            assert reader.lookup(record.key) is not None
        finally:
            reader.close()

    def test_open_is_idempotent(self, store: SqlCredentialStore) -> None:
        record = store.insert()
        store.open()
        assert store.lookup(record.key) is not None


class TestErrors:
    def test_use_before_open(self) -> None:
        with pytest.raises(CredentialStoreError, match="not open"):
            SqlCredentialStore("sqlite://").lookup("x")

    def test_sql_errors_are_mapped(self, store: SqlCredentialStore) -> None:
        error = OperationalError("SELECT", {}, Exception("disk I/O error"))
        with patch("vidmerge.infra.credential_store.Session") as session_cls:
            session_cls.return_value.__enter__.return_value.exec.side_effect = error
            with pytest.raises(CredentialStoreError):
                store.lookup("vpa_x")
            with pytest.raises(CredentialStoreError):
                store.list_all()

    def test_unreachable_database(self, tmp_path: Path) -> None:
        url = f"sqlite:///{tmp_path / 'missing-dir' / 'keys.db'}"
        with pytest.raises(CredentialStoreError):
            SqlCredentialStore(url).open()
