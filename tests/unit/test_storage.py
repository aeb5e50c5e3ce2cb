"""Unit tests for the local filesystem template storage."""

import asyncio
from pathlib import Path

import pytest

from docgen.interfaces.storage import StorageError, TemplateNotFoundError
from docgen.strategies.storage import LocalFileStorage


class TestLocalFileStorage:
    """Test suite for LocalFileStorage."""

    @pytest.fixture
    def storage(self, tmp_path):
        return LocalFileStorage(tmp_path)

    def test_put_then_get(self, storage):
        stored = asyncio.run(storage.put("default", "invoice.docx", b"PK-content"))

        assert stored.id == "invoice.docx"
        assert stored.name == "invoice"
        assert stored.engine == "word"
        assert asyncio.run(storage.get("default", "invoice.docx")) == b"PK-content"

    def test_put_with_display_name(self, storage):
        stored = asyncio.run(storage.put("default", "q.docx", b"x", name="Quarterly report"))

        assert stored.name == "Quarterly report"

    def test_get_missing(self, storage):
        with pytest.raises(TemplateNotFoundError) as exc_info:
            asyncio.run(storage.get("default", "x.docx"))

        assert exc_info.value.template_id == "x.docx"

    def test_list_only_docx_sorted(self, storage, tmp_path):
        """Test that listing returns .docx files only, sorted by id."""
        (tmp_path / "b.docx").write_bytes(b"b")
        (tmp_path / "a.docx").write_bytes(b"a")
        (tmp_path / "notes.txt").write_text("ignore me")
        (tmp_path / "folder.docx").mkdir()

        templates = asyncio.run(storage.list("default"))

        assert [t.id for t in templates] == ["a.docx", "b.docx"]
        assert [t.name for t in templates] == ["a", "b"]
        assert templates[0].created_at is not None

    def test_list_missing_directory(self, tmp_path):
        storage = LocalFileStorage(tmp_path / "absent")

        assert asyncio.run(storage.list("default")) == []

    def test_read_failure_is_raised_not_logged(self, storage, monkeypatch, caplog):
        """Test that I/O failures surface as StorageError for the caller to log."""
        asyncio.run(storage.put("default", "a.docx", b"x"))

        def failing_read(path):
            raise OSError("disk failure")

        monkeypatch.setattr(Path, "read_bytes", failing_read)

        with caplog.at_level("ERROR"), pytest.raises(StorageError, match="disk failure"):
            asyncio.run(storage.get("default", "a.docx"))
        assert not [record for record in caplog.records if record.levelname == "ERROR"]

    def test_delete(self, storage):
        asyncio.run(storage.put("default", "old.docx", b"x"))

        asyncio.run(storage.delete("default", "old.docx"))

        assert asyncio.run(storage.exists("default", "old.docx")) is False

    def test_delete_missing(self, storage):
        with pytest.raises(TemplateNotFoundError):
            asyncio.run(storage.delete("default", "ghost.docx"))

    def test_exists(self, storage):
        asyncio.run(storage.put("default", "here.docx", b"x"))

        assert asyncio.run(storage.exists("default", "here.docx")) is True
        assert asyncio.run(storage.exists("default", "there.docx")) is False

    # =========================================================================
    # Isolation Tests
    # =========================================================================

    @pytest.mark.parametrize("template_id", ["../secret.docx", "a/../../secret.docx", "", "."])
    def test_ids_escaping_root_are_not_found(self, tmp_path, template_id):
        """Test that path traversal never reaches files outside the root."""
        root = tmp_path / "root"
        root.mkdir()
        (tmp_path / "secret.docx").write_bytes(b"secret")
        storage = LocalFileStorage(root)

        with pytest.raises(TemplateNotFoundError):
            asyncio.run(storage.get("default", template_id))
        assert asyncio.run(storage.exists("default", template_id)) is False

    def test_multi_tenant_separates_organizations(self, tmp_path):
        storage = LocalFileStorage(tmp_path, multi_tenant=True)
        asyncio.run(storage.put("acme", "t.docx", b"acme"))

        assert (tmp_path / "acme" / "t.docx").read_bytes() == b"acme"
        assert asyncio.run(storage.list("globex")) == []
        with pytest.raises(TemplateNotFoundError):
            asyncio.run(storage.get("globex", "t.docx"))

    def test_multi_tenant_rejects_escaping_org(self, tmp_path):
        (tmp_path / "t.docx").write_bytes(b"x")
        storage = LocalFileStorage(tmp_path / "tenants", multi_tenant=True)

        with pytest.raises(TemplateNotFoundError):
            asyncio.run(storage.get("..", "t.docx"))
        with pytest.raises(TemplateNotFoundError):
            asyncio.run(storage.put("..", "u.docx", b"y"))
        with pytest.raises(TemplateNotFoundError):
            asyncio.run(storage.delete("..", "t.docx"))
        assert asyncio.run(storage.list("..")) == []
        assert (tmp_path / "t.docx").read_bytes() == b"x"
        assert not (tmp_path / "u.docx").exists()
