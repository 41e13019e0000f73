"""Tests for local CV storage, slugs and filename helpers."""

import pytest

from core.storage.local import LocalStorage, generate_cv_filename
from core.utils.formatting import slugify
from core.utils.validators import (
    file_extension,
    sanitize_filename,
    validate_email,
    validate_phone,
)


class TestLocalStorage:

    @pytest.fixture
    def storage(self, tmp_path):
        return LocalStorage(str(tmp_path / "job_cv"))

    def test_save_returns_relative_path(self, storage):
        path = storage.save(b"%PDF-1.4", "a.pdf")

        assert path == "a.pdf"
        assert storage.get_path(path).read_bytes() == b"%PDF-1.4"

    def test_save_creates_parent_directories(self, storage):
        path = storage.save(b"data", "2026/b.docx")
        assert storage.get_path(path).is_file()

    def test_delete(self, storage):
        path = storage.save(b"data", "c.doc")

        assert storage.delete(path) is True
        assert not storage.get_path(path).is_file()

    def test_delete_missing_file(self, storage):
        assert storage.delete("missing.pdf") is False

    def test_path_traversal_rejected(self, storage):
        with pytest.raises(ValueError):
            storage.get_path("../outside.pdf")


class TestCVFilenames:

    def test_keeps_lowercased_extension(self):
        name = generate_cv_filename("My Resume.PDF")
        stem, ext = name.rsplit(".", 1)

        assert ext == "pdf"
        assert len(stem) == 32

    def test_unique(self):
        assert generate_cv_filename("a.pdf") != generate_cv_filename("a.pdf")

    def test_no_extension(self):
        assert "." not in generate_cv_filename("resume")

    @pytest.mark.parametrize("filename,expected", [
        ("cv.docx", "docx"),
        ("../../etc/passwd", ""),
        ("archive.tar.gz", "gz"),
        (None, ""),
        ("", ""),
    ])
    def test_file_extension(self, filename, expected):
        assert file_extension(filename) == expected

    def test_sanitize_filename_drops_directories(self):
        assert sanitize_filename("C:\\Users\\ada\\my cv.pdf") == "my_cv.pdf"


class TestSlugify:

    @pytest.mark.parametrize("title,expected", [
        ("Backend Engineer", "backend-engineer"),
        ("  Senior C++ / Rust Developer!! ", "senior-c-rust-developer"),
        ("data_engineer", "data-engineer"),
        ("!!!", "job"),
    ])
    def test_slugify(self, title, expected):
        assert slugify(title) == expected

    def test_length_capped(self):
        assert len(slugify("a" * 500)) <= 280


class TestContactValidators:

    def test_valid_email(self):
        valid, normalized = validate_email("Ada@Example.com")
        assert valid is True
        assert normalized.endswith("@example.com")

    def test_invalid_email(self):
        valid, _ = validate_email("not-an-email")
        assert valid is False

    @pytest.mark.parametrize("phone,expected", [
        ("+44 20 7946 0958", True),
        ("(555) 123-4567", True),
        ("12345", False),
        ("call me", False),
    ])
    def test_phone(self, phone, expected):
        assert validate_phone(phone)[0] is expected
