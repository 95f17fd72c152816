"""Tests for download filename helpers (utils/filenames.py)."""

from __future__ import annotations

import pytest

from vidmerge.utils.filenames import ascii_fallback, content_disposition, sanitize_title


class TestSanitizeTitle:
    @pytest.mark.parametrize("char", list('<>:"/\\|?*') + ["\x00", "\x1f", "\n"])
    def test_illegal_characters_replaced(self, char: str) -> None:
        assert sanitize_title(f"a{char}b") == "a_b"

    def test_plain_title_unchanged(self) -> None:
        assert sanitize_title("My Video (2024) - part 1") == "My Video (2024) - part 1"

    def test_length_limit_in_characters(self) -> None:
        assert len(sanitize_title("é" * 300)) == 200

    def test_byte_limit(self) -> None:
        result = sanitize_title("日" * 200, max_bytes=240)
        assert len(result.encode("utf-8")) <= 240
        assert result == "日" * 80


class TestAsciiFallback:
    def test_non_ascii_replaced(self) -> None:
        assert ascii_fallback("café.mp4") == "caf_.mp4"

    def test_ascii_kept(self) -> None:
        assert ascii_fallback("Sample Video.mp4") == "Sample Video.mp4"


class TestContentDisposition:
    def test_ascii_name(self) -> None:
        assert content_disposition("Sample Video.mp4") == (
            "attachment; filename=\"Sample Video.mp4\"; "
            "filename*=UTF-8''Sample%20Video.mp4"
        )

    def test_unicode_name(self) -> None:
        header = content_disposition("日本.mp4")
        assert 'filename="__.mp4"' in header
        assert "filename*=UTF-8''%E6%97%A5%E6%9C%AC.mp4" in header

    def test_header_is_latin1_safe(self) -> None:
        content_disposition("🎬 clip ünïcode.mp4").encode("latin-1")

    def test_reserved_characters_escaped(self) -> None:
        header = content_disposition("a'b(c).mp4")
        assert "filename*=UTF-8''a%27b%28c%29.mp4" in header
