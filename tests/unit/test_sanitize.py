# SPDX-FileCopyrightText: 2026 The Resmap Authors
# SPDX-License-Identifier: Apache-2.0

"""Tests for UTF-8 sanitization."""

from __future__ import annotations

import pytest

from resmap.mapping.sanitize import sanitize_utf8


class TestSanitizeUTF8:
    @pytest.mark.parametrize("value", ["", "us-central1", "日本語", "emoji \U0001f600"])
    def test_valid_text_unchanged(self, value):
        assert sanitize_utf8(value) == value

    def test_invalid_bytes_replaced(self):
        assert sanitize_utf8(b"abc\xffdef") == "abc�def"

    def test_valid_bytes_decoded(self):
        assert sanitize_utf8("zürich".encode("utf-8")) == "zürich"

    def test_lone_surrogate_replaced(self):
        result = sanitize_utf8("bad\udcffvalue")
        assert result.startswith("bad")
        assert result.endswith("value")
        assert "�" in result
        result.encode("utf-8")

    @pytest.mark.parametrize("value", ["plain", "bad\ud800", b"\xc3\x28", "�"])
    def test_idempotent(self, value):
        once = sanitize_utf8(value)
        assert sanitize_utf8(once) == once
