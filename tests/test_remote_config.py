"""Tests for fetching configs from GitHub."""

from unittest.mock import MagicMock, patch
from urllib.error import HTTPError, URLError

import pytest

from wezconf.core.remote_config import (
    FETCH_FAILED, MAX_CONFIG_BYTES, UNSUPPORTED_URL, fetch_config_text,
    to_raw_github_url,
)

BLOB_URL = "https://github.com/wez/dotfiles/blob/main/.wezterm.lua"
RAW_URL = "https://raw.githubusercontent.com/wez/dotfiles/main/.wezterm.lua"


class TestRawUrl:

    def test_blob_rewritten(self):
        assert to_raw_github_url(BLOB_URL) == RAW_URL

    def test_nested_path(self):
        url = "https://github.com/a/b/blob/v1.2/config/wezterm/wezterm.lua"
        assert to_raw_github_url(url) == (
            "https://raw.githubusercontent.com/a/b/v1.2/config/wezterm/wezterm.lua"
        )

    def test_raw_passthrough(self):
        assert to_raw_github_url(f"  {RAW_URL} ") == RAW_URL

    @pytest.mark.parametrize("url", [
        "https://gitlab.com/a/b/-/raw/main/wezterm.lua",
        "https://github.com/a/b",
        "file:///etc/passwd",
        "",
    ])
    def test_unsupported(self, url):
        assert to_raw_github_url(url) is None


class TestFetch:

    def test_success(self):
        opener = MagicMock(return_value=b"config.font_size = 14\n")
        result = fetch_config_text(BLOB_URL, timeout=3, opener=opener)

        assert result.success is True
        assert result.text == "config.font_size = 14\n"
        assert result.url == RAW_URL
        opener.assert_called_once_with(RAW_URL, 3)

    def test_unsupported_url_not_fetched(self):
        opener = MagicMock()
        result = fetch_config_text("https://example.com/wezterm.lua", opener=opener)
        assert result.success is False
        assert result.error == UNSUPPORTED_URL
        opener.assert_not_called()

    def test_http_error(self):
        opener = MagicMock(side_effect=HTTPError(RAW_URL, 404, "Not Found", {}, None))
        result = fetch_config_text(RAW_URL, opener=opener)
        assert result.success is False
        assert result.error == f"{FETCH_FAILED} (HTTP 404)"

    def test_network_error(self):
        opener = MagicMock(side_effect=URLError("no route"))
        result = fetch_config_text(RAW_URL, opener=opener)
        assert result.success is False
        assert result.error == FETCH_FAILED

    def test_timeout(self):
        opener = MagicMock(side_effect=TimeoutError("timed out"))
        assert fetch_config_text(RAW_URL, opener=opener).error == FETCH_FAILED

    def test_too_large(self):
        opener = MagicMock(return_value=b"x" * (MAX_CONFIG_BYTES + 1))
        result = fetch_config_text(RAW_URL, opener=opener)
        assert result.success is False
        assert "too large" in result.error

    def test_invalid_utf8_replaced(self):
        opener = MagicMock(return_value=b"config.term = '\xff'")
        result = fetch_config_text(RAW_URL, opener=opener)
        assert result.success is True
        assert "�" in result.text

    @patch("wezconf.core.remote_config.urlopen")
    def test_default_opener(self, mock_urlopen):
        response = MagicMock()
        response.read.return_value = b"return {}"
        mock_urlopen.return_value.__enter__.return_value = response

        result = fetch_config_text(BLOB_URL, timeout=5)

        assert result.text == "return {}"
        request = mock_urlopen.call_args[0][0]
        assert request.full_url == RAW_URL
        assert mock_urlopen.call_args[1]["timeout"] == 5
