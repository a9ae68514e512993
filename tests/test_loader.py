from unittest.mock import MagicMock, patch

import pytest
import requests

from helix_endpoints.loader import (
    DocumentCacheError,
    DocumentFetchError,
    fetch_document,
    load_document,
    parse_document,
)


def _response(text: str) -> MagicMock:
    resp = MagicMock()
    resp.text = text
    resp.headers = {"content-type": "text/html; charset=utf-8"}
    resp.raise_for_status.return_value = None
    return resp


def _raw_response(content: bytes, content_type: str) -> requests.Response:
    """A real Response decoded the way requests.get would set it up."""
    resp = requests.Response()
    resp.status_code = 200
    resp._content = content
    resp.headers["Content-Type"] = content_type
    resp.encoding = requests.utils.get_encoding_from_headers(resp.headers)
    return resp


class TestFetchDocument:
    @patch("helix_endpoints.loader.requests.get")
    def test_returns_text(self, mock_get):
        mock_get.return_value = _response("<html></html>")
        assert fetch_document("https://example.test/ref", timeout=5) == "<html></html>"
        mock_get.assert_called_once_with("https://example.test/ref", timeout=5)

    @patch("helix_endpoints.loader.requests.get")
    def test_http_error_is_wrapped(self, mock_get):
        resp = _response("")
        resp.raise_for_status.side_effect = requests.HTTPError("503 Server Error")
        mock_get.return_value = resp
        with pytest.raises(DocumentFetchError, match="503"):
            fetch_document("https://example.test/ref")

    @patch("helix_endpoints.loader.requests.get")
    def test_connection_error_is_wrapped(self, mock_get):
        mock_get.side_effect = requests.ConnectionError("refused")
        with pytest.raises(DocumentFetchError):
            fetch_document("https://example.test/ref")

    @patch("helix_endpoints.loader.requests.get")
    def test_html_without_charset_decodes_as_utf8(self, mock_get):
        mock_get.return_value = _raw_response("<p>“quoted”</p>".encode("utf-8"), "text/html")
        assert fetch_document("https://example.test/ref") == "<p>“quoted”</p>"

    @patch("helix_endpoints.loader.requests.get")
    def test_declared_charset_is_kept(self, mock_get):
        mock_get.return_value = _raw_response(b"caf\xe9", "text/html; charset=ISO-8859-1")
        assert fetch_document("https://example.test/ref") == "café"


class TestLoadDocument:
    @patch("helix_endpoints.loader.requests.get")
    def test_fetches_and_caches_when_missing(self, mock_get, tmp_path):
        mock_get.return_value = _response("<html>fresh</html>")
        cache = tmp_path / "cache" / "reference.html"

        html = load_document("https://example.test/ref", cache_path=cache)

        assert html == "<html>fresh</html>"
        assert cache.read_text(encoding="utf-8") == "<html>fresh</html>"

    @patch("helix_endpoints.loader.requests.get")
    def test_uses_cache_when_present(self, mock_get, tmp_path):
        cache = tmp_path / "reference.html"
        cache.write_text("<html>cached</html>", encoding="utf-8")

        assert load_document("https://example.test/ref", cache_path=cache) == "<html>cached</html>"
        mock_get.assert_not_called()

    @patch("helix_endpoints.loader.requests.get")
    def test_refresh_overwrites_cache(self, mock_get, tmp_path):
        cache = tmp_path / "reference.html"
        cache.write_text("<html>old</html>", encoding="utf-8")
        mock_get.return_value = _response("<html>new</html>")

        assert load_document("https://example.test/ref", cache_path=cache, refresh=True) == "<html>new</html>"
        assert cache.read_text(encoding="utf-8") == "<html>new</html>"

    @patch("helix_endpoints.loader.requests.get")
    def test_failed_fetch_leaves_no_cache(self, mock_get, tmp_path):
        mock_get.side_effect = requests.Timeout("timed out")
        cache = tmp_path / "reference.html"
        with pytest.raises(DocumentFetchError):
            load_document("https://example.test/ref", cache_path=cache)
        assert not cache.exists()

    @patch("helix_endpoints.loader.requests.get")
    def test_unwritable_cache(self, mock_get, tmp_path):
        mock_get.return_value = _response("<html></html>")
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")

        with pytest.raises(DocumentCacheError, match="Cannot write cache"):
            load_document("https://example.test/ref", cache_path=blocker / "reference.html")

    def test_unreadable_cache(self, tmp_path):
        cache = tmp_path / "reference.html"
        cache.write_bytes(b"\xff\xfe\xfa not utf-8")

        with pytest.raises(DocumentCacheError, match="Cannot read cache"):
            load_document("https://example.test/ref", cache_path=cache)


class TestParseDocument:
    def test_returns_queryable_tree(self):
        root = parse_document("<html><body><h2 id='x'>Title</h2></body></html>")
        assert root.select_one("h2").get("id") == "x"
