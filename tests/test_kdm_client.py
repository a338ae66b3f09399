"""Тесты для HTTP-клиента KDM.

Реальные запросы не выполняются, сессия requests мокируется.
"""

from pathlib import Path
from unittest.mock import MagicMock

import pytest
import requests

from kdmq.errors import FetchError, NotFoundError, ParseError
from kdmq.services.kdm_client import (
    REQUEST_TIMEOUT,
    RETRY_STATUS_CODES,
    RETRY_TOTAL,
    KDMClient,
    build_session,
    load_kdm_file,
    parse_kdm_data,
)

FIXTURES = Path(__file__).parent / "fixtures"
URL = "https://releases.rancher.com/kontainer-driver-metadata/dev-v2.7/data.json"


def _session_returning(status_code=200, content=b"{}", reason="OK"):
    session = MagicMock()
    session.get.return_value = MagicMock(status_code=status_code, content=content, reason=reason)
    return session


class TestRetryPolicy:
    """Политика повторов фиксирована и подключена к обоим протоколам."""

    def test_adapters_mounted(self):
        session = build_session()
        for prefix in ("http://", "https://"):
            retry = session.get_adapter(prefix + "example.com").max_retries
            assert retry.total == RETRY_TOTAL
            assert set(RETRY_STATUS_CODES) <= set(retry.status_forcelist)
            assert "GET" in retry.allowed_methods
            assert retry.raise_on_status is False

    def test_client_builds_own_session(self):
        client = KDMClient()
        assert isinstance(client.session, requests.Session)
        client.close()


class TestFetch:

    def test_success(self):
        body = (FIXTURES / "kdm/data.json").read_bytes()
        session = _session_returning(content=body)
        data = KDMClient(session).fetch(URL)
        assert "v1.24.10-rancher4-1" in data.images_by_k8s_version
        session.get.assert_called_once_with(URL, timeout=REQUEST_TIMEOUT)

    def test_no_caching(self):
        session = _session_returning()
        client = KDMClient(session)
        client.fetch(URL)
        client.fetch(URL)
        assert session.get.call_count == 2

    def test_not_found_status(self):
        session = _session_returning(status_code=404, content=b"Not Found", reason="Not Found")
        with pytest.raises(FetchError, match="404") as exc_info:
            KDMClient(session).fetch(URL)
        assert URL in str(exc_info.value)

    def test_server_error_after_retries(self):
        """После исчерпания повторов приходит последний ответ 5xx."""
        session = _session_returning(status_code=503, reason="Service Unavailable")
        with pytest.raises(FetchError, match="503"):
            KDMClient(session).fetch(URL)

    def test_connection_error(self):
        session = MagicMock()
        session.get.side_effect = requests.ConnectionError("connection refused")
        with pytest.raises(FetchError, match="connection refused"):
            KDMClient(session).fetch(URL)

    def test_invalid_json(self):
        session = _session_returning(content=b"<html>oops</html>")
        with pytest.raises(ParseError, match=URL):
            KDMClient(session).fetch(URL)


class TestParse:

    def test_not_an_object(self):
        with pytest.raises(ParseError, match="not a JSON object"):
            parse_kdm_data(b"[]", source="test")

    def test_wrong_shape(self):
        payload = (FIXTURES / "kdm/broken.json").read_bytes()
        with pytest.raises(ParseError, match="K8sVersionRKESystemImages"):
            parse_kdm_data(payload, source="broken.json")


class TestLocalFile:

    def test_load(self):
        data = load_kdm_file(FIXTURES / "kdm/next.json")
        assert list(data.images_by_k8s_version) == ["v1.25.6-rancher4-1", "v1.26.4-rancher2-1"]

    def test_missing(self, tmp_path):
        path = tmp_path / "missing.json"
        with pytest.raises(NotFoundError, match="missing.json"):
            load_kdm_file(path)

    def test_unparseable(self, tmp_path):
        path = tmp_path / "data.json"
        path.write_text("not json", encoding="utf-8")
        with pytest.raises(ParseError):
            load_kdm_file(path)
