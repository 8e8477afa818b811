"""Unit tests for DocumentFetcher."""
from unittest.mock import MagicMock

import pytest
import requests

from document_fetcher import DocumentFetchError, DocumentFetcher

URL = "https://council.example/docs/register.pdf"


@pytest.fixture
def session():
    return MagicMock(spec=requests.Session)


@pytest.fixture
def fetcher(test_settings, mock_logger, session):
    return DocumentFetcher(test_settings, mock_logger, session=session)


def response(content=b"%PDF-1.4", status_error=None):
    mock = MagicMock(spec=requests.Response)
    mock.content = content
    if status_error is not None:
        mock.raise_for_status.side_effect = status_error
    return mock


@pytest.mark.unit
class TestDocumentFetcher:
    """Test document download and error mapping."""

    def test_fetch_returns_body(self, fetcher, session, test_settings):
        # Arrange
        session.get.return_value = response()

        # Act
        data = fetcher.fetch(URL)

        # Assert
        assert data == b"%PDF-1.4"
        session.get.assert_called_once_with(
            URL, timeout=test_settings.http_timeout, verify=test_settings.http_verify_ssl
        )

    def test_http_error_raises(self, fetcher, session):
        session.get.return_value = response(status_error=requests.HTTPError("404 Client Error"))
        with pytest.raises(DocumentFetchError) as exc_info:
            fetcher.fetch(URL)
        assert exc_info.value.url == URL
        assert "404" in str(exc_info.value)

    def test_connection_error_raises(self, fetcher, session):
        session.get.side_effect = requests.ConnectionError("connection refused")
        with pytest.raises(DocumentFetchError):
            fetcher.fetch(URL)

    def test_empty_body_raises(self, fetcher, session):
        session.get.return_value = response(content=b"")
        with pytest.raises(DocumentFetchError, match="empty response body"):
            fetcher.fetch(URL)

    def test_close_closes_session(self, fetcher, session):
        fetcher.close()
        session.close.assert_called_once()

    def test_default_session_retries_and_user_agent(self, test_settings, mock_logger):
        # Act
        fetcher = DocumentFetcher(test_settings, mock_logger)
        session = fetcher._session

        # Assert
        assert session.headers["User-Agent"] == test_settings.http_user_agent
        retry = session.get_adapter(URL).max_retries
        assert retry.total == test_settings.http_max_retries
        assert 503 in retry.status_forcelist
        fetcher.close()
