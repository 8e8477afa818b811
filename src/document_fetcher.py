"""Download of notice documents over HTTP."""

from __future__ import annotations

import logging
from typing import Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from config.settings import Settings


class DocumentFetchError(Exception):
    """The document could not be downloaded."""

    def __init__(self, url: str, message: str) -> None:
        super().__init__(f"Unable to download {url}: {message}")
        self.url = url


class DocumentFetcher:
    """Fetch PDF documents with retry and backoff on transient failures."""

    def __init__(
        self,
        settings: Settings,
        logger: logging.Logger,
        session: Optional[requests.Session] = None,
    ) -> None:
        self._settings = settings
        self._logger = logger
        self._session = session or self._create_session()

    def _create_session(self) -> requests.Session:
        session = requests.Session()
        session.headers.update({"User-Agent": self._settings.http_user_agent})

        retry = Retry(
            total=self._settings.http_max_retries,
            connect=self._settings.http_max_retries,
            read=self._settings.http_max_retries,
            backoff_factor=self._settings.http_backoff_factor,
            status_forcelist=(429, 500, 502, 503, 504),
            allowed_methods=frozenset(["GET"]),
            raise_on_status=False,
        )
        adapter = HTTPAdapter(max_retries=retry)
        session.mount("https://", adapter)
        session.mount("http://", adapter)
        return session

    def fetch(self, url: str) -> bytes:
        """Download ``url`` and return the response body.

        Raises:
            DocumentFetchError: On network failure or a non-success status after retries
        """
        self._logger.info("Retrieving document: %s", url)
        try:
            response = self._session.get(
                url,
                timeout=self._settings.http_timeout,
                verify=self._settings.http_verify_ssl,
            )
            response.raise_for_status()
        except requests.RequestException as exc:
            raise DocumentFetchError(url, str(exc)) from exc

        content = response.content
        if not content:
            raise DocumentFetchError(url, "empty response body")

        self._logger.debug("Downloaded %d bytes from %s", len(content), url)
        return content

    def close(self) -> None:
        self._session.close()
