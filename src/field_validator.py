"""Record construction and validation for extracted notice fields.

Required fields (application number and address) decide whether a record
exists at all; optional fields fall back to defaults instead of failing.
"""

from __future__ import annotations

import logging
import re
from datetime import date, datetime
from typing import Optional, Sequence

from config.settings import Settings
from config.validation_rules import SECTION_DATE_FORMATS, get_rule
from models.notice_data import Record

_WHITESPACE_RUNS = re.compile(r"\s\s+")


def collapse_whitespace(text: Optional[str]) -> str:
    """Trim ``text`` and replace runs of whitespace with a single space."""
    return _WHITESPACE_RUNS.sub(" ", (text or "").strip())


def parse_date(text: Optional[str], formats: Sequence[str]) -> Optional[date]:
    """Parse ``text`` strictly against ``formats`` in order; None when nothing matches."""
    value = (text or "").strip()
    if not value:
        return None
    for date_format in formats:
        try:
            return datetime.strptime(value, date_format).date()
        except ValueError:
            continue
    return None


class FieldValidator:
    """Validate extracted field values and build records from them."""

    def __init__(self, settings: Settings, logger: logging.Logger) -> None:
        self._settings = settings
        self._logger = logger

    def build_record(
        self,
        identifier: Optional[str],
        address: Optional[str],
        description: Optional[str],
        received_date_text: Optional[str],
        source_url: str,
        identifier_rule: str = "identifier",
        date_formats: Sequence[str] = SECTION_DATE_FORMATS,
        context: str = "",
    ) -> Optional[Record]:
        """Build a record, or return None when a required field is invalid.

        Args:
            identifier: Application number text
            address: Address text
            description: Description text (sentinel used when blank)
            received_date_text: Raw date text (absent when unparseable)
            source_url: Document URL attached to the record
            identifier_rule: Validation rule applied to the identifier
            date_formats: Accepted date patterns, tried in order
            context: Raw elements summary included in diagnostics

        Returns:
            Record or None
        """
        identifier = (identifier or "").strip()
        is_valid, error = get_rule(identifier_rule).validate(identifier)
        if not is_valid:
            self._logger.info(
                "Ignoring application \"%s\": application number rejected (%s). Elements: %s",
                identifier,
                error,
                context,
            )
            return None

        address = collapse_whitespace(address)
        is_valid, error = get_rule("address").validate(address)
        if not is_valid:
            self._logger.info(
                "Ignoring application \"%s\": address rejected (%s). Elements: %s",
                identifier,
                error,
                context,
            )
            return None

        description = collapse_whitespace(description)
        if not description:
            description = self._settings.description_sentinel

        received_date = parse_date(received_date_text, date_formats)
        if received_date is None and received_date_text and received_date_text.strip():
            self._logger.debug(
                "Application \"%s\": unrecognised received date \"%s\"",
                identifier,
                received_date_text,
            )

        return Record(
            identifier=identifier,
            address=address,
            description=description,
            received_date=received_date,
            source_url=source_url,
        )
