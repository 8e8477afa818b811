"""Label phrases, heading patterns and validation rules for notice records.

This module defines the labels used to locate fields on a notice page and the
rules applied to the values read next to them, for both page layouts found in
the register documents (label/value sections and one-row-per-application
tables).
"""

import re
from typing import Any, Dict, Optional, Pattern, Tuple

# Section layout: fuzzy text label for the identifier, exact cell labels for
# the remaining fields (compared after removing whitespace, upper-cased).
SECTION_IDENTIFIER_LABEL = "APPLICATION NO:"

SECTION_CELL_LABELS: Dict[str, str] = {
    "description": "DESCRIPTION:",
    "received_date": "DATELODGED:",
    "address": "DEVELOPMENTADDRESS:",
}

# Table layout: column heading cells, matched against the whitespace-stripped
# cell text.
TABLE_HEADING_PATTERNS: Dict[str, Pattern[str]] = {
    "identifier": re.compile(r"^applicationno\.", re.IGNORECASE),
    "received_date": re.compile(r"^datereceived", re.IGNORECASE),
    "address": re.compile(r"^addressofdevelopment", re.IGNORECASE),
    "description": re.compile(r"^proposeddevelopment", re.IGNORECASE),
}

# Pages that only list conditions carry both of these headings.
CONDITIONS_PAGE_PATTERNS: Tuple[Pattern[str], ...] = (
    re.compile(r"^conditions", re.IGNORECASE),
    re.compile(r"^referral/concurrence", re.IGNORECASE),
)

# Accepted date patterns, tried in order (strict, whole string).
SECTION_DATE_FORMATS: Tuple[str, ...] = ("%d/%m/%Y", "%d/%m/%y")
TABLE_DATE_FORMATS: Tuple[str, ...] = ("%d/%m/%y", "%d/%m/%Y")

# Validation rules for record fields
VALIDATION_RULES: Dict[str, Dict[str, Any]] = {
    # Application number, e.g. "690/006/15"
    "identifier": {
        "required": True,
        "example": "690/006/15",
        "description": "Development application number",
    },

    # Table layout identifiers must look like an application number
    "table_identifier": {
        "pattern": r"[0-9]+/[0-9A-Z]+/[0-9]+",
        "required": True,
        "example": "690/006/15",
        "description": "Application number in a register table row",
    },

    "address": {
        "required": True,
        "example": "12 Main Street, Wudinna",
        "description": "Address of the development",
    },
}


class ValidationRule:
    """Represents a validation rule for a record field."""

    def __init__(self, rule_name: str, rule_config: Dict[str, Any]):
        self.name = rule_name
        self.pattern = rule_config.get("pattern")
        self.required = rule_config.get("required", False)
        self.example = rule_config.get("example", "")
        self.description = rule_config.get("description", "")

        self._regex = re.compile(self.pattern) if self.pattern else None

    def validate(self, value: Optional[str]) -> tuple[bool, Optional[str]]:
        """Validate a value against this rule.

        Args:
            value: Value to validate

        Returns:
            Tuple of (is_valid, error_message)
        """
        value_str = (value or "").strip()

        if not value_str:
            if self.required:
                return False, "Required field is blank"
            return True, None

        # Search rather than match: register cells often carry stray prefixes
        if self._regex and not self._regex.search(value_str):
            return False, f"Value does not match expected pattern. Example: {self.example}"

        return True, None


def get_rule(rule_name: str) -> Optional[ValidationRule]:
    """Get a validation rule by name.

    Args:
        rule_name: Name of the rule to retrieve

    Returns:
        ValidationRule instance or None if not found
    """
    rule_config = VALIDATION_RULES.get(rule_name)
    if rule_config:
        return ValidationRule(rule_name, rule_config)
    return None
