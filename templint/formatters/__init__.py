"""Output formatters for templint results."""

from templint.formatters.json import format_as_json
from templint.formatters.sarif import format_as_sarif
from templint.formatters.text import format_as_text

__all__ = ["format_as_json", "format_as_sarif", "format_as_text"]
