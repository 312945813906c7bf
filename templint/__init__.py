"""Rule-based static analysis for Jinja2 templates."""

from templint.extension import InspectExtension, LintExtension, TemplateLintError

__version__ = "0.1.0"

__all__ = ["InspectExtension", "LintExtension", "TemplateLintError", "__version__"]
