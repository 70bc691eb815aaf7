"""Output formatters for graph-session."""

from graph_session.formatters.base import Formatter, FormatterRegistry, registry
from graph_session.formatters.csv import CSVFormatter
from graph_session.formatters.json import JSONFormatter
from graph_session.formatters.table import TableFormatter

__all__ = [
    "CSVFormatter",
    "Formatter",
    "FormatterRegistry",
    "JSONFormatter",
    "TableFormatter",
    "registry",
]
