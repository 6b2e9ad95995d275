"""Statement Tracker: bank statement parsing and keyword categorization."""

__version__ = "0.3.0"
