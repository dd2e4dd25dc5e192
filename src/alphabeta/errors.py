from __future__ import annotations


class SearchError(Exception):
    """Base class for errors raised by the search engine."""


class ConfigurationError(SearchError, ValueError):
    """Invalid game model or setup arguments. Raised synchronously, never retried."""


class SearchStateError(SearchError, RuntimeError):
    """An operation was attempted in a state that does not allow it."""


class StaleInstanceReuse(SearchError, RuntimeError):
    """An engine or session was driven by two stepping calls at once."""
