"""
verse-guidance - Custom Exceptions

Namespaced exceptions; builtins like ConnectionError or LookupError are
never shadowed.
"""


class VerseGuidanceError(Exception):
    """Base exception for verse-guidance.

    All custom exceptions inherit from this base class.
    """
    pass


class ConfigurationError(VerseGuidanceError):
    """Raised when configuration is invalid or missing."""
    pass


class ThemeCatalogError(ConfigurationError):
    """Raised when the theme catalog YAML cannot be loaded or is malformed.

    Only raised while constructing the catalog; lookups never raise it.
    """
    pass
