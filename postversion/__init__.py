"""post-version: version control for content items."""

__version__ = "1.0.0"
