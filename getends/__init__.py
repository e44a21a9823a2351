"""getends - extract in-scope links and script references from web pages."""

__version__ = "0.1.0"
