"""ROM library scanner, catalog and launcher."""

__version__ = "0.1.0"
