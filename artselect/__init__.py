"""Persistent row selection and bulk top-N selection over a paginated collection."""

__version__ = "0.1.0"
