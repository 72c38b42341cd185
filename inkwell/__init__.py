"""Inkwell content store: stories, chapters, drafts and reader engagement."""

__version__ = "0.1.0"
