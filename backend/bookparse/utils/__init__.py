"""Utility modules for bookparse."""

from .text import clean_text, count_words, html_to_text, truncate_text

__all__ = ["clean_text", "count_words", "html_to_text", "truncate_text"]
