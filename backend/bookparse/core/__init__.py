"""Core EPUB resolution and chapter extraction."""
