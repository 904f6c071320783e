"""Page parsing, content extraction and sanitization."""
