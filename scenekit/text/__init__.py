"""Font shaping and text layout."""
