"""Scene construction and GPU rendering."""
