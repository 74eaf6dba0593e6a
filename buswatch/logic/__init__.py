"""Board ordering and formatting."""
