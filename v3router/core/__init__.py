"""Infrastructure shared by discovery and routing."""
