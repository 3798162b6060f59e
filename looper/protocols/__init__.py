"""External program integrations."""
