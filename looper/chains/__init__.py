"""Chain clients and address helpers."""
