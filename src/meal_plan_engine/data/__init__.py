"""Data models and storage."""
