"""Unit tests: known-answer vectors and edge cases per module."""
