"""testament test-suite."""
