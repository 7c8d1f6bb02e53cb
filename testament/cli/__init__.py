"""testament command-line interface (``testament`` console script)."""
