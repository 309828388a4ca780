"""Command-line interface (``pagequery``)."""
