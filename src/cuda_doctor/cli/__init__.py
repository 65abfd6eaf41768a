"""Command-line interface for cuda-doctor."""
