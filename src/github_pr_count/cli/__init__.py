"""Command line interface for GitHub PR Count."""
