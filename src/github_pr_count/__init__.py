"""GitHub PR Count - rate-limit aware pull request counting for GitHub repositories."""

__version__ = "0.1.0"
