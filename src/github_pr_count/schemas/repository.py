"""Pydantic schema for repository identity."""

from pydantic import Field

from .base import SchemaBase

# GitHub caps owner and repository names at 100 characters
NAME_MAX_LENGTH = 100


class RepositoryRef(SchemaBase):
    """Identity of a target GitHub repository.

    Created per count request and never persisted.
    """

    owner: str = Field(min_length=1, max_length=NAME_MAX_LENGTH, description="GitHub org or user")
    repo: str = Field(min_length=1, max_length=NAME_MAX_LENGTH, description="Repository name")

    @property
    def full_name(self) -> str:
        """Repository path in owner/name form."""
        return f"{self.owner}/{self.repo}"

    @property
    def key(self) -> tuple[str, str]:
        """Cache key for this repository."""
        return (self.owner, self.repo)

    @classmethod
    def from_full_name(cls, full_name: str) -> "RepositoryRef":
        """
        Factory method to create from a full repository name.

        Args:
            full_name: Full repo path like 'octocat/hello-world'

        Returns:
            RepositoryRef with owner and repo extracted

        Raises:
            ValueError: If the string is not in owner/name format
        """
        owner, repo = parse_repo_string(full_name)
        return cls(owner=owner, repo=repo)

    def __str__(self) -> str:
        return self.full_name


def parse_repo_string(full_name: str) -> tuple[str, str]:
    """Split an owner/name string into its parts.

    Args:
        full_name: Repository string like 'octocat/hello-world'

    Returns:
        Tuple of (owner, name)

    Raises:
        ValueError: If the string is not exactly owner/name with both parts set
    """
    parts = full_name.strip().split("/")
    if len(parts) != 2 or not parts[0].strip() or not parts[1].strip():
        raise ValueError(f"Repository must be in owner/name format, got {full_name!r}")
    return parts[0].strip(), parts[1].strip()
