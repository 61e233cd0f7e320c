"""ado-cli — a fast, script-friendly CLI for Azure DevOps work items and pull requests."""

from ado_cli.client import AdoClient
from ado_cli.config import VERSION
from ado_cli.exceptions import ApiError, CliError, NotFoundError, SetupError, ValidationError
from ado_cli.models import (
    ConnectionData,
    CreatePullRequestInput,
    IdentityRef,
    PullRequest,
    Repository,
    Reviewer,
    VoteResult,
    WorkItem,
    WorkItemRef,
)

__all__ = [
    "VERSION",
    "AdoClient",
    "ApiError",
    "CliError",
    "NotFoundError",
    "SetupError",
    "ValidationError",
    "ConnectionData",
    "CreatePullRequestInput",
    "IdentityRef",
    "PullRequest",
    "Repository",
    "Reviewer",
    "VoteResult",
    "WorkItem",
    "WorkItemRef",
]
