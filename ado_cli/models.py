"""
Typed records decoded from Azure DevOps responses.

Records are read-only snapshots. to_dict() keeps the service's wire field
names so the JSON output matches what the REST API documents.
"""

from dataclasses import dataclass, field
from typing import Any

from ado_cli._utils import display_value, short_branch, vote_label


@dataclass(frozen=True)
class IdentityRef:
    id: str = ""
    display_name: str = ""
    unique_name: str = ""

    @classmethod
    def from_dict(cls, data):
        data = data or {}
        return cls(
            id=data.get("id", ""),
            display_name=data.get("displayName", ""),
            unique_name=data.get("uniqueName", ""),
        )

    def to_dict(self):
        return {"id": self.id, "displayName": self.display_name, "uniqueName": self.unique_name}


@dataclass(frozen=True)
class Reviewer:
    id: str = ""
    display_name: str = ""
    unique_name: str = ""
    vote: int = 0

    @classmethod
    def from_dict(cls, data):
        data = data or {}
        return cls(
            id=data.get("id", ""),
            display_name=data.get("displayName", ""),
            unique_name=data.get("uniqueName", ""),
            vote=int(data.get("vote") or 0),
        )

    @property
    def vote_label(self):
        return vote_label(self.vote)

    def to_dict(self):
        return {
            "id": self.id,
            "displayName": self.display_name,
            "uniqueName": self.unique_name,
            "vote": self.vote,
        }


@dataclass(frozen=True)
class WorkItemRef:
    """Lightweight reference returned by a WIQL query."""

    id: int
    url: str = ""

    @classmethod
    def from_dict(cls, data):
        return cls(id=int(data["id"]), url=data.get("url", ""))


@dataclass(frozen=True)
class WorkItem:
    """A work item. `fields` is open-ended: values may be strings, numbers,
    nested identity objects, or null."""

    id: int
    rev: int = 0
    fields: dict[str, Any] = field(default_factory=dict)
    url: str = ""

    @classmethod
    def from_dict(cls, data):
        return cls(
            id=int(data.get("id") or 0),
            rev=int(data.get("rev") or 0),
            fields=dict(data.get("fields") or {}),
            url=data.get("url", ""),
        )

    def get(self, name, default=None):
        return self.fields.get(name, default)

    def field_str(self, name):
        return display_value(self.fields.get(name))

    @property
    def title(self):
        return self.field_str("System.Title")

    @property
    def state(self):
        return self.field_str("System.State")

    @property
    def work_item_type(self):
        return self.field_str("System.WorkItemType")

    @property
    def assigned_to(self):
        return self.field_str("System.AssignedTo")

    @property
    def area_path(self):
        return self.field_str("System.AreaPath")

    @property
    def iteration_path(self):
        return self.field_str("System.IterationPath")

    @property
    def description(self):
        return self.field_str("System.Description")

    def to_dict(self):
        return {"id": self.id, "rev": self.rev, "fields": dict(self.fields), "url": self.url}


@dataclass(frozen=True)
class Repository:
    id: str
    name: str
    url: str = ""

    @classmethod
    def from_dict(cls, data):
        return cls(id=data.get("id", ""), name=data.get("name", ""), url=data.get("url", ""))

    def to_dict(self):
        return {"id": self.id, "name": self.name, "url": self.url}


@dataclass(frozen=True)
class PullRequest:
    id: int
    title: str = ""
    description: str = ""
    status: str = ""
    created_by: IdentityRef = field(default_factory=IdentityRef)
    creation_date: str = ""
    source_ref: str = ""
    target_ref: str = ""
    merge_status: str = ""
    is_draft: bool = False
    repository: Repository = field(default_factory=lambda: Repository(id="", name=""))
    reviewers: tuple[Reviewer, ...] = ()
    url: str = ""

    @classmethod
    def from_dict(cls, data):
        return cls(
            id=int(data.get("pullRequestId") or 0),
            title=data.get("title", ""),
            description=data.get("description", ""),
            status=data.get("status", ""),
            created_by=IdentityRef.from_dict(data.get("createdBy")),
            creation_date=data.get("creationDate", ""),
            source_ref=data.get("sourceRefName", ""),
            target_ref=data.get("targetRefName", ""),
            merge_status=data.get("mergeStatus", ""),
            is_draft=bool(data.get("isDraft", False)),
            repository=Repository.from_dict(data.get("repository") or {}),
            reviewers=tuple(Reviewer.from_dict(r) for r in data.get("reviewers") or []),
            url=data.get("url", ""),
        )

    @property
    def source_branch(self):
        return short_branch(self.source_ref)

    @property
    def target_branch(self):
        return short_branch(self.target_ref)

    def to_dict(self):
        return {
            "pullRequestId": self.id,
            "title": self.title,
            "description": self.description,
            "status": self.status,
            "createdBy": self.created_by.to_dict(),
            "creationDate": self.creation_date,
            "sourceRefName": self.source_ref,
            "targetRefName": self.target_ref,
            "mergeStatus": self.merge_status,
            "isDraft": self.is_draft,
            "repository": {"id": self.repository.id, "name": self.repository.name},
            "reviewers": [r.to_dict() for r in self.reviewers],
            "url": self.url,
        }


@dataclass(frozen=True)
class ConnectionData:
    authenticated_user: IdentityRef

    @classmethod
    def from_dict(cls, data):
        return cls(authenticated_user=IdentityRef.from_dict((data or {}).get("authenticatedUser")))


@dataclass(frozen=True)
class VoteResult:
    pull_request_id: int
    vote: int
    status: str

    def to_dict(self):
        return {"pullRequestId": self.pull_request_id, "vote": self.vote, "status": self.status}


@dataclass(frozen=True)
class CreatePullRequestInput:
    """Request body for creating a pull request."""

    source_ref: str
    target_ref: str
    title: str
    description: str | None = None
    is_draft: bool = False
    reviewers: tuple[str, ...] = ()

    def to_dict(self):
        body: dict[str, Any] = {
            "sourceRefName": self.source_ref,
            "targetRefName": self.target_ref,
            "title": self.title,
        }
        if self.description:
            body["description"] = self.description
        if self.is_draft:
            body["isDraft"] = True
        if self.reviewers:
            body["reviewers"] = [{"id": rid} for rid in self.reviewers]
        return body
