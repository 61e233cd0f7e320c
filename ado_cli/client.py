"""
AdoClient — public Python API for Azure DevOps work items and pull requests.

Each method is one logical action. Some need more than one round trip
(resolve a repository name, look up the caller's identity); those calls run
one after another and any failure aborts the whole action.
"""

from __future__ import annotations

import urllib.parse
from contextlib import contextmanager
from typing import Any

from ado_cli import config
from ado_cli._utils import ensure_ref, vote_label
from ado_cli.api import (
    CONTENT_JSON,
    CONTENT_JSON_PATCH,
    Endpoint,
    Transport,
    _expect_object_response,
)
from ado_cli.credentials import get_pat
from ado_cli.exceptions import CliError, SetupError, ValidationError
from ado_cli.models import (
    ConnectionData,
    CreatePullRequestInput,
    IdentityRef,
    PullRequest,
    Repository,
    VoteResult,
    WorkItem,
    WorkItemRef,
)
from ado_cli.patch import (
    AREA_PATH,
    ASSIGNED_TO,
    DESCRIPTION,
    ITERATION_PATH,
    OP_ADD,
    OP_REPLACE,
    STATE,
    TITLE,
    build_patch,
    to_document,
)
from ado_cli.resolver import resolve
from ado_cli.wiql import build_wiql, is_current_user


@contextmanager
def _context(description):
    """Prefix errors raised inside the block with *description*."""
    try:
        yield
    except CliError as e:
        raise e.add_context(description)


def _value_list(result, operation):
    return _expect_object_response(result, operation).get("value") or []


class AdoClient:
    """Azure DevOps client bound to one organization and credential."""

    def __init__(
        self,
        organization: str | None = None,
        pat: str | None = None,
        *,
        transport: Any = None,
        api_version: str | None = None,
        timeout: int | None = None,
    ):
        if transport is None:
            if not organization:
                raise SetupError(
                    "organization not configured (run 'ado config set organization <org>')"
                )
            if not pat:
                raise SetupError("no PAT found in keyring (run 'ado auth login')")
            transport = Transport(
                Endpoint.for_organization(organization, api_version),
                pat,
                timeout or config.HTTP_TIMEOUT_SECONDS,
            )
        self._transport = transport

    @classmethod
    def from_config(cls, cfg: config.Config | None = None) -> AdoClient:
        """Build a client from the persisted config and the stored PAT."""
        cfg = cfg or config.load_config()
        if not cfg.organization:
            raise SetupError(
                "organization not configured (run 'ado config set organization <org>')"
            )
        return cls(cfg.organization, get_pat())

    @property
    def endpoint(self) -> Endpoint:
        return self._transport.endpoint

    def _request(self, method, target, body=None, content_type=CONTENT_JSON):
        return self._transport.request_json(method, target, body=body, content_type=content_type)

    def _work_item_target(self, project, path):
        if project:
            return self.endpoint.project_url(project, path)
        return path

    # -------------------------------------------------------------------
    # Identity
    # -------------------------------------------------------------------

    def whoami(self) -> IdentityRef:
        """The authenticated user, from the connectionData endpoint."""
        with _context("getting authenticated user"):
            result = _expect_object_response(
                self._request("GET", "connectionData"), "connectionData"
            )
            user = ConnectionData.from_dict(result).authenticated_user
            if not user.id:
                raise CliError("connectionData response has no authenticatedUser.id")
        return user

    # -------------------------------------------------------------------
    # Work items
    # -------------------------------------------------------------------

    def query_by_wiql(self, project: str, wiql: str, top: int | None = None) -> list[WorkItemRef]:
        path = "wit/wiql"
        if top and top > 0:
            path += f"?$top={top}"
        with _context("querying work items"):
            result = _expect_object_response(
                self._request("POST", self.endpoint.project_url(project, path), {"query": wiql}),
                "wiql",
            )
        return [WorkItemRef.from_dict(ref) for ref in result.get("workItems") or []]

    def query_work_items(
        self,
        project: str,
        *,
        work_item_type: str | None = None,
        state: str | None = None,
        assigned_to: str | None = None,
        top: int | None = config.DEFAULT_TOP,
    ) -> list[WorkItem]:
        """Run a WIQL search, then fetch the matching work items in one batch."""
        wiql = build_wiql(project, work_item_type, state, assigned_to)
        refs = self.query_by_wiql(project, wiql, top)
        ids = [ref.id for ref in refs]
        if top and top > 0:
            ids = ids[:top]
        return self.get_work_items(project, ids)

    def get_work_item(self, project: str | None, work_item_id: int) -> WorkItem:
        target = self._work_item_target(project, f"wit/workitems/{work_item_id}")
        with _context(f"fetching work item {work_item_id}"):
            result = _expect_object_response(self._request("GET", target), "work item")
        return WorkItem.from_dict(result)

    def get_work_items(self, project: str | None, ids: list[int]) -> list[WorkItem]:
        if not ids:
            return []
        joined = ",".join(str(i) for i in ids)
        target = self._work_item_target(project, f"wit/workitems?ids={joined}")
        with _context("fetching work items"):
            items = _value_list(self._request("GET", target), "work items")
        return [WorkItem.from_dict(item) for item in items]

    def create_work_item(
        self,
        project: str,
        work_item_type: str,
        title: str,
        *,
        description: str | None = None,
        assigned_to: str | None = None,
        area_path: str | None = None,
        iteration_path: str | None = None,
    ) -> WorkItem:
        if not work_item_type:
            raise ValidationError("work item type is required (--type)")
        if not title:
            raise ValidationError("title is required (--title)")
        ops = build_patch(
            OP_ADD,
            [
                (TITLE, title),
                (DESCRIPTION, description),
                (ASSIGNED_TO, assigned_to),
                (AREA_PATH, area_path),
                (ITERATION_PATH, iteration_path),
            ],
        )
        type_segment = urllib.parse.quote(work_item_type, safe="")
        target = self.endpoint.project_url(project, f"wit/workitems/${type_segment}")
        with _context("creating work item"):
            result = _expect_object_response(
                self._request("POST", target, to_document(ops), CONTENT_JSON_PATCH),
                "work item",
            )
        return WorkItem.from_dict(result)

    def update_work_item(
        self,
        project: str | None,
        work_item_id: int,
        *,
        title: str | None = None,
        state: str | None = None,
        assigned_to: str | None = None,
    ) -> WorkItem:
        ops = build_patch(
            OP_REPLACE,
            [(TITLE, title), (STATE, state), (ASSIGNED_TO, assigned_to)],
        )
        if not ops:
            raise ValidationError("no fields to update (use --title, --state, or --assigned-to)")
        target = self._work_item_target(project, f"wit/workitems/{work_item_id}")
        with _context(f"updating work item {work_item_id}"):
            result = _expect_object_response(
                self._request("PATCH", target, to_document(ops), CONTENT_JSON_PATCH),
                "work item",
            )
        return WorkItem.from_dict(result)

    # -------------------------------------------------------------------
    # Repositories
    # -------------------------------------------------------------------

    def list_repositories(self, project: str) -> list[Repository]:
        target = self.endpoint.project_url(project, "git/repositories")
        with _context("listing repositories"):
            repos = _value_list(self._request("GET", target), "repositories")
        return [Repository.from_dict(r) for r in repos]

    def resolve_repository_id(self, project: str, name: str) -> str:
        return resolve("repository", project, name, self.list_repositories)

    # -------------------------------------------------------------------
    # Pull requests
    # -------------------------------------------------------------------

    def list_pull_requests(
        self,
        project: str,
        *,
        repository: str | None = None,
        status: str | None = None,
        creator: str | None = None,
        reviewer: str | None = None,
        top: int | None = config.DEFAULT_TOP,
    ) -> list[PullRequest]:
        """List pull requests in a project, or in one repository by name.

        creator/reviewer take an identity id or "@me".
        """
        path = "git/pullrequests"
        if repository:
            repo_id = self.resolve_repository_id(project, repository)
            path = f"git/repositories/{repo_id}/pullrequests"

        me: list[str] = []

        def _identity(value):
            if not is_current_user(value):
                return value
            if not me:
                me.append(self.whoami().id)
            return me[0]

        params = []
        if status:
            params.append(("searchCriteria.status", status))
        if creator:
            params.append(("searchCriteria.creatorId", _identity(creator)))
        if reviewer:
            params.append(("searchCriteria.reviewerId", _identity(reviewer)))
        if top and top > 0:
            params.append(("$top", str(top)))

        target = self.endpoint.project_url(project, path)
        if params:
            target += "?" + urllib.parse.urlencode(params, safe="$")
        with _context("listing pull requests"):
            prs = _value_list(self._request("GET", target), "pull requests")
        return [PullRequest.from_dict(pr) for pr in prs]

    def get_pull_request(self, project: str, pr_id: int) -> PullRequest:
        target = self.endpoint.project_url(project, f"git/pullrequests/{pr_id}")
        with _context(f"fetching pull request {pr_id}"):
            result = _expect_object_response(self._request("GET", target), "pull request")
        return PullRequest.from_dict(result)

    def create_pull_request(
        self,
        project: str,
        repository: str,
        title: str,
        source: str,
        target: str,
        *,
        description: str | None = None,
        reviewers: list[str] | tuple[str, ...] = (),
        draft: bool = False,
    ) -> PullRequest:
        for label, value in (
            ("repository", repository),
            ("title", title),
            ("source branch", source),
            ("target branch", target),
        ):
            if not value:
                raise ValidationError(f"{label} is required")
        repo_id = self.resolve_repository_id(project, repository)
        body = CreatePullRequestInput(
            source_ref=ensure_ref(source),
            target_ref=ensure_ref(target),
            title=title,
            description=description,
            is_draft=draft,
            reviewers=tuple(reviewers),
        ).to_dict()
        url = self.endpoint.project_url(project, f"git/repositories/{repo_id}/pullrequests")
        with _context("creating pull request"):
            result = _expect_object_response(self._request("POST", url, body), "pull request")
        return PullRequest.from_dict(result)

    def vote_pull_request(self, project: str, pr_id: int, vote: int) -> VoteResult:
        """Cast the caller's vote: fetch the PR, fetch the caller, then vote."""
        pr = self.get_pull_request(project, pr_id)
        if not pr.repository.id:
            raise CliError(f"pull request {pr_id} response has no repository id")
        me = self.whoami()
        path = f"git/repositories/{pr.repository.id}/pullrequests/{pr_id}/reviewers/{me.id}"
        with _context(f"voting on pull request {pr_id}"):
            self._request("PUT", self.endpoint.project_url(project, path), {"vote": vote})
        return VoteResult(pull_request_id=pr_id, vote=vote, status=vote_label(vote))

    def approve_pull_request(self, project: str, pr_id: int) -> VoteResult:
        return self.vote_pull_request(project, pr_id, config.VOTE_APPROVE)

    def reject_pull_request(self, project: str, pr_id: int) -> VoteResult:
        return self.vote_pull_request(project, pr_id, config.VOTE_REJECT)
