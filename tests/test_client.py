"""Tests for client.py — AdoClient operations against a stub transport."""

import pytest

from ado_cli.client import AdoClient
from ado_cli.config import Config
from ado_cli.exceptions import ApiError, NotFoundError, SetupError, ValidationError
from ado_cli.models import PullRequest, VoteResult, WorkItem

BASE = "https://dev.azure.com/contoso"


def _client(stub_transport, *responses):
    transport = stub_transport(*responses)
    return AdoClient(transport=transport), transport


def _work_item(wi_id, title="t", **fields):
    return {"id": wi_id, "rev": 1, "fields": {"System.Title": title, **fields}}


def _pr(pr_id=7, repo_id="R1", **extra):
    return {
        "pullRequestId": pr_id,
        "title": "Add feature",
        "status": "active",
        "sourceRefName": "refs/heads/feature",
        "targetRefName": "refs/heads/main",
        "repository": {"id": repo_id, "name": "web"},
        **extra,
    }


ME = {"authenticatedUser": {"id": "U9", "displayName": "Dana"}}


class TestConstruction:
    def test_missing_organization(self):
        with pytest.raises(SetupError) as exc_info:
            AdoClient(pat="x")
        assert "organization not configured" in str(exc_info.value)

    def test_missing_pat(self):
        with pytest.raises(SetupError) as exc_info:
            AdoClient("contoso")
        assert exc_info.value.exit_code == 2

    def test_from_config_uses_keyring(self, fake_keyring):
        fake_keyring.set_password("adocli", "pat", "tok")
        client = AdoClient.from_config(Config(organization="contoso"))
        assert client.endpoint.base_url == f"{BASE}/_apis"

    def test_from_config_no_pat(self):
        with pytest.raises(SetupError):
            AdoClient.from_config(Config(organization="contoso"))

    def test_from_config_no_org(self, fake_keyring):
        fake_keyring.set_password("adocli", "pat", "tok")
        with pytest.raises(SetupError):
            AdoClient.from_config(Config())


class TestWhoami:
    def test_returns_identity(self, stub_transport):
        client, t = _client(stub_transport, ME)
        assert client.whoami().id == "U9"
        assert t.calls[0]["method"] == "GET"
        assert t.calls[0]["target"] == "connectionData"

    def test_missing_id(self, stub_transport):
        client, _ = _client(stub_transport, {"authenticatedUser": {}})
        with pytest.raises(Exception) as exc_info:
            client.whoami()
        assert "getting authenticated user" in str(exc_info.value)


class TestWorkItems:
    def test_query_then_batch_fetch(self, stub_transport):
        client, t = _client(
            stub_transport,
            {"workItems": [{"id": 3}, {"id": 5}]},
            {"value": [_work_item(3, "a"), _work_item(5, "b")]},
        )
        items = client.query_work_items("Fabrikam", state="Active", top=10)
        assert [wi.id for wi in items] == [3, 5]
        assert all(isinstance(wi, WorkItem) for wi in items)
        query, fetch = t.calls
        assert query["method"] == "POST"
        assert query["target"] == f"{BASE}/Fabrikam/_apis/wit/wiql?$top=10"
        assert "[System.State] = 'Active'" in query["body"]["query"]
        assert fetch["method"] == "GET"
        assert fetch["target"] == f"{BASE}/Fabrikam/_apis/wit/workitems?ids=3,5"

    def test_query_no_matches_skips_fetch(self, stub_transport):
        client, t = _client(stub_transport, {"workItems": []})
        assert client.query_work_items("P") == []
        assert len(t.calls) == 1

    def test_query_truncates_to_top(self, stub_transport):
        client, t = _client(
            stub_transport,
            {"workItems": [{"id": 1}, {"id": 2}, {"id": 3}]},
            {"value": [_work_item(1), _work_item(2)]},
        )
        client.query_work_items("P", top=2)
        assert t.calls[1]["target"].endswith("wit/workitems?ids=1,2")

    def test_get_work_item(self, stub_transport):
        client, t = _client(stub_transport, _work_item(42, "Crash", **{"System.State": "New"}))
        wi = client.get_work_item("P", 42)
        assert wi.title == "Crash"
        assert wi.state == "New"
        assert t.calls[0]["target"] == f"{BASE}/P/_apis/wit/workitems/42"

    def test_get_work_item_org_level(self, stub_transport):
        client, t = _client(stub_transport, _work_item(42))
        client.get_work_item(None, 42)
        assert t.calls[0]["target"] == "wit/workitems/42"

    def test_create_sends_add_patch(self, stub_transport):
        client, t = _client(stub_transport, _work_item(100, "Fix crash"))
        wi = client.create_work_item("P", "Bug", "Fix crash")
        assert wi.id == 100
        call = t.calls[0]
        assert call["method"] == "POST"
        assert call["target"] == f"{BASE}/P/_apis/wit/workitems/$Bug"
        assert call["content_type"] == "application/json-patch+json"
        assert call["body"] == [
            {"op": "add", "path": "/fields/System.Title", "value": "Fix crash"}
        ]

    def test_create_type_with_space_is_quoted(self, stub_transport):
        client, t = _client(stub_transport, _work_item(1))
        client.create_work_item("P", "User Story", "x", area_path="P\\Web")
        assert t.calls[0]["target"].endswith("wit/workitems/$User%20Story")
        assert t.calls[0]["body"][1] == {
            "op": "add",
            "path": "/fields/System.AreaPath",
            "value": "P\\Web",
        }

    @pytest.mark.parametrize("wi_type,title", [("", "x"), ("Bug", ""), (None, "x")])
    def test_create_requires_type_and_title(self, stub_transport, wi_type, title):
        client, t = _client(stub_transport)
        with pytest.raises(ValidationError):
            client.create_work_item("P", wi_type, title)
        assert t.calls == []

    def test_update_sends_replace_patch(self, stub_transport):
        client, t = _client(stub_transport, _work_item(7, "t", **{"System.State": "Closed"}))
        wi = client.update_work_item("P", 7, state="Closed")
        assert wi.state == "Closed"
        call = t.calls[0]
        assert call["method"] == "PATCH"
        assert call["target"] == f"{BASE}/P/_apis/wit/workitems/7"
        assert call["body"] == [
            {"op": "replace", "path": "/fields/System.State", "value": "Closed"}
        ]

    def test_update_without_fields_sends_nothing(self, stub_transport):
        client, t = _client(stub_transport)
        with pytest.raises(ValidationError) as exc_info:
            client.update_work_item("P", 7)
        assert "no fields to update" in str(exc_info.value)
        assert t.calls == []

    def test_api_error_gets_context(self, stub_transport):
        client, _ = _client(stub_transport, ApiError(404, "TF401232: not found"))
        with pytest.raises(ApiError) as exc_info:
            client.get_work_item("P", 9)
        msg = str(exc_info.value)
        assert msg.startswith("[API_ERROR] fetching work item 9: ")
        assert "HTTP 404" in msg
        assert "TF401232" in msg

    def test_unexpected_shape(self, stub_transport):
        client, _ = _client(stub_transport, [])
        with pytest.raises(Exception) as exc_info:
            client.get_work_item("P", 1)
        assert "Unexpected work item response shape" in str(exc_info.value)


class TestRepositories:
    def test_resolve_case_insensitive(self, stub_transport):
        client, t = _client(stub_transport, {"value": [{"id": "1", "name": "alpha"}]})
        assert client.resolve_repository_id("P", "ALPHA") == "1"
        assert t.calls[0]["target"] == f"{BASE}/P/_apis/git/repositories"

    def test_resolve_not_found(self, stub_transport):
        client, _ = _client(stub_transport, {"value": [{"id": "1", "name": "alpha"}]})
        with pytest.raises(NotFoundError):
            client.resolve_repository_id("P", "gamma")


class TestPullRequests:
    def test_list_project_wide(self, stub_transport):
        client, t = _client(stub_transport, {"value": [_pr(1), _pr(2)]})
        prs = client.list_pull_requests("P", status="active", top=5)
        assert [pr.id for pr in prs] == [1, 2]
        assert t.calls[0]["target"] == (
            f"{BASE}/P/_apis/git/pullrequests?searchCriteria.status=active&$top=5"
        )

    def test_list_by_repository_name(self, stub_transport):
        client, t = _client(
            stub_transport,
            {"value": [{"id": "R1", "name": "Web"}]},
            {"value": [_pr()]},
        )
        client.list_pull_requests("P", repository="web", top=None)
        assert t.calls[1]["target"] == f"{BASE}/P/_apis/git/repositories/R1/pullrequests"

    def test_list_me_resolves_identity_once(self, stub_transport):
        client, t = _client(stub_transport, ME, {"value": []})
        client.list_pull_requests("P", creator="@me", reviewer="@me", top=None)
        assert [c["target"] for c in t.calls][0] == "connectionData"
        assert len(t.calls) == 2
        assert "searchCriteria.creatorId=U9" in t.calls[1]["target"]
        assert "searchCriteria.reviewerId=U9" in t.calls[1]["target"]

    def test_get(self, stub_transport):
        client, _ = _client(stub_transport, _pr(7, reviewers=[{"displayName": "A", "vote": 10}]))
        pr = client.get_pull_request("P", 7)
        assert isinstance(pr, PullRequest)
        assert pr.source_branch == "feature"
        assert pr.reviewers[0].vote_label == "Approved"

    def test_create(self, stub_transport):
        client, t = _client(
            stub_transport,
            {"value": [{"id": "R1", "name": "web"}]},
            _pr(11),
        )
        pr = client.create_pull_request(
            "P", "WEB", "Add feature", "feature", "refs/heads/main", reviewers=["u1"], draft=True
        )
        assert pr.id == 11
        call = t.calls[1]
        assert call["method"] == "POST"
        assert call["target"] == f"{BASE}/P/_apis/git/repositories/R1/pullrequests"
        assert call["body"] == {
            "sourceRefName": "refs/heads/feature",
            "targetRefName": "refs/heads/main",
            "title": "Add feature",
            "isDraft": True,
            "reviewers": [{"id": "u1"}],
        }

    def test_create_validates_before_request(self, stub_transport):
        client, t = _client(stub_transport)
        with pytest.raises(ValidationError):
            client.create_pull_request("P", "web", "t", "", "main")
        assert t.calls == []

    def test_vote_three_calls_in_order(self, stub_transport):
        client, t = _client(stub_transport, _pr(7, "R1"), ME, None)
        result = client.vote_pull_request("P", 7, 10)
        assert result == VoteResult(pull_request_id=7, vote=10, status="Approved")
        assert [c["method"] for c in t.calls] == ["GET", "GET", "PUT"]
        assert t.calls[0]["target"] == f"{BASE}/P/_apis/git/pullrequests/7"
        assert t.calls[1]["target"] == "connectionData"
        put = t.calls[2]
        assert "R1" in put["target"]
        assert "/pullrequests/7/" in put["target"]
        assert put["target"].endswith("/reviewers/U9")
        assert put["body"] == {"vote": 10}

    def test_reject(self, stub_transport):
        client, t = _client(stub_transport, _pr(7), ME, {"vote": -10})
        assert client.reject_pull_request("P", 7).status == "Rejected"
        assert t.calls[2]["body"] == {"vote": -10}

    def test_approve(self, stub_transport):
        client, _ = _client(stub_transport, _pr(7), ME, None)
        assert client.approve_pull_request("P", 7).vote == 10

    def test_vote_stops_after_failed_identity(self, stub_transport):
        client, t = _client(stub_transport, _pr(7), ApiError(401, "unauthorized"))
        with pytest.raises(ApiError) as exc_info:
            client.vote_pull_request("P", 7, 10)
        assert "getting authenticated user" in str(exc_info.value)
        assert len(t.calls) == 2

    def test_vote_pr_fetch_failure(self, stub_transport):
        client, t = _client(stub_transport, ApiError(404, "missing"))
        with pytest.raises(ApiError) as exc_info:
            client.vote_pull_request("P", 7, 10)
        assert "fetching pull request 7" in str(exc_info.value)
        assert len(t.calls) == 1
