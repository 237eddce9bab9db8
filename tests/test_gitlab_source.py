"""Tests for GitLab group and project discovery."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import gitlab
import pytest
import requests

from config import GitLabFetchMode
from errors import APIError, AuthenticationFailed
from gitlab_source import GitLabSource
from models import Group, RepoInfo
from progress import ListSink

from conftest import make_response, make_session

API = "https://gitlab.example.com/api/v4"


def _group(group_id: int, full_path: str) -> dict:
    return {"id": group_id, "full_path": full_path, "name": full_path.rsplit("/", 1)[-1]}


def _project(name: str, namespace: str) -> dict:
    return {
        "name": name,
        "namespace": {"full_path": namespace},
        "http_url_to_repo": f"https://gitlab.example.com/{namespace}/{name}.git",
    }


def _source(routes: dict) -> GitLabSource:
    return GitLabSource(
        "https://gitlab.example.com/",
        "glpat-testtoken",
        ListSink(),
        session=make_session(routes),
    )


TREE_ROUTES = {
    f"{API}/groups": [[_group(1, "root")]],
    f"{API}/groups/1/subgroups": [[_group(2, "root/a"), _group(3, "root/b")]],
    f"{API}/groups/2/subgroups": [[_group(4, "root/a/a1")]],
    f"{API}/groups/3/subgroups": [[]],
    f"{API}/groups/4/subgroups": [[]],
}


def test_group_walk_reaches_nested_subgroups() -> None:
    """root -> {a, b}, a -> {a1} must yield all four groups."""
    groups = _source(TREE_ROUTES).discover_groups()

    assert groups == [
        Group(1, "root"),
        Group(2, "root/a"),
        Group(3, "root/b"),
        Group(4, "root/a/a1"),
    ]


def test_group_walk_lists_each_group_once() -> None:
    routes = dict(TREE_ROUTES)
    # /groups already returns a subgroup the walk will also find below root
    routes[f"{API}/groups"] = [[_group(1, "root"), _group(2, "root/a")]]
    source = _source(routes)

    groups = source.discover_groups()

    assert [g.id for g in groups] == [1, 2, 3, 4]
    requested = [c.args[0] for c in source.paginator.session.get.call_args_list]
    assert requested.count(f"{API}/groups/2/subgroups") == 1


def test_bash_style_lists_projects_of_every_group() -> None:
    routes = dict(TREE_ROUTES)
    routes.update(
        {
            f"{API}/groups/1/projects": [[_project("infra", "root")]],
            f"{API}/groups/2/projects": [[]],
            f"{API}/groups/3/projects": [[_project("api", "root/b"), {"name": "broken"}]],
            f"{API}/groups/4/projects": [[_project("deep", "root/a/a1")]],
        }
    )

    repos = _source(routes).list_repositories(GitLabFetchMode.BASH_STYLE)

    assert [r.full_name for r in repos] == ["root/infra", "root/b/api", "root/a/a1/deep"]


def test_recursive_mode_uses_single_project_listing() -> None:
    source = _source(
        {f"{API}/projects": [[_project("site", "me"), _project("svc", "team/backend")]]}
    )

    repos = source.list_repositories(GitLabFetchMode.RECURSIVE)

    assert repos[1] == RepoInfo(
        "team/backend", "svc", "https://gitlab.example.com/team/backend/svc.git"
    )
    params = source.paginator.session.get.call_args.kwargs["params"]
    assert params["include_subgroups"] == "true"


def test_subgroup_failure_aborts_walk() -> None:
    routes = dict(TREE_ROUTES)
    routes[f"{API}/groups/2/subgroups"] = make_response(500, text="internal error")
    source = _source(routes)

    with pytest.raises(APIError) as excinfo:
        source.list_repositories(GitLabFetchMode.BASH_STYLE)

    assert excinfo.value.status == 500
    assert excinfo.value.body == "internal error"


def test_groups_without_id_are_skipped() -> None:
    source = _source(
        {
            f"{API}/groups": [[{"full_path": "ghost"}, {"id": "7", "full_path": "str-id"}]],
        }
    )

    assert source.discover_groups() == []


@patch("gitlab_source.gitlab.Gitlab")
def test_connect_reports_authentication_error(mock_gitlab: MagicMock) -> None:
    mock_gitlab.return_value.auth.side_effect = (
        gitlab.exceptions.GitlabAuthenticationError("401 Unauthorized", 401)
    )

    with pytest.raises(AuthenticationFailed):
        _source({}).connect()


@patch("gitlab_source.gitlab.Gitlab")
def test_connect_returns_username(mock_gitlab: MagicMock) -> None:
    mock_gitlab.return_value.user.username = "dev"

    assert _source({}).connect() == "dev"
    mock_gitlab.assert_called_once_with(
        url="https://gitlab.example.com", private_token="glpat-testtoken"
    )


@patch("gitlab_source.gitlab.Gitlab")
def test_connect_network_failure_becomes_api_error(mock_gitlab: MagicMock) -> None:
    mock_gitlab.return_value.auth.side_effect = requests.ConnectionError("unreachable")

    with pytest.raises(APIError) as excinfo:
        _source({}).connect()

    assert excinfo.value.status is None
    assert excinfo.value.context == "GitLab (user)"
