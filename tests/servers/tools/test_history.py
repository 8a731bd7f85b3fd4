import pytest
from inline_snapshot import snapshot

from lovable_mcp.clients.errors.github import ResourceNotFoundError
from lovable_mcp.servers.dispatcher import CapabilityRequest, Dispatcher
from lovable_mcp.servers.registry import ExecutionContext
from lovable_mcp.servers.shared.errors import FailureKind
from lovable_mcp.servers.tools.base import RepositoryArguments
from lovable_mcp.servers.tools.history import (
    CompareArguments,
    CreateBranchArguments,
    CreateTagArguments,
    GetCommitsArguments,
    create_branch,
    create_tag,
    get_branches,
    get_commits,
    get_diff,
)
from tests.conftest import FakeGitHubClient


async def test_get_commits(context: ExecutionContext):
    commits = await get_commits(GetCommitsArguments(repo="demo", limit=1), context)

    assert [commit.message for commit in commits] == ["Use tailwind"]


async def test_get_branches(context: ExecutionContext):
    assert await get_branches(RepositoryArguments(repo="demo"), context) == ["main"]


async def test_create_branch(context: ExecutionContext, fake_client: FakeGitHubClient):
    main_sha = fake_client.repositories["demo"].branches["main"]

    reference = await create_branch(CreateBranchArguments(repo="demo", branch="feature/login"), context)

    assert reference.ref == "refs/heads/feature/login"
    assert reference.sha == main_sha
    assert fake_client.calls == snapshot(["get_git_ref:heads/main", "create_git_ref:refs/heads/feature/login"])


async def test_create_branch_from_missing_branch(dispatcher: Dispatcher):
    result = await dispatcher.dispatch(
        CapabilityRequest(capability_name="create_branch", arguments={"repo": "demo", "branch": "x", "fromBranch": "develop"})
    )

    assert result.failure is not None
    assert result.failure.kind == FailureKind.UPSTREAM_FAILURE


async def test_create_lightweight_tag(context: ExecutionContext, fake_client: FakeGitHubClient):
    reference = await create_tag(CreateTagArguments(repo="demo", tag="v1.0.0"), context)

    assert reference.ref == "refs/tags/v1.0.0"
    assert reference.sha == fake_client.repositories["demo"].branches["main"]
    assert not any(call.startswith("create_tag_object") for call in fake_client.calls)


async def test_create_annotated_tag(context: ExecutionContext, fake_client: FakeGitHubClient):
    reference = await create_tag(CreateTagArguments(repo="demo", tag="v1.0.0", message="First release"), context)

    assert reference.sha != fake_client.repositories["demo"].branches["main"]
    assert "create_tag_object:v1.0.0" in fake_client.calls


async def test_get_diff(context: ExecutionContext):
    diff = await get_diff(CompareArguments(repo="demo", base="main", head="feature"), context)

    assert diff.startswith("diff --git")


async def test_missing_repository(context: ExecutionContext):
    with pytest.raises(ResourceNotFoundError):
        _ = await get_branches(RepositoryArguments(repo="missing"), context)
