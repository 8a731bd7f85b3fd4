from pydantic import Field

from lovable_mcp.clients.github import without_none
from lovable_mcp.clients.models.github import Commit, CommitDetail, Comparison, GitReference, Release, Tag
from lovable_mcp.servers.registry import Capability, CapabilityArguments, CapabilityRegistry, ExecutionContext
from lovable_mcp.servers.shared.annotations import BRANCH, DEFAULT_BRANCH, DEFAULT_LIMIT, FROM_BRANCH, LIMIT, REPO
from lovable_mcp.servers.tools.base import RepositoryArguments

DEFAULT_COMMIT_LIMIT = 10


class GetCommitsArguments(CapabilityArguments):
    repo: REPO
    limit: LIMIT = DEFAULT_COMMIT_LIMIT
    branch: BRANCH = None
    path: str | None = Field(default=None, description="Only return commits that touched this path.")


class GetCommitArguments(CapabilityArguments):
    repo: REPO
    sha: str = Field(description="The SHA, branch or tag of the commit.", min_length=1)


class CreateBranchArguments(CapabilityArguments):
    repo: REPO
    branch: str = Field(description="The name of the new branch.", min_length=1)
    from_branch: FROM_BRANCH = DEFAULT_BRANCH


class ListArguments(CapabilityArguments):
    repo: REPO
    limit: LIMIT = DEFAULT_LIMIT


class CreateTagArguments(CapabilityArguments):
    repo: REPO
    tag: str = Field(description="The name of the tag, for example 'v1.0.0'.", min_length=1)
    from_branch: FROM_BRANCH = DEFAULT_BRANCH
    message: str | None = Field(default=None, description="A message for an annotated tag. Without it the tag is lightweight.")


class CreateReleaseArguments(CapabilityArguments):
    repo: REPO
    tag_name: str = Field(description="The tag to release. It is created from targetCommitish if it does not exist.", min_length=1)
    name: str | None = Field(default=None, description="The title of the release.")
    body: str | None = Field(default=None, description="The release notes.")
    target_commitish: str | None = Field(default=None, description="The branch or commit to tag. Defaults to the default branch.")
    draft: bool = Field(default=False, description="Whether to create a draft release.")
    prerelease: bool = Field(default=False, description="Whether to mark the release as a prerelease.")


class CompareArguments(CapabilityArguments):
    repo: REPO
    base: str = Field(description="The base branch or commit.", min_length=1)
    head: str = Field(description="The head branch or commit.", min_length=1)


async def get_commits(arguments: GetCommitsArguments, context: ExecutionContext) -> list[Commit]:
    """Get the recent commits of a Lovable project."""

    return await context.github_client.list_commits(
        owner=context.owner, repo=arguments.repo, per_page=arguments.limit, sha=arguments.branch, path=arguments.path
    )


async def get_commit(arguments: GetCommitArguments, context: ExecutionContext) -> CommitDetail:
    """Get a commit of a Lovable project with the files it changed."""

    return await context.github_client.get_commit(owner=context.owner, repo=arguments.repo, ref=arguments.sha)


async def get_branches(arguments: RepositoryArguments, context: ExecutionContext) -> list[str]:
    """List the branches of a Lovable project."""

    branches = await context.github_client.list_branches(owner=context.owner, repo=arguments.repo)

    return [branch.name for branch in branches]


async def create_branch(arguments: CreateBranchArguments, context: ExecutionContext) -> GitReference:
    """Create a new branch in a Lovable project."""

    client = context.github_client

    source = await client.get_git_ref(owner=context.owner, repo=arguments.repo, ref=f"heads/{arguments.from_branch}")

    return await client.create_git_ref(owner=context.owner, repo=arguments.repo, ref=f"refs/heads/{arguments.branch}", sha=source.sha)


async def list_tags(arguments: ListArguments, context: ExecutionContext) -> list[Tag]:
    """List the tags of a Lovable project."""

    return await context.github_client.list_tags(owner=context.owner, repo=arguments.repo, per_page=arguments.limit)


async def create_tag(arguments: CreateTagArguments, context: ExecutionContext) -> GitReference:
    """Tag the head of a branch of a Lovable project. A message makes it an annotated tag."""

    client = context.github_client

    source = await client.get_git_ref(owner=context.owner, repo=arguments.repo, ref=f"heads/{arguments.from_branch}")

    target_sha = source.sha

    if arguments.message:
        target_sha = await client.create_tag_object(
            owner=context.owner, repo=arguments.repo, tag=arguments.tag, message=arguments.message, sha=source.sha
        )

    return await client.create_git_ref(owner=context.owner, repo=arguments.repo, ref=f"refs/tags/{arguments.tag}", sha=target_sha)


async def list_releases(arguments: ListArguments, context: ExecutionContext) -> list[Release]:
    """List the releases of a Lovable project."""

    return await context.github_client.list_releases(owner=context.owner, repo=arguments.repo, per_page=arguments.limit)


async def create_release(arguments: CreateReleaseArguments, context: ExecutionContext) -> Release:
    """Publish a release of a Lovable project."""

    release = without_none(
        tag_name=arguments.tag_name,
        name=arguments.name,
        body=arguments.body,
        target_commitish=arguments.target_commitish,
        draft=arguments.draft,
        prerelease=arguments.prerelease,
    )

    return await context.github_client.create_release(owner=context.owner, repo=arguments.repo, release=release)


async def compare(arguments: CompareArguments, context: ExecutionContext) -> Comparison:
    """Compare two branches or commits: how far apart they are and which files differ."""

    return await context.github_client.compare(owner=context.owner, repo=arguments.repo, base=arguments.base, head=arguments.head)


async def get_diff(arguments: CompareArguments, context: ExecutionContext) -> str:
    """Get the unified diff between two branches or commits."""

    return await context.github_client.get_diff(owner=context.owner, repo=arguments.repo, base=arguments.base, head=arguments.head)


def register_tools(registry: CapabilityRegistry) -> CapabilityRegistry:
    for handler in (
        get_commits,
        get_commit,
        get_branches,
        create_branch,
        list_tags,
        create_tag,
        list_releases,
        create_release,
        compare,
        get_diff,
    ):
        _ = registry.register(Capability.from_function(fn=handler))

    return registry
