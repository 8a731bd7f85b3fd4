from typing import Annotated, Literal

from pydantic import Field

from lovable_mcp.clients.github import without_none
from lovable_mcp.clients.models.github import Issue, MergeResult, PullRequest
from lovable_mcp.servers.registry import Capability, CapabilityArguments, CapabilityRegistry, ExecutionContext
from lovable_mcp.servers.shared.annotations import DEFAULT_BRANCH, DEFAULT_LIMIT, LABELS, LIMIT, NUMBER, REPO, STATE

TITLE = Annotated[str, Field(description="The title.", min_length=1)]


class ListPullRequestsArguments(CapabilityArguments):
    repo: REPO
    state: STATE = "open"
    limit: LIMIT = DEFAULT_LIMIT


class NumberArguments(CapabilityArguments):
    repo: REPO
    number: NUMBER


class CreatePullRequestArguments(CapabilityArguments):
    repo: REPO
    title: TITLE
    head: str = Field(description="The branch that contains the changes.", min_length=1)
    base: str = Field(default=DEFAULT_BRANCH, description="The branch to merge the changes into.")
    body: str | None = Field(default=None, description="The description of the pull request.")
    draft: bool = Field(default=False, description="Whether to open the pull request as a draft.")


class MergePullRequestArguments(CapabilityArguments):
    repo: REPO
    number: NUMBER
    merge_method: Literal["merge", "squash", "rebase"] = Field(default="merge", description="How to merge the pull request.")
    commit_title: str | None = Field(default=None, description="The title of the merge commit.")


class ListIssuesArguments(CapabilityArguments):
    repo: REPO
    state: STATE = "open"
    labels: LABELS = None
    limit: LIMIT = DEFAULT_LIMIT


class CreateIssueArguments(CapabilityArguments):
    repo: REPO
    title: TITLE
    body: str | None = Field(default=None, description="The body of the issue.")
    labels: LABELS = None
    assignees: list[str] | None = Field(default=None, description="The logins of the users to assign.")


class UpdateIssueArguments(CapabilityArguments):
    repo: REPO
    number: NUMBER
    title: str | None = Field(default=None, description="The new title.")
    body: str | None = Field(default=None, description="The new body.")
    state: Literal["open", "closed"] | None = Field(default=None, description="Open or close the issue.")
    labels: LABELS = None


async def list_pull_requests(arguments: ListPullRequestsArguments, context: ExecutionContext) -> list[PullRequest]:
    """List the pull requests of a Lovable project."""

    return await context.github_client.list_pull_requests(
        owner=context.owner, repo=arguments.repo, state=arguments.state, per_page=arguments.limit
    )


async def get_pull_request(arguments: NumberArguments, context: ExecutionContext) -> PullRequest:
    """Get a pull request of a Lovable project."""

    return await context.github_client.get_pull_request(owner=context.owner, repo=arguments.repo, number=arguments.number)


async def create_pull_request(arguments: CreatePullRequestArguments, context: ExecutionContext) -> PullRequest:
    """Open a pull request in a Lovable project."""

    pull_request = without_none(title=arguments.title, head=arguments.head, base=arguments.base, body=arguments.body, draft=arguments.draft)

    return await context.github_client.create_pull_request(owner=context.owner, repo=arguments.repo, pull_request=pull_request)


async def merge_pull_request(arguments: MergePullRequestArguments, context: ExecutionContext) -> MergeResult:
    """Merge a pull request of a Lovable project. Fails with ConflictOrStale if it cannot be merged."""

    merge = without_none(merge_method=arguments.merge_method, commit_title=arguments.commit_title)

    return await context.github_client.merge_pull_request(owner=context.owner, repo=arguments.repo, number=arguments.number, merge=merge)


async def list_issues(arguments: ListIssuesArguments, context: ExecutionContext) -> list[Issue]:
    """List the issues of a Lovable project. Pull requests are not included."""

    return await context.github_client.list_issues(
        owner=context.owner,
        repo=arguments.repo,
        state=arguments.state,
        labels=",".join(arguments.labels) if arguments.labels else None,
        per_page=arguments.limit,
    )


async def create_issue(arguments: CreateIssueArguments, context: ExecutionContext) -> Issue:
    """Open an issue in a Lovable project."""

    issue = without_none(title=arguments.title, body=arguments.body, labels=arguments.labels, assignees=arguments.assignees)

    return await context.github_client.create_issue(owner=context.owner, repo=arguments.repo, issue=issue)


async def update_issue(arguments: UpdateIssueArguments, context: ExecutionContext) -> Issue:
    """Edit, close or reopen an issue of a Lovable project. Only the fields that are given change."""

    issue = without_none(title=arguments.title, body=arguments.body, state=arguments.state, labels=arguments.labels)

    return await context.github_client.update_issue(owner=context.owner, repo=arguments.repo, number=arguments.number, issue=issue)


def register_tools(registry: CapabilityRegistry) -> CapabilityRegistry:
    for handler in (
        list_pull_requests,
        get_pull_request,
        create_pull_request,
        merge_pull_request,
        list_issues,
        create_issue,
        update_issue,
    ):
        _ = registry.register(Capability.from_function(fn=handler))

    return registry
