from typing import Literal

from pydantic import Field

from lovable_mcp.clients.models.github import CodeSearchMatch, Commit, Issue
from lovable_mcp.servers.registry import Capability, CapabilityArguments, CapabilityRegistry, ExecutionContext
from lovable_mcp.servers.shared.annotations import DEFAULT_LIMIT, LIMIT, QUERY, REPO


def scoped_query(query: str, owner: str, repo: str, **qualifiers: str | None) -> str:
    """Restrict a search query to one repository and append the qualifiers that are set."""

    terms = [query, f"repo:{owner}/{repo}"]

    terms.extend(f"{qualifier}:{value}" for qualifier, value in qualifiers.items() if value)

    return " ".join(terms)


class SearchCodeArguments(CapabilityArguments):
    repo: REPO
    query: QUERY
    path: str | None = Field(default=None, description="Only search files under this path, for example 'src/components'.")
    extension: str | None = Field(default=None, description="Only search files with this extension, for example 'tsx'.")
    limit: LIMIT = DEFAULT_LIMIT


class SearchCommitsArguments(CapabilityArguments):
    repo: REPO
    query: QUERY
    author: str | None = Field(default=None, description="Only return commits by this GitHub login.")
    limit: LIMIT = DEFAULT_LIMIT


class SearchIssuesArguments(CapabilityArguments):
    repo: REPO
    query: QUERY
    state: Literal["open", "closed"] | None = Field(default=None, description="Only return issues in this state.")
    type: Literal["issue", "pr"] | None = Field(default=None, description="Only return issues or only pull requests.")
    limit: LIMIT = DEFAULT_LIMIT


async def search_code(arguments: SearchCodeArguments, context: ExecutionContext) -> list[CodeSearchMatch]:
    """Search for code in a Lovable project."""

    query = scoped_query(arguments.query, context.owner, arguments.repo, path=arguments.path, extension=arguments.extension)

    return await context.github_client.search_code(query=query, per_page=arguments.limit)


async def search_commits(arguments: SearchCommitsArguments, context: ExecutionContext) -> list[Commit]:
    """Search the commit messages of a Lovable project."""

    query = scoped_query(arguments.query, context.owner, arguments.repo, author=arguments.author)

    return await context.github_client.search_commits(query=query, per_page=arguments.limit)


async def search_issues(arguments: SearchIssuesArguments, context: ExecutionContext) -> list[Issue]:
    """Search the issues and pull requests of a Lovable project."""

    query = scoped_query(arguments.query, context.owner, arguments.repo, state=arguments.state, **{"is": arguments.type})

    return await context.github_client.search_issues(query=query, per_page=arguments.limit)


def register_tools(registry: CapabilityRegistry) -> CapabilityRegistry:
    for handler in (search_code, search_commits, search_issues):
        _ = registry.register(Capability.from_function(fn=handler))

    return registry
