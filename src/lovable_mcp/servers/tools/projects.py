import asyncio

from fastmcp.utilities.logging import get_logger
from pydantic import Field

from lovable_mcp.clients.errors.github import ClientError
from lovable_mcp.clients.models.github import Contributor, DirectoryEntry
from lovable_mcp.servers.conventions import is_lovable_project
from lovable_mcp.servers.models.project import LanguageShare, LovableProject, ProjectDetails, ProjectStats, language_shares
from lovable_mcp.servers.registry import Capability, CapabilityArguments, CapabilityRegistry, ExecutionContext
from lovable_mcp.servers.shared.annotations import DEFAULT_LIMIT, DIRECTORY_PATH, LIMIT, REPO
from lovable_mcp.servers.tools.base import RepositoryArguments, manifest_dependencies, read_package_manifest

logger = get_logger(__name__)

RECENT_COMMITS = 5


class ListProjectsArguments(CapabilityArguments):
    include_private: bool = Field(default=False, description="Whether to include private repositories.")


class ProjectStructureArguments(CapabilityArguments):
    repo: REPO
    path: DIRECTORY_PATH = None


class ContributorsArguments(CapabilityArguments):
    repo: REPO
    limit: LIMIT = DEFAULT_LIMIT


async def check_lovable_project(context: ExecutionContext, repo: str) -> bool:
    try:
        entries = await context.github_client.list_directory(owner=context.owner, repo=repo, error_on_not_found=False)
    except ClientError as e:
        logger.warning(f"Could not check whether {repo} is a Lovable project: {e}")
        return False

    # An empty repository has no root directory
    if entries is None:
        return False

    return is_lovable_project(entry.name for entry in entries)


async def list_projects(arguments: ListProjectsArguments, context: ExecutionContext) -> list[LovableProject]:
    """List the Lovable projects in the configured GitHub account, most recently updated first."""

    repositories = await context.github_client.list_repositories(owner=context.owner)

    candidates = [repository for repository in repositories if arguments.include_private or not repository.private]

    checks: list[bool] = await asyncio.gather(*[check_lovable_project(context=context, repo=repository.name) for repository in candidates])

    return [
        LovableProject.from_repository(repository=repository) for repository, is_project in zip(candidates, checks, strict=True) if is_project
    ]


async def get_project(arguments: RepositoryArguments, context: ExecutionContext) -> ProjectDetails:
    """Get detailed information about a Lovable project: repository metadata, dependencies and the latest commits."""

    client = context.github_client

    repository, commits, manifest = await asyncio.gather(
        client.get_repository(owner=context.owner, repo=arguments.repo),
        client.list_commits(owner=context.owner, repo=arguments.repo, per_page=RECENT_COMMITS),
        read_package_manifest(context=context, repo=arguments.repo),
    )

    return ProjectDetails(
        **repository.model_dump(),
        dependencies=manifest_dependencies(manifest, "dependencies"),
        dev_dependencies=manifest_dependencies(manifest, "devDependencies"),
        recent_commits=commits[:RECENT_COMMITS],
    )


async def get_project_structure(arguments: ProjectStructureArguments, context: ExecutionContext) -> list[DirectoryEntry]:
    """Get the files and folders at a path of a Lovable project."""

    return await context.github_client.list_directory(owner=context.owner, repo=arguments.repo, path=arguments.path or "")


async def _contributors_or_empty(context: ExecutionContext, repo: str) -> list[Contributor]:
    try:
        return await context.github_client.list_contributors(owner=context.owner, repo=repo)
    except ClientError as e:
        logger.warning(f"Could not list contributors of {repo}, reporting none: {e}")
        return []


async def get_project_stats(arguments: RepositoryArguments, context: ExecutionContext) -> ProjectStats:
    """Get statistics for a Lovable project: size, languages, contributors and recent activity."""

    client = context.github_client

    repository, languages, contributors, commits = await asyncio.gather(
        client.get_repository(owner=context.owner, repo=arguments.repo),
        client.list_languages(owner=context.owner, repo=arguments.repo),
        _contributors_or_empty(context=context, repo=arguments.repo),
        client.list_commits(owner=context.owner, repo=arguments.repo, per_page=RECENT_COMMITS),
    )

    return ProjectStats(
        name=repository.name,
        size=repository.size,
        default_branch=repository.default_branch,
        languages=language_shares(languages),
        contributors=contributors,
        recent_commits=commits,
    )


async def get_contributors(arguments: ContributorsArguments, context: ExecutionContext) -> list[Contributor]:
    """List the contributors of a Lovable project by number of commits."""

    return await context.github_client.list_contributors(owner=context.owner, repo=arguments.repo, per_page=arguments.limit)


async def get_languages(arguments: RepositoryArguments, context: ExecutionContext) -> list[LanguageShare]:
    """Get the languages of a Lovable project with their share of the code."""

    languages = await context.github_client.list_languages(owner=context.owner, repo=arguments.repo)

    return language_shares(languages)


def register_tools(registry: CapabilityRegistry) -> CapabilityRegistry:
    for handler in (list_projects, get_project, get_project_structure, get_project_stats, get_contributors, get_languages):
        _ = registry.register(Capability.from_function(fn=handler))

    return registry
