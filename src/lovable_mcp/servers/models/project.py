from datetime import datetime
from enum import StrEnum
from typing import Any, Self

from pydantic import Field

from lovable_mcp.clients.models.github import Commit, Contributor, DirectoryEntry, GitHubModel, Repository
from lovable_mcp.servers.shared.utility import strip_extension


class LovableProject(GitHubModel):
    """A repository that carries the files every Lovable project is generated with."""

    name: str = Field(description="The name of the repository.")
    full_name: str = Field(description="The owner/name of the repository.")
    description: str | None = Field(default=None, description="The description of the repository.")
    private: bool = Field(description="Whether the repository is private.")
    url: str = Field(description="The HTML URL of the repository.")
    updated_at: datetime | None = Field(default=None, description="When the repository was last updated.")
    language: str | None = Field(default=None, description="The primary language of the repository.")

    @classmethod
    def from_repository(cls, repository: Repository) -> Self:
        return cls(
            name=repository.name,
            full_name=repository.full_name,
            description=repository.description,
            private=repository.private,
            url=repository.url,
            updated_at=repository.updated_at,
            language=repository.language,
        )


class ProjectDetails(Repository):
    """Repository metadata merged with the project's manifest and latest commits."""

    dependencies: dict[str, str] = Field(default_factory=dict, description="The runtime dependencies from package.json.")
    dev_dependencies: dict[str, str] = Field(default_factory=dict, description="The development dependencies from package.json.")
    recent_commits: list[Commit] = Field(default_factory=list, description="The latest commits on the default branch.")


class LanguageShare(GitHubModel):
    language: str = Field(description="The name of the language.")
    bytes_of_code: int = Field(description="The number of bytes of code in the language.")
    percentage: float = Field(description="The share of the repository's code in the language, in percent.")


def language_shares(languages: dict[str, int]) -> list[LanguageShare]:
    """Convert byte counts per language into shares, largest first, rounded to one decimal."""

    total = sum(languages.values())

    shares = [
        LanguageShare(language=language, bytes_of_code=byte_count, percentage=round(byte_count * 100 / total, 1) if total else 0.0)
        for language, byte_count in languages.items()
    ]

    return sorted(shares, key=lambda share: share.bytes_of_code, reverse=True)


class ProjectStats(GitHubModel):
    name: str = Field(description="The name of the repository.")
    size: int | None = Field(default=None, description="The size of the repository in kilobytes.")
    default_branch: str | None = Field(default=None, description="The default branch of the repository.")
    languages: list[LanguageShare] = Field(default_factory=list, description="The languages used, largest first.")
    contributors: list[Contributor] = Field(default_factory=list, description="The contributors to the repository.")
    recent_commits: list[Commit] = Field(default_factory=list, description="The latest commits on the default branch.")


class FolderItem(GitHubModel):
    name: str = Field(description="The name of the item, without a .ts or .tsx extension.")
    path: str = Field(description="The path of the item.")
    type: str = Field(description="The type of the item: file or dir.")

    @classmethod
    def from_directory_entry(cls, directory_entry: DirectoryEntry) -> Self:
        return cls(name=strip_extension(directory_entry.name), path=directory_entry.path, type=directory_entry.type)


class FolderListing(GitHubModel):
    """The contents of a conventional project folder, or an explicit marker that the folder does not exist."""

    folder: str = Field(description="The folder that was listed, or the first folder tried when none was found.")
    found: bool = Field(description="Whether the folder exists.")
    items: list[FolderItem] = Field(default_factory=list, description="The items in the folder.")
    message: str | None = Field(default=None, description="Why the listing is empty.")

    @classmethod
    def from_entries(cls, folder: str, entries: list[DirectoryEntry]) -> Self:
        return cls(folder=folder, found=True, items=[FolderItem.from_directory_entry(directory_entry=entry) for entry in entries])

    @classmethod
    def absent(cls, folder: str, kind: str) -> Self:
        return cls(folder=folder, found=False, items=[], message=f"No {kind} found")


class WellKnownFile(GitHubModel):
    """A conventional project file, or an explicit marker that it does not exist."""

    path: str = Field(description="The path of the file that was found, or the first path tried.")
    found: bool = Field(description="Whether the file exists.")
    content: str | None = Field(default=None, description="The content of the file.")


class SupabaseConfig(GitHubModel):
    config: WellKnownFile = Field(description="The Supabase project configuration.")
    migrations: FolderListing = Field(description="The database migrations.")
    functions: FolderListing = Field(description="The edge functions.")


class PackageManifest(GitHubModel):
    path: str = Field(description="The path of the manifest.")
    found: bool = Field(description="Whether the manifest exists.")
    content: dict[str, Any] | None = Field(default=None, description="The parsed manifest.")


class DependencyReport(GitHubModel):
    found: bool = Field(description="Whether the project has a package.json.")
    total: int = Field(description="The number of runtime and development dependencies.")
    categories: dict[str, list[str]] = Field(description="The dependency names in each category. Unmatched names are under 'other'.")


class Route(GitHubModel):
    path: str = Field(description="The URL path of the route.")
    element: str | None = Field(default=None, description="The component rendered for the route.")


class RouteTable(GitHubModel):
    entry: str = Field(description="The file the routes were read from.")
    found: bool = Field(description="Whether the file exists.")
    routes: list[Route] = Field(default_factory=list, description="The routes declared in the file.")


class BuildUrl(GitHubModel):
    url: str = Field(description="The link that opens Lovable and submits the prompt.")
    prompt_length: int = Field(description="The number of characters in the prompt.")
    image_count: int = Field(default=0, description="The number of image URLs included in the link.")


class FileChange(GitHubModel):
    success: bool = Field(default=True, description="Whether the change was committed.")
    path: str = Field(description="The path that was changed.")
    commit: str | None = Field(default=None, description="The SHA of the commit that was created.")
    sha: str | None = Field(default=None, description="The new blob SHA of the file.")
    created: bool | None = Field(default=None, description="Whether the file was created rather than updated.")
    deleted: bool | None = Field(default=None, description="Whether the file was deleted.")


class SagaStatus(StrEnum):
    FULL_SUCCESS = "success"
    PARTIAL_SUCCESS = "partial_success"


class SagaOutcome(GitHubModel):
    """The result of a capability that needs several upstream writes.

    A partial success means some writes were committed and a later one failed, so the repository is left in an
    intermediate state that the caller has to resolve."""

    status: SagaStatus = Field(description="Whether every step was committed.")
    completed: list[str] = Field(default_factory=list, description="The steps that were committed.")
    failed: str | None = Field(default=None, description="The step that failed.")
    detail: str | None = Field(default=None, description="What the caller has to do after a partial success.")
    changes: list[FileChange] = Field(default_factory=list, description="The commits that were created.")

    @property
    def is_partial(self) -> bool:
        return self.status == SagaStatus.PARTIAL_SUCCESS
