from datetime import datetime
from typing import Any, Self

from githubkit.utils import UNSET
from githubkit.versions.v2022_11_28.models import CodeSearchResultItem as GitHubKitCodeSearchResultItem
from githubkit.versions.v2022_11_28.models import Commit as GitHubKitCommit
from githubkit.versions.v2022_11_28.models import CommitComparison as GitHubKitCommitComparison
from githubkit.versions.v2022_11_28.models import CommitSearchResultItem as GitHubKitCommitSearchResultItem
from githubkit.versions.v2022_11_28.models import ContentDirectoryItems as GitHubKitContentDirectoryItems
from githubkit.versions.v2022_11_28.models import ContentFile as GitHubKitContentFile
from githubkit.versions.v2022_11_28.models import Contributor as GitHubKitContributor
from githubkit.versions.v2022_11_28.models import DiffEntry as GitHubKitDiffEntry
from githubkit.versions.v2022_11_28.models import FileCommit as GitHubKitFileCommit
from githubkit.versions.v2022_11_28.models import FullRepository as GitHubKitFullRepository
from githubkit.versions.v2022_11_28.models import GitRef as GitHubKitGitRef
from githubkit.versions.v2022_11_28.models import Issue as GitHubKitIssue
from githubkit.versions.v2022_11_28.models import IssueSearchResultItem as GitHubKitIssueSearchResultItem
from githubkit.versions.v2022_11_28.models import MinimalRepository as GitHubKitMinimalRepository
from githubkit.versions.v2022_11_28.models import PullRequest as GitHubKitPullRequest
from githubkit.versions.v2022_11_28.models import PullRequestMergeResult as GitHubKitPullRequestMergeResult
from githubkit.versions.v2022_11_28.models import PullRequestSimple as GitHubKitPullRequestSimple
from githubkit.versions.v2022_11_28.models import Release as GitHubKitRelease
from githubkit.versions.v2022_11_28.models import ShortBranch as GitHubKitShortBranch
from githubkit.versions.v2022_11_28.models import Tag as GitHubKitTag
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from lovable_mcp.servers.shared.utility import decode_content

SHORT_SHA_LENGTH = 7


def unset_to_none(value: Any) -> Any:  # pyright: ignore[reportAny]
    """githubkit marks fields the API omitted with UNSET, we report them as None."""
    return None if value is UNSET else value


def short_sha(sha: str) -> str:
    return sha[:SHORT_SHA_LENGTH]


class GitHubModel(BaseModel):
    """Base for models returned to clients. Field names are camelCase on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Repository(GitHubModel):
    """A repository owned by the configured account."""

    name: str = Field(description="The name of the repository.")
    full_name: str = Field(description="The owner/name of the repository.")
    description: str | None = Field(default=None, description="The description of the repository.")
    private: bool = Field(description="Whether the repository is private.")
    url: str = Field(description="The HTML URL of the repository.")
    default_branch: str | None = Field(default=None, description="The default branch of the repository.")
    language: str | None = Field(default=None, description="The primary language of the repository.")
    size: int | None = Field(default=None, description="The size of the repository in kilobytes.")
    created_at: datetime | None = Field(default=None, description="When the repository was created.")
    updated_at: datetime | None = Field(default=None, description="When the repository was last updated.")
    pushed_at: datetime | None = Field(default=None, description="When the repository was last pushed to.")

    @classmethod
    def from_full_repository(cls, full_repository: GitHubKitFullRepository) -> Self:
        return cls(
            name=full_repository.name,
            full_name=full_repository.full_name,
            description=full_repository.description,
            private=full_repository.private,
            url=full_repository.html_url,
            default_branch=full_repository.default_branch,
            language=full_repository.language,
            size=full_repository.size,
            created_at=full_repository.created_at,
            updated_at=full_repository.updated_at,
            pushed_at=full_repository.pushed_at,
        )

    @classmethod
    def from_minimal_repository(cls, minimal_repository: GitHubKitMinimalRepository) -> Self:
        return cls(
            name=minimal_repository.name,
            full_name=minimal_repository.full_name,
            description=minimal_repository.description,
            private=minimal_repository.private,
            url=minimal_repository.html_url,
            default_branch=unset_to_none(minimal_repository.default_branch),
            language=unset_to_none(minimal_repository.language),
            size=unset_to_none(minimal_repository.size),
            created_at=unset_to_none(minimal_repository.created_at),
            updated_at=unset_to_none(minimal_repository.updated_at),
            pushed_at=unset_to_none(minimal_repository.pushed_at),
        )


class DirectoryEntry(GitHubModel):
    """An entry of a repository directory listing."""

    name: str = Field(description="The name of the entry.")
    type: str = Field(description="The type of the entry: file, dir, symlink or submodule.")
    path: str = Field(description="The path of the entry.")
    size: int = Field(description="The size of the entry in bytes.")

    @classmethod
    def from_content_directory_item(cls, content_directory_item: GitHubKitContentDirectoryItems) -> Self:
        return cls(
            name=content_directory_item.name,
            type=content_directory_item.type,
            path=content_directory_item.path,
            size=content_directory_item.size,
        )


class RepositoryFile(GitHubModel):
    """A file with its decoded content and current version token."""

    path: str = Field(description="The path of the file.")
    sha: str = Field(description="The blob SHA of the file, required to update or delete it.")
    size: int = Field(description="The size of the file in bytes.")
    content: str = Field(description="The decoded content of the file.")

    @classmethod
    def from_content_file(cls, content_file: GitHubKitContentFile, raw_content: bytes | None = None) -> Self:
        """Build from a contents response. `raw_content` is required for files too large to be inlined in the response."""
        return cls(
            path=content_file.path,
            sha=content_file.sha,
            size=content_file.size,
            content=decode_content(content_file.content) if raw_content is None else raw_content.decode("utf-8", errors="replace"),
        )


class FileCommit(GitHubModel):
    """The commit produced by a contents mutation."""

    path: str = Field(description="The path that was written or deleted.")
    commit_sha: str | None = Field(default=None, description="The SHA of the commit that was created.")
    content_sha: str | None = Field(default=None, description="The new blob SHA of the file, None after a delete.")
    commit_url: str | None = Field(default=None, description="The HTML URL of the commit.")

    @classmethod
    def from_file_commit(cls, path: str, file_commit: GitHubKitFileCommit) -> Self:
        content_sha: str | None = unset_to_none(file_commit.content.sha) if file_commit.content else None

        return cls(
            path=path,
            commit_sha=unset_to_none(file_commit.commit.sha),
            content_sha=content_sha,
            commit_url=unset_to_none(file_commit.commit.html_url),
        )


class ChangedFile(GitHubModel):
    """A file touched by a commit or a comparison."""

    filename: str = Field(description="The path of the file.")
    status: str = Field(description="How the file was changed.")
    additions: int = Field(description="The number of added lines.")
    deletions: int = Field(description="The number of deleted lines.")

    @classmethod
    def from_diff_entry(cls, diff_entry: GitHubKitDiffEntry) -> Self:
        return cls(filename=diff_entry.filename, status=diff_entry.status, additions=diff_entry.additions, deletions=diff_entry.deletions)


class Commit(GitHubModel):
    """A commit summary."""

    sha: str = Field(description="The abbreviated SHA of the commit.")
    message: str = Field(description="The commit message.")
    author: str | None = Field(default=None, description="The name of the commit author.")
    date: datetime | None = Field(default=None, description="When the commit was authored.")
    url: str = Field(description="The HTML URL of the commit.")

    @classmethod
    def from_commit(cls, commit: GitHubKitCommit) -> Self:
        author = commit.commit.author

        return cls(
            sha=short_sha(commit.sha),
            message=commit.commit.message,
            author=unset_to_none(author.name) if author else None,
            date=unset_to_none(author.date) if author else None,
            url=commit.html_url,
        )

    @classmethod
    def from_commit_search_result_item(cls, commit_search_result_item: GitHubKitCommitSearchResultItem) -> Self:
        author = commit_search_result_item.commit.author

        return cls(
            sha=short_sha(commit_search_result_item.sha),
            message=commit_search_result_item.commit.message,
            author=author.name,
            date=author.date,
            url=commit_search_result_item.html_url,
        )


class CommitDetail(Commit):
    """A commit with the files it changed."""

    full_sha: str = Field(description="The full SHA of the commit.")
    additions: int = Field(default=0, description="The total number of added lines.")
    deletions: int = Field(default=0, description="The total number of deleted lines.")
    files: list[ChangedFile] = Field(default_factory=list, description="The files changed by the commit.")

    @classmethod
    def from_commit(cls, commit: GitHubKitCommit) -> Self:
        summary = Commit.from_commit(commit=commit)
        stats = unset_to_none(commit.stats)
        files = unset_to_none(commit.files) or []

        return cls(
            **summary.model_dump(),
            full_sha=commit.sha,
            additions=unset_to_none(stats.additions) or 0 if stats else 0,
            deletions=unset_to_none(stats.deletions) or 0 if stats else 0,
            files=[ChangedFile.from_diff_entry(diff_entry=diff_entry) for diff_entry in files],
        )


class Branch(GitHubModel):
    """A branch and the commit it points at."""

    name: str = Field(description="The name of the branch.")
    sha: str = Field(description="The SHA of the commit at the tip of the branch.")
    protected: bool = Field(description="Whether the branch is protected.")

    @classmethod
    def from_short_branch(cls, short_branch: GitHubKitShortBranch) -> Self:
        return cls(name=short_branch.name, sha=short_branch.commit.sha, protected=short_branch.protected)


class GitReference(GitHubModel):
    """A git reference."""

    ref: str = Field(description="The fully qualified name of the reference.")
    sha: str = Field(description="The SHA of the object the reference points at.")
    ref_type: str = Field(description="The type of the object the reference points at.")

    @classmethod
    def from_git_ref(cls, git_ref: GitHubKitGitRef) -> Self:
        return cls(ref=git_ref.ref, sha=git_ref.object_.sha, ref_type=git_ref.object_.type)


class Tag(GitHubModel):
    name: str = Field(description="The name of the tag.")
    sha: str = Field(description="The SHA of the tagged commit.")

    @classmethod
    def from_tag(cls, tag: GitHubKitTag) -> Self:
        return cls(name=tag.name, sha=tag.commit.sha)


class Release(GitHubModel):
    id: int = Field(description="The ID of the release.")
    tag_name: str = Field(description="The tag the release points at.")
    name: str | None = Field(default=None, description="The title of the release.")
    draft: bool = Field(description="Whether the release is a draft.")
    prerelease: bool = Field(description="Whether the release is a prerelease.")
    url: str = Field(description="The HTML URL of the release.")
    created_at: datetime = Field(description="When the release was created.")
    published_at: datetime | None = Field(default=None, description="When the release was published.")
    body: str | None = Field(default=None, description="The release notes.")

    @classmethod
    def from_release(cls, release: GitHubKitRelease) -> Self:
        return cls(
            id=release.id,
            tag_name=release.tag_name,
            name=release.name,
            draft=release.draft,
            prerelease=release.prerelease,
            url=release.html_url,
            created_at=release.created_at,
            published_at=release.published_at,
            body=unset_to_none(release.body),
        )


class PullRequest(GitHubModel):
    number: int = Field(description="The number of the pull request.")
    title: str = Field(description="The title of the pull request.")
    state: str = Field(description="The state of the pull request.")
    author: str | None = Field(default=None, description="The login of the pull request author.")
    head: str = Field(description="The branch the changes come from.")
    base: str = Field(description="The branch the changes would be merged into.")
    draft: bool = Field(default=False, description="Whether the pull request is a draft.")
    merged: bool = Field(default=False, description="Whether the pull request has been merged.")
    url: str = Field(description="The HTML URL of the pull request.")
    created_at: datetime = Field(description="When the pull request was opened.")
    updated_at: datetime = Field(description="When the pull request was last updated.")
    body: str | None = Field(default=None, description="The description of the pull request.")

    @classmethod
    def from_pull_request(cls, pull_request: GitHubKitPullRequest | GitHubKitPullRequestSimple) -> Self:
        return cls(
            number=pull_request.number,
            title=pull_request.title,
            state=pull_request.state,
            author=pull_request.user.login if pull_request.user else None,
            head=pull_request.head.ref,
            base=pull_request.base.ref,
            draft=bool(unset_to_none(pull_request.draft)),
            merged=pull_request.merged_at is not None,
            url=pull_request.html_url,
            created_at=pull_request.created_at,
            updated_at=pull_request.updated_at,
            body=pull_request.body,
        )


class MergeResult(GitHubModel):
    sha: str = Field(description="The SHA of the merge commit.")
    merged: bool = Field(description="Whether the pull request was merged.")
    message: str = Field(description="The message GitHub returned for the merge.")

    @classmethod
    def from_pull_request_merge_result(cls, merge_result: GitHubKitPullRequestMergeResult) -> Self:
        return cls(sha=merge_result.sha, merged=merge_result.merged, message=merge_result.message)


def _label_names(labels: list[Any]) -> list[str]:  # pyright: ignore[reportAny]
    names: list[str] = []

    for label in labels:  # pyright: ignore[reportAny]
        if isinstance(label, str):
            names.append(label)
        elif name := unset_to_none(label.name):  # pyright: ignore[reportAny]
            names.append(name)

    return names


class Issue(GitHubModel):
    number: int = Field(description="The number of the issue.")
    title: str = Field(description="The title of the issue.")
    state: str = Field(description="The state of the issue.")
    author: str | None = Field(default=None, description="The login of the issue author.")
    labels: list[str] = Field(default_factory=list, description="The names of the labels on the issue.")
    comments: int = Field(default=0, description="The number of comments on the issue.")
    is_pull_request: bool = Field(default=False, description="Whether the item is a pull request.")
    url: str = Field(description="The HTML URL of the issue.")
    created_at: datetime = Field(description="When the issue was opened.")
    updated_at: datetime = Field(description="When the issue was last updated.")
    body: str | None = Field(default=None, description="The body of the issue.")

    @classmethod
    def from_issue(cls, issue: GitHubKitIssue | GitHubKitIssueSearchResultItem) -> Self:
        return cls(
            number=issue.number,
            title=issue.title,
            state=issue.state,
            author=issue.user.login if issue.user else None,
            labels=_label_names(issue.labels),
            comments=issue.comments,
            is_pull_request=unset_to_none(issue.pull_request) is not None,
            url=issue.html_url,
            created_at=issue.created_at,
            updated_at=issue.updated_at,
            body=unset_to_none(issue.body),
        )


class Comparison(GitHubModel):
    """The result of comparing two refs."""

    status: str = Field(description="Whether head is ahead of, behind, identical to or diverged from base.")
    ahead: int = Field(description="The number of commits head is ahead of base.")
    behind: int = Field(description="The number of commits head is behind base.")
    total_commits: int = Field(description="The number of commits in the comparison.")
    files: list[ChangedFile] = Field(default_factory=list, description="The files that differ.")

    @classmethod
    def from_commit_comparison(cls, commit_comparison: GitHubKitCommitComparison) -> Self:
        files = unset_to_none(commit_comparison.files) or []

        return cls(
            status=commit_comparison.status,
            ahead=commit_comparison.ahead_by,
            behind=commit_comparison.behind_by,
            total_commits=commit_comparison.total_commits,
            files=[ChangedFile.from_diff_entry(diff_entry=diff_entry) for diff_entry in files],
        )


class CodeSearchMatch(GitHubModel):
    path: str = Field(description="The path of the matching file.")
    name: str = Field(description="The name of the matching file.")
    url: str = Field(description="The HTML URL of the matching file.")

    @classmethod
    def from_code_search_result_item(cls, code_search_result_item: GitHubKitCodeSearchResultItem) -> Self:
        return cls(path=code_search_result_item.path, name=code_search_result_item.name, url=code_search_result_item.html_url)


class Contributor(GitHubModel):
    login: str | None = Field(default=None, description="The login of the contributor, None for anonymous contributors.")
    contributions: int = Field(description="The number of commits by the contributor.")
    url: str | None = Field(default=None, description="The HTML URL of the contributor's profile.")

    @classmethod
    def from_contributor(cls, contributor: GitHubKitContributor) -> Self:
        return cls(
            login=unset_to_none(contributor.login),
            contributions=contributor.contributions,
            url=unset_to_none(contributor.html_url),
        )
