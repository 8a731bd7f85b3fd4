import asyncio
import os
from collections.abc import Awaitable, Callable
from logging import Logger, getLogger
from typing import Any, Literal, overload

import httpx
from githubkit import GitHub as GitHubKit
from githubkit.auth.token import TokenAuthStrategy
from githubkit.exception import GitHubException as GitHubKitGitHubException
from githubkit.exception import RequestFailed as GitHubKitRequestFailed
from githubkit.exception import RequestTimeout as GitHubKitRequestTimeout
from githubkit.response import Response as GitHubKitResponse
from githubkit.retry import RetryChainDecision, RetryRateLimit, RetryServerError
from githubkit.versions.v2022_11_28.models import ContentFile as GitHubKitContentFile

from lovable_mcp.clients.errors.github import (
    ConflictError,
    RequestError,
    ResourceNotFoundError,
    ResourceTypeMismatchError,
    UpstreamTimeoutError,
)
from lovable_mcp.clients.models.github import (
    Branch,
    CodeSearchMatch,
    Commit,
    CommitDetail,
    Comparison,
    Contributor,
    DirectoryEntry,
    FileCommit,
    GitReference,
    Issue,
    MergeResult,
    PullRequest,
    Release,
    Repository,
    RepositoryFile,
    Tag,
)
from lovable_mcp.servers.shared.utility import GITHUBKIT_RESPONSE_TYPE, encode_content, extract_response


DEFAULT_TIMEOUT_SECONDS = 30.0
DEFAULT_MAX_CONCURRENT_REQUESTS = 10
DEFAULT_PER_PAGE = 30

DIFF_MEDIA_TYPE = "application/vnd.github.diff"
RAW_MEDIA_TYPE = "application/vnd.github.raw+json"

# Files over 1 MB come back from the contents API without their content
INLINE_CONTENT_ENCODING = "base64"

CONFLICT_STATUSES: frozenset[int] = frozenset({httpx.codes.CONFLICT})
MERGE_CONFLICT_STATUSES: frozenset[int] = frozenset({httpx.codes.CONFLICT, httpx.codes.METHOD_NOT_ALLOWED})


def get_github_token() -> str:
    env_vars: list[str] = ["GITHUB_TOKEN", "GITHUB_PERSONAL_ACCESS_TOKEN"]
    for env_var in env_vars:
        if os.environ.get(env_var):
            return os.environ[env_var]
    msg = "GITHUB_TOKEN or GITHUB_PERSONAL_ACCESS_TOKEN must be set"
    raise ValueError(msg)


def get_githubkit_client(token: str | None = None, timeout: float | None = DEFAULT_TIMEOUT_SECONDS) -> GitHubKit[Any]:
    # Retry server errors up to 3 times
    retry_server_error = RetryServerError()

    # Retry rate limit errors up to 3 times
    retry_rate_limit = RetryRateLimit(max_retry=3)

    retry_chain = RetryChainDecision(
        retry_server_error,
        retry_rate_limit,
    )

    return GitHubKit[TokenAuthStrategy](
        auth=TokenAuthStrategy(token=token or get_github_token()),
        auto_retry=retry_chain,
        timeout=timeout,
    )


def without_none(**kwargs: Any) -> dict[str, Any]:  # pyright: ignore[reportAny]
    """Drop unset optional parameters so they are not sent to GitHub."""
    return {key: value for key, value in kwargs.items() if value is not None}  # pyright: ignore[reportAny]


def is_stale_token_rejection(status_code: int, body: str) -> bool:
    """GitHub answers a contents write without the current blob sha with a 422 that names the sha."""
    return status_code == httpx.codes.UNPROCESSABLE_ENTITY and "sha" in body.lower()


class GitHubClient:
    """Performs authenticated calls against the GitHub REST API and classifies failures."""

    githubkit_client: GitHubKit[Any]
    logger: Logger
    timeout: float | None

    log_requests: bool
    log_responses: bool
    log_on_error: bool

    _semaphore: asyncio.Semaphore

    def __init__(
        self,
        githubkit_client: GitHubKit[Any] | None = None,
        logger: Logger | None = None,
        timeout: float | None = DEFAULT_TIMEOUT_SECONDS,
        max_concurrent_requests: int = DEFAULT_MAX_CONCURRENT_REQUESTS,
        log_requests: bool = True,
        log_responses: bool = False,
        log_on_error: bool = True,
    ):
        self.githubkit_client = githubkit_client or get_githubkit_client(timeout=timeout)
        self.logger = logger or getLogger(__name__)
        self.timeout = timeout
        self.log_requests = log_requests
        self.log_responses = log_responses
        self.log_on_error = log_on_error
        self._semaphore = asyncio.Semaphore(max_concurrent_requests)

    def _get_loggers(
        self, log_request: bool | None = None, log_response: bool | None = None, log_on_error: bool | None = None
    ) -> tuple[Callable[[str], Any], Callable[[str], Any], Callable[[BaseException | str], Any]]:
        request_logger = self.logger.info if log_request or self.log_requests else self.logger.debug
        response_logger = self.logger.info if log_response or self.log_responses else self.logger.debug
        error_logger = self.logger.exception if log_on_error or self.log_on_error else self.logger.debug
        return request_logger, response_logger, error_logger

    @overload
    async def _perform_request[T](
        self,
        action: str,
        call: Callable[[], Awaitable[T]],
        error_on_not_found: Literal[True] = True,
        conflict_statuses: frozenset[int] = frozenset(),
        stale_token_on_unprocessable: bool = False,
        resource: str | None = None,
    ) -> T: ...

    @overload
    async def _perform_request[T](
        self,
        action: str,
        call: Callable[[], Awaitable[T]],
        error_on_not_found: Literal[False] = False,
        conflict_statuses: frozenset[int] = frozenset(),
        stale_token_on_unprocessable: bool = False,
        resource: str | None = None,
    ) -> T | None: ...

    async def _perform_request[T](
        self,
        action: str,
        call: Callable[[], Awaitable[T]],
        error_on_not_found: bool = True,
        conflict_statuses: frozenset[int] = frozenset(),
        stale_token_on_unprocessable: bool = False,
        resource: str | None = None,
    ) -> T | None:
        """Perform a call against GitHub while holding a slot of the concurrency ceiling.

        Args:
            action: The action being performed, used in logs and error messages.
            call: The githubkit call to await.
            error_on_not_found: Whether a 404 raises ResourceNotFoundError or returns None.
            conflict_statuses: The statuses that mean a write lost a race against another writer. Reads pass none.
            stale_token_on_unprocessable: Whether a 422 that names the sha is a stale version token.
            resource: The resource being acted on, for error messages.

        Raises:
            ResourceNotFoundError: If the resource is not found and error_on_not_found is True.
            ConflictError: If GitHub rejected a write because of a stale or missing version token.
            UpstreamTimeoutError: If GitHub did not answer in time.
            RequestError: If the request fails for any other reason.
        """

        _, _, error_logger = self._get_loggers()

        try:
            async with self._semaphore:
                return await call()
        except GitHubKitRequestFailed as e:
            status_code: int = e.response.status_code
            body: str = e.response.text

            if status_code == httpx.codes.NOT_FOUND:
                if error_on_not_found:
                    raise ResourceNotFoundError(action=action, resource=resource) from e

                return None

            if status_code in conflict_statuses or (stale_token_on_unprocessable and is_stale_token_rejection(status_code, body)):
                self.logger.warning(f"{action}: GitHub rejected the write to {resource} as stale ({status_code})")
                raise ConflictError(action=action, resource=resource, status_code=status_code, message=body) from e

            error_logger(f"RequestFailed error performing {action}: {e}")

            raise RequestError(action=action, message=body, status_code=status_code) from e
        except GitHubKitRequestTimeout as e:
            self.logger.warning(f"{action}: GitHub did not answer within {self.timeout}s")
            raise UpstreamTimeoutError(action=action, timeout=self.timeout) from e
        except GitHubKitGitHubException as e:
            error_logger(f"Error performing {action}: {e}")

            raise RequestError(action=action, message=str(e)) from e

    @overload
    async def _perform_rest_request[T: GITHUBKIT_RESPONSE_TYPE](
        self,
        action: str,
        log_request: bool | None = None,
        log_response: bool | None = None,
        error_on_not_found: Literal[True] = True,
        conflict_statuses: frozenset[int] = frozenset(),
        stale_token_on_unprocessable: bool = False,
        resource: str | None = None,
        *,
        method: Callable[..., Awaitable[GitHubKitResponse[T]]],
        **request_args: Any,  # pyright: ignore[reportAny]
    ) -> T: ...

    @overload
    async def _perform_rest_request[T: GITHUBKIT_RESPONSE_TYPE](
        self,
        action: str,
        log_request: bool | None = None,
        log_response: bool | None = None,
        error_on_not_found: Literal[False] = False,
        conflict_statuses: frozenset[int] = frozenset(),
        stale_token_on_unprocessable: bool = False,
        resource: str | None = None,
        *,
        method: Callable[..., Awaitable[GitHubKitResponse[T]]],
        **request_args: Any,  # pyright: ignore[reportAny]
    ) -> T | None: ...

    async def _perform_rest_request[T: GITHUBKIT_RESPONSE_TYPE](
        self,
        action: str,
        log_request: bool | None = None,
        log_response: bool | None = None,
        error_on_not_found: bool = True,
        conflict_statuses: frozenset[int] = frozenset(),
        stale_token_on_unprocessable: bool = False,
        resource: str | None = None,
        *,
        method: Callable[..., Awaitable[GitHubKitResponse[T]]],
        **request_args: Any,  # pyright: ignore[reportAny]
    ) -> T | None:
        """Perform a githubkit REST call and extract the parsed response."""

        request_logger, response_logger, _ = self._get_loggers(log_request=log_request, log_response=log_response)

        request_logger(f"Performing {action} using {method.__name__} with kwargs {request_args}")

        response: GitHubKitResponse[T] | None = await self._perform_request(
            action=action,
            call=lambda: method(**request_args),
            error_on_not_found=False,
            conflict_statuses=conflict_statuses,
            stale_token_on_unprocessable=stale_token_on_unprocessable,
            resource=resource,
        )

        if response is None:
            if error_on_not_found:
                raise ResourceNotFoundError(action=action, resource=resource)
            return None

        extracted_response = extract_response(response)

        response_logger(f"Extracted response for {action} using {method.__name__} with kwargs {request_args}: {extracted_response}")

        return extracted_response

    # Repositories

    async def list_repositories(self, owner: str, per_page: int = 100) -> list[Repository]:
        """List the repositories of an account, most recently updated first."""

        repositories = await self._perform_rest_request(
            action="List repositories",
            resource=owner,
            method=self.githubkit_client.rest.repos.async_list_for_user,
            username=owner,
            per_page=per_page,
            sort="updated",
        )

        return [Repository.from_minimal_repository(minimal_repository=repository) for repository in repositories]

    async def get_repository(self, owner: str, repo: str) -> Repository:
        full_repository = await self._perform_rest_request(
            action="Get repository",
            resource=f"{owner}/{repo}",
            method=self.githubkit_client.rest.repos.async_get,
            owner=owner,
            repo=repo,
        )

        return Repository.from_full_repository(full_repository=full_repository)

    async def list_languages(self, owner: str, repo: str) -> dict[str, int]:
        """Get the number of bytes of code per language."""

        languages = await self._perform_rest_request(
            action="List languages",
            resource=f"{owner}/{repo}",
            method=self.githubkit_client.rest.repos.async_list_languages,
            owner=owner,
            repo=repo,
        )

        return {language: int(byte_count) for language, byte_count in languages.model_dump().items()}  # pyright: ignore[reportAny]

    async def list_contributors(self, owner: str, repo: str, per_page: int = DEFAULT_PER_PAGE) -> list[Contributor]:
        resource = f"{owner}/{repo}"

        response = await self._perform_request(
            action="List contributors",
            resource=resource,
            call=lambda: self.githubkit_client.rest.repos.async_list_contributors(owner=owner, repo=repo, per_page=per_page),
        )

        # An empty repository answers with 204 and no body
        if response.status_code == httpx.codes.NO_CONTENT:
            return []

        return [Contributor.from_contributor(contributor=contributor) for contributor in response.parsed_data]

    # Contents

    @overload
    async def list_directory(
        self, owner: str, repo: str, path: str = "", ref: str | None = None, error_on_not_found: Literal[True] = True
    ) -> list[DirectoryEntry]: ...

    @overload
    async def list_directory(
        self, owner: str, repo: str, path: str = "", ref: str | None = None, error_on_not_found: Literal[False] = False
    ) -> list[DirectoryEntry] | None: ...

    async def list_directory(
        self, owner: str, repo: str, path: str = "", ref: str | None = None, error_on_not_found: bool = True
    ) -> list[DirectoryEntry] | None:
        """List the entries of a directory.

        Args:
            owner: The owner of the repository.
            repo: The name of the repository.
            path: The path of the directory, the root directory if empty.
            ref: The branch, tag or commit to read from. Defaults to the default branch.
            error_on_not_found: Whether to raise an error if the directory is not found.
        """

        contents = await self._perform_rest_request(
            action="List directory",
            resource=f"{owner}/{repo}/{path}",
            error_on_not_found=error_on_not_found,
            method=self.githubkit_client.rest.repos.async_get_content,
            **without_none(owner=owner, repo=repo, path=path, ref=ref),
        )

        if contents is None:
            return None

        if not isinstance(contents, list):
            raise ResourceTypeMismatchError(
                action="List directory", resource=path or "/", expected_type="directory", actual_type=type(contents).__name__
            )

        return [DirectoryEntry.from_content_directory_item(content_directory_item=item) for item in contents]

    @overload
    async def get_file(
        self, owner: str, repo: str, path: str, ref: str | None = None, error_on_not_found: Literal[True] = True
    ) -> RepositoryFile: ...

    @overload
    async def get_file(
        self, owner: str, repo: str, path: str, ref: str | None = None, error_on_not_found: Literal[False] = False
    ) -> RepositoryFile | None: ...

    async def get_file(
        self, owner: str, repo: str, path: str, ref: str | None = None, error_on_not_found: bool = True
    ) -> RepositoryFile | None:
        """Get a file and its current version token.

        Args:
            owner: The owner of the repository.
            repo: The name of the repository.
            path: The path of the file.
            ref: The branch, tag or commit to read from. Defaults to the default branch.
            error_on_not_found: Whether to raise an error if the file is not found.
        """

        file = await self._perform_rest_request(
            action="Get file",
            resource=f"{owner}/{repo}/{path}",
            error_on_not_found=error_on_not_found,
            method=self.githubkit_client.rest.repos.async_get_content,
            **without_none(owner=owner, repo=repo, path=path, ref=ref),
        )

        if file is None:
            return None

        if not isinstance(file, GitHubKitContentFile):
            raise ResourceTypeMismatchError(action="Get file", resource=path, expected_type="file", actual_type=type(file).__name__)

        if file.encoding != INLINE_CONTENT_ENCODING:
            raw = await self._get_raw_file(owner=owner, repo=repo, path=path, ref=ref)
            return RepositoryFile.from_content_file(content_file=file, raw_content=raw)

        return RepositoryFile.from_content_file(content_file=file)

    async def _get_raw_file(self, owner: str, repo: str, path: str, ref: str | None = None) -> bytes:
        request_logger, _, _ = self._get_loggers()

        request_logger(f"Performing Get raw file for {owner}/{repo}/{path}")

        response = await self._perform_request(
            action="Get raw file",
            resource=f"{owner}/{repo}/{path}",
            call=lambda: self.githubkit_client.arequest(
                "GET", f"/repos/{owner}/{repo}/contents/{path}", params=without_none(ref=ref), headers={"Accept": RAW_MEDIA_TYPE}
            ),
        )

        return response.content

    async def get_readme(self, owner: str, repo: str) -> RepositoryFile | None:
        readme = await self._perform_rest_request(
            action="Get readme",
            resource=f"{owner}/{repo}",
            error_on_not_found=False,
            method=self.githubkit_client.rest.repos.async_get_readme,
            owner=owner,
            repo=repo,
        )

        return RepositoryFile.from_content_file(content_file=readme) if readme else None

    async def put_file(
        self,
        owner: str,
        repo: str,
        path: str,
        content: str,
        message: str,
        branch: str | None = None,
        sha: str | None = None,
    ) -> FileCommit:
        """Create a file, or update it when `sha` carries its current version token.

        Raises:
            ConflictError: If `sha` is stale, or missing while the file exists.
        """

        file_commit = await self._perform_rest_request(
            action="Put file",
            resource=f"{owner}/{repo}/{path}",
            conflict_statuses=CONFLICT_STATUSES,
            stale_token_on_unprocessable=True,
            method=self.githubkit_client.rest.repos.async_create_or_update_file_contents,
            owner=owner,
            repo=repo,
            path=path,
            data=without_none(message=message, content=encode_content(content), branch=branch, sha=sha),
        )

        return FileCommit.from_file_commit(path=path, file_commit=file_commit)

    async def delete_file(self, owner: str, repo: str, path: str, message: str, sha: str, branch: str | None = None) -> FileCommit:
        """Delete a file, proving the caller has seen its current version token.

        Raises:
            ConflictError: If `sha` is stale.
        """

        file_commit = await self._perform_rest_request(
            action="Delete file",
            resource=f"{owner}/{repo}/{path}",
            conflict_statuses=CONFLICT_STATUSES,
            stale_token_on_unprocessable=True,
            method=self.githubkit_client.rest.repos.async_delete_file,
            owner=owner,
            repo=repo,
            path=path,
            data=without_none(message=message, sha=sha, branch=branch),
        )

        return FileCommit.from_file_commit(path=path, file_commit=file_commit)

    # History

    async def list_commits(
        self, owner: str, repo: str, per_page: int = DEFAULT_PER_PAGE, sha: str | None = None, path: str | None = None
    ) -> list[Commit]:
        commits = await self._perform_rest_request(
            action="List commits",
            resource=f"{owner}/{repo}",
            method=self.githubkit_client.rest.repos.async_list_commits,
            **without_none(owner=owner, repo=repo, per_page=per_page, sha=sha, path=path),
        )

        return [Commit.from_commit(commit=commit) for commit in commits]

    async def get_commit(self, owner: str, repo: str, ref: str) -> CommitDetail:
        commit = await self._perform_rest_request(
            action="Get commit",
            resource=f"{owner}/{repo}@{ref}",
            method=self.githubkit_client.rest.repos.async_get_commit,
            owner=owner,
            repo=repo,
            ref=ref,
        )

        return CommitDetail.from_commit(commit=commit)

    async def list_branches(self, owner: str, repo: str, per_page: int = 100) -> list[Branch]:
        branches = await self._perform_rest_request(
            action="List branches",
            resource=f"{owner}/{repo}",
            method=self.githubkit_client.rest.repos.async_list_branches,
            owner=owner,
            repo=repo,
            per_page=per_page,
        )

        return [Branch.from_short_branch(short_branch=branch) for branch in branches]

    async def get_git_ref(self, owner: str, repo: str, ref: str) -> GitReference:
        """Get a git reference, for example `heads/main` or `tags/v1.0.0`."""

        git_ref = await self._perform_rest_request(
            action="Get git ref",
            resource=f"{owner}/{repo}@{ref}",
            method=self.githubkit_client.rest.git.async_get_ref,
            owner=owner,
            repo=repo,
            ref=ref,
        )

        return GitReference.from_git_ref(git_ref=git_ref)

    async def create_git_ref(self, owner: str, repo: str, ref: str, sha: str) -> GitReference:
        """Create a fully qualified reference, for example `refs/heads/feature`."""

        git_ref = await self._perform_rest_request(
            action="Create git ref",
            resource=f"{owner}/{repo}@{ref}",
            method=self.githubkit_client.rest.git.async_create_ref,
            owner=owner,
            repo=repo,
            data={"ref": ref, "sha": sha},
        )

        return GitReference.from_git_ref(git_ref=git_ref)

    async def create_tag_object(self, owner: str, repo: str, tag: str, message: str, sha: str) -> str:
        """Create an annotated tag object and return its SHA. The tag is not visible until a reference points at it."""

        git_tag = await self._perform_rest_request(
            action="Create tag object",
            resource=f"{owner}/{repo}@{tag}",
            method=self.githubkit_client.rest.git.async_create_tag,
            owner=owner,
            repo=repo,
            data={"tag": tag, "message": message, "object": sha, "type": "commit"},
        )

        return git_tag.sha

    async def list_tags(self, owner: str, repo: str, per_page: int = DEFAULT_PER_PAGE) -> list[Tag]:
        tags = await self._perform_rest_request(
            action="List tags",
            resource=f"{owner}/{repo}",
            method=self.githubkit_client.rest.repos.async_list_tags,
            owner=owner,
            repo=repo,
            per_page=per_page,
        )

        return [Tag.from_tag(tag=tag) for tag in tags]

    async def list_releases(self, owner: str, repo: str, per_page: int = DEFAULT_PER_PAGE) -> list[Release]:
        releases = await self._perform_rest_request(
            action="List releases",
            resource=f"{owner}/{repo}",
            method=self.githubkit_client.rest.repos.async_list_releases,
            owner=owner,
            repo=repo,
            per_page=per_page,
        )

        return [Release.from_release(release=release) for release in releases]

    async def create_release(self, owner: str, repo: str, release: dict[str, Any]) -> Release:
        created_release = await self._perform_rest_request(
            action="Create release",
            resource=f"{owner}/{repo}",
            method=self.githubkit_client.rest.repos.async_create_release,
            owner=owner,
            repo=repo,
            data=release,
        )

        return Release.from_release(release=created_release)

    async def compare(self, owner: str, repo: str, base: str, head: str) -> Comparison:
        commit_comparison = await self._perform_rest_request(
            action="Compare",
            resource=f"{owner}/{repo}@{base}...{head}",
            method=self.githubkit_client.rest.repos.async_compare_commits,
            owner=owner,
            repo=repo,
            basehead=f"{base}...{head}",
        )

        return Comparison.from_commit_comparison(commit_comparison=commit_comparison)

    async def get_diff(self, owner: str, repo: str, base: str, head: str) -> str:
        """Get the raw unified diff between two refs."""

        request_logger, _, _ = self._get_loggers()

        request_logger(f"Performing Get diff for {owner}/{repo} {base}...{head}")

        response = await self._perform_request(
            action="Get diff",
            resource=f"{owner}/{repo}@{base}...{head}",
            call=lambda: self.githubkit_client.arequest(
                "GET", f"/repos/{owner}/{repo}/compare/{base}...{head}", headers={"Accept": DIFF_MEDIA_TYPE}
            ),
        )

        return response.text

    # Pull requests

    async def list_pull_requests(self, owner: str, repo: str, state: str = "open", per_page: int = DEFAULT_PER_PAGE) -> list[PullRequest]:
        pull_requests = await self._perform_rest_request(
            action="List pull requests",
            resource=f"{owner}/{repo}",
            method=self.githubkit_client.rest.pulls.async_list,
            owner=owner,
            repo=repo,
            state=state,
            per_page=per_page,
        )

        return [PullRequest.from_pull_request(pull_request=pull_request) for pull_request in pull_requests]

    async def get_pull_request(self, owner: str, repo: str, number: int) -> PullRequest:
        pull_request = await self._perform_rest_request(
            action="Get pull request",
            resource=f"{owner}/{repo}#{number}",
            method=self.githubkit_client.rest.pulls.async_get,
            owner=owner,
            repo=repo,
            pull_number=number,
        )

        return PullRequest.from_pull_request(pull_request=pull_request)

    async def create_pull_request(self, owner: str, repo: str, pull_request: dict[str, Any]) -> PullRequest:
        created_pull_request = await self._perform_rest_request(
            action="Create pull request",
            resource=f"{owner}/{repo}",
            method=self.githubkit_client.rest.pulls.async_create,
            owner=owner,
            repo=repo,
            data=pull_request,
        )

        return PullRequest.from_pull_request(pull_request=created_pull_request)

    async def merge_pull_request(self, owner: str, repo: str, number: int, merge: dict[str, Any]) -> MergeResult:
        """Merge a pull request.

        Raises:
            ConflictError: If the pull request is not mergeable or its head moved.
        """

        merge_result = await self._perform_rest_request(
            action="Merge pull request",
            resource=f"{owner}/{repo}#{number}",
            conflict_statuses=MERGE_CONFLICT_STATUSES,
            method=self.githubkit_client.rest.pulls.async_merge,
            owner=owner,
            repo=repo,
            pull_number=number,
            data=merge,
        )

        return MergeResult.from_pull_request_merge_result(merge_result=merge_result)

    # Issues

    async def list_issues(
        self, owner: str, repo: str, state: str = "open", labels: str | None = None, per_page: int = DEFAULT_PER_PAGE
    ) -> list[Issue]:
        """List issues. GitHub returns pull requests from this endpoint too, they are filtered out."""

        issues = await self._perform_rest_request(
            action="List issues",
            resource=f"{owner}/{repo}",
            method=self.githubkit_client.rest.issues.async_list_for_repo,
            **without_none(owner=owner, repo=repo, state=state, labels=labels, per_page=per_page),
        )

        return [converted for converted in (Issue.from_issue(issue=issue) for issue in issues) if not converted.is_pull_request]

    async def create_issue(self, owner: str, repo: str, issue: dict[str, Any]) -> Issue:
        created_issue = await self._perform_rest_request(
            action="Create issue",
            resource=f"{owner}/{repo}",
            method=self.githubkit_client.rest.issues.async_create,
            owner=owner,
            repo=repo,
            data=issue,
        )

        return Issue.from_issue(issue=created_issue)

    async def update_issue(self, owner: str, repo: str, number: int, issue: dict[str, Any]) -> Issue:
        updated_issue = await self._perform_rest_request(
            action="Update issue",
            resource=f"{owner}/{repo}#{number}",
            method=self.githubkit_client.rest.issues.async_update,
            owner=owner,
            repo=repo,
            issue_number=number,
            data=issue,
        )

        return Issue.from_issue(issue=updated_issue)

    # Search

    async def search_code(self, query: str, per_page: int = DEFAULT_PER_PAGE) -> list[CodeSearchMatch]:
        response = await self._perform_rest_request(
            action="Search code",
            resource=query,
            method=self.githubkit_client.rest.search.async_code,
            q=query,
            per_page=per_page,
        )

        return [CodeSearchMatch.from_code_search_result_item(code_search_result_item=item) for item in response.items]

    async def search_commits(self, query: str, per_page: int = DEFAULT_PER_PAGE) -> list[Commit]:
        response = await self._perform_rest_request(
            action="Search commits",
            resource=query,
            method=self.githubkit_client.rest.search.async_commits,
            q=query,
            per_page=per_page,
        )

        return [Commit.from_commit_search_result_item(commit_search_result_item=item) for item in response.items]

    async def search_issues(self, query: str, per_page: int = DEFAULT_PER_PAGE) -> list[Issue]:
        response = await self._perform_rest_request(
            action="Search issues",
            resource=query,
            method=self.githubkit_client.rest.search.async_issues_and_pull_requests,
            q=query,
            per_page=per_page,
        )

        return [Issue.from_issue(issue=item) for item in response.items]
