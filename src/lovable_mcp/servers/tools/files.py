from fastmcp.utilities.logging import get_logger
from pydantic import Field

from lovable_mcp.clients.errors.github import ClientError
from lovable_mcp.servers.models.project import FileChange, SagaOutcome, SagaStatus
from lovable_mcp.servers.registry import Capability, CapabilityArguments, CapabilityRegistry, ExecutionContext
from lovable_mcp.servers.shared.annotations import BRANCH, COMMIT_MESSAGE, FILE_CONTENT, PATH, REPO

logger = get_logger(__name__)


class ReadFileArguments(CapabilityArguments):
    repo: REPO
    path: PATH
    branch: BRANCH = None


class UpdateFileArguments(CapabilityArguments):
    repo: REPO
    path: PATH
    content: FILE_CONTENT
    message: COMMIT_MESSAGE
    branch: BRANCH = None


class DeleteFileArguments(CapabilityArguments):
    repo: REPO
    path: PATH
    message: COMMIT_MESSAGE
    branch: BRANCH = None


class RenameFileArguments(CapabilityArguments):
    repo: REPO
    old_path: str = Field(description="The current path of the file.", min_length=1)
    new_path: str = Field(description="The path to move the file to.", min_length=1)
    message: COMMIT_MESSAGE
    branch: BRANCH = None


class CopyFileArguments(CapabilityArguments):
    repo: REPO
    source_path: str = Field(description="The path of the file to copy.", min_length=1)
    destination_path: str = Field(description="The path to create the copy at.", min_length=1)
    message: COMMIT_MESSAGE
    branch: BRANCH = None


async def read_file(arguments: ReadFileArguments, context: ExecutionContext) -> str:
    """Read the contents of a file in a Lovable project."""

    file = await context.github_client.get_file(owner=context.owner, repo=arguments.repo, path=arguments.path, ref=arguments.branch)

    return file.content


async def update_file(arguments: UpdateFileArguments, context: ExecutionContext) -> FileChange:
    """Create or update a file in a Lovable project. The commit syncs to Lovable.

    Fails with ConflictOrStale if the file is changed by someone else between this call reading it and writing it."""

    client = context.github_client

    current = await client.get_file(
        owner=context.owner, repo=arguments.repo, path=arguments.path, ref=arguments.branch, error_on_not_found=False
    )

    file_commit = await client.put_file(
        owner=context.owner,
        repo=arguments.repo,
        path=arguments.path,
        content=arguments.content,
        message=arguments.message,
        branch=arguments.branch,
        sha=current.sha if current else None,
    )

    return FileChange(path=arguments.path, commit=file_commit.commit_sha, sha=file_commit.content_sha, created=current is None)


async def delete_file(arguments: DeleteFileArguments, context: ExecutionContext) -> FileChange:
    """Delete a file from a Lovable project."""

    client = context.github_client

    current = await client.get_file(owner=context.owner, repo=arguments.repo, path=arguments.path, ref=arguments.branch)

    file_commit = await client.delete_file(
        owner=context.owner,
        repo=arguments.repo,
        path=arguments.path,
        message=arguments.message,
        sha=current.sha,
        branch=arguments.branch,
    )

    return FileChange(path=arguments.path, commit=file_commit.commit_sha, deleted=True)


async def rename_file(arguments: RenameFileArguments, context: ExecutionContext) -> SagaOutcome:
    """Move a file to a new path in a Lovable project.

    GitHub has no rename, so the file is created at the new path and then deleted at the old one. If the delete
    fails, both copies exist and the result is a partial success that names the copy left behind."""

    client = context.github_client

    source = await client.get_file(owner=context.owner, repo=arguments.repo, path=arguments.old_path, ref=arguments.branch)

    created = await client.put_file(
        owner=context.owner,
        repo=arguments.repo,
        path=arguments.new_path,
        content=source.content,
        message=arguments.message,
        branch=arguments.branch,
    )

    create_step = f"create {arguments.new_path}"
    delete_step = f"delete {arguments.old_path}"
    created_change = FileChange(path=arguments.new_path, commit=created.commit_sha, sha=created.content_sha, created=True)

    try:
        deleted = await client.delete_file(
            owner=context.owner,
            repo=arguments.repo,
            path=arguments.old_path,
            message=arguments.message,
            sha=source.sha,
            branch=arguments.branch,
        )
    except ClientError as e:
        logger.warning(f"Renamed {arguments.old_path} to {arguments.new_path} in {arguments.repo} but could not delete the original: {e}")

        return SagaOutcome(
            status=SagaStatus.PARTIAL_SUCCESS,
            completed=[create_step],
            failed=delete_step,
            detail=(
                f"{arguments.new_path} was created but {arguments.old_path} could not be deleted ({e}). "
                f"Both copies exist, delete {arguments.old_path} to finish the rename."
            ),
            changes=[created_change],
        )

    return SagaOutcome(
        status=SagaStatus.FULL_SUCCESS,
        completed=[create_step, delete_step],
        changes=[created_change, FileChange(path=arguments.old_path, commit=deleted.commit_sha, deleted=True)],
    )


async def copy_file(arguments: CopyFileArguments, context: ExecutionContext) -> SagaOutcome:
    """Copy a file to a new path in a Lovable project. Fails if the destination already exists."""

    client = context.github_client

    source = await client.get_file(owner=context.owner, repo=arguments.repo, path=arguments.source_path, ref=arguments.branch)

    created = await client.put_file(
        owner=context.owner,
        repo=arguments.repo,
        path=arguments.destination_path,
        content=source.content,
        message=arguments.message,
        branch=arguments.branch,
    )

    return SagaOutcome(
        status=SagaStatus.FULL_SUCCESS,
        completed=[f"create {arguments.destination_path}"],
        changes=[FileChange(path=arguments.destination_path, commit=created.commit_sha, sha=created.content_sha, created=True)],
    )


def register_tools(registry: CapabilityRegistry) -> CapabilityRegistry:
    for handler in (read_file, update_file, delete_file, rename_file, copy_file):
        _ = registry.register(Capability.from_function(fn=handler))

    return registry
