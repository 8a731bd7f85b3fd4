from collections.abc import Sequence

from fastmcp.utilities.logging import get_logger
from pydantic_core import from_json

from lovable_mcp.servers.conventions import PACKAGE_JSON
from lovable_mcp.servers.models.project import FolderListing, PackageManifest, WellKnownFile
from lovable_mcp.servers.registry import CapabilityArguments, ExecutionContext
from lovable_mcp.servers.shared.annotations import REPO

logger = get_logger(__name__)


class RepositoryArguments(CapabilityArguments):
    repo: REPO


async def read_well_known_file(context: ExecutionContext, repo: str, paths: Sequence[str]) -> WellKnownFile:
    """Read the first of `paths` that exists. A missing file is reported as not found rather than raised."""

    for path in paths:
        file = await context.github_client.get_file(owner=context.owner, repo=repo, path=path, error_on_not_found=False)

        if file is not None:
            return WellKnownFile(path=path, found=True, content=file.content)

    return WellKnownFile(path=paths[0], found=False, content=None)


async def list_first_folder(
    context: ExecutionContext, repo: str, folders: Sequence[str], kind: str, exclude: Sequence[str] = ()
) -> FolderListing:
    """List the first of `folders` that exists, leaving out entries named in `exclude`."""

    for folder in folders:
        entries = await context.github_client.list_directory(owner=context.owner, repo=repo, path=folder, error_on_not_found=False)

        if entries is None:
            logger.debug(f"{repo} has no {folder} folder")
            continue

        return FolderListing.from_entries(folder=folder, entries=[entry for entry in entries if entry.name not in exclude])

    return FolderListing.absent(folder=folders[0], kind=kind)


async def read_package_manifest(context: ExecutionContext, repo: str) -> PackageManifest:
    package_json = await read_well_known_file(context=context, repo=repo, paths=[PACKAGE_JSON])

    if not package_json.found or package_json.content is None:
        return PackageManifest(path=PACKAGE_JSON, found=False)

    try:
        content = from_json(package_json.content)
    except ValueError:
        logger.warning(f"{repo} has a {PACKAGE_JSON} that is not valid JSON")
        return PackageManifest(path=PACKAGE_JSON, found=True, content=None)

    return PackageManifest(path=PACKAGE_JSON, found=True, content=content if isinstance(content, dict) else None)


def manifest_dependencies(manifest: PackageManifest, section: str) -> dict[str, str]:
    if not manifest.content:
        return {}

    dependencies = manifest.content.get(section)  # pyright: ignore[reportAny]

    if not isinstance(dependencies, dict):
        return {}

    return {str(name): str(version) for name, version in dependencies.items()}  # pyright: ignore[reportUnknownVariableType]
