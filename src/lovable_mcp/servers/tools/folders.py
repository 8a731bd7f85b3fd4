from functools import partial

from lovable_mcp.servers.conventions import FOLDER_CONVENTIONS, FolderConvention
from lovable_mcp.servers.models.project import FolderListing
from lovable_mcp.servers.registry import Capability, CapabilityRegistry, ExecutionContext
from lovable_mcp.servers.tools.base import RepositoryArguments, list_first_folder


async def list_conventional_folder(convention: FolderConvention, arguments: RepositoryArguments, context: ExecutionContext) -> FolderListing:
    """List the folder a kind of source lives in. A project without it gets an empty listing marked as not found."""

    return await list_first_folder(
        context=context, repo=arguments.repo, folders=convention.folders, kind=convention.kind, exclude=convention.exclude
    )


def register_tools(registry: CapabilityRegistry) -> CapabilityRegistry:
    for convention in FOLDER_CONVENTIONS:
        _ = registry.register(
            Capability(
                name=convention.capability,
                description=convention.description,
                arguments_model=RepositoryArguments,
                handler=partial(list_conventional_folder, convention),
            )
        )

    return registry
