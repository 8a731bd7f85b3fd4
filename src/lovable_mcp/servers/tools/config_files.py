import asyncio

from lovable_mcp.servers.conventions import (
    ENV_EXAMPLE,
    SUPABASE_CONFIG,
    SUPABASE_FUNCTIONS,
    SUPABASE_MIGRATIONS,
    TAILWIND_CONFIG_PATHS,
    VITE_CONFIG_PATHS,
)
from lovable_mcp.servers.models.project import PackageManifest, SupabaseConfig, WellKnownFile
from lovable_mcp.servers.registry import Capability, CapabilityRegistry, ExecutionContext
from lovable_mcp.servers.tools.base import RepositoryArguments, list_first_folder, read_package_manifest, read_well_known_file

NO_README = "No README found"


async def get_supabase_config(arguments: RepositoryArguments, context: ExecutionContext) -> SupabaseConfig:
    """Get the Supabase configuration of a Lovable project with its database migrations and edge functions."""

    config, migrations, functions = await asyncio.gather(
        read_well_known_file(context=context, repo=arguments.repo, paths=[SUPABASE_CONFIG]),
        list_first_folder(context=context, repo=arguments.repo, folders=[SUPABASE_MIGRATIONS], kind="migrations"),
        list_first_folder(context=context, repo=arguments.repo, folders=[SUPABASE_FUNCTIONS], kind="edge functions"),
    )

    return SupabaseConfig(config=config, migrations=migrations, functions=functions)


async def get_tailwind_config(arguments: RepositoryArguments, context: ExecutionContext) -> WellKnownFile:
    """Get the Tailwind CSS configuration of a Lovable project."""

    return await read_well_known_file(context=context, repo=arguments.repo, paths=TAILWIND_CONFIG_PATHS)


async def get_vite_config(arguments: RepositoryArguments, context: ExecutionContext) -> WellKnownFile:
    """Get the Vite configuration of a Lovable project."""

    return await read_well_known_file(context=context, repo=arguments.repo, paths=VITE_CONFIG_PATHS)


async def get_package_json(arguments: RepositoryArguments, context: ExecutionContext) -> PackageManifest:
    """Get the parsed package.json of a Lovable project."""

    return await read_package_manifest(context=context, repo=arguments.repo)


async def get_env_example(arguments: RepositoryArguments, context: ExecutionContext) -> WellKnownFile:
    """Get the example environment file of a Lovable project, which lists the variables it expects."""

    return await read_well_known_file(context=context, repo=arguments.repo, paths=[ENV_EXAMPLE])


async def get_readme(arguments: RepositoryArguments, context: ExecutionContext) -> str:
    """Get the README of a Lovable project."""

    readme = await context.github_client.get_readme(owner=context.owner, repo=arguments.repo)

    return readme.content if readme else NO_README


def register_tools(registry: CapabilityRegistry) -> CapabilityRegistry:
    for handler in (get_supabase_config, get_tailwind_config, get_vite_config, get_package_json, get_env_example, get_readme):
        _ = registry.register(Capability.from_function(fn=handler))

    return registry
