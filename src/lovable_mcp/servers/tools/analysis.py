from lovable_mcp.servers.conventions import ROUTES_ENTRY, categorize_dependencies, extract_routes
from lovable_mcp.servers.models.project import DependencyReport, RouteTable
from lovable_mcp.servers.registry import Capability, CapabilityRegistry, ExecutionContext
from lovable_mcp.servers.tools.base import RepositoryArguments, manifest_dependencies, read_package_manifest, read_well_known_file


async def analyze_dependencies(arguments: RepositoryArguments, context: ExecutionContext) -> DependencyReport:
    """Group the dependencies of a Lovable project into categories such as ui, state, routing, forms and backend."""

    manifest = await read_package_manifest(context=context, repo=arguments.repo)

    names = {**manifest_dependencies(manifest, "dependencies"), **manifest_dependencies(manifest, "devDependencies")}

    return DependencyReport(found=manifest.found, total=len(names), categories=categorize_dependencies(names))


async def get_routes(arguments: RepositoryArguments, context: ExecutionContext) -> RouteTable:
    """Get the routes a Lovable project declares in src/App.tsx and the page each one renders."""

    entry = await read_well_known_file(context=context, repo=arguments.repo, paths=[ROUTES_ENTRY])

    if not entry.found or entry.content is None:
        return RouteTable(entry=ROUTES_ENTRY, found=False)

    return RouteTable(entry=ROUTES_ENTRY, found=True, routes=extract_routes(entry.content))


def register_tools(registry: CapabilityRegistry) -> CapabilityRegistry:
    for handler in (analyze_dependencies, get_routes):
        _ = registry.register(Capability.from_function(fn=handler))

    return registry
