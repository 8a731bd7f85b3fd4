from inline_snapshot import snapshot

from lovable_mcp.servers.registry import ExecutionContext
from lovable_mcp.servers.tools.analysis import analyze_dependencies, get_routes
from lovable_mcp.servers.tools.base import RepositoryArguments
from tests.conftest import dump_for_snapshot


async def test_analyze_dependencies(context: ExecutionContext):
    report = await analyze_dependencies(RepositoryArguments(repo="demo"), context)

    assert dump_for_snapshot(report) == snapshot(
        {
            "found": True,
            "total": 11,
            "categories": {
                "ui": ["@radix-ui/react-dialog", "lucide-react"],
                "backend": ["@supabase/supabase-js"],
                "state": ["@tanstack/react-query"],
                "other": ["react"],
                "forms": ["react-hook-form", "zod"],
                "routing": ["react-router-dom"],
                "styling": ["tailwindcss"],
                "build": ["typescript", "vite"],
            },
        }
    )


async def test_analyze_dependencies_without_manifest(context: ExecutionContext):
    report = await analyze_dependencies(RepositoryArguments(repo="notes"), context)

    assert dump_for_snapshot(report) == snapshot({"found": False, "total": 0, "categories": {}})


async def test_get_routes(context: ExecutionContext):
    routes = await get_routes(RepositoryArguments(repo="demo"), context)

    assert dump_for_snapshot(routes) == snapshot(
        {
            "entry": "src/App.tsx",
            "found": True,
            "routes": [
                {"path": "/", "element": "Index"},
                {"path": "/about", "element": "About"},
                {"path": "*", "element": "NotFound"},
            ],
        }
    )


async def test_get_routes_without_entry(context: ExecutionContext):
    routes = await get_routes(RepositoryArguments(repo="notes"), context)

    assert dump_for_snapshot(routes) == snapshot({"entry": "src/App.tsx", "found": False, "routes": []})
