from inline_snapshot import snapshot

from lovable_mcp.servers.registry import ExecutionContext
from lovable_mcp.servers.tools.search import (
    SearchCodeArguments,
    SearchCommitsArguments,
    SearchIssuesArguments,
    scoped_query,
    search_code,
    search_commits,
    search_issues,
)
from tests.conftest import FakeGitHubClient


def test_scoped_query():
    assert scoped_query("useState", "octo", "demo") == "useState repo:octo/demo"
    assert scoped_query("useState", "octo", "demo", path="src", extension=None) == "useState repo:octo/demo path:src"


async def test_search_code(context: ExecutionContext, fake_client: FakeGitHubClient):
    _ = await search_code(SearchCodeArguments(repo="demo", query="useToast", path="src/hooks", extension="ts", limit=5), context)

    assert fake_client.payloads == snapshot([{"q": "useToast repo:octo/demo path:src/hooks extension:ts", "per_page": 5}])


async def test_search_commits(context: ExecutionContext, fake_client: FakeGitHubClient):
    _ = await search_commits(SearchCommitsArguments(repo="demo", query="fix", author="lovable-dev"), context)

    assert fake_client.payloads == snapshot([{"q": "fix repo:octo/demo author:lovable-dev", "per_page": 30}])


async def test_search_issues(context: ExecutionContext, fake_client: FakeGitHubClient):
    _ = await search_issues(SearchIssuesArguments(repo="demo", query="login", state="open", type="pr"), context)

    assert fake_client.payloads == snapshot([{"q": "login repo:octo/demo state:open is:pr", "per_page": 30}])
