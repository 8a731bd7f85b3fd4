import asyncio
import itertools
from collections.abc import AsyncGenerator, Sequence
from typing import Any

import pytest
from githubkit.github import GitHub
from pydantic import BaseModel, Field

from lovable_mcp.clients.errors.github import ConflictError, ResourceNotFoundError, ResourceTypeMismatchError
from lovable_mcp.clients.github import GitHubClient, get_githubkit_client
from lovable_mcp.clients.models.github import (
    Branch,
    CodeSearchMatch,
    Commit,
    Contributor,
    DirectoryEntry,
    FileCommit,
    GitReference,
    Issue,
    MergeResult,
    Repository,
    RepositoryFile,
)
from lovable_mcp.main import build_registry
from lovable_mcp.servers.dispatcher import Dispatcher
from lovable_mcp.servers.registry import CapabilityRegistry, ExecutionContext

OWNER = "octo"

APP_TSX = """\
import { BrowserRouter, Routes, Route } from "react-router-dom";
import Index from "./pages/Index";
import NotFound from "./pages/NotFound";

const App = () => (
  <BrowserRouter>
    <Routes>
      <Route path="/" element={<Index />} />
      <Route path="/about" element={<About />} />
      {/* ADD ALL CUSTOM ROUTES ABOVE THE CATCH-ALL "*" ROUTE */}
      <Route path="*" element={<NotFound />} />
    </Routes>
  </BrowserRouter>
);

export default App;
"""

PACKAGE_JSON = """\
{
  "name": "vite_react_shadcn_ts",
  "private": true,
  "dependencies": {
    "@radix-ui/react-dialog": "^1.1.2",
    "@supabase/supabase-js": "^2.45.0",
    "@tanstack/react-query": "^5.56.2",
    "lucide-react": "^0.462.0",
    "react": "^18.3.1",
    "react-hook-form": "^7.53.0",
    "react-router-dom": "^6.26.2",
    "zod": "^3.23.8"
  },
  "devDependencies": {
    "tailwindcss": "^3.4.11",
    "typescript": "^5.5.3",
    "vite": "^5.4.1"
  }
}
"""

LOVABLE_FILES: dict[str, str] = {
    "README.md": "# Demo\n",
    "components.json": "{}\n",
    "package.json": PACKAGE_JSON,
    "tailwind.config.ts": "export default {};\n",
    "vite.config.ts": "export default defineConfig({});\n",
    "src/App.tsx": APP_TSX,
    "src/components/Header.tsx": "export const Header = () => null;\n",
    "src/components/ui/button.tsx": "export const Button = () => null;\n",
    "src/components/ui/card.tsx": "export const Card = () => null;\n",
    "src/hooks/use-toast.ts": "export function useToast() {}\n",
    "src/lib/utils.ts": "export function cn() {}\n",
    "src/pages/Index.tsx": "export default function Index() {}\n",
    "src/pages/NotFound.tsx": "export default function NotFound() {}\n",
    "supabase/config.toml": 'project_id = "demo"\n',
    "supabase/migrations/20240101000000_init.sql": "create table todos ();\n",
}


class FakeRepository(BaseModel):
    name: str
    private: bool = False
    files: dict[str, RepositoryFile] = Field(default_factory=dict)
    languages: dict[str, int] = Field(default_factory=dict)
    contributors: list[Contributor] = Field(default_factory=list)
    branches: dict[str, str] = Field(default_factory=dict)


class FakeGitHubClient:
    """An in-memory stand-in for GitHubClient that enforces blob SHAs the way GitHub does.

    Reads and writes yield to the event loop before touching state and check-and-commit without yielding, so two
    concurrent read-modify-write sequences interleave deterministically."""

    owner: str
    repositories: dict[str, FakeRepository]
    failures: dict[str, Exception]
    calls: list[str]
    payloads: list[dict[str, Any]]

    def __init__(self, owner: str = OWNER):
        self.owner = owner
        self.repositories = {}
        self.failures = {}
        self.calls = []
        self.payloads = []
        self._shas = itertools.count(1)

    def next_sha(self) -> str:
        return f"{next(self._shas):040x}"

    def add_repository(
        self, name: str, files: dict[str, str] | None = None, private: bool = False, languages: dict[str, int] | None = None
    ) -> FakeRepository:
        repository = FakeRepository(name=name, private=private, languages=languages or {}, branches={"main": self.next_sha()})

        for path, content in (files or {}).items():
            repository.files[path] = RepositoryFile(path=path, sha=self.next_sha(), size=len(content.encode()), content=content)

        self.repositories[name] = repository
        return repository

    def fail(self, method: str, error: Exception, path: str | None = None) -> None:
        """Make the next and every later call of `method`, optionally only for `path`, raise `error`."""
        self.failures[f"{method}:{path}" if path else method] = error

    def _record(self, method: str, path: str | None = None) -> None:
        self.calls.append(f"{method}:{path}" if path else method)

        if error := self.failures.get(f"{method}:{path}") or self.failures.get(method):
            raise error

    def _repository(self, action: str, repo: str) -> FakeRepository:
        if repo not in self.repositories:
            raise ResourceNotFoundError(action=action, resource=f"{self.owner}/{repo}")
        return self.repositories[repo]

    def _to_repository(self, repository: FakeRepository) -> Repository:
        return Repository(
            name=repository.name,
            full_name=f"{self.owner}/{repository.name}",
            private=repository.private,
            url=f"https://github.com/{self.owner}/{repository.name}",
            default_branch="main",
            language="TypeScript",
            size=sum(file.size for file in repository.files.values()),
        )

    async def list_repositories(self, owner: str, per_page: int = 100) -> list[Repository]:  # noqa: ARG002
        self._record("list_repositories")
        return [self._to_repository(repository) for repository in self.repositories.values()]

    async def get_repository(self, owner: str, repo: str) -> Repository:  # noqa: ARG002
        self._record("get_repository")
        return self._to_repository(self._repository("Get repository", repo))

    async def list_languages(self, owner: str, repo: str) -> dict[str, int]:  # noqa: ARG002
        self._record("list_languages")
        return dict(self._repository("List languages", repo).languages)

    async def list_contributors(self, owner: str, repo: str, per_page: int = 30) -> list[Contributor]:  # noqa: ARG002
        self._record("list_contributors")
        return self._repository("List contributors", repo).contributors[:per_page]

    async def list_commits(
        self,
        owner: str,  # noqa: ARG002
        repo: str,
        per_page: int = 30,
        sha: str | None = None,  # noqa: ARG002
        path: str | None = None,  # noqa: ARG002
    ) -> list[Commit]:
        self._record("list_commits")
        _ = self._repository("List commits", repo)
        commits = [
            Commit(sha="abc1234", message="Use tailwind", author="Lovable", url=f"https://github.com/{self.owner}/{repo}/commit/abc1234"),
            Commit(sha="def5678", message="Initial commit", author="Lovable", url=f"https://github.com/{self.owner}/{repo}/commit/def5678"),
        ]
        return commits[:per_page]

    async def list_directory(
        self,
        owner: str,  # noqa: ARG002
        repo: str,
        path: str = "",
        ref: str | None = None,  # noqa: ARG002
        error_on_not_found: bool = True,
    ) -> list[DirectoryEntry] | None:
        self._record("list_directory", path)
        await asyncio.sleep(0)

        repository = self._repository("List directory", repo)

        if path in repository.files:
            raise ResourceTypeMismatchError(action="List directory", resource=path, expected_type="directory", actual_type="file")

        prefix = f"{path}/" if path else ""
        entries: dict[str, DirectoryEntry] = {}

        for file_path, file in sorted(repository.files.items()):
            if not file_path.startswith(prefix):
                continue

            name, _, rest = file_path.removeprefix(prefix).partition("/")
            entries.setdefault(
                name, DirectoryEntry(name=name, type="dir" if rest else "file", path=prefix + name, size=0 if rest else file.size)
            )

        if not entries:
            if error_on_not_found:
                raise ResourceNotFoundError(action="List directory", resource=path)
            return None

        return list(entries.values())

    async def get_file(
        self,
        owner: str,  # noqa: ARG002
        repo: str,
        path: str,
        ref: str | None = None,  # noqa: ARG002
        error_on_not_found: bool = True,
    ) -> RepositoryFile | None:
        self._record("get_file", path)
        await asyncio.sleep(0)

        repository = self._repository("Get file", repo)

        if (file := repository.files.get(path)) is None:
            if error_on_not_found:
                raise ResourceNotFoundError(action="Get file", resource=path)
            return None

        return file.model_copy()

    async def get_readme(self, owner: str, repo: str) -> RepositoryFile | None:
        self._record("get_readme")
        return await self.get_file(owner=owner, repo=repo, path="README.md", error_on_not_found=False)

    async def put_file(
        self,
        owner: str,  # noqa: ARG002
        repo: str,
        path: str,
        content: str,
        message: str,  # noqa: ARG002
        branch: str | None = None,  # noqa: ARG002
        sha: str | None = None,
    ) -> FileCommit:
        self._record("put_file", path)
        await asyncio.sleep(0)

        repository = self._repository("Put file", repo)
        current = repository.files.get(path)

        if current is None and sha is not None:
            raise ConflictError(action="Put file", resource=path, status_code=409, message=f"{path} does not exist")

        if current is not None and sha != current.sha:
            status_code = 409 if sha else 422
            raise ConflictError(action="Put file", resource=path, status_code=status_code, message=f"{path} is at {current.sha}")

        repository.files[path] = RepositoryFile(path=path, sha=self.next_sha(), size=len(content.encode()), content=content)

        return FileCommit(path=path, commit_sha=self.next_sha(), content_sha=repository.files[path].sha)

    async def delete_file(
        self,
        owner: str,  # noqa: ARG002
        repo: str,
        path: str,
        message: str,  # noqa: ARG002
        sha: str,
        branch: str | None = None,  # noqa: ARG002
    ) -> FileCommit:
        self._record("delete_file", path)
        await asyncio.sleep(0)

        repository = self._repository("Delete file", repo)

        if (current := repository.files.get(path)) is None:
            raise ResourceNotFoundError(action="Delete file", resource=path)

        if sha != current.sha:
            raise ConflictError(action="Delete file", resource=path, status_code=409, message=f"{path} is at {current.sha}")

        del repository.files[path]

        return FileCommit(path=path, commit_sha=self.next_sha())

    async def get_git_ref(self, owner: str, repo: str, ref: str) -> GitReference:  # noqa: ARG002
        self._record("get_git_ref", ref)

        repository = self._repository("Get git ref", repo)
        branch = ref.removeprefix("heads/")

        if branch not in repository.branches:
            raise ResourceNotFoundError(action="Get git ref", resource=ref)

        return GitReference(ref=f"refs/{ref}", sha=repository.branches[branch], ref_type="commit")

    async def create_git_ref(self, owner: str, repo: str, ref: str, sha: str) -> GitReference:  # noqa: ARG002
        self._record("create_git_ref", ref)

        repository = self._repository("Create git ref", repo)

        if ref.startswith("refs/heads/"):
            repository.branches[ref.removeprefix("refs/heads/")] = sha

        return GitReference(ref=ref, sha=sha, ref_type="commit")

    async def create_tag_object(self, owner: str, repo: str, tag: str, message: str, sha: str) -> str:  # noqa: ARG002
        self._record("create_tag_object", tag)
        return self.next_sha()

    async def list_branches(self, owner: str, repo: str, per_page: int = 100) -> list[Branch]:  # noqa: ARG002
        self._record("list_branches")
        branches = self._repository("List branches", repo).branches
        return [Branch(name=name, sha=sha, protected=name == "main") for name, sha in branches.items()]

    async def get_diff(self, owner: str, repo: str, base: str, head: str) -> str:  # noqa: ARG002
        self._record("get_diff", f"{base}...{head}")
        return f"diff --git a/src/App.tsx b/src/App.tsx\n--- a/{base}\n+++ b/{head}\n"

    async def merge_pull_request(self, owner: str, repo: str, number: int, merge: dict[str, Any]) -> MergeResult:  # noqa: ARG002
        self._record("merge_pull_request", str(number))
        self.payloads.append(merge)
        return MergeResult(sha=self.next_sha(), merged=True, message="Pull Request successfully merged")

    async def list_issues(
        self,
        owner: str,  # noqa: ARG002
        repo: str,  # noqa: ARG002
        state: str = "open",
        labels: str | None = None,
        per_page: int = 30,
    ) -> list[Issue]:
        self._record("list_issues")
        self.payloads.append({"state": state, "labels": labels, "per_page": per_page})
        return []

    async def search_code(self, query: str, per_page: int = 30) -> list[CodeSearchMatch]:
        self._record("search_code")
        self.payloads.append({"q": query, "per_page": per_page})
        return []

    async def search_commits(self, query: str, per_page: int = 30) -> list[Commit]:
        self._record("search_commits")
        self.payloads.append({"q": query, "per_page": per_page})
        return []

    async def search_issues(self, query: str, per_page: int = 30) -> list[Issue]:
        self._record("search_issues")
        self.payloads.append({"q": query, "per_page": per_page})
        return []


@pytest.fixture
def fake_client() -> FakeGitHubClient:
    fake_client = FakeGitHubClient()
    _ = fake_client.add_repository(name="demo", files=LOVABLE_FILES, languages={"TypeScript": 7500, "CSS": 2000, "HTML": 500})
    _ = fake_client.add_repository(name="secret-app", files=LOVABLE_FILES, private=True)
    _ = fake_client.add_repository(name="notes", files={"README.md": "# Notes\n"})
    _ = fake_client.add_repository(name="empty")
    return fake_client


@pytest.fixture
def context(fake_client: FakeGitHubClient) -> ExecutionContext:
    return ExecutionContext(github_client=fake_client, owner=OWNER)  # pyright: ignore[reportArgumentType]


@pytest.fixture
def registry() -> CapabilityRegistry:
    return build_registry()


@pytest.fixture
def dispatcher(registry: CapabilityRegistry, context: ExecutionContext) -> Dispatcher:
    return Dispatcher(registry=registry, context=context)


@pytest.fixture
async def githubkit_client() -> AsyncGenerator[GitHub[Any], Any]:
    githubkit_client = get_githubkit_client(token="ghp_test", timeout=5)

    async with githubkit_client:
        yield githubkit_client


@pytest.fixture
def github_client(githubkit_client: GitHub[Any]) -> GitHubClient:
    return GitHubClient(githubkit_client=githubkit_client, timeout=5)


def handle_exclude_keys(dictionary: dict[str, Any], exclude_keys: list[str] | None = None) -> dict[str, Any]:
    if exclude_keys is None:
        return dictionary
    return {key: value for key, value in dictionary.items() if key not in exclude_keys}


def dump_for_snapshot(basemodel: BaseModel, /, exclude_keys: list[str] | None = None, **dump_kwargs: Any) -> dict[str, Any]:
    return handle_exclude_keys(basemodel.model_dump(mode="json", exclude_none=True, **dump_kwargs), exclude_keys)


def dump_list_for_snapshot(
    basemodels: Sequence[BaseModel], /, exclude_keys: list[str] | None = None, **dump_kwargs: Any
) -> list[dict[str, Any]]:
    return [dump_for_snapshot(basemodel, exclude_keys=exclude_keys, **dump_kwargs) for basemodel in basemodels]
