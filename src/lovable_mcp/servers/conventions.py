"""Knowledge about how Lovable lays out the projects it generates.

Everything here is a pure function over data that has already been fetched from GitHub."""

import re
from collections.abc import Iterable, Sequence
from urllib.parse import quote

from pydantic import BaseModel, ConfigDict

from lovable_mcp.servers.models.project import Route

PROJECT_MARKERS: tuple[str, ...] = ("vite.config.ts", "tailwind.config.ts", "components.json")

PACKAGE_JSON = "package.json"
ENV_EXAMPLE = ".env.example"
ROUTES_ENTRY = "src/App.tsx"
TAILWIND_CONFIG_PATHS: tuple[str, ...] = ("tailwind.config.ts", "tailwind.config.js")
VITE_CONFIG_PATHS: tuple[str, ...] = ("vite.config.ts", "vite.config.js")
SUPABASE_CONFIG = "supabase/config.toml"
SUPABASE_MIGRATIONS = "supabase/migrations"
SUPABASE_FUNCTIONS = "supabase/functions"

BUILD_URL_PREFIX = "https://lovable.dev/?autosubmit=true#prompt="
MAX_PROMPT_LENGTH = 50_000
MAX_IMAGES = 10

OTHER_CATEGORY = "other"

# Checked in order, a dependency lands in the first category with a matching keyword
DEPENDENCY_CATEGORIES: dict[str, tuple[str, ...]] = {
    "ui": ("@radix-ui", "lucide", "shadcn", "class-variance-authority", "clsx", "tailwind-merge", "cmdk", "vaul", "sonner", "embla"),
    "styling": ("tailwind", "postcss", "autoprefixer", "styled-components", "@emotion", "sass"),
    "state": ("@tanstack/react-query", "zustand", "redux", "jotai", "recoil", "mobx"),
    "routing": ("react-router", "wouter", "@tanstack/react-router"),
    "forms": ("react-hook-form", "@hookform", "zod", "yup", "formik"),
    "backend": ("@supabase", "firebase", "axios", "graphql", "@apollo", "stripe"),
    "charts": ("recharts", "chart.js", "d3", "victory"),
    "dates": ("date-fns", "dayjs", "moment", "react-day-picker"),
    "animation": ("framer-motion", "motion", "react-spring", "gsap"),
    "testing": ("vitest", "jest", "@testing-library", "playwright", "cypress"),
    "build": ("vite", "@vitejs", "typescript", "eslint", "@types", "lovable-tagger"),
}


class FolderConvention(BaseModel):
    """Where a kind of project source lives. The first folder that exists is listed."""

    model_config = ConfigDict(frozen=True)

    capability: str
    kind: str
    description: str
    folders: tuple[str, ...]
    exclude: tuple[str, ...] = ()


FOLDER_CONVENTIONS: tuple[FolderConvention, ...] = (
    FolderConvention(
        capability="list_components",
        kind="UI components",
        description="List the shadcn/ui components of a Lovable project.",
        folders=("src/components/ui",),
    ),
    FolderConvention(
        capability="list_custom_components",
        kind="custom components",
        description="List the project's own components, outside of the shadcn/ui folder.",
        folders=("src/components",),
        exclude=("ui",),
    ),
    FolderConvention(capability="list_pages", kind="pages", description="List the pages of a Lovable project.", folders=("src/pages",)),
    FolderConvention(
        capability="list_hooks", kind="hooks", description="List the custom React hooks of a Lovable project.", folders=("src/hooks",)
    ),
    FolderConvention(
        capability="list_contexts",
        kind="contexts",
        description="List the React contexts of a Lovable project.",
        folders=("src/contexts", "src/context"),
    ),
    FolderConvention(
        capability="list_utils",
        kind="utilities",
        description="List the utility modules of a Lovable project.",
        folders=("src/utils", "src/lib"),
    ),
    FolderConvention(
        capability="list_types", kind="types", description="List the TypeScript type modules of a Lovable project.", folders=("src/types",)
    ),
    FolderConvention(
        capability="list_integrations",
        kind="integrations",
        description="List the third-party integrations of a Lovable project, such as the Supabase client.",
        folders=("src/integrations",),
    ),
)


def is_lovable_project(root_names: Iterable[str]) -> bool:
    """Whether a repository root contains every file Lovable generates a project with."""

    names = set(root_names)

    return all(marker in names for marker in PROJECT_MARKERS)


def categorize_dependency(name: str) -> str:
    lowered = name.lower()

    for category, keywords in DEPENDENCY_CATEGORIES.items():
        if any(keyword in lowered for keyword in keywords):
            return category

    return OTHER_CATEGORY


def categorize_dependencies(names: Iterable[str]) -> dict[str, list[str]]:
    """Bucket dependency names by category. Only categories with at least one dependency are returned, sorted by name."""

    categories: dict[str, list[str]] = {}

    for name in sorted(set(names)):
        categories.setdefault(categorize_dependency(name), []).append(name)

    return categories


ROUTE_TAG = re.compile(r"<Route\b")
PATH_ATTRIBUTE = re.compile(r"""\bpath\s*=\s*(?:\{\s*)?["'`]([^"'`]+)["'`]""")
ELEMENT_ATTRIBUTE = re.compile(r"\belement\s*=\s*\{\s*<\s*([A-Za-z_][\w.]*)")


def extract_routes(source: str) -> list[Route]:
    """Find `<Route path="..." element={<Component />} />` declarations in a React Router entry file.

    Routes without a literal path, like index and layout routes, are skipped."""

    starts = [match.start() for match in ROUTE_TAG.finditer(source)]
    ends = [*starts[1:], len(source)]

    routes: list[Route] = []

    for start, end in zip(starts, ends, strict=True):
        declaration = source[start:end]

        if not (path_match := PATH_ATTRIBUTE.search(declaration)):
            continue

        element_match = ELEMENT_ATTRIBUTE.search(declaration)

        routes.append(Route(path=path_match.group(1), element=element_match.group(1) if element_match else None))

    return routes


def encode_uri_component(value: str) -> str:
    """Percent-encode everything except the characters JavaScript's encodeURIComponent leaves alone."""

    return quote(value, safe="-_.!~*'()")


def build_url(prompt: str, images: Sequence[str] | None = None) -> str:
    """Build a Lovable link that opens a new project and submits the prompt. Only the first ten images are included."""

    if len(prompt) > MAX_PROMPT_LENGTH:
        msg = f"The prompt is {len(prompt)} characters long, the limit is {MAX_PROMPT_LENGTH}"
        raise ValueError(msg)

    url = BUILD_URL_PREFIX + encode_uri_component(prompt)

    if images:
        url += "&" + "&".join(f"images={encode_uri_component(image)}" for image in images[:MAX_IMAGES])

    return url
