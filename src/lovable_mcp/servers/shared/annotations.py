from typing import Annotated, Literal

from pydantic import Field

REPO_DESCRIPTION = "The name of the repository, owned by the configured account."
REPO = Annotated[str, Field(description=REPO_DESCRIPTION, min_length=1)]

PATH = Annotated[str, Field(description="The path of the file within the repository, for example 'src/App.tsx'.", min_length=1)]
DIRECTORY_PATH = Annotated[str | None, Field(description="The path within the repository. Defaults to the root directory.")]

BRANCH = Annotated[str | None, Field(description="The branch to use. Defaults to the repository's default branch.")]
FROM_BRANCH = Annotated[str, Field(description="The branch to start from.")]

COMMIT_MESSAGE = Annotated[str, Field(description="The commit message.", min_length=1)]
FILE_CONTENT = Annotated[str, Field(description="The full new content of the file.")]

LIMIT = Annotated[int, Field(description="The maximum number of results to return.", ge=1, le=100)]

STATE = Annotated[Literal["open", "closed", "all"], Field(description="Filter by state.")]
NUMBER = Annotated[int, Field(description="The number of the issue or pull request.", ge=1)]

QUERY = Annotated[str, Field(description="The search query.", min_length=1)]

LABELS = Annotated[list[str] | None, Field(description="The names of labels.")]

DEFAULT_BRANCH = "main"
DEFAULT_LIMIT = 30
