import base64
from collections.abc import Sequence
from typing import Any

from githubkit.response import Response
from pydantic import BaseModel
from pydantic_core import to_json

GITHUBKIT_RESPONSE_TYPE = BaseModel | Sequence[BaseModel]


def extract_response[T: GITHUBKIT_RESPONSE_TYPE](response: Response[T], /) -> T:
    """Extract the parsed model from a githubkit response."""

    return response.parsed_data


def decode_content(content: str) -> str:
    return base64.b64decode(content).decode("utf-8", errors="replace")


def encode_content(content: str) -> str:
    return base64.b64encode(content.encode("utf-8")).decode("ascii")


def strip_extension(name: str, extensions: Sequence[str] = (".tsx", ".ts")) -> str:
    for extension in extensions:
        if name.endswith(extension):
            return name.removesuffix(extension)
    return name


def to_text(value: Any) -> str:  # pyright: ignore[reportAny]
    """Render a handler result as the text of a content block. Strings pass through, everything else becomes indented JSON."""

    if isinstance(value, str):
        return value

    return to_json(value, indent=2, by_alias=True).decode("utf-8")
