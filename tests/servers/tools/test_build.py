import pytest
from inline_snapshot import snapshot
from pydantic import ValidationError

from lovable_mcp.servers.registry import ExecutionContext
from lovable_mcp.servers.tools.build import GenerateBuildUrlArguments, generate_build_url
from tests.conftest import dump_for_snapshot


async def test_generate_build_url(context: ExecutionContext):
    build_url = await generate_build_url(GenerateBuildUrlArguments(prompt="todo app"), context)

    assert dump_for_snapshot(build_url) == snapshot(
        {"url": "https://lovable.dev/?autosubmit=true#prompt=todo%20app", "prompt_length": 8, "image_count": 0}
    )


async def test_generate_build_url_caps_images(context: ExecutionContext):
    images = [f"https://example.com/{i}.png" for i in range(12)]

    build_url = await generate_build_url(GenerateBuildUrlArguments(prompt="gallery", images=images), context)

    assert build_url.image_count == 10
    assert build_url.url.count("&images=") == 10
    assert "11.png" not in build_url.url


def test_prompt_limits():
    with pytest.raises(ValidationError):
        _ = GenerateBuildUrlArguments(prompt="")

    with pytest.raises(ValidationError):
        _ = GenerateBuildUrlArguments(prompt="x" * 50_001)

    assert GenerateBuildUrlArguments(prompt="x" * 50_000).prompt == "x" * 50_000
