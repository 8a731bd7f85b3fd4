from pydantic import Field

from lovable_mcp.servers.conventions import MAX_IMAGES, MAX_PROMPT_LENGTH, build_url
from lovable_mcp.servers.models.project import BuildUrl
from lovable_mcp.servers.registry import Capability, CapabilityArguments, CapabilityRegistry, ExecutionContext


class GenerateBuildUrlArguments(CapabilityArguments):
    prompt: str = Field(description="What the app should do.", min_length=1, max_length=MAX_PROMPT_LENGTH)
    images: list[str] | None = Field(default=None, description=f"URLs of reference images. Only the first {MAX_IMAGES} are used.")


async def generate_build_url(arguments: GenerateBuildUrlArguments, context: ExecutionContext) -> BuildUrl:  # noqa: ARG001
    """Generate a Lovable Build-with-URL link that creates a new app from a prompt."""

    images = arguments.images or []

    return BuildUrl(
        url=build_url(prompt=arguments.prompt, images=images),
        prompt_length=len(arguments.prompt),
        image_count=min(len(images), MAX_IMAGES),
    )


def register_tools(registry: CapabilityRegistry) -> CapabilityRegistry:
    _ = registry.register(Capability.from_function(fn=generate_build_url))

    return registry
