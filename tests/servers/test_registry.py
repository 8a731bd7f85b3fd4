import pytest
from inline_snapshot import snapshot
from pydantic import Field

from lovable_mcp.servers.registry import Capability, CapabilityArguments, CapabilityRegistry, ExecutionContext
from lovable_mcp.servers.shared.errors import DuplicateCapabilityError, RegistryFrozenError


class EchoArguments(CapabilityArguments):
    text: str = Field(description="The text to echo.")
    upper_case: bool = Field(default=False, description="Whether to upper case the text.")


async def echo(arguments: EchoArguments, context: ExecutionContext) -> str:  # noqa: ARG001
    """Echo the text back.

    Useful for checking a connection."""

    return arguments.text.upper() if arguments.upper_case else arguments.text


async def untyped(arguments, context):  # pyright: ignore[reportMissingParameterType, reportUnknownParameterType]  # noqa: ARG001
    return None


class TestCapability:
    def test_from_function(self):
        capability = Capability.from_function(fn=echo)

        assert capability.name == "echo"
        assert capability.description == "Echo the text back.\n\nUseful for checking a connection."
        assert capability.arguments_model is EchoArguments

    def test_from_function_overrides(self):
        capability = Capability.from_function(fn=echo, name="say", description="Say something.")

        assert capability.name == "say"
        assert capability.description == "Say something."

    def test_from_function_requires_arguments_model(self):
        with pytest.raises(TypeError, match="must be annotated with a CapabilityArguments model"):
            _ = Capability.from_function(fn=untyped)  # pyright: ignore[reportUnknownArgumentType]

    def test_input_schema_uses_camel_case(self):
        assert Capability.from_function(fn=echo).input_schema() == snapshot(
            {
                "additionalProperties": False,
                "properties": {
                    "text": {"description": "The text to echo.", "title": "Text", "type": "string"},
                    "upperCase": {
                        "default": False,
                        "description": "Whether to upper case the text.",
                        "title": "Uppercase",
                        "type": "boolean",
                    },
                },
                "required": ["text"],
                "title": "EchoArguments",
                "type": "object",
            }
        )


class TestCapabilityRegistry:
    def test_register_and_resolve(self):
        registry = CapabilityRegistry()
        capability = registry.register(Capability.from_function(fn=echo))

        assert registry.resolve("echo") is capability
        assert registry.resolve("missing") is None
        assert "echo" in registry
        assert len(registry) == 1
        assert registry.names() == ["echo"]

    def test_register_duplicate(self):
        registry = CapabilityRegistry()
        _ = registry.register(Capability.from_function(fn=echo))

        with pytest.raises(DuplicateCapabilityError, match="echo"):
            _ = registry.register(Capability.from_function(fn=echo))

    def test_register_after_freeze(self):
        registry = CapabilityRegistry()
        registry.freeze()

        assert registry.frozen

        with pytest.raises(RegistryFrozenError):
            _ = registry.register(Capability.from_function(fn=echo))

        assert len(registry) == 0

    def test_names_keep_registration_order(self):
        registry = CapabilityRegistry()

        for name in ["b", "a", "c"]:
            _ = registry.register(Capability.from_function(fn=echo, name=name))

        assert registry.names() == ["b", "a", "c"]
        assert [capability.name for capability in registry.capabilities()] == ["b", "a", "c"]
