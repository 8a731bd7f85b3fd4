import inspect
from collections.abc import Awaitable, Callable
from typing import Any, Self, get_type_hints

from fastmcp.utilities.logging import get_logger
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from lovable_mcp.clients.github import GitHubClient
from lovable_mcp.servers.shared.errors import DuplicateCapabilityError, RegistryFrozenError

logger = get_logger(__name__)


class CapabilityArguments(BaseModel):
    """Base for capability argument models. Unknown fields are rejected and names are camelCase on the wire."""

    model_config = ConfigDict(extra="forbid", alias_generator=to_camel, populate_by_name=True, frozen=True)


class ExecutionContext:
    """What a handler needs to reach upstream, passed explicitly to every call."""

    github_client: GitHubClient
    owner: str

    def __init__(self, github_client: GitHubClient, owner: str):
        self.github_client = github_client
        self.owner = owner


type CapabilityHandler[A: CapabilityArguments] = Callable[[A, ExecutionContext], Awaitable[Any]]


class Capability[A: CapabilityArguments]:
    """A named, schema-validated remote procedure."""

    name: str
    description: str
    arguments_model: type[A]
    handler: CapabilityHandler[A]

    def __init__(self, name: str, description: str, arguments_model: type[A], handler: CapabilityHandler[A]):
        self.name = name
        self.description = description
        self.arguments_model = arguments_model
        self.handler = handler

    @classmethod
    def from_function(cls, fn: CapabilityHandler[A], name: str | None = None, description: str | None = None) -> Self:
        """Build a capability from a handler, taking the arguments model from the annotation of its first parameter."""

        first_parameter = next(iter(inspect.signature(fn).parameters))
        arguments_model = get_type_hints(fn).get(first_parameter)

        if not (isinstance(arguments_model, type) and issubclass(arguments_model, CapabilityArguments)):
            msg = f"The first parameter of {fn.__name__} must be annotated with a CapabilityArguments model"
            raise TypeError(msg)

        return cls(
            name=name or fn.__name__,
            description=description or inspect.cleandoc(fn.__doc__ or ""),
            arguments_model=arguments_model,  # pyright: ignore[reportArgumentType]
            handler=fn,
        )

    def input_schema(self) -> dict[str, Any]:
        return self.arguments_model.model_json_schema(by_alias=True)

    def __repr__(self) -> str:
        return f"Capability(name={self.name!r})"


class CapabilityRegistry:
    """The capabilities the server offers, keyed by name, in registration order.

    Populated during startup and frozen before the server accepts connections. Reads need no locking."""

    _capabilities: dict[str, Capability[Any]]
    _frozen: bool

    def __init__(self):
        self._capabilities = {}
        self._frozen = False

    def register(self, capability: Capability[Any]) -> Capability[Any]:
        """Add a capability.

        Raises:
            DuplicateCapabilityError: If a capability with the same name is already registered.
            RegistryFrozenError: If the registry has been frozen.
        """

        if self._frozen:
            raise RegistryFrozenError(name=capability.name)

        if capability.name in self._capabilities:
            raise DuplicateCapabilityError(name=capability.name)

        self._capabilities[capability.name] = capability

        logger.debug(f"Registered capability {capability.name}")

        return capability

    def resolve(self, name: str) -> Capability[Any] | None:
        return self._capabilities.get(name)

    def names(self) -> list[str]:
        return list(self._capabilities)

    def capabilities(self) -> list[Capability[Any]]:
        return list(self._capabilities.values())

    def freeze(self) -> None:
        self._frozen = True

        logger.info(f"Capability registry frozen with {len(self._capabilities)} capabilities")

    @property
    def frozen(self) -> bool:
        return self._frozen

    def __len__(self) -> int:
        return len(self._capabilities)

    def __contains__(self, name: object) -> bool:
        return name in self._capabilities
