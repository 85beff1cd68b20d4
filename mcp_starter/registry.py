"""Handler registry: descriptors for tools, resources and prompts."""

import logging
import re
import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Iterator, List, Optional, Tuple

from mcp_starter.errors import DuplicateIdentifier, NotFound

logger = logging.getLogger(__name__)


class Category(str, Enum):
    TOOL = "tool"
    RESOURCE = "resource"
    PROMPT = "prompt"


PARAMETER_TYPES = ("string", "number", "integer", "boolean", "enum", "object")

_MISSING = object()


@dataclass(frozen=True)
class Annotations:
    """Behavioural hints attached to a tool."""
    read_only: bool = False
    destructive: bool = False
    idempotent: bool = False
    open_world: bool = False


@dataclass(frozen=True)
class ParameterSpec:
    """A single named parameter of a handler.

    A required parameter carries no default, and a default must satisfy
    the declared type. Both are checked on construction.
    """
    name: str
    type: str = "string"
    required: bool = True
    description: str = ""
    default: Any = _MISSING
    choices: Tuple[str, ...] = ()

    def __post_init__(self):
        if self.type not in PARAMETER_TYPES:
            raise ValueError(f"Parameter '{self.name}' has unknown type '{self.type}'")
        if self.type == "enum" and not self.choices:
            raise ValueError(f"Enum parameter '{self.name}' needs choices")
        if self.required and self.has_default:
            raise ValueError(f"Required parameter '{self.name}' cannot have a default")
        if self.has_default and not _default_matches(self, self.default):
            raise ValueError(
                f"Default {self.default!r} of parameter '{self.name}' is not a valid {self.type}"
            )

    @property
    def has_default(self) -> bool:
        return self.default is not _MISSING

    def json_schema(self) -> dict:
        """JSON Schema fragment describing this parameter."""
        if self.type == "enum":
            schema = {"type": "string", "enum": list(self.choices)}
        else:
            schema = {"type": self.type}
        if self.description:
            schema["description"] = self.description
        if self.has_default:
            schema["default"] = self.default
        return schema


def _default_matches(spec: ParameterSpec, value: Any) -> bool:
    if spec.type == "string":
        return isinstance(value, str)
    if spec.type == "boolean":
        return isinstance(value, bool)
    if spec.type == "integer":
        return isinstance(value, int) and not isinstance(value, bool)
    if spec.type == "number":
        return isinstance(value, (int, float)) and not isinstance(value, bool)
    if spec.type == "enum":
        return value in spec.choices
    return isinstance(value, dict)


Handler = Callable[..., Awaitable[Any]]


@dataclass(frozen=True)
class HandlerDescriptor:
    """An invocable unit plus the metadata advertised for it.

    For resources the identifier is a URI or URI template
    (``greeting://{name}``); for tools and prompts it is a plain name.
    The ``invoke`` coroutine function receives the invocation context
    followed by the validated arguments as keyword arguments.
    """
    identifier: str
    category: Category
    invoke: Handler
    title: str = ""
    description: str = ""
    parameters: Tuple[ParameterSpec, ...] = ()
    output_schema: Optional[dict] = None
    annotations: Annotations = field(default_factory=Annotations)
    name: str = ""
    mime_type: Optional[str] = None

    def input_schema(self) -> dict:
        properties = {p.name: p.json_schema() for p in self.parameters}
        schema = {"type": "object", "properties": properties}
        required = [p.name for p in self.parameters if p.required]
        if required:
            schema["required"] = required
        return schema

    @property
    def is_template(self) -> bool:
        return self.category is Category.RESOURCE and "{" in self.identifier


def _template_pattern(template: str) -> "re.Pattern[str]":
    parts = re.split(r"\{(\w+)\}", template)
    regex = ""
    for index, part in enumerate(parts):
        if index % 2:
            regex += f"(?P<{part}>[^/]+)"
        else:
            regex += re.escape(part)
    return re.compile(f"^{regex}$")


class Registry:
    """Append-only mapping from (category, identifier) to descriptors.

    Writes take a lock; reads work on snapshots so a listing in progress
    never sees a registration half way through.
    """

    def __init__(self, notifier=None):
        self._notifier = notifier
        self._lock = threading.Lock()
        self._entries: Dict[Tuple[Category, str], HandlerDescriptor] = {}
        self._order: Dict[Category, Tuple[HandlerDescriptor, ...]] = {c: () for c in Category}
        self._patterns: Dict[str, "re.Pattern[str]"] = {}
        self._started = False

    @property
    def started(self) -> bool:
        return self._started

    def mark_started(self) -> None:
        """Registrations after this point emit list-changed notifications."""
        self._started = True

    def register(self, descriptor: HandlerDescriptor) -> HandlerDescriptor:
        key = (descriptor.category, descriptor.identifier)
        with self._lock:
            if key in self._entries:
                raise DuplicateIdentifier(descriptor.category, descriptor.identifier)
            self._entries[key] = descriptor
            self._order[descriptor.category] = self._order[descriptor.category] + (descriptor,)
            if descriptor.is_template:
                self._patterns[descriptor.identifier] = _template_pattern(descriptor.identifier)
            notify = self._started

        logger.debug("Registered %s '%s'", descriptor.category.value, descriptor.identifier)
        if notify and self._notifier is not None:
            self._notifier.notify_list_changed(descriptor.category)
        return descriptor

    def lookup(self, category: Category, identifier: str) -> HandlerDescriptor:
        descriptor = self._entries.get((category, identifier))
        if descriptor is None:
            raise NotFound(category, identifier)
        return descriptor

    def contains(self, category: Category, identifier: str) -> bool:
        return (category, identifier) in self._entries

    def list_all(self, category: Category) -> Iterator[HandlerDescriptor]:
        """Yield descriptors of a category in registration order."""
        yield from self._order[category]

    def identifiers(self, category: Category) -> List[str]:
        return [d.identifier for d in self.list_all(category)]

    def match_resource(self, uri: str) -> Tuple[HandlerDescriptor, Dict[str, str]]:
        """Resolve a concrete resource URI to its descriptor and template variables."""
        exact = self._entries.get((Category.RESOURCE, uri))
        if exact is not None:
            return exact, {}
        for descriptor in self.list_all(Category.RESOURCE):
            pattern = self._patterns.get(descriptor.identifier)
            if pattern is None:
                continue
            match = pattern.match(uri)
            if match:
                return descriptor, match.groupdict()
        raise NotFound(Category.RESOURCE, uri)
