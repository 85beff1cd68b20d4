"""Invocation dispatcher: lookup, argument binding, execution and result wrapping."""

import json
import logging
import math
import time
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Sequence, Union

import anyio

from mcp_starter.errors import (
    ErrorKind,
    InvalidArgument,
    InvocationCancelled,
    InvocationError,
    Unsupported,
)
from mcp_starter.registry import Category, ParameterSpec, Registry

logger = logging.getLogger(__name__)


# --- Results --------------------------------------------------------------

@dataclass(frozen=True)
class Success:
    payload: Any

    ok = True

    @property
    def text(self) -> str:
        if isinstance(self.payload, str):
            return self.payload
        if isinstance(self.payload, (dict, list)):
            return json.dumps(self.payload, indent=2)
        return str(self.payload)

    @property
    def structured(self) -> Optional[dict]:
        return self.payload if isinstance(self.payload, dict) else None


@dataclass(frozen=True)
class Failure:
    kind: ErrorKind
    message: str

    ok = False

    @property
    def text(self) -> str:
        return f"Error: {self.message}"

    @property
    def structured(self) -> Optional[dict]:
        return None


InvocationResult = Union[Success, Failure]


# --- Cancellation and the calling side -------------------------------------

class CancellationToken:
    """One-shot cancellation signal shared between a caller and an invocation."""

    def __init__(self):
        self._cancelled = False
        self._event: Optional[anyio.Event] = None

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        self._cancelled = True
        if self._event is not None:
            self._event.set()

    async def wait(self) -> None:
        if self._cancelled:
            return
        if self._event is None:
            self._event = anyio.Event()
        await self._event.wait()


@dataclass(frozen=True)
class ElicitationResponse:
    """Caller's answer to an elicitation: accept, decline or cancel."""
    action: str
    content: Optional[Dict[str, Any]] = None

    @property
    def accepted(self) -> bool:
        return self.action == "accept"


class Peer:
    """The calling side of an invocation.

    The base class advertises no capabilities; the transport adapter
    subclasses it for real client sessions and tests subclass it with
    scripted answers.
    """

    def supports_sampling(self) -> bool:
        return False

    def supports_elicitation(self, mode: str = "form") -> bool:
        return False

    async def sample(self, prompt: str, max_tokens: int) -> Optional[str]:
        """Ask the caller's model; returns the text reply or None for non-text content."""
        raise Unsupported("sampling")

    async def elicit_form(self, message: str, schema: dict) -> ElicitationResponse:
        raise Unsupported("elicitation")

    async def elicit_url(self, message: str, url: str, elicitation_id: str) -> ElicitationResponse:
        raise Unsupported("URL elicitation")

    async def report_progress(self, progress: float, total: Optional[float], message: Optional[str]) -> None:
        return None


@dataclass
class InvocationContext:
    """Per-invocation state handed to every handler body.

    Owned by a single invocation. Nested requests started through it are
    raced against ``cancel_token`` and never outlive the invocation.
    """
    registry: Optional[Registry] = None
    peer: Peer = field(default_factory=Peer)
    cancel_token: CancellationToken = field(default_factory=CancellationToken)
    call_id: str = field(default_factory=lambda: uuid.uuid4().hex[:8])

    def check_cancelled(self) -> None:
        if self.cancel_token.cancelled:
            raise InvocationCancelled()

    async def sleep(self, seconds: float) -> None:
        """Timed suspension point; raises InvocationCancelled if cancelled first."""
        self.check_cancelled()
        with anyio.move_on_after(seconds):
            await self.cancel_token.wait()
        self.check_cancelled()

    async def sample(self, prompt: str, max_tokens: int) -> Optional[str]:
        if not self.peer.supports_sampling():
            raise Unsupported("sampling")
        return await self._until_cancelled(self.peer.sample, prompt, max_tokens)

    async def elicit_form(self, message: str, schema: dict) -> ElicitationResponse:
        if not self.peer.supports_elicitation("form"):
            raise Unsupported("elicitation")
        return await self._until_cancelled(self.peer.elicit_form, message, schema)

    async def elicit_url(self, message: str, url: str, elicitation_id: str) -> ElicitationResponse:
        if not self.peer.supports_elicitation("url"):
            raise Unsupported("URL elicitation")
        return await self._until_cancelled(self.peer.elicit_url, message, url, elicitation_id)

    async def report_progress(self, progress: float, total: Optional[float] = None,
                              message: Optional[str] = None) -> None:
        await self.peer.report_progress(progress, total, message)

    async def _until_cancelled(self, func, *args):
        """Run a nested request, abandoning it as soon as the token fires."""
        self.check_cancelled()
        results = []
        errors = []

        async with anyio.create_task_group() as tg:
            async def run():
                try:
                    results.append(await func(*args))
                except Exception as exc:
                    errors.append(exc)
                finally:
                    tg.cancel_scope.cancel()

            tg.start_soon(run)
            await self.cancel_token.wait()
            tg.cancel_scope.cancel()

        if errors:
            raise errors[0]
        if not results:
            raise InvocationCancelled()
        return results[0]


# --- Argument binding ------------------------------------------------------

_TRUE = {"true", "1", "yes"}
_FALSE = {"false", "0", "no"}


def _expected(spec: ParameterSpec) -> str:
    if spec.type == "enum":
        return "one of " + ", ".join(spec.choices)
    return spec.type


def coerce_value(spec: ParameterSpec, value: Any) -> Any:
    """Coerce a JSON value to the parameter's declared type or raise InvalidArgument."""
    kind = spec.type
    is_bool = isinstance(value, bool)

    if kind == "string":
        if isinstance(value, str):
            return value
    elif kind == "number":
        if isinstance(value, (int, float)) and not is_bool:
            return value
        if isinstance(value, str):
            try:
                return float(value.strip())
            except ValueError:
                pass
    elif kind == "integer":
        if isinstance(value, int) and not is_bool:
            return value
        if isinstance(value, float) and math.isfinite(value) and value.is_integer():
            return int(value)
        if isinstance(value, str):
            try:
                return int(value.strip())
            except ValueError:
                pass
    elif kind == "boolean":
        if is_bool:
            return value
        if isinstance(value, str):
            lowered = value.strip().lower()
            if lowered in _TRUE:
                return True
            if lowered in _FALSE:
                return False
    elif kind == "enum":
        if isinstance(value, str):
            for choice in spec.choices:
                if choice.lower() == value.strip().lower():
                    return choice
    elif kind == "object":
        if isinstance(value, dict):
            return value

    raise InvalidArgument(spec.name, _expected(spec), f"got {value!r}")


def bind_arguments(parameters: Sequence[ParameterSpec],
                   arguments: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """Validate raw arguments and fill defaults.

    Unknown names are ignored. A missing or null required parameter is
    an InvalidArgument, as is any value that cannot be coerced.
    """
    arguments = arguments or {}
    bound: Dict[str, Any] = {}
    for spec in parameters:
        value = arguments.get(spec.name)
        if value is None:
            if spec.required:
                raise InvalidArgument(spec.name, _expected(spec), "missing required argument")
            if spec.has_default:
                bound[spec.name] = spec.default
            continue
        bound[spec.name] = coerce_value(spec, value)
    return bound


# --- Dispatcher ------------------------------------------------------------

class Dispatcher:
    """Routes invocations to registered handlers and wraps their outcome."""

    def __init__(self, registry: Registry):
        self.registry = registry

    def new_context(self, peer: Optional[Peer] = None,
                    cancel_token: Optional[CancellationToken] = None) -> InvocationContext:
        return InvocationContext(
            registry=self.registry,
            peer=peer or Peer(),
            cancel_token=cancel_token or CancellationToken(),
        )

    async def invoke(self, category: Category, identifier: str,
                     arguments: Optional[Mapping[str, Any]] = None,
                     context: Optional[InvocationContext] = None) -> InvocationResult:
        context = context or self.new_context()
        try:
            descriptor = self.registry.lookup(category, identifier)
            bound = bind_arguments(descriptor.parameters, arguments)
        except InvocationError as exc:
            logger.warning("[%s] %s '%s' rejected: %s", context.call_id, category.value, identifier, exc.message)
            return Failure(exc.kind, exc.message)
        return await self._execute(descriptor, bound, context)

    async def read_resource(self, uri: str,
                            context: Optional[InvocationContext] = None) -> InvocationResult:
        """Resolve a concrete URI against static and templated resources and read it."""
        context = context or self.new_context()
        try:
            descriptor, variables = self.registry.match_resource(uri)
            bound = bind_arguments(descriptor.parameters, variables)
        except InvocationError as exc:
            logger.warning("[%s] resource '%s' rejected: %s", context.call_id, uri, exc.message)
            return Failure(exc.kind, exc.message)
        return await self._execute(descriptor, bound, context)

    async def _execute(self, descriptor, bound, context) -> InvocationResult:
        name = f"{descriptor.category.value} '{descriptor.identifier}'"
        logger.debug("[%s] %s invoked with %s", context.call_id, name, bound)
        started = time.perf_counter()
        try:
            payload = await descriptor.invoke(context, **bound)
        except InvocationCancelled as exc:
            logger.info("[%s] %s cancelled", context.call_id, name)
            return Failure(exc.kind, exc.message)
        except InvocationError as exc:
            logger.warning("[%s] %s failed: %s", context.call_id, name, exc.message)
            return Failure(exc.kind, exc.message)
        except Exception as exc:
            logger.exception("[%s] %s raised an unexpected error", context.call_id, name)
            return Failure(ErrorKind.INTERNAL_ERROR, str(exc) or type(exc).__name__)

        duration = time.perf_counter() - started
        logger.debug("[%s] %s succeeded in %.6fs", context.call_id, name, duration)
        return Success(payload)
