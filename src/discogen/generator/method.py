"""Build callable method descriptors from :class:`~discogen.models.MethodSchema`.

Each method in the generated tree is an :class:`ApiMethod`.  Calling it
accepts three shapes, all funnelled into the single coroutine
:meth:`ApiMethod.invoke`:

* ``method(params, callback)`` -- ``callback(error, response)`` is called
  on completion.
* ``method(params)`` -- returns a coroutine that resolves to the
  :class:`httpx.Response` (or raises the invocation error) when awaited.
* ``method(callback)`` -- same as ``method({}, callback)``; every
  parameter comes from defaults.

Keyword arguments are merged into *params*, so
``client.projects.lookup(projectId="p1")`` also works.

With a callback inside a running event loop the work is scheduled as a
task and the task is returned.  Without a running loop the call is driven
to completion with :func:`asyncio.run` before returning ``None``.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Mapping, Optional

import httpx

from discogen.exceptions import SchemaError
from discogen.generator.params import ApiRequest, resolve
from discogen.models import ClientOptions, DiscoveryDocument, MethodSchema

if TYPE_CHECKING:
    from discogen.transport import Transport

logger = logging.getLogger(__name__)

Callback = Callable[[Optional[BaseException], Optional[httpx.Response]], Any]

# Strong references to callback-style tasks until they finish.
_pending: set[asyncio.Task[None]] = set()


@dataclass(frozen=True)
class BuildContext:
    """State shared by every node of one generated client.

    Attributes:
        document: The discovery document the client was built from.
        defaults: Read-only default-parameter map of the client.
        options: The client's options.
        transport: Executes resolved requests.
    """

    document: DiscoveryDocument
    defaults: Mapping[str, Any]
    options: ClientOptions
    transport: Transport


class ApiMethod:
    """A generated, callable API method.

    Args:
        name: Attribute name of the method on its parent resource.
        schema: The method's schema fragment (shared, never mutated).
        context: The owning client's :class:`BuildContext`.
    """

    def __init__(self, name: str, schema: MethodSchema, context: BuildContext) -> None:
        self.name = name
        self._schema = schema
        self._context = context
        self.__doc__ = schema.description

    @property
    def schema(self) -> MethodSchema:
        return self._schema

    @property
    def id(self) -> Optional[str]:
        return self._schema.id

    def __repr__(self) -> str:
        return f"<ApiMethod {self._schema.id or self.name}: {self._schema.http_method} {self._schema.path}>"

    def prepare(self, params: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> ApiRequest:
        """Resolve parameters into an :class:`ApiRequest` without sending it.

        Raises:
            MissingRequiredParameterError: If a required parameter has no value.
        """
        call_params = {**(params or {}), **kwargs}
        return resolve(
            self._context.defaults,
            call_params,
            self._schema,
            self._context.document,
            self._context.options,
        )

    async def invoke(self, params: Optional[Mapping[str, Any]] = None) -> httpx.Response:
        """Resolve *params* and execute the request through the transport."""
        request = self.prepare(params)
        logger.debug("Invoking %s: %s %s", self.id, request.method, request.full_url)
        return await self._context.transport.execute(request)

    def __call__(
        self,
        params: Any = None,
        callback: Optional[Callback] = None,
        **kwargs: Any,
    ) -> Optional[Awaitable[Any]]:
        if callback is None and callable(params):
            params, callback = None, params

        pending: Awaitable[httpx.Response]
        if params is not None and not isinstance(params, Mapping):
            pending = _fail(TypeError(
                f"{self.id}: params must be a mapping, got {type(params).__name__}"
            ))
        else:
            pending = self.invoke({**(params or {}), **kwargs})
        if callback is None:
            return pending
        return _complete_with_callback(pending, callback)


async def _fail(error: Exception) -> httpx.Response:
    raise error


def _complete_with_callback(
    pending: Awaitable[httpx.Response],
    callback: Callback,
) -> Optional[asyncio.Task[None]]:
    """Drive *pending* and report its outcome as ``callback(error, response)``."""

    async def _runner() -> None:
        try:
            response = await pending
        except Exception as exc:
            callback(exc, None)
        else:
            callback(None, response)

    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        asyncio.run(_runner())
        return None

    task = loop.create_task(_runner())
    _pending.add(task)
    task.add_done_callback(_pending.discard)
    return task


def build_method(name: str, schema: MethodSchema, context: BuildContext) -> ApiMethod:
    """Validate *schema* and wrap it in an :class:`ApiMethod`.

    Raises:
        SchemaError: If the schema has no HTTP verb or no path template.
    """
    method_id = schema.id or name
    if not schema.http_method:
        raise SchemaError(f"Method {method_id} has no httpMethod", method_id=method_id)
    if schema.path is None:
        raise SchemaError(f"Method {method_id} has no path", method_id=method_id)
    return ApiMethod(name, schema, context)
