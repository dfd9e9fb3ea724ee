"""Build the client object graph from a discovery document.

This is the core of discogen.  :func:`build_resource` walks a
:class:`~discogen.models.ResourceSchema` recursively: every nested
resource becomes a child :class:`Resource` and every method becomes an
:class:`~discogen.generator.method.ApiMethod`, so a method nested any
number of levels deep (``oauth2.userinfo.v2.me.get``) is reachable by
plain attribute access.

:func:`build_client` builds the root :class:`Client`, which additionally
owns the read-only default-parameter map shared by all of its methods.
Building is synchronous and all-or-nothing: a malformed method aborts the
whole build with :class:`~discogen.exceptions.SchemaError`.
"""

from __future__ import annotations

import keyword
import logging
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Iterator, Mapping, Optional, Union

from discogen.exceptions import SchemaError
from discogen.generator.method import ApiMethod, BuildContext, build_method
from discogen.models import ClientOptions, DiscoveryDocument, ResourceSchema

if TYPE_CHECKING:
    from discogen.transport import Transport

logger = logging.getLogger(__name__)

Node = Union["Resource", ApiMethod]


class Resource:
    """A container node of the generated client.

    Children are exposed as attributes and by item access.  A child whose
    name is a Python keyword is also reachable with a trailing underscore
    (``resource.import_``).  The node is read-only once built.

    Helpers carry a leading underscore, as on :func:`collections.namedtuple`,
    so that no API name can shadow them or be shadowed by them.
    """

    def __init__(self, name: str, children: Mapping[str, Node]) -> None:
        object.__setattr__(self, "_name", name)
        object.__setattr__(self, "_children", dict(children))

    def __getattr__(self, name: str) -> Node:
        children = self.__dict__.get("_children", {})
        if name in children:
            return children[name]
        if name.endswith("_") and keyword.iskeyword(name[:-1]) and name[:-1] in children:
            return children[name[:-1]]
        raise AttributeError(
            f"{type(self).__name__} {self.__dict__.get('_name')!r} has no member {name!r}"
        )

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError(f"{type(self).__name__} {self._name!r} is read-only")

    def __getitem__(self, name: str) -> Node:
        try:
            return self._children[name]
        except KeyError:
            raise KeyError(name) from None

    def __contains__(self, name: object) -> bool:
        return name in self._children

    def __dir__(self) -> list[str]:
        return sorted(set(super().__dir__()) | set(self._children))

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self._name!r}: {', '.join(sorted(self._children))}>"

    def _iter_methods(self, prefix: str = "") -> Iterator[tuple[str, ApiMethod]]:
        """Yield ``(dotted_path, method)`` for every method in this subtree."""
        for name, child in self._children.items():
            path = f"{prefix}.{name}" if prefix else name
            if isinstance(child, Resource):
                yield from child._iter_methods(path)
            else:
                yield path, child

    def _method_paths(self) -> list[str]:
        """Return the sorted dotted paths of all methods in this subtree."""
        return sorted(path for path, _ in self._iter_methods())


class Client(Resource):
    """Root of a generated client.

    Attributes:
        _document: The discovery document the client was generated from.
        _options: The options fixed at construction time.
        _params: Read-only default-parameter map.
    """

    def __init__(
        self,
        document: DiscoveryDocument,
        children: Mapping[str, Node],
        context: BuildContext,
    ) -> None:
        super().__init__(document.name, children)
        object.__setattr__(self, "_context", context)

    @property
    def _document(self) -> DiscoveryDocument:
        return self._context.document

    @property
    def _options(self) -> ClientOptions:
        return self._context.options

    @property
    def _params(self) -> Mapping[str, Any]:
        return self._context.defaults

    def __repr__(self) -> str:
        doc = self._context.document
        return f"<Client {doc.name} {doc.version}>"


def _build_children(
    schema: ResourceSchema,
    context: BuildContext,
    path: str,
) -> dict[str, Node]:
    children: dict[str, Node] = {}
    for name, child_schema in schema.resources.items():
        children[name] = build_resource(name, child_schema, context, f"{path}.{name}")
    for name, method_schema in schema.methods.items():
        if name in children:
            raise SchemaError(
                f"{path}.{name} is declared as both a resource and a method",
                method_id=method_schema.id or f"{path}.{name}",
            )
        children[name] = build_method(name, method_schema, context)
    return children


def build_resource(
    name: str,
    schema: ResourceSchema,
    context: BuildContext,
    path: Optional[str] = None,
) -> Resource:
    """Recursively build a :class:`Resource` for *schema*.

    Raises:
        SchemaError: If any method in the subtree is malformed.
    """
    return Resource(name, _build_children(schema, context, path or name))


def build_client(
    document: DiscoveryDocument,
    transport: Transport,
    options: Optional[ClientOptions] = None,
) -> Client:
    """Generate a :class:`Client` for *document*.

    Args:
        document: The discovery document to interpret.
        transport: Executes the requests of every generated method.
        options: Client options; ``options.params`` becomes the default
            parameter map.

    Raises:
        SchemaError: If any method in the document is malformed.  No
            partially built client is returned.
    """
    options = options or ClientOptions()
    context = BuildContext(
        document=document,
        defaults=MappingProxyType(dict(options.params)),
        options=options,
        transport=transport,
    )
    children = _build_children(document, context, document.name)
    client = Client(document, children, context)
    logger.debug(
        "Built client %s %s with %d methods",
        document.name,
        document.version,
        len(client._method_paths()),
    )
    return client
