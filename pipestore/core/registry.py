"""
Component registries.

Explicit identity -> class maps for adapters and transforms, populated by
the embedding application (or with the built-ins). Nothing is ever looked
up by importing modules at runtime.
"""
import inspect
from typing import Any, Dict, Iterator, List, Optional, Type

from .exceptions import (
    AdapterNotFoundError,
    DeclarationError,
    InvalidAdapterError,
    InvalidArgumentError,
    NotRegisteredError,
)
from .logging import get_logger

logger = get_logger('pipestore.registry')

ADAPTER_METHODS = ('create_write_stream', 'create_read_stream', 'remove')
TRANSFORM_METHODS = ('transform', 'results')


def implements(component: Any, methods) -> bool:
    """Check that a class or instance provides every named method."""
    return all(callable(getattr(component, name, None)) for name in methods)


def declared_identity(component: Any, kind: str = 'Component') -> str:
    """
    Return the identity declared by a class or instance.

    Raises:
        DeclarationError: If no string identity is declared
    """
    identity = getattr(component, 'identity', None)
    if not isinstance(identity, str) or not identity:
        name = getattr(component, '__name__', type(component).__name__)
        raise DeclarationError(f"{kind} {name} does not declare its identity", component)
    return identity


class ComponentRegistry:
    """
    Registry of classes by identity.

    Registering an identity twice replaces the earlier class.
    """

    kind = 'Component'
    methods: tuple = ()

    def __init__(self, components: Optional[List[Type]] = None):
        self._components: Dict[str, Type] = {}
        for component in components or ():
            self.register(component)

    def _not_found(self, identity: str) -> LookupError:
        return NotRegisteredError(f"{self.kind} {identity} is not registered", identity)

    def validate(self, component: Any) -> str:
        """
        Validate a class for registration.

        Returns:
            The class identity
        """
        if not inspect.isclass(component):
            raise InvalidArgumentError(f"{self.kind} must be a class, got: {component!r}")
        return declared_identity(component, self.kind)

    def register(self, component: Type) -> 'ComponentRegistry':
        """Register a class under its identity."""
        identity = self.validate(component)
        previous = self._components.get(identity)
        if previous is not None and previous is not component:
            logger.warning(
                f"{self.kind} {identity} re-registered: {previous.__name__} replaced by {component.__name__}"
            )
        self._components[identity] = component
        return self

    def get(self, identity: str) -> Type:
        """
        Look up a class by identity.

        Raises:
            LookupError: If nothing is registered under the identity
        """
        try:
            return self._components[identity]
        except (KeyError, TypeError):
            raise self._not_found(identity) from None

    def identities(self) -> List[str]:
        return list(self._components)

    def copy(self) -> 'ComponentRegistry':
        clone = type(self)()
        clone._components = dict(self._components)
        return clone

    def __contains__(self, identity: object) -> bool:
        return identity in self._components

    def __iter__(self) -> Iterator[str]:
        return iter(self._components)

    def __len__(self) -> int:
        return len(self._components)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.identities()}>"


class AdapterRegistry(ComponentRegistry):
    """Registry of storage adapter classes."""

    kind = 'Adapter'
    methods = ADAPTER_METHODS

    def _not_found(self, identity: str) -> LookupError:
        return AdapterNotFoundError(
            f"Cannot find adapter {identity!r}, registered adapters: {self.identities()}",
            identity
        )

    def validate(self, component: Any) -> str:
        if not inspect.isclass(component) or not implements(component, self.methods):
            raise InvalidAdapterError(f"You must provide a valid adapter, got: {component!r}")
        return declared_identity(component, self.kind)


class TransformRegistry(ComponentRegistry):
    """Registry of transform classes."""

    kind = 'Transform'
    methods = TRANSFORM_METHODS

    def validate(self, component: Any) -> str:
        if not inspect.isclass(component):
            raise InvalidArgumentError(f"Transformer must be a class, got: {component!r}")
        if not implements(component, self.methods):
            raise InvalidArgumentError(
                f"Transformer {component.__name__} must implement {', '.join(self.methods)}"
            )
        return declared_identity(component, 'Transformer')
