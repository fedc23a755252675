"""
Data models for the pipeline module.

Uses dataclasses for registrations, per-call state and results.
"""
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Type


@dataclass(frozen=True)
class Middleware:
    """
    A transform registered on a pipeline.

    Attributes:
        identity: Transform identity
        transformer: Transform class, instantiated once per transfer
        options: Registration-time options passed to every instance
    """
    identity: str
    transformer: Type
    options: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        # Registrations are immutable once added
        object.__setattr__(self, 'options', MappingProxyType(dict(self.options or {})))

    def instantiate(self):
        """Create a fresh transform instance with its own copy of the options."""
        return self.transformer(dict(self.options))


@dataclass(frozen=True)
class TransferResult:
    """
    Result of a successful upload or download.

    Attributes:
        location: Location of the file on the backend
        adapter: Identity of the adapter used
        transforms: Identities of the applied transforms, in application order
        results: Each applied transform's results, by identity

    Example:
        >>> result = await pipeline.upload(source, {'name': 'hello.txt'})
        >>> result.location
        'hello.txt'
        >>> result['checksum']
        {'algorithm': 'md5', 'value': '5eb63bbbe01eeed093cb22bb8f5acdc3'}
    """
    location: str
    adapter: str
    transforms: List[str] = field(default_factory=list)
    results: Dict[str, Any] = field(default_factory=dict)

    def __getitem__(self, identity: str) -> Any:
        return self.results[identity]

    def __contains__(self, identity: object) -> bool:
        return identity in self.results

    def get(self, identity: str, default: Any = None) -> Any:
        return self.results.get(identity, default)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a flat dict with transform results namespaced by identity."""
        result: Dict[str, Any] = dict(self.results)
        result.update({
            'location': self.location,
            'adapter': self.adapter,
            'transforms': list(self.transforms),
        })
        return result


@dataclass
class OperationContext:
    """
    State of one upload or download call.

    Created at call entry and discarded once the call settles.
    """
    operation: str
    location: str
    adapter_identity: str
    options: Dict[str, Any] = field(default_factory=dict)
    transformers: List[Any] = field(default_factory=list)
    results: Dict[str, Any] = field(default_factory=dict)

    @property
    def adapter_options(self) -> Dict[str, Any]:
        """Adapter-specific options of this call."""
        return self.options_for(self.adapter_identity)

    def options_for(self, identity: str) -> Dict[str, Any]:
        """Options namespaced under an identity, empty if none were given."""
        value: Optional[Mapping[str, Any]] = self.options.get(identity)
        return dict(value) if value else {}

    def collect(self) -> TransferResult:
        """
        Read every transformer's results and build the transfer result.

        Must only be called once the terminal stage has completed.
        """
        for transformer in self.transformers:
            self.results[transformer.identity] = transformer.results()

        return TransferResult(
            location=self.location,
            adapter=self.adapter_identity,
            transforms=[t.identity for t in self.transformers],
            results=dict(self.results)
        )
