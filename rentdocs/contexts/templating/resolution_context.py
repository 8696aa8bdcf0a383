"""
Layered placeholder context.

A ResolutionContext is an ordered stack of named layers, each mapping
placeholder names to replacement strings. Layers are applied in stack order and
a later layer overrides an earlier one only for the keys it defines itself.

Example:
    >>> context = ResolutionContext.from_layers([
    ...     ("reservation", {"tenantName": "Ada", "deposit": "500.00"}),
    ...     ("organization", {"organizationName": "Harbor Rentals"}),
    ... ])
    >>> context.lookup("tenantName")
    'Ada'
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple


@dataclass(frozen=True)
class ContextLayer:
    """One named source of placeholder values."""

    name: str
    values: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self):
        for key, value in self.values.items():
            if not isinstance(value, str):
                raise ValueError(
                    f"Layer '{self.name}' value for '{key}' must be a string, "
                    f"got {type(value).__name__}"
                )
        # Freeze a private copy so callers cannot mutate the layer later
        object.__setattr__(self, "values", MappingProxyType(dict(self.values)))

    def defines(self, key: str) -> bool:
        return key in self.values


@dataclass(frozen=True)
class ResolutionContext:
    """Ordered, immutable stack of context layers."""

    layers: Tuple[ContextLayer, ...] = ()

    @classmethod
    def from_layers(cls, pairs: Iterable[Tuple[str, Mapping[str, str]]]) -> "ResolutionContext":
        """Build a context from (layer name, key->value mapping) pairs, in precedence order."""
        return cls(tuple(ContextLayer(name, values) for name, values in pairs))

    @classmethod
    def from_mapping(cls, values: Mapping[str, str], name: str = "values") -> "ResolutionContext":
        """Single-layer context."""
        return cls((ContextLayer(name, values),))

    def with_layer(self, name: str, values: Mapping[str, str]) -> "ResolutionContext":
        """Return a new context with one more layer on top."""
        return ResolutionContext(self.layers + (ContextLayer(name, values),))

    @property
    def layer_names(self) -> List[str]:
        return [layer.name for layer in self.layers]

    def get_layer(self, name: str) -> Optional[ContextLayer]:
        for layer in self.layers:
            if layer.name == name:
                return layer
        return None

    def reordered(self, names: Sequence[str]) -> "ResolutionContext":
        """
        Return a context with layers in the given order.

        Raises:
            ValueError: If `names` is not a permutation of the current layer names
        """
        if sorted(names) != sorted(self.layer_names):
            raise ValueError(
                f"Layer order {list(names)} does not match layers {self.layer_names}"
            )
        by_name = {layer.name: layer for layer in self.layers}
        return ResolutionContext(tuple(by_name[name] for name in names))

    def merged(self) -> Dict[str, str]:
        """Flatten the stack; the last layer defining a key wins."""
        flat: Dict[str, str] = {}
        for layer in self.layers:
            flat.update(layer.values)
        return flat

    def lookup(self, key: str) -> Optional[str]:
        """Value for `key` from the topmost layer defining it, or None."""
        for layer in reversed(self.layers):
            if key in layer.values:
                return layer.values[key]
        return None

    def source_of(self, key: str) -> Optional[str]:
        """Name of the layer that supplies `key`."""
        for layer in reversed(self.layers):
            if key in layer.values:
                return layer.name
        return None

    def __contains__(self, key: str) -> bool:
        return self.lookup(key) is not None
