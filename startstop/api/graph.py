"""Public object-graph model consumed by the lifecycle runtime."""

from __future__ import annotations

from dataclasses import dataclass, field

from startstop.api.capabilities import Capability, capabilities_of


@dataclass(eq=False, slots=True)
class Node:
    """One application object plus its outgoing dependency edges.

    Nodes compare and hash by identity. Capabilities are resolved once, when
    the graph builder creates the node.
    """

    value: object
    name: str | None = None
    dependencies: list[Dependence] = field(default_factory=list, repr=False)
    capabilities: frozenset[Capability] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.capabilities = capabilities_of(self.value)

    @property
    def eligible(self) -> bool:
        """Return whether the value takes part in start/stop sequencing."""
        return bool(self.capabilities)

    def provides(self, capability: Capability) -> bool:
        return capability in self.capabilities

    def depends_on(self, node: Node, field: str) -> Dependence:
        """Record that ``field`` of this node's value references ``node``."""
        dependence = Dependence(field=field, node=node)
        self.dependencies.append(dependence)
        return dependence

    def __str__(self) -> str:
        if self.name:
            return self.name
        return f"*{type(self.value).__module__}.{type(self.value).__qualname__}"


@dataclass(frozen=True, slots=True)
class Dependence:
    """Directed edge to ``node``, labelled with the referencing field name."""

    field: str
    node: Node
