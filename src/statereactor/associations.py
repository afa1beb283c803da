"""Association index: which consumers depend on which resources.

A many-to-many map from resources (state setters) to consumers (effects).
Removing a resource also detaches each of its consumers from every other
resource, so a consumer that re-runs starts with a clean slate and has to
re-associate with whatever it reads again.

Both directions are stored, so pruning only visits the resources actually
linked to the removed consumers.
"""

from __future__ import annotations

from typing import Generic, TypeVar

R = TypeVar("R")
C = TypeVar("C")


class AssociationIndex(Generic[R, C]):
    """Bidirectional resource <-> consumer index with cascading prune.

    Invariant: no resource is stored with an empty consumer set, and the
    forward and reverse maps always describe the same relation.
    """

    __slots__ = ("_consumers", "_resources")

    def __init__(self) -> None:
        self._consumers: dict[R, set[C]] = {}
        self._resources: dict[C, set[R]] = {}

    def associate(self, resource: R, consumer: C) -> None:
        """Record that consumer depends on resource. Idempotent."""
        self._consumers.setdefault(resource, set()).add(consumer)
        self._resources.setdefault(consumer, set()).add(resource)

    def remove_associations(self, resource: R) -> set[C] | None:
        """Detach resource and return the consumers it had.

        Every returned consumer is also removed from all other resources;
        resources left without consumers are dropped. Returns None when the
        resource is not tracked, which includes a resource pruned by an
        earlier call.
        """
        consumers = self._consumers.pop(resource, None)
        if consumers is None:
            return None

        for consumer in consumers:
            for other in self._resources.pop(consumer, ()):
                if other == resource:
                    continue
                others = self._consumers[other]
                others.discard(consumer)
                if not others:
                    del self._consumers[other]

        return consumers

    def remove_consumer(self, consumer: C) -> None:
        """Detach consumer from every resource, dropping emptied resources."""
        for resource in self._resources.pop(consumer, ()):
            consumers = self._consumers[resource]
            consumers.discard(consumer)
            if not consumers:
                del self._consumers[resource]

    def remove_all_associations(self) -> None:
        self._consumers.clear()
        self._resources.clear()

    def consumers(self, resource: R) -> frozenset[C]:
        """Snapshot of the consumers of resource (empty if untracked)."""
        return frozenset(self._consumers.get(resource, ()))

    def __contains__(self, resource: object) -> bool:
        return resource in self._consumers

    def __len__(self) -> int:
        return len(self._consumers)

    def __repr__(self) -> str:
        return f"AssociationIndex({len(self._consumers)} resources, {len(self._resources)} consumers)"
