"""Ancestor resolution: breadth-first closure over parent relations."""

from __future__ import annotations

from collections import deque
from collections.abc import Iterable
from typing import Any

from hierarchia.config import HierarchiaConfig
from hierarchia.errors import EntityHydrationError, EntityNotFoundError, TraversalLimitError
from hierarchia.observability import get_logger
from hierarchia.store import EntityStore
from hierarchia.types import Entity, EntityRef

logger = get_logger(__name__)


def _parent_ref(value: Any) -> EntityRef | None:
    if isinstance(value, EntityRef):
        return value
    if isinstance(value, Entity):
        return value.ref()
    return None


class AncestorResolver:
    """Walks every configured relation property at once from a starting entity.

    All relations are followed in the same walk, so an ancestor reachable
    through any mix of them is found, and found once. Entities reached by
    several paths are expanded once; cycles terminate on the visited set.
    """

    def __init__(self, store: EntityStore, config: HierarchiaConfig | None = None) -> None:
        self.store = store
        self.config = config or HierarchiaConfig()

    def find_ancestors(self, start: Entity, relation_properties: Iterable[str]) -> set[str]:
        """Identifiers of every ancestor of ``start`` (never ``start`` itself)."""
        return set(self.iter_ancestors(start, relation_properties))

    def iter_ancestors(self, start: Entity, relation_properties: Iterable[str]) -> list[str]:
        """Like find_ancestors, but in breadth-first discovery order."""
        properties = list(dict.fromkeys(relation_properties))
        start_ref = start.ref()
        max_visited = self.config.max_visited
        max_depth = self.config.max_depth

        visited: set[EntityRef] = set()
        result: dict[str, None] = {}
        depth_cut = False
        queue: deque[tuple[EntityRef, int]] = deque([(start_ref, 0)])

        while queue:
            ref, depth = queue.popleft()
            if ref in visited:
                continue
            if len(visited) >= max_visited:
                self._limit_reached(start_ref, len(visited), len(result), "max_visited")
                break
            visited.add(ref)

            entity = start if ref == start_ref else self._resolve(ref)
            if entity is None:
                continue

            parents = [
                parent
                for name in properties
                for parent in map(_parent_ref, self.store.get_property(entity, name))
                if parent is not None
            ]
            if max_depth is not None and depth >= max_depth:
                # Entities max_depth hops up are reported but not expanded.
                if not depth_cut and any(p not in visited for p in parents):
                    depth_cut = True
                    self._limit_reached(start_ref, len(visited), len(result), "max_depth")
                continue

            for parent in parents:
                if parent != start_ref:
                    result.setdefault(parent.target_id, None)
                queue.append((parent, depth + 1))

        return list(result)

    def _resolve(self, ref: EntityRef) -> Entity | None:
        try:
            entity = self.store.resolve_entity(ref.entity_type_id, ref.target_id)
        except EntityNotFoundError:
            entity = None
        except EntityHydrationError as e:
            logger.warning(
                "ancestor_unresolvable",
                entity_type=ref.entity_type_id,
                entity_id=ref.target_id,
                error=str(e),
            )
            return None
        if entity is None:
            logger.debug(
                "ancestor_unresolvable",
                entity_type=ref.entity_type_id,
                entity_id=ref.target_id,
            )
        return entity

    def _limit_reached(self, start_ref: EntityRef, visited: int, found: int, reason: str) -> None:
        limit = self.config.max_depth if reason == "max_depth" else self.config.max_visited
        if self.config.on_limit == "raise":
            raise TraversalLimitError(str(start_ref), visited, limit, reason)
        logger.warning(
            "ancestor_walk_truncated",
            start=str(start_ref),
            reason=reason,
            limit=limit,
            visited=visited,
            ancestors_found=found,
        )


def find_ancestors(
    entity: Entity,
    relation_properties: Iterable[str],
    store: EntityStore,
    config: HierarchiaConfig | None = None,
) -> set[str]:
    """Convenience wrapper around AncestorResolver.find_ancestors."""
    return AncestorResolver(store, config).find_ancestors(entity, relation_properties)
