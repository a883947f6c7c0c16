"""This module contains implementation for AttributeResolver.

Attributes are resolved from a declaration even if they are only reachable
through meta-attributes, the attributes attached to the declaration of
another attribute kind.

Example:
    from dataclasses import dataclass

    from metaresolver.attributes import Attribute, Mapping, Target
    from metaresolver.resolver import AttributeResolver

    @Target(("type", "attribute_kind"))
    @dataclass(frozen=True, slots=True)
    class Component(Attribute):
        value: str = ""

    @Target(("type",))
    @Component("service")
    @Mapping(Component)
    @dataclass(frozen=True, slots=True)
    class Service(Attribute):
        value: str = ""

    @Service("users")
    class UserService:
        pass

    resolver = AttributeResolver()
    print(resolver.resolve(UserService, Component))
    #> Component(value='users')
"""

import logging
from collections.abc import Iterable
from typing import Any, TypeVar

from metaresolver.attributes import Attribute, MixRepeatable
from metaresolver.cache import AttributeCache
from metaresolver.elements import ATTRIBUTE_KIND, TYPE
from metaresolver.errors import InvalidAttributeKindError
from metaresolver.instantiator import AttributeInstantiator
from metaresolver.introspection import (
    REPEATABLE_VALUE_PROPERTY,
    AttributeIntrospector,
    Introspector,
)
from metaresolver.projection import Projector
from metaresolver.settings import ResolverSettings

__all__ = [
    "AttributeResolver",
]

logger = logging.getLogger(__name__)

A = TypeVar("A", bound=Attribute)

_META_TARGETS = (TYPE, ATTRIBUTE_KIND)


class AttributeResolver:
    """The main responsibility of this class is to find attributes of a declaration,
    walking through meta-attributes and merging repeatable attributes.

    Results are cached, absent results included. The cache is only valid as
    long as the attributes of the declarations do not change.
    """

    def __init__(
        self,
        introspector: Introspector | None = None,
        instantiator: AttributeInstantiator | None = None,
        cache: AttributeCache | None = None,
    ) -> None:
        self._introspector = introspector or AttributeIntrospector()
        self._instantiator = instantiator or AttributeInstantiator(
            self._introspector
        )
        self._projector = Projector(self._introspector, self._instantiator)
        self._cache = cache or AttributeCache()

    @classmethod
    def from_settings(
        cls,
        settings: ResolverSettings | None = None,
        *,
        introspector: Introspector | None = None,
    ) -> "AttributeResolver":
        """Create a resolver configured by ResolverSettings.

        Args:
            settings (ResolverSettings | None, optional): The settings. Defaults to settings loaded from the environment.
            introspector (Introspector | None, optional): Override the introspector.

        Returns:
            AttributeResolver: A new resolver with empty caches.
        """
        settings = settings or ResolverSettings()
        return cls(
            introspector=introspector,
            cache=AttributeCache(
                attribute_capacity=settings.attribute_cache_capacity,
                absent_capacity=settings.absent_cache_capacity,
            ),
        )

    @property
    def cache(self) -> AttributeCache:
        return self._cache

    def resolve(
        self,
        declaration: Any,
        kind: type[A],
        excluded: Iterable[type[Attribute]] = (),
    ) -> A | None:
        """Find an attribute of a declaration.

        If the attribute is not directly attached, it is searched depth first
        through the meta-attributes of the declaration, in declaration order.

        Args:
            declaration (Any): A class, a function or an attribute kind.
            kind (type[A]): The attribute kind to find.
            excluded (Iterable[type[Attribute]], optional): Meta-attribute kinds not to search through.

        Returns:
            A | None: The attribute; None if it cannot be found.

        Raises:
            InvalidAttributeKindError: If kind is not an attribute kind.
            ProjectionError: If a projection rule on the path is invalid.
            IntrospectionError: If a property on the path cannot be read.
        """
        if not self._introspector.is_attribute_kind(kind):
            raise InvalidAttributeKindError(kind)
        excluded = frozenset(excluded)
        if excluded:
            # Not cached at this level, the result depends on the excluded kinds.
            return self._search(declaration, kind, excluded)
        return self._resolve(None, declaration, kind, excluded)

    def contains(
        self,
        declaration: Any,
        kind: type[Attribute],
        excluded: Iterable[type[Attribute]] = (),
    ) -> bool:
        """Check if an attribute can be resolved from a declaration."""
        return self.resolve(declaration, kind, excluded) is not None

    def clear_cache(self) -> None:
        """Clear all cached results, absent results included."""
        self._cache.clear()

    def set_attribute_cache_capacity(self, capacity: int) -> None:
        self._cache.set_attribute_capacity(capacity)

    def set_absent_cache_capacity(self, capacity: int) -> None:
        self._cache.set_absent_capacity(capacity)

    def merge_repeats(
        self,
        declaration: Any,
        container_kind: type[A],
        excluded: Iterable[type[Attribute]] = (),
    ) -> A | None:
        """Merge all repeatable children reachable from a declaration into one container.

        Args:
            declaration (Any): The declaration to search.
            container_kind (type[A]): The container kind of a repeatable kind.
            excluded (Iterable[type[Attribute]], optional): Meta-attribute kinds not to search through.

        Returns:
            A | None: A new container; None if no child was found or container_kind is not a container.
        """
        child_kind = self._introspector.repeatable_child(container_kind)
        if child_kind is None:
            return None
        children = self._collect_repeats(
            declaration, child_kind, frozenset(excluded)
        )
        if not children:
            return None
        logger.debug(
            "Merged %d %s into %s for %r",
            len(children),
            child_kind.__qualname__,
            container_kind.__qualname__,
            declaration,
        )
        return self._instantiator.instantiate(
            container_kind, {REPEATABLE_VALUE_PROPERTY: children}
        )

    def _is_meta_attribute(self, declaration: Any, origin: Attribute | None):
        return origin is not None and self._introspector.is_attribute_kind(
            declaration
        )

    def _is_meta_applicable(self, kind: type[Attribute]) -> bool:
        targets = self._introspector.targets(kind)
        if targets is None:
            return False
        return any(target in _META_TARGETS for target in targets)

    def _is_mixed(self, kind: type[Attribute]) -> bool:
        if kind is MixRepeatable:
            return False
        if self._introspector.repeatable_child(kind) is None:
            return False
        return self.contains(kind, MixRepeatable)

    def _complete(
        self, origin: Attribute | None, declaration: Any, attribute: A
    ) -> A:
        # Attributes found on the declaration of a meta-attribute take the
        # values of the meta-attribute and depend on it, they are not cached.
        if self._is_meta_attribute(declaration, origin):
            return self._projector.project(origin, type(attribute), attribute)  # type: ignore[arg-type]
        self._cache.put(declaration, attribute)
        return attribute

    def _collect_repeats(
        self,
        declaration: Any,
        child_kind: type[Attribute],
        excluded: frozenset[type[Attribute]] = frozenset(),
    ) -> tuple[Attribute, ...]:
        children = []
        direct = self._introspector.get_declared(declaration, child_kind)
        if direct is not None:
            children.append(direct)
        attributes = tuple(
            attribute
            for attribute in self._introspector.declared_attributes(declaration)
            if type(attribute) not in excluded
            and not self._introspector.is_builtin(type(attribute))
        )
        excluded = excluded.union(type(attribute) for attribute in attributes)
        for attribute in attributes:
            child = self._resolve(attribute, type(attribute), child_kind, excluded)
            if child is not None:
                children.append(child)
        return tuple(children)

    def _mix_repeats(
        self,
        declaration: Any,
        container: A,
        excluded: frozenset[type[Attribute]] = frozenset(),
    ) -> A:
        kind = type(container)
        child_kind = self._introspector.repeatable_child(kind)
        if child_kind is None:
            return container
        discovered = self._collect_repeats(declaration, child_kind, excluded)
        if not discovered:
            return container
        children = (*getattr(container, REPEATABLE_VALUE_PROPERTY), *discovered)
        return self._instantiator.instantiate(
            kind, {REPEATABLE_VALUE_PROPERTY: children}, container
        )

    def _resolve_from_attributes(
        self,
        declaration: Any,
        kind: type[A],
        excluded: frozenset[type[Attribute]],
    ) -> A | None:
        attributes = tuple(
            attribute
            for attribute in self._introspector.declared_attributes(declaration)
            if type(attribute) not in excluded
            and not self._introspector.is_builtin(type(attribute))
        )
        if not attributes:
            return None
        # Siblings are excluded from the search below this level.
        excluded = excluded.union(type(attribute) for attribute in attributes)
        for attribute in attributes:
            found = self._resolve(attribute, type(attribute), kind, excluded)
            if found is not None:
                return found
        return None

    def _search(
        self,
        declaration: Any,
        kind: type[A],
        excluded: frozenset[type[Attribute]],
    ) -> A | None:
        attribute = self._introspector.get_declared(declaration, kind)
        if attribute is not None:
            if self._is_mixed(kind):
                attribute = self._mix_repeats(declaration, attribute, excluded)
            return attribute
        if self._introspector.repeatable_child(kind) is not None:
            return self.merge_repeats(declaration, kind, excluded)
        if self._is_meta_applicable(kind):
            return self._resolve_from_attributes(declaration, kind, excluded)
        return None

    def _resolve(
        self,
        origin: Attribute | None,
        declaration: Any,
        kind: type[A],
        excluded: frozenset[type[Attribute]],
    ) -> A | None:
        cached = self._cache.get(declaration, kind)
        if cached is not None:
            if self._is_meta_attribute(declaration, origin):
                return self._projector.project(origin, kind, cached)  # type: ignore[arg-type]
            return cached
        if self._cache.is_absent(declaration, kind):
            return None

        attribute = self._search(declaration, kind, excluded)
        if attribute is not None:
            return self._complete(origin, declaration, attribute)

        logger.debug(
            "No %s reachable from %r", kind.__qualname__, declaration
        )
        self._cache.mark_absent(declaration, kind)
        return None
