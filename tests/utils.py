from collections import Counter
from typing import Any, TypeVar

from metaresolver.attributes import Attribute
from metaresolver.cache import AttributeCache
from metaresolver.introspection import AttributeIntrospector
from metaresolver.resolver import AttributeResolver

A = TypeVar("A", bound=Attribute)


class CountingIntrospector(AttributeIntrospector):
    """Count the direct lookups made by a resolver, per declaration and kind."""

    def __init__(self) -> None:
        super().__init__()
        self.lookups: Counter[tuple[Any, type]] = Counter()

    def get_declared(self, declaration: Any, kind: type[A]) -> A | None:
        self.lookups[(declaration, kind)] += 1
        return super().get_declared(declaration, kind)


def create_resolver(
    introspector: AttributeIntrospector | None = None,
    attribute_capacity: int = 128,
    absent_capacity: int = 128,
) -> AttributeResolver:
    return AttributeResolver(
        introspector=introspector,
        cache=AttributeCache(
            attribute_capacity=attribute_capacity,
            absent_capacity=absent_capacity,
        ),
    )
