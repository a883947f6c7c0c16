from dataclasses import dataclass

import pytest

from metaresolver.attributes import Attribute, Mapping, Target
from metaresolver.elements import ATTRIBUTE_KIND, TYPE
from metaresolver.errors import (
    IntrospectionError,
    InvalidAttributeKindError,
    ProjectionError,
)
from metaresolver.resolver import AttributeResolver
from tests.fixture.example_attributes import (
    LOWEST_PRIORITY,
    Alias,
    Beans,
    Depend,
    Named,
    SpareBeans,
)
from tests.utils import CountingIntrospector, create_resolver


@Target((TYPE, ATTRIBUTE_KIND))
@dataclass(frozen=True, slots=True)
class Marker(Attribute):
    value: str = "default"


@Target((TYPE, ATTRIBUTE_KIND))
@Marker("shallow")
@dataclass(frozen=True, slots=True)
class Shallow(Attribute):
    pass


@Target((TYPE, ATTRIBUTE_KIND))
@Marker("deep")
@dataclass(frozen=True, slots=True)
class Inner(Attribute):
    pass


@Target((TYPE, ATTRIBUTE_KIND))
@Inner()
@dataclass(frozen=True, slots=True)
class Deep(Attribute):
    pass


@Shallow()
@Deep()
class ShallowFirst:
    pass


@Deep()
class DeepOnly:
    pass


@Target((TYPE, ATTRIBUTE_KIND))
@dataclass(frozen=True, slots=True)
class Ping(Attribute):
    pass


@Target((TYPE, ATTRIBUTE_KIND))
@dataclass(frozen=True, slots=True)
class Pong(Attribute):
    pass


Ping()(Pong)
Pong()(Ping)


@Ping()
class Cyclic:
    pass


@dataclass(frozen=True, slots=True)
class Untargeted(Attribute):
    pass


@Target((TYPE, ATTRIBUTE_KIND))
@Untargeted()
@dataclass(frozen=True, slots=True)
class Holder(Attribute):
    pass


@Holder()
class Held:
    pass


@Target((TYPE, ATTRIBUTE_KIND))
@Mapping(Alias)
@dataclass(frozen=True, slots=True)
class Outer(Attribute):
    value: str = ""


Alias("outer-default")(Outer)


@Alias("alias-value")
class Aliased:
    pass


@Outer("outer-value")
class OuterAliased:
    pass


@Marker("direct")
@Shallow()
class Direct:
    pass


@SpareBeans("fallback", depend=Depend("repository"))
class FallbackService:
    pass


class Plain:
    pass


def test_resolve_direct(resolver):
    assert resolver.resolve(Direct, Marker) == Marker("direct")
    assert resolver.resolve(Marker, Target) == Target((TYPE, ATTRIBUTE_KIND))


def test_resolve_meta_attribute(resolver):
    assert resolver.resolve(FallbackService, Beans) == Beans(
        "fallback",
        single=True,
        init=True,
        priority=LOWEST_PRIORITY,
        depend=Depend("repository"),
    )


def test_resolve_shallow_first(resolver):
    assert resolver.resolve(ShallowFirst, Marker) == Marker("shallow")
    assert resolver.resolve(DeepOnly, Marker) == Marker("deep")


def test_resolve_projection(resolver):
    assert resolver.resolve(Aliased, Named) == Named("alias-value")
    assert resolver.resolve(Alias, Named) == Named("literal")


def test_resolve_projection_through_levels(resolver):
    assert resolver.resolve(OuterAliased, Alias) == Alias("outer-value")
    # Outer does not project into Named, the value comes from the Alias level.
    assert resolver.resolve(OuterAliased, Named) == Named("outer-default")


def test_resolve_projection_from_cached_meta_attribute(resolver):
    # Warm up the cache of the meta-attribute declaration.
    assert resolver.resolve(Alias, Named) == Named("literal")
    assert resolver.resolve(Aliased, Named) == Named("alias-value")
    assert resolver.resolve(Alias, Named) == Named("literal")


def test_resolve_cycle_terminates(resolver):
    assert resolver.resolve(Cyclic, Marker) is None
    assert resolver.resolve(Cyclic, Pong) == Pong()


def test_resolve_requires_meta_target(resolver):
    assert resolver.resolve(Holder, Untargeted) == Untargeted()
    assert resolver.resolve(Held, Untargeted) is None


def test_resolve_method(resolver):
    class Factory:
        @SpareBeans("product")
        def create(self):
            pass

    assert resolver.resolve(Factory.create, Beans) == Beans(
        "product", init=True, priority=LOWEST_PRIORITY
    )
    assert resolver.resolve(Factory().create, Beans) == Beans(
        "product", init=True, priority=LOWEST_PRIORITY
    )


def test_resolve_invalid_kind(resolver):
    with pytest.raises(InvalidAttributeKindError):
        resolver.resolve(Plain, Plain)


def test_contains(resolver):
    assert resolver.contains(FallbackService, Beans)
    assert resolver.contains(FallbackService, SpareBeans)
    assert not resolver.contains(Plain, Beans)


def test_resolve_is_deterministic(resolver):
    first = resolver.resolve(ShallowFirst, Marker)
    assert resolver.resolve(ShallowFirst, Marker) == first
    resolver.clear_cache()
    assert resolver.resolve(ShallowFirst, Marker) == first


def test_resolve_caches_result(
    resolver: AttributeResolver, introspector: CountingIntrospector
):
    resolver.resolve(FallbackService, Beans)
    resolver.resolve(FallbackService, Beans)
    assert introspector.lookups[(FallbackService, Beans)] == 1


def test_resolve_caches_absent(
    resolver: AttributeResolver, introspector: CountingIntrospector
):
    assert resolver.resolve(Plain, Beans) is None
    assert resolver.resolve(Plain, Beans) is None
    assert not resolver.contains(Plain, Beans)
    assert introspector.lookups[(Plain, Beans)] == 1
    assert resolver.cache.is_absent(Plain, Beans)


def test_clear_cache(
    resolver: AttributeResolver, introspector: CountingIntrospector
):
    resolver.resolve(Plain, Beans)
    resolver.resolve(Direct, Marker)
    resolver.clear_cache()
    assert not resolver.cache.is_absent(Plain, Beans)
    assert resolver.resolve(Direct, Marker) == Marker("direct")
    assert resolver.resolve(Plain, Beans) is None
    assert introspector.lookups[(Direct, Marker)] == 2
    assert introspector.lookups[(Plain, Beans)] == 2


@Marker("a")
class EvictA:
    pass


@Marker("b")
class EvictB:
    pass


@Marker("c")
class EvictC:
    pass


def test_attribute_cache_eviction():
    introspector = CountingIntrospector()
    resolver = create_resolver(introspector, attribute_capacity=2)
    for declaration in (EvictA, EvictB, EvictC):
        resolver.resolve(declaration, Marker)
    resolver.resolve(EvictB, Marker)
    resolver.resolve(EvictC, Marker)
    assert introspector.lookups[(EvictB, Marker)] == 1
    assert introspector.lookups[(EvictC, Marker)] == 1
    assert resolver.resolve(EvictA, Marker) == Marker("a")
    assert introspector.lookups[(EvictA, Marker)] == 2


def test_absent_cache_eviction():
    introspector = CountingIntrospector()
    resolver = create_resolver(introspector, absent_capacity=1)

    class First:
        pass

    class Second:
        pass

    resolver.resolve(First, Depend)
    resolver.resolve(Second, Depend)
    assert not resolver.cache.is_absent(First, Depend)
    assert resolver.cache.is_absent(Second, Depend)


def test_set_cache_capacity(resolver):
    resolver.set_attribute_cache_capacity(3)
    resolver.set_absent_cache_capacity(5)
    assert resolver.cache.attribute_capacity == 3
    assert resolver.cache.absent_capacity == 5
    with pytest.raises(ValueError):
        resolver.set_attribute_cache_capacity(0)


def test_resolve_excluding_meta_attribute_kinds(resolver):
    assert resolver.resolve(ShallowFirst, Marker, excluded=[Shallow]) == Marker(
        "deep"
    )
    assert resolver.resolve(DeepOnly, Marker, excluded={Deep}) is None
    assert resolver.resolve(Direct, Marker, excluded=[Shallow]) == Marker(
        "direct"
    )
    assert not resolver.contains(FallbackService, Beans, excluded=[SpareBeans])


def test_resolve_excluding_does_not_affect_cache(resolver):
    resolver.resolve(ShallowFirst, Marker, excluded=[Shallow])
    resolver.resolve(FallbackService, Beans, excluded=[SpareBeans])
    assert resolver.cache.get(ShallowFirst, Marker) is None
    assert not resolver.cache.is_absent(FallbackService, Beans)
    assert resolver.resolve(ShallowFirst, Marker) == Marker("shallow")
    assert resolver.contains(FallbackService, Beans)


@Target((TYPE, ATTRIBUTE_KIND))
@Mapping(Named, "name")
@Named("literal")
@dataclass(frozen=True, slots=True, repr=False)
class Faulty(Attribute):
    value: str = ""

    def __getattribute__(self, name):
        if name == "value":
            raise RuntimeError("accessor failed")
        return object.__getattribute__(self, name)


@Faulty("value")
class FaultyService:
    pass


@Target((TYPE, ATTRIBUTE_KIND))
@Mapping(Named, "missing")
@Named("literal")
@dataclass(frozen=True, slots=True)
class Misnamed(Attribute):
    value: str = ""


@Misnamed("value")
class MisnamedService:
    pass


def test_resolve_wraps_accessor_failure(resolver):
    with pytest.raises(IntrospectionError) as exc_info:
        resolver.resolve(FaultyService, Named)
    assert exc_info.value.name == "value"
    assert isinstance(exc_info.value.__cause__, RuntimeError)
    assert not resolver.cache.is_absent(FaultyService, Named)


def test_resolve_propagates_projection_failure(resolver):
    with pytest.raises(ProjectionError) as exc_info:
        resolver.resolve(MisnamedService, Named)
    assert exc_info.value.target_kind is Named
    assert not resolver.cache.is_absent(MisnamedService, Named)
    assert resolver.cache.get(MisnamedService, Named) is None
    # Failures are not recorded, the next query fails the same way.
    with pytest.raises(ProjectionError):
        resolver.resolve(MisnamedService, Named)
