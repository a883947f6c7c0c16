from pytest import fixture

from metaresolver.lookup import reset_default_resolver
from metaresolver.resolver import AttributeResolver
from metaresolver.settings import ResolverSettings
from tests.utils import CountingIntrospector, create_resolver


@fixture(scope="function")
def introspector() -> CountingIntrospector:
    return CountingIntrospector()


@fixture(scope="function")
def resolver(introspector) -> AttributeResolver:
    return create_resolver(introspector)


@fixture(scope="function")
def isolated_lookup():
    reset_default_resolver(ResolverSettings())
    yield
    reset_default_resolver(ResolverSettings())
