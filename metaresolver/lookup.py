"""Process wide attribute lookup.

The functions of this module share a single AttributeResolver created on
first use from ResolverSettings.

Example:
    from metaresolver import contains_attribute, get_attribute

    beans = get_attribute(UserService, Beans)
    if contains_attribute(UserService, Depend):
        ...
"""

import threading
from collections.abc import Iterable
from typing import Any, TypeVar

from metaresolver.attributes import Attribute
from metaresolver.resolver import AttributeResolver
from metaresolver.settings import ResolverSettings

__all__ = (
    "default_resolver",
    "reset_default_resolver",
    "get_attribute",
    "contains_attribute",
    "clear_cache",
    "set_attribute_cache_capacity",
    "set_absent_cache_capacity",
)

A = TypeVar("A", bound=Attribute)

_resolver: AttributeResolver | None = None
_resolver_lock = threading.Lock()


def default_resolver() -> AttributeResolver:
    """The process wide resolver."""
    global _resolver
    if _resolver is None:
        with _resolver_lock:
            if _resolver is None:
                _resolver = AttributeResolver.from_settings()
    return _resolver


def reset_default_resolver(settings: ResolverSettings | None = None) -> None:
    """Replace the process wide resolver with a new one with empty caches.

    Args:
        settings (ResolverSettings | None, optional): The settings of the new resolver. Defaults to settings loaded from the environment.
    """
    global _resolver
    with _resolver_lock:
        _resolver = AttributeResolver.from_settings(settings)


def get_attribute(
    declaration: Any,
    kind: type[A],
    excluded: Iterable[type[Attribute]] = (),
) -> A | None:
    """Find an attribute of a declaration, directly attached or through meta-attributes.

    Args:
        declaration (Any): A class, a function or an attribute kind.
        kind (type[A]): The attribute kind to find.
        excluded (Iterable[type[Attribute]], optional): Meta-attribute kinds not to search through.

    Returns:
        A | None: The attribute; None if it cannot be found.
    """
    return default_resolver().resolve(declaration, kind, excluded)


def contains_attribute(
    declaration: Any,
    kind: type[Attribute],
    excluded: Iterable[type[Attribute]] = (),
) -> bool:
    """Check if an attribute can be found from a declaration."""
    return default_resolver().contains(declaration, kind, excluded)


def clear_cache() -> None:
    default_resolver().clear_cache()


def set_attribute_cache_capacity(capacity: int) -> None:
    default_resolver().set_attribute_cache_capacity(capacity)


def set_absent_cache_capacity(capacity: int) -> None:
    default_resolver().set_absent_cache_capacity(capacity)
