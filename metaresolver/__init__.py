"""Metaresolver, resolve attributes through meta-attributes and repeatable attributes."""

__version__ = "0.1.0"


from .attributes import (
    Attribute,
    Mapping,
    Mappings,
    MixRepeatable,
    Repeatable,
    Target,
    mapped,
)
from .elements import ATTRIBUTE_KIND, METHOD, TYPE
from .instantiator import default_attribute, get_attribute_property
from .lookup import (
    clear_cache,
    contains_attribute,
    get_attribute,
    set_absent_cache_capacity,
    set_attribute_cache_capacity,
)
from .resolver import AttributeResolver
from .settings import ResolverSettings

__all__ = [
    "Attribute",
    "Target",
    "Repeatable",
    "Mapping",
    "Mappings",
    "MixRepeatable",
    "mapped",
    "TYPE",
    "METHOD",
    "ATTRIBUTE_KIND",
    "AttributeResolver",
    "ResolverSettings",
    "get_attribute",
    "contains_attribute",
    "clear_cache",
    "set_attribute_cache_capacity",
    "set_absent_cache_capacity",
    "default_attribute",
    "get_attribute_property",
]
