"""Declaration and attribute kind introspection used by the resolver."""

import dataclasses
from typing import Any, Protocol, TypeVar, get_args, get_origin, get_type_hints

from metaresolver.attributes import (
    MAPPING_METADATA,
    Attribute,
    Mapping,
    Mappings,
    Repeatable,
    Target,
    declared_attributes,
    get_declared_attribute,
    is_attribute_kind,
    is_builtin_kind,
)
from metaresolver.elements import ElementType

__all__ = [
    "Introspector",
    "AttributeIntrospector",
]

A = TypeVar("A", bound=Attribute)

REPEATABLE_VALUE_PROPERTY = "value"


class Introspector(Protocol):
    def declared_attributes(self, declaration: Any) -> tuple[Attribute, ...]:
        raise NotImplementedError()

    def get_declared(self, declaration: Any, kind: type[A]) -> A | None:
        raise NotImplementedError()

    def is_attribute_kind(self, declaration: Any) -> bool:
        raise NotImplementedError()

    def is_builtin(self, kind: type[Attribute]) -> bool:
        raise NotImplementedError()

    def targets(self, kind: type[Attribute]) -> tuple[ElementType, ...] | None:
        raise NotImplementedError()

    def repeatable_child(
        self, kind: type[Attribute]
    ) -> type[Attribute] | None:
        raise NotImplementedError()

    def kind_mappings(self, kind: type[Attribute]) -> tuple[Mapping, ...]:
        raise NotImplementedError()

    def property_mappings(
        self, kind: type[Attribute], name: str
    ) -> tuple[Mapping, ...] | None:
        raise NotImplementedError()

    def properties(self, kind: type[Attribute]) -> tuple[str, ...]:
        raise NotImplementedError()


def _tuple_component(type_: Any) -> Any:
    # Only homogeneous tuples, tuple[X, ...]
    if get_origin(type_) is not tuple:
        return None
    args = get_args(type_)
    if len(args) != 2 or args[1] is not Ellipsis:
        return None
    return args[0]


class AttributeIntrospector(Introspector):
    """Introspect attributes attached with Attribute.__call__.

    We are memoizing per kind results since kinds are loaded once
    and never change after their declaration.
    """

    def __init__(self) -> None:
        self._repeatable_children: dict[type, type[Attribute] | None] = {}
        self._properties: dict[type, tuple[str, ...]] = {}

    def declared_attributes(self, declaration: Any) -> tuple[Attribute, ...]:
        return declared_attributes(declaration)

    def get_declared(self, declaration: Any, kind: type[A]) -> A | None:
        return get_declared_attribute(declaration, kind)

    def is_attribute_kind(self, declaration: Any) -> bool:
        return is_attribute_kind(declaration)

    def is_builtin(self, kind: type[Attribute]) -> bool:
        return is_builtin_kind(kind)

    def targets(self, kind: type[Attribute]) -> tuple[ElementType, ...] | None:
        """The declared Target element types, None if the kind has no Target."""
        target = get_declared_attribute(kind, Target)
        if target is None:
            return None
        return target.value

    def _resolve_repeatable_child(
        self, kind: type[Attribute]
    ) -> type[Attribute] | None:
        if not is_attribute_kind(kind):
            return None
        if REPEATABLE_VALUE_PROPERTY not in self.properties(kind):
            return None
        type_hints = get_type_hints(kind)
        component = _tuple_component(
            type_hints.get(REPEATABLE_VALUE_PROPERTY)
        )
        if not is_attribute_kind(component):
            return None
        repeatable = get_declared_attribute(component, Repeatable)
        if repeatable is None or repeatable.value is not kind:
            return None
        return component

    def repeatable_child(
        self, kind: type[Attribute]
    ) -> type[Attribute] | None:
        """The repeatable kind this kind is the container of, if any."""
        if kind in self._repeatable_children:
            return self._repeatable_children[kind]
        self._repeatable_children[kind] = child = (
            self._resolve_repeatable_child(kind)
        )
        return child

    def kind_mappings(self, kind: type[Attribute]) -> tuple[Mapping, ...]:
        """Kind level projection rules, in declaration order."""
        mapping = get_declared_attribute(kind, Mapping)
        if mapping is not None:
            return (mapping,)
        mappings = get_declared_attribute(kind, Mappings)
        if mappings is not None:
            return tuple(mappings.value)
        return ()

    def property_mappings(
        self, kind: type[Attribute], name: str
    ) -> tuple[Mapping, ...] | None:
        """Property level projection rules, None if the property declares none."""
        for field in dataclasses.fields(kind):
            if field.name == name:
                return field.metadata.get(MAPPING_METADATA, None)
        return None

    def properties(self, kind: type[Attribute]) -> tuple[str, ...]:
        if kind in self._properties:
            return self._properties[kind]
        self._properties[kind] = names = tuple(
            field.name for field in dataclasses.fields(kind) if field.init
        )
        return names
