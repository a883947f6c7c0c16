"""Implementation of attribute declaration.

An attribute kind is a frozen dataclass inheriting from Attribute. Instances
of an attribute kind are attached to a declaration by using them as a
decorator. Attribute kinds are declarations themselves, so they can be
annotated by other attributes (meta-attributes).

Example:
    from dataclasses import dataclass

    from metaresolver.attributes import Attribute, Target

    @Target(("type", "attribute_kind"))
    @dataclass(frozen=True, slots=True)
    class Component(Attribute):
        value: str = ""

    @Component("service")
    class Service:
        pass
"""

import dataclasses
import inspect
from dataclasses import dataclass
from typing import Any, TypeVar

from metaresolver.elements import ATTRIBUTE_KIND, METHOD, TYPE, ElementType
from metaresolver.errors import (
    DuplicateAttributeError,
    InvalidAttributeKindError,
    InvalidAttributeTargetError,
)

__all__ = (
    "Attribute",
    "Target",
    "Repeatable",
    "Mapping",
    "Mappings",
    "MixRepeatable",
    "mapped",
    "attach",
    "declared_attributes",
    "get_declared_attribute",
    "element_type",
    "is_attribute_kind",
    "is_builtin_kind",
)

ATTRIBUTES_ATTR = "__attributes__"
MAPPING_METADATA = "metaresolver.mapping"

D = TypeVar("D")


class Attribute:
    """Base class for all attribute kinds.

    Subclasses must be dataclasses. Calling an instance with a declaration
    attaches the instance to the declaration.
    """

    __slots__ = ()

    def __call__(self, declaration: D) -> D:
        return attach(self, declaration)


def is_attribute_kind(value: Any) -> bool:
    """Check if a value is an attribute kind.

    Args:
        value (Any): Any value.

    Returns:
        bool: True if the value is a dataclass subclass of Attribute; otherwise False.
    """
    return (
        isinstance(value, type)
        and value is not Attribute
        and issubclass(value, Attribute)
        and dataclasses.is_dataclass(value)
    )


def unwrap_declaration(declaration: Any) -> Any:
    if isinstance(declaration, (staticmethod, classmethod)):
        return declaration.__func__
    if inspect.ismethod(declaration):
        return declaration.__func__
    return declaration


def element_type(declaration: Any) -> ElementType | None:
    """Classify a declaration.

    Args:
        declaration (Any): A class, a function or an attribute kind.

    Returns:
        ElementType | None: The element type; None if the value cannot carry attributes.
    """
    declaration = unwrap_declaration(declaration)
    if isinstance(declaration, type):
        if is_attribute_kind(declaration):
            return ATTRIBUTE_KIND
        return TYPE
    if inspect.isfunction(declaration):
        return METHOD
    return None


def declared_attributes(declaration: Any) -> tuple[Attribute, ...]:
    """All attributes directly attached to a declaration, in declaration order."""
    declaration = unwrap_declaration(declaration)
    if isinstance(declaration, type):
        # Attributes of a base class are not attributes of its subclasses.
        return vars(declaration).get(ATTRIBUTES_ATTR, ())
    return getattr(declaration, ATTRIBUTES_ATTR, ())


A = TypeVar("A", bound=Attribute)


def get_declared_attribute(declaration: Any, kind: type[A]) -> A | None:
    """Get the attribute of exactly this kind directly attached to a declaration."""
    for attribute in declared_attributes(declaration):
        if type(attribute) is kind:
            return attribute
    return None


def _index_of(attributes: list[Attribute], kind: type) -> int | None:
    for i, attribute in enumerate(attributes):
        if type(attribute) is kind:
            return i
    return None


def _is_applicable(kind: type[Attribute], element: ElementType) -> bool:
    target = get_declared_attribute(kind, Target)
    if target is None:
        return True
    if element in target.value:
        return True
    # Attribute kinds are types too.
    return element == ATTRIBUTE_KIND and TYPE in target.value


def attach(attribute: Attribute, declaration: D) -> D:
    """Attach an attribute to a declaration.

    Attaching a second instance of a repeatable kind wraps both instances into
    its container kind.

    Args:
        attribute (Attribute): The attribute to attach.
        declaration (D): The class, function or attribute kind to attach to.

    Returns:
        D: The declaration.

    Raises:
        InvalidAttributeKindError: If the attribute is not an instance of an attribute kind.
        InvalidAttributeTargetError: If the attribute kind does not target this declaration.
        DuplicateAttributeError: If a non repeatable attribute is already attached.
    """
    kind = type(attribute)
    if not is_attribute_kind(kind):
        raise InvalidAttributeKindError(attribute)
    target = unwrap_declaration(declaration)
    element = element_type(target)
    if element is None:
        raise InvalidAttributeTargetError(
            attribute, declaration, type(target).__name__
        )
    if not _is_applicable(kind, element):
        raise InvalidAttributeTargetError(attribute, declaration, element)

    attributes = list(declared_attributes(target))
    repeatable = get_declared_attribute(kind, Repeatable)
    # Decorators are applied bottom up, new attributes go first
    # so the stored order follows the source order.
    if repeatable is not None:
        container_kind = repeatable.value
        idx = _index_of(attributes, container_kind)
        if idx is not None:
            container = attributes[idx]
            attributes[idx] = dataclasses.replace(
                container,  # type: ignore[type-var]
                value=(attribute, *container.value),  # type: ignore[attr-defined]
            )
        else:
            idx = _index_of(attributes, kind)
            if idx is not None:
                attributes[idx] = container_kind(
                    value=(attribute, attributes[idx])
                )
            else:
                attributes.insert(0, attribute)
    else:
        idx = _index_of(attributes, kind)
        if idx is not None:
            raise DuplicateAttributeError(attribute, attributes[idx], target)
        attributes.insert(0, attribute)

    setattr(target, ATTRIBUTES_ATTR, tuple(attributes))
    return declaration


@dataclass(frozen=True, slots=True)
class Target(Attribute):
    """Declare the element types an attribute kind can be attached to.

    An attribute kind can only be discovered through other attribute kinds
    if its targets include "type" or "attribute_kind".
    """

    value: tuple[ElementType, ...]


@dataclass(frozen=True, slots=True)
class Repeatable(Attribute):
    """Declare the container kind of a repeatable attribute kind.

    The container kind must declare a `value` property holding a tuple of
    the repeatable kind.
    """

    value: type[Attribute]


@dataclass(frozen=True, slots=True)
class Mapping(Attribute):
    """Projection rule. Values are projected into the `value` kind under `name`,
    or under the source property name if `name` is empty.
    """

    value: type[Attribute]
    name: str = ""


@dataclass(frozen=True, slots=True)
class Mappings(Attribute):
    """Container of repeated Mapping."""

    value: tuple[Mapping, ...]


@dataclass(frozen=True, slots=True)
class MixRepeatable(Attribute):
    """Merge the children found through meta-attributes into a container
    attached directly to a declaration.
    """

    pass


Target((ATTRIBUTE_KIND,))(Target)
Target((ATTRIBUTE_KIND,))(Repeatable)
Target((ATTRIBUTE_KIND,))(Mapping)
Target((ATTRIBUTE_KIND,))(Mappings)
Target((ATTRIBUTE_KIND,))(MixRepeatable)
Repeatable(Mappings)(Mapping)

_BUILTIN_KINDS = frozenset(
    (Target, Repeatable, Mapping, Mappings, MixRepeatable)
)


def is_builtin_kind(kind: type) -> bool:
    """Builtin kinds describe attribute kinds and are never walked as meta-attributes."""
    return kind in _BUILTIN_KINDS


def mapped(
    *rules: type[Attribute] | Mapping,
    name: str = "",
    **field_kwargs: Any,
) -> Any:
    """Create a dataclass field carrying property level projection rules.
    Property level rules replace the kind level Mapping rules for this field,
    so mapped() without any rule excludes the field from projection.

    Example:
        @dataclass(frozen=True, slots=True)
        class Alias(Attribute):
            value: str = mapped(Named, name="name", default="")

    Args:
        *rules (type[Attribute] | Mapping): Target kinds or complete Mapping rules.
        name (str, optional): Target property name for the kinds given as types. Defaults to the field name.
        **field_kwargs: Passed to dataclasses.field.

    Returns:
        Any: A dataclass field.
    """
    mappings = tuple(
        rule if isinstance(rule, Mapping) else Mapping(rule, name)
        for rule in rules
    )
    metadata = dict(field_kwargs.pop("metadata", None) or {})
    metadata[MAPPING_METADATA] = mappings
    return dataclasses.field(metadata=metadata, **field_kwargs)
