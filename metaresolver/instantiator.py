"""Instantiation of attribute kinds from property values.

Example:
    from dataclasses import dataclass

    from metaresolver.attributes import Attribute
    from metaresolver.instantiator import default_attribute

    @dataclass(frozen=True, slots=True)
    class Beans(Attribute):
        value: str = ""
        single: bool = True

    print(default_attribute(Beans, {"value": "service"}))
    #> Beans(value='service', single=True)
"""

import dataclasses
from collections.abc import Callable, Mapping
from typing import Any, TypeVar, get_type_hints, is_typeddict

from pydantic import BaseModel, ConfigDict, TypeAdapter, ValidationError

from metaresolver.attributes import Attribute, is_attribute_kind
from metaresolver.errors import (
    IntrospectionError,
    InvalidAttributeKindError,
    MissingPropertyError,
    PropertyTypeError,
    UnknownPropertyError,
)
from metaresolver.introspection import AttributeIntrospector, Introspector

__all__ = [
    "AttributeInstantiator",
    "default_attribute",
    "get_attribute_property",
]

A = TypeVar("A", bound=Attribute)


def _has_own_config(type_: Any) -> bool:
    return (
        dataclasses.is_dataclass(type_)
        or (isinstance(type_, type) and issubclass(type_, BaseModel))
        or is_typeddict(type_)
    )


def _create_adapter(type_: Any) -> TypeAdapter:
    if _has_own_config(type_):
        return TypeAdapter(type_)
    return TypeAdapter(type_, config=ConfigDict(arbitrary_types_allowed=True))


def _missing_properties(
    kind: type[Attribute], values: Mapping[str, Any]
) -> tuple[str, ...]:
    return tuple(
        field.name
        for field in dataclasses.fields(kind)
        if field.init
        and field.name not in values
        and field.default is dataclasses.MISSING
        and field.default_factory is dataclasses.MISSING
    )


class AttributeInstantiator:
    """Create attribute instances from a mapping of property values.

    Values are type checked against the declared property types
    using strict pydantic validation.
    """

    def __init__(self, introspector: Introspector | None = None) -> None:
        self._introspector = introspector or AttributeIntrospector()
        self._type_hints: dict[type, dict[str, Any]] = {}
        self._adapters: dict[tuple[type, str], TypeAdapter] = {}

    def property_type(self, kind: type[Attribute], name: str) -> Any:
        type_hints = self._type_hints.get(kind, None)
        if type_hints is None:
            self._type_hints[kind] = type_hints = get_type_hints(kind)
        return type_hints.get(name, Any)

    def _adapter(self, kind: type[Attribute], name: str) -> TypeAdapter:
        key = (kind, name)
        adapter = self._adapters.get(key, None)
        if adapter is None:
            self._adapters[key] = adapter = _create_adapter(
                self.property_type(kind, name)
            )
        return adapter

    def validate(self, kind: type[Attribute], name: str, value: Any) -> None:
        """Validate a value for a property of a kind.

        Raises:
            UnknownPropertyError: If the kind has no such property.
            PropertyTypeError: If the value is incompatible with the property type.
        """
        if name not in self._introspector.properties(kind):
            raise UnknownPropertyError(kind, name)
        try:
            self._adapter(kind, name).validate_python(value, strict=True)
        except ValidationError as exc:
            raise PropertyTypeError(kind, name, value) from exc

    def instantiate(
        self,
        kind: type[A],
        values: Mapping[str, Any] | None = None,
        base: A | None = None,
    ) -> A:
        """Create an instance of an attribute kind.

        Args:
            kind (type[A]): The attribute kind to instantiate.
            values (Mapping[str, Any] | None, optional): Property values. Defaults to None.
            base (A | None, optional): Take unset properties from this instance instead of the declared defaults.

        Returns:
            A: A new attribute instance.

        Raises:
            InvalidAttributeKindError: If kind is not an attribute kind.
            UnknownPropertyError: If values contains a key with no matching property.
            PropertyTypeError: If a value is incompatible with its declared type.
            MissingPropertyError: If a property without default is not supplied.
        """
        if not is_attribute_kind(kind):
            raise InvalidAttributeKindError(kind)
        values = values or {}
        for name, value in values.items():
            self.validate(kind, name, value)
        if base is not None:
            if type(base) is not kind:
                raise ValueError(f"{base!r} is not an instance of {kind!r}")
            return dataclasses.replace(base, **values)  # type: ignore[type-var]
        missing = _missing_properties(kind, values)
        if missing:
            raise MissingPropertyError(kind, missing)
        return kind(**values)


_default_instantiator = AttributeInstantiator()


def default_attribute(
    kind: type[A], values: Mapping[str, Any] | None = None
) -> A:
    """Create an instance of an attribute kind using its default values.

    Args:
        kind (type[A]): The attribute kind.
        values (Mapping[str, Any] | None, optional): Values overriding the defaults. Defaults to None.

    Returns:
        A: The attribute instance.
    """
    return _default_instantiator.instantiate(kind, values)


def get_attribute_property(
    attribute: Attribute,
    name: str,
    type_check: Callable[[Any], bool] | None = None,
) -> Any | None:
    """Get the value of any property of an attribute, if it exists.

    Args:
        attribute (Attribute): The attribute to read.
        name (str): The property name.
        type_check (Callable[[Any], bool] | None, optional): Check on the declared property type.

    Returns:
        Any | None: The property value; None if there is no such property or the type check fails.

    Raises:
        IntrospectionError: If reading the property failed.
    """
    kind = type(attribute)
    if not is_attribute_kind(kind):
        raise InvalidAttributeKindError(attribute)
    if name not in (field.name for field in dataclasses.fields(kind)):
        return None
    if type_check is not None and not type_check(
        _default_instantiator.property_type(kind, name)
    ):
        return None
    try:
        return getattr(attribute, name)
    except Exception as exc:
        raise IntrospectionError(attribute, name) from exc
