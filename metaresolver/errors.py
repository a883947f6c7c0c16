"""Module containing errors classes."""

from typing import Any


class AttributeDeclarationError(Exception):
    """Base class for all attribute declaration errors."""

    pass


class InvalidAttributeKindError(AttributeDeclarationError, TypeError):
    """Raised when a value that is not an attribute kind is used as one."""

    def __init__(self, value: Any) -> None:
        self.value = value
        super().__init__(
            f"{value!r} is not an attribute kind. Attribute kinds must be dataclass subclasses of Attribute."
        )


class InvalidAttributeTargetError(AttributeDeclarationError):
    """Raised when an attribute is attached to a declaration its kind does not target."""

    def __init__(self, attribute: Any, declaration: Any, element_type: str) -> None:
        self.attribute = attribute
        self.declaration = declaration
        self.element_type = element_type
        super().__init__(
            f"{attribute!r} cannot be attached to {declaration!r} of element type {element_type!r}"
        )


class DuplicateAttributeError(AttributeDeclarationError):
    """Raised when a non repeatable attribute is attached twice to the same declaration."""

    def __init__(self, to_add: Any, existing: Any, declaration: Any) -> None:
        self.to_add = to_add
        self.existing = existing
        self.declaration = declaration
        super().__init__(
            f"Attribute {to_add!r} conflict with existing attribute {existing!r} on {declaration!r}"
        )


class InstantiationError(Exception):
    """Base class for all attribute instantiation errors."""

    def __init__(self, kind: type, msg: str) -> None:
        super().__init__(msg)
        self.kind = kind


class UnknownPropertyError(InstantiationError):
    """Raised when a value is supplied for a property the kind does not declare."""

    def __init__(self, kind: type, name: str) -> None:
        self.name = name
        super().__init__(kind, f"{kind.__qualname__} has no property {name!r}")


class PropertyTypeError(InstantiationError):
    """Raised when a value is incompatible with the declared type of its property."""

    def __init__(self, kind: type, name: str, value: Any) -> None:
        self.name = name
        self.value = value
        super().__init__(
            kind,
            f"Value {value!r} is not valid for property {kind.__qualname__}.{name}",
        )


class MissingPropertyError(InstantiationError):
    """Raised when a property without default value is not supplied."""

    def __init__(self, kind: type, names: tuple[str, ...]) -> None:
        self.names = names
        super().__init__(
            kind,
            f"Missing value for properties of {kind.__qualname__}: {', '.join(names)}",
        )


class ResolverError(Exception):
    """Base class for all resolution errors."""

    pass


class ProjectionError(ResolverError):
    """Raised when values of an attribute cannot be projected into another kind.
    This indicates an invalid projection rule in the attribute declarations.
    """

    def __init__(self, source: Any, target_kind: type, msg: str) -> None:
        self.source = source
        self.target_kind = target_kind
        super().__init__(
            f"Failed to project {source!r} into {target_kind.__qualname__}: {msg}"
        )


class IntrospectionError(ResolverError):
    """Raised when reading a property of an attribute failed."""

    def __init__(self, attribute: Any, name: str) -> None:
        self.attribute = attribute
        self.name = name
        super().__init__(
            f"Unable to read property {name!r} of {type(attribute).__qualname__}"
        )
