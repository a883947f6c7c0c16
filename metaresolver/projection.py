"""Projection of attribute values into attributes of another kind."""

import logging
from typing import TypeVar

from metaresolver.attributes import Attribute, Mapping
from metaresolver.errors import (
    InstantiationError,
    IntrospectionError,
    ProjectionError,
)
from metaresolver.instantiator import AttributeInstantiator
from metaresolver.introspection import AttributeIntrospector, Introspector

__all__ = [
    "Projector",
]

logger = logging.getLogger(__name__)

A = TypeVar("A", bound=Attribute)


class Projector:
    """Build attributes of a target kind from the values of a source attribute,
    following the projection rules declared on the source kind.
    """

    def __init__(
        self,
        introspector: Introspector | None = None,
        instantiator: AttributeInstantiator | None = None,
    ) -> None:
        self._introspector = introspector or AttributeIntrospector()
        self._instantiator = instantiator or AttributeInstantiator(
            self._introspector
        )

    def rule_for(
        self, kind: type[Attribute], name: str, target_kind: type[Attribute]
    ) -> Mapping | None:
        """Find the rule projecting a property into the target kind.

        Property level rules take precedence over kind level rules.

        Args:
            kind (type[Attribute]): The source kind.
            name (str): The source property.
            target_kind (type[Attribute]): The kind to project into.

        Returns:
            Mapping | None: The applicable rule; None if the property is not projected.
        """
        rules = self._introspector.property_mappings(kind, name)
        if rules is None:
            rules = self._introspector.kind_mappings(kind)
        for rule in rules:
            if rule.value is target_kind:
                return rule
        return None

    def project(
        self,
        source: Attribute,
        target_kind: type[A],
        base: A | None = None,
    ) -> A:
        """Project the values of source into a new instance of target_kind.

        Args:
            source (Attribute): The attribute to read values from. Never mutated.
            target_kind (type[A]): The kind to create.
            base (A | None, optional): Properties not covered by any rule are taken from base; otherwise from the declared defaults.

        Returns:
            A: The projected attribute.

        Raises:
            ProjectionError: If a rule names an unknown property or a value has an incompatible type.
            IntrospectionError: If a property of source cannot be read.
        """
        kind = type(source)
        values = {}
        for name in self._introspector.properties(kind):
            rule = self.rule_for(kind, name, target_kind)
            if rule is None:
                continue
            try:
                value = getattr(source, name)
            except Exception as exc:
                raise IntrospectionError(source, name) from exc
            values[rule.name or name] = value
        logger.debug(
            "Projecting %r into %s with %r",
            source,
            target_kind.__qualname__,
            values,
        )
        try:
            return self._instantiator.instantiate(target_kind, values, base)
        except InstantiationError as exc:
            raise ProjectionError(source, target_kind, str(exc)) from exc
