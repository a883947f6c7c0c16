"""Resolver configuration loaded from the environment.

Example:
    METARESOLVER_ATTRIBUTE_CACHE_CAPACITY=512 python app.py
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from metaresolver.cache import DEFAULT_CAPACITY

__all__ = ("ResolverSettings",)


class ResolverSettings(BaseSettings):
    """Settings of an AttributeResolver."""

    model_config = SettingsConfigDict(env_prefix="METARESOLVER_", frozen=True)

    attribute_cache_capacity: int = Field(default=DEFAULT_CAPACITY, gt=0)
    absent_cache_capacity: int = Field(default=DEFAULT_CAPACITY, gt=0)
