"""Pluggable format, media and schema extensions and the registry that holds them."""

from .base import (
    BaseExtension,
    ExtensionMetadata,
    FormatExtension,
    MediaExtension,
    RecipeExtension,
    SchemaExtension,
    base_format,
)
from .conversion import convert_format, detect_format
from .registry import BUILTIN_EXTENSIONS, ExtensionRegistry

__all__ = [
    "BaseExtension",
    "ExtensionMetadata",
    "FormatExtension",
    "MediaExtension",
    "RecipeExtension",
    "SchemaExtension",
    "base_format",
    "convert_format",
    "detect_format",
    "BUILTIN_EXTENSIONS",
    "ExtensionRegistry",
]
