"""
Type system module for the Move to TypeScript transpiler.

This module provides the type tag model, the module registry and type
conversion utilities.
"""

from .type_tags import (
    TypeTag,
    PrimitiveTag,
    VectorTag,
    StructTag,
    parse_type_tag,
    type_tag_fullname,
    split_qualified_name,
)
from .registry import (
    ModuleRegistry,
    ModuleIdentifier,
    FieldDecl,
    StructDecl,
    ModuleDecl,
    PackageDecl,
)
from .mappings import (
    move_type_to_ts,
    module_alias,
    MOVE_TO_TS_MAP,
)

__all__ = [
    'TypeTag',
    'PrimitiveTag',
    'VectorTag',
    'StructTag',
    'parse_type_tag',
    'type_tag_fullname',
    'split_qualified_name',
    'ModuleRegistry',
    'ModuleIdentifier',
    'FieldDecl',
    'StructDecl',
    'ModuleDecl',
    'PackageDecl',
    'move_type_to_ts',
    'module_alias',
    'MOVE_TO_TS_MAP',
]
