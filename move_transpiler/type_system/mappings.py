"""
Type mappings and conversion utilities for Move to TypeScript.

This module maps Move type tags to the TypeScript types exposed by the
move-to-ts runtime, used when emitting typed accessor aliases.
"""

from typing import Dict, Optional, Set, Tuple

from .type_tags import PrimitiveTag, StructTag, TypeTag, VectorTag


# =============================================================================
# TYPE MAPPING CONSTANTS
# =============================================================================

# Move primitive to runtime TypeScript type
MOVE_TO_TS_MAP = {
    'bool': 'boolean',
    'u8': 'U8',
    'u16': 'U16',
    'u32': 'U32',
    'u64': 'U64',
    'u128': 'U128',
    'u256': 'U256',
    'address': 'HexString',
    'signer': 'HexString',
}

# Runtime names that must be imported when a mapped type refers to them
RUNTIME_TYPE_IMPORTS = {
    'U8', 'U16', 'U32', 'U64', 'U128', 'U256',
}

# Types that come from the chain client library rather than the runtime
CLIENT_TYPE_IMPORTS = {
    'HexString',
}

ModuleKey = Tuple[str, str]


# =============================================================================
# TYPE CONVERSION FUNCTIONS
# =============================================================================

def module_alias(module_name: str) -> str:
    """Namespace alias under which a module is imported in generated code."""
    return f'{module_name}$_'


def move_type_to_ts(
    tag: TypeTag,
    known_modules: Optional[Dict[ModuleKey, str]] = None,
    used_runtime: Optional[Set[str]] = None,
    used_modules: Optional[Set[ModuleKey]] = None,
) -> str:
    """
    Convert a Move type tag to its TypeScript equivalent.

    Args:
        tag: The type tag to convert
        known_modules: Maps (address, module) to the package that holds it;
            structs from unknown modules become ``any``
        used_runtime: Collects runtime type names the result refers to
        used_modules: Collects modules whose namespace the result refers to

    Returns:
        The TypeScript type string
    """
    if isinstance(tag, PrimitiveTag):
        ts_type = MOVE_TO_TS_MAP.get(tag.name, 'any')
        if used_runtime is not None and ts_type in RUNTIME_TYPE_IMPORTS | CLIENT_TYPE_IMPORTS:
            used_runtime.add(ts_type)
        return ts_type

    if isinstance(tag, VectorTag):
        inner = move_type_to_ts(tag.element, known_modules, used_runtime, used_modules)
        if ' ' in inner:
            return f'({inner})[]'
        return f'{inner}[]'

    if isinstance(tag, StructTag):
        key = (tag.address, tag.module)
        if known_modules is None or key not in known_modules:
            return 'any'
        if used_modules is not None:
            used_modules.add(key)
        return f'{module_alias(tag.module)}.{tag.name}'

    return 'any'
