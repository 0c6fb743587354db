"""
Identifier sanitization for generated TypeScript.

Move names are not checked against TypeScript's reserved words, and the Move
compiler synthesizes local names containing characters that are illegal in
TypeScript identifiers. ``sanitize`` maps any raw name to a safe identifier.
"""

from dataclasses import dataclass, field
from typing import FrozenSet


# TypeScript keywords known to appear as Move struct, field or module names
DEFAULT_RESERVED_WORDS: FrozenSet[str] = frozenset({'new', 'default', 'for'})


@dataclass(frozen=True)
class NamingConfig:
    """
    Naming rules applied by ``sanitize``.

    Attributes:
        reserved_words: Names that would collide with target-language syntax
        keyword_suffix: Appended to reserved words
        temp_marker: Prefix of compiler-synthesized temporaries
        temp_prefix: Replaces ``temp_marker`` on temporaries
        shadow_separator: Separator used for shadowed locals
        shadow_replacement: Replaces every ``shadow_separator``
    """
    reserved_words: FrozenSet[str] = field(default_factory=lambda: DEFAULT_RESERVED_WORDS)
    keyword_suffix: str = '__'
    temp_marker: str = '%#'
    temp_prefix: str = 'temp$'
    shadow_separator: str = '#'
    shadow_replacement: str = '__'


DEFAULT_NAMING = NamingConfig()


def sanitize(name: str, config: NamingConfig = DEFAULT_NAMING) -> str:
    """Return a TypeScript-safe identifier for ``name``.

    Rules are checked in order and the first match wins:
    1. reserved word -> ``new`` becomes ``new__``
    2. temporary -> ``%#3`` becomes ``temp$3``
    3. shadowed local -> ``x#0`` becomes ``x__0``
    4. anything else is returned unchanged
    """
    if name in config.reserved_words:
        return name + config.keyword_suffix
    if config.temp_marker and name.startswith(config.temp_marker):
        return config.temp_prefix + name[len(config.temp_marker):]
    if config.shadow_separator and config.shadow_separator in name:
        return name.replace(config.shadow_separator, config.shadow_replacement)
    return name
