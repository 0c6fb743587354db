"""
Code generation context for the TypeScript code generator.

This module provides a context class that holds the settings shared by every
emitter: naming rules, runtime library names, the well-known container type
names and the diagnostics collector.
"""

import json
from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple

from ..type_system import ModuleRegistry
from .diagnostics import TranspilerDiagnostics
from .naming import DEFAULT_NAMING, NamingConfig, sanitize


# JSON config keys mapped to NamingConfig fields
NAMING_CONFIG_KEYS: Dict[str, str] = {
    'keywordSuffix': 'keyword_suffix',
    'tempMarker': 'temp_marker',
    'tempPrefix': 'temp_prefix',
    'shadowSeparator': 'shadow_separator',
    'shadowReplacement': 'shadow_replacement',
}

# JSON config keys mapped to CodeGenerationContext fields
CONTEXT_CONFIG_KEYS: Dict[str, str] = {
    'runtimeModule': 'runtime_module',
    'clientModule': 'client_module',
    'stdPackage': 'std_package',
    'tableName': 'table_name',
    'iterableTableName': 'iterable_table_name',
    'maxIterableEntries': 'max_iterable_entries',
}


@dataclass
class CodeGenerationContext:
    """
    Holds the settings needed during TypeScript code generation.

    The context carries no per-file state, so one instance can be shared by
    any number of emission calls.
    """

    naming: NamingConfig = DEFAULT_NAMING

    # Runtime collaborators referenced by generated code
    runtime_module: str = '@manahippo/move-to-ts'
    client_module: str = 'aptos'
    std_package: str = 'Std'

    # Well-known container types
    table_name: str = '0x1::Table::Table'
    iterable_table_name: str = '0x1::IterableTable::IterableTable'

    # None keeps fetchAll unbounded
    max_iterable_entries: Optional[int] = None

    indent_str: str = '  '

    # (address, module) -> package, from the registry
    known_modules: Dict[Tuple[str, str], str] = field(default_factory=dict)

    # Diagnostics collector
    _diagnostics: Optional[TranspilerDiagnostics] = None

    @property
    def diagnostics(self) -> TranspilerDiagnostics:
        """Get the diagnostics collector, creating one if needed."""
        if self._diagnostics is None:
            self._diagnostics = TranspilerDiagnostics()
        return self._diagnostics

    def sanitize(self, name: str, location: str = '') -> str:
        """Sanitize an identifier, noting any rename in the diagnostics."""
        renamed = sanitize(name, self.naming)
        if renamed != name:
            self.diagnostics.info_identifier_renamed(name, renamed, location)
        return renamed

    @classmethod
    def from_registry(
        cls,
        registry: Optional[ModuleRegistry],
        diagnostics: Optional[TranspilerDiagnostics] = None,
        **settings,
    ) -> 'CodeGenerationContext':
        """
        Create a context from a ModuleRegistry.

        Args:
            registry: The registry containing the project's packages
            diagnostics: Collector to report into
            settings: Any other CodeGenerationContext field

        Returns:
            A new CodeGenerationContext instance
        """
        ctx = cls(_diagnostics=diagnostics, **settings)
        if registry:
            ctx.known_modules = dict(registry.module_packages)
        return ctx

    @staticmethod
    def load_settings(path: str) -> dict:
        """
        Read generator settings from a JSON config file.

        A missing file yields no settings; a file that does not parse is
        reported and ignored. Keys holding a value of the wrong type are
        reported and skipped, the rest still apply.
        """
        try:
            with open(path, 'r') as f:
                config = json.load(f)
        except FileNotFoundError:
            return {}
        except json.JSONDecodeError as e:
            print(f"Warning: Failed to parse {path}: {e}")
            return {}

        if not isinstance(config, dict):
            print(f"Warning: Ignoring {path}: expected a JSON object, got {type(config).__name__}")
            return {}

        config = {
            key: value for key, value in config.items()
            if _valid_setting(path, key, value)
        }

        settings: dict = {}
        naming_overrides = {
            attr: config[key] for key, attr in NAMING_CONFIG_KEYS.items() if key in config
        }
        if 'reservedWords' in config:
            naming_overrides['reserved_words'] = frozenset(config['reservedWords'])
        if naming_overrides:
            settings['naming'] = NamingConfig(**naming_overrides)

        for key, attr in CONTEXT_CONFIG_KEYS.items():
            if key in config:
                settings[attr] = config[key]
        return settings


def _valid_setting(path: str, key: str, value) -> bool:
    """Check one config entry's type, printing a warning when it is wrong."""
    if key == 'reservedWords':
        ok = isinstance(value, list) and all(isinstance(word, str) for word in value)
        expected = 'a list of strings'
    elif key == 'maxIterableEntries':
        # bool is an int subclass
        ok = isinstance(value, int) and not isinstance(value, bool) and value >= 1
        expected = 'a positive integer'
    elif key in NAMING_CONFIG_KEYS or key in CONTEXT_CONFIG_KEYS:
        ok = isinstance(value, str)
        expected = 'a string'
    else:
        return False
    if not ok:
        print(f"Warning: Ignoring {key} in {path}: expected {expected}, got {value!r}")
    return ok
