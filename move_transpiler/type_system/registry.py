"""
Registry of Move packages, modules and struct declarations.

The ModuleRegistry holds the module metadata handed over by the compiler
front-end. Metadata arrives as a JSON manifest:

    {
      "packages": [
        {
          "name": "Std",
          "modules": [
            {
              "address": "0x1",
              "name": "Option",
              "structs": [
                {"name": "Option", "fields": [{"name": "vec", "type": "vector<u8>"}]}
              ]
            }
          ]
        }
      ]
    }

Packages and modules keep the order in which the manifest lists them.
"""

import json
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from ..errors import ManifestError
from .type_tags import TypeTag, parse_type_tag


# =============================================================================
# DECLARATIONS
# =============================================================================

@dataclass(frozen=True)
class ModuleIdentifier:
    """Identifies a Move module; ``name`` doubles as the TypeScript display name."""
    address: str
    name: str

    def __str__(self) -> str:
        return f'{self.address}::{self.name}'


@dataclass(frozen=True)
class FieldDecl:
    """A struct field and its declared type tag."""
    name: str
    type_tag: TypeTag


@dataclass
class StructDecl:
    """A struct declaration with its fields in declaration order."""
    name: str
    fields: List[FieldDecl] = field(default_factory=list)


@dataclass
class ModuleDecl:
    """A module and the structs it declares."""
    ident: ModuleIdentifier
    structs: List[StructDecl] = field(default_factory=list)

    @property
    def name(self) -> str:
        return self.ident.name


@dataclass
class PackageDecl:
    """A generated package directory and the modules it contains."""
    name: str
    modules: List[ModuleDecl] = field(default_factory=list)


# =============================================================================
# REGISTRY
# =============================================================================

class ModuleRegistry:
    """
    Registry of discovered packages and modules.

    Tracks:
    - Packages, in manifest order
    - Which package each (address, module) pair lives in
    """

    def __init__(self):
        self.packages: Dict[str, PackageDecl] = {}
        self.module_packages: Dict[Tuple[str, str], str] = {}

    @property
    def package_names(self) -> List[str]:
        return list(self.packages)

    def add_package(self, package: PackageDecl) -> None:
        """Register a package and all of its modules."""
        if package.name in self.packages:
            raise ManifestError(f'Package "{package.name}" is declared twice')
        self.packages[package.name] = package
        for module in package.modules:
            self.module_packages[(module.ident.address, module.ident.name)] = package.name

    def package_of(self, address: str, module: str) -> Optional[str]:
        """Return the package holding a module, if known."""
        return self.module_packages.get((address, module))

    def discover_from_manifest(self, data: dict) -> None:
        """Register every package described by a parsed manifest."""
        packages = data.get('packages') if isinstance(data, dict) else None
        if not isinstance(packages, list):
            raise ManifestError('Manifest must contain a "packages" list')
        for raw_package in packages:
            self.add_package(self._package_from_json(raw_package))

    def discover_from_file(self, filepath: str) -> None:
        """Load a JSON manifest file."""
        with open(filepath, 'r') as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as e:
                raise ManifestError(f'Failed to parse manifest {filepath}: {e}') from e
        self.discover_from_manifest(data)

    # =========================================================================
    # JSON DECODING
    # =========================================================================

    def _package_from_json(self, raw: dict) -> PackageDecl:
        name = self._require(raw, 'name', 'package')
        modules = [self._module_from_json(m, name) for m in raw.get('modules', [])]
        return PackageDecl(name=name, modules=modules)

    def _module_from_json(self, raw: dict, package_name: str) -> ModuleDecl:
        where = f'module in package "{package_name}"'
        ident = ModuleIdentifier(
            address=self._require(raw, 'address', where),
            name=self._require(raw, 'name', where),
        )
        structs = []
        for raw_struct in raw.get('structs', []):
            struct_name = self._require(raw_struct, 'name', f'struct in {ident}')
            fields = []
            for raw_field in raw_struct.get('fields', []):
                field_where = f'field of {ident}::{struct_name}'
                fields.append(FieldDecl(
                    name=self._require(raw_field, 'name', field_where),
                    type_tag=parse_type_tag(self._require(raw_field, 'type', field_where)),
                ))
            structs.append(StructDecl(name=struct_name, fields=fields))
        return ModuleDecl(ident=ident, structs=structs)

    @staticmethod
    def _require(raw: dict, key: str, where: str) -> str:
        if not isinstance(raw, dict) or not isinstance(raw.get(key), str) or not raw[key]:
            raise ManifestError(f'Missing "{key}" for {where}')
        return raw[key]
