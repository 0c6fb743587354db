"""
Index file assembly for generated packages.

A package index (``<package>/index.ts``) re-exports every module of the
package and aggregates their ``loadParsers`` hooks; the project index
(``index.ts``) does the same one level up for packages.

Children appear in the order the caller supplies them. Nothing is sorted
here, so a deterministic input order gives byte-identical output.
"""

from typing import List, Sequence, Tuple

from ..errors import DuplicateEntryError
from ..type_system import ModuleIdentifier
from .base import BaseGenerator, GeneratedFile
from .ir import (
    ExportStatement,
    FunctionDeclaration,
    ImportStatement,
    Node,
    Parameter,
    SourceFile,
)


REPO_CLASS = 'AptosParserRepo'


class IndexAssembler(BaseGenerator):
    """Shared wiring: one import, one export and one load call per child."""

    def _children(self, kind: str, names: Sequence[str], parent: str, location: str) -> List[Tuple[str, str]]:
        """(alias, source) for each child, rejecting duplicates."""
        return [(self._alias(name, location), f'./{name}') for name in self._unique(names, parent, kind)]

    @staticmethod
    def _unique(names: Sequence[str], parent: str, kind: str = 'file') -> List[str]:
        seen = set()
        for name in names:
            if name in seen:
                raise DuplicateEntryError(kind, name, parent)
            seen.add(name)
        return list(names)

    def _alias(self, name: str, location: str) -> str:
        raise NotImplementedError

    def _wiring(self, children: List[Tuple[str, str]]) -> List[Node]:
        nodes: List[Node] = [ImportStatement(self._ctx.runtime_module, (REPO_CLASS,))]
        nodes.extend(ImportStatement(source, namespace=alias) for alias, source in children)
        nodes.extend(ExportStatement(source, namespace=alias) for alias, source in children)
        return nodes

    @staticmethod
    def _load_calls(children: List[Tuple[str, str]]) -> List[str]:
        return [f'{alias}.loadParsers(repo);' for alias, _ in children]


class ModuleIndexAssembler(IndexAssembler):
    """Assembles ``<package>/index.ts`` from the package's modules."""

    def _alias(self, name: str, location: str) -> str:
        return self.module_alias(name, location)

    def assemble(
        self,
        package_name: str,
        modules: Sequence[ModuleIdentifier],
        companions: Sequence[str] = (),
    ) -> GeneratedFile:
        path = f'{package_name}/index.ts'
        return self.make_file(path, self.build(package_name, modules, companions))

    def build(
        self,
        package_name: str,
        modules: Sequence[ModuleIdentifier],
        companions: Sequence[str] = (),
    ) -> SourceFile:
        """Build the index IR.

        ``companions`` are stems of generated files that sit next to a module
        (``Table.accessors``, ``Market.tables``). They are imported and
        re-exported under ``<Module>$<kind>`` but have no parsers to load.
        """
        location = f'{package_name}/index.ts'
        children = self._children('module', [m.name for m in modules], package_name, location)
        extras = []
        for stem in self._unique(companions, package_name):
            module_name, _, kind = stem.partition('.')
            extras.append((f'{self.sanitize(module_name, location)}${kind}', f'./{stem}'))
        nodes = self._wiring(children + extras)
        nodes.append(FunctionDeclaration(
            name='loadParsers',
            params=[Parameter('repo', REPO_CLASS)],
            body=self._load_calls(children),
        ))
        nodes.append(FunctionDeclaration(
            name='getPackageRepo',
            return_type=REPO_CLASS,
            body=[
                f'const repo = new {REPO_CLASS}();',
                'loadParsers(repo);',
                'repo.addDefaultParsers();',
                'return repo;',
            ],
        ))
        return SourceFile(nodes)


class ProjectIndexAssembler(IndexAssembler):
    """Assembles the top-level ``index.ts`` from the project's packages."""

    def _alias(self, name: str, location: str) -> str:
        return self.sanitize(name, location)

    def assemble(self, packages: Sequence[str]) -> GeneratedFile:
        return self.make_file('index.ts', self.build(packages))

    def build(self, packages: Sequence[str]) -> SourceFile:
        children = self._children('package', list(packages), '', 'index.ts')
        nodes = self._wiring(children)
        body = [f'const repo = new {REPO_CLASS}();']
        body.extend(self._load_calls(children))
        body.extend(['repo.addDefaultParsers();', 'return repo;'])
        nodes.append(FunctionDeclaration(
            name='getProjectRepo',
            return_type=REPO_CLASS,
            body=body,
        ))
        return SourceFile(nodes)
