#!/usr/bin/env python3
"""
Move to TypeScript binding generator.

Turns module metadata produced by the Move compiler front-end into the
TypeScript glue of a client package:
- typed accessors for Table and IterableTable struct fields
- one index.ts per package, wiring every module's parser registration
- a project index.ts aggregating all packages
- package.json / tsconfig.json / jest.config.js scaffolding

Per-module binding files (<package>/<module>.ts) are produced elsewhere;
this tool only references them.

Usage:
    python -m move_transpiler.move2ts manifest.json -o build/
"""

import sys
from pathlib import Path
from typing import Dict, List, Optional

from .errors import TranspilerError
from .type_system import ModuleRegistry, PackageDecl
from .codegen import (
    CodeGenerationContext,
    GeneratedFile,
    IterableTableAccessorEmitter,
    ModuleIndexAssembler,
    ProjectIndexAssembler,
    TableAccessorEmitter,
    TranspilerDiagnostics,
    generate_scaffold,
)


class MoveToTypeScriptTranspiler:
    """Main transpiler class that orchestrates the emission of a whole project."""

    def __init__(
        self,
        output_dir: str = './ts-output',
        config_path: Optional[str] = None,
        project_name: str = 'move-bindings',
        emit_scaffold: bool = True,
        verbose: bool = False,
    ):
        self.output_dir = Path(output_dir)
        self.project_name = project_name
        self.emit_scaffold = emit_scaffold
        self.registry = ModuleRegistry()
        self.diagnostics = TranspilerDiagnostics(verbose=verbose)
        self.settings = CodeGenerationContext.load_settings(config_path) if config_path else {}

    def load_manifest(self, filepath: str) -> None:
        """Register the packages listed in a JSON manifest."""
        self.registry.discover_from_file(filepath)

    def add_package(self, package: PackageDecl) -> None:
        self.registry.add_package(package)

    def create_context(self) -> CodeGenerationContext:
        return CodeGenerationContext.from_registry(
            self.registry, diagnostics=self.diagnostics, **self.settings
        )

    # =========================================================================
    # GENERATION
    # =========================================================================

    def generate(self) -> List[GeneratedFile]:
        """Emit every file of the project, paths relative to the source root.

        Any malformed table field aborts the whole run.
        """
        ctx = self.create_context()
        emitters = [TableAccessorEmitter(ctx), IterableTableAccessorEmitter(ctx)]
        module_index = ModuleIndexAssembler(ctx)
        used_emitters = set()
        # package -> stems of companion files to wire into its index
        companions: Dict[str, List[str]] = {name: [] for name in self.registry.package_names}
        package_files: Dict[str, List[GeneratedFile]] = {}
        helper_files: List[GeneratedFile] = []

        for package in self.registry.packages.values():
            package_files[package.name] = []
            for module in package.modules:
                accessors = []
                for struct in module.structs:
                    for field in struct.fields:
                        for emitter in emitters:
                            if emitter.matches(field):
                                accessors.append(emitter.build_accessor(
                                    field, owner=struct.name, module=module.ident
                                ))
                                used_emitters.add(emitter.class_name)
                if accessors:
                    generated = emitters[0].emit_aliases(package.name, module.ident, accessors)
                    package_files[package.name].append(generated)
                    companions[package.name].append(f'{module.name}.tables')

        for emitter in emitters:
            if emitter.class_name not in used_emitters:
                continue
            generated = emitter.emit_helper()
            helper_files.append(generated)
            package_name, _, filename = generated.path.partition('/')
            if package_name in companions:
                companions[package_name].append(filename[:-len('.ts')])
            else:
                ctx.diagnostics.warn_container_missing(emitter.qualified_name, generated.path)

        files: List[GeneratedFile] = []
        for package in self.registry.packages.values():
            files.extend(package_files[package.name])
            files.append(module_index.assemble(
                package.name, [m.ident for m in package.modules], companions[package.name]
            ))
        files.extend(helper_files)
        files.append(ProjectIndexAssembler(ctx).assemble(self.registry.package_names))
        return files

    def transpile(self) -> Dict[str, str]:
        """Generate the project and map output file paths to their contents."""
        source_root = self.output_dir / 'src' if self.emit_scaffold else self.output_dir
        results = {}
        for generated in self.generate():
            results[str(source_root / generated.path)] = generated.content
        if self.emit_scaffold:
            for generated in generate_scaffold(self.project_name):
                results[str(self.output_dir / generated.path)] = generated.content
        return results

    def write_output(self, results: Dict[str, str]) -> None:
        """Write generated files to disk."""
        for filepath, content in results.items():
            path = Path(filepath)
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, 'w', encoding='utf-8') as f:
                f.write(content)
            print(f"Written: {filepath}")


# =============================================================================
# CLI INTERFACE
# =============================================================================

def main(argv: Optional[List[str]] = None) -> int:
    import argparse

    parser = argparse.ArgumentParser(description='Move to TypeScript binding generator')
    parser.add_argument('manifest', help='JSON manifest describing packages, modules and structs')
    parser.add_argument('-o', '--output', default='ts-output', help='Output directory')
    parser.add_argument('-c', '--config', metavar='FILE', help='Generator settings (JSON)')
    parser.add_argument('-n', '--name', default='move-bindings', help='Name for package.json')
    parser.add_argument('--stdout', action='store_true', help='Print to stdout instead of writing files')
    parser.add_argument('--no-scaffold', action='store_true',
                        help='Skip package.json, tsconfig.json and jest.config.js')
    parser.add_argument('-v', '--verbose', action='store_true', help='Show every diagnostic')

    args = parser.parse_args(argv)

    try:
        transpiler = MoveToTypeScriptTranspiler(
            output_dir=args.output,
            config_path=args.config,
            project_name=args.name,
            emit_scaffold=not args.no_scaffold,
            verbose=args.verbose,
        )
        transpiler.load_manifest(args.manifest)
        results = transpiler.transpile()
    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except TranspilerError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.stdout:
        for filepath, content in results.items():
            print(f"// ===== {filepath} =====")
            print(content)
    else:
        transpiler.write_output(results)

    transpiler.diagnostics.print_summary()
    return 0


if __name__ == '__main__':
    sys.exit(main())
