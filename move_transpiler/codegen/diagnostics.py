"""
Diagnostic/warning system for the transpiler.

Collects and reports notes about generated code whose behaviour depends on
on-chain data or on degraded typing, and about identifiers that had to be
renamed for TypeScript.
"""

import sys
from dataclasses import dataclass
from enum import Enum
from typing import List


class DiagnosticSeverity(Enum):
    """Severity levels for transpiler diagnostics."""
    WARNING = 'warning'
    INFO = 'info'


@dataclass
class Diagnostic:
    """A single diagnostic message."""
    severity: DiagnosticSeverity
    code: str
    message: str
    location: str = ''  # e.g. 'AptosFramework/Market.accessors.ts'
    construct: str = ''  # e.g. 'iterable-table', 'rename'

    def __str__(self) -> str:
        if self.location:
            return f'[{self.severity.value}] {self.location}: {self.message} ({self.code})'
        return f'[{self.severity.value}] {self.message} ({self.code})'


class TranspilerDiagnostics:
    """
    Collects transpiler warnings/diagnostics during code generation.

    Usage:
        diag = TranspilerDiagnostics()
        diag.warn_unbounded_traversal("TypedIterableTable", "Std/IterableTable.accessors.ts")
        # ... after generation ...
        diag.print_summary()
    """

    def __init__(self, verbose: bool = False):
        self._diagnostics: List[Diagnostic] = []
        self._verbose = verbose

    @property
    def diagnostics(self) -> List[Diagnostic]:
        """Get all collected diagnostics."""
        return list(self._diagnostics)

    @property
    def warnings(self) -> List[Diagnostic]:
        """Get only warning-level diagnostics."""
        return [d for d in self._diagnostics if d.severity == DiagnosticSeverity.WARNING]

    @property
    def count(self) -> int:
        """Get total diagnostic count."""
        return len(self._diagnostics)

    def clear(self) -> None:
        """Clear all diagnostics."""
        self._diagnostics.clear()

    # =========================================================================
    # SPECIFIC DIAGNOSTIC METHODS
    # =========================================================================

    def warn_unbounded_traversal(self, class_name: str, location: str = '') -> None:
        """Warn that an emitted fetchAll follows next-pointers without a limit."""
        self._diagnostics.append(Diagnostic(
            severity=DiagnosticSeverity.WARNING,
            code='W001',
            message=f'{class_name}.fetchAll has no entry limit; '
                    f'a next-pointer cycle on chain will never terminate.',
            location=location,
            construct='iterable-table',
        ))

    def warn_untyped_parameter(self, field_name: str, type_name: str, location: str = '') -> None:
        """Warn that a table key/value type could not be mapped and falls back to any."""
        self._diagnostics.append(Diagnostic(
            severity=DiagnosticSeverity.WARNING,
            code='W002',
            message=f'Type {type_name} of field "{field_name}" is outside the known '
                    f'modules; using any.',
            location=location,
            construct='type-mapping',
        ))

    def warn_container_missing(self, qualified_name: str, location: str = '') -> None:
        """Warn that a helper class was placed in a package the manifest does not declare."""
        self._diagnostics.append(Diagnostic(
            severity=DiagnosticSeverity.WARNING,
            code='W003',
            message=f'Module of {qualified_name} is not in the manifest; its accessor '
                    f'file is not wired into any index.',
            location=location,
            construct='index',
        ))

    def info_identifier_renamed(self, original: str, renamed: str, location: str = '') -> None:
        """Info that an identifier was rewritten by the sanitizer."""
        self._diagnostics.append(Diagnostic(
            severity=DiagnosticSeverity.INFO,
            code='I001',
            message=f'Identifier "{original}" emitted as "{renamed}"',
            location=location,
            construct='rename',
        ))

    # =========================================================================
    # REPORTING
    # =========================================================================

    def print_summary(self, file=None) -> None:
        """Print a summary of all diagnostics to stderr (or specified file)."""
        if file is None:
            file = sys.stderr

        if not self._diagnostics:
            return

        warnings = self.warnings
        infos = [d for d in self._diagnostics if d.severity == DiagnosticSeverity.INFO]

        if warnings:
            print(f'\nTranspiler warnings ({len(warnings)}):', file=file)
            # Group by construct type
            by_construct: dict = {}
            for w in warnings:
                key = w.construct or 'other'
                by_construct.setdefault(key, []).append(w)

            for construct, diags in sorted(by_construct.items()):
                print(f'  {construct}: {len(diags)} occurrence(s)', file=file)
                if self._verbose:
                    for d in diags:
                        print(f'    {d}', file=file)

        if infos and self._verbose:
            print(f'\nTranspiler info ({len(infos)}):', file=file)
            for d in infos:
                print(f'  {d}', file=file)

    def get_summary(self) -> str:
        """Get a summary string of all diagnostics."""
        warnings = self.warnings
        if not warnings:
            return 'No transpiler warnings.'

        by_construct: dict = {}
        for w in warnings:
            key = w.construct or 'other'
            by_construct[key] = by_construct.get(key, 0) + 1

        parts = [f'{count} {construct}' for construct, count in sorted(by_construct.items())]
        return f'Transpiler warnings: {", ".join(parts)}'
