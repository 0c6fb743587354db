#!/usr/bin/env python3
"""
Unit tests for the move2ts emission core.

Run with: python3 -m pytest move_transpiler/test_transpiler.py
   or: python3 -m unittest move_transpiler.test_transpiler
"""

import contextlib
import io
import json
import os
import tempfile
import unittest

from move_transpiler.errors import (
    DuplicateEntryError,
    MalformedTypeShapeError,
    ManifestError,
    TypeTagParseError,
)
from move_transpiler.type_system import (
    FieldDecl,
    ModuleIdentifier,
    ModuleRegistry,
    PrimitiveTag,
    StructTag,
    VectorTag,
    parse_type_tag,
    type_tag_fullname,
)
from move_transpiler.codegen import (
    CodeGenerationContext,
    IterableTableAccessor,
    IterableTableAccessorEmitter,
    ModuleIndexAssembler,
    NamingConfig,
    ProjectIndexAssembler,
    TableAccessor,
    TableAccessorEmitter,
    TranspilerDiagnostics,
    TypeScriptSerializer,
    sanitize,
)
from move_transpiler.codegen.ir import (
    Block,
    ClassDeclaration,
    ConstructorDeclaration,
    FunctionDeclaration,
    ImportStatement,
    MethodDeclaration,
    Parameter,
    PropertyDeclaration,
    SourceFile,
)
from move_transpiler.codegen.imports import ImportGenerator
from move_transpiler.move2ts import MoveToTypeScriptTranspiler, main


def table_field(name: str, type_text: str) -> FieldDecl:
    return FieldDecl(name, parse_type_tag(type_text))


MARKET_MANIFEST = {
    'packages': [
        {
            'name': 'Std',
            'modules': [
                {'address': '0x1', 'name': 'Option', 'structs': []},
                {'address': '0x1', 'name': 'Table', 'structs': []},
                {'address': '0x1', 'name': 'IterableTable', 'structs': []},
            ],
        },
        {
            'name': 'Market',
            'modules': [
                {
                    'address': '0x2',
                    'name': 'Market',
                    'structs': [
                        {'name': 'Order', 'fields': [{'name': 'size', 'type': 'u64'}]},
                        {
                            'name': 'Book',
                            'fields': [
                                {'name': 'orders', 'type': '0x1::Table::Table<u64, 0x2::Market::Order>'},
                                {'name': 'new', 'type': '0x1::IterableTable::IterableTable<u64, address>'},
                            ],
                        },
                    ],
                },
                {'address': '0x2', 'name': 'Fees', 'structs': []},
            ],
        },
    ],
}


class TestSanitize(unittest.TestCase):
    """Test the ordered identifier rewrite rules."""

    def test_ordinary_identifier_unchanged(self):
        for name in ['Coin', 'balance', 'x_1', 'newer', 'Default']:
            self.assertEqual(sanitize(name), name)

    def test_reserved_words_get_suffix(self):
        self.assertEqual(sanitize('new'), 'new__')
        self.assertEqual(sanitize('default'), 'default__')
        self.assertEqual(sanitize('for'), 'for__')

    def test_temporaries_rewritten(self):
        self.assertEqual(sanitize('%#3'), 'temp$3')
        self.assertEqual(sanitize('%#'), 'temp$')

    def test_shadow_separator_replaced(self):
        self.assertEqual(sanitize('x#0'), 'x__0')
        self.assertEqual(sanitize('a#b#c'), 'a__b__c')

    def test_temporary_rule_wins_over_shadow_rule(self):
        self.assertEqual(sanitize('%#1#2'), 'temp$1#2')

    def test_sanitize_is_deterministic(self):
        self.assertEqual(sanitize('x#0'), sanitize('x#0'))

    def test_custom_reserved_words(self):
        config = NamingConfig(reserved_words=frozenset({'class', 'let'}))
        self.assertEqual(sanitize('class', config), 'class__')
        self.assertEqual(sanitize('new', config), 'new')

    def test_custom_markers(self):
        config = NamingConfig(temp_prefix='tmp_', shadow_replacement='_s')
        self.assertEqual(sanitize('%#7', config), 'tmp_7')
        self.assertEqual(sanitize('v#1', config), 'v_s1')

    def test_context_sanitize_records_rename(self):
        ctx = CodeGenerationContext()
        self.assertEqual(ctx.sanitize('for', 'A/index.ts'), 'for__')
        self.assertEqual(ctx.sanitize('Coin'), 'Coin')
        self.assertEqual(ctx.diagnostics.count, 1)
        self.assertEqual(ctx.diagnostics.diagnostics[0].code, 'I001')


class TestTypeTagParser(unittest.TestCase):
    """Test parsing of type tag strings."""

    def test_parse_primitive(self):
        self.assertEqual(parse_type_tag('u64'), PrimitiveTag('u64'))

    def test_parse_vector(self):
        self.assertEqual(parse_type_tag('vector<vector<u8>>'), VectorTag(VectorTag(PrimitiveTag('u8'))))

    def test_parse_parameterized_struct(self):
        tag = parse_type_tag('0x1::Table::Table<u64, 0x2::Coin::Coin<0x2::USD::USD>>')
        self.assertIsInstance(tag, StructTag)
        self.assertEqual(tag.get_paramless_name(), '0x1::Table::Table')
        self.assertEqual(len(tag.type_params), 2)
        self.assertEqual(tag.type_params[0], PrimitiveTag('u64'))
        self.assertEqual(tag.type_params[1].type_params[0], StructTag('0x2', 'USD', 'USD'))

    def test_fullname_is_canonical(self):
        tag = parse_type_tag('0x1::Table::Table< u64 ,vector<address> >')
        self.assertEqual(type_tag_fullname(tag), '0x1::Table::Table<u64, vector<address>>')

    def test_unterminated_params_rejected(self):
        with self.assertRaises(TypeTagParseError):
            parse_type_tag('0x1::Table::Table<u64, u8')

    def test_trailing_input_rejected(self):
        with self.assertRaises(TypeTagParseError):
            parse_type_tag('u64 u8')

    def test_incomplete_struct_rejected(self):
        with self.assertRaises(TypeTagParseError):
            parse_type_tag('0x1::Table')


class TestTableAccessor(unittest.TestCase):
    """Test generation-time validation of table fields."""

    def test_two_params_preserved_in_order(self):
        accessor = TableAccessor.from_field(table_field('items', '0x1::Table::Table<u64, address>'))
        self.assertEqual(accessor.key_tag, PrimitiveTag('u64'))
        self.assertEqual(accessor.value_tag, PrimitiveTag('address'))
        self.assertEqual(accessor.lookup_value_tag, PrimitiveTag('address'))

    def test_wrong_param_counts_rejected(self):
        for params, count in [('', 0), ('<u64>', 1), ('<u64, u8, bool>', 3)]:
            with self.subTest(count=count):
                with self.assertRaises(MalformedTypeShapeError) as cm:
                    TableAccessor.from_field(table_field('items', f'0x1::Table::Table{params}'))
                self.assertEqual(cm.exception.actual_params, count)
                self.assertEqual(cm.exception.expected_params, 2)
                self.assertIn('items', str(cm.exception))

    def test_wrong_qualified_name_rejected(self):
        with self.assertRaises(MalformedTypeShapeError) as cm:
            TableAccessor.from_field(table_field('coins', '0x1::Coin::Coin<u64, u8>'))
        self.assertEqual(cm.exception.actual_name, '0x1::Coin::Coin')
        self.assertIn('expected 0x1::Table::Table', str(cm.exception))

    def test_non_struct_rejected(self):
        with self.assertRaises(MalformedTypeShapeError) as cm:
            TableAccessor.from_field(table_field('raw', 'vector<u8>'))
        self.assertIsNone(cm.exception.actual_name)

    def test_iterable_accessor_derives_wrapper_tag(self):
        accessor = IterableTableAccessor.from_field(
            table_field('bids', '0x1::IterableTable::IterableTable<u64, bool>')
        )
        expected = StructTag('0x1', 'IterableTable', 'IterableValue', (PrimitiveTag('u64'), PrimitiveTag('bool')))
        self.assertEqual(accessor.iter_value_tag, expected)
        self.assertEqual(accessor.lookup_value_tag, expected)

    def test_iterable_accessor_rejects_plain_table(self):
        with self.assertRaises(MalformedTypeShapeError):
            IterableTableAccessor.from_field(table_field('bids', '0x1::Table::Table<u64, bool>'))

    def test_error_names_declaring_struct(self):
        with self.assertRaises(MalformedTypeShapeError) as cm:
            TableAccessor.from_field(
                table_field('items', '0x1::Table::Table<u64>'),
                owner='Book', module=ModuleIdentifier('0x2', 'Market'),
            )
        self.assertEqual(cm.exception.declared_in, '0x2::Market::Book')
        self.assertEqual(
            str(cm.exception),
            'Field "items" of 0x2::Market::Book: 0x1::Table::Table requires 2 type parameters, got 1',
        )


class TestTableAccessorEmitter(unittest.TestCase):
    """Test the TypedTable helper class and field alias files."""

    def setUp(self):
        self.ctx = CodeGenerationContext()
        self.emitter = TableAccessorEmitter(self.ctx)

    def test_helper_path_defaults_to_std_package(self):
        self.assertEqual(self.emitter.emit_helper().path, 'Std/Table.accessors.ts')

    def test_helper_class_shape(self):
        content = self.emitter.emit_helper().content
        self.assertIn('import * as $ from "@manahippo/move-to-ts";', content)
        self.assertIn('import { AptosClient } from "aptos";', content)
        self.assertIn("import { Table } from './Table';", content)
        self.assertIn('export class TypedTable<K, V> {', content)
        self.assertIn(
            '  static buildFromField<K, V>(table: Table, field: FieldDeclType): TypedTable<K, V> {',
            content,
        )
        self.assertIn("    if (tag.getParamlessName() !== '0x1::Table::Table') {", content)
        self.assertIn('    if (tag.typeParams.length !== 2) {', content)
        self.assertIn(
            '  constructor(public table: Table, public keyTag: TypeTag, public valueTag: TypeTag) {',
            content,
        )
        self.assertIn('  async loadEntryRaw(client: AptosClient, key: K): Promise<any> {', content)
        self.assertIn(
            '    return await client.getTableItem(this.table.handle.value.toString(), {\n'
            '      key_type: $.getTypeTagFullname(this.keyTag),\n'
            '      value_type: $.getTypeTagFullname(this.valueTag),\n'
            '      key: $.moveValueToOpenApiObject(key, this.keyTag),\n'
            '    });',
            content,
        )
        self.assertIn(
            '  async loadEntry(client: AptosClient, repo: AptosParserRepo, key: K): Promise<V> {',
            content,
        )
        self.assertNotIn('fetchAll', content)
        self.assertTrue(content.endswith('}\n'))

    def test_configured_table_name(self):
        ctx = CodeGenerationContext(table_name='0x3::Tables::Map')
        emitter = TableAccessorEmitter(ctx)
        generated = emitter.emit_helper()
        self.assertEqual(generated.path, 'Std/Tables.accessors.ts')
        self.assertIn("import { Map } from './Tables';", generated.content)
        self.assertIn("'0x3::Tables::Map'", generated.content)
        self.assertTrue(emitter.matches(table_field('m', '0x3::Tables::Map<u8, u8>')))
        self.assertFalse(emitter.matches(table_field('m', '0x1::Table::Table<u8, u8>')))

    def test_field_aliases(self):
        registry = ModuleRegistry()
        registry.discover_from_manifest(MARKET_MANIFEST)
        ctx = CodeGenerationContext.from_registry(registry)
        emitter = TableAccessorEmitter(ctx)
        accessor = emitter.build_accessor(
            table_field('orders', '0x1::Table::Table<u64, 0x2::Market::Order>'), owner='Book'
        )
        generated = emitter.emit_aliases('Market', ModuleIdentifier('0x2', 'Market'), [accessor])

        self.assertEqual(generated.path, 'Market/Market.tables.ts')
        self.assertEqual(generated.content, (
            'import { U64 } from "@manahippo/move-to-ts";\n'
            "import { TypedTable } from '../Std/Table.accessors';\n"
            "import * as Market$_ from './Market';\n"
            '\n'
            'export type Book$orders = TypedTable<U64, Market$_.Order>;\n'
        ))
        self.assertEqual(ctx.diagnostics.count, 0)

    def test_alias_for_unknown_struct_warns(self):
        accessor = self.emitter.build_accessor(
            table_field('for', '0x1::Table::Table<address, 0x9::Other::Thing>'), owner='Vault'
        )
        content = self.emitter.emit_aliases('Pkg', ModuleIdentifier('0x9', 'Vault'), [accessor]).content
        self.assertIn('import { HexString } from "aptos";', content)
        self.assertIn('export type Vault$for__ = TypedTable<HexString, any>;', content)
        codes = [d.code for d in self.ctx.diagnostics.diagnostics]
        self.assertIn('W002', codes)
        self.assertIn('I001', codes)

    def test_malformed_field_fails_emission(self):
        with self.assertRaises(MalformedTypeShapeError):
            self.emitter.build_accessor(table_field('items', '0x1::Table::Table<u64>'))

    def test_underscored_names_get_distinct_aliases(self):
        module = ModuleIdentifier('0x3', 'Shop')
        accessors = [
            self.emitter.build_accessor(table_field('c', '0x1::Table::Table<u8, u8>'), owner='A_b'),
            self.emitter.build_accessor(table_field('b_c', '0x1::Table::Table<u8, u8>'), owner='A'),
        ]
        content = self.emitter.emit_aliases('Shop', module, accessors).content
        self.assertIn('export type A_b$c = TypedTable<U8, U8>;', content)
        self.assertIn('export type A$b_c = TypedTable<U8, U8>;', content)

    def test_duplicate_alias_rejected(self):
        accessor = self.emitter.build_accessor(table_field('c', '0x1::Table::Table<u8, u8>'), owner='A')
        with self.assertRaises(DuplicateEntryError) as cm:
            self.emitter.emit_aliases('Shop', ModuleIdentifier('0x3', 'Shop'), [accessor, accessor])
        self.assertEqual(cm.exception.name, 'A$c')
        self.assertEqual(cm.exception.parent, 'Shop/Shop.tables.ts')


class TestIterableTableAccessorEmitter(unittest.TestCase):
    """Test the TypedIterableTable helper class."""

    def test_helper_class_shape(self):
        ctx = CodeGenerationContext()
        content = IterableTableAccessorEmitter(ctx).emit_helper().content
        self.assertIn('import { AptosClient, HexString } from "aptos";', content)
        self.assertIn("import { IterableTable, IterableValue } from './IterableTable';", content)
        self.assertIn("import * as Option$_ from './Option';", content)
        self.assertIn('export class TypedIterableTable<K, V> {', content)
        self.assertIn('  iterValueTag: StructTag;\n  constructor(', content)
        self.assertIn(
            '    this.iterValueTag = new StructTag(new HexString("0x1"), '
            '"IterableTable", "IterableValue", [keyTag, valueTag]);',
            content,
        )
        self.assertIn('this.table.inner.handle.value.toString()', content)
        self.assertIn('value_type: $.getTypeTagFullname(this.iterValueTag),', content)
        self.assertIn('Promise<IterableValue>', content)

    def test_fetch_all_walks_linked_list(self):
        ctx = CodeGenerationContext()
        content = IterableTableAccessorEmitter(ctx).emit_helper().content
        self.assertIn(
            '  async fetchAll(client: AptosClient, repo: AptosParserRepo): Promise<[K, V][]> {\n'
            '    const result: [K, V][] = [];\n'
            '    const cache = new $.DummyCache();\n'
            '    let next = this.table.head;\n'
            '    while (next && Option$_.is_some$(next, cache, [this.keyTag])) {\n'
            '      const key = Option$_.borrow$(next, cache, [this.keyTag]) as K;\n'
            '      const iterVal = await this.loadEntry(client, repo, key);\n'
            '      const value = iterVal.val as V;\n'
            '      result.push([key, value]);\n'
            '      next = iterVal.next;\n'
            '    }\n'
            '    return result;\n'
            '  }\n',
            content,
        )

    def test_unbounded_traversal_is_flagged(self):
        ctx = CodeGenerationContext()
        IterableTableAccessorEmitter(ctx).emit_helper()
        self.assertEqual([d.code for d in ctx.diagnostics.warnings], ['W001'])

    def test_bounded_traversal_guard(self):
        ctx = CodeGenerationContext(max_iterable_entries=1000)
        content = IterableTableAccessorEmitter(ctx).emit_helper().content
        self.assertIn('      if (result.length >= 1000) {', content)
        self.assertIn('throw new Error(`TypedIterableTable.fetchAll exceeded 1000 entries`);', content)
        self.assertEqual(ctx.diagnostics.count, 0)

    def test_option_module_located_through_registry(self):
        registry = ModuleRegistry()
        registry.discover_from_manifest({'packages': [
            {'name': 'Collections', 'modules': [{'address': '0x1', 'name': 'IterableTable'}]},
            {'name': 'Std', 'modules': [{'address': '0x1', 'name': 'Option'}]},
        ]})
        ctx = CodeGenerationContext.from_registry(registry)
        generated = IterableTableAccessorEmitter(ctx).emit_helper()
        self.assertEqual(generated.path, 'Collections/IterableTable.accessors.ts')
        self.assertIn("import * as Option$_ from '../Std/Option';", generated.content)


class TestModuleIndexAssembler(unittest.TestCase):
    """Test package index assembly."""

    def setUp(self):
        self.assembler = ModuleIndexAssembler(CodeGenerationContext())
        self.option = ModuleIdentifier('0x1', 'Option')
        self.vector = ModuleIdentifier('0x1', 'Vector')

    def test_exact_output(self):
        generated = self.assembler.assemble('Std', [self.option, self.vector])
        self.assertEqual(generated.path, 'Std/index.ts')
        self.assertEqual(generated.content, (
            'import { AptosParserRepo } from "@manahippo/move-to-ts";\n'
            "import * as Option$_ from './Option';\n"
            "import * as Vector$_ from './Vector';\n"
            '\n'
            "export * as Option$_ from './Option';\n"
            "export * as Vector$_ from './Vector';\n"
            '\n'
            'export function loadParsers(repo: AptosParserRepo) {\n'
            '  Option$_.loadParsers(repo);\n'
            '  Vector$_.loadParsers(repo);\n'
            '}\n'
            '\n'
            'export function getPackageRepo(): AptosParserRepo {\n'
            '  const repo = new AptosParserRepo();\n'
            '  loadParsers(repo);\n'
            '  repo.addDefaultParsers();\n'
            '  return repo;\n'
            '}\n'
        ))

    def test_repeated_assembly_is_byte_identical(self):
        first = self.assembler.assemble('Std', [self.option, self.vector])
        second = self.assembler.assemble('Std', [self.option, self.vector])
        self.assertEqual(first, second)

    def test_order_follows_input(self):
        forward = self.assembler.assemble('Std', [self.option, self.vector]).content
        reverse = self.assembler.assemble('Std', [self.vector, self.option]).content
        self.assertNotEqual(forward, reverse)
        self.assertEqual(sorted(forward.splitlines()), sorted(reverse.splitlines()))
        self.assertLess(reverse.index("import * as Vector$_"), reverse.index("import * as Option$_"))

    def test_imports_and_exports_match(self):
        source = self.assembler.build('Std', [self.vector, self.option])
        namespaces = [(i.namespace, i.source) for i in source.imports if i.namespace]
        exported = [(e.namespace, e.source) for e in source.exports]
        self.assertEqual(namespaces, exported)
        self.assertEqual(namespaces, [('Vector$_', './Vector'), ('Option$_', './Option')])
        self.assertEqual(
            source.find_function('loadParsers').body,
            ['Vector$_.loadParsers(repo);', 'Option$_.loadParsers(repo);'],
        )

    def test_reserved_module_name_is_sanitized(self):
        content = self.assembler.assemble('Pkg', [ModuleIdentifier('0x5', 'for')]).content
        self.assertIn("import * as for__$_ from './for';", content)
        self.assertIn('  for__$_.loadParsers(repo);', content)

    def test_duplicate_module_rejected(self):
        with self.assertRaises(DuplicateEntryError):
            self.assembler.assemble('Std', [self.option, ModuleIdentifier('0x1', 'Option')])

    def test_empty_package(self):
        content = self.assembler.assemble('Empty', []).content
        self.assertIn('export function loadParsers(repo: AptosParserRepo) {\n}\n', content)

    def test_companion_files_exported_without_parsers(self):
        source = self.assembler.build('Std', [self.option], ['Option.tables', 'Table.accessors'])
        namespaces = [(i.namespace, i.source) for i in source.imports if i.namespace]
        exported = [(e.namespace, e.source) for e in source.exports]
        self.assertEqual(namespaces, exported)
        self.assertEqual(namespaces, [
            ('Option$_', './Option'),
            ('Option$tables', './Option.tables'),
            ('Table$accessors', './Table.accessors'),
        ])
        self.assertEqual(source.find_function('loadParsers').body, ['Option$_.loadParsers(repo);'])

    def test_duplicate_companion_rejected(self):
        with self.assertRaises(DuplicateEntryError):
            self.assembler.assemble('Std', [self.option], ['Option.tables', 'Option.tables'])


class TestProjectIndexAssembler(unittest.TestCase):
    """Test project index assembly."""

    def test_exact_output(self):
        generated = ProjectIndexAssembler(CodeGenerationContext()).assemble(['Std', 'AptosFramework'])
        self.assertEqual(generated.path, 'index.ts')
        self.assertEqual(generated.content, (
            'import { AptosParserRepo } from "@manahippo/move-to-ts";\n'
            "import * as Std from './Std';\n"
            "import * as AptosFramework from './AptosFramework';\n"
            '\n'
            "export * as Std from './Std';\n"
            "export * as AptosFramework from './AptosFramework';\n"
            '\n'
            'export function getProjectRepo(): AptosParserRepo {\n'
            '  const repo = new AptosParserRepo();\n'
            '  Std.loadParsers(repo);\n'
            '  AptosFramework.loadParsers(repo);\n'
            '  repo.addDefaultParsers();\n'
            '  return repo;\n'
            '}\n'
        ))

    def test_duplicate_package_rejected(self):
        with self.assertRaises(DuplicateEntryError):
            ProjectIndexAssembler(CodeGenerationContext()).assemble(['Std', 'Std'])

    def test_custom_runtime_module(self):
        ctx = CodeGenerationContext(runtime_module='@acme/runtime')
        content = ProjectIndexAssembler(ctx).assemble(['Std']).content
        self.assertTrue(content.startswith('import { AptosParserRepo } from "@acme/runtime";\n'))


class TestSerializer(unittest.TestCase):
    """Test IR rendering rules."""

    def test_class_member_spacing(self):
        source = SourceFile([ClassDeclaration('Box', ('T',), [
            PropertyDeclaration('value', 'T'),
            ConstructorDeclaration([Parameter('value', 'T')], ['this.value = value;']),
            MethodDeclaration('get', return_type='T', body=['return this.value;']),
        ], exported=False)])
        self.assertEqual(TypeScriptSerializer().render(source), (
            'class Box<T> {\n'
            '  value: T;\n'
            '  constructor(value: T) {\n'
            '    this.value = value;\n'
            '  }\n'
            '\n'
            '  get(): T {\n'
            '    return this.value;\n'
            '  }\n'
            '}\n'
        ))

    def test_nested_blocks_and_footer(self):
        source = SourceFile([FunctionDeclaration('f', is_async=True, exported=False, body=[
            Block('if (x)', [Block('call(a,', ['b: 1,'], footer=');')]),
        ])])
        self.assertEqual(TypeScriptSerializer(indent_str='    ').render(source), (
            'async function f() {\n'
            '    if (x) {\n'
            '        call(a, {\n'
            '            b: 1,\n'
            '        });\n'
            '    }\n'
            '}\n'
        ))

    def test_import_quoting(self):
        source = SourceFile([
            ImportStatement('aptos', ('AptosClient',)),
            ImportStatement('./Coin', namespace='Coin$_'),
        ])
        self.assertEqual(TypeScriptSerializer().render(source), (
            'import { AptosClient } from "aptos";\n'
            "import * as Coin$_ from './Coin';\n"
        ))


class TestImportPaths(unittest.TestCase):
    """Test relative import path computation."""

    def test_same_directory(self):
        self.assertEqual(ImportGenerator.relative_import_path('Std/index.ts', 'Std/Option'), './Option')

    def test_sibling_package(self):
        self.assertEqual(
            ImportGenerator.relative_import_path('Market/Market.tables.ts', 'Std/Table.accessors'),
            '../Std/Table.accessors',
        )

    def test_from_root(self):
        self.assertEqual(ImportGenerator.relative_import_path('index.ts', 'Std'), './Std')


class TestModuleRegistry(unittest.TestCase):
    """Test manifest loading."""

    def test_manifest_order_preserved(self):
        registry = ModuleRegistry()
        registry.discover_from_manifest(MARKET_MANIFEST)
        self.assertEqual(registry.package_names, ['Std', 'Market'])
        self.assertEqual([m.name for m in registry.packages['Market'].modules], ['Market', 'Fees'])
        self.assertEqual(registry.package_of('0x2', 'Fees'), 'Market')
        self.assertIsNone(registry.package_of('0x3', 'Fees'))

    def test_field_types_parsed(self):
        registry = ModuleRegistry()
        registry.discover_from_manifest(MARKET_MANIFEST)
        book = registry.packages['Market'].modules[0].structs[1]
        self.assertEqual(book.fields[0].type_tag.get_paramless_name(), '0x1::Table::Table')

    def test_missing_packages_rejected(self):
        with self.assertRaises(ManifestError):
            ModuleRegistry().discover_from_manifest({})

    def test_missing_field_type_rejected(self):
        manifest = {'packages': [{'name': 'P', 'modules': [
            {'address': '0x1', 'name': 'M', 'structs': [{'name': 'S', 'fields': [{'name': 'f'}]}]},
        ]}]}
        with self.assertRaises(ManifestError):
            ModuleRegistry().discover_from_manifest(manifest)

    def test_duplicate_package_rejected(self):
        manifest = {'packages': [{'name': 'P'}, {'name': 'P'}]}
        with self.assertRaises(ManifestError):
            ModuleRegistry().discover_from_manifest(manifest)


class TestConfigLoading(unittest.TestCase):
    """Test generator settings read from JSON."""

    def test_settings_applied(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, 'move2ts.json')
            with open(path, 'w') as f:
                json.dump({
                    'reservedWords': ['new', 'class'],
                    'tempPrefix': 'tmp$',
                    'stdPackage': 'MoveStdlib',
                    'maxIterableEntries': 50,
                }, f)
            settings = CodeGenerationContext.load_settings(path)

        ctx = CodeGenerationContext(**settings)
        self.assertEqual(ctx.sanitize('class'), 'class__')
        self.assertEqual(ctx.sanitize('for'), 'for')
        self.assertEqual(ctx.sanitize('%#2'), 'tmp$2')
        self.assertEqual(ctx.std_package, 'MoveStdlib')
        self.assertEqual(ctx.max_iterable_entries, 50)

    def test_missing_file_gives_defaults(self):
        self.assertEqual(CodeGenerationContext.load_settings('/nonexistent/move2ts.json'), {})

    def test_invalid_json_reported(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, 'move2ts.json')
            with open(path, 'w') as f:
                f.write('{not json')
            self.assertEqual(CodeGenerationContext.load_settings(path), {})

    def write_config(self, tmp, config) -> str:
        path = os.path.join(tmp, 'move2ts.json')
        with open(path, 'w') as f:
            json.dump(config, f)
        return path

    def test_mistyped_values_skipped(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = self.write_config(tmp, {
                'reservedWords': 'class',
                'maxIterableEntries': '10x',
                'stdPackage': 'MoveStdlib',
            })
            out = io.StringIO()
            with contextlib.redirect_stdout(out):
                settings = CodeGenerationContext.load_settings(path)

        self.assertEqual(settings, {'std_package': 'MoveStdlib'})
        self.assertIn('Ignoring reservedWords', out.getvalue())
        self.assertIn('Ignoring maxIterableEntries', out.getvalue())

    def test_entry_limit_must_be_positive_integer(self):
        for value in [0, -5, True, 2.5, None]:
            with self.subTest(value=value):
                with tempfile.TemporaryDirectory() as tmp:
                    path = self.write_config(tmp, {'maxIterableEntries': value})
                    with contextlib.redirect_stdout(io.StringIO()):
                        self.assertEqual(CodeGenerationContext.load_settings(path), {})

    def test_non_object_config_ignored(self):
        for config in [5, ['new'], 'text']:
            with self.subTest(config=config):
                with tempfile.TemporaryDirectory() as tmp:
                    path = self.write_config(tmp, config)
                    with contextlib.redirect_stdout(io.StringIO()):
                        self.assertEqual(CodeGenerationContext.load_settings(path), {})


class TestTranspiler(unittest.TestCase):
    """Test whole-project generation."""

    def make_transpiler(self, manifest, **kwargs) -> MoveToTypeScriptTranspiler:
        transpiler = MoveToTypeScriptTranspiler(**kwargs)
        transpiler.registry.discover_from_manifest(manifest)
        return transpiler

    def test_generated_paths(self):
        files = self.make_transpiler(MARKET_MANIFEST).generate()
        self.assertEqual([f.path for f in files], [
            'Std/index.ts',
            'Market/Market.tables.ts',
            'Market/index.ts',
            'Std/Table.accessors.ts',
            'Std/IterableTable.accessors.ts',
            'index.ts',
        ])

    def test_mixed_aliases_import_each_helper(self):
        files = {f.path: f.content for f in self.make_transpiler(MARKET_MANIFEST).generate()}
        content = files['Market/Market.tables.ts']
        self.assertIn("import { TypedIterableTable } from '../Std/IterableTable.accessors';", content)
        self.assertIn("import { TypedTable } from '../Std/Table.accessors';", content)
        self.assertIn('export type Book$new__ = TypedIterableTable<U64, HexString>;', content)

    def test_malformed_field_aborts_generation(self):
        manifest = {'packages': [{'name': 'P', 'modules': [{
            'address': '0x4', 'name': 'M',
            'structs': [{'name': 'S', 'fields': [{'name': 'bad', 'type': '0x1::Table::Table<u64>'}]}],
        }]}]}
        with self.assertRaises(MalformedTypeShapeError) as cm:
            self.make_transpiler(manifest).generate()
        self.assertIn('Field "bad" of 0x4::M::S:', str(cm.exception))

    def test_accessor_files_wired_into_package_indexes(self):
        files = {f.path: f.content for f in self.make_transpiler(MARKET_MANIFEST).generate()}
        std_index = files['Std/index.ts']
        for stem in ['Table.accessors', 'IterableTable.accessors']:
            alias = stem.replace('.', '$')
            self.assertIn(f"import * as {alias} from './{stem}';", std_index)
            self.assertIn(f"export * as {alias} from './{stem}';", std_index)
            self.assertNotIn(f'{alias}.loadParsers', std_index)

        market_index = files['Market/index.ts']
        self.assertIn("import * as Market$tables from './Market.tables';", market_index)
        self.assertIn("export * as Market$tables from './Market.tables';", market_index)
        self.assertNotIn('Market$tables.loadParsers', market_index)
        self.assertNotIn('Fees$tables', market_index)

    def test_helper_outside_manifest_is_flagged(self):
        manifest = {'packages': [{'name': 'Market', 'modules': [{
            'address': '0x2', 'name': 'Market',
            'structs': [{'name': 'Book', 'fields': [
                {'name': 'orders', 'type': '0x1::Table::Table<u64, u64>'},
            ]}],
        }]}]}
        transpiler = self.make_transpiler(manifest)
        files = {f.path: f.content for f in transpiler.generate()}
        self.assertIn('Std/Table.accessors.ts', files)
        self.assertNotIn('Std/index.ts', files)
        self.assertIn('W003', [d.code for d in transpiler.diagnostics.warnings])

    def test_transpile_places_sources_under_src(self):
        with tempfile.TemporaryDirectory() as tmp:
            results = self.make_transpiler(MARKET_MANIFEST, output_dir=tmp, project_name='market').transpile()
            self.assertIn(os.path.join(tmp, 'src', 'index.ts'), results)
            package_json = json.loads(results[os.path.join(tmp, 'package.json')])
            self.assertEqual(package_json['name'], 'market')
            self.assertIn(os.path.join(tmp, 'tsconfig.json'), results)

    def test_cli_writes_files(self):
        with tempfile.TemporaryDirectory() as tmp:
            manifest_path = os.path.join(tmp, 'manifest.json')
            with open(manifest_path, 'w') as f:
                json.dump(MARKET_MANIFEST, f)
            out_dir = os.path.join(tmp, 'out')

            exit_code = main([manifest_path, '-o', out_dir, '--no-scaffold'])

            self.assertEqual(exit_code, 0)
            self.assertTrue(os.path.exists(os.path.join(out_dir, 'index.ts')))
            self.assertTrue(os.path.exists(os.path.join(out_dir, 'Market', 'index.ts')))
            self.assertFalse(os.path.exists(os.path.join(out_dir, 'package.json')))

    def test_cli_reports_malformed_manifest(self):
        with tempfile.TemporaryDirectory() as tmp:
            manifest_path = os.path.join(tmp, 'manifest.json')
            with open(manifest_path, 'w') as f:
                f.write('[]')
            self.assertEqual(main([manifest_path, '-o', tmp]), 1)

    def test_cli_ignores_non_object_config(self):
        with tempfile.TemporaryDirectory() as tmp:
            manifest_path = os.path.join(tmp, 'manifest.json')
            with open(manifest_path, 'w') as f:
                json.dump(MARKET_MANIFEST, f)
            config_path = os.path.join(tmp, 'move2ts.json')
            with open(config_path, 'w') as f:
                f.write('5')
            out_dir = os.path.join(tmp, 'out')

            with contextlib.redirect_stdout(io.StringIO()):
                exit_code = main([manifest_path, '-o', out_dir, '-c', config_path, '--no-scaffold'])

            self.assertEqual(exit_code, 0)
            self.assertTrue(os.path.exists(os.path.join(out_dir, 'index.ts')))


class TestDiagnostics(unittest.TestCase):
    """Test the diagnostics system."""

    def test_summary_groups_warnings(self):
        diag = TranspilerDiagnostics()
        diag.warn_unbounded_traversal('TypedIterableTable', 'Std/IterableTable.accessors.ts')
        diag.warn_untyped_parameter('items', '0x9::X::Y')
        diag.info_identifier_renamed('new', 'new__')
        self.assertEqual(diag.count, 3)
        self.assertEqual(len(diag.warnings), 2)
        self.assertEqual(diag.get_summary(), 'Transpiler warnings: 1 iterable-table, 1 type-mapping')

    def test_no_warnings(self):
        diag = TranspilerDiagnostics()
        diag.info_identifier_renamed('new', 'new__')
        self.assertEqual(diag.get_summary(), 'No transpiler warnings.')

    def test_print_summary_verbose(self):
        diag = TranspilerDiagnostics(verbose=True)
        diag.warn_unbounded_traversal('TypedIterableTable', 'Std/IterableTable.accessors.ts')
        out = io.StringIO()
        diag.print_summary(file=out)
        self.assertIn('iterable-table: 1 occurrence(s)', out.getvalue())
        self.assertIn('[warning] Std/IterableTable.accessors.ts:', out.getvalue())

    def test_clear(self):
        diag = TranspilerDiagnostics()
        diag.warn_untyped_parameter('items', 'any')
        diag.clear()
        self.assertEqual(diag.count, 0)


if __name__ == '__main__':
    unittest.main()
