"""
Table accessor emission for Move to TypeScript transpilation.

Move tables live on chain behind a handle; clients read them one item at a
time. This module emits the generic TypeScript accessor classes for
``Table<K, V>`` and for the linked-list-backed ``IterableTable<K, V>``, and
per-module type aliases binding those classes to concrete struct fields.

Every accessor is validated when it is built: the field must carry the
expected struct type with exactly two type parameters, otherwise a
MalformedTypeShapeError aborts the emission.
"""

import re
from dataclasses import dataclass
from typing import ClassVar, List, Optional, Sequence, Set, Tuple, TYPE_CHECKING

if TYPE_CHECKING:
    from .context import CodeGenerationContext

from ..errors import DuplicateEntryError, MalformedTypeShapeError
from ..type_system import (
    FieldDecl,
    ModuleIdentifier,
    StructTag,
    TypeTag,
    move_type_to_ts,
    split_qualified_name,
    type_tag_fullname,
)
from .base import BaseGenerator, GeneratedFile
from .imports import ImportGenerator
from .ir import (
    Block,
    ClassDeclaration,
    ConstructorDeclaration,
    ImportStatement,
    MethodDeclaration,
    Parameter,
    PropertyDeclaration,
    SourceFile,
    Statement,
    TypeAlias,
)


TABLE_NAME = '0x1::Table::Table'
ITERABLE_TABLE_NAME = '0x1::IterableTable::IterableTable'

TABLE_TYPE_PARAMS = 2

_ANY_RE = re.compile(r'\bany\b')


# =============================================================================
# ACCESSOR DESCRIPTORS
# =============================================================================

def _table_type_params(
    field: FieldDecl,
    qualified_name: str,
    declared_in: str = '',
) -> Tuple[TypeTag, TypeTag]:
    """Check a field's tag has the container shape and return its (key, value) tags."""
    tag = field.type_tag
    if not isinstance(tag, StructTag):
        raise MalformedTypeShapeError(field.name, qualified_name, declared_in=declared_in)
    actual_name = tag.get_paramless_name()
    if actual_name != qualified_name:
        raise MalformedTypeShapeError(field.name, qualified_name, actual_name, declared_in=declared_in)
    if len(tag.type_params) != TABLE_TYPE_PARAMS:
        raise MalformedTypeShapeError(
            field.name, qualified_name, actual_name,
            expected_params=TABLE_TYPE_PARAMS,
            actual_params=len(tag.type_params),
            declared_in=declared_in,
        )
    key_tag, value_tag = tag.type_params
    return key_tag, value_tag


@dataclass(frozen=True)
class TableAccessor:
    """A validated Table field: its owner, name and key/value tags."""
    field_name: str
    key_tag: TypeTag
    value_tag: TypeTag
    qualified_name: str = TABLE_NAME
    owner: str = ''

    class_name: ClassVar[str] = 'TypedTable'
    default_qualified_name: ClassVar[str] = TABLE_NAME

    @classmethod
    def from_field(
        cls,
        field: FieldDecl,
        qualified_name: Optional[str] = None,
        owner: str = '',
        module: Optional[ModuleIdentifier] = None,
    ) -> 'TableAccessor':
        """Build an accessor, raising MalformedTypeShapeError on a bad tag.

        ``owner`` and ``module`` only locate the field in error messages.
        """
        qualified_name = qualified_name or cls.default_qualified_name
        declared_in = '::'.join(part for part in (str(module) if module else '', owner) if part)
        key_tag, value_tag = _table_type_params(field, qualified_name, declared_in)
        return cls(field.name, key_tag, value_tag, qualified_name, owner)

    @property
    def lookup_value_tag(self) -> TypeTag:
        """Value type passed to table item lookups."""
        return self.value_tag


@dataclass(frozen=True)
class IterableTableAccessor(TableAccessor):
    """
    A validated IterableTable field.

    The table stores ``IterableValue<K, V>`` (the value plus the next key)
    rather than bare values, so lookups use the derived wrapper tag.
    """
    qualified_name: str = ITERABLE_TABLE_NAME

    class_name: ClassVar[str] = 'TypedIterableTable'
    default_qualified_name: ClassVar[str] = ITERABLE_TABLE_NAME

    @property
    def iter_value_tag(self) -> StructTag:
        address, module, _ = split_qualified_name(self.qualified_name)
        return StructTag(address, module, 'IterableValue', (self.key_tag, self.value_tag))

    @property
    def lookup_value_tag(self) -> TypeTag:
        return self.iter_value_tag


# =============================================================================
# EMITTERS
# =============================================================================

class TableAccessorEmitter(BaseGenerator):
    """
    Emits the TypedTable helper class and per-module field aliases.

    Output files:
    - ``<container package>/<container module>.accessors.ts``: the generic class
    - ``<package>/<module>.tables.ts``: one type alias per table field
    """

    accessor_cls = TableAccessor

    def __init__(self, ctx: 'CodeGenerationContext'):
        super().__init__(ctx)
        self._imports = ImportGenerator(ctx)

    @property
    def qualified_name(self) -> str:
        return self._ctx.table_name

    @property
    def class_name(self) -> str:
        return self.accessor_cls.class_name

    @property
    def container(self) -> Tuple[str, str, str]:
        """(address, module, struct) of the container type."""
        return split_qualified_name(self.qualified_name)

    def helper_path(self, qualified_name: Optional[str] = None) -> str:
        """Output path of the helper class for a container type (default: this one)."""
        address, module, _ = split_qualified_name(qualified_name or self.qualified_name)
        return f'{self._imports.module_path(address, module)}.accessors.ts'

    # =========================================================================
    # ACCESSORS
    # =========================================================================

    def matches(self, field: FieldDecl) -> bool:
        """Whether a field is declared with this emitter's container type."""
        tag = field.type_tag
        return isinstance(tag, StructTag) and tag.get_paramless_name() == self.qualified_name

    def build_accessor(
        self,
        field: FieldDecl,
        owner: str = '',
        module: Optional[ModuleIdentifier] = None,
    ) -> TableAccessor:
        return self.accessor_cls.from_field(field, self.qualified_name, owner, module)

    # =========================================================================
    # HELPER CLASS
    # =========================================================================

    def emit_helper(self) -> GeneratedFile:
        """Emit the generic accessor class file."""
        path = self.helper_path()
        return self.make_file(path, self.build_helper(path))

    def build_helper(self, path: str) -> SourceFile:
        _, module, struct = self.container
        nodes = self._library_imports()
        nodes.append(ImportStatement(f'./{module}', self._container_imports(struct)))
        nodes.extend(self._extra_imports(path))
        nodes.append(ClassDeclaration(
            name=self.class_name,
            type_params=('K', 'V'),
            members=self._class_members(),
        ))
        return SourceFile(nodes)

    def _library_imports(self) -> List[ImportStatement]:
        nodes = [self._imports.runtime_namespace_import()]
        nodes.extend(self._imports.library_imports(
            ['AptosClient', 'AptosParserRepo', 'FieldDeclType', 'StructTag', 'TypeTag']
        ))
        return nodes

    def _container_imports(self, struct: str) -> Tuple[str, ...]:
        return (struct,)

    def _extra_imports(self, path: str) -> List[ImportStatement]:
        return []

    def _class_members(self) -> list:
        return [
            self._build_from_field(),
            self._constructor(),
            self._load_entry_raw(),
            self._load_entry(),
        ]

    def _table_handle(self) -> str:
        return 'this.table.handle.value.toString()'

    def _build_from_field(self) -> MethodDeclaration:
        _, _, struct = self.container
        cls = self.class_name
        return MethodDeclaration(
            name='buildFromField',
            type_params=('K', 'V'),
            params=[Parameter('table', struct), Parameter('field', 'FieldDeclType')],
            return_type=f'{cls}<K, V>',
            is_static=True,
            body=[
                'const tag = field.typeTag;',
                Block('if (!(tag instanceof StructTag))', [
                    f'throw new Error(`Field ${{field.name}} is not a struct type, '
                    f'expected {self.qualified_name}`);',
                ]),
                Block(f"if (tag.getParamlessName() !== '{self.qualified_name}')", [
                    f'throw new Error(`Field ${{field.name}} is ${{tag.getParamlessName()}}, '
                    f'expected {self.qualified_name}`);',
                ]),
                Block(f'if (tag.typeParams.length !== {TABLE_TYPE_PARAMS})', [
                    f'throw new Error(`Field ${{field.name}} has ${{tag.typeParams.length}} '
                    f'type parameters, expected {TABLE_TYPE_PARAMS}`);',
                ]),
                'const [keyTag, valueTag] = tag.typeParams;',
                f'return new {cls}<K, V>(table, keyTag, valueTag);',
            ],
        )

    def _constructor(self) -> ConstructorDeclaration:
        _, _, struct = self.container
        return ConstructorDeclaration(params=[
            Parameter('table', struct, 'public'),
            Parameter('keyTag', 'TypeTag', 'public'),
            Parameter('valueTag', 'TypeTag', 'public'),
        ])

    def _value_tag_expr(self) -> str:
        return 'this.valueTag'

    def _load_entry_raw(self) -> MethodDeclaration:
        return MethodDeclaration(
            name='loadEntryRaw',
            params=[Parameter('client', 'AptosClient'), Parameter('key', 'K')],
            return_type='Promise<any>',
            is_async=True,
            body=[Block(f'return await client.getTableItem({self._table_handle()},', [
                'key_type: $.getTypeTagFullname(this.keyTag),',
                f'value_type: $.getTypeTagFullname({self._value_tag_expr()}),',
                'key: $.moveValueToOpenApiObject(key, this.keyTag),',
            ], footer=');')],
        )

    def _load_entry(self) -> MethodDeclaration:
        return MethodDeclaration(
            name='loadEntry',
            params=[
                Parameter('client', 'AptosClient'),
                Parameter('repo', 'AptosParserRepo'),
                Parameter('key', 'K'),
            ],
            return_type='Promise<V>',
            is_async=True,
            body=[
                'const rawVal = await this.loadEntryRaw(client, key);',
                f'return repo.parse(rawVal.data, {self._value_tag_expr()}) as V;',
            ],
        )

    # =========================================================================
    # FIELD ALIASES
    # =========================================================================

    def alias_name(self, accessor: TableAccessor, location: str = '') -> str:
        """``<Owner>$<field>``; Move identifiers never contain ``$``."""
        field_name = self.sanitize(accessor.field_name, location)
        if accessor.owner:
            return f'{self.sanitize(accessor.owner, location)}${field_name}'
        return field_name

    def emit_aliases(
        self,
        package_name: str,
        module: ModuleIdentifier,
        accessors: Sequence[TableAccessor],
    ) -> GeneratedFile:
        """Emit ``<package>/<module>.tables.ts`` with one typed alias per accessor."""
        path = f'{package_name}/{module.name}.tables.ts'
        used_runtime: Set[str] = set()
        used_modules: Set[Tuple[str, str]] = set()
        aliases: List[TypeAlias] = []
        alias_names: Set[str] = set()

        for accessor in accessors:
            alias = self.alias_name(accessor, path)
            if alias in alias_names:
                raise DuplicateEntryError('type alias', alias, path)
            alias_names.add(alias)
            key_ts = self._ts_type(accessor, accessor.key_tag, used_runtime, used_modules, path)
            value_ts = self._ts_type(accessor, accessor.value_tag, used_runtime, used_modules, path)
            aliases.append(TypeAlias(
                name=alias,
                value=f'{accessor.class_name}<{key_ts}, {value_ts}>',
            ))

        nodes: list = self._imports.library_imports(used_runtime)
        helpers: dict = {}
        for accessor in accessors:
            helper_target = self.helper_path(accessor.qualified_name)[:-len('.ts')]
            helpers.setdefault(helper_target, set()).add(accessor.class_name)
        for helper_target, class_names in sorted(helpers.items()):
            nodes.append(ImportStatement(
                self._imports.relative_import_path(path, helper_target),
                tuple(sorted(class_names)),
            ))
        # Aliases must match the ones move_type_to_ts wrote into the types
        for address, module_name in sorted(used_modules):
            nodes.append(self._imports.module_namespace_import(path, address, module_name))
        nodes.extend(aliases)
        return self.make_file(path, SourceFile(nodes))

    def _ts_type(self, accessor, tag, used_runtime, used_modules, location) -> str:
        ts_type = move_type_to_ts(tag, self._ctx.known_modules, used_runtime, used_modules)
        if _ANY_RE.search(ts_type):
            self._ctx.diagnostics.warn_untyped_parameter(
                accessor.field_name, type_tag_fullname(tag), location
            )
        return ts_type


class IterableTableAccessorEmitter(TableAccessorEmitter):
    """
    Emits the TypedIterableTable helper class.

    Adds ``fetchAll``, which walks the table's linked list from its head,
    one sequential lookup per entry.
    """

    accessor_cls = IterableTableAccessor

    @property
    def qualified_name(self) -> str:
        return self._ctx.iterable_table_name

    def emit_helper(self) -> GeneratedFile:
        path = self.helper_path()
        if self._ctx.max_iterable_entries is None:
            self._ctx.diagnostics.warn_unbounded_traversal(self.class_name, path)
        return self.make_file(path, self.build_helper(path))

    def _option_alias(self) -> str:
        return self.module_alias('Option')

    def _container_imports(self, struct: str) -> Tuple[str, ...]:
        return (struct, 'IterableValue')

    def _extra_imports(self, path: str) -> List[ImportStatement]:
        address, _, _ = self.container
        return [
            self._imports.module_namespace_import(path, address, 'Option', self._option_alias()),
        ]

    def _class_members(self) -> list:
        return [
            self._build_from_field(),
            PropertyDeclaration('iterValueTag', 'StructTag'),
            self._constructor(),
            self._load_entry_raw(),
            self._load_entry(),
            self._fetch_all(),
        ]

    def _constructor(self) -> ConstructorDeclaration:
        address, module, _ = self.container
        ctor = super()._constructor()
        ctor.body = [
            f'this.iterValueTag = new StructTag(new HexString("{address}"), '
            f'"{module}", "IterableValue", [keyTag, valueTag]);',
        ]
        return ctor

    def _library_imports(self) -> List[ImportStatement]:
        nodes = [self._imports.runtime_namespace_import()]
        nodes.extend(self._imports.library_imports(
            ['AptosClient', 'HexString', 'AptosParserRepo', 'FieldDeclType', 'StructTag', 'TypeTag']
        ))
        return nodes

    def _table_handle(self) -> str:
        return 'this.table.inner.handle.value.toString()'

    def _value_tag_expr(self) -> str:
        return 'this.iterValueTag'

    def _load_entry(self) -> MethodDeclaration:
        method = super()._load_entry()
        method.return_type = 'Promise<IterableValue>'
        method.body[-1] = f'return repo.parse(rawVal.data, {self._value_tag_expr()}) as IterableValue;'
        return method

    def _fetch_all(self) -> MethodDeclaration:
        option = self._option_alias()
        loop: List[Statement] = []
        limit = self._ctx.max_iterable_entries
        if limit is not None:
            loop.append(Block(f'if (result.length >= {limit})', [
                f'throw new Error(`{self.class_name}.fetchAll exceeded {limit} entries`);',
            ]))
        loop.extend([
            f'const key = {option}.borrow$(next, cache, [this.keyTag]) as K;',
            'const iterVal = await this.loadEntry(client, repo, key);',
            'const value = iterVal.val as V;',
            'result.push([key, value]);',
            'next = iterVal.next;',
        ])
        return MethodDeclaration(
            name='fetchAll',
            params=[Parameter('client', 'AptosClient'), Parameter('repo', 'AptosParserRepo')],
            return_type='Promise<[K, V][]>',
            is_async=True,
            body=[
                'const result: [K, V][] = [];',
                'const cache = new $.DummyCache();',
                'let next = this.table.head;',
                Block(f'while (next && {option}.is_some$(next, cache, [this.keyTag]))', loop),
                'return result;',
            ],
        )
