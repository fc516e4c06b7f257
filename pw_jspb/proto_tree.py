# Copyright 2026 The Pigweed Authors
#
# Licensed under the Apache License, Version 2.0 (the "License"); you may not
# use this file except in compliance with the License. You may obtain a copy of
# the License at
#
#     https://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS, WITHOUT
# WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied. See the
# License for the specific language governing permissions and limitations under
# the License.
"""This module defines data structures for protobuf entities."""

import abc
import collections
import enum
from typing import Callable, Iterable, Iterator, TypeVar
from typing import cast

from google.protobuf import descriptor_pb2

T = TypeVar('T')  # pylint: disable=invalid-name

_FieldProto = descriptor_pb2.FieldDescriptorProto

# Field numbers of the key and value fields in a map entry message.
MAP_KEY_FIELD = 1
MAP_VALUE_FIELD = 2

# Extensions of the types in these files are never generated.
DESCRIPTOR_PROTO_FILES = frozenset(
    (
        'google/protobuf/descriptor.proto',
        'net/proto2/proto/descriptor.proto',
    )
)


class Syntax(enum.Enum):
    PROTO2 = 'proto2'
    PROTO3 = 'proto3'


class CppType(enum.Enum):
    """The in-memory category of a field's value.

    This is orthogonal to the field's declared type: sint32, sfixed32 and int32
    are all INT32, while string and bytes are both STRING.
    """

    INT32 = 1
    INT64 = 2
    UINT32 = 3
    UINT64 = 4
    DOUBLE = 5
    FLOAT = 6
    BOOL = 7
    ENUM = 8
    STRING = 9
    MESSAGE = 10


_CPP_TYPES: dict[int, CppType] = {
    _FieldProto.TYPE_DOUBLE: CppType.DOUBLE,
    _FieldProto.TYPE_FLOAT: CppType.FLOAT,
    _FieldProto.TYPE_INT64: CppType.INT64,
    _FieldProto.TYPE_UINT64: CppType.UINT64,
    _FieldProto.TYPE_INT32: CppType.INT32,
    _FieldProto.TYPE_FIXED64: CppType.UINT64,
    _FieldProto.TYPE_FIXED32: CppType.UINT32,
    _FieldProto.TYPE_BOOL: CppType.BOOL,
    _FieldProto.TYPE_STRING: CppType.STRING,
    _FieldProto.TYPE_GROUP: CppType.MESSAGE,
    _FieldProto.TYPE_MESSAGE: CppType.MESSAGE,
    _FieldProto.TYPE_BYTES: CppType.STRING,
    _FieldProto.TYPE_UINT32: CppType.UINT32,
    _FieldProto.TYPE_ENUM: CppType.ENUM,
    _FieldProto.TYPE_SFIXED32: CppType.INT32,
    _FieldProto.TYPE_SFIXED64: CppType.INT64,
    _FieldProto.TYPE_SINT32: CppType.INT32,
    _FieldProto.TYPE_SINT64: CppType.INT64,
}

# The lowercase .proto spelling of each declared field type.
_TYPE_NAMES: dict[int, str] = {
    _FieldProto.TYPE_DOUBLE: 'double',
    _FieldProto.TYPE_FLOAT: 'float',
    _FieldProto.TYPE_INT64: 'int64',
    _FieldProto.TYPE_UINT64: 'uint64',
    _FieldProto.TYPE_INT32: 'int32',
    _FieldProto.TYPE_FIXED64: 'fixed64',
    _FieldProto.TYPE_FIXED32: 'fixed32',
    _FieldProto.TYPE_BOOL: 'bool',
    _FieldProto.TYPE_STRING: 'string',
    _FieldProto.TYPE_GROUP: 'group',
    _FieldProto.TYPE_MESSAGE: 'message',
    _FieldProto.TYPE_BYTES: 'bytes',
    _FieldProto.TYPE_UINT32: 'uint32',
    _FieldProto.TYPE_ENUM: 'enum',
    _FieldProto.TYPE_SFIXED32: 'sfixed32',
    _FieldProto.TYPE_SFIXED64: 'sfixed64',
    _FieldProto.TYPE_SINT32: 'sint32',
    _FieldProto.TYPE_SINT64: 'sint64',
}

_NON_PACKABLE_TYPES = frozenset(
    (
        _FieldProto.TYPE_STRING,
        _FieldProto.TYPE_GROUP,
        _FieldProto.TYPE_MESSAGE,
        _FieldProto.TYPE_BYTES,
    )
)


class ProtoNode(abc.ABC):
    """A ProtoNode represents a named scope in the global proto namespace.

    Nodes form a tree beginning at a top-level (global) scope, descending into a
    hierarchy of .proto packages and the messages and enums defined within them.
    Packages are shared by every file that declares them.
    """

    class Type(enum.Enum):
        """The type of a ProtoNode.

        PACKAGE maps to a segment of the generated JavaScript namespace.
        MESSAGE maps to a jspb.Message subclass.
        ENUM maps to an object literal of named numeric constants.
        """

        PACKAGE = 1
        MESSAGE = 2
        ENUM = 3

    def __init__(self, name: str):
        self._name: str = name
        self._children: dict[str, 'ProtoNode'] = collections.OrderedDict()
        self._parent: 'ProtoNode | None' = None

    @abc.abstractmethod
    def type(self) -> 'ProtoNode.Type':
        """The type of the node."""

    def children(self) -> list['ProtoNode']:
        return list(self._children.values())

    def name(self) -> str:
        return self._name

    def full_name(self) -> str:
        """Fully-qualified .proto path of the node, e.g. pkg.Outer.Inner."""
        path = '.'.join(self._attr_hierarchy(lambda node: node.name(), None))
        return path.lstrip('.')

    def add_child(self, child: 'ProtoNode') -> None:
        """Inserts a new node into the tree as a child of this node.

        Args:
          child: The node to insert.

        Raises:
          ValueError: This node does not allow nesting the given type of child.
        """
        if not self._supports_child(child):
            raise ValueError(
                'Invalid child %s for node of type %s'
                % (child.type(), self.type())
            )

        # pylint: disable=protected-access
        if child._parent is not None:
            del child._parent._children[child.name()]

        child._parent = self
        self._children[child.name()] = child
        # pylint: enable=protected-access

    def find(self, path: str) -> 'ProtoNode | None':
        """Finds a node within this node's subtree."""
        node = self

        # pylint: disable=protected-access
        for section in path.split('.'):
            child = node._children.get(section)
            if child is None:
                return None
            node = child
        # pylint: enable=protected-access

        return node

    def parent(self) -> 'ProtoNode | None':
        return self._parent

    def __repr__(self) -> str:
        return f'{self.__class__.__name__}({self.full_name()!r})'

    def _attr_hierarchy(
        self,
        attr_accessor: Callable[['ProtoNode'], T],
        root: 'ProtoNode | None',
    ) -> Iterator[T]:
        """Fetches node attributes at each level of the tree from the root.

        Args:
          attr_accessor: Function which extracts attributes from a ProtoNode.
          root: The node at which to terminate.

        Returns:
          An iterator to a list of the selected attributes from the root to the
          current node.
        """
        hierarchy = []
        node: 'ProtoNode | None' = self
        while node is not None and node != root:
            hierarchy.append(attr_accessor(node))
            node = node.parent()
        return reversed(hierarchy)

    @abc.abstractmethod
    def _supports_child(self, child: 'ProtoNode') -> bool:
        """Returns True if child is a valid child type for the current node."""


class ProtoPackage(ProtoNode):
    """A protobuf package."""

    def type(self) -> ProtoNode.Type:
        return ProtoNode.Type.PACKAGE

    def _supports_child(self, child: ProtoNode) -> bool:
        return True


class _DeclaredNode(ProtoNode):
    """A message or enum declared in a specific .proto file."""

    def __init__(self, name: str, proto_file: 'ProtoFile'):
        super().__init__(name)
        self._file = proto_file

    def file(self) -> 'ProtoFile':
        return self._file

    def containing_type(self) -> 'ProtoMessage | None':
        """The message in which this node is nested, if any."""
        parent = self.parent()
        if parent is not None and parent.type() == ProtoNode.Type.MESSAGE:
            return cast(ProtoMessage, parent)
        return None

    def nested_name(self) -> str:
        """The name of the node relative to its file's package.

        For example, "Outer.Inner" for the message pkg.Outer.Inner.
        """
        names = []
        node: ProtoNode | None = self
        while isinstance(node, _DeclaredNode):
            names.append(node.name())
            node = node.parent()
        return '.'.join(reversed(names))


class ProtoEnum(_DeclaredNode):
    """Representation of an enum in a .proto file."""

    def __init__(
        self, name: str, proto_file: 'ProtoFile', allow_alias: bool = False
    ):
        super().__init__(name, proto_file)
        self._values: list[tuple[str, int]] = []
        self._allow_alias = allow_alias

    def type(self) -> ProtoNode.Type:
        return ProtoNode.Type.ENUM

    def values(self) -> list[tuple[str, int]]:
        return list(self._values)

    def add_value(self, name: str, value: int) -> None:
        self._values.append((name, value))

    def allow_alias(self) -> bool:
        return self._allow_alias

    def value_number(self, name: str) -> int:
        """Returns the number of the enum value with the given name."""
        for value_name, number in self._values:
            if value_name == name:
                return number
        raise ValueError(f'Enum {self.full_name()} has no value {name}')

    def _supports_child(self, child: ProtoNode) -> bool:
        # Enums cannot have nested children.
        return False


class ProtoMessage(_DeclaredNode):
    """Representation of a message in a .proto file."""

    def __init__(
        self,
        name: str,
        proto_file: 'ProtoFile',
        extendable: bool = False,
        map_entry: bool = False,
        message_set_wire_format: bool = False,
    ):
        super().__init__(name, proto_file)
        self._fields: list['ProtoMessageField'] = []
        self._oneofs: list['ProtoOneof'] = []
        self._extensions: list['ProtoMessageField'] = []
        self._extendable = extendable
        self._map_entry = map_entry
        self._message_set_wire_format = message_set_wire_format

    def type(self) -> ProtoNode.Type:
        return ProtoNode.Type.MESSAGE

    def fields(self) -> list['ProtoMessageField']:
        return list(self._fields)

    def add_field(self, field: 'ProtoMessageField') -> None:
        self._fields.append(field)

    def find_field_by_number(self, number: int) -> 'ProtoMessageField | None':
        for field in self._fields:
            if field.number() == number:
                return field
        return None

    def oneofs(self) -> list['ProtoOneof']:
        return list(self._oneofs)

    def add_oneof(self, oneof: 'ProtoOneof') -> None:
        self._oneofs.append(oneof)

    def extensions(self) -> list['ProtoMessageField']:
        """Extension fields declared within the scope of this message."""
        return list(self._extensions)

    def add_extension(self, extension: 'ProtoMessageField') -> None:
        self._extensions.append(extension)

    def nested_messages(self) -> list['ProtoMessage']:
        return [
            cast(ProtoMessage, child)
            for child in self.children()
            if child.type() == ProtoNode.Type.MESSAGE
        ]

    def nested_enums(self) -> list[ProtoEnum]:
        return [
            cast(ProtoEnum, child)
            for child in self.children()
            if child.type() == ProtoNode.Type.ENUM
        ]

    def is_extendable(self) -> bool:
        """True if the message declares at least one extension range."""
        return self._extendable

    def is_map_entry(self) -> bool:
        return self._map_entry

    def is_ignored(self) -> bool:
        """Map entry messages are never generated as classes."""
        return self._map_entry

    def message_set_wire_format(self) -> bool:
        return self._message_set_wire_format

    def _supports_child(self, child: ProtoNode) -> bool:
        return (
            child.type() == self.Type.ENUM or child.type() == self.Type.MESSAGE
        )


class ProtoFile:
    """A compilation unit: a single .proto file and its declarations."""

    def __init__(self, name: str, package: str, syntax: Syntax):
        self._name = name
        self._package = package
        self._syntax = syntax
        self._dependencies: list['ProtoFile'] = []
        self._messages: list[ProtoMessage] = []
        self._enums: list[ProtoEnum] = []
        self._extensions: list['ProtoMessageField'] = []

    def name(self) -> str:
        return self._name

    def package(self) -> str:
        return self._package

    def syntax(self) -> Syntax:
        return self._syntax

    def dependencies(self) -> list['ProtoFile']:
        return list(self._dependencies)

    def messages(self) -> list[ProtoMessage]:
        return list(self._messages)

    def enums(self) -> list[ProtoEnum]:
        return list(self._enums)

    def extensions(self) -> list['ProtoMessageField']:
        """Extension fields declared at file scope."""
        return list(self._extensions)

    def __repr__(self) -> str:
        return f'ProtoFile({self._name!r})'


class ProtoOneof:
    """A oneof group declared in a message."""

    def __init__(self, name: str, index: int, message: ProtoMessage):
        self._name = name
        self._index = index
        self._message = message
        self._fields: list['ProtoMessageField'] = []

    def name(self) -> str:
        return self._name

    def index(self) -> int:
        return self._index

    def containing_type(self) -> ProtoMessage:
        return self._message

    def fields(self) -> list['ProtoMessageField']:
        return list(self._fields)

    def add_field(self, field: 'ProtoMessageField') -> None:
        self._fields.append(field)

    def is_synthetic(self) -> bool:
        """True if the oneof only exists to track a proto3 optional field."""
        return bool(self._fields) and all(
            field.is_proto3_optional() for field in self._fields
        )

    def is_ignored(self) -> bool:
        """True if no case enum or oneof group is generated for the oneof."""
        if self.is_synthetic():
            return True
        return all(field.is_ignored() for field in self._fields)


# This class is not a node and does not appear in the proto tree.
# Fields belong to proto messages and are processed separately.
class ProtoMessageField:
    """Representation of a field or extension within a protobuf message.

    For extensions, containing_type is the message being extended and
    extension_scope is the message the extension was declared in (None for
    extensions declared at file scope).
    """

    def __init__(
        self,
        field_proto: descriptor_pb2.FieldDescriptorProto,
        proto_file: ProtoFile,
        containing_type: ProtoMessage,
        type_node: ProtoNode | None = None,
        oneof: ProtoOneof | None = None,
        extension_scope: ProtoMessage | None = None,
    ):
        self._field_name: str = field_proto.name
        self._number: int = field_proto.number
        self._type: int = field_proto.type
        self._label: int = field_proto.label
        self._file = proto_file
        self._containing_type = containing_type
        self._type_node = type_node
        self._oneof = oneof
        self._extension_scope = extension_scope
        self._is_extension: bool = field_proto.HasField('extendee')
        self._proto3_optional: bool = field_proto.proto3_optional

        self._default_value: str | None = (
            field_proto.default_value
            if field_proto.HasField('default_value')
            else None
        )

        self._packed_option: bool | None = (
            field_proto.options.packed
            if field_proto.options.HasField('packed')
            else None
        )
        self._jstype: int = field_proto.options.jstype

    def name(self) -> str:
        """The field's name as written in the .proto file."""
        return self._field_name

    def number(self) -> int:
        return self._number

    def type(self) -> int:
        """The declared type, a FieldDescriptorProto.Type value."""
        return self._type

    def cpp_type(self) -> CppType:
        return _CPP_TYPES[self._type]

    def declared_type_name(self) -> str:
        """The declared type as spelled in .proto files, e.g. sfixed32."""
        return _TYPE_NAMES[self._type]

    def file(self) -> ProtoFile:
        return self._file

    def containing_type(self) -> ProtoMessage:
        return self._containing_type

    def type_node(self) -> ProtoNode | None:
        return self._type_node

    def message_type(self) -> ProtoMessage:
        assert self.cpp_type() is CppType.MESSAGE
        return cast(ProtoMessage, self._type_node)

    def enum_type(self) -> ProtoEnum:
        assert self.cpp_type() is CppType.ENUM
        return cast(ProtoEnum, self._type_node)

    def is_repeated(self) -> bool:
        return self._label == _FieldProto.LABEL_REPEATED

    def is_required(self) -> bool:
        return self._label == _FieldProto.LABEL_REQUIRED

    def is_optional(self) -> bool:
        return self._label == _FieldProto.LABEL_OPTIONAL

    def is_extension(self) -> bool:
        return self._is_extension

    def extension_scope(self) -> ProtoMessage | None:
        return self._extension_scope

    def containing_oneof(self) -> ProtoOneof | None:
        return self._oneof

    def in_real_oneof(self) -> bool:
        return self._oneof is not None and not self._oneof.is_synthetic()

    def is_proto3_optional(self) -> bool:
        return self._proto3_optional

    def has_default_value(self) -> bool:
        return self._default_value is not None

    def default_value_text(self) -> str | None:
        """The explicit default exactly as protoc serialized it, if any."""
        return self._default_value

    def jstype(self) -> int:
        """The field's FieldOptions.JSType option."""
        return self._jstype

    def is_map(self) -> bool:
        return (
            self.is_repeated()
            and self.cpp_type() is CppType.MESSAGE
            and self.message_type().is_map_entry()
        )

    def map_key(self) -> 'ProtoMessageField':
        assert self.is_map()
        key = self.message_type().find_field_by_number(MAP_KEY_FIELD)
        assert key is not None
        return key

    def map_value(self) -> 'ProtoMessageField':
        assert self.is_map()
        value = self.message_type().find_field_by_number(MAP_VALUE_FIELD)
        assert value is not None
        return value

    def is_packable(self) -> bool:
        return self.is_repeated() and self._type not in _NON_PACKABLE_TYPES

    def is_packed(self) -> bool:
        if not self.is_packable():
            return False
        if self._file.syntax() is Syntax.PROTO2:
            return bool(self._packed_option)
        return self._packed_option is None or self._packed_option

    def has_presence(self) -> bool:
        """Whether an unset field is distinguishable from its zero value."""
        if self.is_repeated():
            return False
        return (
            self.cpp_type() is CppType.MESSAGE
            or self._oneof is not None
            or self._is_extension
            or self._file.syntax() is Syntax.PROTO2
        )

    def is_ignored(self) -> bool:
        """Extensions of descriptor.proto types are left out of the output."""
        if not self._is_extension:
            return False
        return self._containing_type.file().name() in DESCRIPTOR_PROTO_FILES

    def __repr__(self) -> str:
        return (
            f'ProtoMessageField({self._containing_type.full_name()}.'
            f'{self._field_name} = {self._number})'
        )


def _resolve_type(
    global_root: ProtoNode, package_root: ProtoNode, path: str
) -> ProtoNode:
    """Searches the proto tree for a node by its .proto type path."""

    if path[0] == '.':
        # Fully qualified path.
        node = global_root.find(path[1:])
    else:
        node = package_root.find(path)

    if node is None:
        raise ValueError(f'Unable to resolve type {path}')

    return node


def _build_hierarchy(
    proto_file: descriptor_pb2.FileDescriptorProto, global_root: ProtoNode
) -> tuple[ProtoFile, ProtoNode]:
    """Creates the file's package, message and enum nodes."""

    syntax = Syntax.PROTO3 if proto_file.syntax == 'proto3' else Syntax.PROTO2
    file_node = ProtoFile(proto_file.name, proto_file.package, syntax)

    package_root = global_root
    if proto_file.package:
        for part in proto_file.package.split('.'):
            package = package_root.find(part)
            if package is None:
                package = ProtoPackage(part)
                package_root.add_child(package)
            package_root = package

    def build_enum(proto_enum) -> ProtoEnum:
        node = ProtoEnum(
            proto_enum.name, file_node, proto_enum.options.allow_alias
        )
        for value in proto_enum.value:
            node.add_value(value.name, value.number)
        return node

    def build_message_subtree(proto_message) -> ProtoMessage:
        node = ProtoMessage(
            proto_message.name,
            file_node,
            extendable=len(proto_message.extension_range) > 0,
            map_entry=proto_message.options.map_entry,
            message_set_wire_format=(
                proto_message.options.message_set_wire_format
            ),
        )
        for proto_enum in proto_message.enum_type:
            node.add_child(build_enum(proto_enum))
        for submessage in proto_message.nested_type:
            node.add_child(build_message_subtree(submessage))

        return node

    # pylint: disable=protected-access
    for proto_enum in proto_file.enum_type:
        enum_node = build_enum(proto_enum)
        package_root.add_child(enum_node)
        file_node._enums.append(enum_node)

    for message in proto_file.message_type:
        message_node = build_message_subtree(message)
        package_root.add_child(message_node)
        file_node._messages.append(message_node)
    # pylint: enable=protected-access

    return file_node, package_root


def _populate_fields(
    proto_file: descriptor_pb2.FileDescriptorProto,
    file_node: ProtoFile,
    files: dict[str, ProtoFile],
    global_root: ProtoNode,
    package_root: ProtoNode,
) -> None:
    """Traverses a proto file, adding all message fields and extensions."""

    def resolve(path: str) -> ProtoNode:
        return _resolve_type(global_root, package_root, path)

    def create_field(field_proto, containing_type, oneof=None, scope=None):
        type_node = None
        if field_proto.type_name:
            type_node = resolve(field_proto.type_name)
        return ProtoMessageField(
            field_proto,
            file_node,
            containing_type,
            type_node,
            oneof=oneof,
            extension_scope=scope,
        )

    def create_extension(field_proto, scope=None):
        extendee = resolve(field_proto.extendee)
        if extendee.type() != ProtoNode.Type.MESSAGE:
            raise ValueError(
                f'Extendee {field_proto.extendee} is not a message'
            )
        return create_field(
            field_proto, cast(ProtoMessage, extendee), scope=scope
        )

    def populate_message(node: ProtoMessage, proto_message) -> None:
        """Recursively populates nested messages."""
        oneofs = [
            ProtoOneof(oneof.name, index, node)
            for index, oneof in enumerate(proto_message.oneof_decl)
        ]

        for field_proto in proto_message.field:
            oneof = None
            if field_proto.HasField('oneof_index'):
                oneof = oneofs[field_proto.oneof_index]

            field = create_field(field_proto, node, oneof=oneof)
            node.add_field(field)
            if oneof is not None:
                oneof.add_field(field)

        for oneof in oneofs:
            node.add_oneof(oneof)

        for field_proto in proto_message.extension:
            node.add_extension(create_extension(field_proto, scope=node))

        for msg in proto_message.nested_type:
            nested = node.find(msg.name)
            assert nested is not None
            populate_message(cast(ProtoMessage, nested), msg)

    # pylint: disable=protected-access
    for dependency in proto_file.dependency:
        if dependency not in files:
            raise ValueError(
                f'{proto_file.name} depends on unknown file {dependency}'
            )
        file_node._dependencies.append(files[dependency])

    for message, message_node in zip(
        proto_file.message_type, file_node.messages()
    ):
        populate_message(message_node, message)

    for field_proto in proto_file.extension:
        file_node._extensions.append(create_extension(field_proto))
    # pylint: enable=protected-access


def build_file_tree(
    file_descriptor_protos: Iterable[descriptor_pb2.FileDescriptorProto],
) -> tuple[ProtoNode, dict[str, ProtoFile]]:
    """Constructs the proto tree for a set of file descriptors.

    The descriptors must include every file that any of them imports, as in
    CodeGeneratorRequest.proto_file.

    Two passes are made through the files. The first builds the tree of all
    message/enum nodes, then the second creates the fields in each. This is
    done as non-primitive fields need references to their types, which requires
    the entire tree to have been parsed into memory.

    Returns the root node of the entire proto package tree and a mapping from
    file name to ProtoFile, in the order the descriptors were given.
    """
    protos = list(file_descriptor_protos)

    global_root = ProtoPackage('')
    files: dict[str, ProtoFile] = {}
    package_roots: dict[str, ProtoNode] = {}

    for proto_file in protos:
        file_node, package_root = _build_hierarchy(proto_file, global_root)
        files[proto_file.name] = file_node
        package_roots[proto_file.name] = package_root

    for proto_file in protos:
        _populate_fields(
            proto_file,
            files[proto_file.name],
            files,
            global_root,
            package_roots[proto_file.name],
        )

    return global_root, files
