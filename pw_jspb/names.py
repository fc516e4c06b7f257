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
"""Derives JavaScript identifiers, paths and module names from the proto tree.

Naming rules:

- Object field names: lower_underscore -> lowerCamel (UpperCamel -> lowerCamel
  for group fields), with "List" or "Map" appended where appropriate, and with
  reserved words prefixed by "pb_".
- Getter/setter names: lower_underscore -> UpperCamel (group fields use their
  type name), then "List" if appropriate, then "$" if the result would shadow a
  jspb.Message member.
- Enum values: uppercased.
"""

from google.protobuf import descriptor_pb2

from pw_jspb.options import GeneratorOptions
from pw_jspb.proto_tree import (
    ProtoEnum,
    ProtoFile,
    ProtoMessage,
    ProtoMessageField,
    ProtoOneof,
)

_FieldProto = descriptor_pb2.FieldDescriptorProto

KEYWORDS = frozenset(
    (
        'abstract', 'boolean', 'break', 'byte', 'case', 'catch', 'char',
        'class', 'const', 'continue', 'debugger', 'default', 'delete', 'do',
        'double', 'else', 'enum', 'export', 'extends', 'false', 'final',
        'finally', 'float', 'for', 'function', 'goto', 'if', 'implements',
        'import', 'in', 'instanceof', 'int', 'interface', 'long', 'native',
        'new', 'null', 'package', 'private', 'protected', 'public', 'return',
        'short', 'static', 'super', 'switch', 'synchronized', 'this', 'throw',
        'throws', 'transient', 'try', 'typeof', 'var', 'void', 'volatile',
        'while', 'with',
    )
)  # fmt: skip

# Accessor names that would collide with jspb.Message's own methods.
_RESERVED_GETTER_NAMES = frozenset(('Extension', 'JsPbMessageId'))

# The universal extension container, whose registry lives on jspb.Message.
MESSAGE_SET_NAME = 'google.protobuf.bridge.MessageSet'

REPEATED_FIELD_ARRAY_NAME = '.repeatedFields_'
ONEOF_GROUP_ARRAY_NAME = '.oneofGroups_'


def is_reserved(ident: str) -> bool:
    return ident in KEYWORDS


def _is_upper(char: str) -> bool:
    return 'A' <= char <= 'Z'


def _is_lower(char: str) -> bool:
    return 'a' <= char <= 'z'


def _to_lower_ascii(char: str) -> str:
    return char.lower() if _is_upper(char) else char


def parse_lower_underscore(name: str) -> list[str]:
    """Splits a lower_underscore name into lowercase words."""
    words = []
    running = ''
    for char in name:
        if char == '_':
            if running:
                words.append(running)
                running = ''
        else:
            running += _to_lower_ascii(char)
    if running:
        words.append(running)
    return words


def parse_upper_camel(name: str) -> list[str]:
    """Splits an UpperCamel name into lowercase words."""
    words = []
    running = ''
    for char in name:
        if _is_upper(char) and running:
            words.append(running)
            running = ''
        running += _to_lower_ascii(char)
    if running:
        words.append(running)
    return words


def to_lower_camel(words: list[str]) -> str:
    result = []
    for i, word in enumerate(words):
        if i == 0 and _is_upper(word[0]):
            word = word[0].lower() + word[1:]
        elif i != 0 and _is_lower(word[0]):
            word = word[0].upper() + word[1:]
        result.append(word)
    return ''.join(result)


def to_upper_camel(words: list[str]) -> str:
    return ''.join(
        word[0].upper() + word[1:] if _is_lower(word[0]) else word
        for word in words
    )


def to_enum_case(name: str) -> str:
    """Uppercases ASCII letters only, turning ValueName into VALUENAME."""
    return ''.join(char.upper() if _is_lower(char) else char for char in name)


def js_ident(
    field: ProtoMessageField,
    upper_camel: bool,
    is_map: bool = False,
    drop_list: bool = False,
) -> str:
    """Returns the field's identifier in the requested casing."""
    if field.type() == _FieldProto.TYPE_GROUP:
        words = parse_upper_camel(field.message_type().name())
    else:
        words = parse_lower_underscore(field.name())

    result = to_upper_camel(words) if upper_camel else to_lower_camel(words)

    if is_map or field.is_map():
        result += 'Map'
    elif not drop_list and field.is_repeated():
        result += 'List'
    return result


def object_field_name(field: ProtoMessageField) -> str:
    """The field's key in toObject() output and its extension property name."""
    name = js_ident(field, upper_camel=False)
    if is_reserved(name):
        name = 'pb_' + name
    return name


def getter_name(
    field: ProtoMessageField, bytes_mode: str = '', drop_list: bool = False
) -> str:
    """The capitalized accessor suffix, e.g. MyField for getMyField()."""
    name = js_ident(field, upper_camel=True, drop_list=drop_list)
    if field.type() == _FieldProto.TYPE_BYTES and bytes_mode:
        name += '_as' + bytes_mode
    if name in _RESERVED_GETTER_NAMES:
        name += '$'
    return name


def oneof_name(oneof: ProtoOneof) -> str:
    return to_upper_camel(parse_lower_underscore(oneof.name()))


def field_index(field: ProtoMessageField) -> str:
    """The field's slot in the message's underlying storage array.

    Members of a group message are indexed relative to the number of the group
    field that holds them; every other field uses its own number.
    """
    containing = field.containing_type()
    parent = containing.containing_type()
    if parent is not None:
        for candidate in parent.fields():
            if (
                candidate.type() == _FieldProto.TYPE_GROUP
                and candidate.message_type() is containing
            ):
                return str(field.number() - candidate.number())
    return str(field.number())


def oneof_index(oneof: ProtoOneof) -> str:
    """The oneof's position in oneofGroups_, skipping ignored oneofs."""
    index = -1
    for candidate in oneof.containing_type().oneofs():
        if not candidate.is_ignored():
            index += 1
        if candidate is oneof:
            break
    return str(index)


def strip_proto(filename: str) -> str:
    """Removes a trailing .protodevel or .proto suffix."""
    for suffix in ('.protodevel', '.proto'):
        if filename.endswith(suffix):
            return filename[: -len(suffix)]
    return filename


def js_filename(options: GeneratorOptions, filename: str) -> str:
    """Maps foo/bar/baz.proto to foo/bar/baz.js (or baz_pb.js)."""
    return strip_proto(filename) + options.file_extension()


def root_path(from_filename: str, to_filename: str) -> str:
    """The relative path from one generated file back to the output root."""
    # Well-known types come from the google-protobuf npm package.
    if to_filename.startswith('google/protobuf'):
        return 'google-protobuf/'

    slashes = from_filename.count('/')
    if not slashes:
        return './'
    return '../' * slashes


def module_alias(filename: str) -> str:
    """The variable a CommonJS file binds another file's exports to."""
    basename = (
        strip_proto(filename)
        .replace('-', '$')
        .replace('/', '_')
        .replace('.', '_')
    )
    return basename + '_pb'


def namespace(options: GeneratorOptions, proto_file: ProtoFile) -> str:
    if options.namespace_prefix:
        return options.namespace_prefix
    if proto_file.package():
        return 'proto.' + proto_file.package()
    return 'proto'


def nested_message_name(message: ProtoMessage | None) -> str:
    """Returns e.g. ".Outer.Inner", or '' for no message."""
    if message is None:
        return ''
    return '.' + message.nested_name()


def prefix(
    options: GeneratorOptions,
    proto_file: ProtoFile,
    containing_type: ProtoMessage | None,
) -> str:
    """The path prefix of a declaration in a file and containing message."""
    return (
        namespace(options, proto_file)
        + nested_message_name(containing_type)
        + '.'
    )


def message_path(options: GeneratorOptions, message: ProtoMessage) -> str:
    return (
        prefix(options, message.file(), message.containing_type())
        + message.name()
    )


def enum_path(options: GeneratorOptions, proto_enum: ProtoEnum) -> str:
    return (
        prefix(options, proto_enum.file(), proto_enum.containing_type())
        + proto_enum.name()
    )


def cross_file_ref(
    options: GeneratorOptions, from_file: ProtoFile, message: ProtoMessage
) -> str:
    """References a message, through its module alias across CommonJS files."""
    if options.import_style.is_commonjs() and from_file is not message.file():
        return (
            module_alias(message.file().name())
            + nested_message_name(message.containing_type())
            + '.'
            + message.name()
        )
    return message_path(options, message)


def submessage_type_ref(
    options: GeneratorOptions, field: ProtoMessageField
) -> str:
    return cross_file_ref(options, field.file(), field.message_type())


def extensions_object_name(
    options: GeneratorOptions, from_file: ProtoFile, message: ProtoMessage
) -> str:
    """The registry object holding a message's extension field infos."""
    if message.full_name() == MESSAGE_SET_NAME:
        return 'jspb.Message.messageSetExtensions'
    return cross_file_ref(options, from_file, message) + '.extensions'


def has_repeated_fields(message: ProtoMessage) -> bool:
    return any(
        field.is_repeated() and not field.is_map() for field in message.fields()
    )


def has_oneof_fields(message: ProtoMessage) -> bool:
    return any(field.in_real_oneof() for field in message.fields())


def repeated_fields_array_name(
    options: GeneratorOptions, message: ProtoMessage
) -> str:
    if not has_repeated_fields(message):
        return 'null'
    return message_path(options, message) + REPEATED_FIELD_ARRAY_NAME


def oneof_fields_array_name(
    options: GeneratorOptions, message: ProtoMessage
) -> str:
    if not has_oneof_fields(message):
        return 'null'
    return message_path(options, message) + ONEOF_GROUP_ARRAY_NAME


def oneof_array(options: GeneratorOptions, field: ProtoMessageField) -> str:
    """The oneofGroups_ entry of the real oneof containing the field.

    Raises:
      ValueError: The field is not a member of a real oneof.
    """
    oneof = field.containing_oneof()
    if oneof is None or not field.in_real_oneof():
        raise ValueError(
            f'{field.containing_type().full_name()}.{field.name()} '
            'is not in a oneof'
        )
    return (
        oneof_fields_array_name(options, field.containing_type())
        + f'[{oneof_index(oneof)}]'
    )


def relative_type_name(field: ProtoMessageField) -> str:
    """The field's enum or message type, relative to the containing message.

    Only the part of the type's full name following the longest common scope
    below the package is kept.
    """
    package = field.file().package()
    containing = field.containing_type().full_name() + '.'
    if field.type() == _FieldProto.TYPE_ENUM:
        type_name = field.enum_type().full_name()
    else:
        type_name = field.message_type().full_name()

    start = 0
    for i, (type_char, containing_char) in enumerate(
        zip(type_name, containing)
    ):
        if type_char != containing_char:
            break
        if type_char == '.' and i >= len(package):
            start = i + 1

    return type_name[start:]
