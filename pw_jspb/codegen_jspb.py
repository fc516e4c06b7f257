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
"""This module defines the generated code for jspb JavaScript classes."""

import abc
import logging
from typing import Type

from google.protobuf import descriptor_pb2

from pw_jspb import codec
from pw_jspb import js_types
from pw_jspb import names
from pw_jspb.options import GeneratorOptions
from pw_jspb.output_file import OutputFile
from pw_jspb.proto_tree import (
    CppType,
    ProtoEnum,
    ProtoFile,
    ProtoMessage,
    ProtoMessageField,
    ProtoNode,
    ProtoOneof,
    Syntax,
)

_LOG = logging.getLogger(__name__)

_FieldProto = descriptor_pb2.FieldDescriptorProto


# Field numbers at or above this move to the extension object.
DEFAULT_PIVOT = 500


class CodegenError(Exception):
    def __init__(
        self,
        error_message: str,
        node: ProtoNode | None = None,
        field: ProtoMessageField | None = None,
    ):
        super().__init__(f'jspb codegen error: {error_message}')
        self.error_message = error_message
        self.node = node
        self.field = field

    def formatted_message(self) -> str:
        lines = [f'jspb codegen error: {self.error_message}']

        if self.node is not None:
            lines.append(f'    at {self.node.full_name()}')

        if self.field is not None:
            lines.append(f'    in field {self.field.name()}')

        return '\n'.join(lines)


class UnimplementedError(CodegenError):
    """A requested configuration that the generator does not support."""


def field_default(field: ProtoMessageField) -> str:
    """Computes the field's default literal, reporting bad defaults."""
    try:
        return js_types.field_default(field)
    except ValueError as err:
        raise CodegenError(
            f'invalid default value {field.default_value_text()!r}: {err}',
            field.containing_type(),
            field,
        ) from err


def field_value_expression(
    obj_reference: str, field: ProtoMessageField, use_default: bool
) -> str:
    """Reads a scalar field's stored value with the matching jspb helper.

    One of getField, getBooleanField, getOptionalFloatingPointField,
    getFieldWithDefault, getBooleanFieldWithDefault,
    getFloatingPointFieldWithDefault, getRepeatedField,
    getRepeatedBooleanField or getRepeatedFloatingPointField.
    """
    cpp_type = field.cpp_type()
    is_float = cpp_type in (CppType.FLOAT, CppType.DOUBLE)

    index = names.field_index(field)
    default_arg = f', {field_default(field)}' if use_default else ''

    # getFloatingPointField is replaced by getOptionalFloatingPointField for
    # backward compatibility.
    if is_float and not field.is_repeated() and not use_default:
        return (
            f'jspb.Message.getOptionalFloatingPointField({obj_reference}, '
            f'{index})'
        )

    cardinality = 'Repeated' if field.is_repeated() else ''
    if is_float:
        kind = 'FloatingPoint'
    elif cpp_type is CppType.BOOL:
        kind = 'Boolean'
    else:
        kind = ''
    with_default = 'WithDefault' if use_default else ''

    return (
        f'jspb.Message.get{cardinality}{kind}Field{with_default}('
        f'{obj_reference}, {index}{default_arg})'
    )


def pivot(message: ProtoMessage) -> int:
    """Storage array index past which fields live in the extension object."""
    max_field_number = max(
        (
            field.number()
            for field in message.fields()
            if not field.is_ignored()
        ),
        default=0,
    )

    if message.is_extendable() or max_field_number >= DEFAULT_PIVOT:
        return min(max_field_number + 1, DEFAULT_PIVOT)
    return -1


def _oneof_group_arg(options: GeneratorOptions, field: ProtoMessageField):
    if field.in_real_oneof():
        return ', ' + names.oneof_array(options, field)
    return ''


class AccessorMethod(abc.ABC):
    """Base class for a generated prototype method of a message field.

    Accessor methods have the following format (for the proto field foo):

        /**
         * {doc...}
         */
        proto.pkg.Msg.prototype.{name} = function({params}) {
          {body...}
        };
    """

    def __init__(self, options: GeneratorOptions, field: ProtoMessageField):
        self._options = options
        self._field = field

    @abc.abstractmethod
    def name(self) -> str:
        """Returns the name of the method, e.g. getFoo."""

    @abc.abstractmethod
    def params(self) -> list[str]:
        """Returns the names of the method's parameters."""

    @abc.abstractmethod
    def doc(self) -> list[str]:
        """Returns the lines of the method's JSDoc comment, without stars."""

    @abc.abstractmethod
    def body(self) -> list[str]:
        """Returns the method body as a list of source code lines."""

    def should_appear(self) -> bool:  # pylint: disable=no-self-use
        """Whether the method should be generated."""
        return True

    def class_name(self) -> str:
        return names.message_path(
            self._options, self._field.containing_type()
        )

    def field_definition(self) -> str:
        return js_types.field_definition(self._options, self._field)

    def returns_this(self) -> str:
        return f'@return {{!{self.class_name()}}} returns this'

    def _getter_name(self, bytes_mode: str = '') -> str:
        return names.getter_name(self._field, bytes_mode)

    def _annotation(self, is_setter_argument: bool = False, **kwargs) -> str:
        kwargs.setdefault('force_present', False)
        kwargs.setdefault('singular_if_not_packed', False)
        return js_types.field_type_annotation(
            self._options,
            self._field,
            is_setter_argument=is_setter_argument,
            **kwargs,
        )

    def _index(self) -> str:
        return names.field_index(self._field)

    def generate(self, output: OutputFile) -> None:
        output.write_line('/**')
        for line in self.doc():
            output.write_line(f' * {line}' if line else ' *')
        output.write_line(' */')
        output.write_line(
            f'{self.class_name()}.prototype.{self.name()} = '
            f'function({", ".join(self.params())}) {{'
        )
        with output.indent():
            output.write_lines(self.body())
        output.write_lines(['};', '', ''])


#
# Map field accessors.
#
class MapGetterMethod(AccessorMethod):
    """Lazily creates the jspb.Map wrapping a map field."""

    def name(self) -> str:
        return 'get' + self._getter_name()

    def params(self) -> list[str]:
        return ['opt_noLazyCreate']

    def _map_type(self) -> str:
        key_type, value_type = (
            js_types.field_type_annotation(
                self._options,
                entry_field,
                is_setter_argument=False,
                force_present=True,
                singular_if_not_packed=False,
            )
            for entry_field in (self._field.map_key(), self._field.map_value())
        )
        return f'!jspb.Map<{key_type},{value_type}>'

    def doc(self) -> list[str]:
        return [
            self.field_definition(),
            '@param {boolean=} opt_noLazyCreate Do not create the map if',
            'empty, instead returning `undefined`',
            f'@return {{{self._map_type()}}}',
        ]

    def body(self) -> list[str]:
        value = self._field.map_value()
        if value.type() == _FieldProto.TYPE_MESSAGE:
            value_class = names.message_path(
                self._options, value.message_type()
            )
        else:
            value_class = 'null'

        return [
            f'return /** @type {{{self._map_type()}}} */ (',
            f'    jspb.Message.getMapField(this, {self._index()}, '
            'opt_noLazyCreate,',
            f'    {value_class}));',
        ]

    def should_appear(self) -> bool:
        return self._field.is_map()


class ClearMapMethod(AccessorMethod):
    def name(self) -> str:
        return 'clear' + self._getter_name()

    def params(self) -> list[str]:
        return []

    def doc(self) -> list[str]:
        return [
            'Clears values from the map. The map will be non-null.',
            self.returns_this(),
        ]

    def body(self) -> list[str]:
        return [f'this.get{self._getter_name()}().clear();', 'return this;']

    def should_appear(self) -> bool:
        return self._field.is_map()


#
# Message and group field accessors.
#
class WrapperGetterMethod(AccessorMethod):
    """Wraps the underlying data array of a submessage in its class."""

    def name(self) -> str:
        return 'get' + self._getter_name()

    def params(self) -> list[str]:
        return []

    def doc(self) -> list[str]:
        return [
            self.field_definition(),
            *js_types.field_comments(self._field, ''),
            f'@return {{{self._annotation()}}}',
        ]

    def body(self) -> list[str]:
        repeated = 'Repeated' if self._field.is_repeated() else ''
        wrapper_class = names.submessage_type_ref(self._options, self._field)
        required = ', 1' if self._field.is_required() else ''
        return [
            f'return /** @type{{{self._annotation()}}} */ (',
            f'  jspb.Message.get{repeated}WrapperField(this, {wrapper_class}, '
            f'{self._index()}{required}));',
        ]

    def should_appear(self) -> bool:
        return not self._field.is_map()


class WrapperSetterMethod(AccessorMethod):
    def name(self) -> str:
        return 'set' + self._getter_name()

    def params(self) -> list[str]:
        return ['value']

    def doc(self) -> list[str]:
        return [
            f'@param {{{self._annotation(is_setter_argument=True)}}} value',
            self.returns_this(),
        ]

    def body(self) -> list[str]:
        oneof = 'Oneof' if self._field.in_real_oneof() else ''
        repeated = 'Repeated' if self._field.is_repeated() else ''
        oneof_group = _oneof_group_arg(self._options, self._field)
        return [
            f'return jspb.Message.set{oneof}{repeated}WrapperField('
            f'this, {self._index()}{oneof_group}, value);'
        ]

    def should_appear(self) -> bool:
        return not self._field.is_map()


class AddMessageMethod(AccessorMethod):
    """Appends a submessage to a repeated message field."""

    def name(self) -> str:
        return 'add' + names.getter_name(self._field, drop_list=True)

    def params(self) -> list[str]:
        return ['opt_value', 'opt_index']

    def doc(self) -> list[str]:
        element_type = js_types.js_type_name(self._options, self._field)
        return [
            f'@param {{!{element_type}=}} opt_value',
            '@param {number=} opt_index',
            f'@return {{!{element_type}}}',
        ]

    def body(self) -> list[str]:
        oneof_group = _oneof_group_arg(self._options, self._field)
        ctor = names.message_path(self._options, self._field.message_type())
        return [
            'return jspb.Message.addToRepeatedWrapperField('
            f'this, {self._index()}{oneof_group}, opt_value, {ctor}, '
            'opt_index);'
        ]

    def should_appear(self) -> bool:
        return self._field.is_repeated() and not self._field.is_map()


#
# Scalar field accessors.
#
class GetterMethod(AccessorMethod):
    """Returns a scalar field's value, or its default if unset."""

    def _bytes_mode(self) -> str:
        # Non-binary users are told bytes getters always return base64.
        if (
            self._field.type() == _FieldProto.TYPE_BYTES
            and not self._options.binary
        ):
            return 'B64'
        return ''

    def name(self) -> str:
        return 'get' + self._getter_name()

    def params(self) -> list[str]:
        return []

    def doc(self) -> list[str]:
        bytes_mode = self._bytes_mode()
        return [
            self.field_definition(),
            *js_types.field_comments(self._field, bytes_mode),
            f'@return {{{self._annotation(bytes_mode=bytes_mode)}}}',
        ]

    def body(self) -> list[str]:
        annotation = self._annotation(bytes_mode=self._bytes_mode())
        use_default = (
            not js_types.returns_null_when_unset(self._field)
            and not self._field.is_repeated()
        )
        value = field_value_expression('this', self._field, use_default)
        return [f'return /** @type {{{annotation}}} */ ({value});']


class BytesWrapperMethod(AccessorMethod):
    """Converts a bytes field to a specific representation."""

    BYTES_MODE = ''

    def name(self) -> str:
        return 'get' + self._getter_name(self.BYTES_MODE)

    def params(self) -> list[str]:
        return []

    def doc(self) -> list[str]:
        return [
            self.field_definition(),
            *js_types.field_comments(self._field, self.BYTES_MODE),
            'This is a type-conversion wrapper around '
            f'`get{self._getter_name()}()`',
            f'@return {{{self._annotation(bytes_mode=self.BYTES_MODE)}}}',
        ]

    def body(self) -> list[str]:
        annotation = self._annotation(bytes_mode=self.BYTES_MODE)
        list_tag = 'List' if self._field.is_repeated() else ''
        return [
            f'return /** @type {{{annotation}}} */ '
            f'(jspb.Message.bytes{list_tag}As{self.BYTES_MODE}(',
            f'    this.get{self._getter_name()}()));',
        ]

    def should_appear(self) -> bool:
        return self._field.type() == _FieldProto.TYPE_BYTES


class B64BytesWrapperMethod(BytesWrapperMethod):
    BYTES_MODE = 'B64'


class U8BytesWrapperMethod(BytesWrapperMethod):
    BYTES_MODE = 'U8'


def _uses_proto3_setter(field: ProtoMessageField) -> bool:
    return (
        field.file().syntax() is Syntax.PROTO3
        and not field.is_repeated()
        and not field.is_map()
        and not field.has_presence()
    )


class SetterMethod(AccessorMethod):
    def name(self) -> str:
        return 'set' + self._getter_name()

    def params(self) -> list[str]:
        return ['value']

    def doc(self) -> list[str]:
        return [
            f'@param {{{self._annotation(is_setter_argument=True)}}} value',
            self.returns_this(),
        ]

    def body(self) -> list[str]:
        oneof = 'Oneof' if self._field.in_real_oneof() else ''
        oneof_group = _oneof_group_arg(self._options, self._field)
        value = 'value || []' if self._field.is_repeated() else 'value'
        return [
            f'return jspb.Message.set{oneof}Field(this, {self._index()}'
            f'{oneof_group}, {value});'
        ]

    def should_appear(self) -> bool:
        return not _uses_proto3_setter(self._field)


class Proto3SetterMethod(SetterMethod):
    """Stores an implicit presence proto3 scalar, dropping zero values."""

    def body(self) -> list[str]:
        tag = js_types.js_type_tag(self._field)
        return [
            f'return jspb.Message.setProto3{tag}Field(this, {self._index()}, '
            'value);'
        ]

    def should_appear(self) -> bool:
        return _uses_proto3_setter(self._field)


class AddPrimitiveMethod(AccessorMethod):
    """Appends a value to a repeated scalar field."""

    def name(self) -> str:
        return 'add' + names.getter_name(self._field, drop_list=True)

    def params(self) -> list[str]:
        return ['value', 'opt_index']

    def doc(self) -> list[str]:
        element_type = self._annotation(
            force_present=True, force_singular=True
        )
        return [
            f'@param {{{element_type}}} value',
            '@param {number=} opt_index',
            self.returns_this(),
        ]

    def body(self) -> list[str]:
        oneof_group = _oneof_group_arg(self._options, self._field)
        return [
            f'return jspb.Message.addToRepeatedField(this, {self._index()}'
            f'{oneof_group}, value, opt_index);'
        ]

    def should_appear(self) -> bool:
        return self._field.is_repeated()


#
# Presence accessors shared by message and scalar fields.
#
def _clears_through_setter(field: ProtoMessageField) -> bool:
    if field.is_map():
        return False
    return field.is_repeated() or (
        field.cpp_type() is CppType.MESSAGE and not field.is_required()
    )


class ClearBySetterMethod(AccessorMethod):
    """Clears a field through its setter, which accepts the cleared value."""

    def name(self) -> str:
        return 'clear' + self._getter_name()

    def params(self) -> list[str]:
        return []

    def doc(self) -> list[str]:
        if self._field.is_repeated():
            summary = 'Clears the list making it empty but non-null.'
        else:
            summary = 'Clears the message field making it undefined.'
        return [summary, self.returns_this()]

    def body(self) -> list[str]:
        cleared = '[]' if self._field.is_repeated() else 'undefined'
        return [f'return this.set{self._getter_name()}({cleared});']

    def should_appear(self) -> bool:
        return _clears_through_setter(self._field)


class ClearPresenceMethod(AccessorMethod):
    """Clears a field whose setter does not accept undefined."""

    def name(self) -> str:
        return 'clear' + self._getter_name()

    def params(self) -> list[str]:
        return []

    def doc(self) -> list[str]:
        return ['Clears the field making it undefined.', self.returns_this()]

    def body(self) -> list[str]:
        oneof = 'Oneof' if self._field.in_real_oneof() else ''
        oneof_group = _oneof_group_arg(self._options, self._field)
        return [
            f'return jspb.Message.set{oneof}Field(this, {self._index()}'
            f'{oneof_group}, undefined);'
        ]

    def should_appear(self) -> bool:
        return (
            not self._field.is_map()
            and not _clears_through_setter(self._field)
            and self._field.has_presence()
        )


class HasMethod(AccessorMethod):
    def name(self) -> str:
        return 'has' + self._getter_name()

    def params(self) -> list[str]:
        return []

    def doc(self) -> list[str]:
        return ['Returns whether this field is set.', '@return {boolean}']

    def body(self) -> list[str]:
        return [f'return jspb.Message.getField(this, {self._index()}) != null;']

    def should_appear(self) -> bool:
        return self._field.has_presence()


_MESSAGE_ACCESSORS: tuple[Type[AccessorMethod], ...] = (
    MapGetterMethod,
    WrapperGetterMethod,
    WrapperSetterMethod,
    AddMessageMethod,
    ClearMapMethod,
    ClearBySetterMethod,
    ClearPresenceMethod,
    HasMethod,
)

_SCALAR_ACCESSORS: tuple[Type[AccessorMethod], ...] = (
    GetterMethod,
    B64BytesWrapperMethod,
    U8BytesWrapperMethod,
    Proto3SetterMethod,
    SetterMethod,
    AddPrimitiveMethod,
    ClearBySetterMethod,
    ClearPresenceMethod,
    HasMethod,
)

# Mapping of field wire category to the accessor methods generated for it, in
# the order they are emitted.
ACCESSOR_METHODS: dict[CppType, tuple[Type[AccessorMethod], ...]] = {
    CppType.INT32: _SCALAR_ACCESSORS,
    CppType.INT64: _SCALAR_ACCESSORS,
    CppType.UINT32: _SCALAR_ACCESSORS,
    CppType.UINT64: _SCALAR_ACCESSORS,
    CppType.DOUBLE: _SCALAR_ACCESSORS,
    CppType.FLOAT: _SCALAR_ACCESSORS,
    CppType.BOOL: _SCALAR_ACCESSORS,
    CppType.ENUM: _SCALAR_ACCESSORS,
    CppType.STRING: _SCALAR_ACCESSORS,
    CppType.MESSAGE: _MESSAGE_ACCESSORS,
}


def accessor_methods(
    options: GeneratorOptions, field: ProtoMessageField
) -> list[AccessorMethod]:
    """Instantiates the accessor methods that are generated for a field."""
    methods = (
        method_class(options, field)
        for method_class in ACCESSOR_METHODS[field.cpp_type()]
    )
    return [method for method in methods if method.should_appear()]


def generate_header(output: OutputFile, proto_file: ProtoFile | None) -> None:
    if proto_file is not None:
        output.write_line(f'// source: {proto_file.name()}')
    output.write_lines(
        [
            '/**',
            ' * @fileoverview',
            ' * @enhanceable',
            ' * @suppress {messageConventions} JS Compiler reports an error if '
            'a variable or',
            " *     field starts with 'MSG_' and isn't a translatable message.",
            ' * @public',
            ' */',
            '// GENERATED CODE -- DO NOT EDIT!',
            '',
        ]
    )


def generate_class_constructor(
    options: GeneratorOptions, output: OutputFile, message: ProtoMessage
) -> None:
    class_name = names.message_path(options, message)

    output.write_lines(
        [
            '/**',
            ' * Generated by JsPbCodeGenerator.',
            ' * @param {Array=} opt_data Optional initial data array, '
            'typically from a',
            ' * server response, or constructed directly in Javascript. The '
            'array is used',
            ' * in place and becomes part of the constructed object. It is not '
            'cloned.',
            ' * If no data is provided, the constructed object will be empty, '
            'but still',
            ' * valid.',
            ' * @extends {jspb.Message}',
            ' * @constructor',
            ' */',
            f'{class_name} = function(opt_data) {{',
        ]
    )

    with output.indent():
        # Messages never declare an id, so it is always 0.
        output.write_line(
            f'jspb.Message.initialize(this, opt_data, 0, {pivot(message)}, '
            f'{names.repeated_fields_array_name(options, message)}, '
            f'{names.oneof_fields_array_name(options, message)});'
        )

    output.write_lines(
        [
            '};',
            f'goog.inherits({class_name}, jspb.Message);',
            'if (goog.DEBUG && !COMPILED) {',
            '  /**',
            '   * @public',
            '   * @override',
            '   */',
            f"  {class_name}.displayName = '{class_name}';",
            '}',
        ]
    )


def _generate_extension_objects(
    options: GeneratorOptions, output: OutputFile, message: ProtoMessage
) -> None:
    class_name = names.message_path(options, message)

    for suffix, info_type in (
        ('', 'jspb.ExtensionFieldInfo'),
        ('Binary', 'jspb.ExtensionFieldBinaryInfo'),
    ):
        output.write_lines(
            [
                '',
                '/**',
                ' * The extensions registered with this message class. This '
                'is a map of',
                ' * extension field number to fieldInfo object.',
                ' *',
                ' * For example:',
                ' *     { 123: {fieldIndex: 123, fieldName: {my_field_name: '
                '0}, ctor: proto.example.MyMessage} }',
                ' *',
                ' * fieldName contains the JsCompiler renamed field name '
                'property so that it',
                ' * works in OPTIMIZED mode.',
                ' *',
                f' * @type {{!Object<number, {info_type}>}}',
                ' */',
                f'{class_name}.extensions{suffix} = {{}};',
                '',
            ]
        )


def generate_constructors(
    options: GeneratorOptions, output: OutputFile, message: ProtoMessage
) -> None:
    """Declares the constructors of a message and all its nested messages.

    Constructors are emitted ahead of any class body so that classes may refer
    to each other regardless of declaration order.
    """
    generate_class_constructor(options, output, message)
    if (
        message.is_extendable()
        and message.full_name() != names.MESSAGE_SET_NAME
    ):
        _generate_extension_objects(options, output, message)

    for nested in message.nested_messages():
        if not nested.is_ignored():
            generate_constructors(options, output, nested)


def generate_oneof_case(
    options: GeneratorOptions, output: OutputFile, oneof: ProtoOneof
) -> None:
    """Writes the <Name>Case enum of a oneof and its get<Name>Case() method."""
    class_name = names.message_path(options, oneof.containing_type())
    case_enum = f'{class_name}.{names.oneof_name(oneof)}Case'

    entries = [f'{names.to_enum_case(oneof.name())}_NOT_SET: 0']
    for field in oneof.fields():
        if not field.is_ignored():
            entries.append(
                f'{names.to_enum_case(field.name())}: '
                f'{names.field_index(field)}'
            )

    output.write_lines(['/**', ' * @enum {number}', ' */'])
    output.write_line(f'{case_enum} = {{')
    with output.indent():
        output.write_lines(
            [entry + ',' for entry in entries[:-1]] + [entries[-1]]
        )
    output.write_lines(
        [
            '};',
            '',
            '/**',
            f' * @return {{{case_enum}}}',
            ' */',
            f'{class_name}.prototype.get{names.oneof_name(oneof)}Case = '
            'function() {',
            f'  return /** @type {{{case_enum}}} */(jspb.Message.'
            f'computeOneofCase(this, {class_name}.oneofGroups_'
            f'[{names.oneof_index(oneof)}]));',
            '};',
            '',
        ]
    )


def _repeated_field_number_list(message: ProtoMessage) -> str:
    numbers = [
        names.field_index(field)
        for field in message.fields()
        if field.is_repeated() and not field.is_map()
    ]
    return '[' + ','.join(numbers) + ']'


def _oneof_group_list(message: ProtoMessage) -> str:
    groups = []
    for oneof in message.oneofs():
        if oneof.is_ignored():
            continue
        indices = [
            names.field_index(field)
            for field in oneof.fields()
            if not field.is_ignored()
        ]
        groups.append('[' + ','.join(indices) + ']')
    return '[' + ','.join(groups) + ']'


def generate_class_field_info(
    options: GeneratorOptions, output: OutputFile, message: ProtoMessage
) -> None:
    """Writes the repeatedFields_ and oneofGroups_ tables of a message."""
    class_name = names.message_path(options, message)

    if names.has_repeated_fields(message):
        output.write_lines(
            [
                '/**',
                ' * List of repeated fields within this message type.',
                ' * @private {!Array<number>}',
                ' * @const',
                ' */',
                f'{class_name}{names.REPEATED_FIELD_ARRAY_NAME} = '
                f'{_repeated_field_number_list(message)};',
                '',
            ]
        )

    if not names.has_oneof_fields(message):
        return

    output.write_lines(
        [
            '/**',
            ' * Oneof group definitions for this message. Each group defines '
            'the field',
            " * numbers belonging to that group. When of these fields' value "
            'is set, all',
            ' * other fields in the group are cleared. During '
            'deserialization, if multiple',
            ' * fields are encountered for a group, only the last value seen '
            'will be kept.',
            ' * @private {!Array<!Array<number>>}',
            ' * @const',
            ' */',
            f'{class_name}{names.ONEOF_GROUP_ARRAY_NAME} = '
            f'{_oneof_group_list(message)};',
            '',
        ]
    )

    for oneof in message.oneofs():
        if not oneof.is_ignored():
            generate_oneof_case(options, output, oneof)


def _field_to_object(
    options: GeneratorOptions, field: ProtoMessageField
) -> list[str]:
    """Returns the lines of a field's entry in the toObject() literal."""
    getter = names.getter_name(field)
    key = names.object_field_name(field)

    if field.is_map():
        value = field.map_value()
        if value.cpp_type() is CppType.MESSAGE:
            value_to_object = (
                names.message_path(options, value.message_type()) + '.toObject'
            )
        else:
            value_to_object = 'undefined'
        return [
            f'{key}: (f = msg.get{getter}()) ? '
            f'f.toObject(includeInstance, {value_to_object}) : []'
        ]

    if field.cpp_type() is CppType.MESSAGE:
        type_ref = names.submessage_type_ref(options, field)
        if field.is_repeated():
            return [
                f'{key}: jspb.Message.toObjectList(msg.get{getter}(),',
                f'{type_ref}.toObject, includeInstance)',
            ]
        return [
            f'{key}: (f = msg.get{getter}()) && '
            f'{type_ref}.toObject(includeInstance, f)'
        ]

    if field.type() == _FieldProto.TYPE_BYTES:
        # Bytes are always converted to base64.
        return [f'{key}: msg.get{names.getter_name(field, "B64")}()']

    # Proto3 puts all defaults, including implicit ones, in the object. Unset
    # proto2 fields without a default stay undefined.
    use_default = field.has_default_value() or (
        field.file().syntax() is Syntax.PROTO3 and not field.is_repeated()
    )
    value = field_value_expression('msg', field, use_default)
    if use_default:
        return [f'{key}: {value}']
    return [f'{key}: (f = {value}) == null ? undefined : f']


def generate_class_to_object(
    options: GeneratorOptions, output: OutputFile, message: ProtoMessage
) -> None:
    """Writes the toObject() methods converting a message to a plain object."""
    class_name = names.message_path(options, message)

    output.write_lines(
        [
            '',
            '',
            'if (jspb.Message.GENERATE_TO_OBJECT) {',
            '/**',
            ' * Creates an object representation of this proto.',
            ' * Field names that are reserved in JavaScript and will be '
            'renamed to pb_name.',
            ' * Optional fields that are not set will be set to undefined.',
            ' * To access a reserved field use, foo.pb_<name>, eg, '
            'foo.pb_default.',
            ' * For the list of reserved names please see:',
            ' *     net/proto2/compiler/js/internal/generator.cc#kKeyword.',
            ' * @param {boolean=} opt_includeInstance Deprecated. whether to '
            'include the',
            ' *     JSPB instance for transitional soy proto support:',
            ' *     http://goto/soy-param-migration',
            ' * @return {!Object}',
            ' */',
            f'{class_name}.prototype.toObject = function(opt_includeInstance) '
            '{',
            f'  return {class_name}.toObject(opt_includeInstance, this);',
            '};',
            '',
            '',
            '/**',
            ' * Static version of the {@see toObject} method.',
            ' * @param {boolean|undefined} includeInstance Deprecated. Whether '
            'to include',
            ' *     the JSPB instance for transitional soy proto support:',
            ' *     http://goto/soy-param-migration',
            f' * @param {{!{class_name}}} msg The msg instance to transform.',
            ' * @return {!Object}',
            ' * @suppress {unusedLocalVariables} f is only used for nested '
            'messages',
            ' */',
            f'{class_name}.toObject = function(includeInstance, msg) {{',
            '  var f, obj = {',
        ]
    )

    entries = [
        _field_to_object(options, field)
        for field in message.fields()
        if not field.is_ignored()
    ]

    with output.indent(4):
        for i, entry in enumerate(entries):
            if i != len(entries) - 1:
                entry = entry[:-1] + [entry[-1] + ',']
            output.write_lines(entry)

    if not entries:
        output.write_line()
    output.write_lines(['  };', ''])

    with output.indent():
        if message.is_extendable():
            ext_object = names.extensions_object_name(
                options, message.file(), message
            )
            output.write_lines(
                [
                    'jspb.Message.toObjectExtension('
                    '/** @type {!jspb.Message} */ (msg), obj,',
                    f'    {ext_object}, {class_name}.prototype.getExtension,',
                    '    includeInstance);',
                ]
            )
        output.write_lines(
            [
                'if (includeInstance) {',
                '  obj.$jspbMessageInstance = msg;',
                '}',
                'return obj;',
            ]
        )

    output.write_lines(['};', '}', '', ''])


def generate_enum(
    options: GeneratorOptions, output: OutputFile, proto_enum: ProtoEnum
) -> None:
    """Writes an enum as an object of named numeric constants.

    When the enum allows aliases, only the first name declared for each value
    is kept.
    """
    entries = []
    seen_values: set[int] = set()
    for name, number in proto_enum.values():
        if proto_enum.allow_alias():
            if number in seen_values:
                continue
            seen_values.add(number)
        entries.append(f'{names.to_enum_case(name)}: {number}')

    output.write_lines(['/**', ' * @enum {number}', ' */'])
    output.write_line(f'{names.enum_path(options, proto_enum)} = {{')
    with output.indent():
        if entries:
            output.write_lines(
                [entry + ',' for entry in entries[:-1]] + [entries[-1]]
            )
        else:
            output.write_line()
    output.write_lines(['};', ''])


def generate_extension(
    options: GeneratorOptions, output: OutputFile, field: ProtoMessageField
) -> None:
    """Declares an extension field and registers it with the extended class."""
    scope = field.extension_scope()
    if scope is not None:
        class_name = names.message_path(options, scope)
    else:
        class_name = names.namespace(options, field.file())

    object_name = names.object_field_name(field)
    extension_type = js_types.field_type_annotation(
        options,
        field,
        is_setter_argument=False,
        force_present=True,
        singular_if_not_packed=False,
    )
    index = field.number()

    if field.cpp_type() is CppType.MESSAGE:
        type_ref = names.submessage_type_ref(options, field)
        ctor = type_ref
        to_object = type_ref + '.toObject'
        serialize_fn = type_ref + '.serializeBinaryToWriter'
        deserialize_fn = type_ref + '.deserializeBinaryFromReader'
    else:
        ctor = to_object = 'null'
        serialize_fn = deserialize_fn = 'undefined'

    extend_name = names.extensions_object_name(
        options, field.file(), field.containing_type()
    )

    output.write_lines(
        [
            '',
            '/**',
            ' * A tuple of {field number, class constructor} for the extension',
            f' * field named `{object_name}`.',
            f' * @type {{!jspb.ExtensionFieldInfo<{extension_type}>}}',
            ' */',
            f'{class_name}.{object_name} = new jspb.ExtensionFieldInfo(',
            f'    {index},',
            f'    {{{object_name}: 0}},',
            f'    {ctor},',
            '     /** @type {?function((boolean|undefined),!jspb.Message=): '
            '!Object} */ (',
            f'         {to_object}),',
            f'    {1 if field.is_repeated() else 0});',
            '',
            f'{extend_name}Binary[{index}] = '
            'new jspb.ExtensionFieldBinaryInfo(',
            f'    {class_name}.{object_name},',
            f'    {codec.reader_method_name(field)},',
            f'    {codec.writer_method_name(field)},',
            f'    {serialize_fn},',
            f'    {deserialize_fn},',
            f'    {"true" if field.is_packed() else "false"});',
            '// This registers the extension field with the extended class, so '
            'that',
            '// toObject() will function correctly.',
            f'{extend_name}[{index}] = {class_name}.{object_name};',
            '',
        ]
    )


def generate_class(
    options: GeneratorOptions, output: OutputFile, message: ProtoMessage
) -> None:
    """Writes the full definition of a message class.

    Order: field and oneof tables, toObject(), the binary codec, nested enums
    and classes, field accessors, then extensions declared in the message.
    Nested types precede the extensions so that extensions referencing them
    follow their definitions.
    """
    if message.is_ignored():
        return

    output.write_line()
    generate_class_field_info(options, output, message)
    generate_class_to_object(options, output, message)
    codec.generate_deserialize_binary(options, output, message)
    codec.generate_serialize_binary(options, output, message)

    for proto_enum in message.nested_enums():
        generate_enum(options, output, proto_enum)
    for nested in message.nested_messages():
        generate_class(options, output, nested)

    for field in message.fields():
        if field.is_ignored():
            continue
        for method in accessor_methods(options, field):
            method.generate(output)

    for extension in message.extensions():
        if not extension.is_ignored():
            generate_extension(options, output, extension)


def generate_classes_and_enums(
    options: GeneratorOptions, output: OutputFile, proto_file: ProtoFile
) -> None:
    """Writes every message class and enum declared in a file."""
    _LOG.debug('Generating classes for %s', proto_file.name())

    for message in proto_file.messages():
        if not message.is_ignored():
            generate_constructors(options, output, message)
    for message in proto_file.messages():
        generate_class(options, output, message)
    for proto_enum in proto_file.enums():
        generate_enum(options, output, proto_enum)
