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
"""Generates the binary wire format readers and writers of jspb messages."""

from google.protobuf import descriptor_pb2

from pw_jspb import js_types
from pw_jspb import names
from pw_jspb.options import GeneratorOptions
from pw_jspb.output_file import OutputFile
from pw_jspb.proto_tree import CppType, ProtoMessage, ProtoMessageField

_FieldProto = descriptor_pb2.FieldDescriptorProto

# Conditions under which a field without presence goes on the wire, i.e. when
# its value differs from the zero value of its type.
_NONZERO_CONDITIONS: dict[CppType, str] = {
    CppType.INT32: 'f !== 0',
    CppType.INT64: 'f !== 0',
    CppType.UINT32: 'f !== 0',
    CppType.UINT64: 'f !== 0',
    CppType.ENUM: 'f !== 0.0',
    CppType.FLOAT: 'f !== 0.0',
    CppType.DOUBLE: 'f !== 0.0',
    CppType.BOOL: 'f',
    CppType.STRING: 'f.length > 0',
}


def reader_method_type(field: ProtoMessageField) -> str:
    """The type part of a reader method name, e.g. Sfixed64 or Int64String."""
    name = field.declared_type_name()
    name = name[0].upper() + name[1:]
    if js_types.is_integral_with_string_jstype(field):
        return name + 'String'
    return name


def read_write_method_name(field: ProtoMessageField, is_writer: bool) -> str:
    """Names the method that reads or writes the field, less read/write.

    Readers accept both packed and unpacked encodings of a repeated field, so
    they only distinguish packed fields. Writers must produce the declared
    encoding exactly.
    """
    name = reader_method_type(field)
    if field.is_packed():
        return 'Packed' + name
    if is_writer and field.is_repeated():
        return 'Repeated' + name
    return name


def reader_method_name(field: ProtoMessageField) -> str:
    return 'jspb.BinaryReader.prototype.read' + read_write_method_name(
        field, is_writer=False
    )


def writer_method_name(field: ProtoMessageField) -> str:
    if field.containing_type().message_set_wire_format():
        return 'jspb.BinaryWriter.prototype.writeMessageSet'
    return 'jspb.BinaryWriter.prototype.write' + read_write_method_name(
        field, is_writer=True
    )


def write_condition(field: ProtoMessageField) -> str:
    """The condition under which the current value f is serialized."""
    if field.is_map():
        return 'f && f.getLength() > 0'
    if field.is_repeated():
        return 'f.length > 0'
    if field.has_presence():
        return 'f != null'
    if js_types.is_integral_with_string_jstype(field):
        return 'parseInt(f, 10) !== 0'
    return _NONZERO_CONDITIONS[field.cpp_type()]


def _map_value_class(
    options: GeneratorOptions, value: ProtoMessageField
) -> str | None:
    if value.type() == _FieldProto.TYPE_MESSAGE:
        return names.message_path(options, value.message_type())
    return None


def _generate_deserialize_field(
    options: GeneratorOptions, output: OutputFile, field: ProtoMessageField
) -> None:
    output.write_line(f'case {field.number()}:')

    with output.indent():
        if field.is_map():
            key = field.map_key()
            value = field.map_value()
            value_class = _map_value_class(options, value)

            args = [
                'message',
                'reader',
                reader_method_name(key),
                reader_method_name(value),
            ]
            if value_class is not None:
                args.append(f'{value_class}.deserializeBinaryFromReader')
            else:
                args.append('null')
            args.append(js_types.field_default(key))
            if value_class is not None:
                args.append(f'new {value_class}()')
            else:
                args.append(js_types.field_default(value))

            output.write_line(
                f'var value = msg.get{names.getter_name(field)}();'
            )
            output.write_line(
                'reader.readMessage(value, function(message, reader) {'
            )
            with output.indent():
                output.write_line(
                    f'jspb.Map.deserializeBinary({", ".join(args)});'
                )
            output.write_line('   });')
            output.write_line('break;')
            return

        if field.cpp_type() is CppType.MESSAGE:
            field_class = names.submessage_type_ref(options, field)
            if field.type() == _FieldProto.TYPE_GROUP:
                read = f'readGroup({field.number()}, value,'
            else:
                read = 'readMessage(value,'
            output.write_line(f'var value = new {field_class};')
            output.write_line(
                f'reader.{read}{field_class}.deserializeBinaryFromReader);'
            )
        else:
            field_type = js_types.field_type_annotation(
                options,
                field,
                is_setter_argument=False,
                force_present=True,
                singular_if_not_packed=True,
                bytes_mode='U8',
            )
            reader = read_write_method_name(field, is_writer=False)
            output.write_line(
                f'var value = /** @type {{{field_type}}} */ '
                f'(reader.read{reader}());'
            )

        if field.is_repeated() and not field.is_packed():
            adder = names.getter_name(field, drop_list=True)
            output.write_line(f'msg.add{adder}(value);')
        else:
            # Singular fields and packed repeated fields receive either the
            # field's value or the array of all its values.
            output.write_line(f'msg.set{names.getter_name(field)}(value);')

        output.write_line('break;')


def generate_deserialize_binary(
    options: GeneratorOptions, output: OutputFile, message: ProtoMessage
) -> None:
    """Writes deserializeBinary() and deserializeBinaryFromReader()."""
    class_name = names.message_path(options, message)

    output.write_lines(
        [
            '/**',
            ' * Deserializes binary data (in protobuf wire format).',
            ' * @param {jspb.ByteSource} bytes The bytes to deserialize.',
            f' * @return {{!{class_name}}}',
            ' */',
            f'{class_name}.deserializeBinary = function(bytes) {{',
            '  var reader = new jspb.BinaryReader(bytes);',
            f'  var msg = new {class_name};',
            f'  return {class_name}.deserializeBinaryFromReader(msg, reader);',
            '};',
            '',
            '',
            '/**',
            ' * Deserializes binary data (in protobuf wire format) from the',
            ' * given reader into the given message object.',
            f' * @param {{!{class_name}}} msg The message object to '
            'deserialize into.',
            ' * @param {!jspb.BinaryReader} reader The BinaryReader to use.',
            f' * @return {{!{class_name}}}',
            ' */',
            f'{class_name}.deserializeBinaryFromReader = '
            'function(msg, reader) {',
        ]
    )

    with output.indent():
        output.write_line('while (reader.nextField()) {')
        with output.indent():
            output.write_line('if (reader.isEndGroup()) {')
            with output.indent():
                output.write_line('break;')
            output.write_line('}')
            output.write_line('var field = reader.getFieldNumber();')
            output.write_line('switch (field) {')

            for field in message.fields():
                if not field.is_ignored():
                    _generate_deserialize_field(options, output, field)

            output.write_line('default:')
            with output.indent():
                if message.is_extendable():
                    ext_object = names.extensions_object_name(
                        options, message.file(), message
                    )
                    output.write_line(
                        'jspb.Message.readBinaryExtension(msg, reader,'
                    )
                    with output.indent():
                        output.write_lines(
                            [
                                f'{ext_object}Binary,',
                                f'{class_name}.prototype.getExtension,',
                                f'{class_name}.prototype.setExtension);',
                            ]
                        )
                else:
                    output.write_line('reader.skipField();')
                output.write_line('break;')
            output.write_line('}')
        output.write_line('}')
        output.write_line('return msg;')

    output.write_lines(['};', '', ''])


def _generate_serialize_field(
    options: GeneratorOptions, output: OutputFile, field: ProtoMessageField
) -> None:
    index = names.field_index(field)

    if field.has_presence() and field.cpp_type() is not CppType.MESSAGE:
        typed_annotation = js_types.field_type_annotation(
            options,
            field,
            is_setter_argument=False,
            force_present=False,
            singular_if_not_packed=False,
        )
        output.write_line(
            f'f = /** @type {{{typed_annotation}}} */ '
            f'(jspb.Message.getField(message, {index}));'
        )
    else:
        # Maps are not created lazily just to find out they are empty.
        no_lazy = 'true' if field.is_map() else ''
        getter = names.getter_name(field, bytes_mode='U8')
        output.write_line(f'f = message.get{getter}({no_lazy});')

    output.write_line(f'if ({write_condition(field)}) {{')

    with output.indent():
        if field.is_map():
            key = field.map_key()
            value = field.map_value()
            args = [
                str(field.number()),
                'writer',
                writer_method_name(key),
                writer_method_name(value),
            ]
            value_class = _map_value_class(options, value)
            if value_class is not None:
                args.append(f'{value_class}.serializeBinaryToWriter')
            output.write_line(f'f.serializeBinary({", ".join(args)});')
        else:
            writer = read_write_method_name(field, is_writer=True)
            output.write_line(f'writer.write{writer}(')
            with output.indent():
                output.write_line(f'{field.number()},')
                if field.cpp_type() is CppType.MESSAGE:
                    output.write_line('f,')
                    output.write_line(
                        names.submessage_type_ref(options, field)
                        + '.serializeBinaryToWriter'
                    )
                else:
                    output.write_line('f')
            output.write_line(');')

    output.write_line('}')


def generate_serialize_binary(
    options: GeneratorOptions, output: OutputFile, message: ProtoMessage
) -> None:
    """Writes serializeBinary() and serializeBinaryToWriter()."""
    class_name = names.message_path(options, message)

    output.write_lines(
        [
            '/**',
            ' * Serializes the message to binary data (in protobuf wire '
            'format).',
            ' * @return {!Uint8Array}',
            ' */',
            f'{class_name}.prototype.serializeBinary = function() {{',
            '  var writer = new jspb.BinaryWriter();',
            f'  {class_name}.serializeBinaryToWriter(this, writer);',
            '  return writer.getResultBuffer();',
            '};',
            '',
            '',
            '/**',
            ' * Serializes the given message to binary data (in protobuf wire',
            ' * format), writing to the given BinaryWriter.',
            f' * @param {{!{class_name}}} message',
            ' * @param {!jspb.BinaryWriter} writer',
            ' * @suppress {unusedLocalVariables} f is only used for nested '
            'messages',
            ' */',
            f'{class_name}.serializeBinaryToWriter = '
            'function(message, writer) {',
        ]
    )

    with output.indent():
        output.write_line('var f = undefined;')
        for field in message.fields():
            if not field.is_ignored():
                _generate_serialize_field(options, output, field)

        if message.is_extendable():
            ext_object = names.extensions_object_name(
                options, message.file(), message
            )
            output.write_line(
                'jspb.Message.serializeBinaryExtensions(message, writer,'
            )
            output.write_line(
                f'  {ext_object}Binary, {class_name}.prototype.getExtension);'
            )

    output.write_lines(['};', '', ''])
