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
"""Closure type annotations and default value literals for proto fields."""

import base64
import decimal
import math

from google.protobuf import descriptor_pb2
from google.protobuf import text_encoding

from pw_jspb import names
from pw_jspb.options import GeneratorOptions
from pw_jspb.proto_tree import CppType, ProtoMessageField, Syntax

_FieldProto = descriptor_pb2.FieldDescriptorProto

# Significant digits used when printing float and double defaults.
FLOAT_PRECISION = 6

_INTEGER_TYPES = frozenset(
    (CppType.INT32, CppType.INT64, CppType.UINT32, CppType.UINT64)
)

_PRIMITIVE_TYPES = frozenset(('undefined', 'string', 'number', 'boolean'))

_STRING_ESCAPES = {
    "'": '\\x27',
    '"': '\\x22',
    '<': '\\x3c',
    '=': '\\x3d',
    '>': '\\x3e',
    '&': '\\x26',
    '\b': '\\b',
    '\t': '\\t',
    '\n': '\\n',
    '\f': '\\f',
    '\r': '\\r',
    '\\': '\\\\',
}

# The JSType tag used in jspb.Message.setProto3<Tag>Field().
_TYPE_TAGS: dict[int, str] = {
    _FieldProto.TYPE_DOUBLE: 'Float',
    _FieldProto.TYPE_FLOAT: 'Float',
    _FieldProto.TYPE_INT32: 'Int',
    _FieldProto.TYPE_UINT32: 'Int',
    _FieldProto.TYPE_INT64: 'Int',
    _FieldProto.TYPE_UINT64: 'Int',
    _FieldProto.TYPE_FIXED32: 'Int',
    _FieldProto.TYPE_FIXED64: 'Int',
    _FieldProto.TYPE_SINT32: 'Int',
    _FieldProto.TYPE_SINT64: 'Int',
    _FieldProto.TYPE_SFIXED32: 'Int',
    _FieldProto.TYPE_SFIXED64: 'Int',
    _FieldProto.TYPE_BOOL: 'Boolean',
    _FieldProto.TYPE_STRING: 'String',
    _FieldProto.TYPE_BYTES: 'Bytes',
    _FieldProto.TYPE_ENUM: 'Enum',
}


def is_integral_with_string_jstype(field: ProtoMessageField) -> bool:
    """True for 64-bit integer fields represented as strings in JavaScript."""
    if field.cpp_type() not in (CppType.INT64, CppType.UINT64):
        return False
    return field.jstype() == descriptor_pb2.FieldOptions.JS_STRING


def _maybe_number_string(field: ProtoMessageField, value: str) -> str:
    if is_integral_with_string_jstype(field):
        return f'"{value}"'
    return value


def to_precision(value: float, precision: int = FLOAT_PRECISION) -> str:
    """Formats a number like JavaScript's Number.prototype.toPrecision().

    The exact binary value is rounded with ties going away from zero, so
    100000.5 prints as 100001 rather than Python's round-half-even 100000.
    """
    if math.isnan(value):
        return 'NaN'
    if math.isinf(value):
        return 'Infinity' if value > 0 else '-Infinity'
    if value == 0:
        # Also covers -0, which toPrecision() prints unsigned.
        return '0.' + '0' * (precision - 1) if precision > 1 else '0'

    exact = decimal.Decimal(value)
    rounded = exact.quantize(
        decimal.Decimal(1).scaleb(exact.adjusted() - precision + 1),
        rounding=decimal.ROUND_HALF_UP,
    )
    # Rounding may carry into a new leading digit, e.g. 999999.5.
    exponent = rounded.adjusted()

    if exponent < -6 or exponent >= precision:
        mantissa = rounded.scaleb(-exponent).quantize(
            decimal.Decimal(1).scaleb(1 - precision),
            rounding=decimal.ROUND_HALF_UP,
        )
        sign = '+' if exponent >= 0 else '-'
        return f'{mantissa:f}e{sign}{abs(exponent)}'

    return format(
        rounded.quantize(decimal.Decimal(1).scaleb(exponent - precision + 1)),
        'f',
    )


def post_process_float(result: str) -> str:
    """Normalizes a toPrecision() string to the canonical default format.

    Scientific notation gets an uppercase E, at least one fractional mantissa
    digit and an exponent without "+" or leading zeros. Plain decimals keep
    exactly one trailing zero at most, gaining ".0" when they have no point.
    """
    if result in ('Infinity', '-Infinity', 'NaN'):
        return result

    exp_pos = result.find('e')
    if exp_pos != -1:
        mantissa = result[:exp_pos]
        exponent = result[exp_pos + 1 :]

        frac_pos = mantissa.find('.')
        while len(mantissa) > frac_pos + 2 and mantissa.endswith('0'):
            mantissa = mantissa[:-1]

        exp_neg = False
        if exponent.startswith('+'):
            exponent = exponent[1:]
        elif exponent.startswith('-'):
            exp_neg = True
            exponent = exponent[1:]
        exponent = exponent.lstrip('0') or '0'

        return mantissa + 'E' + ('-' if exp_neg else '') + exponent

    frac_pos = result.find('.')
    if frac_pos == -1:
        return result + '.0'

    while len(result) > frac_pos + 2 and result.endswith('0'):
        result = result[:-1]
    return result


def format_float(value: float) -> str:
    return post_process_float(to_precision(value))


def _utf16_code_units(text: str):
    for char in text:
        code_point = ord(char)
        if code_point > 0xFFFF:
            code_point -= 0x10000
            yield 0xD800 + (code_point >> 10)
            yield 0xDC00 + (code_point & 0x3FF)
        else:
            yield code_point


def escape_js_string(text: str) -> str:
    """Escapes text for use inside a double-quoted JavaScript literal.

    Characters outside printable ASCII become \\xXX below 0x100 and \\uXXXX
    per UTF-16 code unit above it.
    """
    result = []
    for unit in _utf16_code_units(text):
        char = chr(unit)
        if char in _STRING_ESCAPES:
            result.append(_STRING_ESCAPES[char])
        elif 0x20 <= unit <= 0x7E:
            result.append(char)
        elif unit >= 0x100:
            result.append(f'\\u{unit:04x}')
        else:
            result.append(f'\\x{unit:02x}')
    return ''.join(result)


def escape_base64(data: bytes) -> str:
    return base64.b64encode(data).decode('ascii')


def _reinterpret_unsigned(value: int, bits: int) -> int:
    """Reads an unsigned value as the two's complement signed equivalent."""
    if value >= 1 << (bits - 1):
        return value - (1 << bits)
    return value


def field_default(field: ProtoMessageField) -> str:
    """The JavaScript literal of the field's default value."""
    if field.is_repeated():
        return '[]'

    text = field.default_value_text()
    cpp_type = field.cpp_type()

    if cpp_type is CppType.MESSAGE:
        return 'null'

    if cpp_type in _INTEGER_TYPES:
        value = int(text) if text else 0
        if cpp_type is CppType.UINT32:
            value = _reinterpret_unsigned(value, 32)
        elif cpp_type is CppType.UINT64:
            value = _reinterpret_unsigned(value, 64)
        return _maybe_number_string(field, str(value))

    if cpp_type is CppType.ENUM:
        proto_enum = field.enum_type()
        if text:
            return str(proto_enum.value_number(text))
        values = proto_enum.values()
        return str(values[0][1]) if values else '0'

    if cpp_type is CppType.BOOL:
        return 'true' if text == 'true' else 'false'

    if cpp_type in (CppType.FLOAT, CppType.DOUBLE):
        return format_float(float(text) if text else 0.0)

    if field.type() == _FieldProto.TYPE_STRING:
        return '"' + escape_js_string(text or '') + '"'

    # protoc serializes bytes defaults C-escaped.
    data = text_encoding.CUnescape(text) if text else b''
    return '"' + escape_base64(data) + '"'


def proto_type_name(options: GeneratorOptions, field: ProtoMessageField) -> str:
    """The field's type as written in a .proto file, with JS paths for types."""
    if field.cpp_type() is CppType.MESSAGE:
        return names.message_path(options, field.message_type())
    if field.cpp_type() is CppType.ENUM:
        return names.enum_path(options, field.enum_type())
    return field.declared_type_name()


def _string_type_name(field: ProtoMessageField, bytes_mode: str) -> str:
    if field.type() == _FieldProto.TYPE_BYTES:
        if bytes_mode == '':
            return '(string|Uint8Array)'
        if bytes_mode == 'U8':
            return 'Uint8Array'
    return 'string'


def js_type_name(
    options: GeneratorOptions, field: ProtoMessageField, bytes_mode: str = ''
) -> str:
    """The element type of the field in Closure type syntax."""
    cpp_type = field.cpp_type()
    if cpp_type is CppType.BOOL:
        return 'boolean'
    if cpp_type in _INTEGER_TYPES:
        return 'string' if is_integral_with_string_jstype(field) else 'number'
    if cpp_type in (CppType.FLOAT, CppType.DOUBLE):
        return 'number'
    if cpp_type is CppType.STRING:
        return _string_type_name(field, bytes_mode)
    if cpp_type is CppType.ENUM:
        return names.enum_path(options, field.enum_type())
    return names.message_path(options, field.message_type())


def returns_null_when_unset(field: ProtoMessageField) -> bool:
    """True for singular message fields, whose getters return null if unset."""
    return field.cpp_type() is CppType.MESSAGE and field.is_optional()


def declared_return_type_is_nullable(field: ProtoMessageField) -> bool:
    """Whether a getter's declared type admits null.

    Required fields, enum fields and proto3 scalars are declared non-null even
    when unset.
    """
    if field.is_required() or field.type() == _FieldProto.TYPE_ENUM:
        return False
    if (
        field.file().syntax() is Syntax.PROTO3
        and field.cpp_type() is not CppType.MESSAGE
    ):
        return False
    return returns_null_when_unset(field)


def setter_accepts_undefined(field: ProtoMessageField) -> bool:
    return returns_null_when_unset(field)


def setter_accepts_null(field: ProtoMessageField) -> bool:
    return returns_null_when_unset(field)


def is_primitive(js_type: str) -> bool:
    """Types that are non-nullable by default and never take a "!"."""
    return js_type in _PRIMITIVE_TYPES


def field_type_annotation(
    options: GeneratorOptions,
    field: ProtoMessageField,
    is_setter_argument: bool,
    force_present: bool,
    singular_if_not_packed: bool,
    bytes_mode: str = '',
    force_singular: bool = False,
) -> str:
    """Builds the Closure type of a field's getter, setter or wire value.

    Args:
      options: Generator options, used to compute type paths.
      field: The field being annotated.
      is_setter_argument: Annotate a setter's argument rather than a getter.
      force_present: Never add null to the type.
      singular_if_not_packed: Unpacked repeated fields use their element type,
        as the wire reader produces one element at a time.
      bytes_mode: '', 'B64' or 'U8', the representation of bytes values.
      force_singular: Always use the element type.
    """
    js_type = js_type_name(options, field, bytes_mode)

    if (
        not force_singular
        and field.is_repeated()
        and (field.is_packed() or not singular_if_not_packed)
    ):
        if field.type() == _FieldProto.TYPE_BYTES and bytes_mode == '':
            js_type = '(Array<!Uint8Array>|Array<string>)'
        else:
            if not is_primitive(js_type):
                js_type = '!' + js_type
            js_type = f'Array<{js_type}>'

    is_null_or_undefined = False

    if is_setter_argument:
        if setter_accepts_null(field):
            js_type = '?' + js_type
            is_null_or_undefined = True
        if setter_accepts_undefined(field):
            js_type += '|undefined'
            is_null_or_undefined = True
    elif not force_present and declared_return_type_is_nullable(field):
        js_type = '?' + js_type
        is_null_or_undefined = True

    if not is_null_or_undefined and not is_primitive(js_type):
        js_type = '!' + js_type

    return js_type


def js_type_tag(field: ProtoMessageField) -> str:
    """The type tag naming the proto3 setter, e.g. Int for setProto3IntField."""
    tag = _TYPE_TAGS.get(field.type(), '')
    if tag == 'Int' and is_integral_with_string_jstype(field):
        return 'StringInt'
    return tag


def field_definition(
    options: GeneratorOptions, field: ProtoMessageField
) -> str:
    """A one-line .proto style summary of the field for JSDoc comments."""
    if field.is_map():
        key = field.map_key()
        value = field.map_value()
        key_type = proto_type_name(options, key)
        if value.type() in (_FieldProto.TYPE_ENUM, _FieldProto.TYPE_MESSAGE):
            value_type = names.relative_type_name(value)
        else:
            value_type = proto_type_name(options, value)
        return (
            f'map<{key_type}, {value_type}> {field.name()} = {field.number()};'
        )

    if field.is_repeated():
        qualifier = 'repeated'
    elif field.is_optional():
        qualifier = 'optional'
    else:
        qualifier = 'required'

    name = field.name()
    if field.type() in (_FieldProto.TYPE_ENUM, _FieldProto.TYPE_MESSAGE):
        type_name = names.relative_type_name(field)
    elif field.type() == _FieldProto.TYPE_GROUP:
        type_name = 'group'
        name = field.message_type().name()
    else:
        type_name = proto_type_name(options, field)

    return f'{qualifier} {type_name} {name} = {field.number()};'


def field_comments(field: ProtoMessageField, bytes_mode: str) -> list[str]:
    """Extra JSDoc lines for a field accessor."""
    if field.type() == _FieldProto.TYPE_BYTES and bytes_mode == 'U8':
        return [
            'Note that Uint8Array is not supported on all browsers.',
            '@see http://caniuse.com/Uint8Array',
        ]
    return []
