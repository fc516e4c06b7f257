#!/usr/bin/env python3
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
"""Tests for default values and Closure type annotations."""

import unittest

from google.protobuf import descriptor_pb2, text_format

from pw_jspb import js_types
from pw_jspb.options import GeneratorOptions
from pw_jspb.proto_tree import build_file_tree

DEFAULTS_PROTO = r"""
name: "test/defaults.proto"
package: "test.pkg"
syntax: "proto2"
message_type {
  name: "Defaults"
  field {
    name: "u32" number: 1 label: LABEL_OPTIONAL type: TYPE_UINT32
    default_value: "4294967295"
  }
  field {
    name: "u64" number: 2 label: LABEL_OPTIONAL type: TYPE_UINT64
    default_value: "9223372036854775808"
  }
  field {
    name: "one" number: 3 label: LABEL_OPTIONAL type: TYPE_FLOAT
    default_value: "1"
  }
  field {
    name: "big" number: 4 label: LABEL_OPTIONAL type: TYPE_DOUBLE
    default_value: "100000000000"
  }
  field {
    name: "text" number: 5 label: LABEL_OPTIONAL type: TYPE_STRING
    default_value: "a\"b<c"
  }
  field {
    name: "blob" number: 6 label: LABEL_OPTIONAL type: TYPE_BYTES
    default_value: "\\001ab"
  }
  field {
    name: "id" number: 7 label: LABEL_OPTIONAL type: TYPE_INT64
    options { jstype: JS_STRING }
  }
  field {
    name: "flag" number: 8 label: LABEL_OPTIONAL type: TYPE_BOOL
    default_value: "true"
  }
  field {
    name: "color" number: 9 label: LABEL_OPTIONAL type: TYPE_ENUM
    type_name: ".test.pkg.Color" default_value: "BLUE"
  }
  field {
    name: "first_color" number: 10 label: LABEL_OPTIONAL type: TYPE_ENUM
    type_name: ".test.pkg.Color"
  }
  field {
    name: "many" number: 11 label: LABEL_REPEATED type: TYPE_INT32
  }
  field {
    name: "child" number: 12 label: LABEL_OPTIONAL type: TYPE_MESSAGE
    type_name: ".test.pkg.Defaults"
  }
  field {
    name: "children" number: 13 label: LABEL_REPEATED type: TYPE_MESSAGE
    type_name: ".test.pkg.Defaults"
  }
  field {
    name: "negative" number: 14 label: LABEL_OPTIONAL type: TYPE_SINT32
    default_value: "-42"
  }
  field {
    name: "unset_float" number: 15 label: LABEL_OPTIONAL type: TYPE_FLOAT
  }
  field {
    name: "counts" number: 16 label: LABEL_REPEATED type: TYPE_MESSAGE
    type_name: ".test.pkg.Defaults.CountsEntry"
  }
  field {
    name: "needed" number: 17 label: LABEL_REQUIRED type: TYPE_MESSAGE
    type_name: ".test.pkg.Defaults"
  }
  nested_type {
    name: "CountsEntry"
    options { map_entry: true }
    field { name: "key" number: 1 label: LABEL_OPTIONAL type: TYPE_STRING }
    field {
      name: "value" number: 2 label: LABEL_OPTIONAL type: TYPE_ENUM
      type_name: ".test.pkg.Color"
    }
  }
}
enum_type {
  name: "Color"
  value { name: "RED" number: 3 }
  value { name: "BLUE" number: 5 }
}
"""


class FloatFormatTest(unittest.TestCase):
    """Tests printing floats the way JavaScript's toPrecision(6) would."""

    def test_to_precision(self) -> None:
        self.assertEqual(js_types.to_precision(1.0), '1.00000')
        self.assertEqual(js_types.to_precision(123.456), '123.456')
        self.assertEqual(js_types.to_precision(1e11), '1.00000e+11')
        self.assertEqual(js_types.to_precision(1e-7), '1.00000e-7')
        self.assertEqual(js_types.to_precision(0.0), '0.00000')

    def test_format_float(self) -> None:
        self.assertEqual(js_types.format_float(1.0), '1.0')
        self.assertEqual(js_types.format_float(0.1), '0.1')
        self.assertEqual(js_types.format_float(1e11), '1.0E11')
        self.assertEqual(js_types.format_float(1.5e-7), '1.5E-7')
        self.assertEqual(js_types.format_float(-2.5), '-2.5')

    def test_ties_round_away_from_zero(self) -> None:
        self.assertEqual(js_types.to_precision(100000.5), '100001')
        self.assertEqual(js_types.to_precision(999999.5), '1.00000e+6')
        self.assertEqual(js_types.format_float(100000.5), '100001.0')
        self.assertEqual(js_types.format_float(1234565.0), '1.23457E6')
        self.assertEqual(js_types.format_float(-100000.5), '-100001.0')

    def test_special_values(self) -> None:
        self.assertEqual(js_types.format_float(float('inf')), 'Infinity')
        self.assertEqual(js_types.format_float(float('-inf')), '-Infinity')
        self.assertEqual(js_types.format_float(float('nan')), 'NaN')


class EscapeTest(unittest.TestCase):
    """Tests escaping string and bytes literals."""

    def test_escape_printable(self) -> None:
        self.assertEqual(js_types.escape_js_string('hello'), 'hello')
        self.assertEqual(
            js_types.escape_js_string('<a href="x">'),
            '\\x3ca href\\x3d\\x22x\\x22\\x3e',
        )
        self.assertEqual(js_types.escape_js_string('a\nb\\'), 'a\\nb\\\\')

    def test_escape_non_ascii(self) -> None:
        self.assertEqual(js_types.escape_js_string('\x01'), '\\x01')
        self.assertEqual(js_types.escape_js_string('\xe9'), '\\xe9')
        self.assertEqual(js_types.escape_js_string('€'), '\\u20ac')

    def test_escape_surrogate_pairs(self) -> None:
        self.assertEqual(
            js_types.escape_js_string('\U0001F600'), '\\ud83d\\ude00'
        )

    def test_escape_base64(self) -> None:
        self.assertEqual(js_types.escape_base64(b'\x01ab'), 'AWFi')
        self.assertEqual(js_types.escape_base64(b''), '')


class FieldTypesTest(unittest.TestCase):
    """Tests defaults and annotations derived from fields."""

    def setUp(self) -> None:
        proto = text_format.Parse(
            DEFAULTS_PROTO, descriptor_pb2.FileDescriptorProto()
        )
        _, files = build_file_tree([proto])
        message = files['test/defaults.proto'].messages()[0]
        self.fields = {field.name(): field for field in message.fields()}
        self.options = GeneratorOptions()

    def _default(self, name: str) -> str:
        return js_types.field_default(self.fields[name])

    def test_unsigned_defaults_are_reinterpreted(self) -> None:
        self.assertEqual(self._default('u32'), '-1')
        self.assertEqual(self._default('u64'), '-9223372036854775808')
        self.assertEqual(self._default('negative'), '-42')

    def test_float_defaults(self) -> None:
        self.assertEqual(self._default('one'), '1.0')
        self.assertEqual(self._default('big'), '1.0E11')
        self.assertEqual(self._default('unset_float'), '0.0')

    def test_string_defaults(self) -> None:
        self.assertEqual(self._default('text'), '"a\\x22b\\x3cc"')
        self.assertEqual(self._default('blob'), '"AWFi"')

    def test_string_jstype_default(self) -> None:
        self.assertEqual(self._default('id'), '"0"')

    def test_other_defaults(self) -> None:
        self.assertEqual(self._default('flag'), 'true')
        self.assertEqual(self._default('color'), '5')
        self.assertEqual(self._default('first_color'), '3')
        self.assertEqual(self._default('many'), '[]')
        self.assertEqual(self._default('child'), 'null')

    def _getter_type(self, name: str, **kwargs) -> str:
        return js_types.field_type_annotation(
            self.options,
            self.fields[name],
            is_setter_argument=False,
            force_present=False,
            singular_if_not_packed=False,
            **kwargs,
        )

    def _setter_type(self, name: str) -> str:
        return js_types.field_type_annotation(
            self.options,
            self.fields[name],
            is_setter_argument=True,
            force_present=False,
            singular_if_not_packed=False,
        )

    def test_scalar_annotations(self) -> None:
        self.assertEqual(self._getter_type('u32'), 'number')
        self.assertEqual(self._getter_type('id'), 'string')
        self.assertEqual(self._getter_type('flag'), 'boolean')
        self.assertEqual(self._getter_type('color'), '!proto.test.pkg.Color')
        self.assertEqual(self._getter_type('many'), '!Array<number>')

    def test_bytes_annotations(self) -> None:
        self.assertEqual(self._getter_type('blob'), '!(string|Uint8Array)')
        self.assertEqual(self._getter_type('blob', bytes_mode='B64'), 'string')
        self.assertEqual(
            self._getter_type('blob', bytes_mode='U8'), '!Uint8Array'
        )

    def test_message_annotations(self) -> None:
        self.assertEqual(
            self._getter_type('child'), '?proto.test.pkg.Defaults'
        )
        self.assertEqual(
            self._setter_type('child'), '?proto.test.pkg.Defaults|undefined'
        )
        self.assertEqual(
            self._getter_type('children'), '!Array<!proto.test.pkg.Defaults>'
        )
        self.assertEqual(
            self._getter_type('needed'), '!proto.test.pkg.Defaults'
        )

    def test_type_tags(self) -> None:
        self.assertEqual(js_types.js_type_tag(self.fields['u32']), 'Int')
        self.assertEqual(js_types.js_type_tag(self.fields['id']), 'StringInt')
        self.assertEqual(js_types.js_type_tag(self.fields['text']), 'String')
        self.assertEqual(js_types.js_type_tag(self.fields['color']), 'Enum')

    def test_field_definition(self) -> None:
        self.assertEqual(
            js_types.field_definition(self.options, self.fields['u32']),
            'optional uint32 u32 = 1;',
        )
        self.assertEqual(
            js_types.field_definition(self.options, self.fields['many']),
            'repeated int32 many = 11;',
        )
        self.assertEqual(
            js_types.field_definition(self.options, self.fields['color']),
            'optional Color color = 9;',
        )
        self.assertEqual(
            js_types.field_definition(self.options, self.fields['needed']),
            'required Defaults needed = 17;',
        )
        self.assertEqual(
            js_types.field_definition(self.options, self.fields['counts']),
            'map<string, Color> counts = 16;',
        )

    def test_field_comments(self) -> None:
        blob = self.fields['blob']
        self.assertEqual(js_types.field_comments(blob, 'B64'), [])
        self.assertEqual(len(js_types.field_comments(blob, 'U8')), 2)


if __name__ == '__main__':
    unittest.main()
