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
"""Tests building the proto tree from file descriptors."""

import unittest

from google.protobuf import descriptor_pb2, text_format

from pw_jspb.proto_tree import (
    CppType,
    ProtoMessage,
    ProtoNode,
    Syntax,
    build_file_tree,
)

BASE_PROTO = """\
name: "test/base.proto"
package: "test.base"
syntax: "proto2"
message_type {
  name: "Base"
  extension_range { start: 100 end: 200 }
  field { name: "id" number: 1 label: LABEL_OPTIONAL type: TYPE_INT32 }
  field {
    name: "values" number: 2 label: LABEL_REPEATED type: TYPE_INT32
  }
  field {
    name: "packed_values" number: 3 label: LABEL_REPEATED type: TYPE_INT32
    options { packed: true }
  }
}
enum_type {
  name: "Color"
  value { name: "RED" number: 0 }
  value { name: "GREEN" number: 1 }
}
"""

USER_PROTO = """\
name: "test/user.proto"
package: "test.user"
dependency: "test/base.proto"
syntax: "proto3"
message_type {
  name: "User"
  field {
    name: "base" number: 1 label: LABEL_OPTIONAL type: TYPE_MESSAGE
    type_name: ".test.base.Base"
  }
  field {
    name: "color" number: 2 label: LABEL_OPTIONAL type: TYPE_ENUM
    type_name: ".test.base.Color"
  }
  field {
    name: "scores" number: 3 label: LABEL_REPEATED type: TYPE_MESSAGE
    type_name: ".test.user.User.ScoresEntry"
  }
  field {
    name: "nickname" number: 4 label: LABEL_OPTIONAL type: TYPE_STRING
    oneof_index: 0 proto3_optional: true
  }
  field {
    name: "email" number: 5 label: LABEL_OPTIONAL type: TYPE_STRING
    oneof_index: 1
  }
  field {
    name: "phone" number: 6 label: LABEL_OPTIONAL type: TYPE_STRING
    oneof_index: 1
  }
  field { name: "age" number: 7 label: LABEL_OPTIONAL type: TYPE_INT32 }
  field {
    name: "tags" number: 8 label: LABEL_REPEATED type: TYPE_INT32
  }
  field {
    name: "flags" number: 9 label: LABEL_REPEATED type: TYPE_INT32
    options { packed: false }
  }
  nested_type {
    name: "ScoresEntry"
    options { map_entry: true }
    field { name: "key" number: 1 label: LABEL_OPTIONAL type: TYPE_STRING }
    field { name: "value" number: 2 label: LABEL_OPTIONAL type: TYPE_INT32 }
  }
  nested_type {
    name: "Address"
    field { name: "city" number: 1 label: LABEL_OPTIONAL type: TYPE_STRING }
  }
  oneof_decl { name: "_nickname" }
  oneof_decl { name: "contact" }
}
extension {
  name: "user_id" number: 100 label: LABEL_OPTIONAL type: TYPE_INT64
  extendee: ".test.base.Base"
}
"""


def _parse(text: str) -> descriptor_pb2.FileDescriptorProto:
    return text_format.Parse(text, descriptor_pb2.FileDescriptorProto())


class ProtoTreeTest(unittest.TestCase):
    """Tests the structure of a built proto tree."""

    def setUp(self) -> None:
        self.root, self.files = build_file_tree(
            [_parse(BASE_PROTO), _parse(USER_PROTO)]
        )
        self.base_file = self.files['test/base.proto']
        self.user_file = self.files['test/user.proto']
        self.user = self.user_file.messages()[0]

    def _field(self, message: ProtoMessage, name: str):
        for field in message.fields():
            if field.name() == name:
                return field
        raise AssertionError(f'No field {name}')

    def test_files_in_order(self) -> None:
        self.assertEqual(
            list(self.files), ['test/base.proto', 'test/user.proto']
        )
        self.assertIs(self.user_file.syntax(), Syntax.PROTO3)
        self.assertIs(self.base_file.syntax(), Syntax.PROTO2)
        self.assertEqual(self.user_file.dependencies(), [self.base_file])

    def test_find_nodes(self) -> None:
        address = self.root.find('test.user.User.Address')
        assert address is not None
        self.assertEqual(address.type(), ProtoNode.Type.MESSAGE)
        self.assertEqual(address.full_name(), 'test.user.User.Address')
        self.assertEqual(address.nested_name(), 'User.Address')
        self.assertIs(address.containing_type(), self.user)
        self.assertIs(address.file(), self.user_file)

        self.assertIsNone(self.root.find('test.user.Missing'))

        color = self.root.find('test.base.Color')
        assert color is not None
        self.assertEqual(color.type(), ProtoNode.Type.ENUM)
        self.assertEqual(color.values(), [('RED', 0), ('GREEN', 1)])
        self.assertEqual(color.value_number('GREEN'), 1)
        with self.assertRaises(ValueError):
            color.value_number('BLUE')

    def test_packages_are_shared(self) -> None:
        test_package = self.root.find('test')
        assert test_package is not None
        self.assertEqual(
            [child.name() for child in test_package.children()],
            ['base', 'user'],
        )

    def test_children_are_direct_only(self) -> None:
        self.assertEqual(
            [child.name() for child in self.root.children()], ['test']
        )
        with self.assertRaises(TypeError):
            iter(self.root)

    def test_invalid_child(self) -> None:
        color = self.root.find('test.base.Color')
        assert color is not None
        with self.assertRaises(ValueError):
            color.add_child(ProtoMessage('Nested', self.base_file))

    def test_field_types_are_resolved(self) -> None:
        base = self._field(self.user, 'base')
        self.assertIs(base.cpp_type(), CppType.MESSAGE)
        self.assertIs(base.message_type(), self.base_file.messages()[0])

        color = self._field(self.user, 'color')
        self.assertIs(color.cpp_type(), CppType.ENUM)
        self.assertIs(color.enum_type(), self.base_file.enums()[0])

    def test_map_field(self) -> None:
        scores = self._field(self.user, 'scores')
        self.assertTrue(scores.is_map())
        self.assertEqual(scores.map_key().name(), 'key')
        self.assertEqual(scores.map_value().name(), 'value')
        self.assertTrue(scores.message_type().is_ignored())
        self.assertFalse(self._field(self.user, 'tags').is_map())

    def test_oneofs(self) -> None:
        synthetic, contact = self.user.oneofs()
        self.assertTrue(synthetic.is_synthetic())
        self.assertTrue(synthetic.is_ignored())
        self.assertFalse(contact.is_synthetic())
        self.assertEqual(
            [field.name() for field in contact.fields()], ['email', 'phone']
        )

        self.assertFalse(self._field(self.user, 'nickname').in_real_oneof())
        self.assertTrue(self._field(self.user, 'email').in_real_oneof())

    def test_presence(self) -> None:
        self.assertTrue(self._field(self.user, 'base').has_presence())
        self.assertTrue(self._field(self.user, 'nickname').has_presence())
        self.assertTrue(self._field(self.user, 'email').has_presence())
        self.assertFalse(self._field(self.user, 'age').has_presence())
        self.assertFalse(self._field(self.user, 'tags').has_presence())

        base = self.base_file.messages()[0]
        self.assertTrue(self._field(base, 'id').has_presence())

    def test_packing(self) -> None:
        base = self.base_file.messages()[0]
        self.assertFalse(self._field(base, 'values').is_packed())
        self.assertTrue(self._field(base, 'packed_values').is_packed())
        self.assertTrue(self._field(self.user, 'tags').is_packed())
        self.assertFalse(self._field(self.user, 'flags').is_packed())
        self.assertFalse(self._field(self.user, 'scores').is_packable())

    def test_extensions(self) -> None:
        (user_id,) = self.user_file.extensions()
        self.assertTrue(user_id.is_extension())
        self.assertIs(user_id.containing_type(), self.base_file.messages()[0])
        self.assertIsNone(user_id.extension_scope())
        self.assertIs(user_id.file(), self.user_file)
        self.assertTrue(user_id.has_presence())
        self.assertFalse(user_id.is_ignored())
        self.assertTrue(self.base_file.messages()[0].is_extendable())

    def test_descriptor_extensions_are_ignored(self) -> None:
        descriptor = descriptor_pb2.FileDescriptorProto()
        descriptor_pb2.DESCRIPTOR.CopyToProto(descriptor)

        options_proto = _parse(
            """\
            name: "test/options.proto"
            package: "test.options"
            dependency: "google/protobuf/descriptor.proto"
            extension {
              name: "my_option" number: 50000 label: LABEL_OPTIONAL
              type: TYPE_BOOL extendee: ".google.protobuf.FieldOptions"
            }
            """
        )
        _, files = build_file_tree([descriptor, options_proto])
        (my_option,) = files['test/options.proto'].extensions()
        self.assertTrue(my_option.is_ignored())

    def test_unknown_dependency(self) -> None:
        with self.assertRaises(ValueError):
            build_file_tree([_parse(USER_PROTO)])

    def test_unresolved_type(self) -> None:
        broken = _parse(
            """\
            name: "broken.proto"
            message_type {
              name: "Broken"
              field {
                name: "missing" number: 1 label: LABEL_OPTIONAL
                type: TYPE_MESSAGE type_name: ".nowhere.Missing"
              }
            }
            """
        )
        with self.assertRaises(ValueError):
            build_file_tree([broken])


if __name__ == '__main__':
    unittest.main()
