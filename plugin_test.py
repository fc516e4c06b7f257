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
"""Tests handling protoc plugin requests."""

import unittest

from google.protobuf import descriptor_pb2, text_format
from google.protobuf.compiler import plugin_pb2

from pw_jspb import plugin

GREETING_PROTO = """\
name: "greet/greeting.proto"
package: "greet"
syntax: "proto3"
message_type {
  name: "Greeting"
  field { name: "text" number: 1 label: LABEL_OPTIONAL type: TYPE_STRING }
  field {
    name: "mood" number: 2 label: LABEL_OPTIONAL type: TYPE_ENUM
    type_name: ".greet.Mood"
  }
}
enum_type {
  name: "Mood"
  value { name: "MOOD_HAPPY" number: 0 }
  value { name: "MOOD_GRUMPY" number: 1 }
}
"""


def _request(
    parameter: str = '', files: tuple[str, ...] = ('greet/greeting.proto',)
) -> plugin_pb2.CodeGeneratorRequest:
    request = plugin_pb2.CodeGeneratorRequest(
        parameter=parameter, file_to_generate=list(files)
    )
    request.proto_file.append(
        text_format.Parse(GREETING_PROTO, descriptor_pb2.FileDescriptorProto())
    )
    return request


class ProcessProtoRequestTest(unittest.TestCase):
    """Tests for process_proto_request."""

    def test_generates_files(self) -> None:
        response = plugin_pb2.CodeGeneratorResponse()
        self.assertTrue(
            plugin.process_proto_request(
                _request('import_style=commonjs'), response
            )
        )

        self.assertFalse(response.HasField('error'))
        self.assertEqual(
            [f.name for f in response.file], ['greet/greeting_pb.js']
        )
        content = response.file[0].content
        self.assertIn("goog.exportSymbol('proto.greet.Greeting', ", content)
        self.assertIn("goog.exportSymbol('proto.greet.Mood', ", content)
        self.assertIn(
            'proto.greet.Greeting.prototype.setMood = function(value) {\n'
            '  return jspb.Message.setProto3EnumField(this, 2, value);\n',
            content,
        )

    def test_output_dir(self) -> None:
        response = plugin_pb2.CodeGeneratorResponse()
        self.assertTrue(
            plugin.process_proto_request(
                _request('output_dir=gen,library=greetings'), response
            )
        )
        self.assertEqual(
            [f.name for f in response.file], ['gen/greetings.js']
        )

    def test_bad_option(self) -> None:
        response = plugin_pb2.CodeGeneratorResponse()
        self.assertFalse(
            plugin.process_proto_request(_request('bogus'), response)
        )
        self.assertEqual(response.error, 'jspb: Unknown option: bogus')
        self.assertEqual(len(response.file), 0)

    def test_missing_file(self) -> None:
        response = plugin_pb2.CodeGeneratorResponse()
        self.assertFalse(
            plugin.process_proto_request(
                _request(files=('greet/missing.proto',)), response
            )
        )
        self.assertEqual(
            response.error, 'jspb: No descriptor for greet/missing.proto'
        )

    def test_unimplemented_option(self) -> None:
        response = plugin_pb2.CodeGeneratorResponse()
        self.assertFalse(
            plugin.process_proto_request(
                _request('annotate_code'), response
            )
        )
        self.assertEqual(
            response.error,
            'jspb codegen error: annotate_code is not supported',
        )
        self.assertEqual(len(response.file), 0)


if __name__ == '__main__':
    unittest.main()
