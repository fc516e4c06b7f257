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
"""pw_jspb compiler plugin.

This file implements a protobuf compiler plugin which generates JavaScript
message classes for the jspb (google-protobuf) runtime. Invoke it through
protoc as protoc-gen-jspb:

  protoc --plugin=protoc-gen-jspb --jspb_out=import_style=commonjs:out foo.proto
"""

import logging
import os
import sys

from google.protobuf.compiler import plugin_pb2

from pw_jspb import planner
from pw_jspb import proto_tree
from pw_jspb.codegen_jspb import CodegenError
from pw_jspb.options import OptionsError, parse_parameter

_LOG = logging.getLogger(__name__)

LOG_LEVEL_ENV_VAR = 'PW_JSPB_LOG_LEVEL'


def process_proto_request(
    req: plugin_pb2.CodeGeneratorRequest, res: plugin_pb2.CodeGeneratorResponse
) -> bool:
    """Handles a protoc CodeGeneratorRequest message.

    Generates code for the files in the request and writes the output to the
    specified CodeGeneratorResponse message. On failure, no files are added and
    the response's error field describes the problem.

    Args:
      req: A CodeGeneratorRequest for a proto compilation.
      res: A CodeGeneratorResponse to populate with the plugin's output.
    """
    try:
        codegen_options = parse_parameter(req.parameter)
        _, files = proto_tree.build_file_tree(req.proto_file)
        missing = [name for name in req.file_to_generate if name not in files]
        if missing:
            raise ValueError(f'No descriptor for {", ".join(missing)}')
        requested = [files[name] for name in req.file_to_generate]
        output_files = planner.generate_all(requested, codegen_options)
    except CodegenError as err:
        res.error = err.formatted_message()
        return False
    except (OptionsError, ValueError) as err:
        res.error = f'jspb: {err}'
        return False

    for output_file in output_files:
        fd = res.file.add()
        fd.name = output_file.name()
        fd.content = output_file.content()

    return True


def main() -> int:
    """Protobuf compiler plugin entrypoint.

    Reads a CodeGeneratorRequest proto from stdin and writes a
    CodeGeneratorResponse to stdout.
    """
    # protoc reads the response from stdout, so logs go to stderr.
    logging.basicConfig(
        stream=sys.stderr,
        level=os.environ.get(LOG_LEVEL_ENV_VAR, 'WARNING').upper(),
        format='%(levelname)s: %(name)s: %(message)s',
    )

    data = sys.stdin.buffer.read()
    request = plugin_pb2.CodeGeneratorRequest.FromString(data)
    response = plugin_pb2.CodeGeneratorResponse()

    # Declare that this plugin supports optional fields in proto3.
    response.supported_features |= (  # type: ignore[attr-defined]
        response.FEATURE_PROTO3_OPTIONAL
    )  # type: ignore[attr-defined]

    success = process_proto_request(request, response)
    if not success:
        print(response.error, file=sys.stderr)
        print('jspb failed to generate protobuf code', file=sys.stderr)

    sys.stdout.buffer.write(response.SerializeToString())
    return 0 if success else 1


if __name__ == '__main__':
    sys.exit(main())
