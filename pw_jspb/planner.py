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
"""Plans the generated output files and the symbols they provide and require.

A run produces either one output file per input .proto file, or a single
"library" file aggregating every input in dependency order. Each output file
declares the namespaced symbols it defines (goog.provide, or goog.exportSymbol
for CommonJS) and imports the ones it references (goog.require).
"""

from dataclasses import dataclass, field as dataclass_field
import enum
import logging
import posixpath
from typing import Iterable, Iterator

from pw_jspb import codegen_jspb
from pw_jspb import names
from pw_jspb.codegen_jspb import UnimplementedError
from pw_jspb.options import GeneratorOptions, ImportStyle
from pw_jspb.output_file import OutputFile
from pw_jspb.proto_tree import (
    CppType,
    ProtoFile,
    ProtoMessage,
    ProtoMessageField,
)

_LOG = logging.getLogger(__name__)

# Symbols of the runtime library required by generated code.
_JSPB_MESSAGE_SYMBOLS = (
    'jspb.Message',
    'jspb.BinaryReader',
    'jspb.BinaryWriter',
)
_JSPB_EXTENSION_SYMBOLS = (
    'jspb.ExtensionFieldBinaryInfo',
    'jspb.ExtensionFieldInfo',
)
_JSPB_MAP_SYMBOL = 'jspb.Map'


class OutputMode(enum.Enum):
    ONE_OUTPUT_FILE_PER_INPUT_FILE = 1
    EVERYTHING_IN_ONE_FILE = 2
    ONE_OUTPUT_FILE_PER_SCC = 3


def output_mode(options: GeneratorOptions) -> OutputMode:
    """Selects how the generated code is partitioned into files.

    CommonJS output, and an explicit one_output_file_per_input_file=true,
    always produce one file per input. Otherwise a library name gathers
    everything into one file. An explicit one_output_file_per_input_file=false
    with no library requests one file per strongly connected component of the
    dependency graph.
    """
    if (
        options.import_style is not ImportStyle.CLOSURE
        or options.one_output_file_per_input_file
    ):
        return OutputMode.ONE_OUTPUT_FILE_PER_INPUT_FILE

    if options.library:
        return OutputMode.EVERYTHING_IN_ONE_FILE

    if options.one_output_file_per_input_file is None:
        return OutputMode.ONE_OUTPUT_FILE_PER_INPUT_FILE

    return OutputMode.ONE_OUTPUT_FILE_PER_SCC


def output_path(options: GeneratorOptions, filename: str) -> str:
    """Places a generated file name under the configured output directory."""
    return posixpath.normpath(posixpath.join(options.output_dir, filename))


#
# Provided symbols.
#
def message_provides(
    options: GeneratorOptions, message: ProtoMessage
) -> list[str]:
    """The symbols defined by a message class and everything nested in it."""
    if message.is_ignored():
        return []

    provides = [names.message_path(options, message)]
    provides.extend(
        names.enum_path(options, proto_enum)
        for proto_enum in message.nested_enums()
    )

    if names.has_oneof_fields(message):
        class_name = names.message_path(options, message)
        provides.extend(
            f'{class_name}.{names.oneof_name(oneof)}Case'
            for oneof in message.oneofs()
            if not oneof.is_ignored()
        )

    for nested in message.nested_messages():
        provides.extend(message_provides(options, nested))

    return provides


def file_provides(options: GeneratorOptions, proto_file: ProtoFile) -> set[str]:
    """The message and enum symbols defined by a file."""
    provided: set[str] = set()
    for message in proto_file.messages():
        provided.update(message_provides(options, message))
    for proto_enum in proto_file.enums():
        provided.add(names.enum_path(options, proto_enum))
    return provided


def extension_symbol(
    options: GeneratorOptions, extension: ProtoMessageField
) -> str:
    """The namespaced name of a file-scope extension field."""
    return (
        f'{names.namespace(options, extension.file())}.'
        f'{names.object_field_name(extension)}'
    )


def generate_provides(
    options: GeneratorOptions, output: OutputFile, provided: Iterable[str]
) -> None:
    for symbol in sorted(provided):
        if options.import_style is ImportStyle.CLOSURE:
            output.write_line(f"goog.provide('{symbol}');")
        elif options.import_style is ImportStyle.COMMONJS_STRICT:
            # The strict module object stands in for the global "proto".
            symbol = symbol[len('proto.') :]
            output.write_line(f"goog.exportSymbol('{symbol}', null, proto);")
        else:
            # goog.exportSymbol() builds the tree of objects that later
            # assignments such as foo.bar.Baz = function() {...} expect.
            output.write_line(f"goog.exportSymbol('{symbol}', null, global);")


def generate_test_only(options: GeneratorOptions, output: OutputFile) -> None:
    if options.testonly:
        output.write_lines(['goog.setTestOnly();', ''])
    output.write_line()


#
# Required symbols.
#
@dataclass
class Requirements:
    """Symbols referenced by the code of one output file.

    Attributes:
      required: Symbols imported with goog.require().
      forwards: Symbols only forward declared with goog.forwardDeclare().
      have_message: At least one message class is generated.
      have_extensions: At least one extension field is generated.
      have_map: At least one map field is generated.
    """

    required: set[str] = dataclass_field(default_factory=set)
    forwards: set[str] = dataclass_field(default_factory=set)
    have_message: bool = False
    have_extensions: bool = False
    have_map: bool = False

    def add_field(
        self, options: GeneratorOptions, field: ProtoMessageField
    ) -> None:
        """Requires the enum or message type of a field."""
        if field.cpp_type() is CppType.ENUM:
            # File-scope extensions of enum type do not create dependencies.
            if field.is_extension() and field.extension_scope() is None:
                return
            enum_path = names.enum_path(options, field.enum_type())
            if options.add_require_for_enums:
                self.required.add(enum_path)
            else:
                self.forwards.add(enum_path)
        elif field.cpp_type() is CppType.MESSAGE:
            if not field.message_type().is_ignored():
                self.required.add(
                    names.message_path(options, field.message_type())
                )

    def add_extension(
        self, options: GeneratorOptions, extension: ProtoMessageField
    ) -> None:
        """Requires an extension's type and the message it extends."""
        extendee = extension.containing_type()
        if extendee.full_name() != names.MESSAGE_SET_NAME:
            self.required.add(names.message_path(options, extendee))
        self.add_field(options, extension)

    def add_message(
        self, options: GeneratorOptions, message: ProtoMessage
    ) -> None:
        self.have_message = True

        for field in message.fields():
            if not field.is_ignored():
                self.add_field(options, field)
            if field.is_map():
                self.have_map = True

        for extension in message.extensions():
            if not extension.is_ignored():
                self.add_extension(options, extension)
                self.have_extensions = True

        for nested in message.nested_messages():
            if not nested.is_ignored():
                self.add_message(options, nested)

    def add_file(self, options: GeneratorOptions, proto_file: ProtoFile):
        for message in proto_file.messages():
            if not message.is_ignored():
                self.add_message(options, message)

        for extension in proto_file.extensions():
            if not extension.is_ignored():
                self.add_extension(options, extension)
                self.have_extensions = True

    def runtime_symbols(self) -> set[str]:
        """The jspb runtime classes the generated code depends on."""
        symbols: set[str] = set()
        if self.have_message:
            symbols.update(_JSPB_MESSAGE_SYMBOLS)
        if self.have_extensions:
            symbols.update(_JSPB_EXTENSION_SYMBOLS)
        if self.have_map:
            symbols.add(_JSPB_MAP_SYMBOL)
        return symbols


def file_requirements(
    options: GeneratorOptions, files: Iterable[ProtoFile]
) -> Requirements:
    requirements = Requirements()
    for proto_file in files:
        requirements.add_file(options, proto_file)
    return requirements


def generate_requires(
    options: GeneratorOptions,
    output: OutputFile,
    files: Iterable[ProtoFile],
    provided: set[str],
) -> None:
    """Writes the goog.require() and goog.forwardDeclare() calls for files.

    Symbols defined by the output file itself are never imported.
    """
    requirements = file_requirements(options, files)
    required = requirements.required | requirements.runtime_symbols()

    for symbol in sorted(required - provided):
        output.write_line(f"goog.require('{symbol}');")

    output.write_line()

    for symbol in sorted(requirements.forwards - provided):
        output.write_line(f"goog.forwardDeclare('{symbol}');")


def dependency_ordered_files(files: list[ProtoFile]) -> Iterator[ProtoFile]:
    """Yields the requested files, each after all of its dependencies.

    Dependencies outside the requested set are traversed for ordering but are
    not yielded themselves.
    """
    requested = set(files)
    visited: set[ProtoFile] = set()

    def visit(proto_file: ProtoFile) -> Iterator[ProtoFile]:
        if proto_file in visited:
            return
        visited.add(proto_file)

        for dependency in proto_file.dependencies():
            yield from visit(dependency)

        if proto_file in requested:
            yield proto_file

    for proto_file in files:
        yield from visit(proto_file)


#
# Output files.
#
def _generate_commonjs_imports(
    options: GeneratorOptions, output: OutputFile, proto_file: ProtoFile
) -> None:
    output.write_line("var jspb = require('google-protobuf');")
    output.write_line('var goog = jspb;')

    if options.import_style is ImportStyle.COMMONJS_STRICT:
        # Strict mode keeps generated symbols out of the global scope.
        output.write_line('var proto = {};')
    else:
        output.write_line("var global = Function('return this')();")
    output.write_line()

    for dependency in proto_file.dependencies():
        alias = names.module_alias(dependency.name())
        path = names.root_path(
            proto_file.name(), dependency.name()
        ) + names.js_filename(options, dependency.name())
        output.write_line(f"var {alias} = require('{path}');")
        output.write_line(f'goog.object.extend(proto, {alias});')


def generate_file(
    options: GeneratorOptions, proto_file: ProtoFile
) -> OutputFile:
    """Generates the output file for a single .proto file."""
    output = OutputFile(
        output_path(options, names.js_filename(options, proto_file.name()))
    )
    _LOG.debug('Generating %s from %s', output.name(), proto_file.name())

    codegen_jspb.generate_header(output, proto_file)

    if options.import_style.is_commonjs():
        _generate_commonjs_imports(options, output, proto_file)

    provided: set[str] = set()
    extensions = []
    for extension in proto_file.extensions():
        # Ignored extensions are only skipped for Closure imports.
        if (
            options.import_style is ImportStyle.CLOSURE
            and extension.is_ignored()
        ):
            continue
        provided.add(extension_symbol(options, extension))
        extensions.append(extension)

    provided |= file_provides(options, proto_file)
    generate_provides(options, output, provided)

    if options.import_style is ImportStyle.CLOSURE:
        generate_requires(options, output, [proto_file], provided)

    codegen_jspb.generate_classes_and_enums(options, output, proto_file)

    # Extensions nested in messages are emitted along with their classes.
    for extension in extensions:
        codegen_jspb.generate_extension(options, output, extension)

    if options.import_style is ImportStyle.COMMONJS and provided:
        namespace = names.namespace(options, proto_file)
        output.write_line(f'goog.object.extend(exports, {namespace});')
    elif options.import_style is ImportStyle.COMMONJS_STRICT:
        output.write_line('goog.object.extend(exports, proto);')

    return output


def generate_library(
    options: GeneratorOptions, files: list[ProtoFile]
) -> OutputFile:
    """Generates a single output file containing every requested file."""
    output = OutputFile(
        output_path(options, options.library + options.file_extension())
    )
    _LOG.debug('Generating library %s from %d files', output.name(), len(files))

    extensions = [
        extension
        for proto_file in files
        for extension in proto_file.extensions()
    ]

    codegen_jspb.generate_header(output, files[0] if len(files) == 1 else None)

    provided: set[str] = set()
    for proto_file in files:
        provided |= file_provides(options, proto_file)
    output.write_line()
    provided.update(
        extension_symbol(options, extension)
        for extension in extensions
        if not extension.is_ignored()
    )

    generate_provides(options, output, provided)
    generate_test_only(options, output)
    generate_requires(options, output, files, provided)

    for proto_file in dependency_ordered_files(files):
        codegen_jspb.generate_classes_and_enums(options, output, proto_file)

    for extension in extensions:
        if not extension.is_ignored():
            codegen_jspb.generate_extension(options, output, extension)

    return output


def generate_all(
    files: list[ProtoFile], options: GeneratorOptions
) -> list[OutputFile]:
    """Generates JavaScript for the requested .proto files.

    Args:
      files: The files to generate, in the order they were requested.
      options: The parsed generator options.

    Returns:
      The generated files, in the order they were produced.

    Raises:
      UnimplementedError: Source annotations or per-SCC output were requested.
      CodegenError: A field could not be generated.
    """
    if options.annotate_code:
        raise UnimplementedError('annotate_code is not supported')

    mode = output_mode(options)
    _LOG.debug('Output mode: %s', mode.name)

    if mode is OutputMode.ONE_OUTPUT_FILE_PER_SCC:
        raise UnimplementedError(
            'one output file per SCC is not supported; set library or '
            'one_output_file_per_input_file'
        )

    if mode is OutputMode.EVERYTHING_IN_ONE_FILE:
        if not files:
            return []
        return [generate_library(options, files)]

    return [generate_file(options, proto_file) for proto_file in files]
