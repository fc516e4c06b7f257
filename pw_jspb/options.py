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
"""Generator options parsed from the protoc plugin parameter string."""

from dataclasses import dataclass
import enum
import logging
from shlex import shlex

_LOG = logging.getLogger(__name__)


class OptionsError(ValueError):
    """An unrecognized or malformed generator option."""


class ImportStyle(enum.Enum):
    """How generated files declare and import their symbols."""

    CLOSURE = 'closure'
    COMMONJS = 'commonjs'
    COMMONJS_STRICT = 'commonjs_strict'

    def is_commonjs(self) -> bool:
        return self is not ImportStyle.CLOSURE


@dataclass(frozen=True)
class GeneratorOptions:
    output_dir: str = '.'
    namespace_prefix: str = ''
    import_style: ImportStyle = ImportStyle.CLOSURE
    library: str = ''
    extension: str = '.js'
    # None when the option was not given at all.
    one_output_file_per_input_file: bool | None = None
    testonly: bool = False
    add_require_for_enums: bool = False
    binary: bool = False
    annotate_code: bool = False

    def file_extension(self) -> str:
        """The suffix given to every generated file name."""
        if self.import_style is ImportStyle.CLOSURE:
            return self.extension
        return '_pb.js'


_STRING_OPTIONS = frozenset(
    ('output_dir', 'namespace_prefix', 'library', 'extension')
)

_BOOL_OPTIONS = frozenset(
    (
        'one_output_file_per_input_file',
        'testonly',
        'add_require_for_enums',
        'binary',
        'annotate_code',
    )
)

_TRUE_VALUES = frozenset(('', 'true', '1'))
_FALSE_VALUES = frozenset(('false', '0'))


def _split_parameter(parameter: str) -> list[str]:
    # protoc passes the options in shell quoted form, separated by commas. Use
    # shlex to split them, correctly handling quoted sections, with equivalent
    # options to IFS=","
    lex = shlex(parameter, posix=True)
    lex.whitespace_split = True
    lex.whitespace = ','
    lex.commenters = ''
    return list(lex)


def _parse_bool(key: str, value: str) -> bool:
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise OptionsError(f'Option {key} expects true or false, got "{value}"')


def parse_parameter(parameter: str) -> GeneratorOptions:
    """Parses the comma-separated key[=value] parameter protoc passes along.

    A key given without a value is a boolean switched on. Later occurrences of
    a key override earlier ones.

    Raises:
      OptionsError: An option key, import style, or boolean is not recognized.
    """
    values: dict[str, object] = {}

    for item in _split_parameter(parameter):
        key, _, value = item.partition('=')
        key = key.strip()

        if key in _STRING_OPTIONS:
            values[key] = value
        elif key in _BOOL_OPTIONS:
            values[key] = _parse_bool(key, value)
        elif key == 'import_style':
            try:
                values[key] = ImportStyle(value)
            except ValueError as err:
                raise OptionsError(
                    f'Unknown import style "{value}"; expected one of '
                    + ', '.join(style.value for style in ImportStyle)
                ) from err
        else:
            raise OptionsError(f'Unknown option: {key}')

    options = GeneratorOptions(**values)  # type: ignore[arg-type]
    _LOG.debug('Generator options: %s', options)
    return options
