# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""JSON text wrappers around the encoder and decoder.

Parsing and printing are delegated to :mod:`json`; this module only pins the
compact output format and converts parse failures into
:class:`~variantcoding.errors.DocumentParseError`.
"""

from __future__ import annotations

import json
from dataclasses import dataclass

from .decoder import decode
from .encoder import encode
from .errors import DocumentParseError, SchemaMismatchError
from .schema import VariantSchema
from .strategies import DEFAULT_CONFIGURATION, StrategyConfiguration
from .types import JSONValue

_COMPACT_SEPARATORS = (",", ":")


def dumps(
    value: object,
    schema: VariantSchema,
    config: StrategyConfiguration | None = None,
    *,
    indent: int | None = None,
) -> str:
    """Encode ``value`` and print it as JSON text.

    Output is compact unless ``indent`` is given; object entries keep the order
    the encoder produced them in.
    """

    document = encode(value, schema, config)
    separators = _COMPACT_SEPARATORS if indent is None else None
    try:
        return json.dumps(
            document,
            indent=indent,
            separators=separators,
            ensure_ascii=False,
            allow_nan=False,
        )
    except ValueError as error:
        raise SchemaMismatchError(
            f"document is not valid JSON: {error}", path=schema.name
        ) from error


def loads(
    data: str | bytes | bytearray,
    schema: VariantSchema,
    config: StrategyConfiguration | None = None,
) -> object:
    """Parse JSON text and decode it into a value of ``schema``."""

    return decode(parse_document(data, path=schema.name), schema, config)


def _reject_constant(token: str) -> object:
    raise ValueError(f"{token} is not a JSON number")


def parse_document(data: str | bytes | bytearray, *, path: str = "") -> JSONValue:
    """Parse JSON text into a document tree."""

    try:
        return json.loads(data, parse_constant=_reject_constant)
    except ValueError as error:
        raise DocumentParseError(f"invalid JSON document: {error}", path=path) from error


@dataclass(slots=True, frozen=True)
class VariantJSONEncoder:
    """Encoder object printing variant values as UTF-8 JSON bytes."""

    config: StrategyConfiguration = DEFAULT_CONFIGURATION

    def encode(self, value: object, schema: VariantSchema) -> bytes:
        return dumps(value, schema, self.config).encode("utf-8")


@dataclass(slots=True, frozen=True)
class VariantJSONDecoder:
    """Decoder object reading variant values from JSON text or bytes."""

    config: StrategyConfiguration = DEFAULT_CONFIGURATION

    def decode(self, schema: VariantSchema, data: str | bytes | bytearray) -> object:
        return loads(data, schema, self.config)


__all__ = [
    "VariantJSONDecoder",
    "VariantJSONEncoder",
    "dumps",
    "loads",
    "parse_document",
]
