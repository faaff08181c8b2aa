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

"""Configurable JSON coding for tagged-union ("variant") values.

A variant type has a fixed set of named cases. Each case carries labeled
fields, a single unlabeled field, or nothing. This package converts such
values to and from JSON-like document trees, with the wire shape chosen by a
:class:`StrategyConfiguration` instead of being hard-coded.

Core Functions
--------------
encode(value, schema, config=None)
    Encode a variant value into a document tree.

decode(document, schema, config=None)
    Decode a document tree back into a variant value.

dumps(value, schema, config=None) / loads(data, schema, config=None)
    The same through JSON text, using :mod:`json` for parsing and printing.

Declaring a Variant
-------------------
Schemas are declared explicitly, one :class:`CaseDescriptor` per case::

    from dataclasses import dataclass
    from variantcoding import (
        CaseDescriptor, LabeledFields, NoFields, SingleUnlabeledField,
        VariantSchema, register_variant,
    )

    class Command:
        pass

    @dataclass(frozen=True)
    class Person:
        name: str

    @dataclass(frozen=True)
    class Store(Command):
        key: str
        value: int

    @dataclass(frozen=True)
    class Single(Command):
        person: Person

    @dataclass(frozen=True)
    class Nothing(Command):
        pass

    COMMAND = VariantSchema(
        "Command",
        (
            CaseDescriptor("store", Store, LabeledFields.of(key=str, value=int)),
            CaseDescriptor("single", Single, SingleUnlabeledField(Person)),
            CaseDescriptor("none", Nothing, NoFields()),
        ),
    )
    register_variant(Command, COMMAND)

Registering the schema on ``Command`` lets other dataclasses and cases use
``Command`` as a field annotation; the engines recurse into it with the same
configuration.

Wire Shapes
-----------
With the default configuration::

    encode(Store("a", 42), COMMAND)
    # {"store": {"key": "a", "value": 42}}

    encode(Single(Person("Jane Doe")), COMMAND)
    # {"single": {"_0": {"name": "Jane Doe"}}}

    encode(Nothing(), COMMAND)
    # {"none": {}}

Each axis can be changed independently::

    config = StrategyConfiguration.symmetric(case=Discriminator("_discrim"))
    encode(Store("a", 42), COMMAND, config)
    # {"_discrim": "store", "key": "a", "value": 42}

    config = StrategyConfiguration.symmetric(single_value=FlattenUnlabeled())
    encode(Single(Person("Jane Doe")), COMMAND, config)
    # {"single": {"name": "Jane Doe"}}

    config = StrategyConfiguration.symmetric(no_value=BooleanMarker(True))
    encode(Nothing(), COMMAND, config)
    # {"none": true}

The configuration is not written into documents. Decoding must use settings
that mirror the ones used for encoding; a mismatch fails with a structured
error instead of misreading the document.

Errors
------
All failures derive from :class:`VariantCodingError` and carry the dotted
``path`` of the offending node plus the ``case`` and ``key`` involved:
:class:`AmbiguousOrEmptyVariantError`, :class:`UnknownCaseError`,
:class:`MissingFieldError`, :class:`ShapeMismatchError`,
:class:`DiscriminatorCollisionError`, :class:`ConfigurationConflictError`,
:class:`SchemaMismatchError`, :class:`StrategyConfigurationError` and
:class:`DocumentParseError`.

Public API
----------
- ``encode`` / ``decode``: variant value <-> document tree
- ``encode_case`` / ``decode_case``: the same on ``(case, field pairs)``
- ``dumps`` / ``loads``, ``VariantJSONEncoder`` / ``VariantJSONDecoder``
- ``VariantSchema``, ``CaseDescriptor``, ``FieldSpec`` and the field shapes
- ``StrategyConfiguration`` and the strategy classes
"""

from .decoder import decode, decode_case
from .encoder import encode, encode_case
from .errors import (
    AmbiguousOrEmptyVariantError,
    ConfigurationConflictError,
    DiscriminatorCollisionError,
    DocumentParseError,
    MissingFieldError,
    SchemaMismatchError,
    ShapeMismatchError,
    StrategyConfigurationError,
    UnknownCaseError,
    VariantCodingError,
)
from .schema import (
    CaseDescriptor,
    FieldPair,
    FieldShape,
    FieldSpec,
    LabeledFields,
    NoFields,
    SingleUnlabeledField,
    VariantSchema,
    register_variant,
    schema_for,
)
from .strategies import (
    BooleanMarker,
    Discriminator,
    EmptyPayload,
    FlattenUnlabeled,
    KeyedByCase,
    Nested,
    StrategyConfiguration,
)
from .text import VariantJSONDecoder, VariantJSONEncoder, dumps, loads

__all__ = [
    "AmbiguousOrEmptyVariantError",
    "BooleanMarker",
    "CaseDescriptor",
    "ConfigurationConflictError",
    "Discriminator",
    "DiscriminatorCollisionError",
    "DocumentParseError",
    "EmptyPayload",
    "FieldPair",
    "FieldShape",
    "FieldSpec",
    "FlattenUnlabeled",
    "KeyedByCase",
    "LabeledFields",
    "MissingFieldError",
    "Nested",
    "NoFields",
    "SchemaMismatchError",
    "ShapeMismatchError",
    "SingleUnlabeledField",
    "StrategyConfiguration",
    "StrategyConfigurationError",
    "UnknownCaseError",
    "VariantCodingError",
    "VariantJSONDecoder",
    "VariantJSONEncoder",
    "VariantSchema",
    "decode",
    "decode_case",
    "dumps",
    "encode",
    "encode_case",
    "loads",
    "register_variant",
    "schema_for",
]
