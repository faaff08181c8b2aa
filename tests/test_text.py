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

from __future__ import annotations

import pytest

from tests._fixtures import COMMAND, OPTION, Load, Nothing, Person, Raw, Single, Store
from variantcoding import (
    BooleanMarker,
    Discriminator,
    DocumentParseError,
    EmptyPayload,
    FlattenUnlabeled,
    SchemaMismatchError,
    ShapeMismatchError,
    StrategyConfiguration,
    VariantCodingError,
    VariantJSONDecoder,
    VariantJSONEncoder,
    dumps,
    loads,
)
from variantcoding.text import parse_document

BOOL_MARKER = StrategyConfiguration.symmetric(no_value=BooleanMarker(True))


@pytest.mark.parametrize(
    ("value", "config", "expected"),
    [
        (
            Store("MyKey", 42),
            StrategyConfiguration(),
            '{"store":{"key":"MyKey","value":42}}',
        ),
        (
            Store("a", 42),
            StrategyConfiguration.symmetric(case=Discriminator("_discrim")),
            '{"_discrim":"store","key":"a","value":42}',
        ),
        (
            Single(Person("Jane Doe")),
            StrategyConfiguration(),
            '{"single":{"_0":{"name":"Jane Doe"}}}',
        ),
        (
            Single(Person("Jane Doe")),
            StrategyConfiguration.symmetric(single_value=FlattenUnlabeled()),
            '{"single":{"name":"Jane Doe"}}',
        ),
        (Nothing(), StrategyConfiguration(), '{"none":{}}'),
        (Nothing(), BOOL_MARKER, '{"none":true}'),
    ],
)
def test_dumps_prints_compact_text(
    value: object, config: StrategyConfiguration, expected: str
) -> None:
    assert dumps(value, COMMAND, config) == expected
    assert loads(expected, COMMAND, config) == value


def test_dumps_with_indent() -> None:
    text = dumps(Store("a", 42), COMMAND, indent=2)

    assert text == '{\n  "store": {\n    "key": "a",\n    "value": 42\n  }\n}'


def test_dumps_keeps_non_ascii_text() -> None:
    assert dumps(Load("clé"), COMMAND) == '{"load":{"key":"clé"}}'


def test_loads_accepts_bytes() -> None:
    assert loads(b'{"load":{"key":"a"}}', COMMAND) == Load("a")
    assert loads(bytearray(b'{"none":{}}'), COMMAND) == Nothing()


def test_boolean_marker_rejected_by_empty_payload() -> None:
    with pytest.raises(ShapeMismatchError) as excinfo:
        loads(
            '{"none":true}',
            COMMAND,
            StrategyConfiguration.symmetric(no_value=EmptyPayload()),
        )

    assert excinfo.value.path == "Command.none"


@pytest.mark.parametrize("text", ["", "{", '{"load":', "not json", '{"a":1,}'])
def test_loads_reports_invalid_text(text: str) -> None:
    with pytest.raises(DocumentParseError) as excinfo:
        loads(text, COMMAND)

    assert isinstance(excinfo.value, VariantCodingError)
    assert isinstance(excinfo.value, ValueError)
    assert excinfo.value.path == "Command"
    assert str(excinfo.value).startswith("Command: invalid JSON document")


def test_parse_document_rejects_invalid_utf8() -> None:
    with pytest.raises(DocumentParseError):
        parse_document(b'{"load":"\xff"}')


def test_parse_document_returns_tree() -> None:
    assert parse_document('{"a":[1,2.5,null,true]}') == {"a": [1, 2.5, None, True]}


def test_json_encoder_and_decoder_objects() -> None:
    config = StrategyConfiguration.symmetric(case=Discriminator("kind"))
    encoder = VariantJSONEncoder(config)
    decoder = VariantJSONDecoder(config)

    data = encoder.encode(Store("a", 1), COMMAND)

    assert data == b'{"kind":"store","key":"a","value":1}'
    assert decoder.decode(COMMAND, data) == Store("a", 1)


def test_default_json_objects_use_default_configuration() -> None:
    data = VariantJSONEncoder().encode(Nothing(), COMMAND)

    assert data == b'{"none":{}}'
    assert VariantJSONDecoder().decode(COMMAND, data.decode()) == Nothing()


@pytest.mark.parametrize("number", [float("nan"), float("inf"), float("-inf")])
def test_dumps_refuses_non_finite_numbers(number: float) -> None:
    with pytest.raises(SchemaMismatchError, match="not valid JSON") as excinfo:
        dumps(Raw(number), OPTION)

    assert excinfo.value.path == "Option"


@pytest.mark.parametrize("token", ["NaN", "Infinity", "-Infinity"])
def test_loads_refuses_non_finite_tokens(token: str) -> None:
    with pytest.raises(DocumentParseError, match=f"{token} is not a JSON number"):
        loads(f'{{"raw":{{"_0":{token}}}}}', OPTION)
