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

"""Tests for variant schema declarations."""

from __future__ import annotations

from dataclasses import dataclass

import pytest

from tests._fixtures import (
    BATCH,
    COMMAND,
    Batch,
    Command,
    Load,
    Nothing,
    Person,
    Single,
    Store,
)
from variantcoding import (
    CaseDescriptor,
    FieldSpec,
    LabeledFields,
    NoFields,
    SchemaMismatchError,
    SingleUnlabeledField,
    VariantSchema,
    register_variant,
    schema_for,
)


def test_labeled_fields_of_keeps_declaration_order() -> None:
    shape = LabeledFields.of(key=str, value=int)

    assert shape.names == ("key", "value")
    assert shape.fields == (FieldSpec("key", str), FieldSpec("value", int))


def test_labeled_fields_rejects_duplicate_names() -> None:
    with pytest.raises(ValueError, match="duplicate field names: key"):
        LabeledFields((FieldSpec("key", str), FieldSpec("key", int)))


def test_schema_rejects_duplicate_case_names() -> None:
    with pytest.raises(ValueError, match="duplicate case 'load'"):
        VariantSchema(
            "Broken",
            (
                CaseDescriptor("load", Load, LabeledFields.of(key=str)),
                CaseDescriptor("load", Store, LabeledFields.of(key=str, value=int)),
            ),
        )


def test_schema_rejects_shared_case_class() -> None:
    with pytest.raises(ValueError, match="class Load used by cases"):
        VariantSchema(
            "Broken",
            (
                CaseDescriptor("load", Load, LabeledFields.of(key=str)),
                CaseDescriptor("fetch", Load, LabeledFields.of(key=str)),
            ),
        )


def test_schema_requires_cases() -> None:
    with pytest.raises(ValueError, match="declares no cases"):
        VariantSchema("Empty", ())


def test_case_descriptor_rejects_unknown_shape() -> None:
    with pytest.raises(TypeError, match="unsupported field shape"):
        CaseDescriptor("odd", Load, "labeled")  # type: ignore[arg-type]


def test_case_lookup_by_name_and_value() -> None:
    assert COMMAND.case_named("store") is COMMAND.cases[1]
    assert COMMAND.case_named("missing") is None
    assert COMMAND.case_of(Store("a", 1)).name == "store"
    assert COMMAND.case_of(Nothing()).name == "none"


def test_case_of_accepts_subclasses() -> None:
    @dataclass(slots=True, frozen=True)
    class SpecialLoad(Load):
        pass

    assert COMMAND.case_of(SpecialLoad("k")).name == "load"


def test_case_of_rejects_foreign_values() -> None:
    with pytest.raises(SchemaMismatchError, match="Person is not a case of Command"):
        COMMAND.case_of(Person("Jane"))


def test_fields_of_reports_names_and_values() -> None:
    assert COMMAND.fields_of(Store("a", 42)) == (("key", "a"), ("value", 42))
    assert COMMAND.fields_of(Single(Person("Jane"))) == ((None, Person("Jane")),)
    assert COMMAND.fields_of(Nothing()) == ()


def test_construct_builds_each_shape() -> None:
    assert COMMAND.construct("store", [("value", 42), ("key", "a")]) == Store("a", 42)
    assert COMMAND.construct("single", [(None, Person("Jane"))]) == Single(
        Person("Jane")
    )
    assert COMMAND.construct("none", []) == Nothing()


@pytest.mark.parametrize(
    ("case_name", "pairs", "message"),
    [
        ("store", [("key", "a")], "missing fields: value"),
        ("store", [(None, "a")], "labeled case given an unlabeled value"),
        ("load", [("key", "a"), ("other", 1)], "unknown field 'other'"),
        ("single", [("person", Person("Jane"))], "exactly one unlabeled field"),
        ("single", [], "exactly one unlabeled field"),
        ("none", [(None, 1)], "case takes no fields"),
        ("missing", [], "has no case 'missing'"),
    ],
)
def test_construct_rejects_mismatched_pairs(
    case_name: str, pairs: list[tuple[str | None, object]], message: str
) -> None:
    with pytest.raises(SchemaMismatchError, match=message) as excinfo:
        COMMAND.construct(case_name, pairs)

    assert excinfo.value.case == case_name


def test_construct_wraps_constructor_failures() -> None:
    @dataclass(slots=True, frozen=True)
    class Positive:
        amount: int

        def __post_init__(self) -> None:
            if self.amount <= 0:
                raise ValueError("amount must be positive")

    schema = VariantSchema(
        "Amount", (CaseDescriptor("positive", Positive, LabeledFields.of(amount=int)),)
    )

    with pytest.raises(SchemaMismatchError, match="amount must be positive"):
        schema.construct("positive", [("amount", -1)])


def test_custom_construct_and_deconstruct() -> None:
    class Point:
        def __init__(self, x: int, y: int) -> None:
            self.coords = (x, y)

    schema = VariantSchema(
        "Shape",
        (
            CaseDescriptor(
                "point",
                Point,
                LabeledFields.of(x=int, y=int),
                deconstruct=lambda value: value.coords,  # type: ignore[attr-defined]
            ),
        ),
    )

    point = schema.construct("point", [("x", 1), ("y", 2)])

    assert isinstance(point, Point)
    assert schema.fields_of(point) == (("x", 1), ("y", 2))


def test_fields_of_checks_deconstruct_arity() -> None:
    schema = VariantSchema(
        "Broken",
        (
            CaseDescriptor(
                "store",
                Store,
                LabeledFields.of(key=str, value=int),
                deconstruct=lambda value: ("only-one",),
            ),
        ),
    )

    with pytest.raises(SchemaMismatchError, match="expected 2 field values, got 1"):
        schema.fields_of(Store("a", 1))


def test_single_field_default_deconstruct_needs_dataclass() -> None:
    schema = VariantSchema(
        "Wrapper", (CaseDescriptor("text", str, SingleUnlabeledField(str)),)
    )

    with pytest.raises(SchemaMismatchError, match="needs a dataclass value"):
        schema.fields_of("hello")


def test_schema_for_resolves_registered_classes_only() -> None:
    assert schema_for(Command) is COMMAND
    assert schema_for(COMMAND) is COMMAND
    assert schema_for(Batch) is BATCH
    assert schema_for(Store) is None
    assert schema_for(int) is None
    assert schema_for("Command") is None


def test_register_variant_returns_the_class() -> None:
    class Toggle:
        pass

    @dataclass(slots=True, frozen=True)
    class On(Toggle):
        pass

    schema = VariantSchema("Toggle", (CaseDescriptor("on", On, NoFields()),))

    assert register_variant(Toggle, schema) is Toggle
    assert schema_for(Toggle) is schema
