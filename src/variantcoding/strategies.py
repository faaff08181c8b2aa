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

"""Strategy configuration selecting the wire shape of variant documents.

A :class:`StrategyConfiguration` bundles three independent axes, each with an
encode-side and a decode-side setting:

- case keying: :class:`KeyedByCase` wraps the payload in a single-entry object
  named after the case; :class:`Discriminator` stores the case name in a
  designated entry next to the fields.
- single unlabeled values: :class:`Nested` wraps the value as ``{"_0": ...}``;
  :class:`FlattenUnlabeled` exposes the value's own shape directly.
- field-less cases: :class:`EmptyPayload` writes ``{}``; :class:`BooleanMarker`
  writes a boolean literal.

The configuration is an out-of-band contract. It is never written into the
document, so the decoder must be given settings that mirror the encoder's.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Final, Literal, cast

from .errors import StrategyConfigurationError

type ExtraPolicy = Literal["ignore", "forbid"]

SINGLE_VALUE_KEY: Final[str] = "_0"


@dataclass(slots=True, frozen=True)
class KeyedByCase:
    """Encode a case as ``{case_name: payload}``."""


@dataclass(slots=True, frozen=True)
class Discriminator:
    """Encode a case as ``{key: case_name, **payload}``."""

    key: str

    def __post_init__(self) -> None:
        if not isinstance(self.key, str) or not self.key:
            raise StrategyConfigurationError(
                "discriminator key must be a non-empty string"
            )


@dataclass(slots=True, frozen=True)
class Nested:
    """Wrap a single unlabeled value in an object keyed ``"_0"``."""


@dataclass(slots=True, frozen=True)
class FlattenUnlabeled:
    """Write a single unlabeled value without a wrapping object."""


@dataclass(slots=True, frozen=True)
class EmptyPayload:
    """Write field-less cases as an empty object."""


@dataclass(slots=True, frozen=True)
class BooleanMarker:
    """Write field-less cases as the boolean literal ``value``.

    Decoding only confirms that a boolean is present unless ``strict`` is set,
    in which case the literal must equal ``value``.
    """

    value: bool = True
    strict: bool = False

    def __post_init__(self) -> None:
        for name in ("value", "strict"):
            setting = getattr(self, name)
            if not isinstance(setting, bool):
                raise StrategyConfigurationError(
                    f"boolean marker {name} must be a bool, got {setting!r}", key=name
                )


type CaseStrategy = KeyedByCase | Discriminator
type SingleValueStrategy = Nested | FlattenUnlabeled
type NoValueStrategy = EmptyPayload | BooleanMarker


@dataclass(slots=True, frozen=True)
class StrategyConfiguration:
    """Immutable bundle of encode and decode strategies.

    Attributes:
        case_encoding: How the encoder identifies the active case.
        case_decoding: How the decoder expects the case to be identified.
        single_value_encoding: Wrapping of single unlabeled values on encode.
        single_value_decoding: Expected wrapping of single unlabeled values.
        no_value_encoding: Payload written for field-less cases.
        no_value_decoding: Payload expected for field-less cases.
        extra: Policy for undeclared entries in labeled payloads and
            dataclass objects while decoding.
    """

    case_encoding: CaseStrategy = KeyedByCase()
    case_decoding: CaseStrategy = KeyedByCase()
    single_value_encoding: SingleValueStrategy = Nested()
    single_value_decoding: SingleValueStrategy = Nested()
    no_value_encoding: NoValueStrategy = EmptyPayload()
    no_value_decoding: NoValueStrategy = EmptyPayload()
    extra: ExtraPolicy = "ignore"

    def __post_init__(self) -> None:
        _expect(self.case_encoding, (KeyedByCase, Discriminator), "case_encoding")
        _expect(self.case_decoding, (KeyedByCase, Discriminator), "case_decoding")
        _expect(
            self.single_value_encoding,
            (Nested, FlattenUnlabeled),
            "single_value_encoding",
        )
        _expect(
            self.single_value_decoding,
            (Nested, FlattenUnlabeled),
            "single_value_decoding",
        )
        _expect(self.no_value_encoding, (EmptyPayload, BooleanMarker), "no_value_encoding")
        _expect(self.no_value_decoding, (EmptyPayload, BooleanMarker), "no_value_decoding")
        if self.extra not in {"ignore", "forbid"}:
            raise StrategyConfigurationError(
                f"extra must be 'ignore' or 'forbid', got {self.extra!r}",
                key="extra",
            )

    @classmethod
    def symmetric(
        cls,
        *,
        case: CaseStrategy | None = None,
        single_value: SingleValueStrategy | None = None,
        no_value: NoValueStrategy | None = None,
        extra: ExtraPolicy = "ignore",
    ) -> StrategyConfiguration:
        """Return a configuration whose decode side mirrors its encode side."""

        case = case if case is not None else KeyedByCase()
        single_value = single_value if single_value is not None else Nested()
        no_value = no_value if no_value is not None else EmptyPayload()
        return cls(
            case_encoding=case,
            case_decoding=case,
            single_value_encoding=single_value,
            single_value_decoding=single_value,
            no_value_encoding=no_value,
            no_value_decoding=no_value,
            extra=extra,
        )

    def update(self, **changes: object) -> StrategyConfiguration:
        """Return a copy with ``changes`` applied."""

        return dataclasses.replace(self, **changes)  # type: ignore[arg-type]

    @classmethod
    def from_mapping(cls, settings: Mapping[str, object]) -> StrategyConfiguration:
        """Build a configuration from plain settings, e.g. a parsed config file.

        Accepted keys are the field names of this class plus the shorthands
        ``case``, ``single_value`` and ``no_value`` which set both sides::

            StrategyConfiguration.from_mapping(
                {
                    "case": {"discriminator": "_discrim"},
                    "single_value": "flatten",
                    "no_value": {"bool": True, "strict": True},
                }
            )
        """

        known = {field.name for field in dataclasses.fields(cls)}
        shorthands = {"case", "single_value", "no_value"}
        unknown = sorted(set(settings) - known - shorthands)
        if unknown:
            raise StrategyConfigurationError(
                f"unknown strategy settings: {', '.join(unknown)}", key=unknown[0]
            )

        values: dict[str, object] = {}
        for axis in ("case", "single_value", "no_value"):
            parser = _AXIS_PARSERS[axis]
            if axis in settings:
                parsed = parser(settings[axis], axis)
                values[f"{axis}_encoding"] = parsed
                values[f"{axis}_decoding"] = parsed
            for side in ("encoding", "decoding"):
                name = f"{axis}_{side}"
                if name in settings:
                    values[name] = parser(settings[name], name)
        if "extra" in settings:
            values["extra"] = settings["extra"]
        return cls(**values)  # type: ignore[arg-type]


def _expect(value: object, allowed: tuple[type[object], ...], name: str) -> None:
    if not isinstance(value, allowed):
        options = " or ".join(option.__name__ for option in allowed)
        raise StrategyConfigurationError(
            f"{name} must be {options}, got {value!r}", key=name
        )


def _parse_case(raw: object, name: str) -> CaseStrategy:
    if isinstance(raw, (KeyedByCase, Discriminator)):
        return raw
    if raw == "keyed":
        return KeyedByCase()
    if isinstance(raw, Mapping):
        options = cast(Mapping[str, object], raw)
        if set(options) == {"discriminator"}:
            key = options["discriminator"]
            if isinstance(key, str):
                return Discriminator(key)
    raise StrategyConfigurationError(
        f"expected 'keyed' or {{'discriminator': <key>}}, got {raw!r}", key=name
    )


def _parse_single_value(raw: object, name: str) -> SingleValueStrategy:
    if isinstance(raw, (Nested, FlattenUnlabeled)):
        return raw
    if raw == "nested":
        return Nested()
    if raw == "flatten":
        return FlattenUnlabeled()
    raise StrategyConfigurationError(
        f"expected 'nested' or 'flatten', got {raw!r}", key=name
    )


def _parse_no_value(raw: object, name: str) -> NoValueStrategy:
    if isinstance(raw, (EmptyPayload, BooleanMarker)):
        return raw
    if raw == "empty":
        return EmptyPayload()
    if isinstance(raw, Mapping):
        options = cast(Mapping[str, object], raw)
        marker = options.get("bool")
        strict = options.get("strict", False)
        if (
            set(options) <= {"bool", "strict"}
            and isinstance(marker, bool)
            and isinstance(strict, bool)
        ):
            return BooleanMarker(marker, strict=strict)
    raise StrategyConfigurationError(
        f"expected 'empty' or {{'bool': <true|false>}}, got {raw!r}", key=name
    )


_AXIS_PARSERS = {
    "case": _parse_case,
    "single_value": _parse_single_value,
    "no_value": _parse_no_value,
}

DEFAULT_CONFIGURATION: Final[StrategyConfiguration] = StrategyConfiguration()


__all__ = [
    "DEFAULT_CONFIGURATION",
    "SINGLE_VALUE_KEY",
    "BooleanMarker",
    "CaseStrategy",
    "Discriminator",
    "EmptyPayload",
    "ExtraPolicy",
    "FlattenUnlabeled",
    "KeyedByCase",
    "Nested",
    "NoValueStrategy",
    "SingleValueStrategy",
    "StrategyConfiguration",
]
