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

"""Exception hierarchy for :mod:`variantcoding`.

Every failure raised by the encoder and decoder is a structured value: the
exception carries the dotted ``path`` of the offending node, and where known
the ``case`` name and the document ``key`` involved. Nothing is coerced
silently and nothing is retried; the same input always fails the same way.
"""

from __future__ import annotations


class VariantCodingError(Exception):
    """Base class for all variant coding failures.

    Example:
        Catch any codec failure with a single handler::

            try:
                command = decode(document, COMMAND)
            except VariantCodingError as error:
                logger.warning("Rejected document at %s: %s", error.path, error)

    Note:
        Subclasses also inherit from ``ValueError`` or ``TypeError`` so callers
        that already handle those builtins keep working.
    """

    def __init__(
        self,
        message: str,
        *,
        path: str = "",
        case: str | None = None,
        key: str | None = None,
    ) -> None:
        super().__init__(f"{path}: {message}" if path else message)
        self.message = message
        self.path = path
        self.case = case
        self.key = key


class AmbiguousOrEmptyVariantError(VariantCodingError, ValueError):
    """Raised when a case-keyed object does not hold exactly one entry."""


class UnknownCaseError(VariantCodingError, ValueError):
    """Raised when a decoded case name is not declared by the schema."""


class MissingFieldError(VariantCodingError, ValueError):
    """Raised when a labeled field is absent from its payload object."""


class ShapeMismatchError(VariantCodingError, TypeError):
    """Raised when a node's shape does not match what decoding requires.

    Typical causes are a scalar where an object is expected, a payload written
    under a different strategy than the decoder is configured for, or a
    missing discriminator entry.
    """


class DiscriminatorCollisionError(VariantCodingError, ValueError):
    """Raised at encode time when a payload already holds the discriminator key."""


class ConfigurationConflictError(VariantCodingError, ValueError):
    """Raised at encode time when a payload cannot be merged with a discriminator.

    A boolean marker for a field-less case, or a flattened single value whose
    own encoding is not an object, leaves no object to insert the
    discriminator entry into.
    """


class SchemaMismatchError(VariantCodingError, TypeError):
    """Raised when a value or field list does not fit the declared schema."""


class StrategyConfigurationError(VariantCodingError, ValueError):
    """Raised when a strategy configuration mapping cannot be interpreted."""


class DocumentParseError(VariantCodingError, ValueError):
    """Raised when document text is not valid JSON."""


__all__ = [
    "AmbiguousOrEmptyVariantError",
    "ConfigurationConflictError",
    "DiscriminatorCollisionError",
    "DocumentParseError",
    "MissingFieldError",
    "SchemaMismatchError",
    "ShapeMismatchError",
    "StrategyConfigurationError",
    "UnknownCaseError",
    "VariantCodingError",
]
