"""
Validator: run descriptor rules in order, fail-fast on the first violation.

No I/O happens here; the validator only sees the declared descriptors.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from src.schema_engine.models import ResourceDescriptor
from src.schema_engine.validation.rules import (
    IdentifierLengthRule,
    RenderableStatementsRule,
    RequiredAttributesRule,
    UniqueIdentityRule,
    ValidationRule,
)


class Validator:
    """Runs descriptor validation rules before any command is issued."""

    DEFAULT_RULES: tuple[ValidationRule, ...] = (
        UniqueIdentityRule(),
        RequiredAttributesRule(),
        IdentifierLengthRule(),
        RenderableStatementsRule(),
    )

    def __init__(self, rules: Iterable[ValidationRule] | None = None) -> None:
        self.rules: tuple[ValidationRule, ...] = (
            self.DEFAULT_RULES if rules is None else tuple(rules)
        )

    def validate(self, descriptors: Sequence[ResourceDescriptor]) -> None:
        """Run each rule in order; the first violation propagates as ConfigError."""
        for rule in self.rules:
            rule.check(descriptors)
