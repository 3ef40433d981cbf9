from __future__ import annotations

from typing import Any, Mapping, Protocol

from ..domain.models import Advisory


class AdvisoryValidatorPort(Protocol):
    def validate(self, raw: bytes | str | Mapping[str, Any]) -> Advisory:
        """Return a validated Advisory or raise ValidationError naming the field and record id."""
        ...
