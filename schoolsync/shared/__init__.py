"""Shared utilities: key normalization, generators, telemetry.

Used by application and infrastructure. No business logic.
"""

from schoolsync.shared.utils import (
    generate_cuid,
    to_application_model,
    to_camel_case,
    to_snake_case,
    to_wire_format,
)

__all__ = [
    "generate_cuid",
    "to_application_model",
    "to_camel_case",
    "to_snake_case",
    "to_wire_format",
]
