"""Shared utilities: key normalization and generators."""

from schoolsync.shared.utils.generators import generate_cuid
from schoolsync.shared.utils.keys import (
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
