"""Field-name normalization between wire format and application model.

The store speaks snake_case (``admission_date``); the application model
uses camelCase (``admissionDate``). Both directions are pure and total:
they recurse into dicts, lists and tuples, return new containers, keep key
order, and leave every non-container value untouched.

    >>> to_application_model({"student_id": 1, "fee_items": [{"due_date": "x"}]})
    {'studentId': 1, 'feeItems': [{'dueDate': 'x'}]}
    >>> to_wire_format({"studentId": 1})
    {'student_id': 1}
"""

import re
from typing import Any

# Underscore followed by a lower-case letter; leading/trailing underscores are kept.
_SNAKE_BOUNDARY = re.compile(r"(?<=[a-z0-9])_([a-z])")
# Lower-case letter or digit followed by a capital.
_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])([A-Z])")


def to_camel_case(key: str) -> str:
    """Rewrite ``word_word`` as ``wordWord``. Keys without underscores are unchanged."""
    return _SNAKE_BOUNDARY.sub(lambda m: m.group(1).upper(), key)


def to_snake_case(key: str) -> str:
    """Rewrite ``wordWord`` as ``word_word``. Keys without capitals are unchanged."""
    return _CAMEL_BOUNDARY.sub(lambda m: "_" + m.group(1).lower(), key)


def _transform(value: Any, rename) -> Any:
    if isinstance(value, dict):
        return {
            (rename(k) if isinstance(k, str) else k): _transform(v, rename)
            for k, v in value.items()
        }
    if isinstance(value, list):
        return [_transform(item, rename) for item in value]
    if isinstance(value, tuple):
        return tuple(_transform(item, rename) for item in value)
    return value


def to_application_model(value: Any) -> Any:
    """Return a copy of value with every mapping key in camelCase.

    Args:
        value: Record, sequence of records, or any leaf value from the store.

    Returns:
        New structure; the input is never mutated.
    """
    return _transform(value, to_camel_case)


def to_wire_format(value: Any) -> Any:
    """Return a copy of value with every mapping key in snake_case.

    Args:
        value: Record or partial record in application-model naming.

    Returns:
        New structure; the input is never mutated.
    """
    return _transform(value, to_snake_case)
