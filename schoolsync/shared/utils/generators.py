"""Record id generation."""

from cuid2 import cuid_wrapper

cuid_generator = cuid_wrapper()


def generate_cuid() -> str:
    """Return a new CUID2 for a record that arrives without an ``id``."""
    record_id = cuid_generator()
    if not isinstance(record_id, str):
        raise TypeError(f"cuid generator returned {type(record_id).__name__}, not str")
    return record_id
