"""ID generators (CUID for new rows, stable hashes for derived ids)."""

import hashlib

from cuid2 import cuid_wrapper

cuid_generator = cuid_wrapper()


def generate_cuid() -> str:
    """Generate a collision-resistant unique identifier (CUID2).

    Returns:
        A new CUID string.
    """
    result = cuid_generator()
    if not isinstance(result, str):
        raise TypeError(
            f"Expected str from cuid_generator, got {type(result).__name__}"
        )
    return result


def stable_id(*parts: str) -> str:
    """Deterministic 32-char hex id for the given parts.

    The same parts always give the same id, so a workflow run keyed on
    (function id, event id) keeps its identity across redeliveries and restarts.
    """
    raw = "\x1f".join(parts).encode()
    return hashlib.sha256(raw).hexdigest()[:32]
