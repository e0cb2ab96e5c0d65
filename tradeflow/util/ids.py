import ulid


def new_id(prefix: str = "") -> str:
    """Sortable unique id (ULID), optionally prefixed, e.g. ``req_01J...``"""
    return prefix + ulid.new().str
