import uuid

CALL_ID_PREFIX = "direct"


def generate_call_id() -> str:
    """Return a collision-resistant call identifier for requests without one."""
    return f"{CALL_ID_PREFIX}-{uuid.uuid4().hex}"
