import uuid


def generate_id() -> str:
    """
    Generates an opaque identifier for clients, grants and the things they
    own. Grant ids double as the protocol's instance_id, so they must be
    unguessable as well as unique.
    """
    return str(uuid.uuid4())
