from .auth_schemas import *
from .friendship import RelationshipEdge

__all__ = [
    "TokenPayload",
    "RelationshipEdge",
]
