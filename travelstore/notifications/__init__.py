from .events import ItemChange
from .dispatcher import publish

__all__ = [
    "ItemChange",
    "publish",
]
