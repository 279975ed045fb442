from enum import Enum


class Channel(str, Enum):
    ITEM_TIMELINE = "item_timeline"
    INAPP_ADMIN = "inapp_admin"
    INAPP_USER = "inapp_user"
