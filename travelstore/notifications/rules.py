from travelstore.notifications.events import ItemChange
from travelstore.notifications.channels import Channel


NOTIFICATION_RULES = {

    ItemChange.ADDED: {
        Channel.ITEM_TIMELINE: True,
    },

    ItemChange.CONFIG_RESET: {
        Channel.ITEM_TIMELINE: True,
    },

    ItemChange.REMOVED: {
        Channel.ITEM_TIMELINE: True,
    },

    ItemChange.COUPON_APPLIED: {
        Channel.ITEM_TIMELINE: True,
    },

    ItemChange.COUPON_REMOVED: {
        Channel.ITEM_TIMELINE: True,
    },

    ItemChange.ADMIN_DISCOUNT_APPLIED: {
        Channel.ITEM_TIMELINE: True,
        Channel.INAPP_USER: True,
    },

    ItemChange.ADMIN_DISCOUNT_REMOVED: {
        Channel.ITEM_TIMELINE: True,
        Channel.INAPP_USER: True,
    },

    ItemChange.BOOKED: {
        Channel.ITEM_TIMELINE: True,
        Channel.INAPP_ADMIN: True,
    },

}
