from travelstore.models.user import User
from travelstore.models.package import Package
from travelstore.models.cart import CartItem
from travelstore.models.coupon import UserCoupon
from travelstore.models.item_event import ItemEvent
from travelstore.models.notifications import Notification

# add ALL models here
