from enum import Enum


class LifecycleState(str, Enum):
    cart = "cart"
    booked = "booked"


ALLOWED_TRANSITIONS = {
    LifecycleState.cart: [LifecycleState.booked],
    LifecycleState.booked: [],
}


def can_transition(current: LifecycleState, target: LifecycleState) -> bool:
    return target in ALLOWED_TRANSITIONS.get(current, [])
