"""Domain enumerations and state-transition rules."""

import enum


class OrderStatus(str, enum.Enum):
    PENDING = "Pending"
    ACCEPTED = "Accepted"
    DELIVERED = "Delivered"
    CANCELLED = "Cancelled"


# State machine: maps current status -> set of valid next statuses
ORDER_TRANSITIONS: dict[OrderStatus, set[OrderStatus]] = {
    OrderStatus.PENDING: {OrderStatus.ACCEPTED, OrderStatus.CANCELLED},
    OrderStatus.ACCEPTED: {OrderStatus.DELIVERED, OrderStatus.CANCELLED},
    OrderStatus.DELIVERED: set(),
    OrderStatus.CANCELLED: set(),
}


class PaymentStatus(str, enum.Enum):
    PENDING = "Pending"
    PAID = "Paid"
    REFUNDED = "Refunded"


class DriverStatus(str, enum.Enum):
    ONLINE = "Online"
    OFFLINE = "Offline"


class ServeryName(str, enum.Enum):
    BAKER = "Baker"
    NORTH = "North"
    SEIBEL = "Seibel"
    SOUTH = "South"
    WEST = "West"


class MealTime(str, enum.Enum):
    BREAKFAST = "breakfast"
    LUNCH_DINNER = "lunch_dinner"


class TravelMode(str, enum.Enum):
    WALKING = "walking"
    DRIVING = "driving"
    BICYCLING = "bicycling"
    TRANSIT = "transit"


class Provenance(str, enum.Enum):
    """Where a resolved distance came from."""

    ROUTED = "routed"
    GREAT_CIRCLE_FALLBACK = "great-circle-fallback"


class QuoteState(str, enum.Enum):
    IDLE = "IDLE"
    RESOLVING = "RESOLVING"
    RESOLVED = "RESOLVED"
    UNRESOLVED = "UNRESOLVED"
