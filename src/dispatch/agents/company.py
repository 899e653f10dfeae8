"""Business constants shared by the orchestrator and the specialist agents.

Exports:
    COMPANY_INFO: Contact details, hours and service promises.
    ORDER_STATUS_LABELS: Display label per order pipeline status.
    PICKUP_STATUS_LABELS: Display label per pickup request status.
    TIME_SLOT_LABELS: Display label per pickup time slot.
"""

from __future__ import annotations

from typing import Any

COMPANY_INFO: dict[str, Any] = {
    "name": "Lorenzo Dry Cleaners",
    "established": 2013,
    "branches": "21+",
    "location": "Nairobi and environs",
    "phone": "0728 400 200",
    "whatsapp": "+254728400200",
    "email": "hello@lorenzo.co.ke",
    "website": "https://lorenzo.co.ke",
    "expressService": {"duration": "2 hours", "cost": "FREE"},
    "pickupDelivery": "FREE",
    "hours": {
        "weekdays": "Monday - Friday: 7:00 AM - 8:00 PM",
        "saturday": "Saturday: 8:00 AM - 6:00 PM",
        "sunday": "Sunday: 9:00 AM - 5:00 PM",
    },
}

ORDER_STATUS_LABELS: dict[str, str] = {
    "received": "Order Received",
    "inspection": "Under Inspection",
    "queued": "In Queue",
    "washing": "Being Washed",
    "drying": "Drying",
    "ironing": "Being Ironed",
    "quality_check": "Quality Check",
    "packaging": "Being Packaged",
    "ready": "Ready for Collection",
    "out_for_delivery": "Out for Delivery",
    "delivered": "Delivered",
    "collected": "Collected",
}

# Orders in these statuses have left the pipeline.
COMPLETED_ORDER_STATUSES: tuple[str, ...] = ("delivered", "collected")

PICKUP_STATUS_LABELS: dict[str, str] = {
    "pending": "Pending Confirmation",
    "confirmed": "Confirmed",
    "assigned": "Driver Assigned",
    "in_transit": "Driver En Route",
    "picked_up": "Picked Up",
    "at_facility": "At Facility",
    "converted": "Order Created",
    "cancelled": "Cancelled",
}

TIME_SLOT_LABELS: dict[str, str] = {
    "morning": "Morning (8:00 AM - 12:00 PM)",
    "afternoon": "Afternoon (12:00 PM - 4:00 PM)",
    "evening": "Evening (4:00 PM - 7:00 PM)",
}


def order_status_label(status: str) -> str:
    return ORDER_STATUS_LABELS.get(status, status)


def pickup_status_label(status: str) -> str:
    return PICKUP_STATUS_LABELS.get(status, status)
