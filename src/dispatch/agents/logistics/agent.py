"""Logistics Agent: pickup scheduling, dispatch and driver workflow.

A pickup request moves pending -> confirmed -> assigned -> in_transit ->
picked_up -> at_facility -> converted, or to cancelled before the items
are collected.

Exports:
    LogisticsAgent: The pickup and delivery specialist.
    parse_day: Parse a date parameter ("today", "tomorrow" or ISO).
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone
from typing import Any

from src.dispatch.agents.base import AgentResponse, BaseAgent, ResponseStatus, to_iso
from src.dispatch.agents.company import (
    PICKUP_STATUS_LABELS,
    TIME_SLOT_LABELS,
    pickup_status_label,
)
from src.dispatch.agents.logistics.capabilities import LOGISTICS_CAPABILITIES
from src.dispatch.agents.repositories import CustomerRepository, PickupRepository
from src.dispatch.core.auth import AuthContext, UserType

PICKUP_NOT_FOUND = "Pickup request not found."
INVALID_DATE = "Invalid date format."

# Statuses after which a pickup can no longer be cancelled.
NON_CANCELLABLE_STATUSES = ("picked_up", "at_facility", "converted", "cancelled")


def _today() -> date:
    return datetime.now(timezone.utc).date()


def parse_day(value: Any) -> date | None:
    """Parse a date parameter, returning None when it is not a date."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    if text.lower() == "today":
        return _today()
    if text.lower() == "tomorrow":
        return _today() + timedelta(days=1)
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        return None


def _parse_datetime(value: Any) -> datetime | None:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError as exc:
        raise ValueError(INVALID_DATE) from exc


def slot_label(slot: str) -> str:
    return TIME_SLOT_LABELS.get(slot, slot)


class LogisticsAgent(BaseAgent):
    """Pickup and delivery specialist.

    Args:
        pickup_repository: Pickup requests and slot calendar.
        customer_repository: Used to stamp customer contact details on new
            pickups.
    """

    name = "logistics-agent"
    description = (
        "Handles pickup and delivery scheduling, driver assignment, and route management."
    )
    capabilities = LOGISTICS_CAPABILITIES

    def __init__(
        self,
        pickup_repository: PickupRepository,
        customer_repository: CustomerRepository,
    ) -> None:
        super().__init__()
        self._pickups = pickup_repository
        self._customers = customer_repository

    async def handle(
        self, action: str, params: dict[str, Any], auth: AuthContext
    ) -> AgentResponse:
        handlers = {
            "schedule_pickup": self._handle_schedule_pickup,
            "get_available_slots": self._handle_available_slots,
            "get_my_pickups": self._handle_my_pickups,
            "get_pickup_status": self._handle_pickup_status,
            "cancel_pickup": self._handle_cancel_pickup,
            "get_pending_pickups": self._handle_pending_pickups,
            "confirm_pickup": self._handle_confirm_pickup,
            "assign_driver": self._handle_assign_driver,
            "update_pickup_status": self._handle_update_status,
            "convert_to_order": self._handle_convert_to_order,
            "get_my_assigned_pickups": self._handle_driver_pickups,
            "mark_picked_up": self._handle_mark_picked_up,
            "mark_at_facility": self._handle_mark_at_facility,
            "get_pickup_stats": self._handle_pickup_stats,
        }
        handler = handlers.get(action)
        if handler is None:
            return self.error_response(ResponseStatus.NOT_FOUND, f"Unknown action: {action}")
        return await handler(params, auth)

    async def _update(
        self, request_id: str, updates: dict[str, Any]
    ) -> dict[str, Any] | None:
        updates = {**updates, "updated_at": datetime.now(timezone.utc)}
        pickup = await self._pickups.update_pickup(request_id, updates)
        if pickup is not None:
            self._logger.info(
                "pickup_updated",
                request_id=request_id,
                status=updates.get("status"),
            )
        return pickup

    # ── Customer Actions ─────────────────────────────────────────────────────

    async def _handle_schedule_pickup(
        self, params: dict[str, Any], auth: AuthContext
    ) -> AgentResponse:
        customer = await self._customers.get_customer(auth.customer_id)
        if customer is None:
            return self.error_response(ResponseStatus.ERROR, "Customer not found.")

        preferred_date = parse_day(params["preferredDate"])
        if preferred_date is None:
            return self.error_response(ResponseStatus.ERROR, INVALID_DATE)
        if preferred_date < _today():
            return self.error_response(ResponseStatus.ERROR, "Pickup date must be in the future.")

        time_slot = params["timeSlot"]
        if time_slot not in TIME_SLOT_LABELS:
            return self.error_response(ResponseStatus.ERROR, "Invalid time slot.")

        if time_slot not in await self._pickups.available_slots(preferred_date):
            return self.error_response(
                ResponseStatus.ERROR,
                f"The {time_slot} slot is fully booked for this date. "
                "Please choose another time.",
            )

        address = params["pickupAddress"]
        request_id = await self._pickups.create_pickup({
            "customer_id": auth.customer_id,
            "customer_name": customer.get("name"),
            "customer_phone": customer.get("phone"),
            "customer_email": customer.get("email"),
            "service_types": params["serviceTypes"],
            "item_description": params["itemDescription"],
            "express_service": params.get("expressService", False),
            "special_instructions": params.get("specialInstructions"),
            "pickup_address": address,
            "preferred_date": preferred_date,
            "time_slot": time_slot,
            "status": "pending",
            "source": "chatbot",
        })
        self._logger.info(
            "pickup_scheduled",
            request_id=request_id,
            preferred_date=preferred_date.isoformat(),
            time_slot=time_slot,
        )

        label = slot_label(time_slot)
        return self.success_response(
            data={
                "requestId": request_id,
                "preferredDate": preferred_date.isoformat(),
                "timeSlot": time_slot,
                "timeSlotLabel": label,
                "status": "pending",
            },
            message=(
                f"Pickup scheduled! Request ID: {request_id}\n\n"
                f"Date: {self.format_date(preferred_date)}\n"
                f"Time: {label}\n"
                f"Address: {address['address']}\n\n"
                "We'll confirm your pickup shortly and assign a driver. "
                "You'll receive a WhatsApp notification when your driver is on the way."
            ),
        )

    async def _handle_available_slots(
        self, params: dict[str, Any], auth: AuthContext
    ) -> AgentResponse:
        day = parse_day(params["date"])
        if day is None:
            return self.error_response(ResponseStatus.ERROR, INVALID_DATE)

        available = await self._pickups.available_slots(day)
        slots = [{"slot": s, "label": slot_label(s), "available": True} for s in available]
        if available:
            message = (
                f"Available slots for {self.format_date(day)}: "
                f"{', '.join(slot_label(s) for s in available)}"
            )
        else:
            message = f"No available slots for {self.format_date(day)}. Please try another date."
        return self.success_response(data={"date": day.isoformat(), "slots": slots}, message=message)

    async def _handle_my_pickups(self, params: dict[str, Any], auth: AuthContext) -> AgentResponse:
        pickups = await self._pickups.list_by_customer(
            auth.customer_id, int(params.get("limit") or 10)
        )
        if pickups:
            message = f"You have {len(pickups)} pickup request(s)."
        else:
            message = "You don't have any pickup requests yet."
        return self.success_response(
            data={
                "pickups": [
                    {
                        **_pickup_summary(p),
                        "serviceTypes": p.get("service_types") or [],
                        "driverName": p.get("assigned_driver_name"),
                    }
                    for p in pickups
                ]
            },
            message=message,
        )

    async def _handle_pickup_status(
        self, params: dict[str, Any], auth: AuthContext
    ) -> AgentResponse:
        request_id = str(params["requestId"])
        pickup = await self._pickups.get_pickup(request_id)
        if pickup is None:
            return self.error_response(ResponseStatus.NOT_FOUND, PICKUP_NOT_FOUND)
        if auth.user_type == UserType.CUSTOMER and pickup.get("customer_id") != auth.customer_id:
            return self.error_response(
                ResponseStatus.UNAUTHORIZED, "You can only view your own pickup requests."
            )

        status = pickup["status"]
        driver_name = pickup.get("assigned_driver_name")
        converted_order_id = pickup.get("converted_order_id")

        message = f"Pickup {request_id}: {pickup_status_label(status)}"
        if driver_name and status in ("assigned", "in_transit"):
            message += f"\nDriver: {driver_name}"
        if converted_order_id:
            message += f"\nOrder ID: {converted_order_id}"

        return self.success_response(
            data={
                **_pickup_summary(pickup),
                "address": (pickup.get("pickup_address") or {}).get("address"),
                "serviceTypes": pickup.get("service_types") or [],
                "itemDescription": pickup.get("item_description"),
                "driverName": driver_name,
                "convertedOrderId": converted_order_id,
            },
            message=message,
        )

    async def _handle_cancel_pickup(
        self, params: dict[str, Any], auth: AuthContext
    ) -> AgentResponse:
        request_id = str(params["requestId"])
        pickup = await self._pickups.get_pickup(request_id)
        if pickup is None:
            return self.error_response(ResponseStatus.NOT_FOUND, PICKUP_NOT_FOUND)
        if auth.user_type == UserType.CUSTOMER and pickup.get("customer_id") != auth.customer_id:
            return self.error_response(
                ResponseStatus.UNAUTHORIZED, "You can only cancel your own pickup requests."
            )
        if pickup["status"] in NON_CANCELLABLE_STATUSES:
            return self.error_response(
                ResponseStatus.ERROR,
                f"Cannot cancel a pickup that is {pickup_status_label(pickup['status']).lower()}.",
            )

        await self._update(
            request_id,
            {"status": "cancelled", "cancellation_reason": params.get("reason")},
        )
        return self.success_response(
            data={"requestId": request_id, "status": "cancelled"},
            message="Pickup request has been cancelled.",
        )

    # ── Dispatch Actions ─────────────────────────────────────────────────────

    async def _handle_pending_pickups(
        self, params: dict[str, Any], auth: AuthContext
    ) -> AgentResponse:
        pickups = await self._pickups.list_pending(int(params.get("limit") or 50))
        return self.success_response(
            data={
                "pickups": [
                    {
                        **_pickup_summary(p),
                        "customerName": p.get("customer_name"),
                        "customerPhone": p.get("customer_phone"),
                        "serviceTypes": p.get("service_types") or [],
                        "address": (p.get("pickup_address") or {}).get("address"),
                        "expressService": p.get("express_service", False),
                    }
                    for p in pickups
                ]
            },
            message=f"{len(pickups)} pending pickup request(s).",
        )

    async def _handle_confirm_pickup(
        self, params: dict[str, Any], auth: AuthContext
    ) -> AgentResponse:
        request_id = str(params["requestId"])
        updates: dict[str, Any] = {"status": "confirmed"}
        confirmed_time = _parse_datetime(params.get("confirmedTime"))
        if confirmed_time is not None:
            updates["confirmed_time"] = confirmed_time

        if await self._update(request_id, updates) is None:
            return self.error_response(ResponseStatus.NOT_FOUND, PICKUP_NOT_FOUND)
        return self.success_response(
            data={"requestId": request_id, "status": "confirmed"},
            message="Pickup request confirmed.",
        )

    async def _handle_assign_driver(
        self, params: dict[str, Any], auth: AuthContext
    ) -> AgentResponse:
        request_id = str(params["requestId"])
        driver_id = str(params["driverId"])
        driver_name = str(params["driverName"])
        updates: dict[str, Any] = {
            "status": "assigned",
            "assigned_driver_id": driver_id,
            "assigned_driver_name": driver_name,
        }
        confirmed_time = _parse_datetime(params.get("confirmedTime"))
        if confirmed_time is not None:
            updates["confirmed_time"] = confirmed_time

        if await self._update(request_id, updates) is None:
            return self.error_response(ResponseStatus.NOT_FOUND, PICKUP_NOT_FOUND)
        return self.success_response(
            data={
                "requestId": request_id,
                "status": "assigned",
                "driverId": driver_id,
                "driverName": driver_name,
            },
            message=f"Driver {driver_name} assigned to pickup {request_id}.",
        )

    async def _handle_update_status(
        self, params: dict[str, Any], auth: AuthContext
    ) -> AgentResponse:
        request_id = str(params["requestId"])
        status = str(params["status"])
        if status not in PICKUP_STATUS_LABELS:
            return self.error_response(ResponseStatus.ERROR, "Invalid status.")

        if await self._update(request_id, {"status": status}) is None:
            return self.error_response(ResponseStatus.NOT_FOUND, PICKUP_NOT_FOUND)
        return self.success_response(
            data={"requestId": request_id, "status": status},
            message=f"Pickup status updated to: {pickup_status_label(status)}",
        )

    async def _handle_convert_to_order(
        self, params: dict[str, Any], auth: AuthContext
    ) -> AgentResponse:
        request_id = str(params["requestId"])
        order_id = str(params["orderId"])
        updated = await self._update(
            request_id, {"status": "converted", "converted_order_id": order_id}
        )
        if updated is None:
            return self.error_response(ResponseStatus.NOT_FOUND, PICKUP_NOT_FOUND)
        return self.success_response(
            data={"requestId": request_id, "orderId": order_id, "status": "converted"},
            message=f"Pickup {request_id} converted to order {order_id}.",
        )

    # ── Driver Actions ───────────────────────────────────────────────────────

    async def _handle_driver_pickups(
        self, params: dict[str, Any], auth: AuthContext
    ) -> AgentResponse:
        day = None
        if params.get("date"):
            day = parse_day(params["date"])
            if day is None:
                return self.error_response(ResponseStatus.ERROR, INVALID_DATE)

        pickups = await self._pickups.list_by_driver(auth.staff_id, day)
        suffix = f" for {self.format_date(day)}" if day else ""
        return self.success_response(
            data={
                "pickups": [
                    {
                        **_pickup_summary(p),
                        "customerName": p.get("customer_name"),
                        "customerPhone": p.get("customer_phone"),
                        "address": (p.get("pickup_address") or {}).get("address"),
                        "coordinates": (p.get("pickup_address") or {}).get("coordinates"),
                        "serviceTypes": p.get("service_types") or [],
                        "itemDescription": p.get("item_description"),
                        "expressService": p.get("express_service", False),
                    }
                    for p in pickups
                ]
            },
            message=f"You have {len(pickups)} assigned pickup(s){suffix}.",
        )

    async def _handle_mark_picked_up(
        self, params: dict[str, Any], auth: AuthContext
    ) -> AgentResponse:
        request_id = str(params["requestId"])
        updated = await self._update(
            request_id, {"status": "picked_up", "picked_up_at": datetime.now(timezone.utc)}
        )
        if updated is None:
            return self.error_response(ResponseStatus.NOT_FOUND, PICKUP_NOT_FOUND)
        return self.success_response(
            data={"requestId": request_id, "status": "picked_up"},
            message="Pickup marked as completed.",
        )

    async def _handle_mark_at_facility(
        self, params: dict[str, Any], auth: AuthContext
    ) -> AgentResponse:
        request_id = str(params["requestId"])
        if await self._update(request_id, {"status": "at_facility"}) is None:
            return self.error_response(ResponseStatus.NOT_FOUND, PICKUP_NOT_FOUND)
        return self.success_response(
            data={"requestId": request_id, "status": "at_facility"},
            message="Items have arrived at the facility.",
        )

    # ── Reporting ────────────────────────────────────────────────────────────

    async def _handle_pickup_stats(
        self, params: dict[str, Any], auth: AuthContext
    ) -> AgentResponse:
        start_day = parse_day(params["startDate"])
        end_day = parse_day(params["endDate"])
        if start_day is None or end_day is None:
            return self.error_response(ResponseStatus.ERROR, INVALID_DATE)

        stats = await self._pickups.stats(
            datetime.combine(start_day, time.min, tzinfo=timezone.utc),
            datetime.combine(end_day, time.max, tzinfo=timezone.utc),
        )
        return self.success_response(
            data=stats,
            message=(
                f"Pickup statistics from {self.format_date(start_day)} to "
                f"{self.format_date(end_day)}:\n"
                f"Total: {stats.get('total', 0)}, Pending: {stats.get('pending', 0)}, "
                f"Completed: {stats.get('completed', 0)}, Converted: {stats.get('converted', 0)}"
            ),
        )


def _pickup_summary(pickup: dict[str, Any]) -> dict[str, Any]:
    slot = pickup.get("time_slot", "")
    status = pickup.get("status", "")
    return {
        "requestId": pickup.get("request_id"),
        "date": to_iso(pickup.get("preferred_date")),
        "timeSlot": slot,
        "timeSlotLabel": slot_label(slot),
        "status": status,
        "statusLabel": pickup_status_label(status),
    }
