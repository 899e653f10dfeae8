"""Support Agent: tickets, human escalation and contact details.

Guests may open tickets and ask for a human; their tickets are keyed by
session id. Staff can list and update every ticket.

Exports:
    SupportAgent: The support and escalation specialist.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from src.dispatch.agents.base import AgentResponse, BaseAgent, ResponseStatus
from src.dispatch.agents.company import COMPANY_INFO
from src.dispatch.agents.support.capabilities import SUPPORT_CAPABILITIES
from src.dispatch.agents.support.store import (
    InMemoryTicketStore,
    SupportTicket,
    TicketPriority,
    TicketStatus,
    TicketStore,
    generate_ticket_id,
)
from src.dispatch.core.auth import AuthContext, UserType

DEFAULT_ESCALATION_REASON = "Customer requested human support"


def _contact() -> dict[str, str]:
    return {
        "phone": COMPANY_INFO["phone"],
        "whatsapp": COMPANY_INFO["whatsapp"],
        "email": COMPANY_INFO["email"],
    }


class SupportAgent(BaseAgent):
    """Support and escalation specialist.

    Args:
        ticket_store: Where tickets are kept. Defaults to an in-memory store.
    """

    name = "support-agent"
    description = "Support and escalation specialist - handles complaints, requests, and human handoff"
    capabilities = SUPPORT_CAPABILITIES

    def __init__(self, ticket_store: TicketStore | None = None) -> None:
        super().__init__()
        self._tickets = ticket_store if ticket_store is not None else InMemoryTicketStore()

    async def handle(
        self, action: str, params: dict[str, Any], auth: AuthContext
    ) -> AgentResponse:
        handlers = {
            "createTicket": self._handle_create_ticket,
            "getTicketStatus": self._handle_ticket_status,
            "getMyTickets": self._handle_my_tickets,
            "escalateToHuman": self._handle_escalate,
            "getContactInfo": self._handle_contact_info,
            "getAllTickets": self._handle_all_tickets,
            "updateTicket": self._handle_update_ticket,
        }
        handler = handlers.get(action)
        if handler is None:
            return self.error_response(ResponseStatus.NOT_FOUND, f"Unknown action: {action}")
        return await handler(params, auth)

    @staticmethod
    def _owner_id(auth: AuthContext) -> str:
        return auth.customer_id or auth.session_id

    # ── Customer Actions ─────────────────────────────────────────────────────

    async def _handle_create_ticket(
        self, params: dict[str, Any], auth: AuthContext
    ) -> AgentResponse:
        ticket = SupportTicket(
            ticket_id=generate_ticket_id("TKT"),
            customer_id=self._owner_id(auth),
            subject=params["subject"],
            description=params["description"],
            priority=params.get("priority") or TicketPriority.MEDIUM,
            order_id=params.get("orderId"),
        )
        await self._tickets.save(ticket)
        self._logger.info(
            "support_ticket_created",
            ticket_id=ticket.ticket_id,
            priority=ticket.priority.value,
        )

        return self.success_response(
            data={
                "ticketId": ticket.ticket_id,
                "status": ticket.status.value,
                "message": "Your support ticket has been created.",
                "expectedResponse": "Our team will respond within 24 hours.",
                "contact": _contact(),
            },
            message=(
                f"Support ticket {ticket.ticket_id} created successfully. "
                "We'll get back to you soon!"
            ),
        )

    async def _handle_ticket_status(
        self, params: dict[str, Any], auth: AuthContext
    ) -> AgentResponse:
        ticket_id = str(params["ticketId"])
        ticket = await self._tickets.get(ticket_id)
        if ticket is None:
            return self.error_response(ResponseStatus.NOT_FOUND, "Ticket not found.")
        if auth.user_type == UserType.CUSTOMER and ticket.customer_id != auth.customer_id:
            return self.error_response(
                ResponseStatus.UNAUTHORIZED, "You do not have access to this ticket."
            )

        return self.success_response(
            data={
                "ticketId": ticket.ticket_id,
                "subject": ticket.subject,
                "status": ticket.status.value,
                "priority": ticket.priority.value,
                "createdAt": ticket.created_at.isoformat(),
                "updatedAt": ticket.updated_at.isoformat(),
                "assignedTo": ticket.assigned_to,
            },
            message=f"Ticket {ticket_id} is currently: {ticket.status.value}",
        )

    async def _handle_my_tickets(self, params: dict[str, Any], auth: AuthContext) -> AgentResponse:
        owner_id = self._owner_id(auth)
        status = params.get("status")
        tickets = [
            t for t in await self._tickets.list_all()
            if t.customer_id == owner_id and (status is None or t.status == status)
        ]
        return self.success_response(
            data={
                "tickets": [
                    {
                        "ticketId": t.ticket_id,
                        "subject": t.subject,
                        "status": t.status.value,
                        "priority": t.priority.value,
                        "createdAt": t.created_at.isoformat(),
                    }
                    for t in tickets
                ],
                "count": len(tickets),
            },
            message=f"You have {len(tickets)} support ticket(s)",
        )

    async def _handle_escalate(self, params: dict[str, Any], auth: AuthContext) -> AgentResponse:
        ticket = SupportTicket(
            ticket_id=generate_ticket_id("ESC"),
            customer_id=self._owner_id(auth),
            subject="Human Support Requested",
            description=params.get("reason") or DEFAULT_ESCALATION_REASON,
            priority=TicketPriority.HIGH,
        )
        await self._tickets.save(ticket)
        self._logger.info("support_escalated", ticket_id=ticket.ticket_id)

        phone = COMPANY_INFO["phone"]
        return self.success_response(
            data={
                "escalated": True,
                "ticketId": ticket.ticket_id,
                "message": "I've escalated your request to our human support team.",
                "contact": {**_contact(), "hours": COMPANY_INFO["hours"]},
                "immediateHelp": f"For immediate assistance, please call {phone} or WhatsApp us.",
            },
            message=(
                f"I've connected you with our support team. Reference: {ticket.ticket_id}. "
                f"For immediate help, call {phone}"
            ),
        )

    async def _handle_contact_info(
        self, params: dict[str, Any], auth: AuthContext
    ) -> AgentResponse:
        return self.success_response(
            data={
                **_contact(),
                "website": COMPANY_INFO["website"],
                "hours": COMPANY_INFO["hours"],
                "branches": COMPANY_INFO["branches"],
                "location": COMPANY_INFO["location"],
            },
            message=f"Contact us at {COMPANY_INFO['phone']} or WhatsApp {COMPANY_INFO['whatsapp']}",
        )

    # ── Staff Actions ────────────────────────────────────────────────────────

    async def _handle_all_tickets(self, params: dict[str, Any], auth: AuthContext) -> AgentResponse:
        all_tickets = await self._tickets.list_all()
        status = params.get("status")
        tickets = [t for t in all_tickets if status is None or t.status == status]
        tickets = tickets[: params.get("limit") or 50]

        return self.success_response(
            data={
                "tickets": [
                    {
                        "ticketId": t.ticket_id,
                        "customerId": t.customer_id,
                        "subject": t.subject,
                        "status": t.status.value,
                        "priority": t.priority.value,
                        "createdAt": t.created_at.isoformat(),
                        "assignedTo": t.assigned_to,
                    }
                    for t in tickets
                ],
                "count": len(tickets),
                "summary": {
                    "open": sum(1 for t in all_tickets if t.status == TicketStatus.OPEN),
                    "inProgress": sum(
                        1 for t in all_tickets if t.status == TicketStatus.IN_PROGRESS
                    ),
                    "total": len(all_tickets),
                },
            },
            message=f"{len(tickets)} support tickets found",
        )

    async def _handle_update_ticket(
        self, params: dict[str, Any], auth: AuthContext
    ) -> AgentResponse:
        ticket_id = str(params["ticketId"])
        ticket = await self._tickets.get(ticket_id)
        if ticket is None:
            return self.error_response(ResponseStatus.NOT_FOUND, "Ticket not found.")

        updates: dict[str, Any] = {"updated_at": datetime.now(timezone.utc)}
        if params.get("status"):
            updates["status"] = TicketStatus(params["status"])
        if params.get("assignedTo"):
            updates["assigned_to"] = params["assignedTo"]
        if params.get("notes"):
            updates["notes"] = [*ticket.notes, params["notes"]]

        ticket = ticket.model_copy(update=updates)
        await self._tickets.save(ticket)
        self._logger.info(
            "support_ticket_updated",
            ticket_id=ticket_id,
            status=ticket.status.value,
            updated_by=auth.staff_id,
        )

        return self.success_response(
            data={
                "ticketId": ticket.ticket_id,
                "status": ticket.status.value,
                "assignedTo": ticket.assigned_to,
                "updatedAt": ticket.updated_at.isoformat(),
            },
            message=f"Ticket {ticket_id} updated successfully",
        )
