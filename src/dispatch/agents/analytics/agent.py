"""Analytics Agent: business metrics for managers and executives.

Managers see their own branches; executives (admin, director) see every
branch and can compare branches, analyse trends and ask free-text
questions. Free-text answers are phrased by the completion service when one
is configured, otherwise the retrieved figures are returned as-is.

Exports:
    AnalyticsAgent: The business analytics specialist.
"""

from __future__ import annotations

import asyncio
import json
from typing import TYPE_CHECKING, Any

from src.dispatch.agents.analytics.capabilities import ANALYTICS_CAPABILITIES
from src.dispatch.agents.analytics.periods import (
    TimePeriod,
    date_range_for_period,
    previous_date_range,
    today_range,
)
from src.dispatch.agents.analytics.prompts import (
    ANALYTICS_SYSTEM_PROMPT,
    BusinessIntent,
    classify_business_intent,
)
from src.dispatch.agents.base import AgentResponse, BaseAgent, ResponseStatus
from src.dispatch.agents.repositories import AnalyticsRepository
from src.dispatch.core.auth import AuthContext, is_executive

if TYPE_CHECKING:
    from src.dispatch.services.completion import CompletionService

ALL_BRANCHES = "all"
DATA_UNAVAILABLE = "Unable to fetch some data due to a temporary error. Please try again."


def _branch_ids(branch_id: str | None) -> list[str] | None:
    if not branch_id or branch_id == ALL_BRANCHES:
        return None
    return [branch_id]


def _completion_rate(completed: int, total: int) -> int:
    return round(completed / total * 100) if total > 0 else 0


def _performer(record: dict[str, Any]) -> dict[str, Any]:
    return {
        "employeeId": record.get("employee_id"),
        "employeeName": record.get("employee_name"),
        "rank": record.get("rank"),
        "overallScore": record.get("overall_score"),
    }


def _branch(record: dict[str, Any]) -> dict[str, Any]:
    return {
        "branchId": record.get("branch_id"),
        "name": record.get("name"),
        "revenue": record.get("revenue", 0),
        "ordersToday": record.get("orders_today", 0),
        "efficiency": record.get("efficiency", 0),
    }


class AnalyticsAgent(BaseAgent):
    """Business analytics specialist.

    Args:
        analytics_repository: Source of aggregated business metrics.
        completion_service: Optional completion provider for free-text
            answers.
    """

    name = "analytics-agent"
    description = (
        "Business analytics specialist for executives and managers. Provides insights on "
        "revenue, orders, customers, staff, and branch performance."
    )
    capabilities = ANALYTICS_CAPABILITIES

    def __init__(
        self,
        analytics_repository: AnalyticsRepository,
        completion_service: CompletionService | None = None,
    ) -> None:
        super().__init__()
        self._analytics = analytics_repository
        self._completion = completion_service

    async def handle(
        self, action: str, params: dict[str, Any], auth: AuthContext
    ) -> AgentResponse:
        handlers = {
            "getRevenueAnalytics": self._handle_revenue,
            "getOrderAnalytics": self._handle_orders,
            "getCustomerAnalytics": self._handle_customers,
            "getStaffPerformance": self._handle_staff_performance,
            "getBranchComparison": self._handle_branch_comparison,
            "getDriverAnalytics": self._handle_drivers,
            "getTrendAnalysis": self._handle_trend,
            "getNaturalLanguageQuery": self._handle_natural_language_query,
            "getDashboardSummary": self._handle_dashboard,
        }
        handler = handlers.get(action)
        if handler is None:
            return self.error_response(ResponseStatus.NOT_FOUND, f"Unknown action: {action}")

        branch_id = params.get("branchId") or auth.branch_id
        if (
            branch_id
            and branch_id != ALL_BRANCHES
            and not is_executive(auth)
            and not self.can_access_branch(auth, branch_id)
        ):
            return self.error_response(
                ResponseStatus.UNAUTHORIZED, "You do not have access to this branch."
            )
        return await handler(params, branch_id)

    # ── Period Reports ───────────────────────────────────────────────────────

    async def _handle_revenue(self, params: dict[str, Any], branch_id: str | None) -> AgentResponse:
        date_range = date_range_for_period(params["period"])
        branch_ids = _branch_ids(branch_id)
        totals, today = await asyncio.gather(
            self._analytics.transaction_totals(date_range.start, date_range.end, branch_ids),
            self._analytics.today_transaction_summary(),
        )

        branch_data = None
        if branch_ids:
            today_span = today_range()
            branch_revenue = await self._analytics.revenue(
                today_span.start, today_span.end, branch_ids
            )
            branch_data = {
                "revenue": branch_revenue,
                "formattedRevenue": self.format_currency(branch_revenue),
            }

        total = totals.get("total", 0)
        count = totals.get("count", 0)
        return self.success_response(
            data={
                "period": date_range.label,
                "dateRange": date_range.to_dict(),
                "totals": {
                    "totalRevenue": total,
                    "transactionCount": count,
                    "byPaymentMethod": totals.get("by_method", {}),
                    "formattedRevenue": self.format_currency(total),
                },
                "today": {
                    "revenue": today.get("total", 0),
                    "count": today.get("count", 0),
                    "byMethod": {
                        "mpesa": today.get("mpesa", 0),
                        "card": today.get("card", 0),
                        "credit": today.get("credit", 0),
                    },
                    "formattedRevenue": self.format_currency(today.get("total", 0)),
                },
                "branchData": branch_data,
            },
            message=(
                f"Revenue for {date_range.label}: {self.format_currency(total)} "
                f"from {count} transactions"
            ),
        )

    async def _handle_orders(self, params: dict[str, Any], branch_id: str | None) -> AgentResponse:
        date_range = date_range_for_period(params["period"])
        today = today_range()
        branch_ids = _branch_ids(branch_id)

        (
            today_orders,
            completed_today,
            today_revenue,
            period_orders,
            period_completed,
        ) = await asyncio.gather(
            self._analytics.orders_count(today.start, today.end, branch_ids),
            self._analytics.completed_count(today.start, today.end, branch_ids),
            self._analytics.revenue(today.start, today.end, branch_ids),
            self._analytics.orders_count(date_range.start, date_range.end, branch_ids),
            self._analytics.completed_count(date_range.start, date_range.end, branch_ids),
        )
        pipeline = await self._analytics.pipeline_stats(branch_id) if branch_ids else None
        rate = _completion_rate(completed_today, today_orders)

        return self.success_response(
            data={
                "period": date_range.label,
                "today": {
                    "totalOrders": today_orders,
                    "completedOrders": completed_today,
                    "completionRate": rate,
                    "revenue": today_revenue,
                    "formattedRevenue": self.format_currency(today_revenue),
                },
                "periodTotals": {
                    "totalOrders": period_orders,
                    "completedOrders": period_completed,
                    "completionRate": _completion_rate(period_completed, period_orders),
                },
                "pipeline": pipeline,
            },
            message=(
                f"Today: {today_orders} orders, {completed_today} completed ({rate}% rate), "
                f"{self.format_currency(today_revenue)} revenue"
            ),
        )

    async def _handle_customers(
        self, params: dict[str, Any], branch_id: str | None
    ) -> AgentResponse:
        customers = await self._analytics.top_customers(int(params.get("limit") or 10))
        top = [
            {
                "customerId": c.get("customer_id"),
                "name": c.get("name"),
                "orderCount": c.get("order_count", 0),
                "totalSpent": c.get("total_spent", 0),
                "formattedSpent": self.format_currency(c.get("total_spent", 0)),
            }
            for c in customers
        ]
        if top:
            leader = top[0]
            message = (
                f"Top customer: {leader['name']} ({leader['formattedSpent']}, "
                f"{leader['orderCount']} orders)"
            )
        else:
            message = "No customer data available"

        return self.success_response(
            data={
                "topCustomers": top,
                "summary": {
                    "topCustomerCount": len(top),
                    "topCustomerTotalSpent": sum(c["totalSpent"] for c in top),
                },
            },
            message=message,
        )

    async def _handle_staff_performance(
        self, params: dict[str, Any], branch_id: str | None
    ) -> AgentResponse:
        staff_id = str(params["staffId"])
        performers = []
        if _branch_ids(branch_id):
            performers = [_performer(p) for p in await self._analytics.top_performers(branch_id, 10)]
        match = next((p for p in performers if p["employeeId"] == staff_id), None)

        if match is not None:
            message = (
                f"Staff performance: {match['employeeName']} - "
                f"Score: {match['overallScore']}%, Rank: #{match['rank']}"
            )
        else:
            message = "Top performers available. Specific staff data not found."

        return self.success_response(
            data={
                "staffId": staff_id,
                "period": TimePeriod(params["period"]).value,
                "branchId": branch_id,
                "performance": match,
                "topPerformers": performers[:5],
            },
            message=message,
        )

    async def _handle_branch_comparison(
        self, params: dict[str, Any], branch_id: str | None
    ) -> AgentResponse:
        branches = [_branch(b) for b in await self._analytics.branch_performance()]
        wanted = params.get("branchIds")
        if wanted:
            branches = [b for b in branches if b["branchId"] in wanted]
        branches.sort(key=lambda b: b["revenue"], reverse=True)
        for b in branches:
            b["formattedRevenue"] = self.format_currency(b["revenue"])

        top = branches[0] if branches else None
        if top is not None:
            message = (
                f"Top branch: {top['name']} with {top['formattedRevenue']} revenue "
                f"and {top['efficiency']}% efficiency"
            )
        else:
            message = "No branch data available"

        return self.success_response(
            data={
                "branches": branches,
                "summary": {
                    "totalBranches": len(branches),
                    "totalRevenue": sum(b["revenue"] for b in branches),
                    "totalOrders": sum(b["ordersToday"] for b in branches),
                    "avgEfficiency": (
                        round(sum(b["efficiency"] for b in branches) / len(branches))
                        if branches
                        else 0
                    ),
                },
                "topPerformer": top,
            },
            message=message,
        )

    async def _handle_drivers(self, params: dict[str, Any], branch_id: str | None) -> AgentResponse:
        date_range = date_range_for_period(params["period"])
        branch_ids = _branch_ids(branch_id)
        pending, today = await asyncio.gather(
            self._analytics.deliveries_count(branch_ids, "pending"),
            self._analytics.deliveries_count(branch_ids),
        )
        return self.success_response(
            data={
                "period": date_range.label,
                "deliveries": {"pending": pending, "today": today},
            },
            message=f"{today} deliveries today, {pending} pending",
        )

    async def _handle_trend(self, params: dict[str, Any], branch_id: str | None) -> AgentResponse:
        metric = str(params["metric"])
        metric_queries = {
            "revenue": self._analytics.revenue,
            "orders": self._analytics.orders_count,
            "completed": self._analytics.completed_count,
        }
        query = metric_queries.get(metric)
        if query is None:
            return self.error_response(ResponseStatus.ERROR, f"Unknown metric: {metric}")

        current_range = date_range_for_period(params["period"])
        previous_range = previous_date_range(params["period"])
        branch_ids = _branch_ids(branch_id)
        current, previous = await asyncio.gather(
            query(current_range.start, current_range.end, branch_ids),
            query(previous_range.start, previous_range.end, branch_ids),
        )

        change = round((current - previous) / previous * 100) if previous > 0 else 0
        change_label = f"{'+' if change >= 0 else ''}{change}%"
        trend = "up" if change > 0 else "down" if change < 0 else "stable"

        return self.success_response(
            data={
                "metric": metric,
                "period": current_range.label,
                "previousPeriod": previous_range.label,
                "current": current,
                "previous": previous,
                "change": change,
                "changeLabel": change_label,
                "trend": trend,
            },
            message=f"{metric} is {trend}: {current} vs {previous} ({change_label})",
        )

    async def _handle_dashboard(
        self, params: dict[str, Any], branch_id: str | None
    ) -> AgentResponse:
        today = today_range()
        branch_ids = _branch_ids(branch_id)
        scoped_branch = branch_ids[0] if branch_ids else None

        orders, completed, revenue, satisfaction, branches = await asyncio.gather(
            self._analytics.orders_count(today.start, today.end, branch_ids),
            self._analytics.completed_count(today.start, today.end, branch_ids),
            self._analytics.revenue(today.start, today.end, branch_ids),
            self._analytics.satisfaction_metrics(scoped_branch),
            self._analytics.branch_performance(scoped_branch),
        )
        branch_rows = [_branch(b) for b in branches]
        score = satisfaction.get("score", 0)

        return self.success_response(
            data={
                "orders": {
                    "total": orders,
                    "completed": completed,
                    "completionRate": _completion_rate(completed, orders),
                },
                "revenue": {"today": revenue, "formatted": self.format_currency(revenue)},
                "satisfaction": satisfaction,
                "branches": branch_rows,
                "summary": {
                    "totalOrdersToday": orders,
                    "completedToday": completed,
                    "satisfactionScore": score,
                    "topBranch": branch_rows[0]["name"] if branch_rows else "N/A",
                },
            },
            message=(
                f"Dashboard: {orders} orders today, {completed} completed, "
                f"{self.format_currency(revenue)} revenue, {score}/5 satisfaction"
            ),
        )

    # ── Natural Language Questions ───────────────────────────────────────────

    async def _handle_natural_language_query(
        self, params: dict[str, Any], branch_id: str | None
    ) -> AgentResponse:
        query = str(params["query"])
        branch_id = branch_id or ALL_BRANCHES
        intent = classify_business_intent(query)

        sources: list[dict[str, Any]] = []
        try:
            context = await self._gather_context(intent, branch_id, sources)
        except Exception as exc:
            self._logger.warning(
                "analytics_data_fetch_failed",
                intent=intent.value,
                error=str(exc),
                exc_info=True,
            )
            context = DATA_UNAVAILABLE

        if self._completion is not None and self._completion.is_configured():
            answer = await self._completion.chat_completion(
                system_prompt=f"{ANALYTICS_SYSTEM_PROMPT}\n\n## Data Retrieved\n{context}",
                history=[],
                user_message=query,
            )
            message = answer
        else:
            answer = f"Based on my analysis: {context}"
            message = f'Analysis complete for: "{query}"'

        return self.success_response(
            data={
                "answer": answer,
                "intent": intent.value,
                "sources": sources,
                "branchId": branch_id,
            },
            message=message,
        )

    async def _gather_context(
        self, intent: BusinessIntent, branch_id: str, sources: list[dict[str, Any]]
    ) -> str:
        """Fetch the figures a question needs and describe them in one line.

        Appends a ``{type, label, data}`` entry to ``sources`` per dataset.
        """
        branch_ids = _branch_ids(branch_id)
        today = today_range()

        if intent == BusinessIntent.REVENUE:
            summary, revenue = await asyncio.gather(
                self._analytics.today_transaction_summary(),
                self._analytics.revenue(today.start, today.end, branch_ids),
            )
            sources.append({
                "type": "revenue",
                "label": "Today's Revenue",
                "data": {**summary, "branchRevenue": revenue},
            })
            return (
                f"Today's Revenue: {self.format_currency(revenue)}. "
                f"Total transactions: {summary.get('count', 0)}. "
                f"Payment breakdown: M-Pesa: {self.format_currency(summary.get('mpesa', 0))}, "
                f"Card: {self.format_currency(summary.get('card', 0))}, "
                f"Credit: {self.format_currency(summary.get('credit', 0))}"
            )

        if intent == BusinessIntent.ORDERS:
            orders, completed = await asyncio.gather(
                self._analytics.orders_count(today.start, today.end, branch_ids),
                self._analytics.completed_count(today.start, today.end, branch_ids),
            )
            pipeline = await self._analytics.pipeline_stats(branch_id) if branch_ids else None
            sources.append({
                "type": "orders",
                "label": "Order Statistics",
                "data": {"todayOrders": orders, "completed": completed, "pipelineStats": pipeline},
            })
            context = f"Today: {orders} total orders, {completed} completed."
            if pipeline:
                context += f" Pipeline: {json.dumps(pipeline, default=str)}"
            return context

        if intent == BusinessIntent.CUSTOMERS:
            customers = await self._analytics.top_customers(5)
            sources.append({
                "type": "customers",
                "label": "Top Customers",
                "data": {"topCustomers": customers},
            })
            described = "; ".join(
                f"{c.get('name')} ({self.format_currency(c.get('total_spent', 0))}, "
                f"{c.get('order_count', 0)} orders)"
                for c in customers
            )
            return f"Top 5 customers: {described}"

        if intent == BusinessIntent.STAFF:
            if not branch_ids:
                return "Staff performance data requires a specific branch."
            performers = [_performer(p) for p in await self._analytics.top_performers(branch_id, 5)]
            sources.append({
                "type": "staff",
                "label": "Top Performers",
                "data": {"topPerformers": performers},
            })
            described = "; ".join(
                f"{p['employeeName']} ({p['overallScore']}%)" for p in performers
            )
            return f"Top performers in branch: {described}"

        if intent == BusinessIntent.BRANCH:
            branches = [_branch(b) for b in await self._analytics.branch_performance()]
            sources.append({
                "type": "branch",
                "label": "Branch Performance",
                "data": {"branches": branches},
            })
            described = "; ".join(
                f"{b['name']}: {self.format_currency(b['revenue'])}, "
                f"{b['ordersToday']} orders, {b['efficiency']}% efficiency"
                for b in branches
            )
            return f"Branch performance: {described}"

        if intent == BusinessIntent.DELIVERY:
            pending, today_count = await asyncio.gather(
                self._analytics.deliveries_count(branch_ids, "pending"),
                self._analytics.deliveries_count(branch_ids),
            )
            sources.append({
                "type": "delivery",
                "label": "Delivery Stats",
                "data": {"pending": pending, "today": today_count},
            })
            return f"Deliveries: {today_count} today, {pending} pending"

        orders, revenue, satisfaction = await asyncio.gather(
            self._analytics.orders_count(today.start, today.end, branch_ids),
            self._analytics.revenue(today.start, today.end, branch_ids),
            self._analytics.satisfaction_metrics(branch_ids[0] if branch_ids else None),
        )
        sources.append({
            "type": "orders",
            "label": "Overview",
            "data": {"todayOrders": orders, "todayRevenue": revenue, "satisfaction": satisfaction},
        })
        return (
            f"Overview: {orders} orders today, {self.format_currency(revenue)} revenue, "
            f"{satisfaction.get('score', 0)}/5 satisfaction"
        )
