"""Order agent package.

Exports:
    OrderAgent: Order tracking and pipeline specialist.
    ORDER_CAPABILITIES: The order agent's capability list.
"""

from src.dispatch.agents.order.agent import OrderAgent
from src.dispatch.agents.order.capabilities import ORDER_CAPABILITIES

__all__ = ["OrderAgent", "ORDER_CAPABILITIES"]
