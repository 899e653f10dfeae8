"""Customer agent package.

Exports:
    CustomerAgent: Customer profile and insights specialist.
    CUSTOMER_CAPABILITIES: The customer agent's capability list.
"""

from src.dispatch.agents.customer.agent import CustomerAgent
from src.dispatch.agents.customer.capabilities import CUSTOMER_CAPABILITIES

__all__ = ["CustomerAgent", "CUSTOMER_CAPABILITIES"]
