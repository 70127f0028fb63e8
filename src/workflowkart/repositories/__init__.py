"""Repository layer - data access abstraction."""

from src.workflowkart.repositories.base import BaseRepository
from src.workflowkart.repositories.execution import WorkflowExecutionRepository
from src.workflowkart.repositories.log import WorkflowLogRepository
from src.workflowkart.repositories.rate_limit_rule import RateLimitRuleRepository
from src.workflowkart.repositories.workflow import PurchaseRepository, WorkflowRepository

__all__ = [
    "BaseRepository",
    "PurchaseRepository",
    "RateLimitRuleRepository",
    "WorkflowExecutionRepository",
    "WorkflowLogRepository",
    "WorkflowRepository",
]
