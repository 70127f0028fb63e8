"""Polyfactory builders for the database models.

    from tests.factories import UserFactory, WorkflowFactory, PurchaseFactory
"""

from tests.factories.base import BaseFactory
from tests.factories.user import UserFactory
from tests.factories.workflow import PurchaseFactory, WorkflowFactory

__all__ = ["BaseFactory", "PurchaseFactory", "UserFactory", "WorkflowFactory"]
