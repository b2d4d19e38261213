"""Service layer for business logic."""

from .account_service import AccountService, IdentityError, IdentityProviderProtocol
from .analytics_service import AnalyticsService, BoardMetrics
from .automation_engine import check_draft, evaluate, validate_draft
from .automation_service import AutomationService
from .board_store import BoardStore
from .errors import (
    AuthError,
    AutomationValidationError,
    ContextError,
    RemoteWriteError,
    StoreError,
)
from .filter_service import Filter, FilterService
from .subscription import BoardSubscription
from .task_service import TaskService
from .time_tracking import TimeTracker, format_duration
from .workflow import BoardWorkflow

__all__ = [
    "AccountService",
    "AnalyticsService",
    "AuthError",
    "AutomationService",
    "AutomationValidationError",
    "BoardMetrics",
    "BoardStore",
    "BoardSubscription",
    "BoardWorkflow",
    "ContextError",
    "Filter",
    "FilterService",
    "IdentityError",
    "IdentityProviderProtocol",
    "RemoteWriteError",
    "StoreError",
    "TaskService",
    "TimeTracker",
    "check_draft",
    "evaluate",
    "format_duration",
    "validate_draft",
]
