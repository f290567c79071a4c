from .user import User, UserRole
from .client import Client
from .contract import Contract, ContractStatus
from .project import Project, ProjectStatus
from .time_entry import TimeEntry, GENERAL_CATEGORY_ID
from .payment import Payment
from .category import Category
from .auth_models import AuthSession
from .record import StoredRecord

__all__ = [
    "User", "UserRole",
    "Client",
    "Contract", "ContractStatus",
    "Project", "ProjectStatus",
    "TimeEntry", "GENERAL_CATEGORY_ID",
    "Payment",
    "Category",
    "AuthSession",
    "StoredRecord",
]
