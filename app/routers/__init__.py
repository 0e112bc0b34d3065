"""Routers package for the Family Navigator records API."""

from .audit import router as audit_router
from .auth import router as auth_router
from .calendar import router as calendar_router
from .children import router as children_router
from .communications import router as communications_router
from .contacts import router as contacts_router
from .conversations import router as conversations_router
from .documents import router as documents_router
from .incidents import router as incidents_router

__all__ = [
    "audit_router",
    "auth_router",
    "calendar_router",
    "children_router",
    "communications_router",
    "contacts_router",
    "conversations_router",
    "documents_router",
    "incidents_router",
]
