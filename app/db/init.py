"""Initialize database tables."""
from sqlmodel import SQLModel
from sqlalchemy.engine import Engine
from app.models.user import User
from app.models.child import Child
from app.models.contact import Contact, ContactIdentifier
from app.models.communication import Communication
from app.models.document import Document
from app.models.incident import Incident
from app.models.calendar_event import CalendarEvent
from app.models.ai_conversation import AIConversation
from app.models.ai_message import AIMessage
from app.models.audit_log import AuditLog
from app.db.config import engine as default_engine


def init_db(engine: Engine | None = None):
    """Create all tables in the database."""
    print("[DB INIT] Creating all tables...")
    SQLModel.metadata.create_all(engine or default_engine)
    print("[DB INIT] Tables created successfully.")


if __name__ == "__main__":
    init_db()
