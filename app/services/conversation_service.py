"""
Conversation Service

CRUD operations for AI conversations and their messages.

- User isolation: every conversation lookup filters by user_id
- Messages are append-only; there is no update or delete for a single message
- A conversation's context only grows
"""

from typing import List, Optional
from sqlalchemy import func
from sqlmodel import Session, select

from app.models.ai_conversation import AIConversation, CONTEXT_KEYS
from app.models.ai_message import AIMessage
from app.schemas.conversation import ConversationContext, ConversationCreate, MessageCreate
from app.services.audit_service import AuditService
from app.services.errors import RecordError, DANGLING_REFERENCE
from app.services.record_validator import RecordValidator
from app.utils.logger import get_logger
from app.utils.time import utcnow

logger = get_logger(__name__)


class ConversationService:
    """Service for managing conversations and messages"""

    def __init__(self, db: Session):
        self.db = db
        self.audit = AuditService(db)

    def create_conversation(self, user_id: str, data: Optional[ConversationCreate] = None) -> AIConversation:
        """Create new conversation"""
        data = data or ConversationCreate()
        context = data.context.model_dump()
        RecordValidator(self.db, user_id).check_context(context)

        conversation = AIConversation(
            user_id=user_id,
            title=data.title,
            context=context,
        )
        self.db.add(conversation)
        self.audit.record(user_id, "conversation.created", "conversation", conversation.id)
        self.db.commit()
        self.db.refresh(conversation)
        return conversation

    def get_conversation(self, conversation_id: str, user_id: str) -> Optional[AIConversation]:
        """Get conversation ensuring ownership"""
        statement = select(AIConversation).where(
            AIConversation.id == conversation_id,
            AIConversation.user_id == user_id
        )
        return self.db.exec(statement).first()

    def attach_context(
        self,
        conversation_id: str,
        user_id: str,
        additions: ConversationContext
    ) -> Optional[AIConversation]:
        """Add record ids to the conversation context. Ids already attached are kept once."""
        conversation = self.get_conversation(conversation_id, user_id)
        if not conversation:
            return None

        new_items = additions.model_dump()
        RecordValidator(self.db, user_id).check_context(new_items)

        context = {
            key: list(dict.fromkeys([*conversation.context.get(key, []), *new_items[key]]))
            for key in CONTEXT_KEYS
        }
        conversation.context = context
        conversation.updated_at = utcnow()

        self.db.add(conversation)
        self.audit.record(user_id, "conversation.context_attached", "conversation", conversation_id, new_items)
        self.db.commit()
        self.db.refresh(conversation)
        return conversation

    def add_message(
        self,
        conversation_id: str,
        data: MessageCreate
    ) -> AIMessage:
        """Add message to conversation. The conversation must exist."""
        conversation = self.db.get(AIConversation, conversation_id)
        if not conversation:
            logger.warning("Message rejected: unknown conversation", conversation_id=conversation_id)
            raise RecordError(
                code=DANGLING_REFERENCE,
                message="conversation_id does not reference an existing conversation",
                details={"field": "conversation_id", "missing_ids": [conversation_id]},
            )

        message = AIMessage(
            conversation_id=conversation_id,
            role=data.role,
            content=data.content,
            record_metadata=data.metadata,
        )
        self.db.add(message)

        # Update conversation timestamp
        conversation.updated_at = utcnow()
        self.db.add(conversation)

        self.db.commit()
        self.db.refresh(message)
        logger.info("Message added", conversation_id=conversation_id, role=message.role)
        return message

    def get_messages(
        self,
        conversation_id: str,
        limit: int = 50
    ) -> List[AIMessage]:
        """Get messages for conversation"""
        statement = select(AIMessage).where(
            AIMessage.conversation_id == conversation_id
        ).order_by(AIMessage.created_at, AIMessage.id).limit(limit)

        return list(self.db.exec(statement).all())

    def count_messages(self, conversation_id: str) -> int:
        statement = select(func.count()).select_from(AIMessage).where(
            AIMessage.conversation_id == conversation_id
        )
        return self.db.exec(statement).one()

    def get_last_message(self, conversation_id: str) -> Optional[AIMessage]:
        statement = select(AIMessage).where(
            AIMessage.conversation_id == conversation_id
        ).order_by(AIMessage.created_at.desc(), AIMessage.id.desc()).limit(1)
        return self.db.exec(statement).first()

    def get_user_conversations(self, user_id: str) -> List[AIConversation]:
        """Get all conversations for a user, ordered by most recent"""
        statement = select(AIConversation).where(
            AIConversation.user_id == user_id
        ).order_by(AIConversation.updated_at.desc())

        return list(self.db.exec(statement).all())

    def delete_conversation(self, conversation_id: str, user_id: str) -> bool:
        """Delete a conversation together with its messages."""
        conversation = self.get_conversation(conversation_id, user_id)
        if not conversation:
            return False

        self.db.delete(conversation)
        self.audit.record(user_id, "conversation.deleted", "conversation", conversation_id)
        self.db.commit()
        return True
