"""
Meetings and Chat

Role-scoped reads of the meeting schedule and chat rooms, and appending chat
messages. Meetings are produced by the schedule generator and are read-only
here. Messages are append-only; no delivery or read receipts are tracked.
"""

from typing import Optional

from internship_portal.models.engagement import ChatRoom, Meeting, Message
from internship_portal.models.user import User, UserRole
from internship_portal.services.registry import DomainRegistry
from internship_portal.utils.errors import FormValidationError, PermissionDenied
from internship_portal.utils.logger import get_logger


class MeetingBoard:
    """Meeting schedule as seen by each role."""

    def __init__(self, registry: DomainRegistry):
        self.registry = registry

    def visible_to(self, actor: User) -> list[Meeting]:
        """Meetings the actor attends (student), hosts (company) or all (admin), by start time."""
        if actor.role is UserRole.ADMIN:
            meetings = list(self.registry.meetings)
        elif actor.role is UserRole.STUDENT:
            meetings = [m for m in self.registry.meetings if actor.id in m.student_ids]
        elif actor.role is UserRole.COMPANY:
            company = self.registry.company_of(actor)
            meetings = (
                [m for m in self.registry.meetings if m.company_id == company.id]
                if company is not None
                else []
            )
        else:
            raise ValueError(f"Unhandled role: {actor.role}")
        return sorted(meetings, key=lambda meeting: meeting.start_time)


class ChatService:
    """Chat rooms and messages between companies and students."""

    def __init__(self, registry: DomainRegistry, correlation_id: Optional[str] = None):
        self.registry = registry
        self.logger = get_logger(correlation_id=correlation_id, component="chat")

    def rooms_for(self, actor: User) -> list[ChatRoom]:
        if actor.role is UserRole.ADMIN:
            return list(self.registry.chat_rooms)
        if actor.role is UserRole.STUDENT:
            return [room for room in self.registry.chat_rooms if actor.id in room.student_ids]
        if actor.role is UserRole.COMPANY:
            company = self.registry.company_of(actor)
            if company is None:
                return []
            return [room for room in self.registry.chat_rooms if room.company_id == company.id]
        raise ValueError(f"Unhandled role: {actor.role}")

    def can_access(self, actor: User, room: ChatRoom) -> bool:
        return any(visible.id == room.id for visible in self.rooms_for(actor))

    def _accessible_room(self, actor: User, room_id: str) -> ChatRoom:
        room = self.registry.get_chat_room(room_id)
        if not self.can_access(actor, room):
            raise PermissionDenied("You are not a participant of this chat")
        return room

    def messages(self, actor: User, room_id: str) -> list[Message]:
        """Messages of a room in the order they were sent."""
        room = self._accessible_room(actor, room_id)
        return [message for message in self.registry.messages if message.chat_room_id == room.id]

    def send_message(self, actor: User, room_id: str, content: str) -> Message:
        """
        Append a message to a room.

        Raises:
            ReferenceNotFound: If the room does not exist
            PermissionDenied: If the actor cannot see the room
            FormValidationError: If the message is blank
        """
        room = self._accessible_room(actor, room_id)
        text = (content or "").strip()
        if not text:
            raise FormValidationError("Message cannot be empty", field="content")

        message = self.registry.add_message(
            Message(chat_room_id=room.id, sender_id=actor.id, content=text)
        )
        self.logger.info("Message sent", chat_room_id=room.id, sender_id=actor.id, length=len(text))
        return message

    def counterpart_name(self, actor: User, room: ChatRoom) -> str:
        """Title of a room from the actor's side: the company for students, else the first student."""
        if actor.role is UserRole.STUDENT:
            company = self.registry.find_company(room.company_id)
            return company.name if company else "Unknown company"
        if room.student_ids:
            student = self.registry.find_user(room.student_ids[0])
            if student is not None:
                return student.name
        return "Unknown student"
