from complaint_desk.services.communication.chat_service import ChatService, ChatSession

__all__ = ["ChatService", "ChatSession"]
