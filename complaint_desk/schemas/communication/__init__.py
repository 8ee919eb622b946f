from complaint_desk.schemas.communication.chat import ChatMessageCreate, ChatMessageResponse

__all__ = ["ChatMessageCreate", "ChatMessageResponse"]
