from pydantic import BaseModel

__all__ = [
    "Message",
]


# Generic user-facing confirmation
class Message(BaseModel):
    title: str
    message: str
