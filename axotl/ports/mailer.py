from typing import Protocol


class MailerPort(Protocol):
    def send(self, recipient_id: int, subject: str, body: str) -> bool:
        """Hand a message over for delivery. Returns True if it was accepted."""
        ...
