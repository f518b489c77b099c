from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class EmailMessage:
    to: str
    subject: str
    html_body: str


class Notifier(ABC):
    """Port for outbound e-mail. ``send`` raises when the message could not be handed off."""

    @abstractmethod
    async def send(self, message: EmailMessage) -> None:
        ...
