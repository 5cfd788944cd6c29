from abc import ABC, abstractmethod
import logging

logger = logging.getLogger(__name__)


class Notifier(ABC):
    """Outbound message gateway. ``send`` reports delivery, it never retries."""

    @abstractmethod
    async def send(self, phone: str, message: str) -> bool: ...


class LoggingNotifier(Notifier):
    """Development gateway that writes messages to the log instead of sending them."""

    async def send(self, phone: str, message: str) -> bool:
        logger.info(f"SMS to {phone}: {message}")
        return True


def build_notifier(backend: str) -> Notifier:
    if backend == "twilio":
        from services.twilio_service import TwilioNotifier
        return TwilioNotifier()
    if backend == "log":
        return LoggingNotifier()
    raise ValueError(f"Unknown notifier backend: {backend}")
