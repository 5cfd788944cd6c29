from twilio.rest import Client
from twilio.base.exceptions import TwilioRestException
from typing import Optional
import asyncio
import logging
import re
from config import settings
from services.notifier import Notifier

logger = logging.getLogger(__name__)


class TwilioNotifier(Notifier):
    def __init__(self, client: Optional[Client] = None,
                 from_number: Optional[str] = None,
                 country_code: Optional[str] = None):
        self.from_number = from_number or settings.TWILIO_FROM_NUMBER
        self.country_code = country_code or settings.DEFAULT_COUNTRY_CODE

        if client is None:
            account_sid = settings.TWILIO_ACCOUNT_SID
            auth_token = settings.TWILIO_AUTH_TOKEN
            if not all([account_sid, auth_token, self.from_number]):
                raise ValueError("Missing Twilio credentials")
            client = Client(account_sid, auth_token)
        elif not self.from_number:
            raise ValueError("Missing Twilio sender number")

        self.client = client

    def _format_phone_number(self, phone_number: str) -> str:
        """Format phone number to E.164 and add the WhatsApp prefix when sending from a WhatsApp number."""
        has_plus = phone_number.strip().startswith('+')
        digits = re.sub(r'\D', '', phone_number)

        if not has_plus:
            if digits.startswith('0'):
                digits = self.country_code + digits[1:]  # Replace trunk 0 with the country code
            elif len(digits) == 10:
                digits = self.country_code + digits

        formatted = '+' + digits

        if self.from_number.startswith('whatsapp:'):
            formatted = f'whatsapp:{formatted}'

        return formatted

    async def send(self, phone: str, message: str) -> bool:
        formatted_number = self._format_phone_number(phone)
        try:
            # Twilio client calls block
            result = await asyncio.to_thread(
                self.client.messages.create,
                body=message,
                from_=self.from_number,
                to=formatted_number
            )
            logger.info(f"Sent message {getattr(result, 'sid', '')} to {formatted_number}")
            return True
        except TwilioRestException as e:
            logger.warning(f"Twilio rejected message to {formatted_number}: {e.msg}")
            return False
