"""
One-time password providers.

Two implementations sit behind the same interface and one is chosen when the
application starts:

- ``TwilioVerifyProvider`` delivers and checks codes through Twilio Verify.
- ``LocalOTPProvider`` only generates codes; the caller stores them against
  the identity and compares them itself.

Callers always try ``check`` first and compare locally only when the
provider raises ``OTPProviderNotConfigured``.
"""
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional
import logging
import secrets

from starlette.concurrency import run_in_threadpool
from twilio.base.exceptions import TwilioException, TwilioRestException
from twilio.rest import Client

from ..config import settings, Settings

# Set up logging
logger = logging.getLogger(__name__)

class OTPProviderNotConfigured(Exception):
    """The provider cannot check codes; fall back to the stored code."""


class OTPDeliveryError(Exception):
    """The external channel failed to send or check a code."""


@dataclass
class OTPIssueResult:
    """
    Outcome of issuing a code.

    Attributes:
        reference: Opaque id from the external service (external mode)
        code: Generated code the caller must persist (local mode)
    """
    reference: Optional[str] = None
    code: Optional[str] = None

    @property
    def is_local(self) -> bool:
        return self.code is not None


def generate_otp_code() -> str:
    """Random 6-digit numeric code without a leading zero."""
    return str(100000 + secrets.randbelow(900000))


class OTPProvider:
    """Interface for OTP issuance and verification."""
    name = "base"

    async def issue(self, phone: str) -> OTPIssueResult:
        raise NotImplementedError

    async def check(self, phone: str, code: str) -> bool:
        raise NotImplementedError


class LocalOTPProvider(OTPProvider):
    """
    Fallback used when no external verification service is configured.
    """
    name = "local"

    async def issue(self, phone: str) -> OTPIssueResult:
        logger.info(f"Issuing local OTP for {phone}")
        return OTPIssueResult(code=generate_otp_code())

    async def check(self, phone: str, code: str) -> bool:
        raise OTPProviderNotConfigured("Local provider does not verify codes")


class TwilioVerifyProvider(OTPProvider):
    """
    Sends and checks codes with the Twilio Verify API.
    """
    name = "twilio"

    def __init__(self, account_sid: str, auth_token: str, service_sid: str, client: Optional[Client] = None):
        self.service_sid = service_sid
        self.client = client or Client(account_sid, auth_token)

    def _service(self):
        return self.client.verify.v2.services(self.service_sid)

    async def issue(self, phone: str) -> OTPIssueResult:
        logger.info(f"Sending Twilio verification to {phone}")
        try:
            verification = await run_in_threadpool(
                self._service().verifications.create, to=phone, channel="sms"
            )
        except (TwilioException, OSError) as e:
            logger.error(f"Twilio verification request failed for {phone}: {str(e)}")
            raise OTPDeliveryError(str(e)) from e
        return OTPIssueResult(reference=verification.sid)

    async def check(self, phone: str, code: str) -> bool:
        try:
            verification_check = await run_in_threadpool(
                self._service().verification_checks.create, to=phone, code=code
            )
        except TwilioRestException as e:
            if e.status == 404:
                # No pending verification: already approved, expired or never sent
                return False
            logger.error(f"Twilio verification check failed for {phone}: {str(e)}")
            raise OTPDeliveryError(str(e)) from e
        except (TwilioException, OSError) as e:
            logger.error(f"Twilio verification check failed for {phone}: {str(e)}")
            raise OTPDeliveryError(str(e)) from e
        # Twilio reports "approved" only for a correct, unexpired code
        return verification_check.status == "approved"


def build_otp_provider(config: Settings) -> OTPProvider:
    """
    Pick the OTP provider from configuration presence.

    Args:
        config: Application settings

    Returns:
        TwilioVerifyProvider when all Twilio credentials are set, LocalOTPProvider otherwise
    """
    if config.twilio_configured:
        logger.info("OTP provider: Twilio Verify")
        return TwilioVerifyProvider(
            config.twilio_account_sid,
            config.twilio_auth_token,
            config.twilio_service_sid,
        )
    logger.info("OTP provider: local fallback")
    return LocalOTPProvider()


@lru_cache()
def get_otp_provider() -> OTPProvider:
    """FastAPI dependency returning the process-wide OTP provider."""
    return build_otp_provider(settings)
