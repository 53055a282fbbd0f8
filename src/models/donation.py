from decimal import Decimal, InvalidOperation
from pydantic import BaseModel, ConfigDict, Field, EmailStr, field_validator


CAPTURE_COMPLETED = "PAYMENT.CAPTURE.COMPLETED"

class DonorIntent(BaseModel):
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    name: str = Field(min_length=1)
    email: EmailStr
    message: str | None = None

    @field_validator("message")
    @classmethod
    def blank_message_is_none(cls, value: str | None) -> str | None:
        return value or None

class Amount(BaseModel):
    value: str
    currency_code: str = "USD"

    @field_validator("value")
    @classmethod
    def must_be_decimal(cls, value: str) -> str:
        try:
            parsed = Decimal(value)
        except InvalidOperation:
            raise ValueError(f"amount {value!r} is not a decimal string")
        if not parsed.is_finite():
            raise ValueError(f"amount {value!r} is not a decimal string")
        return value

class PurchaseUnit(BaseModel):
    custom_id: str

class CaptureResource(BaseModel):
    id: str = Field(min_length=1)  # PayPal capture id, used as the idempotency key
    amount: Amount
    purchase_units: list[PurchaseUnit] = Field(min_length=1)

class ValidatedDonation(BaseModel):
    model_config = ConfigDict(frozen=True)

    capture_id: str
    amount: str
    donor: DonorIntent
    event_id: str | None = None

class OutboundEmail(BaseModel):
    model_config = ConfigDict(frozen=True)

    sender: str
    recipient: EmailStr
    subject: str
    html: str
