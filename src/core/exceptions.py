class FulfillmentError(Exception):
    """Base class for errors raised while fulfilling a donation event."""


class EventValidationError(FulfillmentError):
    """The webhook payload or the donor metadata it carries is malformed."""


class GenerationFault(FulfillmentError):
    """The generative-text call failed; always recovered with the fallback text."""


class DeliveryError(FulfillmentError):
    """The mail transport refused or failed to deliver the acknowledgement."""


class WebhookVerificationError(FulfillmentError):
    """PayPal did not confirm the webhook transmission signature."""
