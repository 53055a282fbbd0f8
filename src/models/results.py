from pydantic import BaseModel, ConfigDict

from core.exceptions import DeliveryError, EventValidationError, GenerationFault
from models.donation import ValidatedDonation


class _Result(BaseModel):
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)


# Ingestion: Ignored | ValidatedDonation | Invalid

class Ignored(_Result):
    event_type: str | None

class Invalid(_Result):
    error: EventValidationError

    @property
    def reason(self) -> str:
        return str(self.error)

IngestionResult = Ignored | ValidatedDonation | Invalid


# Content generation: Generated | FellBack

class Generated(_Result):
    text: str

class FellBack(_Result):
    text: str
    fault: GenerationFault

GenerationResult = Generated | FellBack


# Dispatch: Sent | Failed

class Sent(_Result):
    recipient: str

class Failed(_Result):
    recipient: str
    error: DeliveryError

DispatchResult = Sent | Failed
