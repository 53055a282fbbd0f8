from pydantic import BaseModel

class WebhookAck(BaseModel):
    status: str
    capture_id: str | None = None
