import json

from pydantic import BaseModel

from flowboard.event_store.models import Event


class ActivityResponse(BaseModel):
    event_id: str
    aggregate_type: str
    aggregate_id: str
    event_type: str
    data: dict
    version: int
    created_at: str

    @classmethod
    def from_event(cls, event: Event) -> "ActivityResponse":
        return cls(
            event_id=event.event_id,
            aggregate_type=event.aggregate_type,
            aggregate_id=event.aggregate_id,
            event_type=event.event_type,
            data=json.loads(event.event_data),
            version=event.version,
            created_at=event.created_at,
        )
