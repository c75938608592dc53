from typing import Optional

from fastapi import APIRouter, Depends, Query

from api.dependencies import get_registry
from core.registry import CurationRegistry
from curation.events.models import CurationEventType
from exceptions import InvalidInputError

router = APIRouter()


@router.get("")
def list_events(
    type: Optional[str] = Query(None),
    registry: CurationRegistry = Depends(get_registry),
):
    """Curation events in the order they were recorded, optionally of one type."""
    if type:
        try:
            event_type = CurationEventType(type)
        except ValueError:
            valid = ", ".join(t.value for t in CurationEventType)
            raise InvalidInputError(f"Invalid event type. Must be one of: {valid}")
        events = registry.event_log.read_by_type(event_type)
    else:
        events = registry.event_log.read_all()

    return {
        "success": True,
        "events": [event.model_dump(mode="json") for event in events],
        "meta": {"total": len(events)},
    }
