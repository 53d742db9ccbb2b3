# aquadash/realtime/hub.py
"""
Everything live in one place: the bus, the shared activity feed and one
LiveCollection per entity the pages show. Created once per app
(app.state.hub).
"""

import logging
from typing import Any

from aquadash.realtime.bus import EventBus
from aquadash.realtime.store import LiveCollection, asset_request_collection, entity_collection
from aquadash.schemas.cages import Cage
from aquadash.schemas.feeds import Feed
from aquadash.schemas.laboratory_boxes import LaboratoryBox
from aquadash.schemas.medications import Medication
from aquadash.services.notifications import ActivityLog

log = logging.getLogger(__name__)


class LiveHub:
    def __init__(self, bus: EventBus | None = None, activity: ActivityLog | None = None):
        self.bus = bus or EventBus()
        self.activity = activity or ActivityLog()

        self.asset_requests = asset_request_collection(notifier=self.activity)
        self.cages = entity_collection("cages", "cage", Cage, label="Cage", notifier=self.activity)
        self.laboratory_boxes = entity_collection(
            "laboratory_boxes", "laboratoryBox", LaboratoryBox,
            label="Laboratory box", notifier=self.activity,
        )
        self.medications = entity_collection(
            "medications", "medication", Medication, label="Medication", notifier=self.activity,
        )
        self.feeds = entity_collection("feeds", "feed", Feed, label="Feed record", notifier=self.activity)

        for collection in self.collections:
            collection.bind(self.bus)

    @property
    def collections(self) -> list[LiveCollection]:
        return [self.asset_requests, self.cages, self.laboratory_boxes, self.medications, self.feeds]

    def publish(self, event: str, payload: Any) -> int:
        return self.bus.publish(event, payload)

    def close(self) -> None:
        for collection in self.collections:
            collection.close()
        log.info("live hub closed")
