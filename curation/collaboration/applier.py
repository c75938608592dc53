"""Apply an accepted collaborative decision to the work it concerns."""

from __future__ import annotations

import logging

from curation.collaboration.models import Collaboration
from curation.events.event_log import CurationEventLog
from curation.events.models import CurationEventType
from curation.storage import utc_now
from curation.works.models import HistoryEntry
from curation.works.store import WorkStore
from logging_config import log_debug, log_error

logger = logging.getLogger(__name__)

COLLABORATIVE_CURATOR = "collaborative"


class DecisionApplier:
    """Marks works curated on behalf of a collaboration.

    Called on every vote that leaves a decision accepted, so repeated votes
    append repeated history entries. Failures never propagate to the caller.
    """

    def __init__(self, work_store: WorkStore, event_log: CurationEventLog):
        self.work_store = work_store
        self.event_log = event_log

    def apply(self, work_id: str, collaboration: Collaboration, curator_id: str) -> bool:
        """Return True if the work was updated, False if it was missing or the write failed."""
        try:
            with self.work_store.mutate_work(work_id) as work:
                if work is None:
                    log_debug(logger, f"Work {work_id} not found; decision not applied",
                              "DecisionApplier", {"work_id": work_id, "collaboration_id": collaboration.id})
                    return False

                timestamp = utc_now()
                curation = work.ensure_curation()
                curation.curated = True
                curation.curated_at = timestamp
                curation.curated_by = COLLABORATIVE_CURATOR
                curation.collaboration_id = collaboration.id
                curation.collaboration_title = collaboration.title
                curation.history.append(
                    HistoryEntry(
                        action="collaborative-curate",
                        metadata={
                            "collaborationId": collaboration.id,
                            "collaborationTitle": collaboration.title,
                            "participants": ", ".join(p.name for p in collaboration.participants),
                        },
                        timestamp=timestamp,
                        curator_id=curator_id,
                    )
                )
            self.event_log.record(
                CurationEventType.DECISION_APPLIED,
                subject_id=work_id,
                summary="Work marked curated by collaboration",
                actor=curator_id,
                references=[collaboration.id],
            )
        except Exception as e:
            log_error(logger, f"Failed to apply collaborative decision: {e}", "DecisionApplier", e,
                      {"work_id": work_id, "collaboration_id": collaboration.id})
            try:
                self.event_log.record(
                    CurationEventType.DECISION_APPLY_FAILED,
                    subject_id=work_id,
                    summary=f"Could not mark work curated: {e}",
                    actor=curator_id,
                    references=[collaboration.id],
                )
            except OSError as log_exc:
                log_error(logger, "Failed to record apply failure event", "DecisionApplier", log_exc)
            return False
        return True
