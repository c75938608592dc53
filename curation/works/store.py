"""Per-agent work files under ``<data>/works/<agent_id>.json``."""

from __future__ import annotations

import re
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List, Optional

from curation.storage import JsonRecordStore, lock_for
from curation.works.models import Work, agent_id_for
from exceptions import InvalidInputError, NotFoundError, StoreError

_AGENT_ID_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9.\-]*$")


class WorkStore:
    """Reads and rewrites whole per-agent work files."""

    def __init__(self, works_directory: Path):
        self.works_directory = Path(works_directory)

    def _agent_store(self, agent_id: str) -> JsonRecordStore[Work]:
        if not _AGENT_ID_PATTERN.match(agent_id or ""):
            raise InvalidInputError(f"Invalid agent id: {agent_id!r}")
        return JsonRecordStore(self.works_directory / f"{agent_id}.json", Work)

    def has_agent(self, agent_id: str) -> bool:
        return self._agent_store(agent_id).path.exists()

    def list_works(self, agent_id: str) -> List[Work]:
        """Return all works of an agent; NotFoundError if the agent has no file."""
        store = self._agent_store(agent_id)
        if not store.path.exists():
            raise NotFoundError(f"Agent {agent_id} not found")
        return store.read_all()

    def get_work(self, work_id: str) -> Optional[Work]:
        """Resolve a work by id through its owning agent's file.

        Unknown agents, unreadable files and invalid ids all resolve to None.
        """
        try:
            store = self._agent_store(agent_id_for(work_id))
            for work in store.read_all():
                if work.id == work_id:
                    return work
        except (InvalidInputError, StoreError):
            return None
        return None

    def write_works(self, agent_id: str, works: List[Work]) -> None:
        self._agent_store(agent_id).write_all(works)

    @contextmanager
    def mutate_agent(self, agent_id: str) -> Iterator[List[Work]]:
        """Read-modify-write one agent's file under its lock."""
        store = self._agent_store(agent_id)
        if not store.path.exists():
            raise NotFoundError(f"Agent {agent_id} not found")
        with store.mutate() as works:
            yield works

    @contextmanager
    def mutate_work(self, work_id: str) -> Iterator[Optional[Work]]:
        """Yield the work (or None) from its agent's file under the file lock.

        The file is rewritten only when the work exists and the block exits cleanly.
        """
        store = self._agent_store(agent_id_for(work_id))
        if not store.path.exists():
            raise NotFoundError(f"Agent {agent_id_for(work_id)} not found")
        with lock_for(store.path):
            works = store.read_all()
            work = next((w for w in works if w.id == work_id), None)
            yield work
            if work is not None:
                store.write_all(works)
