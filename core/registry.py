"""
Builds the stores, event log and services that make up one registry instance.
"""
import logging
from pathlib import Path
from typing import Optional

from config_system.config_loader import RegistryConfig
from core.agent_curation import AgentCurationService
from core.analytics import CuratorAnalyticsService
from core.collection_service import CollectionService
from core.session_service import SessionService
from core.voting_service import VotingService
from curation.collaboration.applier import DecisionApplier
from curation.collaboration.store import CollaborationStore
from curation.collections.store import CollectionStore
from curation.events.event_log import CurationEventLog
from curation.sessions.store import SessionStore
from curation.works.store import WorkStore
from logging_config import log_step_complete


class CurationRegistry:
    """Owns every store under one data directory and the services built on them."""

    def __init__(self, config: Optional[RegistryConfig] = None):
        self.config = config or RegistryConfig()
        self.logger: Optional[logging.Logger] = None

        data_path = Path(self.config.data_path)
        self.data_path = data_path

        self.work_store = WorkStore(data_path / "works")
        self.collaboration_store = CollaborationStore(data_path)
        self.collection_store = CollectionStore(data_path)
        self.session_store = SessionStore(data_path)
        self.event_log = CurationEventLog(data_path / "events")

        self.applier = DecisionApplier(self.work_store, self.event_log)
        self.voting = VotingService(
            self.collaboration_store,
            self.applier,
            self.event_log,
            recompute_outcome_on_read=self.config.voting.recompute_outcome_on_read,
        )
        self.collections = CollectionService(self.collection_store, self.work_store, self.event_log)
        self.sessions = SessionService(self.session_store, self.work_store, self.event_log)
        self.agent_curation = AgentCurationService(self.work_store)
        self.analytics = CuratorAnalyticsService(
            self.session_store, self.collaboration_store, self.work_store
        )

    def set_logger(self, logger: logging.Logger) -> None:
        self.logger = logger
        log_step_complete(logger, "CurationRegistry", "init", "Registry ready", {
            "data_directory": str(self.data_path),
        })

    def store_summary(self) -> dict:
        """Record counts per store, for operators."""
        agents = sorted(p.stem for p in self.work_store.works_directory.glob("*.json"))
        return {
            "dataDirectory": str(self.data_path),
            "collaborations": len(self.collaboration_store.read_all()),
            "collections": len(self.collection_store.read_all()),
            "sessions": len(self.session_store.read_all()),
            "agents": agents,
            "works": sum(len(self.work_store.list_works(agent)) for agent in agents),
            "events": self.event_log.count(),
        }
