"""JSON-file store of saved quotes."""
from __future__ import annotations

import json
import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Mapping, Optional

from .api import QuoteResult
from .models import PricingInputs

ISO_FORMAT = "%Y-%m-%dT%H:%M:%S%z"
PROJECT_STATUSES = ("draft", "sent", "accepted", "rejected")

logger = logging.getLogger(__name__)


@dataclass
class ContactDetails:
    client_name: Optional[str] = None
    company_name: Optional[str] = None
    client_email: Optional[str] = None
    client_phone: Optional[str] = None

    @classmethod
    def from_dict(cls, raw: Optional[Mapping[str, object]]) -> "ContactDetails":
        raw = raw or {}
        return cls(
            client_name=raw.get("client_name") or raw.get("clientName"),  # type: ignore[arg-type]
            company_name=raw.get("company_name") or raw.get("companyName"),  # type: ignore[arg-type]
            client_email=raw.get("client_email") or raw.get("clientEmail"),  # type: ignore[arg-type]
            client_phone=raw.get("client_phone") or raw.get("clientPhone"),  # type: ignore[arg-type]
        )


@dataclass
class ProjectRecord:
    project_id: str
    created_at: str
    inputs: Dict[str, object]
    internal_cost: Dict[str, object] = field(default_factory=dict)
    client_price: Dict[str, object] = field(default_factory=dict)
    profit_analysis: Dict[str, object] = field(default_factory=dict)
    timeline: Dict[str, object] = field(default_factory=dict)
    config_version: int = 0
    contact: ContactDetails = field(default_factory=ContactDetails)
    project_description: Optional[str] = None
    ai_analysis: Optional[Dict[str, object]] = None
    status: str = "draft"

    @property
    def display_name(self) -> str:
        return self.contact.client_name or "Anonymous"

    def pricing_inputs(self) -> PricingInputs:
        return PricingInputs.from_dict(self.inputs)


@dataclass
class ProjectStore:
    path: Path
    projects: Dict[str, ProjectRecord] = field(default_factory=dict)

    @classmethod
    def load(cls, path: Path) -> "ProjectStore":
        if path.exists():
            with path.open("r", encoding="utf-8") as f:
                raw = json.load(f)
        else:
            raw = {"projects": {}}

        projects = {
            project_id: cls._record_from_dict(project_id, data)
            for project_id, data in raw.get("projects", {}).items()
        }
        return cls(path=path, projects=projects)

    def save(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        data = {
            "projects": {
                project_id: self._record_to_dict(record) for project_id, record in self.projects.items()
            }
        }
        with self.path.open("w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, sort_keys=True)

    @property
    def records(self) -> List[ProjectRecord]:
        return sorted(self.projects.values(), key=lambda record: (record.created_at, record.project_id))

    def get(self, project_id: str) -> Optional[ProjectRecord]:
        return self.projects.get(project_id)

    def add(
        self,
        result: QuoteResult,
        contact: Optional[ContactDetails] = None,
        description: Optional[str] = None,
        project_id: Optional[str] = None,
        timestamp: datetime | None = None,
    ) -> ProjectRecord:
        """Snapshot ``result`` as a new draft project; call :meth:`save` to persist it."""

        ts = timestamp or datetime.now().astimezone()
        record = ProjectRecord(
            project_id=project_id or uuid.uuid4().hex,
            created_at=ts.strftime(ISO_FORMAT),
            inputs=result.inputs.to_dict(),
            internal_cost=result.internal_cost.to_dict(),
            client_price=result.client_price.to_dict(),
            profit_analysis=result.profit.to_dict(),
            timeline=result.timeline.to_dict(),
            config_version=result.config_version,
            contact=contact or ContactDetails(),
            project_description=description,
            ai_analysis=result.analysis.to_dict() if result.analysis is not None else None,
        )
        self.projects[record.project_id] = record
        logger.info("Registered project %s (%s)", record.project_id, record.display_name)
        return record

    def set_status(self, project_id: str, status: str) -> ProjectRecord:
        if status not in PROJECT_STATUSES:
            raise ValueError(f"Unknown project status: {status}")
        record = self.projects.get(project_id)
        if record is None:
            raise KeyError(project_id)
        record.status = status
        return record

    @staticmethod
    def _record_from_dict(project_id: str, data: Mapping[str, object]) -> ProjectRecord:
        return ProjectRecord(
            project_id=project_id,
            created_at=str(data.get("created_at", "")),
            inputs=dict(data.get("inputs") or {}),  # type: ignore[arg-type]
            internal_cost=dict(data.get("internal_cost") or {}),  # type: ignore[arg-type]
            client_price=dict(data.get("client_price") or {}),  # type: ignore[arg-type]
            profit_analysis=dict(data.get("profit_analysis") or {}),  # type: ignore[arg-type]
            timeline=dict(data.get("timeline") or {}),  # type: ignore[arg-type]
            config_version=int(data.get("config_version") or 0),  # type: ignore[arg-type]
            contact=ContactDetails.from_dict(data.get("contact")),  # type: ignore[arg-type]
            project_description=data.get("project_description"),  # type: ignore[arg-type]
            ai_analysis=data.get("ai_analysis"),  # type: ignore[arg-type]
            status=str(data.get("status") or "draft"),
        )

    @staticmethod
    def _record_to_dict(record: ProjectRecord) -> dict:
        data = {
            "created_at": record.created_at,
            "inputs": record.inputs,
            "internal_cost": record.internal_cost,
            "client_price": record.client_price,
            "profit_analysis": record.profit_analysis,
            "timeline": record.timeline,
            "config_version": record.config_version,
            "status": record.status,
        }
        contact = {key: value for key, value in vars(record.contact).items() if value}
        if contact:
            data["contact"] = contact
        if record.project_description:
            data["project_description"] = record.project_description
        if record.ai_analysis:
            data["ai_analysis"] = record.ai_analysis
        return data


__all__ = ["ContactDetails", "ProjectRecord", "ProjectStore"]
