from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Protocol

# Config entities are arbitrary JSON documents; only ``_id`` is ever read.
Entity = Dict[str, Any]

EXPORT_TOOL = "idmsync"


def entity_type(entity_id: str) -> str:
    """Leading path segment of an entity id (``emailTemplate/x`` -> ``emailTemplate``)."""
    return entity_id.split("/", 1)[0]


@dataclass(frozen=True)
class EntityStub:
    id: str
    pid: str = ""
    factory_pid: Optional[str] = None

    @property
    def type(self) -> str:
        return entity_type(self.id)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EntityStub":
        return cls(
            id=str(data["_id"]),
            pid=str(data.get("pid") or ""),
            factory_pid=data.get("factoryPid"),
        )


@dataclass(frozen=True)
class ExportMetadata:
    origin: str
    exported_by: str
    export_date: str
    export_tool: str = EXPORT_TOOL
    export_tool_version: str = ""

    @classmethod
    def now(cls, origin: str, exported_by: str, tool_version: str) -> "ExportMetadata":
        return cls(
            origin=origin,
            exported_by=exported_by,
            export_date=datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z"),
            export_tool=EXPORT_TOOL,
            export_tool_version=tool_version,
        )

    def to_dict(self) -> Dict[str, str]:
        return {
            "origin": self.origin,
            "exportedBy": self.exported_by,
            "exportDate": self.export_date,
            "exportTool": self.export_tool,
            "exportToolVersion": self.export_tool_version,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ExportMetadata":
        return cls(
            origin=str(data.get("origin", "")),
            exported_by=str(data.get("exportedBy", "")),
            export_date=str(data.get("exportDate", "")),
            export_tool=str(data.get("exportTool", EXPORT_TOOL)),
            export_tool_version=str(data.get("exportToolVersion", "")),
        )


@dataclass
class ExportBundle:
    """Snapshot of config entities keyed by id, plus provenance."""

    meta: Optional[ExportMetadata]
    entities: Dict[str, Entity] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {}
        if self.meta is not None:
            data["meta"] = self.meta.to_dict()
        data["idm"] = dict(self.entities)
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ExportBundle":
        if not isinstance(data, dict) or not isinstance(data.get("idm"), dict):
            raise ValueError("Export bundle must be an object with an 'idm' mapping")
        raw_meta = data.get("meta")
        meta = ExportMetadata.from_dict(raw_meta) if isinstance(raw_meta, dict) else None
        return cls(meta=meta, entities=dict(data["idm"]))


@dataclass(frozen=True)
class ImportOptions:
    validate: bool = False
    wait: bool = False


class ConfigStore(Protocol):
    """Point CRUD against the remote config endpoint. See ``idm.client``."""

    def list_stubs(self) -> List[EntityStub]: ...

    def list_entities(self) -> List[Entity]: ...

    def list_entities_by_type(self, type_: str) -> List[Entity]: ...

    def get_entity(self, entity_id: str) -> Entity: ...

    def put_entity(self, entity_id: str, body: Entity, wait: bool = False) -> Entity: ...

    def delete_entity(self, entity_id: str) -> Entity: ...


__all__ = [
    "Entity",
    "EntityStub",
    "ExportMetadata",
    "ExportBundle",
    "ImportOptions",
    "ConfigStore",
    "entity_type",
    "EXPORT_TOOL",
]
