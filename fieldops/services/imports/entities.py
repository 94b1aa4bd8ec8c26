"""
Importable entity variants.

Each entity type the wizard can import is one ImportableEntity subclass. The
variant owns everything that differs between clients, jobs and equipment:
its fields, how a mapped row becomes a record, how rows are keyed for
duplicate detection and which store call persists the record.
"""
from abc import ABC, abstractmethod
from typing import Any, ClassVar, Dict, List, Mapping, Optional, Set, Tuple

from pydantic import BaseModel

from fieldops.schemas.client import ClientCreate
from fieldops.schemas.equipment import EquipmentCreate
from fieldops.schemas.imports import EntityType, FieldDefinition
from fieldops.schemas.job import JobCreate
from fieldops.services.imports import normalizers
from fieldops.services.imports.mapping import column_for
from fieldops.services.imports.registry import defaults_for, fields_for, required_fields
from fieldops.utils.datetime import format_date

RowValues = Dict[str, Optional[str]]
ClientIndex = Mapping[str, str]


def mapped_values(
    row: Mapping[str, str],
    mapping: Mapping[str, str],
    definitions: Tuple[FieldDefinition, ...],
) -> RowValues:
    """Trimmed cell per canonical field; None for unmapped fields and blank cells."""
    values: RowValues = {}
    for definition in definitions:
        header = column_for(mapping, definition.field)
        cell = row.get(header) if header is not None else None
        values[definition.field] = normalizers.normalize_text(cell)
    return values


def match_client(client_name: Optional[str], client_index: Optional[ClientIndex]) -> Optional[str]:
    """Case-insensitive client lookup; None when unknown or matching is off."""
    if not client_name or not client_index:
        return None
    return client_index.get(client_name.strip().lower())


class ImportableEntity(ABC):
    """Base class for an entity type the import wizard can create."""

    entity_type: ClassVar[EntityType]
    noun: ClassVar[str]
    uses_client_index: ClassVar[bool] = False
    template_headers: ClassVar[List[str]]
    template_sample: ClassVar[List[str]]

    @property
    def fields(self) -> Tuple[FieldDefinition, ...]:
        return fields_for(self.entity_type)

    @property
    def required_fields(self) -> List[str]:
        return required_fields(self.entity_type)

    @property
    def defaults(self) -> Dict[str, str]:
        return defaults_for(self.entity_type)

    def values(self, row: Mapping[str, str], mapping: Mapping[str, str]) -> RowValues:
        return mapped_values(row, mapping, self.fields)

    def template_csv(self) -> str:
        """Header line plus one sample row for the downloadable template."""
        return "\n".join([",".join(self.template_headers), ",".join(self.template_sample)]) + "\n"

    @abstractmethod
    def build_record(self, values: RowValues, client_index: Optional[ClientIndex] = None) -> BaseModel:
        """Normalize mapped values into the create schema for this entity."""

    @abstractmethod
    async def persist(self, store, record: BaseModel) -> str:
        """Write one record through the tenant store and return its id."""

    @abstractmethod
    async def existing_keys(self, store) -> Set[str]:
        """Duplicate keys of the records the tenant already has."""

    @abstractmethod
    def duplicate_keys(self, values: RowValues) -> Set[str]:
        """Duplicate keys of one incoming row; empty when it cannot be keyed."""

    def preview(self, values: RowValues) -> Dict[str, Any]:
        """Normalized values for display, without client matching."""
        return self.build_record(values).model_dump(mode="json")


class ClientImport(ImportableEntity):
    entity_type = EntityType.CLIENTS
    noun = "clients"
    template_headers = ["name", "email", "phone", "address", "city", "state", "zip_code", "notes"]
    template_sample = ["Acme Corporation", "contact@acme.com", "555-123-4567", "123 Main St",
                       "New York", "NY", "10001", "VIP customer"]

    def build_record(self, values: RowValues, client_index: Optional[ClientIndex] = None) -> ClientCreate:
        return ClientCreate(
            name=values.get("name") or "",
            email=normalizers.normalize_email(values.get("email")),
            phone=normalizers.normalize_phone(values.get("phone")),
            address=values.get("address"),
            city=values.get("city"),
            state=values.get("state"),
            zip_code=values.get("zip_code"),
            notes=values.get("notes"),
        )

    async def persist(self, store, record: ClientCreate) -> str:
        return await store.insert_client(record)

    async def existing_keys(self, store) -> Set[str]:
        keys: Set[str] = set()
        for client in await store.existing_clients():
            if client.name:
                keys.add(f"name:{client.name.strip().lower()}")
            if client.email:
                keys.add(f"email:{client.email.strip().lower()}")
        return keys

    def duplicate_keys(self, values: RowValues) -> Set[str]:
        # A shared name OR a shared email flags the row
        keys = set()
        if values.get("name"):
            keys.add(f"name:{values['name'].lower()}")
        if values.get("email"):
            keys.add(f"email:{values['email'].lower()}")
        return keys


class JobImport(ImportableEntity):
    entity_type = EntityType.JOBS
    noun = "jobs"
    uses_client_index = True
    template_headers = ["title", "description", "client_name", "job_type", "priority", "status",
                        "scheduled_date", "address"]
    template_sample = ["HVAC Maintenance", "Annual inspection", "Acme Corporation", "Maintenance",
                       "medium", "pending", "2025-02-15", "123 Main St"]

    def build_record(self, values: RowValues, client_index: Optional[ClientIndex] = None) -> JobCreate:
        return JobCreate(
            title=values.get("title") or "",
            description=values.get("description"),
            client_id=match_client(values.get("client_name"), client_index),
            job_type=values.get("job_type"),
            priority=normalizers.parse_priority(values.get("priority")),
            status=normalizers.parse_job_status(values.get("status")),
            scheduled_date=normalizers.parse_date(values.get("scheduled_date")),
            scheduled_time=normalizers.parse_time(values.get("scheduled_time")),
            estimated_duration=normalizers.parse_duration(values.get("estimated_duration")),
            estimated_cost=normalizers.parse_currency(values.get("estimated_cost")),
            address=values.get("address"),
        )

    async def persist(self, store, record: JobCreate) -> str:
        return await store.insert_job(record)

    @staticmethod
    def _key(title: str, scheduled: str) -> str:
        return f"{title.strip().lower()}|{scheduled}"

    async def existing_keys(self, store) -> Set[str]:
        return {
            self._key(job.title, format_date(job.scheduled_date))
            for job in await store.existing_jobs()
            if job.title and job.scheduled_date
        }

    def duplicate_keys(self, values: RowValues) -> Set[str]:
        if not values.get("title"):
            return set()
        scheduled = format_date(normalizers.parse_date(values.get("scheduled_date")))
        if not scheduled:
            return set()
        return {self._key(values["title"], scheduled)}


class EquipmentImport(ImportableEntity):
    entity_type = EntityType.EQUIPMENT
    noun = "equipment records"
    uses_client_index = True
    template_headers = ["equipment_type", "brand", "model", "serial_number", "client_name",
                        "install_date", "warranty_expiry", "status"]
    template_sample = ["Air Conditioner", "Carrier", "XR15", "AC-2024-001", "Acme Corporation",
                       "2024-03-15", "2029-03-15", "active"]

    def build_record(self, values: RowValues, client_index: Optional[ClientIndex] = None) -> EquipmentCreate:
        return EquipmentCreate(
            equipment_type=values.get("equipment_type") or "",
            brand=values.get("brand"),
            model=values.get("model"),
            serial_number=values.get("serial_number"),
            client_id=match_client(values.get("client_name"), client_index),
            install_date=normalizers.parse_date(values.get("install_date")),
            warranty_expiry=normalizers.parse_date(values.get("warranty_expiry")),
            status=normalizers.parse_equipment_status(values.get("status")),
            location_notes=values.get("location_notes"),
        )

    async def persist(self, store, record: EquipmentCreate) -> str:
        return await store.insert_equipment(record)

    async def existing_keys(self, store) -> Set[str]:
        return {serial.strip().lower() for serial in await store.existing_serials() if serial and serial.strip()}

    def duplicate_keys(self, values: RowValues) -> Set[str]:
        serial = values.get("serial_number")
        return {serial.lower()} if serial else set()


_ENTITIES: Dict[EntityType, ImportableEntity] = {
    EntityType.CLIENTS: ClientImport(),
    EntityType.JOBS: JobImport(),
    EntityType.EQUIPMENT: EquipmentImport(),
}


def get_entity(entity_type: EntityType) -> ImportableEntity:
    """Variant for an entity type."""
    return _ENTITIES[EntityType(entity_type)]
