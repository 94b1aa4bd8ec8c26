"""
Canonical import fields per entity type.
"""
from typing import Dict, List, Tuple

from fieldops.schemas.imports import EntityType, FieldDefinition

# Applied by the wizard when the operator opts into defaults.
UNSPECIFIED_EQUIPMENT_TYPE = "Unspecified"


CLIENT_FIELDS: Tuple[FieldDefinition, ...] = (
    FieldDefinition(
        field="name",
        required=True,
        aliases=["client_name", "customer_name", "customer", "client", "company",
                 "business_name", "full_name", "contact_name"],
    ),
    FieldDefinition(field="email", aliases=["email_address", "e_mail", "contact_email"]),
    FieldDefinition(field="phone", aliases=["phone_number", "telephone", "tel", "mobile", "contact_phone"]),
    FieldDefinition(field="address", aliases=["street_address", "street", "address_line_1"]),
    FieldDefinition(field="city", aliases=["town", "municipality"]),
    FieldDefinition(field="state", aliases=["province", "region", "state_province"]),
    FieldDefinition(field="zip_code", aliases=["zip", "postal_code", "postcode", "postal"]),
    FieldDefinition(field="notes", aliases=["note", "comments", "description", "memo"]),
)

JOB_FIELDS: Tuple[FieldDefinition, ...] = (
    FieldDefinition(
        field="title",
        required=True,
        aliases=["job_title", "job_name", "name", "work_order", "service_title"],
    ),
    FieldDefinition(field="description", aliases=["details", "job_description", "notes", "work_description"]),
    FieldDefinition(field="client_name", aliases=["client", "customer", "customer_name", "company"]),
    FieldDefinition(field="job_type", aliases=["type", "service_type", "work_type", "category"]),
    FieldDefinition(field="priority", aliases=["urgency", "priority_level"]),
    FieldDefinition(field="status", aliases=["job_status", "state", "current_status"]),
    FieldDefinition(field="scheduled_date", aliases=["date", "service_date", "appointment_date", "schedule_date"]),
    FieldDefinition(field="scheduled_time", aliases=["time", "appointment_time", "start_time"]),
    FieldDefinition(field="estimated_duration", aliases=["duration", "duration_minutes", "time_estimate", "est_duration"]),
    FieldDefinition(field="estimated_cost", aliases=["cost", "price", "amount", "quote_amount", "estimate"]),
    FieldDefinition(field="address", aliases=["job_address", "service_address", "location", "site_address"]),
)

EQUIPMENT_FIELDS: Tuple[FieldDefinition, ...] = (
    FieldDefinition(
        field="equipment_type",
        required=True,
        aliases=["type", "unit_type", "equipment", "category", "asset_type"],
    ),
    FieldDefinition(field="brand", aliases=["manufacturer", "make", "brand_name"]),
    FieldDefinition(field="model", aliases=["model_number", "model_name", "model_no"]),
    FieldDefinition(field="serial_number", aliases=["serial", "serial_no", "sn", "unit_serial"]),
    FieldDefinition(field="client_name", aliases=["client", "customer", "customer_name", "owner"]),
    FieldDefinition(field="install_date", aliases=["installation_date", "installed_on", "date_installed"]),
    FieldDefinition(field="warranty_expiry", aliases=["warranty_end", "warranty_expires", "warranty_date"]),
    FieldDefinition(field="status", aliases=["equipment_status", "condition", "state"]),
    FieldDefinition(field="location_notes", aliases=["location", "notes", "placement", "site_notes"]),
)

_REGISTRY: Dict[EntityType, Tuple[FieldDefinition, ...]] = {
    EntityType.CLIENTS: CLIENT_FIELDS,
    EntityType.JOBS: JOB_FIELDS,
    EntityType.EQUIPMENT: EQUIPMENT_FIELDS,
}

# Sentinel values the host may fill in before validation.
DEFAULT_VALUES: Dict[EntityType, Dict[str, str]] = {
    EntityType.CLIENTS: {},
    EntityType.JOBS: {},
    EntityType.EQUIPMENT: {"equipment_type": UNSPECIFIED_EQUIPMENT_TYPE},
}


def fields_for(entity_type: EntityType) -> Tuple[FieldDefinition, ...]:
    """Field definitions for an entity type, in display order."""
    return _REGISTRY[EntityType(entity_type)]


def required_fields(entity_type: EntityType) -> List[str]:
    """Names of the required fields, in definition order."""
    return [definition.field for definition in fields_for(entity_type) if definition.required]


def field_names(entity_type: EntityType) -> List[str]:
    return [definition.field for definition in fields_for(entity_type)]


def defaults_for(entity_type: EntityType) -> Dict[str, str]:
    return dict(DEFAULT_VALUES[EntityType(entity_type)])
