import pytest

from fieldops.schemas.imports import EntityType
from fieldops.services.imports.registry import (
    UNSPECIFIED_EQUIPMENT_TYPE, defaults_for, field_names, fields_for, required_fields,
)


@pytest.mark.parametrize("entity_type, required", [
    (EntityType.CLIENTS, ["name"]),
    (EntityType.JOBS, ["title"]),
    (EntityType.EQUIPMENT, ["equipment_type"]),
])
def test_required_fields(entity_type, required):
    assert required_fields(entity_type) == required


def test_fields_are_in_display_order():
    assert field_names(EntityType.CLIENTS) == [
        "name", "email", "phone", "address", "city", "state", "zip_code", "notes",
    ]
    assert field_names(EntityType.EQUIPMENT)[0] == "equipment_type"
    assert "estimated_cost" in field_names(EntityType.JOBS)


def test_lookup_accepts_plain_strings():
    assert fields_for("jobs") == fields_for(EntityType.JOBS)


def test_field_names_are_unique_per_entity():
    for entity_type in EntityType:
        names = field_names(entity_type)
        assert len(names) == len(set(names))


def test_labels():
    labels = {d.field: d.label for d in fields_for(EntityType.CLIENTS)}
    assert labels["zip_code"] == "Zip Code"
    assert labels["name"] == "Name"


def test_equipment_default_sentinel():
    assert defaults_for(EntityType.EQUIPMENT) == {"equipment_type": UNSPECIFIED_EQUIPMENT_TYPE}
    assert defaults_for(EntityType.CLIENTS) == {}


def test_unknown_entity_type():
    with pytest.raises(ValueError):
        fields_for("invoices")
