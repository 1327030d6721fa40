"""
Service catalog variant model.

Every service shares the base attributes of ``ServiceBase``.  The
``category`` tag selects one bundle of extra fields, each described by a
pydantic model in ``schemas.service``:

* ``REMORQUAGE``: vehicle_type; optional distance, urgency
* ``PIECE_AUTO``: brand, model; optional year, part_number
* ``MECANIQUE``: repair_type; optional estimated_time, tools_required
* ``LOCATION_VOITURE``: car_brand, car_model; optional year, fuel_type,
  transmission, rental_duration

Fields of other bundles are dropped from the stored document.  A
category not in this list is stored with the base fields only.
"""

from typing import Any, Dict, Mapping, Optional, Tuple, Type

import pydantic
from pydantic import BaseModel

from ..core.errors import ValidationError
from ..schemas.service import (
    LocationVoitureFields,
    MecaniqueFields,
    PieceAutoFields,
    RemorquageFields,
    ServiceBase,
    ServiceCategory,
)

BUNDLES: Dict[ServiceCategory, Type[BaseModel]] = {
    ServiceCategory.REMORQUAGE: RemorquageFields,
    ServiceCategory.PIECE_AUTO: PieceAutoFields,
    ServiceCategory.MECANIQUE: MecaniqueFields,
    ServiceCategory.LOCATION_VOITURE: LocationVoitureFields,
}

BASE_FIELDS: Tuple[str, ...] = tuple(ServiceBase.model_fields)


def bundle_for(category: Any) -> Optional[Type[BaseModel]]:
    """Return the bundle model of ``category`` or ``None`` if it has none."""
    try:
        return BUNDLES.get(ServiceCategory(str(category)))
    except ValueError:
        return None


def bundle_fields(category: Any) -> Tuple[str, ...]:
    bundle = bundle_for(category)
    return tuple(bundle.model_fields) if bundle else ()


def required_fields(category: Any) -> Tuple[str, ...]:
    bundle = bundle_for(category)
    if bundle is None:
        return ()
    return tuple(name for name, info in bundle.model_fields.items() if info.is_required())


def _error_message(bundle: Type[BaseModel], exc: pydantic.ValidationError) -> str:
    messages = []
    for error in exc.errors():
        field = str(error["loc"][0]) if error.get("loc") else ""
        info = bundle.model_fields.get(field)
        if error["type"] in {"missing", "string_too_short"} and info is not None and info.description:
            messages.append(info.description)
        else:
            messages.append(f"Invalid value for {field}: {error['msg']}")
    return "; ".join(messages)


def validate_category_fields(category: Any, payload: Mapping[str, Any]) -> Dict[str, Any]:
    """Validate ``payload`` against the bundle of ``category``.

    Returns the bundle's fields (absent optionals as ``None``).  Raises
    ``ValidationError`` naming every missing or malformed field.
    """
    bundle = bundle_for(category)
    if bundle is None:
        return {}
    supplied = {name: payload.get(name) for name in bundle.model_fields if payload.get(name) is not None}
    try:
        return bundle.model_validate(supplied).model_dump()
    except pydantic.ValidationError as exc:
        raise ValidationError(_error_message(bundle, exc)) from None


def build_service_document(payload: Mapping[str, Any], owner_id: int) -> Dict[str, Any]:
    """Turn a create payload into the document to store."""
    category = payload["category"]
    document = {name: payload.get(name) for name in BASE_FIELDS}
    document.update(validate_category_fields(category, payload))
    document["category"] = category.value if isinstance(category, ServiceCategory) else str(category)
    document["owner_id"] = owner_id
    return document


def build_update_patch(existing: Mapping[str, Any], changes: Mapping[str, Any]) -> Dict[str, Any]:
    """Return the patch for ``changes`` applied to ``existing``.

    Base fields are copied as given.  The stored category's bundle is
    re-validated on the merged document so an update cannot blank out a
    required field; fields of other bundles are ignored.
    """
    patch = {name: changes[name] for name in BASE_FIELDS if changes.get(name) is not None}
    own_fields = bundle_fields(existing.get("category"))
    if any(changes.get(name) is not None for name in own_fields):
        merged = {name: existing.get(name) for name in own_fields}
        merged.update({name: changes[name] for name in own_fields if changes.get(name) is not None})
        patch.update(validate_category_fields(existing.get("category"), merged))
    return patch


def present_service(row: Mapping[str, Any]) -> Dict[str, Any]:
    """Public representation: base record plus the category's own fields."""
    item = {
        "id": row.get("id"),
        "category": row.get("category"),
        **{name: row.get(name) for name in BASE_FIELDS},
        "owner_id": row.get("owner_id"),
        "created_at": row.get("created_at"),
    }
    for name in bundle_fields(row.get("category")):
        item[name] = row.get(name)
    return item
