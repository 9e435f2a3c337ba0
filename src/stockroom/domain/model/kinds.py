"""Per-kind policies: natural key, core fields, score weights and add strategy.

One generic engine serves every entity kind; everything that differs between
kinds is declared here as data.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import StrEnum
from types import MappingProxyType
from typing import TYPE_CHECKING, Final

from stockroom.domain.errors import ValidationError

from .record import RESERVED_FIELDS, Record, RecordPatch, coerce_fields

if TYPE_CHECKING:
    from .record import FieldValue

NATURAL_KEY_FIELD: Final[str] = "codigo"


class FieldType(StrEnum):
    """Declared type of a core field."""

    TEXT = "text"
    NUMBER = "number"
    BOOLEAN = "boolean"

    def accepts(self, value: FieldValue) -> bool:
        match self:
            case FieldType.TEXT:
                return isinstance(value, str)
            case FieldType.NUMBER:
                return isinstance(value, int | float) and not isinstance(value, bool)
            case FieldType.BOOLEAN:
                return isinstance(value, bool)


class ScoreCheck(StrEnum):
    """How a score rule decides that a field is populated."""

    TEXT = "text"  # a str that is non-empty after strip()
    POSITIVE = "positive"  # an int/float greater than zero


class AddPolicy(StrEnum):
    """What a single-record add does when the natural key already exists."""

    REJECT = "reject"
    MERGE = "merge"


@dataclass(frozen=True, slots=True)
class ScoreRule:
    field: str
    points: int
    check: ScoreCheck = ScoreCheck.TEXT

    def __post_init__(self) -> None:
        if self.points < 0:
            raise ValueError(f"Score rule for {self.field!r} must not award negative points")


@dataclass(frozen=True, slots=True, kw_only=True, eq=False)
class EntityKind:
    """Policy describing one entity-kind collection."""

    name: str
    collection: str
    core_fields: Mapping[str, FieldType]
    score_rules: tuple[ScoreRule, ...]
    add_policy: AddPolicy
    natural_key_field: str = NATURAL_KEY_FIELD
    fold_loser_fields: bool = False

    def value_of(self, record: Record, name: str) -> FieldValue | None:
        if name == self.natural_key_field:
            return record.natural_key
        return record.fields.get(name)

    def split_fields(
        self, record: Record
    ) -> tuple[dict[str, FieldValue], dict[str, FieldValue]]:
        """Return ``(core, extension)`` views of the record's fields."""
        core: dict[str, FieldValue] = {}
        extension: dict[str, FieldValue] = {}
        for name, value in record.fields.items():
            target = core if name in self.core_fields else extension
            target[name] = value
        return core, extension

    def validate_fields(self, fields: Mapping[str, FieldValue]) -> None:
        for name, value in fields.items():
            if name in RESERVED_FIELDS:
                raise ValidationError(
                    f"Field {name!r} is managed by the store and cannot be written"
                )
            expected = self.core_fields.get(name)
            if expected is not None and not expected.accepts(value):
                raise ValidationError(
                    f"Field {name!r} of {self.name} expects {expected.value}, "
                    f"got {type(value).__name__}"
                )

    def patch_from_mapping(self, payload: Mapping[str, object]) -> RecordPatch:
        """Build a merge payload; the natural-key field, if present, re-keys the record."""
        values = dict(payload)
        natural_key = values.pop(self.natural_key_field, None)
        if natural_key is not None and not isinstance(natural_key, str):
            raise ValidationError(f"{self.natural_key_field!r} must be a string")
        fields = coerce_fields(values)
        self.validate_fields(fields)
        return RecordPatch(natural_key=natural_key, fields=fields)

    def record_from_mapping(self, payload: Mapping[str, object]) -> Record:
        """Build a new record from caller data.

        A missing natural key becomes ``""`` and is rejected when the record is
        written, not here.
        """
        patch = self.patch_from_mapping(payload)
        return Record(natural_key=patch.natural_key or "", fields=dict(patch.fields))

    def record_to_mapping(self, record: Record) -> dict[str, object]:
        payload: dict[str, object] = {}
        if record.id is not None:
            payload["id"] = record.id
        payload[self.natural_key_field] = record.natural_key
        payload.update(record.fields)
        if record.created_at is not None:
            payload["createdAt"] = record.created_at.isoformat()
        if record.updated_at is not None:
            payload["updatedAt"] = record.updated_at.isoformat()
        return payload


def _frozen(fields: dict[str, FieldType]) -> Mapping[str, FieldType]:
    return MappingProxyType(fields)


MACHINES = EntityKind(
    name="machines",
    collection="machines",
    core_fields=_frozen(
        {
            "orderNr": FieldType.TEXT,
            "descripcion": FieldType.TEXT,
            "chasis": FieldType.TEXT,
            "po": FieldType.TEXT,
            "model": FieldType.TEXT,
            "plant": FieldType.TEXT,
            "orderPrice": FieldType.NUMBER,
            "totalPerUnit": FieldType.NUMBER,
            "totalAmountUSD": FieldType.NUMBER,
            "nc": FieldType.NUMBER,
            "cuadroTfDe": FieldType.TEXT,
            "estado": FieldType.TEXT,
            "llegada": FieldType.TEXT,
            "ubicacion": FieldType.TEXT,
            "link": FieldType.TEXT,
        }
    ),
    score_rules=(
        ScoreRule(NATURAL_KEY_FIELD, 10),
        ScoreRule("descripcion", 5),
        ScoreRule("estado", 3),
        ScoreRule("ubicacion", 3),
        ScoreRule("cuadroTfDe", 3),
        ScoreRule("totalAmountUSD", 3, ScoreCheck.POSITIVE),
        ScoreRule("orderNr", 2),
        ScoreRule("chasis", 2),
        ScoreRule("po", 2),
        ScoreRule("model", 2),
        ScoreRule("plant", 2),
        ScoreRule("link", 1),
    ),
    add_policy=AddPolicy.REJECT,
)

PRODUCTS = EntityKind(
    name="products",
    collection="products",
    core_fields=_frozen(
        {
            "proforma": FieldType.TEXT,
            "factura": FieldType.TEXT,
            "disponibilidad": FieldType.TEXT,
            "descripcion": FieldType.TEXT,
            "llegada": FieldType.TEXT,
            "sucursal": FieldType.TEXT,
            "cliente": FieldType.TEXT,
            "lugar": FieldType.TEXT,
            "link": FieldType.TEXT,
        }
    ),
    score_rules=(
        ScoreRule(NATURAL_KEY_FIELD, 10),
        ScoreRule("descripcion", 5),
        ScoreRule("disponibilidad", 3),
        ScoreRule("lugar", 3),
        ScoreRule("llegada", 3),
        ScoreRule("proforma", 2),
        ScoreRule("factura", 2),
        ScoreRule("sucursal", 2),
        ScoreRule("cliente", 2),
        ScoreRule("link", 1),
    ),
    add_policy=AddPolicy.REJECT,
)

_INVENTORY_TEXT_FIELDS = (
    "type",
    "proveedor",
    "proforma",
    "po",
    "factura",
    "estado",
    "descripcion",
    "cliente",
    "lugar",
    "chassis",
    "orderNr",
    "id_negociacion",
    "fecha_produccion",
    "fecha_facturacion",
    "destino_llegada",
    "fecha_embarque",
    "fecha_llegada",
    "fecha_carneo",
    "fecha_reposicion",
    "pieza_carneada",
    "cliente_destino",
    "chasis_destino",
    "motivo",
    "fecha_inicio_preparacion",
    "fecha_fin_preparacion",
    "entrega_tecnica_programada",
    "entrega_tecnica_concluida",
    "fecha_entrega_prevista",
    "fecha_entrega_concluida",
    "link",
)

UNIFIED_INVENTORY = EntityKind(
    name="unified_inventory",
    collection="unified_inventory",
    core_fields=_frozen(
        {
            **dict.fromkeys(_INVENTORY_TEXT_FIELDS, FieldType.TEXT),
            "cr": FieldType.NUMBER,
            "es_emergencia": FieldType.BOOLEAN,
        }
    ),
    score_rules=(
        ScoreRule(NATURAL_KEY_FIELD, 10),
        ScoreRule("descripcion", 5),
        ScoreRule("estado", 3),
        ScoreRule("proveedor", 3),
        ScoreRule("cliente", 3),
        ScoreRule("cr", 3, ScoreCheck.POSITIVE),
        ScoreRule("proforma", 2),
        ScoreRule("po", 2),
        ScoreRule("factura", 2),
        ScoreRule("fecha_produccion", 2),
        ScoreRule("fecha_embarque", 2),
        ScoreRule("fecha_llegada", 2),
        ScoreRule("fecha_entrega_prevista", 2),
        ScoreRule("lugar", 2),
        ScoreRule("chassis", 2),
        ScoreRule("orderNr", 2),
        ScoreRule("link", 1),
    ),
    add_policy=AddPolicy.MERGE,
    fold_loser_fields=True,
)

ENTITY_KINDS: Final[Mapping[str, EntityKind]] = MappingProxyType(
    {kind.name: kind for kind in (MACHINES, PRODUCTS, UNIFIED_INVENTORY)}
)


def get_entity_kind(name: str) -> EntityKind:
    """Return a registered kind by name, raising ``KeyError`` for unknown names."""

    try:
        return ENTITY_KINDS[name]
    except KeyError:
        known = ", ".join(sorted(ENTITY_KINDS))
        raise KeyError(f"Unknown entity kind {name!r} (known: {known})") from None
