from __future__ import annotations

import pytest

from stockroom.domain.errors import ValidationError
from stockroom.domain.model import Record, coerce_fields, is_blank_key, values_equal


def test_coerce_fields_accepts_scalars() -> None:
    fields = coerce_fields({"descripcion": "Tractor", "cr": 3, "precio": 1.5, "ok": True})

    assert fields == {"descripcion": "Tractor", "cr": 3, "precio": 1.5, "ok": True}


@pytest.mark.parametrize("value", [None, ["a"], {"nested": 1}])
def test_coerce_fields_rejects_non_scalars(value: object) -> None:
    with pytest.raises(ValidationError, match="Unsupported value"):
        coerce_fields({"descripcion": value})


@pytest.mark.parametrize("name", ["id", "createdAt", "updatedAt"])
def test_coerce_fields_rejects_store_managed_names(name: str) -> None:
    with pytest.raises(ValidationError, match="managed by the store"):
        coerce_fields({name: "x"})


def test_coerce_fields_rejects_blank_names() -> None:
    with pytest.raises(ValidationError, match="non-empty strings"):
        coerce_fields({"  ": "x"})


@pytest.mark.parametrize(
    ("key", "blank"),
    [("M1", False), (" M1 ", False), ("", True), ("   ", True), (None, True), (7, True)],
)
def test_is_blank_key(key: object, blank: bool) -> None:  # noqa: FBT001
    assert is_blank_key(key) is blank


def test_values_equal_keeps_value_kinds_apart() -> None:
    assert values_equal("M1", "M1")
    assert not values_equal("m1", "M1")
    assert values_equal(1, 1.0)
    assert not values_equal(1, True)
    assert not values_equal(True, 1)
    assert not values_equal("1", 1)
    assert not values_equal(None, "M1")
    assert values_equal(False, False)


def test_record_copy_is_independent() -> None:
    record = Record(natural_key="M1", fields={"estado": "STOCK"}, id="abc")

    clone = record.copy()
    clone.fields["estado"] = "VENDIDO"

    assert record.fields == {"estado": "STOCK"}
    assert clone.id == "abc"


def test_record_as_patch_carries_key_and_fields() -> None:
    patch = Record(natural_key="M1", fields={"estado": "STOCK"}).as_patch()

    assert patch.natural_key == "M1"
    assert patch.mentions("estado")
    assert not patch.mentions("cliente")
