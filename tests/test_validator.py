import pytest

from roster_checkin.schema import LEGACY_SCHEMA, SERIAL_SCHEMA, column_offset, get_schema
from roster_checkin.validator import inspect_row, is_genuine_row

GOOD_ROW = ["12", "김철수", "450101", "남", "중앙동", "서울시 중구", "010-1111-2222", "기초수급"]


def test_accepts_well_formed_row():
    assert is_genuine_row(GOOD_ROW)


@pytest.mark.parametrize(
    "index, value, reason",
    [
        (0, "", "serial"),
        (0, "0", "serial"),
        (0, "-3", "serial"),
        (0, "abc", "serial"),
        (0, "+5", "serial"),
        (0, "1_000", "serial"),
        (0, "١٢", "serial"),
        (0, "12.5", "serial"),
        (1, "김", "name"),
        (2, "45", "birthdate"),
        (6, "010-12", "phone"),
    ],
)
def test_rejects_row_failing_a_predicate(index, value, reason):
    row = list(GOOD_ROW)
    row[index] = value
    verdict = inspect_row(row)
    assert not verdict.accepted
    assert reason in verdict.reasons


@pytest.mark.parametrize("label", ["이름", "성함", "Name", "연번"])
def test_rejects_header_label_in_name_column_even_if_otherwise_valid(label):
    row = list(GOOD_ROW)
    row[1] = label
    verdict = inspect_row(row)
    assert not verdict.accepted
    assert "header" in verdict.reasons


def test_rejects_blank_and_short_rows():
    assert not is_genuine_row([""])
    assert not is_genuine_row(["", "", "", ""])
    assert not is_genuine_row(["1", "김철수"])


def test_legacy_schema_uses_its_own_columns():
    row = ["4", "A1B2C3D4", "홍길동", "010-2222-3333", "2024.03.01"]
    assert is_genuine_row(row, LEGACY_SCHEMA)
    assert not is_genuine_row(row, SERIAL_SCHEMA)
    user = LEGACY_SCHEMA.build_user(row)
    assert user.identifier == "A1B2C3D4"
    assert user.birthdate == "2024.03.01"


def test_serial_schema_derives_identifier_from_serial():
    user = SERIAL_SCHEMA.build_user(GOOD_ROW)
    assert user.serial == 12
    assert user.identifier == "12"
    assert user.category == "기초수급"


def test_bind_header_maps_columns_by_label():
    bound = SERIAL_SCHEMA.bind_header(["연번", "이름", "생년월일", "전화"])
    assert bound is not None
    assert bound.columns == {"serial": 0, "name": 1, "birthdate": 2, "phone": 3}


def test_bind_header_ignores_data_rows():
    assert SERIAL_SCHEMA.bind_header(GOOD_ROW) is None


def test_shifted_schema_drops_columns_before_offset():
    shifted = SERIAL_SCHEMA.shifted(1)
    assert "serial" not in shifted.columns
    assert shifted.columns["name"] == 0
    assert shifted.columns["phone"] == 5


def test_to_row_follows_column_order():
    user = LEGACY_SCHEMA.build_user(["4", "A1B2C3D4", "홍길동", "010-2222-3333", "2024.03.01"])
    assert LEGACY_SCHEMA.to_row(user) == ["4", "A1B2C3D4", "홍길동", "010-2222-3333", "2024.03.01"]


@pytest.mark.parametrize(
    "cell_range, expected",
    [("Sheet1!A:H", 0), ("Sheet1!B:I", 1), ("명단!AA1:AH", 26), ("A:E", 0), ("Sheet1!A1:H", 0)],
)
def test_column_offset(cell_range, expected):
    assert column_offset(cell_range) == expected


def test_get_schema_rejects_unknown_name():
    assert get_schema(" Legacy ") is LEGACY_SCHEMA
    with pytest.raises(ValueError):
        get_schema("uuid")
