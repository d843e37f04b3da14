from roster_checkin.parser import clean_cell, parse_line


def test_parse_line_splits_on_commas_and_trims():
    assert parse_line(" 1 , 김철수 ,450101") == ["1", "김철수", "450101"]


def test_parse_line_keeps_quoted_commas_together():
    fields = parse_line('3,박민수,"서울시 중구, 3번지",010-5555-6666')
    assert fields == ["3", "박민수", "서울시 중구, 3번지", "010-5555-6666"]


def test_parse_line_strips_control_characters():
    assert parse_line("1,\t김철수\r\n") == ["1", "김철수"]


def test_parse_line_empty_line_yields_one_empty_field():
    assert parse_line("") == [""]
    assert parse_line("\r") == [""]


def test_parse_line_unbalanced_quote_swallows_rest_of_line():
    assert parse_line('1,"open,still open,end') == ["1", "open,still open,end"]


def test_parse_line_trailing_comma_emits_empty_field():
    assert parse_line("a,b,") == ["a", "b", ""]


def test_clean_cell_normalizes_values_api_cells():
    assert clean_cell("  010-1111-2222\t") == "010-1111-2222"
    assert clean_cell(42) == "42"
