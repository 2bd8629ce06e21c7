import pytest

import label_composer.csv_ingest
import label_composer.errors
import label_composer.variables


Variable = label_composer.variables.Variable


#============================================
def test_single_row_with_copies() -> None:
	"""
	A header and one data row become one row with its copy count.
	"""
	variables = [Variable("name")]
	table = label_composer.csv_ingest.parse_csv("copies,name\n1,Acme", variables)
	rows = label_composer.csv_ingest.table_to_rows(table, variables)
	assert len(rows) == 1
	assert rows[0].as_dict() == {"name": "Acme", "_copies": 1}


#============================================
def test_empty_input_raises() -> None:
	"""
	Blank text is rejected before any parsing.
	"""
	with pytest.raises(label_composer.errors.EmptyInputError):
		label_composer.csv_ingest.parse_csv("   \n ")


#============================================
def test_header_only_raises() -> None:
	"""
	A header with no data rows is rejected.
	"""
	with pytest.raises(label_composer.errors.MissingDataRowsError):
		label_composer.csv_ingest.parse_csv("copies,name\n\n")


#============================================
def test_short_rows_are_padded_and_cells_trimmed() -> None:
	"""
	Missing trailing cells read as empty strings; cells are trimmed.
	"""
	table = label_composer.csv_ingest.parse_csv("name , sku,copies\r\n Acme \r\nBolt,B-2,4\n")
	assert table.headers == ["name", "sku", "copies"]
	assert table.records[0] == {"name": "Acme", "sku": "", "copies": ""}
	assert table.records[1] == {"name": "Bolt", "sku": "B-2", "copies": "4"}


#============================================
def test_variable_columns_are_formatted_at_parse_time() -> None:
	"""
	Columns named after a variable are formatted with its formatter.
	"""
	variables = [Variable("when", formatter="date-compact"), Variable("tag", formatter="uppercase")]
	table = label_composer.csv_ingest.parse_csv("when,tag,note\n2026-02-25,abc,keep me", variables)
	assert table.records[0] == {"when": "25022026", "tag": "ABC", "note": "keep me"}


#============================================
def test_copies_column_fallbacks() -> None:
	"""
	Copies come from "copies" or "Copies"; bad or missing counts mean one.
	"""
	variables = [Variable("name")]
	text = "name,Copies\nA,3\nB,\nC,zero\nD,0\nE,2 boxes"
	table = label_composer.csv_ingest.parse_csv(text, variables)
	rows = label_composer.csv_ingest.table_to_rows(table, variables)
	assert [row.copies for row in rows] == [3, 1, 1, 1, 2]


#============================================
def test_select_single_row() -> None:
	"""
	Selected mode prints only the chosen record.
	"""
	variables = [Variable("name")]
	table = label_composer.csv_ingest.parse_csv("name\nA\nB\nC", variables)
	rows = label_composer.csv_ingest.select_rows(table, variables, "selected", 1)
	assert [row.values["name"] for row in rows] == ["B"]
	with pytest.raises(label_composer.errors.ValidationError):
		label_composer.csv_ingest.select_rows(table, variables, "selected", 3)
	with pytest.raises(label_composer.errors.ValidationError):
		label_composer.csv_ingest.select_rows(table, variables, "selected", None)


#============================================
def test_preview_status_and_choices() -> None:
	"""
	The table offers a short preview, a status line and row picker labels.
	"""
	lines = ["sku,name"] + [f"S-{index},Item {index}" for index in range(7)]
	table = label_composer.csv_ingest.parse_csv("\n".join(lines))
	assert len(table.preview()) == 5
	assert table.preview(2) == [["S-0", "Item 0"], ["S-1", "Item 1"]]
	assert table.status_message() == "Loaded 7 row(s) successfully."
	assert table.row_choices()[0] == "Row 1: S-0..."


#============================================
def test_generate_sample() -> None:
	"""
	The sample CSV lists copies and every variable with placeholder data.
	"""
	variables = [Variable("name"), Variable("sku")]
	text = label_composer.csv_ingest.generate_sample(variables)
	assert text == "copies,name,sku\n1,SampleData,SampleData"
	table = label_composer.csv_ingest.parse_csv(text, variables)
	assert label_composer.csv_ingest.table_to_rows(table, variables)[0].copies == 1
	with pytest.raises(label_composer.errors.ValidationError):
		label_composer.csv_ingest.generate_sample([])


#============================================
def test_byte_order_mark_is_dropped(tmp_path) -> None:
	"""
	A spreadsheet export with a leading byte order mark keeps its copies column.
	"""
	variables = [Variable("name")]
	table = label_composer.csv_ingest.parse_csv("\ufeffcopies,name\n3,A", variables)
	assert table.headers == ["copies", "name"]
	assert label_composer.csv_ingest.table_to_rows(table, variables)[0].copies == 3

	path = tmp_path / "export.csv"
	path.write_bytes("copies,name\n2,B\n".encode("utf-8-sig"))
	text = label_composer.csv_ingest.read_csv_file(path)
	assert text.startswith("copies,")


#============================================
def test_read_csv_file_errors(tmp_path) -> None:
	"""
	Unreadable and non-UTF-8 files raise label composer errors.
	"""
	with pytest.raises(label_composer.errors.LabelComposerError):
		label_composer.csv_ingest.read_csv_file(tmp_path / "missing.csv")
	path = tmp_path / "latin1.csv"
	path.write_bytes(b"name\n\xff\xfe\n")
	with pytest.raises(label_composer.errors.InvalidFormatError):
		label_composer.csv_ingest.read_csv_file(path)
