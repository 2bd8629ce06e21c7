"""
CSV ingest for bulk printing.

The format is a plain comma/newline split. Quoted fields are not
supported: a comma inside a value splits it.
"""

# Standard Library
import dataclasses
import pathlib
import re

# local repo modules
import label_composer as lcomp
import label_composer.config
import label_composer.errors
import label_composer.formatters
import label_composer.variables


Variable = lcomp.variables.Variable
Row = lcomp.variables.Row
EmptyInputError = lcomp.errors.EmptyInputError
InvalidFormatError = lcomp.errors.InvalidFormatError
LabelComposerError = lcomp.errors.LabelComposerError
MissingDataRowsError = lcomp.errors.MissingDataRowsError
ValidationError = lcomp.errors.ValidationError

COPIES_COLUMNS = lcomp.config.COPIES_COLUMNS
DEFAULT_COPIES = lcomp.config.DEFAULT_COPIES
PREVIEW_ROW_LIMIT = lcomp.config.PREVIEW_ROW_LIMIT
SAMPLE_CSV_VALUE = lcomp.config.SAMPLE_CSV_VALUE

SELECT_ALL = "all"
SELECT_ONE = "selected"
BYTE_ORDER_MARK = "\ufeff"
LINE_SPLIT_PATTERN = re.compile(r"\r\n|\r|\n")


@dataclasses.dataclass
class CsvTable:
	headers: list[str]
	records: list[dict[str, str]]

	def preview(self, limit: int = PREVIEW_ROW_LIMIT) -> list[list[str]]:
		"""
		First records as cell lists in header order.

		Args:
			limit: Maximum number of records.

		Returns:
			List of rows of cell text.
		"""
		return [
			[record.get(header, "") for header in self.headers]
			for record in self.records[:limit]
		]

	def status_message(self) -> str:
		return f"Loaded {len(self.records)} row(s) successfully."

	def row_choices(self) -> list[str]:
		"""
		Labels for a row picker, using the first column as a hint.
		"""
		choices: list[str] = []
		for index, record in enumerate(self.records, start=1):
			hint = record.get(self.headers[0], "") if self.headers else f"Row {index}"
			choices.append(f"Row {index}: {hint}...")
		return choices


#============================================
def parse_csv(text: str, variables: list[Variable] | None = None) -> CsvTable:
	"""
	Parse CSV text, formatting variable columns as they are read.

	Args:
		text: Raw CSV text.
		variables: Resolved variables; a column named after one is passed
			through that variable's formatter.

	Returns:
		CsvTable of headers and records.
	"""
	if text and text.startswith(BYTE_ORDER_MARK):
		text = text[1:]
	if not text or not text.strip():
		raise EmptyInputError("The uploaded CSV is empty.")
	lines = [line for line in LINE_SPLIT_PATTERN.split(text) if line.strip()]
	if len(lines) < 2:
		raise MissingDataRowsError(
			"The CSV must contain a header row and at least one data row."
		)

	formatter_by_name = {variable.name: variable.formatter for variable in variables or []}
	headers = [header.strip() for header in lines[0].split(",")]
	records: list[dict[str, str]] = []
	for line in lines[1:]:
		cells = line.split(",")
		record: dict[str, str] = {}
		for index, header in enumerate(headers):
			value = cells[index].strip() if index < len(cells) else ""
			if header in formatter_by_name:
				value = lcomp.formatters.apply(formatter_by_name[header], value)
			record[header] = value
		records.append(record)
	return CsvTable(headers=headers, records=records)


#============================================
def read_csv_file(path: pathlib.Path) -> str:
	"""
	Read a CSV file as text.

	Args:
		path: CSV path.

	Returns:
		File text without a leading byte order mark.
	"""
	path = pathlib.Path(path)
	try:
		return path.read_text(encoding="utf-8-sig")
	except OSError as error:
		raise LabelComposerError(f"Cannot read CSV {path}: {error.strerror or error}") from error
	except UnicodeDecodeError as error:
		raise InvalidFormatError("The uploaded CSV is not UTF-8 text.") from error


#============================================
def record_copies(record: dict[str, str]) -> int:
	"""
	Read the copy count of a record.

	Args:
		record: CSV record.

	Returns:
		Copies from the first usable copies column, else the default.
	"""
	for column in COPIES_COLUMNS:
		count = lcomp.variables.parse_int_prefix(record.get(column))
		if count is not None and count >= 1:
			return count
	return DEFAULT_COPIES


#============================================
def record_to_row(record: dict[str, str], variables: list[Variable]) -> Row:
	values = {variable.name: record.get(variable.name, "") or "" for variable in variables}
	return Row(values=values, copies=record_copies(record))


#============================================
def select_rows(
	table: CsvTable,
	variables: list[Variable],
	mode: str = SELECT_ALL,
	row_index: int | None = None,
) -> list[Row]:
	"""
	Pick the rows to print from a parsed table.

	Args:
		table: Parsed CSV.
		variables: Resolved variables.
		mode: "all" for every record, "selected" for one.
		row_index: Zero-based record index for "selected".

	Returns:
		Rows to print.
	"""
	if not table.records:
		raise ValidationError("Please upload a valid CSV file first.", ["csv"])
	if mode == SELECT_ALL:
		return [record_to_row(record, variables) for record in table.records]
	if mode != SELECT_ONE:
		raise ValidationError(f"Unknown row selection mode: {mode!r}", ["mode"])
	if row_index is None or isinstance(row_index, bool) or not 0 <= row_index < len(table.records):
		raise ValidationError("Invalid row selected.", ["row"])
	return [record_to_row(table.records[row_index], variables)]


#============================================
def table_to_rows(table: CsvTable, variables: list[Variable]) -> list[Row]:
	return select_rows(table, variables, SELECT_ALL)


#============================================
def generate_sample(variables: list[Variable]) -> str:
	"""
	Build a sample CSV with a header and one example row.

	Args:
		variables: Resolved variables.

	Returns:
		CSV text.
	"""
	if not variables:
		raise ValidationError("No variables found in your layout to create a sample CSV.", ["variables"])
	header = ",".join(["copies"] + [variable.name for variable in variables])
	sample = ",".join(["1"] + [SAMPLE_CSV_VALUE for _variable in variables])
	return header + "\n" + sample
