"""
Variable binding: which data fields a label needs, and rows that fill them.
"""

# Standard Library
import dataclasses
import re
from typing import Iterable

# local repo modules
import label_composer as lcomp
import label_composer.config
import label_composer.elements
import label_composer.errors
import label_composer.formatters


Element = lcomp.elements.Element
ValidationError = lcomp.errors.ValidationError

DEFAULT_COPIES = lcomp.config.DEFAULT_COPIES
DEFAULT_INPUT_TYPE = lcomp.config.DEFAULT_INPUT_TYPE
DEFAULT_FORMATTER = lcomp.config.DEFAULT_FORMATTER
COPIES_KEY = "_copies"

INT_PREFIX_PATTERN = re.compile(r"^\s*[+-]?\d+")


@dataclasses.dataclass
class Variable:
	name: str
	input_type: str = DEFAULT_INPUT_TYPE
	formatter: str = DEFAULT_FORMATTER


@dataclasses.dataclass
class Row:
	values: dict[str, str]
	copies: int = DEFAULT_COPIES

	def as_dict(self) -> dict:
		"""
		Flat mapping with the reserved copy count key.
		"""
		data: dict = dict(self.values)
		data[COPIES_KEY] = self.copies
		return data


#============================================
def resolve(elements: Iterable[Element]) -> list[Variable]:
	"""
	Derive the variables a label needs from its elements.

	Elements are scanned bottom layer first. Variable text sets the input
	type and formatter of its name; a bound barcode or QR code only adds
	its name with plain text defaults when no element declared it yet.

	Args:
		elements: Label elements.

	Returns:
		Variables in first-seen order.
	"""
	found: dict[str, Variable] = {}
	ordered = sorted(elements, key=lambda element: element.z_index)
	for element in ordered:
		if isinstance(element, lcomp.elements.VariableText) and element.var_name:
			found[element.var_name] = Variable(
				name=element.var_name,
				input_type=element.input_type or DEFAULT_INPUT_TYPE,
				formatter=element.formatter or DEFAULT_FORMATTER,
			)
			continue
		if isinstance(element, lcomp.elements.SymbolElement) and lcomp.elements.is_variable_bound(element):
			if element.var_name not in found:
				found[element.var_name] = Variable(name=element.var_name)
	return list(found.values())


#============================================
def parse_int_prefix(value) -> int | None:
	"""
	Parse the leading integer of a value.

	Args:
		value: Text like "3" or "3 boxes", or an int.

	Returns:
		Parsed integer or None.
	"""
	if isinstance(value, bool):
		return None
	if isinstance(value, int):
		return value
	if value is None:
		return None
	match = INT_PREFIX_PATTERN.match(str(value))
	if match is None:
		return None
	return int(match.group(0))


#============================================
def build_manual_row(
	variables: list[Variable],
	values: dict[str, str],
	copies=DEFAULT_COPIES,
) -> Row:
	"""
	Build a print row from values typed into the manual print form.

	Args:
		variables: Resolved variables.
		values: Raw value per variable name.
		copies: Number of labels to print.

	Returns:
		Row with formatted values.
	"""
	missing = [
		variable.name for variable in variables
		if not str(values.get(variable.name, "") or "").strip()
	]
	if missing:
		raise ValidationError("Please fill in all variable fields before printing.", missing)
	copy_count = parse_int_prefix(copies)
	if copy_count is None or copy_count < 1:
		raise ValidationError("Copies must be a whole number of at least 1.", ["copies"])
	formatted = {
		variable.name: lcomp.formatters.apply(variable.formatter, str(values[variable.name]))
		for variable in variables
	}
	return Row(values=formatted, copies=copy_count)
