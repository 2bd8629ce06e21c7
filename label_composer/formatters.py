"""
Registry of named value formatters.

A formatter is a pure string to string transform. Its key is what an
element stores; its name is what a selection widget shows.
"""

# Standard Library
import dataclasses
import math
import re
from typing import Callable


@dataclasses.dataclass
class Formatter:
	key: str
	name: str
	transform: Callable[[str], str]


FLOAT_PREFIX_PATTERN = re.compile(r"^\s*[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?")


#============================================
def parse_float_prefix(value: str) -> float | None:
	"""
	Parse the leading number of a string.

	Args:
		value: Input text such as "1234.5" or "12kg".

	Returns:
		Parsed float or None when the text does not start with a number.
	"""
	match = FLOAT_PREFIX_PATTERN.match(value)
	if match is None:
		return None
	return float(match.group(0))


#============================================
def format_currency(value: str) -> str:
	"""
	Group thousands with commas, up to three decimals.

	Args:
		value: Raw text.

	Returns:
		Formatted number, or the text unchanged when it is not numeric.
	"""
	number = parse_float_prefix(value)
	if number is None or not math.isfinite(number):
		return value
	text = f"{number:,.3f}"
	text = text.rstrip("0").rstrip(".")
	if text in ("-0", ""):
		text = "0"
	return text


#============================================
def format_date_compact(value: str) -> str:
	"""
	Compact a date: YYYY-MM-DD becomes DDMMYYYY, slashes are removed.

	Args:
		value: Raw text.

	Returns:
		Compacted date, or the text unchanged.
	"""
	if "-" in value:
		parts = value.split("-")
		if len(parts) != 3:
			return value
		year, month, day = parts
		return f"{day}{month}{year}"
	if "/" in value:
		return value.replace("/", "")
	return value


REGISTRY: list[Formatter] = [
	Formatter("none", "None", lambda value: value),
	Formatter("currency", "Currency (1,000)", format_currency),
	Formatter("date-compact", "Date Compact (25022026)", format_date_compact),
	Formatter("uppercase", "UPPERCASE", lambda value: value.upper()),
	Formatter("lowercase", "lowercase", lambda value: value.lower()),
]


#============================================
def register_formatter(key: str, name: str, transform: Callable[[str], str]) -> None:
	"""
	Add a formatter, replacing any existing one with the same key.

	Args:
		key: Stored formatter key.
		name: Display name.
		transform: String transform.
	"""
	for index, formatter in enumerate(REGISTRY):
		if formatter.key == key:
			REGISTRY[index] = Formatter(key, name, transform)
			return
	REGISTRY.append(Formatter(key, name, transform))


#============================================
def get_formatter(key: str | None) -> Formatter | None:
	for formatter in REGISTRY:
		if formatter.key == key:
			return formatter
	return None


#============================================
def apply(key: str | None, value: str) -> str:
	"""
	Apply a formatter by key.

	Empty values and unknown keys pass through unchanged.

	Args:
		key: Formatter key.
		value: Raw value.

	Returns:
		Formatted value.
	"""
	if not value:
		return value
	formatter = get_formatter(key)
	if formatter is None:
		return value
	return formatter.transform(value)


#============================================
def formatter_choices() -> list[tuple[str, str]]:
	"""
	List formatters for a selection widget.

	Returns:
		List of (key, name) pairs in registry order.
	"""
	return [(formatter.key, formatter.name) for formatter in REGISTRY]
