"""
Label element types and their template record codec.

Elements form a closed set of variants. Every variant carries the common
geometry (millimeters) and paint order, plus only the fields it uses.
"""

# Standard Library
import copy
import dataclasses
import math
from typing import Any, ClassVar

# local repo modules
import label_composer as lcomp
import label_composer.config
import label_composer.errors


InvalidFormatError = lcomp.errors.InvalidFormatError

DEFAULT_FONT_FAMILY = lcomp.config.DEFAULT_FONT_FAMILY
DEFAULT_FONT_SIZE = lcomp.config.DEFAULT_FONT_SIZE
DEFAULT_INPUT_TYPE = lcomp.config.DEFAULT_INPUT_TYPE
DEFAULT_FORMATTER = lcomp.config.DEFAULT_FORMATTER
DEFAULT_STROKE_COLOR = lcomp.config.DEFAULT_STROKE_COLOR
DEFAULT_STROKE_THICKNESS = lcomp.config.DEFAULT_STROKE_THICKNESS
DEFAULT_SYMBOL_VALUE = lcomp.config.DEFAULT_SYMBOL_VALUE
TRANSPARENT = lcomp.config.TRANSPARENT


@dataclasses.dataclass
class Element:
	KIND: ClassVar[str] = ""
	id: str
	x: float
	y: float
	width: float
	height: float
	z_index: int


@dataclasses.dataclass
class TextElement(Element):
	text: str = ""
	font_family: str = DEFAULT_FONT_FAMILY
	font_size: float = DEFAULT_FONT_SIZE
	font_weight: str = "normal"
	font_style: str = "normal"
	text_align: str = "left"


@dataclasses.dataclass
class StaticText(TextElement):
	KIND: ClassVar[str] = "text"


@dataclasses.dataclass
class VariableText(TextElement):
	KIND: ClassVar[str] = "var-text"
	var_name: str = ""
	input_type: str = DEFAULT_INPUT_TYPE
	formatter: str = DEFAULT_FORMATTER


@dataclasses.dataclass
class SymbolElement(Element):
	value: str = ""
	is_variable_value: bool = False
	var_name: str = ""


@dataclasses.dataclass
class Barcode(SymbolElement):
	KIND: ClassVar[str] = "barcode"
	display_value: bool = True


@dataclasses.dataclass
class QRCode(SymbolElement):
	KIND: ClassVar[str] = "qrcode"


@dataclasses.dataclass
class ShapeElement(Element):
	stroke_color: str = DEFAULT_STROKE_COLOR
	stroke_thickness: float = DEFAULT_STROKE_THICKNESS
	fill_color: str = TRANSPARENT


@dataclasses.dataclass
class Line(ShapeElement):
	KIND: ClassVar[str] = "line"
	fill_color: str = ""


@dataclasses.dataclass
class Square(ShapeElement):
	KIND: ClassVar[str] = "square"


@dataclasses.dataclass
class Circle(ShapeElement):
	KIND: ClassVar[str] = "circle"


ELEMENT_TYPES: dict[str, type[Element]] = {
	cls.KIND: cls
	for cls in (StaticText, VariableText, Barcode, QRCode, Line, Square, Circle)
}

# (width, height) in mm for a freshly added element
DEFAULT_SIZES: dict[str, tuple[float, float]] = {
	"text": (20.0, 5.0),
	"var-text": (20.0, 5.0),
	"barcode": (30.0, 10.0),
	"qrcode": (20.0, 5.0),
	"line": (30.0, 2.0),
	"square": (15.0, 15.0),
	"circle": (15.0, 15.0),
}
DEFAULT_POSITION_MM = 5.0

LAYER_ICONS = {
	"text": "T",
	"var-text": "{ }",
	"barcode": "|||",
	"qrcode": "QR",
	"line": "―",
	"square": "□",
	"circle": "○",
}

FIELD_TO_RECORD = {
	"id": "id",
	"x": "x",
	"y": "y",
	"width": "width",
	"height": "height",
	"z_index": "zIndex",
	"text": "text",
	"font_family": "fontFamily",
	"font_size": "fontSize",
	"font_weight": "fontWeight",
	"font_style": "fontStyle",
	"text_align": "textAlign",
	"var_name": "varName",
	"input_type": "inputType",
	"formatter": "formatter",
	"value": "value",
	"is_variable_value": "isVariableValue",
	"display_value": "displayValue",
	"stroke_color": "strokeColor",
	"stroke_thickness": "strokeThickness",
	"fill_color": "fillColor",
}
REQUIRED_FIELDS = ("id", "x", "y", "width", "height", "z_index")
FLOAT_FIELDS = ("x", "y", "width", "height", "font_size", "stroke_thickness")
BOOL_FIELDS = ("is_variable_value", "display_value")


#============================================
def element_class(kind: str) -> type[Element]:
	"""
	Look up the element class for a type tag.

	Args:
		kind: Type tag like "var-text".

	Returns:
		Element subclass.
	"""
	if kind not in ELEMENT_TYPES:
		raise InvalidFormatError(f"Unknown element type: {kind!r}")
	return ELEMENT_TYPES[kind]


#============================================
def create_element(kind: str, element_id: str, z_index: int) -> Element:
	"""
	Create an element of the given type with its default fields.

	Args:
		kind: Type tag.
		element_id: Unique element id.
		z_index: Paint order.

	Returns:
		New element.
	"""
	cls = element_class(kind)
	width, height = DEFAULT_SIZES[kind]
	element = cls(
		id=element_id,
		x=DEFAULT_POSITION_MM,
		y=DEFAULT_POSITION_MM,
		width=width,
		height=height,
		z_index=z_index,
	)
	if isinstance(element, StaticText):
		element.text = "Sample Text"
	elif isinstance(element, VariableText):
		element.text = "Variable"
		element.var_name = "variable"
	elif isinstance(element, SymbolElement):
		element.value = DEFAULT_SYMBOL_VALUE
	return element


#============================================
def field_names(element: Element) -> list[str]:
	return [field.name for field in dataclasses.fields(element)]


#============================================
def is_variable_bound(element: Element) -> bool:
	"""
	Check whether an element receives a data value at print time.

	Args:
		element: Element to check.

	Returns:
		True for variable text with a name and bound barcode/QR elements.
	"""
	if isinstance(element, VariableText):
		return bool(element.var_name)
	if isinstance(element, SymbolElement):
		return element.is_variable_value and bool(element.var_name)
	return False


#============================================
def clone_element(element: Element) -> Element:
	return copy.deepcopy(element)


#============================================
def layer_label(element: Element) -> tuple[str, str]:
	"""
	Build the icon and display name shown in a layer list.

	Args:
		element: Element to describe.

	Returns:
		Tuple of (icon, name).
	"""
	icon = LAYER_ICONS[element.KIND]
	if isinstance(element, VariableText):
		name = element.text or f"{{{element.var_name}}}"
	elif isinstance(element, StaticText):
		name = element.text[:15] if element.text else "Text"
	elif isinstance(element, Barcode):
		name = element.value or "Barcode"
	elif isinstance(element, QRCode):
		name = element.value or "QR Code"
	else:
		name = element.KIND.capitalize()
	return (icon, name)


#============================================
def element_to_record(element: Element) -> dict[str, Any]:
	"""
	Convert an element to a template record.

	Args:
		element: Element to convert.

	Returns:
		JSON-ready record with camelCase keys and a "type" tag.
	"""
	record: dict[str, Any] = {"type": element.KIND}
	for name in field_names(element):
		record[FIELD_TO_RECORD[name]] = getattr(element, name)
	return record


#============================================
def coerce_record_value(name: str, value: Any) -> Any:
	"""
	Coerce a record value to the type of the element field.

	Args:
		name: Element field name.
		value: Raw record value.

	Returns:
		Coerced value.
	"""
	if name in FLOAT_FIELDS:
		if isinstance(value, bool):
			raise ValueError(f"{name} must be a number")
		number = float(value)
		if not math.isfinite(number):
			raise ValueError(f"{name} must be a finite number")
		return number
	if name == "z_index":
		if isinstance(value, bool):
			raise ValueError("zIndex must be an integer")
		return int(value)
	if name in BOOL_FIELDS:
		return bool(value)
	if value is None:
		return ""
	return str(value)


#============================================
def element_from_record(record: dict[str, Any]) -> Element:
	"""
	Build an element from a template record.

	Records written by older versions carry every field on every element;
	fields the element type does not use are ignored.

	Args:
		record: Template record.

	Returns:
		Element instance.
	"""
	if not isinstance(record, dict):
		raise InvalidFormatError("Element records must be objects.")
	cls = element_class(record.get("type", ""))
	kwargs: dict[str, Any] = {}
	for field in dataclasses.fields(cls):
		key = FIELD_TO_RECORD[field.name]
		if key not in record:
			if field.name in REQUIRED_FIELDS:
				raise InvalidFormatError(f"Element record is missing {key!r}.")
			continue
		try:
			kwargs[field.name] = coerce_record_value(field.name, record[key])
		except (TypeError, ValueError, OverflowError) as error:
			raise InvalidFormatError(f"Invalid {key!r} in element record: {error}") from error
	return cls(**kwargs)
