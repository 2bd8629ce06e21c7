"""
Headless property panel for the selected element.

Selecting an element rebuilds the field set. Dragging or resizing only
refreshes geometry values and never overwrites the field being typed in.
"""

# Standard Library
import math

# local repo modules
import label_composer as lcomp
import label_composer.config
import label_composer.document
import label_composer.elements
import label_composer.errors
import label_composer.formatters


Element = lcomp.elements.Element
LabelDocument = lcomp.document.LabelDocument
ValidationError = lcomp.errors.ValidationError

GEOMETRY_FIELDS = lcomp.document.GEOMETRY_FIELDS
NUMBER_FIELDS = GEOMETRY_FIELDS + ("font_size", "stroke_thickness")
VALUE_SOURCE_FIELD = "value_source"
FIELD_CHOICES = {
	"font_family": lcomp.config.FONTS,
	"font_weight": ("normal", "bold"),
	"text_align": ("left", "center", "right"),
	"input_type": lcomp.config.INPUT_TYPES,
	VALUE_SOURCE_FIELD: ("fixed", "variable"),
	"display_value": ("true", "false"),
}


#============================================
def panel_fields(element: Element) -> list[str]:
	"""
	List the editable fields shown for an element.

	Args:
		element: Selected element.

	Returns:
		Field names in display order.
	"""
	fields = list(GEOMETRY_FIELDS)
	if isinstance(element, lcomp.elements.TextElement):
		fields += ["font_family", "font_size", "font_weight", "text_align"]
		if isinstance(element, lcomp.elements.VariableText):
			fields += ["var_name", "input_type", "formatter"]
		fields.append("text")
	elif isinstance(element, lcomp.elements.SymbolElement):
		fields.append(VALUE_SOURCE_FIELD)
		if element.is_variable_value:
			fields.append("var_name")
		fields.append("value")
		if isinstance(element, lcomp.elements.Barcode):
			fields.append("display_value")
	elif isinstance(element, lcomp.elements.ShapeElement):
		fields += ["stroke_color", "stroke_thickness"]
		if not isinstance(element, lcomp.elements.Line):
			fields.append("fill_color")
	return fields


#============================================
def field_choices(field: str) -> list[str] | None:
	"""
	List the allowed values of a selection field.

	Args:
		field: Field name.

	Returns:
		Allowed values, or None for free text and number fields.
	"""
	if field == "formatter":
		return [key for key, _name in lcomp.formatters.formatter_choices()]
	if field in FIELD_CHOICES:
		return list(FIELD_CHOICES[field])
	return None


#============================================
def display_value(element: Element, field: str) -> str:
	"""
	Render one field value as the text an input widget shows.

	Args:
		element: Selected element.
		field: Field name.

	Returns:
		Display text.
	"""
	if field in GEOMETRY_FIELDS:
		return f"{getattr(element, field):.2f}"
	if field == VALUE_SOURCE_FIELD:
		return "variable" if element.is_variable_value else "fixed"
	value = getattr(element, field)
	if isinstance(value, bool):
		return "true" if value else "false"
	if isinstance(value, float) and value.is_integer():
		return str(int(value))
	return str(value)


class PropertyPanel:
	"""
	Field values for the selected element, kept in sync with the document.
	"""

	def __init__(self, document: LabelDocument) -> None:
		self.document = document
		self.element_id: str | None = None
		self.fields: list[str] = []
		self.values: dict[str, str] = {}
		self.focused_field: str | None = None
		self.rebuild_count = 0
		document.subscribe(lcomp.document.SELECTION_CHANGED, self.rebuild)
		document.subscribe(lcomp.document.GEOMETRY_CHANGED, self.refresh_geometry)
		document.subscribe(lcomp.document.ELEMENT_CHANGED, self.refresh_element)

	def rebuild(self, element: Element | None) -> None:
		"""
		Rebuild the whole field set for a new selection.

		Args:
			element: Newly selected element or None.
		"""
		self.rebuild_count += 1
		self.focused_field = None
		if element is None:
			self.element_id = None
			self.fields = []
			self.values = {}
			return
		self.element_id = element.id
		self.fields = panel_fields(element)
		self.values = {field: display_value(element, field) for field in self.fields}

	def refresh_geometry(self, element: Element | None) -> None:
		"""
		Refresh geometry values during a drag or resize.

		Args:
			element: Element whose geometry changed.
		"""
		if element is None or element.id != self.element_id:
			return
		for field in GEOMETRY_FIELDS:
			if field == self.focused_field:
				continue
			self.values[field] = display_value(element, field)

	def refresh_element(self, element: Element | None) -> None:
		if element is None or element.id != self.element_id:
			return
		fields = panel_fields(element)
		if fields != self.fields:
			self.rebuild(element)
			return
		for field in fields:
			if field == self.focused_field:
				continue
			self.values[field] = display_value(element, field)

	def focus(self, field: str) -> None:
		self.focused_field = field

	def blur(self) -> None:
		self.focused_field = None

	def edit(self, field: str, raw_value: str) -> Element:
		"""
		Apply a value typed into one field.

		Args:
			field: Field name.
			raw_value: Text from the input widget.

		Returns:
			The updated element.
		"""
		if self.element_id is None or field not in self.fields:
			raise ValidationError(f"Field {field!r} is not editable.", [field])
		choices = field_choices(field)
		if choices is not None and raw_value not in choices:
			raise ValidationError(f"{field} must be one of: {', '.join(choices)}", [field])
		self.values[field] = raw_value
		if field in NUMBER_FIELDS:
			try:
				value = float(raw_value)
			except ValueError as error:
				raise ValidationError(f"{field} must be a number.", [field]) from error
			if not math.isfinite(value):
				raise ValidationError(f"{field} must be a finite number.", [field])
			return self.document.update_meta(self.element_id, {field: value})
		if field == VALUE_SOURCE_FIELD:
			return self.document.update_meta(
				self.element_id,
				{"is_variable_value": raw_value == "variable"},
			)
		if field == "display_value":
			return self.document.update_meta(self.element_id, {field: raw_value == "true"})
		return self.document.update_meta(self.element_id, {field: raw_value})
