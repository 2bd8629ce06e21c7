"""
Template files: the label design saved as JSON.

A template holds the canvas size, the element records and the next
element id number:

	{"canvas": {"width": 50, "height": 25}, "elements": [...], "elementIdCounter": 4}
"""

# Standard Library
import json
import math
import pathlib
import re
from typing import Any

# local repo modules
import label_composer as lcomp
import label_composer.document
import label_composer.elements
import label_composer.errors


Element = lcomp.elements.Element
Canvas = lcomp.document.Canvas
LabelDocument = lcomp.document.LabelDocument
LabelComposerError = lcomp.errors.LabelComposerError
InvalidFormatError = lcomp.errors.InvalidFormatError

ID_SUFFIX_PATTERN = re.compile(r"(\d+)$")


#============================================
def serialize(document: LabelDocument) -> dict[str, Any]:
	"""
	Convert a document to a template dictionary.

	Args:
		document: Label document.

	Returns:
		JSON-ready template data.
	"""
	return {
		"canvas": {
			"width": document.canvas.width_mm,
			"height": document.canvas.height_mm,
		},
		"elements": [lcomp.elements.element_to_record(element) for element in document.elements],
		"elementIdCounter": document.element_id_counter,
	}


#============================================
def next_id_from_elements(elements: list[Element]) -> int:
	"""
	Recompute the element id counter from existing ids.

	Args:
		elements: Decoded elements.

	Returns:
		One more than the largest numeric id suffix.
	"""
	max_id = 0
	for element in elements:
		match = ID_SUFFIX_PATTERN.search(element.id)
		if match is None:
			continue
		max_id = max(max_id, int(match.group(1)))
	return max_id + 1


#============================================
def decode_canvas(data: Any) -> Canvas:
	if not isinstance(data, dict):
		raise InvalidFormatError("Template canvas must be an object.")
	try:
		width = float(data["width"])
		height = float(data["height"])
	except (KeyError, TypeError, ValueError) as error:
		raise InvalidFormatError("Template canvas needs a numeric width and height.") from error
	if not (math.isfinite(width) and math.isfinite(height)) or width <= 0 or height <= 0:
		raise InvalidFormatError("Template canvas dimensions must be positive.")
	return Canvas(width, height)


#============================================
def decode_template(data: Any) -> tuple[Canvas, list[Element], int]:
	"""
	Decode template data without touching any document.

	Args:
		data: Parsed JSON.

	Returns:
		Tuple of (canvas, elements, element id counter).
	"""
	if not isinstance(data, dict) or not data.get("canvas") or "elements" not in data:
		raise InvalidFormatError("Template must contain 'canvas' and 'elements'.")
	if not isinstance(data["elements"], list):
		raise InvalidFormatError("Template 'elements' must be a list.")
	canvas = decode_canvas(data["canvas"])
	elements = [lcomp.elements.element_from_record(record) for record in data["elements"]]
	ids = [element.id for element in elements]
	if len(set(ids)) != len(ids):
		raise InvalidFormatError("Template element ids must be unique.")

	counter = data.get("elementIdCounter")
	if counter:
		try:
			counter = int(counter)
		except (TypeError, ValueError, OverflowError) as error:
			raise InvalidFormatError("Template 'elementIdCounter' must be an integer.") from error
	else:
		counter = next_id_from_elements(elements)
	return (canvas, elements, counter)


#============================================
def deserialize(document: LabelDocument, data: Any) -> None:
	"""
	Replace a document's design with template data.

	The document is left unchanged when the data is invalid.

	Args:
		document: Label document to load into.
		data: Parsed JSON.
	"""
	canvas, elements, counter = decode_template(data)
	document.replace_contents(canvas, elements, counter)


#============================================
def export_template(document: LabelDocument, path: pathlib.Path) -> pathlib.Path:
	"""
	Write a document to a template file.

	Args:
		document: Label document.
		path: Output path; ".json" is appended when missing.

	Returns:
		Path written.
	"""
	path = pathlib.Path(path)
	if path.suffix.lower() != ".json":
		path = path.with_name(path.name + ".json")
	with path.open("w", encoding="utf-8") as handle:
		json.dump(serialize(document), handle, indent=2)
	return path


#============================================
def read_template_data(path: pathlib.Path) -> Any:
	"""
	Read and parse a template file.

	Args:
		path: Template path.

	Returns:
		Parsed JSON.
	"""
	path = pathlib.Path(path)
	try:
		text = path.read_text(encoding="utf-8-sig")
	except OSError as error:
		raise LabelComposerError(f"Cannot read template {path}: {error.strerror or error}") from error
	except UnicodeDecodeError as error:
		raise InvalidFormatError("Invalid JSON file.") from error
	try:
		return json.loads(text)
	except json.JSONDecodeError as error:
		raise InvalidFormatError("Invalid JSON file.") from error


#============================================
def import_template(document: LabelDocument, path: pathlib.Path) -> None:
	deserialize(document, read_template_data(path))


#============================================
def load_document(path: pathlib.Path) -> LabelDocument:
	"""
	Load a template file into a new document.

	Args:
		path: Template path.

	Returns:
		LabelDocument.
	"""
	document = LabelDocument()
	import_template(document, path)
	return document
