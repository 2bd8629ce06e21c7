"""
The label design document: canvas size, elements, selection and z-order.

A LabelDocument is owned by whoever creates it and is passed to the other
components. Editing surfaces register callbacks for its change events.
"""

# Standard Library
import dataclasses
import math
from typing import Callable

# local repo modules
import label_composer as lcomp
import label_composer.config
import label_composer.elements
import label_composer.errors
import label_composer.geometry


Element = lcomp.elements.Element
Box = lcomp.geometry.Box
SnapGuides = lcomp.geometry.SnapGuides
ValidationError = lcomp.errors.ValidationError

DEFAULT_CANVAS_WIDTH_MM = lcomp.config.DEFAULT_CANVAS_WIDTH_MM
DEFAULT_CANVAS_HEIGHT_MM = lcomp.config.DEFAULT_CANVAS_HEIGHT_MM

SELECTION_CHANGED = "selection-changed"
GEOMETRY_CHANGED = "geometry-changed"
ELEMENT_CHANGED = "element-changed"
ELEMENTS_CHANGED = "elements-changed"
EVENTS = (SELECTION_CHANGED, GEOMETRY_CHANGED, ELEMENT_CHANGED, ELEMENTS_CHANGED)

GEOMETRY_FIELDS = ("x", "y", "width", "height")
READ_ONLY_FIELDS = ("id",)
ARROW_DIRECTIONS = {
	"left": (-1.0, 0.0),
	"right": (1.0, 0.0),
	"up": (0.0, -1.0),
	"down": (0.0, 1.0),
}

Listener = Callable[[Element | None], None]


@dataclasses.dataclass
class Canvas:
	width_mm: float
	height_mm: float

	@property
	def width_px(self) -> float:
		return lcomp.geometry.mm_to_px(self.width_mm)

	@property
	def height_px(self) -> float:
		return lcomp.geometry.mm_to_px(self.height_mm)


@dataclasses.dataclass
class LayerEntry:
	element_id: str
	icon: str
	name: str
	active: bool


#============================================
def nudge_delta(direction: str, fine: bool = False) -> tuple[float, float]:
	"""
	Millimeter offset for one arrow key press.

	Args:
		direction: "left", "right", "up" or "down".
		fine: Use the fine step.

	Returns:
		Tuple of (dx, dy) in millimeters.
	"""
	if direction not in ARROW_DIRECTIONS:
		raise ValidationError(f"Unknown direction: {direction!r}", ["direction"])
	step = lcomp.config.FINE_NUDGE_STEP_MM if fine else lcomp.config.NUDGE_STEP_MM
	unit_x, unit_y = ARROW_DIRECTIONS[direction]
	return (unit_x * step, unit_y * step)


#============================================
def validate_dimensions(width_mm: float, height_mm: float) -> None:
	"""
	Check label dimensions are positive finite numbers.

	Args:
		width_mm: Label width.
		height_mm: Label height.
	"""
	invalid: list[str] = []
	for name, value in (("width", width_mm), ("height", height_mm)):
		if isinstance(value, bool) or not isinstance(value, (int, float)):
			invalid.append(name)
		elif not math.isfinite(value) or value <= 0:
			invalid.append(name)
	if invalid:
		raise ValidationError("Please enter valid dimensions.", invalid)


class LabelDocument:
	"""
	In-memory label design.

	Elements are kept in insertion order; paint order comes from `z_index`.
	"""

	def __init__(
		self,
		width_mm: float = DEFAULT_CANVAS_WIDTH_MM,
		height_mm: float = DEFAULT_CANVAS_HEIGHT_MM,
	) -> None:
		validate_dimensions(width_mm, height_mm)
		self.canvas = Canvas(float(width_mm), float(height_mm))
		self.elements: list[Element] = []
		self.selected_id: str | None = None
		self.element_id_counter = 1
		self._listeners: dict[str, list[Listener]] = {event: [] for event in EVENTS}

	# ---- observers ----------------------------------------------------

	def subscribe(self, event: str, callback: Listener) -> None:
		if event not in self._listeners:
			raise ValueError(f"Unknown document event: {event}")
		self._listeners[event].append(callback)

	def unsubscribe(self, event: str, callback: Listener) -> None:
		if callback in self._listeners.get(event, []):
			self._listeners[event].remove(callback)

	def _emit(self, event: str, element: Element | None) -> None:
		for callback in list(self._listeners[event]):
			callback(element)

	# ---- lookup -------------------------------------------------------

	def get_element(self, element_id: str) -> Element:
		"""
		Find an element by id.

		Args:
			element_id: Element id.

		Returns:
			The element.
		"""
		for element in self.elements:
			if element.id == element_id:
				return element
		raise ValidationError(f"No element with id {element_id!r}.", ["element"])

	@property
	def selected(self) -> Element | None:
		if self.selected_id is None:
			return None
		for element in self.elements:
			if element.id == self.selected_id:
				return element
		return None

	def sorted_elements(self) -> list[Element]:
		"""
		Elements in paint order, bottom first.
		"""
		return sorted(self.elements, key=lambda element: element.z_index)

	def layers(self) -> list[LayerEntry]:
		"""
		Layer list entries, topmost first.

		Returns:
			List of LayerEntry.
		"""
		entries: list[LayerEntry] = []
		ordered = sorted(self.elements, key=lambda element: element.z_index, reverse=True)
		for element in ordered:
			icon, name = lcomp.elements.layer_label(element)
			entries.append(LayerEntry(element.id, icon, name, element.id == self.selected_id))
		return entries

	# ---- selection ----------------------------------------------------

	def select(self, element_id: str | None) -> None:
		"""
		Change the single selection and notify listeners.

		Args:
			element_id: Id to select, or None to deselect.
		"""
		if element_id is not None:
			self.get_element(element_id)
		self.selected_id = element_id
		self._emit(SELECTION_CHANGED, self.selected)

	# ---- editing ------------------------------------------------------

	def add_element(self, kind: str) -> Element:
		"""
		Add an element with type defaults on top and select it.

		Args:
			kind: Type tag such as "text" or "barcode".

		Returns:
			The new element.
		"""
		if kind not in lcomp.elements.ELEMENT_TYPES:
			raise ValidationError(f"Unknown element type: {kind!r}", ["type"])
		element_id = f"el-{self.element_id_counter}"
		self.element_id_counter += 1
		element = lcomp.elements.create_element(kind, element_id, len(self.elements) + 1)
		self.elements.append(element)
		self._emit(ELEMENTS_CHANGED, element)
		self.select(element.id)
		return element

	def update_meta(self, element_id: str, updates: dict) -> Element:
		"""
		Merge field values into an element.

		Args:
			element_id: Element id.
			updates: Field name to value mapping.

		Returns:
			The updated element.
		"""
		element = self.get_element(element_id)
		allowed = lcomp.elements.field_names(element)
		unknown = [
			name for name in updates
			if name not in allowed or name in READ_ONLY_FIELDS
		]
		if unknown:
			raise ValidationError(
				f"Fields not valid for {element.KIND}: {', '.join(sorted(unknown))}",
				unknown,
			)
		for name, value in updates.items():
			setattr(element, name, value)
		self._emit(ELEMENT_CHANGED, element)
		if any(name in GEOMETRY_FIELDS for name in updates):
			self._emit(GEOMETRY_CHANGED, element)
		return element

	def delete_element(self, element_id: str) -> None:
		"""
		Remove an element. Remaining z-indexes are not renumbered.

		Args:
			element_id: Element id.
		"""
		element = self.get_element(element_id)
		self.elements.remove(element)
		self._emit(ELEMENTS_CHANGED, None)
		if self.selected_id == element_id:
			self.select(None)

	def delete_selected(self) -> None:
		if self.selected_id is not None:
			self.delete_element(self.selected_id)

	def reorder(self, element_ids: list[str]) -> None:
		"""
		Assign dense z-indexes from a top-to-bottom id ordering.

		Args:
			element_ids: Every element id, topmost first.
		"""
		current_ids = sorted(element.id for element in self.elements)
		if sorted(element_ids) != current_ids:
			raise ValidationError("Layer order must list every element exactly once.", ["layers"])
		by_id = {element.id: element for element in self.elements}
		z_level = len(element_ids)
		for element_id in element_ids:
			by_id[element_id].z_index = z_level
			z_level -= 1
		self._emit(ELEMENTS_CHANGED, None)

	def bring_forward(self, element_id: str | None = None) -> None:
		element = self._target(element_id)
		if element is None:
			return
		element.z_index += 1
		self._emit(ELEMENT_CHANGED, element)

	def send_backward(self, element_id: str | None = None) -> None:
		element = self._target(element_id)
		if element is None or element.z_index <= 1:
			return
		element.z_index -= 1
		self._emit(ELEMENT_CHANGED, element)

	def _target(self, element_id: str | None) -> Element | None:
		if element_id is None:
			return self.selected
		return self.get_element(element_id)

	# ---- direct manipulation -----------------------------------------

	def _set_box_px(self, element: Element, box: Box) -> None:
		element.x = lcomp.geometry.px_to_mm(box.x)
		element.y = lcomp.geometry.px_to_mm(box.y)
		element.width = lcomp.geometry.px_to_mm(box.width)
		element.height = lcomp.geometry.px_to_mm(box.height)
		self._emit(GEOMETRY_CHANGED, element)

	def move_element(
		self,
		element_id: str,
		dx_px: float,
		dy_px: float,
		zoom: float = 1.0,
		guides: SnapGuides | None = None,
	) -> Element:
		"""
		Apply a drag delta reported by the input surface.

		Args:
			element_id: Dragged element id.
			dx_px: Pointer delta on x in screen pixels.
			dy_px: Pointer delta on y in screen pixels.
			zoom: Display zoom factor.
			guides: Optional snapping helper.

		Returns:
			The moved element.
		"""
		element = self.get_element(element_id)
		box = lcomp.geometry.element_box_px(element)
		box.x += dx_px / zoom
		box.y += dy_px / zoom
		if guides is not None:
			box.x, box.y = guides.snap(element.id, box, self.elements)
		self._set_box_px(element, box)
		return element

	def resize_element(
		self,
		element_id: str,
		delta_left: float,
		delta_top: float,
		delta_width: float,
		delta_height: float,
		zoom: float = 1.0,
	) -> Element:
		"""
		Apply a resize delta reported by the input surface.

		Args:
			element_id: Resized element id.
			delta_left: Left edge change in screen pixels.
			delta_top: Top edge change in screen pixels.
			delta_width: Width change in screen pixels.
			delta_height: Height change in screen pixels.
			zoom: Display zoom factor.

		Returns:
			The resized element.
		"""
		element = self.get_element(element_id)
		box = lcomp.geometry.resize_box(
			lcomp.geometry.element_box_px(element),
			delta_left / zoom,
			delta_top / zoom,
			delta_width / zoom,
			delta_height / zoom,
			self.canvas.width_px,
			self.canvas.height_px,
		)
		self._set_box_px(element, box)
		return element

	def end_drag(self, element_id: str, guides: SnapGuides | None = None) -> Element:
		"""
		Finish a drag: keep the element inside the canvas and hide guides.

		Args:
			element_id: Dragged element id.
			guides: Snapping helper used during the drag.

		Returns:
			The element.
		"""
		element = self.get_element(element_id)
		if guides is not None:
			guides.clear_guides()
		box = lcomp.geometry.clamp_box_to_canvas(
			lcomp.geometry.element_box_px(element),
			self.canvas.width_px,
			self.canvas.height_px,
		)
		self._set_box_px(element, box)
		return element

	def nudge_selected(self, dx_mm: float, dy_mm: float) -> None:
		element = self.selected
		if element is None:
			return
		self.update_meta(element.id, {"x": element.x + dx_mm, "y": element.y + dy_mm})

	def arrow_key(self, direction: str, fine: bool = False) -> None:
		self.nudge_selected(*nudge_delta(direction, fine))

	def snap_guides(self, threshold: float = lcomp.config.SNAP_THRESHOLD_PX) -> SnapGuides:
		return SnapGuides(self.canvas.width_px, self.canvas.height_px, threshold)

	# ---- workspace ----------------------------------------------------

	def clear_all(self) -> None:
		self.elements = []
		self._emit(ELEMENTS_CHANGED, None)
		self.select(None)

	def new_workspace(self, width_mm: float, height_mm: float) -> None:
		"""
		Start a new empty design with the given label size.

		Args:
			width_mm: Label width.
			height_mm: Label height.
		"""
		validate_dimensions(width_mm, height_mm)
		self.canvas = Canvas(float(width_mm), float(height_mm))
		self.clear_all()

	def replace_contents(
		self,
		canvas: Canvas,
		elements: list[Element],
		element_id_counter: int,
	) -> None:
		"""
		Swap in a fully decoded design.

		Args:
			canvas: New canvas.
			elements: New elements.
			element_id_counter: Next element id number.
		"""
		self.canvas = canvas
		self.elements = list(elements)
		self.element_id_counter = element_id_counter
		self._emit(ELEMENTS_CHANGED, None)
		self.select(None)
