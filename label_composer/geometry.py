"""
Millimeter/pixel geometry and smart alignment guides.
"""

# Standard Library
import dataclasses
from typing import Iterable

# local repo modules
import label_composer as lcomp
import label_composer.config


PX_PER_MM = lcomp.config.PX_PER_MM
SNAP_THRESHOLD_PX = lcomp.config.SNAP_THRESHOLD_PX
MIN_ELEMENT_SIZE_PX = lcomp.config.MIN_ELEMENT_SIZE_PX


@dataclasses.dataclass
class Box:
	x: float
	y: float
	width: float
	height: float

	@property
	def right(self) -> float:
		return self.x + self.width

	@property
	def bottom(self) -> float:
		return self.y + self.height

	@property
	def center_x(self) -> float:
		return self.x + self.width / 2.0

	@property
	def center_y(self) -> float:
		return self.y + self.height / 2.0


@dataclasses.dataclass
class Guide:
	orientation: str
	position: float
	length: float


@dataclasses.dataclass
class SnapResult:
	x: float
	y: float
	guide_x: float | None
	guide_y: float | None


#============================================
def mm_to_px(mm: float) -> float:
	"""
	Convert millimeters to display pixels.

	Args:
		mm: Millimeter value.

	Returns:
		Pixel value.
	"""
	return mm * PX_PER_MM


#============================================
def px_to_mm(px: float) -> float:
	"""
	Convert display pixels to millimeters.

	Args:
		px: Pixel value.

	Returns:
		Millimeter value.
	"""
	return px / PX_PER_MM


#============================================
def element_box_px(element) -> Box:
	"""
	Build the pixel box of anything with mm x/y/width/height fields.

	Args:
		element: Element or record with millimeter geometry.

	Returns:
		Box in pixels.
	"""
	return Box(
		x=mm_to_px(element.x),
		y=mm_to_px(element.y),
		width=mm_to_px(element.width),
		height=mm_to_px(element.height),
	)


#============================================
def collect_snap_targets(
	moving_id: str,
	elements: Iterable,
	canvas_width_px: float,
	canvas_height_px: float,
) -> tuple[list[float], list[float]]:
	"""
	Collect candidate target edges from other elements and the canvas.

	Every target contributes left, right and center on the x axis and
	top, bottom and center on the y axis.

	Args:
		moving_id: Id of the element being dragged, never a target.
		elements: Elements with millimeter geometry and an `id`.
		canvas_width_px: Canvas width in pixels.
		canvas_height_px: Canvas height in pixels.

	Returns:
		Tuple of (x_targets, y_targets) in pixels.
	"""
	x_targets: list[float] = []
	y_targets: list[float] = []
	for element in elements:
		if element.id == moving_id:
			continue
		box = element_box_px(element)
		x_targets.extend((box.x, box.right, box.center_x))
		y_targets.extend((box.y, box.bottom, box.center_y))
	x_targets.extend((0.0, canvas_width_px, canvas_width_px / 2.0))
	y_targets.extend((0.0, canvas_height_px, canvas_height_px / 2.0))
	return (x_targets, y_targets)


#============================================
def find_axis_snap(
	origin: float,
	moving_edges: tuple[float, float, float],
	targets: list[float],
	threshold: float,
) -> tuple[float, float | None]:
	"""
	Snap one axis to the closest target edge.

	Args:
		origin: Current position of the moving box on this axis.
		moving_edges: The moving box's start, end and center on this axis.
		targets: Candidate target coordinates.
		threshold: Snap tolerance in pixels.

	Returns:
		Tuple of (position, guide) where guide is None when not snapped.
	"""
	best_diff = threshold + 1.0
	best_position = origin
	best_guide: float | None = None
	for target in targets:
		for edge in moving_edges:
			diff = abs(edge - target)
			# strict comparison keeps the first of equal candidates
			if diff < best_diff:
				best_diff = diff
				best_position = origin + (target - edge)
				best_guide = target
	if best_guide is None or best_diff > threshold:
		return (origin, None)
	return (best_position, best_guide)


#============================================
def snap_box(
	moving_id: str,
	box: Box,
	elements: Iterable,
	canvas_width_px: float,
	canvas_height_px: float,
	threshold: float = SNAP_THRESHOLD_PX,
) -> SnapResult:
	"""
	Snap a dragged box to the nearest element or canvas edge per axis.

	Args:
		moving_id: Id of the dragged element.
		box: Proposed pixel box of the dragged element.
		elements: All elements on the canvas.
		canvas_width_px: Canvas width in pixels.
		canvas_height_px: Canvas height in pixels.
		threshold: Snap tolerance in pixels.

	Returns:
		SnapResult with the snapped position and guide coordinates.
	"""
	x_targets, y_targets = collect_snap_targets(
		moving_id,
		elements,
		canvas_width_px,
		canvas_height_px,
	)
	snap_x, guide_x = find_axis_snap(
		box.x,
		(box.x, box.right, box.center_x),
		x_targets,
		threshold,
	)
	snap_y, guide_y = find_axis_snap(
		box.y,
		(box.y, box.bottom, box.center_y),
		y_targets,
		threshold,
	)
	return SnapResult(x=snap_x, y=snap_y, guide_x=guide_x, guide_y=guide_y)


class SnapGuides:
	"""
	Stateful snapping helper holding the visible alignment guides.

	A vertical guide marks an x-axis snap, a horizontal guide a y-axis snap.
	Both span the full canvas.
	"""

	def __init__(
		self,
		canvas_width_px: float,
		canvas_height_px: float,
		threshold: float = SNAP_THRESHOLD_PX,
	) -> None:
		self.canvas_width_px = canvas_width_px
		self.canvas_height_px = canvas_height_px
		self.threshold = threshold
		self.vertical: Guide | None = None
		self.horizontal: Guide | None = None

	def snap(self, moving_id: str, box: Box, elements: Iterable) -> tuple[float, float]:
		"""
		Snap a dragged box and update the visible guides.

		Args:
			moving_id: Id of the dragged element.
			box: Proposed pixel box.
			elements: All elements on the canvas.

		Returns:
			Snapped (x, y) in pixels.
		"""
		result = snap_box(
			moving_id,
			box,
			elements,
			self.canvas_width_px,
			self.canvas_height_px,
			self.threshold,
		)
		self.vertical = None
		self.horizontal = None
		if result.guide_x is not None:
			self.vertical = Guide("vertical", result.guide_x, self.canvas_height_px)
		if result.guide_y is not None:
			self.horizontal = Guide("horizontal", result.guide_y, self.canvas_width_px)
		return (result.x, result.y)

	def clear_guides(self) -> None:
		self.vertical = None
		self.horizontal = None


#============================================
def clamp_box_to_canvas(box: Box, canvas_width_px: float, canvas_height_px: float) -> Box:
	"""
	Move a box so it lies inside the canvas, keeping its size.

	Args:
		box: Pixel box.
		canvas_width_px: Canvas width in pixels.
		canvas_height_px: Canvas height in pixels.

	Returns:
		Clamped box.
	"""
	x = min(max(box.x, 0.0), max(0.0, canvas_width_px - box.width))
	y = min(max(box.y, 0.0), max(0.0, canvas_height_px - box.height))
	return Box(x=x, y=y, width=box.width, height=box.height)


#============================================
def resize_box(
	box: Box,
	delta_left: float,
	delta_top: float,
	delta_width: float,
	delta_height: float,
	canvas_width_px: float,
	canvas_height_px: float,
	min_size: float = MIN_ELEMENT_SIZE_PX,
) -> Box:
	"""
	Apply a resize delta, keeping a minimum size and the canvas as outer edge.

	Args:
		box: Current pixel box.
		delta_left: Change of the left edge.
		delta_top: Change of the top edge.
		delta_width: Change of the width.
		delta_height: Change of the height.
		canvas_width_px: Canvas width in pixels.
		canvas_height_px: Canvas height in pixels.
		min_size: Minimum width and height in pixels.

	Returns:
		Resized box.
	"""
	left = box.x + delta_left
	top = box.y + delta_top
	right = left + box.width + delta_width
	bottom = top + box.height + delta_height

	left = max(left, 0.0)
	top = max(top, 0.0)
	right = min(right, canvas_width_px)
	bottom = min(bottom, canvas_height_px)

	# a left/top drag moves the start edge, so keep the opposite edge fixed
	if right - left < min_size:
		if delta_left != 0.0:
			left = right - min_size
		else:
			right = left + min_size
	if bottom - top < min_size:
		if delta_top != 0.0:
			top = bottom - min_size
		else:
			bottom = top + min_size
	return Box(x=left, y=top, width=right - left, height=bottom - top)
