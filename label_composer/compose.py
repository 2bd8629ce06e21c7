"""
Print composition: substitute row data into the label and pack labels
into pages.

Layout 1 prints one label per page. Layout 2 prints two labels side by
side with a gap strip between them. In layout 2 a page never holds labels
from two different rows: a row with an odd number of copies is followed by
a blank slot before the next row starts.
"""

# Standard Library
import dataclasses
import math

# local repo modules
import label_composer as lcomp
import label_composer.config
import label_composer.elements
import label_composer.errors
import label_composer.variables


Element = lcomp.elements.Element
Row = lcomp.variables.Row
ComposeResult = lcomp.config.ComposeResult
ValidationError = lcomp.errors.ValidationError

LAYOUT_SINGLE = lcomp.config.LAYOUT_SINGLE
LAYOUT_PAIRED = lcomp.config.LAYOUT_PAIRED
LAYOUTS = lcomp.config.LAYOUTS
DEFAULT_LAYOUT = lcomp.config.DEFAULT_LAYOUT
DEFAULT_GAP_MM = lcomp.config.DEFAULT_GAP_MM


@dataclasses.dataclass
class PrintJob:
	rows: list[Row]
	layout: int = DEFAULT_LAYOUT
	gap_mm: float = DEFAULT_GAP_MM


@dataclasses.dataclass
class LabelInstance:
	row_index: int
	elements: list[Element]


@dataclasses.dataclass
class PageSize:
	width_mm: float
	height_mm: float


@dataclasses.dataclass
class Page:
	index: int
	width_mm: float
	height_mm: float
	# None marks a blank slot; a paired last page may have one slot only
	slots: list[LabelInstance | None]

	@property
	def left(self) -> LabelInstance | None:
		return self.slots[0]

	@property
	def right(self) -> LabelInstance | None:
		if len(self.slots) < 2:
			return None
		return self.slots[1]

	@property
	def has_right_slot(self) -> bool:
		return len(self.slots) > 1


@dataclasses.dataclass
class ComposedJob:
	layout: int
	gap_mm: float
	label_width_mm: float
	label_height_mm: float
	page_size: PageSize
	pages: list[Page]
	instances: list[LabelInstance]
	total_labels: int

	def slot_offset_mm(self, slot: int) -> float:
		"""
		Horizontal offset of a slot from the page's left edge.

		Args:
			slot: Slot index within a page.

		Returns:
			Offset in millimeters.
		"""
		if slot == 0:
			return 0.0
		return self.label_width_mm + self.gap_mm

	def summary(self) -> ComposeResult:
		blank_slots = sum(
			1 for page in self.pages for slot in page.slots if slot is None
		)
		return ComposeResult(
			total_rows=len(self.instances),
			total_labels=self.total_labels,
			blank_slots=blank_slots,
			pages=len(self.pages),
			layout=self.layout,
			gap_mm=self.gap_mm,
			page_width_mm=self.page_size.width_mm,
			page_height_mm=self.page_size.height_mm,
		)


#============================================
def validate_print_settings(layout: int, gap_mm: float) -> None:
	"""
	Check the layout mode and gap.

	Args:
		layout: 1 or 2 labels per page.
		gap_mm: Gap between paired labels.
	"""
	if layout not in LAYOUTS:
		raise ValidationError("Layout must be 1 or 2 labels per page.", ["layout"])
	if isinstance(gap_mm, bool) or not isinstance(gap_mm, (int, float)):
		raise ValidationError("Gap must be a number.", ["gap"])
	if not math.isfinite(gap_mm) or gap_mm < 0:
		raise ValidationError("Gap must be zero or more millimeters.", ["gap"])


#============================================
def page_size(width_mm: float, height_mm: float, layout: int, gap_mm: float) -> PageSize:
	"""
	Physical page size for a whole job.

	Args:
		width_mm: Label width.
		height_mm: Label height.
		layout: 1 or 2 labels per page.
		gap_mm: Gap between paired labels.

	Returns:
		PageSize.
	"""
	if layout == LAYOUT_PAIRED:
		return PageSize(width_mm * 2.0 + gap_mm, height_mm)
	return PageSize(width_mm, height_mm)


#============================================
def instantiate_label(elements: list[Element], row: Row, row_index: int) -> LabelInstance:
	"""
	Copy the label elements with a row's values substituted.

	An empty or missing value keeps the element's own text or value.

	Args:
		elements: Label elements.
		row: Row of variable values.
		row_index: Index of the row in the job.

	Returns:
		LabelInstance with cloned elements.
	"""
	cloned: list[Element] = []
	for element in elements:
		clone = lcomp.elements.clone_element(element)
		if lcomp.elements.is_variable_bound(clone):
			value = row.values.get(clone.var_name)
			if value:
				if isinstance(clone, lcomp.elements.VariableText):
					clone.text = value
				else:
					clone.value = value
		cloned.append(clone)
	return LabelInstance(row_index=row_index, elements=cloned)


#============================================
def flatten_labels(
	instances: list[LabelInstance],
	rows: list[Row],
	layout: int,
) -> list[LabelInstance | None]:
	"""
	Expand rows into a flat label sequence.

	Each row contributes `copies` references to its instance. In layout 2 a
	blank follows every row with an odd count, so pairs never straddle two
	rows. A blank after the final row is dropped, leaving the last page
	with a single slot.

	Args:
		instances: One instance per row.
		rows: Rows, parallel to instances.
		layout: 1 or 2 labels per page.

	Returns:
		Label sequence with None for blank slots.
	"""
	sequence: list[LabelInstance | None] = []
	for instance, row in zip(instances, rows):
		copies = max(1, row.copies)
		sequence.extend([instance] * copies)
		if layout == LAYOUT_PAIRED and copies % 2 != 0:
			sequence.append(None)
	if layout == LAYOUT_PAIRED and sequence and sequence[-1] is None:
		sequence.pop()
	return sequence


#============================================
def paginate(
	sequence: list[LabelInstance | None],
	layout: int,
	size: PageSize,
) -> list[Page]:
	"""
	Group a label sequence into pages.

	Args:
		sequence: Flat label sequence.
		layout: 1 or 2 labels per page.
		size: Page size shared by every page.

	Returns:
		Pages in print order.
	"""
	pages: list[Page] = []
	step = 2 if layout == LAYOUT_PAIRED else 1
	for start in range(0, len(sequence), step):
		slots = sequence[start:start + step]
		pages.append(Page(len(pages), size.width_mm, size.height_mm, slots))
	return pages


#============================================
def compose(
	job: PrintJob,
	elements: list[Element],
	label_width_mm: float,
	label_height_mm: float,
) -> ComposedJob:
	"""
	Compose a print job into pages.

	Args:
		job: Rows, layout and gap.
		elements: Label elements.
		label_width_mm: Label width.
		label_height_mm: Label height.

	Returns:
		ComposedJob with the page size directive and pages.
	"""
	validate_print_settings(job.layout, job.gap_mm)
	if not job.rows:
		raise ValidationError("There are no rows to print.", ["rows"])
	gap_mm = float(job.gap_mm) if job.layout == LAYOUT_PAIRED else 0.0
	ordered = sorted(elements, key=lambda element: element.z_index)
	instances = [
		instantiate_label(ordered, row, index)
		for index, row in enumerate(job.rows)
	]
	sequence = flatten_labels(instances, job.rows, job.layout)
	size = page_size(label_width_mm, label_height_mm, job.layout, gap_mm)
	pages = paginate(sequence, job.layout, size)
	return ComposedJob(
		layout=job.layout,
		gap_mm=gap_mm,
		label_width_mm=label_width_mm,
		label_height_mm=label_height_mm,
		page_size=size,
		pages=pages,
		instances=instances,
		total_labels=sum(1 for entry in sequence if entry is not None),
	)


#============================================
def compose_document(job: PrintJob, document) -> ComposedJob:
	"""
	Compose a print job against a LabelDocument.

	Args:
		job: Print job.
		document: LabelDocument with canvas and elements.

	Returns:
		ComposedJob.
	"""
	return compose(
		job,
		document.elements,
		document.canvas.width_mm,
		document.canvas.height_mm,
	)
