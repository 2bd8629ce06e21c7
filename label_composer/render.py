"""
PDF rendering of composed print jobs.

Each distinct label instance is drawn once into a label-sized tile with
reportlab, then tiles are placed onto job pages with pypdf.
"""

# Standard Library
import io
import json
import pathlib

# PIP3 modules
import pypdf
import reportlab.graphics.barcode
import reportlab.graphics.barcode.qr
import reportlab.graphics.renderPDF
import reportlab.graphics.shapes
import reportlab.lib.utils
import reportlab.pdfgen.canvas

# local repo modules
import label_composer as lcomp
import label_composer.compose
import label_composer.config
import label_composer.elements


Element = lcomp.elements.Element
ComposedJob = lcomp.compose.ComposedJob
LabelInstance = lcomp.compose.LabelInstance
RenderConfig = lcomp.config.RenderConfig
ComposeResult = lcomp.config.ComposeResult
mm_to_points = lcomp.config.mm_to_points

POINTS_PER_PX = lcomp.config.POINTS_PER_PX
DEFAULT_FONT_REGULAR = lcomp.config.DEFAULT_FONT_REGULAR
DEFAULT_FONT_BOLD = lcomp.config.DEFAULT_FONT_BOLD
DEFAULT_FONT_ITALIC = lcomp.config.DEFAULT_FONT_ITALIC
DEFAULT_FONT_BOLD_ITALIC = lcomp.config.DEFAULT_FONT_BOLD_ITALIC
DEFAULT_TEXT_LINE_HEIGHT = lcomp.config.DEFAULT_TEXT_LINE_HEIGHT
MONOSPACE_FONTS = lcomp.config.MONOSPACE_FONTS
SERIF_FONTS = lcomp.config.SERIF_FONTS
TRANSPARENT = lcomp.config.TRANSPARENT
SYMBOL_PLACEHOLDER_VALUE = lcomp.config.SYMBOL_PLACEHOLDER_VALUE
BARCODE_BAR_HEIGHT_RATIO = lcomp.config.BARCODE_BAR_HEIGHT_RATIO
PROGRESS_BAR_WIDTH = lcomp.config.PROGRESS_BAR_WIDTH
PROGRESS_UPDATE_EVERY = lcomp.config.PROGRESS_UPDATE_EVERY

FONT_FACES = {
	"sans": (DEFAULT_FONT_REGULAR, DEFAULT_FONT_BOLD, DEFAULT_FONT_ITALIC, DEFAULT_FONT_BOLD_ITALIC),
	"serif": ("Times-Roman", "Times-Bold", "Times-Italic", "Times-BoldItalic"),
	"mono": ("Courier", "Courier-Bold", "Courier-Oblique", "Courier-BoldOblique"),
}


#============================================
def print_progress(prefix: str, current: int, total: int, tiles: int = 0) -> None:
	"""
	Overwrite one status line with the page count and rendered tile count.

	Args:
		prefix: Label text.
		current: Pages done.
		total: Pages in the job.
		tiles: Distinct label tiles rendered so far.
	"""
	if total <= 0:
		return
	done = PROGRESS_BAR_WIDTH * current // total
	bar = "=" * done + " " * (PROGRESS_BAR_WIDTH - done)
	line = f"{prefix} |{bar}| page {current} of {total}"
	if tiles:
		line += f", {tiles} distinct label(s)"
	print(line, end="\r", flush=True)


#============================================
def parse_hex_color(value: str) -> tuple[float, float, float]:
	"""
	Parse a hex color string into RGB floats.

	Args:
		value: Color string like "#AABBCC" or "#ABC".

	Returns:
		Tuple of (r, g, b) in 0.0-1.0 range, black when unparseable.
	"""
	if not value or not value.startswith("#"):
		return (0.0, 0.0, 0.0)
	digits = value[1:]
	if len(digits) == 3:
		digits = "".join(char * 2 for char in digits)
	if len(digits) != 6:
		return (0.0, 0.0, 0.0)
	try:
		red = int(digits[0:2], 16) / 255.0
		green = int(digits[2:4], 16) / 255.0
		blue = int(digits[4:6], 16) / 255.0
	except ValueError:
		return (0.0, 0.0, 0.0)
	return (red, green, blue)


#============================================
def is_painted(color: str) -> bool:
	return bool(color) and color != TRANSPARENT


#============================================
def map_font_name(font_family: str, font_weight: str, font_style: str) -> str:
	"""
	Map element font settings to a built-in PDF font.

	Args:
		font_family: Design font family.
		font_weight: "normal" or "bold".
		font_style: "normal" or "italic".

	Returns:
		ReportLab font name.
	"""
	face = "sans"
	if font_family in MONOSPACE_FONTS:
		face = "mono"
	elif font_family in SERIF_FONTS:
		face = "serif"
	regular, bold, italic, bold_italic = FONT_FACES[face]
	is_bold = str(font_weight).lower() in ("bold", "bolder", "600", "700", "800", "900")
	is_italic = str(font_style).lower() in ("italic", "oblique")
	if is_italic and is_bold:
		return bold_italic
	if is_italic:
		return italic
	if is_bold:
		return bold
	return regular


#============================================
def element_rect_points(element: Element, label_height_mm: float) -> tuple[float, float, float, float]:
	"""
	Convert top-left millimeter geometry to a PDF rectangle.

	Args:
		element: Element with mm geometry measured from the label's top-left.
		label_height_mm: Label height.

	Returns:
		Tuple of (x, y, width, height) in points, y from the bottom edge.
	"""
	x = mm_to_points(element.x)
	y = mm_to_points(label_height_mm - element.y - element.height)
	return (x, y, mm_to_points(element.width), mm_to_points(element.height))


#============================================
def draw_text_element(
	pdf: reportlab.pdfgen.canvas.Canvas,
	element: lcomp.elements.TextElement,
	label_height_mm: float,
) -> None:
	"""
	Draw a text element, wrapping lines to the box width.

	Args:
		pdf: ReportLab canvas.
		element: Static or variable text element.
		label_height_mm: Label height.
	"""
	text_value = element.text or ""
	if not text_value:
		return
	x, y, width, height = element_rect_points(element, label_height_mm)
	font_name = map_font_name(element.font_family, element.font_weight, element.font_style)
	font_size = float(element.font_size)
	leading = font_size * DEFAULT_TEXT_LINE_HEIGHT

	lines: list[str] = []
	for paragraph in text_value.splitlines() or [""]:
		wrapped = reportlab.lib.utils.simpleSplit(paragraph, font_name, font_size, width)
		lines.extend(wrapped or [""])

	pdf.saveState()
	clip = pdf.beginPath()
	clip.rect(x, y, width, height)
	pdf.clipPath(clip, stroke=0, fill=0)
	pdf.setFont(font_name, font_size)
	pdf.setFillColorRGB(0.0, 0.0, 0.0)
	align = (element.text_align or "left").lower()
	baseline = y + height - font_size
	for line in lines:
		line_width = pdf.stringWidth(line, font_name, font_size)
		if align == "center":
			text_x = x + (width - line_width) / 2.0
		elif align == "right":
			text_x = x + width - line_width
		else:
			text_x = x
		pdf.drawString(text_x, baseline, line)
		baseline -= leading
	pdf.restoreState()


#============================================
def draw_scaled_drawing(
	pdf: reportlab.pdfgen.canvas.Canvas,
	drawing: reportlab.graphics.shapes.Drawing,
	x: float,
	y: float,
	width: float,
	height: float,
	center: bool,
) -> None:
	"""
	Draw a reportlab drawing scaled to fit a box, keeping its aspect ratio.

	Args:
		pdf: ReportLab canvas.
		drawing: Drawing to place.
		x: Box left in points.
		y: Box bottom in points.
		width: Box width in points.
		height: Box height in points.
		center: Center in the box, otherwise pin to the top-left corner.
	"""
	if drawing.width <= 0 or drawing.height <= 0:
		return
	scale = min(width / drawing.width, height / drawing.height)
	scaled_width = drawing.width * scale
	scaled_height = drawing.height * scale
	if center:
		offset_x = (width - scaled_width) / 2.0
		offset_y = (height - scaled_height) / 2.0
	else:
		offset_x = 0.0
		offset_y = height - scaled_height
	pdf.saveState()
	pdf.translate(x + offset_x, y + offset_y)
	pdf.scale(scale, scale)
	reportlab.graphics.renderPDF.draw(drawing, pdf, 0, 0)
	pdf.restoreState()


#============================================
def draw_barcode_element(
	pdf: reportlab.pdfgen.canvas.Canvas,
	element: lcomp.elements.Barcode,
	label_height_mm: float,
	config: RenderConfig,
) -> None:
	"""
	Draw a Code 128 barcode, with its value below when requested.

	Args:
		pdf: ReportLab canvas.
		element: Barcode element.
		label_height_mm: Label height.
		config: Render configuration.
	"""
	x, y, width, height = element_rect_points(element, label_height_mm)
	drawing = reportlab.graphics.barcode.createBarcodeDrawing(
		"Code128",
		value=element.value or SYMBOL_PLACEHOLDER_VALUE,
		barWidth=config.barcode_bar_width,
		barHeight=height * BARCODE_BAR_HEIGHT_RATIO,
		humanReadable=element.display_value,
		quiet=config.quiet_zone > 0,
		lquiet=config.quiet_zone,
		rquiet=config.quiet_zone,
	)
	draw_scaled_drawing(pdf, drawing, x, y, width, height, center=True)


#============================================
def draw_qrcode_element(
	pdf: reportlab.pdfgen.canvas.Canvas,
	element: lcomp.elements.QRCode,
	label_height_mm: float,
) -> None:
	"""
	Draw a QR code as a square of the box's smaller side.

	Args:
		pdf: ReportLab canvas.
		element: QR code element.
		label_height_mm: Label height.
	"""
	x, y, width, height = element_rect_points(element, label_height_mm)
	widget = reportlab.graphics.barcode.qr.QrCodeWidget(
		element.value or SYMBOL_PLACEHOLDER_VALUE,
		barLevel="L",
	)
	bounds = widget.getBounds()
	widget_width = bounds[2] - bounds[0]
	widget_height = bounds[3] - bounds[1]
	drawing = reportlab.graphics.shapes.Drawing(widget_width, widget_height)
	drawing.add(widget)
	draw_scaled_drawing(pdf, drawing, x, y, width, height, center=False)


#============================================
def draw_shape_element(
	pdf: reportlab.pdfgen.canvas.Canvas,
	element: lcomp.elements.ShapeElement,
	label_height_mm: float,
) -> None:
	"""
	Draw a line, square or circle.

	Args:
		pdf: ReportLab canvas.
		element: Shape element.
		label_height_mm: Label height.
	"""
	x, y, width, height = element_rect_points(element, label_height_mm)
	thickness = max(float(element.stroke_thickness or 1.0), 0.0) * POINTS_PER_PX
	stroke = parse_hex_color(element.stroke_color)
	pdf.saveState()
	pdf.setStrokeColorRGB(stroke[0], stroke[1], stroke[2])
	pdf.setLineWidth(thickness)
	if isinstance(element, lcomp.elements.Line):
		# the longer side sets the direction
		if element.width >= element.height:
			center_y = y + height / 2.0
			pdf.line(x, center_y, x + width, center_y)
		else:
			center_x = x + width / 2.0
			pdf.line(center_x, y, center_x, y + height)
		pdf.restoreState()
		return

	fill = 0
	if is_painted(element.fill_color):
		fill_rgb = parse_hex_color(element.fill_color)
		pdf.setFillColorRGB(fill_rgb[0], fill_rgb[1], fill_rgb[2])
		fill = 1
	# stroke is drawn inside the box
	inset = thickness / 2.0
	inner_width = max(0.0, width - thickness)
	inner_height = max(0.0, height - thickness)
	if isinstance(element, lcomp.elements.Circle):
		pdf.ellipse(x + inset, y + inset, x + inset + inner_width, y + inset + inner_height, stroke=1, fill=fill)
	else:
		pdf.rect(x + inset, y + inset, inner_width, inner_height, stroke=1, fill=fill)
	pdf.restoreState()


#============================================
def draw_element(
	pdf: reportlab.pdfgen.canvas.Canvas,
	element: Element,
	label_height_mm: float,
	config: RenderConfig,
) -> None:
	"""
	Draw one element onto a label tile.

	Args:
		pdf: ReportLab canvas.
		element: Element to draw.
		label_height_mm: Label height.
		config: Render configuration.
	"""
	if isinstance(element, lcomp.elements.TextElement):
		draw_text_element(pdf, element, label_height_mm)
	elif isinstance(element, lcomp.elements.Barcode):
		draw_barcode_element(pdf, element, label_height_mm, config)
	elif isinstance(element, lcomp.elements.QRCode):
		draw_qrcode_element(pdf, element, label_height_mm)
	elif isinstance(element, lcomp.elements.ShapeElement):
		draw_shape_element(pdf, element, label_height_mm)


#============================================
def render_label_tile(
	instance: LabelInstance,
	label_width_mm: float,
	label_height_mm: float,
	config: RenderConfig,
) -> pypdf.PageObject:
	"""
	Render one label instance into a label-sized PDF page.

	Args:
		instance: Label instance with substituted elements.
		label_width_mm: Label width.
		label_height_mm: Label height.
		config: Render configuration.

	Returns:
		PDF page object.
	"""
	buffer = io.BytesIO()
	pdf = reportlab.pdfgen.canvas.Canvas(
		buffer,
		pagesize=(mm_to_points(label_width_mm), mm_to_points(label_height_mm)),
	)
	ordered = sorted(instance.elements, key=lambda element: element.z_index)
	for element in ordered:
		draw_element(pdf, element, label_height_mm, config)
	pdf.save()
	buffer.seek(0)
	reader = pypdf.PdfReader(buffer)
	return reader.pages[0]


#============================================
def build_outline_overlay(composed: ComposedJob, slot_count: int) -> pypdf.PageObject:
	"""
	Build a PDF overlay page with label slot outlines.

	Args:
		composed: Composed job.
		slot_count: Number of slots on the page.

	Returns:
		PDF page object.
	"""
	buffer = io.BytesIO()
	page_width = mm_to_points(composed.page_size.width_mm)
	page_height = mm_to_points(composed.page_size.height_mm)
	pdf = reportlab.pdfgen.canvas.Canvas(buffer, pagesize=(page_width, page_height))
	pdf.setLineWidth(0.3)
	pdf.setStrokeColorRGB(0.7, 0.7, 0.7)
	for slot in range(slot_count):
		pdf.rect(
			mm_to_points(composed.slot_offset_mm(slot)),
			0.0,
			mm_to_points(composed.label_width_mm),
			mm_to_points(composed.label_height_mm),
			stroke=1,
			fill=0,
		)
	pdf.save()
	buffer.seek(0)
	reader = pypdf.PdfReader(buffer)
	return reader.pages[0]


#============================================
def render_job(
	composed: ComposedJob,
	output_path: pathlib.Path,
	config: RenderConfig,
) -> ComposeResult:
	"""
	Render a composed job to a PDF file, one job page per PDF page.

	The file is complete when this returns.

	Args:
		composed: Composed job.
		output_path: Output PDF path.
		config: Render configuration.

	Returns:
		ComposeResult summary.
	"""
	writer = pypdf.PdfWriter()
	page_width = mm_to_points(composed.page_size.width_mm)
	page_height = mm_to_points(composed.page_size.height_mm)

	tile_cache: dict[int, pypdf.PageObject] = {}
	outline_cache: dict[int, pypdf.PageObject] = {}
	total = len(composed.pages)
	if config.verbose and total > 0:
		print_progress("Pages", 0, total)
	for index, job_page in enumerate(composed.pages, start=1):
		writer.add_page(pypdf.PageObject.create_blank_page(width=page_width, height=page_height))
		page = writer.pages[-1]
		for slot, instance in enumerate(job_page.slots):
			if instance is None:
				continue
			if instance.row_index not in tile_cache:
				tile_cache[instance.row_index] = render_label_tile(
					instance,
					composed.label_width_mm,
					composed.label_height_mm,
					config,
				)
			transform = pypdf.Transformation().translate(
				mm_to_points(composed.slot_offset_mm(slot)),
				0.0,
			)
			page.merge_transformed_page(tile_cache[instance.row_index], transform)
		if config.draw_outlines:
			slot_count = len(job_page.slots)
			if slot_count not in outline_cache:
				outline_cache[slot_count] = build_outline_overlay(composed, slot_count)
			page.merge_page(outline_cache[slot_count])
		if config.verbose and (index % PROGRESS_UPDATE_EVERY == 0 or index == total):
			print_progress("Pages", index, total, len(tile_cache))
	if config.verbose and total > 0:
		print()

	output_path = pathlib.Path(output_path)
	output_path.parent.mkdir(parents=True, exist_ok=True)
	writer.write(str(output_path))
	return composed.summary()


#============================================
def write_manifest(
	manifest_path: pathlib.Path,
	template_path: pathlib.Path,
	output_path: pathlib.Path,
	result: ComposeResult,
) -> None:
	"""
	Write a manifest JSON file describing a rendered job.

	Args:
		manifest_path: Output path.
		template_path: Template the labels came from.
		output_path: Rendered PDF path.
		result: Compose result.
	"""
	data = {
		"template": str(template_path),
		"output": str(output_path),
		"rows": result.total_rows,
		"labels": result.total_labels,
		"blank_slots": result.blank_slots,
		"pages": result.pages,
		"layout": {
			"labels_per_page": result.layout,
			"gap_mm": result.gap_mm,
			"page_width_mm": result.page_width_mm,
			"page_height_mm": result.page_height_mm,
		},
		"fonts": {
			"regular": DEFAULT_FONT_REGULAR,
			"bold": DEFAULT_FONT_BOLD,
			"italic": DEFAULT_FONT_ITALIC,
			"bold_italic": DEFAULT_FONT_BOLD_ITALIC,
		},
	}
	with pathlib.Path(manifest_path).open("w", encoding="utf-8") as handle:
		json.dump(data, handle, indent=2, sort_keys=True)
