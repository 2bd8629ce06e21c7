import json
import pathlib

import fitz
import PIL.Image
import pypdf
import pytest

import label_composer.compose
import label_composer.config
import label_composer.render
import label_composer.variables


DPI = 150
INK_THRESHOLD = 240
Row = label_composer.variables.Row
mm_to_points = label_composer.config.mm_to_points


#============================================
def build_render_config(draw_outlines: bool = False) -> label_composer.config.RenderConfig:
	"""
	Build a quiet RenderConfig for tests.
	"""
	return label_composer.config.RenderConfig(
		draw_outlines=draw_outlines,
		barcode_bar_width=1.0,
		quiet_zone=0.0,
		verbose=False,
	)


#============================================
def render_product_job(
	document,
	output_path: pathlib.Path,
	layout: int,
	draw_outlines: bool = False,
) -> label_composer.config.ComposeResult:
	"""
	Compose and render two product rows.
	"""
	rows = [
		Row({"name": "Widget", "price": "1,500", "sku": "W-1"}, 3),
		Row({"name": "Bolt", "price": "2", "sku": "B-2"}, 1),
	]
	job = label_composer.compose.PrintJob(rows=rows, layout=layout, gap_mm=2.0)
	composed = label_composer.compose.compose_document(job, document)
	return label_composer.render.render_job(composed, output_path, build_render_config(draw_outlines))


#============================================
def _render_pdf_page(path: pathlib.Path, index: int) -> PIL.Image.Image:
	"""
	Render one PDF page to a grayscale image.

	Args:
		path: PDF path.
		index: Page index.

	Returns:
		PIL image.
	"""
	document = fitz.open(path)
	page = document[index]
	scale = DPI / 72.0
	pixmap = page.get_pixmap(matrix=fitz.Matrix(scale, scale), alpha=False)
	image = PIL.Image.frombytes("RGB", [pixmap.width, pixmap.height], pixmap.samples)
	document.close()
	return image.convert("L")


#============================================
def _count_ink_ratio(gray: PIL.Image.Image) -> float:
	pixels = list(gray.getdata())
	if not pixels:
		return 0.0
	ink = sum(1 for value in pixels if value < INK_THRESHOLD)
	return ink / len(pixels)


#============================================
def mm_to_image_px(value: float) -> int:
	return int(round(mm_to_points(value) * DPI / 72.0))


#============================================
def test_paired_pdf_pages_and_size(tmp_path, product_document) -> None:
	"""
	Every page of a 2-up job has the page size of two labels plus the gap.
	"""
	output_path = tmp_path / "labels.pdf"
	result = render_product_job(product_document, output_path, 2)
	assert result.pages == 3
	assert result.total_labels == 4
	assert result.blank_slots == 1
	reader = pypdf.PdfReader(str(output_path))
	assert len(reader.pages) == 3
	for page in reader.pages:
		assert float(page.mediabox.width) == pytest.approx(mm_to_points(102.0), abs=0.01)
		assert float(page.mediabox.height) == pytest.approx(mm_to_points(25.0), abs=0.01)


#============================================
def test_single_pdf_one_page_per_label(tmp_path, product_document) -> None:
	"""
	A 1-up job writes one label-sized page per copy.
	"""
	output_path = tmp_path / "single" / "labels.pdf"
	result = render_product_job(product_document, output_path, 1, draw_outlines=True)
	reader = pypdf.PdfReader(str(output_path))
	assert len(reader.pages) == 4
	assert result.blank_slots == 0
	assert float(reader.pages[0].mediabox.width) == pytest.approx(mm_to_points(50.0), abs=0.01)


#============================================
def test_rendered_ink_stays_out_of_gap(tmp_path, product_document) -> None:
	"""
	Smoke test: both slots of a full page carry ink, the gap strip none.
	"""
	output_path = tmp_path / "labels.pdf"
	render_product_job(product_document, output_path, 2)
	gray = _render_pdf_page(output_path, 0)
	height = gray.height
	left = gray.crop((0, 0, mm_to_image_px(50.0), height))
	gap = gray.crop((mm_to_image_px(50.0) + 1, 0, mm_to_image_px(52.0) - 1, height))
	right = gray.crop((mm_to_image_px(52.0), 0, gray.width, height))
	assert _count_ink_ratio(left) > 0.0
	assert _count_ink_ratio(right) > 0.0
	assert _count_ink_ratio(gap) == 0.0

	# the padded page holds one label and a blank right slot
	padded = _render_pdf_page(output_path, 1)
	blank = padded.crop((mm_to_image_px(52.0), 0, padded.width, padded.height))
	assert _count_ink_ratio(blank) == 0.0


#============================================
def test_parse_hex_color_and_font_names() -> None:
	"""
	Colors parse in long and short form; fonts map to built-in faces.
	"""
	parse = label_composer.render.parse_hex_color
	assert parse("#ff0000") == (1.0, 0.0, 0.0)
	assert parse("#0f0") == (0.0, 1.0, 0.0)
	assert parse("transparent") == (0.0, 0.0, 0.0)
	assert label_composer.render.map_font_name("Inter", "bold", "normal") == "Helvetica-Bold"
	assert label_composer.render.map_font_name("Inconsolata", "normal", "italic") == "Courier-Oblique"
	assert label_composer.render.map_font_name("Merriweather", "normal", "normal") == "Times-Roman"


#============================================
def test_write_manifest(tmp_path, product_document) -> None:
	"""
	The manifest records counts and the page layout.
	"""
	output_path = tmp_path / "labels.pdf"
	result = render_product_job(product_document, output_path, 2)
	manifest_path = tmp_path / "labels.json"
	label_composer.render.write_manifest(manifest_path, tmp_path / "product.json", output_path, result)
	data = json.loads(manifest_path.read_text())
	assert data["pages"] == 3
	assert data["blank_slots"] == 1
	assert data["layout"]["labels_per_page"] == 2
	assert data["layout"]["page_width_mm"] == pytest.approx(102.0)


#============================================
def test_print_progress_line(capsys) -> None:
	"""
	The progress line shows pages done and distinct labels rendered.
	"""
	label_composer.render.print_progress("Pages", 5, 10, 2)
	out = capsys.readouterr().out
	assert out.endswith("\r")
	assert "page 5 of 10, 2 distinct label(s)" in out
	label_composer.render.print_progress("Pages", 0, 0)
	assert capsys.readouterr().out == ""
