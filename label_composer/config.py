"""
Shared configuration and constants.
"""

import dataclasses


# CSS reference pixels: 96 per inch
PX_PER_MM = 96.0 / 25.4
POINTS_PER_MM = 72.0 / 25.4
POINTS_PER_PX = 72.0 / 96.0

DEFAULT_CANVAS_WIDTH_MM = 50.0
DEFAULT_CANVAS_HEIGHT_MM = 25.0

SNAP_THRESHOLD_PX = 3.0
MIN_ELEMENT_SIZE_PX = 10.0
NUDGE_STEP_MM = 1.0
FINE_NUDGE_STEP_MM = 0.1

LAYOUT_SINGLE = 1
LAYOUT_PAIRED = 2
LAYOUTS = (LAYOUT_SINGLE, LAYOUT_PAIRED)
DEFAULT_LAYOUT = LAYOUT_SINGLE
DEFAULT_GAP_MM = 2.0
DEFAULT_COPIES = 1
COPIES_COLUMNS = ("copies", "Copies")
PREVIEW_ROW_LIMIT = 5
SAMPLE_CSV_VALUE = "SampleData"

INPUT_TYPES = ("text", "number", "date", "time", "color")
DEFAULT_INPUT_TYPE = "text"
DEFAULT_FORMATTER = "none"

FONTS = (
	"Inter", "Roboto", "Open Sans", "Lato", "Montserrat",
	"Oswald", "Source Sans 3", "Slabo 27px", "Raleway", "PT Sans",
	"Josefin Sans", "Nunito", "Ubuntu", "Playfair Display", "Rubik",
	"Merriweather", "Noto Sans", "Fira Sans", "Work Sans", "Quicksand",
	"Karla", "Inconsolata", "Cabin", "Dancing Script", "Pacifico",
)
MONOSPACE_FONTS = ("Inconsolata",)
SERIF_FONTS = ("Merriweather", "Playfair Display", "Slabo 27px")
DEFAULT_FONT_FAMILY = "Inter"
DEFAULT_FONT_SIZE = 10.0
DEFAULT_TEXT_LINE_HEIGHT = 1.15

DEFAULT_FONT_REGULAR = "Helvetica"
DEFAULT_FONT_BOLD = "Helvetica-Bold"
DEFAULT_FONT_ITALIC = "Helvetica-Oblique"
DEFAULT_FONT_BOLD_ITALIC = "Helvetica-BoldOblique"

TRANSPARENT = "transparent"
DEFAULT_STROKE_COLOR = "#000000"
DEFAULT_STROKE_THICKNESS = 1.0
DEFAULT_SYMBOL_VALUE = "123456789"
SYMBOL_PLACEHOLDER_VALUE = "1234"
BARCODE_BAR_HEIGHT_RATIO = 0.75

PROGRESS_BAR_WIDTH = 20
PROGRESS_UPDATE_EVERY = 10


@dataclasses.dataclass
class PrintConfig:
	layout: int
	gap_mm: float


@dataclasses.dataclass
class RenderConfig:
	draw_outlines: bool
	barcode_bar_width: float
	quiet_zone: float
	verbose: bool = False


@dataclasses.dataclass
class ComposeResult:
	total_rows: int
	total_labels: int
	blank_slots: int
	pages: int
	layout: int
	gap_mm: float
	page_width_mm: float
	page_height_mm: float


#============================================
def mm_to_points(value: float) -> float:
	"""
	Convert millimeters to PDF points.

	Args:
		value: Millimeter value.

	Returns:
		Points value.
	"""
	return value * POINTS_PER_MM
