"""
CLI entry points for composing and printing labels from a template.
"""

# Standard Library
import argparse
import pathlib
import sys
import time

# local repo modules
import label_composer as lcomp
import label_composer.compose
import label_composer.config
import label_composer.csv_ingest
import label_composer.document
import label_composer.errors
import label_composer.render
import label_composer.template
import label_composer.variables


PrintConfig = lcomp.config.PrintConfig
RenderConfig = lcomp.config.RenderConfig
ComposeResult = lcomp.config.ComposeResult
LabelComposerError = lcomp.errors.LabelComposerError
ValidationError = lcomp.errors.ValidationError

DEFAULT_COPIES = lcomp.config.DEFAULT_COPIES
DEFAULT_GAP_MM = lcomp.config.DEFAULT_GAP_MM
DEFAULT_LAYOUT = lcomp.config.DEFAULT_LAYOUT
LAYOUTS = lcomp.config.LAYOUTS
PREVIEW_ROW_LIMIT = lcomp.config.PREVIEW_ROW_LIMIT


#============================================
def build_print_config(args: argparse.Namespace) -> PrintConfig:
	"""
	Build print config from CLI args.

	Args:
		args: Parsed argparse namespace.

	Returns:
		PrintConfig.
	"""
	return PrintConfig(layout=args.layout, gap_mm=args.gap_mm)


#============================================
def build_render_config(args: argparse.Namespace) -> RenderConfig:
	"""
	Build render config from CLI args.

	Args:
		args: Parsed argparse namespace.

	Returns:
		RenderConfig.
	"""
	return RenderConfig(
		draw_outlines=args.draw_outlines,
		barcode_bar_width=1.0,
		quiet_zone=0.0,
		verbose=True,
	)


#============================================
def parse_set_values(entries: list[str] | None) -> dict[str, str]:
	"""
	Parse repeated name=value arguments.

	Args:
		entries: Raw "name=value" strings.

	Returns:
		Mapping of variable name to value.
	"""
	values: dict[str, str] = {}
	for entry in entries or []:
		name, separator, value = entry.partition("=")
		if not separator or not name.strip():
			raise ValidationError(f"Expected name=value, got {entry!r}.", [entry])
		values[name.strip()] = value
	return values


#============================================
def add_output_arguments(parser: argparse.ArgumentParser) -> None:
	output_group = parser.add_argument_group("Output")
	output_group.add_argument("-o", "--output", dest="output_path", required=True, help="Output PDF path.")
	output_group.add_argument("-m", "--manifest", dest="manifest_path", default=None, help="Output manifest JSON path.")

	layout_group = parser.add_argument_group("Layout")
	layout_group.add_argument("-l", "--layout", dest="layout", type=int, choices=LAYOUTS, help="Labels per page.")
	layout_group.add_argument("-g", "--gap", dest="gap_mm", type=float, help="Gap between paired labels in mm.")
	layout_group.add_argument("-d", "--draw-outlines", dest="draw_outlines", action="store_true", help="Draw label outlines.")
	layout_group.add_argument("-D", "--no-draw-outlines", dest="draw_outlines", action="store_false", help="Disable label outlines.")
	parser.set_defaults(layout=DEFAULT_LAYOUT, gap_mm=DEFAULT_GAP_MM, draw_outlines=False)


#============================================
def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
	"""
	Parse command line arguments.

	Args:
		argv: Argument list, defaults to sys.argv.

	Returns:
		Parsed argparse namespace.
	"""
	parser = argparse.ArgumentParser(description="Compose and print labels from a label template.")
	subparsers = parser.add_subparsers(dest="command", required=True)

	variables_parser = subparsers.add_parser("variables", help="List the variables a template needs.")
	variables_parser.add_argument("template", help="Template JSON file.")

	sample_parser = subparsers.add_parser("sample-csv", help="Write a sample CSV for a template.")
	sample_parser.add_argument("template", help="Template JSON file.")
	sample_parser.add_argument("-o", "--output", dest="output_path", required=True, help="Output CSV path.")

	print_parser = subparsers.add_parser("print", help="Print labels from values given on the command line.")
	print_parser.add_argument("template", help="Template JSON file.")
	print_parser.add_argument("-c", "--copies", dest="copies", type=int, default=DEFAULT_COPIES, help="Number of labels.")
	print_parser.add_argument(
		"-s",
		"--set",
		dest="values",
		action="append",
		default=[],
		metavar="NAME=VALUE",
		help="Value for a template variable; repeat for each variable.",
	)
	add_output_arguments(print_parser)

	bulk_parser = subparsers.add_parser("bulk", help="Print labels for the rows of a CSV file.")
	bulk_parser.add_argument("template", help="Template JSON file.")
	bulk_parser.add_argument("csv_path", help="CSV data file.")
	bulk_parser.add_argument("-r", "--row", dest="row", type=int, default=None, help="Print only this row (1-based).")
	bulk_parser.add_argument("-p", "--preview", dest="preview", action="store_true", help="Show the first rows before printing.")
	add_output_arguments(bulk_parser)

	args = parser.parse_args(argv)
	return args


#============================================
def print_variables(variables: list[lcomp.variables.Variable]) -> None:
	if not variables:
		print("No variables")
		return
	for variable in variables:
		print(f"{variable.name}\ttype={variable.input_type}\tformat={variable.formatter}")


#============================================
def print_preview(table: lcomp.csv_ingest.CsvTable) -> None:
	"""
	Print the first CSV rows as a tab separated table.

	Args:
		table: Parsed CSV.
	"""
	print("\t".join(table.headers))
	for cells in table.preview():
		print("\t".join(cells))
	if len(table.records) > PREVIEW_ROW_LIMIT:
		print(f"Showing first {PREVIEW_ROW_LIMIT} rows of {len(table.records)} total.")


#============================================
def render_rows(
	args: argparse.Namespace,
	document: lcomp.document.LabelDocument,
	rows: list[lcomp.variables.Row],
) -> ComposeResult:
	"""
	Compose rows, render the PDF and write the manifest.

	Args:
		args: Parsed argparse namespace.
		document: Loaded label document.
		rows: Rows to print.

	Returns:
		ComposeResult.
	"""
	print_config = build_print_config(args)
	render_config = build_render_config(args)
	print(f"Output PDF: {args.output_path}")
	print(f"Layout: {print_config.layout} per page")
	if print_config.layout == lcomp.config.LAYOUT_PAIRED:
		print(f"Gap: {print_config.gap_mm} mm")

	start_time = time.perf_counter()
	job = lcomp.compose.PrintJob(rows=rows, layout=print_config.layout, gap_mm=print_config.gap_mm)
	composed = lcomp.compose.compose_document(job, document)
	compose_end = time.perf_counter()
	print(
		"Page size: {:.2f} x {:.2f} mm".format(
			composed.page_size.width_mm,
			composed.page_size.height_mm,
		)
	)

	output_path = pathlib.Path(args.output_path)
	result = lcomp.render.render_job(composed, output_path, render_config)
	render_end = time.perf_counter()
	print(f"Rows: {result.total_rows}")
	print(f"Labels printed: {result.total_labels}")
	print(f"Blank slots: {result.blank_slots}")
	print(f"Pages written: {result.pages}")

	manifest_path = args.manifest_path
	if manifest_path is None:
		manifest_path = f"{output_path}.json"
	lcomp.render.write_manifest(
		pathlib.Path(manifest_path),
		pathlib.Path(args.template),
		output_path,
		result,
	)
	print(
		"Timing: compose={:.2f}s render={:.2f}s".format(
			compose_end - start_time,
			render_end - compose_end,
		)
	)
	print(f"Manifest written: {manifest_path}")
	return result


#============================================
def run_variables(args: argparse.Namespace) -> None:
	document = lcomp.template.load_document(pathlib.Path(args.template))
	print_variables(lcomp.variables.resolve(document.elements))


#============================================
def run_sample_csv(args: argparse.Namespace) -> None:
	"""
	Write a sample CSV for the template's variables.

	Args:
		args: Parsed argparse namespace.
	"""
	document = lcomp.template.load_document(pathlib.Path(args.template))
	variables = lcomp.variables.resolve(document.elements)
	text = lcomp.csv_ingest.generate_sample(variables)
	output_path = pathlib.Path(args.output_path)
	try:
		output_path.write_text(text + "\n", encoding="utf-8")
	except OSError as error:
		raise LabelComposerError(f"Cannot write {output_path}: {error.strerror or error}") from error
	print(f"Sample CSV written: {output_path}")


#============================================
def run_print(args: argparse.Namespace) -> ComposeResult:
	"""
	Print labels from values given on the command line.

	Args:
		args: Parsed argparse namespace.

	Returns:
		ComposeResult.
	"""
	print(f"Template: {args.template}")
	document = lcomp.template.load_document(pathlib.Path(args.template))
	variables = lcomp.variables.resolve(document.elements)
	values = parse_set_values(args.values)
	row = lcomp.variables.build_manual_row(variables, values, args.copies)
	print(f"Copies: {row.copies}")
	return render_rows(args, document, [row])


#============================================
def run_bulk(args: argparse.Namespace) -> ComposeResult:
	"""
	Print labels for the rows of a CSV file.

	Args:
		args: Parsed argparse namespace.

	Returns:
		ComposeResult.
	"""
	print(f"Template: {args.template}")
	print(f"CSV: {args.csv_path}")
	document = lcomp.template.load_document(pathlib.Path(args.template))
	variables = lcomp.variables.resolve(document.elements)
	text = lcomp.csv_ingest.read_csv_file(pathlib.Path(args.csv_path))
	table = lcomp.csv_ingest.parse_csv(text, variables)
	print(table.status_message())
	if args.preview:
		print_preview(table)

	if args.row is None:
		rows = lcomp.csv_ingest.select_rows(table, variables, lcomp.csv_ingest.SELECT_ALL)
	else:
		rows = lcomp.csv_ingest.select_rows(
			table,
			variables,
			lcomp.csv_ingest.SELECT_ONE,
			args.row - 1,
		)
	return render_rows(args, document, rows)


COMMANDS = {
	"variables": run_variables,
	"sample-csv": run_sample_csv,
	"print": run_print,
	"bulk": run_bulk,
}


#============================================
def main(argv: list[str] | None = None) -> None:
	"""
	Main entry point.
	"""
	args = parse_args(argv)
	try:
		COMMANDS[args.command](args)
	except LabelComposerError as error:
		print(f"Error: {error.message}", file=sys.stderr)
		fields = getattr(error, "fields", None)
		if fields:
			print(f"Check: {', '.join(fields)}", file=sys.stderr)
		raise SystemExit(1) from error
