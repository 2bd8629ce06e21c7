import json
import pathlib

import pypdf
import pytest

import label_composer.cli
import label_composer.errors
import label_composer.template


#============================================
def write_template(tmp_path: pathlib.Path, document) -> pathlib.Path:
	return label_composer.template.export_template(document, tmp_path / "product.json")


#============================================
def test_parse_args_defaults() -> None:
	"""
	Print options fall back to one label per page and a 2 mm gap.
	"""
	args = label_composer.cli.parse_args(["print", "t.json", "-o", "out.pdf", "-s", "name=Widget"])
	config = label_composer.cli.build_print_config(args)
	assert (config.layout, config.gap_mm) == (1, 2.0)
	assert args.copies == 1
	assert args.values == ["name=Widget"]
	assert label_composer.cli.build_render_config(args).draw_outlines is False


#============================================
def test_parse_set_values() -> None:
	values = label_composer.cli.parse_set_values(["name=Widget", "note=a=b"])
	assert values == {"name": "Widget", "note": "a=b"}
	with pytest.raises(label_composer.errors.ValidationError):
		label_composer.cli.parse_set_values(["missing-separator"])


#============================================
def test_variables_command(tmp_path, product_document, capsys) -> None:
	"""
	The variables command lists each variable with its type and formatter.
	"""
	template_path = write_template(tmp_path, product_document)
	label_composer.cli.main(["variables", str(template_path)])
	lines = capsys.readouterr().out.splitlines()
	assert lines == [
		"name\ttype=text\tformat=none",
		"price\ttype=text\tformat=currency",
		"sku\ttype=text\tformat=none",
	]


#============================================
def test_sample_csv_command(tmp_path, product_document) -> None:
	template_path = write_template(tmp_path, product_document)
	csv_path = tmp_path / "sample.csv"
	label_composer.cli.main(["sample-csv", str(template_path), "-o", str(csv_path)])
	assert csv_path.read_text().splitlines() == [
		"copies,name,price,sku",
		"1,SampleData,SampleData,SampleData",
	]


#============================================
def test_print_command_writes_pdf_and_manifest(tmp_path, product_document) -> None:
	"""
	Manual printing writes the PDF and a manifest next to it.
	"""
	template_path = write_template(tmp_path, product_document)
	output_path = tmp_path / "manual.pdf"
	label_composer.cli.main([
		"print", str(template_path), "-o", str(output_path), "-c", "3", "-l", "2",
		"-s", "name=Widget", "-s", "price=1500", "-s", "sku=W-1",
	])
	assert len(pypdf.PdfReader(str(output_path)).pages) == 2
	manifest = json.loads(pathlib.Path(f"{output_path}.json").read_text())
	assert manifest["labels"] == 3
	assert manifest["rows"] == 1


#============================================
def test_bulk_command_selected_row(tmp_path, product_document, capsys) -> None:
	"""
	Bulk printing one row uses that row's copy count.
	"""
	template_path = write_template(tmp_path, product_document)
	csv_path = tmp_path / "data.csv"
	csv_path.write_text("copies,name,price,sku\n2,Widget,10,W-1\n5,Bolt,2,B-2\n")
	output_path = tmp_path / "bulk.pdf"
	manifest_path = tmp_path / "bulk-manifest.json"
	label_composer.cli.main([
		"bulk", str(template_path), str(csv_path), "-o", str(output_path),
		"-r", "2", "-p", "-m", str(manifest_path),
	])
	out = capsys.readouterr().out
	assert "Loaded 2 row(s) successfully." in out
	assert len(pypdf.PdfReader(str(output_path)).pages) == 5
	assert json.loads(manifest_path.read_text())["labels"] == 5


#============================================
def test_errors_exit_with_message(tmp_path, product_document, capsys) -> None:
	"""
	Missing values stop the command with status 1 and name the fields.
	"""
	template_path = write_template(tmp_path, product_document)
	with pytest.raises(SystemExit) as info:
		label_composer.cli.main([
			"print", str(template_path), "-o", str(tmp_path / "x.pdf"), "-s", "name=Widget",
		])
	assert info.value.code == 1
	err = capsys.readouterr().err
	assert "Please fill in all variable fields before printing." in err
	assert "price, sku" in err
	assert not (tmp_path / "x.pdf").exists()


#============================================
def test_bulk_empty_csv(tmp_path, product_document, capsys) -> None:
	template_path = write_template(tmp_path, product_document)
	csv_path = tmp_path / "empty.csv"
	csv_path.write_text("")
	with pytest.raises(SystemExit):
		label_composer.cli.main(["bulk", str(template_path), str(csv_path), "-o", str(tmp_path / "x.pdf")])
	assert "The uploaded CSV is empty." in capsys.readouterr().err


#============================================
def test_bulk_csv_with_byte_order_mark(tmp_path, product_document) -> None:
	"""
	Copies are honoured when the CSV starts with a byte order mark.
	"""
	template_path = write_template(tmp_path, product_document)
	csv_path = tmp_path / "excel.csv"
	csv_path.write_bytes("copies,name,price,sku\n3,X,1,S-1\n".encode("utf-8-sig"))
	output_path = tmp_path / "bom.pdf"
	label_composer.cli.main(["bulk", str(template_path), str(csv_path), "-o", str(output_path)])
	manifest = json.loads(pathlib.Path(f"{output_path}.json").read_text())
	assert manifest["labels"] == 3
	assert len(pypdf.PdfReader(str(output_path)).pages) == 3


#============================================
def test_missing_files_exit_with_message(tmp_path, product_document, capsys) -> None:
	"""
	A missing CSV or template ends the run with status 1 instead of a traceback.
	"""
	template_path = write_template(tmp_path, product_document)
	with pytest.raises(SystemExit) as info:
		label_composer.cli.main([
			"bulk", str(template_path), str(tmp_path / "nope.csv"), "-o", str(tmp_path / "x.pdf"),
		])
	assert info.value.code == 1
	assert "Cannot read CSV" in capsys.readouterr().err

	with pytest.raises(SystemExit) as info:
		label_composer.cli.main(["variables", str(tmp_path / "nope.json")])
	assert info.value.code == 1
	assert "Cannot read template" in capsys.readouterr().err
