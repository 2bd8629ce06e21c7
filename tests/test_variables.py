import pytest

import label_composer.document
import label_composer.errors
import label_composer.variables


#============================================
def test_resolve_collects_bound_names(product_document) -> None:
	"""
	Variable text and bound barcodes each contribute their variable name.
	"""
	variables = label_composer.variables.resolve(product_document.elements)
	assert [variable.name for variable in variables] == ["name", "price", "sku"]
	price = variables[1]
	assert price.formatter == "currency"
	assert variables[2].input_type == "text"


#============================================
def test_resolve_ignores_static_and_fixed_values() -> None:
	"""
	Static text and barcodes with a fixed value need no data.
	"""
	document = label_composer.document.LabelDocument()
	document.add_element("text")
	document.add_element("barcode")
	document.add_element("qrcode")
	document.add_element("circle")
	assert label_composer.variables.resolve(document.elements) == []


#============================================
def test_resolve_variable_text_sets_metadata() -> None:
	"""
	Variable text defines the type and formatter even after a barcode used the name.
	"""
	document = label_composer.document.LabelDocument()
	barcode = document.add_element("qrcode")
	document.update_meta(barcode.id, {"is_variable_value": True, "var_name": "code"})
	text = document.add_element("var-text")
	document.update_meta(text.id, {"var_name": "code", "input_type": "number", "formatter": "uppercase"})
	other = document.add_element("var-text")
	document.update_meta(other.id, {"var_name": "lot"})

	variables = label_composer.variables.resolve(document.elements)
	assert [variable.name for variable in variables] == ["code", "lot"]
	assert variables[0].input_type == "number"
	assert variables[0].formatter == "uppercase"


#============================================
def test_build_manual_row_formats_values(product_document) -> None:
	"""
	Manual values pass through each variable's formatter.
	"""
	variables = label_composer.variables.resolve(product_document.elements)
	row = label_composer.variables.build_manual_row(
		variables,
		{"name": "Widget", "price": "1500", "sku": "W-1"},
		"3",
	)
	assert row.values == {"name": "Widget", "price": "1,500", "sku": "W-1"}
	assert row.as_dict()["_copies"] == 3


#============================================
def test_build_manual_row_reports_missing_fields(product_document) -> None:
	"""
	Blank values are rejected with the names of the empty fields.
	"""
	variables = label_composer.variables.resolve(product_document.elements)
	with pytest.raises(label_composer.errors.ValidationError) as info:
		label_composer.variables.build_manual_row(variables, {"name": "Widget", "price": "  "})
	assert info.value.fields == ["price", "sku"]


#============================================
@pytest.mark.parametrize("copies", [0, -2, "none"])
def test_build_manual_row_rejects_bad_copies(copies) -> None:
	"""
	Copies must be a whole number of at least one.
	"""
	variables = [label_composer.variables.Variable("name")]
	with pytest.raises(label_composer.errors.ValidationError) as info:
		label_composer.variables.build_manual_row(variables, {"name": "Widget"}, copies)
	assert info.value.fields == ["copies"]
