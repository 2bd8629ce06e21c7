import pytest

import label_composer.document
import label_composer.errors
import label_composer.properties


#============================================
def test_selection_rebuilds_fields() -> None:
	"""
	Selecting an element rebuilds the panel with its type fields.
	"""
	document = label_composer.document.LabelDocument()
	panel = label_composer.properties.PropertyPanel(document)
	barcode = document.add_element("barcode")
	assert panel.element_id == barcode.id
	assert panel.fields == ["x", "y", "width", "height", "value_source", "value", "display_value"]
	assert panel.values["width"] == "30.00"
	assert panel.values["value_source"] == "fixed"

	panel.edit("value_source", "variable")
	assert barcode.is_variable_value is True
	assert "var_name" in panel.fields

	document.select(None)
	assert panel.fields == []


#============================================
def test_geometry_refresh_skips_focused_field() -> None:
	"""
	Dragging refreshes geometry values except the one being typed in.
	"""
	document = label_composer.document.LabelDocument()
	panel = label_composer.properties.PropertyPanel(document)
	square = document.add_element("square")
	rebuilds = panel.rebuild_count
	panel.focus("x")
	panel.values["x"] = "7."
	document.move_element(square.id, 10.0, 10.0)
	assert panel.values["x"] == "7."
	assert panel.values["y"] == f"{square.y:.2f}"
	assert panel.rebuild_count == rebuilds

	panel.blur()
	document.move_element(square.id, 1.0, 0.0)
	assert panel.values["x"] == f"{square.x:.2f}"


#============================================
def test_edit_converts_numbers() -> None:
	"""
	Number fields are parsed; bad input raises and leaves the element alone.
	"""
	document = label_composer.document.LabelDocument()
	panel = label_composer.properties.PropertyPanel(document)
	text = document.add_element("var-text")
	panel.edit("font_size", "14")
	assert text.font_size == 14.0
	panel.edit("formatter", "uppercase")
	assert text.formatter == "uppercase"
	with pytest.raises(label_composer.errors.ValidationError):
		panel.edit("width", "wide")
	assert text.width == 20.0
	with pytest.raises(label_composer.errors.ValidationError):
		panel.edit("stroke_color", "#000")


#============================================
def test_selection_fields_only_accept_listed_values() -> None:
	"""
	Font, alignment, input type and formatter edits must use a listed value.
	"""
	document = label_composer.document.LabelDocument()
	panel = label_composer.properties.PropertyPanel(document)
	text = document.add_element("var-text")
	panel.edit("font_family", "Inconsolata")
	panel.edit("input_type", "date")
	assert (text.font_family, text.input_type) == ("Inconsolata", "date")
	with pytest.raises(label_composer.errors.ValidationError):
		panel.edit("formatter", "rot13")
	with pytest.raises(label_composer.errors.ValidationError):
		panel.edit("text_align", "justify")
	assert text.formatter == "none"
	assert label_composer.properties.field_choices("text") is None
	assert "currency" in label_composer.properties.field_choices("formatter")


#============================================
@pytest.mark.parametrize("raw_value", ["nan", "inf", "-Infinity"])
def test_edit_rejects_non_finite_numbers(raw_value: str) -> None:
	"""
	Geometry edits must be finite numbers.
	"""
	document = label_composer.document.LabelDocument()
	panel = label_composer.properties.PropertyPanel(document)
	square = document.add_element("square")
	with pytest.raises(label_composer.errors.ValidationError):
		panel.edit("x", raw_value)
	assert square.x == 5.0
