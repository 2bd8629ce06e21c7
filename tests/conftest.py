"""
Pytest configuration for local imports and shared label fixtures.
"""

# Standard Library
import os
import sys

# PIP3 modules
import pytest

#============================================


def _ensure_repo_on_path() -> None:
	"""
	Ensure the repository root is on sys.path so label_composer imports.
	"""
	repo_root = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
	if repo_root not in sys.path:
		sys.path.insert(0, repo_root)


_ensure_repo_on_path()

import label_composer.document  # noqa: E402


#============================================
@pytest.fixture
def product_document() -> "label_composer.document.LabelDocument":
	"""
	A 50x25 mm label with a title, a name field, a price field and a barcode.
	"""
	document = label_composer.document.LabelDocument(50, 25)
	title = document.add_element("text")
	document.update_meta(title.id, {"text": "ACME", "x": 2.0, "y": 1.0})
	name = document.add_element("var-text")
	document.update_meta(name.id, {"var_name": "name", "x": 2.0, "y": 7.0})
	price = document.add_element("var-text")
	document.update_meta(price.id, {"var_name": "price", "formatter": "currency", "x": 2.0, "y": 13.0})
	barcode = document.add_element("barcode")
	document.update_meta(
		barcode.id,
		{"is_variable_value": True, "var_name": "sku", "x": 25.0, "y": 12.0, "width": 22.0},
	)
	document.select(None)
	return document
