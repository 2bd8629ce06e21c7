"""
Error types raised by the label composer.

Each error carries a message fit to show the user as-is. Errors are raised
where they are detected and recovered at the command line boundary.
"""


class LabelComposerError(Exception):
	"""
	Base class for all label composer errors.
	"""

	def __init__(self, message: str) -> None:
		super().__init__(message)
		self.message = message


class EmptyInputError(LabelComposerError):
	"""
	Raised when an uploaded CSV contains no text.
	"""


class MissingDataRowsError(LabelComposerError):
	"""
	Raised when a CSV has no header row or no data rows.
	"""


class InvalidFormatError(LabelComposerError):
	"""
	Raised when a template document is malformed.
	"""


class ValidationError(LabelComposerError):
	"""
	Raised when user input fails validation.

	The names of the offending inputs are kept in `fields` so a front end
	can flag each of them.
	"""

	def __init__(self, message: str, fields: list[str] | None = None) -> None:
		super().__init__(message)
		self.fields = list(fields or [])
