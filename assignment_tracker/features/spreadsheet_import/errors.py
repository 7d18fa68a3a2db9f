"""
Import error taxonomy.

Row-level errors (ImportRowError subclasses) are caught by the importer and
reported as text; UploadFatal aborts the whole upload.
"""


class ImportRowError(Exception):
    """A row was skipped. str(error) is the message shown to the user."""


class MissingRequiredField(ImportRowError):
    def __init__(self, title, subject, due_date):
        self.title = title
        self.subject = subject
        self.due_date = due_date
        super().__init__(
            f'Skipping row with missing required fields: Title="{_show(title)}", '
            f'Subject="{_show(subject)}", DueDate="{_show(due_date)}"'
        )


class InvalidDate(ImportRowError):
    def __init__(self, value, title=None):
        self.value = value
        self.title = title
        if title:
            message = f'Invalid date format for assignment "{title}": {value}'
        else:
            message = f"Invalid date format: {value}"
        super().__init__(message)


class DuplicateRow(ImportRowError):
    """Informational: the row matches an existing assignment and was not created."""

    def __init__(self, title, subject):
        self.title = title
        self.subject = subject
        super().__init__(f"Skipping duplicate assignment: {title} ({subject})")


class UploadFatal(Exception):
    """The file itself could not be read; nothing was imported."""


def _show(value) -> str:
    return "" if value is None else str(value)
