class GradeToolsError(Exception):
    """Base error for gradetools."""


class StoreError(GradeToolsError):
    """A key-value store backend could not be read or written."""
