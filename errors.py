"""
Error taxonomy for a paprikaplate run.

Every stage raises its own error kind; nothing is retried or recovered inside
the pipeline, the entry point reports the failed stage and exits.
"""


class PaprikaPlateError(Exception):
    """Base class for errors that abort a migration run."""

    stage = "migration"


class AuthError(PaprikaPlateError):
    """Sign-in was rejected or its confirmation never appeared."""

    stage = "sign-in"


class EnumerationError(PaprikaPlateError):
    """The recipe listing could not be counted or fully loaded."""

    stage = "enumeration"


class ExtractionError(PaprikaPlateError):
    """A recipe page lacked a mandatory field or its photo could not be fetched."""

    stage = "extraction"


class ElementNotFound(LookupError):
    """Raised by a page accessor when a located element is not on the page."""
