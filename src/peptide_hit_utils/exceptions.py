"""Custom exceptions classifying why a processing run was aborted."""


class CustomError(Exception):
    """Base class for errors that abort a processing run."""

    _error_code = ""
    _msg = ""
    _detail_msg = ""
    _user_msg = ""

    @property
    def error_code(self):
        return self._error_code

    @property
    def msg(self):
        return self._msg

    @property
    def detail_msg(self):
        return self._detail_msg

    def __init__(self, msg: str = "", detail_msg: str = ""):
        self._user_msg = msg
        if detail_msg:
            self._detail_msg = detail_msg

        super().__init__(self._msg)

    def __str__(self):
        text = f"{self._error_code}: {self._msg}"
        if self._user_msg:
            text += f"\n'{self._user_msg}'"
        if self._detail_msg:
            text += f"\n{self._detail_msg}"
        return text


class InputReadError(CustomError):
    """Raise when the input file cannot be opened or read."""

    _error_code = "ERROR_READING_INPUT_FILE"

    _msg = "Error reading the input file."


class HeaderParseError(InputReadError):
    """Raise when the header line is missing or lacks a required column."""

    _error_code = "ERROR_PARSING_HEADER"

    _msg = "The input file header could not be parsed."


class OutputCreationError(CustomError):
    """Raise when an output file cannot be created or written."""

    _error_code = "ERROR_CREATING_OUTPUT_FILES"

    _msg = "Error creating the output files."


class ModificationDefinitionError(CustomError):
    """Raise when a modification definition is malformed."""

    _error_code = "ERROR_READING_MOD_DEFINITIONS"

    _msg = "Invalid modification definition."
