"""Error handling implementation for the Bencodex bridge."""

import logging
from typing import Dict, List, Optional, Union

from .decoder import BencodexDecoder
from .json_bridge import JSONBridge
from .types import (
    DecodeError,
    DecodeErrorReason,
    DecodeOptions,
    ErrorResponse,
    ErrorType,
    JsonDecodeError,
    JsonDecodeErrorReason,
    ValidationError,
    ValidationResult,
)

EXIT_SUCCESS = 0
EXIT_USAGE_ERROR = 2
EXIT_DECODE_ERROR = 3
EXIT_JSON_ERROR = 4
EXIT_IO_ERROR = 5

EXIT_CODES: Dict[ErrorType, int] = {
    ErrorType.USAGE: EXIT_USAGE_ERROR,
    ErrorType.DECODE: EXIT_DECODE_ERROR,
    ErrorType.JSON_SYNTAX: EXIT_JSON_ERROR,
    ErrorType.JSON_STRUCTURE: EXIT_JSON_ERROR,
    ErrorType.IO: EXIT_IO_ERROR,
}


class ErrorHandler:
    """
    Validates command-line inputs and turns failures into exit statuses.

    The codec itself never recovers from an error: the first fault aborts
    the operation. This class only decides how that fault is reported.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        """
        Initialize the error handler.

        Args:
            logger: Optional logger instance for error reporting
        """
        self.logger = logger or logging.getLogger(__name__)

    def validate_input(self, data: Union[bytes, bytearray, memoryview],
                       options: Optional[DecodeOptions] = None) -> ValidationResult:
        """
        Validate Bencodex bytes.

        Args:
            data: Bytes to validate
            options: Decoding options to validate against

        Returns:
            ValidationResult; trailing bytes after the value are a warning
        """
        errors: List[ValidationError] = []
        warnings: List[str] = []

        if not data:
            errors.append(ValidationError(
                type=ErrorType.DECODE,
                message="Input is empty",
                location="offset 0"
            ))
            return ValidationResult(is_valid=False, errors=errors, warnings=warnings)

        try:
            result = BencodexDecoder(options, self.logger).decode_from(data)
        except DecodeError as e:
            errors.append(ValidationError(
                type=ErrorType.DECODE,
                message=str(e),
                location=self._offset_location(e)
            ))
            return ValidationResult(is_valid=False, errors=errors, warnings=warnings)

        trailing = len(data) - result.consumed
        if trailing:
            warnings.append(f"{trailing} trailing bytes after the value at offset {result.consumed}")

        return ValidationResult(
            is_valid=True,
            errors=errors,
            warnings=warnings
        )

    def validate_json_input(self, text: Union[str, bytes]) -> ValidationResult:
        """
        Validate JSON text against the Bencodex JSON representation.

        Args:
            text: JSON text to validate

        Returns:
            ValidationResult with validation details
        """
        try:
            JSONBridge(logger=self.logger).from_json_string(text)
        except JsonDecodeError as e:
            return ValidationResult(
                is_valid=False,
                errors=[ValidationError(
                    type=self._json_error_type(e),
                    message=str(e),
                    location=e.location
                )],
                warnings=[]
            )
        return ValidationResult(is_valid=True, errors=[], warnings=[])

    def handle_error(self, error: Exception) -> ErrorResponse:
        """
        Map an exception to the response reported by the CLI.

        Args:
            error: Exception raised while processing input

        Returns:
            ErrorResponse with exit status and message

        Raises:
            Exception: ``error`` itself when it is not an input or I/O failure
        """
        if isinstance(error, DecodeError):
            response = ErrorResponse(
                error_type=ErrorType.DECODE,
                exit_code=EXIT_CODES[ErrorType.DECODE],
                message=f"Failed to decode Bencodex input: {error}",
                location=self._offset_location(error)
            )
        elif isinstance(error, JsonDecodeError):
            error_type = self._json_error_type(error)
            response = ErrorResponse(
                error_type=error_type,
                exit_code=EXIT_CODES[error_type],
                message=f"Failed to read JSON input: {error}",
                location=error.location
            )
        elif isinstance(error, OSError):
            response = ErrorResponse(
                error_type=ErrorType.IO,
                exit_code=EXIT_CODES[ErrorType.IO],
                message=f"I/O error: {error}",
                location=getattr(error, "filename", None)
            )
        else:
            raise error

        self.logger.error(f"Processing error: {response.error_type.value} - {error}")
        return response

    @staticmethod
    def _json_error_type(error: JsonDecodeError) -> ErrorType:
        if error.reason == JsonDecodeErrorReason.INVALID_JSON_STRING:
            return ErrorType.JSON_SYNTAX
        return ErrorType.JSON_STRUCTURE

    @staticmethod
    def _offset_location(error: DecodeError) -> Optional[str]:
        if error.offset is None:
            return None
        if error.reason == DecodeErrorReason.UNEXPECTED_TOKEN:
            return f"offset {error.offset} (token {bytes([error.token])!r})"
        return f"offset {error.offset}"
