#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Custom exceptions for the mdpipe library.

This module defines specialized exception classes for the error conditions
that can occur while parsing markdown into a document tree and serializing
it back. Malformed markdown is never an error; these exceptions signal
internal failures and invalid configuration.

Exception Hierarchy
-------------------
- MdPipeError (base exception)

  - ValidationError (option validation)

  - ParseError (parse pipeline failures, carries an input preview)

  - SerializeError (serialize pipeline failures, carries size diagnostics)

  - InvariantViolationError (unknown node kinds, malformed trees)

  - OffloadError (background worker failures, handled internally)

"""

from typing import Any


class MdPipeError(Exception):
    """Base exception class for all mdpipe-specific errors.

    Catching this will catch every library-specific error.

    Parameters
    ----------
    message : str
        Human-readable description of the error
    original_error : Exception, optional
        The original exception that caused this error, if applicable

    Attributes
    ----------
    message : str
        The error message
    original_error : Exception or None
        The wrapped original exception, if any

    """

    def __init__(self, message: str, original_error: Exception | None = None):
        """Initialize the error with a message and optional original exception."""
        super().__init__(message)
        self.message = message
        self.original_error = original_error


class ValidationError(MdPipeError):
    """Exception raised for invalid pipeline options.

    Parameters
    ----------
    message : str
        Description of the validation error
    parameter_name : str, optional
        Name of the invalid parameter
    parameter_value : any, optional
        The invalid value that was provided
    original_error : Exception, optional
        The original exception that caused this error

    """

    def __init__(
        self,
        message: str,
        parameter_name: str | None = None,
        parameter_value: Any = None,
        original_error: Exception | None = None,
    ):
        """Initialize the validation error with parameter details."""
        super().__init__(message, original_error=original_error)
        self.parameter_name = parameter_name
        self.parameter_value = parameter_value


class ParseError(MdPipeError):
    """Exception raised when the parse pipeline fails internally.

    The markdown grammar is permissive, so this is only raised for internal
    failures. The message includes a bounded preview of the offending input
    for diagnostics.

    Parameters
    ----------
    message : str
        Description of the failure
    input_preview : str, default ""
        Leading portion of the source text
    input_length : int, default 0
        Total length of the source text
    original_error : Exception, optional
        The exception raised inside the pipeline

    """

    def __init__(
        self,
        message: str,
        input_preview: str = "",
        input_length: int = 0,
        original_error: Exception | None = None,
    ):
        """Initialize the parse error with input diagnostics."""
        super().__init__(message, original_error=original_error)
        self.input_preview = input_preview
        self.input_length = input_length


class SerializeError(MdPipeError):
    """Exception raised when the serialize pipeline fails internally.

    Parameters
    ----------
    message : str
        Description of the failure
    node_count : int, default 0
        Total number of nodes in the document tree
    block_count : int, default 0
        Number of top-level blocks in the document tree
    original_error : Exception, optional
        The exception raised inside the pipeline

    """

    def __init__(
        self,
        message: str,
        node_count: int = 0,
        block_count: int = 0,
        original_error: Exception | None = None,
    ):
        """Initialize the serialize error with document size diagnostics."""
        super().__init__(message, original_error=original_error)
        self.node_count = node_count
        self.block_count = block_count


class InvariantViolationError(MdPipeError):
    """Exception raised when a tree violates a structural invariant.

    Raised for node kinds a converter does not recognize (strict mode only)
    and for block/phrasing containment violations.

    Parameters
    ----------
    message : str
        Description of the violation
    node_kind : str, optional
        Name of the offending node kind

    """

    def __init__(self, message: str, node_kind: str | None = None, original_error: Exception | None = None):
        """Initialize the invariant error with the offending node kind."""
        super().__init__(message, original_error=original_error)
        self.node_kind = node_kind


class OffloadError(MdPipeError):
    """Exception raised when the background parse worker fails.

    The offload adapter handles this internally by falling back to
    synchronous parsing; it is not surfaced to callers.

    Parameters
    ----------
    message : str
        Description of the failure
    request_id : int, optional
        Correlation id of the failed request

    """

    def __init__(self, message: str, request_id: int | None = None, original_error: Exception | None = None):
        """Initialize the offload error with the request id."""
        super().__init__(message, original_error=original_error)
        self.request_id = request_id
