"""Translation of Promptopia errors into MCP protocol errors."""

from __future__ import annotations

import logging

from mcp.shared.exceptions import McpError
from mcp.types import INTERNAL_ERROR, INVALID_PARAMS, ErrorData

from promptopia.errors import ErrorKind, PromptopiaError

logger = logging.getLogger(__name__)

# JSON-RPC server-defined code used by MCP for missing resources
NOT_FOUND = -32002

ERROR_CODES: dict[ErrorKind, int] = {
    ErrorKind.VALIDATION: INVALID_PARAMS,
    ErrorKind.NOT_FOUND: NOT_FOUND,
    ErrorKind.INTERNAL: INTERNAL_ERROR,
}


def to_mcp_error(error: BaseException) -> McpError:
    """
    Map any exception to an McpError.

    Validation and not-found failures keep their message. Anything else is
    logged with its traceback and reported as an internal error.

    Args:
        error: The exception raised while handling a request

    Returns:
        McpError carrying the mapped code and message
    """
    if isinstance(error, McpError):
        return error

    if isinstance(error, PromptopiaError) and error.kind is not ErrorKind.INTERNAL:
        return McpError(ErrorData(code=ERROR_CODES[error.kind], message=str(error)))

    logger.error("Unexpected error", exc_info=error)
    return McpError(
        ErrorData(code=INTERNAL_ERROR, message=f"An unexpected error occurred: {error}")
    )
