"""
Application errors.

ServiceUnavailableError: a dependency (LLM, search backend) is misconfigured,
e.g. its API key is missing. ToolExecutionError: a research tool backend failed
(HTTP error or transport failure); its message is what the user sees in the
research summary.
"""


class ServiceUnavailableError(Exception):
    """Raised when a required service (e.g. LLM, search API) is unavailable or misconfigured."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ToolExecutionError(Exception):
    """Raised when a research tool backend returns an error or cannot be reached."""

    def __init__(self, tool: str, message: str, status_code: int | None = None) -> None:
        self.tool = tool
        self.message = message
        self.status_code = status_code
        super().__init__(message)
