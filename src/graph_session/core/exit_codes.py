"""Standard exit codes for graph-session.

Exit codes follow Unix conventions.
"""

from enum import IntEnum


class ExitCode(IntEnum):
    """Exit codes for graph-session commands."""

    SUCCESS = 0
    GENERAL_ERROR = 1
    USAGE_ERROR = 2
    INPUT_ERROR = 3
    QUERY_ERROR = 4
    NETWORK_ERROR = 5
    SERVICE_UNAVAILABLE = 6
    CONFIG_ERROR = 7
