"""Response models for graph-session.

Pydantic models for the execution responses a transport hands back,
including the execution plan description attached to profiled queries.
"""

from __future__ import annotations

from enum import IntEnum

from pydantic import BaseModel, ConfigDict, field_validator

from graph_session.core.values import WireValue

DEFAULT_PORT = 9669


class ErrorCode(IntEnum):
    """Server error codes this layer makes decisions on."""

    SUCCEEDED = 0
    E_DISCONNECTED = -1
    E_FAIL_TO_CONNECT = -2
    E_RPC_FAILURE = -3
    E_BAD_USERNAME_PASSWORD = -1001
    E_SESSION_INVALID = -1002
    E_SESSION_TIMEOUT = -1003
    E_SYNTAX_ERROR = -1004
    E_EXECUTION_ERROR = -1005
    E_STATEMENT_EMPTY = -1006
    E_SEMANTIC_ERROR = -1009


SESSION_ERROR_CODES = frozenset(
    {ErrorCode.E_SESSION_INVALID, ErrorCode.E_SESSION_TIMEOUT}
)


class HostAddress(BaseModel):
    model_config = ConfigDict(frozen=True)

    host: str
    port: int = DEFAULT_PORT

    @field_validator("port")
    @classmethod
    def validate_port(cls, v: int) -> int:
        if not (1 <= v <= 65535):
            msg = f"Invalid port: {v}. Must be 1-65535"
            raise ValueError(msg)
        return v

    @classmethod
    def parse(cls, value: str) -> HostAddress:
        """Parse ``host`` or ``host:port``."""
        host, sep, port = value.strip().rpartition(":")
        if not sep:
            return cls(host=value.strip())
        if not port.isdigit():
            msg = f"Invalid host address: '{value}'. Expected host:port"
            raise ValueError(msg)
        return cls(host=host, port=int(port))

    def __str__(self) -> str:
        return f"{self.host}:{self.port}"


class TimezoneInfo(BaseModel):
    """Server-side timezone of a session, applied when decoding temporal cells."""

    model_config = ConfigDict(frozen=True)

    offset: int = 0
    name: str = ""


class AuthResult(BaseModel):
    """What a transport returns after a successful authentication."""

    session_id: int
    timezone: TimezoneInfo = TimezoneInfo()


class DataSet(BaseModel):
    column_names: list[str] = []
    rows: list[list[WireValue]] = []


class ProfilingStats(BaseModel):
    rows: int = 0
    exec_duration_in_us: int = 0
    total_duration_in_us: int = 0
    other_stats: dict[str, str] | None = None


class PlanNodeBranchInfo(BaseModel):
    is_do_branch: bool = False
    condition_node_id: int = -1


class PlanNodeDescription(BaseModel):
    name: str
    id: int
    output_var: str = ""
    description: dict[str, str] | None = None
    profiles: list[ProfilingStats] | None = None
    branch_info: PlanNodeBranchInfo | None = None
    dependencies: list[int] | None = None


class PlanDescription(BaseModel):
    plan_node_descs: list[PlanNodeDescription] = []
    node_index_map: dict[int, int] = {}
    format: str = ""
    optimize_time_in_us: int = 0


class ExecutionResponse(BaseModel):
    """Raw response of a single statement execution."""

    error_code: int = ErrorCode.SUCCEEDED
    error_msg: str | None = None
    latency_in_us: int = 0
    data: DataSet | None = None
    space_name: str | None = None
    plan_desc: PlanDescription | None = None
    comment: str | None = None

    @property
    def is_succeeded(self) -> bool:
        return self.error_code == ErrorCode.SUCCEEDED

    @property
    def is_session_error(self) -> bool:
        return self.error_code in SESSION_ERROR_CODES
