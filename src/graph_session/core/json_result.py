"""Models for the JSON payload returned by execute_json().

The payload bytes are handed to callers untouched; these models only read
it, e.g. to spot a server-side session error or render errors in the CLI.
Field aliases match the server's JSON keys exactly.
"""

from __future__ import annotations

import json
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from graph_session.core.exceptions import QueryError


class _JsonModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")


class JsonError(_JsonModel):
    code: int = 0
    message: str = ""


class JsonRow(_JsonModel):
    row: list[Any] = []
    meta: list[Any] = []


class JsonProfile(_JsonModel):
    rows: int = 0
    exec_duration_in_us: int = Field(default=0, alias="execDurationInUs")
    total_duration_in_us: int = Field(default=0, alias="totalDurationInUs")
    other_stats: dict[str, Any] = Field(default_factory=dict, alias="otherStats")


class JsonBranchInfo(_JsonModel):
    is_do_branch: bool = Field(default=False, alias="isDoBranch")
    condition_node_id: int = Field(default=-1, alias="conditionNodeId")


class JsonPlanNode(_JsonModel):
    name: str = ""
    id: int = 0
    output_var: str = Field(default="", alias="outputVar")
    description: dict[str, Any] = {}
    profiles: list[JsonProfile] = []
    branch_info: JsonBranchInfo | None = Field(default=None, alias="branchInfo")
    dependencies: list[int] = []


class JsonPlanDesc(_JsonModel):
    plan_node_descs: list[JsonPlanNode] = Field(
        default_factory=list, alias="planNodeDescs"
    )
    node_index_map: dict[str, Any] = Field(default_factory=dict, alias="nodeIndexMap")
    format: str = ""
    optimize_time_in_us: int = 0


class JsonStatementResult(_JsonModel):
    columns: list[str] = []
    data: list[JsonRow] = []
    latency_in_us: int = Field(default=0, alias="latencyInUs")
    space_name: str = Field(default="", alias="spaceName")
    plan_desc: JsonPlanDesc | None = Field(default=None, alias="planDesc")
    comment: str = ""


class JsonResponse(_JsonModel):
    results: list[JsonStatementResult] = []
    errors: list[JsonError] = []

    @property
    def error_code(self) -> int:
        """First non-zero error code, or 0."""
        for err in self.errors:
            if err.code != 0:
                return err.code
        return 0

    @property
    def error_msg(self) -> str:
        for err in self.errors:
            if err.code != 0:
                return err.message
        return ""


def parse_json_result(payload: bytes | str) -> JsonResponse:
    """Parse an execute_json() payload.

    Raises QueryError when the payload is not valid JSON of the expected shape.
    """
    try:
        return JsonResponse.model_validate(json.loads(payload))
    except (json.JSONDecodeError, UnicodeDecodeError, ValidationError) as e:
        msg = f"Malformed JSON result: {e}"
        raise QueryError(msg) from e
