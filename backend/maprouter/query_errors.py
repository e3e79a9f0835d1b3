from __future__ import annotations

from dataclasses import dataclass
from typing import Any

FROZEN_REASON_CODES: frozenset[str] = frozenset(
    {
        "graph_empty",
        "routing_no_path",
        "prefix_unknown",
        "location_unknown",
        "tile_query_invalid",
        "tile_query_no_coverage",
        "direction_unparseable",
        "map_data_unavailable",
    }
)

# Reason codes that mean "the input was fine, there is just nothing to return".
NOT_FOUND_REASON_CODES: frozenset[str] = frozenset(
    {
        "graph_empty",
        "routing_no_path",
        "prefix_unknown",
        "location_unknown",
        "tile_query_no_coverage",
    }
)


@dataclass
class QueryError(ValueError):
    reason_code: str
    message: str
    details: dict[str, Any] | None = None

    def __str__(self) -> str:
        return self.message

    def as_detail(self) -> dict[str, Any]:
        out: dict[str, Any] = {"reason_code": self.reason_code, "message": self.message}
        if self.details:
            out["details"] = dict(self.details)
        return out


def normalize_reason_code(reason_code: str, *, default: str = "map_data_unavailable") -> str:
    code = str(reason_code or "").strip()
    if code in FROZEN_REASON_CODES:
        return code
    return default


def http_status_for(err: QueryError) -> int:
    code = normalize_reason_code(err.reason_code)
    if code in NOT_FOUND_REASON_CODES:
        return 404
    if code == "map_data_unavailable":
        return 503
    return 422
