from __future__ import annotations

import maprouter
from maprouter.query_errors import (
    FROZEN_REASON_CODES,
    QueryError,
    http_status_for,
    normalize_reason_code,
)


def test_maprouter_package_imports() -> None:
    # Package marker import should be stable for tooling/tests.
    assert maprouter.__name__ == "maprouter"


def test_query_error_string_and_details() -> None:
    err = QueryError(
        reason_code="routing_no_path",
        message="no path between vertex 1 and vertex 8",
        details={"start": 1, "goal": 8},
    )
    assert isinstance(err, ValueError)
    assert str(err) == "no path between vertex 1 and vertex 8"
    assert err.as_detail() == {
        "reason_code": "routing_no_path",
        "message": "no path between vertex 1 and vertex 8",
        "details": {"start": 1, "goal": 8},
    }
    assert "details" not in QueryError(reason_code="graph_empty", message="empty").as_detail()


def test_reason_code_normalization() -> None:
    for code in (
        "graph_empty",
        "routing_no_path",
        "prefix_unknown",
        "location_unknown",
        "tile_query_invalid",
        "direction_unparseable",
        "map_data_unavailable",
    ):
        assert code in FROZEN_REASON_CODES
        assert normalize_reason_code(code) == code
    assert normalize_reason_code("unknown_reason") == "map_data_unavailable"
    assert normalize_reason_code("", default="tile_query_invalid") == "tile_query_invalid"


def test_http_status_mapping() -> None:
    assert http_status_for(QueryError(reason_code="routing_no_path", message="x")) == 404
    assert http_status_for(QueryError(reason_code="prefix_unknown", message="x")) == 404
    assert http_status_for(QueryError(reason_code="tile_query_invalid", message="x")) == 422
    assert http_status_for(QueryError(reason_code="direction_unparseable", message="x")) == 422
    assert http_status_for(QueryError(reason_code="map_data_unavailable", message="x")) == 503
    assert http_status_for(QueryError(reason_code="bogus", message="x")) == 503
