"""Tests for the fee calculation endpoint."""

from __future__ import annotations

from typing import Any

import pytest
from fastapi.testclient import TestClient

from regfee.backend.src.db import get_fee_store
from regfee.backend.src.main import app
from regfee.backend.src.services import fee_engine


def _calculate(client: TestClient, **payload: Any):
    body = {"agencyId": "A1", "procedureId": 7, "role": "National"}
    body.update(payload)
    return client.post("/api/calculate-fee", json=body)


def test_billable_units_are_added_to_the_base_fee(client: TestClient) -> None:
    response = _calculate(client, units=[{"componentId": 2, "quantity": 3}])

    assert response.status_code == 200
    assert response.json() == {
        "totalFee": 600,
        "currency": "USD",
        "feeBreakdown": [
            {"componentName": "Base Fee", "amount": 500},
            {"componentName": "Strengths (x2)", "amount": 100},
        ],
    }


def test_units_covered_by_included_quantity_are_excluded(client: TestClient) -> None:
    response = _calculate(client, units=[{"componentId": 2, "quantity": 1}])

    assert response.json()["totalFee"] == 500
    assert response.json()["feeBreakdown"] == [{"componentName": "Base Fee", "amount": 500}]


def test_only_base_fee_without_units(client: TestClient) -> None:
    response = _calculate(client)

    assert response.json() == {
        "totalFee": 500,
        "currency": "USD",
        "feeBreakdown": [{"componentName": "Base Fee", "amount": 500}],
    }


def test_multiple_components_follow_rule_order(client: TestClient) -> None:
    response = _calculate(
        client,
        units=[{"componentId": 4, "quantity": 2}, {"componentId": 2, "quantity": 2}],
    )

    payload = response.json()
    assert [item["componentName"] for item in payload["feeBreakdown"]] == [
        "Base Fee",
        "Strengths (x1)",
        "Presentations (x2)",
    ]
    assert payload["totalFee"] == sum(item["amount"] for item in payload["feeBreakdown"])
    assert payload["totalFee"] == 600


def test_rule_level_component_name_and_string_procedure_id(client: TestClient) -> None:
    response = _calculate(
        client, procedureId="7", role=" CMS ", units=[{"componentId": 2, "quantity": 2}]
    )

    assert response.json()["feeBreakdown"] == [
        {"componentName": "Base Fee", "amount": 300},
        {"componentName": "Extra Strength (x2)", "amount": 80},
    ]


def test_agency_currency_is_used(client: TestClient) -> None:
    response = _calculate(client, agencyId="B2")

    assert response.json()["currency"] == "EUR"
    assert response.json()["totalFee"] == 1000


def test_agency_without_currency_defaults_to_usd(client: TestClient) -> None:
    assert _calculate(client, agencyId="Z9").json()["currency"] == "USD"


def test_unknown_triple_returns_empty_result(client: TestClient) -> None:
    response = _calculate(client, agencyId="NOPE", procedureId=99)

    assert response.status_code == 200
    assert response.json() == {"totalFee": 0, "currency": "USD", "feeBreakdown": []}


def test_invalid_units_are_dropped_not_rejected(client: TestClient) -> None:
    response = _calculate(
        client,
        units=[{"componentId": 2, "quantity": -3}, {"componentId": "oops", "quantity": 2}],
    )

    assert response.status_code == 200
    assert response.json()["totalFee"] == 500


def test_out_of_range_unit_quantity_is_dropped(client: TestClient) -> None:
    response = _calculate(client, units=[{"componentId": 2, "quantity": 10**400}])

    assert response.status_code == 200
    assert response.json()["totalFee"] == 500


@pytest.mark.parametrize(
    ("payload", "message"),
    [
        ({"agencyId": ""}, "agencyId is required."),
        ({"procedureId": "abc"}, "procedureId must be a number."),
        ({"procedureId": 10**400}, "procedureId must be a number."),
        ({"procedureId": "1_000"}, "procedureId must be a number."),
        ({"role": ""}, "role is required."),
    ],
)
def test_invalid_requests_are_rejected(
    client: TestClient, payload: dict[str, Any], message: str
) -> None:
    response = _calculate(client, **payload)

    assert response.status_code == 400
    assert response.json() == {"error": message}


def test_non_object_body_is_rejected(client: TestClient) -> None:
    response = client.post("/api/calculate-fee", json=["A1", 7, "National"])

    assert response.status_code == 400
    assert response.json() == {"error": "Request body must be a JSON object."}


def test_validation_happens_before_store_access() -> None:
    def _no_store():
        raise AssertionError("store must not be touched")

    app.dependency_overrides[get_fee_store] = lambda: _no_store
    try:
        response = TestClient(app).post(
            "/api/calculate-fee", json={"agencyId": "", "procedureId": 7, "role": "National"}
        )
    finally:
        app.dependency_overrides.pop(get_fee_store, None)

    assert response.status_code == 400
    assert response.json() == {"error": "agencyId is required."}


def test_rule_fetch_failure_returns_generic_error(client: TestClient, sqlite_engine) -> None:
    with sqlite_engine.begin() as connection:
        connection.exec_driver_sql("DROP TABLE tbl_fee_rules")

    response = _calculate(client)

    assert response.status_code == 500
    assert response.json() == {"error": "Unable to fetch fee rules at this time."}


def test_degraded_lookups_do_not_block_calculation(client: TestClient, sqlite_engine) -> None:
    with sqlite_engine.begin() as connection:
        connection.exec_driver_sql("DROP TABLE tbl_agencies")
        connection.exec_driver_sql("DROP TABLE tbl_fee_components")

    response = _calculate(client, units=[{"componentId": 2, "quantity": 3}])

    assert response.status_code == 200
    assert response.json() == {
        "totalFee": 600,
        "currency": "USD",
        "feeBreakdown": [
            {"componentName": "Component 1", "amount": 500},
            {"componentName": "Component 2 (x2)", "amount": 100},
        ],
    }


def test_unexpected_errors_surface_their_message(
    client: TestClient, monkeypatch: pytest.MonkeyPatch
) -> None:
    def _explode(*_: Any, **__: Any) -> None:
        raise RuntimeError("rule table is corrupt")

    monkeypatch.setattr(fee_engine, "calculate_fee", _explode)

    response = _calculate(client)

    assert response.status_code == 500
    assert response.json() == {"error": "rule table is corrupt"}


def test_calculate_fee_only_accepts_post(client: TestClient) -> None:
    response = client.get("/api/calculate-fee")

    assert response.status_code == 405
    assert response.headers["allow"] == "POST"
