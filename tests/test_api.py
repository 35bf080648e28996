from __future__ import annotations

from datetime import date

from conftest import add_sale, auth_headers


def test_requests_without_token_are_unauthorized(client):
    response = client.get("/api/v1/dashboard/summary")
    assert response.status_code == 401
    assert response.json()["error"]["code"] == "unauthorized"


def test_token_for_unknown_user_is_unauthorized(client, store):
    ghost = store.add_user("Ghost", "admin", user_id="ghost")
    store.users.remove(ghost)
    response = client.get("/api/v1/leaderboard", headers=auth_headers(ghost))
    assert response.status_code == 401


def test_coordinator_creates_sales_record(client, store, network):
    response = client.post(
        "/api/v1/sales-records",
        headers=auth_headers(network.north_coordinator),
        json={"agentId": "agent-north", "date": "2024-03-15", "salesAmount": 500, "newRegistrations": 2},
    )
    assert response.status_code == 201
    data = response.json()["data"]
    assert data["branch"] == {"id": "branch-north", "name": "North"}
    assert data["agent"]["name"] == "Alex Agent"
    assert data["salesAmount"] == 500
    assert len(store.sales_records) == 1


def test_sales_record_branch_in_body_is_rejected(client, store, network):
    response = client.post(
        "/api/v1/sales-records",
        headers=auth_headers(network.north_coordinator),
        json={
            "agentId": "agent-north",
            "date": "2024-03-15",
            "salesAmount": 500,
            "newRegistrations": 2,
            "branchId": "branch-south",
        },
    )
    assert response.status_code == 422
    assert response.json()["error"]["code"] == "validation_error"
    assert store.sales_records == []


def test_sales_record_hierarchy_error_envelope(client, store, network):
    response = client.post(
        "/api/v1/sales-records",
        headers=auth_headers(network.north_coordinator),
        json={"agentId": "agent-south", "date": "2024-03-15", "salesAmount": 10, "newRegistrations": 0},
    )
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "BRANCH_MISMATCH"
    assert store.sales_records == []


def test_admin_cannot_create_sales_record(client, network):
    response = client.post(
        "/api/v1/sales-records",
        headers=auth_headers(network.admin),
        json={"agentId": "agent-north", "date": "2024-03-15", "salesAmount": 500, "newRegistrations": 2},
    )
    assert response.status_code == 403
    assert response.json()["error"]["code"] == "forbidden"


def test_dashboard_views_by_role(client, store, network):
    add_sale(store, network.north_agent, network.north_coordinator, date(2024, 3, 5), 300)
    add_sale(store, network.south_agent, network.south_coordinator, date(2024, 3, 6), 700)

    admin = client.get("/api/v1/dashboard/summary", headers=auth_headers(network.admin)).json()["data"]
    manager = client.get("/api/v1/dashboard/summary", headers=auth_headers(network.north_manager)).json()["data"]
    coordinator = client.get(
        "/api/v1/dashboard/summary", headers=auth_headers(network.north_coordinator)
    ).json()["data"]

    assert admin["view"] == "admin"
    assert [row["branchName"] for row in admin["branchSalesPerformance"]] == ["South", "North"]
    assert manager["view"] == "branch_manager"
    assert manager["branchRank"] == 2
    assert coordinator["view"] == "coordinator"
    assert coordinator["teamSales"] == 300


def test_agent_has_no_dashboard(client, network):
    response = client.get("/api/v1/dashboard/summary", headers=auth_headers(network.north_agent))
    assert response.status_code == 403


def test_report_period_validation(client, network):
    response = client.get("/api/v1/reports/summary?period=weekly", headers=auth_headers(network.admin))
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "INVALID_PARAMETER"

    response = client.get("/api/v1/reports/summary?period=ytd", headers=auth_headers(network.admin))
    assert response.status_code == 200
    assert response.json()["data"]["period"]["type"] == "ytd"
    assert response.json()["meta"]["timeWindow"] == "ytd"


def test_leaderboard_for_agent_role(client, store, network):
    add_sale(store, network.north_agent, network.north_coordinator, date(2024, 3, 19), 300)
    response = client.get(
        "/api/v1/leaderboard?type=agents&metric=sales&period=weekly",
        headers=auth_headers(network.north_agent),
    )
    assert response.status_code == 200
    rankings = response.json()["data"]["rankings"]
    assert rankings == [{"id": "agent-north", "name": "Alex Agent", "totalPerformance": 300.0, "rank": 1}]


def test_leaderboard_rejects_unknown_type(client, network):
    response = client.get("/api/v1/leaderboard?type=teams", headers=auth_headers(network.admin))
    assert response.status_code == 400
    assert "Invalid type" in response.json()["error"]["message"]


def test_target_workflow(client, network):
    created = client.post(
        "/api/v1/targets/branch",
        headers=auth_headers(network.admin),
        json={
            "branchId": "branch-north",
            "targetType": "sales",
            "amount": 1000,
            "startDate": "2024-03-01",
            "endDate": "2024-03-31",
        },
    )
    assert created.status_code == 201
    assert created.json()["data"]["branch"]["name"] == "North"

    overlap = client.post(
        "/api/v1/targets/branch",
        headers=auth_headers(network.admin),
        json={
            "branchId": "branch-north",
            "targetType": "sales",
            "amount": 500,
            "startDate": "2024-03-15",
            "endDate": "2024-04-15",
        },
    )
    assert overlap.status_code == 400
    assert overlap.json()["error"]["code"] == "OVERLAPPING_TARGET"

    coordinator_target = client.post(
        "/api/v1/targets/coordinator",
        headers=auth_headers(network.north_manager),
        json={
            "coordinatorId": "coord-north",
            "targetType": "sales",
            "amount": 400,
            "startDate": "2024-03-01",
            "endDate": "2024-03-31",
        },
    )
    assert coordinator_target.status_code == 201

    mine = client.get("/api/v1/targets/mine?page=1&page_size=1", headers=auth_headers(network.admin))
    assert mine.status_code == 200
    assert len(mine.json()["data"]) == 1
    assert mine.json()["pagination"]["totalItems"] == 2

    page = client.get("/api/v1/targets/manager-page", headers=auth_headers(network.north_manager))
    assert page.status_code == 200
    assert page.json()["data"]["branch"]["name"] == "North"
    assert len(page.json()["data"]["adminTargets"]) == 1


def test_manager_cannot_set_branch_target(client, network):
    response = client.post(
        "/api/v1/targets/branch",
        headers=auth_headers(network.north_manager),
        json={
            "branchId": "branch-north",
            "targetType": "sales",
            "amount": 1000,
            "startDate": "2024-03-01",
            "endDate": "2024-03-31",
        },
    )
    assert response.status_code == 403


def test_insights_are_admin_only_and_degrade_gracefully(client, network):
    forbidden = client.get("/api/v1/insights/summary", headers=auth_headers(network.north_manager))
    assert forbidden.status_code == 403

    response = client.get("/api/v1/insights/summary", headers=auth_headers(network.admin))
    assert response.status_code == 200
    assert response.json()["data"]["isFallback"] is True
    assert response.json()["meta"]["degraded"] is True

    ranged = client.get(
        "/api/v1/insights/range?start_date=2024-03-01&end_date=2024-03-10",
        headers=auth_headers(network.admin),
    )
    assert ranged.status_code == 200
    assert ranged.json()["data"]["dateRange"] == {"startDate": "2024-03-01", "endDate": "2024-03-10"}


def _raw_json_post(client, path, user, body):
    headers = {**auth_headers(user), "Content-Type": "application/json"}
    return client.post(path, headers=headers, content=body)


def test_non_finite_sales_amounts_are_rejected(client, store, network):
    for literal in ("Infinity", "-Infinity", "NaN"):
        response = _raw_json_post(
            client,
            "/api/v1/sales-records",
            network.north_coordinator,
            '{"agentId": "agent-north", "date": "2024-03-15", "salesAmount": %s, "newRegistrations": 1}' % literal,
        )
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_AMOUNT"
    assert store.sales_records == []

    dashboard = client.get("/api/v1/dashboard/summary", headers=auth_headers(network.admin))
    assert dashboard.json()["data"]["salesThisMonth"] == 0


def test_non_finite_target_amounts_are_rejected(client, store, network):
    for literal in ("Infinity", "NaN"):
        response = _raw_json_post(
            client,
            "/api/v1/targets/branch",
            network.admin,
            '{"branchId": "branch-north", "targetType": "sales", "amount": %s, '
            '"startDate": "2024-03-01", "endDate": "2024-03-31"}' % literal,
        )
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_AMOUNT"

    response = _raw_json_post(
        client,
        "/api/v1/targets/coordinator",
        network.north_manager,
        '{"coordinatorId": "coord-north", "targetType": "sales", "amount": Infinity, '
        '"startDate": "2024-03-01", "endDate": "2024-03-31"}',
    )
    assert response.status_code == 400
    assert store.targets == []


def test_recorded_sale_shows_up_in_coordinator_report(client, network):
    headers = auth_headers(network.north_coordinator)
    created = client.post(
        "/api/v1/sales-records",
        headers=headers,
        json={"agentId": "agent-north", "date": "2024-03-15", "salesAmount": 500, "newRegistrations": 2},
    )
    assert created.status_code == 201

    report = client.get("/api/v1/reports/summary?period=monthly", headers=headers)
    assert report.status_code == 200
    data = report.json()["data"]
    assert data["view"] == "coordinator"
    assert data["teamSales"] == 500
    assert data["newRegistrations"] == 2
    assert data["topAgentInTeam"]["agentName"] == "Alex Agent"
    assert data["topAgentInTeam"]["totalSales"] == 500
