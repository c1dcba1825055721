import pytest

API = "/api/v1"


@pytest.fixture
def household(client, auth):
    headers, profile_id = auth
    url = f"{API}/profiles/{profile_id}"

    def post(path, **payload):
        response = client.post(f"{url}/{path}", json=payload, headers=headers)
        assert response.status_code == 201, response.text
        return response.json()["id"]

    salary = post("nodes/", type="income", label="Salary", amount=3183.61)
    checking = post("nodes/", type="account", label="Checking", balance=2400)
    rent = post("nodes/", type="expense", label="Rent", amount=1200)
    streaming = post(
        "nodes/",
        type="expense",
        label="Streaming",
        amount=400,
        metadata={"subscription": True, "flag": "cancel"},
    )
    fund = post(
        "nodes/",
        type="savings",
        label="Emergency Fund",
        balance=1195.93,
        metadata={"goal": 5000},
    )
    post("flows/", from_node_id=salary, to_node_id=checking, amount=3183.61)
    post("flows/", from_node_id=checking, to_node_id=rent, amount=1200)
    post("flows/", from_node_id=checking, to_node_id=streaming, amount=400)
    post("flows/", from_node_id=checking, to_node_id=fund, amount=500)
    post("goals/", name="House", target=50000)
    return client, headers, url


def test_statement(household):
    client, headers, url = household

    response = client.get(f"{url}/statement", headers=headers)

    assert response.status_code == 200
    body = response.json()
    assert body["ratios"]["total_income"] == pytest.approx(3183.61)
    assert body["ratios"]["total_expenses"] == pytest.approx(1600)
    assert body["ratios"]["savings_rate"] == pytest.approx(49.74, abs=0.01)
    assert body["expenses"]["subscriptions"][0]["flag"] == "cancel"
    assert body["cash_flow"]["operating"]["inflow_total"] == pytest.approx(3183.61)
    assert body["cash_flow"]["operating"]["outflow_total"] == pytest.approx(1600)
    assert body["cash_flow"]["investing"]["outflow_total"] == pytest.approx(500)
    assert [a["title"] for a in body["alerts"]] == [
        "Subscriptions to Cancel",
        "Emergency Fund Progress",
    ]
    assert body["alerts"][1]["message"] == "24% of $5,000 goal"


def test_statement_is_stable_across_reads(household):
    client, headers, url = household

    first = client.get(f"{url}/statement", headers=headers).json()
    second = client.get(f"{url}/statement", headers=headers).json()

    assert first == second


def test_dashboard(household):
    client, headers, url = household

    body = client.get(f"{url}/dashboard", headers=headers).json()

    assert set(body) >= {"profile_id", "statement", "budgets", "goals", "recent_activity"}
    assert [g["name"] for g in body["goals"]] == ["House"]
    assert body["budgets"] == []
    assert body["recent_activity"][0]["event_type"] == "goal_created"
    assert len(body["recent_activity"]) == 11


def test_dashboard_activity_limit(household):
    client, headers, url = household

    body = client.get(f"{url}/dashboard?activity_limit=3", headers=headers).json()

    assert len(body["recent_activity"]) == 3


def test_empty_profile_statement(client, auth):
    headers, profile_id = auth

    body = client.get(f"{API}/profiles/{profile_id}/statement", headers=headers).json()

    assert body["alerts"] == []
    assert body["ratios"]["savings_rate"] == 0.0
    assert body["ratios"]["health_score"] == 80
