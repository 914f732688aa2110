"""
Test suite for the evolution endpoint.

Tests cover:
- Response structure and empty datasets
- Range presets, custom ranges and the permissive fallback
- Employee aggregation (scores, growth, new hires, exclusions)
- Chart buckets and carry-over
- Insights
- Storage failures
"""

from datetime import date, datetime

import pytest

from conftest import months_ago
from skima.models import Skill
from skima.services.ports import StorageError

URL = "/api/skills/evolution"


class TestEvolutionStructure:
    """Response shape and empty data"""

    def test_structure_with_empty_data(self, client):
        response = client.get(URL)

        assert response.status_code == 200
        data = response.json()
        assert set(data.keys()) == {"meta", "chartData", "employees", "insights"}
        assert set(data["meta"].keys()) == {
            "currentMaturityIndex", "periodDelta", "timeRangeLabel",
            "startDate", "endDate", "totalEmployees",
        }
        assert set(data["insights"].keys()) == {"topImprover", "supportCases", "supportCount"}

    def test_empty_data_yields_nulls_not_errors(self, client):
        data = client.get(URL).json()

        assert data["employees"] == []
        assert data["meta"]["totalEmployees"] == 0
        assert data["meta"]["currentMaturityIndex"] is None
        assert data["meta"]["periodDelta"] is None
        assert data["insights"]["topImprover"] is None
        assert data["insights"]["supportCases"] == []
        assert data["insights"]["supportCount"] == 0

    def test_empty_range_still_has_continuous_time_axis(self, client):
        data = client.get(URL, params={"range": "6m"}).json()

        assert len(data["chartData"]) == 7
        assert all(point["count"] == 0 for point in data["chartData"])
        assert all(point["avgScore"] is None for point in data["chartData"])
        assert all(point["isCarryOver"] is False for point in data["chartData"])

    def test_employee_fields(self, client, skill, make_collaborator, evaluate):
        collaborator = make_collaborator()
        evaluate(collaborator, months_ago(3), {skill.id: 3.5})

        employee = client.get(URL).json()["employees"][0]

        assert employee["id"] == collaborator.id
        assert employee["name"] == "Test User"
        assert employee["role"] == "Developer"
        assert employee["currentScore"] == 3.5
        assert employee["startScore"] == 3.5
        assert employee["growthTrend"] in ("up", "down", "stable")
        assert employee["status"] in ("attention", "competent", "strength")
        assert employee["insufficientData"] is False
        assert employee["sparkline"] == [3.5]
        assert employee["lastEvaluatedAt"] == months_ago(3).date().isoformat()

    def test_chart_entry_fields(self, client, skill, make_collaborator, evaluate, one_month_ago):
        evaluate(make_collaborator(), one_month_ago, {skill.id: 3.0})

        chart = client.get(URL).json()["chartData"]
        entry = next(point for point in chart if point["count"] > 0)

        assert len(entry["date"]) == 10
        assert entry["date"].endswith("-01")
        assert entry["avgScore"] == 3.0
        assert isinstance(entry["newHires"], list)
        assert isinstance(entry["isCarryOver"], bool)


class TestEvolutionRanges:
    """Range presets and custom ranges"""

    def test_default_range_is_12m(self, client):
        data = client.get(URL).json()
        assert data["meta"]["timeRangeLabel"] == "Últimos 12 meses"
        assert data["meta"]["endDate"] == date.today().isoformat()

    @pytest.mark.parametrize("range_value,label", [
        ("6m", "Últimos 6 meses"),
        ("12m", "Últimos 12 meses"),
        ("24m", "Últimos 24 meses"),
        ("ytd", "Año actual (YTD)"),
        ("all", "Todo el historial"),
    ])
    def test_range_labels(self, client, range_value, label):
        response = client.get(URL, params={"range": range_value})

        assert response.status_code == 200
        assert response.json()["meta"]["timeRangeLabel"] == label

    def test_unrecognized_range_falls_back_to_all(self, client):
        response = client.get(URL, params={"range": "invalid"})

        assert response.status_code == 200
        assert response.json()["meta"]["timeRangeLabel"] == "Todo el historial"

    def test_6m_excludes_older_evaluations(self, client, skill, make_collaborator, evaluate):
        evaluate(make_collaborator(), months_ago(8), {skill.id: 3.0})

        data = client.get(URL, params={"range": "6m"}).json()
        assert data["employees"] == []

    def test_6m_includes_recent_evaluations(self, client, skill, make_collaborator, evaluate):
        evaluate(make_collaborator(), months_ago(2), {skill.id: 3.0})

        data = client.get(URL, params={"range": "6m"}).json()
        assert len(data["employees"]) == 1
        assert data["employees"][0]["currentScore"] == 3.0

    def test_12m_includes_evaluations_within_window(self, client, skill, make_collaborator, evaluate):
        evaluate(make_collaborator(), months_ago(10), {skill.id: 2.5})

        data = client.get(URL, params={"range": "12m"}).json()
        assert data["employees"][0]["currentScore"] == 2.5

    def test_all_includes_old_history_and_starts_at_first_session(self, client, skill, make_collaborator, evaluate):
        evaluate(make_collaborator(), datetime(2021, 3, 10, 9, 0), {skill.id: 1.5})

        data = client.get(URL, params={"range": "all"}).json()

        assert data["employees"][0]["currentScore"] == 1.5
        assert data["meta"]["startDate"] == "2021-03-10"
        assert data["chartData"][0]["date"] == "2021-03-01"
        assert data["chartData"][0]["newHires"] == ["Test User"]

    def test_custom_range(self, client, skill, make_collaborator, evaluate):
        evaluate(make_collaborator(), datetime(2024, 6, 15), {skill.id: 3.0})

        data = client.get(URL, params={"startDate": "2024-01-01", "endDate": "2024-12-31"}).json()

        assert data["meta"]["timeRangeLabel"] == "Rango personalizado"
        assert data["meta"]["startDate"] == "2024-01-01"
        assert data["meta"]["endDate"] == "2024-12-31"
        assert len(data["employees"]) == 1
        assert len(data["chartData"]) == 12

    def test_custom_range_end_date_is_inclusive(self, client, skill, make_collaborator, evaluate):
        evaluate(make_collaborator(), datetime(2024, 12, 31, 23, 30), {skill.id: 3.0})

        data = client.get(URL, params={"startDate": "2024-01-01", "endDate": "2024-12-31"}).json()
        assert len(data["employees"]) == 1

    def test_unparseable_custom_dates_fall_back_to_all(self, client):
        response = client.get(URL, params={"startDate": "not-a-date", "endDate": "2024-12-31"})

        assert response.status_code == 200
        assert response.json()["meta"]["timeRangeLabel"] == "Todo el historial"

    def test_trailing_garbage_in_custom_date_falls_back_to_all(self, client):
        response = client.get(URL, params={"startDate": "2024-01-01xyz", "endDate": "2024-12-31"})

        assert response.status_code == 200
        assert response.json()["meta"]["timeRangeLabel"] == "Todo el historial"

    def test_empty_range_falls_back_to_all(self, client):
        response = client.get(URL, params={"range": ""})

        assert response.status_code == 200
        assert response.json()["meta"]["timeRangeLabel"] == "Todo el historial"


class TestEvolutionEmployees:
    """Per-employee aggregation through the API"""

    def test_growth_between_two_sessions(self, client, skill, make_collaborator, evaluate):
        collaborator = make_collaborator(name="Grower")
        evaluate(collaborator, months_ago(3), {skill.id: 2.0})
        evaluate(collaborator, months_ago(1), {skill.id: 4.0})

        employee = client.get(URL).json()["employees"][0]

        assert employee["sparkline"] == [2.0, 4.0]
        assert employee["startScore"] == 2.0
        assert employee["currentScore"] == 4.0
        assert employee["growth"] == 2.0
        assert employee["growthTrend"] == "up"
        assert employee["isNewHire"] is False

    def test_single_session_is_new_hire_without_growth(self, client, skill, make_collaborator, evaluate, one_month_ago):
        evaluate(make_collaborator(), one_month_ago, {skill.id: 3.0})

        employee = client.get(URL).json()["employees"][0]

        assert employee["isNewHire"] is True
        assert "growth" not in employee
        assert employee["growthTrend"] == "stable"

    def test_maturity_index_is_mean_of_current_scores(self, client, skill, make_collaborator, evaluate, one_month_ago):
        evaluate(make_collaborator(name="Alice", role="Dev"), one_month_ago, {skill.id: 4.0})
        evaluate(make_collaborator(name="Bob", role="Dev"), one_month_ago, {skill.id: 2.0})

        meta = client.get(URL).json()["meta"]

        assert meta["totalEmployees"] == 2
        assert meta["currentMaturityIndex"] == 3.0
        assert meta["periodDelta"] == 0.0

    def test_period_delta_compares_start_and_current_scores(self, client, skill, make_collaborator, evaluate):
        alice = make_collaborator(name="Alice")
        evaluate(alice, months_ago(4), {skill.id: 2.0})
        evaluate(alice, months_ago(1), {skill.id: 3.0})
        evaluate(make_collaborator(name="Bob"), months_ago(2), {skill.id: 4.0})

        meta = client.get(URL).json()["meta"]

        assert meta["currentMaturityIndex"] == 3.5
        assert meta["periodDelta"] == 0.5

    def test_status_classification(self, client, skill, make_collaborator, evaluate, one_month_ago):
        evaluate(make_collaborator(name="Low"), one_month_ago, {skill.id: 1.5})
        evaluate(make_collaborator(name="Mid"), one_month_ago, {skill.id: 3.0})
        evaluate(make_collaborator(name="High"), one_month_ago, {skill.id: 4.0})

        employees = {e["name"]: e for e in client.get(URL).json()["employees"]}

        assert employees["Low"]["status"] == "attention"
        assert employees["Mid"]["status"] == "competent"
        assert employees["High"]["status"] == "strength"

    def test_inactive_collaborators_are_excluded(self, client, skill, make_collaborator, evaluate, one_month_ago):
        evaluate(make_collaborator(name="Inactive User", is_active=False), one_month_ago, {skill.id: 4.0})

        data = client.get(URL).json()
        assert data["employees"] == []
        assert data["meta"]["totalEmployees"] == 0

    def test_zero_level_session_excludes_employee(self, client, skill, make_collaborator, evaluate, one_month_ago):
        evaluate(make_collaborator(name="Zero Score"), one_month_ago, {skill.id: 0})

        data = client.get(URL).json()
        assert data["employees"] == []
        assert data["chartData"][-1]["count"] == 0

    def test_archived_skills_do_not_count(self, client, db_session, skill, make_collaborator, evaluate, one_month_ago):
        archived = Skill(id=2, name="Flash", is_active=False)
        db_session.add(archived)
        db_session.commit()

        evaluate(make_collaborator(), one_month_ago, {skill.id: 4.0, archived.id: 1.0})

        assert client.get(URL).json()["employees"][0]["currentScore"] == 4.0

    def test_role_profile_excludes_not_applicable_skills(
        self, client, db_session, skill, make_collaborator, evaluate, make_role_profile, one_month_ago
    ):
        db_session.add(Skill(id=2, name="Negotiation"))
        db_session.commit()
        make_role_profile("Developer", {1: "C", 2: "N"})

        evaluate(make_collaborator(), one_month_ago, {1: 4.0, 2: 1.0})

        assert client.get(URL).json()["employees"][0]["currentScore"] == 4.0

    def test_role_profile_saved_after_sessions_applies_to_past_sessions(self, client, db_session, skill):
        """Sessions recorded first, profile saved afterwards through the API"""
        db_session.add(Skill(id=2, name="Negotiation"))
        db_session.commit()
        collaborator_id = client.post(
            "/api/collaborators/", json={"name": "Ana", "role": "Developer"}
        ).json()["id"]
        url = f"/api/collaborators/{collaborator_id}/evaluations"
        for evaluated_at, negotiation in ((months_ago(3), 1.0), (months_ago(1), 2.0)):
            response = client.post(url, json={
                "evaluated_at": evaluated_at.isoformat(),
                "assessments": [
                    {"skill_id": 1, "level": 4.0},
                    {"skill_id": 2, "level": negotiation},
                ]
            })
            assert response.status_code == 201

        response = client.put("/api/role-profiles/Developer", json={"skills": {"1": "C", "2": "N"}})
        assert response.status_code == 200

        employee = client.get(URL).json()["employees"][0]
        assert employee["sparkline"] == [4.0, 4.0]
        assert employee["currentScore"] == 4.0
        assert employee["startScore"] == 4.0

    def test_employees_sorted_by_growth(self, client, skill, make_collaborator, evaluate):
        slow = make_collaborator(name="Slow")
        evaluate(slow, months_ago(4), {skill.id: 3.0})
        evaluate(slow, months_ago(1), {skill.id: 3.5})
        fast = make_collaborator(name="Fast")
        evaluate(fast, months_ago(4), {skill.id: 2.0})
        evaluate(fast, months_ago(1), {skill.id: 4.0})
        evaluate(make_collaborator(name="New"), months_ago(1), {skill.id: 3.0})

        names = [e["name"] for e in client.get(URL).json()["employees"]]
        assert names == ["Fast", "Slow", "New"]


class TestEvolutionChart:
    """Monthly buckets"""

    def test_months_without_sessions_are_carry_over(self, client, skill, make_collaborator, evaluate):
        collaborator = make_collaborator()
        evaluate(collaborator, months_ago(4), {skill.id: 2.0})
        evaluate(collaborator, months_ago(1), {skill.id: 4.0})

        chart = client.get(URL, params={"range": "6m"}).json()["chartData"]
        by_date = {point["date"]: point for point in chart}

        first = by_date[months_ago(4, day=1).date().isoformat()]
        middle = by_date[months_ago(3, day=1).date().isoformat()]
        last = by_date[months_ago(1, day=1).date().isoformat()]

        assert first["avgScore"] == 2.0 and first["isCarryOver"] is False
        assert first["newHires"] == ["Test User"]
        assert middle["avgScore"] == 2.0 and middle["isCarryOver"] is True
        assert middle["count"] == 1
        assert last["avgScore"] == 4.0 and last["isCarryOver"] is False

    def test_chart_spans_full_range(self, client, skill, make_collaborator, evaluate, one_month_ago):
        evaluate(make_collaborator(), one_month_ago, {skill.id: 3.0})

        chart = client.get(URL, params={"range": "12m"}).json()["chartData"]

        assert len(chart) == 13
        assert chart[0]["avgScore"] is None
        assert chart[-1]["isCarryOver"] is True


class TestEvolutionInsights:

    def test_top_improver_and_support_cases(self, client, skill, make_collaborator, evaluate):
        grower = make_collaborator(name="Grower")
        evaluate(grower, months_ago(3), {skill.id: 2.0})
        evaluate(grower, months_ago(1), {skill.id: 4.0})
        decliner = make_collaborator(name="Decliner")
        evaluate(decliner, months_ago(3), {skill.id: 4.0})
        evaluate(decliner, months_ago(1), {skill.id: 3.0})
        evaluate(make_collaborator(name="Struggling"), months_ago(1), {skill.id: 1.5})

        insights = client.get(URL).json()["insights"]

        assert insights["topImprover"]["name"] == "Grower"
        assert insights["topImprover"]["growth"] == 2.0
        assert {case["name"] for case in insights["supportCases"]} == {"Decliner", "Struggling"}
        assert insights["supportCount"] == 2


class TestEvolutionErrors:

    def test_storage_failure_returns_500(self, client, monkeypatch):
        def broken(self):
            raise StorageError("Failed to read active collaborators")

        monkeypatch.setattr(
            "skima.crud.evolution_store.SqlEvolutionStore.list_active_collaborators", broken
        )

        response = client.get(URL)

        assert response.status_code == 500
        assert response.json()["detail"] == "Error fetching evolution data"
