"""Tests for deal tasks."""

from decimal import Decimal

import pytest

from pipedrive_tasks.clients.pipedrive import ApplicationError, ConfigurationError
from pipedrive_tasks.tasks import CreateDeal, UpdateDeal


class TestCreateDeal:
    """Test suite for the create deal task."""

    def test_create_deal_sends_numeric_value(self, task_endpoint):
        task_endpoint.respond_json(
            {
                "success": True,
                "data": {
                    "id": 101,
                    "title": "Big Deal",
                    "value": 50000,
                    "add_time": "2024-01-15T10:00:00Z",
                    "update_time": "2024-01-15T10:05:00Z",
                },
            }
        )

        output = CreateDeal(
            api_token="secret",
            title="Big Deal",
            value=Decimal("50000"),
            currency="USD",
            person_id=55,
            stage_id=1,
            probability=40,
        ).run()

        assert output.deal_id == 101
        assert output.add_time == "2024-01-15T10:00:00Z"
        assert output.update_time == "2024-01-15T10:05:00Z"

        assert task_endpoint.requests[0].url.path == "/api/v2/deals"
        assert task_endpoint.last_json_body == {
            "title": "Big Deal",
            "value": 50000.0,
            "currency": "USD",
            "person_id": 55,
            "stage_id": 1,
            "probability": 40.0,
        }

    def test_value_accepts_strings_from_orchestrator(self):
        task = CreateDeal(title="Deal", value="1234.56")
        assert task.value == Decimal("1234.56")

    def test_failed_creation_raises(self, task_endpoint):
        task_endpoint.respond_json({"success": False, "error": "Stage not found"})

        with pytest.raises(ApplicationError, match="Failed to create deal: Stage not found"):
            CreateDeal(api_token="secret", title="Deal", stage_id=99).run()


class TestUpdateDeal:
    """Test suite for the update deal task."""

    def test_update_deal_puts_changed_fields(self, task_endpoint):
        task_endpoint.respond_json(
            {"success": True, "data": {"id": 123, "update_time": "2024-02-01T09:00:00Z"}}
        )

        output = UpdateDeal(api_token="secret", deal_id=123, value=75000, stage_id=2).run()

        assert output.deal_id == 123
        assert output.update_time == "2024-02-01T09:00:00Z"

        request = task_endpoint.requests[0]
        assert request.method == "PUT"
        assert request.url.path == "/api/v2/deals/123"
        assert task_endpoint.last_json_body == {"value": 75000.0, "stage_id": 2}

    def test_mark_deal_lost(self, task_endpoint):
        task_endpoint.respond_json({"success": True, "data": {"id": 5}})

        UpdateDeal(api_token="secret", deal_id=5, status="lost", lost_reason="Budget").run()

        assert task_endpoint.last_json_body == {"status": "lost", "lost_reason": "Budget"}

    def test_update_without_fields_raises_before_any_request(self, task_endpoint):
        with pytest.raises(ConfigurationError, match="At least one field"):
            UpdateDeal(api_token="secret", deal_id=123).run()

        assert task_endpoint.requests == []
