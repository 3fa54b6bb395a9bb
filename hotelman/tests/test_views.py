"""Tests for the loyalty JSON endpoint."""

import json
from unittest.mock import patch

import pytest
from django.test import RequestFactory
from django.urls import reverse

from hotelman.loyalty.service import LoyaltyService
from hotelman.models import ActivityLog, Guest
from hotelman.views import LoyaltyView


pytestmark = pytest.mark.django_db


@pytest.fixture
def rf():
    return RequestFactory()


def _call(request, **kwargs):
    response = LoyaltyView.as_view()(request, **kwargs)
    return response, json.loads(response.content)


def _post(rf, payload, **kwargs):
    request = rf.post("/loyalty/", data=json.dumps(payload), content_type="application/json")
    return _call(request, **kwargs)


def _put(rf, payload, **kwargs):
    request = rf.put("/loyalty/", data=json.dumps(payload), content_type="application/json")
    return _call(request, **kwargs)


class TestEarnEndpoint:
    def test_earn_with_amount(self, rf, guest):
        response, data = _post(
            rf,
            {"guest_code": "GST-001", "amount": 1000, "reason": "stay", "staff_id": "staff-7"},
        )

        assert response.status_code == 200
        assert data["success"] is True
        assert data["points_added"] == 1000
        assert data["new_balance"] == 1000
        assert data["new_tier"] == "silver"
        assert data["tier_upgrade"] is True
        assert data["message"] == "Guest upgraded to silver!"
        assert data["guest"]["code"] == "GST-001"

    def test_earn_without_upgrade(self, rf, guest):
        _, data = _post(rf, {"guest_code": "GST-001", "points": 10})
        assert data["message"] == "Points added successfully"

    def test_guest_code_from_url(self, rf, guest):
        response, data = _post(rf, {"points": 10}, guest_code="GST-001")
        assert response.status_code == 200
        assert data["new_balance"] == 10

    def test_missing_points_and_amount(self, rf, guest):
        response, data = _post(rf, {"guest_code": "GST-001"})
        assert response.status_code == 400
        assert data["success"] is False
        assert data["error"]["code"] == "MISSING_POINTS_OR_AMOUNT"

    def test_missing_guest_code(self, rf, guest):
        response, data = _post(rf, {"points": 10})
        assert response.status_code == 400
        assert data["error"]["code"] == "INVALID_INPUT"
        assert data["error"]["data"]["missing"] == ["guest_code"]

    def test_string_points_rejected(self, rf, guest):
        response, data = _post(rf, {"guest_code": "GST-001", "points": "10"})
        assert response.status_code == 400
        assert data["error"]["code"] == "INVALID_POINTS"

    def test_huge_amount_is_400(self, rf, guest):
        response, data = _post(rf, {"guest_code": "GST-001", "amount": "1e20"})
        assert response.status_code == 400
        assert data["error"]["code"] == "INVALID_AMOUNT"

    def test_unknown_guest(self, rf, db):
        response, data = _post(rf, {"guest_code": "NOPE", "points": 10})
        assert response.status_code == 404
        assert data["error"]["code"] == "GUEST_NOT_FOUND"

    def test_invalid_json(self, rf, guest):
        request = rf.post("/loyalty/", data="{not json", content_type="application/json")
        response, data = _call(request)
        assert response.status_code == 400
        assert data["error"]["code"] == "INVALID_INPUT"

    def test_non_object_body(self, rf, guest):
        response, data = _post(rf, [1, 2, 3])
        assert response.status_code == 400
        assert data["error"]["message"] == "Expected a JSON object"

    def test_unexpected_error_is_500(self, rf, guest):
        with patch.object(LoyaltyService, "earn_points", side_effect=RuntimeError("boom")):
            response, data = _post(rf, {"guest_code": "GST-001", "points": 10})

        assert response.status_code == 500
        assert data["error"]["code"] == "INTERNAL_ERROR"
        assert "boom" not in json.dumps(data)

    def test_unexpected_error_is_logged(self, rf, guest, caplog):
        with patch.object(LoyaltyService, "earn_points", side_effect=RuntimeError("boom")):
            with caplog.at_level("ERROR", logger="hotelman.views"):
                _post(rf, {"guest_code": "GST-001", "points": 10})

        [record] = [r for r in caplog.records if r.name == "hotelman.views"]
        assert record.getMessage() == "Loyalty EarnPoints failed"
        assert record.exc_info is not None


class TestActionEndpoint:
    def test_redeem(self, rf, gold_guest):
        response, data = _put(
            rf,
            {"action": "redeem", "guest_code": "GST-GOLD", "points": 2000, "reward_id": "spa"},
        )

        assert response.status_code == 200
        assert data["new_balance"] == 4000
        assert data["new_tier"] == "silver"
        assert data["redemption"] == {
            "points_redeemed": 2000,
            "reward_value": "200.00",
            "reward_id": "spa",
        }

    def test_redeem_insufficient(self, rf, gold_guest):
        response, data = _put(rf, {"action": "redeem", "guest_code": "GST-GOLD", "points": 9000})
        assert response.status_code == 400
        assert data["error"]["code"] == "INSUFFICIENT_POINTS"
        assert data["error"]["data"] == {"available": 6000, "requested": 9000}

    def test_adjust_tier(self, rf, platinum_guest):
        response, data = _put(
            rf,
            {"action": "adjust_tier", "guest_code": "GST-PLAT", "new_tier": "bronze"},
        )
        assert response.status_code == 200
        assert data["previous_tier"] == "platinum"
        assert data["new_tier"] == "bronze"

    def test_adjust_invalid_tier(self, rf, platinum_guest):
        response, data = _put(
            rf,
            {"action": "adjust_tier", "guest_code": "GST-PLAT", "new_tier": "diamond"},
        )
        assert response.status_code == 400
        assert data["error"]["code"] == "INVALID_TIER"

    def test_bonus(self, rf, guest):
        response, data = _put(rf, {"action": "bonus", "guest_code": "GST-001", "points": 1500})
        assert response.status_code == 200
        assert data["message"] == "Added 1500 points"
        assert data["guest"]["loyalty_tier"] == "bronze"

    def test_deduct(self, rf, gold_guest):
        response, data = _put(rf, {"action": "deduct", "guest_code": "GST-GOLD", "points": 500})
        assert response.status_code == 200
        assert data["message"] == "Removed 500 points"
        assert data["points_applied"] == -500

    def test_unknown_action(self, rf, guest):
        response, data = _put(rf, {"action": "refund", "guest_code": "GST-001"})
        assert response.status_code == 400
        assert data["error"]["code"] == "INVALID_ACTION"

    def test_missing_action(self, rf, guest):
        response, data = _put(rf, {"guest_code": "GST-001"})
        assert response.status_code == 400
        assert data["error"]["code"] == "INVALID_ACTION"


class TestRemoveEndpoint:
    def test_remove_clamps(self, rf, gold_guest):
        request = rf.delete("/loyalty/?guest=GST-GOLD&points=99999&reason=cancelled")
        response, data = _call(request)

        assert response.status_code == 200
        assert data["new_balance"] == 0
        assert data["points_requested"] == 99999
        assert data["points_applied"] == -6000
        assert Guest.objects.get(code="GST-GOLD").loyalty_tier == "gold"

    def test_non_integer_points(self, rf, gold_guest):
        response, data = _call(rf.delete("/loyalty/?guest=GST-GOLD&points=abc"))
        assert response.status_code == 400
        assert data["error"]["code"] == "INVALID_POINTS"

    def test_missing_points(self, rf, gold_guest):
        response, data = _call(rf.delete("/loyalty/?guest=GST-GOLD"))
        assert response.status_code == 400
        assert data["error"]["code"] == "INVALID_POINTS"

    def test_missing_guest(self, rf, gold_guest):
        response, data = _call(rf.delete("/loyalty/?points=10"))
        assert response.status_code == 400
        assert data["error"]["code"] == "INVALID_INPUT"


class TestListEndpoint:
    def test_list_with_stats(self, rf, guest, gold_guest, platinum_guest):
        response, data = _call(rf.get("/loyalty/", {"stats": "true"}))

        assert response.status_code == 200
        assert [m["code"] for m in data["members"]] == ["GST-PLAT", "GST-GOLD", "GST-001"]
        assert data["tier_stats"] == {"bronze": 1, "silver": 0, "gold": 1, "platinum": 1}
        assert data["tier_config"]["gold"]["discount"] == 10
        assert data["stats"]["total_members"] == 3
        assert data["stats"]["total_points"] == 26000
        assert data["top_spenders"][0]["code"] == "GST-GOLD"

    def test_list_without_stats(self, rf, guest):
        _, data = _call(rf.get("/loyalty/"))
        assert "stats" not in data
        assert "top_spenders" not in data

    def test_tier_filter(self, rf, guest, gold_guest):
        _, data = _call(rf.get("/loyalty/", {"tier": "gold"}))
        assert [m["code"] for m in data["members"]] == ["GST-GOLD"]

    def test_invalid_tier_filter(self, rf, guest):
        response, data = _call(rf.get("/loyalty/", {"tier": "diamond"}))
        assert response.status_code == 400
        assert data["error"]["code"] == "INVALID_TIER"


class TestMemberEndpoint:
    def test_member_with_history(self, rf, make_guest):
        make_guest(code="GST-777", points=1200, tier="silver")
        LoyaltyService.earn_points("GST-777", points=100, staff_id="staff-7")

        response, data = _call(rf.get("/loyalty/GST-777/"), guest_code="GST-777")

        assert response.status_code == 200
        assert data["tier"] == "silver"
        assert data["tier_name"] == "Silver"
        assert data["discount"] == 5
        assert data["next_tier"] == "gold"
        assert data["points_to_next_tier"] == 3700
        [entry] = data["history"]
        assert entry["action"] == "points_earned"
        assert entry["actor"] == "staff-7"
        assert entry["branch"] == "DOWNTOWN"

    def test_unknown_member(self, rf, db):
        response, data = _call(rf.get("/loyalty/NOPE/"), guest_code="NOPE")
        assert response.status_code == 404


class TestRouting:
    def test_earn_through_client(self, client, guest):
        response = client.post(
            reverse("hotelman:loyalty"),
            data={"guest_code": "GST-001", "points": 10},
            content_type="application/json",
        )
        assert response.status_code == 200
        assert response.json()["new_balance"] == 10

    def test_member_route(self, client, guest):
        response = client.get(reverse("hotelman:loyalty-member", args=["GST-001"]))
        assert response.status_code == 200
        assert response.json()["guest"]["code"] == "GST-001"

    def test_method_not_allowed(self, client, guest):
        response = client.patch(reverse("hotelman:loyalty"))
        assert response.status_code == 405
        assert ActivityLog.objects.count() == 0
