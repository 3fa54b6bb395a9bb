"""Tests for the optimistic balance update and conflict handling."""

import json
import threading
from unittest.mock import patch

import pytest
from django.db import connections
from django.db.models import F
from django.test import RequestFactory

from hotelman.exceptions import ConcurrencyConflict
from hotelman.loyalty.service import LoyaltyService
from hotelman.models import ActivityLog, Guest
from hotelman.services import guest as guest_service
from hotelman.views import LoyaltyView


def _stale_copy(code):
    """Read the guest, then let another writer bump its version."""
    stale = Guest.objects.select_related("branch").get(code=code)
    Guest.objects.filter(code=code).update(
        loyalty_points=F("loyalty_points") + 100,
        version=F("version") + 1,
    )
    return stale


@pytest.mark.django_db
class TestAtomicUpdatePoints:
    def test_applies_delta_and_bumps_version(self, gold_guest):
        updated = guest_service.atomic_update_points(gold_guest, 250)
        assert updated.loyalty_points == 6250
        assert updated.version == 2

    def test_stale_version_conflicts(self, gold_guest):
        stale = _stale_copy("GST-GOLD")

        with pytest.raises(ConcurrencyConflict) as exc_info:
            guest_service.atomic_update_points(stale, 50)

        assert exc_info.value.http_status == 409
        assert exc_info.value.data == {"guest_code": "GST-GOLD", "version": 1}
        # The other writer's update survives untouched
        assert Guest.objects.get(code="GST-GOLD").loyalty_points == 6100

    def test_conflict_in_service_writes_nothing(self, gold_guest):
        with patch(
            "hotelman.services.guest.get_for_update",
            side_effect=lambda code: _stale_copy(code),
        ):
            with pytest.raises(ConcurrencyConflict):
                LoyaltyService.earn_points("GST-GOLD", points=10)

        # The stale read happened inside the rolled back transaction
        assert ActivityLog.objects.count() == 0
        current = Guest.objects.get(code="GST-GOLD")
        assert current.loyalty_points == 6000
        assert current.version == 1

    def test_sequential_earns_all_apply(self, guest):
        for _ in range(25):
            LoyaltyService.earn_points("GST-001", points=3)

        current = Guest.objects.get(code="GST-001")
        assert current.loyalty_points == 75
        assert current.version == 26
        assert ActivityLog.objects.filter(entity_id="GST-001").count() == 25


@pytest.mark.django_db
class TestViewRetry:
    def _earn(self, points):
        request = RequestFactory().post(
            "/loyalty/",
            data=json.dumps({"guest_code": "GST-GOLD", "points": points}),
            content_type="application/json",
        )
        response = LoyaltyView.as_view()(request)
        return response, json.loads(response.content)

    def test_retries_once_after_conflict(self, gold_guest):
        real_get_for_update = guest_service.get_for_update
        calls = []

        def flaky(code):
            calls.append(code)
            if len(calls) == 1:
                return _stale_copy(code)
            return real_get_for_update(code)

        with patch("hotelman.services.guest.get_for_update", side_effect=flaky):
            response, data = self._earn(10)

        assert response.status_code == 200
        assert len(calls) == 2
        # The first attempt rolled back along with the simulated writer
        assert data["new_balance"] == 6010
        assert ActivityLog.objects.count() == 1

    def test_gives_up_with_409(self, gold_guest, settings):
        settings.HOTELMAN = {"CONFLICT_RETRIES": 2}

        with patch(
            "hotelman.services.guest.get_for_update",
            side_effect=lambda code: _stale_copy(code),
        ) as mocked:
            response, data = self._earn(10)

        assert response.status_code == 409
        assert data["error"]["code"] == "CONCURRENT_UPDATE"
        assert mocked.call_count == 3

    def test_no_retry_when_disabled(self, gold_guest, settings):
        settings.HOTELMAN = {"CONFLICT_RETRIES": 0}

        with patch(
            "hotelman.services.guest.get_for_update",
            side_effect=lambda code: _stale_copy(code),
        ) as mocked:
            response, _ = self._earn(10)

        assert response.status_code == 409
        assert mocked.call_count == 1


@pytest.mark.django_db(transaction=True)
def test_parallel_earns_lose_no_update(make_guest):
    """Every concurrent earn lands exactly once on the committed balance."""
    member = make_guest(points=100)
    workers = 8
    errors = []
    barrier = threading.Barrier(workers)

    def work():
        try:
            barrier.wait()
            for _ in range(5):
                try:
                    LoyaltyService.earn_points(member.code, points=5)
                    return
                except ConcurrencyConflict:
                    continue
            errors.append("gave up after repeated conflicts")
        except Exception as exc:
            errors.append(exc)
        finally:
            connections.close_all()

    threads = [threading.Thread(target=work) for _ in range(workers)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert errors == []
    member.refresh_from_db()
    assert member.loyalty_points == 100 + 5 * workers
    assert member.version == workers + 1
    assert ActivityLog.objects.filter(entity_id=member.code).count() == workers
