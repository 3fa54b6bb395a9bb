"""
Loyalty JSON endpoint.

    GET    /loyalty/?branch=&tier=&guest=&stats=true   member listing
    GET    /loyalty/<guest_code>/                       member summary + history
    POST   /loyalty/                                    earn points
    PUT    /loyalty/  {"action": "redeem" | "adjust_tier" | "bonus" | "deduct"}
    DELETE /loyalty/?guest=&points=&reason=             remove points

Authentication is handled outside this app; the acting staff member is
passed as ``staff_id`` in the body.
"""

from __future__ import annotations

import json
import logging

from django.http import JsonResponse
from django.utils.decorators import method_decorator
from django.views import View
from django.views.decorators.csrf import csrf_exempt

from hotelman.conf import hotelman_settings
from hotelman.exceptions import ConcurrencyConflict, HotelmanError, InternalError, ValidationError
from hotelman.loyalty.commands import (
    EarnPoints,
    ListMembers,
    RemovePoints,
    command_from_payload,
    execute,
)
from hotelman.loyalty.service import LoyaltyService

logger = logging.getLogger(__name__)


def _error_response(exc: HotelmanError) -> JsonResponse:
    return JsonResponse({"success": False, "error": exc.as_dict()}, status=exc.http_status)


def _log_entry(entry) -> dict:
    return {
        "action": entry.action,
        "actor": entry.actor,
        "branch": entry.branch.code if entry.branch_id else None,
        "details": entry.details,
        "created_at": entry.created_at,
    }


@method_decorator(csrf_exempt, name="dispatch")
class LoyaltyView(View):
    """
    Loyalty programme API.

    Errors are returned as {"success": false, "error": {code, message, data}}
    with the status carried by the exception class.

    Settings:
        HOTELMAN["CONFLICT_RETRIES"]: extra attempts after a concurrent update.
    """

    def get(self, request, guest_code=None):
        if guest_code:
            return self._member(guest_code)

        command = ListMembers(
            branch_code=request.GET.get("branch") or None,
            tier=request.GET.get("tier") or None,
            include_stats=request.GET.get("stats") == "true",
            guest_code=request.GET.get("guest") or None,
        )
        return self._run(command)

    def post(self, request, guest_code=None):
        try:
            payload = self._json_body(request, guest_code)
            command = EarnPoints.from_payload(payload)
        except ValidationError as exc:
            return _error_response(exc)
        return self._run(command)

    def put(self, request, guest_code=None):
        try:
            payload = self._json_body(request, guest_code)
            command = command_from_payload(payload.get("action"), payload)
        except ValidationError as exc:
            return _error_response(exc)
        return self._run(command)

    def delete(self, request, guest_code=None):
        raw_points = request.GET.get("points", "0")
        try:
            points = int(raw_points)
        except ValueError:
            return _error_response(ValidationError("INVALID_POINTS", points=raw_points))

        code = guest_code or request.GET.get("guest", "")
        if not code:
            return _error_response(
                ValidationError("INVALID_INPUT", message="Guest code is required")
            )

        command = RemovePoints(
            guest_code=code,
            points=points,
            reason=request.GET.get("reason", ""),
        )
        return self._run(command)

    # ------------------------------------------------------------------

    def _json_body(self, request, guest_code=None) -> dict:
        try:
            payload = json.loads(request.body or b"{}")
        except (json.JSONDecodeError, ValueError):
            raise ValidationError("INVALID_INPUT", message="Invalid JSON")
        if not isinstance(payload, dict):
            raise ValidationError("INVALID_INPUT", message="Expected a JSON object")
        if guest_code:
            payload.setdefault("guest_code", guest_code)
        return payload

    def _run(self, command) -> JsonResponse:
        name = type(command).__name__
        attempts = 1 + max(0, hotelman_settings.CONFLICT_RETRIES)
        for attempt in range(1, attempts + 1):
            try:
                result = execute(command)
            except ConcurrencyConflict as exc:
                if attempt < attempts:
                    logger.info("Loyalty %s: concurrent update, retrying (%s/%s)", name, attempt, attempts)
                    continue
                logger.warning("Loyalty %s: giving up after %s attempts", name, attempts)
                return _error_response(exc)
            except HotelmanError as exc:
                logger.warning("Loyalty %s rejected: %s", name, exc.message)
                return _error_response(exc)
            except Exception:
                logger.exception("Loyalty %s failed", name)
                return _error_response(InternalError())
            return JsonResponse({"success": True, **result.as_dict()})

    def _member(self, guest_code: str) -> JsonResponse:
        try:
            summary = LoyaltyService.get_member(guest_code)
            history = LoyaltyService.get_history(guest_code, limit=20)
        except HotelmanError as exc:
            return _error_response(exc)

        return JsonResponse(
            {
                "success": True,
                **summary.as_dict(),
                "history": [_log_entry(entry) for entry in history],
            }
        )
