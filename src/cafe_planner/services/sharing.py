from __future__ import annotations

import base64
import binascii
import json

import pydantic
from django.urls import reverse

from cafe_planner.exceptions import ValidationError
from cafe_planner.schemas import Plan


def encode_plan(plan: Plan) -> str:
    """Encode a full plan snapshot into a URL-safe token."""
    payload = json.dumps(plan.to_record(), separators=(",", ":"), ensure_ascii=False)
    return base64.urlsafe_b64encode(payload.encode("utf-8")).decode("ascii").rstrip("=")


def decode_plan(token: str) -> Plan:
    padded = token.strip() + "=" * (-len(token.strip()) % 4)
    try:
        payload = json.loads(base64.urlsafe_b64decode(padded.encode("ascii")).decode("utf-8"))
    except (binascii.Error, UnicodeError, ValueError) as exc:
        raise ValidationError("Share token is not a valid plan encoding") from exc

    try:
        return Plan.model_validate(payload)
    except pydantic.ValidationError as exc:
        raise ValidationError("Share token does not contain a valid plan") from exc


def share_url(plan: Plan, base_url: str) -> str:
    """Absolute link to the endpoint that decodes and serves ``plan``."""
    return f"{base_url.rstrip('/')}{reverse('shared-plan', args=[encode_plan(plan)])}"
