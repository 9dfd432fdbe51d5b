from __future__ import annotations

import base64

import pytest

from cafe_planner.exceptions import ValidationError
from cafe_planner.schemas import Plan, Stop
from cafe_planner.services.sharing import decode_plan, encode_plan, share_url


def _plan() -> Plan:
    return Plan(
        cafes=[
            Stop(
                id="a",
                name="Café Ünïcode",
                coordinates={"lat": 1.28, "lng": 103.86},
                notes="try the kaya toast",
                order=1,
                time_slot="09:00",
            ),
            Stop(id="b", name="Second", coordinates={"lat": 1.29, "lng": 103.86}, order=2),
        ],
        start_time="09:00",
    )


def test_token_is_url_safe_and_reversible() -> None:
    plan = _plan()

    token = encode_plan(plan)

    assert all(char not in token for char in "+/=")
    assert decode_plan(token) == plan


def test_share_url_embeds_token() -> None:
    plan = _plan()

    assert share_url(plan, "https://cafes.example/") == (
        f"https://cafes.example/api/v1/share/{encode_plan(plan)}"
    )


@pytest.mark.parametrize(
    "token",
    [
        "***",
        base64.urlsafe_b64encode(b"not json").decode(),
        base64.urlsafe_b64encode(b"[1, 2, 3]").decode(),
        base64.urlsafe_b64encode(b'{"cafes": [{"id": ""}]}').decode(),
        base64.urlsafe_b64encode(b'{"cafes": [{"id": "a"}, {"id": "a"}]}').decode(),
    ],
)
def test_malformed_tokens_are_rejected(token: str) -> None:
    with pytest.raises(ValidationError):
        decode_plan(token)
