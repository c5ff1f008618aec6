"""Accept/reject decision for a single check-in attempt.

Stages run in order and stop at the first failure:
received -> token_checked -> liveness_checked -> geofence_checked.
Nothing is persisted here; see attendanceRecorder for that.
"""
from datetime import datetime
from enum import Enum

from pydantic import BaseModel

from checkin.schemas.event import Coordinate, EventData
from checkin.utils import tokenCodec
from checkin.utils.errors import TokenError
from checkin.utils.geoDistance import distance, is_within_radius
from checkin.utils.livenessEvaluator import is_live
from checkin.utils.tokenCodec import ParsedToken


class Stage(str, Enum):
    RECEIVED = "received"
    TOKEN_CHECKED = "token_checked"
    LIVENESS_CHECKED = "liveness_checked"
    GEOFENCE_CHECKED = "geofence_checked"


class Reason(str, Enum):
    TOKEN_MALFORMED = "token_malformed"
    TOKEN_EXPIRED = "token_expired"
    EVENT_MISMATCH = "event_mismatch"
    INVALID_SECRET = "invalid_secret"
    EVENT_NOT_LIVE = "event_not_live"
    OUT_OF_RANGE = "out_of_range"


class Verdict(BaseModel):
    accepted: bool
    stage: Stage
    reason: Reason | None = None
    event: EventData
    position: Coordinate
    token: ParsedToken | None = None
    distance_meters: float | None = None
    token_raw: str

    @property
    def rejected(self) -> bool:
        return not self.accepted


def verify(token_raw: str, claimed_position: Coordinate, event: EventData, now: datetime) -> Verdict:
    def reject(stage, reason, **extra):
        return Verdict(
            accepted=False,
            stage=stage,
            reason=reason,
            event=event,
            position=claimed_position,
            token_raw=token_raw,
            **extra,
        )

    try:
        token = tokenCodec.parse(token_raw, now)
    except TokenError as e:
        return reject(Stage.RECEIVED, Reason(e.reason))

    if token.event_id != event.id:
        return reject(Stage.RECEIVED, Reason.EVENT_MISMATCH, token=token)
    if token.secret != event.qr_secret:
        return reject(Stage.RECEIVED, Reason.INVALID_SECRET, token=token)

    if not is_live(event, now):
        return reject(Stage.TOKEN_CHECKED, Reason.EVENT_NOT_LIVE, token=token)

    meters = distance(claimed_position, event.location)
    if not is_within_radius(claimed_position, event.location, event.radius_meters):
        return reject(Stage.LIVENESS_CHECKED, Reason.OUT_OF_RANGE, token=token, distance_meters=meters)

    return Verdict(
        accepted=True,
        stage=Stage.GEOFENCE_CHECKED,
        event=event,
        position=claimed_position,
        token=token,
        distance_meters=meters,
        token_raw=token_raw,
    )
