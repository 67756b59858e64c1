"""
Access Gate

The single decision function for artifact access. Both the metadata read
path and the download grant path call ``evaluate``; nothing else in the
codebase re-implements these checks.
"""

from datetime import datetime
from typing import Optional

from .entities import ArtifactRecord
from .passwords import verify_password
from .value_objects import AccessDecision, DenialReason


def evaluate(
    record: Optional[ArtifactRecord],
    now: datetime,
    supplied_password: Optional[str] = None,
    check_password: bool = True,
) -> AccessDecision:
    """
    Decide whether a request may access an artifact.

    Checks run in a fixed order: existence, time expiry, download quota,
    then password. Quota exhaustion is reported as EXPIRED, the same as
    time expiry.

    Args:
        record: The artifact record, or None if it does not exist
        now: Evaluation time
        supplied_password: Password from the caller, if any
        check_password: False for metadata reads, which only need to know
            whether the artifact is alive and must not demand the password

    Returns:
        AccessDecision (permit or denial with reason)
    """
    if record is None:
        return AccessDecision.deny(DenialReason.NOT_FOUND)

    if record.is_expired_by_time(now):
        return AccessDecision.deny(DenialReason.EXPIRED)

    if record.is_quota_exhausted():
        return AccessDecision.deny(DenialReason.EXPIRED)

    if check_password and record.password_hash is not None:
        if not verify_password(supplied_password, record.password_hash):
            return AccessDecision.deny(DenialReason.INCORRECT_PASSWORD)

    return AccessDecision.permit()
