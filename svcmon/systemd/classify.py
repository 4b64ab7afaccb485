"""
Mapping of systemd active/sub states to ServiceStatus.
"""

from ..models import ServiceStatus


def classify_status(active_state: str, sub_state: str) -> ServiceStatus:
    """
    Convert a systemd (ActiveState, SubState) pair to a ServiceStatus.

    Unrecognized combinations classify as UNKNOWN.
    """
    if active_state == "active" and sub_state == "running":
        return ServiceStatus.RUNNING

    if active_state == "failed":
        return ServiceStatus.FAILED

    if active_state == "inactive" or sub_state == "dead":
        return ServiceStatus.STOPPED

    return ServiceStatus.UNKNOWN
