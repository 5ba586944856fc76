# bto/core/application_status_graph.py
from bto.models.enums import ApplicationStatus

ALLOWED_STATUS_TRANSITIONS = {
    None: {ApplicationStatus.PENDING},

    ApplicationStatus.PENDING: {
        ApplicationStatus.SUCCESSFUL,
        ApplicationStatus.UNSUCCESSFUL,
    },

    # BOOKED only through the booking processor
    ApplicationStatus.SUCCESSFUL: {
        ApplicationStatus.BOOKED,
    },

    ApplicationStatus.UNSUCCESSFUL: set(),

    ApplicationStatus.BOOKED: set(),
}


def can_transition(current, target: ApplicationStatus) -> bool:
    return target in ALLOWED_STATUS_TRANSITIONS.get(current, set())
