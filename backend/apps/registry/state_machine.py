"""
State machine enforcement for registrations.

CANCELLED is terminal for every registration kind. A same-state "transition"
is an edit (notes only) and is always allowed for a non-terminal state.
Raises InvalidStateError for disallowed transitions.
"""

from core.exceptions import InvalidStateError

EVENT_REGISTRATION_TRANSITIONS = {
    "REGISTERED": ["CONFIRMED", "WAITLISTED", "CANCELLED"],
    "CONFIRMED": ["CANCELLED"],
    "WAITLISTED": ["REGISTERED", "CONFIRMED", "CANCELLED"],
    "CANCELLED": [],  # Terminal
}

VOLUNTEER_REGISTRATION_TRANSITIONS = {
    "REGISTERED": ["CONFIRMED", "WAITLISTED", "CANCELLED"],
    "CONFIRMED": ["REGISTERED", "WAITLISTED", "CANCELLED"],
    "WAITLISTED": ["REGISTERED", "CONFIRMED", "CANCELLED"],
    "CANCELLED": [],  # Terminal
}


def validate_transition(transitions, entity_type, current_status, target_status):
    """
    Validate a registration status transition.

    Args:
        transitions: Transition table for the registration kind
        entity_type: Registration kind, for error details
        current_status: Current state
        target_status: Target state

    Returns:
        bool: True if transition is allowed

    Raises:
        InvalidStateError: If transition is disallowed
    """
    if current_status not in transitions:
        raise InvalidStateError(
            f"Invalid current status: {current_status}",
            {"entity_type": entity_type, "current_status": current_status},
        )

    allowed_targets = transitions[current_status]

    if not allowed_targets:
        raise InvalidStateError(
            (
                f"{entity_type} in state {current_status} is terminal and cannot "
                "transition"
            ),
            {
                "entity_type": entity_type,
                "current_status": current_status,
                "target_status": target_status,
            },
        )

    if current_status == target_status:
        return True

    if target_status not in allowed_targets:
        raise InvalidStateError(
            (
                "Invalid transition: "
                f"{entity_type} cannot transition from {current_status} to "
                f"{target_status}"
            ),
            {
                "entity_type": entity_type,
                "current_status": current_status,
                "target_status": target_status,
                "allowed_transitions": allowed_targets,
            },
        )

    return True


def is_terminal_state(transitions, status):
    return status in transitions and len(transitions[status]) == 0
