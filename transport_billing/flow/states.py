"""
transport_billing/flow/states.py

Purpose: Defines the authentication session states

- UNINITIALIZED -> LOADING -> AUTHENTICATED / ANONYMOUS
- Single source of truth for session stages
- State transition validation
"""

from enum import Enum
from typing import Dict, List


class SessionState(str, Enum):
    """
    Lifecycle of the auth session held by the hosting process.
    """

    UNINITIALIZED = "UNINITIALIZED"
    LOADING = "LOADING"
    AUTHENTICATED = "AUTHENTICATED"
    ANONYMOUS = "ANONYMOUS"


# Valid state transitions
STATE_TRANSITIONS: Dict[SessionState, List[SessionState]] = {
    SessionState.UNINITIALIZED: [
        SessionState.LOADING,
        SessionState.AUTHENTICATED,  # Login before init
        SessionState.ANONYMOUS,  # Logout before init
    ],
    SessionState.LOADING: [
        SessionState.AUTHENTICATED,
        SessionState.ANONYMOUS,
        SessionState.LOADING,  # Overlapping init calls
        SessionState.UNINITIALIZED,  # Torn down mid-init
    ],
    SessionState.AUTHENTICATED: [
        SessionState.AUTHENTICATED,  # Refresh or re-login
        SessionState.ANONYMOUS,
        SessionState.LOADING,
        SessionState.UNINITIALIZED,
    ],
    SessionState.ANONYMOUS: [
        SessionState.AUTHENTICATED,
        SessionState.ANONYMOUS,
        SessionState.LOADING,
        SessionState.UNINITIALIZED,
    ],
}


def is_valid_transition(from_state: SessionState, to_state: SessionState) -> bool:
    """
    Checks if a state transition is valid.

    Args:
        from_state: Current state
        to_state: Target state

    Returns:
        True if transition is allowed, False otherwise
    """
    return to_state in STATE_TRANSITIONS.get(from_state, [])
