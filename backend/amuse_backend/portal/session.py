"""
Staff sign-in as an explicit state machine.

    UNAUTHENTICATED -> AUTHENTICATING -> PROFILE_LOADING -> READY
                             |                  |
                             +----> FAILED <----+

The profile is loaded only after authentication has settled, in the same
call, so callers always observe the states in this order.
"""
import enum
import logging

from django.contrib.auth import authenticate

from .roles import department_for, permissions_for, portal_for

logger = logging.getLogger(__name__)


class AuthState(str, enum.Enum):
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATING = "authenticating"
    PROFILE_LOADING = "profile_loading"
    READY = "ready"
    FAILED = "failed"


TRANSITIONS = {
    AuthState.UNAUTHENTICATED: {AuthState.AUTHENTICATING},
    AuthState.AUTHENTICATING: {AuthState.PROFILE_LOADING, AuthState.FAILED},
    AuthState.PROFILE_LOADING: {AuthState.READY, AuthState.FAILED},
    AuthState.READY: {AuthState.UNAUTHENTICATED},
    AuthState.FAILED: {AuthState.AUTHENTICATING, AuthState.UNAUTHENTICATED},
}


class InvalidTransition(Exception):
    pass


def load_profile(user):
    portal = portal_for(user.role)
    return {
        "id": user.id,
        "email": user.email,
        "username": user.username,
        "first_name": user.first_name,
        "last_name": user.last_name,
        "role": user.role,
        "department": user.department or department_for(user.role),
        "phone": user.phone,
        "permissions": permissions_for(user.role),
        "portal": portal.to_dict(),
    }


class AuthSession:
    def __init__(self, authenticate_fn=authenticate, profile_loader=load_profile):
        self._authenticate = authenticate_fn
        self._load_profile = profile_loader
        self.state = AuthState.UNAUTHENTICATED
        self.history = [self.state]
        self.user = None
        self.profile = None
        self.error = None

    def _transition(self, new_state):
        if new_state not in TRANSITIONS[self.state]:
            raise InvalidTransition(f"Cannot move from {self.state.value} to {new_state.value}")
        logger.debug("Auth session %s -> %s", self.state.value, new_state.value)
        self.state = new_state
        self.history.append(new_state)

    def _fail(self, message):
        self.error = message
        self.user = None
        self.profile = None
        self._transition(AuthState.FAILED)
        return False

    @property
    def is_ready(self):
        return self.state == AuthState.READY

    def sign_in(self, email, password, request=None):
        self.error = None
        self._transition(AuthState.AUTHENTICATING)

        user = self._authenticate(request, email=email, password=password)
        if user is None or not user.is_active:
            logger.info("Sign-in rejected for %s", email)
            return self._fail("Invalid email or password.")

        self.user = user
        self._transition(AuthState.PROFILE_LOADING)
        try:
            self.profile = self._load_profile(user)
        except Exception:
            logger.exception("Profile load failed for %s", email)
            return self._fail("Unable to load your profile. Please try again.")

        self._transition(AuthState.READY)
        return True

    def sign_out(self):
        self.user = None
        self.profile = None
        self._transition(AuthState.UNAUTHENTICATED)
