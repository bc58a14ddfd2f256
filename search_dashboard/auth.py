import hmac
import logging
from collections.abc import Mapping, MutableMapping
from dataclasses import dataclass, field
from typing import Any, Callable, Literal, Optional
from urllib.parse import quote

from fastapi import FastAPI, Request
from passlib.context import CryptContext
from starlette.concurrency import run_in_threadpool

from search_dashboard.exceptions import AuthenticationError, ConfigurationError, LoginRedirect
from search_dashboard.schemas.auth import Principal
from search_dashboard.services.session_store import SessionStore

# Initialize logging
logger = logging.getLogger(__name__)

# Password hashing context (argon2 is memory-hard and salted per hash)
pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")

# Marker written into the stored session context on successful login
SESSION_AUTH_KEY = "admin_user"

# Key of the session id inside the signed cookie
SESSION_ID_KEY = "sid"

LOGIN_PATH = "/admin/login"

GuardStyle = Literal["error", "redirect"]


# Function to hash a password
def hash_password(password: str) -> str:
    return pwd_context.hash(password)


# Function to verify a password
def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


@dataclass(frozen=True)
class AdminIdentity:
    email: str
    password_hash: str = field(repr=False)


class AdminAuthenticator:
    """
    Verifies credentials against the single configured administrator.

    The identity is built once from configuration and cannot be changed;
    installing a different administrator means building a new authenticator.
    """

    def __init__(self, email: Optional[str], password: Optional[str]):
        if not email or not email.strip() or not password:
            logger.error("Admin credentials not set in configuration")
            raise ConfigurationError("Admin credentials not configured")

        self._identity = AdminIdentity(email=email.strip(), password_hash=hash_password(password))

    @property
    def identity(self) -> AdminIdentity:
        return self._identity

    async def authenticate(self, email: Optional[str], password: Optional[str]) -> Optional[Principal]:
        """
        Check a credential pair against the configured administrator.

        Args:
            email (str): Submitted email.
            password (str): Submitted raw password.

        Returns:
            Principal | None: The admin principal, or None on any mismatch.
            Hash verification errors are logged and reported as a mismatch.
        """
        if not email or not password:
            return None

        # The hash is checked even when the email is wrong so both failures cost the same
        try:
            password_ok = await run_in_threadpool(verify_password, password, self._identity.password_hash)
        except Exception as e:
            logger.error(f"Error during authentication: {e}")
            return None

        email_ok = hmac.compare_digest(email.encode("utf-8"), self._identity.email.encode("utf-8"))
        if email_ok and password_ok:
            return Principal(email=self._identity.email)

        logger.warning("Login failed: invalid credentials")
        return None


def initialize_admin(app: FastAPI, email: Optional[str], password: Optional[str]) -> AdminIdentity:
    """Install the administrator identity on the application, replacing any previous one."""
    authenticator = AdminAuthenticator(email, password)
    app.state.authenticator = authenticator
    logger.info("Admin user initialized")
    return authenticator.identity


def get_authenticator(request: Request) -> Optional[AdminAuthenticator]:
    return getattr(request.app.state, "authenticator", None)


def get_session_store(request: Request) -> Optional[SessionStore]:
    return getattr(request.app.state, "session_store", None)


def is_authenticated(session: Any) -> bool:
    """True iff the stored session context carries the authentication marker."""
    if not isinstance(session, Mapping):
        return False
    return bool(session.get(SESSION_AUTH_KEY))


def mark_authenticated(session: MutableMapping, principal: Principal) -> None:
    session[SESSION_AUTH_KEY] = principal.model_dump()


def clear_authentication(session: MutableMapping) -> None:
    session.clear()


def _session_id(request: Request) -> Optional[str]:
    cookie = request.scope.get("session")
    if not isinstance(cookie, Mapping):
        return None
    session_id = cookie.get(SESSION_ID_KEY)
    return session_id if isinstance(session_id, str) and session_id else None


async def load_session(request: Request) -> Optional[dict]:
    """Resolve the session id presented by the client to its stored context."""
    session_id = _session_id(request)
    store = get_session_store(request)
    if session_id is None or store is None:
        return None
    return await store.get_session(session_id)


async def start_session(request: Request, principal: Principal) -> None:
    """Store an authenticated context and hand its id to the client."""
    context: dict = {}
    mark_authenticated(context, principal)
    session_id = await get_session_store(request).create_session(context)
    clear_authentication(request.session)
    request.session[SESSION_ID_KEY] = session_id


async def end_session(request: Request) -> None:
    """Delete the stored context and clear the cookie."""
    session_id = _session_id(request)
    store = get_session_store(request)
    if session_id is not None and store is not None:
        await store.delete_session(session_id)
    clear_authentication(request.session)


def login_url(next_path: Optional[str] = None) -> str:
    if not next_path or next_path == LOGIN_PATH:
        return LOGIN_PATH
    return f"{LOGIN_PATH}?next={quote(next_path, safe='/')}"


def _session_user(session: Mapping) -> Optional[str]:
    marker = session.get(SESSION_AUTH_KEY)
    if isinstance(marker, Mapping):
        return marker.get("email")
    return None


def require_session(on_failure: GuardStyle = "error") -> Callable:
    """
    Build a route dependency that admits only authenticated sessions.

    Args:
        on_failure: "error" answers with a structured 401, "redirect" sends
            the browser to the login view.
    """
    if on_failure not in ("error", "redirect"):
        raise ValueError(f"Unknown guard failure style: {on_failure}")

    async def _require_session(request: Request) -> None:
        session = await load_session(request)
        if is_authenticated(session):
            request.state.user = _session_user(session)
            return

        logger.info(f"Unauthenticated request to {request.url.path}")
        if on_failure == "redirect":
            raise LoginRedirect(login_url(request.url.path))
        raise AuthenticationError()

    return _require_session


require_auth = require_session("error")
require_auth_web = require_session("redirect")
