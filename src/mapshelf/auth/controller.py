"""
Client-side session lifecycle.

The controller is the only writer of the SessionTokenStore. Session
transitions:

  INIT --startup refresh ok--> AUTHENTICATED
  INIT --startup refresh fails--> ANONYMOUS
  AUTHENTICATED --logout | refresh fails | account deleted--> ANONYMOUS
  ANONYMOUS --login ok--> AUTHENTICATED

Every session-mutating operation takes a ticket when it starts. Its result is
applied only if no operation that started later has already been applied, so
a slow login that completes after a logout cannot bring the session back.
"""

from __future__ import annotations

import asyncio
import itertools

from mapshelf.api.client import AuthApiClient
from mapshelf.api.errors import ApiError, AuthError
from mapshelf.api.models import User
from mapshelf.auth.models import SignupResult, VerifyEmailResult, VerifyStatus, verify_status_for
from mapshelf.auth.schemas import (
    ChangePasswordForm,
    DeleteAccountForm,
    EmailForm,
    LoginForm,
    LoginSignupForm,
    ProfileForm,
    ResetPasswordForm,
    VerifyEmailForm,
    validate_form,
)
from mapshelf.auth.store import Session, SessionTokenStore
from mapshelf.utils.log import logger, set_user_id


class AuthSessionController:
    def __init__(self, api: AuthApiClient, store: SessionTokenStore) -> None:
        if not isinstance(api, AuthApiClient):
            raise TypeError("AuthSessionController requires an AuthApiClient")
        if not isinstance(store, SessionTokenStore):
            raise TypeError("AuthSessionController requires a SessionTokenStore")
        self.api = api
        self.store = store
        self._tickets = itertools.count(1)
        self._applied = 0
        self._init_task: asyncio.Task[Session] | None = None
        self._renew_task: asyncio.Task[str | None] | None = None

        api.set_token_source(lambda: self.store.access_token)
        api.set_refresh_handler(self.refresh_access_token)

    @property
    def session(self) -> Session:
        return self.store.get()

    # --- ticketing ---

    def _ticket(self) -> int:
        return next(self._tickets)

    def _apply_set(self, ticket: int, user: User, access_token: str, *, op: str) -> bool:
        if ticket <= self._applied:
            logger.info("auth.stale_result_dropped", op=op, ticket=ticket, applied=self._applied)
            return False
        self._applied = ticket
        self.store.set(user, access_token)
        set_user_id(str(user.id))
        return True

    def _apply_clear(self, ticket: int, *, op: str) -> bool:
        if ticket <= self._applied:
            logger.info("auth.stale_result_dropped", op=op, ticket=ticket, applied=self._applied)
            return False
        self._applied = ticket
        self.store.clear()
        set_user_id(None)
        return True

    async def _resolve_user(self, user: User | None, access_token: str) -> User:
        if user is not None:
            return user
        me = await self.api.get_me(token=access_token)
        return me.user

    # --- lifecycle ---

    async def initialize(self) -> Session:
        """
        Restore a session from an existing refresh cookie, once.

        Resolves when the session has left INIT. Later calls await the same
        result instead of refreshing again.
        """
        if self._init_task is None:
            self._init_task = asyncio.ensure_future(self._initialize())
        return await self._init_task

    async def _initialize(self) -> Session:
        try:
            await self.refresh()
        finally:
            self.store.set_loading(False)
        logger.info("auth.initialized", state=self.session.state.value)
        return self.session

    async def login(self, email: str, password: str) -> Session:
        form = validate_form(LoginForm, email=email, password=password)
        ticket = self._ticket()
        try:
            data = await self.api.login(email=form.email, password=form.password)
            user = await self._resolve_user(data.user, data.access_token)
        except AuthError as ex:
            logger.info("auth.login_failed", code=getattr(ex, "code", None))
            raise
        if self._apply_set(ticket, user, data.access_token, op="login"):
            logger.info("auth.login_ok", user_id=str(user.id))
        return self.session

    async def logout(self) -> Session:
        ticket = self._ticket()
        try:
            await self.api.logout()
        except AuthError as ex:
            # Local logout always wins over the remote call.
            logger.warning("auth.logout_remote_failed", error=type(ex).__name__, code=ex.code)
        except Exception:
            logger.warning("auth.logout_remote_error", exc_info=True)
        finally:
            self._apply_clear(ticket, op="logout")
        logger.info("auth.logout")
        return self.session

    async def refresh(self) -> Session:
        """
        Exchange the refresh cookie for a new access token.

        Never raises: any failure means "no valid session" and clears the store.
        """
        ticket = self._ticket()
        self.store.set_loading(True)
        try:
            data = await self.api.refresh()
            user = await self._resolve_user(data.user, data.access_token)
        except AuthError as ex:
            logger.info("auth.refresh_failed", error=type(ex).__name__, code=ex.code)
            self._apply_clear(ticket, op="refresh")
        else:
            self._apply_set(ticket, user, data.access_token, op="refresh")
        finally:
            self.store.set_loading(False)
        return self.session

    async def refresh_access_token(self) -> str | None:
        """
        Single-flight token renewal for 401 replays.

        Concurrent callers share one refresh call and receive its token, or
        None when the session could not be renewed.
        """
        if self._renew_task is None or self._renew_task.done():
            self._renew_task = asyncio.ensure_future(self._renew())
        return await asyncio.shield(self._renew_task)

    async def _renew(self) -> str | None:
        snap = await self.refresh()
        return snap.access_token

    # --- stateless account flows ---

    async def signup(self, email: str, password: str, language: str | None = None) -> SignupResult:
        form = validate_form(LoginSignupForm, email=email, password=password, language=language)
        data = await self.api.signup(email=form.email, password=form.password, language=form.language)
        logger.info("auth.signup_ok")
        return SignupResult(user=data.user, verification_email_sent=True)

    async def forgot_password(self, email: str, language: str | None = None) -> None:
        form = validate_form(EmailForm, email=email, language=language)
        await self.api.forgot_password(email=form.email, language=form.language)
        logger.info("auth.forgot_password_requested")

    async def reset_password(self, token: str, password: str) -> None:
        form = validate_form(ResetPasswordForm, token=token, password=password)
        await self.api.reset_password(token=form.token, password=form.password)
        logger.info("auth.password_reset_ok")

    async def verify_email(self, token: str) -> VerifyEmailResult:
        """
        Verify an email address; never changes the current session.

        Client errors from the API come back as a result with a status;
        server errors and transport failures raise.
        """
        form = validate_form(VerifyEmailForm, token=token)
        try:
            data = await self.api.verify_email(token=form.token)
        except ApiError as ex:
            if ex.status_code >= 500 or ex.status_code == 429:
                raise
            status = verify_status_for(ex.code, ex.status_code)
            logger.info("auth.verify_email_failed", status=status.value, code=ex.code)
            return VerifyEmailResult(
                status=status, code=ex.code, message=ex.message or None, payload=ex.payload
            )
        logger.info("auth.verify_email_ok")
        return VerifyEmailResult(
            status=VerifyStatus.verified, user=data.user, redirect_url=data.redirect_url
        )

    async def resend_email(self, email: str, language: str | None = None) -> None:
        form = validate_form(EmailForm, email=email, language=language)
        await self.api.resend_verification(email=form.email, language=form.language)
        logger.info("auth.verification_resent")

    # --- account management (requires a session) ---

    async def update_profile(
        self, name: str | None = None, avatar_url: str | None = None, bio: str | None = None
    ) -> Session:
        form = validate_form(ProfileForm, name=name, avatar_url=avatar_url, bio=bio)
        data = await self.api.update_me(name=form.name, avatar_url=form.avatar_url, bio=form.bio)
        # Ticket after the call: a renewal inside it must not outrank this result.
        ticket = self._ticket()
        token = self.store.access_token
        if token:
            self._apply_set(ticket, data.user, token, op="update_profile")
        return self.session

    async def change_password(self, old_password: str, new_password: str) -> None:
        form = validate_form(ChangePasswordForm, old_password=old_password, new_password=new_password)
        await self.api.change_password(old_password=form.old_password, new_password=form.new_password)
        logger.info("auth.password_changed")

    async def delete_account(self, password: str, language: str | None = None) -> Session:
        form = validate_form(DeleteAccountForm, password=password, language=language)
        await self.api.delete_account(password=form.password, language=form.language)
        ticket = self._ticket()
        self._apply_clear(ticket, op="delete_account")
        logger.info("auth.account_deleted")
        return self.session


def build_session(
    api: AuthApiClient | None = None, store: SessionTokenStore | None = None
) -> AuthSessionController:
    """
    Wire a controller with its collaborators for one process/request scope.
    """
    return AuthSessionController(api or AuthApiClient(), store or SessionTokenStore())


__all__ = ["AuthSessionController", "build_session"]
