"""
Use cases: Broker auth bridge and broker OAuth login.

AuthorizeBrokerTokenUseCase relays who owns a broker token.
BrokerLoginUseCase handles the OAuth redirect: it authorizes the first
returned token, links the user's demo and real accounts and opens a
session.

Input: token / BrokerLoginCommand (acctN, tokenN, curN triples)
Output: BrokerIdentityResult / BrokerLoginResult
Side effects: BrokerLoginUseCase upserts users, accounts and
    user_settings rows and inserts a session.
Failure cases: BrokerAuthorizationError, BrokerTimeoutError,
    BrokerProfileIncompleteError, BrokerError.
"""

import logging
from dataclasses import replace
from typing import Optional

from app.application.accounts.dtos import (
    BrokerIdentityResult,
    BrokerLoginCommand,
    BrokerLoginResult,
)
from app.application.accounts.sessions import SessionIssuer
from app.domain.accounts.entities import (
    AuthProvider,
    LinkedAccount,
    User,
    UserSettings,
    new_id,
    utcnow,
)
from app.domain.accounts.ports import (
    LinkedAccountRepository,
    UserRepository,
    UserSettingsRepository,
)
from app.domain.trading.entities import BrokerAuthorization
from app.domain.trading.errors import BrokerAuthorizationError, BrokerProfileIncompleteError
from app.domain.trading.ports import BrokerGateway

logger = logging.getLogger(__name__)

BROKER_PROVIDER = "deriv"
DEFAULT_BROKER_USER_NAME = "Deriv User"
DEMO_PREFIX = "VRTC"
REAL_PREFIX = "CR"


def _require_identity(auth: BrokerAuthorization) -> tuple[str, str]:
    if not auth.broker_user_id:
        raise BrokerProfileIncompleteError("a user id")
    if not auth.email:
        raise BrokerProfileIncompleteError("an email")
    return auth.broker_user_id, auth.email


class AuthorizeBrokerTokenUseCase:
    def __init__(self, broker: BrokerGateway) -> None:
        self._broker = broker

    def execute(self, token: str) -> BrokerIdentityResult:
        auth = self._broker.authorize(token)
        user_id, email = _require_identity(auth)
        return BrokerIdentityResult(deriv_user_id=user_id, email=email, name=auth.fullname)


def split_accounts(
    auth: BrokerAuthorization,
) -> tuple[Optional[str], Optional[float], Optional[str], Optional[float]]:
    """Pick the demo and real login ids and balances from an authorize reply.

    The account list rarely carries balances, so the primary account's
    balance fills in for whichever side it belongs to.

    Returns:
        (demo_id, demo_balance, real_id, real_balance)
    """
    demo = next((a for a in auth.accounts if a.is_demo), None)
    real = next((a for a in auth.accounts if a.is_real), None)
    demo_id = demo.loginid if demo else None
    demo_balance = demo.balance if demo else None
    real_id = real.loginid if real else None
    real_balance = real.balance if real else None

    if auth.loginid.startswith(DEMO_PREFIX) and demo_balance is None:
        demo_id, demo_balance = auth.loginid, auth.balance
    elif auth.loginid.startswith(REAL_PREFIX) and real_balance is None:
        real_id, real_balance = auth.loginid, auth.balance
    return demo_id, demo_balance, real_id, real_balance


class BrokerLoginUseCase:
    """Sign a user in through the broker's OAuth redirect."""

    def __init__(
        self,
        broker: BrokerGateway,
        users: UserRepository,
        linked_accounts: LinkedAccountRepository,
        settings: UserSettingsRepository,
        issuer: SessionIssuer,
    ) -> None:
        self._broker = broker
        self._users = users
        self._linked_accounts = linked_accounts
        self._settings = settings
        self._issuer = issuer

    def _upsert_user(self, broker_user_id: str, email: str, name: str) -> User:
        email = email.lower()
        user = self._users.get_by_deriv_account_id(broker_user_id)
        if user is None:
            user = self._users.get_by_email(email)
        if user is not None:
            return self._users.update(
                replace(
                    user,
                    name=name,
                    email=email,
                    deriv_account_id=broker_user_id,
                    updated_at=utcnow(),
                )
            )
        logger.info("Creating user for broker account %s", broker_user_id)
        return self._users.add(
            User(
                id=new_id(),
                email=email,
                name=name,
                provider=AuthProvider.DERIV,
                deriv_account_id=broker_user_id,
            )
        )

    def execute(self, command: BrokerLoginCommand) -> BrokerLoginResult:
        if not command.accounts or not command.accounts[0].token:
            raise BrokerAuthorizationError(
                "No account tokens found in callback parameters", code="NoToken"
            )
        token = command.accounts[0].token

        auth = self._broker.authorize(token)
        broker_user_id, email = _require_identity(auth)
        demo_id, demo_balance, real_id, real_balance = split_accounts(auth)
        name = auth.fullname or auth.loginid or DEFAULT_BROKER_USER_NAME

        user = self._upsert_user(broker_user_id, email, name)
        self._linked_accounts.upsert(
            LinkedAccount(
                user_id=user.id,
                provider=BROKER_PROVIDER,
                provider_account_id=broker_user_id,
                access_token=token,
            )
        )

        current = self._settings.get(user.id) or UserSettings(user_id=user.id)
        self._settings.save(
            replace(
                current,
                deriv_demo_account_id=demo_id or current.deriv_demo_account_id,
                deriv_real_account_id=real_id or current.deriv_real_account_id,
                deriv_demo_balance=demo_balance if demo_balance is not None else current.deriv_demo_balance,
                deriv_real_balance=real_balance if real_balance is not None else current.deriv_real_balance,
                deriv_api_token=token,
                last_balance_sync=utcnow(),
            )
        )
        logger.info(
            "Broker login for user %s (demo=%s, real=%s)", user.id, demo_id, real_id
        )
        return BrokerLoginResult(
            session=self._issuer.issue(user),
            deriv_user_id=broker_user_id,
            demo_account_id=demo_id,
            real_account_id=real_id,
            demo_balance=demo_balance,
            real_balance=real_balance,
        )
