"""FastAPI dependencies for the Jarvis API.

Provides dependency injection for:
- Database sessions and the key store
- Core services (registration, lifecycle, dispatch, flush)
- The task dispatcher
- Admin basic authentication
"""

from __future__ import annotations

import hmac
from typing import Annotated

import structlog
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBasic, HTTPBasicCredentials
from sqlalchemy.ext.asyncio import AsyncSession

from jarvis.config import get_settings
from jarvis.db.session import get_session_dependency
from jarvis.delivery.base import DeliveryTask, TaskDispatcher, TaskHandle
from jarvis.delivery.lifecycle import get_delivery_pool
from jarvis.errors import DispatchFailure
from jarvis.services.dispatch import DispatchEngine
from jarvis.services.flush import BatchFlusher
from jarvis.services.lifecycle import KeyLifecycle
from jarvis.services.notifications import ConfirmationNotifier, build_notifier
from jarvis.services.policy import TrustPolicy
from jarvis.services.registration import RegistrationService
from jarvis.store.keys import KeyStore

logger = structlog.get_logger()

_basic = HTTPBasic(auto_error=False)


async def get_key_store(
    session: Annotated[AsyncSession, Depends(get_session_dependency)],
) -> KeyStore:
    return KeyStore(session)


def get_trust_policy() -> TrustPolicy:
    return TrustPolicy.from_trusted(get_settings().registration.trusted_sources)


def get_notifier() -> ConfirmationNotifier:
    return build_notifier(get_settings().notifications)


class _UnavailableDispatcher(TaskDispatcher):
    """Stands in when no pool is running; every hand-off fails."""

    def submit(self, task: DeliveryTask) -> TaskHandle:
        raise DispatchFailure(details={"reason": "pool_not_initialized"})


def get_dispatcher() -> TaskDispatcher:
    """Get the running delivery pool.

    Resolution never fails, so request validation still runs first when
    the pool is missing; the hand-off itself raises DispatchFailure.
    """
    pool = get_delivery_pool()
    if pool is None:
        return _UnavailableDispatcher()
    return pool


StoreDep = Annotated[KeyStore, Depends(get_key_store)]
DispatcherDep = Annotated[TaskDispatcher, Depends(get_dispatcher)]


async def get_key_lifecycle(
    store: StoreDep,
    policy: Annotated[TrustPolicy, Depends(get_trust_policy)],
    notifier: Annotated[ConfirmationNotifier, Depends(get_notifier)],
) -> KeyLifecycle:
    return KeyLifecycle(store=store, policy=policy, notifier=notifier)


async def get_registration_service(
    lifecycle: Annotated[KeyLifecycle, Depends(get_key_lifecycle)],
) -> RegistrationService:
    return RegistrationService(lifecycle)


async def get_dispatch_engine(store: StoreDep, dispatcher: DispatcherDep) -> DispatchEngine:
    return DispatchEngine(store=store, dispatcher=dispatcher)


async def get_batch_flusher(store: StoreDep, dispatcher: DispatcherDep) -> BatchFlusher:
    return BatchFlusher(store=store, dispatcher=dispatcher)


def require_admin(
    credentials: Annotated[HTTPBasicCredentials | None, Depends(_basic)],
) -> str:
    """Check admin basic-auth credentials and return the username.

    Raises:
        HTTPException: 401 when credentials are missing, wrong, or no
            admin account is configured
    """
    admin = get_settings().admin
    if credentials is not None and admin.enabled:
        user_ok = hmac.compare_digest(
            credentials.username.encode(), admin.username.encode()
        )
        password_ok = hmac.compare_digest(
            credentials.password.encode(), admin.password.encode()
        )
        if user_ok and password_ok:
            return credentials.username

    logger.warning("admin.auth.rejected", configured=admin.enabled)
    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Unauthorized",
        headers={"WWW-Authenticate": "Basic"},
    )


# Type aliases for cleaner dependency injection
KeyLifecycleDep = Annotated[KeyLifecycle, Depends(get_key_lifecycle)]
RegistrationServiceDep = Annotated[RegistrationService, Depends(get_registration_service)]
DispatchEngineDep = Annotated[DispatchEngine, Depends(get_dispatch_engine)]
BatchFlusherDep = Annotated[BatchFlusher, Depends(get_batch_flusher)]
AdminDep = Annotated[str, Depends(require_admin)]
