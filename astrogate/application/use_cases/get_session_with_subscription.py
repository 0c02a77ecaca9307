from __future__ import annotations

from astrogate.application.dto.session import SessionWithSubscriptionOutput
from astrogate.application.use_cases.resolve_subscription import SubscriptionResolver
from astrogate.application.use_cases.session_store import SessionStore


class GetSessionWithSubscriptionUseCase:
    def __init__(self, *, session_store: SessionStore, resolver: SubscriptionResolver):
        self._session_store = session_store
        self._resolver = resolver

    def execute(self) -> SessionWithSubscriptionOutput | None:
        session = self._session_store.read()
        if session is None:
            return None

        status = self._resolver.resolve(session.user_id)
        return SessionWithSubscriptionOutput(
            user_id=session.user_id,
            username=session.username,
            subscription_plan=status.plan,
            is_subscription_active=status.is_active,
            trial_days_left=status.trial_days_left,
        )
