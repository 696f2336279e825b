"""Application context owning the (at most one) signed-in session."""
import logging

from client.api_client import BookmarksApiClient
from client.config import ClientSettings, get_client_settings
from client.notifier import LoggingNotifier, Notifier
from client.session import BookmarkSession
from core.realtime import BookmarkChannel, RealtimeTransport, RedisRealtimeTransport
from core.redis import RedisClient
from schemas.current_user import CurrentUser

logger = logging.getLogger(__name__)


class BookmarkApp:
    """
    Owns the client's only session.

    A session is created on sign-in and destroyed on sign-out; nothing about it
    lives in module globals.
    """

    def __init__(
        self,
        api: BookmarksApiClient,
        transport: RealtimeTransport,
        notifier: Notifier | None = None,
        redis_client: RedisClient | None = None,
    ) -> None:
        self._api = api
        self._transport = transport
        self._notifier = notifier or LoggingNotifier()
        self._redis = redis_client
        self._session: BookmarkSession | None = None

    @classmethod
    async def connect(
        cls,
        settings: ClientSettings | None = None,
        notifier: Notifier | None = None,
    ) -> "BookmarkApp":
        """Build an app wired to the configured API and Redis."""
        settings = settings or get_client_settings()
        redis_client = RedisClient(
            url=settings.redis_url,
            enabled=settings.redis_enabled,
            pool_size=settings.redis_pool_size,
        )
        await redis_client.connect()
        return cls(
            api=BookmarksApiClient.create(settings.api_url, timeout=settings.api_timeout),
            transport=RedisRealtimeTransport(redis_client),
            notifier=notifier,
            redis_client=redis_client,
        )

    @property
    def session(self) -> BookmarkSession | None:
        return self._session

    async def sign_in(self, user: CurrentUser, access_token: str) -> BookmarkSession:
        """Start a session for a user the identity provider has already signed in."""
        await self.sign_out(notify=False)
        session = BookmarkSession(
            user=user,
            access_token=access_token,
            api=self._api,
            channel=BookmarkChannel(self._transport, user.id),
            notifier=self._notifier,
        )
        try:
            await session.start()
        except BaseException:
            await session.close()
            raise
        self._session = session
        logger.info("session_started user_id=%s", user.id)
        return session

    async def sign_out(self, notify: bool = True) -> None:
        """Tear down the current session, if any."""
        session, self._session = self._session, None
        if session is None:
            return
        await session.close()
        logger.info("session_ended user_id=%s", session.user.id)
        if notify:
            self._notifier.success("Signed out successfully")

    async def aclose(self) -> None:
        """Sign out and release network resources."""
        await self.sign_out(notify=False)
        await self._api.aclose()
        if self._redis is not None:
            await self._redis.close()
