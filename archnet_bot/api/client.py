from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List, Optional

import aiohttp

from archnet_bot.api import codes, endpoints
from archnet_bot.models.api import (
    AffiliateCount,
    Checkout,
    OrderDetail,
    PaymentMethod,
    Plan,
    PreOrder,
    UserInfo,
    UserSubscription,
    extract_items,
)

logger = logging.getLogger(__name__)


class BackendError(Exception):
    """Base class for every failure talking to the subscription backend."""


class TransportError(BackendError):
    """Network failure, timeout or a body that is not a JSON envelope."""


class ApiError(BackendError):
    def __init__(self, code: int, message: str = "") -> None:
        self.code = code
        self.message = message or codes.describe(code)
        super().__init__(f"api error {code}: {self.message}")

    @property
    def is_auth_error(self) -> bool:
        return codes.is_auth_error(self.code)


class BackendClient:
    """Thin aiohttp wrapper around the ``{code, message, data}`` envelope API."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        session: Optional[aiohttp.ClientSession] = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = aiohttp.ClientTimeout(total=timeout)
        self._session = session

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self._timeout)
        return self._session

    async def close(self) -> None:
        if self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None

    async def request(
        self,
        method: str,
        path: str,
        *,
        token: str = "",
        params: Optional[Dict[str, Any]] = None,
        payload: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """Perform a call and return the envelope's ``data`` field.

        Raises ``ApiError`` when the envelope code is not success and
        ``TransportError`` when no envelope could be read at all.
        """
        session = await self._get_session()
        headers = {"Accept": "application/json"}
        if token:
            headers["Authorization"] = token
        url = f"{self._base_url}{path}"
        try:
            async with session.request(
                method, url, params=params, json=payload, headers=headers
            ) as response:
                status = response.status
                try:
                    body = await response.json(content_type=None)
                except ValueError as exc:
                    raise TransportError(
                        f"{method} {path}: undecodable body (HTTP {status})"
                    ) from exc
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            raise TransportError(f"{method} {path}: {exc!r}") from exc

        if not isinstance(body, dict) or "code" not in body:
            raise TransportError(f"{method} {path}: unexpected response (HTTP {status})")
        code = body.get("code")
        if not codes.is_success(code):
            try:
                code = int(code)
            except (TypeError, ValueError):
                raise TransportError(f"{method} {path}: malformed code {code!r}") from None
            logger.debug("%s %s -> code %s", method, path, code)
            raise ApiError(code, str(body.get("message") or ""))
        return body.get("data")

    # auth

    async def login_telegram(self, payload: Dict[str, Any]) -> str:
        data = await self.request("POST", endpoints.TELEGRAM_LOGIN, payload=payload)
        return str(data.get("token") or "") if isinstance(data, dict) else ""

    async def login(self, email: str, password: str) -> str:
        data = await self.request(
            "POST", endpoints.ADMIN_LOGIN, payload={"email": email, "password": password}
        )
        return str(data.get("token") or "") if isinstance(data, dict) else ""

    async def get_bot_token(self, admin_token: str, method: str = "telegram") -> str:
        data = await self.request(
            "GET", endpoints.AUTH_METHOD_CONFIG, token=admin_token, params={"method": method}
        )
        config = data.get("config") if isinstance(data, dict) else None
        if not isinstance(config, dict):
            return ""
        return str(config.get("bot_token") or "")

    # user

    async def get_user_info(self, token: str) -> UserInfo:
        data = await self.request("GET", endpoints.USER_INFO, token=token)
        return UserInfo.from_payload(data)

    async def update_language(self, token: str, language: str) -> None:
        await self.request("PUT", endpoints.USER_LANGUAGE, token=token, payload={"lang": language})

    async def get_subscriptions(self, token: str) -> List[UserSubscription]:
        data = await self.request("GET", endpoints.USER_SUBSCRIPTIONS, token=token)
        return [UserSubscription.from_payload(item) for item in extract_items(data)]

    async def get_affiliate_count(self, token: str) -> AffiliateCount:
        data = await self.request("GET", endpoints.USER_AFFILIATE_COUNT, token=token)
        return AffiliateCount.from_payload(data)

    # catalog

    async def get_plans(self, token: str, language: str = "") -> List[Plan]:
        params = {"language": language} if language else None
        data = await self.request("GET", endpoints.PLAN_LIST, token=token, params=params)
        return [Plan.from_payload(item) for item in extract_items(data)]

    async def get_payment_methods(self, token: str) -> List[PaymentMethod]:
        data = await self.request("GET", endpoints.PAYMENT_METHODS, token=token)
        return [PaymentMethod.from_payload(item) for item in extract_items(data)]

    # orders

    async def preview_order(
        self, token: str, plan_id: int, quantity: int, payment_id: int
    ) -> PreOrder:
        data = await self.request(
            "POST",
            endpoints.ORDER_PREVIEW,
            token=token,
            payload={"subscribe_id": plan_id, "quantity": quantity, "payment": payment_id},
        )
        return PreOrder.from_payload(data)

    async def purchase(self, token: str, plan_id: int, quantity: int, payment_id: int) -> str:
        data = await self.request(
            "POST",
            endpoints.ORDER_PURCHASE,
            token=token,
            payload={"subscribe_id": plan_id, "quantity": quantity, "payment": payment_id},
        )
        order_no = data.get("order_no") if isinstance(data, dict) else None
        if not order_no:
            raise TransportError(f"POST {endpoints.ORDER_PURCHASE}: response without order_no")
        return str(order_no)

    async def checkout(self, token: str, order_no: str) -> Checkout:
        data = await self.request(
            "POST", endpoints.ORDER_CHECKOUT, token=token, payload={"order_no": order_no}
        )
        return Checkout.from_payload(data)

    async def get_order_detail(self, token: str, order_no: str) -> OrderDetail:
        data = await self.request(
            "GET", endpoints.ORDER_DETAIL, token=token, params={"order_no": order_no}
        )
        detail = OrderDetail.from_payload(data)
        if not detail.order_no:
            detail.order_no = order_no
        return detail
