from __future__ import annotations

from enum import IntEnum
from typing import Dict, Optional

SUCCESS = 200

# 400xx: request / token problems
INVALID_PARAMS = 400
TOO_MANY_REQUESTS = 401
SERVER_ERROR = 500
DATABASE_QUERY_ERROR = 10001
DATABASE_UPDATE_ERROR = 10002
DATABASE_INSERT_ERROR = 10003
DATABASE_DELETE_ERROR = 10004
USER_EXIST = 20001
USER_NOT_EXIST = 20002
USER_PASSWORD_ERROR = 20003
USER_DISABLED = 20004
INSUFFICIENT_BALANCE = 20005
STOP_REGISTER = 20006
TELEGRAM_NOT_BOUND = 20007
USER_NOT_BIND_OAUTH = 20008
INVITE_CODE_ERROR = 20009
REGISTER_IP_LIMIT = 20010
NODE_EXIST = 30001
NODE_NOT_EXIST = 30002
NODE_GROUP_NOT_EMPTY = 30003
ERROR_TOKEN_EMPTY = 40002
ERROR_TOKEN_INVALID = 40003
ERROR_TOKEN_EXPIRE = 40004
INVALID_ACCESS = 40005
INVALID_CIPHERTEXT = 40006
SECRET_IS_EMPTY = 40007
COUPON_NOT_EXIST = 50001
COUPON_ALREADY_USED = 50002
COUPON_NOT_APPLICABLE = 50003
COUPON_INSUFFICIENT_USAGE = 50004
SUBSCRIBE_EXPIRED = 60001
SUBSCRIBE_NOT_AVAILABLE = 60002
USER_ALREADY_SUBSCRIBED = 60003
SUBSCRIBE_IS_USED = 60004
SINGLE_SUBSCRIBE_MODE_EXCEEDS_LIMIT = 60005
SUBSCRIBE_QUOTA_LIMIT = 60006
SUBSCRIBE_OUT_OF_STOCK = 60007
ORDER_NOT_EXIST = 61001
PAYMENT_METHOD_NOT_FOUND = 61002
ORDER_STATUS_ERROR = 61003
INSUFFICIENT_OF_PERIOD = 61004
EXIST_AVAILABLE_TRAFFIC = 61005

AUTH_ERROR_CODES = frozenset(range(ERROR_TOKEN_EMPTY, SECRET_IS_EMPTY + 1))

MESSAGES: Dict[int, str] = {
    SUCCESS: "Success",
    INVALID_PARAMS: "Param Error",
    TOO_MANY_REQUESTS: "Too Many Requests",
    SERVER_ERROR: "Server Error",
    USER_NOT_EXIST: "User does not exist",
    USER_DISABLED: "User disabled",
    INSUFFICIENT_BALANCE: "Insufficient balance",
    TELEGRAM_NOT_BOUND: "Telegram account not bound",
    ERROR_TOKEN_EMPTY: "User token is empty",
    ERROR_TOKEN_INVALID: "User token is invalid",
    ERROR_TOKEN_EXPIRE: "User token is expired",
    INVALID_ACCESS: "Invalid access",
    INVALID_CIPHERTEXT: "Invalid ciphertext",
    SECRET_IS_EMPTY: "Secret is empty",
    SUBSCRIBE_NOT_AVAILABLE: "Subscribe not available",
    SUBSCRIBE_OUT_OF_STOCK: "Subscribe out of stock",
    ORDER_NOT_EXIST: "Order does not exist",
    PAYMENT_METHOD_NOT_FOUND: "Payment method not found",
    ORDER_STATUS_ERROR: "Order status error",
}


class OrderStatus(IntEnum):
    PENDING = 1
    PAID = 2
    CLOSED = 3
    FAILED = 4
    FINISHED = 5

    @classmethod
    def parse(cls, raw: object) -> Optional["OrderStatus"]:
        try:
            return cls(int(raw))  # type: ignore[arg-type]
        except (TypeError, ValueError):
            return None


def is_success(code: object) -> bool:
    return code == SUCCESS


def is_auth_error(code: object) -> bool:
    return code in AUTH_ERROR_CODES


def describe(code: int) -> str:
    return MESSAGES.get(code, f"Unknown error ({code})")
