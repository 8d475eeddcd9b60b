"""Backend API paths, relative to ``API_BASE_URL``."""

TELEGRAM_LOGIN = "/v1/auth/login/telegram"
ADMIN_LOGIN = "/v1/auth/login"
AUTH_METHOD_CONFIG = "/v1/admin/auth-method/config"

USER_INFO = "/v1/public/user/info"
USER_LANGUAGE = "/v1/public/user/lang"
USER_SUBSCRIPTIONS = "/v1/public/user/subscribe"
USER_AFFILIATE_COUNT = "/v1/public/user/affiliate/count"

PLAN_LIST = "/v1/public/subscribe/list"
PAYMENT_METHODS = "/v1/public/payment/methods"

ORDER_PREVIEW = "/v1/public/order/pre"
ORDER_PURCHASE = "/v1/public/order/purchase"
ORDER_DETAIL = "/v1/public/order/detail"
ORDER_CHECKOUT = "/v1/public/portal/order/checkout"
