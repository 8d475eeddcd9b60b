from __future__ import annotations

from dataclasses import dataclass
from typing import Dict


@dataclass(slots=True)
class TextCatalog:
    messages: Dict[str, Dict[str, str]]
    fallback: str = "en"

    def get(self, key: str, language: str = "en", **kwargs: object) -> str:
        lang = language if language in self.messages else self.fallback
        template = self.messages.get(lang, {}).get(key)
        if template is None:
            template = self.messages.get(self.fallback, {}).get(key, key)
        return template.format(**kwargs) if kwargs else template

    def button(self, key: str, language: str = "en") -> str:
        return self.get(key, language)


TEXTS = TextCatalog(
    messages={
        "en": {
            "choose_language": "🌐 Please choose your language:",
            "welcome": "👋 Welcome to <b>{bot_name}</b>!\n\nChoose an option from the menu below.",
            "auth_error": "⚠️ We could not sign you in right now. Please try /start again in a moment.",
            "session_expired": "⌛ Your session has expired. Please send /start to continue.",
            "generic_error": "⚠️ Something went wrong. Please try again later.",
            "unknown_command": "🤔 Unknown command. Use the menu buttons below.",
            "join_channel_required": "📢 To use the bot, please join our channel first and then send /start again.",
            "join_channel_button": "📢 Join channel",
            "save_failed": "Could not save your choice. Please try again.",
            "btn_my_services": "📊 My services",
            "btn_buy_service": "🛒 Buy service",
            "btn_balance": "💰 Balance",
            "btn_invitation": "🎁 Invite friends",
            "btn_prices": "💵 Prices",
            "btn_support": "🆘 Support",
            "btn_settings": "⚙️ Settings",
            "btn_change_language": "🌐 Change language",
            "btn_back": "◀️ Back",
            "btn_prev": "⬅️ Previous",
            "btn_next": "Next ➡️",
            "btn_select_plan": "✅ Choose this plan",
            "btn_month": "{months} month",
            "btn_months": "{months} months",
            "btn_confirm": "✅ Confirm",
            "btn_cancel": "❌ Cancel",
            "btn_pay_now": "💳 Pay now",
            "settings_menu": "⚙️ <b>Settings</b>\n\nWhat would you like to change?",
            "support_info": "🆘 Need help? Reply here with your question or contact our support team from the app.",
            "balance_info": "💰 Your balance: <b>{balance}</b>",
            "invite_info": (
                "🎁 <b>Invite friends</b>\n\n"
                "Your referral code: <code>{refer_code}</code>\n"
                "Registered friends: {registers}\n"
                "Total commission: {commission}"
            ),
            "error_loading_user": "⚠️ Could not load your account details. Please try again later.",
            "traffic_title": "📊 <b>Your services</b>",
            "traffic_item": (
                "<b>{name}</b>\n"
                "Used: {used} / {total} ({percent}%)\n"
                "⬇️ {download}  ⬆️ {upload}\n"
                "Expires: {expire}"
            ),
            "no_subscriptions": "You have no active services yet. Tap «🛒 Buy service» to get one.",
            "unlimited": "Unlimited",
            "never": "Never",
            "error_loading_subscriptions": "⚠️ Could not load your services. Please try again later.",
            "plan_details": (
                "<b>{name}</b>\n\n"
                "💵 Price: {price}\n"
                "📦 Traffic: {traffic}\n"
                "⏳ Duration: 1 {unit_time}\n"
                "📱 Devices: {devices}"
            ),
            "plan_page": "Plan {current} of {total}",
            "no_plans_available": "No plans are available right now.",
            "error_loading_plans": "⚠️ Could not load the plans. Please try again later.",
            "select_quantity": "<b>{plan_name}</b>\n\nChoose the subscription period:",
            "select_payment": "<b>{plan_name}</b> × {months}\n\nChoose a payment method:",
            "no_payment_methods": "No payment methods are available right now.",
            "error_loading_payments": "⚠️ Could not load payment methods. Please try again later.",
            "confirm_order": (
                "🧾 <b>Order summary</b>\n\n"
                "Plan: {plan_name}\n"
                "Period: {months}\n"
                "Payment: {payment_name}\n"
                "Total: <b>{total}</b>\n\n"
                "Confirm the order?"
            ),
            "order_cancelled": "❌ Order cancelled.",
            "order_created_balance": "✅ Order <code>{order_no}</code> is paid from your balance. Enjoy!",
            "order_created": "✅ Order <code>{order_no}</code> created. Tap the button below to pay.",
            "order_pending": "🕒 Order <code>{order_no}</code> created and is waiting for payment.",
            "error_creating_order": "⚠️ Could not create the order. Please try again.",
            "access_denied": "⛔ Access denied.",
            "admin_welcome": "👑 Welcome, administrator.",
            "admin_commands": "Available commands:\n/start_admin - show this message\n/status - service status",
        },
        "fa": {
            "choose_language": "🌐 لطفاً زبان خود را انتخاب کنید:",
            "welcome": "👋 به <b>{bot_name}</b> خوش آمدید!\n\nیکی از گزینه‌های منوی زیر را انتخاب کنید.",
            "auth_error": "⚠️ در حال حاضر ورود شما ممکن نیست. لطفاً کمی بعد دوباره /start را بفرستید.",
            "session_expired": "⌛ نشست شما منقضی شده است. برای ادامه /start را بفرستید.",
            "generic_error": "⚠️ خطایی رخ داد. لطفاً بعداً دوباره تلاش کنید.",
            "unknown_command": "🤔 دستور نامعتبر است. از دکمه‌های منو استفاده کنید.",
            "join_channel_required": "📢 برای استفاده از ربات ابتدا در کانال ما عضو شوید و سپس دوباره /start را بفرستید.",
            "join_channel_button": "📢 عضویت در کانال",
            "save_failed": "ذخیره انتخاب شما ممکن نشد. دوباره تلاش کنید.",
            "btn_my_services": "📊 سرویس‌های من",
            "btn_buy_service": "🛒 خرید سرویس",
            "btn_balance": "💰 موجودی",
            "btn_invitation": "🎁 دعوت از دوستان",
            "btn_prices": "💵 تعرفه‌ها",
            "btn_support": "🆘 پشتیبانی",
            "btn_settings": "⚙️ تنظیمات",
            "btn_change_language": "🌐 تغییر زبان",
            "btn_back": "◀️ بازگشت",
            "btn_prev": "⬅️ قبلی",
            "btn_next": "بعدی ➡️",
            "btn_select_plan": "✅ انتخاب این پلن",
            "btn_month": "{months} ماه",
            "btn_months": "{months} ماه",
            "btn_confirm": "✅ تأیید",
            "btn_cancel": "❌ لغو",
            "btn_pay_now": "💳 پرداخت",
            "settings_menu": "⚙️ <b>تنظیمات</b>\n\nچه چیزی را می‌خواهید تغییر دهید؟",
            "support_info": "🆘 سؤالی دارید؟ همین‌جا بپرسید یا از داخل برنامه با پشتیبانی تماس بگیرید.",
            "balance_info": "💰 موجودی شما: <b>{balance}</b>",
            "invite_info": (
                "🎁 <b>دعوت از دوستان</b>\n\n"
                "کد معرف شما: <code>{refer_code}</code>\n"
                "تعداد ثبت‌نام‌ها: {registers}\n"
                "مجموع پورسانت: {commission}"
            ),
            "error_loading_user": "⚠️ دریافت اطلاعات حساب ممکن نشد. بعداً تلاش کنید.",
            "traffic_title": "📊 <b>سرویس‌های شما</b>",
            "traffic_item": (
                "<b>{name}</b>\n"
                "مصرف: {used} / {total} ({percent}%)\n"
                "⬇️ {download}  ⬆️ {upload}\n"
                "انقضا: {expire}"
            ),
            "no_subscriptions": "هنوز سرویس فعالی ندارید. برای خرید «🛒 خرید سرویس» را بزنید.",
            "unlimited": "نامحدود",
            "never": "بدون انقضا",
            "error_loading_subscriptions": "⚠️ دریافت سرویس‌ها ممکن نشد. بعداً تلاش کنید.",
            "plan_details": (
                "<b>{name}</b>\n\n"
                "💵 قیمت: {price}\n"
                "📦 حجم: {traffic}\n"
                "⏳ مدت: 1 {unit_time}\n"
                "📱 تعداد دستگاه: {devices}"
            ),
            "plan_page": "پلن {current} از {total}",
            "no_plans_available": "در حال حاضر پلنی موجود نیست.",
            "error_loading_plans": "⚠️ دریافت پلن‌ها ممکن نشد. بعداً تلاش کنید.",
            "select_quantity": "<b>{plan_name}</b>\n\nمدت اشتراک را انتخاب کنید:",
            "select_payment": "<b>{plan_name}</b> × {months}\n\nروش پرداخت را انتخاب کنید:",
            "no_payment_methods": "در حال حاضر روش پرداختی موجود نیست.",
            "error_loading_payments": "⚠️ دریافت روش‌های پرداخت ممکن نشد. بعداً تلاش کنید.",
            "confirm_order": (
                "🧾 <b>خلاصه سفارش</b>\n\n"
                "پلن: {plan_name}\n"
                "مدت: {months}\n"
                "پرداخت: {payment_name}\n"
                "مبلغ کل: <b>{total}</b>\n\n"
                "سفارش را تأیید می‌کنید؟"
            ),
            "order_cancelled": "❌ سفارش لغو شد.",
            "order_created_balance": "✅ سفارش <code>{order_no}</code> از موجودی شما پرداخت شد.",
            "order_created": "✅ سفارش <code>{order_no}</code> ثبت شد. برای پرداخت دکمه زیر را بزنید.",
            "order_pending": "🕒 سفارش <code>{order_no}</code> ثبت شد و در انتظار پرداخت است.",
            "error_creating_order": "⚠️ ثبت سفارش ممکن نشد. دوباره تلاش کنید.",
            "access_denied": "⛔ دسترسی ندارید.",
            "admin_welcome": "👑 خوش آمدید، مدیر.",
            "admin_commands": "دستورات:\n/start_admin - نمایش این پیام\n/status - وضعیت سرویس",
        },
        "ru": {
            "choose_language": "🌐 Пожалуйста, выберите язык:",
            "welcome": "👋 Добро пожаловать в <b>{bot_name}</b>!\n\nВыберите пункт меню ниже.",
            "auth_error": "⚠️ Сейчас не удалось выполнить вход. Попробуйте /start чуть позже.",
            "session_expired": "⌛ Сессия истекла. Отправьте /start, чтобы продолжить.",
            "generic_error": "⚠️ Что-то пошло не так. Попробуйте позже.",
            "unknown_command": "🤔 Неизвестная команда. Воспользуйтесь кнопками меню.",
            "join_channel_required": "📢 Чтобы пользоваться ботом, подпишитесь на наш канал и снова отправьте /start.",
            "join_channel_button": "📢 Подписаться",
            "save_failed": "Не удалось сохранить выбор. Попробуйте ещё раз.",
            "btn_my_services": "📊 Мои услуги",
            "btn_buy_service": "🛒 Купить услугу",
            "btn_balance": "💰 Баланс",
            "btn_invitation": "🎁 Пригласить друзей",
            "btn_prices": "💵 Тарифы",
            "btn_support": "🆘 Поддержка",
            "btn_settings": "⚙️ Настройки",
            "btn_change_language": "🌐 Сменить язык",
            "btn_back": "◀️ Назад",
            "btn_prev": "⬅️ Назад",
            "btn_next": "Далее ➡️",
            "btn_select_plan": "✅ Выбрать тариф",
            "btn_month": "{months} месяц",
            "btn_months": "{months} мес.",
            "btn_confirm": "✅ Подтвердить",
            "btn_cancel": "❌ Отмена",
            "btn_pay_now": "💳 Оплатить",
            "settings_menu": "⚙️ <b>Настройки</b>\n\nЧто вы хотите изменить?",
            "support_info": "🆘 Нужна помощь? Напишите вопрос здесь или свяжитесь с поддержкой из приложения.",
            "balance_info": "💰 Ваш баланс: <b>{balance}</b>",
            "invite_info": (
                "🎁 <b>Пригласить друзей</b>\n\n"
                "Ваш реферальный код: <code>{refer_code}</code>\n"
                "Регистраций: {registers}\n"
                "Всего комиссии: {commission}"
            ),
            "error_loading_user": "⚠️ Не удалось загрузить данные аккаунта. Попробуйте позже.",
            "traffic_title": "📊 <b>Ваши услуги</b>",
            "traffic_item": (
                "<b>{name}</b>\n"
                "Использовано: {used} / {total} ({percent}%)\n"
                "⬇️ {download}  ⬆️ {upload}\n"
                "Действует до: {expire}"
            ),
            "no_subscriptions": "У вас пока нет активных услуг. Нажмите «🛒 Купить услугу».",
            "unlimited": "Безлимит",
            "never": "Бессрочно",
            "error_loading_subscriptions": "⚠️ Не удалось загрузить услуги. Попробуйте позже.",
            "plan_details": (
                "<b>{name}</b>\n\n"
                "💵 Цена: {price}\n"
                "📦 Трафик: {traffic}\n"
                "⏳ Срок: 1 {unit_time}\n"
                "📱 Устройств: {devices}"
            ),
            "plan_page": "Тариф {current} из {total}",
            "no_plans_available": "Сейчас нет доступных тарифов.",
            "error_loading_plans": "⚠️ Не удалось загрузить тарифы. Попробуйте позже.",
            "select_quantity": "<b>{plan_name}</b>\n\nВыберите срок подписки:",
            "select_payment": "<b>{plan_name}</b> × {months}\n\nВыберите способ оплаты:",
            "no_payment_methods": "Сейчас нет доступных способов оплаты.",
            "error_loading_payments": "⚠️ Не удалось загрузить способы оплаты. Попробуйте позже.",
            "confirm_order": (
                "🧾 <b>Ваш заказ</b>\n\n"
                "Тариф: {plan_name}\n"
                "Срок: {months}\n"
                "Оплата: {payment_name}\n"
                "Итого: <b>{total}</b>\n\n"
                "Подтвердить заказ?"
            ),
            "order_cancelled": "❌ Заказ отменён.",
            "order_created_balance": "✅ Заказ <code>{order_no}</code> оплачен с баланса.",
            "order_created": "✅ Заказ <code>{order_no}</code> создан. Нажмите кнопку ниже для оплаты.",
            "order_pending": "🕒 Заказ <code>{order_no}</code> создан и ожидает оплаты.",
            "error_creating_order": "⚠️ Не удалось создать заказ. Попробуйте ещё раз.",
            "access_denied": "⛔ Доступ запрещён.",
            "admin_welcome": "👑 Добро пожаловать, администратор.",
            "admin_commands": "Команды:\n/start_admin - показать это сообщение\n/status - состояние услуг",
        },
        "zh": {
            "choose_language": "🌐 请选择您的语言：",
            "welcome": "👋 欢迎使用 <b>{bot_name}</b>！\n\n请从下方菜单中选择。",
            "auth_error": "⚠️ 暂时无法登录，请稍后再发送 /start。",
            "session_expired": "⌛ 会话已过期，请发送 /start 继续。",
            "generic_error": "⚠️ 出现错误，请稍后再试。",
            "unknown_command": "🤔 未知命令，请使用菜单按钮。",
            "join_channel_required": "📢 使用机器人前请先加入我们的频道，然后再次发送 /start。",
            "join_channel_button": "📢 加入频道",
            "save_failed": "无法保存您的选择，请重试。",
            "btn_my_services": "📊 我的服务",
            "btn_buy_service": "🛒 购买服务",
            "btn_balance": "💰 余额",
            "btn_invitation": "🎁 邀请好友",
            "btn_prices": "💵 价格",
            "btn_support": "🆘 客服",
            "btn_settings": "⚙️ 设置",
            "btn_change_language": "🌐 切换语言",
            "btn_back": "◀️ 返回",
            "btn_prev": "⬅️ 上一个",
            "btn_next": "下一个 ➡️",
            "btn_select_plan": "✅ 选择此套餐",
            "btn_month": "{months} 个月",
            "btn_months": "{months} 个月",
            "btn_confirm": "✅ 确认",
            "btn_cancel": "❌ 取消",
            "btn_pay_now": "💳 立即支付",
            "settings_menu": "⚙️ <b>设置</b>\n\n您想修改什么？",
            "support_info": "🆘 需要帮助？请在此留言或在应用内联系客服。",
            "balance_info": "💰 您的余额：<b>{balance}</b>",
            "invite_info": (
                "🎁 <b>邀请好友</b>\n\n"
                "您的邀请码：<code>{refer_code}</code>\n"
                "注册人数：{registers}\n"
                "累计佣金：{commission}"
            ),
            "error_loading_user": "⚠️ 无法获取账户信息，请稍后再试。",
            "traffic_title": "📊 <b>您的服务</b>",
            "traffic_item": (
                "<b>{name}</b>\n"
                "已用：{used} / {total}（{percent}%）\n"
                "⬇️ {download}  ⬆️ {upload}\n"
                "到期：{expire}"
            ),
            "no_subscriptions": "您还没有有效的服务，点击「🛒 购买服务」开始。",
            "unlimited": "无限",
            "never": "永不过期",
            "error_loading_subscriptions": "⚠️ 无法获取服务，请稍后再试。",
            "plan_details": (
                "<b>{name}</b>\n\n"
                "💵 价格：{price}\n"
                "📦 流量：{traffic}\n"
                "⏳ 时长：1 {unit_time}\n"
                "📱 设备数：{devices}"
            ),
            "plan_page": "套餐 {current} / {total}",
            "no_plans_available": "当前没有可用的套餐。",
            "error_loading_plans": "⚠️ 无法获取套餐，请稍后再试。",
            "select_quantity": "<b>{plan_name}</b>\n\n请选择订阅时长：",
            "select_payment": "<b>{plan_name}</b> × {months}\n\n请选择支付方式：",
            "no_payment_methods": "当前没有可用的支付方式。",
            "error_loading_payments": "⚠️ 无法获取支付方式，请稍后再试。",
            "confirm_order": (
                "🧾 <b>订单确认</b>\n\n"
                "套餐：{plan_name}\n"
                "时长：{months}\n"
                "支付方式：{payment_name}\n"
                "总计：<b>{total}</b>\n\n"
                "确认下单吗？"
            ),
            "order_cancelled": "❌ 订单已取消。",
            "order_created_balance": "✅ 订单 <code>{order_no}</code> 已使用余额支付。",
            "order_created": "✅ 订单 <code>{order_no}</code> 已创建，点击下方按钮支付。",
            "order_pending": "🕒 订单 <code>{order_no}</code> 已创建，等待支付。",
            "error_creating_order": "⚠️ 无法创建订单，请重试。",
            "access_denied": "⛔ 无权访问。",
            "admin_welcome": "👑 欢迎，管理员。",
            "admin_commands": "可用命令：\n/start_admin - 显示此消息\n/status - 服务状态",
        },
    }
)
