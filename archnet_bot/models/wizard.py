from __future__ import annotations

import json
import os
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional, Protocol, Tuple

import aiosqlite

from archnet_bot.models.api import DiscountTier, Plan
from archnet_bot.states.purchase import WizardStep


@dataclass(frozen=True, slots=True)
class WizardState:
    """One user's in-progress purchase. Replaced, never mutated."""

    plan_id: int
    plan_name: str
    unit_price: int
    unit_time: str
    discounts: Tuple[DiscountTier, ...] = ()
    quantity: Optional[int] = None
    payment_id: Optional[int] = None
    payment_name: str = ""
    step: WizardStep = WizardStep.SELECTING_QUANTITY

    @classmethod
    def from_plan(cls, plan: Plan) -> "WizardState":
        return cls(
            plan_id=plan.id,
            plan_name=plan.name,
            unit_price=plan.unit_price,
            unit_time=plan.unit_time,
            discounts=plan.discounts,
        )

    @property
    def ready_to_order(self) -> bool:
        return self.quantity is not None and self.payment_id is not None

    @property
    def estimated_total(self) -> int:
        return self.unit_price * (self.quantity or 0)

    def to_json(self) -> str:
        return json.dumps(
            {
                "plan_id": self.plan_id,
                "plan_name": self.plan_name,
                "unit_price": self.unit_price,
                "unit_time": self.unit_time,
                "discounts": [[tier.quantity, tier.discount] for tier in self.discounts],
                "quantity": self.quantity,
                "payment_id": self.payment_id,
                "payment_name": self.payment_name,
                "step": self.step.value,
            },
            ensure_ascii=False,
        )

    @classmethod
    def from_json(cls, raw: str) -> "WizardState":
        data: Dict[str, Any] = json.loads(raw)
        return cls(
            plan_id=int(data["plan_id"]),
            plan_name=data.get("plan_name", ""),
            unit_price=int(data.get("unit_price", 0)),
            unit_time=data.get("unit_time", ""),
            discounts=tuple(DiscountTier(int(q), int(d)) for q, d in data.get("discounts", [])),
            quantity=data.get("quantity"),
            payment_id=data.get("payment_id"),
            payment_name=data.get("payment_name", ""),
            step=WizardStep(data.get("step", WizardStep.SELECTING_QUANTITY.value)),
        )


class WizardStore(Protocol):
    async def get(self, user_id: int) -> Optional[WizardState]: ...

    async def save(self, user_id: int, state: WizardState) -> None: ...

    async def delete(self, user_id: int) -> None: ...


class MemoryWizardStore:
    def __init__(self) -> None:
        self._states: Dict[int, WizardState] = {}

    async def get(self, user_id: int) -> Optional[WizardState]:
        return self._states.get(user_id)

    async def save(self, user_id: int, state: WizardState) -> None:
        self._states[user_id] = state

    async def delete(self, user_id: int) -> None:
        self._states.pop(user_id, None)


class SQLiteWizardStore:
    def __init__(self, db_path: str) -> None:
        self._db_path = db_path
        directory = os.path.dirname(os.path.abspath(db_path))
        if directory and not os.path.exists(directory):
            os.makedirs(directory, exist_ok=True)

    async def init(self) -> None:
        async with aiosqlite.connect(self._db_path) as db:
            await db.execute(
                """
                CREATE TABLE IF NOT EXISTS wizard_states (
                    telegram_id INTEGER PRIMARY KEY,
                    payload TEXT NOT NULL,
                    updated_at REAL NOT NULL
                )
                """
            )
            await db.commit()

    async def get(self, user_id: int) -> Optional[WizardState]:
        async with aiosqlite.connect(self._db_path) as db:
            async with db.execute(
                "SELECT payload FROM wizard_states WHERE telegram_id = ?", (user_id,)
            ) as cursor:
                row = await cursor.fetchone()
        if row is None:
            return None
        try:
            return WizardState.from_json(row[0])
        except (KeyError, TypeError, ValueError):
            # written by an incompatible version; behave as if it never existed
            await self.delete(user_id)
            return None

    async def save(self, user_id: int, state: WizardState) -> None:
        async with aiosqlite.connect(self._db_path) as db:
            await db.execute(
                "INSERT OR REPLACE INTO wizard_states (telegram_id, payload, updated_at) VALUES (?, ?, ?)",
                (user_id, state.to_json(), time.time()),
            )
            await db.commit()

    async def delete(self, user_id: int) -> None:
        async with aiosqlite.connect(self._db_path) as db:
            await db.execute("DELETE FROM wizard_states WHERE telegram_id = ?", (user_id,))
            await db.commit()
