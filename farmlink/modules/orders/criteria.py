"""Typed filters for order listings."""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy import Select

from farmlink.models.enums import OrderStatus
from farmlink.models.order import Order
from farmlink.modules.orders.constants import DEFAULT_ORDER_LIST_LIMIT


@dataclass(frozen=True)
class OrderCriteria:
    status: OrderStatus | None = None
    limit: int = DEFAULT_ORDER_LIST_LIMIT

    def apply(self, query: Select) -> Select:
        if self.status is not None:
            query = query.where(Order.status == self.status)
        return query.limit(self.limit)
