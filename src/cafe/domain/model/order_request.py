"""What the customer asked for, before anything has been checked."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class OrderLineRequest:
    product_id: int
    quantity: int


@dataclass(frozen=True)
class OrderRequest:
    customer_name: str
    lines: list[OrderLineRequest] = field(default_factory=list)
