"""Parsers for the compact ``id:amount`` lists the commands accept."""

from __future__ import annotations

import click

from cafe.domain.model.order_request import OrderLineRequest


def _pairs(raw: str, what: str) -> list[tuple[int, str]]:
    pairs: list[tuple[int, str]] = []
    for pair in raw.split(","):
        pair = pair.strip()
        if not pair:
            continue
        if ":" not in pair:
            raise click.BadParameter(
                f"Invalid {what} format '{pair}'. Expected 'ID:Quantity'."
            )
        id_str, amount = pair.split(":", 1)
        try:
            item_id = int(id_str)
        except ValueError:
            raise click.BadParameter(f"Invalid {what} id '{id_str.strip()}'.")
        pairs.append((item_id, amount.strip()))
    return pairs


def parse_order_lines(raw: str) -> list[OrderLineRequest]:
    """Parse '1:2,3:1' (product id : cups) into order line requests."""
    lines: list[OrderLineRequest] = []
    for product_id, qty_str in _pairs(raw, "item"):
        try:
            qty = int(qty_str)
        except ValueError:
            raise click.BadParameter(
                f"Invalid quantity '{qty_str}' for product #{product_id}."
            )
        lines.append(OrderLineRequest(product_id=product_id, quantity=qty))
    return lines


def parse_recipe(raw: str) -> list[tuple[int, str]]:
    """Parse '1:18,2:150' (ingredient id : amount per unit) into pairs."""
    return _pairs(raw, "ingredient")
