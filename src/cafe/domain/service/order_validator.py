"""Domain service: structural validation of an order request.

Runs before anything is read from the menu or the inventory, so a
malformed request never costs a lookup or a transaction.
"""

from __future__ import annotations

from cafe.domain.exceptions import ValidationError
from cafe.domain.model.order_request import OrderRequest


class OrderValidator:

    def validate(self, request: OrderRequest) -> OrderRequest:
        """Return *request* unchanged, or raise on the first broken rule.

        Rules, in order:
          1. customer name is non-empty after trimming
          2. at least one line
          3. every line quantity is a positive integer
        """
        if not request.customer_name or not request.customer_name.strip():
            raise ValidationError("Customer name is required")

        if not request.lines:
            raise ValidationError("Order must contain at least one item")

        for line in request.lines:
            qty = line.quantity
            if isinstance(qty, bool) or not isinstance(qty, int):
                raise ValidationError(
                    f"Quantity for product #{line.product_id} must be an integer"
                )
            if qty <= 0:
                raise ValidationError(
                    f"Quantity for product #{line.product_id} must be positive, got {qty}"
                )

        return request
