"""Receipt data for completed sales."""

from datetime import datetime
from typing import Optional

from tillkit.domain.entities import (
    Payment,
    PaymentMethod,
    Receipt,
    ReceiptLine,
    SettlementResult,
    Transaction,
    TransactionItem,
    Product,
)
from tillkit.utils.amount_parser import format_money, quantize_money

RECEIPT_WIDTH = 44


def build_receipt(
    transaction_number: str,
    settlement: SettlementResult,
    customer_name: Optional[str] = None,
    created_at: Optional[datetime] = None,
) -> Receipt:
    """Build the receipt for a freshly priced sale."""
    return Receipt(
        transaction_number=transaction_number,
        items=tuple(
            ReceiptLine(
                name=line.product.name,
                sku=line.product.sku,
                quantity=line.quantity,
                unit_price=quantize_money(line.unit_price),
                discount=quantize_money(line.discount),
                line_total=quantize_money(line.line_total),
            )
            for line in settlement.lines
        ),
        subtotal=quantize_money(settlement.subtotal),
        discount=quantize_money(settlement.total_discount),
        tax=quantize_money(settlement.tax_amount),
        cashback=quantize_money(settlement.cashback_redeemed),
        total=quantize_money(settlement.final_total),
        payment_method=settlement.payment_method,
        amount_paid=quantize_money(settlement.amount_paid),
        change=quantize_money(settlement.change),
        customer_name=customer_name,
        offer_code=settlement.offer.code if settlement.offer is not None else None,
        created_at=created_at,
    )


def receipt_from_records(
    transaction: Transaction,
    items: list[TransactionItem],
    products: dict[int, Product],
    payment: Optional[Payment],
    customer_name: Optional[str] = None,
    offer_code: Optional[str] = None,
) -> Receipt:
    """Rebuild a receipt from stored records (reprints and replays)."""
    lines = []
    for item in items:
        product = products.get(item.product_id)
        lines.append(
            ReceiptLine(
                name=product.name if product else f"Product {item.product_id}",
                sku=product.sku if product else "",
                quantity=item.quantity,
                unit_price=item.unit_price,
                discount=item.discount_amount,
                line_total=item.line_total,
            )
        )
    return Receipt(
        transaction_number=transaction.transaction_number,
        items=tuple(lines),
        subtotal=transaction.subtotal,
        discount=transaction.discount_amount,
        tax=transaction.tax_amount,
        cashback=transaction.cashback_redeemed,
        total=transaction.total_amount,
        payment_method=payment.payment_method if payment else PaymentMethod.CASH,
        amount_paid=transaction.amount_paid,
        change=transaction.change_amount,
        customer_name=customer_name,
        offer_code=offer_code,
        created_at=transaction.created_at,
    )


def render_receipt(receipt: Receipt) -> str:
    """Plain-text rendering used by the command line."""
    width = RECEIPT_WIDTH

    def row(label: str, amount) -> str:
        value = format_money(amount)
        return f"{label}{value:>{width - len(label)}}"

    out = [f"Receipt #{receipt.transaction_number}".center(width)]
    if receipt.created_at is not None:
        out.append(f"{receipt.created_at:%Y-%m-%d %H:%M}".center(width))
    if receipt.customer_name:
        out.append(f"Customer: {receipt.customer_name}")
    out.append("-" * width)
    for item in receipt.items:
        out.append(item.name[:width])
        out.append(row(f"  {item.quantity} x {format_money(item.unit_price)}", item.line_total))
        if item.discount:
            out.append(row("  line discount", -item.discount))
    out.append("-" * width)
    out.append(row("Subtotal", receipt.subtotal))
    if receipt.discount:
        label = f"Discount ({receipt.offer_code})" if receipt.offer_code else "Discount"
        out.append(row(label, -receipt.discount))
    out.append(row("Tax", receipt.tax))
    if receipt.cashback:
        out.append(row("Cashback", -receipt.cashback))
    out.append(row("Total", receipt.total))
    out.append(row(f"Paid ({receipt.payment_method.value})", receipt.amount_paid))
    if receipt.payment_method == PaymentMethod.CASH:
        out.append(row("Change", receipt.change))
    return "\n".join(out)
