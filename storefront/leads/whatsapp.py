"""WhatsApp click-to-chat message formatting."""
from urllib.parse import quote


def format_rupiah(amount: int) -> str:
    """1234567 -> 'Rp 1.234.567'"""
    return "Rp " + f"{int(amount):,}".replace(",", ".")


def render_product_message(template: str, product_name: str, price: int, product_url: str) -> str:
    return (
        template
        .replace("{productName}", product_name)
        .replace("{productPrice}", format_rupiah(price))
        .replace("{productUrl}", product_url)
    )


def build_cart_message(items: list[tuple[str, int, int]]) -> str:
    """
    Order message for several line items.

    ``items`` holds (name, unit price, quantity) tuples; unit price is the
    already-resolved effective price.
    """
    lines = ["Halo, saya ingin memesan:", ""]
    total = 0
    for i, (name, unit_price, quantity) in enumerate(items, start=1):
        subtotal = unit_price * quantity
        total += subtotal
        lines.append(f"{i}. *{name}*")
        lines.append(f"   Harga: {format_rupiah(unit_price)}")
        lines.append(f"   Jumlah: {quantity}")
        lines.append(f"   Subtotal: {format_rupiah(subtotal)}")
        lines.append("")
    lines.append(f"*Total: {format_rupiah(total)}*")
    lines.append("")
    lines.append("Mohon konfirmasi ketersediaan dan total pembayaran. Terima kasih!")
    return "\n".join(lines)


def whatsapp_url(number: str, message: str) -> str:
    return f"https://wa.me/{number}?text={quote(message, safe='')}"
