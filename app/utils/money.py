# app/utils/money.py
from decimal import Decimal, ROUND_HALF_UP


def round_whole(value) -> int:
    """Half-up rounding to whole rupees (Decimal, float, int or numeric str)."""
    try:
        d = Decimal(str(value if value is not None else 0))
    except ArithmeticError:
        return 0
    if not d.is_finite():
        return 0
    return int(d.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def format_inr(value) -> str:
    # Indian grouping: last three digits, then pairs -> 12,34,567
    n = round_whole(value)
    sign = "-" if n < 0 else ""
    digits = str(abs(n))
    if len(digits) <= 3:
        return sign + digits
    head, tail = digits[:-3], digits[-3:]
    groups = []
    while len(head) > 2:
        groups.insert(0, head[-2:])
        head = head[:-2]
    if head:
        groups.insert(0, head)
    return sign + ",".join(groups + [tail])
