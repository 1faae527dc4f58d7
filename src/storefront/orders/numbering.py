"""Human-friendly order numbers: ``ORD-YYYYMMDD-XXXXXX``."""

import random
import re
import string
from datetime import UTC, datetime

ORDER_NUMBER_ALPHABET = string.ascii_uppercase + string.digits
ORDER_NUMBER_SUFFIX_LENGTH = 6
ORDER_NUMBER_PATTERN = re.compile(r"^ORD-\d{8}-[A-Z0-9]{6}$")


def generate_order_number(now: datetime | None = None, rng: random.Random | None = None) -> str:
    """Return a new order number for ``now`` (UTC today by default).

    The suffix is not guaranteed unique; callers that care check it against
    existing orders.
    """
    now = now or datetime.now(UTC)
    rng = rng or random
    suffix = "".join(rng.choice(ORDER_NUMBER_ALPHABET) for _ in range(ORDER_NUMBER_SUFFIX_LENGTH))
    return f"ORD-{now:%Y%m%d}-{suffix}"
