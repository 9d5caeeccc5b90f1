# printbay/services/orders.py

from datetime import datetime, timedelta, timezone
from typing import List, Optional

from printbay.schemas.orders import STATUS_STEPS, STEP_LABELS, OrderRecord, TrackingStep

# Minutes before now shown against each step; the first uses the order's created time
_STEP_AGE_MINUTES = [60, 50, 30, 15, 5]


def order_step(status: str) -> int:
    """Unknown statuses count as step 0."""
    return STATUS_STEPS.get(status, 0)


def order_progress(status: str) -> int:
    return min(order_step(status) * 20 + 20, 100)


def tracking_steps(order: OrderRecord, now: Optional[datetime] = None) -> List[TrackingStep]:
    now = now or datetime.now(timezone.utc)
    current = order_step(order.status)
    steps = []
    for i, label in enumerate(STEP_LABELS):
        done = current >= i
        if i == 0:
            ts = order.created or now - timedelta(minutes=_STEP_AGE_MINUTES[0])
        else:
            ts = now - timedelta(minutes=_STEP_AGE_MINUTES[i]) if done else None
        steps.append(TrackingStep(step=label, completed=done, timestamp=ts))
    return steps
