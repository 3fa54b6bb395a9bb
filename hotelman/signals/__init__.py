"""
Hotelman signals (public event API).

Emitted signals:
- tier_changed: Emitted by LoyaltyService after a committed tier change
  (earn, redeem or manual adjustment)
- points_changed: Emitted by LoyaltyService after every committed balance change
"""

from django.dispatch import Signal

# Loyalty signals (emitted by loyalty.service)
tier_changed = Signal()  # sender=Guest, guest, previous, current, source
points_changed = Signal()  # sender=Guest, guest, delta, action
