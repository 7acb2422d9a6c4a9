"""Entitlement (premium plan) evaluation.

Billing itself (checkout, webhooks) lives outside this service. Only the
materialized `plan` / `plan_until` columns on the user row are consumed here.
"""

from .entitlement import PLANS, is_premium_active

__all__ = ["PLANS", "is_premium_active"]
