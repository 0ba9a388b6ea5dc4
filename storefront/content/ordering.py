"""Display ordering for pricing cards."""

from storefront.db.models import PricingPlan


def order_pricing(plans: list[PricingPlan]) -> list[PricingPlan]:
    """Order plans so the popular one sits in the middle of the row.

    Non-popular plans are sorted by order_index. With a popular plan and at
    least two others, the popular plan is spliced in at len(others) // 2.
    Otherwise the base order is returned: others by order_index, then any
    popular plans by order_index.

    Only the first popular plan is placed; further popular plans are left
    out of the spliced row.
    """
    others = sorted((p for p in plans if not p.is_popular), key=lambda p: p.order_index)
    popular = sorted((p for p in plans if p.is_popular), key=lambda p: p.order_index)

    if not popular or len(others) < 2:
        return others + popular

    mid = len(others) // 2
    return others[:mid] + [popular[0]] + others[mid:]
