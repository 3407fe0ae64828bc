from typing import Any, Dict, List, Optional

TIER_ORDER = ["BRONZE", "SILVER", "GOLD", "PLATINUM"]

TIER_THRESHOLDS = {
    "BRONZE": 0,
    "SILVER": 1000,
    "GOLD": 5000,
    "PLATINUM": 10000,
}

TIER_BENEFITS = {
    "BRONZE": [
        "Earn 1 point for every $1 spent",
        "Free standard shipping on orders over $50",
        "Birthday discount 5%",
    ],
    "SILVER": [
        "Earn 1.5 points for every $1 spent",
        "Free standard shipping on all orders",
        "Birthday discount 10%",
        "Early access to sales",
    ],
    "GOLD": [
        "Earn 2 points for every $1 spent",
        "Free express shipping on all orders",
        "Birthday discount 15%",
        "Early access to sales",
        "Dedicated customer service line",
    ],
    "PLATINUM": [
        "Earn 3 points for every $1 spent",
        "Free priority shipping on all orders",
        "Birthday discount 20%",
        "VIP early access to sales and new products",
        "Dedicated personal shopper",
        "Free gift with every purchase",
    ],
}


def next_tier(tier: str) -> Optional[str]:
    if tier not in TIER_ORDER or tier == TIER_ORDER[-1]:
        return None
    return TIER_ORDER[TIER_ORDER.index(tier) + 1]


def tier_benefits(tier: str) -> List[str]:
    return list(TIER_BENEFITS.get(tier, []))


def loyalty_summary(customer: Dict[str, Any]) -> Dict[str, Any]:
    tier = customer.get("tier")
    points = customer.get("loyalty_points") or 0
    upcoming = next_tier(tier)
    remaining = TIER_THRESHOLDS[upcoming] - points if upcoming else 0
    return {
        "customer_id": customer.get("id"),
        "points_balance": points,
        "current_tier": tier,
        "next_tier": upcoming,
        "points_to_next_tier": max(remaining, 0),
        "tier_benefits": tier_benefits(tier),
    }
