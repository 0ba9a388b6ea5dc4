"""Built-in site copy, used until the admin stores something for a page.

Stored sections replace default sections wholesale (shallow merge).
"""

import copy

DEFAULT_CONTENT: dict[str, dict] = {
    "home": {
        "hero": {
            "name": "Michael",
            "subtitle": "I'm 19 years old with 3 years of experience in 3D modeling",
        },
        "about": {
            "title": "About Me",
            "text": (
                "I make game-ready 3D models using Blender, focusing on stylized characters, "
                "weapons, and props for Roblox games. I enjoy turning ideas into clean, "
                "optimized models that look great and perform well in-game."
            ),
            "highlight": "Blender",
        },
        "cta": {
            "title": "Ready to bring your ideas to life?",
            "subtitle": "Let's collaborate and create something amazing together",
        },
        "tools": {
            "modeling": ["Blender", "Roblox Studio", "ZBrush"],
            "texturing": ["Adobe Substance 3D Painter", "Krita"],
        },
    },
    "pricing": {
        "header": {"title": "Pricing Plans", "subtitle": "1$ = 250 Robux"},
        "package_deals": {
            "title": "Package Deals",
            "subtitle": "Order multiple models and save!",
            "items": ["3 Models = 5% OFF", "5 Models = 10% OFF", "10+ Models = 15% OFF"],
        },
        "rush_delivery": {
            "title": "Rush Delivery",
            "subtitle": "Need it faster? We've got you covered!",
            "items": ["24-48 hours delivery", "+30% of base price", "Priority queue"],
        },
        "loyalty": {
            "title": "Loyalty Program",
            "description": (
                "Returning customers get special discounts! After 5 completed orders, enjoy 5% "
                "off all future projects. After 10 orders, get 10% off permanently."
            ),
        },
        "custom_quote": {
            "title": "Need a custom quote?",
            "description": (
                "For large projects, bulk orders, or specialized requirements, I offer custom "
                "pricing tailored to your specific needs."
            ),
        },
    },
    "reviews": {
        "header": {
            "title": "Client Reviews",
            "subtitle": (
                "See what my clients say about their experience working with me on their "
                "3D modeling projects."
            ),
        },
        "stats": {
            "stat1_value": "4+", "stat1_label": "Total Projects",
            "stat2_value": "100%", "stat2_label": "Happy Clients",
            "stat3_value": "5.0/5", "stat3_label": "Average Rating",
            "stat4_value": "100%", "stat4_label": "On-Time Delivery",
        },
        "cta": {
            "title": "Ready to join my satisfied clients?",
            "subtitle": (
                "Let's discuss your project and bring your 3D vision to life with the same "
                "quality and attention to detail."
            ),
        },
    },
    "terms": {
        "header": {
            "title": "Terms & Conditions",
            "subtitle": (
                "Clear and transparent terms for our professional 3D modeling services. "
                "Please read carefully before starting your project."
            ),
        },
        "footer": {"text": "Last updated: December 2024"},
        "contact": {
            "title": "Questions about these terms?",
            "subtitle": (
                "If you have any questions about these terms and conditions, feel free to "
                "reach out before starting your project."
            ),
        },
    },
}

TOOL_ICONS = {
    "Blender": "🟠",
    "Roblox Studio": "🎮",
    "ZBrush": "🗿",
    "Adobe Substance 3D Painter": "🎨",
    "Krita": "✏️",
}


def merge_content(page: str, stored: dict) -> dict:
    """Defaults for `page` with stored sections laid over them."""
    merged = copy.deepcopy(DEFAULT_CONTENT.get(page, {}))
    merged.update(stored)
    return merged


def review_stats(content: dict) -> list[dict]:
    stats = content.get("stats", {})
    return [
        {"value": stats.get(f"stat{i}_value", ""), "label": stats.get(f"stat{i}_label", "")}
        for i in range(1, 5)
    ]
