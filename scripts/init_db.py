#!/usr/bin/env python3
"""Create the storefront schema and optionally seed starter content.

Usage:
    python scripts/init_db.py
    python scripts/init_db.py --seed
    python scripts/init_db.py --database-url sqlite+aiosqlite:///./storefront.db --seed

Reads DATABASE_URL from .env or the environment unless --database-url is given.
Seeding only fills collections that are still empty.
"""

import argparse
import asyncio
import logging

from storefront.config import Settings
from storefront.content.store import ContentStore
from storefront.db.session import create_engine_from_settings

logger = logging.getLogger("init_db")

SEED_RECORDS = {
    "pricing": [
        {
            "name": "Basic",
            "price": 15,
            "price_label": "per model",
            "delivery_time": "3-5 days",
            "description": "Simple props and accessories",
            "features": ["Low-poly model", "Basic texturing", "1 revision"],
            "is_popular": False,
            "order_index": 1,
        },
        {
            "name": "Standard",
            "price": 35,
            "price_label": "per model",
            "delivery_time": "5-7 days",
            "description": "Weapons, UGC items and detailed props",
            "features": ["Game-ready topology", "PBR textures", "3 revisions"],
            "is_popular": True,
            "order_index": 2,
        },
        {
            "name": "Premium",
            "price": 60,
            "price_label": "per model",
            "delivery_time": "7-14 days",
            "description": "Characters and vehicles",
            "features": ["Rig-ready character", "Hand-painted textures", "Unlimited revisions"],
            "is_popular": False,
            "order_index": 3,
        },
    ],
    "terms_sections": [
        {
            "title": "General Terms",
            "icon": "FileText",
            "items": [
                "All models are created from scratch",
                "You receive full usage rights once paid",
            ],
            "order_index": 1,
        },
        {
            "title": "Payment",
            "icon": "CreditCard",
            "items": ["50% upfront, 50% on completion", "Robux and PayPal accepted"],
            "order_index": 2,
        },
        {
            "title": "Delivery",
            "icon": "Clock",
            "items": ["Delivery times start after the upfront payment"],
            "order_index": 3,
        },
        {
            "title": "Revisions",
            "icon": "Shield",
            "items": ["Revisions are limited to the agreed scope"],
            "order_index": 4,
        },
    ],
    "faqs": [
        {
            "question": "What file formats do you deliver?",
            "answer": "FBX, OBJ or .blend, plus Roblox-ready meshes on request.",
            "order_index": 1,
        },
        {
            "question": "How do I place an order?",
            "answer": "Message me on Discord with your idea and references.",
            "order_index": 2,
        },
    ],
}


async def init_db(settings: Settings, seed: bool) -> None:
    store = ContentStore(create_engine_from_settings(settings))
    if not store.configured:
        raise SystemExit("DATABASE_URL is not set")

    try:
        await store.create_schema()
        if seed:
            for collection, records in SEED_RECORDS.items():
                if await store.list_records(collection):
                    logger.info(f"Skipping {collection}: already has records")
                    continue
                for fields in records:
                    await store.create_record(collection, fields)
                logger.info(f"Seeded {len(records)} {collection} record(s)")
    finally:
        await store.dispose()


def main():
    parser = argparse.ArgumentParser(description="Create the storefront database schema")
    parser.add_argument("--database-url", help="Override DATABASE_URL")
    parser.add_argument("--seed", action="store_true", help="Seed starter pricing, terms and FAQs")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    settings = Settings()
    if args.database_url:
        settings = Settings(database_url=args.database_url)

    asyncio.run(init_db(settings, args.seed))
    print("Schema ready.")


if __name__ == "__main__":
    main()
