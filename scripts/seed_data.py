#!/usr/bin/env python3
"""
Seed script: creates categories, items and a few shoppers via the API (no direct DB).
Images are passed as URLs so no upload host is needed.
Run: API must be running.
  python scripts/seed_data.py --api-key change-me-in-production
  python scripts/seed_data.py --categories 8 --items-per-category 30
"""

import argparse
import random

import httpx

API_BASE = "http://localhost:8000/api/v1"
IMAGE_BASE = "https://picsum.photos/seed"

CATEGORIES = [
    "Snacks", "Drinks", "Potions", "Weapons", "Armor", "Scrolls", "Pets", "Hats",
    "Badges", "Backgrounds",
]

ITEM_WORDS = [
    "Golden", "Rusty", "Shiny", "Ancient", "Tiny", "Mega", "Cursed", "Lucky",
    "Sparkling", "Forgotten",
]

DESCRIPTIONS = [
    "A forum favourite. Limited stock.",
    "Looks great on any profile.",
    "Rumoured to bring good luck.",
    "Hand made by the moderators.",
    "Collect them all!",
]


def random_price() -> str:
    return random.choice(["1.00", "2.50", "5.00", "9.99", "15.00", "25.00", "49.99"])


def main():
    ap = argparse.ArgumentParser(description="Seed categories and items via API")
    ap.add_argument("--categories", type=int, default=len(CATEGORIES), help="Number of categories")
    ap.add_argument("--items-per-category", type=int, default=12, help="Items per category")
    ap.add_argument("--shoppers", type=int, default=5, help="Forum users to register and give an inventory")
    ap.add_argument("--user-id", type=int, default=1, help="Forum user id recorded as creator")
    ap.add_argument("--base-url", default=API_BASE, help="API base URL")
    ap.add_argument("--api-key", default="change-me-in-production", help="X-API-KEY value")
    args = ap.parse_args()

    category_ids = []
    item_ids = []
    errors = []

    headers = {"X-API-KEY": args.api_key}
    with httpx.Client(base_url=args.base_url, headers=headers, timeout=30.0) as client:
        # 1) Categories
        print(f"Creating {args.categories} categories...")
        for i in range(args.categories):
            name = CATEGORIES[i % len(CATEGORIES)] + ("" if i < len(CATEGORIES) else f" {i}")
            try:
                r = client.post("/categories", data={
                    "name": name,
                    "user_id": str(args.user_id),
                    "image": f"{IMAGE_BASE}/cat{i}/100",
                })
                if r.status_code == 201:
                    category_ids.append(r.json()["id"])
                else:
                    errors.append(f"Category {name}: {r.status_code} {r.text[:80]}")
            except httpx.HTTPError as e:
                errors.append(f"Category {name}: {e}")

        # 2) Items, each in its own category and sometimes a second one
        print(f"Creating ~{len(category_ids) * args.items_per_category} items...")
        for category_id in category_ids:
            for n in range(args.items_per_category):
                categories = {category_id}
                if random.random() > 0.7:
                    categories.add(random.choice(category_ids))
                try:
                    r = client.post("/items", data={
                        "name": f"{random.choice(ITEM_WORDS)} thing {category_id}-{n}",
                        "description": random.choice(DESCRIPTIONS),
                        "price": random_price(),
                        "categories": ",".join(map(str, sorted(categories))),
                        "user_id": str(args.user_id),
                        "image": f"{IMAGE_BASE}/item{category_id}-{n}/200",
                    })
                    if r.status_code == 201:
                        item_ids.append(r.json()["id"])
                    else:
                        errors.append(f"Item in {category_id}: {r.status_code} {r.text[:80]}")
                except httpx.HTTPError as e:
                    errors.append(str(e))
            print(f"  Category {category_id}: items so far {len(item_ids)}")

        # 3) Shoppers: first read registers them, then give each a small inventory
        for uid in range(100, 100 + args.shoppers):
            if not item_ids:
                break
            picked = random.sample(item_ids, min(3, len(item_ids)))
            inventory = [{"item_id": i, "quantity": random.randint(1, 5)} for i in picked]
            bag = [{"item_id": line["item_id"], "quantity": 1} for line in inventory[:1]]
            try:
                client.get("/inventory", params={"user_id": uid})
                r = client.post("/inventory", json={"user_id": uid, "inventory": inventory, "bag": bag})
                if r.status_code != 200:
                    errors.append(f"Inventory {uid}: {r.status_code} {r.text[:80]}")
            except httpx.HTTPError as e:
                errors.append(f"Inventory {uid}: {e}")

    print(f"\nDone. Categories: {len(category_ids)}, Items created: {len(item_ids)}")
    if errors:
        print(f"Errors ({len(errors)}):")
        for e in errors[:15]:
            print("  ", e)
        if len(errors) > 15:
            print("  ... and", len(errors) - 15, "more")


if __name__ == "__main__":
    main()
