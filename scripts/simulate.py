"""
Order Flow Simulation Script

Fires concurrent orders at a running API, walks each one through the
status lifecycle, checks that illegal transitions are rejected and
prints a summary with the stats endpoint.

Run from project root: python scripts/simulate.py --orders 50
"""

import argparse
import asyncio
import random
import sys
import time
from datetime import datetime
from typing import Any

import httpx

API_BASE_URL = "http://localhost:8001"
TOTAL_ORDERS = 50

FIRST_NAMES = ["John", "Jane", "Mike", "Sarah", "Tom", "Emma", "David", "Lisa", "Chris", "Amy"]
LAST_NAMES = ["Smith", "Johnson", "Williams", "Brown", "Jones", "Garcia", "Miller", "Davis", "Wilson", "Taylor"]
LIFECYCLE = ["preparing", "ready", "served"]


def generate_customer_name() -> str:
    return f"{random.choice(FIRST_NAMES)} {random.choice(LAST_NAMES)}"


def generate_item_ids(menu: list[dict]) -> list[int]:
    """Pick 1-4 menu items, sometimes repeating one to order it twice."""
    ids = [item["id"] for item in random.sample(menu, k=random.randint(1, min(4, len(menu))))]
    if random.random() < 0.3:
        ids.append(random.choice(ids))
    return ids


async def run_order(
    client: httpx.AsyncClient,
    order_num: int,
    menu: list[dict],
    base_url: str,
) -> dict[str, Any]:
    """Place one order and advance it through its statuses."""
    prices = {item["id"]: item["price"] for item in menu}
    item_ids = generate_item_ids(menu)
    expected_total = sum(prices[item_id] for item_id in item_ids)
    start_time = time.time()

    try:
        response = await client.post(
            f"{base_url}/api/orders",
            json={"customer_name": generate_customer_name(), "item_ids": item_ids},
            timeout=30.0,
        )
        if response.status_code != 201:
            return {
                "order_num": order_num,
                "success": False,
                "error": response.text[:100],
                "time": round(time.time() - start_time, 3),
            }

        order = response.json()["order"]

        # A skip must be rejected before any legal move
        skip = await client.patch(
            f"{base_url}/api/orders/{order['id']}/status", json={"status": "served"}
        )
        skip_rejected = skip.status_code == 400

        for status in LIFECYCLE[:random.randint(0, len(LIFECYCLE))]:
            step = await client.patch(
                f"{base_url}/api/orders/{order['id']}/status", json={"status": status}
            )
            step.raise_for_status()

        return {
            "order_num": order_num,
            "success": True,
            "order_id": order["id"],
            "total": order["total_price"],
            "total_matches": order["total_price"] == expected_total,
            "skip_rejected": skip_rejected,
            "time": round(time.time() - start_time, 3),
        }
    except httpx.HTTPError as e:
        return {
            "order_num": order_num,
            "success": False,
            "error": str(e)[:100],
            "time": round(time.time() - start_time, 3),
        }


async def load_menu(client: httpx.AsyncClient, base_url: str) -> list[dict]:
    """Fetch the menu, seeding the defaults if it is empty."""
    menu = (await client.get(f"{base_url}/api/menu")).json()["menu"]
    if not menu:
        print("📋 Menu is empty, seeding defaults...")
        await client.post(f"{base_url}/api/admin/menu/init")
        menu = (await client.get(f"{base_url}/api/menu")).json()["menu"]
    return menu


async def run_simulation(num_orders: int = TOTAL_ORDERS, base_url: str = API_BASE_URL) -> dict[str, Any]:
    """
    Run the simulation.

    Args:
        num_orders: Number of orders to place concurrently
        base_url: API root
    """
    print("=" * 70)
    print("🔥 ORDER FLOW SIMULATION")
    print("=" * 70)
    print(f"📋 Total Orders: {num_orders}")
    print(f"🎯 Target: {base_url}")
    print(f"⏰ Started: {datetime.now().strftime('%H:%M:%S')}")
    print("=" * 70)

    start_time = time.time()
    async with httpx.AsyncClient() as client:
        health = await client.get(f"{base_url}/health")
        print(f"\n🩺 Health: {health.json().get('status')}")

        menu = await load_menu(client, base_url)
        if not menu:
            print("\n❌ No menu items available. Aborting.")
            return {"total": num_orders, "successful": 0, "failed": num_orders, "results": []}

        tasks = [run_order(client, i + 1, menu, base_url) for i in range(num_orders)]
        results = await asyncio.gather(*tasks)

        stats = (await client.get(f"{base_url}/api/admin/stats")).json()["stats"]
        by_status = (await client.get(f"{base_url}/api/admin/stats/orders-by-status")).json()["stats"]

    total_time = round(time.time() - start_time, 2)
    successful = [r for r in results if r["success"]]
    failed = [r for r in results if not r["success"]]

    print("\n" + "=" * 70)
    print("📊 SIMULATION RESULTS")
    print("=" * 70)
    print(f"\n✅ Successful Orders: {len(successful)}/{num_orders}")
    print(f"❌ Failed Orders: {len(failed)}/{num_orders}")
    print(f"⏱️  Total Time: {total_time}s")

    if successful:
        avg_time = round(sum(r["time"] for r in successful) / len(successful), 3)
        mismatched = [r for r in successful if not r["total_matches"]]
        accepted_skips = [r for r in successful if not r["skip_rejected"]]
        print(f"\n📈 Average Round Trip: {avg_time}s")
        print(f"   Total mismatches: {len(mismatched)}")
        print(f"   Illegal skips accepted: {len(accepted_skips)}")
        print(f"   💰 Revenue placed: {sum(r['total'] for r in successful)}")

    if failed:
        print("\n⚠️  Failed Order Details (showing first 5):")
        for f in failed[:5]:
            print(f"   Order #{f['order_num']}: {f.get('error', 'Unknown error')}")

    print(f"\n🏪 Stats: {stats}")
    print(f"   By status: {by_status}")
    print("=" * 70)

    return {
        "total": num_orders,
        "successful": len(successful),
        "failed": len(failed),
        "total_time": total_time,
        "results": results,
    }


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Order Flow Simulation Script")
    parser.add_argument("--orders", type=int, default=TOTAL_ORDERS, help="Number of orders")
    parser.add_argument("--url", default=API_BASE_URL, help="API base URL")
    args = parser.parse_args()

    summary = asyncio.run(run_simulation(args.orders, args.url))
    sys.exit(0 if summary["failed"] == 0 else 1)
