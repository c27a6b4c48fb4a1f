"""ShipQuote CLI.

Usage:
    python -m cli shipping quote --config store.json --subdivision "Santiago" --weight 1200 --subtotal 30000
    python -m cli shipping quote --config store.json --subdivision V --locality "Viña del Mar" --items 3
    python -m cli shipping zone "Región Metropolitana de Santiago"

The config file holds one store's zones (with methods, tiers and locality
rates) and free-shipping rules, so pricing can be checked without a database.
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from shipquote.services.domain import (
    Address,
    CartLine,
    LegacyLocality,
    LocalityRate,
    Method,
    RateTier,
    ShippingRule,
    StoreAccount,
    StoreCart,
    Zone,
)
from shipquote.services.pricing import advanced_options
from shipquote.services.zones import subdivision_code


def main(argv=None):
    parser = argparse.ArgumentParser(
        prog="shipquote",
        description="ShipQuote CLI",
    )
    sub = parser.add_subparsers(dest="command", help="Top-level command")

    # ── Shipping ─────────────────────────────────────────
    ship_parser = sub.add_parser("shipping", help="Shipping quotes")
    ship_sub = ship_parser.add_subparsers(dest="action")

    quote = ship_sub.add_parser("quote", help="Price a cart against a store config file")
    quote.add_argument("--config", required=True, help="Store shipping config (JSON)")
    quote.add_argument("--subdivision", required=True, help="Destination region name or code")
    quote.add_argument("--locality", default="", help="Destination locality (commune/city)")
    quote.add_argument("--weight", type=int, required=True, help="Parcel weight in grams")
    quote.add_argument("--subtotal", type=int, required=True, help="Cart subtotal (minor units)")
    quote.add_argument("--items", type=int, default=1, help="Number of units in the cart")
    quote.add_argument("--json", action="store_true", help="Print options as JSON")

    zone = ship_sub.add_parser("zone", help="Show the zone code for a subdivision name")
    zone.add_argument("subdivision", help="Region name as typed by the shopper")

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return

    handlers = {
        "shipping": handle_shipping,
    }
    handler = handlers.get(args.command)
    if handler:
        handler(args)
    else:
        parser.print_help()


# ── Config file loading ─────────────────────────────────

def zones_from_config(data: dict) -> list[Zone]:
    zones = []
    for z in data.get("zones", []):
        methods = [
            Method(
                name=m["name"],
                code=m["code"],
                description=m.get("description", ""),
                estimated_delivery=m.get("estimated_delivery", ""),
                sort_order=m.get("sort_order", 0),
                is_active=m.get("is_active", True),
                locality_codes=m.get("locality_codes"),
                tiers=[RateTier(**t) for t in m.get("rates", [])],
                locality_rates=[LocalityRate(**lr) for lr in m.get("locality_rates", [])],
            )
            for m in z.get("methods", [])
        ]
        zones.append(Zone(
            code=z["code"],
            name=z.get("name", ""),
            base_price=z.get("base_price", 0),
            has_locality_breakdown=z.get("has_locality_breakdown", False),
            is_active=z.get("is_active", True),
            localities=[LegacyLocality(**c) for c in z.get("localities", [])],
            methods=methods,
        ))
    return zones


def rules_from_config(data: dict) -> list[ShippingRule]:
    return [ShippingRule(**r) for r in data.get("free_shipping_rules", [])]


# ── Command Handlers ────────────────────────────────────

def handle_shipping(args):
    if args.action == "quote":
        path = Path(args.config)
        if not path.exists():
            print(f"File not found: {args.config}")
            sys.exit(1)

        data = json.loads(path.read_text(encoding="utf-8"))
        # First line carries the subtotal, the second pads the unit count.
        items = max(1, args.items)
        lines = [CartLine(store_id="local", variant_ref=None, unit_price=args.subtotal, quantity=1)]
        if items > 1:
            lines.append(CartLine(store_id="local", variant_ref=None, unit_price=0, quantity=items - 1))
        cart = StoreCart(
            store=StoreAccount(domain=data.get("store", "local")),
            lines=lines,
            address=Address(locality=args.locality, subdivision=args.subdivision),
            weight_g=args.weight,
        )
        options = advanced_options(zones_from_config(data), rules_from_config(data), cart)

        if args.json:
            print(json.dumps([o.to_dict() for o in options], indent=2, ensure_ascii=False))
            return
        if not options:
            print("No configured method can price this cart.")
            return
        print(f"{'Code':<15} {'Price':<10} {'Title'}")
        print("-" * 50)
        for o in options:
            print(f"{o.code:<15} {o.price:<10} {o.title}")

    elif args.action == "zone":
        print(subdivision_code(args.subdivision))

    else:
        print("Usage: shipquote shipping {quote|zone}")


if __name__ == "__main__":
    main()
