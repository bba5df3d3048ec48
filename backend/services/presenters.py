"""Display helpers for car payloads.

Pure functions over the raw upstream dicts. Templates never reach into the
payload directly, so missing or null fields are handled in one place.
"""

PLACEHOLDER_IMAGE = "/placeholder.svg"

STATUS_LABELS = {"sale": "For Sale", "sold": "Sold", "upcoming": "Upcoming"}

# Image sets in display preference order
IMAGE_SOURCES = ("downloaded", "normal", "big", "small")


def _name(obj: dict | None, default: str = "Unknown") -> str:
    if isinstance(obj, dict) and obj.get("name"):
        return str(obj["name"])
    return default


def primary_lot(car: dict) -> dict | None:
    """First lot of a car, or None when the car has no lot information."""
    lots = car.get("lots") if isinstance(car, dict) else None
    if not lots:
        return None
    return lots[0]


def images(lot: dict) -> list[str]:
    found = lot.get("images") or {}
    for source in IMAGE_SOURCES:
        urls = found.get(source)
        if isinstance(urls, list) and urls:
            return urls
    return [PLACEHOLDER_IMAGE]


def format_price(price: float | None, missing: str = "No estimate") -> str:
    if not price:
        return missing
    return f"${price:,.0f}"


def format_mileage(odometer: dict | None) -> str:
    if not odometer:
        return "Unknown"
    mi = odometer.get("mi") or 0
    km = odometer.get("km") or 0
    return f"{mi:,} miles ({km:,} km)"


def auction_platform(domain_name: str | None) -> str:
    """``copart_com`` -> ``COPART``."""
    if not domain_name:
        return "UNKNOWN"
    return domain_name.replace("_", ".", 1).upper().replace(".COM", "")


def humanize(value: str | None, default: str = "Unknown") -> str:
    if not value:
        return default
    return value.replace("_", " ").title()


def damage_condition(lot: dict) -> str:
    damage = _name((lot.get("damage") or {}).get("main"))
    condition = humanize((lot.get("condition") or {}).get("name"))
    return f"{damage} | {condition}"


def location(lot: dict) -> str:
    loc = lot.get("location")
    if not loc:
        return "Unknown"
    city = _name(loc.get("city"))
    state = (loc.get("state") or {}).get("code")
    return f"{city}, {state.upper() if state else 'Unknown'}"


def bid_info(lot: dict) -> str:
    if lot.get("final_bid"):
        return f"Final: {format_price(lot['final_bid'])}"
    if lot.get("bid"):
        return f"Current: {format_price(lot['bid'])}"
    if lot.get("buy_now"):
        return f"Buy Now: {format_price(lot['buy_now'])}"
    return "No bid"


def status_label(lot: dict) -> str:
    return STATUS_LABELS.get(_name(lot.get("status"), "unknown"), "Unknown")


def vehicle_title(car: dict) -> str:
    return f"{car.get('year', '')} {_name(car.get('manufacturer'))} {_name(car.get('model'))}".strip()


def detail_path(lot: dict) -> str:
    return f"/cars/lot/{lot.get('lot') or 'unknown'}/{_name(lot.get('domain'), 'unknown')}"


def car_card(car: dict) -> dict | None:
    """Everything a listing card shows, or None for cars without lots."""
    lot = primary_lot(car)
    if lot is None:
        return None
    return {
        "id": car.get("id"),
        "title": vehicle_title(car),
        "vin": car.get("vin"),
        "year": car.get("year"),
        "lot": lot.get("lot") or "Unknown",
        "platform": auction_platform(_name(lot.get("domain"), "")),
        "images": images(lot),
        "mileage": format_mileage(lot.get("odometer")),
        "location": location(lot),
        "seller": _name(lot.get("seller")),
        "damage": damage_condition(lot),
        "status": status_label(lot),
        "bid": bid_info(lot),
        "href": detail_path(lot),
    }


def car_detail(car: dict) -> dict | None:
    """Sections of the vehicle detail page, or None for cars without lots."""
    lot = primary_lot(car)
    if lot is None:
        return None

    specs = [
        (label, _name(car.get(field)))
        for label, field in (
            ("Engine", "engine"),
            ("Transmission", "transmission"),
            ("Drive Wheel", "drive_wheel"),
            ("Fuel Type", "fuel"),
        )
        if car.get(field)
    ]
    if car.get("cylinders"):
        specs.append(("Cylinders", str(car["cylinders"])))
    if car.get("color"):
        specs.append(("Color", _name(car["color"])))

    damage = lot.get("damage") or {}
    condition = [
        ("Primary Damage", _name(damage.get("main"), "None reported")),
        ("Secondary Damage", _name(damage.get("second"), "None reported")),
        ("Condition", humanize((lot.get("condition") or {}).get("name"))),
    ]
    if lot.get("keys_available") is not None:
        condition.append(("Keys Available", "Yes" if lot["keys_available"] else "No"))
    if lot.get("airbags"):
        condition.append(("Airbags", _name(lot["airbags"])))
    if lot.get("grade_iaai"):
        condition.append(("IAAI Grade", str(lot["grade_iaai"])))

    pricing = [
        (label, format_price(lot.get(field), "N/A"))
        for label, field in (
            ("Actual Cash Value", "actual_cash_value"),
            ("Pre-Accident Price", "pre_accident_price"),
            ("Clean Wholesale Price", "clean_wholesale_price"),
            ("Estimated Repair Cost", "estimate_repair_price"),
        )
        if lot.get(field)
    ]
    pricing.append(("Current Bid", format_price(lot.get("bid"), "N/A")))
    pricing.append(("Buy Now Price", format_price(lot.get("buy_now"), "N/A")))
    if lot.get("final_bid"):
        pricing.append(("Final Bid", format_price(lot["final_bid"], "N/A")))

    auction = [("Lot Number", str(lot.get("lot") or "Unknown"))]
    for label, field in (
        ("Seller", "seller"),
        ("Seller Type", "seller_type"),
        ("Title", "title"),
        ("Detailed Title", "detailed_title"),
    ):
        if lot.get(field):
            auction.append((label, _name(lot[field])))
    if lot.get("status"):
        auction.append(("Status", status_label(lot)))
    if lot.get("sale_date"):
        auction.append(("Sale Date", str(lot["sale_date"])))
    if lot.get("location"):
        auction.append(("Location", location(lot)))

    found = lot.get("images") or {}
    gallery = found.get("downloaded") or found.get("normal") or [PLACEHOLDER_IMAGE]

    return {
        "title": vehicle_title(car),
        "vin": car.get("vin") or "Unknown",
        "lot": lot.get("lot") or "Unknown",
        "platform": auction_platform(_name(lot.get("domain"), "")),
        "images": gallery,
        "mileage": format_mileage(lot.get("odometer")),
        "specs": specs,
        "condition": condition,
        "pricing": pricing,
        "auction": auction,
    }
