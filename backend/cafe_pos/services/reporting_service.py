# Overview: Service-layer operations for reporting; encapsulates business logic and database work.

from __future__ import annotations

from collections import defaultdict
from datetime import datetime, timedelta
from decimal import Decimal, ROUND_HALF_UP

from flask import current_app
from sqlalchemy import case, func

from cafe_pos.extensions import db
from cafe_pos.models import Order, OrderItem, Product, User
from cafe_pos.money import money_str, quantize_money
from cafe_pos.time_utils import add_months, parse_ym, parse_ymd, shift_start, shift_window, to_utc_z

ZERO = Decimal("0.000")


class ReportError(Exception):
    """Raised when report generation fails."""
    pass


def _shift_hour() -> int:
    return int(current_app.config.get("SHIFT_START_HOUR_UTC", 2))


def _ratio(numerator, denominator, places: str = "0.01") -> float:
    if not denominator:
        return 0.0
    value = Decimal(numerator) / Decimal(denominator)
    return float(value.quantize(Decimal(places), rounding=ROUND_HALF_UP))


def _in_range(column, start: datetime, end: datetime):
    return (column >= start) & (column < end)


def _business_day(ts: datetime, shift_hour: int):
    """Orders placed before the shift opens belong to the previous day."""
    return (ts - timedelta(hours=shift_hour)).date()


# =============================================================================
# DAILY SHIFT REPORT
# =============================================================================


def daily_report(date_str: str | None) -> dict:
    """
    Sales for one shift: date 02:00 UTC until the next day's 02:00 UTC.
    """
    if not date_str:
        raise ReportError("date is required YYYY-MM-DD")
    try:
        day = parse_ymd(date_str)
    except ValueError:
        raise ReportError("date must be YYYY-MM-DD")

    start, end = shift_window(day, _shift_hour())
    window = _in_range(Order.created_at, start, end)

    summary = db.session.query(
        func.coalesce(func.sum(Order.total_amount_omr), 0).label("revenue"),
        func.coalesce(
            func.sum(case((Order.payment_method == "Cash", Order.total_amount_omr), else_=0)), 0
        ).label("cash"),
        func.coalesce(
            func.sum(case((Order.payment_method == "Visa", Order.total_amount_omr), else_=0)), 0
        ).label("visa"),
    ).filter(window).one()

    orders = (
        db.session.query(Order, User.full_name)
        .join(User, User.id == Order.cashier_id)
        .filter(window)
        .order_by(Order.created_at.desc(), Order.id.desc())
        .all()
    )

    product_ids = {item.product_id for order, _ in orders for item in order.items}
    products = {}
    if product_ids:
        products = {
            p.id: p for p in db.session.query(Product).filter(Product.id.in_(product_ids)).all()
        }

    order_rows = []
    for order, cashier_name in orders:
        row = order.to_dict()
        row["cashier_name"] = cashier_name
        row["items"] = [
            {
                "product_id": item.product_id,
                "name": products[item.product_id].name if item.product_id in products else None,
                "category": products[item.product_id].category if item.product_id in products else None,
                "quantity": item.quantity,
                "price_at_sale_omr": money_str(item.price_at_sale_omr),
                "note": item.note,
            }
            for item in order.items
        ]
        order_rows.append(row)

    return {
        "summary": {
            "total_revenue_omr": money_str(summary.revenue),
            "total_cash_omr": money_str(summary.cash),
            "total_visa_omr": money_str(summary.visa),
        },
        "orders": order_rows,
        "shift": {"start": to_utc_z(start), "end": to_utc_z(end)},
    }


# =============================================================================
# PERIOD ANALYTICS
# =============================================================================


def resolve_range(
    *,
    start: str | None = None,
    end: str | None = None,
    month: str | None = None,
) -> tuple[str, datetime, datetime]:
    """
    month=YYYY-MM -> that month, shift-aligned.
    start/end=YYYY-MM-DD -> start's shift through end's shift (inclusive).
    """
    shift_hour = _shift_hour()
    if month:
        try:
            first = parse_ym(month)
        except ValueError:
            raise ReportError("month must be YYYY-MM")
        start_ts = shift_start(first, shift_hour)
        return "month", start_ts, add_months(start_ts, 1)

    if start and end:
        try:
            start_day = parse_ymd(start)
            end_day = parse_ymd(end)
        except ValueError:
            raise ReportError("start and end must be YYYY-MM-DD")
        if end_day < start_day:
            raise ReportError("end must not be before start")
        start_ts = shift_start(start_day, shift_hour)
        _, end_ts = shift_window(end_day, shift_hour)
        return "range", start_ts, end_ts

    raise ReportError("Provide either ?month=YYYY-MM OR ?start=YYYY-MM-DD&end=YYYY-MM-DD")


def _product_rows(start: datetime, end: datetime) -> list[dict]:
    revenue = func.sum(OrderItem.quantity * OrderItem.price_at_sale_omr)
    rows = (
        db.session.query(
            Product.id,
            Product.name,
            Product.category,
            func.sum(OrderItem.quantity).label("units"),
            revenue.label("revenue"),
        )
        .join(OrderItem, OrderItem.product_id == Product.id)
        .join(Order, Order.id == OrderItem.order_id)
        .filter(_in_range(Order.created_at, start, end))
        .group_by(Product.id, Product.name, Product.category)
        .all()
    )
    return [
        {
            "product_id": row.id,
            "name": row.name,
            "category": row.category,
            "units": int(row.units or 0),
            "revenue": quantize_money(row.revenue or 0),
        }
        for row in rows
    ]


def _render_product(row: dict | None) -> dict | None:
    if row is None:
        return None
    return {
        "product_id": row["product_id"],
        "name": row["name"],
        "category": row["category"],
        "units": row["units"],
        "revenue_omr": money_str(row["revenue"]),
    }


def _slow_movers(sold: list[dict], limit: int = 10) -> list[dict]:
    """Every catalog product, least sold first, zero sellers included."""
    by_id = {row["product_id"]: row for row in sold}
    rows = []
    for product in db.session.query(Product).all():
        row = by_id.get(product.id) or {
            "product_id": product.id,
            "name": product.name,
            "category": product.category,
            "units": 0,
            "revenue": ZERO,
        }
        rows.append(row)
    rows.sort(key=lambda r: (r["units"], r["revenue"], r["name"]))
    return rows[:limit]


def _category_rows(sold: list[dict]) -> list[dict]:
    totals: dict[str, dict] = {}
    for row in sold:
        entry = totals.setdefault(row["category"], {"category": row["category"], "units": 0, "revenue": ZERO})
        entry["units"] += row["units"]
        entry["revenue"] += row["revenue"]
    return sorted(totals.values(), key=lambda r: r["revenue"], reverse=True)


def _revenue_between(start: datetime, end: datetime) -> Decimal:
    value = (
        db.session.query(func.coalesce(func.sum(Order.total_amount_omr), 0))
        .filter(_in_range(Order.created_at, start, end))
        .scalar()
    )
    return quantize_money(value or 0)


def sales_analytics(
    *,
    start: str | None = None,
    end: str | None = None,
    month: str | None = None,
) -> dict:
    mode, start_ts, end_ts = resolve_range(start=start, end=end, month=month)
    shift_hour = _shift_hour()
    window = _in_range(Order.created_at, start_ts, end_ts)

    orders = (
        db.session.query(Order.id, Order.created_at, Order.payment_method, Order.total_amount_omr)
        .filter(window)
        .order_by(Order.created_at.asc())
        .all()
    )
    lines = (
        db.session.query(Order.id, Order.created_at, OrderItem.product_id, OrderItem.quantity)
        .join(OrderItem, OrderItem.order_id == Order.id)
        .filter(window)
        .all()
    )

    # Summary and payment split
    orders_count = len(orders)
    total_revenue = quantize_money(sum((quantize_money(o.total_amount_omr) for o in orders), ZERO))
    cash = quantize_money(sum(
        (quantize_money(o.total_amount_omr) for o in orders if o.payment_method == "Cash"), ZERO
    ))
    visa = quantize_money(sum(
        (quantize_money(o.total_amount_omr) for o in orders if o.payment_method == "Visa"), ZERO
    ))
    aov = quantize_money(total_revenue / orders_count) if orders_count else ZERO

    # Daily, hourly and weekday buckets
    per_day: dict = defaultdict(lambda: {"orders": 0, "revenue": ZERO})
    per_hour: dict[str, int] = defaultdict(int)
    per_dow: dict = {}
    for o in orders:
        amount = quantize_money(o.total_amount_omr)
        day = per_day[_business_day(o.created_at, shift_hour)]
        day["orders"] += 1
        day["revenue"] += amount

        per_hour[f"{o.created_at.hour:02d}:00"] += 1

        # Sunday = 0, as in SQL EXTRACT(DOW)
        dow_index = (o.created_at.weekday() + 1) % 7
        dow = per_dow.setdefault(dow_index, {
            "day": o.created_at.strftime("%a"),
            "dow_index": dow_index,
            "orders": 0,
            "revenue": ZERO,
        })
        dow["orders"] += 1
        dow["revenue"] += amount

    daily_list = [
        {"day": day.isoformat(), "orders": v["orders"], "revenue_omr": money_str(v["revenue"])}
        for day, v in sorted(per_day.items())
    ]
    daily_avg = ZERO
    best_day = worst_day = None
    if per_day:
        daily_avg = quantize_money(sum((v["revenue"] for v in per_day.values()), ZERO) / len(per_day))
        # First occurrence wins ties
        best_day = max(daily_list, key=lambda r: Decimal(r["revenue_omr"]))
        worst_day = min(daily_list, key=lambda r: Decimal(r["revenue_omr"]))

    busiest_hours = [
        {"hour": hour, "orders": count}
        for hour, count in sorted(per_hour.items(), key=lambda kv: (-kv[1], kv[0]))
    ][:24]
    sales_by_day = [
        {
            "day": v["day"],
            "dow_index": v["dow_index"],
            "orders": v["orders"],
            "revenue_omr": money_str(v["revenue"]),
        }
        for _, v in sorted(per_dow.items())
    ]
    peak_day_row = max(sales_by_day, key=lambda r: Decimal(r["revenue_omr"])) if sales_by_day else None

    # Products and categories
    sold = _product_rows(start_ts, end_ts)
    by_units = sorted(sold, key=lambda r: (-r["units"], -r["revenue"]))
    by_revenue = sorted(sold, key=lambda r: (-r["revenue"], -r["units"]))
    categories = _category_rows(sold)
    best_cat_revenue = categories[0]["category"] if categories else None
    best_cat_units = max(categories, key=lambda r: r["units"])["category"] if categories else None

    units_per_day_product: dict = defaultdict(int)
    total_units = 0
    for line in lines:
        units_per_day_product[(_business_day(line.created_at, shift_hour), line.product_id)] += line.quantity
        total_units += line.quantity
    daily_top: dict = {}
    for (day, _), units in units_per_day_product.items():
        daily_top[day] = max(daily_top.get(day, 0), units)

    month_compare = None
    if mode == "month":
        prev_start = add_months(start_ts, -1)
        month_compare = {
            "prev_start": to_utc_z(prev_start),
            "prev_end": to_utc_z(start_ts),
            "prev_revenue_omr": money_str(_revenue_between(prev_start, start_ts)),
        }

    return {
        "range": {"mode": mode, "start": to_utc_z(start_ts), "end": to_utc_z(end_ts)},
        "summary": {
            "orders_count": orders_count,
            "total_revenue_omr": money_str(total_revenue),
            "aov_omr": money_str(aov),
        },
        "daily": {
            "list": daily_list,
            "avg_revenue_omr": money_str(daily_avg),
            "best_day": best_day,
            "worst_day": worst_day,
        },
        "payments": {
            "cash_omr": money_str(cash),
            "visa_omr": money_str(visa),
            "cash_pct": _ratio(cash * 100, total_revenue),
            "visa_pct": _ratio(visa * 100, total_revenue),
        },
        "top_products": {
            "top_by_units": _render_product(by_units[0] if by_units else None),
            "top_by_revenue": _render_product(by_revenue[0] if by_revenue else None),
            "top5": [_render_product(r) for r in by_revenue[:5]],
            "slow_movers": [_render_product(r) for r in _slow_movers(sold)],
            "all_time_best_seller": _render_product(by_units[0] if by_units else None),
            "top_product_daily_avg_units": _ratio(sum(daily_top.values()), len(daily_top)),
        },
        "category_performance": {
            "rows": [
                {"category": r["category"], "units": r["units"], "revenue_omr": money_str(r["revenue"])}
                for r in categories
            ],
            "best_by_revenue": best_cat_revenue,
            "best_by_units": best_cat_units,
        },
        "peak": {
            "busiest_hours": busiest_hours,
            "peak_hour": busiest_hours[0]["hour"] if busiest_hours else None,
            "peak_day": peak_day_row["day"] if peak_day_row else None,
            "sales_by_day": sales_by_day,
        },
        "avg_items_per_order": _ratio(total_units, orders_count),
        "month_compare": month_compare,
    }
