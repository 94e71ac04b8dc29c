from prometheus_client import Counter, Histogram


# Order Metrics
orders_placed_total = Counter("marketplace_orders_placed_total", "Total order placement attempts", ["status"])
order_value = Histogram(
    "marketplace_order_value",
    "Order value distribution",
    buckets=[10, 50, 100, 200, 500, 1000, 2000, 5000, float("inf")],
)
order_status_changes_total = Counter(
    "marketplace_order_status_changes_total", "Order status transitions", ["status"]
)
orders_expired_total = Counter("marketplace_orders_expired_total", "Stale pending orders cancelled by the sweeper")

# Stock Metrics
stock_decrement_failures = Counter(
    "marketplace_stock_decrement_failures_total", "Conditional stock decrements that matched no row"
)

# Moderation Metrics
product_moderation_total = Counter(
    "marketplace_product_moderation_total", "Product moderation decisions", ["decision"]
)
