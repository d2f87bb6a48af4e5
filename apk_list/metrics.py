"""Prometheus metrics for the APK list."""

from prometheus_client import Counter, Gauge, Histogram, Info

# Application info
app_info = Info("apk_list", "APK list application info")
app_info.info({"version": "0.1.0", "name": "apk-list"})

# Refresh metrics
page_refresh_total = Counter(
    "page_refresh_total",
    "Total number of page refresh cycles",
    ["status"],
)

page_refresh_duration_seconds = Histogram(
    "page_refresh_duration_seconds",
    "Time spent fetching, ranking and rendering the page",
    buckets=[0.5, 1.0, 2.0, 5.0, 10.0, 30.0, 60.0, 120.0],
)

page_last_published_timestamp = Gauge(
    "page_last_published_timestamp",
    "Unix timestamp of the last published page",
)

# Catalog metrics
catalog_products = Gauge(
    "catalog_products",
    "Number of ranked products per group on the current page",
    ["group"],
)


def record_refresh_success(duration: float, published_at: float):
    """Record a refresh cycle that published a new page."""
    page_refresh_total.labels(status="success").inc()
    page_refresh_duration_seconds.observe(duration)
    page_last_published_timestamp.set(published_at)


def record_refresh_error(duration: float):
    """Record a refresh cycle that kept the previous page."""
    page_refresh_total.labels(status="error").inc()
    page_refresh_duration_seconds.observe(duration)


def update_group_sizes(group_counts: dict[str, int]):
    """Update the catalog_products gauge with current group sizes."""
    for group, count in group_counts.items():
        catalog_products.labels(group=group).set(count)
