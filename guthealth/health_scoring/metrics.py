from prometheus_client import Counter


health_scores_computed_total = Counter(
    "health_scores_computed_total",
    "Total health scores computed and stored",
    ["level"],
)

health_notifications_created_total = Counter(
    "health_notifications_created_total",
    "Total health reminder notifications created",
)
