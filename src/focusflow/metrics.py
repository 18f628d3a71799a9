from prometheus_client import Counter, Histogram, REGISTRY


# we check if they are already registered to avoid errors during test runs that re-import modules
def get_or_create_metric(name, documentation, metric_type, **kwargs):
    try:
        return metric_type(name, documentation, **kwargs)
    except ValueError:
        # Counters register under "<name>" and "<name>_total"
        return REGISTRY._names_to_collectors.get(name) or REGISTRY._names_to_collectors[
            f"{name}_total"
        ]


TASKS_PARSED_TOTAL = get_or_create_metric(
    "focusflow_tasks_parsed_total", "Total free-text inputs parsed", Counter
)

PARSE_SIGNALS_TOTAL = get_or_create_metric(
    "focusflow_parse_signals_total",
    "Signals detected while parsing free-text input",
    Counter,
    labelnames=["signal"],
)

QUERIES_TOTAL = get_or_create_metric(
    "focusflow_queries_total",
    "Task queries executed",
    Counter,
    labelnames=["view"],
)

QUERY_LATENCY_SECONDS = get_or_create_metric(
    "focusflow_query_latency_seconds", "Task query latency", Histogram
)

TASK_MUTATIONS_TOTAL = get_or_create_metric(
    "focusflow_task_mutations_total",
    "Task create/update/delete operations",
    Counter,
    labelnames=["action"],
)
