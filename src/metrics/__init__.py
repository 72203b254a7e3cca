"""Metrics module for chat relay service."""

from prometheus_client import (
    Counter,
    Gauge,
    Histogram,
)

# Counter to track REST API calls
# This will be used to count how many times each API endpoint is called
# and the status code of the response
rest_api_calls_total = Counter(
    "cr_rest_api_calls_total", "REST API calls counter", ["path", "status_code"]
)

# Histogram to measure response durations
# This will be used to track how long it takes to handle requests
response_duration_seconds = Histogram(
    "cr_response_duration_seconds", "Response durations", ["path"]
)

# Metric that indicates which upstream model is configured
upstream_model_configuration = Gauge(
    "cr_upstream_model_configuration",
    "Upstream model defined in configuration",
    ["model"],
)

# Metric that counts how many LLM calls were made for each model
llm_calls_total = Counter(
    "cr_llm_calls_total", "LLM calls counter", ["model", "streaming"]
)

# Metric that counts how many LLM calls failed, by error code
llm_calls_failures_total = Counter(
    "cr_llm_calls_failures_total", "LLM calls failures", ["code"]
)

# Metric that counts requests rejected by local daily quota
quota_denials_total = Counter(
    "cr_quota_denials_total", "Requests denied by daily quota", ["identity_type"]
)

# Metric that counts content deltas relayed to callers
llm_stream_tokens_total = Counter(
    "cr_llm_stream_tokens_total", "Content deltas relayed in event streams"
)

# Metric that counts event streams closed by upstream without terminal marker
llm_stream_truncated_total = Counter(
    "cr_llm_stream_truncated_total", "Upstream event streams without terminal marker"
)
