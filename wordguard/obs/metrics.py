"""Central registry for Prometheus metrics used by the filter."""

from __future__ import annotations

from prometheus_client import Counter, Gauge, Histogram

CHECKS_TOTAL = Counter(
	"wordguard_checks_total",
	"Content checks processed by outcome",
	["outcome"],
)

CHECK_LATENCY_SECONDS = Histogram(
	"wordguard_check_latency_seconds",
	"Latency of a single content check in seconds",
	buckets=(0.0005, 0.001, 0.0025, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 1.0),
)

CHECK_FAILURES_TOTAL = Counter(
	"wordguard_check_failures_total",
	"Content checks that failed closed, by exception class",
	["reason"],
)

MATCHED_TERMS_TOTAL = Counter(
	"wordguard_matched_terms_total",
	"Distinct matched terms per check, bucketed by risk tier",
	["tier"],
)

AUTOMATON_BUILDS_TOTAL = Counter(
	"wordguard_automaton_builds_total",
	"Automaton rebuilds by triggering operation",
	["reason"],
)

AUTOMATON_BUILD_SECONDS = Histogram(
	"wordguard_automaton_build_seconds",
	"Time spent compiling the dictionary into an automaton",
	buckets=(0.001, 0.005, 0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0),
)

AUTOMATON_NODES = Gauge(
	"wordguard_automaton_nodes",
	"Node count of the currently published automaton",
)

TERMS_LOADED = Gauge(
	"wordguard_terms_loaded",
	"Distinct terms loaded per risk tier",
	["tier"],
)


def observe_check(outcome: str, duration: float) -> None:
	CHECKS_TOTAL.labels(outcome).inc()
	CHECK_LATENCY_SECONDS.observe(duration)


def observe_build(reason: str, duration: float, node_count: int) -> None:
	AUTOMATON_BUILDS_TOTAL.labels(reason).inc()
	AUTOMATON_BUILD_SECONDS.observe(duration)
	AUTOMATON_NODES.set(node_count)


def set_terms_loaded(high: int, medium: int, low: int) -> None:
	TERMS_LOADED.labels("high").set(high)
	TERMS_LOADED.labels("medium").set(medium)
	TERMS_LOADED.labels("low").set(low)
