"""BDD step definitions for aggregation features."""

import asyncio
from dataclasses import dataclass, field
from typing import Any

import pytest
from pytest_bdd import given, parsers, then, when

from containermetrics.adapters.registry.in_memory import InMemoryContainerRegistry
from containermetrics.core.aggregator import MetricsAggregator
from containermetrics.core.exceptions import DiscoveryError
from containermetrics.core.models import ECS_CONTAINER_NAME_LABEL


@dataclass
class AggregationScenarioContext:
    """Shared state between steps in an aggregation scenario."""

    registry: InMemoryContainerRegistry = field(
        default_factory=InMemoryContainerRegistry
    )
    label_key: str = ""
    payload: str | None = None
    error: Exception | None = None


@pytest.fixture
def ctx() -> AggregationScenarioContext:
    """Fresh scenario context for each test."""
    return AggregationScenarioContext()


def run_async(coro: Any) -> Any:
    """Run a coroutine synchronously."""
    return asyncio.run(coro)


def _add(
    ctx: AggregationScenarioContext,
    container_id: str,
    *,
    name: str | None,
    labeled: bool = True,
    **script: Any,
) -> None:
    labels = {ctx.label_key: ""} if labeled else {}
    if name is not None:
        labels[ECS_CONTAINER_NAME_LABEL] = name
    ctx.registry.add_container(container_id, labels, **script)


# === Background Steps ===
@given("an in-memory container registry")
def step_registry(ctx: AggregationScenarioContext) -> None:
    ctx.registry = InMemoryContainerRegistry()


@given(parsers.parse('containers are discovered by the label "{label_key}"'))
def step_label_key(ctx: AggregationScenarioContext, label_key: str) -> None:
    ctx.label_key = label_key


# === Container Steps ===
@given(parsers.parse('a labeled container "{name}" exposing:'))
def step_labeled_container(
    ctx: AggregationScenarioContext, name: str, docstring: str
) -> None:
    _add(ctx, f"c-{name}", name=name, stdout=docstring + "\n")


@given("an unnamed labeled container exposing:")
def step_unnamed_container(ctx: AggregationScenarioContext, docstring: str) -> None:
    _add(ctx, "c-unnamed", name=None, stdout=docstring + "\n")


@given(parsers.parse('an unlabeled container "{name}" exposing:'))
def step_unlabeled_container(
    ctx: AggregationScenarioContext, name: str, docstring: str
) -> None:
    _add(ctx, f"c-{name}", name=name, labeled=False, stdout=docstring + "\n")


@given(
    parsers.parse(
        'a labeled container "{name}" whose fetch exits with status {code:d}'
    )
)
def step_failing_container(
    ctx: AggregationScenarioContext, name: str, code: int
) -> None:
    _add(ctx, f"c-{name}", name=name, stdout="up 0\n", exit_code=code)


@given("the container registry is unreachable")
def step_registry_down(ctx: AggregationScenarioContext) -> None:
    ctx.registry.list_error = "cannot connect to the Docker daemon"


# === Action Steps ===
@when("the metrics are aggregated")
def step_aggregate(ctx: AggregationScenarioContext) -> None:
    aggregator = MetricsAggregator(ctx.registry, ctx.label_key, probe_timeout=5.0)
    try:
        ctx.payload = run_async(aggregator.aggregate())
    except DiscoveryError as e:
        ctx.error = e


# === Assertion Steps ===
@then(parsers.parse('the payload contains the line "{line}"'))
def step_payload_has_line(ctx: AggregationScenarioContext, line: str) -> None:
    assert ctx.payload is not None
    assert line in ctx.payload.splitlines()


@then(parsers.parse('the payload does not mention "{text}"'))
def step_payload_lacks(ctx: AggregationScenarioContext, text: str) -> None:
    assert ctx.payload is not None
    assert text not in ctx.payload


@then("the payload is empty")
def step_payload_empty(ctx: AggregationScenarioContext) -> None:
    assert ctx.payload == ""


@then("the aggregation fails with a discovery error")
def step_discovery_error(ctx: AggregationScenarioContext) -> None:
    assert ctx.payload is None
    assert isinstance(ctx.error, DiscoveryError)
