"""Report command: declared resources with usage-based recommendations."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated, Any

import structlog
import typer
from rich.console import Console

from k8s_resources_advisor.cli.formatters import (
    OutputFormat,
    get_formatter,
    render_result_text,
    report_columns,
)
from k8s_resources_advisor.cli.options import (
    ConfigFileOption,
    LabelSelectorOption,
    NamespaceOption,
    OutputOption,
    handle_error,
)
from k8s_resources_advisor.core.config import AppConfig, load_config
from k8s_resources_advisor.exceptions import AdvisorError
from k8s_resources_advisor.integrations.kubernetes.client import KubernetesClient
from k8s_resources_advisor.integrations.kubernetes.exceptions import KubernetesError
from k8s_resources_advisor.integrations.prometheus.client import PrometheusClient
from k8s_resources_advisor.recommender.engine import RecommendationEngine
from k8s_resources_advisor.recommender.queries import QueryBuilder
from k8s_resources_advisor.services.report import ReportService
from k8s_resources_advisor.services.workloads import WorkloadLister

console = Console()
logger = structlog.get_logger()


def build_overrides(**flags: Any) -> dict[str, Any]:
    """Turn report flags into nested config overrides, skipping unset ones."""
    prometheus = {
        "url": flags.pop("prometheus_url", None),
        "username": flags.pop("prometheus_user", None),
        "password": flags.pop("prometheus_password", None),
        "retention": flags.pop("prometheus_retention", None),
        "group_field": flags.pop("prometheus_group_field", None),
        "group_value": flags.pop("prometheus_group_value", None),
    }
    kubernetes = {
        "kubeconfig": flags.pop("kubeconfig", None),
        "context": flags.pop("context", None),
    }
    overrides = {
        key: value for key, value in flags.items() if value is not None and value is not False
    }
    if prometheus := {k: v for k, v in prometheus.items() if v is not None}:
        overrides["prometheus"] = prometheus
    if kubernetes := {k: v for k, v in kubernetes.items() if v is not None}:
        overrides["kubernetes"] = kubernetes
    return overrides


def write_result_file(path: Path, text: str) -> None:
    """Write the plain-text table; failure is logged and does not fail the run."""
    try:
        path.write_text(text)
        logger.info("result_file_written", path=str(path))
    except OSError as e:
        logger.error("result_file_write_failed", path=str(path), error=str(e))


def run_report(
    config: AppConfig,
    output: OutputFormat,
    show_progress: bool,
) -> None:
    """Run one report with the given configuration and print it."""
    logger.debug("effective_config", config=config.to_yaml())

    kubernetes_client = KubernetesClient(config.kubernetes)
    prometheus_client = PrometheusClient(config.prometheus) if config.prometheus.enabled else None

    with kubernetes_client:
        engine = None
        if prometheus_client is not None:
            builder = QueryBuilder(
                strategy=config.strategy,
                retention=config.prometheus.retention,
                group_field=config.prometheus.group_field,
                group_value=config.prometheus.group_value,
            )
            engine = RecommendationEngine(prometheus_client, builder, config.group_by)

        service = ReportService(config, WorkloadLister(kubernetes_client), engine)
        try:
            records = service.build(show_progress=show_progress)
        finally:
            if prometheus_client is not None:
                prometheus_client.close()

    columns = report_columns(config)
    get_formatter(output, console).format_report(records, columns)

    if config.result_file:
        write_result_file(Path(config.result_file), render_result_text(records, columns))


def report(
    ctx: typer.Context,
    config_file: ConfigFileOption = None,
    output: OutputOption = OutputFormat.TABLE,
    namespace: NamespaceOption = None,
    selector: LabelSelectorOption = None,
    kubeconfig: Annotated[
        str | None, typer.Option("--kubeconfig", help="Kubeconfig path (default: $KUBECONFIG)")
    ] = None,
    context: Annotated[str | None, typer.Option("--context", help="Kubeconfig context")] = None,
    filter_expression: Annotated[
        str | None,
        typer.Option(
            "--filter",
            "-f",
            help="Row filter, e.g. '.Namespace==prod,.QoS==BestEffort' (any condition matches)",
        ),
    ] = None,
    show_qos: Annotated[bool, typer.Option("--show-qos", help="Add the QoS column")] = False,
    show_safe_to_evict: Annotated[
        bool, typer.Option("--show-safe-to-evict", help="Add the SafeToEvict column")
    ] = False,
    show_debug_json: Annotated[
        bool, typer.Option("--show-debug-json", help="Add a column with each row as JSON")
    ] = False,
    no_cpu_request: Annotated[
        bool, typer.Option("--no-cpu-request", help="Show rows without a CPU request")
    ] = False,
    no_memory_request: Annotated[
        bool, typer.Option("--no-memory-request", help="Show rows without a memory request")
    ] = False,
    oom_killed: Annotated[
        bool, typer.Option("--oom-killed", help="Show rows whose container was OOM killed")
    ] = False,
    prometheus_url: Annotated[
        str | None,
        typer.Option("--prometheus-url", help="Prometheus URL; enables recommendations"),
    ] = None,
    prometheus_user: Annotated[
        str | None, typer.Option("--prometheus-user", help="Prometheus basic auth user")
    ] = None,
    prometheus_password: Annotated[
        str | None,
        typer.Option("--prometheus-password", help="Prometheus basic auth password"),
    ] = None,
    prometheus_retention: Annotated[
        str | None,
        typer.Option("--prometheus-retention", help="Lookback window (default: 7d)"),
    ] = None,
    prometheus_group_field: Annotated[
        str | None,
        typer.Option("--prometheus-group-field", help="Extra label matched on every query"),
    ] = None,
    prometheus_group_value: Annotated[
        str | None,
        typer.Option("--prometheus-group-value", help="Regex value for the extra label"),
    ] = None,
    strategy: Annotated[
        str | None,
        typer.Option("--strategy", help="Limit strategy: conservative or aggressive"),
    ] = None,
    group_by: Annotated[
        str | None,
        typer.Option("--group-by", help="Metric grouping: podtemplate, pod or container"),
    ] = None,
    result_file: Annotated[
        str | None,
        typer.Option("--result-file", help="Plain-text copy of the table ('' disables)"),
    ] = None,
    workers: Annotated[
        int | None,
        typer.Option("--workers", "-w", help="Concurrent recommendation lookups"),
    ] = None,
) -> None:
    """Report container requests/limits, with recommendations when Prometheus is set."""
    overrides = build_overrides(
        namespace=namespace,
        pod_label_selector=selector,
        kubeconfig=kubeconfig,
        context=context,
        filter=filter_expression,
        show_qos=show_qos,
        show_safe_to_evict=show_safe_to_evict,
        show_debug_json=show_debug_json,
        no_cpu_request=no_cpu_request,
        no_memory_request=no_memory_request,
        oom_killed=oom_killed,
        prometheus_url=prometheus_url,
        prometheus_user=prometheus_user,
        prometheus_password=prometheus_password,
        prometheus_retention=prometheus_retention,
        prometheus_group_field=prometheus_group_field,
        prometheus_group_value=prometheus_group_value,
        strategy=strategy,
        group_by=group_by,
        result_file=result_file,
        workers=workers,
    )
    debug = bool(ctx.obj and ctx.obj.get("debug"))

    try:
        config = load_config(config_file, overrides)
        run_report(config, output, show_progress=not debug and output is OutputFormat.TABLE)
    except (AdvisorError, KubernetesError) as e:
        logger.debug("report_failed", error=str(e), error_type=type(e).__name__)
        handle_error(e)
