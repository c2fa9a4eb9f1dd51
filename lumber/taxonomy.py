"""The taxonomy of log event types and its pre-embedded leaf labels."""

from __future__ import annotations

from collections.abc import Iterable

from lumber.embedding.embedder import Embedder
from lumber.model import EmbeddedLabel, TaxonomyNode


class TaxonomyError(RuntimeError):
    """Raised when the taxonomy labels cannot be embedded."""


def _leaf(name: str, desc: str, severity: str) -> TaxonomyNode:
    return TaxonomyNode(name=name, desc=desc, severity=severity)


def default_roots() -> list[TaxonomyNode]:
    """Return the built-in taxonomy tree: 42 leaves across 8 roots.

    Leaf descriptions are the texts that get embedded, so they are worded for
    semantic richness and separation between categories.
    """
    return [
        TaxonomyNode(
            name="ERROR",
            desc="Application errors, exceptions, and failures",
            children=[
                _leaf("connection_failure", "TCP connection refused, ECONNREFUSED, dial tcp failed, DNS resolution NXDOMAIN, network unreachable, TLS handshake error, database connection lost, Redis connection reset", "error"),
                _leaf("auth_failure", "Authentication error, invalid credentials, bad username or password, invalid API token, incorrect secret key, signature verification failed, certificate not trusted", "error"),
                _leaf("authorization_failure", "Permission denied, forbidden, insufficient scope, access control rejected, RBAC policy violation", "error"),
                _leaf("timeout", "Request deadline exceeded, operation timed out waiting for response, context deadline exceeded, gateway timeout", "error"),
                _leaf("runtime_exception", "Unhandled exception, panic, segfault, null pointer dereference, TypeError undefined is not a function, stack overflow, uncaught throw crashed the process", "error"),
                _leaf("validation_error", "Input validation failure, schema mismatch, malformed request body, constraint violation, field must be a valid value, missing required field", "warning"),
                _leaf("out_of_memory", "OOM kill, heap exhaustion, memory allocation failure, Java OutOfMemoryError, container memory limit exceeded", "error"),
                _leaf("rate_limited", "HTTP 429 Too Many Requests, API throttling, quota exceeded, rate limit counter reached maximum, too many API calls per minute", "warning"),
                _leaf("dependency_error", "Upstream service failure, downstream dependency unavailable, circuit breaker open, external API returned error", "error"),
            ],
        ),
        TaxonomyNode(
            name="REQUEST",
            desc="HTTP requests and API responses",
            children=[
                _leaf("success", "HTTP 200 OK response, successful API call completed, request served with 2xx status code", "info"),
                _leaf("client_error", "HTTP 400 Bad Request, 404 Not Found, 422 Unprocessable Entity, client-side 4xx error, file too large, payload exceeds size limit", "warning"),
                _leaf("server_error", "HTTP 500 Internal Server Error, 502 Bad Gateway, 503 Service Unavailable, server-side 5xx error response", "error"),
                _leaf("redirect", "HTTP 301 Moved Permanently, 302 Found, 307 Temporary Redirect, 3xx redirect response", "info"),
                _leaf("slow_request", "Slow HTTP request exceeding latency threshold, high response time, request took longer than expected SLA", "warning"),
            ],
        ),
        TaxonomyNode(
            name="DEPLOY",
            desc="Deployment and build pipeline events",
            children=[
                _leaf("build_started", "CI/CD build process initiated, compilation started, build pipeline triggered", "info"),
                _leaf("build_succeeded", "Build completed successfully, compilation finished, all build steps passed", "info"),
                _leaf("build_failed", "Build failed with errors, compilation error, undefined symbol, cannot find package, npm install failed, CI pipeline broken, build step exited with non-zero code", "error"),
                _leaf("deploy_started", "Deployment initiated, rolling out new version, release process started", "info"),
                _leaf("deploy_succeeded", "Deployment completed successfully, new version is live, release finished", "info"),
                _leaf("deploy_failed", "Deployment failed, release rolled back automatically, deploy step errored", "error"),
                _leaf("rollback", "Deployment rollback triggered, reverting to previous version, release rolled back", "warning"),
            ],
        ),
        TaxonomyNode(
            name="SYSTEM",
            desc="Infrastructure and system-level events",
            children=[
                _leaf("health_check", "Kubernetes liveness probe, readiness probe, health check passed or failed, health endpoint /healthz, container probe result, heartbeat ping", "info"),
                _leaf("scaling_event", "Autoscale up or down, HPA scaling replicas, instance count changed, horizontal pod autoscaler triggered by CPU utilization, replica adjustment, adding more instances", "info"),
                _leaf("resource_alert", "CPU usage threshold breach, memory usage high approaching limit, disk space warning, resource utilization alert, usage percentage exceeded threshold", "warning"),
                _leaf("process_lifecycle", "Service started listening on port, process stopped, server restarting, graceful shutdown, SIGTERM received, process crashed, application boot, server initialized with pid", "info"),
                _leaf("config_change", "Environment variable updated, feature flag toggled, configuration reloaded, settings changed", "info"),
            ],
        ),
        TaxonomyNode(
            name="ACCESS",
            desc="Authentication, authorization, and access control events",
            children=[
                _leaf("login_success", "Successful user authentication, user logged in, SSO login completed, OAuth token granted", "info"),
                _leaf("login_failure", "Failed user login attempt, wrong password entered, invalid password rejected, account locked after repeated failures, MFA verification failed, TOTP code incorrect, user login denied", "warning"),
                _leaf("session_expired", "User session timed out, JWT token expired, bearer token expiration, session invalidated, cookie expired, refresh token no longer valid", "info"),
                _leaf("permission_change", "User role granted or revoked, permission modified, RBAC role assignment changed, access level updated", "info"),
                _leaf("api_key_event", "API key created, API key rotated, API key revoked, service account token generated", "info"),
            ],
        ),
        TaxonomyNode(
            name="PERFORMANCE",
            desc="Performance metrics and degradation events",
            children=[
                _leaf("latency_spike", "p50 p95 p99 latency degradation, response time spike, increased request duration percentiles", "warning"),
                _leaf("throughput_drop", "Request rate decrease, requests per second dropped, traffic volume drop, QPS decline, fewer queries per second than baseline, reduced throughput", "warning"),
                _leaf("queue_backlog", "Job queue growing, message queue consumer lag, pending tasks increasing, worker backlog", "warning"),
                _leaf("cache_event", "Cache miss rate increased, cache eviction, cache hit ratio degradation, Redis cache cold start", "info"),
                _leaf("db_slow_query", "Slow database query exceeding time threshold, SQL query took too many seconds, query execution time exceeded limit, long-running database operation above SLA", "warning"),
            ],
        ),
        TaxonomyNode(
            name="DATA",
            desc="Database and data operations",
            children=[
                _leaf("query_executed", "Database query execution log, SQL statement completed normally, routine SELECT INSERT UPDATE DELETE, query returned rows, statement finished", "info"),
                _leaf("migration", "Database schema migration, table altered, column added, migration script applied, schema version updated", "info"),
                _leaf("replication", "Data replication event, database sync, replica caught up, backup completed, data export finished", "info"),
            ],
        ),
        TaxonomyNode(
            name="SCHEDULED",
            desc="Cron jobs and scheduled tasks",
            children=[
                _leaf("cron_started", "Scheduled job started, cron task triggered, periodic task began execution", "info"),
                _leaf("cron_completed", "Scheduled job completed successfully, cron task finished, periodic task done", "info"),
                _leaf("cron_failed", "Scheduled job failed with error, cron task crashed, periodic job execution failure, cron job exited with error, scheduled task did not complete", "error"),
            ],
        ),
    ]


class Taxonomy:
    """The label tree together with an embedding vector for every leaf.

    Each leaf is embedded from the text ``"{root}: {leaf description}"`` so
    that the vector carries both the category context and the description.
    """

    def __init__(self, roots: Iterable[TaxonomyNode] | None, embedder: Embedder) -> None:
        self._roots = list(roots or [])
        leaves = [(root, child) for root in self._roots for child in root.children]
        if not leaves:
            self._labels: list[EmbeddedLabel] = []
            return

        texts = [f"{root.name}: {child.desc}" for root, child in leaves]
        try:
            vectors = embedder.embed_batch(texts)
        except Exception as exc:
            raise TaxonomyError(f"pre-embed {len(texts)} labels: {exc}") from exc
        if len(vectors) != len(texts):
            raise TaxonomyError(
                f"pre-embed {len(texts)} labels: embedder returned {len(vectors)} vectors"
            )

        self._labels = [
            EmbeddedLabel(
                path=f"{root.name}.{child.name}",
                vector=vector,
                severity=child.severity,
            )
            for (root, child), vector in zip(leaves, vectors)
        ]

    def labels(self) -> list[EmbeddedLabel]:
        """Return the pre-embedded leaf labels used for classification."""
        return list(self._labels)

    def roots(self) -> list[TaxonomyNode]:
        """Return the top-level taxonomy nodes."""
        return list(self._roots)