"""
HTTP transport, URL helpers, and request logging for ado-cli.
"""

import base64
import json
import sys
import time
import urllib.error
import urllib.parse
import urllib.request
from dataclasses import dataclass, field

from ado_cli import config
from ado_cli.exceptions import ApiError, CliError

CONTENT_JSON = "application/json"
CONTENT_JSON_PATCH = "application/json-patch+json"

_SENSITIVE_QUERY_KEYS = frozenset({"token", "access_token", "pat"})


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _safe_json_parse(text, context="response"):
    """Parse JSON with friendly error message on failure."""
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise CliError(f"Invalid JSON in {context}: {e.msg} at position {e.pos}") from None


def _expect_object_response(result, operation):
    """Ensure a decoded response is a JSON object (dict)."""
    if isinstance(result, dict):
        return result
    raise CliError(
        f"Unexpected {operation} response shape: "
        f"expected JSON object, got {type(result).__name__}."
    )


def _basic_auth_header(pat):
    """Basic auth with an empty username, as Azure DevOps expects for PATs."""
    token = base64.b64encode(f":{pat}".encode()).decode("ascii")
    return f"Basic {token}"


def _sanitize_url_for_log(url):
    """Mask sensitive query params in URLs before logging."""
    parsed = urllib.parse.urlsplit(url)
    if not parsed.query:
        return url
    pairs = urllib.parse.parse_qsl(parsed.query, keep_blank_values=True)
    masked = []
    for key, value in pairs:
        if key.lower() in _SENSITIVE_QUERY_KEYS:
            masked.append((key, "***"))
        else:
            masked.append((key, value))
    safe_query = urllib.parse.urlencode(masked, safe="$,")
    return urllib.parse.urlunsplit(
        (parsed.scheme, parsed.netloc, parsed.path, safe_query, parsed.fragment)
    )


def _log_http_event(**fields):
    """Emit structured HTTP logs to stderr when enabled."""
    if not config.HTTP_LOG_ENABLED:
        return
    print("[HTTP] " + json.dumps(fields, ensure_ascii=False, sort_keys=True), file=sys.stderr)


def with_api_version(url, api_version):
    """Set the api-version query param, keeping any params already on *url*."""
    parts = urllib.parse.urlsplit(url)
    pairs = [
        (k, v)
        for k, v in urllib.parse.parse_qsl(parts.query, keep_blank_values=True)
        if k != "api-version"
    ]
    pairs.append(("api-version", api_version))
    query = urllib.parse.urlencode(pairs, safe="$,")
    return urllib.parse.urlunsplit((parts.scheme, parts.netloc, parts.path, query, parts.fragment))


# ---------------------------------------------------------------------------
# Endpoint descriptor
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Endpoint:
    """Organization base address plus API version. Immutable."""

    base_url: str
    api_version: str = config.DEFAULT_API_VERSION

    @classmethod
    def for_organization(cls, organization, api_version=None):
        """Accept an org name ("contoso") or an org/collection URL."""
        org = (organization or "").strip().rstrip("/")
        if not org:
            raise CliError("organization cannot be empty")
        if org.startswith(("http://", "https://")):
            base = org if org.endswith("/_apis") else f"{org}/_apis"
        else:
            base = f"{config.BASE_HOST}/{urllib.parse.quote(org, safe='')}/_apis"
        return cls(base_url=base, api_version=api_version or config.API_VERSION)

    @property
    def org_base(self):
        return self.base_url[: -len("/_apis")]

    def org_url(self, path):
        return f"{self.base_url}/{path.lstrip('/')}"

    def project_url(self, project, path):
        quoted = urllib.parse.quote(project, safe="")
        return f"{self.org_base}/{quoted}/_apis/{path.lstrip('/')}"

    def resolve(self, target):
        """Absolute URLs pass through; anything else is org-relative."""
        if target.startswith(("http://", "https://")):
            return target
        return self.org_url(target)


# ---------------------------------------------------------------------------
# Transport
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Transport:
    """One authenticated request per call. No retries, no caching."""

    endpoint: Endpoint
    pat: str = field(repr=False)
    timeout: int = config.HTTP_TIMEOUT_SECONDS

    def execute(self, method, target, content_type=CONTENT_JSON, body=None):
        """Send one request and return (status, raw_body_text).

        Raises ApiError for status >= 400, with the body text verbatim.
        """
        url = with_api_version(self.endpoint.resolve(target), self.endpoint.api_version)
        data = json.dumps(body).encode("utf-8") if body is not None else None
        headers = {
            "Authorization": _basic_auth_header(self.pat),
            "Content-Type": content_type,
            "Accept": CONTENT_JSON,
        }
        safe_url = _sanitize_url_for_log(url)
        timeout = max(1, self.timeout)
        _log_http_event(
            phase="request",
            method=method,
            url=safe_url,
            content_type=content_type,
            timeout_seconds=timeout,
        )
        start = time.perf_counter()
        req = urllib.request.Request(url, data=data, headers=headers, method=method)
        try:
            with urllib.request.urlopen(req, timeout=timeout) as resp:
                status = getattr(resp, "status", 200)
                raw = resp.read(config.HTTP_MAX_RESPONSE_BYTES + 1)
        except urllib.error.HTTPError as e:
            try:
                error_body = e.read().decode("utf-8", errors="replace") if e.fp else ""
            finally:
                e.close()
            _log_http_event(
                phase="response",
                method=method,
                url=safe_url,
                status=e.code,
                latency_ms=round((time.perf_counter() - start) * 1000, 2),
            )
            if e.code >= 400:
                raise ApiError(e.code, error_body, reason=e.reason) from e
            # urllib raises for unfollowed redirects and 304 as well.
            return e.code, error_body
        except TimeoutError as e:
            _log_http_event(phase="network_error", method=method, url=safe_url, error="timeout")
            raise CliError(
                f"Request timed out after {timeout} seconds. "
                f"Is {self.endpoint.org_base} reachable?"
            ) from e
        except urllib.error.URLError as e:
            _log_http_event(
                phase="network_error", method=method, url=safe_url, error=f"url_error: {e.reason}"
            )
            raise CliError(f"Connection failed: {e.reason}") from e

        if len(raw) > config.HTTP_MAX_RESPONSE_BYTES:
            raise CliError(
                f"Response too large from Azure DevOps (>{config.HTTP_MAX_RESPONSE_BYTES} bytes)."
            )
        text = raw.decode("utf-8", errors="replace")
        _log_http_event(
            phase="response",
            method=method,
            url=safe_url,
            status=status,
            bytes=len(raw),
            latency_ms=round((time.perf_counter() - start) * 1000, 2),
        )
        if status >= 400:
            raise ApiError(status, text)
        return status, text

    def request_json(self, method, target, body=None, content_type=CONTENT_JSON):
        """execute() then decode the body. An empty body decodes to None."""
        _status, text = self.execute(method, target, content_type=content_type, body=body)
        if not text.strip():
            return None
        return _safe_json_parse(text, f"{method} response")
