"""npm registry preflight checks and release URLs.

Reachability and authentication are checked with ``npm ping`` and
``npm whoami``. Some private registries do not implement those endpoints;
their "not found" answers are accepted with a warning.
"""

from __future__ import annotations

import re
import threading
from collections.abc import Callable, Mapping
from concurrent.futures import Future, wait
from typing import Any

from .errors import CommandError, RegistryAuthError, RegistryTimeoutError
from .host import Host

NPM_DEFAULT_REGISTRY = "https://registry.npmjs.org"
NPM_BASE_URL = "https://www.npmjs.com"
REGISTRY_TIMEOUT = 10

PING_UNSUPPORTED_RE = re.compile(r"code E40[04]|404.*(ping not found|No content for path)")
WHOAMI_UNSUPPORTED_RE = re.compile(r"code E40[04]")


def get_registry(publish_config: Mapping[str, Any] | None) -> str:
    """Return the registry configured in ``publishConfig``, or npm's."""
    return (publish_config or {}).get("registry") or NPM_DEFAULT_REGISTRY


def is_registry_up(host: Host, registry: str, timeout: float | None = None) -> bool:
    try:
        host.exec(["npm", "ping", "--registry", registry], timeout=timeout)
    except CommandError as err:
        if PING_UNSUPPORTED_RE.search(str(err)):
            host.warn("Ignoring unsupported `npm ping` command response.")
            return True
        return False
    return True


def is_authenticated(host: Host, registry: str, timeout: float | None = None) -> bool:
    try:
        host.exec(["npm", "whoami", "--registry", registry], timeout=timeout)
    except CommandError as err:
        host.debug("whoami_failed", error=str(err))
        if WHOAMI_UNSUPPORTED_RE.search(str(err)):
            host.warn("Ignoring unsupported `npm whoami` command response.")
            return True
        return False
    return True


def _start_check(check: Callable[..., bool], *args: Any) -> Future[bool]:
    """Run ``check`` on a daemon thread, which never holds up interpreter exit."""
    future: Future[bool] = Future()

    def target() -> None:
        if not future.set_running_or_notify_cancel():
            return
        try:
            future.set_result(check(*args))
        except BaseException as exc:
            future.set_exception(exc)

    threading.Thread(target=target, name=f"preflight-{check.__name__}", daemon=True).start()
    return future


def check_registry(host: Host, registry: str, timeout: float = REGISTRY_TIMEOUT) -> None:
    """Verify the registry is reachable and the user is logged in.

    Both checks run concurrently and share a single ``timeout``. Each npm
    command is killed once the timeout has passed.

    Raises:
        RegistryTimeoutError: If the checks did not finish in time, or the
            registry could not be reached.
        RegistryAuthError: If ``npm whoami`` failed.
    """
    up = _start_check(is_registry_up, host, registry, timeout)
    authenticated = _start_check(is_authenticated, host, registry, timeout)
    _, pending = wait([up, authenticated], timeout=timeout)
    if pending:
        raise RegistryTimeoutError(timeout)
    if not up.result():
        raise RegistryTimeoutError(timeout)
    if not authenticated.result():
        raise RegistryAuthError()


def get_release_url(registry: str, name: str) -> str:
    """Return the web page of a published package.

    Examples:
        ("https://registry.npmjs.org", "@scope/pkg")
            → "https://www.npmjs.com/package/@scope/pkg"
    """
    base_url = registry if registry != NPM_DEFAULT_REGISTRY else NPM_BASE_URL
    return "/".join([base_url.rstrip("/"), "package", name.lstrip("/")])
