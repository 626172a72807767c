"""Reverse-proxy awareness for client addresses."""

from __future__ import annotations

from flask import Flask
from werkzeug.middleware.proxy_fix import ProxyFix


def init_app(app: Flask) -> None:
    """Wrap the WSGI app in :class:`ProxyFix` when ``USE_PROXYFIX`` is set.

    Session records store ``request.remote_addr``; behind a load balancer that
    is the balancer's address unless ``X-Forwarded-For`` is honoured.
    ``PROXY_FIX_HOPS`` is the number of trusted proxies in front of the app.
    """
    if not app.config.get("USE_PROXYFIX", True):
        return
    hops = int(app.config.get("PROXY_FIX_HOPS", 1))
    app.wsgi_app = ProxyFix(app.wsgi_app, x_for=hops, x_proto=hops, x_host=hops)
