from __future__ import annotations

from flask import Flask
from werkzeug.middleware.proxy_fix import ProxyFix


def init_app(app: Flask) -> None:
    """
    Honour one reverse-proxy hop of ``X-Forwarded-*`` headers.

    Set ``USE_PROXYFIX = False`` when the app is exposed directly; otherwise
    clients could spoof their address and scheme.
    """
    if not app.config.get("USE_PROXYFIX", True):
        return
    hops = int(app.config.get("PROXYFIX_HOPS", 1))
    app.wsgi_app = ProxyFix(app.wsgi_app, x_for=hops, x_proto=hops, x_host=hops, x_prefix=hops)
