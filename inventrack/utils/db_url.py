"""Translate a libpq-style PostgreSQL URL into asyncpg engine arguments.

Hosting providers hand out ``postgres://`` or ``postgresql://`` URLs that
carry ``sslmode`` in the query string. asyncpg rejects ``sslmode`` as a URL
parameter, so it is moved into ``connect_args``. This module does not read
settings, so Alembic can use it without the JWT secrets being present.
"""

import ssl
from typing import Any
from urllib.parse import parse_qs, urlencode, urlsplit, urlunsplit

ASYNC_SCHEME = "postgresql+asyncpg"
_PLAIN_SCHEMES = ("postgres", "postgresql")


def with_async_driver(url: str) -> str:
    """Return *url* with the asyncpg driver selected."""
    scheme, sep, rest = url.partition("://")
    if sep and scheme in _PLAIN_SCHEMES:
        return f"{ASYNC_SCHEME}://{rest}"
    return url


def without_async_driver(url: str) -> str:
    """Return *url* with the plain ``postgresql`` scheme, for offline SQL rendering."""
    if url.startswith(f"{ASYNC_SCHEME}://"):
        return "postgresql://" + url[len(ASYNC_SCHEME) + 3 :]
    return url


def _ssl_for_mode(mode: str) -> ssl.SSLContext | None:
    # libpq semantics: "require" encrypts without checking the certificate,
    # "verify-ca" checks the chain, "verify-full" also checks the host name.
    if mode == "require":
        ctx = ssl.create_default_context()
        ctx.check_hostname = False
        ctx.verify_mode = ssl.CERT_NONE
        return ctx
    if mode == "verify-ca":
        ctx = ssl.create_default_context()
        ctx.check_hostname = False
        return ctx
    if mode == "verify-full":
        return ssl.create_default_context()
    return None


def asyncpg_engine_args(url: str) -> tuple[str, dict[str, Any]]:
    """Return ``(url, connect_args)`` ready for :func:`create_async_engine`.

    ``disable``, ``allow`` and ``prefer`` add nothing; asyncpg's own default
    negotiation covers them.
    """
    url = with_async_driver(url)
    parts = urlsplit(url)
    query = parse_qs(parts.query)
    connect_args: dict[str, Any] = {}

    modes = query.pop("sslmode", None)
    if modes is None:
        return url, connect_args

    context = _ssl_for_mode(modes[0])
    if context is not None:
        connect_args["ssl"] = context
    return urlunsplit(parts._replace(query=urlencode(query, doseq=True))), connect_args
