"""DSN classification and dialect-specific DSN normalization.

Functions:
    classify: Decide the backend for a DSN
    normalize_postgres_dsn: Default ``sslmode`` to ``disable``
    postgres_database_name: Database name from a Postgres URL
    strip_scheme: Drop a leading ``scheme://``
    parse_mysql_dsn: Parse a MySQL driver-style DSN

Example:
    >>> classify("postgres://u:p@localhost/app")
    <Dialect.POSTGRES: 'postgres'>
    >>> classify("./data/local.db")
    <Dialect.SQLITE: 'sqlite'>
    >>> parse_mysql_dsn("root:secret@tcp(db:3306)/shop").database
    'shop'
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple
from urllib.parse import unquote

from ..core.exceptions import DSNParseError, ErrorCodes, UnsupportedDialectError
from .models import Dialect

DEFAULT_MYSQL_PORT = 3306
DEFAULT_MYSQL_SOCKET = "/tmp/mysql.sock"

_TCP_NETWORKS = frozenset({"tcp", "tcp4", "tcp6"})
_UNIX_NETWORK = "unix"


def classify(dsn: str) -> Dialect:
    """Decide the backend for ``dsn``; first matching rule wins.

    1. starts with ``postgres`` -> POSTGRES (``postgres://``, ``postgresql://``)
    2. contains ``.db`` -> SQLITE
    3. starts with ``mysql`` or contains no ``://`` -> MYSQL

    A SQLite path that starts with ``postgres`` is classified as POSTGRES.

    Raises:
        UnsupportedDialectError: If no rule matches
    """
    if dsn.startswith("postgres"):
        return Dialect.POSTGRES
    if ".db" in dsn:
        return Dialect.SQLITE
    if dsn.startswith("mysql") or "://" not in dsn:
        return Dialect.MYSQL
    raise UnsupportedDialectError(
        "unknown database",
        code=ErrorCodes.UNSUPPORTED_DIALECT,
        context={"scheme": dsn.split("://", 1)[0]},
    )


def normalize_postgres_dsn(dsn: str) -> str:
    """Strip whitespace and default ``sslmode`` to ``disable``."""
    dsn = dsn.strip()
    if "sslmode=" in dsn:
        return dsn
    separator = "&" if "?" in dsn else "?"
    return f"{dsn}{separator}sslmode=disable"


def postgres_database_name(dsn: str) -> str:
    """Return the last ``/`` segment of ``dsn`` without its query string."""
    return dsn.rsplit("/", 1)[-1].split("?", 1)[0]


def strip_scheme(dsn: str) -> str:
    """Drop a leading ``scheme://`` from ``dsn``, if present."""
    parts = dsn.split("://")
    if len(parts) != 2:
        return dsn
    return parts[1]


@dataclass(frozen=True)
class MySQLParams:
    """Parsed MySQL DSN.

    Attributes:
        user: User name (may be empty)
        password: Password (may be empty)
        net: Network type, ``tcp`` or ``unix``
        host: Host name for tcp, socket path for unix
        port: TCP port, None for unix sockets
        database: Default database, may be empty
        params: Remaining ``?key=value`` options, URL-decoded
    """
    user: str
    password: str
    net: str
    host: str
    port: Optional[int]
    database: str
    params: Dict[str, str] = field(default_factory=dict)

    def connect_kwargs(self) -> Dict[str, Any]:
        """Keyword arguments for ``pymysql.connect``."""
        kwargs: Dict[str, Any] = {
            "user": self.user or None,
            "password": self.password,
            "database": self.database or None,
        }
        if self.net == _UNIX_NETWORK:
            kwargs["unix_socket"] = self.host
        else:
            kwargs["host"] = self.host
            kwargs["port"] = self.port or DEFAULT_MYSQL_PORT
        if "charset" in self.params:
            kwargs["charset"] = self.params["charset"]
        return kwargs


def _parse_error(message: str) -> DSNParseError:
    return DSNParseError(
        f"invalid DSN: {message}",
        code=ErrorCodes.DSN_PARSE_FAILED,
        context={"field": "dsn", "dialect": Dialect.MYSQL.value},
    )


def _split_host_port(address: str) -> Tuple[str, Optional[int]]:
    if address.startswith("["):
        end = address.find("]")
        if end < 0:
            raise _parse_error("unterminated IPv6 address")
        host, rest = address[1:end], address[end + 1:]
        if not rest:
            return host, None
        if not rest.startswith(":"):
            raise _parse_error(f"unexpected text after IPv6 address: {rest!r}")
        port_text = rest[1:]
    elif ":" in address:
        host, port_text = address.rsplit(":", 1)
    else:
        return address, None

    if not port_text.isdigit() or not 0 < int(port_text) < 65536:
        raise _parse_error(f"invalid port {port_text!r}")
    return host, int(port_text)


def parse_mysql_dsn(dsn: str) -> MySQLParams:
    """Parse a MySQL driver-style DSN.

    Format: ``[user[:password]@][net[(addr)]]/dbname[?key=value&...]``.
    A bare ``host[:port]`` is accepted in place of ``net(addr)``.

    Raises:
        DSNParseError: On a missing ``/`` separator, an unterminated
            address, or an invalid port
    """
    # The database separator is the last slash before the query string.
    query_start = dsn.find("?")
    slash = dsn.rfind("/", 0, query_start if query_start >= 0 else len(dsn))
    if slash < 0:
        raise _parse_error("missing the slash separating the database name")

    head, tail = dsn[:slash], dsn[slash + 1:]

    user = password = ""
    at = head.rfind("@")
    if at >= 0:
        credentials, head = head[:at], head[at + 1:]
        user, _, password = credentials.partition(":")

    net, address = head, ""
    paren = head.find("(")
    if paren >= 0:
        if not head.endswith(")"):
            raise _parse_error("network address not terminated (missing closing brace)")
        net, address = head[:paren], head[paren + 1:-1]
    elif head and head not in _TCP_NETWORKS and head != _UNIX_NETWORK:
        net, address = "tcp", head

    net = net or "tcp"
    if net == _UNIX_NETWORK:
        host, port = address or DEFAULT_MYSQL_SOCKET, None
    elif net in _TCP_NETWORKS:
        host, port = _split_host_port(address) if address else ("127.0.0.1", None)
        host = host or "127.0.0.1"
        port = port or DEFAULT_MYSQL_PORT
        net = "tcp"
    else:
        raise _parse_error(f"unknown network {net!r}")

    database, _, query = tail.partition("?")
    params: Dict[str, str] = {}
    for pair in filter(None, query.split("&")):
        key, sep, value = pair.partition("=")
        if not sep:
            raise _parse_error(f"invalid DSN parameter {pair!r}")
        params[key] = unquote(value)

    return MySQLParams(
        user=user,
        password=password,
        net=net,
        host=host,
        port=port,
        database=database,
        params=params,
    )
