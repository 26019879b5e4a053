"""
DirectAdmin API Client

This package wraps the DirectAdmin control panel API in objects for admin,
reseller and user accounts, their domains and databases. Account data is
fetched lazily, cached per object, and invalidated on every change.

Requirements:
    - Python 3
    - requests library

Configuration:
    Use connect_admin / connect_reseller / connect_user directly, or set
    per-call overrides (validated by configure()) to execute_command.
    Fields: host, port, scheme, username, password, account_type,
            verify_ssl, timeout
"""

from .cache import CacheCategory, ObjectCache
from .connection import Connection
from .context import Context
from .exceptions import (
    DirectAdminError,
    PrivilegeError,
    RemoteApiError,
    UnknownAccountTypeError,
)
from .main import (
    DEFAULT_CONFIG,
    configure,
    connect_admin,
    connect_reseller,
    connect_user,
    execute_command,
    initialize,
)
from .objects import Account, AccountType, Database, Domain, from_config

# Package metadata
__version__ = "1.0.0"
__author__ = "DirectAdmin Client Developers"
__description__ = "DirectAdmin API client for admin, reseller and user accounts"

__all__ = [
    "Account",
    "AccountType",
    "CacheCategory",
    "Connection",
    "Context",
    "DEFAULT_CONFIG",
    "Database",
    "DirectAdminError",
    "Domain",
    "ObjectCache",
    "PrivilegeError",
    "RemoteApiError",
    "UnknownAccountTypeError",
    "configure",
    "connect_admin",
    "connect_reseller",
    "connect_user",
    "execute_command",
    "from_config",
    "initialize",
    "__version__",
    "__author__",
    "__description__",
]
