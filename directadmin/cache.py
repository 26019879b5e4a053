from enum import Enum
from typing import Any, Callable, Dict, Mapping, Optional


class CacheCategory(str, Enum):
    CONFIG = "config"
    USAGE = "usage"
    DATABASES = "databases"
    RESELLER_CONFIG = "reseller_config"
    RESELLER_USAGE = "reseller_usage"
    RESELLER_DATABASES = "reseller_databases"
    DOMAINS = "domains"
    DOMAIN_OWNERS = "domain_owners"
    LOGIN_KEYS = "login_keys"
    ACCESS_HOSTS = "access_hosts"
    CONTEXT_USER = "context_user"
    USERS = "users"
    RESELLERS = "resellers"
    ADMINS = "admins"
    ALL_USERS = "all_users"
    IPS = "ips"
    PACKAGES = "packages"


class ObjectCache:
    """
    Per-object store of lazily fetched remote data.

    Each category is fetched as a whole on first access and kept until
    ``clear()`` drops every category at once.
    """

    def __init__(self) -> None:
        self._store: Dict[CacheCategory, Any] = {}

    def get(self, category: CacheCategory, fetch: Callable[[], Any]) -> Any:
        if category not in self._store:
            self._store[category] = fetch()
        return self._store[category]

    def get_item(
        self, category: CacheCategory, key: str, fetch: Callable[[], Any]
    ) -> Optional[Any]:
        data = self.get(category, fetch)
        if isinstance(data, Mapping):
            return data.get(key)
        return None

    def set(self, category: CacheCategory, value: Any) -> None:
        self._store[category] = value

    def contains(self, category: CacheCategory) -> bool:
        return category in self._store

    def clear(self) -> None:
        self._store = {}
