"""
Account, domain and database objects.

Every object is bound to the context that fetched or created it and reads
through its own ``ObjectCache``. Any call that changes remote state clears
the whole cache of the object it was made on.
"""

import logging
from datetime import datetime, timedelta
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, List, Mapping, Optional

from .cache import CacheCategory, ObjectCache
from .conversion import (
    as_list,
    encode_selection,
    on_off,
    process_unlimited_options,
    response_to_dict,
    to_bool,
    to_limit,
    to_number,
)
from .exceptions import DirectAdminError, PrivilegeError, UnknownAccountTypeError

if TYPE_CHECKING:
    from .context import Context

logger = logging.getLogger("directadmin.objects")


class AccountType(str, Enum):
    USER = "user"
    RESELLER = "reseller"
    ADMIN = "admin"

    @property
    def level(self) -> int:
        return _LEVELS[self]

    def outranks(self, other: "AccountType") -> bool:
        return self.level > other.level

    def at_least(self, other: "AccountType") -> bool:
        return self.level >= other.level


_LEVELS = {AccountType.USER: 1, AccountType.RESELLER: 2, AccountType.ADMIN: 3}

# Resellers and admins keep their stats apart from the plain user view
_CATEGORIES = {
    AccountType.USER: (
        CacheCategory.CONFIG,
        CacheCategory.USAGE,
        CacheCategory.DATABASES,
    ),
    AccountType.RESELLER: (
        CacheCategory.RESELLER_CONFIG,
        CacheCategory.RESELLER_USAGE,
        CacheCategory.RESELLER_DATABASES,
    ),
    AccountType.ADMIN: (
        CacheCategory.RESELLER_CONFIG,
        CacheCategory.RESELLER_USAGE,
        CacheCategory.RESELLER_DATABASES,
    ),
}


class Account:
    """A DirectAdmin user, reseller or admin account."""

    def __init__(
        self,
        name: str,
        context: "Context",
        account_type: AccountType = AccountType.USER,
        config: Optional[Mapping[str, Any]] = None,
    ):
        self.name = name
        self.context = context
        self.type = AccountType(account_type)
        self._cache = ObjectCache()
        if config is not None:
            self._cache.set(self.config_category, dict(config))

    def __repr__(self) -> str:
        return f"<Account {self.name} ({self.type.value})>"

    @property
    def username(self) -> str:
        return self.name

    @property
    def config_category(self) -> CacheCategory:
        return _CATEGORIES[self.type][0]

    @property
    def usage_category(self) -> CacheCategory:
        return _CATEGORIES[self.type][1]

    @property
    def databases_category(self) -> CacheCategory:
        return _CATEGORIES[self.type][2]

    @property
    def is_reseller(self) -> bool:
        return self.type.at_least(AccountType.RESELLER)

    def clear_cache(self) -> None:
        self._cache.clear()

    def is_self_managed(self) -> bool:
        return self.name == self.context.username

    # ------------------------------------------------------------------
    # Raw config and usage
    # ------------------------------------------------------------------

    def load_config(self) -> Dict[str, Any]:
        if self.is_reseller and self.is_self_managed():
            return self.context.invoke_api_get("RESELLER_STATS", {"type": ""})
        return self.context.invoke_api_get("SHOW_USER_CONFIG", {"user": self.name})

    def load_usage(self) -> Dict[str, Any]:
        if self.is_reseller and self.is_self_managed():
            return self.context.invoke_api_get("RESELLER_STATS", {"type": "usage"})
        return self.context.invoke_api_get("SHOW_USER_USAGE", {"user": self.name})

    def get_config(self, item: str) -> Optional[Any]:
        return self._cache.get_item(self.config_category, item, self.load_config)

    def get_usage(self, item: str) -> Optional[Any]:
        return self._cache.get_item(self.usage_category, item, self.load_usage)

    def get_all_config(self) -> Dict[str, Any]:
        return self._cache.get(self.config_category, self.load_config)

    def get_all_usage(self) -> Dict[str, Any]:
        return self._cache.get(self.usage_category, self.load_usage)

    # ------------------------------------------------------------------
    # Typed accessors
    # ------------------------------------------------------------------

    def get_type(self) -> Optional[str]:
        return self.get_config("usertype")

    def get_bandwidth_limit(self) -> Optional[float]:
        """Bandwidth limit in megabytes, or None for unlimited."""
        return to_limit(self.get_config("bandwidth"))

    def get_bandwidth_usage(self) -> float:
        return to_number(self.get_usage("bandwidth"))

    def get_disk_limit(self) -> Optional[float]:
        """Disk quota in megabytes, or None for unlimited."""
        return to_limit(self.get_config("quota"))

    def get_disk_usage(self) -> float:
        return to_number(self.get_usage("quota"))

    def get_domain_limit(self) -> Optional[int]:
        return to_limit(self.get_config("vdomains"), int)

    def get_domain_usage(self) -> int:
        return to_number(self.get_usage("vdomains"), int)

    def get_database_limit(self) -> Optional[int]:
        return to_limit(self.get_config("mysql"), int)

    def get_database_usage(self) -> int:
        return to_number(self.get_usage("mysql"), int)

    def get_db_quota_limit(self) -> Optional[float]:
        return to_limit(self.get_config("db_quota"))

    def get_db_quota_usage(self) -> float:
        return to_number(self.get_usage("db_quota"))

    def get_ftp_limit(self) -> Optional[int]:
        self._require_reseller("FTP totals")
        return to_limit(self.get_config("ftp"), int)

    def get_ftp_usage(self) -> int:
        self._require_reseller("FTP totals")
        return to_number(self.get_usage("ftp"), int)

    def is_suspended(self) -> bool:
        return to_bool(self.get_config("suspended"))

    def has_cgi(self) -> bool:
        return to_bool(self.get_config("cgi"))

    def has_php(self) -> bool:
        return to_bool(self.get_config("php"))

    def has_ssl(self) -> bool:
        return to_bool(self.get_config("ssl"))

    def get_default_domain(self) -> Optional["Domain"]:
        name = self.get_config("domain")
        if not name:
            return None
        return self.get_domain(name)

    # ------------------------------------------------------------------
    # Modification
    # ------------------------------------------------------------------

    def modify_config(self, changes: Mapping[str, Any]) -> None:
        """
        Apply ``changes`` to the account configuration.

        DirectAdmin expects the complete configuration on every modify, so
        the changes are merged over the full current config before posting.
        A value of ``None`` sets the field to unlimited.
        """
        merged = dict(self.get_all_config())
        merged.update(changes)
        payload = process_unlimited_options(merged)
        payload.update({"action": "customize", "user": self.name})
        self.context.invoke_api_post("MODIFY_USER", payload)
        self.clear_cache()

    def modify_package(self, package: str) -> None:
        self.context.invoke_api_post(
            "MODIFY_USER", {"action": "package", "user": self.name, "package": package}
        )
        self.clear_cache()

    def set_allow_catchall(self, allowed: bool) -> None:
        self.modify_config({"catchall": on_off(allowed)})

    def set_bandwidth_limit(self, limit: Optional[float]) -> None:
        self.modify_config({"bandwidth": limit})

    def set_disk_limit(self, limit: Optional[float]) -> None:
        self.modify_config({"quota": limit})

    def set_domain_limit(self, limit: Optional[int]) -> None:
        self.modify_config({"vdomains": limit})

    # ------------------------------------------------------------------
    # Impersonation
    # ------------------------------------------------------------------

    def impersonate(self) -> "Context":
        """Return a context acting as this account, seen from its owning context."""
        if self.type is AccountType.ADMIN:
            raise PrivilegeError("Admin accounts cannot be impersonated")
        if not self.context.privilege.outranks(self.type):
            if self.type is AccountType.RESELLER:
                raise PrivilegeError("You need to be an admin to impersonate a reseller")
            raise PrivilegeError("You need to be at least a reseller to impersonate")
        return self.context.impersonate(self.name, self.type)

    def _self_managed_context(self) -> "Context":
        return self.context if self.is_self_managed() else self.impersonate()

    def _self_managed_user(self) -> "Account":
        if self.is_self_managed():
            return self
        return self.impersonate().get_context_user()

    # ------------------------------------------------------------------
    # Domains
    # ------------------------------------------------------------------

    def get_domains(self) -> Dict[str, "Domain"]:
        return self._cache.get(CacheCategory.DOMAINS, self._load_domains)

    def get_domain(self, domain_name: str) -> Optional["Domain"]:
        return self.get_domains().get(domain_name)

    def _load_domains(self) -> Dict[str, "Domain"]:
        if not self.is_self_managed():
            # Listed as the account itself, but owned by this account object
            return {
                name: Domain(name, domain.context, domain._config, owner=self)
                for name, domain in self.impersonate().get_domains().items()
            }
        listing = self.context.invoke_api_get("ADDITIONAL_DOMAINS")
        if not isinstance(listing, Mapping):
            return {}
        return {
            name: Domain(name, self.context, config, owner=self)
            for name, config in listing.items()
        }

    def create_domain(
        self,
        domain_name: str,
        bandwidth_limit: Optional[float] = None,
        disk_limit: Optional[float] = None,
        ssl: Optional[bool] = None,
        php: Optional[bool] = None,
        cgi: Optional[bool] = None,
    ) -> "Domain":
        domain = Domain.create(
            self._self_managed_user(), domain_name, bandwidth_limit, disk_limit, ssl, php, cgi
        )
        self.clear_cache()
        return domain

    def get_domain_owners(self) -> Dict[str, str]:
        return self._cache.get(CacheCategory.DOMAIN_OWNERS, self._load_domain_owners)

    def get_domain_owner(self, domain_name: str) -> Optional[str]:
        return self._cache.get_item(
            CacheCategory.DOMAIN_OWNERS, domain_name, self._load_domain_owners
        )

    def _load_domain_owners(self) -> Dict[str, str]:
        owners = self._self_managed_context().invoke_api_get("DOMAIN_OWNERS")
        return owners if isinstance(owners, dict) else {}

    # ------------------------------------------------------------------
    # Databases
    # ------------------------------------------------------------------

    def get_databases(self) -> Dict[str, "Database"]:
        return self._cache.get(self.databases_category, self._load_databases)

    def get_database(self, database_name: str) -> Optional["Database"]:
        prefix = f"{self.name}_"
        if database_name.startswith(prefix):
            database_name = database_name[len(prefix):]
        return self.get_databases().get(database_name)

    def _load_databases(self) -> Dict[str, "Database"]:
        context = self._self_managed_context()
        databases: Dict[str, Database] = {}
        for full_name in as_list(context.invoke_api_get("DATABASES")):
            user, _, name = full_name.partition("_")
            if user != self.name or not name:
                raise DirectAdminError(f"Username incorrect on database {full_name}")
            databases[name] = Database(name, self, context)
        return databases

    def create_database(
        self, name: str, username: str, password: Optional[str] = None
    ) -> "Database":
        database = Database.create(self._self_managed_user(), name, username, password)
        self.clear_cache()
        return database

    # ------------------------------------------------------------------
    # Login keys
    # ------------------------------------------------------------------

    def get_login_key(self, key_name: str) -> Optional[Dict[str, Any]]:
        raw = self._cache.get_item(
            CacheCategory.LOGIN_KEYS,
            key_name,
            lambda: self.context.invoke_api_get("LOGIN_KEYS", {"action": "get", "json": "no"}),
        )
        if raw is None:
            return None
        return response_to_dict(raw)

    def create_login_key(
        self,
        key_name: str,
        key_value: str,
        password: str,
        options: Optional[Mapping[str, Any]] = None,
    ) -> Any:
        expires = datetime.now() + timedelta(days=1)
        values: Dict[str, Any] = {
            "hour": expires.strftime("%H"),
            "minute": expires.strftime("%M"),
            "month": expires.strftime("%m"),
            "day": expires.strftime("%d"),
            "year": expires.strftime("%Y"),
            "max_uses": 0,
            "ips": "",
            "clear_key": "yes",
            "allow_htm": "yes",
            "allow_html": "yes",
            "never_expires": "no",
        }
        values.update(options or {})
        values.update({
            "action": "create",
            "create": "Create",
            "passwd": password,
            "keyname": key_name,
            "key": key_value,
            "key2": key_value,
        })
        result = self.context.invoke_api_post("LOGIN_KEYS", values)
        self.clear_cache()
        return result

    def delete_login_key(self, key_name: str) -> Any:
        values = {"action": "select", "keyname": key_name, "delete": "Delete"}
        values.update(encode_selection([key_name]))
        result = self.context.invoke_api_post("LOGIN_KEYS", values)
        self.clear_cache()
        return result

    # ------------------------------------------------------------------
    # Reseller only
    # ------------------------------------------------------------------

    def get_users(self) -> Dict[str, "Account"]:
        self._require_reseller("Listing users")
        names = as_list(self.context.invoke_api_get("SHOW_USERS", {"reseller": self.name}))
        return to_account_dict(names, AccountType.USER, self.context)

    def get_user(self, username: str) -> Optional["Account"]:
        return self.get_users().get(username)

    def _require_reseller(self, what: str) -> None:
        if not self.is_reseller:
            raise PrivilegeError(f"{what} is only available on reseller accounts")


def from_config(config: Mapping[str, Any], context: "Context") -> Account:
    """Build the account variant named by the ``usertype`` field of ``config``."""
    usertype = config.get("usertype")
    try:
        account_type = AccountType(usertype)
    except ValueError:
        raise UnknownAccountTypeError(usertype) from None
    return Account(config["username"], context, account_type, config)


def to_account_dict(
    names: List[str], account_type: AccountType, context: "Context"
) -> Dict[str, Account]:
    return {name: Account(name, context, account_type) for name in names}


def _split_usage(value: Any):
    """Split a ``used / limit`` pair as listed by ADDITIONAL_DOMAINS."""
    parts = [part.strip() for part in str(value or "").split("/")]
    used = to_number(parts[0]) if parts[0] else 0.0
    limit = to_limit(parts[1]) if len(parts) > 1 and not parts[1].isalpha() else None
    return used, limit


class Domain:
    """A domain owned by an account."""

    def __init__(
        self,
        name: str,
        context: "Context",
        config: Any,
        owner: Optional[Account] = None,
    ):
        self.name = name
        self.context = context
        self._owner = owner
        self._config = response_to_dict(config)

        self._bandwidth_used, self._bandwidth_limit = _split_usage(self._config.get("bandwidth"))
        self._disk_usage, _ = _split_usage(self._config.get("quota"))
        self._aliases = [alias for alias in self._config.get("alias_pointers", "").split("|") if alias]
        self._pointers = [pointer for pointer in self._config.get("pointers", "").split("|") if pointer]

    def __repr__(self) -> str:
        return f"<Domain {self.name}>"

    @property
    def domain_name(self) -> str:
        return self.name

    def get_owner(self) -> Account:
        if self._owner is None:
            self._owner = self.context.get_context_user()
        return self._owner

    def get_config(self, item: str) -> Optional[Any]:
        return self._config.get(item)

    def get_bandwidth_used(self) -> float:
        return self._bandwidth_used

    def get_bandwidth_limit(self) -> Optional[float]:
        return self._bandwidth_limit

    def get_disk_usage(self) -> float:
        return self._disk_usage

    def get_aliases(self) -> List[str]:
        return list(self._aliases)

    def get_pointers(self) -> List[str]:
        return list(self._pointers)

    def is_default(self) -> bool:
        return to_bool(self._config.get("defaultdomain"))

    def is_active(self) -> bool:
        return to_bool(self._config.get("active"), default=True)

    def is_suspended(self) -> bool:
        return to_bool(self._config.get("suspended"))

    def has_ssl(self) -> bool:
        return to_bool(self._config.get("ssl"))

    def has_php(self) -> bool:
        return to_bool(self._config.get("php"))

    def has_cgi(self) -> bool:
        return to_bool(self._config.get("cgi"))

    def create_pointer(self, domain_name: str, alias: bool = False) -> None:
        params = {"domain": self.name, "action": "add", "from": domain_name}
        if alias:
            params["alias"] = "yes"
        self.context.invoke_api_post("DOMAIN_POINTER", params)
        (self._aliases if alias else self._pointers).append(domain_name)
        self.get_owner().clear_cache()

    def delete(self) -> None:
        params = {"delete": "anything", "confirmed": "anything"}
        params.update(encode_selection([self.name]))
        self.context.invoke_api_post("DOMAIN", params)
        self.get_owner().clear_cache()

    @classmethod
    def create(
        cls,
        user: Account,
        domain_name: str,
        bandwidth_limit: Optional[float] = None,
        disk_limit: Optional[float] = None,
        ssl: Optional[bool] = None,
        php: Optional[bool] = None,
        cgi: Optional[bool] = None,
    ) -> "Domain":
        options: Dict[str, Any] = {"action": "create", "domain": domain_name}
        if bandwidth_limit is None:
            options["ubandwidth"] = "unlimited"
        else:
            options["bandwidth"] = bandwidth_limit
        if disk_limit is None:
            options["uquota"] = "unlimited"
        else:
            options["quota"] = disk_limit
        for key, flag in (("ssl", ssl), ("php", php), ("cgi", cgi)):
            if flag is not None:
                options[key] = on_off(flag)

        user.context.invoke_api_post("DOMAIN", options)
        listing = user.context.invoke_api_get("ADDITIONAL_DOMAINS")
        if not isinstance(listing, Mapping) or domain_name not in listing:
            raise DirectAdminError(f"Domain {domain_name} missing after creation")
        logger.info("Created domain %s for %s", domain_name, user.name)
        return cls(domain_name, user.context, listing[domain_name], owner=user)


class Database:
    """A MySQL database owned by an account."""

    def __init__(self, name: str, owner: Account, context: "Context"):
        self.name = name
        self.owner = owner
        self.context = context
        self._cache = ObjectCache()

    def __repr__(self) -> str:
        return f"<Database {self.database_name}>"

    @property
    def database_name(self) -> str:
        return f"{self.owner.name}_{self.name}"

    def get_access_hosts(self) -> List[str]:
        return self._cache.get(
            CacheCategory.ACCESS_HOSTS,
            lambda: as_list(
                self.context.invoke_api_get(
                    "DATABASES", {"action": "accesshosts", "db": self.database_name}
                )
            ),
        )

    def create_access_host(self, host: str) -> None:
        self.context.invoke_api_post(
            "DATABASES",
            {"action": "accesshosts", "create": "yes", "db": self.database_name, "host": host},
        )
        self._cache.clear()

    def delete(self) -> None:
        params = {"action": "delete"}
        params.update(encode_selection([self.database_name]))
        self.context.invoke_api_post("DATABASES", params)
        self.owner.clear_cache()

    @classmethod
    def create(
        cls, user: Account, name: str, username: str, password: Optional[str] = None
    ) -> "Database":
        options: Dict[str, Any] = {"action": "create", "name": name}
        if password is not None:
            options.update({"user": username, "passwd": password, "passwd2": password})
        else:
            options["userlist"] = username
        user.context.invoke_api_post("DATABASES", options)
        logger.info("Created database %s_%s", user.name, name)
        return cls(name, user, user.context)
