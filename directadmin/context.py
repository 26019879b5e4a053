"""
Execution contexts for the DirectAdmin API.

A context is an authenticated identity with a privilege level (user,
reseller or admin). Privileged operations check that level on entry, so a
call the context is not allowed to make never reaches the server.
Impersonation only flows downwards: admin to reseller or user, reseller
to user.
"""

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from .cache import CacheCategory, ObjectCache
from .conversion import as_list, encode_selection
from .exceptions import PrivilegeError
from .objects import Account, AccountType, Domain, from_config, to_account_dict

logger = logging.getLogger("directadmin.context")

_ACCOUNT_ENDPOINTS = {
    AccountType.USER: "ACCOUNT_USER",
    AccountType.RESELLER: "ACCOUNT_RESELLER",
    AccountType.ADMIN: "ACCOUNT_ADMIN",
}

_PACKAGE_DEFAULTS = {
    "add": "Save",
    "bandwidth": "unlimited",
    "quota": "unlimited",
    "vdomains": "unlimited",
    "nsubdomains": "unlimited",
    "nemails": "unlimited",
    "nemailf": "unlimited",
    "nemailml": "unlimited",
    "nemailr": "unlimited",
    "mysql": "unlimited",
    "domainptr": "unlimited",
    "ftp": "unlimited",
    "aftp": "OFF",
    "login_keys": "ON",
    "cgi": "ON",
    "php": "ON",
    "spam": "ON",
    "ssl": "ON",
    "ssh": "OFF",
    "dnscontrol": "OFF",
    "suspend_at_limit": "ON",
    "skin": "default",
}


class Context:
    def __init__(self, connection, privilege: AccountType = AccountType.USER, validate: bool = False):
        self.connection = connection
        self.privilege = AccountType(privilege)
        self._cache = ObjectCache()
        if validate:
            self._validate()

    def __repr__(self) -> str:
        return f"<Context {self.username} ({self.privilege.value})>"

    @property
    def username(self) -> str:
        return self.connection.username

    def clear_cache(self) -> None:
        self._cache.clear()

    def _validate(self) -> None:
        # RESELLER_STATS has no usertype, so the check always reads the user config
        config = self.invoke_api_get("SHOW_USER_CONFIG")
        usertype = config.get("usertype") if isinstance(config, Mapping) else None
        if usertype != self.privilege.value:
            raise PrivilegeError(
                f"Account {self.username} is of type {usertype}, not {self.privilege.value}"
            )

    def _require(self, level: AccountType, action: str) -> None:
        if not self.privilege.at_least(level):
            raise PrivilegeError(
                f"{action} requires {level.value} privileges, "
                f"{self.username} is a {self.privilege.value}"
            )

    # ------------------------------------------------------------------
    # Remote calls
    # ------------------------------------------------------------------

    def invoke_api_get(self, command: str, params: Optional[Dict[str, Any]] = None):
        return self.connection.invoke_get(command, params or {})

    def invoke_api_post(self, command: str, params: Optional[Dict[str, Any]] = None):
        return self.connection.invoke_post(command, params or {})

    # ------------------------------------------------------------------
    # The account behind the context
    # ------------------------------------------------------------------

    def get_context_user(self) -> Account:
        return self._cache.get(CacheCategory.CONTEXT_USER, self._load_context_user)

    def _load_context_user(self) -> Account:
        if self.privilege is AccountType.USER:
            config = dict(self.invoke_api_get("SHOW_USER_CONFIG"))
        else:
            config = dict(self.invoke_api_get("RESELLER_STATS", {"type": ""}))
            config.setdefault("usertype", self.privilege.value)
        config["username"] = self.username
        return from_config(config, self)

    def get_type(self) -> Optional[str]:
        return self.get_context_user().get_type()

    def get_domains(self) -> Dict[str, Domain]:
        return self.get_context_user().get_domains()

    def get_domain(self, domain_name: str) -> Optional[Domain]:
        return self.get_context_user().get_domain(domain_name)

    # ------------------------------------------------------------------
    # Impersonation
    # ------------------------------------------------------------------

    def impersonate(
        self,
        username: str,
        account_type: AccountType = AccountType.USER,
        validate: bool = False,
    ) -> "Context":
        """Return a context acting as ``username``, one or more levels below this one."""
        account_type = AccountType(account_type)
        if not self.privilege.outranks(account_type):
            raise PrivilegeError(
                f"A {self.privilege.value} cannot impersonate a {account_type.value}"
            )
        if validate and username not in self._managed_accounts(account_type):
            raise PrivilegeError(f"{username} is not managed by {self.username}")

        logger.info("%s impersonating %s %s", self.username, account_type.value, username)
        return Context(self.connection.login_as(username), account_type)

    def impersonate_user(self, username: str, validate: bool = False) -> "Context":
        return self.impersonate(username, AccountType.USER, validate)

    def impersonate_reseller(self, username: str, validate: bool = False) -> "Context":
        return self.impersonate(username, AccountType.RESELLER, validate)

    def _managed_accounts(self, account_type: AccountType) -> Dict[str, Account]:
        if account_type is AccountType.RESELLER:
            return self.get_resellers()
        if self.privilege is AccountType.ADMIN:
            return self.get_all_users()
        return self.get_users()

    # ------------------------------------------------------------------
    # Account management
    # ------------------------------------------------------------------

    def create_account(
        self,
        username: str,
        password: str,
        email: str,
        options: Optional[Mapping[str, Any]] = None,
        account_type: AccountType = AccountType.USER,
    ) -> Account:
        account_type = AccountType(account_type)
        required = AccountType.RESELLER if account_type is AccountType.USER else AccountType.ADMIN
        self._require(required, f"Creating a {account_type.value}")

        params: Dict[str, Any] = dict(options or {})
        params.update({
            "action": "create",
            "add": "Submit",
            "email": email,
            "passwd": password,
            "passwd2": password,
            "username": username,
        })
        self.invoke_api_post(_ACCOUNT_ENDPOINTS[account_type], params)
        self.clear_cache()
        logger.info("Created %s account %s", account_type.value, username)
        return Account(username, self, account_type)

    def create_user(
        self,
        username: str,
        password: str,
        email: str,
        domain: str,
        ip: str,
        package: Union[str, Mapping[str, Any], None] = None,
    ) -> Account:
        options = {"ip": ip, "domain": domain}
        options.update(_package_options(package))
        return self.create_account(username, password, email, options, AccountType.USER)

    def create_reseller(
        self,
        username: str,
        password: str,
        email: str,
        domain: str,
        package: Union[str, Mapping[str, Any], None] = None,
        ip: str = "shared",
    ) -> Account:
        options = {"ip": ip, "domain": domain}
        options.update(_package_options(package))
        return self.create_account(username, password, email, options, AccountType.RESELLER)

    def create_admin(self, username: str, password: str, email: str) -> Account:
        return self.create_account(username, password, email, {}, AccountType.ADMIN)

    def delete_accounts(self, usernames: Iterable[str]) -> None:
        self._require(AccountType.RESELLER, "Deleting accounts")
        selection = _select(usernames)
        params = {"confirmed": "Confirm", "delete": "yes"}
        params.update(selection)
        self.invoke_api_post("SELECT_USERS", params)
        self.clear_cache()
        logger.info("Deleted accounts %s", ", ".join(selection.values()))

    def delete_account(self, username: str) -> None:
        self.delete_accounts([username])

    def suspend_accounts(self, usernames: Iterable[str], suspend: bool = True) -> None:
        self._require(AccountType.RESELLER, "Suspending accounts")
        selection = _select(usernames)
        params = {"suspend": "Suspend" if suspend else "Unsuspend"}
        params.update(selection)
        self.invoke_api_post("SELECT_USERS", params)
        self.clear_cache()
        logger.info(
            "%s accounts %s",
            "Suspended" if suspend else "Unsuspended",
            ", ".join(selection.values()),
        )

    def unsuspend_accounts(self, usernames: Iterable[str]) -> None:
        self.suspend_accounts(usernames, False)

    def suspend_account(self, username: str) -> None:
        self.suspend_accounts([username])

    def unsuspend_account(self, username: str) -> None:
        self.suspend_accounts([username], False)

    # ------------------------------------------------------------------
    # Reseller listings
    # ------------------------------------------------------------------

    def get_users(self) -> Dict[str, Account]:
        self._require(AccountType.RESELLER, "Listing users")
        return self._cache.get(
            CacheCategory.USERS,
            lambda: to_account_dict(
                as_list(self.invoke_api_get("SHOW_USERS")), AccountType.USER, self
            ),
        )

    def get_user(self, username: str) -> Optional[Account]:
        return self.get_users().get(username)

    def get_ips(self) -> List[str]:
        self._require(AccountType.RESELLER, "Listing IPs")
        return self._cache.get(
            CacheCategory.IPS, lambda: as_list(self.invoke_api_get("SHOW_RESELLER_IPS"))
        )

    def get_packages(self) -> List[str]:
        self._require(AccountType.RESELLER, "Listing packages")
        return self._cache.get(
            CacheCategory.PACKAGES, lambda: as_list(self.invoke_api_get("PACKAGES_USER"))
        )

    def create_user_package(self, package_name: str, options: Optional[Mapping[str, Any]] = None):
        """Create or update a user package; unspecified limits default to unlimited."""
        self._require(AccountType.RESELLER, "Managing packages")
        params = dict(_PACKAGE_DEFAULTS)
        params["packagename"] = package_name
        params.update(options or {})
        result = self.invoke_api_post("MANAGE_USER_PACKAGES", params)
        self.clear_cache()
        return result

    # ------------------------------------------------------------------
    # Admin listings
    # ------------------------------------------------------------------

    def get_resellers(self) -> Dict[str, Account]:
        self._require(AccountType.ADMIN, "Listing resellers")
        return self._cache.get(
            CacheCategory.RESELLERS,
            lambda: to_account_dict(
                as_list(self.invoke_api_get("SHOW_RESELLERS")), AccountType.RESELLER, self
            ),
        )

    def get_reseller(self, username: str) -> Optional[Account]:
        return self.get_resellers().get(username)

    def get_admins(self) -> Dict[str, Account]:
        self._require(AccountType.ADMIN, "Listing admins")
        return self._cache.get(
            CacheCategory.ADMINS,
            lambda: to_account_dict(
                as_list(self.invoke_api_get("SHOW_ADMINS")), AccountType.ADMIN, self
            ),
        )

    def get_admin(self, username: str) -> Optional[Account]:
        return self.get_admins().get(username)

    def get_all_users(self) -> Dict[str, Account]:
        self._require(AccountType.ADMIN, "Listing all users")
        return self._cache.get(
            CacheCategory.ALL_USERS,
            lambda: to_account_dict(
                as_list(self.invoke_api_get("SHOW_ALL_USERS")), AccountType.USER, self
            ),
        )

    def get_all_accounts(self) -> Dict[str, Account]:
        accounts: Dict[str, Account] = {}
        accounts.update(self.get_all_users())
        accounts.update(self.get_resellers())
        accounts.update(self.get_admins())
        return dict(sorted(accounts.items()))


def _select(usernames: Iterable[str]) -> Dict[str, str]:
    selection = encode_selection(usernames)
    if not selection:
        raise ValueError("At least one account must be selected")
    return selection


def _package_options(package: Union[str, Mapping[str, Any], None]) -> Dict[str, Any]:
    if package is None:
        return {}
    if isinstance(package, Mapping):
        return dict(package)
    return {"package": package}
