from typing import Any, Dict, List, Optional

from .connection import Connection
from .context import Context
from .objects import Account, AccountType

# Package metadata
__version__ = "1.0.0"
__author__ = "DirectAdmin Client Developers"
__description__ = "DirectAdmin API client for admin, reseller and user accounts"

# Defaults only; every call merges its own overrides through configure()
DEFAULT_CONFIG = {
    "host": "your-server.example.com",
    "port": 2222,
    "scheme": "https",
    "username": "admin",
    "password": "YOUR_PASSWORD_HERE",
    "account_type": "admin",
    "verify_ssl": True,
    "timeout": 30,
}


def configure(overrides: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Return ``DEFAULT_CONFIG`` merged with ``overrides``, after validation."""
    overrides = overrides or {}
    unknown = set(overrides) - set(DEFAULT_CONFIG)
    if unknown:
        raise ValueError(
            f"Unknown configuration keys: {', '.join(sorted(unknown))}. "
            f"Valid: {', '.join(sorted(DEFAULT_CONFIG))}"
        )
    config = dict(DEFAULT_CONFIG)
    config.update(overrides)
    AccountType(config["account_type"])
    return config


# ---------------------------------------------------------------------------
# Connecting
# ---------------------------------------------------------------------------

def _connect(
    account_type: AccountType,
    url: str,
    username: str,
    password: str,
    validate: bool = False,
    verify_ssl: bool = True,
    timeout: float = 30,
) -> Context:
    connection = Connection(url, username, password, verify_ssl=verify_ssl, timeout=timeout)
    return Context(connection, account_type, validate=validate)


def connect_admin(url: str, username: str, password: str, validate: bool = False, **kwargs) -> Context:
    """Connect to DirectAdmin as an admin."""
    return _connect(AccountType.ADMIN, url, username, password, validate, **kwargs)


def connect_reseller(url: str, username: str, password: str, validate: bool = False, **kwargs) -> Context:
    """Connect to DirectAdmin as a reseller."""
    return _connect(AccountType.RESELLER, url, username, password, validate, **kwargs)


def connect_user(url: str, username: str, password: str, validate: bool = False, **kwargs) -> Context:
    """Connect to DirectAdmin as an end user."""
    return _connect(AccountType.USER, url, username, password, validate, **kwargs)


def _root_context(config: Optional[Dict[str, Any]] = None) -> Context:
    settings = configure(config)
    url = f"{settings['scheme']}://{settings['host']}:{settings['port']}"
    return _connect(
        AccountType(settings["account_type"]),
        url,
        settings["username"],
        settings["password"],
        verify_ssl=settings["verify_ssl"],
        timeout=settings["timeout"],
    )


def _find_account(context: Context, account: str) -> Account:
    if context.privilege is AccountType.ADMIN:
        found = context.get_all_accounts().get(account)
    else:
        found = context.get_user(account)
    if found is None:
        raise ValueError(f"Account '{account}' not found")
    return found


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

def list_users(config: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """List the users managed by the configured account."""
    users = sorted(_root_context(config).get_users())
    return {"users": users, "total": len(users)}


def list_resellers(config: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """List all resellers on the server."""
    resellers = sorted(_root_context(config).get_resellers())
    return {"resellers": resellers, "total": len(resellers)}


def get_account(account: str, config: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Summarize limits and usage for one account."""
    user = _find_account(_root_context(config), account)
    return {
        "account": user.name,
        "type": user.get_type() or user.type.value,
        "suspended": user.is_suspended(),
        "default_domain": user.get_config("domain") or "",
        "bandwidth_used_mb": user.get_bandwidth_usage(),
        "bandwidth_limit_mb": user.get_bandwidth_limit(),
        "disk_used_mb": user.get_disk_usage(),
        "disk_limit_mb": user.get_disk_limit(),
        "domains_used": user.get_domain_usage(),
        "domain_limit": user.get_domain_limit(),
    }


def suspend_account(account: str, config: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Suspend an account."""
    _root_context(config).suspend_account(account)
    return {"account": account, "action": "suspended"}


def unsuspend_account(account: str, config: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Unsuspend an account."""
    _root_context(config).unsuspend_account(account)
    return {"account": account, "action": "unsuspended"}


def delete_account(account: str, config: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Delete an account."""
    _root_context(config).delete_account(account)
    return {"account": account, "action": "deleted"}


def list_domains(account: str, config: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """List the domains of an account."""
    user = _find_account(_root_context(config), account)
    domains: List[Dict[str, Any]] = []

    for domain in user.get_domains().values():
        domains.append({
            "domain": domain.name,
            "default": domain.is_default(),
            "suspended": domain.is_suspended(),
            "bandwidth_used_mb": domain.get_bandwidth_used(),
            "bandwidth_limit_mb": domain.get_bandwidth_limit(),
            "disk_used_mb": domain.get_disk_usage(),
            "ssl": domain.has_ssl(),
        })

    return {"account": account, "domains": domains, "total": len(domains)}


def list_databases(account: str, config: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """List the databases of an account."""
    user = _find_account(_root_context(config), account)
    databases = sorted(db.database_name for db in user.get_databases().values())
    return {"account": account, "databases": databases, "total": len(databases)}


def list_ips(config: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """List the IPs available to the configured account."""
    ips = _root_context(config).get_ips()
    return {"ips": ips, "total": len(ips)}


def list_packages(config: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """List the user packages of the configured account."""
    packages = _root_context(config).get_packages()
    return {"packages": packages, "total": len(packages)}


# ---------------------------------------------------------------------------
# Command router
# ---------------------------------------------------------------------------

def execute_command(
    command: str,
    args: Optional[Dict[str, Any]] = None,
    config: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """Route a command string to the appropriate function.

    ``config`` overrides ``DEFAULT_CONFIG`` for this call only.
    """
    command = command.lower().strip()
    cmd_map: Dict[str, Any] = {
        "list_users": list_users,
        "users": list_users,
        "list_resellers": list_resellers,
        "resellers": list_resellers,
        "get_account": get_account,
        "account": get_account,
        "suspend_account": suspend_account,
        "suspend": suspend_account,
        "unsuspend_account": unsuspend_account,
        "unsuspend": unsuspend_account,
        "delete_account": delete_account,
        "delete": delete_account,
        "list_domains": list_domains,
        "domains": list_domains,
        "list_databases": list_databases,
        "databases": list_databases,
        "list_ips": list_ips,
        "ips": list_ips,
        "list_packages": list_packages,
        "packages": list_packages,
    }

    func = cmd_map.get(command)
    if not func:
        raise ValueError(
            f"Unknown command '{command}'. "
            f"Valid: {', '.join(sorted(cmd_map.keys()))}"
        )

    # Functions requiring an 'account' argument
    if func in (
        get_account,
        suspend_account,
        unsuspend_account,
        delete_account,
        list_domains,
        list_databases,
    ):
        if (
            not args
            or "account" not in args
            or not isinstance(args["account"], str)
            or not args["account"].strip()
        ):
            raise ValueError(f"{command} requires a non-empty 'account' string")
        return func(args["account"].strip(), config=config)

    return func(config=config)


# ---------------------------------------------------------------------------
# Initialize helper
# ---------------------------------------------------------------------------

def initialize() -> Dict[str, Any]:
    return {
        "name": "DirectAdmin Client",
        "version": __version__,
        "author": __author__,
        "description": __description__,
        "commands": [
            "list_users / users → users of the configured account",
            "list_resellers / resellers → all resellers (admin only)",
            "get_account / account → needs {'account': 'username'}",
            "suspend_account / suspend → needs {'account': 'username'}",
            "unsuspend_account / unsuspend → needs {'account': 'username'}",
            "delete_account / delete → needs {'account': 'username'}",
            "list_domains / domains → needs {'account': 'username'}",
            "list_databases / databases → needs {'account': 'username'}",
            "list_ips / ips → IPs of the configured account",
            "list_packages / packages → user packages",
        ]
    }
