import pytest

from conftest import RecordingConnection, make_context
from directadmin.context import Context
from directadmin.exceptions import PrivilegeError
from directadmin.objects import Account, AccountType


def test_suspend_accounts_sends_one_batched_request(reseller):
    context, connection = reseller

    context.suspend_accounts(["alice", "bob"])

    assert connection.calls == [
        ("POST", "reseller", "SELECT_USERS", {"select0": "alice", "select1": "bob", "suspend": "Suspend"}),
    ]


def test_suspend_three_accounts_indexes_from_zero(reseller):
    context, connection = reseller

    context.suspend_accounts(["a", "b", "c"])

    (call,) = connection.calls
    assert call[3] == {"select0": "a", "select1": "b", "select2": "c", "suspend": "Suspend"}


def test_unsuspend_account(reseller):
    context, connection = reseller

    context.unsuspend_account("alice")

    assert connection.calls[0][3] == {"select0": "alice", "suspend": "Unsuspend"}


def test_delete_accounts_payload(admin):
    context, connection = admin

    context.delete_accounts(["alice", "bob"])

    assert connection.calls == [
        (
            "POST",
            "admin",
            "SELECT_USERS",
            {"confirmed": "Confirm", "delete": "yes", "select0": "alice", "select1": "bob"},
        ),
    ]


def test_empty_selection_is_rejected_locally(reseller):
    context, connection = reseller

    with pytest.raises(ValueError):
        context.delete_accounts([])

    assert connection.calls == []


def test_user_context_cannot_manage_accounts(user):
    context, connection = user

    with pytest.raises(PrivilegeError):
        context.suspend_accounts(["alice"])
    with pytest.raises(PrivilegeError):
        context.delete_account("alice")
    with pytest.raises(PrivilegeError):
        context.get_users()
    with pytest.raises(PrivilegeError):
        context.create_user("new", "pw", "new@example.com", "new.example.com", "1.2.3.4")

    assert connection.calls == []


def test_reseller_cannot_use_admin_operations(reseller):
    context, connection = reseller

    with pytest.raises(PrivilegeError):
        context.get_resellers()
    with pytest.raises(PrivilegeError):
        context.create_reseller("r2", "pw", "r2@example.com", "r2.example.com")
    with pytest.raises(PrivilegeError):
        context.create_admin("a2", "pw", "a2@example.com")

    assert connection.calls == []


def test_create_user_returns_uncached_account(reseller):
    context, connection = reseller

    account = context.create_user(
        "carol", "secret", "carol@example.com", "carol.example.com", "1.2.3.4", "basic"
    )

    assert isinstance(account, Account)
    assert account.type is AccountType.USER
    assert account.name == "carol"
    assert account.context is context
    assert connection.calls == [
        (
            "POST",
            "reseller",
            "ACCOUNT_USER",
            {
                "ip": "1.2.3.4",
                "domain": "carol.example.com",
                "package": "basic",
                "action": "create",
                "add": "Submit",
                "email": "carol@example.com",
                "passwd": "secret",
                "passwd2": "secret",
                "username": "carol",
            },
        ),
    ]
    assert not account._cache.contains(account.config_category)


def test_create_user_with_custom_options(reseller):
    context, connection = reseller

    context.create_user("dave", "pw", "d@example.com", "d.example.com", "shared", {"bandwidth": 100})

    params = connection.calls[0][3]
    assert params["bandwidth"] == 100
    assert "package" not in params


def test_create_reseller_and_admin(admin):
    context, connection = admin

    reseller = context.create_reseller("res", "pw", "r@example.com", "r.example.com", "gold")
    new_admin = context.create_admin("root2", "pw", "a@example.com")

    assert reseller.type is AccountType.RESELLER
    assert new_admin.type is AccountType.ADMIN
    assert [call[2] for call in connection.calls] == ["ACCOUNT_RESELLER", "ACCOUNT_ADMIN"]
    assert connection.calls[0][3]["ip"] == "shared"


def test_admin_impersonates_reseller_and_user(admin):
    context, connection = admin

    as_reseller = context.impersonate_reseller("res")
    as_user = context.impersonate_user("bob")

    assert as_reseller.privilege is AccountType.RESELLER
    assert as_reseller.username == "res"
    assert as_user.privilege is AccountType.USER
    assert as_user.username == "bob"
    assert connection.calls == []


def test_reseller_impersonates_only_users(reseller):
    context, connection = reseller

    assert context.impersonate_user("bob").privilege is AccountType.USER

    with pytest.raises(PrivilegeError):
        context.impersonate("other", AccountType.RESELLER)
    with pytest.raises(PrivilegeError):
        context.impersonate("root", AccountType.ADMIN)

    assert connection.calls == []


def test_user_cannot_impersonate(user):
    context, connection = user

    with pytest.raises(PrivilegeError):
        context.impersonate_user("alice")

    assert connection.calls == []


def test_validated_impersonation_checks_ownership():
    context, connection = make_context(
        "reseller", AccountType.RESELLER, {"SHOW_USERS": ["bob", "carol"]}
    )

    assert context.impersonate_user("bob", validate=True).username == "bob"
    with pytest.raises(PrivilegeError):
        context.impersonate_user("mallory", validate=True)
    assert len(connection.calls_to("SHOW_USERS")) == 1


def test_admin_validated_impersonation_uses_all_users():
    context, connection = make_context("admin", AccountType.ADMIN, {"SHOW_ALL_USERS": ["bob"]})

    context.impersonate_user("bob", validate=True)

    assert connection.calls_to("SHOW_ALL_USERS")


def test_listings_are_cached_until_mutation():
    context, connection = make_context("reseller", AccountType.RESELLER, {"SHOW_USERS": ["bob"]})

    assert list(context.get_users()) == ["bob"]
    assert context.get_user("bob").type is AccountType.USER
    assert context.get_user("nobody") is None
    assert len(connection.calls_to("SHOW_USERS")) == 1

    context.suspend_account("bob")
    context.get_users()

    assert len(connection.calls_to("SHOW_USERS")) == 2


def test_empty_listing_is_an_empty_dict():
    context, _ = make_context("reseller", AccountType.RESELLER, {"SHOW_USERS": {}})

    assert context.get_users() == {}


def test_admin_listings():
    context, _ = make_context(
        "admin",
        AccountType.ADMIN,
        {
            "SHOW_ALL_USERS": ["zed", "bob"],
            "SHOW_RESELLERS": ["res"],
            "SHOW_ADMINS": ["admin"],
        },
    )

    accounts = context.get_all_accounts()

    assert list(accounts) == ["admin", "bob", "res", "zed"]
    assert accounts["res"].type is AccountType.RESELLER
    assert accounts["admin"].type is AccountType.ADMIN
    assert context.get_reseller("res") is accounts["res"]
    assert context.get_admin("nobody") is None


def test_ips_and_packages():
    context, connection = make_context(
        "reseller",
        AccountType.RESELLER,
        {"SHOW_RESELLER_IPS": ["1.2.3.4"], "PACKAGES_USER": ["basic", "gold"]},
    )

    assert context.get_ips() == ["1.2.3.4"]
    assert context.get_packages() == ["basic", "gold"]
    context.get_packages()
    assert len(connection.calls_to("PACKAGES_USER")) == 1


def test_create_user_package_defaults_to_unlimited(reseller):
    context, connection = reseller

    context.create_user_package("basic", {"bandwidth": 1000})

    params = connection.calls[0][3]
    assert connection.calls[0][2] == "MANAGE_USER_PACKAGES"
    assert params["packagename"] == "basic"
    assert params["bandwidth"] == 1000
    assert params["quota"] == "unlimited"
    assert params["add"] == "Save"


def test_context_user_for_user_context():
    context, connection = make_context(
        "bob", AccountType.USER, {"SHOW_USER_CONFIG": {"usertype": "user", "bandwidth": "100"}}
    )

    account = context.get_context_user()

    assert account.name == "bob"
    assert account.type is AccountType.USER
    assert account.get_bandwidth_limit() == 100.0
    assert context.get_context_user() is account
    assert len(connection.calls) == 1


def test_context_user_for_reseller_context():
    context, connection = make_context(
        "res", AccountType.RESELLER, {"RESELLER_STATS": {"bandwidth": "unlimited"}}
    )

    account = context.get_context_user()

    assert account.type is AccountType.RESELLER
    assert account.get_bandwidth_limit() is None
    assert connection.calls == [("GET", "res", "RESELLER_STATS", {"type": ""})]


def test_validation_rejects_mismatched_account_type():
    connection = RecordingConnection("bob", {"SHOW_USER_CONFIG": {"usertype": "reseller"}})

    with pytest.raises(PrivilegeError):
        Context(connection, AccountType.USER, validate=True)


def test_validation_accepts_matching_account_type():
    connection = RecordingConnection("bob", {"SHOW_USER_CONFIG": {"usertype": "user"}})

    context = Context(connection, AccountType.USER, validate=True)

    assert context.get_type() == "user"


@pytest.mark.parametrize(
    "privilege, usertype",
    [
        (AccountType.RESELLER, "admin"),
        (AccountType.RESELLER, "user"),
        (AccountType.ADMIN, "reseller"),
    ],
)
def test_validation_checks_server_usertype_for_privileged_contexts(privilege, usertype):
    connection = RecordingConnection(
        "root",
        {
            "RESELLER_STATS": {"bandwidth": "100", "quota": "50"},
            "SHOW_USER_CONFIG": {"usertype": usertype},
        },
    )

    with pytest.raises(PrivilegeError):
        Context(connection, privilege, validate=True)

    assert connection.calls_to("SHOW_USER_CONFIG")


@pytest.mark.parametrize("privilege", [AccountType.RESELLER, AccountType.ADMIN])
def test_validation_accepts_matching_privileged_context(privilege):
    connection = RecordingConnection(
        "root",
        {
            "RESELLER_STATS": {"bandwidth": "100", "quota": "50"},
            "SHOW_USER_CONFIG": {"usertype": privilege.value},
        },
    )

    context = Context(connection, privilege, validate=True)

    assert context.privilege is privilege
    assert len(connection.calls_to("SHOW_USER_CONFIG")) == 1
