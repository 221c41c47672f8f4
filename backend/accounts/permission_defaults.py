# accounts/permission_defaults.py

ROLE_DEFAULTS = {
    "OWNER": {
        "accounts.view",
        "journal.view",
        "journal.create",
        "journal.post",
        "journal.export",
        "payments.create",
        "payments.approve",
        "receiving.create",
    },
    "ADMIN": {
        "accounts.view",
        "journal.view",
        "journal.create",
        "journal.post",
        "journal.export",
        "payments.create",
        "payments.approve",
        "receiving.create",
    },
    "USER": {
        "accounts.view",
        "journal.view",
        "journal.create",
        "payments.create",
        "receiving.create",
    },
    "VIEWER": {
        "accounts.view",
        "journal.view",
    },
}


def all_permission_codes() -> set[str]:
    codes: set[str] = set()
    for s in ROLE_DEFAULTS.values():
        codes |= set(s)
    return codes
