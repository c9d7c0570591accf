from pathlib import Path

import pytest

from salon_ledger.categories import DEFAULT_CATEGORIES
from salon_ledger.config import (
    ALLOWED_EMAILS_ENV,
    is_email_allowed,
    load_app_config,
    load_categories,
    parse_allowed_emails,
)
from salon_ledger.engine import PaymentFilter
from salon_ledger.periods import Granularity


def write_config(tmp_path: Path, content: str) -> Path:
    path = tmp_path / "salon_ledger_config.toml"
    path.write_text(content, encoding="utf-8")
    return path


FULL_CONFIG = """
[database]
engine = "sqlite"
path = "data/ledger.sqlite"

[access]
allowed_emails = ["Owner@Example.com", " second@example.com "]

[owner]
email = "owner@example.com"

[display]
compact = true
default_granularity = "month"
default_payment_filter = "cash"
currency = "EUR"

[categories]
file = "categories.csv"

[logging]
level = "debug"
"""


def test_load_full_config(tmp_path):
    path = write_config(tmp_path, FULL_CONFIG)

    cfg = load_app_config(str(path), environ={})

    assert cfg.database.engine == "sqlite"
    assert cfg.database.path == (tmp_path / "data" / "ledger.sqlite").resolve()
    assert cfg.allowed_emails == ("owner@example.com", "second@example.com")
    assert cfg.owner_email == "owner@example.com"
    assert cfg.display.compact is True
    assert cfg.display.default_granularity is Granularity.MONTH
    assert cfg.display.default_payment_filter is PaymentFilter.CASH
    assert cfg.categories_file == (tmp_path / "categories.csv").resolve()
    assert cfg.log_level == "DEBUG"


def test_missing_sections_fall_back_to_defaults(tmp_path):
    path = write_config(tmp_path, "")

    cfg = load_app_config(str(path), environ={})

    assert cfg.database.path.name == "salon_ledger.sqlite"
    assert cfg.allowed_emails == ()
    assert cfg.owner_email is None
    assert cfg.display.default_granularity is Granularity.WEEK
    assert cfg.display.default_payment_filter is PaymentFilter.TOTAL
    assert cfg.display.compact is False
    assert cfg.categories_file is None
    assert load_categories(cfg) is DEFAULT_CATEGORIES


def test_environment_overrides_the_allow_list(tmp_path):
    path = write_config(tmp_path, FULL_CONFIG)

    cfg = load_app_config(
        str(path), environ={ALLOWED_EMAILS_ENV: "a@x.fr, B@x.fr ,"}
    )

    assert cfg.allowed_emails == ("a@x.fr", "b@x.fr")


def test_default_config_file_in_current_directory(tmp_path, monkeypatch):
    write_config(tmp_path, '[owner]\nemail = "me@x.fr"\n')
    monkeypatch.chdir(tmp_path)

    cfg = load_app_config(environ={})

    assert cfg.owner_email == "me@x.fr"


def test_missing_config_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_app_config(str(tmp_path / "nope.toml"))


def test_invalid_toml(tmp_path):
    path = write_config(tmp_path, "[database\npath = 1")

    with pytest.raises(ValueError, match="Failed to parse"):
        load_app_config(str(path))


@pytest.mark.parametrize(
    "content, fragment",
    [
        ('[display]\ndefault_granularity = "decade"\n', "default_granularity"),
        ('[display]\ndefault_payment_filter = "cheque"\n', "default_payment_filter"),
        ('[display]\ncurrency = "USD"\n', "currency"),
        ('[display]\ncompact = "yes"\n', "compact"),
        ("[access]\nallowed_emails = 3\n", "allowed_emails"),
        ('database = "sqlite"\n', "database"),
    ],
)
def test_invalid_values(tmp_path, content, fragment):
    path = write_config(tmp_path, content)

    with pytest.raises(ValueError, match=fragment):
        load_app_config(str(path), environ={})


def test_missing_category_file(tmp_path):
    path = write_config(tmp_path, '[categories]\nfile = "missing.csv"\n')
    cfg = load_app_config(str(path), environ={})

    with pytest.raises(FileNotFoundError):
        load_categories(cfg)


def test_is_email_allowed():
    allowed = ["owner@example.com"]

    assert is_email_allowed("owner@example.com", allowed) is True
    assert is_email_allowed(" OWNER@example.com ", allowed) is True
    assert is_email_allowed("intruder@example.com", allowed) is False
    assert is_email_allowed("", allowed) is False
    assert is_email_allowed(None, allowed) is False
    assert is_email_allowed("owner@example.com", []) is False


def test_parse_allowed_emails():
    assert parse_allowed_emails("") == ()
    assert parse_allowed_emails("a@x.fr,,b@x.fr") == ("a@x.fr", "b@x.fr")
