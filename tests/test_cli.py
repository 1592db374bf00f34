"""Tests for the framer-pricing command line."""

import json

import pytest

from framer_pricing import cli
from framer_pricing.integrations.prodigi.client import CatalogRateLimitError


class _Context:
    """Async context manager yielding a prepared fake."""

    def __init__(self, target):
        self.target = target

    async def __aenter__(self):
        return self.target

    async def __aexit__(self, *exc_info):
        return None


@pytest.fixture
def cart_file(tmp_path):
    path = tmp_path / "cart.json"
    path.write_text(json.dumps({"items": [
        {"id": "a", "productId": "p1", "sku": "global-can-8x20-x", "quantity": 1, "price": 45},
    ]}))
    return str(path)


@pytest.fixture
def patched_clients(monkeypatch, fake_catalog, fake_currency):
    monkeypatch.setattr(cli, "validate_prodigi_config", lambda: None)
    monkeypatch.setattr(cli, "CatalogClient", lambda: _Context(fake_catalog))
    monkeypatch.setattr(cli, "CurrencyService", lambda: _Context(fake_currency))
    return fake_catalog


def test_load_cart_accepts_list_or_object(tmp_path):
    as_list = tmp_path / "list.json"
    as_list.write_text(json.dumps([{"sku": "global-fap-12x16", "quantity": 2, "price": 20}]))
    as_object = tmp_path / "object.json"
    as_object.write_text(json.dumps({"items": [{"sku": "global-fap-12x16", "frameConfig": {"size": "12x16"}}]}))

    items = cli.load_cart(str(as_list))
    assert items[0].quantity == 2
    assert items[0].id == "item-0"

    items = cli.load_cart(str(as_object))
    assert items[0].frame_config.size == "12x16"


def test_parser_requires_country():
    with pytest.raises(SystemExit):
        cli.build_parser().parse_args(["quote", "cart.json"])


def test_parser_rejects_unknown_method():
    with pytest.raises(SystemExit):
        cli.build_parser().parse_args(["quote", "cart.json", "--country", "US", "--method", "Teleport"])


def test_quote_prints_json(patched_clients, make_quote, cart_file, capsys):
    patched_clients.quote = make_quote([("global-can-8x20-x", {}, 45.0)])

    exit_code = cli.main(["quote", cart_file, "--country", "US"])

    output = json.loads(capsys.readouterr().out)
    assert exit_code == 0
    assert output["total"] == 58.6
    assert output["isEstimated"] is False


def test_quote_failure_prints_friendly_error(patched_clients, cart_file, capsys):
    patched_clients.error = CatalogRateLimitError("quota exceeded")

    exit_code = cli.main(["quote", cart_file, "--country", "US"])

    output = json.loads(capsys.readouterr().out)
    assert exit_code == 1
    assert output["error"]["title"] == "Please wait a moment"
    assert output["error"]["retryable"] is True


def test_shipping_prints_summary(patched_clients, make_quote, cart_file, tmp_path, us_address, capsys):
    patched_clients.shipping_quotes = [make_quote([("global-can-8x20-x", {}, 45.0)], shipping=10.0)]
    address_file = tmp_path / "address.json"
    address_file.write_text(json.dumps(us_address.to_dict()))

    exit_code = cli.main(["shipping", cart_file, "--address", str(address_file)])

    output = json.loads(capsys.readouterr().out)
    assert exit_code == 0
    assert output["recommended"] == "Standard"
    assert output["options"][0]["cost"]["shipping"] == 10.0


def test_config_command(monkeypatch, capsys):
    monkeypatch.setattr(cli, "validate_prodigi_config", lambda: None)

    assert cli.main(["config"]) == 0
    assert "Art Framer Pricing Configuration" in capsys.readouterr().out
