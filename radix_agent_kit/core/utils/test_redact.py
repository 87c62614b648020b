from radix_agent_kit.core.utils.redact import REDACTED, is_sensitive_key, redact


def test_sensitive_keys():
    assert is_sensitive_key("private_key_hex")
    assert is_sensitive_key("Mnemonic")
    assert is_sensitive_key("seed-phrase")
    assert not is_sensitive_key("public_key")
    assert not is_sensitive_key("amount")


def test_redact_nested_values():
    params = {
        "to_account": "account_x",
        "wallet": {"private_key_hex": "00" * 32, "public_key_hex": "ab"},
        "items": [{"secret": "s"}, {"amount": "1"}],
    }

    assert redact(params) == {
        "to_account": "account_x",
        "wallet": {"private_key_hex": REDACTED, "public_key_hex": "ab"},
        "items": [{"secret": REDACTED}, {"amount": "1"}],
    }
    assert params["wallet"]["private_key_hex"] == "00" * 32
