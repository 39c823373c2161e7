"""Tests for settings and error types."""

import pytest
from pydantic import ValidationError

from swapsolver.chains import Chain, chain_for_token, parse_chain, token_for_chain
from swapsolver.config import Settings
from swapsolver.errors import LookupExhausted, RPCUnavailable, Stage, SubmissionRejected, UnsupportedChain

from conftest import TEST_MNEMONIC


class TestSettings:
    """Tests for the settings object."""

    def test_defaults(self, monkeypatch):
        for name in ("SOLVER_URL", "ETHEREUM_RPC", "SOLANA_RPC", "SEED_PHRASE"):
            monkeypatch.delenv(name, raising=False)
        settings = Settings(_env_file=None)

        assert settings.solver_url == "http://localhost:8080/"
        assert settings.ethereum_rpc == "http://localhost:8545"
        assert settings.solana_rpc == "http://localhost:8899"
        assert settings.ethereum_chain_id == 1337
        assert settings.lookup_max_attempts == 10
        assert settings.lookup_delay == 5.0
        assert not settings.has_wallet

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("SEED_PHRASE", TEST_MNEMONIC)
        monkeypatch.setenv("SOLANA_RPC", "http://validator:8899")
        monkeypatch.setenv("POOL_ADDRESSES", '{"ethereum": "0xpool"}')

        settings = Settings(_env_file=None)

        assert settings.has_wallet
        assert settings.get_rpc_url("solana") == "http://validator:8899"
        assert settings.pool_addresses == {"ethereum": "0xpool"}

    def test_frozen(self):
        settings = Settings(_env_file=None)
        with pytest.raises(ValidationError):
            settings.debug = False

    def test_safe_dict_hides_secret(self):
        settings = Settings(_env_file=None, seed_phrase=TEST_MNEMONIC)

        text = str(settings.get_safe_dict())
        assert "indoor" not in text
        assert "indoor" not in repr(settings)
        assert settings.get_safe_dict()["wallet_configured"] is True


class TestChains:
    """Tests for chain tags and token mapping."""

    def test_parse_chain(self):
        assert parse_chain(" Ethereum ") == Chain.ETHEREUM
        with pytest.raises(UnsupportedChain) as exc_info:
            parse_chain("bitcoin", Stage.LOOKUP)
        assert exc_info.value.stage == Stage.LOOKUP

    def test_token_mapping(self):
        assert chain_for_token("eth") == Chain.ETHEREUM
        assert chain_for_token("SOL") == Chain.SOLANA
        assert token_for_chain("solana") == "SOL"
        with pytest.raises(UnsupportedChain):
            chain_for_token("DOGE")


class TestErrors:
    """Tests for error tagging."""

    def test_str_includes_chain_and_stage(self):
        error = RPCUnavailable("timed out", chain="solana", stage=Stage.LOOKUP)
        assert str(error) == "[solana/lookup] timed out"
        assert error.retryable

    def test_to_dict(self):
        error = SubmissionRejected("rejected", chain="ethereum", node_message="nonce too low")
        data = error.to_dict()

        assert data == {
            "error": "SubmissionRejected",
            "message": "rejected",
            "chain": "ethereum",
            "stage": "submit",
            "retryable": False,
        }
        assert error.node_message == "nonce too low"

    def test_lookup_exhausted_attempts(self):
        error = LookupExhausted("gave up", chain="ethereum", attempts=10)
        assert error.attempts == 10
        assert error.stage == Stage.LOOKUP
