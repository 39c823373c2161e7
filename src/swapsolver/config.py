"""Application configuration using pydantic-settings.

Settings are read once at startup and frozen afterwards; components receive
the instance explicitly instead of reading globals.
"""

from decimal import Decimal
from functools import lru_cache
from typing import Optional

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from swapsolver.chains import Chain, parse_chain


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    # ======================
    # Environment
    # ======================
    environment: str = Field(default="development", description="Runtime environment")
    debug: bool = Field(default=True, description="Enable debug mode")
    log_level: str = Field(default="INFO", description="Root log level")

    # ======================
    # API
    # ======================
    api_host: str = Field(default="0.0.0.0", description="API server host")
    api_port: int = Field(default=3001, description="API server port")

    # ======================
    # Solver service (quotes, pools)
    # ======================
    solver_url: str = Field(
        default="http://localhost:8080/",
        description="GraphQL endpoint of the solver application",
    )

    # ======================
    # Wallet
    # ======================
    seed_phrase: Optional[SecretStr] = Field(
        default=None, description="BIP-39 seed phrase for deriving chain keys"
    )

    # ======================
    # Chain RPC Endpoints
    # ======================
    ethereum_rpc: str = Field(default="http://localhost:8545", description="Ethereum RPC URL")
    solana_rpc: str = Field(default="http://localhost:8899", description="Solana RPC URL")
    ethereum_chain_id: int = Field(default=1337, description="EIP-155 chain id used for signing")
    rpc_timeout: float = Field(default=30.0, description="Default RPC timeout in seconds")

    # ======================
    # Transaction lookup
    # ======================
    lookup_max_attempts: int = Field(default=10, ge=1, description="Lookup attempts before giving up")
    lookup_delay: float = Field(default=5.0, ge=0, description="Delay before the first retry (s)")
    lookup_backoff: float = Field(
        default=1.0, ge=1.0, description="Delay multiplier per attempt (1.0 = fixed delay)"
    )
    lookup_max_delay: float = Field(default=30.0, ge=0, description="Upper bound for one delay (s)")
    lookup_jitter: float = Field(
        default=0.0, ge=0, le=1, description="Random +/- fraction applied to each delay"
    )
    lookup_deadline: Optional[float] = Field(
        default=None, description="Wall-clock bound for one lookup (s)"
    )

    # ======================
    # Concurrency
    # ======================
    lock_timeout: float = Field(
        default=30.0, description="Max wait for the per-address signing lock (s)"
    )

    # ======================
    # Pools / pricing
    # ======================
    pool_addresses: dict[str, str] = Field(
        default_factory=dict,
        description="Static chain -> pool address map; empty = ask the solver service",
    )
    quote_rates: dict[str, Decimal] = Field(
        default_factory=dict,
        description="Static 'FROM:TO' -> rate map; empty = ask the solver service",
    )

    # ======================
    # Faucet
    # ======================
    faucet_eth_amount: Decimal = Field(default=Decimal("1"), description="Default ETH faucet amount")
    faucet_sol_amount: Decimal = Field(default=Decimal("2"), description="Default SOL airdrop amount")

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment.lower() == "production"

    @property
    def has_wallet(self) -> bool:
        """Check if a seed phrase is configured."""
        if self.seed_phrase is None:
            return False
        return len(self.seed_phrase.get_secret_value().split()) >= 12

    def get_rpc_url(self, chain) -> str:
        """Get RPC URL for a specific chain."""
        rpc_map = {
            Chain.ETHEREUM: self.ethereum_rpc,
            Chain.SOLANA: self.solana_rpc,
        }
        return rpc_map[parse_chain(chain)]

    def get_safe_dict(self) -> dict:
        """Return settings dict with secrets redacted."""
        return {
            "environment": self.environment,
            "debug": self.debug,
            "api_host": self.api_host,
            "api_port": self.api_port,
            "solver_url": self.solver_url,
            "wallet_configured": self.has_wallet,
            "chains": {
                "ethereum": {"rpc": self.ethereum_rpc, "chain_id": self.ethereum_chain_id},
                "solana": {"rpc": self.solana_rpc},
            },
            "lookup": {
                "max_attempts": self.lookup_max_attempts,
                "delay": self.lookup_delay,
                "backoff": self.lookup_backoff,
                "deadline": self.lookup_deadline,
            },
            "pools": dict(self.pool_addresses) or "(solver)",
            "pricing": "static" if self.quote_rates else "(solver)",
        }


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
