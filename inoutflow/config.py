"""Chain catalogue, API key resolution and address checks."""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Dict, Mapping, Optional, Tuple

from .errors import ConfigError

DEFAULT_PAGE_SIZE = 1000
DEFAULT_RESULTS_CAP = 10_000
DEFAULT_TIMEOUT = 30
GLOBAL_API_KEY_ENV = "INOUTFLOW_API_KEY"

_ADDRESS_RE = re.compile(r"^(0x)?[0-9a-f]{40}$")


class ChainType(str, Enum):
    BSC = "bsc"
    ETHEREUM = "ethereum"
    POLYGON = "polygon"


@dataclass(frozen=True)
class ChainInfo:
    base_url: str
    api_key_env: str
    native_token: str


CHAINS: Dict[ChainType, ChainInfo] = {
    ChainType.BSC: ChainInfo(
        base_url="https://api.bscscan.com/api",
        api_key_env="INOUTFLOW_BSCSCAN_APIKEY",
        native_token="BNB",
    ),
    ChainType.ETHEREUM: ChainInfo(
        base_url="https://api.etherscan.io/api",
        api_key_env="INOUTFLOW_ETHERSCAN_APIKEY",
        native_token="ETH",
    ),
    ChainType.POLYGON: ChainInfo(
        base_url="https://api.polygonscan.com/api",
        api_key_env="INOUTFLOW_POLYGONSCAN_APIKEY",
        native_token="MATIC",
    ),
}


@dataclass(frozen=True)
class ScanConfig:
    api_key: str
    chain: ChainType = ChainType.BSC
    base_url: str = CHAINS[ChainType.BSC].base_url
    page_size: int = DEFAULT_PAGE_SIZE
    results_cap: Optional[int] = DEFAULT_RESULTS_CAP
    timeout: int = DEFAULT_TIMEOUT

    def __post_init__(self) -> None:
        if self.page_size < 1:
            raise ConfigError(f"Page size must be positive, got {self.page_size}")
        if self.results_cap is not None and self.results_cap < self.page_size:
            raise ConfigError(
                f"Results cap ({self.results_cap}) must be at least the page size ({self.page_size})"
            )

    @property
    def native_token(self) -> str:
        return CHAINS[self.chain].native_token


def parse_chain(value: str) -> ChainType:
    try:
        return ChainType(value.strip().lower())
    except ValueError as exc:
        choices = ", ".join(chain.value for chain in ChainType)
        raise ConfigError(f"Unknown chain {value!r} (expected one of: {choices})") from exc


def is_address_simplified(address: str) -> bool:
    """Check the shape of an address, without checksum validation."""

    return bool(_ADDRESS_RE.match(address.lower()))


def normalize_address(address: str) -> str:
    cleaned = address.strip()
    if not is_address_simplified(cleaned):
        raise ConfigError(f"Malformed address: {address!r}")
    cleaned = cleaned.lower()
    if not cleaned.startswith("0x"):
        cleaned = "0x" + cleaned
    return cleaned


def _parse_dotenv_line(line: str) -> Optional[Tuple[str, str]]:
    text = line.strip()
    if text.startswith("export "):
        text = text[len("export "):]
    name, sep, raw = text.partition("=")
    name = name.strip()
    if not sep or not name or name.startswith("#"):
        return None
    raw = raw.strip()
    if len(raw) >= 2 and raw[0] == raw[-1] and raw[0] in "\"'":
        raw = raw[1:-1]
    return name, raw


def load_dotenv(path: str = ".env") -> None:
    """Export ``KEY=value`` pairs from ``path``; variables already set win."""

    env_file = Path(path)
    if not env_file.is_file():
        return
    for line in env_file.read_text(encoding="utf-8").splitlines():
        entry = _parse_dotenv_line(line)
        if entry is not None:
            os.environ.setdefault(*entry)


def select_api_key(chain: ChainType, environ: Optional[Mapping[str, str]] = None) -> str:
    """Return the API key for ``chain``.

    The per-chain variable wins over the global ``INOUTFLOW_API_KEY``.
    """

    env = os.environ if environ is None else environ
    chain_var = CHAINS[chain].api_key_env
    for name in (chain_var, GLOBAL_API_KEY_ENV):
        value = env.get(name, "").strip()
        if not value:
            continue
        try:
            value.encode("utf-8")
        except UnicodeEncodeError as exc:
            raise ConfigError(f"Environment variable '{name}' is not valid UTF-8") from exc
        return value
    raise ConfigError(
        f"Missing API key: define environment variable '{chain_var}' "
        f"(or '{GLOBAL_API_KEY_ENV}') with your {chain.value} explorer API key"
    )


def load_config(
    chain: ChainType,
    page_size: int = DEFAULT_PAGE_SIZE,
    results_cap: Optional[int] = DEFAULT_RESULTS_CAP,
    timeout: int = DEFAULT_TIMEOUT,
    environ: Optional[Mapping[str, str]] = None,
    dotenv_path: Optional[str] = ".env",
) -> ScanConfig:
    if environ is None and dotenv_path:
        load_dotenv(dotenv_path)
    env = os.environ if environ is None else environ
    base_url = env.get(f"INOUTFLOW_{chain.name}_URL") or CHAINS[chain].base_url
    return ScanConfig(
        api_key=select_api_key(chain, env),
        chain=chain,
        base_url=base_url,
        page_size=page_size,
        results_cap=results_cap,
        timeout=timeout,
    )
