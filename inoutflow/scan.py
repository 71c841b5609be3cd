"""Explorer account API queries: paginated transaction lists and balance."""

from __future__ import annotations

import logging
import urllib.parse
from contextlib import contextmanager
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional

import requests

from .config import ScanConfig
from .errors import ApiError, ConfigError, DecodeError, TransportError, UrlError
from .models import (
    NO_TRANSACTIONS_FOUND,
    InternalTransaction,
    NormalTransaction,
    ResponseEnvelope,
    ResultFailure,
    decode_balance,
    decode_transactions,
)

_LOGGER = logging.getLogger("inoutflow.scan")

START_BLOCK = 0
END_BLOCK = 99999999


class TransactionKind(str, Enum):
    NORMAL = "txlist"
    INTERNAL = "txlistinternal"


_RECORD_TYPES = {
    TransactionKind.NORMAL: NormalTransaction,
    TransactionKind.INTERNAL: InternalTransaction,
}


@contextmanager
def _session_scope(session: Optional[requests.Session]) -> Iterator[requests.Session]:
    if session is not None:
        yield session
        return
    owned = requests.Session()
    try:
        yield owned
    finally:
        owned.close()


def _require_api_key(config: ScanConfig) -> None:
    if not config.api_key:
        raise ConfigError("Missing API key in scan configuration")


def _build_url(base_url: str, params: Dict[str, Any]) -> str:
    parts = urllib.parse.urlsplit(base_url)
    if parts.scheme not in ("http", "https") or not parts.netloc:
        raise UrlError(f"Invalid API base URL: {base_url!r}")
    return f"{base_url}?{urllib.parse.urlencode(params)}"


def _get_json(session: requests.Session, url: str, timeout: int) -> Any:
    try:
        response = session.get(url, headers={"accept": "application/json"}, timeout=timeout)
    except requests.RequestException as exc:
        raise TransportError(f"Error sending HTTP request: {exc}") from exc
    if response.status_code != 200:
        raise ApiError(
            f"Error API response, with HTTP {response.status_code} returned",
            status_code=response.status_code,
        )
    try:
        return response.json()
    except ValueError as exc:
        raise DecodeError(f"Response body is not valid JSON: {exc}") from exc


def _api_failure(envelope: ResponseEnvelope[Any]) -> ApiError:
    detail = ""
    if isinstance(envelope.result, ResultFailure) and envelope.result.message:
        detail = f" ({envelope.result.message})"
    return ApiError(f"message:{envelope.message}{detail}")


def _transaction_params(config: ScanConfig, kind: TransactionKind, address: str, page: int) -> Dict[str, Any]:
    return {
        "module": "account",
        "action": kind.value,
        "address": address,
        "startblock": START_BLOCK,
        "endblock": END_BLOCK,
        "page": page,
        "offset": config.page_size,
        "sort": "asc",
        "apikey": config.api_key,
    }


def get_list_transactions(
    config: ScanConfig,
    address: str,
    kind: TransactionKind,
    session: Optional[requests.Session] = None,
) -> List[Any]:
    """Fetch every transaction of ``kind`` for ``address``, page by page.

    Pages are requested in order starting at 1. A page shorter than
    ``config.page_size`` (or empty) ends the listing, as does the
    "No transactions found" message. Pagination also stops once the next
    page would reach past ``config.results_cap``; that truncation is logged
    as a warning. Any other API failure raises ApiError.
    """

    _require_api_key(config)
    record_type = _RECORD_TYPES[kind]
    page_size = config.page_size
    records: List[Any] = []
    page = 1

    with _session_scope(session) as active:
        while True:
            if config.results_cap is not None and page * page_size > config.results_cap:
                _LOGGER.warning(
                    "results truncated at %d %s records for %s (explorer cap %d)",
                    len(records),
                    kind.name.lower(),
                    address,
                    config.results_cap,
                )
                break

            url = _build_url(config.base_url, _transaction_params(config, kind, address, page))
            envelope = decode_transactions(_get_json(active, url, config.timeout), record_type)

            if not envelope.ok:
                if envelope.message == NO_TRANSACTIONS_FOUND:
                    _LOGGER.debug("no %s transactions for %s", kind.name.lower(), address)
                    break
                raise _api_failure(envelope)
            if isinstance(envelope.result, ResultFailure):
                raise ApiError(f"un-expected error for success case ({envelope.result.message})")

            batch = envelope.result.value
            _LOGGER.debug("page=%d kind=%s records=%d", page, kind.name.lower(), len(batch))
            if not batch:
                break
            records.extend(batch)
            if len(batch) < page_size:
                break
            page += 1

    return records


def get_list_normal_transactions(
    config: ScanConfig,
    address: str,
    session: Optional[requests.Session] = None,
) -> List[NormalTransaction]:
    return get_list_transactions(config, address, TransactionKind.NORMAL, session=session)


def get_list_internal_transactions(
    config: ScanConfig,
    address: str,
    session: Optional[requests.Session] = None,
) -> List[InternalTransaction]:
    return get_list_transactions(config, address, TransactionKind.INTERNAL, session=session)


def get_balance(
    config: ScanConfig,
    address: str,
    session: Optional[requests.Session] = None,
) -> int:
    """Return the current native-token balance of ``address`` in wei."""

    _require_api_key(config)
    params = {
        "module": "account",
        "action": "balance",
        "address": address,
        "tag": "latest",
        "apikey": config.api_key,
    }
    url = _build_url(config.base_url, params)
    with _session_scope(session) as active:
        envelope = decode_balance(_get_json(active, url, config.timeout))
    if not envelope.ok:
        raise _api_failure(envelope)
    if isinstance(envelope.result, ResultFailure):
        raise ApiError(f"un-expected error for success case ({envelope.result.message})")
    return envelope.result.value
