"""Typed records and response envelopes for explorer account API payloads."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Annotated, Any, Generic, List, Optional, Tuple, TypeVar, Union

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, TypeAdapter, ValidationError, field_validator

from .amount import parse_uint256
from .errors import DecodeError

T = TypeVar("T")

STATUS_OK = "1"
NO_TRANSACTIONS_FOUND = "No transactions found"


def _to_int(value: object) -> object:
    if isinstance(value, str):
        text = value.strip()
        if not text.isdigit():
            raise ValueError(f"Expected a decimal string, got {value!r}")
        return int(text)
    return value


def _to_flag(value: object) -> object:
    if isinstance(value, str):
        return value.strip() == "1"
    return value


def _empty_to_none(value: object) -> object:
    if isinstance(value, str) and not value.strip():
        return None
    return value


Uint256 = Annotated[int, BeforeValidator(parse_uint256)]


class _Record(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    block_number: int = Field(alias="blockNumber")
    timestamp: int = Field(alias="timeStamp")
    hash: str
    from_address: str = Field(alias="from")
    to_address: str = Field(alias="to")
    value: Uint256
    contract_address: str = Field(default="", alias="contractAddress")
    input: str = ""
    gas: int
    gas_used: int = Field(alias="gasUsed")
    is_error: bool = Field(default=False, alias="isError")

    @field_validator("block_number", "timestamp", "gas", "gas_used", mode="before")
    @classmethod
    def _decode_int(cls, value: object) -> object:
        return _to_int(value)

    @field_validator("is_error", mode="before")
    @classmethod
    def _decode_flag(cls, value: object) -> object:
        return _to_flag(value)


class NormalTransaction(_Record):
    """A top-level transaction as listed by ``action=txlist``."""

    nonce: int
    block_hash: str = Field(default="", alias="blockHash")
    transaction_index: int = Field(alias="transactionIndex")
    gas_price: int = Field(alias="gasPrice")
    receipt_status: Optional[bool] = Field(default=None, alias="txreceipt_status")
    cumulative_gas_used: int = Field(alias="cumulativeGasUsed")
    confirmations: int

    @field_validator("nonce", "transaction_index", "gas_price", "cumulative_gas_used", "confirmations", mode="before")
    @classmethod
    def _decode_counts(cls, value: object) -> object:
        return _to_int(value)

    @field_validator("receipt_status", mode="before")
    @classmethod
    def _decode_receipt(cls, value: object) -> object:
        return _to_flag(_empty_to_none(value))


class InternalTransaction(_Record):
    """A value transfer made by contract code, as listed by ``action=txlistinternal``."""

    call_type: Optional[str] = Field(default=None, alias="type")
    trace_id: Optional[str] = Field(default=None, alias="traceId")
    error_code: Optional[str] = Field(default=None, alias="errCode")

    @field_validator("call_type", "trace_id", "error_code", mode="before")
    @classmethod
    def _decode_optional(cls, value: object) -> object:
        return _empty_to_none(value)


class _RawEnvelope(BaseModel):
    status: str
    message: str
    result: Any = None


@dataclass(frozen=True)
class ResultSuccess(Generic[T]):
    value: T


@dataclass(frozen=True)
class ResultFailure:
    message: str


@dataclass(frozen=True)
class ResponseEnvelope(Generic[T]):
    status: str
    message: str
    result: Union[ResultSuccess[T], ResultFailure]

    @property
    def ok(self) -> bool:
        return self.status == STATUS_OK


_FAILURE_SHAPE = TypeAdapter(str)
_BALANCE_SHAPE = TypeAdapter(Uint256)
_LIST_SHAPES = {
    NormalTransaction: TypeAdapter(List[NormalTransaction]),
    InternalTransaction: TypeAdapter(List[InternalTransaction]),
}


def _decode_result(raw: Any, shape: TypeAdapter) -> Union[ResultSuccess[Any], ResultFailure]:
    try:
        return ResultSuccess(shape.validate_python(raw))
    except ValidationError as success_exc:
        try:
            return ResultFailure(_FAILURE_SHAPE.validate_python(raw, strict=True))
        except ValidationError:
            raise DecodeError(f"Unexpected result shape: {success_exc}") from success_exc


def _decode(payload: object, shape: TypeAdapter) -> ResponseEnvelope[Any]:
    try:
        raw = _RawEnvelope.model_validate(payload)
    except ValidationError as exc:
        raise DecodeError(f"Malformed response envelope: {exc}") from exc
    if raw.result is None and raw.status != STATUS_OK:
        # Error envelopes sometimes omit result; the message still carries the reason.
        result: Union[ResultSuccess[Any], ResultFailure] = ResultFailure("")
    else:
        result = _decode_result(raw.result, shape)
    return ResponseEnvelope(status=raw.status, message=raw.message, result=result)


def decode_transactions(payload: object, record_type: type) -> ResponseEnvelope[Tuple[Any, ...]]:
    """Decode a ``txlist``/``txlistinternal`` envelope.

    The result field is tried as a list of ``record_type`` first and as an
    error string second. Anything else raises DecodeError.
    """

    shape = _LIST_SHAPES.get(record_type)
    if shape is None:
        raise TypeError(f"Unsupported record type: {record_type!r}")
    envelope = _decode(payload, shape)
    if isinstance(envelope.result, ResultSuccess):
        return ResponseEnvelope(
            status=envelope.status,
            message=envelope.message,
            result=ResultSuccess(tuple(envelope.result.value)),
        )
    return envelope


def decode_balance(payload: object) -> ResponseEnvelope[int]:
    return _decode(payload, _BALANCE_SHAPE)
