"""
Schemas
File: proof.py

Purpose: Claimed account and storage records together with their proofs,
in the shape returned by the eth_getProof JSON-RPC method.

Hex strings are parsed on input: quantities ("0x1a") become ints, data
("0xdead...") becomes bytes. Field names accept both the JSON-RPC
camelCase form and the Python snake_case form.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from core.crypto.hashing import HASH_LENGTH, from_hex, to_hex


def _parse_quantity(value: Any) -> Any:
    if isinstance(value, str):
        if not value.startswith(("0x", "0X")):
            raise ValueError(f"quantity must be a 0x-prefixed hex string, got {value!r}")
        digits = value[2:]
        return int(digits, 16) if digits else 0
    return value


def _parse_data(value: Any, allow_odd: bool = False) -> Any:
    if isinstance(value, str):
        return from_hex(value, allow_odd=allow_odd)
    return value


class StorageProofResult(BaseModel):
    """
    Claimed storage slot value with its proof against the storage root.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    key: bytes = Field(..., description="Storage slot (not hashed)")
    value: int = Field(..., ge=0, description="Claimed slot value")
    proof: list[bytes] = Field(default_factory=list, description="Serialized nodes, root first")

    @field_validator("key", mode="before")
    @classmethod
    def _key_from_hex(cls, value: Any) -> Any:
        return _parse_data(value, allow_odd=True)

    @field_validator("value", mode="before")
    @classmethod
    def _value_from_hex(cls, value: Any) -> Any:
        return _parse_quantity(value)

    @field_validator("proof", mode="before")
    @classmethod
    def _proof_from_hex(cls, value: Any) -> Any:
        if isinstance(value, list):
            return [_parse_data(entry) for entry in value]
        return value

    def to_json_dict(self) -> dict[str, Any]:
        """JSON-RPC representation."""
        return {
            "key": to_hex(self.key),
            "value": hex(self.value),
            "proof": [to_hex(entry) for entry in self.proof],
        }


class AccountProofResult(BaseModel):
    """
    Claimed account with its proof against the state root, plus any
    storage proofs against the claimed storage hash.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    address: bytes = Field(..., description="20-byte account address")
    nonce: int = Field(default=0, ge=0)
    balance: int = Field(default=0, ge=0)
    storage_hash: bytes = Field(..., alias="storageHash")
    code_hash: bytes = Field(..., alias="codeHash")
    account_proof: list[bytes] = Field(default_factory=list, alias="accountProof")
    storage_proof: list[StorageProofResult] = Field(default_factory=list, alias="storageProof")

    @field_validator("address", "storage_hash", "code_hash", mode="before")
    @classmethod
    def _data_from_hex(cls, value: Any) -> Any:
        return _parse_data(value)

    @field_validator("nonce", "balance", mode="before")
    @classmethod
    def _quantity_from_hex(cls, value: Any) -> Any:
        return _parse_quantity(value)

    @field_validator("storage_hash", "code_hash")
    @classmethod
    def _hash_length(cls, value: bytes) -> bytes:
        if len(value) != HASH_LENGTH:
            raise ValueError(f"hash must be {HASH_LENGTH} bytes, got {len(value)}")
        return value

    @field_validator("account_proof", mode="before")
    @classmethod
    def _proof_from_hex(cls, value: Any) -> Any:
        if isinstance(value, list):
            return [_parse_data(entry) for entry in value]
        return value

    def to_json_dict(self) -> dict[str, Any]:
        """JSON-RPC representation."""
        return {
            "address": to_hex(self.address),
            "nonce": hex(self.nonce),
            "balance": hex(self.balance),
            "storageHash": to_hex(self.storage_hash),
            "codeHash": to_hex(self.code_hash),
            "accountProof": [to_hex(entry) for entry in self.account_proof],
            "storageProof": [slot.to_json_dict() for slot in self.storage_proof],
        }


__all__ = [
    "StorageProofResult",
    "AccountProofResult",
]
