"""
Record Cross-Checks
Check claimed accounts and storage slots against state and storage proofs.

A proof only authenticates raw bytes. These checks re-encode the claimed
record exactly as the trie stores it and compare byte-for-byte with the
value the proof yields. When the proof shows the key is absent, the
claim must describe an empty record instead.

Empty commitments:
- Storage root: EMPTY_ROOT (keccak of rlp(b"")) or the zero digest
- Code hash: EMPTY_CODE_HASH (keccak of b"") or the zero digest
"""
from __future__ import annotations

import logging

import rlp

from core.crypto.hashing import (
    EMPTY_CODE_HASH,
    EMPTY_ROOT,
    ZERO_HASH,
    int_to_big_endian,
    keccak256,
    to_hash32,
    to_hex,
)
from core.schemas.errors import (
    AbsentAccountHasNonzeroFieldsException,
    AbsentSlotNonzeroValueException,
    AccountValueMismatchException,
    EmptyRootNonzeroValueException,
    MalformedEmptyProofException,
    StorageValueMismatchException,
    TrieProofException,
)
from core.schemas.proof import AccountProofResult, StorageProofResult
from core.schemas.verification import CheckResult, VerificationResult
from core.trie.proof import EMPTY_NODE_ENCODING, verify_proof


logger = logging.getLogger(__name__)


EMPTY_STORAGE_ROOTS: frozenset[bytes] = frozenset({EMPTY_ROOT, ZERO_HASH})
EMPTY_CODE_HASHES: frozenset[bytes] = frozenset({EMPTY_CODE_HASH, ZERO_HASH})


def account_key(address: bytes) -> bytes:
    """State trie key of an account."""
    return keccak256(address)


def storage_key(slot: bytes) -> bytes:
    """Storage trie key of a slot; the slot is fitted to 32 bytes first."""
    return keccak256(to_hash32(slot))


def encode_storage_value(value: int) -> bytes:
    """Storage trie value of a slot: RLP of its minimal big-endian bytes."""
    return rlp.encode(int_to_big_endian(value))


def encode_account_claim(result: AccountProofResult) -> bytes:
    """Account bytes the state trie holds for a claimed account."""
    return rlp.encode([
        result.nonce,
        int_to_big_endian(result.balance),
        result.storage_hash,
        result.code_hash,
    ])


# =============================================================================
# Account proofs
# =============================================================================

def verify_account_proof(
    state_root: bytes,
    result: AccountProofResult,
    max_nodes: int | None = None,
) -> None:
    """
    Verify a claimed account against the state root.

    Raises:
        MalformedProofException: The account proof is invalid
        ProofMismatchException: The proof contradicts the claimed account
    """
    verify_account_proof_by_hash(state_root, account_key(result.address), result, max_nodes)


def verify_account_proof_by_hash(
    state_root: bytes,
    key: bytes,
    result: AccountProofResult,
    max_nodes: int | None = None,
) -> None:
    """
    Verify a claimed account under an already-hashed account key.

    The address in result is not used; the caller vouches that key is
    the hash of the intended address.
    """
    value = verify_proof(state_root, key, result.account_proof, max_nodes=max_nodes)

    if value is None:
        # A missing value proves the account does not exist
        if result.nonce != 0:
            raise AbsentAccountHasNonzeroFieldsException("nonce")
        if result.balance != 0:
            raise AbsentAccountHasNonzeroFieldsException("balance")
        if result.storage_hash not in EMPTY_STORAGE_ROOTS:
            raise AbsentAccountHasNonzeroFieldsException("storage hash")
        if result.code_hash not in EMPTY_CODE_HASHES:
            raise AbsentAccountHasNonzeroFieldsException("code hash")
        return

    expected = encode_account_claim(result)
    if expected != value:
        raise AccountValueMismatchException(value, expected)


# =============================================================================
# Storage proofs
# =============================================================================

def verify_storage_proof(
    storage_root: bytes,
    result: StorageProofResult,
    max_nodes: int | None = None,
) -> None:
    """
    Verify a claimed storage slot against the account's storage root.

    Raises:
        MalformedProofException: The storage proof is invalid
        ProofMismatchException: The proof contradicts the claimed value
    """
    verify_storage_proof_by_hash(storage_root, storage_key(result.key), result, max_nodes)


def verify_storage_proof_by_hash(
    storage_root: bytes,
    key_hash: bytes,
    result: StorageProofResult,
    max_nodes: int | None = None,
) -> None:
    """
    Verify a claimed storage slot under an already-hashed slot key.

    The slot in result is not used; the caller vouches that key_hash is
    the hash of the intended slot.
    """
    if storage_root in EMPTY_STORAGE_ROOTS:
        _verify_empty_storage(storage_root, result)
        return

    value = verify_proof(storage_root, key_hash, result.proof, max_nodes=max_nodes)

    if value is None:
        if result.value != 0:
            raise AbsentSlotNonzeroValueException(result.value)
        return

    expected = encode_storage_value(result.value)
    if expected != value:
        raise StorageValueMismatchException(value, expected)


def _verify_empty_storage(storage_root: bytes, result: StorageProofResult) -> None:
    if result.value != 0:
        raise EmptyRootNonzeroValueException(result.value)

    # The empty trie is proven by RLP of the empty string; a zero root by nothing
    if storage_root == EMPTY_ROOT:
        for index, entry in enumerate(result.proof):
            if entry != EMPTY_NODE_ENCODING:
                raise MalformedEmptyProofException(
                    "empty storage root should have RLP encoding of empty proof",
                    details={"index": index},
                )
    else:
        for index, entry in enumerate(result.proof):
            if len(entry) != 0:
                raise MalformedEmptyProofException(
                    "zero storage root should have empty proof",
                    details={"index": index},
                )


# =============================================================================
# Full result checks
# =============================================================================

def check_proof_result(
    state_root: bytes,
    result: AccountProofResult,
    max_nodes: int | None = None,
) -> VerificationResult:
    """
    Check an account and all of its storage proofs, reporting instead of raising.

    Storage proofs are checked against the claimed storage hash, so they
    only mean something when the account check passes too.

    Returns:
        VerificationResult with one check per proof; error holds the
        first failure
    """
    report = VerificationResult.success()

    try:
        verify_account_proof(state_root, result, max_nodes=max_nodes)
    except TrieProofException as e:
        logger.warning("Account proof rejected for %s: %s", to_hex(result.address), e.message)
        report.add_check(CheckResult.failed(
            "account_proof",
            e.message,
            details={"code": e.code, **e.details},
        ))
        report.error = report.error or e.to_error_model()
    else:
        report.add_check(CheckResult.passed(
            "account_proof",
            f"Account {to_hex(result.address)} matches state root {to_hex(state_root)}",
        ))

    for index, slot in enumerate(result.storage_proof):
        check_id = f"storage_proof[{index}]"
        try:
            verify_storage_proof(result.storage_hash, slot, max_nodes=max_nodes)
        except TrieProofException as e:
            logger.warning("Storage proof rejected for slot %s: %s", to_hex(slot.key), e.message)
            report.add_check(CheckResult.failed(
                check_id,
                e.message,
                details={"code": e.code, "key": to_hex(slot.key), **e.details},
            ))
            report.error = report.error or e.to_error_model()
        else:
            report.add_check(CheckResult.passed(
                check_id,
                f"Slot {to_hex(slot.key)} = {hex(slot.value)}",
            ))

    return report


__all__ = [
    "EMPTY_STORAGE_ROOTS",
    "EMPTY_CODE_HASHES",
    "account_key",
    "storage_key",
    "encode_storage_value",
    "encode_account_claim",
    "verify_account_proof",
    "verify_account_proof_by_hash",
    "verify_storage_proof",
    "verify_storage_proof_by_hash",
    "check_proof_result",
]
