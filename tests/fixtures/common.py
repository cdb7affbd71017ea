"""
Common test fixtures shared by all modules.

Provides factory functions for trie proof test data:
- Account addresses and storage slots
- Storage tries and a populated state trie
- eth_getProof style results built from live tries

Keys in the state and storage tries are keccak hashes, so every key in
them has the same length, as in Ethereum state.
"""

from dataclasses import dataclass, field
from typing import Iterable, Optional

from core.crypto.hashing import keccak256
from core.schemas.proof import AccountProofResult, StorageProofResult
from core.trie.nodes import Account
from core.trie.proof import prove
from core.trie.records import account_key, encode_storage_value, storage_key
from core.trie.trie import Trie


# =============================================================================
# Keys
# =============================================================================

def make_address(seed: int) -> bytes:
    """Deterministic 20-byte address."""
    return keccak256(f"account-{seed}".encode())[:20]


def make_slot(index: int) -> bytes:
    """32-byte storage slot for a slot index."""
    return index.to_bytes(32, "big")


# =============================================================================
# Tries
# =============================================================================

def make_storage_trie(slots: dict[int, int]) -> Trie:
    """
    Create a storage trie.

    Args:
        slots: Slot index -> non-zero value

    Returns:
        Trie keyed by hashed slot
    """
    trie = Trie()
    for index, value in slots.items():
        trie.put(storage_key(make_slot(index)), encode_storage_value(value))
    return trie


@dataclass
class StateFixture:
    """A state trie plus the records that were put into it."""
    trie: Trie
    accounts: dict[bytes, Account] = field(default_factory=dict)
    contract: bytes = b""
    storage: Optional[Trie] = None
    slots: dict[int, int] = field(default_factory=dict)

    @property
    def root(self) -> bytes:
        return self.trie.root_hash()


def make_state(
    account_count: int = 20,
    slots: Optional[dict[int, int]] = None,
) -> StateFixture:
    """
    Create a state trie of plain accounts and one contract with storage.

    Args:
        account_count: Number of plain accounts
        slots: Contract storage (default: a handful of small and large values)

    Returns:
        StateFixture whose `contract` address holds the storage trie
    """
    if slots is None:
        slots = {0: 1, 1: 0xDEADBEEF, 2: 2**255, 7: 42, 100: 12345678901234567890}

    state = StateFixture(trie=Trie(), slots=dict(slots))

    for seed in range(account_count):
        address = make_address(seed)
        account = Account(nonce=seed, balance=10**18 * (seed + 1))
        state.trie.put_account(account_key(address), account)
        state.accounts[address] = account

    contract = make_address(10_000)
    storage = make_storage_trie(slots)
    stored = state.trie.put_account(
        account_key(contract),
        Account(nonce=1, balance=0, code_hash=keccak256(b"\x60\x00\x60\x00")),
        storage=storage,
    )
    state.accounts[contract] = stored
    state.contract = contract
    state.storage = storage
    return state


# =============================================================================
# Proof results
# =============================================================================

def make_proof_result(
    state: StateFixture,
    address: bytes,
    slots: Iterable[int] = (),
) -> AccountProofResult:
    """
    Build an eth_getProof style result from live tries.

    Accounts missing from the state are claimed as empty accounts; slots
    missing from storage are claimed as zero.
    """
    account = state.accounts.get(address, Account())

    storage_proofs = []
    for index in slots:
        slot = make_slot(index)
        proof = prove(state.storage, storage_key(slot)) if state.storage is not None else []
        storage_proofs.append(StorageProofResult(
            key=slot,
            value=state.slots.get(index, 0) if address == state.contract else 0,
            proof=proof,
        ))

    return AccountProofResult(
        address=address,
        nonce=account.nonce,
        balance=account.balance,
        storage_hash=account.storage_root,
        code_hash=account.code_hash,
        account_proof=prove(state.trie, account_key(address)),
        storage_proof=storage_proofs,
    )
