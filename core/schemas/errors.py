"""
Schemas
File: errors.py

Purpose: Standard error taxonomy for trie proof construction and verification.
Defines both Pydantic models for structured error communication
and Python exceptions for control flow.

Three classes of failure exist:
- Malformed proof input (encoding, arity, ordering, consumption)
- Semantic mismatch between a verified value and a claimed record
- Defects in live trie state met while building a proof
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# Error Codes (Machine-Readable Constants)
# =============================================================================

class ErrorCodes:
    """Stable machine-readable error codes."""

    # Schema & Validation Errors
    SCHEMA_VALIDATION_ERROR = "SCHEMA_VALIDATION_ERROR"

    # Node Codec Errors
    MALFORMED_ENCODING = "MALFORMED_ENCODING"
    INVALID_NODE_ARITY = "INVALID_NODE_ARITY"
    OVERSIZED_EMBEDDED_NODE = "OVERSIZED_EMBEDDED_NODE"

    # Proof Traversal Errors
    MISSING_PROOF_NODE = "MISSING_PROOF_NODE"
    PROOF_ELEMENTS_OUT_OF_ORDER = "PROOF_ELEMENTS_OUT_OF_ORDER"
    UNUSED_PROOF_ELEMENTS = "UNUSED_PROOF_ELEMENTS"
    TRAILING_KEY_AT_VALUE_NODE = "TRAILING_KEY_AT_VALUE_NODE"
    BRANCH_NODE_HAS_NO_VALUE = "BRANCH_NODE_HAS_NO_VALUE"
    KEY_SHORTER_THAN_NODE_PATH = "KEY_SHORTER_THAN_NODE_PATH"
    MALFORMED_EMPTY_PROOF = "MALFORMED_EMPTY_PROOF"
    PROOF_TOO_LARGE = "PROOF_TOO_LARGE"
    INVALID_ROOT_HASH = "INVALID_ROOT_HASH"

    # Record Mismatch Errors
    ACCOUNT_VALUE_MISMATCH = "ACCOUNT_VALUE_MISMATCH"
    STORAGE_VALUE_MISMATCH = "STORAGE_VALUE_MISMATCH"
    ABSENT_ACCOUNT_HAS_NONZERO_FIELDS = "ABSENT_ACCOUNT_HAS_NONZERO_FIELDS"
    ABSENT_SLOT_NONZERO_VALUE = "ABSENT_SLOT_NONZERO_VALUE"
    EMPTY_ROOT_NONZERO_VALUE = "EMPTY_ROOT_NONZERO_VALUE"

    # Live Trie Defects
    UNEXPECTED_HASH_REFERENCE = "UNEXPECTED_HASH_REFERENCE"
    INVALID_NODE = "INVALID_NODE"


# =============================================================================
# Pydantic Error Models (Structured Communication)
# =============================================================================

class TrieProofError(BaseModel):
    """
    Base error model for structured error communication.

    Used when a failure has to be reported as data (CLI JSON output,
    verification reports) instead of being raised.
    """

    model_config = ConfigDict(
        extra="forbid",
        frozen=False,
        validate_assignment=True,
    )

    code: str = Field(
        ...,
        description="Stable machine-readable error code",
        examples=[ErrorCodes.MALFORMED_ENCODING],
    )
    message: str = Field(
        ...,
        description="Human-readable error message",
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional structured details about the error",
    )
    retryable: bool = Field(
        default=False,
        description="Whether the operation can be retried",
    )

    def to_exception(self) -> "TrieProofException":
        """Convert this error model to a raised exception."""
        return TrieProofException(
            code=self.code,
            message=self.message,
            details=self.details,
            retryable=self.retryable,
        )


# =============================================================================
# Python Exceptions (Control Flow)
# =============================================================================

class TrieProofException(Exception):
    """
    Base exception for all trie proof errors.

    Carries structured error information and can be converted
    to/from TrieProofError models.
    """

    def __init__(
        self,
        message: str,
        code: str = "TRIE_PROOF_ERROR",
        details: dict[str, Any] | None = None,
        retryable: bool = False,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}
        self.retryable = retryable

    def to_error_model(self) -> TrieProofError:
        """Convert this exception to a TrieProofError model."""
        return TrieProofError(
            code=self.code,
            message=self.message,
            details=self.details,
            retryable=self.retryable,
        )

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"


class MalformedProofException(TrieProofException):
    """A proof or one of its nodes is malformed or inconsistent."""


class ProofMismatchException(TrieProofException):
    """A verified value disagrees with the claimed record."""


class TrieDefectException(TrieProofException):
    """Live trie state is internally inconsistent."""


class SchemaValidationException(TrieProofException):
    """Exception raised when input data fails schema validation."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code=ErrorCodes.SCHEMA_VALIDATION_ERROR,
            details=details,
        )


# -----------------------------------------------------------------------------
# Malformed input
# -----------------------------------------------------------------------------

class MalformedEncodingException(MalformedProofException):
    """Serialized node is not a canonical encoding of a trie node."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code=ErrorCodes.MALFORMED_ENCODING,
            details=details,
        )


class InvalidNodeArityException(MalformedProofException):
    """Serialized node list has neither 2 nor 17 items."""

    def __init__(self, item_count: int) -> None:
        super().__init__(
            message=f"invalid number of list elements: {item_count}",
            code=ErrorCodes.INVALID_NODE_ARITY,
            details={"item_count": item_count},
        )


class OversizedEmbeddedNodeException(MalformedProofException):
    """An inlined child is large enough that it must be referenced by hash."""

    def __init__(self, size: int) -> None:
        super().__init__(
            message=f"embedded nodes must be less than hash size, got {size} bytes",
            code=ErrorCodes.OVERSIZED_EMBEDDED_NODE,
            details={"size": size},
        )


class MissingProofNodeException(MalformedProofException):
    """Traversal needs a node the proof does not contain."""

    def __init__(self, node_hash: bytes) -> None:
        super().__init__(
            message=f"missing hash 0x{node_hash.hex()}",
            code=ErrorCodes.MISSING_PROOF_NODE,
            details={"hash": "0x" + node_hash.hex()},
        )


class ProofElementsOutOfOrderException(MalformedProofException):
    """A proof element was supplied at a different position than needed."""

    def __init__(self, expected_index: int, actual_index: int) -> None:
        super().__init__(
            message=(
                f"proof elements present but not in expected order, "
                f"expected {actual_index} at index {expected_index}"
            ),
            code=ErrorCodes.PROOF_ELEMENTS_OUT_OF_ORDER,
            details={"expected_index": expected_index, "actual_index": actual_index},
        )


class UnusedProofElementsException(MalformedProofException):
    """The proof contains elements the traversal never consumed."""

    def __init__(self, indices: list[int]) -> None:
        super().__init__(
            message=f"not all proof elements were used, unused indices {indices}",
            code=ErrorCodes.UNUSED_PROOF_ELEMENTS,
            details={"indices": indices},
        )


class TrailingKeyAtValueNodeException(MalformedProofException):
    """A value was reached before the key was fully consumed."""

    def __init__(self, remaining: tuple[int, ...]) -> None:
        super().__init__(
            message=f"value node should have zero length remaining in key, got {len(remaining)} nibbles",
            code=ErrorCodes.TRAILING_KEY_AT_VALUE_NODE,
            details={"remaining": list(remaining)},
        )


class BranchNodeHasNoValueException(MalformedProofException):
    """The key ran out on a branch node."""

    def __init__(self) -> None:
        super().__init__(
            message="full nodes should not have values",
            code=ErrorCodes.BRANCH_NODE_HAS_NO_VALUE,
        )


class KeyShorterThanNodePathException(MalformedProofException):
    """A short node's path is longer than what is left of the key."""

    def __init__(self, path_length: int, key_length: int) -> None:
        super().__init__(
            message=f"len(path)={path_length} must be leq len(key)={key_length}",
            code=ErrorCodes.KEY_SHORTER_THAN_NODE_PATH,
            details={"path_length": path_length, "key_length": key_length},
        )


class MalformedEmptyProofException(MalformedProofException):
    """A proof against an empty root holds something other than empty nodes."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code=ErrorCodes.MALFORMED_EMPTY_PROOF,
            details=details,
        )


class ProofTooLargeException(MalformedProofException):
    """The proof has more elements than the verifier accepts."""

    def __init__(self, count: int, limit: int) -> None:
        super().__init__(
            message=f"proof has {count} elements, limit is {limit}",
            code=ErrorCodes.PROOF_TOO_LARGE,
            details={"count": count, "limit": limit},
        )


class InvalidRootHashException(MalformedProofException):
    """The committed root is not a 32-byte digest."""

    def __init__(self, root_hash: bytes) -> None:
        super().__init__(
            message=f"root hash must be 32 bytes, got {len(root_hash)}",
            code=ErrorCodes.INVALID_ROOT_HASH,
            details={"root": "0x" + root_hash.hex()},
        )


# -----------------------------------------------------------------------------
# Semantic mismatch
# -----------------------------------------------------------------------------

class AccountValueMismatchException(ProofMismatchException):
    """Account bytes from the proof differ from the claimed account."""

    def __init__(self, actual: bytes, expected: bytes) -> None:
        super().__init__(
            message=(
                f"account bytes from proof ({actual.hex()}) "
                f"do not match expected ({expected.hex()})"
            ),
            code=ErrorCodes.ACCOUNT_VALUE_MISMATCH,
            details={"actual": "0x" + actual.hex(), "expected": "0x" + expected.hex()},
        )


class StorageValueMismatchException(ProofMismatchException):
    """Storage bytes from the proof differ from the claimed value."""

    def __init__(self, actual: bytes, expected: bytes) -> None:
        super().__init__(
            message=(
                f"storage value from proof ({actual.hex()}) "
                f"does not match expected ({expected.hex()})"
            ),
            code=ErrorCodes.STORAGE_VALUE_MISMATCH,
            details={"actual": "0x" + actual.hex(), "expected": "0x" + expected.hex()},
        )


class AbsentAccountHasNonzeroFieldsException(ProofMismatchException):
    """An account proven absent is claimed with non-empty fields."""

    def __init__(self, field_name: str) -> None:
        super().__init__(
            message=f"account is not in state, but has non-empty {field_name}",
            code=ErrorCodes.ABSENT_ACCOUNT_HAS_NONZERO_FIELDS,
            details={"field": field_name},
        )


class AbsentSlotNonzeroValueException(ProofMismatchException):
    """A storage slot proven absent is claimed with a non-zero value."""

    def __init__(self, value: int) -> None:
        super().__init__(
            message="storage slot is not in trie, but has non-zero value",
            code=ErrorCodes.ABSENT_SLOT_NONZERO_VALUE,
            details={"value": hex(value)},
        )


class EmptyRootNonzeroValueException(ProofMismatchException):
    """A slot under an empty storage root is claimed with a non-zero value."""

    def __init__(self, value: int) -> None:
        super().__init__(
            message="empty storage root cannot have non-zero values",
            code=ErrorCodes.EMPTY_ROOT_NONZERO_VALUE,
            details={"value": hex(value)},
        )


# -----------------------------------------------------------------------------
# Live trie defects
# -----------------------------------------------------------------------------

class UnexpectedHashReferenceException(TrieDefectException):
    """An unresolved hash reference was met while walking the live trie."""

    def __init__(self, remaining: tuple[int, ...], skip_levels: int = 0) -> None:
        super().__init__(
            message=(
                f"encountered hash node unexpectedly, "
                f"remaining key {bytes(remaining).hex()}, skip levels {skip_levels}"
            ),
            code=ErrorCodes.UNEXPECTED_HASH_REFERENCE,
            details={"remaining": list(remaining), "skip_levels": skip_levels},
        )


class InvalidNodeException(TrieDefectException):
    """A node of an unexpected variant was met at a traversal site."""

    def __init__(self, node: object) -> None:
        super().__init__(
            message=f"{type(node).__name__}: invalid node: {node!r}",
            code=ErrorCodes.INVALID_NODE,
            details={"type": type(node).__name__},
        )
