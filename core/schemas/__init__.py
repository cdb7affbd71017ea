"""
Schemas
File: __init__.py

Purpose: Export the public API for the schemas module.
Error taxonomy, verification report models, and proof result models.
"""

# Error models and exceptions
from .errors import (
    AbsentAccountHasNonzeroFieldsException,
    AbsentSlotNonzeroValueException,
    AccountValueMismatchException,
    BranchNodeHasNoValueException,
    EmptyRootNonzeroValueException,
    ErrorCodes,
    InvalidNodeArityException,
    InvalidNodeException,
    InvalidRootHashException,
    KeyShorterThanNodePathException,
    MalformedEmptyProofException,
    MalformedEncodingException,
    MalformedProofException,
    MissingProofNodeException,
    OversizedEmbeddedNodeException,
    ProofElementsOutOfOrderException,
    ProofMismatchException,
    ProofTooLargeException,
    SchemaValidationException,
    StorageValueMismatchException,
    TrailingKeyAtValueNodeException,
    TrieDefectException,
    TrieProofError,
    TrieProofException,
    UnexpectedHashReferenceException,
    UnusedProofElementsException,
)

# Verification results
from .verification import (
    CheckResult,
    CheckSeverity,
    VerificationResult,
)

# Proof results
from .proof import (
    AccountProofResult,
    StorageProofResult,
)

__all__ = [
    # Errors
    "ErrorCodes",
    "TrieProofError",
    "TrieProofException",
    "MalformedProofException",
    "ProofMismatchException",
    "TrieDefectException",
    "SchemaValidationException",
    "MalformedEncodingException",
    "InvalidNodeArityException",
    "OversizedEmbeddedNodeException",
    "MissingProofNodeException",
    "ProofElementsOutOfOrderException",
    "UnusedProofElementsException",
    "TrailingKeyAtValueNodeException",
    "BranchNodeHasNoValueException",
    "KeyShorterThanNodePathException",
    "MalformedEmptyProofException",
    "ProofTooLargeException",
    "AccountValueMismatchException",
    "StorageValueMismatchException",
    "AbsentAccountHasNonzeroFieldsException",
    "AbsentSlotNonzeroValueException",
    "EmptyRootNonzeroValueException",
    "UnexpectedHashReferenceException",
    "InvalidNodeException",
    "InvalidRootHashException",
    # Verification
    "CheckResult",
    "CheckSeverity",
    "VerificationResult",
    # Proof results
    "AccountProofResult",
    "StorageProofResult",
]
