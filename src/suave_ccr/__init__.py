"""
SUAVE confidential compute requests.

Data model, RLP codec and multi-identity signer for transactions whose
confidential payload is committed by hash and delivered only to a kettle.
"""

from .codec import CRecordRLP, CRequestHashParams, CRequestRLP
from .config import SuaveConfig
from .errors import (
    InvalidSignatureError,
    MissingFieldError,
    SignedRecordError,
    StructuralDecodeError,
    SuaveError,
    UnknownSignerError,
    UnsupportedEnvelopeTypeError,
)
from .models import Signature
from .record import EMPTY_BYTES_HASH, ConfidentialComputeRecord
from .request import ConfidentialComputeRequest
from .response import ConfidentialCallResponse
from .signer import LocalAccountIdentity, SigningIdentity, SuaveSigner

__all__ = [
    "ConfidentialComputeRecord",
    "ConfidentialComputeRequest",
    "ConfidentialCallResponse",
    "CRecordRLP",
    "CRequestRLP",
    "CRequestHashParams",
    "EMPTY_BYTES_HASH",
    "Signature",
    "SuaveSigner",
    "SigningIdentity",
    "LocalAccountIdentity",
    "SuaveConfig",
    "SuaveError",
    "MissingFieldError",
    "UnsupportedEnvelopeTypeError",
    "StructuralDecodeError",
    "UnknownSignerError",
    "InvalidSignatureError",
    "SignedRecordError",
]
__version__ = "0.1.0"
