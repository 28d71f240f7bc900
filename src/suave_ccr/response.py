"""
Confidential call responses.

A kettle answers a confidential compute request with a regular transaction
that carries the execution result and the record it executed.
"""

import logging
from dataclasses import dataclass
from typing import Any, Mapping

from hexbytes import HexBytes

from .errors import MissingFieldError
from .record import ConfidentialComputeRecord
from .utils.encoding import to_bytes_safe

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ConfidentialCallResponse:
    """The result of a confidential compute request as returned by a node.

    Attributes:
        transaction: The full response transaction as received
        confidential_compute_result: Raw bytes returned by the kettle
        request_record: The record the kettle executed, signature included
    """
    transaction: Mapping[str, Any]
    confidential_compute_result: HexBytes
    request_record: ConfidentialComputeRecord

    @classmethod
    def from_transaction(cls, tx: Mapping[str, Any]) -> "ConfidentialCallResponse":
        """
        Extract the confidential call fields from a response transaction.

        Args:
            tx: Transaction mapping in JSON-RPC form

        Returns:
            Parsed response

        Raises:
            MissingFieldError: If confidentialComputeResult or requestRecord is absent
            InvalidSignatureError: If the request record carries a bad signature
        """
        if (result := tx.get("confidentialComputeResult")) is None:
            raise MissingFieldError("confidentialComputeResult")
        if (record_data := tx.get("requestRecord")) is None:
            raise MissingFieldError("requestRecord")

        response = cls(
            transaction=tx,
            confidential_compute_result=to_bytes_safe(result),
            request_record=ConfidentialComputeRecord.from_json_dict(record_data),
        )
        logger.debug(
            f"Parsed confidential call response: {len(response.confidential_compute_result)} "
            f"result bytes for nonce {response.request_record.nonce}"
        )
        return response
