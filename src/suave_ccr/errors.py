"""
Error types for confidential compute request handling.

Every codec and signer failure is raised as a subclass of SuaveError so
callers can catch the whole family at a transport boundary.
"""


class SuaveError(Exception):
    """Base class for all confidential compute request errors."""


class MissingFieldError(SuaveError):
    """A field required by an encoding or digest is not set."""

    def __init__(self, field_name: str) -> None:
        self.field_name = field_name
        super().__init__(f"Missing {field_name} field")


class UnsupportedEnvelopeTypeError(SuaveError):
    """The typed envelope starts with a type byte we do not accept."""

    def __init__(self, type_byte: int, expected: int | None = None) -> None:
        self.type_byte = type_byte
        self.expected = expected
        message = f"Unsupported transaction type: 0x{type_byte:02x}"
        if expected is not None:
            message += f" (expected 0x{expected:02x})"
        super().__init__(message)


class StructuralDecodeError(SuaveError):
    """The RLP payload is malformed (short buffer, bad prefix, wrong shape)."""


class UnknownSignerError(SuaveError):
    """No signing identity is registered for the requested address."""

    def __init__(self, address: str) -> None:
        self.address = address
        super().__init__(f"Unknown signer: {address}")


class InvalidSignatureError(SuaveError):
    """v/r/s values cannot form a valid recoverable signature."""


class SignedRecordError(SuaveError):
    """A signed record was asked to change a field covered by its signature.

    Call ``clear_signature()`` first to make the downgrade explicit.
    """

    def __init__(self, field_name: str) -> None:
        self.field_name = field_name
        super().__init__(
            f"Cannot modify {field_name} on a signed record; clear the signature first"
        )
