class DecodeError(ValueError):
    """Raised when a buffer is not valid bencode.

    `position` is the offset into the input at which decoding stopped.
    """

    kind = "DecodeError"

    def __init__(self, message: str, position: int):
        super().__init__(f"{message} (at offset {position})")
        self.message = message
        self.position = position


class MalformedLength(DecodeError):
    kind = "MalformedLength"


class TruncatedInput(DecodeError):
    kind = "TruncatedInput"


class MalformedInteger(DecodeError):
    kind = "MalformedInteger"


class InvalidKeyType(DecodeError):
    kind = "InvalidKeyType"


class UnrecognizedGrammar(DecodeError):
    kind = "UnrecognizedGrammar"


class NestingTooDeep(DecodeError):
    kind = "NestingTooDeep"


class TrailingData(DecodeError):
    kind = "TrailingData"


class TrackerError(Exception):
    pass
