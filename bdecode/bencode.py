from .errors import (
    DecodeError,
    InvalidKeyType,
    MalformedInteger,
    MalformedLength,
    NestingTooDeep,
    TrailingData,
    TruncatedInput,
    UnrecognizedGrammar,
)

Value = int | bytes | list["Value"] | dict[bytes, "Value"]

# Open containers allowed before decoding gives up. Each level costs two
# Python frames, so this stays well clear of the default recursion limit.
MAX_DEPTH = 256
# Deepest limit a caller may ask for before the interpreter's own
# recursion limit would be hit first.
MAX_SAFE_DEPTH = 350

INT_MIN = -(2**63)
INT_MAX = 2**63 - 1
INT_DIGITS = len(str(INT_MAX))

DIGITS = b"0123456789"


class Decoder:
    """Cursor over a bencoded buffer.

    Each read_* method consumes one value starting at `current` and leaves
    the cursor just past it. Grammars are tried in a fixed order by
    `decode_one`: integer, byte string, list, dictionary.
    """

    def __init__(self, source: bytes, max_depth: int = MAX_DEPTH):
        if not isinstance(source, (bytes, bytearray, memoryview)):
            raise TypeError(
                f"Expected a bytes-like object, got {type(source).__name__}"
            )
        if not 0 <= max_depth <= MAX_SAFE_DEPTH:
            raise ValueError(
                f"max_depth must be between 0 and {MAX_SAFE_DEPTH}, got {max_depth}"
            )
        self.source = bytes(source)
        self.current = 0
        self.depth = 0
        self.max_depth = max_depth

    def decode(self) -> Value:
        return self.decode_one()

    def decode_one(self) -> Value:
        c = self.peek()
        match c:
            case b"i":
                return self.read_integer()

            case _ if c.isdigit() or c == b"-":
                return self.read_string()

            case b"l":
                return self.read_list()

            case b"d":
                return self.read_dict()

            case b"":
                raise TruncatedInput("Expected a value, got end of input", self.current)

            case _:
                raise UnrecognizedGrammar(
                    f"No bencode type starts with {c!r}", self.current
                )

    def read_string(self) -> bytes:
        start = self.current
        if self.peek() == b"-":
            raise MalformedLength("Byte string length cannot be negative", start)

        digits = self.read_digits()
        if not digits:
            if self.is_at_end():
                raise TruncatedInput("Expected a byte string length", start)
            raise MalformedLength(
                f"Expected a byte string length, got {self.peek()!r}", start
            )

        self.expect(b":", MalformedLength)

        # A length wider than the buffer size can never be satisfied.
        significant = digits.lstrip(b"0") or b"0"
        if len(significant) > len(str(len(self.source))):
            raise TruncatedInput(
                f"Byte string length has {len(digits)} digits, "
                f"buffer is only {len(self.source)} bytes",
                self.current,
            )

        length = int(significant)
        end = self.current + length
        if end > len(self.source):
            raise TruncatedInput(
                f"Byte string declares {length} bytes, "
                f"only {len(self.source) - self.current} left",
                self.current,
            )

        string = self.source[self.current : end]
        self.current = end
        return string

    def read_integer(self) -> int:
        start = self.current
        self.expect(b"i", MalformedInteger)

        negative = self.peek() == b"-"
        if negative:
            self.advance()

        digits = self.read_digits()
        if not digits:
            if self.is_at_end():
                raise TruncatedInput("Unterminated integer", self.current)
            raise MalformedInteger(
                f"Expected a digit, got {self.peek()!r}", self.current
            )

        # Leading zeros and -0 are accepted as is.
        self.expect(b"e", MalformedInteger)

        significant = digits.lstrip(b"0") or b"0"
        if len(significant) > INT_DIGITS:
            raise MalformedInteger(
                f"Integer with {len(digits)} digits does not fit in 64 bits", start
            )

        n = -int(significant) if negative else int(significant)
        if not INT_MIN <= n <= INT_MAX:
            raise MalformedInteger(f"Integer {n} does not fit in 64 bits", start)

        return n

    def read_list(self) -> list:
        start = self.current
        self.expect(b"l", UnrecognizedGrammar)
        self.enter(start)

        lst = []
        try:
            while self.peek() != b"e":
                if self.is_at_end():
                    raise TruncatedInput(
                        f"Unterminated list opened at offset {start}", self.current
                    )
                lst.append(self.decode_one())
        finally:
            self.depth -= 1

        self.advance()

        return lst

    def read_dict(self, spans: dict | None = None) -> dict:
        """Read a dictionary.

        When `spans` is given, it receives `key -> (start, end)` offsets of
        each value as it appeared in the input.
        """
        start = self.current
        self.expect(b"d", UnrecognizedGrammar)
        self.enter(start)

        pairs = {}
        try:
            while self.peek() != b"e":
                if self.is_at_end():
                    raise TruncatedInput(
                        f"Unterminated dictionary opened at offset {start}",
                        self.current,
                    )

                c = self.peek()
                if not (c.isdigit() or c == b"-"):
                    raise InvalidKeyType(
                        f"Dictionary key must be a byte string, got {c!r}",
                        self.current,
                    )

                k = self.read_string()
                value_start = self.current
                # A repeated key replaces the earlier value.
                pairs[k] = self.decode_one()
                if spans is not None:
                    spans[k] = (value_start, self.current)
        finally:
            self.depth -= 1

        self.advance()

        return dict(sorted(pairs.items()))

    def read_digits(self) -> bytes:
        start = self.current
        while not self.is_at_end() and self.source[self.current] in DIGITS:
            self.current += 1
        return self.source[start : self.current]

    def enter(self, start: int):
        if self.depth >= self.max_depth:
            raise NestingTooDeep(
                f"More than {self.max_depth} nested lists or dictionaries", start
            )
        self.depth += 1

    def peek(self) -> bytes:
        return self.source[self.current : self.current + 1]

    def advance(self) -> bytes:
        c = self.source[self.current]
        self.current += 1
        return c.to_bytes()

    def expect(self, char: bytes, error: type[DecodeError] = DecodeError) -> bytes:
        if self.is_at_end():
            raise TruncatedInput(f"Expected {char}, got end of input", self.current)

        if self.peek() != char:
            raise error(f"Expected {char}, got {self.peek()} instead", self.current)

        return self.advance()

    def is_at_end(self) -> bool:
        return self.current >= len(self.source)

    @property
    def remaining(self) -> bytes:
        return self.source[self.current :]


def decode(data: bytes, max_depth: int = MAX_DEPTH) -> tuple[Value, bytes]:
    """Decode one value from the front of `data`.

    Returns the value and whatever bytes follow it. Trailing bytes are not an
    error here; use `decode_all` when the whole buffer must be one value.
    `max_depth` may not exceed MAX_SAFE_DEPTH.
    """
    decoder = Decoder(data, max_depth)
    value = decoder.decode()
    return value, decoder.remaining


def decode_all(data: bytes, max_depth: int = MAX_DEPTH) -> Value:
    decoder = Decoder(data, max_depth)
    value = decoder.decode()

    if not decoder.is_at_end():
        raise TrailingData(
            f"{len(decoder.remaining)} unexpected bytes after value", decoder.current
        )

    return value
