import re
from typing import Any, Optional

from pydantic_core import core_schema

from reexporter.exceptions import FilterCompileError

# Regular expressions are written between two of these: /pattern/
REGEX_DELIMITER = "/"


class Filter:
    """
    Matches an identifier or file name either exactly or by regular expression.

    Text wrapped in slashes (e.g. ``/^New/``) is compiled as a regular
    expression and matched anywhere in the candidate; any other text must
    equal the candidate. The mode is fixed when the filter is built.
    """

    __slots__ = ("text", "regex")

    def __init__(self, text: str):
        self.text = text
        self.regex: Optional[re.Pattern] = None

        if (
            len(text) > 2
            and text.startswith(REGEX_DELIMITER)
            and text.endswith(REGEX_DELIMITER)
        ):
            try:
                self.regex = re.compile(text[1:-1])
            except re.error as e:
                raise FilterCompileError(text, str(e)) from e

    @property
    def is_regex(self) -> bool:
        return self.regex is not None

    def match(self, s: str) -> bool:
        """Check if the given string matches the filter."""
        if self.regex is None:
            return s == self.text
        return self.regex.search(s) is not None

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Filter):
            return self.text == other.text
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self.text)

    def __repr__(self) -> str:
        return f"Filter({self.text!r})"

    def __str__(self) -> str:
        return self.text

    @classmethod
    def _validate(cls, value: Any) -> "Filter":
        if isinstance(value, Filter):
            return value
        if isinstance(value, str):
            return cls(value)
        raise ValueError(f"filter must be a string, got {type(value).__name__}")

    @classmethod
    def __get_pydantic_core_schema__(cls, source_type: Any, handler: Any) -> core_schema.CoreSchema:
        return core_schema.no_info_plain_validator_function(
            cls._validate,
            serialization=core_schema.to_string_ser_schema(),
        )
