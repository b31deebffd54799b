from typing import Protocol

class ITextNormalizer(Protocol):
    def sanitize(self, text: str) -> str: ...

    def normalize(self, text: str) -> str: ...

    def is_valid_length(self, text: str) -> bool: ...
