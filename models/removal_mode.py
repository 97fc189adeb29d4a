from enum import Enum


class RemovalMode(str, Enum):
    """
    Removal modes offered by the authoring UI.

    All of them are mask-driven: there is no automatic detection, so every
    mode needs painted coverage.
    """
    TEXT_REMOVAL = "TEXT_REMOVAL"
    OBJECT_REMOVAL = "OBJECT_REMOVAL"
    CUSTOM = "CUSTOM"

    @classmethod
    def parse(cls, value) -> "RemovalMode":
        if isinstance(value, cls):
            return value
        if value is None:
            return cls.OBJECT_REMOVAL
        try:
            return cls(str(value).upper())
        except ValueError:
            raise ValueError(f"Unknown removal mode '{value}'. "
                             f"Use one of: {', '.join(m.value for m in cls)}") from None
