import enum
import math


class PrintableEnum(enum.Enum):
    def __str__(self) -> str:
        return self.name

    __repr__ = __str__


def format_number(value: float) -> str:
    if math.isnan(value):
        return "nan"
    return f"{value:.3f}"
