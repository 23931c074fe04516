from dataclasses import dataclass

from homeferry.sizes import format_bytes


@dataclass
class Progress:
    """
    Running counters of one run. Only used to print percentages and the final summary.

    Attributes:
        total (int): Number of categories or archives expected.
        total_size (int): Bytes expected; zero when progress is counted by items.
        processed (int): Categories or archives completed so far.
        processed_size (int): Bytes completed so far.
    """
    total: int
    total_size: int = 0
    processed: int = 0
    processed_size: int = 0

    def advance(self, size: int = 0) -> "Progress":
        self.processed += 1
        self.processed_size += size
        return self

    @property
    def percent(self) -> int:
        if self.total_size > 0:
            return self.processed_size * 100 // self.total_size
        return 0

    def describe(self) -> str:
        return (f"{self.percent}% ({format_bytes(self.processed_size)}/"
                f"{format_bytes(self.total_size)})")

    def summary(self, noun: str) -> str:
        return f"Processed {self.processed} out of {self.total} {noun}"
