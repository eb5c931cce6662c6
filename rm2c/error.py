from dataclasses import dataclass

from .instruction import Instruction


@dataclass
class TranspileFailure(Exception):
    message: str

    def __str__(self) -> str:
        return self.message


class UnsupportedJump(TranspileFailure):
    def __init__(self, instruction: Instruction, index: int) -> None:
        super().__init__(
            f"Unsupported jump operation at l{index}: {instruction}, "
            "maybe add -allJumps to switch to all jumps mode?"
        )
        self.instruction = instruction
        self.index = index
