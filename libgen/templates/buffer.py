"""Ordered output buffer shared by the compiler and the fragment renderers."""

from __future__ import annotations


class CodeBuffer:
    """Accumulates rendered text blocks in emission order.

    Blocks are joined with exactly one blank line and the final text always
    ends with a single newline.  Empty blocks are ignored.
    """

    def __init__(self) -> None:
        self._blocks: list[str] = []

    def add(self, block: str) -> None:
        """Append *block*, stripped of surrounding blank lines."""
        text = block.strip("\n")
        if text.strip():
            self._blocks.append(text)

    def extend(self, blocks: list[str]) -> None:
        for block in blocks:
            self.add(block)

    @property
    def blocks(self) -> list[str]:
        return list(self._blocks)

    def __len__(self) -> int:
        return len(self._blocks)

    def render(self) -> str:
        if not self._blocks:
            return ""
        return "\n\n".join(self._blocks) + "\n"
