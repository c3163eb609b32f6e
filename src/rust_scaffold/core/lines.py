import bisect


class LineIndex:
    """Start offset of every line of a text, built once per file."""

    def __init__(self, text: str) -> None:
        self._text = text
        self.starts = [0]
        pos = text.find("\n")
        while pos != -1:
            self.starts.append(pos + 1)
            pos = text.find("\n", pos + 1)

    def __len__(self) -> int:
        return len(self.starts)

    def line_of(self, offset: int) -> int:
        return bisect.bisect_right(self.starts, offset) - 1

    def line_start(self, line: int) -> int:
        return self.starts[line]

    def line_end(self, line: int) -> int:
        """Offset of the line's newline, or the end of the text for the last line."""
        if line + 1 < len(self.starts):
            return self.starts[line + 1] - 1
        return len(self._text)

    def line_text(self, line: int) -> str:
        return self._text[self.starts[line] : self.line_end(line)]
