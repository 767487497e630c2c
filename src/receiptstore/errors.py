from __future__ import annotations


class ReceiptPipelineError(RuntimeError):
    pass


class NoTextError(ReceiptPipelineError):
    def __init__(self, page_count: int) -> None:
        suffix = "s" if page_count > 1 else ""
        super().__init__(f"Could not extract any text from the image{suffix}. Try clearer photos.")
        self.page_count = page_count


class TextRecognitionError(ReceiptPipelineError):
    pass


class ParsingFailedError(ReceiptPipelineError):
    pass
