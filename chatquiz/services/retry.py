"""
Retry signal for question generation

RetryGeneration means the random draw did not produce a usable sample and
generation should be attempted again with fresh randomness. It is not part of
the QuestionGenerationError hierarchy.
"""


class RetryGeneration(Exception):
    """The current attempt produced no usable sample"""
    pass


class NoMatchingMessage(RetryGeneration):
    """No anchor message matched the filter in the drawn direction"""
    pass


class InsufficientMessages(RetryGeneration):
    """Fewer messages than requested exist on the window side of the anchor"""
    pass
