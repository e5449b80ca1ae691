"""Errors raised by the chain finder and reported by the command line."""


class ChainError(Exception):
    """Base class for failures the command line reports and exits on."""


class MalformedWord(ChainError):
    def __init__(self, word, reason):
        self.word = word
        self.reason = reason
        super().__init__(f"malformed word {word!r}: {reason}")


class WordNotFound(ChainError):
    def __init__(self, word):
        self.word = word
        super().__init__(f"starting word {word!r} is not in the dictionary")


class ResourceExhausted(ChainError):
    pass
