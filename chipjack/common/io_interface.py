"""
This module contains the IOInterface abstract base class and its implementations.
"""

from abc import ABC, abstractmethod
from typing import List

import aiofiles


class InputAbortedError(Exception):
    """Raised when the user keeps giving unusable input."""


class IOInterface(ABC):
    """
    Abstract base class for an IO interface.

    This class defines the interface for input/output operations at the table.
    """

    max_attempts = 3

    @abstractmethod
    def output(self, message: str) -> None:
        """Output a message to the interface."""
        pass

    @abstractmethod
    def input(self, prompt: str) -> str:
        """Get input from the user with a prompt."""
        pass

    @abstractmethod
    def check_numeric_response(self, ctx: str) -> int:
        """Prompt until a number is given and return it."""
        pass

    async def output_async(self, message: str) -> None:
        """Output a message from async code."""
        self.output(message)

    def _prompt_for_number(self, ctx: str) -> int:
        for _ in range(self.max_attempts):
            response = self.input(ctx)
            try:
                return int(response)
            except ValueError:
                self.output("Invalid response, please enter a number.")
        raise InputAbortedError("Too many invalid responses. Operation aborted.")


class TestIOInterface(IOInterface):
    """
    A test IO interface for testing purposes. Collects output messages and replays queued input.

    Methods
    -------
    def output(self, message):
        Collect an output message.

    def input(self, prompt):
        Return the next queued response.

    def add_input(self, *responses):
        Queue responses for later prompts.

    def check_numeric_response(self, ctx):
        Return the next queued response as an int.
    """

    __test__ = False

    def __init__(self):
        self.sent_messages: List[str] = []
        self.prompts: List[str] = []
        self.input_responses: List[str] = []

    def add_input(self, *responses: str) -> None:
        """Queue responses for later prompts."""
        self.input_responses.extend(responses)

    def output(self, message: str) -> None:
        self.sent_messages.append(message)

    def input(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.input_responses:
            return self.input_responses.pop(0)
        raise InputAbortedError("No more input left in TestIOInterface queue.")

    def check_numeric_response(self, ctx: str) -> int:
        return int(self.input(ctx))


class ConsoleIOInterface(IOInterface):
    """
    A console IO interface for interactive play.

    Methods
    -------
    def output(self, message: str):
        Output a message to the console.

    def input(self, prompt: str):
        Get input from the console.

    def check_numeric_response(self, ctx):
        Check if a response is numeric.
    """

    def output(self, message: str) -> None:
        print(message)

    def input(self, prompt: str) -> str:
        return input(prompt)

    def check_numeric_response(self, ctx: str) -> int:
        return self._prompt_for_number(ctx)


class TranscriptIOInterface(IOInterface):
    """
    Wraps another interface and appends the whole session to a file.

    Messages, prompts together with the player's replies, and the retry
    messages of numeric prompts are all recorded. Synchronous calls write the
    file directly; `output_async` writes it through aiofiles.
    """

    def __init__(self, inner: IOInterface, transcript_path: str):
        self.inner = inner
        self.transcript_path = transcript_path

    def _record(self, line: str) -> None:
        with open(self.transcript_path, "a", encoding="utf-8") as transcript:
            transcript.write(line + "\n")

    def output(self, message: str) -> None:
        self.inner.output(message)
        self._record(message)

    def input(self, prompt: str) -> str:
        response = self.inner.input(prompt)
        self._record(f"{prompt.strip()} {response}")
        return response

    def check_numeric_response(self, ctx: str) -> int:
        return self._prompt_for_number(ctx)

    async def output_async(self, message: str) -> None:
        self.inner.output(message)
        async with aiofiles.open(
            self.transcript_path, mode="a", encoding="utf-8"
        ) as transcript:
            await transcript.write(message + "\n")
