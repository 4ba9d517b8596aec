"""
ui/input.py
PromptToolkit wrapper for the chat loop and the configuration wizard.
"""

from typing import Callable, Optional, Sequence, Tuple, TypeVar

from prompt_toolkit import PromptSession
from prompt_toolkit.history import InMemoryHistory
from prompt_toolkit.patch_stdout import patch_stdout
from prompt_toolkit.validation import ValidationError as PromptValidationError
from prompt_toolkit.validation import Validator

from nodemate.exceptions import ConfigAbortedError

PROMPT = "💬 › "

T = TypeVar("T")


def _validator(check: Optional[Callable[[str], Optional[str]]]) -> Optional[Validator]:
    """Wrap ``check(text) -> error message or None`` for prompt_toolkit."""
    if check is None:
        return None

    class _CheckValidator(Validator):
        def validate(self, document):
            message = check(document.text)
            if message:
                raise PromptValidationError(message=message, cursor_position=len(document.text))

    return _CheckValidator()


class InputManager:
    def __init__(self, session: Optional[PromptSession] = None):
        self.session = session or PromptSession(
            history=InMemoryHistory(),
            mouse_support=False,
            complete_while_typing=False,
        )

    async def read_input(self, prompt_text: str = PROMPT) -> Optional[str]:
        """
        Read one chat line. Returns None on EOF (Ctrl-D) or Ctrl-C.
        """
        try:
            # printed text appears above the prompt instead of through it
            with patch_stdout():
                return await self.session.prompt_async(prompt_text)
        except (EOFError, KeyboardInterrupt):
            return None

    # --- Wizard prompts ---

    async def ask(
        self,
        message: str,
        default: str = "",
        is_password: bool = False,
        check: Optional[Callable[[str], Optional[str]]] = None,
    ) -> str:
        try:
            answer = await self.session.prompt_async(
                f"{message} ",
                default=default,
                is_password=is_password,
                validator=_validator(check),
                validate_while_typing=False,
            )
        except (EOFError, KeyboardInterrupt) as exc:
            raise ConfigAbortedError() from exc
        return answer.strip()

    async def confirm(self, message: str, default: bool = False) -> bool:
        suffix = "[Y/n]" if default else "[y/N]"

        def check(text: str) -> Optional[str]:
            if text.strip().lower() in ("", "y", "yes", "n", "no"):
                return None
            return "Please answer y or n"

        answer = (await self.ask(f"{message} {suffix}", check=check)).lower()
        if not answer:
            return default
        return answer in ("y", "yes")

    async def select(
        self,
        message: str,
        choices: Sequence[Tuple[T, str]],
        default: Optional[T] = None,
        print_fn: Callable[[str], None] = print,
    ) -> T:
        """Numbered menu; Enter picks ``default`` (or the first choice)."""
        values = [value for value, _ in choices]
        default_index = values.index(default) if default in values else 0

        print_fn(message)
        for index, (value, label) in enumerate(choices, 1):
            marker = "→" if index - 1 == default_index else " "
            print_fn(f"  {marker} {index}. {label}")

        def check(text: str) -> Optional[str]:
            text = text.strip()
            if not text:
                return None
            if text.isdigit() and 1 <= int(text) <= len(choices):
                return None
            return f"Enter a number between 1 and {len(choices)}"

        answer = await self.ask("Choice:", check=check)
        if not answer:
            return values[default_index]
        return values[int(answer) - 1]
