"""Custom completer for the ShareBox CLI with local path completion."""

from pathlib import Path
from typing import Iterable

from prompt_toolkit.completion import Completer, Completion
from prompt_toolkit.document import Document

from common.constants import ALLOWED_FILE_TYPES
from cli.constants import COMMANDS


class ShareBoxCompleter(Completer):
    """
    Completes command names for the first token and local file paths for
    the argument of 'upload'.

    Only directories and files with an uploadable extension are offered.
    """

    def get_completions(
        self, document: Document, complete_event
    ) -> Iterable[Completion]:
        text = document.text_before_cursor
        tokens = text.split()

        is_typing_new_token = text.endswith(" ") or not tokens

        if not tokens or (len(tokens) == 1 and not is_typing_new_token):
            yield from self._complete_commands(tokens[0] if tokens else "")
            return

        if tokens[0].lower() != "upload":
            return

        argument_count = len(tokens) - 1 + (1 if is_typing_new_token else 0)
        if argument_count != 1:
            return

        current_word = "" if is_typing_new_token else tokens[-1]
        yield from self._complete_paths(current_word)

    def _complete_commands(self, partial: str) -> Iterable[Completion]:
        partial_lower = partial.lower()
        for cmd in COMMANDS:
            if cmd.startswith(partial_lower):
                yield Completion(cmd, start_position=-len(partial))

    def _complete_paths(self, partial: str) -> Iterable[Completion]:
        """
        Complete entries of the directory named by the partial path.

        A partial ending in '/' lists that directory; otherwise its last
        component is used as a name prefix.
        """
        if partial.endswith("/"):
            dir_part, name_prefix = partial, ""
        elif "/" in partial:
            dir_part, name_prefix = partial.rsplit("/", 1)
            dir_part += "/"
        else:
            dir_part, name_prefix = "", partial

        base = Path(dir_part).expanduser() if dir_part else Path.cwd()
        if not base.is_absolute():
            base = Path.cwd() / base
        if not base.is_dir():
            return

        candidates = []
        for item in base.iterdir():
            if item.name.startswith(".") and not name_prefix.startswith("."):
                continue
            if not item.name.lower().startswith(name_prefix.lower()):
                continue
            if item.is_dir():
                candidates.append(f"{dir_part}{item.name}/")
            elif item.is_file() and item.suffix.lower() in ALLOWED_FILE_TYPES:
                candidates.append(f"{dir_part}{item.name}")

        if not candidates and not name_prefix:
            yield Completion("", start_position=0, display="(no uploadable files here)")
            return

        for candidate in sorted(candidates):
            yield Completion(candidate, start_position=-len(partial))
