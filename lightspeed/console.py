from rich.console import Console

_console_wrapper = None


class _ConsoleWrapper:
    def __init__(self) -> None:
        self._console = None

    def get_console(self) -> Console:
        if self._console is None:
            self._console = Console()
        return self._console


def get_console() -> Console:
    global _console_wrapper
    if _console_wrapper is None:
        _console_wrapper = _ConsoleWrapper()

    return _console_wrapper.get_console()
