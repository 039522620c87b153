import re

from typing import List, Optional, Union

from rich.console import Console
from rich.prompt import Prompt
from rich.table import Table

from posrunner.utils import fuzzy_match

class Picker:
    """
    Fuzzy-filter prompt over a list of strings.

    Typing text narrows the list, typing numbers picks entries from the
    current list, '*' picks every listed entry in multi mode. An empty
    answer, Ctrl-C or end of input cancels and returns None.
    """

    SELECT_ALL = "*"

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()

    def pick(
        self,
        items: List[str],
        header: str,
        multi: bool = False
    ) -> Union[str, List[str], None]:
        if len(items) == 0:
            return None

        candidates = list(items)
        while True:
            self.show(candidates, header, multi)

            try:
                answer = Prompt.ask(
                    "Filter, or number(s) to pick" if multi else "Filter, or number to pick",
                    console=self.console,
                    default="",
                    show_default=False
                )

            except (KeyboardInterrupt, EOFError):
                return None

            answer = answer.strip()
            if answer == "":
                return None

            if self.is_choice(answer, multi):
                chosen = self.parse_choice(answer, candidates, multi)
                if chosen is not None:
                    return chosen

                continue

            matches = [item for item in items if fuzzy_match(answer, item)]
            if len(matches) == 0:
                self.console.print(f"[yellow]Nothing matches '{answer}'.[/yellow]")
                continue

            if len(matches) == 1 and not multi:
                return matches[0]

            candidates = matches

    def is_choice(self, answer, multi):
        if multi and answer == self.SELECT_ALL:
            return True

        return re.fullmatch(r"\d+([\s,]+\d+)*", answer) is not None

    def parse_choice(self, answer, candidates, multi):
        if multi and answer == self.SELECT_ALL:
            return list(candidates)

        numbers = [int(part) for part in re.split(r"[\s,]+", answer)]
        if any(number < 1 or number > len(candidates) for number in numbers):
            self.console.print(f"[yellow]Pick numbers between 1 and {len(candidates)}.[/yellow]")
            return None

        if not multi:
            if len(numbers) != 1:
                self.console.print("[yellow]Pick a single entry.[/yellow]")
                return None

            return candidates[numbers[0] - 1]

        chosen = []
        for number in numbers:
            if candidates[number - 1] not in chosen:
                chosen.append(candidates[number - 1])

        return chosen

    def show(self, candidates, header, multi):
        table = Table(title=header, show_lines=False)
        table.add_column("#", justify="right", style="cyan")
        table.add_column("Choice")

        for index, candidate in enumerate(candidates):
            table.add_row(str(index + 1), candidate)

        self.console.print(table)

        if multi:
            self.console.print("[dim]Separate numbers with commas, '*' picks everything listed.[/dim]")
