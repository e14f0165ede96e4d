from rich.pretty import pprint

from multicommand import *

__prog__ = "notes"
__styles__ = {"error-title": "bold red"}


class Add(CommandDefinition):
    syntax = "add <text> [--tag <tag>]..."
    summary = "Add a note."

    def add_options(self, options):
        return super().add_options(options).add(string=["tag", "_"], alias={"t": "tag"})

    def parse_args(self, args):
        self.text = args.next()
        if self.text is None:
            raise self.usage_error("add needs the %s of the note", "text")

    def do_command(self, args):
        pprint({"text": self.text, **args})


@command("clear [--force]", "Remove every note.", options=lambda self, options: options.add(boolean="force"))
async def clear(self, args):
    if not args["force"] and not await self.confirm("remove every note?"):
        raise self.error("nothing removed")


if __name__ == '__main__':
    notes = CommandRegistry(prog=__prog__)
    notes.register([Add, clear])
    invoke(notes, colorful=True)
