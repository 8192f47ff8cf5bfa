#!/usr/bin/env python3
"""
Command definitions for the watch-mode shell.
"""

COMMANDS = {
    'hint': {
        'help': "prints the current exercise's hint",
    },
    'clear': {
        'help': 'clears the screen',
    },
    'quit': {
        'help': 'quits watch mode',
    },
    'help': {
        'help': 'displays this help message',
    },
}


def get_command_help() -> str:
    """Help text listing every watch-mode command"""
    lines = ["Commands available to you in watch mode:"]
    for name, cmd in COMMANDS.items():
        lines.append(f"  {name:6} - {cmd['help']}")
    lines.append("")
    lines.append("Watch mode automatically re-evaluates the current exercise")
    lines.append("when you edit a file's contents.")
    return '\n'.join(lines)


WATCH_MODE_HELP_MESSAGE = get_command_help()
