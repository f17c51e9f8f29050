"""Command-line flags."""

import argparse

import argcomplete

from aicommit import COMMIT_TYPE_NAMES, __version__
from aicommit.config import VALID_PROVIDERS, VALID_STYLES


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='aicommit',
        description='Write a commit message for the staged changes, review it, and commit.',
        epilog='Example: aicommit --all --clue "fixing the login bug"',
    )
    parser.add_argument('-v', '--version', action='version', version=f'%(prog)s {__version__}')

    workflow = parser.add_argument_group('workflow')
    workflow.add_argument('-a', '--all', dest='stage_all', action='store_true',
                          help='stage modified and deleted tracked files first (git add -u)')
    workflow.add_argument('--clue', metavar='TEXT',
                          help='extra focus for the first generated message')
    workflow.add_argument('-t', '--type', choices=COMMIT_TYPE_NAMES,
                          help='use this commit type instead of letting the model pick')
    workflow.add_argument('-s', '--style', choices=sorted(VALID_STYLES),
                          help='message style (default from config)')
    workflow.add_argument('--no-body', action='store_true',
                          help='subject line only')
    workflow.add_argument('--verbose', action='store_true',
                          help='print generator, context size and timings')

    model = parser.add_argument_group('model')
    model.add_argument('-p', '--provider', choices=sorted(VALID_PROVIDERS),
                       help='where messages are generated (default from config)')
    model.add_argument('-m', '--model', metavar='MODEL',
                       help='model name for this run')
    model.add_argument('--warmup', action='store_true',
                       help='load the Ollama model into memory and exit')

    setup = parser.add_argument_group('configuration')
    setup.add_argument('--setup', action='store_true', help='interactive configuration wizard')
    setup.add_argument('--display-config', action='store_true', help='show the effective configuration')
    setup.add_argument('--set-model', metavar='MODEL', help='store the default model')
    setup.add_argument('--set-key', metavar='KEY', help='store the Claude API key')
    setup.add_argument('--install-completion', action='store_true', help='show how to enable tab completion')

    return parser


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = build_parser()
    argcomplete.autocomplete(parser)
    return parser.parse_args(argv)
