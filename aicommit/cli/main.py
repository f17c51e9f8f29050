"""Entry point: one-shot commands, otherwise the interactive commit workflow."""

import os
import time

from aicommit.config import Config, load_config
from aicommit.git import GitError, GitRepository
from aicommit.llm import LLMError, get_client
from aicommit.output import dim, print_error
from aicommit.review import EditorError, EditSession, run_review
from aicommit.workflow import CommitWorkflow

from aicommit.cli.args import parse_args
from aicommit.cli.commands import (
    display_config, run_install_completion, run_setup, run_warmup, set_key, set_model,
)

# (flag attribute, handler); handlers taking a value receive it
ONE_SHOT_COMMANDS = [
    ("install_completion", run_install_completion),
    ("display_config", display_config),
    ("setup", run_setup),
    ("set_model", set_model),
    ("set_key", set_key),
]


def _one_shot(args) -> int | None:
    """Exit code of the first requested one-shot command, or None to carry on."""
    for attr, handler in ONE_SHOT_COMMANDS:
        value = getattr(args, attr)
        if value is True:
            return handler()
        if isinstance(value, str):
            return handler(value)
    return None


def _resolve_config(args, config: Config) -> Config:
    """Flags beat AICOMMIT_* variables, which beat the config file."""
    config.provider = args.provider or os.environ.get('AICOMMIT_PROVIDER') or config.provider
    config.model = args.model or os.environ.get('AICOMMIT_MODEL') or config.model
    if args.style:
        config.style = args.style
    if args.no_body:
        config.include_body = False
    return config


def _print_timings(generator, setup: float, session: float) -> None:
    prompt = getattr(generator, 'last_prompt', '')
    print()
    if prompt:
        print(dim(f"  Prompt: {len(prompt)} chars"))
    print(dim(f"  Timings: setup={setup:.2f}s, session={session:.2f}s"))


def _run_workflow(args, config: Config) -> int:
    started = time.time()
    try:
        generator = get_client(config, forced_type=args.type)
    except LLMError as e:
        print_error(str(e))
        return 1
    setup = time.time() - started

    workflow = CommitWorkflow(
        vcs=GitRepository(),
        generator=generator,
        reviewer=run_review,
        edit_session=EditSession(
            editor=config.editor,
            reviewer=run_review,
            offer_clue=config.clue_during_edit,
        ),
        verbose=args.verbose,
    )

    started = time.time()
    try:
        workflow.run(stage_all=args.stage_all, clue=args.clue)
    except (GitError, LLMError, EditorError) as e:
        print_error(str(e))
        return 1
    finally:
        if args.verbose:
            _print_timings(generator, setup, time.time() - started)
    return 0


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)

    exit_code = _one_shot(args)
    if exit_code is not None:
        return exit_code

    config = _resolve_config(args, load_config())
    if args.warmup:
        return run_warmup(config, args.provider or os.environ.get('AICOMMIT_PROVIDER'))

    try:
        return _run_workflow(args, config)
    except KeyboardInterrupt:
        print()
        print_error("Interrupted")
        return 130
