"""CLI Commands - everything that runs instead of the commit workflow."""

import os
import sys
import time
from dataclasses import replace

from aicommit.config import CONFIG_FILENAME, Config, get_config_path, load_config, save_config
from aicommit.llm import LLMError, OllamaClient, get_client
from aicommit.output import bold, dim, info, print_error, print_success

PROVIDER_CHOICES = [
    ("ollama", "Ollama (free, local)"),
    ("claude", "Claude API (paid)"),
]

STYLE_CHOICES = [
    ("conventional", "type(scope): subject with bullets"),
    ("simple", "plain subject with bullets"),
    ("detailed", "type(scope): subject with more bullets"),
]

COMPLETION_LINE = 'eval "$(register-python-argcomplete aicommit)"'
POWERSHELL_LINE = "register-python-argcomplete --shell powershell aicommit | Out-String | Invoke-Expression"


def mask_key(key: str | None) -> str:
    if not key:
        return "not set"
    if len(key) <= 8:
        return "*" * len(key)
    return f"{key[:4]}...{key[-4:]}"


def _flag(value: bool) -> str:
    return str(value).lower()


def display_config() -> int:
    config = load_config()
    path = get_config_path()

    print(f"\n{bold('Current Configuration')}\n")
    print(f"  {dim('Loaded from:')} {path or f'defaults (no {CONFIG_FILENAME} found)'}")

    overrides = [f"{name}={os.environ[name]}" for name in ("AICOMMIT_PROVIDER", "AICOMMIT_MODEL")
                 if os.environ.get(name)]
    if overrides:
        print(f"  {dim('Environment overrides:')} {', '.join(overrides)}")

    if config.api_key:
        key_source = "stored"
    elif os.environ.get("ANTHROPIC_API_KEY"):
        key_source = "ANTHROPIC_API_KEY"
    else:
        key_source = ""
    editor = config.editor or os.environ.get('VISUAL') or os.environ.get('EDITOR') or 'default'

    rows = [
        ("provider", config.provider),
        ("model", config.model or "auto"),
        ("api_key", mask_key(config.resolved_api_key()) + (f" ({key_source})" if key_source else "")),
        ("host", config.host or os.environ.get("OLLAMA_HOST") or OllamaClient.DEFAULT_HOST),
        ("timeout", f"{config.timeout}s"),
        ("style", config.style),
        ("include_body", _flag(config.include_body)),
        ("max_subject_length", str(config.max_subject_length)),
        ("editor", editor),
        ("track_deleted_files", _flag(config.track_deleted_files)),
        ("clue_during_edit", _flag(config.clue_during_edit)),
    ]
    print(f"\n  {bold('Settings:')}")
    for name, value in rows:
        print(f"    {name + ':':<21}{info(value)}")

    print(f"\n  {dim('Config locations:')} ./{CONFIG_FILENAME}, then ~/{CONFIG_FILENAME}")
    print(f"  {dim('Run')} aicommit --setup {dim('to configure')}\n")
    return 0


def _ask_choice(title: str, choices: list[tuple[str, str]], default: str | None = None) -> str:
    print(f"\n{title}\n")
    for i, (value, description) in enumerate(choices, 1):
        marker = " (default)" if value == default else ""
        print(f"  {i}. {value} - {description}{marker}")
    print()

    while True:
        answer = input(f"Select [1-{len(choices)}]: ").strip()
        if not answer and default:
            return default
        if answer.isdigit() and 1 <= int(answer) <= len(choices):
            return choices[int(answer) - 1][0]


def _ask_yes_no(question: str, default: bool) -> bool:
    hint = "[Y/n]" if default else "[y/N]"
    answer = input(f"\n{question} {hint}: ").strip().lower()
    if not answer:
        return default
    return answer.startswith('y')


def run_setup() -> int:
    """Interactive wizard that writes the global config."""
    display_config()
    current = load_config()
    print(bold("Setup Wizard"))

    provider = _ask_choice("Choose provider:", PROVIDER_CHOICES)
    model = current.model
    api_key = current.api_key
    if provider == "ollama":
        print(f"\nRecommended: llama3.2:3b, gemma3:4b, {OllamaClient.DEFAULT_MODEL}")
        model = input("Model (Enter for default): ").strip() or None
    else:
        api_key = input("\nAPI key (Enter to keep current / use ANTHROPIC_API_KEY): ").strip() or api_key

    style = _ask_choice("Commit message style:", STYLE_CHOICES, default="conventional")
    include_body = _ask_yes_no("Include bullet points in commit body?", True)

    length = input("\nMax subject line length (Enter for 72): ").strip()
    max_subject_length = int(length) if length.isdigit() and int(length) > 0 else 72

    clue_during_edit = _ask_yes_no("Offer 'Add Clue' after editing a message?", False)

    config = replace(
        current,
        provider=provider,
        model=model,
        api_key=api_key,
        style=style,
        include_body=include_body,
        max_subject_length=max_subject_length,
        clue_during_edit=clue_during_edit,
    )
    print_success(f"Saved to {save_config(config, global_config=True)}")
    return 0


def _store(**changes) -> str:
    """Apply changes to the loaded config and save it globally."""
    config = replace(load_config(), **changes)
    return str(save_config(config, global_config=True))


def set_model(model: str) -> int:
    model = model.strip()
    if not model:
        print_error("Model name cannot be empty")
        return 1
    # Accept "models/<name>" as printed by some model listings
    model = model.removeprefix("models/")
    print_success(f"Set default model to: {bold(model)} ({_store(model=model)})")
    return 0


def set_key(key: str) -> int:
    key = key.strip()
    if not key:
        print_error("API key cannot be empty")
        return 1
    print_success(f"Stored API key {mask_key(key)} in {_store(api_key=key)}")
    return 0


def run_install_completion() -> int:
    """Print the line that enables tab completion for the current shell."""
    shell = os.environ.get('SHELL', '')
    print(f"\n{bold('Tab Completion Setup')}\n")

    rc_file = next((rc for name, rc in (('zsh', '~/.zshrc'), ('bash', '~/.bashrc')) if name in shell), None)
    if rc_file:
        print(f"Add this line to {dim(rc_file)}:\n\n  {COMPLETION_LINE}\n")
        print(f"Then run: {dim('source ' + rc_file)}")
    elif sys.platform == 'win32':
        print(f"For PowerShell, add this to your $PROFILE:\n\n  {POWERSHELL_LINE}")
    else:
        print(f"  {dim('# Bash/Zsh')}\n  {COMPLETION_LINE}\n")
        print(f"  {dim('# PowerShell')}\n  {POWERSHELL_LINE}\n")
        print(f"  {dim('# Fish')}\n  register-python-argcomplete --shell fish aicommit | source")

    print(f"\n{dim('After setup, press TAB to autocomplete flags.')}")
    return 0


def run_warmup(config: Config, provider: str | None) -> int:
    """Load the Ollama model into memory ahead of the first commit."""
    if provider not in (None, 'ollama', 'auto'):
        print_error("--warmup only works with Ollama (local models)")
        return 1

    try:
        client = get_client(config, provider='ollama')
    except LLMError as e:
        print_error(f"Failed to connect to Ollama: {e}")
        return 1

    if client.is_model_loaded():
        print_success(f"Model {bold(client.model)} is already loaded")
        return 0

    print(f"Loading {bold(client.model)}... ", end='', flush=True)
    start = time.time()
    if client.warmup() and client.is_model_loaded():
        print_success(f"ready! ({time.time() - start:.1f}s)")
        print(dim("Model will stay loaded for ~10 minutes"))
        return 0
    print_error("failed to load model")
    return 1
