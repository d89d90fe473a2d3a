import json
from pathlib import Path

from tradedocs.extraction.exceptions import ExtractionError
from tradedocs.extraction.models import InstructionProfile

_DEFAULT_PROMPT_DIR = Path(__file__).parent / "prompts"


def load_instruction_profile(name: str, prompt_dir: Path | None = None) -> InstructionProfile:
    """Load the prompts and JSON schema of a profile.

    Reads ``{name}_system_prompt.txt``, ``{name}_prompt.txt`` and
    ``{name}_schema.json`` from the prompt directory.

    Raises:
        ExtractionError: if a file is missing or the schema is not valid JSON.
    """
    directory = prompt_dir if prompt_dir is not None else _DEFAULT_PROMPT_DIR
    system_prompt = _read(directory / f"{name}_system_prompt.txt")
    user_prompt_template = _read(directory / f"{name}_prompt.txt")
    schema_text = _read(directory / f"{name}_schema.json")
    try:
        json_schema = json.loads(schema_text)
    except json.JSONDecodeError as exc:
        raise ExtractionError(f"Invalid JSON schema for profile '{name}': {exc}") from exc
    return InstructionProfile(
        name=name,
        system_prompt=system_prompt.strip(),
        user_prompt_template=user_prompt_template,
        json_schema=json_schema,
    )


def _read(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ExtractionError(f"Failed to load prompt file {path.name}: {exc}") from exc
