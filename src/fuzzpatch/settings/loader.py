from typing import Any, Union
import os
import re
from pathlib import Path

import yaml
import json5  # type: ignore

from .models import Settings

# ${env:NAME} placeholders; '$${env:NAME}' escapes a literal placeholder.
ENV_PATTERN = re.compile(r"(?<!\$)\$\{env:([A-Za-z_][A-Za-z0-9_]*)\}")


def _expand_env(obj: Any) -> Any:
    """Substitute environment placeholders in every string of a loaded document.

    Unset variables are left as written so validation reports them verbatim.
    """
    if isinstance(obj, str):

        def repl(m: re.Match) -> str:
            val = os.getenv(m.group(1))
            return m.group(0) if val is None else val

        return ENV_PATTERN.sub(repl, obj).replace("$${", "${")
    if isinstance(obj, dict):
        return {k: _expand_env(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_expand_env(v) for v in obj]
    return obj


def _load_raw_file(path: Path) -> Any:
    ext = path.suffix.lower()
    text = path.read_text(encoding="utf-8")
    data: Any = None
    if ext in {".yaml", ".yml"}:
        data = yaml.safe_load(text)
    elif ext in {".json5", ".jsonc", ".json"}:
        data = json5.loads(text)
    else:
        raise ValueError(f"Unsupported config file extension: {ext}")
    if data is None:
        return {}
    return data


def load_settings(path: Union[str, Path, None]) -> Settings:
    """
    Load Settings from a YAML or JSON5 file. A missing (or unspecified) file
    yields default settings.
    """
    if path is None:
        return Settings()
    p = Path(path)
    if not p.is_file():
        return Settings()

    data = _load_raw_file(p)
    if not isinstance(data, dict):
        raise ValueError("Root configuration must be a mapping/object")
    return Settings.model_validate(_expand_env(data))
